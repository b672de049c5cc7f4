"""Async contract-read capability over web3.py.

Every on-chain value the engine consumes goes through :class:`ContractReader`.
Failures of any kind surface as :class:`ContractReadError` so callers can
degrade a single read to its safe default.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Sequence, Union

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import Web3Exception

from config.settings import Settings, get_settings
from src.core.constants import MAX_SLOT_ITERATIONS, NULL_ADDRESS
from src.core.exceptions import ContractReadError
from src.core.models import BlockHeader

logger = logging.getLogger(__name__)

BlockIdentifier = Union[int, str]

_READ_ERRORS = (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, ValueError, TypeError)


def view_function(
    name: str,
    inputs: Sequence[str] = (),
    outputs: Sequence[str] = ("uint256",),
) -> Dict[str, Any]:
    """Build a minimal ABI entry for a view function."""
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": [{"name": f"arg{i}", "type": t} for i, t in enumerate(inputs)],
        "outputs": [{"name": "", "type": t} for t in outputs],
    }


def is_null_address(value: Optional[str]) -> bool:
    return not value or value.lower() == NULL_ADDRESS


def first_present(candidates: Iterable[Optional[str]]) -> Optional[str]:
    """Return the first candidate address that was read and is not the null address.

    Candidates are evaluated in the order given; callers list them by priority.
    """
    for candidate in candidates:
        if not is_null_address(candidate):
            return candidate
    return None


class ContractReader:
    """Reads contract state and block headers through an AsyncWeb3 instance."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        web3: Optional[AsyncWeb3] = None,
    ):
        self.settings = settings or get_settings()
        self._web3 = web3

    async def _get_web3(self) -> AsyncWeb3:
        """Get or create Web3 instance."""
        if self._web3 is None:
            rpc_url = self.settings.eth_rpc_url
            if not rpc_url:
                raise ValueError("RPC URL not configured. Set ETH_RPC_URL in .env")
            self._web3 = AsyncWeb3(
                AsyncHTTPProvider(
                    rpc_url,
                    request_kwargs={"timeout": self.settings.rpc_timeout_seconds},
                )
            )
        return self._web3

    async def call(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function: str,
        *args: Any,
        block_identifier: BlockIdentifier = "latest",
    ) -> Any:
        """Call a view function.

        Args:
            address: Contract address
            abi: ABI containing at least ``function``
            function: Function name
            *args: Function arguments
            block_identifier: Block number or tag for historical reads

        Returns:
            Decoded return value

        Raises:
            ContractReadError: If the call fails for any reason
        """
        web3 = await self._get_web3()
        try:
            contract = web3.eth.contract(address=web3.to_checksum_address(address), abi=abi)
            fn = getattr(contract.functions, function)
            return await fn(*args).call(block_identifier=block_identifier)
        except _READ_ERRORS as e:
            raise ContractReadError(address, function, str(e)) from e

    async def call_or_default(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function: str,
        *args: Any,
        default: Any = None,
        block_identifier: BlockIdentifier = "latest",
    ) -> Any:
        """Call a view function, returning ``default`` if the read fails."""
        try:
            return await self.call(address, abi, function, *args, block_identifier=block_identifier)
        except ContractReadError as e:
            logger.debug(f"Read degraded to default {default!r}: {e}")
            return default

    async def iter_slots(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function: str,
        max_items: int = MAX_SLOT_ITERATIONS,
    ) -> AsyncIterator[str]:
        """Yield addresses from a numbered slot accessor, ``function(0)``, ``function(1)``, ...

        The sequence ends at the first null address, the first failed read,
        or after ``max_items`` slots.
        """
        for index in range(max_items):
            try:
                value = await self.call(address, abi, function, index)
            except ContractReadError as e:
                logger.debug(f"Slot iteration on {address} ended at {function}({index}): {e}")
                return
            if is_null_address(value):
                return
            yield value

    async def collect_slots(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function: str,
        max_items: int = MAX_SLOT_ITERATIONS,
    ) -> List[str]:
        """Materialize :meth:`iter_slots` into an ordered list."""
        return [value async for value in self.iter_slots(address, abi, function, max_items)]

    async def get_block(self, block_identifier: BlockIdentifier = "latest") -> BlockHeader:
        """Get a block's number and timestamp."""
        web3 = await self._get_web3()
        try:
            block = await web3.eth.get_block(block_identifier)
        except _READ_ERRORS as e:
            raise ContractReadError(str(block_identifier), "eth_getBlockByNumber", str(e)) from e
        return BlockHeader(number=int(block["number"]), timestamp=int(block["timestamp"]))

    async def close(self) -> None:
        """Close the provider."""
        if self._web3 is not None:
            disconnect = getattr(self._web3.provider, "disconnect", None)
            if disconnect is not None:
                await disconnect()
        self._web3 = None
