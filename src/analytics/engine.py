"""Yield engine orchestrator."""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Sequence

from config.settings import Settings, get_settings
from src.analytics.base import BaseApyCalculator
from src.core.exceptions import MissingVaultIdentityError
from src.core.models import Apy, CachedVault, PoolProtocol, Vault
from src.data.contracts import ContractReader
from src.data.sources.blocks import BlockTimeEstimator
from src.data.sources.price_oracle import PriceOracle
from src.data.store import KeyValueStore
from src.protocols.curve import CurveApyCalculator
from src.protocols.overrides import OverrideTable
from src.protocols.yearn import PricePerShareApyCalculator

logger = logging.getLogger(__name__)


class YieldEngine:
    """
    Computes vault APYs.

    Dispatches each vault to the calculator registered for its pool
    protocol and persists results to the key/value store.
    """

    def __init__(
        self,
        calculators: Sequence[BaseApyCalculator] = (),
        store: Optional[KeyValueStore] = None,
        settings: Optional[Settings] = None,
        reader: Optional[ContractReader] = None,
        oracle: Optional[PriceOracle] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.reader = reader
        self.oracle = oracle
        self._calculators: Dict[PoolProtocol, BaseApyCalculator] = {}

        for calc in calculators:
            self.register_calculator(calc)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "YieldEngine":
        """Build an engine with the default calculators wired to live services."""
        settings = settings or get_settings()
        reader = ContractReader(settings)
        oracle = PriceOracle(settings)
        estimator = BlockTimeEstimator(reader, settings)
        overrides = OverrideTable.load(settings.overrides_path)

        calculators = [
            CurveApyCalculator(reader, oracle, estimator, overrides, settings),
            PricePerShareApyCalculator(reader, estimator, settings),
        ]
        return cls(
            calculators,
            store=KeyValueStore(settings),
            settings=settings,
            reader=reader,
            oracle=oracle,
        )

    def register_calculator(self, calculator: BaseApyCalculator) -> None:
        """Register an APY calculator."""
        self._calculators[calculator.protocol] = calculator
        logger.debug(f"Registered calculator: {calculator.protocol.value}")

    def unregister_calculator(self, protocol: PoolProtocol) -> None:
        """Unregister an APY calculator."""
        self._calculators.pop(protocol, None)

    @property
    def available_protocols(self) -> List[PoolProtocol]:
        return list(self._calculators.keys())

    async def calculate(self, vault: Vault) -> Apy:
        """
        Calculate the APY of one vault.

        Raises:
            MissingVaultIdentityError: If the vault or token address is empty
            ValueError: If no calculator handles the vault's protocol
        """
        if not vault.address:
            raise MissingVaultIdentityError("Vault address is empty")
        if not vault.token or not vault.token.address:
            raise MissingVaultIdentityError(f"Vault {vault.address} has no token address")

        calculator = self._calculators.get(vault.protocol)
        if calculator is None:
            raise ValueError(
                f"No calculator registered for protocol: {vault.protocol.value}. "
                f"Available protocols: {[p.value for p in self._calculators]}"
            )
        return await calculator.calculate_apy(vault)

    async def calculate_many(
        self,
        vaults: Sequence[Vault],
        max_concurrent: Optional[int] = None,
    ) -> Dict[str, Apy]:
        """
        Calculate APYs for multiple vaults.

        Args:
            vaults: Vaults to compute
            max_concurrent: Maximum concurrent calculations (None = settings)

        Returns:
            Dict mapping vault address to Apy; failed vaults are omitted
        """
        semaphore = asyncio.Semaphore(max_concurrent or self.settings.max_concurrent_vaults)

        async def calc_with_semaphore(vault: Vault) -> tuple:
            async with semaphore:
                return vault.address, await self.calculate(vault)

        tasks = [calc_with_semaphore(v) for v in vaults]
        completed = await asyncio.gather(*tasks, return_exceptions=True)

        results: Dict[str, Apy] = {}
        for vault, result in zip(vaults, completed):
            if isinstance(result, Exception):
                logger.error(f"Error calculating APY for {vault.display_name}: {result}")
                continue
            address, apy = result
            results[address] = apy

        return results

    async def refresh(
        self,
        vaults: Sequence[Vault],
        max_concurrent: Optional[int] = None,
    ) -> List[CachedVault]:
        """Calculate APYs and persist them as CachedVault records."""
        apys = await self.calculate_many(vaults, max_concurrent)
        updated = int(time.time())
        records = [CachedVault.from_vault(v, apys[v.address], updated) for v in vaults if v.address in apys]

        if self.store is not None and records:
            written = await self.store.batch_set([(r.address.lower(), r.to_dict()) for r in records])
            logger.info(f"Stored {written}/{len(records)} vault records")

        return records

    async def get_cached(self, addresses: Sequence[str]) -> List[CachedVault]:
        """Load previously stored vault records."""
        if self.store is None:
            return []
        rows = await self.store.batch_get([a.lower() for a in addresses])
        return [CachedVault.from_dict(row) for row in rows]

    async def close(self):
        """Close the engine and underlying resources."""
        if self.reader is not None:
            await self.reader.close()
        if self.oracle is not None:
            await self.oracle.close()
        if self.store is not None:
            self.store.close()
