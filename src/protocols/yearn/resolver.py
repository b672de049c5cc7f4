"""Resolves Yearn v2 vaults into :class:`Vault` snapshots."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from config.settings import Settings, get_settings
from src.core.exceptions import MissingVaultIdentityError
from src.core.models import (
    FeeSchedule,
    GeneralFees,
    PoolProtocol,
    SpecialFees,
    Strategy,
    Token,
    Vault,
    VaultType,
)
from src.data.contracts import ContractReader, is_null_address
from src.protocols.overrides import OverrideField, OverrideTable

from .abis import ERC20_ABI, STRATEGY_ABI, VAULT_V2_ABI

logger = logging.getLogger(__name__)


class VaultResolver:
    """
    Reads vault identity, strategies and fees from chain.

    Usage:
        resolver = VaultResolver(reader, overrides)
        vault = await resolver.resolve_vault("0x...")
    """

    def __init__(
        self,
        reader: ContractReader,
        overrides: Optional[OverrideTable] = None,
        settings: Optional[Settings] = None,
    ):
        self.reader = reader
        self.overrides = overrides or OverrideTable()
        self.settings = settings or get_settings()

    async def resolve_basic(self, address: str) -> Dict[str, Any]:
        """
        Vault name, symbol and underlying token.

        Raises:
            MissingVaultIdentityError: If the vault has no readable token
        """
        name, symbol, token_address = await asyncio.gather(
            self.reader.call_or_default(address, VAULT_V2_ABI, "name", default=""),
            self.reader.call_or_default(address, VAULT_V2_ABI, "symbol", default=""),
            self.reader.call_or_default(address, VAULT_V2_ABI, "token"),
        )
        if is_null_address(token_address):
            raise MissingVaultIdentityError(f"Vault {address} has no readable token")

        token_name, token_symbol, token_decimals = await asyncio.gather(
            self.reader.call_or_default(token_address, ERC20_ABI, "name", default=""),
            self.reader.call_or_default(token_address, ERC20_ABI, "symbol", default=""),
            self.reader.call_or_default(token_address, ERC20_ABI, "decimals", default=18),
        )
        token = Token(
            address=token_address,
            name=token_name,
            symbol=token_symbol,
            decimals=int(token_decimals),
        )
        return {"name": name, "symbol": symbol, "token": token}

    async def resolve_withdrawal_queue(self, address: str) -> List[str]:
        """Strategy addresses in withdrawal order, after overrides."""
        queue = await self.reader.collect_slots(address, VAULT_V2_ABI, "withdrawalQueue")
        return self.overrides.apply(address, queue, OverrideField.WITHDRAWAL_QUEUE)

    async def resolve_strategy(self, address: str) -> Strategy:
        name = await self.reader.call_or_default(address, STRATEGY_ABI, "name", default="")
        return Strategy(address=address, name=name)

    async def resolve_fees(self, address: str, strategy_addresses: Sequence[str]) -> FeeSchedule:
        """
        Fee schedule of a v2 vault.

        The performance fee is charged twice, once for strategists and once
        for the treasury, so the reported figure is doubled. A vault without
        a readable management fee is charged the performance fee instead.
        ``keep_crv`` is only read for single-strategy vaults.
        """
        performance = await self.reader.call_or_default(address, VAULT_V2_ABI, "performanceFee")
        performance_fee = int(performance) * 2 if performance is not None else 0

        management = await self.reader.call_or_default(address, VAULT_V2_ABI, "managementFee")
        management_fee = int(management) if management is not None else performance_fee

        general = GeneralFees(performance_fee=performance_fee, management_fee=management_fee)
        if len(strategy_addresses) != 1:
            return FeeSchedule(general=general, special=SpecialFees())

        keep_crv: Optional[int] = None
        for strategy_address in strategy_addresses:
            fee = await self.reader.call_or_default(strategy_address, STRATEGY_ABI, "keepCRV")
            if fee is not None:
                keep_crv = (keep_crv or 0) + int(fee)

        return FeeSchedule(general=general, special=SpecialFees(keep_crv=keep_crv))

    async def resolve_special_fees(self, strategy_addresses: Sequence[str]) -> SpecialFees:
        """
        Protocol-specific fees taken by the vault's strategy.

        ``special_fees_mode`` selects the strategy-count condition. In
        ``legacy`` mode only a vault without strategies qualifies, which
        reports a zero ``keep_crv`` since there is no strategy to read. In
        ``single_strategy`` mode a one-strategy vault reports its strategy's
        ``keepCRV()``.
        """
        count = len(strategy_addresses)
        if self.settings.special_fees_mode == "single_strategy":
            if count != 1:
                return SpecialFees()
            fee = await self.reader.call_or_default(strategy_addresses[0], STRATEGY_ABI, "keepCRV", default=0)
            return SpecialFees(keep_crv=int(fee))

        if count == 1:
            logger.warning(
                f"Special fees of single strategy {strategy_addresses[0]} are ignored in legacy mode; "
                f"set SPECIAL_FEES_MODE=single_strategy to read keepCRV"
            )
        if count == 0:
            return SpecialFees(keep_crv=0)
        return SpecialFees()

    async def resolve_vault(
        self,
        address: str,
        protocol: PoolProtocol = PoolProtocol.CURVE,
        inception_block: Optional[int] = None,
    ) -> Vault:
        """
        Resolve a v2 vault.

        Args:
            address: Vault address
            protocol: Protocol the vault's token belongs to
            inception_block: Deployment block, if known

        Returns:
            Vault snapshot

        Raises:
            MissingVaultIdentityError: If the address or token is missing
        """
        if not address:
            raise MissingVaultIdentityError("Vault address is empty")

        basic, strategy_addresses = await asyncio.gather(
            self.resolve_basic(address),
            self.resolve_withdrawal_queue(address),
        )
        strategies = await asyncio.gather(*(self.resolve_strategy(a) for a in strategy_addresses))
        fees = await self.resolve_fees(address, strategy_addresses)

        logger.debug(f"Resolved {address}: {len(strategies)} strategies, fees {fees}")
        return Vault(
            address=address,
            token=basic["token"],
            type=VaultType.V2,
            protocol=protocol,
            fees=fees,
            strategies=tuple(strategies),
            name=basic["name"],
            symbol=basic["symbol"],
            inception_block=inception_block,
        )
