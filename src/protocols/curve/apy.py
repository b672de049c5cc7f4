"""APY of vaults farming Curve gauges.

Net yield combines three sources:

- CRV emissions of the pool's gauge, boosted by the voter's veCRV
- Reward tokens streamed by the gauge's reward contract
- Trading fees accrued in the pool's virtual price
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from config.settings import Settings, get_settings
from src.analytics.base import BaseApyCalculator
from src.analytics.fees import compute_apy, fee_fractions
from src.analytics.pps import annualize_daily_rate
from src.core.constants import SECONDS_PER_YEAR
from src.core.models import Apy, PoolProtocol, Vault
from src.core.numeric import ZERO, from_wad, in_yield_context, safe_div, to_decimal, to_float
from src.data.contracts import ContractReader, is_null_address
from src.data.sources.blocks import BlockTimeEstimator
from src.data.sources.price_oracle import PriceOracle
from src.protocols.overrides import OverrideField, OverrideTable

from .abis import GAUGE_ABI, GAUGE_CONTROLLER_ABI, REGISTRY_ABI
from .boost import calculate_boost
from .config import (
    APY_DESCRIPTION,
    APY_TYPE,
    BTC_LIKE_ADDRESSES,
    CRV_ADDRESS,
    CURVE_REGISTRY_ADDRESS,
    ETH_LIKE_ADDRESSES,
    INVERSE_MAX_BOOST,
    MAX_BOOST,
    WBTC_ADDRESS,
    WETH_ADDRESS,
    YEARN_VECRV_VOTER_ADDRESS,
)
from .pool import calculate_pool_apr
from .rewards import calculate_rewards_apr

logger = logging.getLogger(__name__)

DATA_FIELDS = ("currentBoost", "totalApy", "poolApy", "boostedApr", "baseApr", "netApy", "tokenRewardsApr")


@in_yield_context
def calculate_base_apr(
    inflation_rate: Any,
    relative_weight: Any,
    working_supply: Any,
    virtual_price: Any,
    crv_price: Any,
    base_price: Any,
) -> Decimal:
    """
    Unboosted CRV emission APR of a gauge.

    Chain values are raw 18-decimal integers. A zero working supply,
    virtual price or base price yields zero.
    """
    yearly_emission = from_wad(inflation_rate) * from_wad(relative_weight) * SECONDS_PER_YEAR
    per_working_unit = safe_div(yearly_emission, from_wad(working_supply))
    per_lp_token = safe_div(per_working_unit * INVERSE_MAX_BOOST, from_wad(virtual_price))
    return safe_div(per_lp_token * to_decimal(crv_price), to_decimal(base_price))


class CurveApyCalculator(BaseApyCalculator):
    """Computes the APY of a vault whose token is a Curve LP token."""

    def __init__(
        self,
        reader: ContractReader,
        oracle: PriceOracle,
        estimator: BlockTimeEstimator,
        overrides: Optional[OverrideTable] = None,
        settings: Optional[Settings] = None,
        voter: str = YEARN_VECRV_VOTER_ADDRESS,
    ):
        self.reader = reader
        self.oracle = oracle
        self.estimator = estimator
        self.overrides = overrides or OverrideTable()
        self.settings = settings or get_settings()
        self.voter = voter

    @property
    def protocol(self) -> PoolProtocol:
        return PoolProtocol.CURVE

    def _zeroed_apy(self) -> Apy:
        return Apy(
            recommended=0.0,
            type=APY_TYPE,
            composite=True,
            description=APY_DESCRIPTION,
            data={name: 0.0 for name in DATA_FIELDS},
        )

    async def resolve_gauge(self, vault: Vault) -> Optional[str]:
        """First gauge of the vault's pool in the Curve registry, after overrides."""
        lp_token = vault.token.address
        gauge: Optional[str] = None
        pool = await self.reader.call_or_default(
            CURVE_REGISTRY_ADDRESS, REGISTRY_ABI, "get_pool_from_lp_token", lp_token
        )
        if not is_null_address(pool):
            gauges = await self.reader.call_or_default(CURVE_REGISTRY_ADDRESS, REGISTRY_ABI, "get_gauges", pool)
            if gauges and gauges[0]:
                gauge = gauges[0][0]

        gauge = self.overrides.apply(vault.address, gauge, OverrideField.GAUGE_ADDRESS)
        if is_null_address(gauge):
            return None
        return gauge

    async def base_asset_price(self, lp_token: str) -> float:
        """
        USD price of the asset the pool is denominated in.

        BTC pools are priced as WBTC and ETH pools as WETH. Other pools use
        their first underlying coin, defaulting to 1 (a USD stable pool).
        """
        coins: List[str] = await self.reader.call_or_default(
            CURVE_REGISTRY_ADDRESS, REGISTRY_ABI, "get_underlying_coins", lp_token, default=[]
        )
        coins = [c for c in coins if not is_null_address(c)]

        for coin in coins:
            if coin.lower() in BTC_LIKE_ADDRESSES:
                return await self.oracle.usd(WBTC_ADDRESS, 0.0)
            if coin.lower() in ETH_LIKE_ADDRESSES:
                return await self.oracle.usd(WETH_ADDRESS, 0.0)

        if not coins:
            return 1.0
        return await self.oracle.usd(coins[0], 1.0)

    async def _current_boost(self, vault: Vault, gauge: str) -> Decimal:
        working_balance, gauge_balance = await asyncio.gather(
            self.reader.call_or_default(gauge, GAUGE_ABI, "working_balances", self.voter, default=0),
            self.reader.call_or_default(gauge, GAUGE_ABI, "balanceOf", self.voter, default=0),
        )
        boost = calculate_boost(working_balance, gauge_balance, MAX_BOOST)
        return self.overrides.apply(vault.address, boost, OverrideField.BOOST)

    async def _rewards_apr(self, gauge: str, virtual_price: Any, base_price: float) -> Decimal:
        rewards_address = await self.reader.call_or_default(gauge, GAUGE_ABI, "reward_contract")
        if is_null_address(rewards_address):
            return ZERO
        return await calculate_rewards_apr(self.reader, self.oracle, rewards_address, virtual_price, base_price)

    async def _pool_apy(self, vault: Vault) -> Decimal:
        rate = await calculate_pool_apr(vault, self.reader, self.estimator)
        pool_apy = annualize_daily_rate(rate or ZERO, self.settings.pool_compounding_periods)
        return self.overrides.apply(vault.address, pool_apy, OverrideField.POOL_APY)

    async def calculate_apy(self, vault: Vault) -> Apy:
        """
        Calculate the APY of a Curve vault.

        Returns:
            Apy of type ``curve``; zeroed when the pool has no gauge
        """
        lp_token = vault.token.address
        gauge = await self.resolve_gauge(vault)
        if gauge is None:
            logger.warning(f"No gauge found for {vault.display_name}, reporting zero APY")
            return self._zeroed_apy()

        controller, working_supply, inflation_rate, virtual_price, base_price, crv_price = await asyncio.gather(
            self.reader.call_or_default(gauge, GAUGE_ABI, "controller"),
            self.reader.call_or_default(gauge, GAUGE_ABI, "working_supply", default=0),
            self.reader.call_or_default(gauge, GAUGE_ABI, "inflation_rate", default=0),
            self.reader.call_or_default(
                CURVE_REGISTRY_ADDRESS, REGISTRY_ABI, "get_virtual_price_from_lp_token", lp_token, default=0
            ),
            self.base_asset_price(lp_token),
            self.oracle.usd(CRV_ADDRESS, 0.0),
        )

        relative_weight = 0
        if not is_null_address(controller):
            relative_weight = await self.reader.call_or_default(
                controller, GAUGE_CONTROLLER_ABI, "gauge_relative_weight", gauge, default=0
            )

        base_apr = calculate_base_apr(
            inflation_rate, relative_weight, working_supply, virtual_price, crv_price, base_price
        )

        boost, reward_apr, pool_apy = await asyncio.gather(
            self._current_boost(vault, gauge),
            self._rewards_apr(gauge, virtual_price, base_price),
            self._pool_apy(vault),
        )

        breakdown = compute_apy(
            base_apr,
            boost,
            reward_apr,
            pool_apy,
            fee_fractions(vault),
            self.settings.compounding_events,
        )

        data: Dict[str, float] = {
            "currentBoost": to_float(to_decimal(boost)),
            "totalApy": to_float(breakdown.total_apy),
            "poolApy": to_float(to_decimal(pool_apy)),
            "boostedApr": to_float(breakdown.boosted_apr),
            "baseApr": to_float(base_apr),
            "netApy": to_float(breakdown.net_apy),
            "tokenRewardsApr": to_float(reward_apr),
        }

        logger.debug(f"{vault.display_name}: {data}")
        return Apy(
            recommended=breakdown.recommended,
            type=APY_TYPE,
            composite=True,
            description=APY_DESCRIPTION,
            data=data,
        )
