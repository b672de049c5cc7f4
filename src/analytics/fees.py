"""Fee waterfall and compounding of farmed yield."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from src.core.constants import FEE_DENOMINATOR
from src.core.models import Vault, VaultType
from src.core.numeric import ONE, ZERO, compound, finite_or, in_yield_context, to_decimal, to_float


@dataclass(frozen=True)
class FeeFractions:
    """Fees as fractions of one."""

    keep_crv: Decimal = ZERO
    performance: Decimal = ZERO
    management: Decimal = ZERO


@in_yield_context
def fee_fractions(vault: Vault) -> FeeFractions:
    """
    Convert a vault's fee schedule to fractions.

    v1 vaults charge no management fee regardless of the schedule.
    """
    general = vault.fees.general
    keep_crv = to_decimal(vault.fees.special.keep_crv or 0) / FEE_DENOMINATOR
    performance = to_decimal(general.performance_fee) / FEE_DENOMINATOR
    if vault.type == VaultType.V1:
        management = ZERO
    else:
        management = to_decimal(general.management_fee) / FEE_DENOMINATOR
    return FeeFractions(keep_crv=keep_crv, performance=performance, management=management)


@dataclass(frozen=True)
class YieldBreakdown:
    """Intermediate and final figures of the fee waterfall."""

    boosted_apr: Decimal
    compoundable_apr: Decimal
    gross_farmed_apy: Decimal
    total_apy: Decimal
    net_apr: Decimal
    net_farmed_apy: Decimal
    net_apy: Decimal

    @property
    def recommended(self) -> float:
        return to_float(self.net_apy)

    def to_dict(self) -> Dict[str, float]:
        return {
            "boostedApr": to_float(self.boosted_apr),
            "totalApy": to_float(self.total_apy),
            "netApy": to_float(self.net_apy),
        }


@in_yield_context
def compute_apy(
    base_apr: Any,
    boost: Any,
    reward_apr: Any,
    pool_apy: Any,
    fees: FeeFractions,
    compounding_periods: int = 52,
) -> YieldBreakdown:
    """
    Run the fee waterfall.

    The kept share of boosted CRV is not reinvested, the rest plus reward
    tokens compounds ``compounding_periods`` times a year. Farmed and pool
    yield then compound on each other. Net figures deduct the performance
    fee from compounded yield and the management fee from the net APR.

    Args:
        base_apr: Unboosted CRV emission APR
        boost: Gauge boost multiplier
        reward_apr: Reward-token APR
        pool_apy: Annualized trading-fee yield
        fees: Fee fractions
        compounding_periods: Harvests per year

    Returns:
        YieldBreakdown; non-finite figures are reported as zero
    """
    base_apr = to_decimal(base_apr)
    boost = to_decimal(boost)
    reward_apr = to_decimal(reward_apr)
    pool_apy = to_decimal(pool_apy)

    boosted_apr = base_apr * boost
    compoundable_apr = boosted_apr * (ONE - fees.keep_crv) + reward_apr
    gross_farmed_apy = boosted_apr * fees.keep_crv + compound(compoundable_apr, compounding_periods)
    total_apy = (ONE + gross_farmed_apy) * (ONE + pool_apy) - ONE

    net_apr = compoundable_apr * (ONE - fees.performance) - fees.management
    net_farmed_apy = compound(net_apr, compounding_periods)
    net_apy = (ONE + net_farmed_apy) * (ONE + pool_apy) - ONE

    return YieldBreakdown(
        boosted_apr=finite_or(boosted_apr, ZERO),
        compoundable_apr=finite_or(compoundable_apr, ZERO),
        gross_farmed_apy=finite_or(gross_farmed_apy, ZERO),
        total_apy=finite_or(total_apy, ZERO),
        net_apr=finite_or(net_apr, ZERO),
        net_farmed_apy=finite_or(net_farmed_apy, ZERO),
        net_apy=finite_or(net_apy, ZERO),
    )
