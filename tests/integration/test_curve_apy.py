"""Integration tests for the Curve APY calculator against an in-memory chain."""

import pytest

from src.core.constants import NULL_ADDRESS
from src.core.models import FeeSchedule, GeneralFees, Token, Vault, VaultType
from src.data.sources.blocks import BlockTimeEstimator
from src.protocols.curve import CurveApyCalculator
from src.protocols.curve.apy import DATA_FIELDS
from src.protocols.curve.config import (
    CRV_ADDRESS,
    CURVE_REGISTRY_ADDRESS,
    STETH_ADDRESS,
    WETH_ADDRESS,
    YEARN_VECRV_VOTER_ADDRESS,
)
from src.protocols.overrides import OverrideTable

from tests.fakes import LATEST_BLOCK, LP_TOKEN, FakeOracle

WAD = 10**18

POOL = "0xbEbc44782C7dB0a1A60Cb6fe97d0b483032FF1C7"
GAUGE = "0xbFcF63294aD7105dEa65aA58F8AE5BE2D9d0952A"
CONTROLLER = "0x2F50D538606Fa9EDD2B11E2446BEb18C9D5846bB"
REWARDS = "0x99ac10631F69C753DDb595D074422a0922D9056B"
REWARD_TOKEN = "0x5A98FcBEA516Cf06857215779Fd812CA3beF1B32"

HBTC_VAULT = "0x46AFc2dfBd1ea0c0760CAD8262A5838e803A37e5"
USDP_VAULT = "0x1B5eb1173D2Bf770e50F10410C9a96F7a8eB6e75"
USDP_GAUGE = "0x055be5DDB7A925BfEF3417FC157f53CA77cA7222"
ANKR_VAULT = "0xE625F5923303f1CE7A43ACFEFd11fd12f30DbcA4"

# inflation 1 CRV/s * 1% weight over 1e6 working units, priced at 0.5
BASE_APR = 0.0631152
GROWN_VIRTUAL_PRICE = 10001 * WAD // 10000


def register_pool(reader, gauge=GAUGE, with_registry=True, virtual_price=WAD):
    if with_registry:
        reader.set(CURVE_REGISTRY_ADDRESS, "get_pool_from_lp_token", LP_TOKEN, value=POOL)
        reader.set(
            CURVE_REGISTRY_ADDRESS,
            "get_gauges",
            POOL,
            value=([gauge] + [NULL_ADDRESS] * 9, [0] * 10),
        )
    reader.set(CURVE_REGISTRY_ADDRESS, "get_virtual_price_from_lp_token", LP_TOKEN, value=virtual_price)
    reader.set(gauge, "controller", value=CONTROLLER)
    reader.set(gauge, "working_supply", value=10**6 * WAD)
    reader.set(gauge, "inflation_rate", value=WAD)
    reader.set(gauge, "working_balances", YEARN_VECRV_VOTER_ADDRESS, value=1000 * WAD)
    reader.set(gauge, "balanceOf", YEARN_VECRV_VOTER_ADDRESS, value=1000 * WAD)
    reader.set(gauge, "reward_contract", value=NULL_ADDRESS)
    reader.set(CONTROLLER, "gauge_relative_weight", gauge, value=WAD // 100)


def make_vault(address: str, vault_type: VaultType = VaultType.V2, performance=0, management=0) -> Vault:
    return Vault(
        address=address,
        token=Token(address=LP_TOKEN, symbol="crvLP"),
        type=vault_type,
        fees=FeeSchedule(general=GeneralFees(performance_fee=performance, management_fee=management)),
        name="yvCurve-LP",
    )


def net_apy(net_apr: float, pool_apy: float = 0.0, periods: int = 52) -> float:
    return (1 + net_apr / periods) ** periods * (1 + pool_apy) - 1


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle({CRV_ADDRESS: 0.5, WETH_ADDRESS: 2000.0, REWARD_TOKEN: 2.0})


@pytest.fixture
def overrides(settings) -> OverrideTable:
    return OverrideTable.load(settings.overrides_path)


@pytest.fixture
def calculator(reader, oracle, settings, overrides) -> CurveApyCalculator:
    estimator = BlockTimeEstimator(reader, settings)
    return CurveApyCalculator(reader, oracle, estimator, overrides, settings)


class TestCurveApy:
    """End-to-end Curve vault APY."""

    @pytest.mark.asyncio
    async def test_full_breakdown(self, reader, calculator, sample_vault):
        register_pool(reader)

        apy = await calculator.calculate_apy(sample_vault)

        # keepCRV 10%, performance 20%, management 2%
        boosted = BASE_APR * 2.5
        net_apr = boosted * 0.9 * 0.8 - 0.02

        assert apy.type == "curve"
        assert apy.composite is True
        assert apy.description == "Pool APY + Boosted CRV APY"
        assert set(apy.data) == set(DATA_FIELDS)
        assert apy.data["baseApr"] == pytest.approx(BASE_APR, rel=1e-12)
        assert apy.data["currentBoost"] == pytest.approx(2.5)
        assert apy.data["boostedApr"] == pytest.approx(boosted, rel=1e-12)
        assert apy.data["tokenRewardsApr"] == 0.0
        assert apy.data["poolApy"] == 0.0
        assert apy.recommended == pytest.approx(net_apy(net_apr), rel=1e-9)
        assert apy.data["netApy"] == apy.recommended

    @pytest.mark.asyncio
    async def test_pool_yield_compounds_with_farmed_yield(self, reader, calculator):
        register_pool(reader, virtual_price=lambda b: GROWN_VIRTUAL_PRICE if b == LATEST_BLOCK else WAD)

        apy = await calculator.calculate_apy(make_vault("0x000000000000000000000000000000000000dEaD"))

        pool_apy = 1.0001**365 - 1
        assert apy.data["poolApy"] == pytest.approx(pool_apy, rel=1e-9)
        assert apy.recommended == pytest.approx(net_apy(BASE_APR * 2.5, pool_apy), rel=1e-9)

    @pytest.mark.asyncio
    async def test_reward_tokens_compound_with_crv(self, reader, calculator):
        register_pool(reader)
        reader.set(GAUGE, "reward_contract", value=REWARDS)
        reader.set(REWARDS, "periodFinish", value=2**40)
        reader.set(REWARDS, "rewardToken", value=REWARD_TOKEN)
        # 0.001 tokens/s at $2 over a $1e6 pool
        reader.set(REWARDS, "rewardRate", value=WAD // 1000)
        reader.set(REWARDS, "totalSupply", value=10**6 * WAD)

        apy = await calculator.calculate_apy(make_vault("0x000000000000000000000000000000000000dEaD"))

        assert apy.data["tokenRewardsApr"] == pytest.approx(0.0631152, rel=1e-12)
        assert apy.recommended == pytest.approx(net_apy(BASE_APR * 2.5 + 0.0631152), rel=1e-9)

    @pytest.mark.asyncio
    async def test_eth_pool_priced_in_weth(self, reader, calculator):
        register_pool(reader)
        reader.set(
            CURVE_REGISTRY_ADDRESS,
            "get_underlying_coins",
            LP_TOKEN,
            value=[STETH_ADDRESS, NULL_ADDRESS] + [NULL_ADDRESS] * 6,
        )

        apy = await calculator.calculate_apy(make_vault("0x000000000000000000000000000000000000dEaD"))

        assert apy.data["baseApr"] == pytest.approx(BASE_APR / 2000, rel=1e-12)

    @pytest.mark.asyncio
    async def test_no_gauge_reports_zero(self, reader, calculator, sample_vault):
        reader.set(CURVE_REGISTRY_ADDRESS, "get_pool_from_lp_token", LP_TOKEN, value=NULL_ADDRESS)

        apy = await calculator.calculate_apy(sample_vault)

        assert apy.recommended == 0.0
        assert apy.type == "curve"
        assert apy.data == {name: 0.0 for name in DATA_FIELDS}
        assert reader.calls_to("working_supply") == 0

    @pytest.mark.asyncio
    async def test_unreadable_chain_is_zero_not_error(self, calculator, sample_vault):
        apy = await calculator.calculate_apy(sample_vault)
        assert apy.recommended == 0.0


class TestCurveOverrides:
    """Shipped override table applied through the calculator."""

    @pytest.mark.asyncio
    async def test_boost_override(self, reader, calculator):
        register_pool(reader)

        apy = await calculator.calculate_apy(make_vault(HBTC_VAULT, VaultType.V1))

        assert apy.data["currentBoost"] == 1.0
        assert apy.data["boostedApr"] == pytest.approx(BASE_APR, rel=1e-12)

    @pytest.mark.asyncio
    async def test_gauge_override(self, reader, calculator):
        register_pool(reader, gauge=USDP_GAUGE, with_registry=False)

        apy = await calculator.calculate_apy(make_vault(USDP_VAULT))

        assert apy.data["baseApr"] == pytest.approx(BASE_APR, rel=1e-12)
        assert apy.recommended > 0

    @pytest.mark.asyncio
    async def test_pool_apy_override(self, reader, calculator):
        register_pool(reader, virtual_price=lambda b: GROWN_VIRTUAL_PRICE if b == LATEST_BLOCK else WAD)

        apy = await calculator.calculate_apy(make_vault(ANKR_VAULT))

        assert apy.data["poolApy"] == 0.0
        assert apy.recommended == pytest.approx(net_apy(BASE_APR * 2.5), rel=1e-9)
