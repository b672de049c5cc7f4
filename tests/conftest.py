"""Pytest configuration and fixtures."""

import pytest

from config.settings import Settings
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

from tests.fakes import LP_TOKEN, VAULT_ADDRESS, FakeOracle, FakeReader


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment and writing to a temp dir."""
    return Settings(
        _env_file=None,
        eth_rpc_url="http://localhost:8545",
        cache_dir=tmp_path / "cache",
        average_block_time=12.0,
    )


@pytest.fixture
def reader(settings) -> FakeReader:
    return FakeReader(settings)


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def sample_vault() -> Vault:
    """A single-strategy v2 Curve vault."""
    return Vault(
        address=VAULT_ADDRESS,
        token=Token(address=LP_TOKEN, name="Curve.fi DAI/USDC/USDT", symbol="3Crv"),
        type=VaultType.V2,
        protocol=PoolProtocol.CURVE,
        fees=FeeSchedule(
            general=GeneralFees(performance_fee=2000, management_fee=200),
            special=SpecialFees(keep_crv=1000),
        ),
        strategies=(Strategy(address="0x9d7c11D1268C8FD831f1b92A304aCcb2aBEbfDe1", name="StrategyCurve3Crv"),),
        name="yvCurve-3pool",
        symbol="yv3Crv",
    )
