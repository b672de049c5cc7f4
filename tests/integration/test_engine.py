"""Integration tests for the yield engine."""

import asyncio

import pytest

from src.analytics.base import BaseApyCalculator
from src.analytics.engine import YieldEngine
from src.core.exceptions import MissingVaultIdentityError
from src.core.models import Apy, PoolProtocol, Token, Vault
from src.data.sources.blocks import BlockTimeEstimator
from src.data.store import KeyValueStore
from src.protocols.yearn import PricePerShareApyCalculator

from tests.fakes import LATEST_BLOCK, VAULT_ADDRESS

WAD = 10**18


class StaticCalculator(BaseApyCalculator):
    """Returns a fixed APY, failing for selected vaults."""

    def __init__(self, recommended=0.05, failing=(), delay=0.0):
        self.recommended = recommended
        self.failing = set(failing)
        self.delay = delay
        self.active = 0
        self.peak = 0

    @property
    def protocol(self) -> PoolProtocol:
        return PoolProtocol.CURVE

    async def calculate_apy(self, vault: Vault) -> Apy:
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            if vault.address in self.failing:
                raise RuntimeError("boom")
            return Apy(self.recommended, "curve", True, "static", {"netApy": self.recommended})
        finally:
            self.active -= 1


def make_vault(address: str, protocol: PoolProtocol = PoolProtocol.CURVE, token: str = "0xtoken") -> Vault:
    return Vault(address=address, token=Token(address=token, symbol="TKN"), protocol=protocol, name=address)


class TestYieldEngine:
    """Tests for dispatch and batch calculation."""

    @pytest.mark.asyncio
    async def test_dispatch(self, settings):
        engine = YieldEngine([StaticCalculator()], settings=settings)

        apy = await engine.calculate(make_vault("0xa"))

        assert apy.recommended == 0.05
        assert engine.available_protocols == [PoolProtocol.CURVE]

    @pytest.mark.asyncio
    async def test_missing_identity(self, settings):
        engine = YieldEngine([StaticCalculator()], settings=settings)

        with pytest.raises(MissingVaultIdentityError):
            await engine.calculate(make_vault(""))
        with pytest.raises(MissingVaultIdentityError):
            await engine.calculate(make_vault("0xa", token=""))

    @pytest.mark.asyncio
    async def test_unknown_protocol(self, settings):
        engine = YieldEngine([StaticCalculator()], settings=settings)

        with pytest.raises(ValueError, match="No calculator registered"):
            await engine.calculate(make_vault("0xa", PoolProtocol.PRICE_PER_SHARE))

    @pytest.mark.asyncio
    async def test_unregister(self, settings):
        engine = YieldEngine([StaticCalculator()], settings=settings)
        engine.unregister_calculator(PoolProtocol.CURVE)
        assert engine.available_protocols == []

    @pytest.mark.asyncio
    async def test_failed_vault_is_skipped(self, settings, caplog):
        engine = YieldEngine([StaticCalculator(failing={"0xb"})], settings=settings)

        results = await engine.calculate_many([make_vault("0xa"), make_vault("0xb"), make_vault("0xc")])

        assert set(results) == {"0xa", "0xc"}
        assert "Error calculating APY for 0xb" in caplog.text

    @pytest.mark.asyncio
    async def test_concurrency_bound(self, settings):
        calculator = StaticCalculator(delay=0.01)
        engine = YieldEngine([calculator], settings=settings)

        await engine.calculate_many([make_vault(f"0x{i}") for i in range(8)], max_concurrent=2)

        assert calculator.peak == 2


class TestRefresh:
    """Tests for persisting computed records."""

    @pytest.mark.asyncio
    async def test_refresh_and_get_cached(self, settings):
        store = KeyValueStore(settings)
        engine = YieldEngine([StaticCalculator(failing={"0xB"})], store=store, settings=settings)

        records = await engine.refresh([make_vault("0xA"), make_vault("0xB")])
        cached = await engine.get_cached(["0xA", "0xB"])
        await engine.close()

        assert [r.address for r in records] == ["0xA"]
        assert len(cached) == 1
        assert cached[0].address == "0xA"
        assert cached[0].apy.recommended == 0.05
        assert cached[0].updated > 0

    @pytest.mark.asyncio
    async def test_get_cached_without_store(self, settings):
        engine = YieldEngine([StaticCalculator()], settings=settings)
        assert await engine.get_cached(["0xa"]) == []


class TestPricePerShareVaults:
    """Share-price vaults through the engine."""

    @pytest.fixture
    def engine(self, reader, settings) -> YieldEngine:
        estimator = BlockTimeEstimator(reader, settings)
        return YieldEngine([PricePerShareApyCalculator(reader, estimator, settings)], settings=settings)

    @pytest.mark.asyncio
    async def test_annualized_share_price(self, reader, engine):
        reader.set(
            VAULT_ADDRESS,
            "pricePerShare",
            value=lambda block: 10001 * WAD // 10000 if block == LATEST_BLOCK else WAD,
        )

        apy = await engine.calculate(make_vault(VAULT_ADDRESS, PoolProtocol.PRICE_PER_SHARE))

        assert apy.type == "pricePerShare"
        assert apy.composite is False
        assert apy.data["oneDaySample"] == pytest.approx(0.0001)
        assert apy.recommended == pytest.approx(1.0001**365 - 1, rel=1e-9)

    @pytest.mark.asyncio
    async def test_young_vault_reports_zero(self, reader, engine):
        reader.set(VAULT_ADDRESS, "pricePerShare", value=WAD)
        vault = Vault(
            address=VAULT_ADDRESS,
            token=Token(address="0xtoken"),
            protocol=PoolProtocol.PRICE_PER_SHARE,
            inception_block=LATEST_BLOCK - 10,
        )

        apy = await engine.calculate(vault)

        assert apy.recommended == 0.0
        assert apy.data == {"oneDaySample": 0.0, "netApy": 0.0}
