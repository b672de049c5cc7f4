"""APY of vaults whose share price already reflects net yield."""

import logging
from typing import Optional

from config.settings import Settings, get_settings
from src.analytics.base import BaseApyCalculator
from src.analytics.pps import annualize_daily_rate, sample_window_rate
from src.core.models import Apy, PoolProtocol, Vault
from src.core.numeric import to_float
from src.data.contracts import BlockIdentifier, ContractReader
from src.data.sources.blocks import BlockTimeEstimator

from .abis import VAULT_V2_ABI

logger = logging.getLogger(__name__)

APY_TYPE = "pricePerShare"
APY_DESCRIPTION = "Price per share APY (one day sample)"


class PricePerShareApyCalculator(BaseApyCalculator):
    """
    Annualizes the one-day change of ``pricePerShare()``.

    Fees are already deducted from the share price, so no fee waterfall
    applies.
    """

    def __init__(
        self,
        reader: ContractReader,
        estimator: BlockTimeEstimator,
        settings: Optional[Settings] = None,
    ):
        self.reader = reader
        self.estimator = estimator
        self.settings = settings or get_settings()

    @property
    def protocol(self) -> PoolProtocol:
        return PoolProtocol.PRICE_PER_SHARE

    async def calculate_apy(self, vault: Vault) -> Apy:
        async def price_per_share(block: BlockIdentifier):
            return await self.reader.call(vault.address, VAULT_V2_ABI, "pricePerShare", block_identifier=block)

        rate = await sample_window_rate(self.estimator, price_per_share, inception_block=vault.inception_block)
        if rate is None:
            logger.info(f"No share price sample for {vault.display_name}")
            return Apy(
                recommended=0.0,
                type=APY_TYPE,
                composite=False,
                description=APY_DESCRIPTION,
                data={"oneDaySample": 0.0, "netApy": 0.0},
            )

        apy = annualize_daily_rate(rate, self.settings.pool_compounding_periods)
        return Apy(
            recommended=to_float(apy),
            type=APY_TYPE,
            composite=False,
            description=APY_DESCRIPTION,
            data={"oneDaySample": to_float(rate), "netApy": to_float(apy)},
        )
