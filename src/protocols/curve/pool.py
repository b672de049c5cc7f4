"""Curve pool trading-fee yield from the virtual price."""

from decimal import Decimal
from typing import Optional

from src.analytics.pps import sample_window_rate
from src.core.models import Vault
from src.data.contracts import BlockIdentifier, ContractReader
from src.data.sources.blocks import BlockTimeEstimator

from .abis import REGISTRY_ABI
from .config import CURVE_REGISTRY_ADDRESS


async def calculate_pool_apr(
    vault: Vault,
    reader: ContractReader,
    estimator: BlockTimeEstimator,
) -> Optional[Decimal]:
    """
    One-day rate of change of the pool's virtual price.

    The LP token is the vault's underlying token. Returns None when the
    sample is unavailable.
    """
    lp_token = vault.token.address

    async def virtual_price(block: BlockIdentifier):
        return await reader.call(
            CURVE_REGISTRY_ADDRESS,
            REGISTRY_ABI,
            "get_virtual_price_from_lp_token",
            lp_token,
            block_identifier=block,
        )

    return await sample_window_rate(estimator, virtual_price, inception_block=vault.inception_block)
