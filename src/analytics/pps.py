"""Share-price sampling over a trailing window."""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Awaitable, Callable, Optional

from src.core.constants import SECONDS_PER_DAY
from src.core.exceptions import ContractReadError
from src.core.numeric import ZERO, compound, in_yield_context, to_decimal
from src.data.contracts import BlockIdentifier
from src.data.sources.blocks import BlockTimeEstimator

logger = logging.getLogger(__name__)

SampleReader = Callable[[BlockIdentifier], Awaitable[Any]]


@in_yield_context
def window_rate(current: Decimal, previous: Decimal) -> Optional[Decimal]:
    """Relative change ``(current - previous) / previous``, None for a zero base."""
    if previous == ZERO:
        return None
    return (current - previous) / previous


@in_yield_context
def annualize_daily_rate(rate: Decimal, periods: int = 365) -> Decimal:
    """Compound a one-day rate over a year: ``(1 + rate)^periods - 1``."""
    return compound(rate * periods, periods)


async def sample_window_rate(
    estimator: BlockTimeEstimator,
    read: SampleReader,
    window_seconds: int = SECONDS_PER_DAY,
    inception_block: Optional[int] = None,
) -> Optional[Decimal]:
    """
    Rate of change of a share-price-like value over a trailing window.

    Args:
        estimator: Block estimator used to find the window start
        read: Async callable reading the value at a block
        window_seconds: Window length
        inception_block: Block the vault was deployed at, if known

    Returns:
        The window rate, or None if either sample is unavailable, the window
        starts before inception, or the older sample is zero
    """
    try:
        latest = await estimator.fetch_latest_block()
        start_block = await estimator.estimate_block_precise(latest.timestamp - window_seconds, latest)
    except ContractReadError as e:
        logger.debug(f"Could not locate sample window: {e}")
        return None

    if inception_block is not None and start_block < inception_block:
        logger.debug(f"Sample block {start_block} predates inception block {inception_block}")
        return None

    try:
        current, previous = await asyncio.gather(read(latest.number), read(start_block))
    except ContractReadError as e:
        logger.debug(f"Share price sample unavailable: {e}")
        return None

    return window_rate(to_decimal(current), to_decimal(previous))
