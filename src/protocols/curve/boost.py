"""Voting-escrow gauge boost."""

from decimal import Decimal
from typing import Any

from src.core.numeric import ONE, ZERO, finite_or, in_yield_context, to_decimal

from .config import MAX_BOOST


@in_yield_context
def calculate_boost(working_balance: Any, gauge_balance: Any, max_boost: Decimal = MAX_BOOST) -> Decimal:
    """
    Boost multiplier of a gauge depositor.

    ``working / (gauge / max_boost)``. A depositor with no gauge balance is
    credited with ``max_boost``; a degenerate ratio clamps to 1.
    """
    gauge = to_decimal(gauge_balance)
    if not gauge > ZERO:
        return to_decimal(max_boost)
    boost = to_decimal(working_balance) / ((ONE / to_decimal(max_boost)) * gauge)
    return finite_or(boost, ONE)
