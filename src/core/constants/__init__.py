"""Core constants module.

Re-exports all constants for convenience.
"""

from src.core.constants.generic import (
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    DAYS_PER_YEAR,
    WAD,
    FEE_DENOMINATOR,
    NULL_ADDRESS,
    MAX_SLOT_ITERATIONS,
)

__all__ = [
    "SECONDS_PER_DAY",
    "SECONDS_PER_YEAR",
    "DAYS_PER_YEAR",
    "WAD",
    "FEE_DENOMINATOR",
    "NULL_ADDRESS",
    "MAX_SLOT_ITERATIONS",
]
