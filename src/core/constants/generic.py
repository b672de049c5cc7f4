"""Generic constants for yield calculations.

These constants are protocol-agnostic and can be used across different protocols.
"""

from decimal import Decimal

# Time constants
SECONDS_PER_DAY = 24 * 3600
SECONDS_PER_YEAR = Decimal(int(365.25 * SECONDS_PER_DAY))  # 31,557,600
DAYS_PER_YEAR = 365

# Precision constants
WAD = 10**18  # Standard 18 decimal precision

# Fees are fixed-point integers over this denominator (10000 = 100%)
FEE_DENOMINATOR = 10_000

# Empty address returned by numbered slot accessors past the last entry
NULL_ADDRESS = "0x0000000000000000000000000000000000000000"

# Upper bound on numbered slot iteration (reward tokens, withdrawal queue)
MAX_SLOT_ITERATIONS = 64
