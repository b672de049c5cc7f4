"""Core module - models, constants and decimal arithmetic."""

from .models import Apy, CachedVault, FeeSchedule, PoolProtocol, Vault, VaultType
from .constants import FEE_DENOMINATOR, SECONDS_PER_YEAR, WAD

__all__ = [
    "Apy",
    "CachedVault",
    "FeeSchedule",
    "PoolProtocol",
    "Vault",
    "VaultType",
    "FEE_DENOMINATOR",
    "SECONDS_PER_YEAR",
    "WAD",
]
