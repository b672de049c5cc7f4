"""Core data models for the vault yield engine."""

from .apy import Apy
from .chain import BlockHeader
from .rewards import MultiStream, NoStream, RewardModel, RewardTokenData, SingleStream
from .vault import (
    CachedVault,
    FeeSchedule,
    GeneralFees,
    PoolProtocol,
    SpecialFees,
    Strategy,
    Token,
    Vault,
    VaultType,
)

__all__ = [
    "Apy",
    "BlockHeader",
    "CachedVault",
    "FeeSchedule",
    "GeneralFees",
    "MultiStream",
    "NoStream",
    "PoolProtocol",
    "RewardModel",
    "RewardTokenData",
    "SingleStream",
    "SpecialFees",
    "Strategy",
    "Token",
    "Vault",
    "VaultType",
]
