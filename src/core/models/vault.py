"""Vault data models consumed by the yield engine."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .apy import Apy


class VaultType(Enum):
    """Vault protocol family. Fee interpretation differs per family."""

    V1 = "v1"
    V2 = "v2"


class PoolProtocol(Enum):
    """Underlying protocol that generates the vault's yield."""

    CURVE = "curve"
    PRICE_PER_SHARE = "pps"


@dataclass(frozen=True)
class Token:
    """ERC20 token deposited into a vault."""

    address: str
    name: str = ""
    symbol: str = ""
    decimals: int = 18


@dataclass(frozen=True)
class Strategy:
    """Strategy attached to a vault's withdrawal queue."""

    address: str
    name: str = ""


@dataclass(frozen=True)
class GeneralFees:
    """Fees charged on every vault, in basis points of FEE_DENOMINATOR."""

    performance_fee: int = 0
    management_fee: int = 0


@dataclass(frozen=True)
class SpecialFees:
    """Protocol-specific fees. ``keep_crv`` may be absent."""

    keep_crv: Optional[int] = None


@dataclass(frozen=True)
class FeeSchedule:
    """Resolved fee schedule for a vault."""

    general: GeneralFees = field(default_factory=GeneralFees)
    special: SpecialFees = field(default_factory=SpecialFees)


@dataclass(frozen=True)
class Vault:
    """Resolved vault snapshot. Never mutated by the engine."""

    address: str
    token: Token
    type: VaultType = VaultType.V2
    protocol: PoolProtocol = PoolProtocol.CURVE
    fees: FeeSchedule = field(default_factory=FeeSchedule)
    strategies: Tuple[Strategy, ...] = ()
    name: str = ""
    symbol: str = ""
    inception_block: Optional[int] = None

    @property
    def strategy_addresses(self) -> List[str]:
        """Strategy addresses in withdrawal priority order."""
        return [s.address for s in self.strategies]

    @property
    def display_name(self) -> str:
        return self.name or self.symbol or self.address


@dataclass
class CachedVault:
    """Vault record persisted alongside its computed APY."""

    address: str
    name: str
    symbol: str
    token: Token
    type: VaultType
    apy: Optional[Apy]
    updated: int
    tvl: Optional[float] = None

    @classmethod
    def from_vault(
        cls,
        vault: Vault,
        apy: Optional[Apy],
        updated: int,
        tvl: Optional[float] = None,
    ) -> "CachedVault":
        return cls(
            address=vault.address,
            name=vault.name,
            symbol=vault.symbol,
            token=vault.token,
            type=vault.type,
            apy=apy,
            updated=updated,
            tvl=tvl,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "address": self.address,
            "name": self.name,
            "symbol": self.symbol,
            "token": asdict(self.token),
            "type": self.type.value,
            "apy": self.apy.to_dict() if self.apy else None,
            "updated": self.updated,
            "tvl": self.tvl,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedVault":
        """Rebuild a CachedVault from :meth:`to_dict` output."""
        apy = data.get("apy")
        return cls(
            address=data["address"],
            name=data.get("name", ""),
            symbol=data.get("symbol", ""),
            token=Token(**data["token"]),
            type=VaultType(data.get("type", VaultType.V2.value)),
            apy=Apy.from_dict(apy) if apy else None,
            updated=int(data.get("updated", 0)),
            tvl=data.get("tvl"),
        )
