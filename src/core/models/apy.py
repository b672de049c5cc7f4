"""APY result model."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class Apy:
    """Computed yield for a vault.

    ``recommended`` is the headline figure reported externally. ``data``
    holds the named component figures used to produce it.
    """

    recommended: float
    type: str
    composite: bool
    description: str
    data: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if self.recommended is None or not math.isfinite(self.recommended):
            self.recommended = 0.0

    @classmethod
    def empty(cls, apy_type: str, description: str, composite: bool = False) -> "Apy":
        """An APY with no yield data available."""
        return cls(recommended=0.0, type=apy_type, composite=composite, description=description)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommended": self.recommended,
            "type": self.type,
            "composite": self.composite,
            "description": self.description,
            "data": dict(self.data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Apy":
        return cls(
            recommended=float(data.get("recommended") or 0.0),
            type=data.get("type", ""),
            composite=bool(data.get("composite", False)),
            description=data.get("description", ""),
            data={k: float(v) for k, v in (data.get("data") or {}).items()},
        )
