"""Per-vault corrections to computed values.

Known data anomalies (a gauge missing from the registry, a vault that lost
its boost, a glitched pool price) are corrected here instead of inside the
calculators. Entries are loaded from ``config/overrides.json`` or registered
in code as a function of the computed value.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, model_validator

from config.settings import get_settings
from src.core.exceptions import OverrideConfigError
from src.core.numeric import to_decimal

logger = logging.getLogger(__name__)

Correction = Callable[[Any], Any]


class OverrideField(str, Enum):
    """Injection points for overrides."""

    GAUGE_ADDRESS = "gauge_address"
    BOOST = "boost"
    POOL_APY = "pool_apy"
    WITHDRAWAL_QUEUE = "withdrawal_queue"


class OverrideMode(str, Enum):
    REPLACE = "replace"
    APPEND = "append"


class OverrideEntry(BaseModel):
    """One override from the data file."""

    vault: str
    field: OverrideField
    mode: OverrideMode = OverrideMode.REPLACE
    value: Any
    reason: str = ""

    @model_validator(mode="after")
    def check_value_shape(self) -> "OverrideEntry":
        if self.field == OverrideField.WITHDRAWAL_QUEUE:
            if not isinstance(self.value, list) or not all(isinstance(v, str) for v in self.value):
                raise ValueError("withdrawal_queue override value must be a list of addresses")
        elif self.mode == OverrideMode.APPEND:
            raise ValueError(f"{self.field.value} overrides only support mode 'replace'")
        elif self.field == OverrideField.GAUGE_ADDRESS:
            if not isinstance(self.value, str):
                raise ValueError("gauge_address override value must be an address")
        elif isinstance(self.value, bool) or not isinstance(self.value, (int, float, str)):
            raise ValueError(f"{self.field.value} override value must be numeric")
        return self


class OverrideFile(BaseModel):
    version: int = 1
    overrides: List[OverrideEntry] = Field(default_factory=list)


def _correction_for(entry: OverrideEntry) -> Correction:
    if entry.field == OverrideField.WITHDRAWAL_QUEUE:
        extra = list(entry.value)
        if entry.mode == OverrideMode.APPEND:

            def append(computed: Any) -> List[str]:
                queue = list(computed or [])
                known = {a.lower() for a in queue}
                return queue + [a for a in extra if a.lower() not in known]

            return append
        return lambda _computed: list(extra)

    if entry.field in (OverrideField.BOOST, OverrideField.POOL_APY):
        value = to_decimal(entry.value)
    else:
        value = entry.value
    return lambda _computed: value


class OverrideTable:
    """Corrections keyed by ``(vault address, field)``."""

    def __init__(self, entries: Iterable[OverrideEntry] = ()):
        self._corrections: Dict[Tuple[str, OverrideField], Correction] = {}
        self._reasons: Dict[Tuple[str, OverrideField], str] = {}
        for entry in entries:
            self.add(entry)

    @classmethod
    def load(cls, path: Path) -> "OverrideTable":
        """
        Load overrides from a JSON file.

        A missing file yields an empty table.

        Raises:
            OverrideConfigError: If the file is unreadable or malformed
        """
        if not path.exists():
            logger.warning(f"Override table not found at {path}")
            return cls()
        try:
            with path.open() as f:
                data = OverrideFile.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise OverrideConfigError(f"Invalid override table {path}: {e}") from e

        table = cls(data.overrides)
        logger.debug(f"Loaded {len(table)} overrides from {path} (version {data.version})")
        return table

    @staticmethod
    def _key(vault_address: str, field: OverrideField) -> Tuple[str, OverrideField]:
        return vault_address.lower(), OverrideField(field)

    def add(self, entry: OverrideEntry) -> None:
        key = self._key(entry.vault, entry.field)
        self._corrections[key] = _correction_for(entry)
        self._reasons[key] = entry.reason

    def register(
        self,
        vault_address: str,
        field: OverrideField,
        correction: Correction,
        reason: str = "",
    ) -> None:
        """Register a correction computed from the value it replaces."""
        key = self._key(vault_address, field)
        self._corrections[key] = correction
        self._reasons[key] = reason

    def has(self, vault_address: str, field: OverrideField) -> bool:
        return self._key(vault_address, field) in self._corrections

    def apply(self, vault_address: str, computed_value: Any, field: OverrideField) -> Any:
        """Return the corrected value, or ``computed_value`` when no override exists."""
        key = self._key(vault_address, field)
        correction = self._corrections.get(key)
        if correction is None:
            return computed_value
        corrected = correction(computed_value)
        logger.debug(
            f"Override {key[1].value} on {vault_address}: {computed_value!r} -> {corrected!r}"
            f" ({self._reasons.get(key) or 'no reason given'})"
        )
        return corrected

    def __len__(self) -> int:
        return len(self._corrections)


def load_overrides(path: Optional[Path] = None) -> OverrideTable:
    """Load the override table from ``path`` or the configured location."""
    if path is None:
        path = get_settings().overrides_path
    return OverrideTable.load(path)
