"""Chain data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BlockHeader:
    """Block number and its timestamp (unix seconds)."""

    number: int
    timestamp: int
