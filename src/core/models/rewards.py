"""Reward stream models.

A reward contract follows exactly one accounting model, expressed as a tagged
union so that the accountant dispatches on type instead of on read failures.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class SingleStream:
    """StakingRewards-style contract: one reward token, one rate."""

    address: str
    period_finish: int


@dataclass(frozen=True)
class MultiStream:
    """MultiRewards-style contract: a registry of reward tokens."""

    address: str


@dataclass(frozen=True)
class NoStream:
    """No readable reward stream at this address."""

    address: str


RewardModel = Union[SingleStream, MultiStream, NoStream]


@dataclass(frozen=True)
class RewardTokenData:
    """Per-token stream data from a MultiRewards registry."""

    token: str
    reward_rate: int  # tokens per second, 1e18 scaled
    period_finish: int  # unix timestamp

    def is_active(self, now: int) -> bool:
        return self.period_finish >= now
