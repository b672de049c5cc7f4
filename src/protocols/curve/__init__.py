"""Curve pool vault yield: pool APR, gauge boost and reward streams."""

from .apy import CurveApyCalculator
from .boost import calculate_boost
from .pool import calculate_pool_apr
from .rewards import calculate_rewards_apr, detect_reward_model

__all__ = [
    "CurveApyCalculator",
    "calculate_boost",
    "calculate_pool_apr",
    "calculate_rewards_apr",
    "detect_reward_model",
]
