"""Yearn vaults: v2 resolution and price-per-share yield."""

from .apy import PricePerShareApyCalculator
from .resolver import VaultResolver

__all__ = ["PricePerShareApyCalculator", "VaultResolver"]
