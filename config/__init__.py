"""Configuration module for the vault yield engine."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
