"""Base APY calculator interface."""

from abc import ABC, abstractmethod

from src.core.models import Apy, PoolProtocol, Vault


class BaseApyCalculator(ABC):
    """Abstract base class for per-protocol APY calculators."""

    @property
    @abstractmethod
    def protocol(self) -> PoolProtocol:
        """Return the pool protocol this calculator handles."""
        pass

    @abstractmethod
    async def calculate_apy(self, vault: Vault) -> Apy:
        """
        Calculate the APY of a vault.

        Args:
            vault: Resolved vault snapshot

        Returns:
            Apy; missing data is reported as zero, never raised
        """
        pass
