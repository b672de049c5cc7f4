"""Persistent TTL cache of token price quotes."""

import logging
import sqlite3
from typing import Optional, Sequence

import diskcache

from config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_CACHE_ERRORS = (sqlite3.Error, OSError, diskcache.Timeout)


def quote_key(address: str, currencies: Sequence[str]) -> str:
    """Key of a quote: lowercased token address plus sorted currencies."""
    return f"quote:{address.lower()}:{','.join(sorted(c.lower() for c in currencies))}"


class QuoteCache:
    """
    Price quotes kept on disk for ``cache_ttl_seconds``.

    Quotes only ever speed up the oracle, so storage errors are logged and
    treated as a miss.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._cache: Optional[diskcache.Cache] = None

    def _get_cache(self) -> diskcache.Cache:
        if self._cache is None:
            quotes_dir = self.settings.ensure_cache_dir() / "quotes"
            quotes_dir.mkdir(parents=True, exist_ok=True)
            self._cache = diskcache.Cache(str(quotes_dir))
        return self._cache

    def get_quote(self, address: str, currencies: Sequence[str]) -> Optional[dict]:
        key = quote_key(address, currencies)
        try:
            return self._get_cache().get(key)
        except _CACHE_ERRORS as e:
            logger.warning(f"Quote cache read failed for {key}: {e}")
            return None

    def put_quote(self, address: str, currencies: Sequence[str], quote: dict) -> bool:
        """Store a quote. Empty quotes are never stored."""
        if not quote:
            return False
        key = quote_key(address, currencies)
        try:
            return bool(self._get_cache().set(key, dict(quote), expire=self.settings.cache_ttl_seconds))
        except _CACHE_ERRORS as e:
            logger.warning(f"Quote cache write failed for {key}: {e}")
            return False

    def close(self) -> None:
        if self._cache is not None:
            self._cache.close()
            self._cache = None
