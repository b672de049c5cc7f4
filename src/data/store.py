"""Key/value persistence for computed vault records."""

import logging
import sqlite3
from typing import Any, List, Optional, Sequence, Tuple, TypeVar

import diskcache

from config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STORE_ERRORS = (sqlite3.Error, OSError, diskcache.Timeout)


def chunked(items: Sequence[T], size: int) -> List[List[T]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class KeyValueStore:
    """
    Table-like store on top of diskcache.

    Batched reads and writes are chunked. A failed write chunk is logged and
    skipped so the remaining chunks still land.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        table: str = "vaults",
    ):
        self.settings = settings or get_settings()
        self.table = table
        self._cache: Optional[diskcache.Cache] = None

    def _get_cache(self) -> diskcache.Cache:
        if self._cache is None:
            table_dir = self.settings.ensure_cache_dir() / "store" / self.table
            table_dir.mkdir(parents=True, exist_ok=True)
            self._cache = diskcache.Cache(str(table_dir))
        return self._cache

    async def batch_get(self, keys: Sequence[str], batch_size: Optional[int] = None) -> List[Any]:
        """
        Fetch the values stored under ``keys``.

        Missing keys are omitted from the result; found values keep the
        order of ``keys``.
        """
        size = batch_size or self.settings.store_get_batch_size
        cache = self._get_cache()
        results: List[Any] = []
        for chunk in chunked(keys, size):
            with cache.transact():
                for key in chunk:
                    value = cache.get(key)
                    if value is not None:
                        results.append(value)
        return results

    async def batch_set(
        self,
        items: Sequence[Tuple[str, Any]],
        batch_size: Optional[int] = None,
    ) -> int:
        """
        Store ``(key, value)`` pairs.

        Returns:
            Number of items written
        """
        size = batch_size or self.settings.store_put_batch_size
        cache = self._get_cache()
        written = 0
        for chunk in chunked(items, size):
            try:
                with cache.transact():
                    for key, value in chunk:
                        cache.set(key, value)
            except _STORE_ERRORS as e:
                logger.error(f"Failed to write {[key for key, _ in chunk]} to {self.table}: {e}")
                continue
            written += len(chunk)
        return written

    async def scan(self) -> List[Any]:
        """All values in the table."""
        cache = self._get_cache()
        values = (cache.get(key) for key in cache.iterkeys())
        return [value for value in values if value is not None]

    async def remove(self, key: str) -> bool:
        return bool(self._get_cache().delete(key))

    def close(self) -> None:
        if self._cache:
            self._cache.close()
            self._cache = None
