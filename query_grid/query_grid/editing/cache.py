"""In-process cache of built query metadata.

Keys are SHA-256 digests of the whitespace-normalised query text together
with the exact, ordered result-column list, so a change to either produces
a different key and can never return a stale mapping.

Design notes:
    * Thread-safe via a lock; one cache may be shared by several open
      result grids.
    * Bounded by ``max_entries``; the oldest entry is evicted first.
    * Stored and returned values are deep copies, because the nested
      ``TableRef``/``ColumnInfo`` models are mutable.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from collections.abc import Sequence
from typing import Any

from query_grid.models.metadata import QueryMetadata
from query_grid.parser.normalizer import normalize_whitespace

logger = logging.getLogger(__name__)


class MetadataCache:
    """SHA-256 keyed cache of :class:`QueryMetadata`.

    Parameters
    ----------
    max_entries:
        Maximum number of entries to store.
    enabled:
        If ``False``, lookups always miss and stores are ignored.
    """

    def __init__(self, *, max_entries: int = 256, enabled: bool = True) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._store: OrderedDict[str, QueryMetadata] = OrderedDict()
        self._lock = threading.Lock()
        self._max_entries = max_entries
        self._enabled = enabled
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(sql: str, result_columns: Sequence[str]) -> str:
        """Build the cache key for *sql* and its ordered *result_columns*."""
        hasher = hashlib.sha256()
        hasher.update(normalize_whitespace(sql).encode("utf-8"))
        hasher.update(b"\x00")
        hasher.update(json.dumps(list(result_columns), ensure_ascii=False).encode("utf-8"))
        return hasher.hexdigest()

    def get(self, sql: str, result_columns: Sequence[str]) -> QueryMetadata | None:
        """Return a copy of the cached metadata, or ``None`` on a miss."""
        if not self._enabled:
            return None
        key = self.make_key(sql, result_columns)
        with self._lock:
            cached = self._store.get(key)
            if cached is None:
                self._misses += 1
                logger.debug("Metadata cache miss: %s", key[:12])
                return None
            self._hits += 1
        logger.debug("Metadata cache hit: %s", key[:12])
        return cached.model_copy(deep=True)

    def put(self, sql: str, result_columns: Sequence[str], metadata: QueryMetadata) -> None:
        """Store a copy of *metadata* under the key for *sql*/*result_columns*."""
        if not self._enabled:
            return
        key = self.make_key(sql, result_columns)
        with self._lock:
            self._store[key] = metadata.model_copy(deep=True)
            self._store.move_to_end(key)
            while len(self._store) > self._max_entries:
                evicted, _ = self._store.popitem(last=False)
                logger.debug("Metadata cache evicted: %s", evicted[:12])

    def invalidate_all(self) -> int:
        """Drop every entry and return how many were removed."""
        with self._lock:
            count = len(self._store)
            self._store.clear()
        return count

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "enabled": self._enabled,
                "entries": len(self._store),
                "max_entries": self._max_entries,
                "hits": self._hits,
                "misses": self._misses,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
