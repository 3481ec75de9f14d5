"""LRU cache for derived series.

This module provides a thin, typed wrapper over :class:`cachetools.LRUCache`
used by :class:`~src.series.pipeline.SeriesEngine` to memoize series by a
fingerprint of their inputs. Cached values are deep-copied on the way in and
on the way out, so callers can never mutate what another caller receives.
A ``maxsize`` of 0 turns the cache into a pass-through.
"""

from __future__ import annotations

import copy
from collections.abc import Hashable
from typing import Callable, Generic, Optional, TypeVar

from cachetools import LRUCache  # type: ignore[import-untyped]

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class SeriesCache(Generic[K, V]):
    """Copy-on-read LRU cache.

    Parameters
    ----------
    maxsize: int
        Maximum number of entries to retain. When the cache is full, the
        least-recently-used entry is discarded. 0 disables caching.
    """

    def __init__(self, maxsize: int = 128) -> None:
        self._maxsize = maxsize
        self._cache: Optional[LRUCache[K, V]] = (
            LRUCache(maxsize=maxsize) if maxsize > 0 else None
        )
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self) -> bool:
        return self._cache is not None

    def get(self, key: K) -> Optional[V]:
        """Return a copy of the value for `key`, or None if missing."""
        if self._cache is None:
            return None
        value = self._cache.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: K, value: V) -> None:
        """Insert or update `key` with a copy of `value`."""
        if self._cache is not None:
            self._cache[key] = copy.deepcopy(value)

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        """Return the cached value for `key`, computing and storing it on a miss."""
        cached = self.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        value = compute()
        self.set(key, value)
        return value

    def clear(self) -> None:
        if self._cache is not None:
            self._cache.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._cache) if self._cache is not None else 0
