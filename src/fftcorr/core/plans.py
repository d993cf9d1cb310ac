# src/fftcorr/core/plans.py
"""Per-thread cache of transform plans keyed by transform size."""
from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Optional

from fftcorr.core.fft import TransformPlan
from fftcorr.errors import InvalidSizeError
from fftcorr.log import get_logger

__all__ = ["PlanCache", "get_plan_cache", "reset_plan_cache"]

logger = get_logger(__name__)


class PlanCache:
    """
    Mapping from transform size to :class:`TransformPlan`.

    A cache is owned by one thread and is not synchronized. With
    ``max_entries`` set, the least recently used plan is evicted once the
    cache grows past that many sizes; ``None`` means unbounded.

    Parameters
    ----------
    max_entries : int or None
        LRU capacity.
    workers : int or None
        Worker count handed to every plan created by this cache.
    """

    def __init__(self, max_entries: Optional[int] = None, workers: Optional[int] = None):
        if max_entries is not None and int(max_entries) < 1:
            raise ValueError("max_entries must be >= 1 or None")
        self.max_entries = None if max_entries is None else int(max_entries)
        self.workers = workers
        self.hits = 0
        self.misses = 0
        self._plans: "OrderedDict[int, TransformPlan]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._plans)

    def __contains__(self, size: object) -> bool:
        return size in self._plans

    def __repr__(self) -> str:
        return (
            f"PlanCache(sizes={self.sizes()}, max_entries={self.max_entries}, "
            f"hits={self.hits}, misses={self.misses})"
        )

    def sizes(self) -> list[int]:
        """Cached sizes, least recently used first."""
        return list(self._plans)

    def get_or_create(self, size: int) -> TransformPlan:
        """
        Return the plan for ``size``, creating and inserting it on a miss.

        Raises
        ------
        InvalidSizeError
            If ``size`` is not a positive integer.
        """
        if isinstance(size, bool) or int(size) != size or size <= 0:
            raise InvalidSizeError(f"Transform size must be a positive integer, got {size!r}")
        size = int(size)

        plan = self._plans.get(size)
        if plan is not None:
            self.hits += 1
            self._plans.move_to_end(size)
            return plan

        self.misses += 1
        plan = TransformPlan(size=size, workers=self.workers)
        self._plans[size] = plan
        logger.debug("plan_created", size=size, cached=len(self._plans))

        if self.max_entries is not None:
            while len(self._plans) > self.max_entries:
                old_size, _ = self._plans.popitem(last=False)
                logger.debug("plan_evicted", size=old_size)
        return plan

    def clear(self) -> None:
        """Drop all plans and reset the hit/miss counters."""
        self._plans.clear()
        self.hits = 0
        self.misses = 0


_local = threading.local()


def get_plan_cache() -> PlanCache:
    """Return the calling thread's cache, creating it on first use."""
    cache = getattr(_local, "cache", None)
    if cache is None:
        cache = PlanCache()
        _local.cache = cache
    return cache


def reset_plan_cache() -> None:
    """Discard the calling thread's cache."""
    _local.cache = None
