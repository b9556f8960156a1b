"""Timing instrumentation for the engine's hot paths.

``@profile_operation(name)`` wraps a synchronous function with
``perf_counter_ns`` timing.  Each call's duration is kept by the
:class:`ProfileCollector` singleton and logged at DEBUG level; the CLI's
``--profile`` flag renders :meth:`ProfileCollector.all_stats` after a
command finishes.  Profiling only observes calls; it never alters arguments
or return values.

Usage::

    from query_grid.telemetry.profiling import profile_operation

    @profile_operation("metadata.build")
    def build_query_metadata(sql, result_columns):
        ...
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

DEFAULT_MAX_SAMPLES = 500


@dataclass(frozen=True)
class OperationStats:
    """Aggregated timings for one profiled operation, in milliseconds."""

    operation: str
    count: int
    total_ms: float
    mean_ms: float
    p50_ms: float
    p95_ms: float
    max_ms: float


def _percentile(sorted_ms: list[float], pct: float) -> float:
    # Linear interpolation between closest ranks.
    k = (pct / 100.0) * (len(sorted_ms) - 1)
    lower = int(k)
    upper = min(lower + 1, len(sorted_ms) - 1)
    return sorted_ms[lower] + (k - lower) * (sorted_ms[upper] - sorted_ms[lower])


class ProfileCollector:
    """Thread-safe store of recent call durations, keyed by operation name.

    Only the newest *max_samples* durations per operation are kept.
    """

    _instance: ProfileCollector | None = None
    _instance_lock = threading.Lock()

    def __init__(self, max_samples: int = DEFAULT_MAX_SAMPLES) -> None:
        self._max_samples = max_samples
        self._samples: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> ProfileCollector:
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = ProfileCollector()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next call starts from no samples."""
        with cls._instance_lock:
            cls._instance = None

    def record(self, operation: str, duration_ms: float) -> None:
        with self._lock:
            samples = self._samples.setdefault(operation, deque(maxlen=self._max_samples))
            samples.append(duration_ms)

    def stats(self, operation: str) -> OperationStats | None:
        """Aggregate the kept durations of *operation*, or ``None`` if never called."""
        with self._lock:
            samples = sorted(self._samples.get(operation, ()))
        if not samples:
            return None

        total = sum(samples)
        return OperationStats(
            operation=operation,
            count=len(samples),
            total_ms=round(total, 3),
            mean_ms=round(total / len(samples), 3),
            p50_ms=round(_percentile(samples, 50), 3),
            p95_ms=round(_percentile(samples, 95), 3),
            max_ms=round(samples[-1], 3),
        )

    def all_stats(self) -> list[OperationStats]:
        """Stats for every recorded operation, sorted by name."""
        with self._lock:
            operations = sorted(self._samples)
        return [s for s in map(self.stats, operations) if s is not None]


def profile_operation(name: str) -> Callable[[F], F]:
    """Decorator that times a synchronous function under *name*."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_ns = time.perf_counter_ns()
            try:
                return func(*args, **kwargs)
            finally:
                duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
                ProfileCollector.get_instance().record(name, duration_ms)
                logger.debug("PROFILE %s: %.3f ms", name, duration_ms)

        return wrapper  # type: ignore[return-value]

    return decorator
