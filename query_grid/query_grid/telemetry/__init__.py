"""Lightweight timing telemetry."""

from query_grid.telemetry.profiling import OperationStats, ProfileCollector, profile_operation

__all__ = [
    "OperationStats",
    "ProfileCollector",
    "profile_operation",
]
