"""Domain models for ``cargo_profiler``.

This package hosts the attrs-based models shared by the parsing pipeline,
the formatter and the exporters.
"""

from __future__ import annotations

from .models import (
    CACHEGRIND_COLUMNS,
    CALLGRIND_COLUMNS,
    CacheMetrics,
    CallMetrics,
    DataLine,
    ExtractedRow,
    MetricSource,
    MetricTable,
    ParseOutcome,
    ProfilerReport,
    RawReport,
    ReportTotals,
    SortKey,
)

__all__ = [
    "CACHEGRIND_COLUMNS",
    "CALLGRIND_COLUMNS",
    "MetricSource",
    "SortKey",
    "RawReport",
    "DataLine",
    "ExtractedRow",
    "MetricTable",
    "ReportTotals",
    "CacheMetrics",
    "CallMetrics",
    "ProfilerReport",
    "ParseOutcome",
]
