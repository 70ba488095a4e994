"""Contract/domain conversion utilities using `cattrs`.

Provides a shared converter that turns report models into
:class:`~cargo_profiler.contracts.models.ReportSummary` payloads.
"""

from __future__ import annotations

from typing import List

from cattrs import Converter

from cargo_profiler.contracts.models import FunctionRow, ReportSummary
from cargo_profiler.data.models import CacheMetrics, CallMetrics, ProfilerReport
from cargo_profiler.visualize.display import share

# Public converter instance; register hooks as needed.
converter = Converter()


def build_summary(report: ProfilerReport) -> ReportSummary:
    """Construct a ReportSummary from either report variant."""

    totals = report.totals.as_dict()
    labels = report.totals.labels
    rows: List[FunctionRow] = []
    for idx, (values, func) in enumerate(report.table.rows(), start=1):
        rows.append(
            FunctionRow(
                rank=idx,
                function=func,
                values=dict(zip(labels, values)),
                shares={lab: share(v, totals[lab]) for lab, v in zip(labels, values)},
            )
        )
    return ReportSummary(profiler=report.source.value, totals=totals, functions=rows)


def register_report_hooks(conv: Converter) -> None:
    """Register report -> summary unstructure hooks on ``conv``."""

    def _unstructure_report(report: ProfilerReport) -> dict:
        return conv.unstructure(build_summary(report))

    conv.register_unstructure_hook(CacheMetrics, _unstructure_report)
    conv.register_unstructure_hook(CallMetrics, _unstructure_report)


# Configure the shared converter on import so downstream callers can rely on it.
register_report_hooks(converter)
