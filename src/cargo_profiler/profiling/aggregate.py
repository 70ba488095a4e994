"""Aggregation and truncation helpers for metric tables.

Functions
---------
compute_totals
    Column sums over every row of a table.
truncate
    Keep the first N rows of a ranked table.

Totals must be computed before truncation: the formatter divides each shown
row by these totals, and the shares refer to the whole profiled run.
"""

from __future__ import annotations

from typing import Sequence

from cargo_profiler.data.models import MetricTable, ReportTotals, parse_row_limit


def compute_totals(table: MetricTable, labels: Sequence[str]) -> ReportTotals:
    """Return per-column sums of ``table`` labelled with ``labels``.

    Parameters
    ----------
    table : MetricTable
        The full (untruncated) table.
    labels : sequence of str
        One label per column.

    Returns
    -------
    ReportTotals
        Sums in column order; zeros for an empty table.
    """

    if len(labels) != table.n_columns:
        raise ValueError(f"{len(labels)} labels for a table with {table.n_columns} columns")
    sums = table.data.sum(axis=0)
    return ReportTotals(labels=tuple(labels), values=tuple(float(v) for v in sums))


def truncate(table: MetricTable, limit: int | str | None) -> MetricTable:
    """Return the first ``limit`` rows of ``table``.

    ``None`` means no limit. A limit at or above the row count returns the
    table unchanged. Row order is never changed.

    Raises
    ------
    InvalidRowLimitError
        For negative, boolean or non-integer limits.
    """

    n = parse_row_limit(limit)
    if n is None or n >= table.n_rows:
        return table
    return table.head(n)
