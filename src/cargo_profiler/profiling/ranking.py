"""Ranking of metric tables by one column.

Rows are ordered most expensive first. The comparison is an explicit total
order rather than whatever float comparison happens to do with NaN: NaN ranks
below every number (including ``-inf``), and equal keys keep their input order.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from cargo_profiler.data.models import MetricTable, SortKey, parse_sort_key

logger = logging.getLogger(__name__)


def _descending_key(value: float) -> tuple[int, float]:
    if math.isnan(value):
        return (0, 0.0)
    return (1, value)


def descending_order(values: Iterable[float]) -> list[int]:
    """Return row indices ordering ``values`` from largest to smallest.

    Examples
    --------
    >>> descending_order([1.0, float('nan'), 3.0, 1.0])
    [2, 0, 3, 1]
    """

    vals = [float(v) for v in values]
    # reverse=True keeps equal keys in input order
    return sorted(range(len(vals)), key=lambda i: _descending_key(vals[i]), reverse=True)


def rank(table: MetricTable, sort_key: SortKey | str = SortKey.NONE) -> MetricTable:
    """Return ``table`` with rows ordered by the ``sort_key`` column, descending.

    ``SortKey.NONE`` returns the table unchanged. Metric rows and function
    names move together through :meth:`MetricTable.permute`.

    Raises
    ------
    InvalidSortKeyError
        If ``sort_key`` is not one of the fixed tokens (case is ignored).
    """

    key = parse_sort_key(sort_key)
    column = key.column
    if column is None:
        return table
    if column >= table.n_columns:
        raise IndexError(f"sort key {key.value!r} needs column {column}, table has {table.n_columns}")
    order = descending_order(table.column(column))
    logger.debug("rank: ordering %d rows by %s", len(order), key.value)
    return table.permute(order)
