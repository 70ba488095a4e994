from __future__ import annotations

import numpy as np
import pytest

from cargo_profiler.data.models import CACHEGRIND_COLUMNS, MetricTable
from cargo_profiler.errors import InvalidRowLimitError
from cargo_profiler.profiling.aggregate import compute_totals, truncate


def _table(n: int) -> MetricTable:
    return MetricTable(
        data=np.array([[float(i + 1)] * 9 for i in range(n)]).reshape(n, 9),
        functions=[f"f{i}" for i in range(n)],
    )


def test_totals_are_column_sums() -> None:
    totals = compute_totals(_table(4), CACHEGRIND_COLUMNS)
    assert totals["ir"] == 10.0
    assert totals[8] == 10.0
    assert list(totals.as_dict()) == list(CACHEGRIND_COLUMNS)


def test_totals_of_empty_table_are_zero() -> None:
    totals = compute_totals(_table(0), CACHEGRIND_COLUMNS)
    assert totals.values == (0.0,) * 9


def test_label_count_must_match_columns() -> None:
    with pytest.raises(ValueError):
        compute_totals(_table(2), ("ir",))


@pytest.mark.parametrize("limit", [0, 1, 3, 4, 10, None])
def test_truncation_does_not_change_totals(limit: int | None) -> None:
    table = _table(4)
    totals = compute_totals(table, CACHEGRIND_COLUMNS)
    shown = truncate(table, limit)
    expected = 4 if limit is None else min(limit, 4)
    assert shown.n_rows == expected
    assert shown.functions == table.functions[:expected]
    assert compute_totals(table, CACHEGRIND_COLUMNS) == totals


def test_truncate_returns_same_table_when_limit_covers_rows() -> None:
    table = _table(3)
    assert truncate(table, 3) is table
    assert truncate(table, None) is table


@pytest.mark.parametrize("limit", [-1, True, "ten", "-2"])
def test_invalid_limit_rejected(limit: object) -> None:
    with pytest.raises(InvalidRowLimitError):
        truncate(_table(3), limit)  # type: ignore[arg-type]


def test_limit_tokens_accepted() -> None:
    table = _table(3)
    assert truncate(table, "2").n_rows == 2
    assert truncate(table, "all") is table
