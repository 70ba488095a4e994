from __future__ import annotations

import numpy as np
import pytest

from cargo_profiler.data.models import (
    CacheMetrics,
    MetricSource,
    MetricTable,
    ParseOutcome,
    ReportTotals,
    SortKey,
)
from cargo_profiler.errors import InvalidRowLimitError


def test_table_rejects_name_count_mismatch() -> None:
    with pytest.raises(ValueError):
        MetricTable(data=[[1.0], [2.0]], functions=["only-one"])


def test_table_data_is_read_only() -> None:
    t = MetricTable(data=[[1.0], [2.0]], functions=["a", "b"])
    assert t.n_rows == 2 and t.n_columns == 1
    with pytest.raises(ValueError):
        t.data[0, 0] = 5.0


def test_permute_moves_rows_and_names_together() -> None:
    t = MetricTable(data=[[1.0, 10.0], [2.0, 20.0], [3.0, 30.0]], functions=["a", "b", "c"])
    p = t.permute([2, 0, 1])
    assert p.functions == ("c", "a", "b")
    np.testing.assert_array_equal(p.column(1), [30.0, 10.0, 20.0])
    # source table untouched
    assert t.functions == ("a", "b", "c")


def test_permute_requires_a_permutation() -> None:
    t = MetricTable(data=[[1.0], [2.0]], functions=["a", "b"])
    with pytest.raises(ValueError):
        t.permute([0, 0])
    with pytest.raises(ValueError):
        t.permute([0])


def test_head_slices_both_halves() -> None:
    t = MetricTable(data=[[1.0], [2.0], [3.0]], functions=["a", "b", "c"])
    h = t.head(2)
    assert h.functions == ("a", "b")
    assert h.data.shape == (2, 1)


def test_sort_key_columns() -> None:
    assert SortKey.IR.column == 0
    assert SortKey.DLMW.column == 8
    assert SortKey.NONE.column is None
    assert MetricSource.CALLGRIND.columns == ("ir",)


def test_totals_lookup() -> None:
    totals = ReportTotals(labels=("ir", "dr"), values=(3.0, 4.0))
    assert totals["dr"] == 4.0
    assert totals[0] == 3.0
    with pytest.raises(ValueError):
        ReportTotals(labels=("ir",), values=(1.0, 2.0))


def test_parse_outcome_needs_exactly_one_side() -> None:
    with pytest.raises(ValueError):
        ParseOutcome()
    report = CacheMetrics(
        totals=ReportTotals(labels=("ir",) * 9, values=(0.0,) * 9),
        table=MetricTable(data=np.empty((0, 9)), functions=[]),
    )
    with pytest.raises(ValueError):
        ParseOutcome(report=report, error=InvalidRowLimitError("x"))
    assert ParseOutcome.success(report).unwrap() is report
    failed = ParseOutcome.failure(InvalidRowLimitError("-1"))
    assert not failed.ok
