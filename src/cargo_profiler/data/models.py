"""Domain data models for parsed profiler reports.

This module defines `attrs`-based models for the parsing pipeline. A report is
either :class:`CacheMetrics` (cachegrind, nine metrics per function) or
:class:`CallMetrics` (callgrind, one instruction count per function); both
hold a :class:`MetricTable`, the composite of a numeric matrix and the parallel
list of function names. Public JSON views live in
:mod:`cargo_profiler.contracts.models`.

Classes
-------
MetricSource
    Which external tool produced a report.
SortKey
    Column selector for ranking, with the ``none`` sentinel.
RawReport, DataLine, ExtractedRow
    Transient pipeline values.
MetricTable
    Rows of metrics paired with function names; reordered only as a whole.
ReportTotals
    Whole-report column sums.
CacheMetrics, CallMetrics
    Final report variants (see ``ProfilerReport``).
ParseOutcome
    Success/failure result returned at the pipeline boundary.

Functions
---------
parse_sort_key, parse_row_limit
    Token converters shared by request contracts and the pipeline.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Sequence, Union

import numpy as np
from attrs import define, field
from attrs.validators import instance_of

from cargo_profiler.errors import InvalidRowLimitError, InvalidSortKeyError, ProfError

# Column order of a cg_annotate function summary.
CACHEGRIND_COLUMNS: tuple[str, ...] = ("ir", "i1mr", "ilmr", "dr", "d1mr", "dlmr", "dw", "d1mw", "dlmw")
CALLGRIND_COLUMNS: tuple[str, ...] = ("ir",)

# Row-limit tokens meaning "every function".
UNBOUNDED_TOKENS = ("", "all")


class MetricSource(str, Enum):
    """External tool whose annotate output is being parsed."""

    CACHEGRIND = "cachegrind"
    CALLGRIND = "callgrind"

    @property
    def columns(self) -> tuple[str, ...]:
        return CACHEGRIND_COLUMNS if self is MetricSource.CACHEGRIND else CALLGRIND_COLUMNS


class SortKey(str, Enum):
    """Metric to rank cachegrind rows by; ``NONE`` keeps extraction order."""

    IR = "ir"
    I1MR = "i1mr"
    ILMR = "ilmr"
    DR = "dr"
    D1MR = "d1mr"
    DLMR = "dlmr"
    DW = "dw"
    D1MW = "d1mw"
    DLMW = "dlmw"
    NONE = "none"

    @property
    def column(self) -> int | None:
        """Column index in :data:`CACHEGRIND_COLUMNS`, or ``None`` for the sentinel."""

        if self is SortKey.NONE:
            return None
        return CACHEGRIND_COLUMNS.index(self.value)


def parse_sort_key(value: object) -> SortKey:
    """Convert a CLI/config token to a :class:`SortKey`.

    ``None`` maps to ``SortKey.NONE``; anything outside the fixed set raises.

    Raises
    ------
    InvalidSortKeyError
        For unknown tokens.

    Examples
    --------
    >>> parse_sort_key('D1mr')
    <SortKey.D1MR: 'd1mr'>
    """

    if value is None:
        return SortKey.NONE
    if isinstance(value, SortKey):
        return value
    token = str(value).strip().lower()
    try:
        return SortKey(token)
    except ValueError:
        raise InvalidSortKeyError(value) from None


def parse_row_limit(value: object) -> int | None:
    """Convert a CLI/config token to a row limit (``None`` = unbounded).

    Raises
    ------
    InvalidRowLimitError
        For negative numbers, booleans and non-integer tokens.

    Examples
    --------
    >>> parse_row_limit('25'), parse_row_limit('all'), parse_row_limit(None)
    (25, None, None)
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidRowLimitError(value)
    if isinstance(value, int):
        if value < 0:
            raise InvalidRowLimitError(value)
        return value
    token = str(value).strip().lower()
    if token in UNBOUNDED_TOKENS:
        return None
    if not token.isdigit():
        raise InvalidRowLimitError(value)
    return int(token)


@define(frozen=True, kw_only=True)
class RawReport:
    """Annotate tool output exactly as captured, tagged with its source."""

    text: str = field(validator=[instance_of(str)])
    source: MetricSource = field(converter=MetricSource)


@define(frozen=True)
class DataLine:
    """A line kept by the tokenizer, with its position among kept lines."""

    ordinal: int
    text: str


@define(frozen=True)
class ExtractedRow:
    """Parsed metrics of one line plus the cleaned function name."""

    values: tuple[float, ...]
    function: str


def _as_matrix(value: object) -> np.ndarray:
    arr = np.array(value, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"metric table data must be 2-D, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


@define(frozen=True, kw_only=True, eq=False)
class MetricTable:
    """Metric rows paired with their function names.

    Row ``i`` of ``data`` always belongs to ``functions[i]``. The table is
    immutable: :meth:`permute` and :meth:`head` build a new table from both
    halves at once instead of touching either in place.

    Attributes
    ----------
    data : numpy.ndarray
        Read-only ``(rows, columns)`` float64 matrix.
    functions : tuple[str, ...]
        Function names, one per row.
    """

    data: np.ndarray = field(converter=_as_matrix)
    functions: tuple[str, ...] = field(converter=tuple)

    def __attrs_post_init__(self) -> None:
        if self.data.shape[0] != len(self.functions):
            raise ValueError(
                f"metric table has {self.data.shape[0]} rows but {len(self.functions)} function names"
            )

    @property
    def n_rows(self) -> int:
        return int(self.data.shape[0])

    @property
    def n_columns(self) -> int:
        return int(self.data.shape[1])

    def column(self, index: int) -> np.ndarray:
        """Return a read-only view of one metric column."""

        return self.data[:, index]

    def rows(self) -> list[tuple[tuple[float, ...], str]]:
        """Return ``(values, function)`` pairs in table order."""

        return [(tuple(float(v) for v in self.data[i]), self.functions[i]) for i in range(self.n_rows)]

    def permute(self, indices: Sequence[int]) -> "MetricTable":
        """Return a new table whose row ``i`` is this table's row ``indices[i]``.

        Raises
        ------
        ValueError
            If ``indices`` is not a permutation of ``range(n_rows)``.
        """

        idx = [int(i) for i in indices]
        if sorted(idx) != list(range(self.n_rows)):
            raise ValueError(f"not a permutation of {self.n_rows} rows: {idx!r}")
        data = self.data[np.asarray(idx, dtype=np.intp)] if idx else self.data[:0]
        return MetricTable(data=data, functions=[self.functions[i] for i in idx])

    def head(self, n: int) -> "MetricTable":
        """Return a new table holding the first ``n`` rows."""

        n = max(int(n), 0)
        return MetricTable(data=self.data[:n], functions=self.functions[:n])


@define(frozen=True, kw_only=True)
class ReportTotals:
    """Per-column sums over every extracted row, indexable by label or position."""

    labels: tuple[str, ...] = field(converter=tuple)
    values: tuple[float, ...] = field(converter=tuple)

    def __attrs_post_init__(self) -> None:
        if len(self.labels) != len(self.values):
            raise ValueError(f"{len(self.labels)} labels for {len(self.values)} totals")

    def __getitem__(self, key: str | int) -> float:
        if isinstance(key, str):
            return self.values[self.labels.index(key)]
        return self.values[key]

    def as_dict(self) -> dict[str, float]:
        return dict(zip(self.labels, self.values))


@define(frozen=True, kw_only=True, eq=False)
class CacheMetrics:
    """Parsed cachegrind report: nine totals and the ranked function table."""

    source: ClassVar[MetricSource] = MetricSource.CACHEGRIND

    totals: ReportTotals = field(validator=[instance_of(ReportTotals)])
    table: MetricTable = field(validator=[instance_of(MetricTable)])

    @property
    def functions(self) -> tuple[str, ...]:
        return self.table.functions


@define(frozen=True, kw_only=True, eq=False)
class CallMetrics:
    """Parsed callgrind report: total instructions and per-function counts."""

    source: ClassVar[MetricSource] = MetricSource.CALLGRIND

    totals: ReportTotals = field(validator=[instance_of(ReportTotals)])
    table: MetricTable = field(validator=[instance_of(MetricTable)])

    @property
    def total_instructions(self) -> float:
        return self.totals[0]

    @property
    def instructions(self) -> tuple[float, ...]:
        return tuple(float(v) for v in self.table.column(0))

    @property
    def functions(self) -> tuple[str, ...]:
        return self.table.functions


ProfilerReport = Union[CacheMetrics, CallMetrics]


@define(frozen=True, kw_only=True)
class ParseOutcome:
    """Either a finished report or the error that stopped the pipeline."""

    report: ProfilerReport | None = None
    error: ProfError | None = None

    def __attrs_post_init__(self) -> None:
        if (self.report is None) == (self.error is None):
            raise ValueError("ParseOutcome needs exactly one of report or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, report: ProfilerReport) -> "ParseOutcome":
        return cls(report=report)

    @classmethod
    def failure(cls, error: ProfError) -> "ParseOutcome":
        return cls(error=error)

    def unwrap(self) -> ProfilerReport:
        """Return the report or raise the recorded error."""

        if self.error is not None:
            raise self.error
        if self.report is None:
            raise ValueError("ParseOutcome holds no report")
        return self.report
