"""Contract models (attrs-based schemas).

Request and summary schemas exchanged with the CLI and the JSON exporter. The
request converters are the configuration boundary: sort keys and row limits are
validated here, before any pipeline stage runs.

Notes
-----
- A row limit of ``None`` (or the token ``'all'``) means every function.
- Callgrind requests take no sort key.
"""

from __future__ import annotations

from typing import Dict

from attrs import define, field
from attrs.validators import instance_of, optional

from cargo_profiler.data.models import MetricSource, SortKey, parse_row_limit, parse_sort_key
from cargo_profiler.errors import InvalidSortKeyError


@define(kw_only=True)
class ProfileRequest:
    """Inputs for one profiling run.

    Examples
    --------
    >>> req = ProfileRequest(profiler="cachegrind", binary="/abs/target/debug/demo", limit="10", sort_key="ir")
    >>> req.limit, req.sort_key.value
    (10, 'ir')
    """

    profiler: MetricSource = field(converter=MetricSource)
    binary: str | None = field(default=None, validator=[optional(instance_of(str))])
    bin_args: list[str] = field(factory=list, converter=list)
    release: bool = field(default=False, validator=[instance_of(bool)])
    limit: int | None = field(default=None, converter=parse_row_limit)
    sort_key: SortKey = field(default=SortKey.NONE, converter=parse_sort_key)
    keep: bool = field(default=False, validator=[instance_of(bool)])
    report_file: str | None = field(default=None, validator=[optional(instance_of(str))])

    def __attrs_post_init__(self) -> None:
        if self.profiler is MetricSource.CALLGRIND and self.sort_key is not SortKey.NONE:
            raise InvalidSortKeyError(self.sort_key.value, "callgrind reports take no sort key")


@define(kw_only=True)
class FunctionRow:
    """One function of a report summary."""

    rank: int = field(validator=[instance_of(int)])
    function: str = field(validator=[instance_of(str)])
    values: Dict[str, float] = field(factory=dict)
    shares: Dict[str, float] = field(factory=dict)


@define(kw_only=True)
class ReportSummary:
    """Summary of a parsed report for external consumption."""

    profiler: str = field(validator=[instance_of(str)])
    totals: Dict[str, float] = field(factory=dict)
    functions: list[FunctionRow] = field(factory=list)
