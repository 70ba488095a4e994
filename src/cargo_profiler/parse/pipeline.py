"""Parsing pipeline from annotate output to a ranked report.

Stages run strictly in order: tokenize, extract, assemble, rank, total,
truncate. Totals are taken from the ranked but untruncated table.

Functions
---------
decode_output
    Decode captured tool stdout, rejecting invalid UTF-8.
parse_cachegrind
    Build :class:`CacheMetrics` from ``cg_annotate`` output (raises on failure).
parse_callgrind
    Build :class:`CallMetrics` from ``callgrind_annotate`` output (raises on failure).
build_report
    Dispatch on the report source and return a :class:`ParseOutcome`.
"""

from __future__ import annotations

import logging

from cargo_profiler.data.models import (
    CACHEGRIND_COLUMNS,
    CALLGRIND_COLUMNS,
    CacheMetrics,
    CallMetrics,
    MetricSource,
    MetricTable,
    ParseOutcome,
    RawReport,
    SortKey,
    parse_row_limit,
    parse_sort_key,
)
from cargo_profiler.errors import ProfError, ReportEncodingError
from cargo_profiler.parse.extract import extract_row
from cargo_profiler.parse.grammar import OutputGrammar, get_grammar
from cargo_profiler.parse.tokenize import tokenize
from cargo_profiler.profiling.aggregate import compute_totals, truncate
from cargo_profiler.profiling.matrix import assemble_matrix
from cargo_profiler.profiling.ranking import rank

logger = logging.getLogger(__name__)


def decode_output(data: bytes) -> str:
    """Return ``data`` decoded as UTF-8.

    Raises
    ------
    ReportEncodingError
        If ``data`` is not valid UTF-8.
    """

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ReportEncodingError(str(exc)) from exc


def _extract_table(raw: RawReport, grammar: OutputGrammar) -> MetricTable:
    lines = tokenize(raw, grammar)
    rows = [extract_row(line, grammar) for line in lines]
    data = assemble_matrix([r.values for r in rows], grammar.numeric_fields)
    return MetricTable(data=data, functions=[r.function for r in rows])


def parse_cachegrind(
    text: str,
    *,
    limit: int | str | None = None,
    sort_key: SortKey | str = SortKey.NONE,
    grammar: OutputGrammar | None = None,
) -> CacheMetrics:
    """Parse ``cg_annotate`` output into a ranked, truncated report.

    Parameters
    ----------
    text : str
        Annotate output.
    limit : int, str or None, optional
        Maximum number of function rows to keep; ``None`` or ``'all'`` keeps all.
    sort_key : SortKey or str, optional
        Column to rank by; ``'none'`` keeps the order of the report.
    grammar : OutputGrammar, optional
        Layout override; defaults to the classic cachegrind grammar.

    Raises
    ------
    ProfError
        ``InvalidSortKeyError`` or ``InvalidRowLimitError`` before any input is
        read, then ``OutOfMemoryError``, ``MalformedMetricLineError`` or
        ``MisalignedDataError``.
    """

    key = parse_sort_key(sort_key)
    limit = parse_row_limit(limit)
    g = grammar or get_grammar(MetricSource.CACHEGRIND)
    table = _extract_table(RawReport(text=text, source=MetricSource.CACHEGRIND), g)
    table = rank(table, key)
    totals = compute_totals(table, CACHEGRIND_COLUMNS)
    table = truncate(table, limit)
    logger.debug("cachegrind: %d functions shown, Ir total %.0f", table.n_rows, totals["ir"])
    return CacheMetrics(totals=totals, table=table)


def parse_callgrind(
    text: str,
    *,
    limit: int | str | None = None,
    grammar: OutputGrammar | None = None,
) -> CallMetrics:
    """Parse ``callgrind_annotate`` output into a ranked, truncated report.

    Rows are ranked by instruction count so that truncation keeps the most
    expensive functions.
    """

    limit = parse_row_limit(limit)
    g = grammar or get_grammar(MetricSource.CALLGRIND)
    table = _extract_table(RawReport(text=text, source=MetricSource.CALLGRIND), g)
    table = rank(table, SortKey.IR)
    totals = compute_totals(table, CALLGRIND_COLUMNS)
    table = truncate(table, limit)
    logger.debug("callgrind: %d functions shown, %.0f instructions total", table.n_rows, totals[0])
    return CallMetrics(totals=totals, table=table)


def build_report(
    raw: RawReport,
    *,
    limit: int | str | None = None,
    sort_key: SortKey | str = SortKey.NONE,
    grammar: OutputGrammar | None = None,
) -> ParseOutcome:
    """Run the pipeline for ``raw`` and return its outcome.

    Classified failures are returned, not raised; the first failing stage
    stops the pipeline.
    """

    try:
        if raw.source is MetricSource.CACHEGRIND:
            report = parse_cachegrind(raw.text, limit=limit, sort_key=sort_key, grammar=grammar)
        else:
            report = parse_callgrind(raw.text, limit=limit, grammar=grammar)
    except ProfError as exc:
        logger.debug("%s report rejected: %s", raw.source.value, exc)
        return ParseOutcome.failure(exc)
    return ParseOutcome.success(report)
