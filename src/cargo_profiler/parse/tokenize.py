"""Report tokenizer: split annotate output into candidate data lines."""

from __future__ import annotations

import logging

from cargo_profiler.data.models import DataLine, RawReport
from cargo_profiler.errors import OutOfMemoryError
from cargo_profiler.parse.grammar import OutputGrammar, get_grammar

logger = logging.getLogger(__name__)


def detect_failure(text: str, grammar: OutputGrammar) -> None:
    """Raise :class:`OutOfMemoryError` if the failure banner occurs anywhere in ``text``."""

    for line in text.splitlines():
        if grammar.error_banner.search(line):
            raise OutOfMemoryError(line)


def tokenize(raw: RawReport, grammar: OutputGrammar | None = None) -> list[DataLine]:
    """Return the lines of ``raw`` that look like metric rows.

    The failure banner check runs first and wins over any data present. Lines
    that do not match ``grammar.data_line`` (headers, rulers, blank lines,
    ``PROGRAM TOTALS``) are dropped without error; lines that match but later
    fail to parse are reported by the extractor.

    Parameters
    ----------
    raw : RawReport
        Annotate output and its source tag.
    grammar : OutputGrammar, optional
        Layout to apply; defaults to the classic grammar of ``raw.source``.

    Returns
    -------
    list of DataLine
        Kept lines, numbered from 0 in input order.
    """

    g = grammar or get_grammar(raw.source)
    detect_failure(raw.text, g)
    kept = [line for line in raw.text.splitlines() if g.data_line.match(line)]
    logger.debug("tokenize(%s): kept %d candidate lines", raw.source.value, len(kept))
    return [DataLine(i, line) for i, line in enumerate(kept)]
