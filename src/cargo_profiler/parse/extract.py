"""Row extractor: turn one data line into metrics plus a function name.

Functions
---------
parse_metric
    Parse a thousands-separated metric token as a float.
clean_identifier
    Strip compiler decoration and the trailing disambiguation suffix.
extract_row
    Split a :class:`DataLine` into an :class:`ExtractedRow`.
"""

from __future__ import annotations

import re

from cargo_profiler.data.models import DataLine, ExtractedRow
from cargo_profiler.errors import MalformedMetricLineError
from cargo_profiler.parse.grammar import OutputGrammar

# Plain decimal counts; float() on its own also accepts tokens like "inf" or "1_000".
_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def parse_metric(token: str, grammar: OutputGrammar, *, line: str | None = None, ordinal: int | None = None) -> float:
    """Return ``token`` as a float after removing thousands separators.

    Raises
    ------
    MalformedMetricLineError
        If the cleaned token is not a number. The token is never skipped.

    Examples
    --------
    >>> from cargo_profiler.parse.grammar import get_grammar
    >>> parse_metric('1,234,567', get_grammar('cachegrind'))
    1234567.0
    """

    cleaned = token.strip()
    for sep in grammar.thousands_separators:
        cleaned = cleaned.replace(sep, "")
    if _NUMBER.fullmatch(cleaned) is None:
        raise MalformedMetricLineError(line if line is not None else token, token, ordinal)
    return float(cleaned)


def clean_identifier(name: str, grammar: OutputGrammar) -> str:
    """Return a readable function name.

    Decoration such as ``$LT$`` or ``$u20$`` is removed, then the name is cut
    at the first ``grammar.suffix_marker`` so hashed or duplicated symbols
    collapse to one base name.

    Examples
    --------
    >>> from cargo_profiler.parse.grammar import get_grammar
    >>> clean_identifier('main.rs:fib::h8f2c1e0d', get_grammar('cachegrind'))
    'main.rs:fib'
    """

    cleaned = grammar.decoration.sub("", name)
    if grammar.suffix_marker:
        idx = cleaned.find(grammar.suffix_marker)
        if idx >= 0:
            cleaned = cleaned[:idx]
    return cleaned.strip()


def extract_row(line: DataLine, grammar: OutputGrammar) -> ExtractedRow:
    """Split a data line into its metric values and function name.

    The first ``grammar.numeric_fields`` tokens are metrics. The identifier
    region starts where the next token first occurs in the line; its last
    ``/``-separated segment is the raw function name.

    Raises
    ------
    MalformedMetricLineError
        If a metric does not parse or the line has no identifier after the
        metrics.
    """

    text = line.text
    tokens = [t.strip() for t in text.strip().split(grammar.separator)]
    tokens = [t for t in tokens if t]
    n = grammar.numeric_fields
    if len(tokens) <= n:
        missing = tokens[-1] if tokens else ""
        raise MalformedMetricLineError(text, missing, line.ordinal)

    values = tuple(parse_metric(tok, grammar, line=text, ordinal=line.ordinal) for tok in tokens[:n])

    region = text[text.find(tokens[n]):].strip()
    if grammar.identifier_first_word:
        region = region.split()[0]
    raw_name = region.split("/")[-1]
    return ExtractedRow(values=values, function=clean_identifier(raw_name, grammar))
