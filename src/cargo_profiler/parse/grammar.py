"""Versioned output grammars for the Valgrind annotate tools.

The annotate tools print free-form text whose layout has changed between
Valgrind releases. Everything the tokenizer and the row extractor assume about
that layout is collected in one :class:`OutputGrammar` per metric source and
grammar version, so a new layout is a new registry entry (or a config override)
rather than an edit to the parsing code.

Functions
---------
get_grammar
    Look up a registered grammar by source and version.
grammar_from_config
    Apply pattern overrides from an OmegaConf ``parse`` node.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

import attrs
from attrs import define, field
from attrs.validators import instance_of

from cargo_profiler.data.models import MetricSource

# A data line starts with a number and, somewhere after a digit run, shows a
# path separator or the "???" placeholder used for unknown files.
CLASSIC_DATA_LINE = r"^(?=\s*\d).*?(?:\d\s*[a-zA-Z]*\$*_*:*/+|\d\s*[a-zA-Z]*\$*_*\?+)"
CLASSIC_ERROR_BANNER = r"Valgrind's memory management: out of memory"
CLASSIC_DECORATION = r"\$\w{2}\$|\$\w{3}\$"


def _compile(value: str | re.Pattern[str]) -> re.Pattern[str]:
    if isinstance(value, re.Pattern):
        return value
    return re.compile(value)


@define(frozen=True, kw_only=True)
class OutputGrammar:
    """Layout assumptions for one annotate tool output format.

    Attributes
    ----------
    source : MetricSource
        Tool the grammar applies to.
    version : str
        Registry name of the layout (``'classic'`` for pre-3.21 annotate output).
    data_line : re.Pattern
        Structural filter; a line is a data candidate when it matches.
    error_banner : re.Pattern
        Failure banner searched for before any line filtering.
    decoration : re.Pattern
        Compiler decoration removed from identifiers.
    separator : str
        Field delimiter; callgrind columns are separated by two spaces.
    numeric_fields : int
        Number of leading metric fields per data line.
    thousands_separators : str
        Characters stripped from metric tokens before parsing.
    suffix_marker : str
        Identifiers are cut at the first occurrence of this marker.
    identifier_first_word : bool
        Keep only the first word of the identifier region (callgrind appends
        ``[object]`` after the function).
    """

    source: MetricSource = field(converter=MetricSource)
    version: str = field(validator=[instance_of(str)])
    data_line: re.Pattern[str] = field(converter=_compile)
    error_banner: re.Pattern[str] = field(converter=_compile)
    decoration: re.Pattern[str] = field(converter=_compile)
    separator: str = field(validator=[instance_of(str)])
    numeric_fields: int = field(validator=[instance_of(int)])
    thousands_separators: str = field(default=",", validator=[instance_of(str)])
    suffix_marker: str = field(default="::", validator=[instance_of(str)])
    identifier_first_word: bool = field(default=False, validator=[instance_of(bool)])

    @numeric_fields.validator
    def _check_numeric_fields(self, attribute: attrs.Attribute, value: int) -> None:
        if value < 1:
            raise ValueError(f"{attribute.name} must be positive, got {value!r}")

    @separator.validator
    def _check_separator(self, attribute: attrs.Attribute, value: str) -> None:
        if not value:
            raise ValueError(f"{attribute.name} must not be empty")


_REGISTRY: dict[tuple[MetricSource, str], OutputGrammar] = {
    (MetricSource.CACHEGRIND, "classic"): OutputGrammar(
        source=MetricSource.CACHEGRIND,
        version="classic",
        data_line=CLASSIC_DATA_LINE,
        error_banner=CLASSIC_ERROR_BANNER,
        decoration=CLASSIC_DECORATION,
        separator=" ",
        numeric_fields=9,
    ),
    (MetricSource.CALLGRIND, "classic"): OutputGrammar(
        source=MetricSource.CALLGRIND,
        version="classic",
        data_line=CLASSIC_DATA_LINE,
        error_banner=CLASSIC_ERROR_BANNER,
        decoration=CLASSIC_DECORATION,
        separator="  ",
        numeric_fields=1,
        identifier_first_word=True,
    ),
}

_OVERRIDABLE = ("data_line", "error_banner", "decoration", "separator", "thousands_separators", "suffix_marker")


def available_versions(source: MetricSource | str) -> list[str]:
    """Return registered grammar versions for ``source``."""

    src = MetricSource(source)
    return sorted(v for (s, v) in _REGISTRY if s is src)


def get_grammar(source: MetricSource | str, version: str = "classic") -> OutputGrammar:
    """Return the registered grammar for ``source`` and ``version``.

    Raises
    ------
    KeyError
        If no grammar is registered under that name.
    """

    src = MetricSource(source)
    try:
        return _REGISTRY[(src, version)]
    except KeyError:
        raise KeyError(
            f"no {src.value} grammar named {version!r}; available: {', '.join(available_versions(src))}"
        ) from None


def grammar_from_config(source: MetricSource | str, parse_cfg: Mapping[str, Any] | None) -> OutputGrammar:
    """Resolve a grammar from the ``parse`` section of the configuration.

    ``parse_cfg.grammar`` selects the version and
    ``parse_cfg.patterns.<source>.<name>`` replaces individual patterns or
    delimiters of that version. Unknown override keys are rejected.

    Examples
    --------
    >>> g = grammar_from_config('callgrind', {'grammar': 'classic', 'patterns': {}})
    >>> g.separator
    '  '
    """

    src = MetricSource(source)
    cfg = parse_cfg or {}
    base = get_grammar(src, str(cfg.get("grammar") or "classic"))
    patterns = cfg.get("patterns") or {}
    overrides = patterns.get(src.value) or {}
    changes: dict[str, Any] = {}
    for key, value in dict(overrides).items():
        if key not in _OVERRIDABLE:
            raise KeyError(f"unknown grammar override {key!r} for {src.value}")
        if value is None:
            continue
        changes[key] = str(value)
    if not changes:
        return base
    return attrs.evolve(base, **changes)


__all__ = [
    "CLASSIC_DATA_LINE",
    "CLASSIC_ERROR_BANNER",
    "CLASSIC_DECORATION",
    "OutputGrammar",
    "available_versions",
    "get_grammar",
    "grammar_from_config",
]
