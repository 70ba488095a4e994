"""Parsing of Valgrind annotate output into report models."""

from __future__ import annotations

from .grammar import OutputGrammar, get_grammar, grammar_from_config
from .pipeline import build_report, decode_output, parse_cachegrind, parse_callgrind

__all__ = [
    "OutputGrammar",
    "get_grammar",
    "grammar_from_config",
    "build_report",
    "decode_output",
    "parse_cachegrind",
    "parse_callgrind",
]
