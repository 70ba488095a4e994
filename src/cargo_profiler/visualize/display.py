"""Terminal rendering for parsed profiler reports.

The numeric rules (thousands grouping, per-row shares of the report totals,
severity tiers for callgrind percentages) live here; ANSI colouring is a thin
layer that can be switched off.
"""

from __future__ import annotations

import math
from enum import Enum

from cargo_profiler.data.models import CacheMetrics, CallMetrics, ProfilerReport

DASHES = "-" * 71

_GREEN = "\x1b[32m"
_YELLOW = "\x1b[33m"
_RED = "\x1b[31m"
_CYAN = "\x1b[1;36m"
_RESET = "\x1b[0m"

CACHEGRIND_HEADERS: tuple[str, ...] = ("Ir", "I1mr", "ILmr", "Dr", "D1mr", "DLmr", "Dw", "D1mw", "DLmw")
CACHEGRIND_TITLES: tuple[str, ...] = (
    "Total Instructions",
    "Total I1 Read Misses",
    "Total LL Instruction Read Misses",
    "Total Data Reads",
    "Total D1 Read Misses",
    "Total LL Data Read Misses",
    "Total Data Writes",
    "Total D1 Write Misses",
    "Total LL Data Write Misses",
)


class Severity(str, Enum):
    """Presentation tier of a function's share of total instructions."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_SEVERITY_COLOR = {Severity.HIGH: _RED, Severity.MEDIUM: _YELLOW, Severity.LOW: _GREEN}


def fmt_thousands_sep(n: float, sep: str = ",") -> str:
    """Format the integer part of ``n`` with ``sep`` every three digits.

    The leading group is not padded; every later group has exactly three
    digits.

    Examples
    --------
    >>> fmt_thousands_sep(1234567)
    '1,234,567'
    >>> fmt_thousands_sep(999)
    '999'
    >>> fmt_thousands_sep(1000000, sep='.')
    '1.000.000'
    """

    if isinstance(n, float) and not math.isfinite(n):
        return str(n)
    value = int(n)
    sign = "-" if value < 0 else ""
    value = abs(value)
    groups: list[str] = []
    while value >= 1000:
        value, rem = divmod(value, 1000)
        groups.append(f"{rem:03d}")
    groups.append(str(value))
    return sign + sep.join(reversed(groups))


def classify_severity(percent: float) -> Severity:
    """Map a percentage of total instructions to a severity tier.

    ``>= 50`` is HIGH, ``>= 30`` is MEDIUM, anything else (including NaN) is LOW.
    """

    if percent >= 50.0:
        return Severity.HIGH
    if percent >= 30.0:
        return Severity.MEDIUM
    return Severity.LOW


def share(value: float, total: float) -> float:
    """Return ``value / total``; 0.0 when the total is zero."""

    if total == 0.0:
        return 0.0
    return value / total


def _paint(text: str, code: str, color: bool) -> str:
    if not color:
        return text
    return f"{code}{text}{_RESET}"


def render_cachegrind(report: CacheMetrics, color: bool = True) -> list[str]:
    """Render a cachegrind report as display lines."""

    totals = report.totals.values
    lines: list[str] = [""]
    lines.append(f"{_paint(CACHEGRIND_TITLES[0], _GREEN, color)}...{fmt_thousands_sep(totals[0])}")
    lines.append("")
    pairs = [
        f"{_paint(title, _GREEN, color)}...{fmt_thousands_sep(total)}"
        for title, total in zip(CACHEGRIND_TITLES[1:], totals[1:])
    ]
    for i in range(0, len(pairs), 2):
        lines.append("\t".join(pairs[i:i + 2]))
    lines.append("")
    lines.append("")
    lines.append(" ".join(_paint(f"{h:>6}", _CYAN, color) for h in CACHEGRIND_HEADERS) + " function")
    for values, func in report.table.rows():
        ratios = " ".join(f"{share(v, t):>6.2f}" for v, t in zip(values, totals))
        lines.append(f"{ratios} {func}")
        lines.append(DASHES)
    return lines


def render_callgrind(report: CallMetrics, color: bool = True) -> list[str]:
    """Render a callgrind report as display lines."""

    total = report.total_instructions
    lines: list[str] = [""]
    lines.append(f"{_paint('Total Instructions', _GREEN, color)}...{fmt_thousands_sep(total)}")
    lines.append("")
    for count, func in zip(report.instructions, report.functions):
        pct = share(count, total) * 100.0
        tier = classify_severity(pct)
        lines.append(f"{fmt_thousands_sep(count)} ({_paint(f'{pct:.1f}%', _SEVERITY_COLOR[tier], color)}) {func}")
        lines.append(DASHES)
    return lines


def render_report(report: ProfilerReport, color: bool = True) -> list[str]:
    """Render either report variant as display lines."""

    if isinstance(report, CacheMetrics):
        return render_cachegrind(report, color=color)
    if isinstance(report, CallMetrics):
        return render_callgrind(report, color=color)
    raise TypeError(f"unsupported report type: {type(report).__name__}")


def render_banner(binary_name: str, tool: str, color: bool = True) -> str:
    """Return the 'Profiling <binary> with <tool>...' line."""

    return f"\nProfiling {_paint(binary_name, _CYAN, color)} with {_paint(tool, _CYAN, color)}..."


__all__ = [
    "DASHES",
    "CACHEGRIND_HEADERS",
    "CACHEGRIND_TITLES",
    "Severity",
    "classify_severity",
    "fmt_thousands_sep",
    "render_banner",
    "render_cachegrind",
    "render_callgrind",
    "render_report",
    "share",
]
