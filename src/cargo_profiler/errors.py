"""Error taxonomy for cargo-profiler.

Every failure the user can see derives from :class:`ProfError`. Parsing stages
raise these; the pipeline boundary (:func:`cargo_profiler.parse.pipeline.build_report`)
and the runner convert them into a :class:`~cargo_profiler.data.models.ParseOutcome`
so callers receive a single classified error instead of a traceback.

Classes
-------
ProfError
    Base class carrying a short user-facing ``hint``.
ToolInvocationError
    An external process could not be spawned or exited abnormally.
OutOfMemoryError
    Valgrind reported that it (or the profiled program) ran out of memory.
MalformedMetricLineError
    A line passed the structural filter but a metric field did not parse.
MisalignedDataError
    Extracted rows could not be stacked into a rectangular table.
InvalidSortKeyError, InvalidRowLimitError
    Configuration values rejected before the pipeline runs.
ReportEncodingError
    The tool output was not valid UTF-8.
InvalidBinaryError, CompilationError, ManifestError
    Binary discovery and cargo build failures.
"""

from __future__ import annotations


class ProfError(RuntimeError):
    """Base class for all classified cargo-profiler failures."""

    hint: str = ""

    def describe(self) -> str:
        """Return the message followed by the hint, if any."""

        msg = str(self)
        if self.hint:
            return f"{msg}\n{self.hint}"
        return msg


class ToolInvocationError(ProfError):
    """Raised when a profiling tool cannot be spawned or exits abnormally."""

    hint = "Check that valgrind is installed and that the binary runs on its own."

    def __init__(self, argv: list[str] | tuple[str, ...], detail: str) -> None:
        self.argv = list(argv)
        self.detail = detail
        super().__init__(f"failed to run {self.argv[0] if self.argv else '<empty>'}: {detail}")


class OutOfMemoryError(ProfError):
    """Raised when the Valgrind out-of-memory banner is found in tool output."""

    hint = "The profiled program or valgrind itself ran out of memory; try a smaller workload."

    def __init__(self, banner: str) -> None:
        self.banner = banner
        super().__init__(f"valgrind ran out of memory: {banner.strip()}")


class MalformedMetricLineError(ProfError):
    """Raised when a candidate data line holds a metric that does not parse."""

    hint = "This is a bug in cargo-profiler's output parser. Please file a bug report including the line above."

    def __init__(self, line: str, token: str, ordinal: int | None = None) -> None:
        self.line = line
        self.token = token
        self.ordinal = ordinal
        where = f" (data line {ordinal})" if ordinal is not None else ""
        super().__init__(f"could not parse metric {token!r}{where}: {line.strip()!r}")


class MisalignedDataError(ProfError):
    """Raised when extracted metric rows have inconsistent widths."""

    hint = "This is a bug in cargo-profiler's output parser. Please file a bug report."

    def __init__(self, expected: int, found: int, row: int) -> None:
        self.expected = expected
        self.found = found
        self.row = row
        super().__init__(f"misaligned data: row {row} has {found} metrics, expected {expected}")


class InvalidSortKeyError(ProfError):
    """Raised for a sort key outside the fixed set of column names."""

    hint = "Valid sort keys: ir, i1mr, ilmr, dr, d1mr, dlmr, dw, d1mw, dlmw, none."

    def __init__(self, value: object, reason: str | None = None) -> None:
        self.value = value
        super().__init__(reason or f"invalid sort key: {value!r}")


class InvalidRowLimitError(ProfError):
    """Raised for a row limit that is not a non-negative integer."""

    hint = "Pass a non-negative integer to -n, or 'all' for every function."

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"invalid number of functions: {value!r}")


class ReportEncodingError(ProfError):
    """Raised when profiler output cannot be decoded as UTF-8."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"profiler output is not valid UTF-8: {detail}")


class InvalidBinaryError(ProfError):
    """Raised when the binary to profile does not exist."""

    hint = "Pass an existing executable with --bin, or run inside a cargo package."

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"binary does not exist: {path}")


class ManifestError(ProfError):
    """Raised when the cargo manifest cannot be read or has no package name."""

    hint = "Run cargo-profiler from inside a cargo package directory."


class CompilationError(ProfError):
    """Raised when ``cargo build`` does not produce the expected binary."""

    hint = "Fix the build errors above and try again."

    def __init__(self, package: str, stderr: str) -> None:
        self.package = package
        self.stderr = stderr
        super().__init__(f"failed to compile {package}:\n{stderr.rstrip()}")


__all__ = [
    "ProfError",
    "ToolInvocationError",
    "OutOfMemoryError",
    "MalformedMetricLineError",
    "MisalignedDataError",
    "InvalidSortKeyError",
    "InvalidRowLimitError",
    "ReportEncodingError",
    "InvalidBinaryError",
    "ManifestError",
    "CompilationError",
]
