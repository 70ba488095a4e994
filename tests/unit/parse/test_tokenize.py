from __future__ import annotations

from pathlib import Path

import pytest

from cargo_profiler.data.models import MetricSource, RawReport
from cargo_profiler.errors import OutOfMemoryError
from cargo_profiler.parse.grammar import get_grammar
from cargo_profiler.parse.tokenize import detect_failure, tokenize

DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def _raw(name: str, source: MetricSource) -> RawReport:
    return RawReport(text=(DATA_DIR / name).read_text(encoding="utf-8"), source=source)


def test_tokenize_keeps_only_function_rows_cachegrind() -> None:
    lines = tokenize(_raw("cg_annotate_classic.txt", MetricSource.CACHEGRIND))
    # headers, rulers, blank lines and PROGRAM TOTALS are dropped
    assert len(lines) == 3
    assert [ln.ordinal for ln in lines] == [0, 1, 2]
    assert "demo::fib" in lines[0].text
    assert all("PROGRAM TOTALS" not in ln.text for ln in lines)


def test_tokenize_keeps_only_function_rows_callgrind() -> None:
    lines = tokenize(_raw("callgrind_annotate_classic.txt", MetricSource.CALLGRIND))
    assert len(lines) == 4
    assert lines[1].text.startswith("3,000,000")


def test_single_number_row_with_unknown_file_is_kept() -> None:
    raw = RawReport(text="42  ???:demo::main [/tmp/demo]\nnot data\n", source="callgrind")
    lines = tokenize(raw)
    assert len(lines) == 1
    assert lines[0].text.startswith("42")


def test_lines_without_path_or_leading_number_are_dropped() -> None:
    text = "\n".join(
        [
            "Events shown:     Ir",
            "1,000  PROGRAM TOTALS",
            "--------------------------------------------------------------------------------",
            "",
            "file:function /src/lib.rs 1 2 3",
        ]
    )
    assert tokenize(RawReport(text=text, source="cachegrind")) == []


def test_out_of_memory_banner_wins_over_data() -> None:
    banner = (DATA_DIR / "oom_banner.txt").read_text(encoding="utf-8")
    data = (DATA_DIR / "cg_annotate_classic.txt").read_text(encoding="utf-8")
    with pytest.raises(OutOfMemoryError) as ei:
        tokenize(RawReport(text=data + banner, source="cachegrind"))
    assert "out of memory" in str(ei.value)


def test_detect_failure_is_silent_on_clean_output() -> None:
    text = (DATA_DIR / "callgrind_annotate_classic.txt").read_text(encoding="utf-8")
    detect_failure(text, get_grammar("callgrind"))
