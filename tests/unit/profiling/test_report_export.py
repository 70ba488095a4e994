from __future__ import annotations

import json
from pathlib import Path

from cargo_profiler.parse.pipeline import parse_cachegrind, parse_callgrind
from cargo_profiler.profiling.export import write_report_json, write_report_markdown

DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def test_write_cachegrind_markdown(tmp_path: Path) -> None:
    report = parse_cachegrind((DATA_DIR / "cg_annotate_classic.txt").read_text(encoding="utf-8"), sort_key="ir")
    out_md = tmp_path / "cache.md"
    written = write_report_markdown(report, str(out_md), binary="demo")
    # mdutils appends .md; the helper strips the suffix if present
    assert written == out_md
    text = out_md.read_text(encoding="utf-8")
    assert "Cachegrind Report" in text
    assert "Binary: demo" in text
    assert "1,500,000" in text
    assert "mod.rs:core" in text
    assert "0.60" in text


def test_write_callgrind_markdown_severity(tmp_path: Path) -> None:
    report = parse_callgrind((DATA_DIR / "callgrind_annotate_classic.txt").read_text(encoding="utf-8"))
    out = write_report_markdown(report, tmp_path / "calls")
    text = out.read_text(encoding="utf-8")
    assert out.name == "calls.md"
    assert "50.0%" in text and "high" in text
    assert "30.0%" in text and "medium" in text


def test_write_markdown_without_rows(tmp_path: Path) -> None:
    out = write_report_markdown(parse_callgrind(""), tmp_path / "empty.md")
    assert "No function rows" in out.read_text(encoding="utf-8")


def test_write_report_json(tmp_path: Path) -> None:
    report = parse_callgrind((DATA_DIR / "callgrind_annotate_classic.txt").read_text(encoding="utf-8"), limit=1)
    out = write_report_json(report, tmp_path / "nested" / "report.json")
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["profiler"] == "callgrind"
    assert data["totals"]["ir"] == 10_000_000.0
    assert len(data["functions"]) == 1
    assert data["functions"][0]["shares"]["ir"] == 0.5
