from __future__ import annotations

import json
from pathlib import Path

import pytest

from cargo_profiler.runners.profiler_main import main

DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def test_callgrind_report_file(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["profiler", "callgrind", "--report-file", str(DATA_DIR / "callgrind_annotate_classic.txt"), "--no-color"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Profiling callgrind_annotate_classic.txt with callgrind..." in out
    assert "Total Instructions...10,000,000" in out
    assert "5,000,000 (50.0%) ???:demo" in out
    assert "\x1b[" not in out


def test_cachegrind_sort_limit_and_exports(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    js = tmp_path / "r.json"
    md = tmp_path / "r.md"
    rc = main(
        [
            "cachegrind",
            "--report-file",
            str(DATA_DIR / "cg_annotate_classic.txt"),
            "--sort",
            "dlmw",
            "-n",
            "1",
            "--json",
            str(js),
            "--markdown",
            str(md),
            "--no-color",
        ]
    )
    out = capsys.readouterr().out
    assert rc == 0
    assert out.rstrip().endswith("-" * 71)
    assert " mod.rs:core" in out
    assert "???:demo" not in out
    data = json.loads(js.read_text(encoding="utf-8"))
    assert [f["function"] for f in data["functions"]] == ["mod.rs:core"]
    assert md.exists()


def test_invalid_sort_key_exits_with_error(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["cachegrind", "--report-file", str(DATA_DIR / "cg_annotate_classic.txt"), "--sort", "llmr"])
    err = capsys.readouterr().err
    assert rc == 1
    assert "invalid sort key" in err
    assert "Valid sort keys" in err


def test_invalid_row_limit(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["callgrind", "--report-file", str(DATA_DIR / "callgrind_annotate_classic.txt"), "-n", "-2"])
    assert rc == 1
    assert "invalid number of functions" in capsys.readouterr().err


def test_config_override_sets_defaults(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(
        [
            "callgrind",
            "--report-file",
            str(DATA_DIR / "callgrind_annotate_classic.txt"),
            "--set",
            "report.limit=2",
            "--set",
            "report.color=false",
        ]
    )
    out = capsys.readouterr().out
    assert rc == 0
    assert out.count("-" * 71) == 2


def test_out_of_memory_report(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["callgrind", "--report-file", str(DATA_DIR / "oom_banner.txt"), "--no-color"])
    assert rc == 1
    assert "out of memory" in capsys.readouterr().err


def test_missing_report_file(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    rc = main(["callgrind", "--report-file", str(tmp_path / "none.txt")])
    assert rc == 1
    assert "report file not found" in capsys.readouterr().err


def test_callgrind_has_no_sort_flag() -> None:
    with pytest.raises(SystemExit):
        main(["callgrind", "--sort", "ir"])


def test_unknown_grammar_version(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(
        [
            "callgrind",
            "--report-file",
            str(DATA_DIR / "callgrind_annotate_classic.txt"),
            "--set",
            "parse.grammar=vnext",
        ]
    )
    assert rc == 1
    assert "no callgrind grammar named 'vnext'" in capsys.readouterr().err


def test_broken_interpolation_in_override(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(
        [
            "callgrind",
            "--report-file",
            str(DATA_DIR / "callgrind_annotate_classic.txt"),
            "--set",
            "report.limit=${oops",
        ]
    )
    captured = capsys.readouterr()
    assert rc == 1
    assert captured.err.startswith("error: ")
    assert captured.out == ""


def test_pipeline_error_is_described(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    report = tmp_path / "bad.txt"
    report.write_text("1x2  ???:demo::main [/tmp/demo]\n", encoding="utf-8")
    rc = main(["callgrind", "--report-file", str(report), "--no-color"])
    assert rc == 1
    assert "bug report" in capsys.readouterr().err
