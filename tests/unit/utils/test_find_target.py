from __future__ import annotations

from pathlib import Path

from cargo_profiler.utils.paths import binary_name, find_target, resolve_path


def test_find_target_walks_up(tmp_path: Path) -> None:
    (tmp_path / "target").mkdir()
    nested = tmp_path / "src" / "bin" / "deep"
    nested.mkdir(parents=True)
    assert find_target(nested) == tmp_path.resolve()


def test_find_target_respects_ancestor_limit(tmp_path: Path) -> None:
    (tmp_path / "target").mkdir()
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)
    assert find_target(nested, max_ancestors=3) is None
    assert find_target(nested, max_ancestors=4) == tmp_path.resolve()


def test_binary_name() -> None:
    assert binary_name("/home/dev/demo/target/release/demo") == "demo"
    assert binary_name("demo") == "demo"


def test_resolve_path(tmp_path: Path) -> None:
    assert resolve_path(None, tmp_path) is None
    assert resolve_path("  ", tmp_path) is None
    assert resolve_path("null", tmp_path) is None
    assert resolve_path("out", tmp_path) == str((tmp_path / "out").resolve())
    assert resolve_path("/abs/dir", tmp_path) == str(Path("/abs/dir").resolve())
