"""Path utilities.

Helpers to locate cargo build output and to name binaries for display.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

MAX_ANCESTORS = 10


def find_target(start: Optional[Path | str] = None, max_ancestors: int = MAX_ANCESTORS) -> Optional[Path]:
    """
    Return the closest ancestor directory that contains a ``target`` directory.

    Parameters
    ----------
    start : pathlib.Path or str, optional
        Directory to start from; defaults to the current working directory.
    max_ancestors : int, optional
        Maximum number of directories to inspect, starting with ``start``.

    Returns
    -------
    pathlib.Path or None
        The directory holding ``target/``, or ``None`` if none was found
        within ``max_ancestors`` levels.
    """

    here = Path(start).resolve() if start is not None else Path.cwd().resolve()
    for i, parent in enumerate((here, *here.parents)):
        if i >= max_ancestors:
            break
        if (parent / "target").is_dir():
            return parent
    return None


def binary_name(binary: str) -> str:
    """Return the last path component of ``binary`` for display."""

    return Path(binary).name or binary


def resolve_path(value: Optional[str], cwd: Path) -> Optional[str]:
    """
    Return an absolute path string for a config-provided path.

    ``None`` and empty/whitespace-only strings (or ``'null'``) yield ``None``.
    """

    if value is None:
        return None
    s = str(value).strip()
    if not s or s.lower() == "null":
        return None
    p = Path(s)
    if p.is_absolute():
        return str(p.resolve())
    return str((Path(cwd) / p).resolve())
