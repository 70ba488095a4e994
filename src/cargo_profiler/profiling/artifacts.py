"""Artifacts management utilities.

This module provides a small manager for the per-run directory that holds the
Valgrind profile data files, plus helpers to write provenance files for kept
runs.

Classes
-------
Artifacts
    Manager class for a run directory with read-only property access and
    explicit setters/factories. Temporary runs are removed by ``cleanup()``.

Functions
---------
new_run_id
    Build a timestamp-based run identifier (YYYYMMDD-HHMMSS).
write_config_yaml
    Serialize an OmegaConf config to YAML.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Type, TypeVar

from omegaconf import OmegaConf  # type: ignore[import-untyped]

T = TypeVar("T", bound="Artifacts")


def new_run_id(dt: Optional[datetime] = None) -> str:
    """Return a timestamped run identifier.

    Examples
    --------
    >>> rid = new_run_id()
    >>> len(rid) == 15
    True
    """

    return (dt or datetime.now()).strftime("%Y%m%d-%H%M%S")


class Artifacts:
    """Run directory manager for profiler output files.

    The constructor takes no arguments; use :meth:`from_root` for a kept
    directory or :meth:`temporary` for a scratch directory that
    :meth:`cleanup` removes. Member variables are prefixed with ``m_`` and
    read-only access is provided via properties.
    """

    def __init__(self) -> None:
        self.m_root: Optional[Path] = None
        self.m_keep: bool = True

    @property
    def root(self) -> Path:
        """Artifacts root directory (read-only)."""

        if self.m_root is None:
            raise RuntimeError("Artifacts root not set. Use from_root() or temporary().")
        return self.m_root

    @property
    def keep(self) -> bool:
        """Whether ``cleanup()`` leaves the directory in place."""

        return self.m_keep

    def set_root(self, root: Path | str, keep: bool = True) -> None:
        """Set and create the artifacts root directory."""

        rp = Path(root).resolve()
        rp.mkdir(parents=True, exist_ok=True)
        self.m_root = rp
        self.m_keep = keep

    @classmethod
    def from_root(cls: Type[T], root: Path | str) -> T:
        """Factory for a kept run directory at ``root``."""

        obj = cls()
        obj.set_root(root, keep=True)
        return obj

    @classmethod
    def temporary(cls: Type[T], prefix: str = "cargo-profiler-") -> T:
        """Factory for a scratch directory removed by :meth:`cleanup`."""

        obj = cls()
        obj.set_root(tempfile.mkdtemp(prefix=prefix), keep=False)
        return obj

    def path(self, name: str) -> Path:
        """Return a path within the artifacts root."""

        return self.root / name

    def cleanup(self) -> None:
        """Remove the directory unless it is kept."""

        if self.m_root is None or self.m_keep:
            return
        shutil.rmtree(self.m_root, ignore_errors=True)
        logging.getLogger(__name__).debug("Removed artifacts dir %s", self.m_root)
        self.m_root = None


def write_config_yaml(path: Path, cfg: Any) -> None:
    """Serialize an OmegaConf config (or plain mapping) to YAML."""

    if not OmegaConf.is_config(cfg):
        cfg = OmegaConf.create(cfg)
    path.write_text(OmegaConf.to_yaml(cfg), encoding="utf-8")
