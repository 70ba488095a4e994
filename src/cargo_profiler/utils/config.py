"""Configuration loading and logging setup.

Defaults ship with the package (``cargo_profiler/conf/config.yaml``) and are
merged with an optional user YAML file and ``key=value`` dot-list overrides
using OmegaConf.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from omegaconf import DictConfig, OmegaConf  # type: ignore[import-untyped]

DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "conf" / "config.yaml"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_config(path: Optional[str | Path] = None, overrides: Sequence[str] = ()) -> DictConfig:
    """Return the merged configuration.

    Parameters
    ----------
    path : str or Path, optional
        User YAML file merged over the packaged defaults.
    overrides : sequence of str
        Dot-list overrides such as ``report.limit=20``; applied last.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ValueError
        If an override is not of the form ``key=value``.
    omegaconf.errors.OmegaConfBaseException
        If a value holds a broken interpolation such as ``${oops``.
    """

    cfg = OmegaConf.load(DEFAULT_CONFIG)
    if path is not None:
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"config file not found: {p}")
        cfg = OmegaConf.merge(cfg, OmegaConf.load(p))
    if overrides:
        for item in overrides:
            if "=" not in item:
                raise ValueError(f"Invalid override (expected key=value): {item!r}")
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))
    assert isinstance(cfg, DictConfig)
    # resolve now so a bad interpolation fails here, not at first access
    OmegaConf.resolve(cfg)
    return cfg


def configure_logging(level: str | int = "WARNING", log_file: Optional[Path] = None) -> None:
    """Install stderr (and optionally file) handlers on the package logger."""

    logging.captureWarnings(True)
    lvl = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(lvl, int):
        lvl = logging.WARNING
    fmt = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger("cargo_profiler")
    root_logger.setLevel(logging.DEBUG if log_file is not None else lvl)
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)
        h.close()
    sh = logging.StreamHandler()
    sh.setLevel(lvl)
    sh.setFormatter(fmt)
    root_logger.addHandler(sh)
    if log_file is not None:
        add_file_handler(log_file)


def add_file_handler(log_file: Path) -> logging.Handler:
    """Attach a DEBUG-level file handler to the package logger and return it."""

    pkg_logger = logging.getLogger("cargo_profiler")
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    pkg_logger.addHandler(fh)
    if pkg_logger.level > logging.DEBUG or pkg_logger.level == logging.NOTSET:
        pkg_logger.setLevel(logging.DEBUG)
    return fh
