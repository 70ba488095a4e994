"""Profiling runner.

Runs one profiling request end to end: resolve (or build) the binary, run it
under cachegrind or callgrind inside an artifacts directory, check Valgrind's
own log for the out-of-memory banner, run the annotate tool, and hand its
output to the parsing pipeline.

Every classified failure is returned inside a
:class:`~cargo_profiler.data.models.ParseOutcome`; the runner never exits the
process.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from omegaconf import DictConfig, OmegaConf  # type: ignore[import-untyped]

from cargo_profiler.contracts.models import ProfileRequest
from cargo_profiler.data.models import MetricSource, ParseOutcome, RawReport
from cargo_profiler.errors import InvalidBinaryError, ProfError, ToolInvocationError
from cargo_profiler.parse.grammar import OutputGrammar, grammar_from_config
from cargo_profiler.parse.pipeline import build_report, decode_output
from cargo_profiler.parse.tokenize import detect_failure
from cargo_profiler.profiling.artifacts import Artifacts, new_run_id, write_config_yaml
from cargo_profiler.profiling.vendor.cargo import build_binary
from cargo_profiler.profiling.vendor.launch import run_tool
from cargo_profiler.profiling.vendor.valgrind import build_profile_cmds
from cargo_profiler.utils.config import add_file_handler, load_config
from cargo_profiler.utils.paths import resolve_path


class ProfileRunner:
    """Orchestrates tool invocation and parsing for a :class:`ProfileRequest`.

    Attributes
    ----------
    m_cfg : omegaconf.DictConfig
        Merged configuration (see :func:`cargo_profiler.utils.config.load_config`).
    m_logger : logging.Logger
        Module logger.
    m_binary : str or None
        Binary profiled by the last :meth:`run`, once resolved.
    """

    def __init__(self, cfg: Optional[DictConfig] = None) -> None:
        self.m_cfg: DictConfig = cfg if cfg is not None else load_config()
        self.m_logger = logging.getLogger(__name__)
        self.m_binary: Optional[str] = None

    @property
    def binary(self) -> Optional[str]:
        """Binary resolved by the last run (read-only)."""

        return self.m_binary

    def grammar(self, source: MetricSource) -> OutputGrammar:
        """Return the output grammar configured for ``source``."""

        parse_cfg = OmegaConf.to_container(self.m_cfg.parse, resolve=True)
        return grammar_from_config(source, parse_cfg)  # type: ignore[arg-type]

    def resolve_binary(self, request: ProfileRequest) -> str:
        """Return the binary to profile, building the cargo package if none was given.

        Raises
        ------
        InvalidBinaryError
            If an explicit binary does not exist.
        """

        if request.binary:
            if not Path(request.binary).exists():
                raise InvalidBinaryError(request.binary)
            return request.binary
        return build_binary(request.release, cargo=str(self.m_cfg.cargo.executable))

    def _open_artifacts(self, request: ProfileRequest) -> Artifacts:
        if not request.keep:
            return Artifacts.temporary()
        base = resolve_path(self.m_cfg.artifacts.get("root"), Path.cwd()) or str(Path.cwd() / "target" / "profiler")
        artifacts = Artifacts.from_root(Path(base) / new_run_id())
        write_config_yaml(artifacts.path("config.yaml"), self.m_cfg)
        return artifacts

    def collect(self, request: ProfileRequest) -> str:
        """Run the profiler and annotate tool; return the annotate output text.

        Raises
        ------
        ProfError
            Binary, build, invocation, out-of-memory or encoding failures.
        """

        binary = self.resolve_binary(request)
        self.m_binary = binary
        vg = self.m_cfg.valgrind
        out_name = vg.cachegrind_out if request.profiler is MetricSource.CACHEGRIND else vg.callgrind_out
        artifacts = self._open_artifacts(request)
        file_handler: Optional[logging.Handler] = None
        pkg_logger = logging.getLogger("cargo_profiler")
        prev_level = pkg_logger.level
        if artifacts.keep:
            file_handler = add_file_handler(artifacts.path("cargo_profiler.log"))
        try:
            out_file = artifacts.path(str(out_name))
            profile_cmd, annotate_cmd = build_profile_cmds(
                request.profiler,
                out_file,
                binary,
                request.bin_args,
                tools=OmegaConf.to_container(vg, resolve=True),  # type: ignore[arg-type]
            )
            prof = run_tool(profile_cmd, check=False)
            detect_failure(prof.stderr_text, self.grammar(request.profiler))
            if not out_file.exists():
                raise ToolInvocationError(
                    profile_cmd,
                    f"exit status {prof.returncode}, no profile data written\n{prof.stderr_text.strip()}",
                )
            annotated = run_tool(annotate_cmd)
            if artifacts.keep:
                artifacts.path("annotate.txt").write_bytes(annotated.stdout)
                self.m_logger.info("Kept profiler output in %s", artifacts.root)
            return decode_output(annotated.stdout)
        finally:
            if file_handler is not None:
                pkg_logger.removeHandler(file_handler)
                file_handler.close()
                pkg_logger.setLevel(prev_level)
            artifacts.cleanup()

    def parse_text(self, text: str, request: ProfileRequest) -> ParseOutcome:
        """Run the parsing pipeline over annotate output."""

        raw = RawReport(text=text, source=request.profiler)
        return build_report(
            raw,
            limit=request.limit,
            sort_key=request.sort_key,
            grammar=self.grammar(request.profiler),
        )

    def run(self, request: ProfileRequest) -> ParseOutcome:
        """Execute ``request`` and return the parsed report or the classified error.

        With ``request.report_file`` set, the saved annotate output is parsed
        and no tool is run.
        """

        try:
            if request.report_file:
                self.m_logger.info("Parsing saved report %s", request.report_file)
                text = decode_output(Path(request.report_file).read_bytes())
            else:
                text = self.collect(request)
        except ProfError as exc:
            self.m_logger.debug("Run failed: %s", exc)
            return ParseOutcome.failure(exc)
        return self.parse_text(text, request)
