"""Command-line entry point for cargo-profiler.

Usage mirrors the cargo subcommand form::

    cargo profiler callgrind --bin ./target/debug/demo -n 10
    cargo profiler cachegrind --release --sort dr -- --input data.txt

When invoked through cargo, the leading ``profiler`` argument is dropped.
Flags take precedence over the configuration file, which takes precedence over
the packaged defaults.
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Optional, Sequence

from omegaconf import DictConfig  # type: ignore[import-untyped]
from omegaconf.errors import OmegaConfBaseException  # type: ignore[import-untyped]

from cargo_profiler.contracts.models import ProfileRequest
from cargo_profiler.data.models import MetricSource, ProfilerReport
from cargo_profiler.errors import ProfError
from cargo_profiler.profiling.export import write_report_json, write_report_markdown
from cargo_profiler.runners.profile_runner import ProfileRunner
from cargo_profiler.utils.config import configure_logging, load_config
from cargo_profiler.utils.paths import binary_name
from cargo_profiler.visualize.display import render_banner, render_report


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--bin",
        dest="binary",
        type=str,
        default=None,
        help="Binary to profile (default: build the current cargo package).",
    )
    p.add_argument("--release", action="store_true", help="Build and profile the release binary.")
    p.add_argument("-n", dest="limit", type=str, default=None, help="Number of functions to show (integer or 'all').")
    p.add_argument("--keep", action="store_true", help="Keep the profiler output files under target/profiler/<run_id>.")
    p.add_argument(
        "--report-file", type=str, default=None, help="Parse saved annotate output instead of running valgrind."
    )
    p.add_argument("--json", dest="json_out", type=str, default=None, help="Also write the report summary as JSON.")
    p.add_argument("--markdown", dest="md_out", type=str, default=None, help="Also write the report as Markdown.")
    p.add_argument("--no-color", action="store_true", help="Disable ANSI colours.")
    p.add_argument("--config", type=str, default=None, help="YAML file merged over the defaults.")
    p.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=None,
        help="Config override in key=value form (e.g., valgrind.executable=/opt/vg/bin/valgrind). May be repeated.",
    )
    p.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (-vv for debug output).")
    p.add_argument("bin_args", nargs="*", help="Arguments passed to the profiled binary (after --).")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo-profiler", description="Profile Rust binaries with cachegrind or callgrind."
    )
    sub = parser.add_subparsers(dest="profiler", required=True)
    cg = sub.add_parser("callgrind", help="Instruction counts per function.")
    _add_common(cg)
    cache = sub.add_parser("cachegrind", help="Cache and instruction metrics per function.")
    _add_common(cache)
    cache.add_argument(
        "--sort",
        dest="sort_key",
        type=str,
        default=None,
        help="Metric to sort by: ir, i1mr, ilmr, dr, d1mr, dlmr, dw, d1mw, dlmw or none.",
    )
    return parser


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "profiler":
        args = args[1:]
    ns = _build_parser().parse_args(args)
    if ns.bin_args and ns.bin_args[0] == "--":
        ns.bin_args = ns.bin_args[1:]
    return ns


def _log_level(verbose: int, cfg: DictConfig) -> str:
    if verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return str(cfg.logging.level)


def _make_request(args: argparse.Namespace, cfg: DictConfig) -> ProfileRequest:
    limit = args.limit if args.limit is not None else cfg.report.get("limit")
    sort_key = getattr(args, "sort_key", None)
    if sort_key is None and args.profiler == "cachegrind":
        sort_key = cfg.report.get("sort")
    return ProfileRequest(
        profiler=args.profiler,
        binary=args.binary,
        bin_args=args.bin_args,
        release=bool(args.release),
        limit=limit,
        sort_key=sort_key,
        keep=bool(args.keep or cfg.artifacts.get("keep", False)),
        report_file=args.report_file,
    )


def _export(report: ProfilerReport, args: argparse.Namespace, name: str) -> None:
    if args.json_out:
        out = write_report_json(report, args.json_out)
        logging.getLogger(__name__).info("Wrote %s", out)
    if args.md_out:
        out = write_report_markdown(report, args.md_out, binary=name)
        logging.getLogger(__name__).info("Wrote %s", out)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        cfg = load_config(args.config, args.overrides or ())
        runner = ProfileRunner(cfg)
        runner.grammar(MetricSource(args.profiler))
        level = _log_level(args.verbose, cfg)
        color = bool(cfg.report.get("color", True)) and not args.no_color
        request = _make_request(args, cfg)
    except ProfError as exc:
        print(f"error: {exc.describe()}", file=sys.stderr)
        return 1
    except (FileNotFoundError, KeyError, ValueError, re.error, OmegaConfBaseException) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    configure_logging(level)

    if request.report_file and not Path(request.report_file).is_file():
        print(f"error: report file not found: {request.report_file}", file=sys.stderr)
        return 1

    name = binary_name(request.binary or request.report_file or Path.cwd().name)
    print(render_banner(name, request.profiler.value, color=color))

    outcome = runner.run(request)
    if outcome.error is not None:
        print(f"error: {outcome.error.describe()}", file=sys.stderr)
        return 1

    report = outcome.unwrap()
    for line in render_report(report, color=color):
        print(line)
    try:
        _export(report, args, name)
    except OSError as exc:
        print(f"error: could not write report: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
