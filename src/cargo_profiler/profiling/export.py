"""Export helpers for parsed reports.

Functions
---------
write_report_markdown
    Emit a Markdown summary (totals plus ranked function table) using mdutils.
write_report_json
    Write the cattrs-unstructured report summary as JSON.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from mdutils.mdutils import MdUtils  # type: ignore[import-untyped]

from cargo_profiler.contracts.convert import converter
from cargo_profiler.data.models import CacheMetrics, ProfilerReport
from cargo_profiler.visualize.display import (
    CACHEGRIND_HEADERS,
    CACHEGRIND_TITLES,
    classify_severity,
    fmt_thousands_sep,
    share,
)


def _file_base(path: str | Path) -> str:
    # mdutils appends ".md" itself
    p = str(path)
    return p[:-3] if p.endswith(".md") else p


def write_report_markdown(report: ProfilerReport, path: str | Path, binary: str | None = None) -> Path:
    """Write ``report`` as a Markdown document.

    Parameters
    ----------
    report : CacheMetrics or CallMetrics
        Parsed report.
    path : str or Path
        Destination file path. A ``.md`` suffix is accepted and handled.
    binary : str, optional
        Name of the profiled binary, shown in the header list.

    Returns
    -------
    Path
        The written file.
    """

    file_base = _file_base(path)
    md = MdUtils(file_name=file_base)
    tool = report.source.value
    md.new_header(level=1, title=f"{tool.capitalize()} Report")
    items = [f"Generated: {datetime.now().isoformat(timespec='seconds')}"]
    if binary:
        items.append(f"Binary: {binary}")
    items.append(f"Functions shown: {report.table.n_rows}")
    md.new_list(items=items)

    totals = report.totals.values
    md.new_header(level=2, title="Totals")
    titles = CACHEGRIND_TITLES if isinstance(report, CacheMetrics) else ("Total Instructions",)
    total_table: list[str] = ["Metric", "Total"]
    for title, total in zip(titles, totals):
        total_table.extend([title, fmt_thousands_sep(total)])
    md.new_table(columns=2, rows=len(titles) + 1, text=total_table, text_align="left")

    md.new_header(level=2, title="Functions")
    if report.table.n_rows == 0:
        md.new_paragraph("No function rows found in the profiler output.")
    elif isinstance(report, CacheMetrics):
        header = ["Rank", *CACHEGRIND_HEADERS, "Function"]
        table_data: list[str] = header.copy()
        for idx, (values, func) in enumerate(report.table.rows(), start=1):
            table_data.append(str(idx))
            table_data.extend(f"{share(v, t):.2f}" for v, t in zip(values, totals))
            table_data.append(func)
        md.new_table(columns=len(header), rows=report.table.n_rows + 1, text=table_data, text_align="center")
    else:
        header = ["Rank", "Instructions", "Share", "Severity", "Function"]
        table_data = header.copy()
        for idx, (values, func) in enumerate(report.table.rows(), start=1):
            pct = share(values[0], totals[0]) * 100.0
            table_data.extend(
                [str(idx), fmt_thousands_sep(values[0]), f"{pct:.1f}%", classify_severity(pct).value, func]
            )
        md.new_table(columns=len(header), rows=report.table.n_rows + 1, text=table_data, text_align="center")

    md.create_md_file()
    return Path(file_base + ".md")


def write_report_json(report: ProfilerReport, path: str | Path) -> Path:
    """Write the report summary as JSON and return the path."""

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(converter.unstructure(report), f, indent=2)
    return out
