"""Render reports as text or JSON and write them to an output sink."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import IO, List, Optional, Union

from .errors import ReportWriteError
from .result import SEVERITY_ORDER, Report
from .severity import Severity

_COLORS = {
    Severity.ERROR: "\033[31m",
    Severity.WARN: "\033[33m",
    Severity.OK: "\033[32m",
}
_RESET = "\033[0m"

Sink = Union[IO[str], str, Path]


def should_color(mode: str, stream: Optional[IO[str]] = None) -> bool:
    """Resolve ``--color=auto|always|never``; ``NO_COLOR`` disables ``auto``."""

    if mode == "always":
        return True
    if mode == "never":
        return False
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def render_text(report: Report, fail_on: Severity = Severity.ERROR, color: bool = False) -> str:
    """Create a human-readable report grouped by severity."""

    def paint(severity: Severity, text: str) -> str:
        return f"{_COLORS[severity]}{text}{_RESET}" if color else text

    lines: List[str] = []
    lines.append(f"Lint Summary: {report.root}")
    lines.append("=" * 40)
    header = f"{'Severity':<10} | {'Count':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for severity, count in report.summary.as_rows():
        lines.append(f"{severity:<10} | {count:>5}")
    lines.append("-" * len(header))
    status = "PASS" if report.passed(fail_on) else "FAIL"
    if report.partial:
        status += " (partial: scan was cancelled)"
    lines.append(f"Status    : {status}")
    lines.append(f"Findings  : {report.summary.total}")

    for severity in SEVERITY_ORDER:
        findings = report.by_severity(severity)
        if not findings:
            continue
        lines.append("")
        lines.append(paint(severity, f"{severity.value.upper()} ({len(findings)})"))
        lines.append("-" * 40)
        for finding in findings:
            lines.append(f"{finding.location}: [{finding.rule}] {finding.message}")
    return "\n".join(lines) + "\n"


def render_json(report: Report) -> str:
    """Render findings as a JSON array of ``{rule, severity, path, line, message}``."""

    return json.dumps([finding.to_dict() for finding in report.findings], indent=2) + "\n"


def write_report(payload: str, sink: Sink) -> None:
    """Write ``payload`` to a stream or a file path."""

    try:
        if isinstance(sink, (str, Path)):
            output_file = Path(sink)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(payload, encoding="utf-8")
        else:
            sink.write(payload)
            sink.flush()
    except (OSError, UnicodeError) as exc:
        raise ReportWriteError(f"cannot write report: {exc}") from exc
