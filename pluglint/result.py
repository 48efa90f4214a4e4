"""Core result data structures for the linter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .severity import Severity

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.ERROR,
    Severity.WARN,
    Severity.OK,
)


@dataclass(frozen=True)
class Finding:
    """Capture a single rule evaluation result.

    ``path`` is relative to the scan root, or ``None`` for findings about the
    project as a whole.
    """

    rule: str
    severity: Severity
    path: Optional[str]
    message: str
    line: Optional[int] = None

    @property
    def location(self) -> str:
        if self.path is None:
            return "<project>"
        if self.line is None:
            return self.path
        return f"{self.path}:{self.line}"

    def sort_key(self) -> Tuple[int, str, int, str, str]:
        return (
            0 if self.path is None else 1,
            self.path or "",
            self.line or 0,
            self.rule,
            self.message,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "path": self.path,
            "line": self.line,
            "message": self.message,
        }


@dataclass
class Summary:
    """Aggregate finding counts by severity."""

    error: int = 0
    warn: int = 0
    ok: int = 0

    @classmethod
    def from_findings(cls, findings: Iterable[Finding]) -> "Summary":
        summary = cls()
        for finding in findings:
            summary.increment(finding.severity)
        return summary

    def increment(self, severity: Severity) -> None:
        attr = severity.value
        setattr(self, attr, getattr(self, attr) + 1)

    def to_dict(self) -> Dict[str, int]:
        return {severity.value: getattr(self, severity.value) for severity in SEVERITY_ORDER}

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        return [(severity.value, getattr(self, severity.value)) for severity in SEVERITY_ORDER]

    @property
    def total(self) -> int:
        return sum(getattr(self, severity.value) for severity in SEVERITY_ORDER)


@dataclass(frozen=True)
class Report:
    """Bundle the findings of one scan with their summary.

    A partial report comes from a cancelled scan and never counts as a pass.
    """

    root: str
    findings: Tuple[Finding, ...] = ()
    partial: bool = False
    summary: Summary = field(init=False)

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.findings, key=Finding.sort_key))
        object.__setattr__(self, "findings", ordered)
        object.__setattr__(self, "summary", Summary.from_findings(ordered))

    def by_severity(self, severity: Severity) -> List[Finding]:
        return [finding for finding in self.findings if finding.severity is severity]

    def breaches(self, fail_on: Severity) -> List[Finding]:
        """Return the findings whose severity meets or exceeds ``fail_on``."""

        return [finding for finding in self.findings if finding.severity.rank >= fail_on.rank]

    def passed(self, fail_on: Severity = Severity.ERROR) -> bool:
        return not self.partial and not self.breaches(fail_on)

    def exit_code(self, fail_on: Severity = Severity.ERROR) -> int:
        return 0 if self.passed(fail_on) else 1
