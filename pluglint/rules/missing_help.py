"""Check that the plugin ships help documentation."""

from __future__ import annotations

from typing import List

from pluglint.result import Finding
from pluglint.scanner import Role
from pluglint.severity import Severity

from . import ScanContext


class MissingHelpRule:
    name = "missing-help"
    description = "plugins should document themselves in doc/<plugin>.txt"

    def evaluate(self, context: ScanContext) -> List[Finding]:
        if context.with_role(Role.HELP_DOC):
            return []
        return [
            Finding(
                rule=self.name,
                severity=Severity.WARN,
                path=None,
                message="no help file; add doc/<plugin>.txt so users can :help the plugin",
            )
        ]
