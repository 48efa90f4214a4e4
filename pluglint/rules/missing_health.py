"""Check that the plugin ships a ``:checkhealth`` module."""

from __future__ import annotations

from typing import List

from pluglint.result import Finding
from pluglint.scanner import Role
from pluglint.severity import Severity

from . import ScanContext


class MissingHealthRule:
    """Exactly one project-level finding: ``ok`` naming the module, or ``warn``."""

    name = "missing-health"
    description = "plugins should provide lua/<name>/health.lua for :checkhealth"

    def evaluate(self, context: ScanContext) -> List[Finding]:
        modules = context.with_role(Role.HEALTH_MODULE)
        if modules:
            return [
                Finding(
                    rule=self.name,
                    severity=Severity.OK,
                    path=modules[0].relpath,
                    message="health check module found",
                )
            ]
        return [
            Finding(
                rule=self.name,
                severity=Severity.WARN,
                path=None,
                message="no health check module; add lua/<plugin>/health.lua exposing check()",
            )
        ]
