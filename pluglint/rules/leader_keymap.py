"""Flag mappings that hard-code a leader key instead of exposing a ``<Plug>`` target."""

from __future__ import annotations

from typing import List

from pluglint.result import Finding
from pluglint.scanner import FileRecord
from pluglint.severity import Severity
from pluglint.utils import LuaSyntaxError
from pluglint.utils.keymaps import Mapping, lua_mappings, vim_mappings

from . import ScanContext


class LeaderKeymapRule:
    """Warn for every mapping whose left-hand side is a literal leader sequence."""

    name = "leader-keymap"
    description = "mappings must target <Plug> names, not literal <leader> sequences"

    def evaluate(self, context: ScanContext) -> List[Finding]:
        findings: List[Finding] = []
        for record in context.scripts():
            if context.cancel.cancelled:
                break
            try:
                mappings = record_mappings(record)
            except LuaSyntaxError as exc:
                findings.append(
                    Finding(
                        rule=self.name,
                        severity=Severity.WARN,
                        path=record.relpath,
                        line=exc.line,
                        message=f"could not parse Lua: {exc}",
                    )
                )
                continue
            for mapping in mappings:
                if mapping.uses_leader:
                    findings.append(self._build_finding(record, mapping))
        return findings

    def _build_finding(self, record: FileRecord, mapping: Mapping) -> Finding:
        shown = mapping.lhs if mapping.lhs is not None else " .. ".join(mapping.literal_parts)
        return Finding(
            rule=self.name,
            severity=Severity.WARN,
            path=record.relpath,
            line=mapping.line,
            message=(
                f"mapping {shown!r} hard-codes a leader key; define a <Plug> mapping "
                "and let users bind their own keys"
            ),
        )


def record_mappings(record: FileRecord) -> List[Mapping]:
    """Return the mappings a script registers. Raises ``LuaSyntaxError``."""

    if record.is_lua:
        return lua_mappings(record.text)
    if record.is_vim:
        return vim_mappings(record.text)
    return []
