"""Require an indirection target when a plugin defines mappings at all."""

from __future__ import annotations

from typing import List

from pluglint.result import Finding
from pluglint.severity import Severity
from pluglint.utils import LuaSyntaxError

from . import ScanContext
from .leader_keymap import record_mappings


class PlugMappingRule:
    """Warn once per project when mappings exist but none is a ``<Plug>`` name."""

    name = "plug-mapping"
    description = "plugins that map keys should expose <Plug> targets"

    def evaluate(self, context: ScanContext) -> List[Finding]:
        mapping_count = 0
        for record in context.scripts():
            if context.cancel.cancelled:
                return []
            try:
                mappings = record_mappings(record)
            except LuaSyntaxError:
                # reported by leader-keymap
                continue
            if any(mapping.is_plug for mapping in mappings):
                return []
            mapping_count += len(mappings)
        if not mapping_count:
            return []
        noun = "mapping" if mapping_count == 1 else "mappings"
        return [
            Finding(
                rule=self.name,
                severity=Severity.WARN,
                path=None,
                message=f"{mapping_count} key {noun} defined but no <Plug> mapping is exposed",
            )
        ]
