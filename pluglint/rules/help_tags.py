"""Validate tag declarations and cross-reference links in help files."""

from __future__ import annotations

from typing import Dict, List, Set, Tuple

from pluglint.result import Finding
from pluglint.scanner import FileRecord, Role
from pluglint.severity import Severity
from pluglint.utils.helpdoc import HelpDocument, parse_help

from . import ScanContext


class HelpTagsRule:
    """Links must resolve to a tag declared somewhere in the document set."""

    name = "help-tags"
    description = "help links must resolve to declared *tags*; tags must be unique and closed"

    def evaluate(self, context: ScanContext) -> List[Finding]:
        documents: List[Tuple[FileRecord, HelpDocument]] = []
        for record in context.with_role(Role.HELP_DOC):
            if context.cancel.cancelled:
                return []
            documents.append((record, parse_help(record.text)))

        findings: List[Finding] = []
        declared: Dict[str, Tuple[str, int]] = {}
        for record, document in documents:
            for tag in document.tags:
                first = declared.get(tag.name)
                if first is None:
                    declared[tag.name] = (record.relpath, tag.line)
                    continue
                findings.append(
                    self._build_finding(
                        Severity.ERROR,
                        record.relpath,
                        tag.line,
                        f"duplicate tag *{tag.name}* (first declared at {first[0]}:{first[1]})",
                    )
                )
            for opener in document.dangling:
                findings.append(
                    self._build_finding(
                        Severity.WARN,
                        record.relpath,
                        opener.line,
                        f"tag *{opener.name} is not closed with '*'",
                    )
                )

        known: Set[str] = set(declared) | set(context.config.external_tags)
        for record, document in documents:
            if context.cancel.cancelled:
                break
            reported: Set[str] = set()
            for link in document.links:
                if link.name in known or link.name in reported:
                    continue
                reported.add(link.name)
                findings.append(
                    self._build_finding(
                        Severity.ERROR,
                        record.relpath,
                        link.line,
                        f"link |{link.name}| does not resolve to any declared tag",
                    )
                )
        return findings

    def _build_finding(self, severity: Severity, path: str, line: int, message: str) -> Finding:
        return Finding(rule=self.name, severity=severity, path=path, line=line, message=message)
