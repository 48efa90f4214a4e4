"""Rule protocol and the inputs shared across rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Tuple

from pluglint.config import LintConfig
from pluglint.result import Finding
from pluglint.scanner import FileRecord, Role
from pluglint.utils import CancelToken


class Rule(Protocol):
    """Protocol implemented by all rule evaluators.

    ``evaluate`` must be a pure function of the context: no state kept on the
    rule between calls, no mutation of records.
    """

    name: str
    description: str

    def evaluate(self, context: "ScanContext") -> List[Finding]:
        """Return the findings for ``context``."""


@dataclass(frozen=True)
class ScanContext:
    """Bundle inputs shared across rules."""

    records: Tuple[FileRecord, ...]
    config: LintConfig = field(default_factory=LintConfig)
    cancel: CancelToken = field(default_factory=CancelToken, compare=False)

    def with_role(self, *roles: Role) -> List[FileRecord]:
        return [record for record in self.records if record.role in roles]

    def scripts(self) -> List[FileRecord]:
        """Lua and Vimscript records that the editor may source."""

        return [
            record
            for record in self.records
            if record.role not in (Role.HELP_DOC, Role.UNKNOWN) and (record.is_lua or record.is_vim)
        ]
