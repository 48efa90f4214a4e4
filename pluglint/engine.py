"""Rule registry and the concurrent rule engine."""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .config import LintConfig
from .result import Finding, Report
from .rules import Rule, ScanContext
from .rules.eager_require import EagerRequireRule
from .rules.help_tags import HelpTagsRule
from .rules.leader_keymap import LeaderKeymapRule
from .rules.missing_health import MissingHealthRule
from .rules.missing_help import MissingHelpRule
from .rules.plug_mapping import PlugMappingRule
from .scanner import FileRecord, Role, scan_tree
from .severity import Severity
from .utils import CancelToken

logger = logging.getLogger(__name__)


@dataclass
class EngineOutcome:
    findings: List[Finding] = field(default_factory=list)
    partial: bool = False


def all_rules() -> List[Rule]:
    return [
        EagerRequireRule(),
        LeaderKeymapRule(),
        PlugMappingRule(),
        MissingHealthRule(),
        HelpTagsRule(),
        MissingHelpRule(),
    ]


def load_rules(config: Optional[LintConfig] = None) -> List[Rule]:
    config = config or LintConfig()
    disabled = set(config.disable)
    unknown = disabled - {rule.name for rule in all_rules()}
    if unknown:
        logger.warning("ignoring unknown rule names in disable list: %s", ", ".join(sorted(unknown)))
    return [rule for rule in all_rules() if rule.name not in disabled]


def evaluate(
    records: Iterable[FileRecord],
    config: Optional[LintConfig] = None,
    cancel: Optional[CancelToken] = None,
    rules: Optional[Sequence[Rule]] = None,
) -> EngineOutcome:
    """Run every rule over ``records`` and collect their findings.

    Rules see only classified records and never each other's output. A rule
    that raises yields a single ``warn`` finding instead of its results.
    """

    config = config or LintConfig()
    cancel = cancel or CancelToken()
    rules = list(rules) if rules is not None else load_rules(config)
    context = ScanContext(
        records=tuple(record for record in records if record.role is not Role.UNKNOWN),
        config=config,
        cancel=cancel,
    )

    outcome = EngineOutcome()
    if not rules:
        return outcome

    with concurrent.futures.ThreadPoolExecutor(
        max_workers=min(len(rules), config.workers), thread_name_prefix="pluglint-rule"
    ) as executor:
        futures = {executor.submit(rule.evaluate, context): rule for rule in rules}
        for future in concurrent.futures.as_completed(futures):
            rule = futures[future]
            try:
                findings = future.result()
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception("rule %s failed", rule.name)
                findings = [
                    Finding(
                        rule=rule.name,
                        severity=Severity.WARN,
                        path=None,
                        message=f"rule crashed and was skipped: {exc}",
                    )
                ]
            logger.debug("rule %s produced %d findings", rule.name, len(findings))
            outcome.findings.extend(findings)

    outcome.partial = cancel.cancelled
    outcome.findings.sort(key=Finding.sort_key)
    return outcome


def run_lint(root: Path, config: Optional[LintConfig] = None, cancel: Optional[CancelToken] = None) -> Report:
    """Scan ``root`` and evaluate every enabled rule. Raises ``ScanError``."""

    config = config or LintConfig()
    cancel = cancel or CancelToken()
    scanned = scan_tree(root, config, cancel)
    logger.info("scanned %d files under %s", len(scanned.records), root)
    if cancel.cancelled:
        return Report(root=str(root), findings=tuple(scanned.findings), partial=True)
    engine = evaluate(scanned.records, config, cancel)
    return Report(
        root=str(root),
        findings=tuple(scanned.findings) + tuple(engine.findings),
        partial=scanned.partial or engine.partial,
    )
