from pluglint import engine
from pluglint.config import LintConfig
from pluglint.engine import evaluate, load_rules, run_lint
from pluglint.result import Finding, Report
from pluglint.rules.missing_health import MissingHealthRule
from pluglint.scanner import Role
from pluglint.severity import Severity
from pluglint.utils import CancelToken

from helpers import FIXTURES, make_context


class ExplodingRule:
    name = "exploding"
    description = "always fails"

    def evaluate(self, context):
        raise RuntimeError("boom")


class RecordingRule:
    name = "recording"
    description = "remembers which roles it saw"

    def __init__(self):
        self.roles = None

    def evaluate(self, context):
        self.roles = {record.role for record in context.records}
        return []


class CancellingRule:
    """Reports entry points one by one and cancels the run after the first."""

    name = "cancelling"
    description = "cancels the run partway through"

    def evaluate(self, context):
        findings = []
        for record in context.with_role(Role.ENTRY_POINT):
            if context.cancel.cancelled:
                break
            findings.append(Finding(rule=self.name, severity=Severity.ERROR, path=record.relpath, message="seen"))
            context.cancel.cancel()
        return findings


def test_registry_honours_disable_list():
    names = [rule.name for rule in load_rules(LintConfig(disable=("help-tags", "plug-mapping")))]
    assert "help-tags" not in names
    assert "plug-mapping" not in names
    assert "eager-require" in names


def test_evaluate_is_deterministic():
    records = make_context(
        {
            "plugin/a.lua": 'require("a")\nvim.keymap.set("n", "<leader>a", "<cmd>A<CR>")\n',
            "plugin/b.lua": 'require("b")\n',
            "doc/a.txt": "*a.txt*\n|nowhere|\n",
        }
    ).records

    first = evaluate(records)
    second = evaluate(records)

    assert first.findings == second.findings
    assert first.findings == sorted(first.findings, key=Finding.sort_key)


def test_crashing_rule_becomes_warning_and_others_still_run():
    records = make_context({"plugin/a.lua": "vim.g.a = 1\n"}).records

    outcome = evaluate(records, rules=[ExplodingRule(), MissingHealthRule()])

    rules = sorted(finding.rule for finding in outcome.findings)
    assert rules == ["exploding", "missing-health"]
    crashed = [finding for finding in outcome.findings if finding.rule == "exploding"][0]
    assert crashed.severity is Severity.WARN
    assert "boom" in crashed.message


def test_unknown_records_are_hidden_from_rules():
    records = make_context({"README.md": "# hi\n", "plugin/a.lua": "vim.g.a = 1\n"}).records
    recorder = RecordingRule()

    evaluate(records, rules=[recorder])

    assert recorder.roles == {Role.ENTRY_POINT}


def test_cancelled_evaluation_is_partial():
    cancel = CancelToken()
    cancel.cancel()
    records = make_context({"plugin/a.lua": 'require("a")\n'}).records

    outcome = evaluate(records, cancel=cancel)

    assert outcome.partial is True
    assert all(finding.rule != "eager-require" for finding in outcome.findings)


def test_run_lint_on_unruly_fixture():
    report = run_lint(FIXTURES / "unruly_plugin")

    assert report.summary.error == 1
    assert report.summary.warn == 5
    assert report.partial is False
    assert report.exit_code(Severity.ERROR) == 1
    rules = [finding.rule for finding in report.findings]
    assert rules.count("leader-keymap") == 2
    assert rules.count("eager-require") == 1


def test_run_lint_on_clean_fixture():
    report = run_lint(FIXTURES / "clean_plugin")

    assert report.summary.error == 0
    assert report.summary.warn == 0
    assert report.summary.ok == 1
    assert report.exit_code(Severity.WARN) == 0


def test_run_lint_cancelled_mid_scan_keeps_errors(monkeypatch):
    cancel = CancelToken()
    real_evaluate = engine.evaluate

    def evaluate_then_cancel(records, config=None, cancel=None, rules=None):
        outcome = real_evaluate(records, config, None, rules)
        cancel.cancel()
        outcome.partial = cancel.cancelled
        return outcome

    monkeypatch.setattr(engine, "evaluate", evaluate_then_cancel)
    report = run_lint(FIXTURES / "unruly_plugin", cancel=cancel)

    assert report.partial is True
    assert report.summary.error == 1
    assert report.exit_code(Severity.ERROR) == 1


def test_partial_report_without_findings_is_not_a_pass():
    report = Report(root="x", findings=(), partial=True)
    assert report.passed(Severity.WARN) is False
    assert report.exit_code(Severity.ERROR) == 1


def test_cancel_during_rule_keeps_findings_made_so_far():
    records = make_context(
        {
            "plugin/a.lua": "vim.g.a = 1\n",
            "plugin/b.lua": "vim.g.b = 1\n",
            "plugin/c.lua": "vim.g.c = 1\n",
        }
    ).records
    cancel = CancelToken()

    outcome = evaluate(records, cancel=cancel, rules=[CancellingRule()])

    assert outcome.partial is True
    assert [(f.rule, f.path) for f in outcome.findings] == [("cancelling", "plugin/a.lua")]
    report = Report(root="x", findings=tuple(outcome.findings), partial=outcome.partial)
    assert report.summary.error == 1
    assert report.exit_code(Severity.WARN) == 1
