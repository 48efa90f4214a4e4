from pluglint.rules.missing_health import MissingHealthRule
from pluglint.rules.missing_help import MissingHelpRule
from pluglint.rules.plug_mapping import PlugMappingRule

from helpers import make_context


def test_missing_health_warns_exactly_once():
    files = {f"lua/tidy/mod{i}.lua": "return {}\n" for i in range(12)}
    files["plugin/tidy.lua"] = "vim.g.loaded_tidy = 1\n"

    findings = MissingHealthRule().evaluate(make_context(files))

    assert len(findings) == 1
    assert findings[0].severity.value == "warn"
    assert findings[0].path is None


def test_health_module_present_reports_ok():
    findings = MissingHealthRule().evaluate(make_context({"lua/tidy/health.lua": "return {}\n"}))

    assert len(findings) == 1
    assert findings[0].severity.value == "ok"
    assert findings[0].path == "lua/tidy/health.lua"


def test_legacy_autoload_health_counts():
    findings = MissingHealthRule().evaluate(make_context({"autoload/health/tidy.vim": "function! health#tidy#check()\nendfunction\n"}))
    assert findings[0].severity.value == "ok"


def test_missing_help_warns_once():
    findings = MissingHelpRule().evaluate(make_context({"plugin/tidy.lua": "vim.g.loaded_tidy = 1\n"}))
    assert [(f.rule, f.path) for f in findings] == [("missing-help", None)]


def test_help_present_is_clean():
    assert MissingHelpRule().evaluate(make_context({"doc/tidy.txt": "*tidy.txt*\n"})) == []


def test_mappings_without_plug_target_warn():
    files = {
        "plugin/tidy.lua": 'vim.keymap.set("n", "gt", ":Tidy<CR>")\n',
        "plugin/tidy.vim": "nnoremap gT :Tidy<CR>\n",
    }
    findings = PlugMappingRule().evaluate(make_context(files))

    assert len(findings) == 1
    assert findings[0].path is None
    assert "2 key mappings" in findings[0].message


def test_plug_target_satisfies_mapping_rule():
    files = {
        "plugin/tidy.lua": 'vim.keymap.set("n", "<Plug>(TidyRun)", ":Tidy<CR>")\n',
        "lua/tidy/init.lua": 'vim.keymap.set("n", "gt", "<Plug>(TidyRun)")\n',
    }
    assert PlugMappingRule().evaluate(make_context(files)) == []


def test_no_mappings_no_plug_finding():
    assert PlugMappingRule().evaluate(make_context({"plugin/tidy.lua": "vim.g.loaded_tidy = 1\n"})) == []
