from pluglint.rules.leader_keymap import LeaderKeymapRule

from helpers import make_context


def run_rule(files):
    return LeaderKeymapRule().evaluate(make_context(files))


def test_literal_leader_mapping_warns():
    findings = run_rule(
        {"plugin/tidy.lua": 'vim.g.loaded_tidy = 1\nvim.keymap.set("n", "<leader>t", function() end)\n'}
    )

    assert len(findings) == 1
    assert findings[0].rule == "leader-keymap"
    assert findings[0].line == 2
    assert "<leader>t" in findings[0].message


def test_plug_mapping_is_clean():
    findings = run_rule({"plugin/tidy.lua": 'vim.keymap.set("n", "<Plug>(TidyRun)", function() end)\n'})
    assert findings == []


def test_buffer_local_leader_mapping_warns():
    source = 'vim.api.nvim_buf_set_keymap(0, "n", "<LocalLeader>f", ":Tidy<CR>", {})\n'
    findings = run_rule({"ftplugin/markdown.lua": source})
    assert len(findings) == 1
    assert findings[0].path == "ftplugin/markdown.lua"


def test_concatenated_leader_lhs_warns():
    source = 'local key = "t"\nvim.keymap.set({ "n", "x" }, "<leader>" .. key, "<Plug>(TidyRun)")\n'
    assert len(run_rule({"lua/tidy/init.lua": source})) == 1


def test_user_supplied_lhs_is_clean():
    source = 'vim.keymap.set("n", opts.keys.run, "<Plug>(TidyRun)")\n'
    assert run_rule({"lua/tidy/init.lua": source}) == []


def test_ex_command_mapping_inside_vim_cmd_warns():
    source = "vim.g.loaded_tidy = 1\nvim.cmd([[\nnnoremap <leader>a :Tidy<CR>\n]])\n"
    findings = run_rule({"plugin/tidy.lua": source})
    assert [finding.line for finding in findings] == [3]


def test_vimscript_leader_mapping_warns():
    source = '" keys\nnnoremap <silent> <Leader>ul :Tidy<CR>\nnmap <Plug>(TidyRun) :Tidy<CR>\n'
    findings = run_rule({"plugin/tidy.vim": source})
    assert [finding.line for finding in findings] == [2]


def test_help_documents_are_not_checked():
    assert run_rule({"doc/tidy.txt": 'vim.keymap.set("n", "<leader>t", "<Plug>(TidyRun)")\n'}) == []
