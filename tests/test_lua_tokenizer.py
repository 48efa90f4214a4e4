import pytest

from pluglint.utils.lua import LuaSyntaxError, call_arguments, function_depths, match_dotted, tokenize


def values(source):
    return [token.value for token in tokenize(source)]


def test_comments_are_dropped():
    source = '-- require("a")\n--[[ require("b")\n]] local x = 1 --[==[ ]] ]==]'
    assert values(source) == ["local", "x", "=", "1"]


def test_strings_keep_their_line_numbers():
    tokens = tokenize('local a = "one"\nlocal b = [[two\nlines]]\nlocal c = \'three\'')
    strings = [(token.value, token.line) for token in tokens if token.kind == "string"]
    assert strings == [("one", 1), ("two\nlines", 2), ("three", 4)]


def test_escaped_quote_does_not_end_string():
    tokens = tokenize(r'local s = "say \"hi\""')
    assert tokens[-1].kind == "string"
    assert tokens[-1].value == r"say \"hi\""


def test_numbers_and_operators():
    assert values("x = 0x1F + 3.5e2 .. y ~= z") == ["x", "=", "0x1F", "+", "3.5e2", "..", "y", "~=", "z"]


def test_unfinished_string_raises():
    with pytest.raises(LuaSyntaxError) as excinfo:
        tokenize('local s = "oops\nlocal t = 1')
    assert excinfo.value.line == 1


def test_unfinished_long_comment_raises():
    with pytest.raises(LuaSyntaxError):
        tokenize("--[[ never closed")


def test_function_depths_track_nested_bodies():
    source = "local a = 1\nlocal f = function()\n  for i = 1, 2 do\n    g(i)\n  end\nend\nh()"
    tokens = tokenize(source)
    depths = function_depths(tokens)
    by_name = {token.value: depth for token, depth in zip(tokens, depths) if token.kind == "name"}
    assert by_name["a"] == 0
    assert by_name["g"] == 1
    assert by_name["h"] == 0


def test_while_and_repeat_blocks_balance():
    source = "while x do y() end\nrepeat z() until done\nif a then b() elseif c then d() else e() end"
    assert set(function_depths(tokenize(source))) == {0}


def test_unbalanced_end_raises():
    with pytest.raises(LuaSyntaxError):
        function_depths(tokenize("f()\nend"))


def test_unclosed_function_raises():
    with pytest.raises(LuaSyntaxError):
        function_depths(tokenize("local function f()\n  return 1\n"))


def test_call_arguments_split_on_top_level_commas():
    tokens = tokenize('vim.keymap.set({ "n", "x" }, "<leader>a", function() f(1, 2) end, { silent = true })')
    after = match_dotted(tokens, 0, ("vim", "keymap", "set"))
    args = call_arguments(tokens, after)
    assert len(args) == 4
    assert [token.value for token in args[1]] == ["<leader>a"]


def test_call_arguments_string_call_form():
    tokens = tokenize('require "tidy"')
    assert [[token.value for token in arg] for arg in call_arguments(tokens, 1)] == [["tidy"]]


def test_call_arguments_rejects_non_call():
    tokens = tokenize("local r = require")
    assert call_arguments(tokens, len(tokens)) is None


def test_skip_whitespace_escape_spans_lines():
    tokens = tokenize('local s = "a\\z\n   b"\nlocal t = 1')

    strings = [token for token in tokens if token.kind == "string"]
    assert [(token.value, token.line) for token in strings] == [("ab", 1)]
    assert tokens[-1].line == 3
