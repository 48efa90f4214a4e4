"""Detect entry-point scripts that load modules at startup instead of on demand."""

from __future__ import annotations

from typing import List, Sequence

from pluglint.result import Finding
from pluglint.scanner import FileRecord, Role
from pluglint.severity import Severity
from pluglint.utils import LuaSyntaxError, tokenize
from pluglint.utils import vimscript
from pluglint.utils.lua import Token, call_arguments, function_depths, is_member_access

from . import ScanContext

PROTECTED_CALLS = ("pcall", "xpcall")


class EagerRequireRule:
    """Warn when a ``plugin/`` script calls ``require`` outside a callback."""

    name = "eager-require"
    description = "entry-point scripts must defer require() into callbacks"

    def evaluate(self, context: ScanContext) -> List[Finding]:
        findings: List[Finding] = []
        for record in context.with_role(Role.ENTRY_POINT):
            if context.cancel.cancelled:
                break
            try:
                lines = self._eager_lines(record)
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
            if lines:
                findings.append(self._build_finding(record, lines))
        return findings

    def _eager_lines(self, record: FileRecord) -> List[int]:
        if record.is_lua:
            return lua_eager_requires(record.text)
        if record.is_vim:
            return vim_eager_requires(record.text)
        return []

    def _build_finding(self, record: FileRecord, lines: List[int]) -> Finding:
        count = len(lines)
        calls = "call" if count == 1 else "calls"
        return Finding(
            rule=self.name,
            severity=Severity.WARN,
            path=record.relpath,
            line=lines[0],
            message=(
                f"{count} require {calls} at startup; move them into the command, "
                "autocmd or mapping callback that needs the module"
            ),
        )


def lua_eager_requires(source: str, line_offset: int = 0) -> List[int]:
    """Return the lines of ``require`` calls made outside any function body.

    ``pcall(require, "mod")`` counts as a call.
    """

    tokens = tokenize(source)
    depths = function_depths(tokens)
    lines: List[int] = []
    for index, token in enumerate(tokens):
        if token.kind != "name" or token.value != "require" or depths[index]:
            continue
        if is_member_access(tokens, index):
            continue
        if call_arguments(tokens, index + 1) is None and not _protected_require(tokens, index):
            continue
        lines.append(token.line + line_offset)
    return lines


def _protected_require(tokens: Sequence[Token], index: int) -> bool:
    if index < 2 or not tokens[index - 1].is_op("("):
        return False
    callee = tokens[index - 2]
    return callee.kind == "name" and callee.value in PROTECTED_CALLS and not is_member_access(tokens, index - 2)


def vim_eager_requires(source: str) -> List[int]:
    vim_lines, lua_blocks = vimscript.split_lua_heredocs(source)
    lines = [number for number, line in vimscript.top_level_lines(vim_lines) if vimscript.EAGER_LUA.match(line)]
    for block in lua_blocks:
        if not block.in_function:
            lines.extend(lua_eager_requires(block.body, line_offset=block.first_line - 1))
    return sorted(lines)
