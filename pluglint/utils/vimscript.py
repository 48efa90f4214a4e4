"""Line-oriented helpers for Vimscript sources."""

from __future__ import annotations

import re
from typing import Iterator, List, NamedTuple, Tuple

FUNCTION_START = re.compile(r"^\s*fu(?:n(?:c(?:t(?:i(?:on?)?)?)?)?)?!?\s+\S")
FUNCTION_END = re.compile(r"^\s*endf(?:u(?:n(?:c(?:t(?:i(?:on?)?)?)?)?)?)?\s*$")
LUA_HEREDOC = re.compile(r"^\s*lua\s*<<\s*(?:trim\s+)?(\S*)\s*$")
EAGER_LUA = re.compile(r"^\s*(?:lua\s+|call\s+luaeval\s*\().*\brequire\b")
MAP_COMMAND = re.compile(
    r"^\s*(?P<cmd>[nvxsoilct]?(?:nore)?map!?|[nvxsoilct]?no(?:remap)?)\s+"
    r"(?P<args>(?:<(?:buffer|silent|nowait|expr|unique|special|script)>\s*)*)"
    r"(?P<lhs>\S+)",
    re.IGNORECASE,
)


class LuaBlock(NamedTuple):
    first_line: int
    body: str
    in_function: bool


def logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, line)`` with ``\\`` continuations joined and comments dropped."""

    pending: List[str] = []
    start = 0
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.lstrip()
        if pending and stripped.startswith("\\"):
            pending.append(stripped[1:])
            continue
        if pending:
            yield start, "".join(pending)
            pending = []
        if stripped.startswith('"'):
            continue
        pending = [line]
        start = number
    if pending:
        yield start, "".join(pending)


def split_lua_heredocs(text: str) -> Tuple[List[Tuple[int, str]], List[LuaBlock]]:
    """Separate Vimscript lines from ``lua << EOF`` bodies.

    Returns ``(vim_lines, lua_blocks)``. A block records the line number of its
    first body line and whether it sits inside a ``function`` body.
    """

    vim_lines: List[Tuple[int, str]] = []
    lua_blocks: List[LuaBlock] = []
    lines = text.splitlines()
    depth = 0
    index = 0
    while index < len(lines):
        line = lines[index]
        heredoc = LUA_HEREDOC.match(line)
        if heredoc:
            marker = heredoc.group(1) or "."
            body: List[str] = []
            first = index + 2
            index += 1
            while index < len(lines) and lines[index].strip() != marker:
                body.append(lines[index])
                index += 1
            lua_blocks.append(LuaBlock(first, "\n".join(body), depth > 0))
            index += 1
            continue
        if FUNCTION_END.match(line):
            depth = max(depth - 1, 0)
        elif FUNCTION_START.match(line):
            depth += 1
        vim_lines.append((index + 1, line))
        index += 1
    return vim_lines, lua_blocks


def top_level_lines(lines: List[Tuple[int, str]]) -> Iterator[Tuple[int, str]]:
    """Yield lines that are not inside a ``function`` … ``endfunction`` body."""

    depth = 0
    for number, line in lines:
        if FUNCTION_END.match(line):
            depth = max(depth - 1, 0)
            continue
        if FUNCTION_START.match(line):
            depth += 1
            continue
        if depth == 0:
            yield number, line


def uses_leader(lhs: str) -> bool:
    lowered = lhs.lower()
    return "<leader>" in lowered or "<localleader>" in lowered
