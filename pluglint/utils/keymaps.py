"""Find key mapping registrations in Lua and Vimscript sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from . import vimscript
from .lua import Token, call_arguments, is_member_access, match_dotted, tokenize

# dotted callee -> index of the lhs argument
LUA_KEYMAP_CALLS = (
    (("vim", "keymap", "set"), 1),
    (("vim", "api", "nvim_set_keymap"), 1),
    (("vim", "api", "nvim_buf_set_keymap"), 2),
)
LUA_EX_CALLS = (
    ("vim", "cmd"),
    ("vim", "api", "nvim_command"),
    ("vim", "api", "nvim_exec"),
    ("vim", "api", "nvim_exec2"),
)


@dataclass(frozen=True)
class Mapping:
    """One mapping registration. ``lhs`` is ``None`` when it is not a literal."""

    line: int
    lhs: Optional[str]
    literal_parts: Tuple[str, ...] = ()

    @property
    def uses_leader(self) -> bool:
        return any(vimscript.uses_leader(part) for part in self.literal_parts)

    @property
    def is_plug(self) -> bool:
        return self.lhs is not None and self.lhs.lower().startswith("<plug>")


def lua_mappings(source: str) -> List[Mapping]:
    """Return mappings registered by a Lua source. Raises ``LuaSyntaxError``."""

    return mappings_from_tokens(tokenize(source))


def mappings_from_tokens(tokens: Sequence[Token]) -> List[Mapping]:
    found: List[Mapping] = []
    for index, token in enumerate(tokens):
        if token.kind != "name" or token.value != "vim" or is_member_access(tokens, index):
            continue
        for parts, lhs_index in LUA_KEYMAP_CALLS:
            after = match_dotted(tokens, index, parts)
            if after is None:
                continue
            args = call_arguments(tokens, after)
            if args is None or len(args) <= lhs_index:
                break
            found.append(_mapping_from_argument(token.line, args[lhs_index]))
            break
        for parts in LUA_EX_CALLS:
            after = match_dotted(tokens, index, parts)
            if after is None:
                continue
            args = call_arguments(tokens, after)
            if not args or len(args[0]) != 1 or args[0][0].kind != "string":
                break
            command = args[0][0]
            for mapping in vim_mappings(command.value):
                found.append(
                    Mapping(line=command.line + mapping.line - 1, lhs=mapping.lhs, literal_parts=mapping.literal_parts)
                )
            break
    return found


def vim_mappings(source: str) -> List[Mapping]:
    found: List[Mapping] = []
    for number, line in vimscript.logical_lines(source):
        match = vimscript.MAP_COMMAND.match(line)
        if match:
            lhs = match.group("lhs")
            found.append(Mapping(line=number, lhs=lhs, literal_parts=(lhs,)))
    return found


def _mapping_from_argument(line: int, argument: Sequence[Token]) -> Mapping:
    strings = tuple(token.value for token in argument if token.kind == "string")
    if len(argument) == 1 and strings:
        return Mapping(line=argument[0].line, lhs=strings[0], literal_parts=strings)
    first_line = argument[0].line if argument else line
    return Mapping(line=first_line, lhs=None, literal_parts=strings)
