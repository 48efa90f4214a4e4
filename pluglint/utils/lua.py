"""A small Lua tokenizer.

Only as much of the language as the rules need: names, keywords, strings,
numbers and operators with their line numbers, comments dropped. Block
structure is tracked separately by :func:`function_depths`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

KEYWORDS = frozenset(
    {
        "and", "break", "do", "else", "elseif", "end", "false", "for",
        "function", "goto", "if", "in", "local", "nil", "not", "or",
        "repeat", "return", "then", "true", "until", "while",
    }
)

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER = re.compile(
    r"0[xX](?:[0-9a-fA-F]*\.?[0-9a-fA-F]+|[0-9a-fA-F]+\.?)(?:[pP][+-]?[0-9]+)?"
    r"|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)
_LONG_OPEN = re.compile(r"\[(=*)\[")
_OPERATORS = ("...", "..", "==", "~=", "<=", ">=", "::", "//", "<<", ">>")
_SINGLE = set("+-*/%^#&~|<>=(){}[];:,.")


class LuaSyntaxError(ValueError):
    """Raised when a Lua source cannot be tokenized or its blocks do not balance."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"line {line}: {message}")
        self.line = line


@dataclass(frozen=True)
class Token:
    kind: str  # "name", "keyword", "string", "number", "op"
    value: str
    line: int

    def is_op(self, value: str) -> bool:
        return self.kind == "op" and self.value == value

    def is_keyword(self, value: str) -> bool:
        return self.kind == "keyword" and self.value == value


def tokenize(source: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    line = 1
    length = len(source)

    while pos < length:
        char = source[pos]

        if char == "\n":
            line += 1
            pos += 1
            continue
        if char in " \t\r\f\v":
            pos += 1
            continue

        if source.startswith("--", pos):
            opener = _LONG_OPEN.match(source, pos + 2)
            if opener:
                end = _long_bracket_end(source, opener, line, "comment")
                line += source.count("\n", pos, end)
                pos = end
            else:
                newline = source.find("\n", pos)
                pos = length if newline == -1 else newline
            continue

        if pos == 0 and source.startswith("#!"):
            newline = source.find("\n")
            pos = length if newline == -1 else newline
            continue

        opener = _LONG_OPEN.match(source, pos)
        if opener:
            end = _long_bracket_end(source, opener, line, "string")
            body = source[opener.end():end - len(opener.group(0))]
            tokens.append(Token("string", body, line))
            line += source.count("\n", pos, end)
            pos = end
            continue

        if char in "\"'":
            value, end = _short_string(source, pos, line)
            tokens.append(Token("string", value, line))
            line += source.count("\n", pos, end)
            pos = end
            continue

        if char.isdigit() or (char == "." and pos + 1 < length and source[pos + 1].isdigit()):
            match = _NUMBER.match(source, pos)
            if match and match.end() > pos:
                tokens.append(Token("number", match.group(0), line))
                pos = match.end()
                continue

        match = _NAME.match(source, pos)
        if match:
            word = match.group(0)
            tokens.append(Token("keyword" if word in KEYWORDS else "name", word, line))
            pos = match.end()
            continue

        for operator in _OPERATORS:
            if source.startswith(operator, pos):
                tokens.append(Token("op", operator, line))
                pos += len(operator)
                break
        else:
            if char not in _SINGLE:
                raise LuaSyntaxError(f"unexpected character {char!r}", line)
            tokens.append(Token("op", char, line))
            pos += 1

    return tokens


def _long_bracket_end(source: str, opener: "re.Match[str]", line: int, what: str) -> int:
    closer = "]" + opener.group(1) + "]"
    end = source.find(closer, opener.end())
    if end == -1:
        raise LuaSyntaxError(f"unfinished long {what}", line)
    return end + len(closer)


def _short_string(source: str, pos: int, line: int) -> Tuple[str, int]:
    quote = source[pos]
    chars: List[str] = []
    index = pos + 1
    while index < len(source):
        char = source[index]
        if char == "\\":
            if source.startswith("z", index + 1):
                # \z skips the following whitespace, newlines included
                index += 2
                while index < len(source) and source[index].isspace():
                    index += 1
                continue
            if index + 1 < len(source):
                chars.append(source[index:index + 2])
            index += 2
            continue
        if char == quote:
            return "".join(chars), index + 1
        if char == "\n":
            break
        chars.append(char)
        index += 1
    raise LuaSyntaxError("unfinished string", line)


def function_depths(tokens: Sequence[Token]) -> List[int]:
    """Return, for every token, how many ``function`` bodies enclose it.

    ``while``/``for`` open their block through the ``do`` that follows them,
    so only ``function``, ``if``, ``do`` and ``repeat`` push a frame.
    """

    stack: List[str] = []
    depth = 0
    depths: List[int] = []
    for token in tokens:
        depths.append(depth)
        if token.kind != "keyword":
            continue
        word = token.value
        if word in ("function", "if", "do", "repeat"):
            stack.append(word)
            if word == "function":
                depth += 1
        elif word == "end":
            if not stack or stack[-1] == "repeat":
                raise LuaSyntaxError("'end' without a matching block", token.line)
            if stack.pop() == "function":
                depth -= 1
        elif word == "until":
            if not stack or stack[-1] != "repeat":
                raise LuaSyntaxError("'until' without a matching 'repeat'", token.line)
            stack.pop()
    if stack:
        raise LuaSyntaxError(f"unclosed '{stack[-1]}' block", tokens[-1].line)
    return depths


def match_dotted(tokens: Sequence[Token], index: int, parts: Sequence[str]) -> Optional[int]:
    """Match ``a.b.c`` starting at ``index``; return the index after it or ``None``."""

    cursor = index
    for position, part in enumerate(parts):
        if position:
            if cursor >= len(tokens) or not tokens[cursor].is_op("."):
                return None
            cursor += 1
        if cursor >= len(tokens) or tokens[cursor].kind != "name" or tokens[cursor].value != part:
            return None
        cursor += 1
    return cursor


def is_member_access(tokens: Sequence[Token], index: int) -> bool:
    """True when the token at ``index`` is the right-hand side of ``.`` or ``:``."""

    return index > 0 and (tokens[index - 1].is_op(".") or tokens[index - 1].is_op(":"))


def call_arguments(tokens: Sequence[Token], index: int) -> Optional[List[List[Token]]]:
    """Split the arguments of the call whose argument list starts at ``index``.

    Handles ``f(a, b)``, ``f "s"`` and ``f {…}``. Returns ``None`` when the
    token at ``index`` does not start an argument list.
    """

    if index >= len(tokens):
        return None
    first = tokens[index]
    if first.kind == "string":
        return [[first]]
    if first.is_op("{"):
        closing = _matching_close(tokens, index)
        return [list(tokens[index:closing + 1])]
    if not first.is_op("("):
        return None

    closing = _matching_close(tokens, index)
    args: List[List[Token]] = []
    current: List[Token] = []
    depth = 0
    for token in tokens[index + 1:closing]:
        if token.kind == "op" and token.value in ("(", "{", "["):
            depth += 1
        elif token.kind == "op" and token.value in (")", "}", "]"):
            depth -= 1
        elif token.is_op(",") and depth == 0:
            args.append(current)
            current = []
            continue
        current.append(token)
    if current or args:
        args.append(current)
    return args


def _matching_close(tokens: Sequence[Token], index: int) -> int:
    pairs = {"(": ")", "{": "}", "[": "]"}
    stack: List[str] = []
    for cursor in range(index, len(tokens)):
        token = tokens[cursor]
        if token.kind != "op":
            continue
        if token.value in pairs:
            stack.append(pairs[token.value])
        elif token.value in (")", "}", "]"):
            if not stack or stack.pop() != token.value:
                raise LuaSyntaxError(f"unbalanced {token.value!r}", token.line)
            if not stack:
                return cursor
    raise LuaSyntaxError(f"unclosed {tokens[index].value!r}", tokens[index].line)
