"""Parse tag declarations and links out of Vim help files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

TAG_PATTERN = re.compile(r"(?:(?<=\s)|^)\*([^\s*|]+)\*(?=\s|$)")
LINK_PATTERN = re.compile(r"(?<![^\s(\[{\"',;:])\|([^\s|*\"]+)\|(?=[\s).,;:!?\]}\"']|$)")
DANGLING_OPENER = re.compile(r"(?:^|\t|\s\s)\*([\w:'<][^\s*|]*)\s*$")
EXAMPLE_START = re.compile(r"(?:^|\s)>[a-z0-9]*$")


@dataclass(frozen=True)
class Reference:
    name: str
    line: int


@dataclass
class HelpDocument:
    """Tags, links and malformed tag openers found in one help file."""

    tags: List[Reference] = field(default_factory=list)
    links: List[Reference] = field(default_factory=list)
    dangling: List[Reference] = field(default_factory=list)


def prose_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, line)`` for lines outside ``>`` … ``<`` example blocks."""

    in_example = False
    for number, line in enumerate(text.splitlines(), start=1):
        if in_example:
            if line.startswith("<"):
                in_example = False
                line = line[1:]
            elif not line.strip() or line[:1].isspace():
                continue
            else:
                in_example = False
        stripped = line.rstrip()
        if EXAMPLE_START.search(stripped):
            in_example = True
            stripped = EXAMPLE_START.sub("", stripped)
        yield number, stripped


def parse_help(text: str) -> HelpDocument:
    document = HelpDocument()
    for number, line in prose_lines(text):
        for match in TAG_PATTERN.finditer(line):
            document.tags.append(Reference(match.group(1), number))
        for match in LINK_PATTERN.finditer(line):
            document.links.append(Reference(match.group(1), number))
        dangling = DANGLING_OPENER.search(line)
        if dangling:
            document.dangling.append(Reference(dangling.group(1), number))
    return document
