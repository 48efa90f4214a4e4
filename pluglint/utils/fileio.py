"""Basic file IO helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

BINARY_SNIFF_BYTES = 8192


def is_binary(data: bytes) -> bool:
    """Treat anything with a NUL byte in its leading block as binary."""

    return b"\x00" in data[:BINARY_SNIFF_BYTES]


def read_text_file(path: Path) -> Optional[str]:
    """Return the file contents as text, or ``None`` for binary files.

    Undecodable bytes are replaced rather than rejected. ``OSError`` propagates.
    """

    data = path.read_bytes()
    if is_binary(data):
        return None
    return data.decode("utf-8", errors="replace")
