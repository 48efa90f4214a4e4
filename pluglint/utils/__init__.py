"""Utility helpers for the linter."""

from .cancel import CancelToken
from .fileio import is_binary, read_text_file
from .lua import LuaSyntaxError, Token, tokenize

__all__ = [
    "CancelToken",
    "is_binary",
    "read_text_file",
    "LuaSyntaxError",
    "Token",
    "tokenize",
]
