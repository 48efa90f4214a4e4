"""Severity definitions for lint findings."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Enumerate the supported severity levels for findings."""

    OK = "ok"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Return an integer ranking to drive exit code decisions."""

        ordering = {
            Severity.OK: 0,
            Severity.WARN: 1,
            Severity.ERROR: 2,
        }
        return ordering[self]

    @classmethod
    def parse(cls, value: str) -> "Severity":
        try:
            return cls(value.lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"unknown severity {value!r} (expected one of: {choices})") from None
