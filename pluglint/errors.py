"""Fatal error types. Everything else the linter notices becomes a Finding."""

from __future__ import annotations


class PluglintError(Exception):
    """Base class for errors that abort a lint run."""


class ScanError(PluglintError):
    """Raised when the scan root is missing, not a directory, or unreadable."""


class ConfigError(PluglintError):
    """Raised when a configuration file is malformed."""


class ReportWriteError(PluglintError):
    """Raised when the report cannot be written to its output sink."""
