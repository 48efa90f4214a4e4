"""Runtime configuration: defaults, the optional YAML file, and CLI overrides."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import ConfigError
from .severity import Severity

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".pluglint.yaml"

DEFAULT_EXCLUDE_DIRS: Tuple[str, ...] = (
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    ".luarocks",
    "__pycache__",
    ".venv",
    "venv",
    "deps",
)

_TOP_LEVEL_KEYS = {"fail_on", "workers", "timeout", "disable", "exclude_dirs", "help"}
_HELP_KEYS = {"external_tags"}


@dataclass(frozen=True)
class LintConfig:
    """Settings shared by the scanner, the rule engine and the CLI."""

    fail_on: Severity = Severity.ERROR
    workers: int = 8
    timeout: float = 5.0
    disable: Tuple[str, ...] = ()
    exclude_dirs: Tuple[str, ...] = DEFAULT_EXCLUDE_DIRS
    external_tags: Tuple[str, ...] = ()
    source: Optional[str] = field(default=None, compare=False)

    def with_overrides(self, **overrides: Any) -> "LintConfig":
        """Return a copy with every non-``None`` override applied."""

        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


def find_config(root: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"config file not found: {explicit}")
        return explicit
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config(root: Path, explicit: Optional[Path] = None) -> LintConfig:
    """Load the configuration for ``root``; missing files yield the defaults."""

    path = find_config(root, explicit)
    if path is None:
        logger.debug("no %s under %s, using defaults", CONFIG_FILENAME, root)
        return LintConfig()
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigError(f"{path}: cannot read config: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML: {exc}") from exc
    logger.debug("loaded config from %s", path)
    return parse_config(data, source=str(path))


def parse_config(data: Any, source: str = "<config>") -> LintConfig:
    """Validate a decoded YAML document and build a ``LintConfig``."""

    if data is None:
        return LintConfig(source=source)
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected a YAML mapping at top level")

    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"{source}: unknown keys: {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {"source": source}
    if "fail_on" in data:
        try:
            values["fail_on"] = Severity.parse(str(data["fail_on"]))
        except ValueError as exc:
            raise ConfigError(f"{source}: fail_on: {exc}") from exc
        if values["fail_on"] is Severity.OK:
            raise ConfigError(f"{source}: fail_on must be 'error' or 'warn'")
    if "workers" in data:
        workers = data["workers"]
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            raise ConfigError(f"{source}: workers must be a positive integer")
        values["workers"] = workers
    if "timeout" in data:
        timeout = data["timeout"]
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            raise ConfigError(f"{source}: timeout must be a positive number of seconds")
        values["timeout"] = float(timeout)
    if "disable" in data:
        values["disable"] = _string_tuple(data["disable"], f"{source}: disable")
    if "exclude_dirs" in data:
        extra = _string_tuple(data["exclude_dirs"], f"{source}: exclude_dirs")
        values["exclude_dirs"] = DEFAULT_EXCLUDE_DIRS + extra
    if "help" in data:
        help_section = data["help"]
        if not isinstance(help_section, dict):
            raise ConfigError(f"{source}: help must be a mapping")
        unknown_help = set(help_section) - _HELP_KEYS
        if unknown_help:
            raise ConfigError(f"{source}: unknown keys under help: {', '.join(sorted(unknown_help))}")
        if "external_tags" in help_section:
            values["external_tags"] = _string_tuple(help_section["external_tags"], f"{source}: help.external_tags")
    return LintConfig(**values)


def _string_tuple(value: Any, label: str) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{label} must be a list of strings")
    return tuple(value)
