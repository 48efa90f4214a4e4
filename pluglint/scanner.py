"""Walk a plugin tree, classify files by role and read them concurrently."""

from __future__ import annotations

import concurrent.futures
import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Tuple

from .config import LintConfig
from .errors import ScanError
from .result import Finding
from .severity import Severity
from .utils import CancelToken, read_text_file

logger = logging.getLogger(__name__)

SCRIPT_SUFFIXES = (".lua", ".vim")
_POLL_INTERVAL = 0.05


class Role(str, Enum):
    """What a file is for, derived purely from where it lives in the tree."""

    ENTRY_POINT = "entry-point"
    LAZY_MODULE = "lazy-module"
    FILETYPE_SCRIPT = "filetype-script"
    HEALTH_MODULE = "health-module"
    HELP_DOC = "help-doc"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FileRecord:
    path: Path
    relpath: str
    role: Role
    text: str

    @property
    def is_lua(self) -> bool:
        return self.relpath.endswith(".lua")

    @property
    def is_vim(self) -> bool:
        return self.relpath.endswith(".vim")


@dataclass
class ScanOutcome:
    """Records read by one scan plus the warnings raised while reading them."""

    records: Tuple[FileRecord, ...] = ()
    findings: List[Finding] = field(default_factory=list)
    partial: bool = False


def classify(relpath: str) -> Role:
    """Map a root-relative POSIX path to its role."""

    parts = PurePosixPath(relpath).parts
    if not parts:
        return Role.UNKNOWN
    suffix = PurePosixPath(relpath).suffix
    top = parts[0]

    if top in ("plugin", "ftdetect") and len(parts) == 2 and suffix in SCRIPT_SUFFIXES:
        return Role.ENTRY_POINT
    if suffix in SCRIPT_SUFFIXES and (
        (top == "ftplugin" and len(parts) >= 2)
        or (top == "after" and len(parts) >= 3 and parts[1] == "ftplugin")
    ):
        return Role.FILETYPE_SCRIPT
    if top == "lua" and len(parts) >= 2 and suffix == ".lua":
        name = parts[-1]
        if name == "health.lua" or (name == "init.lua" and len(parts) >= 3 and parts[-2] == "health"):
            return Role.HEALTH_MODULE
        return Role.LAZY_MODULE
    if top == "autoload" and len(parts) == 3 and parts[1] == "health" and suffix == ".vim":
        return Role.HEALTH_MODULE
    if top == "doc" and len(parts) == 2 and suffix == ".txt":
        return Role.HELP_DOC
    return Role.UNKNOWN


def scan_tree(root: Path, config: Optional[LintConfig] = None, cancel: Optional[CancelToken] = None) -> ScanOutcome:
    """Read every text file under ``root`` into an immutable record set.

    Raises ``ScanError`` only for a missing or unreadable root; everything
    below it degrades to warning findings.
    """

    config = config or LintConfig()
    cancel = cancel or CancelToken()
    root = Path(root)
    if not root.exists():
        raise ScanError(f"scan root does not exist: {root}")
    if not root.is_dir():
        raise ScanError(f"scan root is not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ScanError(f"scan root is not readable: {root}")

    outcome = ScanOutcome()
    paths = _walk(root, config, outcome, cancel)
    logger.debug("discovered %d files under %s", len(paths), root)

    records = _read_all(paths, config, outcome, cancel)
    outcome.records = tuple(records[key] for key in sorted(records))
    return outcome


def _read_all(
    paths: List[Tuple[Path, str]], config: LintConfig, outcome: ScanOutcome, cancel: CancelToken
) -> Dict[str, FileRecord]:
    """Read ``paths`` on at most ``config.workers`` threads.

    Each read gets ``config.timeout`` seconds from the moment a worker picks
    it up. A read that overruns is abandoned; once every worker holds an
    abandoned read, the reads still queued move to a fresh pool.
    """

    records: Dict[str, FileRecord] = {}
    started: Dict[str, float] = {}
    executors: List[concurrent.futures.ThreadPoolExecutor] = []

    def read(path: Path, relpath: str) -> Optional[str]:
        started[relpath] = time.monotonic()
        return read_text_file(path)

    def submit(items: List[Tuple[Path, str]]) -> Dict[concurrent.futures.Future, Tuple[Path, str]]:
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="pluglint-read")
        executors.append(executor)
        return {executor.submit(read, path, relpath): (path, relpath) for path, relpath in items}

    try:
        pending = submit(paths)
        abandoned = 0
        while pending:
            if cancel.cancelled:
                outcome.partial = True
                break
            deadlines = [started[relpath] + config.timeout for _, relpath in pending.values() if relpath in started]
            wait = min(deadlines) - time.monotonic() if deadlines else config.timeout
            done, _ = concurrent.futures.wait(
                pending, timeout=max(0.0, min(wait, _POLL_INTERVAL)), return_when=concurrent.futures.FIRST_COMPLETED
            )
            for future in done:
                path, relpath = pending.pop(future)
                record = _collect(future, path, relpath, outcome)
                if record is not None:
                    records[relpath] = record

            now = time.monotonic()
            for future, (path, relpath) in list(pending.items()):
                if relpath in started and now - started[relpath] >= config.timeout and not future.done():
                    del pending[future]
                    abandoned += 1
                    logger.warning("timed out reading %s", relpath)
                    outcome.findings.append(
                        Finding(
                            rule="read-timeout",
                            severity=Severity.WARN,
                            path=relpath,
                            message=f"unreadable within timeout ({config.timeout:g}s)",
                        )
                    )

            if pending and abandoned >= config.workers:
                queued = [future for future in pending if future.cancel()]
                if queued:
                    logger.debug("read pool exhausted by stalled reads; moving %d reads to a new pool", len(queued))
                    pending.update(submit([pending.pop(future) for future in queued]))
                    abandoned = 0
    finally:
        # abandoned reads may still hold a worker; do not wait for them
        for executor in executors:
            executor.shutdown(wait=False, cancel_futures=True)
    return records


def _collect(future: concurrent.futures.Future, path: Path, relpath: str, outcome: ScanOutcome) -> Optional[FileRecord]:
    try:
        text = future.result()
    except OSError as exc:
        logger.warning("cannot read %s: %s", relpath, exc)
        outcome.findings.append(
            Finding(rule="scan", severity=Severity.WARN, path=relpath, message=f"unreadable: {exc.strerror or exc}")
        )
        return None
    if text is None:
        logger.debug("skipping binary file %s", relpath)
        return None
    return FileRecord(path=path, relpath=relpath, role=classify(relpath), text=text)


def _walk(root: Path, config: LintConfig, outcome: ScanOutcome, cancel: CancelToken) -> List[Tuple[Path, str]]:
    found: List[Tuple[Path, str]] = []

    def on_error(exc: OSError) -> None:
        failed = Path(exc.filename) if exc.filename else root
        if failed == root:
            raise ScanError(f"scan root is not readable: {root}") from exc
        relpath = _relative(root, failed)
        logger.warning("skipping unreadable directory %s: %s", relpath, exc)
        outcome.findings.append(
            Finding(
                rule="scan",
                severity=Severity.WARN,
                path=relpath,
                message=f"directory unreadable, subtree skipped: {exc.strerror or exc}",
            )
        )

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        if cancel.cancelled:
            outcome.partial = True
            break
        dirnames[:] = sorted(name for name in dirnames if name not in config.exclude_dirs)
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_file():
                found.append((path, _relative(root, path)))
    return found


def _relative(root: Path, path: Path) -> str:
    # undecodable filename bytes are kept visible as \xNN escapes
    relpath = path.relative_to(root).as_posix()
    return os.fsencode(relpath).decode("utf-8", "backslashreplace")
