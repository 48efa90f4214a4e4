from pathlib import Path

from pluglint.rules import ScanContext
from pluglint.scanner import FileRecord, classify

FIXTURES = Path(__file__).parent / "fixtures"


def make_record(relpath, text):
    return FileRecord(path=Path("/plugin") / relpath, relpath=relpath, role=classify(relpath), text=text)


def make_context(files, **kwargs):
    records = tuple(make_record(relpath, text) for relpath, text in files.items())
    return ScanContext(records=records, **kwargs)
