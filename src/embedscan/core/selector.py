from pathlib import Path

from embedscan.core.ast import ParsedFile, parse_go_file
from embedscan.errors import ParseFailure
from embedscan.models import PackageDescriptor


def select_file(package: PackageDescriptor) -> Path | None:
    """Return the one file scanned for ``package``, or None when it has none.

    Regular sources win over tests, tests over external tests and external
    tests over cgo files.
    """
    candidates = package.candidate_files()
    if not candidates:
        return None
    return Path(package.dir) / candidates[0]


def select_and_parse(package: PackageDescriptor) -> ParsedFile | None:
    path = select_file(package)
    if path is None:
        return None
    try:
        return parse_go_file(path)
    except OSError as exc:
        raise ParseFailure(str(path), str(exc)) from exc
