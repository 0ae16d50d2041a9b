import logging
from dataclasses import dataclass

from embedscan.core.filter import PackageFilter, Proceed, SkipSilently, SkipWithMessage, compile_import_pattern
from embedscan.core.matcher import find_embedding_matches
from embedscan.core.ports.discovery import PackageDiscovery
from embedscan.core.report import Reporter
from embedscan.core.selector import select_and_parse
from embedscan.errors import ParseFailure
from embedscan.models import PackageDescriptor

logger = logging.getLogger(__name__)

ABORT_MARKER = "aborting package"


@dataclass
class ScanSummary:
    discovered: int = 0
    scanned: int = 0
    skipped: int = 0
    failed: int = 0
    matches: int = 0


def scan_package(package: PackageDescriptor, reporter: Reporter, summary: ScanSummary) -> None:
    try:
        parsed = select_and_parse(package)
    except ParseFailure as exc:
        summary.failed += 1
        reporter.message(str(exc))
        reporter.message(ABORT_MARKER)
        logger.debug("Aborted %s: %s", package.import_path, exc)
        return
    if parsed is None:
        summary.skipped += 1
        logger.debug("No file to scan in %s", package.import_path)
        return

    summary.scanned += 1
    for match in find_embedding_matches(parsed):
        summary.matches += 1
        reporter.report(parsed, match)


def run_scan(pattern: str, discovery: PackageDiscovery, reporter: Reporter) -> ScanSummary:
    """Scan every discovered package whose import path matches ``pattern``.

    Raises ``InvalidPatternError`` before touching discovery when the pattern
    does not compile. Every other error is printed and confined to the
    package it came from.
    """
    package_filter = PackageFilter(compile_import_pattern(pattern), discovery.import_package)
    summary = ScanSummary()

    def _process(import_path: str, error: Exception | None) -> None:
        summary.discovered += 1
        verdict = package_filter.classify(import_path, error)
        match verdict:
            case SkipSilently():
                summary.skipped += 1
            case SkipWithMessage(text=text):
                summary.failed += 1
                reporter.message(text)
            case Proceed(package=package):
                scan_package(package, reporter, summary)

    discovery.for_each_package(_process)
    logger.info(
        "Scanned %d of %d packages: %d matches, %d failed",
        summary.scanned,
        summary.discovered,
        summary.matches,
        summary.failed,
    )
    return summary
