import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from embedscan.errors import InvalidPatternError, NoGoError, PackageResolutionError
from embedscan.models import PackageDescriptor

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_PATTERN = ".*"


@dataclass(frozen=True)
class Proceed:
    package: PackageDescriptor


@dataclass(frozen=True)
class SkipSilently:
    reason: str = ""


@dataclass(frozen=True)
class SkipWithMessage:
    text: str


Verdict = Proceed | SkipSilently | SkipWithMessage


def compile_import_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc


class PackageFilter:
    """Gate discovered import paths on a pattern and classify resolution errors."""

    def __init__(self, pattern: re.Pattern[str], resolve: Callable[[str], PackageDescriptor]) -> None:
        self._pattern = pattern
        self._resolve = resolve

    @property
    def pattern(self) -> re.Pattern[str]:
        return self._pattern

    def should_process(self, import_path: str) -> bool:
        return self._pattern.search(import_path) is not None

    def classify(self, import_path: str, error: Exception | None = None) -> Verdict:
        if not self.should_process(import_path):
            return SkipSilently("filtered")
        if error is None:
            try:
                return Proceed(self._resolve(import_path))
            except PackageResolutionError as exc:
                error = exc
        if isinstance(error, NoGoError):
            logger.debug("Skipping %s: %s", import_path, error)
            return SkipSilently("no Go files")
        return SkipWithMessage(str(error))
