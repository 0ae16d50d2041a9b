"""Shared fixtures and helpers for tests."""

from collections.abc import Callable
from dataclasses import dataclass, field
from io import StringIO
from pathlib import Path

import pytest
from tree_sitter import Language, Parser
from tree_sitter_language_pack import get_language, get_parser

from embedscan.core.ast import ParsedFile, parse_go_source
from embedscan.core.report import Reporter, make_console
from embedscan.gobuild import BuildContext

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Parsing fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def go_parser() -> Parser:
    """Return a tree-sitter parser for Go."""
    return get_parser("go")


@pytest.fixture
def go_language() -> Language:
    """Return the tree-sitter Go language."""
    return get_language("go")


@pytest.fixture
def parse_go() -> Callable[[str], ParsedFile]:
    """Parse a Go snippet held in a string."""

    def _parse(source: str, path: str = "snippet.go") -> ParsedFile:
        return parse_go_source(source.encode("utf-8"), path)

    return _parse


# ---------------------------------------------------------------------------
# Reporter capturing its output
# ---------------------------------------------------------------------------


@dataclass
class CapturedReporter:
    buffer: StringIO
    reporter: Reporter

    @property
    def output(self) -> str:
        return self.buffer.getvalue()

    @property
    def lines(self) -> list[str]:
        return [line.strip() for line in self.output.splitlines()]


@pytest.fixture
def captured() -> CapturedReporter:
    buffer = StringIO()
    return CapturedReporter(buffer=buffer, reporter=Reporter(make_console(buffer)))


# ---------------------------------------------------------------------------
# Fake GOPATH workspace
# ---------------------------------------------------------------------------


@dataclass
class GoWorkspace:
    root: Path
    goos: str = "linux"
    goarch: str = "amd64"
    cgo_enabled: bool = True
    build_tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def src(self) -> Path:
        return self.root / "src"

    def add(self, import_path: str, filename: str, source: str) -> Path:
        directory = self.src / import_path
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_text(source, encoding="utf-8")
        return path

    def mkdir(self, import_path: str) -> Path:
        directory = self.src / import_path
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    @property
    def context(self) -> BuildContext:
        return BuildContext(
            goroot=None,
            gopath=(self.root,),
            goos=self.goos,
            goarch=self.goarch,
            cgo_enabled=self.cgo_enabled,
            build_tags=self.build_tags,
        )


@pytest.fixture
def workspace(tmp_path: Path) -> GoWorkspace:
    root = tmp_path / "gopath"
    (root / "src").mkdir(parents=True)
    return GoWorkspace(root=root)
