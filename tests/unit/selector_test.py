"""Unit tests for picking and parsing the one scanned file of a package."""

from pathlib import Path

import pytest

from embedscan.core.selector import select_and_parse, select_file
from embedscan.errors import ParseFailure
from embedscan.models import PackageDescriptor


def _package(directory: Path, **files: tuple[str, ...]) -> PackageDescriptor:
    return PackageDescriptor(import_path="example.com/p", dir=str(directory), **files)


@pytest.mark.parametrize(
    ("files", "expected"),
    [
        ({"go_files": ("b.go", "a.go"), "test_go_files": ("a_test.go",), "cgo_files": ("c.go",)}, "b.go"),
        ({"test_go_files": ("a_test.go",), "x_test_go_files": ("x_test.go",)}, "a_test.go"),
        ({"x_test_go_files": ("x_test.go",), "cgo_files": ("c.go",)}, "x_test.go"),
        ({"cgo_files": ("c.go",)}, "c.go"),
    ],
    ids=["go-first", "test-before-xtest", "xtest-before-cgo", "cgo-last"],
)
def test_priority_order(tmp_path: Path, files: dict[str, tuple[str, ...]], expected: str) -> None:
    assert select_file(_package(tmp_path, **files)) == tmp_path / expected


def test_package_without_files_selects_nothing(tmp_path: Path) -> None:
    package = _package(tmp_path)
    assert select_file(package) is None
    assert select_and_parse(package) is None


def test_parses_selected_file(tmp_path: Path) -> None:
    (tmp_path / "a.go").write_text("package p\n\ntype A struct { *b }\n", encoding="utf-8")
    (tmp_path / "z.go").write_text("package p\n\nthis is not go\n", encoding="utf-8")

    parsed = select_and_parse(_package(tmp_path, go_files=("a.go", "z.go")))

    assert parsed is not None
    assert parsed.path == str(tmp_path / "a.go")
    assert parsed.root.type == "source_file"


def test_syntax_error_raises_parse_failure(tmp_path: Path) -> None:
    (tmp_path / "a.go").write_text("package p\n\ntype A struct {\n", encoding="utf-8")

    with pytest.raises(ParseFailure) as info:
        select_and_parse(_package(tmp_path, go_files=("a.go",)))

    assert str(info.value).startswith(f"{tmp_path / 'a.go'}:")
    assert "syntax error" in str(info.value)


def test_missing_file_raises_parse_failure(tmp_path: Path) -> None:
    with pytest.raises(ParseFailure, match="gone.go"):
        select_and_parse(_package(tmp_path, go_files=("gone.go",)))
