"""Unit tests for resolving import paths into package descriptors."""

import pytest

from embedscan.errors import CgoInTestError, MultiplePackageError, NoGoError, PackageNotFoundError
from embedscan.gobuild.importer import import_package, read_header
from tests.conftest import GoWorkspace


def test_read_header() -> None:
    header = read_header(b'// doc\npackage foo\n\nimport (\n\t"fmt"\n\tx "os"\n)\n\nimport "C"\n\nfunc f() {}\n')
    assert header is not None
    assert header.package == "foo"
    assert header.imports == ("fmt", "os", "C")


def test_read_header_without_package() -> None:
    assert read_header(b"// nothing here\n") is None


def test_files_are_sorted_into_categories(workspace: GoWorkspace) -> None:
    workspace.add("example.com/p", "b.go", "package p\n")
    workspace.add("example.com/p", "a.go", "package p\n")
    workspace.add("example.com/p", "a_test.go", "package p\n")
    workspace.add("example.com/p", "ext_test.go", "package p_test\n")
    workspace.add("example.com/p", "cgo.go", 'package p\n\nimport "C"\n')
    workspace.add("example.com/p", "_hidden.go", "package p\n")
    workspace.add("example.com/p", "notes.txt", "not go")

    package = import_package(workspace.context, "example.com/p")

    assert package.name == "p"
    assert package.dir == str(workspace.src / "example.com/p")
    assert package.go_files == ("a.go", "b.go")
    assert package.test_go_files == ("a_test.go",)
    assert package.x_test_go_files == ("ext_test.go",)
    assert package.cgo_files == ("cgo.go",)
    assert package.ignored_go_files == ()


def test_constraints_move_files_to_ignored(workspace: GoWorkspace) -> None:
    workspace.add("example.com/p", "p.go", "package p\n")
    workspace.add("example.com/p", "p_windows.go", "package p\n")
    workspace.add("example.com/p", "tagged.go", "//go:build ignore\n\npackage main\n")
    workspace.add("example.com/p", "doc.go", "package documentation\n")

    package = import_package(workspace.context, "example.com/p")

    assert package.go_files == ("p.go",)
    assert package.ignored_go_files == ("doc.go", "p_windows.go", "tagged.go")


def test_cgo_files_ignored_without_cgo(workspace: GoWorkspace) -> None:
    workspace.cgo_enabled = False
    workspace.add("example.com/p", "p.go", "package p\n")
    workspace.add("example.com/p", "c.go", 'package p\n\nimport "C"\n')

    package = import_package(workspace.context, "example.com/p")

    assert package.cgo_files == ()
    assert package.ignored_go_files == ("c.go",)


def test_external_test_only_package(workspace: GoWorkspace) -> None:
    workspace.add("example.com/p", "a_test.go", "package p_test\n")

    package = import_package(workspace.context, "example.com/p")

    assert package.name == "p"
    assert package.x_test_go_files == ("a_test.go",)


def test_missing_package(workspace: GoWorkspace) -> None:
    with pytest.raises(PackageNotFoundError, match='cannot find package "example.com/missing"'):
        import_package(workspace.context, "example.com/missing")


def test_directory_without_go_files(workspace: GoWorkspace) -> None:
    workspace.add("example.com/docs", "README.md", "# docs")

    with pytest.raises(NoGoError, match="no buildable Go source files") as info:
        import_package(workspace.context, "example.com/docs")

    assert info.value.excluded is False


def test_constraints_exclude_everything(workspace: GoWorkspace) -> None:
    workspace.add("example.com/win", "w_windows.go", "package win\n")

    with pytest.raises(NoGoError, match="build constraints exclude all Go files") as info:
        import_package(workspace.context, "example.com/win")

    assert info.value.excluded is True


def test_multiple_packages_in_one_directory(workspace: GoWorkspace) -> None:
    workspace.add("example.com/mixed", "a.go", "package a\n")
    workspace.add("example.com/mixed", "b.go", "package b\n")

    with pytest.raises(MultiplePackageError, match=r"found packages a \(a.go\) and b \(b.go\)"):
        import_package(workspace.context, "example.com/mixed")


def test_cgo_in_test_is_rejected(workspace: GoWorkspace) -> None:
    workspace.add("example.com/p", "p.go", "package p\n")
    workspace.add("example.com/p", "p_test.go", 'package p\n\nimport "C"\n')

    with pytest.raises(CgoInTestError, match="use of cgo in test"):
        import_package(workspace.context, "example.com/p")


def test_legacy_build_ignore_file_is_skipped(workspace: GoWorkspace) -> None:
    workspace.add("example.com/p", "gen.go", "// +build ignore\n\npackage main\n")
    workspace.add("example.com/p", "p.go", "package p\n\ntype A struct { *b }\n")

    package = import_package(workspace.context, "example.com/p")

    assert package.name == "p"
    assert package.go_files == ("p.go",)
    assert package.ignored_go_files == ("gen.go",)
