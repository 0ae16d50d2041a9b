import logging
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node

from embedscan.core.ast import parse_go_source
from embedscan.errors import (
    CgoInTestError,
    MultiplePackageError,
    NoGoError,
    PackageNotFoundError,
    PackageResolutionError,
)
from embedscan.gobuild.constraints import ConstraintSyntaxError, good_os_arch_file, should_build
from embedscan.gobuild.context import BuildContext
from embedscan.models import PackageDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileHeader:
    package: str
    imports: tuple[str, ...]


def _unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in {'"', "`"}:
        return literal[1:-1]
    return literal


def _import_paths(declaration: Node) -> list[str]:
    paths: list[str] = []
    stack = list(reversed(declaration.named_children))
    while stack:
        node = stack.pop()
        if node.type == "import_spec":
            path = node.child_by_field_name("path")
            if path is not None and path.text is not None:
                paths.append(_unquote(path.text.decode("utf-8")))
        else:
            stack.extend(reversed(node.named_children))
    return paths


def read_header(source: bytes) -> FileHeader | None:
    """Read the package clause and imports of a Go file.

    Errors after the import block are tolerated. Returns None when there is no
    package clause.
    """
    root = parse_go_source(source, strict=False).root
    package: str | None = None
    imports: list[str] = []
    for child in root.named_children:
        if child.type == "comment":
            continue
        if child.type == "package_clause":
            for part in child.named_children:
                if part.type in {"package_identifier", "identifier"} and part.text is not None:
                    package = part.text.decode("utf-8")
            continue
        if child.type == "import_declaration":
            imports.extend(_import_paths(child))
            continue
        if package is not None:
            break
    if package is None:
        return None
    return FileHeader(package=package, imports=tuple(imports))


def find_package_dir(context: BuildContext, import_path: str) -> Path:
    searched: list[str] = []
    for src_dir in context.src_dirs():
        candidate = src_dir / import_path
        if candidate.is_dir():
            return candidate
        searched.append(f"{candidate} (from {context.root_label(src_dir)})")
    raise PackageNotFoundError(import_path, searched)


def import_package(context: BuildContext, import_path: str) -> PackageDescriptor:
    """Resolve ``import_path`` and sort its Go files the way ``go build`` would."""
    directory = find_package_dir(context, import_path)
    try:
        entries = sorted(entry.name for entry in directory.iterdir() if entry.is_file())
    except OSError as exc:
        raise PackageResolutionError(import_path, f"open {directory}: {exc.strerror or exc}") from exc

    go_files: list[str] = []
    test_go_files: list[str] = []
    x_test_go_files: list[str] = []
    cgo_files: list[str] = []
    ignored: list[str] = []
    package_name = ""
    first_file = ""

    for name in entries:
        if not name.endswith(".go") or name.startswith(("_", ".")):
            continue
        if not good_os_arch_file(context, name):
            ignored.append(name)
            continue

        path = directory / name
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise PackageResolutionError(import_path, f"open {path}: {exc.strerror or exc}") from exc

        try:
            buildable = should_build(context, source.decode("utf-8", errors="replace"))
        except ConstraintSyntaxError as exc:
            raise PackageResolutionError(import_path, f"{path}: invalid //go:build line: {exc}") from exc
        if not buildable:
            ignored.append(name)
            continue

        header = read_header(source)
        if header is None:
            raise PackageResolutionError(import_path, f"{path}: expected 'package' clause")
        if header.package == "documentation":
            ignored.append(name)
            continue

        is_test = name.endswith("_test.go")
        pkg = header.package
        is_x_test = is_test and pkg.endswith("_test") and pkg != package_name
        if is_x_test:
            pkg = pkg[: -len("_test")]

        if not package_name:
            package_name = pkg
            first_file = name
        elif pkg != package_name:
            raise MultiplePackageError(import_path, str(directory), [package_name, pkg], [first_file, name])

        if "C" in header.imports:
            if is_test:
                raise CgoInTestError(import_path, str(path))
            if not context.cgo_enabled:
                ignored.append(name)
                continue
            cgo_files.append(name)
        elif is_x_test:
            x_test_go_files.append(name)
        elif is_test:
            test_go_files.append(name)
        else:
            go_files.append(name)

    if not (go_files or cgo_files or test_go_files or x_test_go_files):
        raise NoGoError(import_path, str(directory), excluded=bool(ignored))

    logger.debug("Resolved %s in %s (%d files)", import_path, directory, len(go_files) + len(cgo_files))
    return PackageDescriptor(
        import_path=import_path,
        dir=str(directory),
        name=package_name,
        go_files=tuple(go_files),
        test_go_files=tuple(test_go_files),
        x_test_go_files=tuple(x_test_go_files),
        cgo_files=tuple(cgo_files),
        ignored_go_files=tuple(ignored),
    )
