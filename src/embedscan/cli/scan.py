from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from embedscan.core.ast import parse_go_file
from embedscan.core.filter import (
    DEFAULT_IMPORT_PATTERN,
    PackageFilter,
    Proceed,
    SkipWithMessage,
    compile_import_pattern,
)
from embedscan.core.matcher import find_embedding_matches
from embedscan.core.report import Reporter, make_console
from embedscan.core.scan import run_scan
from embedscan.core.selector import select_file
from embedscan.errors import InvalidPatternError, ParseFailure
from embedscan.gobuild import BuildContext, GoBuildDiscovery

console = make_console()
err_console = Console(stderr=True)

ImportPattern = Annotated[
    str,
    typer.Option(
        "--import-pattern",
        "-p",
        envvar="EMBEDSCAN_IMPORT_PATTERN",
        help="Only check packages whose import path matches this regex (Python re syntax, unanchored search).",
    ),
]
GoRoot = Annotated[str | None, typer.Option("--goroot", help="Go installation root. Defaults to $GOROOT or `go env`.")]
GoPath = Annotated[str | None, typer.Option("--gopath", help="GOPATH list. Defaults to $GOPATH, `go env` or ~/go.")]
GoOS = Annotated[str | None, typer.Option("--goos", help="Target operating system for build constraints.")]
GoArch = Annotated[str | None, typer.Option("--goarch", help="Target architecture for build constraints.")]
Tags = Annotated[list[str] | None, typer.Option("--tags", help="Extra build tags, repeatable or comma separated.")]
Cgo = Annotated[bool | None, typer.Option("--cgo/--no-cgo", help="Treat cgo as enabled. Defaults to $CGO_ENABLED.")]


def _split_tags(tags: list[str] | None) -> list[str]:
    return [tag.strip() for value in tags or [] for tag in value.split(",") if tag.strip()]


def _get_discovery(
    goroot: str | None,
    gopath: str | None,
    goos: str | None,
    goarch: str | None,
    cgo: bool | None,
    tags: list[str] | None,
) -> GoBuildDiscovery:
    context = BuildContext.from_env(
        goroot=goroot,
        gopath=gopath,
        goos=goos,
        goarch=goarch,
        cgo_enabled=cgo,
        build_tags=_split_tags(tags),
    )
    return GoBuildDiscovery(context)


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]{escape(message)}[/red]")
    return typer.Exit(1)


def scan(
    import_pattern: ImportPattern = DEFAULT_IMPORT_PATTERN,
    goroot: GoRoot = None,
    gopath: GoPath = None,
    goos: GoOS = None,
    goarch: GoArch = None,
    tags: Tags = None,
    cgo: Cgo = None,
) -> None:
    """Report structs that embed a pointer to an unexported type."""
    discovery = _get_discovery(goroot, gopath, goos, goarch, cgo, tags)
    try:
        run_scan(import_pattern, discovery, Reporter(console))
    except InvalidPatternError as exc:
        raise _fail(str(exc)) from None


def files(
    paths: Annotated[list[Path], typer.Argument(help="Go source files to check.")],
) -> None:
    """Check individual Go files, bypassing package discovery."""
    reporter = Reporter(console)
    for path in paths:
        try:
            parsed = parse_go_file(path)
        except (ParseFailure, OSError) as exc:
            reporter.message(str(exc))
            continue
        for match in find_embedding_matches(parsed):
            reporter.report(parsed, match)


def packages(
    import_pattern: ImportPattern = DEFAULT_IMPORT_PATTERN,
    goroot: GoRoot = None,
    gopath: GoPath = None,
    goos: GoOS = None,
    goarch: GoArch = None,
    tags: Tags = None,
    cgo: Cgo = None,
) -> None:
    """List the packages a scan would visit and the file it would parse."""
    discovery = _get_discovery(goroot, gopath, goos, goarch, cgo, tags)
    try:
        package_filter = PackageFilter(compile_import_pattern(import_pattern), discovery.import_package)
    except InvalidPatternError as exc:
        raise _fail(str(exc)) from None

    rows: list[tuple[str, str, str]] = []
    messages: list[str] = []

    def _collect(import_path: str, error: Exception | None) -> None:
        verdict = package_filter.classify(import_path, error)
        if isinstance(verdict, Proceed):
            selected = select_file(verdict.package)
            rows.append((import_path, verdict.package.name, str(selected) if selected else "-"))
        elif isinstance(verdict, SkipWithMessage):
            messages.append(verdict.text)

    discovery.for_each_package(_collect)

    for message in messages:
        console.print(message)
    table = Table(show_lines=False)
    table.add_column("import_path", no_wrap=True)
    table.add_column("name", no_wrap=True)
    table.add_column("file", overflow="fold")
    for row in rows:
        table.add_row(*row)
    console.print(table)
    console.print(f"({len(rows)} packages)")
