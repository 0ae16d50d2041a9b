from __future__ import annotations

from typing import TextIO

from rich.console import Console
from tree_sitter import Node

from embedscan.core.ast import ParsedFile
from embedscan.core.matcher import Match
from embedscan.core.syntax import STRUCT_TYPE, field_list, has_star
from embedscan.errors import ReconstructionError


def make_console(file: TextIO | None = None) -> Console:
    """Console that prints Go source verbatim: no markup, emoji or wrapping."""
    return Console(file=file, markup=False, emoji=False, highlight=False, soft_wrap=True)


def _text(parsed: ParsedFile, node: Node) -> str:
    try:
        return parsed.text(node)
    except UnicodeDecodeError as exc:
        raise ReconstructionError(f"{parsed.position(node)}: source is not valid UTF-8") from exc


def _type_text(parsed: ParsedFile, node: Node, depth: int) -> str:
    if node.type == STRUCT_TYPE:
        return render_struct(parsed, node, depth)
    return _text(parsed, node)


def _field_cells(parsed: ParsedFile, field_node: Node, depth: int) -> list[str]:
    type_node = field_node.child_by_field_name("type")
    if type_node is None:
        raise ReconstructionError(f"{parsed.position(field_node)}: field has no type")
    type_text = _type_text(parsed, type_node, depth)

    names = field_node.children_by_field_name("name")
    if names:
        cells = [", ".join(_text(parsed, name) for name in names), type_text]
    else:
        cells = [("*" if has_star(field_node) else "") + type_text]

    tag = field_node.child_by_field_name("tag")
    if tag is not None:
        cells.append(_text(parsed, tag))
    return cells


def _last_line_width(cell: str) -> int:
    return len(cell.rsplit("\n", 1)[-1])


def _align(rows: list[list[str]]) -> list[str]:
    columns = max(len(row) for row in rows)
    widths = [0] * columns
    for row in rows:
        for index, cell in enumerate(row[:-1]):
            widths[index] = max(widths[index], _last_line_width(cell))

    lines = []
    for row in rows:
        parts = [cell + " " * (widths[index] - _last_line_width(cell) + 1) for index, cell in enumerate(row[:-1])]
        parts.append(row[-1])
        lines.append("".join(parts))
    return lines


def render_struct(parsed: ParsedFile, node: Node, depth: int = 0) -> str:
    """Rebuild gofmt-style source text for a ``struct_type`` node.

    Comments inside the struct are not reproduced.
    """
    if node.type != STRUCT_TYPE:
        raise ReconstructionError(f"{parsed.position(node)}: cannot render {node.type} as a struct type")
    if node.has_error:
        raise ReconstructionError(f"{parsed.position(node)}: struct type contains syntax errors")

    declarations = field_list(node)
    fields = [] if declarations is None else [c for c in declarations.named_children if c.type == "field_declaration"]
    if not fields:
        return "struct{}"

    rows = [_field_cells(parsed, field, depth + 1) for field in fields]
    indent = "\t" * (depth + 1)
    body = "\n".join(indent + line for line in _align(rows))
    return "struct {\n" + body + "\n" + "\t" * depth + "}"


class Reporter:
    """Print matches and non-fatal errors, in order, on one stream."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or make_console()
        self.reported = 0
        self.failed = 0

    @property
    def console(self) -> Console:
        return self._console

    def message(self, text: str) -> None:
        self._console.print(text)

    def report(self, parsed: ParsedFile, match: Match) -> bool:
        self._console.print(f"{match.position}:")
        try:
            text = render_struct(parsed, match.node)
        except ReconstructionError as exc:
            self.failed += 1
            self._console.print(str(exc))
            self._console.print()
            return False
        # rich expands tabs on print; struct text keeps gofmt indentation
        self._console.file.write(text + "\n")
        self._console.print()
        self.reported += 1
        return True
