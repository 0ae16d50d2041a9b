from dataclasses import dataclass
from pathlib import Path
from typing import cast

from tree_sitter import Node, Tree
from tree_sitter_language_pack import SupportedLanguage, get_parser

from embedscan.errors import ParseFailure
from embedscan.models import SourcePosition

GO_LANGUAGE = "go"


@dataclass(frozen=True)
class ParsedFile:
    path: str
    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8")

    def position(self, node: Node) -> SourcePosition:
        row, column = node.start_point
        return SourcePosition(filename=self.path, line=row + 1, column=column + 1)


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _describe_error(node: Node, source: bytes) -> str:
    if node.is_missing:
        return f"syntax error: missing {node.type}"
    snippet = source[node.start_byte : node.end_byte].decode("utf-8", errors="replace").split("\n", 1)[0]
    if not snippet:
        return "syntax error: unexpected end of file"
    return f"syntax error: unexpected {snippet[:40]!r}"


def parse_go_source(source_bytes: bytes, path: str = "<source>", *, strict: bool = True) -> ParsedFile:
    """Parse Go source into a tree-sitter tree.

    With ``strict`` set, a tree containing error or missing nodes raises
    ``ParseFailure`` pointing at the first such node.
    """
    parser = get_parser(cast(SupportedLanguage, GO_LANGUAGE))
    tree = parser.parse(source_bytes)
    parsed = ParsedFile(path=path, source=source_bytes, tree=tree)

    root = tree.root_node
    if strict and (root.has_error or root.is_missing):
        error_node = _first_error(root) or root
        position = parsed.position(error_node)
        raise ParseFailure(path, f"{position}: {_describe_error(error_node, source_bytes)}")
    return parsed


def parse_go_file(path: str | Path, *, strict: bool = True) -> ParsedFile:
    file_path = Path(path)
    try:
        source_bytes = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None
    return parse_go_source(source_bytes, str(file_path), strict=strict)
