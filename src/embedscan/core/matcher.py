from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node

from embedscan.core.ast import ParsedFile
from embedscan.core.syntax import (
    STRUCT_TYPE,
    Field,
    Identifier,
    OtherType,
    PointerTo,
    QualifiedIdentifier,
    is_exported,
    struct_fields,
)
from embedscan.models import SourcePosition


@dataclass(frozen=True)
class Match:
    node: Node
    position: SourcePosition
    field: Field


def embeds_unexported_pointer(field: Field) -> bool:
    if not field.embedded:
        return False
    match field.type_expr:
        case PointerTo(target=Identifier(name=name)):
            return not is_exported(name)
        case PointerTo():
            return False
        case Identifier() | QualifiedIdentifier() | OtherType():
            return False


def first_offending_field(struct_node: Node) -> Field | None:
    for field in struct_fields(struct_node):
        if embeds_unexported_pointer(field):
            return field
    return None


def _walk(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_embedding_matches(parsed: ParsedFile) -> tuple[Match, ...]:
    """Return every struct type embedding a pointer to an unexported type.

    Nodes come back in pre-order, each at most once.
    """
    matches: list[Match] = []
    for node in _walk(parsed.root):
        if node.type != STRUCT_TYPE:
            continue
        field = first_offending_field(node)
        if field is not None:
            matches.append(Match(node=node, position=parsed.position(node), field=field))
    return tuple(matches)
