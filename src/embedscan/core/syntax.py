"""Typed views over the tree-sitter Go grammar.

Only the shapes the matcher cares about are modelled. Every other type
expression collapses into ``OtherType``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node

STRUCT_TYPE = "struct_type"
FIELD_LIST = "field_declaration_list"
FIELD = "field_declaration"


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class QualifiedIdentifier:
    package: str
    name: str


@dataclass(frozen=True)
class PointerTo:
    target: TypeExpr


@dataclass(frozen=True)
class OtherType:
    kind: str


TypeExpr = Identifier | QualifiedIdentifier | PointerTo | OtherType


@dataclass(frozen=True)
class Field:
    names: tuple[str, ...]
    type_expr: TypeExpr
    node: Node

    @property
    def embedded(self) -> bool:
        return not self.names


def is_exported(name: str) -> bool:
    return name[:1].isupper()


def _node_text(node: Node) -> str:
    text = node.text
    return text.decode("utf-8") if text is not None else ""


def type_expr_of(node: Node) -> TypeExpr:
    if node.type == "type_identifier":
        return Identifier(_node_text(node))
    if node.type == "qualified_type":
        package = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        if package is None or name is None:
            return OtherType(node.type)
        return QualifiedIdentifier(_node_text(package), _node_text(name))
    if node.type == "pointer_type":
        pointee = node.named_children[0] if node.named_child_count else None
        return PointerTo(type_expr_of(pointee)) if pointee is not None else OtherType(node.type)
    if node.type == "parenthesized_type" and node.named_child_count == 1:
        return type_expr_of(node.named_children[0])
    return OtherType(node.type)


def has_star(field_node: Node) -> bool:
    return any(not child.is_named and child.type == "*" for child in field_node.children)


def field_of(field_node: Node) -> Field:
    names = tuple(_node_text(name) for name in field_node.children_by_field_name("name"))
    type_node = field_node.child_by_field_name("type")
    type_expr = type_expr_of(type_node) if type_node is not None else OtherType("missing")
    # embedded pointers carry their '*' on the declaration, not on the type node
    if not names and has_star(field_node):
        type_expr = PointerTo(type_expr)
    return Field(names=names, type_expr=type_expr, node=field_node)


def field_list(struct_node: Node) -> Node | None:
    for child in struct_node.named_children:
        if child.type == FIELD_LIST:
            return child
    return None


def struct_fields(struct_node: Node) -> Iterator[Field]:
    declarations = field_list(struct_node)
    if declarations is None:
        return
    for child in declarations.named_children:
        if child.type == FIELD:
            yield field_of(child)
