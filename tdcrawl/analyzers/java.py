"""Tree-sitter powered Java declaration parser."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import tree_sitter_java
from tree_sitter import Language, Node, Parser

from ..errors import ParseFailure

JAVA_LANGUAGE = Language(tree_sitter_java.language())

_TYPE_DECLARATIONS = {"class_declaration", "interface_declaration"}
_ANNOTATIONS = {"annotation", "marker_annotation"}
_NAME_NODES = {"identifier", "scoped_identifier"}
_COMMENTS = {"line_comment", "block_comment"}


@dataclass
class JavaAnnotation:
    """An annotation as written in source.

    ``pairs`` holds ``name=value`` arguments in source order; ``value`` holds
    the single unnamed argument form. Both empty means a bare marker or an
    empty argument list.
    """

    name: str
    pairs: List[Tuple[str, str]] = field(default_factory=list)
    value: Optional[str] = None


@dataclass
class JavaMethod:
    name: str
    annotations: List[JavaAnnotation] = field(default_factory=list)


@dataclass
class JavaCompilationUnit:
    """Declarations of one parsed Java source file."""

    package: Optional[str]
    type_names: List[str] = field(default_factory=list)
    methods: List[JavaMethod] = field(default_factory=list)

    @property
    def primary_type(self) -> Optional[str]:
        return self.type_names[0] if self.type_names else None


class JavaSourceParser:
    """Parses Java text into a ``JavaCompilationUnit`` or raises ``ParseFailure``.

    Tree-sitter parsers are not thread-safe, so each thread lazily gets its own.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def parse(self, text: str) -> JavaCompilationUnit:
        source_bytes = text.encode("utf-8")
        tree = self._parser().parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            raise ParseFailure("Java source contains syntax errors")

        unit = JavaCompilationUnit(package=None)
        for node in _preorder(root):
            if node.type == "package_declaration" and unit.package is None:
                unit.package = _package_name(node, source_bytes)
            elif node.type in _TYPE_DECLARATIONS:
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    unit.type_names.append(_node_text(name_node, source_bytes))
            elif node.type == "method_declaration":
                method = _method(node, source_bytes)
                if method is not None:
                    unit.methods.append(method)
        return unit

    def _parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(JAVA_LANGUAGE)
            self._local.parser = parser
        return parser


def _preorder(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _package_name(node: Node, source_bytes: bytes) -> Optional[str]:
    for child in node.named_children:
        if child.type in _NAME_NODES:
            return _node_text(child, source_bytes)
    return None


def _method(node: Node, source_bytes: bytes) -> Optional[JavaMethod]:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    method = JavaMethod(name=_node_text(name_node, source_bytes))
    for child in node.children:
        if child.type != "modifiers":
            continue
        for modifier in child.named_children:
            if modifier.type in _ANNOTATIONS:
                method.annotations.append(_annotation(modifier, source_bytes))
    return method


def _annotation(node: Node, source_bytes: bytes) -> JavaAnnotation:
    name_node = node.child_by_field_name("name")
    annotation = JavaAnnotation(name=_node_text(name_node, source_bytes) if name_node else "")
    arguments = node.child_by_field_name("arguments")
    if arguments is None:
        return annotation

    values = [child for child in arguments.named_children if child.type not in _COMMENTS]
    pairs = [child for child in values if child.type == "element_value_pair"]
    if pairs:
        for pair in pairs:
            key = pair.child_by_field_name("key")
            value = pair.child_by_field_name("value")
            if key is None or value is None:
                continue
            annotation.pairs.append((_node_text(key, source_bytes), _node_text(value, source_bytes)))
    elif values:
        annotation.value = _node_text(values[0], source_bytes)
    return annotation


__all__ = [
    "JAVA_LANGUAGE",
    "JavaAnnotation",
    "JavaCompilationUnit",
    "JavaMethod",
    "JavaSourceParser",
]
