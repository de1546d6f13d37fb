"""Tree-sitter powered scanner for ``+builder`` annotated Go types."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from .codegen.constants import DEFAULT_MARKER
from .logging import get_logger
from .models import (
    AnnotatedType,
    EmbeddedRelation,
    Field,
    Identifier,
    ImportSpec,
    MappingOf,
    Member,
    PointerTo,
    QualifiedName,
    SequenceOf,
    SourceUnit,
    TypeExpr,
    UnsupportedType,
)

GO_LANGUAGE = Language(tree_sitter_go.language())

_TYPE_SPEC_NODES = {"type_spec", "type_alias"}


class ParseError(RuntimeError):
    """Raised when a source file is not syntactically valid Go."""

    def __init__(
        self,
        message: str,
        *,
        path: Union[str, Path, None] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.message = message
        self.path = str(path) if path is not None else None
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.path or "<source>"
        if self.line is not None:
            location += f":{self.line}"
            if self.column is not None:
                location += f":{self.column}"
        return f"{location}: {self.message}"


class AnnotationScanner:
    """Parses one Go file and extracts the struct types carrying the builder marker."""

    def __init__(self, marker: str = DEFAULT_MARKER) -> None:
        self.marker = marker
        self._parser: Optional[Parser] = None
        self.logger = get_logger("scanner")

    def scan(self, source: Union[str, bytes], *, path: Union[str, Path, None] = None) -> SourceUnit:
        source_bytes = source.encode("utf-8") if isinstance(source, str) else source
        tree = self._get_parser().parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            raise self._syntax_error(root, path)

        package = self._package_name(root, source_bytes)
        if package is None:
            raise ParseError("expected 'package' clause", path=path, line=1, column=1)

        imports = list(self._collect_imports(root, source_bytes))
        types: Dict[str, AnnotatedType] = {}
        for annotated in self._collect_annotated_types(root, source_bytes):
            if annotated.name in types:
                self.logger.debug("Type %s declared twice; keeping the later declaration", annotated.name)
            types[annotated.name] = annotated

        self.logger.debug(
            "Scanned %s: package %s, %d imports, %d annotated types",
            path or "<source>",
            package,
            len(imports),
            len(types),
        )
        return SourceUnit(package=package, imports=tuple(imports), types=types)

    def _get_parser(self) -> Parser:
        if self._parser is None:
            self._parser = Parser(GO_LANGUAGE)
        return self._parser

    @staticmethod
    def _node_text(node: Node, source_bytes: bytes) -> str:
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def _syntax_error(self, root: Node, path: Union[str, Path, None]) -> ParseError:
        bad = _first_error_node(root) or root
        row, column = bad.start_point
        if bad.is_missing:
            message = f"syntax error: missing {bad.type!r}"
        else:
            message = "syntax error"
        return ParseError(message, path=path, line=row + 1, column=column + 1)

    def _package_name(self, root: Node, source_bytes: bytes) -> Optional[str]:
        for child in root.children:
            if child.type != "package_clause":
                continue
            for part in child.named_children:
                if part.type == "package_identifier":
                    return self._node_text(part, source_bytes)
        return None

    def _collect_imports(self, root: Node, source_bytes: bytes) -> Iterable[ImportSpec]:
        for child in root.children:
            if child.type != "import_declaration":
                continue
            for spec in _iter_import_specs(child):
                path_node = spec.child_by_field_name("path")
                if path_node is None:
                    continue
                alias_node = spec.child_by_field_name("name")
                yield ImportSpec(
                    path=self._node_text(path_node, source_bytes),
                    alias=self._node_text(alias_node, source_bytes) if alias_node else None,
                )

    def _collect_annotated_types(self, root: Node, source_bytes: bytes) -> Iterable[AnnotatedType]:
        for child in root.children:
            if child.type != "type_declaration":
                continue
            if not self._has_marker(child, source_bytes):
                continue
            for spec in child.named_children:
                if spec.type not in _TYPE_SPEC_NODES:
                    continue
                name_node = spec.child_by_field_name("name")
                type_node = spec.child_by_field_name("type")
                if name_node is None or type_node is None:
                    continue
                name = self._node_text(name_node, source_bytes)
                if type_node.type != "struct_type":
                    self.logger.debug("Ignoring %s: annotated but not a struct (%s)", name, type_node.type)
                    continue
                yield AnnotatedType(name=name, members=tuple(self._collect_members(type_node, source_bytes)))

    def _has_marker(self, declaration: Node, source_bytes: bytes) -> bool:
        return any(
            self.marker in self._node_text(comment, source_bytes)
            for comment in _doc_comments(declaration)
        )

    def _collect_members(self, struct_node: Node, source_bytes: bytes) -> List[Member]:
        members: List[Member] = []
        for body in struct_node.named_children:
            if body.type != "field_declaration_list":
                continue
            for declaration in body.named_children:
                if declaration.type != "field_declaration":
                    continue
                type_node = declaration.child_by_field_name("type")
                if type_node is None:
                    continue
                type_expr = self._type_expr(type_node, source_bytes)
                names = declaration.children_by_field_name("name")
                if not names:
                    if any(child.type == "*" for child in declaration.children):
                        type_expr = PointerTo(type_expr)
                    members.append(EmbeddedRelation(type=type_expr))
                    continue
                for name_node in names:
                    members.append(Field(name=self._node_text(name_node, source_bytes), type=type_expr))
        return members

    def _type_expr(self, node: Node, source_bytes: bytes) -> TypeExpr:
        kind = node.type
        if kind == "type_identifier":
            return Identifier(self._node_text(node, source_bytes))
        if kind == "pointer_type" and node.named_children:
            return PointerTo(self._type_expr(node.named_children[0], source_bytes))
        if kind == "qualified_type":
            package = node.child_by_field_name("package")
            name = node.child_by_field_name("name")
            if package is not None and name is not None:
                return QualifiedName(
                    package=self._node_text(package, source_bytes),
                    name=self._node_text(name, source_bytes),
                )
        if kind == "slice_type":
            element = node.child_by_field_name("element")
            if element is not None:
                return SequenceOf(self._type_expr(element, source_bytes))
        if kind == "array_type":
            element = node.child_by_field_name("element")
            length = node.child_by_field_name("length")
            if element is not None and length is not None:
                return SequenceOf(
                    self._type_expr(element, source_bytes),
                    length=self._node_text(length, source_bytes),
                )
        if kind == "map_type":
            key = node.child_by_field_name("key")
            value = node.child_by_field_name("value")
            if key is not None and value is not None:
                return MappingOf(self._type_expr(key, source_bytes), self._type_expr(value, source_bytes))
        if kind == "parenthesized_type" and node.named_children:
            return self._type_expr(node.named_children[0], source_bytes)
        return UnsupportedType(tag=kind, text=self._node_text(node, source_bytes))


def _iter_import_specs(declaration: Node) -> Iterable[Node]:
    for child in declaration.named_children:
        if child.type == "import_spec":
            yield child
        elif child.type == "import_spec_list":
            for spec in child.named_children:
                if spec.type == "import_spec":
                    yield spec


def _doc_comments(declaration: Node) -> List[Node]:
    """Return the comment group directly above ``declaration``.

    The group ends at the first blank line. A comment sharing a line with the
    previous declaration is that declaration's trailing comment, not doc.
    """
    comments: List[Node] = []
    expected_row = declaration.start_point[0]
    sibling = declaration.prev_named_sibling
    while sibling is not None and sibling.type == "comment":
        if sibling.end_point[0] + 1 < expected_row:
            break
        comments.append(sibling)
        expected_row = sibling.start_point[0]
        sibling = sibling.prev_named_sibling
    if comments and sibling is not None and sibling.type != "comment":
        if sibling.end_point[0] == comments[-1].start_point[0]:
            comments.pop()
    comments.reverse()
    return comments


def _first_error_node(node: Node) -> Optional[Node]:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error_node(child)
            if found is not None:
                return found
    return None


__all__ = ["AnnotationScanner", "GO_LANGUAGE", "ParseError"]
