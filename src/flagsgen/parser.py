"""parser.py - Extract ``+flags-gen`` annotated structs from Go source via tree-sitter.

Walks the top-level ``type`` declarations of one Go file and returns a
:class:`~flagsgen.models.StructDescriptor` for every struct whose doc comment
contains the ``+flags-gen`` marker::

    // +flags-gen
    // ServerConfig defines server configuration
    type ServerConfig struct {
        // Host is the server hostname
        Host string `json:"host" default:"localhost"`
        Port int    `json:"port" default:"8080"` // listen port
    }

Only exported, named fields are materialized.  Field types must be a plain
name (``int``), a qualified name (``time.Duration``) or a slice of either
(``[]string``); anything else aborts the whole file with :class:`ParseError`.

Comments are associated the way ``go/ast`` does it: a field's doc block is the
run of own-line comments ending on the line directly above it (a blank line
breaks the run), and its line comment is the first comment that starts on the
line where the field ends.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from flagsgen.errors import ParseError
from flagsgen.flagtypes import (
    FlagType,
    convert_default,
    get_flag_method,
    lookup,
    render_default_literal,
    type_imports,
)
from flagsgen.models import FieldDescriptor, StructDescriptor
from flagsgen.naming import derive_flag_name
from flagsgen.tags import extract_default, extract_json_name, unquote_tag

GO_LANGUAGE = Language(tree_sitter_go.language())

ANNOTATION_MARKER = "+flags-gen"

# Type shapes the resolver understands; everything else is unsupported.
_NAMED_TYPE_NODES = ("type_identifier", "qualified_type")


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


@dataclass
class _Comment:
    text: str
    start_byte: int
    end_byte: int
    start_row: int
    end_row: int
    # Only whitespace precedes the comment on its line.
    own_line: bool


class _CommentIndex:
    """All comments of a file, sorted by position, with go/ast-style lookups."""

    def __init__(self, comments: list[_Comment]) -> None:
        self._comments = sorted(comments, key=lambda c: c.start_byte)
        self._starts = [c.start_byte for c in self._comments]
        self._ends = [c.end_byte for c in self._comments]

    @classmethod
    def from_tree(cls, root: Node, code: bytes) -> _CommentIndex:
        comments: list[_Comment] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "comment":
                line_start = code.rfind(b"\n", 0, node.start_byte) + 1
                comments.append(
                    _Comment(
                        text=_text(node),
                        start_byte=node.start_byte,
                        end_byte=node.end_byte,
                        start_row=node.start_point[0],
                        end_row=node.end_point[0],
                        own_line=not code[line_start : node.start_byte].strip(),
                    )
                )
                continue
            stack.extend(node.children)
        return cls(comments)

    def doc_block(self, node: Node) -> list[_Comment]:
        """Return the comment group documenting *node* (possibly empty)."""
        i = bisect.bisect_right(self._ends, node.start_byte) - 1
        expected_row = node.start_point[0] - 1
        block: list[_Comment] = []
        while i >= 0:
            c = self._comments[i]
            if not c.own_line or c.end_row != expected_row:
                break
            block.append(c)
            expected_row = c.start_row - 1
            i -= 1
        block.reverse()
        return block

    def line_comment(self, node: Node) -> _Comment | None:
        """Return the comment starting on the line where *node* ends, if any."""
        i = bisect.bisect_left(self._starts, node.end_byte)
        if i < len(self._comments) and self._comments[i].start_row == node.end_point[0]:
            return self._comments[i]
        return None


def _comment_lines(text: str) -> list[str]:
    """Strip ``//`` or ``/* */`` markers and return the stripped text lines."""
    if text.startswith("//"):
        return [text[2:].strip()]
    body = text[2:-2] if text.endswith("*/") else text[2:]
    return [line.strip() for line in body.splitlines()]


def has_annotation(block: list[_Comment]) -> bool:
    return any(ANNOTATION_MARKER in c.text for c in block)


def doc_text(block: list[_Comment]) -> str:
    """Join a doc block into one line, dropping blank and ``+annotation`` lines."""
    lines: list[str] = []
    for c in block:
        for line in _comment_lines(c.text):
            if not line or line.startswith("+"):
                continue
            lines.append(line)
    return " ".join(lines)


# ---------------------------------------------------------------------------
# Syntax tree helpers
# ---------------------------------------------------------------------------


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _first_error(node: Node) -> Node | None:
    """Return the first ERROR or MISSING node below *node*, depth first."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node


def _package_name(root: Node) -> str:
    for child in root.named_children:
        if child.type == "package_clause":
            for part in child.named_children:
                if part.type == "package_identifier":
                    return _text(part)
    raise ParseError("missing package clause")


def _first_code_child(node: Node) -> Node:
    for child in node.children:
        if child.type != "comment":
            return child
    return node


def _is_exported(name: str) -> bool:
    return name[:1].isupper()


class _UnsupportedType(Exception):
    def __init__(self, node: Node) -> None:
        super().__init__(node.type)
        self.node = node


def resolve_type(node: Node) -> str:
    """Normalize a field type node to a string such as ``[]string``.

    Raises ``_UnsupportedType`` for pointers, maps, arrays, nested slices,
    channels, functions, inline structs/interfaces and generic instantiations.
    """
    if node.type == "type_identifier":
        return _text(node)
    if node.type == "qualified_type":
        package = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        return f"{_text(package)}.{_text(name)}"
    if node.type == "slice_type":
        element = node.child_by_field_name("element")
        if element is not None and element.type in _NAMED_TYPE_NODES:
            return "[]" + resolve_type(element)
    raise _UnsupportedType(node)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def _typed_default(
    raw: str | None, go_type: str, ft: FlagType | None
) -> tuple[object | None, str, str | None]:
    """Return ``(default_value, default_value_literal, default_error)``.

    Malformed defaults never fail the parse: the raw string is kept as the
    value and the literal falls back to the type's zero value.
    """
    zero = ft.zero_literal if ft else ""
    if raw is None:
        return None, zero, None
    try:
        value = convert_default(raw, go_type)
    except ValueError as exc:
        return raw, zero, str(exc)
    if ft is None:
        return value, "", None
    try:
        literal = render_default_literal(value, go_type)
    except (TypeError, ValueError) as exc:
        return value, zero, str(exc)
    return value, literal, None


# ---------------------------------------------------------------------------
# Structs and fields
# ---------------------------------------------------------------------------


def _parse_fields(
    struct_name: str, struct_node: Node, comments: _CommentIndex
) -> list[FieldDescriptor]:
    fields: list[FieldDescriptor] = []
    field_list = next(
        (c for c in struct_node.named_children if c.type == "field_declaration_list"), None
    )
    if field_list is None:
        return fields

    for decl in field_list.named_children:
        if decl.type != "field_declaration":
            continue
        names = decl.children_by_field_name("name")
        # Embedded fields have no name.
        if not names:
            continue

        type_node = decl.child_by_field_name("type")
        tag_node = decl.child_by_field_name("tag")
        tag = unquote_tag(_text(tag_node)) if tag_node is not None else ""
        json_name = extract_json_name(tag)
        raw_default = extract_default(tag)

        first = _first_code_child(decl)
        description = doc_text(comments.doc_block(first))
        if not description:
            code_end = next((n for n in (tag_node, type_node) if n is not None), decl)
            trailing = comments.line_comment(code_end)
            if trailing is not None:
                description = " ".join(line for line in _comment_lines(trailing.text) if line)

        for name_node in names:
            name = _text(name_node)
            if not _is_exported(name):
                continue
            line = name_node.start_point[0] + 1
            if type_node is None:
                raise ParseError(f"line {line}: struct {struct_name}: field {name} has no type")
            try:
                go_type = resolve_type(type_node)
            except _UnsupportedType as exc:
                raise ParseError(
                    f"line {line}: struct {struct_name}: field {name} has unsupported type "
                    f"{_text(type_node)!r} ({exc.node.type})"
                ) from None

            ft = lookup(go_type)
            value, literal, error = _typed_default(raw_default, go_type, ft)
            fields.append(
                FieldDescriptor(
                    name=name,
                    type=go_type,
                    json_name=json_name,
                    flag_name=derive_flag_name(name, json_name),
                    description=description,
                    default_value=value,
                    default_value_literal=literal,
                    registration_method=get_flag_method(go_type),
                    default_error=error,
                    line=line,
                )
            )
    return fields


def _struct_imports(fields: list[FieldDescriptor]) -> list[str]:
    imports: set[str] = set()
    for f in fields:
        imports.update(type_imports(f.type))
    return sorted(imports)


def parse(source: str | bytes) -> list[StructDescriptor]:
    """Parse one Go compilation unit and return its annotated structs.

    Structs are returned in declaration order.  Raises :class:`ParseError` if
    the source has a syntax error or a selected field has an unsupported type;
    no partial result is returned in that case.
    """
    code = source.encode("utf-8") if isinstance(source, str) else source
    tree = Parser(GO_LANGUAGE).parse(code)
    root = tree.root_node

    error = _first_error(root)
    if error is not None:
        row, col = error.start_point
        raise ParseError(f"syntax error at line {row + 1}, column {col + 1}")

    package = _package_name(root)
    comments = _CommentIndex.from_tree(root, code)

    structs: list[StructDescriptor] = []
    for decl in root.named_children:
        if decl.type != "type_declaration":
            continue
        decl_marked = has_annotation(comments.doc_block(decl))
        for spec in decl.named_children:
            if spec.type != "type_spec":
                continue
            type_node = spec.child_by_field_name("type")
            if type_node is None or type_node.type != "struct_type":
                continue
            if not (decl_marked or has_annotation(comments.doc_block(spec))):
                continue

            name = _text(spec.child_by_field_name("name"))
            if spec.child_by_field_name("type_parameters") is not None:
                raise ParseError(
                    f"line {spec.start_point[0] + 1}: struct {name}: "
                    "generic struct types are not supported"
                )
            fields = _parse_fields(name, type_node, comments)
            structs.append(
                StructDescriptor(
                    name=name,
                    namespace=package,
                    fields=fields,
                    imports=_struct_imports(fields),
                    line=spec.start_point[0] + 1,
                )
            )
    return structs
