"""Tree-sitter parser adapter and JSX node helpers.

One TSX grammar is used for every source file: it accepts module syntax,
inline JSX and type annotations. The tree is only used for recognition;
rewrites are always applied to the original text.
"""

from __future__ import annotations

from typing import Callable, Iterator

try:
    from tree_sitter_language_pack import get_parser
except ImportError as _err:
    raise ImportError(
        "tree-sitter-language-pack is required. Install with: "
        "pip install tree-sitter-language-pack"
    ) from _err

GRAMMAR = "tsx"

JSX_ELEMENT_TYPES = ("jsx_element", "jsx_self_closing_element")
_NAME_NODE_TYPES = ("identifier", "member_expression", "nested_identifier", "jsx_namespace_name")
_FUNCTION_TYPES = ("function_declaration", "generator_function_declaration", "class_declaration")

_parser_cache: dict[str, object] = {}


class ParseError(Exception):
    """The file could not be parsed into a clean syntax tree."""

    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.line = line


def _get_parser():
    if GRAMMAR not in _parser_cache:
        _parser_cache[GRAMMAR] = get_parser(GRAMMAR)
    return _parser_cache[GRAMMAR]


def parse_source(text: str):
    """Parse text into a tree-sitter Tree or raise ParseError.

    Tree-sitter always produces a tree; one containing ERROR or MISSING nodes
    is reported as a parse failure.
    """
    tree = _get_parser().parse(text.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root)
        line = bad.start_point[0] + 1 if bad is not None else None
        where = f" near line {line}" if line else ""
        raise ParseError(f"syntax error{where}", line)
    return tree


def parses(text: str) -> bool:
    try:
        parse_source(text)
    except ParseError:
        return False
    return True


def _first_error(node):
    for child in iter_nodes(node):
        if child.type == "ERROR" or child.is_missing:
            return child
    return None


# ── Node helpers ────────────────────────────────────────────


def iter_nodes(root, prune: Callable[[object], bool] | None = None) -> Iterator:
    """Pre-order walk. When prune(node) is true the node is yielded but its
    children are not visited."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if prune is not None and prune(node):
            continue
        stack.extend(reversed(node.children))


def iter_jsx_elements(root, prune: Callable[[object], bool] | None = None) -> Iterator:
    for node in iter_nodes(root, prune):
        if node.type in JSX_ELEMENT_TYPES:
            yield node


def node_text(node) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def line_range(node) -> tuple[int, int]:
    return node.start_point[0] + 1, node.end_point[0] + 1


def opening_element(element):
    """The node holding the tag name and attributes of a JSX element."""
    if element.type == "jsx_self_closing_element":
        return element
    opening = element.child_by_field_name("open_tag")
    if opening is not None:
        return opening
    for child in element.children:
        if child.type == "jsx_opening_element":
            return child
    return element


def tag_name(element) -> str:
    """Full tag name, e.g. ``form``, ``Script`` or ``Accordion.Item``.

    Fragments have no name and yield an empty string.
    """
    opening = opening_element(element)
    name_node = opening.child_by_field_name("name")
    if name_node is None:
        for child in opening.named_children:
            if child.type in _NAME_NODE_TYPES:
                name_node = child
                break
    return node_text(name_node)


def jsx_attributes(element) -> dict[str, object | None]:
    """Map attribute name -> value node (None for bare boolean attributes)."""
    attrs: dict[str, object | None] = {}
    for child in opening_element(element).named_children:
        if child.type != "jsx_attribute":
            continue
        parts = child.named_children
        if not parts:
            continue
        name = node_text(parts[0])
        if name and name not in attrs:
            attrs[name] = parts[1] if len(parts) > 1 else None
    return attrs


def attribute_literal(value_node) -> str | None:
    """Static string value of an attribute, or None when it is dynamic.

    Handles ``name="x"``, ``name={'x'}`` and substitution-free template
    literals ``name={`x`}``.
    """
    if value_node is None:
        return None
    if value_node.type == "string":
        return unquote(node_text(value_node))
    if value_node.type == "jsx_expression":
        inner = value_node.named_children
        if len(inner) != 1:
            return None
        expr = inner[0]
        if expr.type == "string":
            return unquote(node_text(expr))
        if expr.type == "template_string" and not any(
            c.type == "template_substitution" for c in expr.named_children
        ):
            return unquote(node_text(expr))
    return None


def element_text(element) -> str:
    """Direct text content of a JSX element, whitespace-normalised."""
    if element.type != "jsx_element":
        return ""
    parts = [node_text(c).strip() for c in element.children if c.type == "jsx_text"]
    return " ".join(p for p in parts if p)


def enclosing_component_name(node) -> str | None:
    current = node.parent
    while current is not None:
        if current.type in _FUNCTION_TYPES or current.type == "variable_declarator":
            name_node = current.child_by_field_name("name")
            if name_node is not None and name_node.type in ("identifier", "type_identifier"):
                return node_text(name_node)
        current = current.parent
    return None


def unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    return text
