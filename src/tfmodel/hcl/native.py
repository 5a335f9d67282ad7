"""Native HCL syntax, backed by the tree-sitter ``hcl`` grammar."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from tree_sitter import Node

from tfmodel.core.ports.syntax import Expression, ExpressionNode
from tfmodel.errors import ConfigSchemaError, ExpressionWalkError
from tfmodel.hcl.helpers import SourceText, parse_traversal, unescape_hcl_string
from tfmodel.hcl.schema import BodySchema, PartialContent, RawBlock
from tfmodel.models import Attribute, Diagnostic, Range

# Grammar nodes that only wrap a single more specific child.
_WRAPPERS = frozenset({"expression", "expr_term", "literal_value", "template_expr", "collection_value"})
_DYNAMIC_TEMPLATE_PARTS = ("template_interpolation", "template_directive", "template_for", "template_if")
_TRAVERSAL_PARTS = frozenset({"expression", "expr_term", "variable_expr", "identifier", "get_attr"})


def _named(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def _unwrap(node: Node) -> Node:
    while node.type in _WRAPPERS:
        children = _named(node)
        if len(children) != 1:
            break
        node = children[0]
    return node


def _descendants(node: Node) -> Iterator[Node]:
    yield node
    for child in node.children:
        yield from _descendants(child)


def _is_dynamic_template(node: Node) -> bool:
    return any(n.type.startswith(_DYNAMIC_TEMPLATE_PARTS) for n in _descendants(node) if n is not node)


class NativeExpression(Expression):
    def __init__(self, source: SourceText, node: Node) -> None:
        self._source = source
        self._node = node

    @property
    def node(self) -> Node:
        return self._node

    @property
    def range(self) -> Range:
        return self._source.node_range(self._node)

    @property
    def text(self) -> str:
        return self._source.node_text(self._node)

    def static_string(self) -> str:
        node = _unwrap(self._node)
        if node.type in ("string_lit", "quoted_template"):
            return self._quoted_value(node)
        if node.type == "heredoc_template":
            return self._heredoc_value(node)
        if node.type in ("numeric_lit", "bool_lit"):
            return self._source.node_text(node)
        raise ConfigSchemaError("Unsuitable value type", "A static string value is required.", self.range)

    def traversal(self) -> list[str]:
        node = _unwrap(self._node)
        parts = None
        if all(n.type in _TRAVERSAL_PARTS for n in _descendants(node) if n.is_named and n.type != "comment"):
            parts = parse_traversal(self._source.node_text(node))
        if parts is None:
            raise ConfigSchemaError("Invalid expression", "A single static variable reference is required.", self.range)
        return parts

    def map_items(self) -> list[tuple[Expression, Expression]]:
        node = _unwrap(self._node)
        if node.type != "object":
            raise ConfigSchemaError("Invalid expression", "A static map expression is required.", self.range)
        items: list[tuple[Expression, Expression]] = []
        for elem in _named(node):
            if elem.type != "object_elem":
                continue
            key = elem.child_by_field_name("key")
            val = elem.child_by_field_name("val")
            if key is None or val is None:
                operands = [c for c in _named(elem) if c.type == "expression"]
                if len(operands) != 2:
                    continue
                key, val = operands
            items.append((NativeExpression(self._source, key), NativeExpression(self._source, val)))
        return items

    def walk(self, on_error: Callable[[ExpressionWalkError], None] | None = None) -> Iterator[ExpressionNode]:
        for node in _descendants(self._node):
            if not node.is_named or node.type == "comment":
                continue
            yield ExpressionNode(
                type=node.type,
                range=self._source.node_range(node),
                function_name=self._function_name(node) if node.type == "function_call" else None,
            )

    def _function_name(self, node: Node) -> str:
        return self._source.node_text(node).split("(", 1)[0].strip()

    def _quoted_value(self, node: Node) -> str:
        if _is_dynamic_template(node):
            raise ConfigSchemaError(
                "Variables not allowed",
                "A static string is required; templates with interpolations or directives need evaluation.",
                self.range,
            )
        try:
            return unescape_hcl_string(self._source.text(node.start_byte + 1, node.end_byte - 1))
        except ValueError as e:
            raise ConfigSchemaError("Invalid escape sequence", str(e), self.range) from e

    def _heredoc_value(self, node: Node) -> str:
        if _is_dynamic_template(node):
            raise ConfigSchemaError(
                "Variables not allowed",
                "A static string is required; templates with interpolations or directives need evaluation.",
                self.range,
            )
        markers = [child for child in node.children if child.type == "heredoc_identifier"]
        if len(markers) < 2:
            raise ConfigSchemaError("Unsuitable value type", "A static string value is required.", self.range)
        content = self._source.text(markers[0].end_byte, markers[-1].start_byte)
        content = content.removeprefix("\r\n").removeprefix("\n")
        content = content[: content.rfind("\n") + 1]
        if self._source.node_text(node).startswith("<<-"):
            content = _dedent(content)
        return content


def _dedent(content: str) -> str:
    lines = content.split("\n")
    indents = [len(line) - len(line.lstrip(" \t")) for line in lines if line.strip()]
    width = min(indents, default=0)
    return "\n".join(line[width:] for line in lines)


class NativeBody:
    """A block body in native syntax. ``node`` is None for an empty block."""

    def __init__(self, source: SourceText, node: Node | None) -> None:
        self._source = source
        self._node = node

    def partial_content(self, schema: BodySchema) -> tuple[PartialContent, list[Diagnostic]]:
        content = PartialContent()
        attribute_names = schema.attribute_names
        for child in self._items():
            if child.type == "attribute":
                attr = self._attribute(child)
                if attr.name in attribute_names:
                    content.attributes[attr.name] = attr
                else:
                    content.ignored.append(attr.name)
            elif child.type == "block":
                raw = self._raw_block(child)
                if schema.block(raw.type) is None:
                    content.ignored.append(raw.type)
                else:
                    content.blocks.append(raw)
        return content, []

    def just_attributes(self) -> dict[str, Attribute]:
        return {attr.name: attr for attr in (self._attribute(c) for c in self._items() if c.type == "attribute")}

    def all_attributes(self) -> Iterator[Attribute]:
        for child in self._items():
            if child.type == "attribute":
                yield self._attribute(child)
            elif child.type == "block":
                yield from self._raw_block(child).body.all_attributes()

    def _items(self) -> list[Node]:
        if self._node is None:
            return []
        return [child for child in self._node.named_children if child.type in ("attribute", "block")]

    def _attribute(self, node: Node) -> Attribute:
        children = _named(node)
        name_node = children[0]
        expr_node = next((c for c in reversed(children) if c.type == "expression"), children[-1])
        return Attribute(
            name=self._source.node_text(name_node),
            expr=NativeExpression(self._source, expr_node),
            range=self._source.node_range(node),
            name_range=self._source.node_range(name_node),
        )

    def _raw_block(self, node: Node) -> RawBlock:
        type_node: Node | None = None
        header_end = node.start_byte
        labels: list[str] = []
        for child in node.children:
            if child.type in ("block_start", "{"):
                break
            if type_node is None:
                if child.type == "identifier":
                    type_node = child
                    header_end = child.end_byte
                continue
            if child.type == "string_lit":
                labels.append(self._label(child))
                header_end = child.end_byte
            elif child.type == "identifier":
                labels.append(self._source.node_text(child))
                header_end = child.end_byte

        body_node = next((c for c in node.named_children if c.type == "body"), None)
        return RawBlock(
            type=self._source.node_text(type_node) if type_node is not None else "",
            labels=tuple(labels),
            def_range=self._source.range(node.start_byte, header_end),
            body=NativeBody(self._source, body_node),
        )

    def _label(self, node: Node) -> str:
        raw = self._source.text(node.start_byte + 1, node.end_byte - 1)
        try:
            return unescape_hcl_string(raw)
        except ValueError:
            return raw


def body_from_tree(source: SourceText, root: Node) -> NativeBody:
    body_node = next((c for c in root.named_children if c.type == "body"), None)
    return NativeBody(source, body_node)
