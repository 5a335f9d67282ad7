"""JSON syntax (``.tf.json``), backed by the tree-sitter ``json`` grammar.

Follows the HCL JSON conventions: block types are object properties, each
label is one more level of nested object, arrays stand for repeated blocks
and every string value is a template.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from tree_sitter import Node

from tfmodel.core.ports.syntax import Expression, ExpressionNode
from tfmodel.errors import ConfigSchemaError, ExpressionWalkError
from tfmodel.hcl.helpers import (
    SourceText,
    decode_json_string,
    has_template_sequence,
    literal_template_value,
    parse_traversal,
)
from tfmodel.hcl.schema import BodySchema, PartialContent, RawBlock
from tfmodel.hcl.template import TranslatedTemplate
from tfmodel.models import Attribute, Diagnostic, Range

logger = logging.getLogger(__name__)

_COMMENT_KEY = "//"


def _values(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def _decode(source: SourceText, node: Node) -> tuple[bytes, list[int]]:
    return decode_json_string(source.data[node.start_byte + 1 : node.end_byte - 1], node.start_byte + 1)


def _properties(source: SourceText, node: Node) -> Iterator[tuple[str, Node, Node]]:
    for pair in node.named_children:
        if pair.type != "pair":
            continue
        key = pair.child_by_field_name("key")
        value = pair.child_by_field_name("value")
        if key is None or value is None:
            continue
        if key.type == "string":
            try:
                name = _decode(source, key)[0].decode("utf-8")
            except ValueError:
                name = source.text(key.start_byte + 1, key.end_byte - 1)
        else:
            name = source.node_text(key)
        if name == _COMMENT_KEY:
            continue
        yield name, key, value


class JSONExpression(Expression):
    def __init__(self, source: SourceText, node: Node) -> None:
        self._source = source
        self._node = node

    @property
    def range(self) -> Range:
        return self._source.node_range(self._node)

    @property
    def text(self) -> str:
        return self._source.node_text(self._node)

    def static_string(self) -> str:
        node = self._node
        if node.type == "string":
            value = literal_template_value(self._string())
            if value is None:
                raise ConfigSchemaError(
                    "Variables not allowed",
                    "A static string is required; templates with interpolations or directives need evaluation.",
                    self.range,
                )
            return value
        if node.type in ("number", "true", "false"):
            return self._source.node_text(node)
        raise ConfigSchemaError("Unsuitable value type", "A static string value is required.", self.range)

    def traversal(self) -> list[str]:
        parts = parse_traversal(self._string()) if self._node.type == "string" else None
        if parts is None:
            raise ConfigSchemaError(
                "Invalid expression",
                "A string containing a single static variable reference is required.",
                self.range,
            )
        return parts

    def map_items(self) -> list[tuple[Expression, Expression]]:
        if self._node.type != "object":
            raise ConfigSchemaError("Invalid expression", "A JSON object is required.", self.range)
        return [
            (JSONExpression(self._source, key), JSONExpression(self._source, value))
            for _, key, value in _properties(self._source, self._node)
        ]

    def walk(self, on_error: Callable[[ExpressionWalkError], None] | None = None) -> Iterator[ExpressionNode]:
        yield from self._walk(self._node, on_error)

    def _walk(
        self, node: Node, on_error: Callable[[ExpressionWalkError], None] | None
    ) -> Iterator[ExpressionNode]:
        yield ExpressionNode(type=node.type, range=self._source.node_range(node))
        if node.type == "object":
            for _, key, value in _properties(self._source, node):
                # keys in expression position are templates as well
                if key.type == "string":
                    yield from self._walk_template(key, on_error)
                yield from self._walk(value, on_error)
        elif node.type == "array":
            for value in _values(node):
                yield from self._walk(value, on_error)
        elif node.type == "string":
            yield from self._walk_template(node, on_error)

    def _walk_template(
        self, node: Node, on_error: Callable[[ExpressionWalkError], None] | None
    ) -> Iterator[ExpressionNode]:
        try:
            decoded, offsets = _decode(self._source, node)
        except ValueError as e:
            self._report(on_error, ExpressionWalkError("Invalid JSON string", str(e), self._source.node_range(node)))
            return
        if not has_template_sequence(decoded.decode("utf-8", errors="replace")):
            return
        template = TranslatedTemplate(self._source, decoded, offsets)
        if template.has_error:
            self._report(
                on_error,
                ExpressionWalkError(
                    "Invalid template",
                    "The string could not be parsed as a template expression.",
                    self._source.node_range(node),
                ),
            )
            return
        yield from template.nodes()

    @staticmethod
    def _report(on_error: Callable[[ExpressionWalkError], None] | None, error: ExpressionWalkError) -> None:
        logger.debug("Skipping expression: %s", error)
        if on_error is not None:
            on_error(error)

    def _string(self) -> str:
        try:
            return _decode(self._source, self._node)[0].decode("utf-8")
        except ValueError as e:
            raise ConfigSchemaError("Invalid JSON string", str(e), self.range) from e


class JSONBody:
    """A block body in JSON syntax. ``node`` is None when the document has no root object."""

    def __init__(self, source: SourceText, node: Node | None) -> None:
        self._source = source
        self._node = node

    def partial_content(self, schema: BodySchema) -> tuple[PartialContent, list[Diagnostic]]:
        content = PartialContent()
        diags: list[Diagnostic] = []
        attribute_names = schema.attribute_names
        for name, key, value in self._properties():
            block_schema = schema.block(name)
            if name in attribute_names:
                content.attributes[name] = self._attribute(name, key, value)
            elif block_schema is not None:
                self._unpack_block(name, value, block_schema.label_names, (), content.blocks, diags)
            else:
                content.ignored.append(name)
        return content, diags

    def just_attributes(self) -> dict[str, Attribute]:
        return {name: self._attribute(name, key, value) for name, key, value in self._properties()}

    def all_attributes(self) -> Iterator[Attribute]:
        # Without a schema there is no telling blocks from attributes in JSON,
        # so every property is walked as an attribute.
        for name, key, value in self._properties():
            yield self._attribute(name, key, value)

    def _properties(self) -> Iterator[tuple[str, Node, Node]]:
        if self._node is None:
            return iter(())
        return _properties(self._source, self._node)

    def _attribute(self, name: str, key: Node, value: Node) -> Attribute:
        return Attribute(
            name=name,
            expr=JSONExpression(self._source, value),
            range=self._source.range(key.start_byte, value.end_byte),
            name_range=self._source.node_range(key),
        )

    def _unpack_block(
        self,
        block_type: str,
        value: Node,
        labels_left: tuple[str, ...],
        labels_used: tuple[str, ...],
        out: list[RawBlock],
        diags: list[Diagnostic],
    ) -> None:
        if value.type == "null":
            return
        if value.type == "array":
            for element in _values(value):
                self._unpack_block(block_type, element, labels_left, labels_used, out, diags)
            return
        if value.type != "object":
            if labels_left:
                detail = f"A JSON object is required, whose keys represent the {block_type} block's {labels_left[0]}."
            else:
                detail = (
                    "Either a JSON object or a JSON array is required, "
                    f"representing the contents of one or more {block_type} blocks."
                )
            diags.append(
                ConfigSchemaError("Incorrect JSON value type", detail, self._source.node_range(value)).to_diagnostic()
            )
            return

        if labels_left:
            for label, _, nested in _properties(self._source, value):
                self._unpack_block(block_type, nested, labels_left[1:], (*labels_used, label), out, diags)
            return

        out.append(
            RawBlock(
                type=block_type,
                labels=labels_used,
                def_range=self._source.range(value.start_byte, value.start_byte + 1),
                body=JSONBody(self._source, value),
            )
        )
