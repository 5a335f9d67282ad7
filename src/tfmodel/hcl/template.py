"""Re-parsing of JSON string values as native templates.

In the JSON syntax every string is a template, so ``"${foo(1)}"`` hides a
function call inside a string literal. The decoded string is wrapped in a
heredoc and parsed with the native grammar; node offsets are then mapped back
through the JSON escapes onto the enclosing document.
"""

from __future__ import annotations

from collections.abc import Iterator

from tree_sitter import Node
from tree_sitter_language_pack import get_parser

from tfmodel.core.ports.syntax import ExpressionNode
from tfmodel.hcl.helpers import SourceText

_DELIMITER = b"TFMODEL_TEMPLATE_EOF"


def _delimiter(decoded: bytes) -> bytes:
    delimiter = _DELIMITER
    while delimiter in decoded:
        delimiter += b"_"
    return delimiter


class TranslatedTemplate:
    def __init__(self, source: SourceText, decoded: bytes, offsets: list[int]) -> None:
        self._source = source
        self._offsets = offsets
        delimiter = _delimiter(decoded)
        prefix = b"t = <<" + delimiter + b"\n"
        self._wrapped = prefix + decoded + b"\n" + delimiter + b"\n"
        self._content_start = len(prefix)
        self._content_end = self._content_start + len(decoded)
        self._root = get_parser("hcl").parse(self._wrapped).root_node

    @property
    def has_error(self) -> bool:
        return self._root.has_error

    def nodes(self) -> Iterator[ExpressionNode]:
        for node in _descendants(self._root):
            if not node.is_named or node.type == "comment":
                continue
            if node.start_byte < self._content_start or node.end_byte > self._content_end:
                continue
            function_name = None
            if node.type == "function_call":
                text = self._wrapped[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
                function_name = text.split("(", 1)[0].strip()
            yield ExpressionNode(
                type=node.type,
                range=self._source.range(self._translate(node.start_byte), self._translate(node.end_byte)),
                function_name=function_name,
            )

    def _translate(self, offset: int) -> int:
        return self._offsets[offset - self._content_start]


def _descendants(node: Node) -> Iterator[Node]:
    yield node
    for child in node.children:
        yield from _descendants(child)
