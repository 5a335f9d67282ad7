import logging
from pathlib import Path
from typing import cast

from tree_sitter import Node
from tree_sitter_language_pack import SupportedLanguage, get_parser

from tfmodel.core.languages import resolve_syntax
from tfmodel.core.ports.syntax import Body
from tfmodel.errors import ParseError
from tfmodel.hcl.helpers import SourceText
from tfmodel.hcl.json_syntax import JSONBody
from tfmodel.hcl.native import body_from_tree
from tfmodel.models import Diagnostic, Document

logger = logging.getLogger(__name__)


def _syntax_errors(source: SourceText, root: Node) -> list[Diagnostic]:
    diags: list[Diagnostic] = []

    def visit(node: Node) -> None:
        if node.type == "ERROR":
            error = ParseError(
                "Invalid syntax", "The parser could not understand this part of the file.", source.node_range(node)
            )
            diags.append(error.to_diagnostic())
            return
        if node.is_missing:
            diags.append(ParseError(f"Missing {node.type}", "", source.node_range(node)).to_diagnostic())
            return
        if node.has_error:
            for child in node.children:
                visit(child)

    visit(root)
    return diags


def parse_document_from_source(source_bytes: bytes, filename: str, syntax: str | None = None) -> Document:
    resolved_syntax = resolve_syntax(syntax, Path(filename))
    source = SourceText(filename, source_bytes)
    parser = get_parser(cast(SupportedLanguage, resolved_syntax))
    root = parser.parse(source_bytes).root_node
    diags = _syntax_errors(source, root)

    body: Body
    if resolved_syntax == "hcl":
        body = body_from_tree(source, root)
    else:
        values = [child for child in root.named_children if child.type != "comment"]
        body = JSONBody(source, values[0] if values and values[0].type == "object" else None)
        if not values or values[0].type != "object":
            error = ParseError(
                "Invalid JSON document", "The root value must be a JSON object.", source.node_range(root)
            )
            diags.append(error.to_diagnostic())

    logger.debug("Parsed %s as %s (%d syntax diagnostics)", filename, resolved_syntax, len(diags))
    return Document(filename=filename, syntax=resolved_syntax, body=body, diagnostics=diags)


def parse_document_from_file(path: str, syntax: str | None = None) -> Document:
    file_path = Path(path)

    try:
        source_bytes = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None

    return parse_document_from_source(source_bytes, str(path), syntax)
