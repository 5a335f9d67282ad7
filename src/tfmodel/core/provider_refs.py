"""Provider references of a document.

References are found in two passes. The first looks at the blocks that name
a provider: ``provider`` blocks, resources and data sources (through their
type prefix or ``provider`` argument) and the ``providers`` map of module
calls. The second walks every attribute expression for calls to
provider-defined functions such as ``provider::time::rfc3339_parse(...)``.

Both passes produce candidates in document order; when a name is referenced
more than once the last candidate wins.
"""

import logging
import re
from collections.abc import Callable

from tfmodel.core.ports.syntax import Expression
from tfmodel.errors import ConfigSchemaError, ExpressionWalkError
from tfmodel.hcl.helpers import parse_traversal
from tfmodel.hcl.schema import AttributeSchema, Block, BlockSchema, BodySchema, decode_body
from tfmodel.models import Diagnostic, Document, ProviderRef

logger = logging.getLogger(__name__)

PROVIDER_FUNCTION_RE = re.compile(r"^provider::([A-Za-z_][0-9A-Za-z_-]*)::([A-Za-z_][0-9A-Za-z_-]*)$")

_RESOURCE_BODY = BodySchema(attributes=(AttributeSchema("provider"),))

PROVIDER_REF_SCHEMA = BodySchema(
    blocks=(
        BlockSchema(type="provider", label_names=("name",)),
        BlockSchema(type="resource", label_names=("type", "name"), body=_RESOURCE_BODY),
        BlockSchema(type="data", label_names=("type", "name"), body=_RESOURCE_BODY),
        BlockSchema(type="module", label_names=("name",), body=BodySchema(attributes=(AttributeSchema("providers"),))),
        BlockSchema(
            type="check",
            label_names=("name",),
            body=BodySchema(blocks=(BlockSchema(type="data", label_names=("type", "name"), body=_RESOURCE_BODY),)),
        ),
    ),
)

_QUOTED_REFERENCE_DETAIL = (
    "In this context, references are expected literally rather than in quotes. "
    "Remove the quotes surrounding this reference to silence this warning."
)
_INVALID_REFERENCE_DETAIL = (
    'A provider argument requires a provider name followed by an optional alias name, like "aws.foo".'
)

_Candidates = tuple[list[ProviderRef], list[Diagnostic]]


def get_provider_refs(document: Document) -> tuple[dict[str, ProviderRef], list[Diagnostic]]:
    """Return the providers referenced by ``document``, keyed by provider name."""
    candidates, diags = collect_provider_ref_candidates(document)
    refs = reduce_provider_refs(candidates)
    logger.debug("Found %d provider reference(s) in %s", len(refs), document.filename)
    return refs, diags


def collect_provider_ref_candidates(document: Document) -> _Candidates:
    """Return every provider reference in the order it was found, duplicates included."""
    candidates, diags = _block_candidates(document)
    function_candidates, function_diags = _function_candidates(document)
    return candidates + function_candidates, diags + function_diags


def reduce_provider_refs(candidates: list[ProviderRef]) -> dict[str, ProviderRef]:
    refs: dict[str, ProviderRef] = {}
    for candidate in candidates:
        refs[candidate.name] = candidate
    return refs


def _block_candidates(document: Document) -> _Candidates:
    content, diags = decode_body(document.body, PROVIDER_REF_SCHEMA)

    candidates: list[ProviderRef] = []
    for block in content.blocks:
        handler = _BLOCK_HANDLERS.get(block.type)
        if handler is None:
            continue
        block_candidates, block_diags = handler(block, document.syntax)
        candidates.extend(block_candidates)
        diags.extend(block_diags)
    return candidates, diags


def _provider_block(block: Block, syntax: str) -> _Candidates:
    return [ProviderRef(name=block.labels[0], def_range=block.def_range)], []


def _resource_block(block: Block, syntax: str) -> _Candidates:
    provider_attr = block.body.attributes.get("provider")
    if provider_attr is None:
        name = block.labels[0].split("_", 1)[0]
        return [ProviderRef(name=name, def_range=block.def_range)], []

    try:
        parts, diags = _provider_reference(provider_attr.expr, syntax)
    except ConfigSchemaError as e:
        return [], [e.to_diagnostic()]
    return [ProviderRef(name=parts[0], def_range=block.def_range)], diags


def _module_block(block: Block, syntax: str) -> _Candidates:
    providers_attr = block.body.attributes.get("providers")
    if providers_attr is None:
        return [], []

    try:
        items = providers_attr.expr.map_items()
    except ConfigSchemaError as e:
        return [], [e.to_diagnostic()]

    candidates: list[ProviderRef] = []
    diags: list[Diagnostic] = []
    for _, value in items:
        try:
            parts, reference_diags = _provider_reference(value, syntax)
        except ConfigSchemaError as e:
            diags.append(e.to_diagnostic())
            continue
        diags.extend(reference_diags)
        candidates.append(ProviderRef(name=parts[0], def_range=block.def_range))
    return candidates, diags


def _check_block(block: Block, syntax: str) -> _Candidates:
    candidates: list[ProviderRef] = []
    diags: list[Diagnostic] = []
    for nested in block.body.blocks:
        nested_candidates, nested_diags = _resource_block(nested, syntax)
        candidates.extend(nested_candidates)
        diags.extend(nested_diags)
    return candidates, diags


_BLOCK_HANDLERS: dict[str, Callable[[Block, str], _Candidates]] = {
    "provider": _provider_block,
    "resource": _resource_block,
    "data": _resource_block,
    "module": _module_block,
    "check": _check_block,
}


def _provider_reference(expr: Expression, syntax: str) -> tuple[list[str], list[Diagnostic]]:
    """Decode ``<name>`` or ``<name>.<alias>``, bare or quoted.

    Raises ConfigSchemaError for anything else.
    """
    diags: list[Diagnostic] = []
    try:
        parts: list[str] | None = expr.traversal()
    except ConfigSchemaError:
        parts = _quoted_reference(expr)
        if parts is not None and syntax == "hcl":
            diags.append(
                Diagnostic(
                    severity="warning",
                    summary="Quoted references are deprecated",
                    detail=_QUOTED_REFERENCE_DETAIL,
                    subject=expr.range,
                )
            )

    if parts is None or len(parts) > 2:
        raise ConfigSchemaError("Invalid provider reference", _INVALID_REFERENCE_DETAIL, expr.range)
    return parts, diags


def _quoted_reference(expr: Expression) -> list[str] | None:
    try:
        return parse_traversal(expr.static_string())
    except ConfigSchemaError:
        return None


def _function_candidates(document: Document) -> _Candidates:
    candidates: list[ProviderRef] = []
    diags: list[Diagnostic] = []

    def on_error(error: ExpressionWalkError) -> None:
        diags.append(error.to_diagnostic())

    for attr in document.body.all_attributes():
        for node in attr.expr.walk(on_error):
            if node.function_name is None:
                continue
            match = PROVIDER_FUNCTION_RE.match(node.function_name)
            if match is None:
                continue
            logger.debug("Provider function %s at %s", node.function_name, node.range)
            candidates.append(ProviderRef(name=match.group(1), def_range=node.range))
    return candidates, diags
