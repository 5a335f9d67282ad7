import logging

from tfmodel.core.version import parse_constraints
from tfmodel.errors import ConfigSchemaError, ConstraintParseError
from tfmodel.hcl.schema import AttributeSchema, Block, BlockSchema, BodySchema, decode_body
from tfmodel.models import Constraint, Diagnostic, Document, ModuleCall

logger = logging.getLogger(__name__)

MODULE_CALL_SCHEMA = BodySchema(
    blocks=(
        BlockSchema(
            type="module",
            label_names=("name",),
            body=BodySchema(attributes=(AttributeSchema("source", required=True), AttributeSchema("version"))),
        ),
    ),
)


def get_module_calls(document: Document) -> tuple[list[ModuleCall], list[Diagnostic]]:
    """Return the module calls of ``document`` in declaration order.

    A call without a usable ``source`` is left out; an unparseable ``version``
    leaves ``version`` unset but keeps the call and its ``version_attr``.
    """
    content, diags = decode_body(document.body, MODULE_CALL_SCHEMA)

    calls: list[ModuleCall] = []
    for block in content.blocks:
        call, call_diags = _decode_module_call(block)
        diags.extend(call_diags)
        if call is not None:
            calls.append(call)

    logger.debug("Found %d module call(s) in %s", len(calls), document.filename)
    return calls, diags


def _decode_module_call(block: Block) -> tuple[ModuleCall | None, list[Diagnostic]]:
    source_attr = block.body.attributes.get("source")
    if source_attr is None:
        # already reported as a missing required argument
        return None, []

    try:
        source = source_attr.expr.static_string()
    except ConfigSchemaError as e:
        return None, [e.to_diagnostic()]

    diags: list[Diagnostic] = []
    version: tuple[Constraint, ...] | None = None
    version_attr = block.body.attributes.get("version")
    if version_attr is not None:
        try:
            version = parse_constraints(version_attr.expr.static_string(), version_attr.expr.range)
        except (ConfigSchemaError, ConstraintParseError) as e:
            diags.append(e.to_diagnostic())

    call = ModuleCall(
        name=block.labels[0],
        def_range=block.def_range,
        source=source,
        source_attr=source_attr,
        version=version,
        version_attr=version_attr,
    )
    return call, diags
