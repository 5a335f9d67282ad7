import logging

from tfmodel.hcl.schema import BlockSchema, BodySchema, check_labels
from tfmodel.models import Diagnostic, Document, Local

logger = logging.getLogger(__name__)

LOCALS_BLOCK = BlockSchema(type="locals")
LOCALS_SCHEMA = BodySchema(blocks=(LOCALS_BLOCK,))


def get_locals(document: Document) -> tuple[dict[str, Local], list[Diagnostic]]:
    """Return every local value of ``document`` keyed by name.

    Locals may be spread over several ``locals`` blocks. A name declared twice
    keeps its last declaration; that is not reported.
    """
    # a locals body has no fixed schema, so it is read raw instead of decoded
    partial, diags = document.body.partial_content(LOCALS_SCHEMA)

    locals_: dict[str, Local] = {}
    for block in partial.blocks:
        label_error = check_labels(block, LOCALS_BLOCK)
        if label_error is not None:
            diags.append(label_error.to_diagnostic())
            continue
        for name, attr in block.body.just_attributes().items():
            locals_[name] = Local(name=name, def_range=attr.range, attribute=attr)

    logger.debug("Found %d local value(s) in %s", len(locals_), document.filename)
    return locals_, diags
