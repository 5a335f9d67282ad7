"""Schema-driven decoding of block bodies.

A :class:`BodySchema` names the attributes and block types a caller cares
about. Each surface syntax only knows how to split one body level into
matching attributes, matching blocks and everything else
(``Body.partial_content``); :func:`decode_body` does the recursion and the
checks that are the same for both syntaxes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tfmodel.core.ports.syntax import Body
from tfmodel.errors import ConfigSchemaError
from tfmodel.models import Attribute, Diagnostic, Range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributeSchema:
    name: str
    required: bool = False


@dataclass(frozen=True)
class BlockSchema:
    type: str
    label_names: tuple[str, ...] = ()
    body: BodySchema | None = None


@dataclass(frozen=True)
class BodySchema:
    attributes: tuple[AttributeSchema, ...] = ()
    blocks: tuple[BlockSchema, ...] = ()

    @property
    def attribute_names(self) -> frozenset[str]:
        return frozenset(attr.name for attr in self.attributes)

    def block(self, block_type: str) -> BlockSchema | None:
        for block_schema in self.blocks:
            if block_schema.type == block_type:
                return block_schema
        return None


@dataclass(frozen=True)
class RawBlock:
    """A block matched by type but whose body has not been decoded yet."""

    type: str
    labels: tuple[str, ...]
    def_range: Range
    body: Body


@dataclass(frozen=True)
class PartialContent:
    attributes: dict[str, Attribute] = field(default_factory=dict)
    blocks: list[RawBlock] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Block:
    type: str
    labels: tuple[str, ...]
    def_range: Range
    body: BodyContent


@dataclass(frozen=True)
class BodyContent:
    attributes: dict[str, Attribute] = field(default_factory=dict)
    blocks: list[Block] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)


def decode_body(
    body: Body,
    schema: BodySchema,
    missing_range: Range | None = None,
) -> tuple[BodyContent, list[Diagnostic]]:
    """Decode ``body`` against ``schema``.

    Items outside the schema end up in ``ignored``. A block with the wrong
    number of labels is dropped; a missing required attribute is reported
    against ``missing_range`` (the owning block's header) and the block is
    kept without it.
    """
    partial, diags = body.partial_content(schema)

    for attr_schema in schema.attributes:
        if attr_schema.required and attr_schema.name not in partial.attributes:
            diags.append(
                ConfigSchemaError(
                    "Missing required argument",
                    f'The argument "{attr_schema.name}" is required, but no definition was found.',
                    missing_range,
                ).to_diagnostic()
            )

    blocks: list[Block] = []
    for raw in partial.blocks:
        block_schema = schema.block(raw.type)
        if block_schema is None:
            continue
        label_error = check_labels(raw, block_schema)
        if label_error is not None:
            diags.append(label_error.to_diagnostic())
            continue
        nested, nested_diags = decode_body(raw.body, block_schema.body or BodySchema(), raw.def_range)
        diags.extend(nested_diags)
        blocks.append(Block(type=raw.type, labels=raw.labels, def_range=raw.def_range, body=nested))

    if partial.ignored:
        logger.debug("Ignored items outside schema: %s", ", ".join(partial.ignored))

    return BodyContent(attributes=partial.attributes, blocks=blocks, ignored=partial.ignored), diags


def check_labels(raw: RawBlock, block_schema: BlockSchema) -> ConfigSchemaError | None:
    expected = block_schema.label_names
    if len(raw.labels) < len(expected):
        missing = expected[len(raw.labels)]
        return ConfigSchemaError(
            f"Missing {missing} for {raw.type}",
            f"All {raw.type} blocks must have {len(expected)} labels ({', '.join(expected)}).",
            raw.def_range,
        )
    if len(raw.labels) > len(expected):
        if expected:
            detail = f"Only {len(expected)} labels ({', '.join(expected)}) are expected for {raw.type} blocks."
        else:
            detail = f"No labels are expected for {raw.type} blocks."
        return ConfigSchemaError(f"Extraneous label for {raw.type}", detail, raw.def_range)
    return None
