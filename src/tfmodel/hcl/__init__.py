from tfmodel.hcl.helpers import SourceText, parse_traversal
from tfmodel.hcl.json_syntax import JSONBody, JSONExpression
from tfmodel.hcl.native import NativeBody, NativeExpression, body_from_tree
from tfmodel.hcl.schema import (
    AttributeSchema,
    Block,
    BlockSchema,
    BodyContent,
    BodySchema,
    PartialContent,
    RawBlock,
    decode_body,
)
from tfmodel.hcl.template import TranslatedTemplate

__all__ = [
    "AttributeSchema",
    "Block",
    "BlockSchema",
    "BodyContent",
    "BodySchema",
    "JSONBody",
    "JSONExpression",
    "NativeBody",
    "NativeExpression",
    "PartialContent",
    "RawBlock",
    "SourceText",
    "TranslatedTemplate",
    "body_from_tree",
    "decode_body",
    "parse_traversal",
]
