from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from tfmodel.errors import ExpressionWalkError
    from tfmodel.hcl.schema import BodySchema, PartialContent
    from tfmodel.models import Attribute, Diagnostic, Range


@dataclass(frozen=True)
class ExpressionNode:
    """One sub-expression visited by :meth:`Expression.walk`.

    ``function_name`` is set for function calls only and holds the callee as
    written, e.g. ``provider::time::rfc3339_parse``.
    """

    type: str
    range: Range
    function_name: str | None = None


class Expression(ABC):
    """An unevaluated expression, independent of the surface syntax it came from."""

    @property
    @abstractmethod
    def range(self) -> Range: ...

    @property
    @abstractmethod
    def text(self) -> str: ...

    @abstractmethod
    def static_string(self) -> str:
        """Return the value of a literal string (or number/bool) expression.

        Raises ConfigSchemaError when the value needs evaluation.
        """

    @abstractmethod
    def traversal(self) -> list[str]:
        """Return the parts of an absolute traversal such as ``aws.west``.

        Raises ConfigSchemaError when the expression is not a plain traversal.
        """

    @abstractmethod
    def map_items(self) -> list[tuple[Expression, Expression]]:
        """Return the key/value pairs of an object constructor expression.

        Raises ConfigSchemaError when the expression is not an object.
        """

    @abstractmethod
    def walk(self, on_error: Callable[[ExpressionWalkError], None] | None = None) -> Iterator[ExpressionNode]:
        """Yield every sub-expression depth-first, in document order."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self.range == other.range and self.text == other.text

    def __hash__(self) -> int:
        return hash((self.range, self.text))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.text!r} at {self.range})"


class Body(Protocol):
    def partial_content(self, schema: BodySchema) -> tuple[PartialContent, list[Diagnostic]]: ...

    def just_attributes(self) -> dict[str, Attribute]: ...

    def all_attributes(self) -> Iterator[Attribute]: ...
