from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_serializer

from tfmodel.core.ports.syntax import Body, Expression


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    byte: int = 0

    # byte is derivable from line/column, so it does not take part in identity
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (self.line, self.column) == (other.line, other.column)

    def __hash__(self) -> int:
        return hash((self.line, self.column))

    def __str__(self) -> str:
        return f"{self.line},{self.column}"


class Range(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    start: Position
    end: Position

    @property
    def empty(self) -> bool:
        return (self.end.line, self.end.column) <= (self.start.line, self.start.column)

    @classmethod
    def between(cls, first: "Range", last: "Range") -> "Range":
        """Return the range from the start of ``first`` to the end of ``last``."""
        return cls(filename=first.filename, start=first.start, end=last.end)

    def __str__(self) -> str:
        return f"{self.filename}:{self.start}-{self.end}"


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Literal["error", "warning"]
    summary: str
    detail: str = ""
    subject: Range | None = None
    kind: str | None = None

    def __str__(self) -> str:
        location = f"{self.subject}: " if self.subject else ""
        detail = f"; {self.detail}" if self.detail else ""
        return f"{location}{self.summary}{detail}"


def has_errors(diagnostics: list[Diagnostic]) -> bool:
    return any(diag.severity == "error" for diag in diagnostics)


class Version(BaseModel):
    """A parsed version literal such as ``1.2.3``, ``v2.0.0-beta.1`` or ``1.0+build.5``.

    ``segments`` is padded with zeros to at least three entries; ``specified``
    keeps the number of segments actually written, which the pessimistic
    operator needs.
    """

    model_config = ConfigDict(frozen=True)

    segments: tuple[int, ...]
    specified: int
    prerelease: str = ""
    metadata: str = ""
    original: str

    def __str__(self) -> str:
        return self.original


class Constraint(BaseModel):
    model_config = ConfigDict(frozen=True)

    operator: str
    version: Version

    def __str__(self) -> str:
        operator = self.operator or "="
        return f"{operator} {self.version}"


class Attribute(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    expr: Expression
    range: Range
    name_range: Range

    @field_serializer("expr")
    def _serialize_expr(self, expr: Expression) -> str:
        return expr.text


class ModuleCall(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    def_range: Range
    source: str
    source_attr: Attribute
    version: tuple[Constraint, ...] | None = None
    version_attr: Attribute | None = None


class Local(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    def_range: Range
    attribute: Attribute


class ProviderRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    def_range: Range


@dataclass(frozen=True)
class Document:
    """A parsed configuration file.

    ``diagnostics`` holds the syntax errors reported while parsing; the body
    still covers whatever the parser could recover.
    """

    filename: str
    syntax: str
    body: Body
    diagnostics: list[Diagnostic] = field(default_factory=list)
