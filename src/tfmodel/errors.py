"""Error taxonomy for extraction.

Syntax-level code raises these; resolvers catch them, convert them to
diagnostics with :meth:`TfModelError.to_diagnostic` and carry on with the rest
of the document.
"""

from typing import Literal

from tfmodel.models import Diagnostic, Range


class TfModelError(Exception):
    severity: Literal["error", "warning"] = "error"

    def __init__(self, summary: str, detail: str = "", subject: Range | None = None) -> None:
        super().__init__(f"{summary}: {detail}" if detail else summary)
        self.summary = summary
        self.detail = detail
        self.subject = subject

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=self.severity,
            summary=self.summary,
            detail=self.detail,
            subject=self.subject,
            kind=type(self).__name__,
        )


class ConfigSchemaError(TfModelError):
    """A block or attribute does not have the shape its schema requires."""


class ConstraintParseError(TfModelError):
    """A version constraint string does not match the constraint grammar."""


class ExpressionWalkError(TfModelError):
    """A JSON string could not be re-parsed as a template for expression walking."""

    severity = "warning"


class ParseError(TfModelError):
    """The source document has syntax errors."""
