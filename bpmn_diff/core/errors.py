"""
Error taxonomy for BPMN comparison.

Structural failures (malformed XML, missing process definitions) are fatal to a
single comparison and propagate to the caller. Summarization failures are kept
separate so they can never abort a diff.
"""

from typing import Optional


class ComparisonError(Exception):
    """Base class for failures that abort a comparison."""

    kind = "comparison_error"

    def __init__(self, message: str, document: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.document = document

    def __str__(self) -> str:
        if self.document:
            return f"{self.document} document: {self.message}"
        return self.message

    def to_dict(self) -> dict:
        """Serialize for API/CLI error payloads."""
        return {"error": self.kind, "detail": self.message, "document": self.document}


class ParseError(ComparisonError):
    """Input is not well-formed XML."""

    kind = "parse_error"

    def __init__(
        self,
        message: str,
        document: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message, document=document)
        self.line = line
        self.column = column

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["line"] = self.line
        data["column"] = self.column
        return data


class SchemaError(ComparisonError):
    """Well-formed XML without a recognizable process definition container."""

    kind = "schema_error"


class SummarizationError(Exception):
    """The natural-language summary could not be produced."""


__all__ = [
    "ComparisonError",
    "ParseError",
    "SchemaError",
    "SummarizationError",
]
