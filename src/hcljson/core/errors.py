"""
Error types for HCL reading, conversion, and JSON encoding.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ir.syntax import Diagnostic, SourceRange


class HclJsonError(Exception):
    """Base exception for all hcljson errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(HclJsonError):
    """
    Raised when HCL source cannot be parsed.

    Carries every diagnostic the reader produced; the first one supplies
    the source location.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        diagnostics: list[Diagnostic] | None = None,
    ):
        self.diagnostics = list(diagnostics or [])
        super().__init__(message, context)


class StructuralTypeMismatch(HclJsonError):
    """Raised when a parsed file does not hold a native-syntax body."""

    pass


class ConversionError(HclJsonError):
    """
    Raised when a block or attribute cannot be converted to JSON.

    ``path`` names the attribute/block chain that failed, outermost first.
    Enclosing bodies prepend their own segment as the error propagates.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        path: list[str] | None = None,
    ):
        self.path = list(path or [])
        super().__init__(message, context)

    def add_path(self, *segments: str) -> None:
        self.path[:0] = segments
        self.args = (self._format_message(),)

    def _format_message(self) -> str:
        message = self.message
        if self.path:
            message = f"{'.'.join(self.path)}: {message}"
        if self.context:
            return f"{self.context.format()}\n{message}"
        return message


class StructuralConflict(ConversionError):
    """
    Raised when a block label path or attribute collides with a value
    already present at the same key.

    Examples:
    - ``foo = 1`` and ``foo "x" {}`` in one body
    - ``a "x" "y" {}`` after two ``a "x" {}`` blocks
    """

    pass


class EvaluationError(ConversionError):
    """Raised when a unary operator cannot be applied to its literal operand."""

    pass


class EncodingError(HclJsonError):
    """Raised when the converted value cannot be serialized as JSON."""

    pass


@dataclass
class ErrorContext:
    """
    Source location of an error.

    Attributes:
        file: Name of the source file
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source line shown under the location
    """

    file: str
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "main.tf:10:5"
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format the offending line with a marker under the column."""
        if not self.snippet:
            return ""
        prefix = f"{self.line:4d} | "
        marker = " " * (len(prefix) + self.column - 1) + "^^^"
        return f"{prefix}{self.snippet}\n{marker}"

    @classmethod
    def from_range(cls, src_range: SourceRange, source: bytes | None = None) -> ErrorContext:
        """Build a context pointing at the start of ``src_range``."""
        snippet = None
        if source is not None:
            lines = source.decode("utf-8", errors="replace").split("\n")
            if 0 < src_range.start.line <= len(lines):
                snippet = lines[src_range.start.line - 1].rstrip("\r")
        return cls(
            file=src_range.filename,
            line=src_range.start.line,
            column=src_range.start.column,
            snippet=snippet,
        )


def make_parse_error(
    diagnostics: list[Diagnostic],
    source: bytes | None = None,
) -> ParseError:
    """
    Helper to create a ParseError from reader diagnostics.

    Args:
        diagnostics: Diagnostics reported by the reader (at least one)
        source: Optional source bytes used to render a snippet

    Returns:
        ParseError with context taken from the first diagnostic
    """
    first = diagnostics[0]
    context = None
    if first.subject is not None:
        context = ErrorContext.from_range(first.subject, source)
    message = "; ".join(d.format() for d in diagnostics)
    return ParseError(f"parse config: {message}", context, diagnostics)
