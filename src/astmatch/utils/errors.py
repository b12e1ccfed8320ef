"""
Error types and source location tracking for astmatch.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed byte offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class AstMatchError(Exception):
    """Base exception for all astmatch errors."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        self.message = message
        self.location = location
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"[{self.location}]")

        parts.append(self.message)

        if self.source_line and self.location:
            parts.append(f"\n    {self.source_line}")
            # Add caret pointing to the error column
            padding = " " * (4 + self.location.column - 1)
            parts.append(f"\n{padding}^")

        return " ".join(parts) if not self.source_line else parts[0] + " " + "".join(parts[1:])


class PatternDefinitionError(AstMatchError):
    """
    Raised when a pattern is built from invalid arguments.

    This error is raised when:
    - A kind name does not name an ``ast`` node class
    - A slot name is not a field of the node kind
    - A slot constraint is not a Pattern
    - A rest pattern is not the last element of a tuple
    - Cardinality bounds are negative or inverted
    - A binary operator symbol is unknown
    """

    pass


class UnsupportedLiteralError(PatternDefinitionError):
    """Raised when ``literal()`` is given a value with no literal form."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown literal type {type(value).__name__}: {value!r}")


class SourceParseError(AstMatchError):
    """Raised when source code cannot be parsed into a tree."""

    pass


class ConfigError(AstMatchError):
    """Raised when configuration data is invalid."""

    pass
