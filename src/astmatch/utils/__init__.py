"""
astmatch Utilities Package.

Common utilities for error handling and source locations.
"""

from astmatch.utils.errors import (
    AstMatchError,
    ConfigError,
    PatternDefinitionError,
    SourceLocation,
    SourceParseError,
    UnsupportedLiteralError,
)

__all__ = [
    # Errors
    "AstMatchError",
    "PatternDefinitionError",
    "UnsupportedLiteralError",
    "SourceParseError",
    "ConfigError",
    "SourceLocation",
]
