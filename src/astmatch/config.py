"""
Configuration for pattern matching sessions.

The configuration controls which call forms count as transparent wrappers
when expressions are unwrapped, and how sessions render their matches.

Example:
    config = MatchConfig(unwrap_named_expressions=False)
    session = pattern.session(config)

    config = MatchConfig.from_mapping({"cast_functions": ["cast", "my_cast"]})
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from astmatch.utils.errors import ConfigError


DEFAULT_CAST_FUNCTIONS = frozenset({"cast", "typing.cast", "typing_extensions.cast"})
DEFAULT_ASSERTION_FUNCTIONS = frozenset(
    {"assert_type", "typing.assert_type", "typing_extensions.assert_type"}
)


@dataclass
class MatchConfig:
    """
    Configuration for a match session.

    Attributes:
        cast_functions: Dotted callee names of ``cast(T, value)`` style calls
        assertion_functions: Dotted callee names of ``assert_type(value, T)`` style calls
        unwrap_named_expressions: Whether ``(name := value)`` unwraps to ``value``
        render_indent: JSON indentation used when rendering patterns
        max_text_length: Truncate rendered match text past this length
    """

    cast_functions: frozenset[str] = field(default_factory=lambda: DEFAULT_CAST_FUNCTIONS)
    assertion_functions: frozenset[str] = field(
        default_factory=lambda: DEFAULT_ASSERTION_FUNCTIONS
    )
    unwrap_named_expressions: bool = True
    render_indent: int = 2
    max_text_length: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MatchConfig:
        """
        Build a configuration from plain data.

        Args:
            data: Mapping of field names to values, e.g. a ``[tool.astmatch]`` table

        Returns:
            The configuration

        Raises:
            ConfigError: If a key is unknown or a value has the wrong type
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key in ("cast_functions", "assertion_functions"):
            if key in data:
                names = data[key]
                if not isinstance(names, (list, tuple, set, frozenset)) or not all(
                    isinstance(n, str) for n in names
                ):
                    raise ConfigError(f"'{key}' must be a list of dotted names")
                values[key] = frozenset(names)

        if "unwrap_named_expressions" in data:
            flag = data["unwrap_named_expressions"]
            if not isinstance(flag, bool):
                raise ConfigError("'unwrap_named_expressions' must be a boolean")
            values["unwrap_named_expressions"] = flag

        if "render_indent" in data:
            indent = data["render_indent"]
            if isinstance(indent, bool) or not isinstance(indent, int) or indent < 0:
                raise ConfigError("'render_indent' must be a non-negative integer")
            values["render_indent"] = indent

        if "max_text_length" in data:
            limit = data["max_text_length"]
            if limit is not None and (
                isinstance(limit, bool) or not isinstance(limit, int) or limit < 1
            ):
                raise ConfigError("'max_text_length' must be a positive integer or null")
            values["max_text_length"] = limit

        return cls(**values)


DEFAULT_CONFIG = MatchConfig()
