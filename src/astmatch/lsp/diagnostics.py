"""
Diagnostic generation from pattern matches.

This module runs match rules over a document and converts every recorded
match into an LSP-compatible diagnostic for display in editors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from lsprotocol import types

from astmatch.config import MatchConfig
from astmatch.matching.pattern import Pattern
from astmatch.tree import nodes
from astmatch.utils.errors import SourceParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchRule:
    """
    A pattern reported as a diagnostic wherever it matches.

    Attributes:
        pattern: The pattern to look for
        message: Diagnostic message shown for every match
        severity: Diagnostic severity
        code: Optional rule code
    """

    pattern: Pattern
    message: str
    severity: types.DiagnosticSeverity = types.DiagnosticSeverity.Information
    code: Optional[str] = None


def _node_bounds(node: Any) -> Optional[tuple[int, int, int, int]]:
    lineno = getattr(node, "lineno", None)
    if lineno is None:
        return None
    col_offset = getattr(node, "col_offset", 0)
    end_lineno = getattr(node, "end_lineno", None) or lineno
    end_col_offset = getattr(node, "end_col_offset", None)
    if end_col_offset is None:
        end_col_offset = col_offset + 1
    return lineno, col_offset, end_lineno, end_col_offset


def node_range(value: Any) -> types.Range:
    """
    Convert the span of a node (or node-list) to an LSP range.

    Lines become 0-indexed; a node-list spans from its first to its last
    element. Values without a location map to the start of the document.
    """
    if nodes.is_node_list(value):
        first = _node_bounds(value[0]) if value else None
        last = _node_bounds(value[-1]) if value else None
        bounds = (first[0], first[1], last[2], last[3]) if first and last else None
    else:
        bounds = _node_bounds(value)

    if bounds is None:
        return types.Range(
            start=types.Position(line=0, character=0),
            end=types.Position(line=0, character=0),
        )

    line, character, end_line, end_character = bounds
    return types.Range(
        start=types.Position(line=max(0, line - 1), character=character),
        end=types.Position(line=max(0, end_line - 1), character=end_character),
    )


class DiagnosticProvider:
    """
    Generates LSP diagnostics from the matches of a set of rules.

    Each rule runs in its own match session over every node of the
    document, so one rule's matches never leak into another's.
    """

    def __init__(
        self,
        source: str,
        uri: str,
        rules: Sequence[MatchRule],
        config: Optional[MatchConfig] = None,
    ) -> None:
        """
        Initialize the diagnostic provider.

        Args:
            source: The Python source code to analyze
            uri: The document URI for location information
            rules: Rules to report
            config: Match configuration shared by every rule's session
        """
        self.source = source
        self.uri = uri
        self.rules = list(rules)
        self.config = config
        self._diagnostics: list[types.Diagnostic] = []

    def get_diagnostics(self) -> list[types.Diagnostic]:
        """
        Get all diagnostics for the document.

        Returns:
            One diagnostic per distinct match of each rule, rules in order,
            or a single error diagnostic when the document does not parse
        """
        self._diagnostics = []

        try:
            tree = nodes.parse(self.source, filename=self.uri)
        except SourceParseError as e:
            logger.warning("Skipping match rules for %s: %s", self.uri, e.message)
            self._add_parse_error(e)
            return self._diagnostics

        for rule in self.rules:
            session = rule.pattern.session(self.config)
            for node in tree.walk():
                session.match(node)
            for match in session.matches:
                self._add_match(rule, match)

        return self._diagnostics

    def _add_match(self, rule: MatchRule, match: Any) -> None:
        diagnostic = types.Diagnostic(
            range=node_range(match),
            message=rule.message,
            severity=rule.severity,
            source="astmatch",
            code=rule.code,
        )
        self._diagnostics.append(diagnostic)

    def _add_parse_error(self, error: SourceParseError) -> None:
        """
        Add a syntax error as an LSP diagnostic.

        Args:
            error: The parse error
        """
        line = 0
        character = 0

        if error.location:
            line = max(0, error.location.line - 1)  # Convert to 0-indexed
            character = max(0, error.location.column - 1)

        diagnostic = types.Diagnostic(
            range=types.Range(
                start=types.Position(line=line, character=character),
                end=types.Position(line=line, character=character + 1),
            ),
            message=error.message,
            severity=types.DiagnosticSeverity.Error,
            source="astmatch",
        )

        self._diagnostics.append(diagnostic)
