"""
Match sessions for astmatch.

A :class:`MatchSession` holds everything a traversal learns while matching
one pattern graph: the last match and the set of distinct matches of every
pattern it evaluated, and the nodes already inspected by ``contains``
searches. Patterns stay immutable, so a pattern built once can be reused by
any number of independent sessions.

Example:
    pattern = call("find", dict_of({"id": any_node().ref("id")}))
    session = pattern.session()
    for node in tree.walk():
        session.match(node)

    session.matches             # every distinct matched call
    session.collect_captures()  # {"id": <the id value of the last match>}
    print(session.render())
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from astmatch.config import DEFAULT_CONFIG, MatchConfig
from astmatch.matching.matcher import PatternMatcher
from astmatch.matching.pattern import Pattern
from astmatch.tree import nodes

logger = logging.getLogger(__name__)


@dataclass
class MatchRecord:
    """
    Matches recorded for one pattern.

    Attributes:
        last_match: The most recent successful match
        matches: Distinct matches keyed by identity, in first-match order
    """

    last_match: Any = None
    matches: dict[int, Any] = field(default_factory=dict)


class MatchSession:
    """
    State of one traversal matching a pattern graph.

    Attributes:
        pattern: The root pattern
        config: Configuration for unwrapping and rendering
    """

    def __init__(self, pattern: Pattern, config: Optional[MatchConfig] = None) -> None:
        self.pattern = pattern
        self.config = config or DEFAULT_CONFIG
        self._records: dict[Pattern, MatchRecord] = {}
        self._seen: dict[Pattern, set] = {}
        self._tails: dict[tuple[int, int], tuple[list, list]] = {}
        self._matcher = PatternMatcher(self)
        logger.debug("Started match session for %r", pattern)

    # -------------------------------------------------------------------------
    # Matching
    # -------------------------------------------------------------------------

    def match(self, target: Any) -> Any:
        """
        Match the root pattern against a node or node-list.

        Returns:
            The matched value, or None. An empty node-list is a valid match,
            so compare the result against None.
        """
        return self._matcher.evaluate(self.pattern, target)

    def evaluate(self, pattern: Pattern, target: Any) -> Any:
        """Match any pattern in this session."""
        return self._matcher.evaluate(pattern, target)

    def record(self, pattern: Pattern, value: Any) -> None:
        record = self._records.get(pattern)
        if record is None:
            record = self._records[pattern] = MatchRecord()
        record.last_match = value
        record.matches.setdefault(id(value), value)

    def seen_nodes(self, pattern: Pattern) -> set:
        """Nodes already inspected by the ``contains`` search of a pattern."""
        return self._seen.setdefault(pattern, set())

    def tail_of(self, target: list, offset: int) -> list:
        """
        The elements of a node-list from ``offset`` on.

        The same list and offset always give back the same tail object, so a
        rest pattern visiting one list repeatedly records a single match.
        """
        key = (id(target), offset)
        cached = self._tails.get(key)
        if cached is not None:
            owner, tail = cached
            if owner is target and len(tail) == len(target) - offset and all(
                a is b for a, b in zip(tail, target[offset:])
            ):
                return tail
        tail = target[offset:]
        self._tails[key] = (target, tail)
        return tail

    # -------------------------------------------------------------------------
    # Recorded state
    # -------------------------------------------------------------------------

    @property
    def last_match(self) -> Any:
        return self.last_match_of(self.pattern)

    @property
    def matches(self) -> list:
        return self.matches_of(self.pattern)

    def last_match_of(self, pattern: Pattern) -> Any:
        record = self._records.get(pattern)
        return record.last_match if record else None

    def matches_of(self, pattern: Pattern) -> list:
        record = self._records.get(pattern)
        return list(record.matches.values()) if record else []

    def collect_captures(self) -> dict[str, Any]:
        """
        Collect the last matches of every named pattern below the root.

        The root's params are walked depth-first in declaration order with an
        explicit stack, descending into nested patterns, sequences and
        mappings but never into tree nodes. When two patterns share a capture
        name, the one visited last wins.

        Returns:
            Mapping of capture name to the captured value (None if the
            captured pattern never matched in this session)
        """
        captures: dict[str, Any] = {}
        stack: list[Any] = list(self.pattern.params.values())
        stack.reverse()

        while stack:
            value = stack.pop()
            if isinstance(value, Pattern):
                if value.capture_name is not None:
                    captures[value.capture_name] = self.last_match_of(value)
                children = list(value.params.values())
            elif isinstance(value, (list, tuple)):
                children = list(value)
            elif isinstance(value, Mapping):
                children = list(value.values())
            else:
                continue
            children.reverse()
            stack.extend(children)

        return captures

    def render(self, pattern: Optional[Pattern] = None) -> str:
        """Render a pattern (the root by default) with its recorded matches."""
        return render_pattern(pattern or self.pattern, self)


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------


def render_pattern(pattern: Pattern, session: Optional[MatchSession] = None) -> str:
    """
    Render a pattern as ``Pattern<kind> {json}``.

    Nested patterns in the params are rendered as their kind tag. When a
    session is given, the matches it recorded for the pattern are listed.
    """
    config = session.config if session is not None else DEFAULT_CONFIG

    payload: dict[str, Any] = {}
    if pattern.params:
        payload["params"] = {key: _render_param(value) for key, value in pattern.params.items()}
    if pattern.capture_name is not None:
        payload["capture"] = pattern.capture_name
    if session is not None:
        matches = session.matches_of(pattern)
        if matches:
            payload["matches"] = [_describe_match(match, config) for match in matches]

    body = json.dumps(payload, indent=config.render_indent, ensure_ascii=False)
    return f"Pattern<{pattern.kind}> {body}"


def _render_param(value: Any) -> Any:
    if isinstance(value, Pattern):
        return value.kind
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_render_param(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _render_param(item) for key, item in value.items()}
    if nodes.is_node(value):
        return nodes.kind(value)
    if callable(value):
        return getattr(value, "__name__", repr(value))
    return repr(value)


def _describe_match(value: Any, config: MatchConfig) -> dict[str, Any]:
    if nodes.is_node_list(value):
        items = [item for item in value if nodes.is_node(item)]
        entry: dict[str, Any] = {
            "kind": "NodeList",
            "text": ", ".join(nodes.text(item) for item in items),
        }
        location = nodes.position(items[0]) if items else None
    else:
        entry = {"kind": nodes.kind(value), "text": nodes.text(value)}
        location = nodes.position(value)

    limit = config.max_text_length
    if limit is not None and len(entry["text"]) > limit:
        entry["text"] = entry["text"][:limit] + "..."

    if location is not None:
        entry["line"] = location.line
        entry["column"] = location.column
    return entry
