"""
Pattern definitions for astmatch.

A :class:`Pattern` is an immutable description of a tree shape. It is made
of a kind tag, a *shape* (one variant of the closed set below, holding what
the matcher needs), the declared construction ``params`` (used only for
capture collection and rendering) and an optional capture name.

Patterns carry no match state. Matching runs inside a
:class:`~astmatch.matching.session.MatchSession`, which records the matches
of every pattern it evaluates.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Union

from astmatch.tree.nodes import is_node, is_node_list

if TYPE_CHECKING:
    from astmatch.config import MatchConfig
    from astmatch.matching.session import MatchSession


# -----------------------------------------------------------------------------
# Sentinel kinds
# -----------------------------------------------------------------------------


class PatternKind(str, Enum):
    """
    Kind tags of patterns that are not keyed on a single node kind.

    None of the values is the name of an ``ast`` node class.
    """

    UNKNOWN = "Unknown"
    MAYBE = "Maybe"
    NODE_LIST = "NodeList"
    FIXED_LIST = "FixedList"
    REST_LIST = "RestList"
    EVERY = "Every"
    SOME = "Some"
    UNION = "Union"
    INTERSECTION = "Intersection"
    NEGATION = "Negation"
    CONTAINS = "Contains"

    def __str__(self) -> str:
        return self.value


LIST_KINDS = frozenset(
    {
        PatternKind.NODE_LIST.value,
        PatternKind.FIXED_LIST.value,
        PatternKind.REST_LIST.value,
        PatternKind.EVERY.value,
        PatternKind.SOME.value,
    }
)


class LiteralCategory(Enum):
    """Literal families matched by :class:`LiteralShape`."""

    ANY = "any"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NONE = "none"
    ELLIPSIS = "ellipsis"


# -----------------------------------------------------------------------------
# Match results
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NoMatch:
    """The input does not match."""


@dataclass(frozen=True, slots=True)
class MatchedSelf:
    """The input matches and is itself the recorded match."""


@dataclass(frozen=True, slots=True)
class MatchedAs:
    """The input matches; ``value`` (a node or node-list) is the recorded match."""

    value: Any


NO_MATCH = NoMatch()
MATCHED_SELF = MatchedSelf()

MatchResult = Union[NoMatch, MatchedSelf, MatchedAs]


def coerce_result(value: Any) -> MatchResult:
    """
    Interpret the return value of a caller-supplied predicate or transform.

    ``None``/``False`` mean no match, a node or a list redirects the match to
    that value, any other truthy value matches the input itself.
    """
    if isinstance(value, (NoMatch, MatchedSelf, MatchedAs)):
        return value
    if is_node(value) or is_node_list(value):
        return MatchedAs(value)
    return MATCHED_SELF if value else NO_MATCH


# -----------------------------------------------------------------------------
# Shapes
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AnyShape:
    """Any single node."""


@dataclass(frozen=True, slots=True)
class PredicateShape:
    """A caller-supplied predicate over a node or node-list."""

    predicate: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class KindShape:
    """Any single node of a kind."""

    kind: str


@dataclass(frozen=True, slots=True)
class NodeShape:
    """A node of a kind whose child slots match sub-patterns."""

    kind: str
    slots: tuple[tuple[str, Pattern], ...] = ()


@dataclass(frozen=True, slots=True)
class RefinedNodeShape:
    """Whatever ``base`` matches, with child slots checked on that node."""

    base: Pattern
    slots: tuple[tuple[str, Pattern], ...]


@dataclass(frozen=True, slots=True)
class LiteralShape:
    category: LiteralCategory
    value: Any = None
    has_value: bool = False


@dataclass(frozen=True, slots=True)
class IdentifierShape:
    name: str


@dataclass(frozen=True, slots=True)
class NamedShape:
    name: str


@dataclass(frozen=True, slots=True)
class MaybeShape:
    """Absent slot, or a present value matching ``inner``."""

    inner: Optional[Pattern] = None


@dataclass(frozen=True, slots=True)
class NodeListShape:
    inner: Optional[Pattern] = None


@dataclass(frozen=True, slots=True)
class TupleShape:
    """Fixed positional list, with an optional rest pattern for the tail."""

    items: tuple[Pattern, ...]
    rest: Optional[Pattern] = None


@dataclass(frozen=True, slots=True)
class RestShape:
    inner: Pattern


@dataclass(frozen=True, slots=True)
class EveryShape:
    inner: Pattern
    at_least: int = 0
    at_most: Optional[int] = None


@dataclass(frozen=True, slots=True)
class SomeShape:
    inner: Pattern
    at_least: int = 0
    at_most: Optional[int] = None


@dataclass(frozen=True, slots=True)
class UnionShape:
    options: tuple[Pattern, ...]


@dataclass(frozen=True, slots=True)
class IntersectionShape:
    parts: tuple[Pattern, ...]


@dataclass(frozen=True, slots=True)
class NegationShape:
    inner: Pattern


@dataclass(frozen=True, slots=True)
class RefineShape:
    base: Pattern
    transform: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class UnwrapShape:
    inner: Pattern


@dataclass(frozen=True, slots=True)
class MemberPathShape:
    """Attribute access matched by dotted path or by a sub-pattern."""

    path: Optional[str] = None
    inner: Optional[Pattern] = None


@dataclass(frozen=True, slots=True)
class ContainsShape:
    inner: Pattern
    until: Optional[Pattern] = None


@dataclass(frozen=True, slots=True)
class DictShape:
    """``Dict`` literal with string keys, in order or as a partial set."""

    entries: tuple[tuple[str, Pattern], ...]
    partial: bool = False


@dataclass(frozen=True, slots=True)
class DelegateShape:
    """A single node matching a compiled inner pattern; records the node itself."""

    inner: Pattern


Shape = Union[
    AnyShape,
    PredicateShape,
    KindShape,
    NodeShape,
    RefinedNodeShape,
    LiteralShape,
    IdentifierShape,
    NamedShape,
    MaybeShape,
    NodeListShape,
    TupleShape,
    RestShape,
    EveryShape,
    SomeShape,
    UnionShape,
    IntersectionShape,
    NegationShape,
    RefineShape,
    UnwrapShape,
    MemberPathShape,
    ContainsShape,
    DictShape,
    DelegateShape,
]


# -----------------------------------------------------------------------------
# Pattern
# -----------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Pattern:
    """
    A reusable, composable matcher for a node or node-list.

    Patterns compare and hash by identity, so the same pattern object can be
    tracked by a session wherever it appears in a pattern graph.

    Attributes:
        kind: Node kind tag, or a :class:`PatternKind` value
        shape: What the matcher evaluates
        params: Declared construction parameters (introspection only)
        capture_name: Label for capture collection, set via :meth:`ref`
    """

    kind: str
    shape: Shape
    params: Mapping[str, Any] = field(default_factory=dict)
    capture_name: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", str(self.kind))
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def match(self, target: Any, session: Optional[MatchSession] = None) -> Any:
        """
        Match a node or node-list.

        Args:
            target: The candidate node or node-list
            session: Session recording the matches; a throwaway one when omitted

        Returns:
            The matched value (the target or a redirected node/list), or None
        """
        if session is None:
            session = self.session()
        return session.evaluate(self, target)

    def session(self, config: Optional[MatchConfig] = None) -> MatchSession:
        """Start a new match session rooted at this pattern."""
        from astmatch.matching.session import MatchSession

        return MatchSession(self, config)

    def ref(self, name: str) -> Pattern:
        """Return a copy of this pattern tagged with a capture name."""
        return replace(self, params=dict(self.params), capture_name=name)

    @property
    def is_list_pattern(self) -> bool:
        return self.kind in LIST_KINDS

    def __str__(self) -> str:
        from astmatch.matching.session import render_pattern

        return render_pattern(self)

    def __repr__(self) -> str:
        if self.capture_name:
            return f"Pattern<{self.kind}>#{self.capture_name}"
        return f"Pattern<{self.kind}>"
