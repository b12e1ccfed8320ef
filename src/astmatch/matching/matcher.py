"""
Pattern evaluation for astmatch.

:class:`PatternMatcher` holds one match routine per shape variant and
dispatches on the shape of the pattern being evaluated. Every routine
returns a :data:`~astmatch.matching.pattern.MatchResult`; :meth:`evaluate`
turns it into the matched value and records it on the session.

Evaluation order is deterministic: slots in declaration order, union and
intersection members in declaration order, list elements in list order.
Every composite routine short-circuits, so only the sub-patterns actually
evaluated record matches.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any, Optional

from astmatch.matching.pattern import (
    MATCHED_SELF,
    NO_MATCH,
    AnyShape,
    ContainsShape,
    DelegateShape,
    DictShape,
    EveryShape,
    IdentifierShape,
    IntersectionShape,
    KindShape,
    LiteralCategory,
    LiteralShape,
    MatchedAs,
    MatchedSelf,
    MatchResult,
    MaybeShape,
    MemberPathShape,
    NamedShape,
    NegationShape,
    NodeListShape,
    NodeShape,
    NoMatch,
    Pattern,
    PredicateShape,
    RefinedNodeShape,
    RefineShape,
    RestShape,
    SomeShape,
    TupleShape,
    UnionShape,
    UnwrapShape,
    coerce_result,
)
from astmatch.tree import nodes
from astmatch.utils.errors import AstMatchError

if TYPE_CHECKING:
    from astmatch.matching.session import MatchSession


class PatternMatcher:
    """
    Evaluates patterns against nodes and node-lists for one session.

    Attributes:
        session: The session recording matches
        config: The session's configuration
    """

    def __init__(self, session: MatchSession) -> None:
        self.session = session
        self.config = session.config

    def evaluate(self, pattern: Pattern, target: Any) -> Any:
        """
        Evaluate a pattern and record a successful match.

        Returns:
            The matched value, or None when the pattern does not match
        """
        result = self._dispatch(pattern, target)
        if isinstance(result, NoMatch):
            return None

        value = target if isinstance(result, MatchedSelf) else result.value
        self.session.record(pattern, value)
        return value

    def _matches(self, pattern: Pattern, target: Any) -> bool:
        return self.evaluate(pattern, target) is not None

    def _dispatch(self, pattern: Pattern, target: Any) -> MatchResult:
        """Dispatch to the routine of the pattern's shape."""
        shape = pattern.shape
        if isinstance(shape, NodeShape):
            return self._match_node(shape, target)
        elif isinstance(shape, KindShape):
            return self._match_kind(shape, target)
        elif isinstance(shape, RefinedNodeShape):
            return self._match_refined_node(shape, target)
        elif isinstance(shape, AnyShape):
            return NO_MATCH if nodes.is_node_list(target) else MATCHED_SELF
        elif isinstance(shape, PredicateShape):
            return coerce_result(shape.predicate(target))
        elif isinstance(shape, LiteralShape):
            return self._match_literal(shape, target)
        elif isinstance(shape, IdentifierShape):
            return self._match_identifier(shape, target)
        elif isinstance(shape, NamedShape):
            return self._match_named(shape, target)
        elif isinstance(shape, MaybeShape):
            return self._match_maybe(shape, target)
        elif isinstance(shape, NodeListShape):
            return self._match_node_list(shape, target)
        elif isinstance(shape, TupleShape):
            return self._match_tuple(shape, target)
        elif isinstance(shape, RestShape):
            return self._match_rest(shape, target)
        elif isinstance(shape, EveryShape):
            return self._match_every(shape, target)
        elif isinstance(shape, SomeShape):
            return self._match_some(shape, target)
        elif isinstance(shape, UnionShape):
            return self._match_union(shape, target)
        elif isinstance(shape, IntersectionShape):
            return self._match_intersection(shape, target)
        elif isinstance(shape, NegationShape):
            return NO_MATCH if self._matches(shape.inner, target) else MATCHED_SELF
        elif isinstance(shape, RefineShape):
            return self._match_refine(shape, target)
        elif isinstance(shape, UnwrapShape):
            return self._match_unwrap(shape, target)
        elif isinstance(shape, MemberPathShape):
            return self._match_member_path(shape, target)
        elif isinstance(shape, ContainsShape):
            return self._match_contains(pattern, shape, target)
        elif isinstance(shape, DictShape):
            return self._match_dict(shape, target)
        elif isinstance(shape, DelegateShape):
            return self._match_delegate(shape, target)
        raise AstMatchError(f"Unsupported pattern shape: {type(shape).__name__}")

    # -------------------------------------------------------------------------
    # Structural
    # -------------------------------------------------------------------------

    def _match_kind(self, shape: KindShape, target: Any) -> MatchResult:
        return MATCHED_SELF if nodes.is_kind(target, shape.kind) else NO_MATCH

    def _match_node(self, shape: NodeShape, target: Any) -> MatchResult:
        if not nodes.is_kind(target, shape.kind):
            return NO_MATCH
        return MATCHED_SELF if self._match_slots(target, shape.slots) else NO_MATCH

    def _match_refined_node(self, shape: RefinedNodeShape, target: Any) -> MatchResult:
        matched = self.evaluate(shape.base, target)
        if not nodes.is_node(matched):
            return NO_MATCH
        if not self._match_slots(matched, shape.slots):
            return NO_MATCH
        return MatchedAs(matched)

    def _match_slots(self, node: ast.AST, slots: tuple[tuple[str, Pattern], ...]) -> bool:
        """Check child slots in declaration order, stopping at the first failure."""
        for slot_name, slot_pattern in slots:
            value = nodes.child_slot(node, slot_name)
            if value is nodes.ABSENT:
                if isinstance(slot_pattern.shape, MaybeShape):
                    continue
                return False
            if not self._matches(slot_pattern, value):
                return False
        return True

    def _match_delegate(self, shape: DelegateShape, target: Any) -> MatchResult:
        if not nodes.is_node(target):
            return NO_MATCH
        return MATCHED_SELF if self._matches(shape.inner, target) else NO_MATCH

    def _match_dict(self, shape: DictShape, target: Any) -> MatchResult:
        if not isinstance(target, ast.Dict):
            return NO_MATCH

        entries = list(zip(target.keys, target.values))
        if shape.partial:
            for key, value in entries:
                if not any(
                    self._match_dict_entry(key, value, name, pattern)
                    for name, pattern in shape.entries
                ):
                    return NO_MATCH
            return MATCHED_SELF

        if len(entries) != len(shape.entries):
            return NO_MATCH
        for (key, value), (name, pattern) in zip(entries, shape.entries):
            if not self._match_dict_entry(key, value, name, pattern):
                return NO_MATCH
        return MATCHED_SELF

    def _match_dict_entry(
        self, key: Optional[ast.AST], value: ast.AST, name: str, pattern: Pattern
    ) -> bool:
        # ``**spread`` entries have no key
        if key is None or not nodes.is_string_like(key):
            return False
        if nodes.string_value(key) != name:
            return False
        return self._matches(pattern, value)

    # -------------------------------------------------------------------------
    # Leaves
    # -------------------------------------------------------------------------

    def _match_literal(self, shape: LiteralShape, target: Any) -> MatchResult:
        if not nodes.is_node(target):
            return NO_MATCH

        category = shape.category
        if category == LiteralCategory.ANY:
            return MATCHED_SELF if nodes.is_literal(target) else NO_MATCH

        if category == LiteralCategory.STRING:
            if not nodes.is_string_like(target):
                return NO_MATCH
            if shape.has_value and nodes.string_value(target) != shape.value:
                return NO_MATCH
            return MATCHED_SELF

        if not isinstance(target, ast.Constant):
            return NO_MATCH
        value = target.value

        if category == LiteralCategory.NUMBER:
            if isinstance(value, bool) or not isinstance(value, (int, float, complex)):
                return NO_MATCH
            if shape.has_value and value != shape.value:
                return NO_MATCH
            return MATCHED_SELF

        if category == LiteralCategory.BOOLEAN:
            if not isinstance(value, bool):
                return NO_MATCH
            if shape.has_value and value is not shape.value:
                return NO_MATCH
            return MATCHED_SELF

        if category == LiteralCategory.NONE:
            return MATCHED_SELF if value is None else NO_MATCH

        if category == LiteralCategory.ELLIPSIS:
            return MATCHED_SELF if value is Ellipsis else NO_MATCH

        return NO_MATCH

    def _match_identifier(self, shape: IdentifierShape, target: Any) -> MatchResult:
        if isinstance(target, ast.Name) and target.id == shape.name:
            return MATCHED_SELF
        return NO_MATCH

    def _match_named(self, shape: NamedShape, target: Any) -> MatchResult:
        if not nodes.is_node(target):
            return NO_MATCH
        if nodes.get_name(target) == shape.name:
            return MATCHED_SELF
        # A bare identifier stands for the node that uses it
        if isinstance(target, ast.Name) and target.id == shape.name:
            parent = nodes.get_parent(target)
            return MatchedAs(parent) if parent is not None else MATCHED_SELF
        return NO_MATCH

    def _match_maybe(self, shape: MaybeShape, target: Any) -> MatchResult:
        if shape.inner is None:
            return MATCHED_SELF
        matched = self.evaluate(shape.inner, target)
        return NO_MATCH if matched is None else MatchedAs(matched)

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    def _match_node_list(self, shape: NodeListShape, target: Any) -> MatchResult:
        if not nodes.is_node_list(target):
            return NO_MATCH
        if shape.inner is None:
            return MATCHED_SELF
        matched = self.evaluate(shape.inner, target)
        return NO_MATCH if matched is None else MatchedAs(matched)

    def _match_tuple(self, shape: TupleShape, target: Any) -> MatchResult:
        if not nodes.is_node_list(target):
            return NO_MATCH

        arity = len(shape.items)
        if shape.rest is None:
            if len(target) != arity:
                return NO_MATCH
        elif len(target) < arity:
            return NO_MATCH

        for item_pattern, child in zip(shape.items, target):
            if not self._matches(item_pattern, child):
                return NO_MATCH

        if shape.rest is not None:
            tail = self.session.tail_of(target, arity)
            if not self._matches(shape.rest, tail):
                return NO_MATCH
        return MATCHED_SELF

    def _match_rest(self, shape: RestShape, target: Any) -> MatchResult:
        if not nodes.is_node_list(target):
            return NO_MATCH
        if all(self._matches(shape.inner, child) for child in target):
            return MATCHED_SELF
        return NO_MATCH

    def _within_bounds(self, target: list, at_least: int, at_most: Optional[int]) -> bool:
        if len(target) < at_least:
            return False
        return at_most is None or len(target) <= at_most

    def _match_every(self, shape: EveryShape, target: Any) -> MatchResult:
        if not nodes.is_node_list(target):
            return NO_MATCH
        if not self._within_bounds(target, shape.at_least, shape.at_most):
            return NO_MATCH
        if all(self._matches(shape.inner, child) for child in target):
            return MATCHED_SELF
        return NO_MATCH

    def _match_some(self, shape: SomeShape, target: Any) -> MatchResult:
        if not nodes.is_node_list(target):
            return NO_MATCH
        if not self._within_bounds(target, shape.at_least, shape.at_most):
            return NO_MATCH
        if any(self._matches(shape.inner, child) for child in target):
            return MATCHED_SELF
        return NO_MATCH

    # -------------------------------------------------------------------------
    # Logical
    # -------------------------------------------------------------------------

    def _match_union(self, shape: UnionShape, target: Any) -> MatchResult:
        for option in shape.options:
            matched = self.evaluate(option, target)
            if matched is not None:
                return MatchedAs(matched)
        return NO_MATCH

    def _match_intersection(self, shape: IntersectionShape, target: Any) -> MatchResult:
        if all(self._matches(part, target) for part in shape.parts):
            return MATCHED_SELF
        return NO_MATCH

    # -------------------------------------------------------------------------
    # Transformation and navigation
    # -------------------------------------------------------------------------

    def _match_refine(self, shape: RefineShape, target: Any) -> MatchResult:
        matched = self.evaluate(shape.base, target)
        if matched is None:
            return NO_MATCH
        return coerce_result(shape.transform(matched))

    def _match_unwrap(self, shape: UnwrapShape, target: Any) -> MatchResult:
        if not nodes.is_node(target):
            return NO_MATCH
        unwrapped = nodes.unwrap_expression(target, self.config)
        matched = self.evaluate(shape.inner, unwrapped)
        return NO_MATCH if matched is None else MatchedAs(matched)

    def _match_member_path(self, shape: MemberPathShape, target: Any) -> MatchResult:
        if not isinstance(target, ast.Attribute):
            return NO_MATCH

        if shape.inner is not None:
            return MATCHED_SELF if self._matches(shape.inner, target) else NO_MATCH

        if nodes.text(target) == shape.path:
            return MATCHED_SELF
        if nodes.member_path(target, self.config) == shape.path:
            return MATCHED_SELF
        return NO_MATCH

    def _match_contains(self, pattern: Pattern, shape: ContainsShape, target: Any) -> MatchResult:
        """
        Search the descendants of ``target`` for a node matching ``shape.inner``.

        Nodes inspected by an earlier search of the same pattern in this
        session are skipped; subtrees rooted at an ``until`` match are pruned.
        """
        if not nodes.is_node(target):
            return NO_MATCH

        seen = self.session.seen_nodes(pattern)
        stack = list(nodes.iter_children(target))
        stack.reverse()
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)

            if shape.until is not None and self._matches(shape.until, current):
                continue
            if self._matches(shape.inner, current):
                return MATCHED_SELF

            children = list(nodes.iter_children(current))
            children.reverse()
            stack.extend(children)

        return NO_MATCH
