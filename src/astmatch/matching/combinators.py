"""
Pattern combinators for astmatch.

Every function here builds an immutable :class:`~astmatch.matching.pattern.Pattern`.
Construction validates its arguments and raises
:class:`~astmatch.utils.errors.PatternDefinitionError` for malformed
patterns; matching itself never raises for a non-match.

Combinators fall into families:
- Leaves: ``any_node``, ``when``, ``literal``, ``string``, ``number``,
  ``boolean``, ``none``, ``ellipsis``, ``identifier``, ``named``
- Structure: ``node``, ``kind``, ``shape``, ``maybe``
- Collections: ``node_list``, ``tuple_of``, ``rest``, ``arguments``,
  ``every``, ``some``
- Logic: ``union``, ``intersection``, ``negate``
- Transformation and navigation: ``refine``, ``unwrap``, ``member``,
  ``contains``
- Captures: ``ref``
- Python constructs: ``call``, ``subscript``, ``dict_of``, ``list_of``,
  ``conditional``, ``binary``, ``import_from``, ``import_alias``,
  ``import_module``, ``exports``, ``enum``

Example:
    pattern = call("find", dict_of({"id": any_node().ref("id")}))
"""

from __future__ import annotations

import ast
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from astmatch.matching.operators import OperatorKind, get_operator
from astmatch.matching.pattern import (
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
    MaybeShape,
    MemberPathShape,
    NamedShape,
    NegationShape,
    NodeListShape,
    NodeShape,
    Pattern,
    PatternKind,
    PredicateShape,
    RefinedNodeShape,
    RefineShape,
    RestShape,
    SomeShape,
    TupleShape,
    UnionShape,
    UnwrapShape,
)
from astmatch.tree import nodes
from astmatch.utils.errors import PatternDefinitionError, UnsupportedLiteralError

KindRef = Union[str, type]
NameRef = Union[str, Pattern]


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<missing>"


_MISSING: Any = _Missing()


# -----------------------------------------------------------------------------
# Validation helpers
# -----------------------------------------------------------------------------


def _require_pattern(value: Any, what: str) -> Pattern:
    if not isinstance(value, Pattern):
        raise PatternDefinitionError(f"{what} must be a Pattern, got {type(value).__name__}")
    return value


def _require_patterns(values: Sequence[Any], what: str) -> tuple[Pattern, ...]:
    return tuple(_require_pattern(value, f"{what} #{i}") for i, value in enumerate(values))


def _check_slots(kind_name: Optional[str], slots: Mapping[str, Any]) -> dict[str, Pattern]:
    """Drop unspecified (None) slots and validate the rest."""
    fields = nodes.kind_fields(kind_name) if kind_name is not None else None
    declared: dict[str, Pattern] = {}
    for slot_name, slot_pattern in slots.items():
        if slot_pattern is None:
            continue
        if fields is not None and slot_name not in fields:
            raise PatternDefinitionError(f"{kind_name} has no slot {slot_name!r}")
        declared[slot_name] = _require_pattern(slot_pattern, f"Slot {slot_name!r}")
    return declared


def _check_bounds(at_least: int, at_most: Optional[int]) -> None:
    if isinstance(at_least, bool) or not isinstance(at_least, int) or at_least < 0:
        raise PatternDefinitionError(f"at_least must be a non-negative int, got {at_least!r}")
    if at_most is None:
        return
    if isinstance(at_most, bool) or not isinstance(at_most, int) or at_most < at_least:
        raise PatternDefinitionError(
            f"at_most must be an int no smaller than at_least ({at_least}), got {at_most!r}"
        )


def _name_pattern(name: NameRef) -> Pattern:
    """A Pattern as is, a dotted name as a member path, else an identifier."""
    if isinstance(name, Pattern):
        return name
    if not isinstance(name, str) or not name:
        raise PatternDefinitionError(f"Expected a name or a Pattern, got {name!r}")
    if "." in name:
        return member(name)
    return identifier(name)


def _single(kind_name: str, inner: Pattern, params: Mapping[str, Any]) -> Pattern:
    return Pattern(kind_name, DelegateShape(inner), params)


def _sequence(items: Union[Pattern, Sequence[Any]], convert: Callable[[Any], Pattern]) -> Pattern:
    """
    Build a list constraint from a list-shaped Pattern or a sequence of items.

    Non-Pattern items go through ``convert``; a trailing ``rest(...)`` keeps
    its meaning.
    """
    if isinstance(items, Pattern):
        if items.is_list_pattern:
            return items
        return some(items)
    if isinstance(items, str):
        return some(convert(items))
    return tuple_of(*(item if isinstance(item, Pattern) else convert(item) for item in items))


# -----------------------------------------------------------------------------
# Leaves
# -----------------------------------------------------------------------------


def any_node() -> Pattern:
    """Match any single node (never a node-list)."""
    return Pattern(PatternKind.UNKNOWN, AnyShape())


def when(predicate: Callable[[Any], Any]) -> Pattern:
    """
    Match whatever ``predicate`` accepts.

    The predicate receives the node or node-list. A falsy result is a
    non-match, a node or a list redirects the match to that value, any other
    truthy result matches the input itself.
    """
    if not callable(predicate):
        raise PatternDefinitionError(f"when() expects a callable, got {predicate!r}")
    return Pattern(PatternKind.UNKNOWN, PredicateShape(predicate), {"predicate": predicate})


def literal(value: Any = _MISSING) -> Pattern:
    """
    Match a literal.

    Without a value, any constant (or f-string without replacement fields)
    matches. With a value, dispatch on its type to the matching literal family.

    Raises:
        UnsupportedLiteralError: If ``value`` has no literal form
    """
    if value is _MISSING:
        return Pattern("Constant", LiteralShape(LiteralCategory.ANY))
    # bool is an int subclass
    if isinstance(value, bool):
        return boolean(value)
    if value is None:
        return none()
    if value is Ellipsis:
        return ellipsis()
    if isinstance(value, str):
        return string(value)
    if isinstance(value, (int, float, complex)):
        return number(value)
    raise UnsupportedLiteralError(value)


def string(value: Optional[str] = None) -> Pattern:
    if value is not None and not isinstance(value, str):
        raise PatternDefinitionError(f"string() expects a str, got {value!r}")
    return Pattern(
        "Constant",
        LiteralShape(LiteralCategory.STRING, value, value is not None),
        {"value": value},
    )


def number(value: Union[int, float, complex, None] = None) -> Pattern:
    if value is not None and (
        isinstance(value, bool) or not isinstance(value, (int, float, complex))
    ):
        raise PatternDefinitionError(f"number() expects a number, got {value!r}")
    return Pattern(
        "Constant",
        LiteralShape(LiteralCategory.NUMBER, value, value is not None),
        {"value": value},
    )


def boolean(value: Optional[bool] = None) -> Pattern:
    if value is not None and not isinstance(value, bool):
        raise PatternDefinitionError(f"boolean() expects a bool, got {value!r}")
    return Pattern(
        "Constant",
        LiteralShape(LiteralCategory.BOOLEAN, value, value is not None),
        {"value": value},
    )


def none() -> Pattern:
    return Pattern("Constant", LiteralShape(LiteralCategory.NONE))


def ellipsis() -> Pattern:
    """Match the ``...`` constant."""
    return Pattern("Constant", LiteralShape(LiteralCategory.ELLIPSIS))


def identifier(name: str) -> Pattern:
    """Match a ``Name`` node with the given id."""
    if not isinstance(name, str) or not name:
        raise PatternDefinitionError(f"identifier() expects a non-empty str, got {name!r}")
    return Pattern("Name", IdentifierShape(name), {"name": name})


def named(name: str) -> Pattern:
    """
    Match a node declaring ``name``.

    Definitions match on their own name (``def name``, ``class name``,
    ``import x as name``, parameters and keywords). A ``Name`` reference
    with that id redirects the match to the node using it.
    """
    if not isinstance(name, str) or not name:
        raise PatternDefinitionError(f"named() expects a non-empty str, got {name!r}")
    return Pattern(PatternKind.UNKNOWN, NamedShape(name), {"name": name})


# -----------------------------------------------------------------------------
# Structure
# -----------------------------------------------------------------------------


def node(kind_ref: KindRef, /, **slots: Optional[Pattern]) -> Pattern:
    """
    Match a node of a kind whose child slots match sub-patterns.

    Args:
        kind_ref: Node kind, as a name (``"Call"``) or an ``ast`` class
        **slots: Sub-pattern per slot name; None leaves the slot unconstrained

    Slots are checked in declaration order. An absent slot fails unless its
    sub-pattern is a :func:`maybe` pattern. Primitive slot values (strings,
    numbers) are matched as synthetic ``Name``/``Constant`` nodes.

    Raises:
        PatternDefinitionError: If the kind or a slot name is unknown, or a
            slot value is not a Pattern
    """
    kind_name = nodes.resolve_kind(kind_ref)
    declared = _check_slots(kind_name, slots)
    return Pattern(kind_name, NodeShape(kind_name, tuple(declared.items())), declared)


def kind(kind_ref: KindRef) -> Pattern:
    """Match any single node of a kind."""
    kind_name = nodes.resolve_kind(kind_ref)
    return Pattern(kind_name, KindShape(kind_name))


def shape(base: Pattern, **slots: Optional[Pattern]) -> Pattern:
    """
    Match what ``base`` matches, then check child slots on that node.

    Useful when the node kind is not fixed, e.g.
    ``shape(union(kind("FunctionDef"), kind("AsyncFunctionDef")), name=identifier("main"))``.
    """
    _require_pattern(base, "shape() base")
    kind_name = base.kind if isinstance(getattr(ast, base.kind, None), type) else None
    declared = _check_slots(kind_name, slots)
    return Pattern(
        base.kind,
        RefinedNodeShape(base, tuple(declared.items())),
        {"base": base, "slots": declared},
    )


def maybe(pattern: Optional[Pattern] = None) -> Pattern:
    """
    Match an optional slot.

    As a slot constraint, an absent slot is accepted; a present value must
    match ``pattern`` when one is given.
    """
    if pattern is not None:
        _require_pattern(pattern, "maybe() argument")
    return Pattern(PatternKind.MAYBE, MaybeShape(pattern), {"pattern": pattern})


# -----------------------------------------------------------------------------
# Collections
# -----------------------------------------------------------------------------


def node_list(pattern: Optional[Pattern] = None) -> Pattern:
    """Match any node-list, deferring to ``pattern`` when given."""
    if pattern is not None:
        _require_pattern(pattern, "node_list() argument")
    return Pattern(PatternKind.NODE_LIST, NodeListShape(pattern), {"pattern": pattern})


def tuple_of(*patterns: Pattern) -> Pattern:
    """
    Match a node-list position by position.

    The list must have exactly as many elements as there are patterns. A
    trailing :func:`rest` pattern instead matches every element past the
    fixed prefix, so the list only needs to be at least as long as the
    prefix.

    Raises:
        PatternDefinitionError: If a rest pattern is not the last one
    """
    items = list(_require_patterns(patterns, "tuple_of() element"))
    tail = None
    if items and isinstance(items[-1].shape, RestShape):
        tail = items.pop()
    for item in items:
        if isinstance(item.shape, RestShape):
            raise PatternDefinitionError("rest() is only allowed as the last tuple_of() element")
    return Pattern(PatternKind.FIXED_LIST, TupleShape(tuple(items), tail), {"items": patterns})


def rest(pattern: Pattern) -> Pattern:
    """Match a node-list whose every element matches ``pattern``."""
    _require_pattern(pattern, "rest() argument")
    return Pattern(PatternKind.REST_LIST, RestShape(pattern), {"pattern": pattern})


def arguments(pattern: Pattern) -> Pattern:
    """Match an argument list whose every argument matches ``pattern``."""
    return rest(pattern)


def every(pattern: Pattern, at_least: int = 0, at_most: Optional[int] = None) -> Pattern:
    """Match a node-list within the bounds whose elements all match ``pattern``."""
    _require_pattern(pattern, "every() argument")
    _check_bounds(at_least, at_most)
    return Pattern(
        PatternKind.EVERY,
        EveryShape(pattern, at_least, at_most),
        {"pattern": pattern, "at_least": at_least, "at_most": at_most},
    )


def some(pattern: Pattern, at_least: int = 0, at_most: Optional[int] = None) -> Pattern:
    """Match a node-list within the bounds with at least one element matching ``pattern``."""
    _require_pattern(pattern, "some() argument")
    _check_bounds(at_least, at_most)
    return Pattern(
        PatternKind.SOME,
        SomeShape(pattern, at_least, at_most),
        {"pattern": pattern, "at_least": at_least, "at_most": at_most},
    )


# -----------------------------------------------------------------------------
# Logic
# -----------------------------------------------------------------------------


def union(*patterns: Pattern) -> Pattern:
    """
    Match the first of ``patterns`` that matches, in declaration order.

    The match is the value the winning pattern matched.
    """
    if not patterns:
        raise PatternDefinitionError("union() needs at least one pattern")
    options = _require_patterns(patterns, "union() member")
    return Pattern(PatternKind.UNION, UnionShape(options), {"patterns": options})


def intersection(*patterns: Pattern) -> Pattern:
    """Match when every one of ``patterns`` matches the same input."""
    if not patterns:
        raise PatternDefinitionError("intersection() needs at least one pattern")
    parts = _require_patterns(patterns, "intersection() member")
    return Pattern(PatternKind.INTERSECTION, IntersectionShape(parts), {"patterns": parts})


def negate(pattern: Pattern) -> Pattern:
    _require_pattern(pattern, "negate() argument")
    return Pattern(PatternKind.NEGATION, NegationShape(pattern), {"pattern": pattern})


# -----------------------------------------------------------------------------
# Transformation and navigation
# -----------------------------------------------------------------------------


def refine(base: Pattern, transform: Callable[[Any], Any]) -> Pattern:
    """
    Match ``base``, then post-process its match with ``transform``.

    ``transform`` receives the value ``base`` matched. Its result is read like
    a :func:`when` predicate result, so returning another node (e.g. a
    child) makes that node the match.
    """
    _require_pattern(base, "refine() base")
    if not callable(transform):
        raise PatternDefinitionError(f"refine() expects a callable, got {transform!r}")
    return Pattern(base.kind, RefineShape(base, transform), {"base": base, "transform": transform})


def unwrap(pattern: Pattern) -> Pattern:
    """
    Match ``pattern`` against an expression stripped of transparent wrappers.

    ``cast(T, x)``, ``assert_type(x, T)`` and ``(y := x)`` all unwrap to ``x``,
    recursively. The set of wrapper callees comes from the session's
    :class:`~astmatch.config.MatchConfig`.
    """
    _require_pattern(pattern, "unwrap() argument")
    return Pattern(PatternKind.UNKNOWN, UnwrapShape(pattern), {"pattern": pattern})


def member(path: NameRef) -> Pattern:
    """
    Match an attribute access.

    A dotted string matches the access by its source text, or by its path
    with transparent wrappers removed at every hop (``cast(Any, a).b``
    matches ``"a.b"``). A Pattern is matched against the ``Attribute`` node.
    """
    if isinstance(path, Pattern):
        return Pattern("Attribute", MemberPathShape(inner=path), {"pattern": path})
    if not isinstance(path, str) or not path:
        raise PatternDefinitionError(f"member() expects a dotted name or a Pattern, got {path!r}")
    return Pattern("Attribute", MemberPathShape(path=path), {"path": path})


def contains(pattern: Pattern, until: Optional[Pattern] = None) -> Pattern:
    """
    Match a node with a descendant matching ``pattern``.

    Descendants are searched depth-first, pre-order. Subtrees rooted at a node
    matching ``until`` are not entered. Within one session, a node already
    inspected by this pattern is not inspected again, so nested candidates
    sharing a subtree match at most once per descendant.
    """
    _require_pattern(pattern, "contains() argument")
    if until is not None:
        _require_pattern(until, "contains() until")
    return Pattern(
        PatternKind.CONTAINS,
        ContainsShape(pattern, until),
        {"pattern": pattern, "until": until},
    )


def ref(name: str, pattern: Pattern) -> Pattern:
    """Tag ``pattern`` with a capture name (see ``MatchSession.collect_captures``)."""
    if not isinstance(name, str) or not name:
        raise PatternDefinitionError(f"Capture name must be a non-empty str, got {name!r}")
    return _require_pattern(pattern, "ref() argument").ref(name)


# -----------------------------------------------------------------------------
# Python constructs
# -----------------------------------------------------------------------------


def call(name: NameRef, /, *args: Pattern, **keywords: Pattern) -> Pattern:
    """
    Match a function call.

    Args:
        name: Callee, as a name, a dotted name (``"os.path.join"``) or a Pattern
        *args: Positional argument patterns. A single list pattern
            (``some(...)``, ``rest(...)``...) constrains the argument list
            directly; otherwise the arguments must match one by one. With
            none, the arguments are unconstrained.
        **keywords: Each keyword must be passed with a matching value
    """
    slots: dict[str, Pattern] = {"func": _name_pattern(name)}

    positional = _require_patterns(args, "call() argument")
    if len(positional) == 1 and positional[0].is_list_pattern:
        slots["args"] = positional[0]
    elif positional:
        slots["args"] = tuple_of(*positional)

    if keywords:
        slots["keywords"] = intersection(
            *(
                some(node("keyword", arg=identifier(keyword), value=_require_pattern(value, keyword)))
                for keyword, value in keywords.items()
            )
        )

    params = {"name": name, "arguments": args, "keywords": keywords}
    return _single("Call", node("Call", **slots), params)


def subscript(name: NameRef, index: Optional[Pattern] = None) -> Pattern:
    """Match ``name[index]``."""
    inner = node("Subscript", value=_name_pattern(name), slice=index)
    return _single("Subscript", inner, {"name": name, "index": index})


def dict_of(properties: Optional[Mapping[str, Pattern]] = None, partial: bool = False) -> Pattern:
    """
    Match a dict display with string keys.

    Args:
        properties: Value pattern per key, in order
        partial: When False the entries must be exactly ``properties`` in
            order; when True every entry must match one of them

    Example:
        dict_of({"id": any_node()}) matches ``{"id": 1}`` but not ``{}``
    """
    if properties is None:
        return Pattern("Dict", KindShape("Dict"), {"properties": None})

    entries = []
    for key, value in properties.items():
        if not isinstance(key, str):
            raise PatternDefinitionError(f"dict_of() keys must be str, got {key!r}")
        entries.append((key, _require_pattern(value, f"Property {key!r}")))
    return Pattern(
        "Dict",
        DictShape(tuple(entries), partial),
        {"properties": dict(properties), "partial": partial},
    )


def list_of(pattern: Optional[Pattern] = None) -> Pattern:
    """Match a list display; with ``pattern``, a non-empty one whose elements all match."""
    if pattern is None:
        return _single("List", kind("List"), {"pattern": None})
    inner = node("List", elts=every(_require_pattern(pattern, "list_of() argument"), at_least=1))
    return _single("List", inner, {"pattern": pattern})


def conditional(
    test: Optional[Pattern] = None,
    body: Optional[Pattern] = None,
    orelse: Optional[Pattern] = None,
) -> Pattern:
    """Match ``body if test else orelse``."""
    inner = node("IfExp", test=test, body=body, orelse=orelse)
    return _single("IfExp", inner, {"test": test, "body": body, "orelse": orelse})


def binary(
    left: Optional[Pattern] = None,
    operator: str = "+",
    right: Optional[Pattern] = None,
) -> Pattern:
    """
    Match a binary expression.

    Arithmetic and bitwise operators match ``BinOp``, ``and``/``or`` match a
    two-operand ``BoolOp`` and comparison operators match a single ``Compare``
    (``a < b``, not ``a < b < c``).

    Raises:
        PatternDefinitionError: If ``operator`` is not a Python binary operator
    """
    info = get_operator(operator)
    operator_pattern = kind(info.operator)

    if info.kind == OperatorKind.BINARY:
        inner = node("BinOp", left=left, op=operator_pattern, right=right)
    elif info.kind == OperatorKind.BOOLEAN:
        inner = node(
            "BoolOp",
            op=operator_pattern,
            values=tuple_of(left or any_node(), right or any_node()),
        )
    else:
        inner = node(
            "Compare",
            left=left,
            ops=tuple_of(operator_pattern),
            comparators=tuple_of(right or any_node()),
        )

    return _single(info.node_kind, inner, {"left": left, "operator": info.symbol, "right": right})


def import_alias(name: NameRef, asname: Optional[NameRef] = None) -> Pattern:
    """Match one imported name (``name`` or ``name as asname``)."""
    inner = node(
        "alias",
        name=name if isinstance(name, Pattern) else identifier(name),
        asname=asname if asname is None or isinstance(asname, Pattern) else identifier(asname),
    )
    return _single("alias", inner, {"name": name, "asname": asname})


def import_from(
    module: Optional[NameRef] = None,
    names: Union[Pattern, Sequence[NameRef], None] = None,
    level: Optional[int] = None,
) -> Pattern:
    """
    Match ``from module import names``.

    Args:
        module: Module name (dotted names compare as written) or a Pattern
        names: Imported names. A sequence matches the names in order, with
            strings standing for :func:`import_alias` patterns and a trailing
            ``rest(...)`` accepting more; a list pattern constrains the names
            directly; a single name or pattern must be among them.
        level: Number of leading dots of a relative import
    """
    if isinstance(module, str):
        module_pattern: Optional[Pattern] = identifier(module)
    else:
        module_pattern = module

    inner = node(
        "ImportFrom",
        module=module_pattern,
        names=None if names is None else _sequence(names, import_alias),
        level=None if level is None else number(level),
    )
    return _single("ImportFrom", inner, {"module": module, "names": names, "level": level})


def import_module(name: NameRef, asname: Optional[NameRef] = None) -> Pattern:
    """Match an ``import name`` statement importing ``name`` among others."""
    inner = node("Import", names=some(import_alias(name, asname)))
    return _single("Import", inner, {"name": name, "asname": asname})


def exports(names: Union[Pattern, Sequence[Union[str, Pattern]], None] = None) -> Pattern:
    """
    Match an ``__all__`` declaration.

    Both ``__all__ = [...]`` and ``__all__: list[str] = (...)`` forms match.
    ``names`` constrains the exported strings like :func:`import_from` does.
    """
    elements = None if names is None else _sequence(names, string)
    container = union(node("List", elts=elements), node("Tuple", elts=elements))
    target = identifier("__all__")
    inner = union(
        node("Assign", targets=tuple_of(target), value=container),
        node("AnnAssign", target=target, value=container),
    )
    return _single("Assign", inner, {"names": names})


def _is_enum_base(candidate: Any) -> bool:
    name = nodes.dotted_name(candidate) if nodes.is_node(candidate) else None
    if name is None:
        return False
    return name.rsplit(".", 1)[-1].endswith(("Enum", "Flag"))


def enum(name: str, members: Optional[Mapping[str, Any]] = None) -> Pattern:
    """
    Match an enum class definition.

    Args:
        name: Class name
        members: Member values in declaration order; plain values match as
            literals, Patterns (e.g. for ``auto()``) as given. The class body
            must consist of exactly these assignments.
    """
    body = None
    if members is not None:
        body = tuple_of(
            *(
                node(
                    "Assign",
                    targets=tuple_of(identifier(member_name)),
                    value=value if isinstance(value, Pattern) else literal(value),
                )
                for member_name, value in members.items()
            )
        )

    inner = node(
        "ClassDef",
        name=identifier(name),
        bases=some(when(_is_enum_base)),
        body=body,
    )
    return _single("ClassDef", inner, {"name": name, "members": members})
