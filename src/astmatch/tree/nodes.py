"""
Node abstraction over Python's ``ast`` module.

The matching engine only talks to trees through the functions of this
module: kind tags, named child slots, names, text and positions, parent
links and descendant iteration. Trees produced by :func:`parse` carry
parent links and their source text, so ``text()`` returns the exact source
segment of a node; plain ``ast`` trees still work, with ``ast.unparse``
standing in for the source text and without parent links.

Example:
    tree = parse("find({'id': 1})")
    for node in tree.walk():
        print(kind(node), text(node))
"""

from __future__ import annotations

import ast
import logging
from typing import Iterator, Optional, Union

from astmatch.config import DEFAULT_CONFIG, MatchConfig
from astmatch.utils.errors import PatternDefinitionError, SourceLocation, SourceParseError

logger = logging.getLogger(__name__)

PARENT_ATTR = "parent"
SOURCE_ATTR = "source_text"
FILENAME_ATTR = "filename"
SYNTHETIC_ATTR = "synthetic"
_PROMOTED_ATTR = "_astmatch_promoted"

# Slots where None is the literal value rather than an unset child
_NONE_VALUED_SLOTS = frozenset({("Constant", "value"), ("MatchSingleton", "value")})

# The parser shares one instance of each of these across the whole tree.
_SHARED_NODE_TYPES = (ast.expr_context, ast.boolop, ast.operator, ast.unaryop, ast.cmpop)


class _Absent:
    """Marker for a child slot the node does not have."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


# -----------------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------------


class SourceTree:
    """
    A parsed Python module with parent links and source text attached.

    Attributes:
        source: The source code
        filename: Filename used in positions and errors
        root: The ``ast.Module`` node
    """

    def __init__(self, source: str, filename: str = "<unknown>") -> None:
        self.source = source
        self.filename = filename
        try:
            self.root = ast.parse(source, filename=filename)
        except SyntaxError as e:
            location = SourceLocation(
                line=e.lineno or 1,
                column=max(1, e.offset or 1),
                filename=filename,
            )
            source_line = e.text.rstrip("\n") if e.text else None
            raise SourceParseError(e.msg, location, source_line) from e

        setattr(self.root, SOURCE_ATTR, source)
        setattr(self.root, FILENAME_ATTR, filename)
        attach_parents(self.root)
        logger.debug("Parsed %s (%d lines)", filename, source.count("\n") + 1)

    def walk(self) -> Iterator[ast.AST]:
        """Iterate over every node below the module, depth-first pre-order."""
        return iter_descendants(self.root)


def parse(source: str, filename: str = "<unknown>") -> SourceTree:
    """
    Parse Python source into a :class:`SourceTree`.

    Raises:
        SourceParseError: If the source is not valid Python
    """
    return SourceTree(source, filename)


def attach_parents(root: ast.AST) -> None:
    """Annotate every node below ``root`` with a ``parent`` attribute."""
    if not hasattr(root, PARENT_ATTR):
        setattr(root, PARENT_ATTR, None)
    for node in ast.walk(root):
        for child in ast.iter_child_nodes(node):
            if isinstance(child, _SHARED_NODE_TYPES):
                continue
            setattr(child, PARENT_ATTR, node)


# -----------------------------------------------------------------------------
# Kinds
# -----------------------------------------------------------------------------


def is_node(value: object) -> bool:
    return isinstance(value, ast.AST)


def is_node_list(value: object) -> bool:
    return isinstance(value, list)


def kind(node: ast.AST) -> str:
    """Return the kind tag of a node (its ``ast`` class name)."""
    return type(node).__name__


def is_kind(node: object, kind_name: str) -> bool:
    return isinstance(node, ast.AST) and type(node).__name__ == kind_name


def resolve_kind(kind_ref: Union[str, type]) -> str:
    """
    Normalize a kind given as a name or an ``ast`` class.

    Raises:
        PatternDefinitionError: If it does not name an ``ast`` node class
    """
    name = kind_ref.__name__ if isinstance(kind_ref, type) else kind_ref
    node_class = getattr(ast, name, None) if isinstance(name, str) else None
    if not (isinstance(node_class, type) and issubclass(node_class, ast.AST)):
        raise PatternDefinitionError(f"Unknown node kind: {kind_ref!r}")
    return name


def kind_fields(kind_name: str) -> tuple[str, ...]:
    """Return the child slot names declared by a node kind."""
    return getattr(ast, kind_name)._fields


# -----------------------------------------------------------------------------
# Child slots
# -----------------------------------------------------------------------------


def child_slot(node: ast.AST, name: str) -> Union[ast.AST, list, _Absent]:
    """
    Read a named child slot.

    Returns the child node or node-list, a synthetic node standing for a
    primitive value, or ``ABSENT`` when the slot is unset.
    """
    if name not in node._fields:
        return ABSENT
    value = getattr(node, name, None)
    if value is None and (type(node).__name__, name) not in _NONE_VALUED_SLOTS:
        return ABSENT
    if isinstance(value, (ast.AST, list)):
        return value
    return _promote(node, name, value)


def _promote(node: ast.AST, name: str, value: object) -> ast.AST:
    """
    Wrap a primitive slot value in a synthetic node.

    Strings in identifier slots (``alias.name``, ``Attribute.attr``,
    ``ImportFrom.module``...) become ``Name`` nodes, everything else becomes
    a ``Constant``. The synthetic node is cached on its owner so repeated
    reads return the same object.
    """
    cache = getattr(node, _PROMOTED_ATTR, None)
    if cache is None:
        cache = {}
        setattr(node, _PROMOTED_ATTR, cache)

    cached = cache.get(name)
    if cached is not None and type(cached[0]) is type(value) and cached[0] == value:
        return cached[1]

    if isinstance(value, str) and not isinstance(node, ast.Constant):
        synthetic: ast.AST = ast.Name(id=value, ctx=ast.Load())
    else:
        synthetic = ast.Constant(value=value)

    ast.copy_location(synthetic, node)
    setattr(synthetic, PARENT_ATTR, node)
    setattr(synthetic, SYNTHETIC_ATTR, True)
    cache[name] = (value, synthetic)
    logger.debug("Promoted %s.%s=%r to %s", kind(node), name, value, kind(synthetic))
    return synthetic


def get_name(node: ast.AST) -> Optional[str]:
    """Return the intrinsic name of a node, if it declares one."""
    for field_name in ("name", "arg"):
        if field_name in node._fields:
            value = getattr(node, field_name, None)
            if isinstance(value, str):
                return value
    return None


def get_parent(node: ast.AST) -> Optional[ast.AST]:
    return getattr(node, PARENT_ATTR, None)


def root_of(node: ast.AST) -> ast.AST:
    current = node
    parent = get_parent(current)
    while parent is not None:
        current = parent
        parent = get_parent(current)
    return current


# -----------------------------------------------------------------------------
# Text and positions
# -----------------------------------------------------------------------------


def text(node: ast.AST) -> str:
    """Return the source text of a node."""
    if not getattr(node, SYNTHETIC_ATTR, False):
        source = getattr(root_of(node), SOURCE_ATTR, None)
        if source is not None:
            segment = ast.get_source_segment(source, node)
            if segment is not None:
                return segment
    return ast.unparse(node)


def position(node: ast.AST) -> Optional[SourceLocation]:
    """Return the 1-indexed start position of a node, if it has one."""
    lineno = getattr(node, "lineno", None)
    if lineno is None:
        return None
    return SourceLocation(
        line=lineno,
        column=getattr(node, "col_offset", 0) + 1,
        filename=getattr(root_of(node), FILENAME_ATTR, None),
    )


# -----------------------------------------------------------------------------
# Traversal
# -----------------------------------------------------------------------------


def iter_children(node: ast.AST) -> Iterator[ast.AST]:
    """
    Iterate over the direct children of a node in field order.

    Operator and context singletons are only reachable through their
    owner's slots.
    """
    for child in ast.iter_child_nodes(node):
        if not isinstance(child, _SHARED_NODE_TYPES):
            yield child


def iter_descendants(node: ast.AST) -> Iterator[ast.AST]:
    """Iterate over the descendants of a node (not the node itself), pre-order."""
    stack = list(iter_children(node))
    stack.reverse()
    while stack:
        current = stack.pop()
        yield current
        children = list(iter_children(current))
        children.reverse()
        stack.extend(children)


# -----------------------------------------------------------------------------
# Literals
# -----------------------------------------------------------------------------


def is_string_like(node: ast.AST) -> bool:
    """String constants, and f-strings without replacement fields."""
    if isinstance(node, ast.Constant):
        return isinstance(node.value, str)
    if isinstance(node, ast.JoinedStr):
        return all(
            isinstance(part, ast.Constant) and isinstance(part.value, str)
            for part in node.values
        )
    return False


def string_value(node: ast.AST) -> str:
    if isinstance(node, ast.JoinedStr):
        return "".join(part.value for part in node.values)
    return node.value


def is_literal(node: ast.AST) -> bool:
    return isinstance(node, ast.Constant) or is_string_like(node)


# -----------------------------------------------------------------------------
# Transparent wrappers and member paths
# -----------------------------------------------------------------------------


def dotted_name(node: ast.AST) -> Optional[str]:
    """Return ``a.b.c`` for a plain ``Name``/``Attribute`` chain."""
    parts: list[str] = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return ".".join(reversed(parts))


def _unwrap_once(node: ast.AST, config: MatchConfig) -> Optional[ast.AST]:
    # (name := value) -> value
    if isinstance(node, ast.NamedExpr):
        return node.value if config.unwrap_named_expressions else None

    if not isinstance(node, ast.Call) or node.keywords or len(node.args) != 2:
        return None
    if any(isinstance(arg, ast.Starred) for arg in node.args):
        return None

    callee = dotted_name(node.func)
    # cast(T, value) -> value
    if callee in config.cast_functions:
        return node.args[1]
    # assert_type(value, T) -> value
    if callee in config.assertion_functions:
        return node.args[0]
    return None


def unwrap_expression(node: ast.AST, config: MatchConfig = DEFAULT_CONFIG) -> ast.AST:
    """Strip transparent wrappers around an expression until none is left."""
    inner = _unwrap_once(node, config)
    while inner is not None:
        node = inner
        inner = _unwrap_once(node, config)
    return node


def member_path(node: ast.AST, config: MatchConfig = DEFAULT_CONFIG) -> Optional[str]:
    """
    Return the normalized dotted path of an attribute access chain.

    Transparent wrappers are ignored at every hop:
    ``cast(Any, foo).bar.baz`` normalizes to ``foo.bar.baz``.
    Returns None when the chain does not start from a plain name.
    """
    names: list[str] = []
    expression = node
    while isinstance(expression, ast.Attribute):
        names.append(expression.attr)
        expression = unwrap_expression(expression.value, config)

    if not isinstance(expression, ast.Name):
        return None

    names.append(expression.id)
    return ".".join(reversed(names))
