"""
astmatch Matching Package.

Patterns, the combinators building them, and the sessions matching them.
"""

from astmatch.matching.combinators import (
    any_node,
    arguments,
    binary,
    boolean,
    call,
    conditional,
    contains,
    dict_of,
    ellipsis,
    enum,
    every,
    exports,
    identifier,
    import_alias,
    import_from,
    import_module,
    intersection,
    kind,
    list_of,
    literal,
    maybe,
    member,
    named,
    negate,
    node,
    node_list,
    none,
    number,
    ref,
    refine,
    rest,
    shape,
    some,
    string,
    subscript,
    tuple_of,
    union,
    unwrap,
    when,
)
from astmatch.matching.pattern import (
    LIST_KINDS,
    MATCHED_SELF,
    NO_MATCH,
    MatchedAs,
    MatchedSelf,
    MatchResult,
    NoMatch,
    Pattern,
    PatternKind,
)
from astmatch.matching.session import MatchSession, render_pattern

__all__ = [
    # Core
    "Pattern",
    "PatternKind",
    "LIST_KINDS",
    "MatchSession",
    "render_pattern",
    "MatchResult",
    "NoMatch",
    "MatchedSelf",
    "MatchedAs",
    "NO_MATCH",
    "MATCHED_SELF",
    # Leaves
    "any_node",
    "when",
    "literal",
    "string",
    "number",
    "boolean",
    "none",
    "ellipsis",
    "identifier",
    "named",
    # Structure
    "node",
    "kind",
    "shape",
    "maybe",
    # Collections
    "node_list",
    "tuple_of",
    "rest",
    "arguments",
    "every",
    "some",
    # Logic
    "union",
    "intersection",
    "negate",
    # Transformation and navigation
    "refine",
    "unwrap",
    "member",
    "contains",
    "ref",
    # Python constructs
    "call",
    "subscript",
    "dict_of",
    "list_of",
    "conditional",
    "binary",
    "import_from",
    "import_alias",
    "import_module",
    "exports",
    "enum",
]
