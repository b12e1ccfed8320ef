"""
astmatch - Structural pattern matching for Python syntax trees.

astmatch lets you declare the shape of a piece of Python code with
composable patterns (a node kind plus constraints on its child slots and
child lists) and test the nodes of a parsed module against it, capturing
sub-matches by name along the way.
"""

from astmatch.config import MatchConfig
from astmatch.matching import (
    MatchSession,
    Pattern,
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
from astmatch.tree import SourceTree, parse
from astmatch.utils.errors import (
    AstMatchError,
    ConfigError,
    PatternDefinitionError,
    SourceParseError,
    UnsupportedLiteralError,
)

__version__ = "0.1.0"
__all__ = [
    "MatchConfig",
    "SourceTree",
    "parse",
    "AstMatchError",
    "PatternDefinitionError",
    "UnsupportedLiteralError",
    "SourceParseError",
    "ConfigError",
    "Pattern",
    "MatchSession",
    "any_node",
    "arguments",
    "binary",
    "boolean",
    "call",
    "conditional",
    "contains",
    "dict_of",
    "ellipsis",
    "enum",
    "every",
    "exports",
    "identifier",
    "import_alias",
    "import_from",
    "import_module",
    "intersection",
    "kind",
    "list_of",
    "literal",
    "maybe",
    "member",
    "named",
    "negate",
    "node",
    "node_list",
    "none",
    "number",
    "ref",
    "refine",
    "rest",
    "shape",
    "some",
    "string",
    "subscript",
    "tuple_of",
    "union",
    "unwrap",
    "when",
]
