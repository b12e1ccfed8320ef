"""
astmatch Tree Package.

Adapter between the matching engine and Python ``ast`` trees.
"""

from astmatch.tree.nodes import (
    ABSENT,
    SourceTree,
    attach_parents,
    child_slot,
    get_name,
    get_parent,
    iter_children,
    iter_descendants,
    kind,
    member_path,
    parse,
    position,
    text,
    unwrap_expression,
)

__all__ = [
    "ABSENT",
    "SourceTree",
    "parse",
    "attach_parents",
    "kind",
    "child_slot",
    "get_name",
    "get_parent",
    "text",
    "position",
    "iter_children",
    "iter_descendants",
    "unwrap_expression",
    "member_path",
]
