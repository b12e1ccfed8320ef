"""
Operator table for the ``binary`` combinator.

Python spreads binary operators over three node kinds. Each operator symbol
maps to:
- The ``ast`` operator class (e.g. ``Add`` for ``+``)
- Its kind, which decides the node holding it (``BinOp``, ``BoolOp`` or ``Compare``)
"""

from dataclasses import dataclass
from enum import Enum, auto

from astmatch.utils.errors import PatternDefinitionError


class OperatorKind(Enum):
    """Classification of operator symbols."""
    BINARY = auto()
    BOOLEAN = auto()
    COMPARISON = auto()


@dataclass(frozen=True)
class OperatorInfo:
    """
    Information about an operator symbol.

    Attributes:
        symbol: The source symbol (e.g. "+", "not in")
        operator: Name of the ``ast`` operator class (e.g. "Add")
        kind: The kind of operator (binary, boolean, comparison)
    """
    symbol: str
    operator: str
    kind: OperatorKind

    @property
    def node_kind(self) -> str:
        """The node kind an expression using this operator parses to."""
        return _NODE_KINDS[self.kind]


_NODE_KINDS = {
    OperatorKind.BINARY: "BinOp",
    OperatorKind.BOOLEAN: "BoolOp",
    OperatorKind.COMPARISON: "Compare",
}


def _table(kind: OperatorKind, entries: dict[str, str]) -> dict[str, OperatorInfo]:
    return {symbol: OperatorInfo(symbol, operator, kind) for symbol, operator in entries.items()}


# Mapping of operator symbols to their operator information
OPERATORS: dict[str, OperatorInfo] = {
    # Arithmetic and bitwise operators
    **_table(
        OperatorKind.BINARY,
        {
            "+": "Add",
            "-": "Sub",
            "*": "Mult",
            "/": "Div",
            "//": "FloorDiv",
            "%": "Mod",
            "**": "Pow",
            "@": "MatMult",
            "<<": "LShift",
            ">>": "RShift",
            "|": "BitOr",
            "^": "BitXor",
            "&": "BitAnd",
        },
    ),
    # Boolean operators
    **_table(OperatorKind.BOOLEAN, {"and": "And", "or": "Or"}),
    # Comparison operators
    **_table(
        OperatorKind.COMPARISON,
        {
            "==": "Eq",
            "!=": "NotEq",
            "<": "Lt",
            "<=": "LtE",
            ">": "Gt",
            ">=": "GtE",
            "is": "Is",
            "is not": "IsNot",
            "in": "In",
            "not in": "NotIn",
        },
    ),
}


def get_operator(symbol: str) -> OperatorInfo:
    """
    Look up an operator symbol.

    Raises:
        PatternDefinitionError: If the symbol is not a Python binary operator
    """
    info = OPERATORS.get(" ".join(symbol.split()))
    if info is None:
        raise PatternDefinitionError(f"Unknown binary operator: {symbol!r}")
    return info
