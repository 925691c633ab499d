"""
logquery/ast.py

AST (Abstract Syntax Tree) node definitions for the logquery language.

The parser converts token streams into instances of these dataclasses.
The evaluator and executor then walk the AST against rows.

Design notes:
- Every node is a frozen dataclass; a Query can be shared and reused freely.
- Operands are only column references and literals (no arithmetic).
- Parentheses are structural: a parenthesized predicate becomes the node it contains.
- Every node can render itself back to query text; parse(render(q)) == q.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .lexer import KEYWORDS
from .values import NumberValue, StringValue, Value


# ---------- Operators ----------

class CompareOp(Enum):
    """Comparison operators. `!=` and `<>` both map to NE."""
    EQ = "="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="

    def flip(self) -> "CompareOp":
        """Operator that gives the same answer with the operands swapped."""
        return _FLIPPED[self]


_FLIPPED = {
    CompareOp.EQ: CompareOp.EQ,
    CompareOp.NE: CompareOp.NE,
    CompareOp.LT: CompareOp.GT,
    CompareOp.GT: CompareOp.LT,
    CompareOp.LE: CompareOp.GE,
    CompareOp.GE: CompareOp.LE,
}


class Direction(Enum):
    ASC = "ASC"
    DESC = "DESC"


# ---------- Expressions ----------

@dataclass(frozen=True)
class ColumnRef:
    """Reference to a row field by name (case-sensitive)."""
    name: str

    def render(self) -> str:
        if self.name.upper() in KEYWORDS or not _is_plain_identifier(self.name):
            return f"`{self.name}`"
        return self.name


@dataclass(frozen=True)
class Literal:
    """
    A string or number constant.

    Attributes:
        value: StringValue or NumberValue.
        text: Canonical source text; also used as the default output column name.
    """
    value: Value
    text: str

    @classmethod
    def string(cls, s: str) -> "Literal":
        return cls(value=StringValue(s), text=quote_string(s))

    @classmethod
    def number(cls, n: int | float, text: str | None = None) -> "Literal":
        return cls(value=NumberValue(n), text=text if text is not None else str(n))

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class Wildcard:
    """`*` in the select list."""

    def render(self) -> str:
        return "*"


Expression = Union[ColumnRef, Literal, Wildcard]


# ---------- Predicates ----------

@dataclass(frozen=True)
class Comparison:
    """left op right. Either operand may be the literal."""
    left: Expression
    op: CompareOp
    right: Expression

    def render(self) -> str:
        return f"{self.left.render()} {self.op.value} {self.right.render()}"


@dataclass(frozen=True)
class And:
    left: "Predicate"
    right: "Predicate"

    def render(self) -> str:
        left = _wrap(self.left, (Or,))
        right = _wrap(self.right, (Or, And))
        return f"{left} AND {right}"


@dataclass(frozen=True)
class Or:
    left: "Predicate"
    right: "Predicate"

    def render(self) -> str:
        return f"{self.left.render()} OR {_wrap(self.right, (Or,))}"


@dataclass(frozen=True)
class Not:
    operand: "Predicate"

    def render(self) -> str:
        return f"NOT {_wrap(self.operand, (Or, And))}"


Predicate = Union[Comparison, And, Or, Not]


# ---------- Query ----------

@dataclass(frozen=True)
class SelectItem:
    """
    One entry of the select list.

    Attributes:
        expression: What to project.
        alias: Output column name given with AS, or None.
    """
    expression: Expression
    alias: str | None = None

    @property
    def output_name(self) -> str:
        """Alias if given, otherwise the canonical rendering of the expression."""
        if self.alias is not None:
            return self.alias
        if isinstance(self.expression, ColumnRef):
            return self.expression.name
        return self.expression.render()

    def render(self) -> str:
        if self.alias is None:
            return self.expression.render()
        return f"{self.expression.render()} AS {ColumnRef(self.alias).render()}"


@dataclass(frozen=True)
class OrderItem:
    expression: Expression
    direction: Direction = Direction.ASC

    def render(self) -> str:
        return f"{self.expression.render()} {self.direction.value}"


@dataclass(frozen=True)
class Query:
    """
    A parsed SELECT query.

    Attributes:
        select: Select items in order; a single Wildcard item means `SELECT *`.
        where: Optional filter predicate.
        order_by: Sort keys, first key is the primary one.
        limit: Maximum number of rows to return, or None for all.
        offset: Number of rows to skip, or None.
    """
    select: tuple[SelectItem, ...]
    where: Predicate | None = None
    order_by: tuple[OrderItem, ...] = ()
    limit: int | None = None
    offset: int | None = None

    @property
    def is_wildcard(self) -> bool:
        return len(self.select) == 1 and isinstance(self.select[0].expression, Wildcard)

    def render(self) -> str:
        parts = ["SELECT " + ", ".join(item.render() for item in self.select)]
        if self.where is not None:
            parts.append("WHERE " + self.where.render())
        if self.order_by:
            parts.append("ORDER BY " + ", ".join(item.render() for item in self.order_by))
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        if self.offset is not None:
            parts.append(f"OFFSET {self.offset}")
        return " ".join(parts)


# ---------- helpers ----------

def quote_string(s: str) -> str:
    """Render s as a single-quoted literal the lexer reads back unchanged."""
    escaped = (
        s.replace("\\", "\\\\")
        .replace("'", "''")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )
    return f"'{escaped}'"


def _is_plain_identifier(name: str) -> bool:
    return bool(name) and (name[0].isalpha() or name[0] == "_") and all(
        c.isalnum() or c in "_." for c in name
    )


def _wrap(node: Predicate, needs_parens: tuple[type, ...]) -> str:
    text = node.render()
    if isinstance(node, needs_parens):
        return f"({text})"
    return text
