"""
logquery/evaluator.py

Expression and predicate evaluation against a single Row.

Comparison model:
- If both operands read as numbers (number literals, or text that is lexically
  numeric such as "42" or "-3.5") they are compared numerically.
- Otherwise both are compared as strings by code point, optionally case-folded.
- A Missing operand (column absent from the row) makes `=` and every ordering
  comparison false and `!=` true. Missing is never equal to Missing.
- Comparisons do not care which side the literal is on:
  compare(a, op, b) == compare(b, op.flip(), a).
"""

from __future__ import annotations

from dataclasses import dataclass

from .ast import (
    And,
    ColumnRef,
    CompareOp,
    Comparison,
    Expression,
    Literal,
    Not,
    Or,
    Predicate,
    Wildcard,
)
from .errors import EvalError
from .row import Row
from .values import MissingValue, NumberValue, StringValue, Value, as_number


@dataclass(frozen=True)
class Evaluator:
    """
    Evaluates expressions and predicates.

    Attributes:
        case_sensitive: When False, string comparisons ignore case.
    """
    case_sensitive: bool = True

    def evaluate(self, expression: Expression, row: Row) -> Value:
        """Resolve an operand to a Value for the given row."""
        if isinstance(expression, ColumnRef):
            return row.get(expression.name)
        if isinstance(expression, Literal):
            return expression.value
        if isinstance(expression, Wildcard):
            raise EvalError("Wildcard '*' cannot be evaluated as a value")
        raise EvalError(f"Unsupported expression: {type(expression).__name__}")

    def test(self, predicate: Predicate, row: Row) -> bool:
        """Evaluate a WHERE predicate; AND/OR short-circuit left to right."""
        if isinstance(predicate, Comparison):
            if isinstance(predicate.left, Wildcard) or isinstance(predicate.right, Wildcard):
                raise EvalError("Wildcard '*' is not allowed in a predicate")
            left = self.evaluate(predicate.left, row)
            right = self.evaluate(predicate.right, row)
            return self.compare(left, predicate.op, right)
        if isinstance(predicate, And):
            return self.test(predicate.left, row) and self.test(predicate.right, row)
        if isinstance(predicate, Or):
            return self.test(predicate.left, row) or self.test(predicate.right, row)
        if isinstance(predicate, Not):
            return not self.test(predicate.operand, row)
        raise EvalError(f"Unsupported predicate: {type(predicate).__name__}")

    def compare(self, left: Value, op: CompareOp, right: Value) -> bool:
        """Apply a comparison operator to two values."""
        if isinstance(left, MissingValue) or isinstance(right, MissingValue):
            return op == CompareOp.NE

        c = self._cmp(left, right)
        if op == CompareOp.EQ:
            return c == 0
        if op == CompareOp.NE:
            return c != 0
        if op == CompareOp.LT:
            return c < 0
        if op == CompareOp.GT:
            return c > 0
        if op == CompareOp.LE:
            return c <= 0
        if op == CompareOp.GE:
            return c >= 0
        raise EvalError(f"Unsupported operator: {op!r}")

    def order(self, left: Value, right: Value) -> int:
        """
        Three-way comparison used by ORDER BY.

        Total order: Missing first, then numeric values by number, then the
        remaining text by string comparison. Unlike `compare`, a numeric value
        never compares against non-numeric text as a string here, so the order
        stays transitive for columns mixing "9", "10" and "1a".
        """
        left_missing = isinstance(left, MissingValue)
        right_missing = isinstance(right, MissingValue)
        if left_missing and right_missing:
            return 0
        if left_missing:
            return -1
        if right_missing:
            return 1

        left_numeric = as_number(left) is not None
        right_numeric = as_number(right) is not None
        if left_numeric != right_numeric:
            return -1 if left_numeric else 1
        return self._cmp(left, right)

    def _cmp(self, left: StringValue | NumberValue, right: StringValue | NumberValue) -> int:
        ln = as_number(left)
        rn = as_number(right)
        if ln is not None and rn is not None:
            return (ln > rn) - (ln < rn)

        ls = left.render()
        rs = right.render()
        if not self.case_sensitive:
            ls = ls.casefold()
            rs = rs.casefold()
        return (ls > rs) - (ls < rs)


DEFAULT_EVALUATOR = Evaluator()


def evaluate(expression: Expression, row: Row) -> Value:
    return DEFAULT_EVALUATOR.evaluate(expression, row)


def test(predicate: Predicate, row: Row) -> bool:
    return DEFAULT_EVALUATOR.test(predicate, row)


test.__test__ = False  # type: ignore[attr-defined]  # not a pytest test
