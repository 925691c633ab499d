"""
logquery/values.py

Runtime values produced while evaluating queries.

A Value is exactly one of:
- StringValue: text taken from a row field or a string literal
- NumberValue: a numeric literal
- MissingValue: a referenced column that the row does not have (singleton MISSING)

Field text is kept as StringValue; whether it also reads as a number is decided
at comparison time by `as_number`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

_NUMERIC_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class StringValue:
    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class NumberValue:
    number: int | float

    def render(self) -> str:
        return str(self.number)


class MissingValue:
    """Marker for a column absent from a row. Use the MISSING singleton."""

    _instance: "MissingValue | None" = None

    def __new__(cls) -> "MissingValue":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def render(self) -> str:
        return ""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = MissingValue()

Value = Union[StringValue, NumberValue, MissingValue]


def parse_number(text: str) -> int | float | None:
    """Return the number spelled by text, or None if text is not lexically numeric."""
    if not _NUMERIC_RE.fullmatch(text):
        return None
    try:
        return int(text)
    except ValueError:
        return float(text)


def as_number(value: Value) -> int | float | None:
    """
    Numeric reading of a value.

    Returns:
        The number for NumberValue and numeric-looking StringValue, otherwise None.
    """
    if isinstance(value, NumberValue):
        return value.number
    if isinstance(value, StringValue):
        return parse_number(value.text)
    return None


def to_python(value: Value) -> str | int | float | None:
    """Plain Python form of a value (Missing becomes None), used for JSON output."""
    if isinstance(value, StringValue):
        return value.text
    if isinstance(value, NumberValue):
        return value.number
    return None
