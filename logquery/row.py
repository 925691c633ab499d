"""
logquery/row.py

Row model: one logical log record as seen by the query engine.

A Row maps field names to the text lines captured for that field. Most fields
hold a single line; a multiline field (e.g. a message followed by a stack trace)
holds several. Fields of typed columns may also carry a converted Value (a
NumberValue for numeric columns), which takes precedence over the raw text. Rows are built by the ingestion layer (or by hand in tests) and
are never mutated by the engine.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Sequence

from .values import MISSING, StringValue, Value


class Row(Mapping[str, Value]):
    """
    Read-only field-name -> lines mapping.

    Iterating a Row yields its field names in insertion order; indexing it
    (or calling `get`) yields the field's combined Value.
    """

    __slots__ = ("_fields", "_values")

    def __init__(
        self,
        fields: Mapping[str, Sequence[str]] | None = None,
        values: Mapping[str, Value] | None = None,
    ):
        self._fields: dict[str, tuple[str, ...]] = {
            name: tuple(lines) for name, lines in (fields or {}).items()
        }
        self._values: dict[str, Value] = {
            name: v for name, v in (values or {}).items() if name in self._fields
        }

    @classmethod
    def from_values(cls, values: Mapping[str, str | Sequence[str]]) -> "Row":
        """
        Build a row from plain strings or line lists.

        Example:
            Row.from_values({"level": "ERROR", "msg": ["boom", "  at main"]})
        """
        fields: dict[str, Sequence[str]] = {}
        for name, v in values.items():
            fields[name] = (v,) if isinstance(v, str) else v
        return cls(fields)

    def get(self, column: str, default: Any = MISSING) -> Any:
        """
        Value of a field.

        Returns:
            `default` (MISSING unless given) if the row has no such field,
            the converted value of a typed field, otherwise a StringValue of
            all lines of the field joined with newlines.
        """
        lines = self._fields.get(column)
        if lines is None:
            return default
        typed = self._values.get(column)
        if typed is not None:
            return typed
        return StringValue("\n".join(lines))

    def lines(self, column: str) -> tuple[str, ...]:
        """Raw lines captured for a field (empty tuple if absent)."""
        return self._fields.get(column, ())

    def columns(self) -> list[str]:
        return list(self._fields)

    def __getitem__(self, column: str) -> Value:
        if column not in self._fields:
            raise KeyError(column)
        return self.get(column)

    def __contains__(self, column: object) -> bool:
        return column in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._fields == other._fields and self._values == other._values

    def __repr__(self) -> str:
        return f"Row({self._fields!r})"
