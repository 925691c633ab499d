"""
logquery/results.py

Result objects returned by the query executor.

- OutputRow: one projected row, an ordered name -> Value mapping
- QueryResult: output column names plus a lazy, single-pass iterator of OutputRow

These are plain Python objects so they can be consumed by the CLI table printer,
the JSON formatter, or any other presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from .values import Value, to_python


@dataclass(frozen=True)
class OutputRow:
    """
    A projected row.

    Attributes:
        columns: Output column names in select-list order (may repeat).
        values: Values aligned with `columns`.
    """
    columns: tuple[str, ...]
    values: tuple[Value, ...]

    def __getitem__(self, name: str) -> Value:
        """Value of the first column called `name`."""
        try:
            return self.values[self.columns.index(name)]
        except ValueError:
            raise KeyError(name) from None

    def items(self) -> list[tuple[str, Value]]:
        return list(zip(self.columns, self.values))

    def as_dict(self) -> dict[str, Any]:
        """Plain Python view: strings, numbers, and None for missing values."""
        return {name: to_python(v) for name, v in zip(self.columns, self.values)}


@dataclass
class QueryResult:
    """
    Output of a query.

    Attributes:
        columns: Output column names in order.
        rows: Lazy iterator of OutputRow; it can be consumed once.
        stats: Execution counters (rows_scanned, rows_matched, rows_returned),
               filled in as the iterator is consumed.
    """
    columns: list[str]
    rows: Iterator[OutputRow]
    stats: dict[str, Any] = field(default_factory=dict)

    def __iter__(self) -> Iterator[OutputRow]:
        return self.rows

    def fetchall(self) -> list[OutputRow]:
        """Drain the remaining rows into a list."""
        return list(self.rows)
