"""
logquery/executor.py

Query execution for the logquery engine.

Responsibilities:
- Run a parsed Query against a stream of Rows in four strictly ordered phases:
    1. Filter  - keep rows for which the WHERE predicate holds
    2. Sort    - stable multi-key ORDER BY over the whole filtered set
    3. Page    - skip OFFSET rows, keep at most LIMIT rows
    4. Project - turn each surviving row into an OutputRow
- Expose the output as a lazy iterator; nothing is read from the row source
  until the caller starts pulling results.

Design notes:
- Sorting needs every matching row, so the filtered set is held in memory.
  Memory use grows with the number of matching rows, not with the input size.
- The executor keeps no state between executions; one instance can run many queries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Iterable, Iterator, Sequence

from .ast import ColumnRef, Direction, Expression, Query, Wildcard
from .errors import EvalError
from .evaluator import Evaluator
from .results import OutputRow, QueryResult
from .row import Row
from .values import Value

logger = logging.getLogger(__name__)


@dataclass
class QueryExecutor:
    """
    Executes Query ASTs against rows.

    Args:
        evaluator: Evaluator used for WHERE, ORDER BY and projection.
    """
    evaluator: Evaluator = field(default_factory=Evaluator)

    # --------------------------
    # public entry point
    # --------------------------

    def execute(self, query: Query, rows: Iterable[Row], columns: Sequence[str]) -> QueryResult:
        """
        Execute a query.

        Args:
            query: Parsed query.
            rows: Row source; pulled only when the result is iterated.
            columns: Field names known to the source, in schema order. Used for `SELECT *`.

        Returns:
            QueryResult whose rows are produced lazily.

        Raises:
            EvalError if the query contains a wildcard outside the select list
            (raised while iterating the result).
        """
        out_columns = self.output_columns(query, columns)
        stats: dict[str, Any] = {"rows_scanned": 0, "rows_matched": 0, "rows_returned": 0}
        return QueryResult(
            columns=out_columns,
            rows=self._run(query, rows, columns, out_columns, stats),
            stats=stats,
        )

    def output_columns(self, query: Query, columns: Sequence[str]) -> list[str]:
        """Names of the output columns of a query."""
        if query.is_wildcard:
            return list(columns)
        for item in query.select:
            if isinstance(item.expression, Wildcard):
                raise EvalError("Wildcard '*' cannot be combined with other select items")
        return [item.output_name for item in query.select]

    # --------------------------
    # phases
    # --------------------------

    def _run(
        self,
        query: Query,
        rows: Iterable[Row],
        columns: Sequence[str],
        out_columns: list[str],
        stats: dict[str, Any],
    ) -> Iterator[OutputRow]:
        matched = self._filter(query, rows, stats)
        ordered = self._sort(query, matched, columns)
        page = self._page(query, ordered)
        logger.debug(
            "scanned=%d matched=%d page=%d",
            stats["rows_scanned"],
            stats["rows_matched"],
            len(page),
        )
        for row in page:
            stats["rows_returned"] += 1
            yield self._project(query, row, out_columns)

    def _filter(self, query: Query, rows: Iterable[Row], stats: dict[str, Any]) -> list[Row]:
        out: list[Row] = []
        for row in rows:
            stats["rows_scanned"] += 1
            if query.where is None or self.evaluator.test(query.where, row):
                out.append(row)
        stats["rows_matched"] = len(out)
        return out

    def sort_keys(self, query: Query, columns: Sequence[str]) -> list[Expression]:
        """
        Expressions to sort by.

        An ORDER BY name that is a select alias, and not a source column,
        stands for the aliased expression: `SELECT ts AS t ORDER BY t`.
        """
        aliases = {
            item.alias: item.expression
            for item in query.select
            if item.alias is not None and item.alias not in columns
        }
        keys: list[Expression] = []
        for item in query.order_by:
            expr = item.expression
            if isinstance(expr, Wildcard):
                raise EvalError("Wildcard '*' cannot be used as an ORDER BY key")
            if isinstance(expr, ColumnRef) and expr.name in aliases:
                expr = aliases[expr.name]
            keys.append(expr)
        return keys

    def _sort(self, query: Query, rows: list[Row], columns: Sequence[str]) -> list[Row]:
        """
        Stable sort by the ORDER BY keys in declaration order.

        Key values are computed once per row; rows that tie on every key keep
        their filtered order.
        """
        if not query.order_by:
            return rows

        keys = self.sort_keys(query, columns)
        directions = [item.direction for item in query.order_by]
        decorated = [
            ([self.evaluator.evaluate(expr, row) for expr in keys], row)
            for row in rows
        ]

        def compare(a: tuple[list[Value], Row], b: tuple[list[Value], Row]) -> int:
            for left, right, direction in zip(a[0], b[0], directions):
                c = self.evaluator.order(left, right)
                if c != 0:
                    return -c if direction == Direction.DESC else c
            return 0

        decorated.sort(key=cmp_to_key(compare))
        return [row for _, row in decorated]

    def _page(self, query: Query, rows: list[Row]) -> list[Row]:
        start = query.offset or 0
        if query.limit is None:
            return rows[start:]
        return rows[start:start + query.limit]

    def _project(self, query: Query, row: Row, out_columns: list[str]) -> OutputRow:
        if query.is_wildcard:
            values = tuple(row.get(name) for name in out_columns)
        else:
            values = tuple(self.evaluator.evaluate(item.expression, row) for item in query.select)
        return OutputRow(columns=tuple(out_columns), values=values)


def execute(query: Query, rows: Iterable[Row], columns: Sequence[str]) -> QueryResult:
    """Execute a query with the default (case-sensitive) evaluator."""
    return QueryExecutor().execute(query, rows, columns)
