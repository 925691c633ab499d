"""
logquery/engine.py

Public Engine API for logquery.

Responsibilities:
- Provide a simple library interface:
    - Engine.open(schema_path)
    - engine.prepare(sql) -> Query
    - engine.execute(sql, lines) -> QueryResult
    - engine.execute_path(sql, path) -> QueryResult
- Tie a Schema (how to read logs) to an Evaluator (how to compare values)

This module is intentionally minimal so it can be used from the CLI/REPL or
embedded in other tools.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .ast import Query
from .evaluator import Evaluator
from .executor import QueryExecutor
from .ingest import RowReader
from .parser import parse_query
from .results import QueryResult
from .schema import Schema


@dataclass
class Engine:
    """
    Query engine bound to one log schema.

    Attributes:
        schema: Schema used to turn log lines into rows.
        evaluator: Comparison settings (case sensitivity).
    """
    schema: Schema
    evaluator: Evaluator = field(default_factory=Evaluator)

    @classmethod
    def open(cls, schema_path: str | Path, *, case_sensitive: bool = True) -> "Engine":
        """
        Create an engine from a JSON schema file.

        Raises:
            SchemaError: if the schema cannot be loaded.
        """
        return cls(schema=Schema.load(schema_path), evaluator=Evaluator(case_sensitive=case_sensitive))

    @property
    def columns(self) -> list[str]:
        return self.schema.column_names()

    def prepare(self, sql: str) -> Query:
        """
        Parse a query without running it.

        Raises:
            LexError / ParseError.
        """
        return parse_query(sql)

    def execute(self, sql: str | Query, lines: Iterable[str]) -> QueryResult:
        """
        Run a query over raw log lines.

        Args:
            sql: Query text or an already prepared Query.
            lines: Raw log lines (e.g. an open file).

        Returns:
            QueryResult; rows are read from `lines` while it is iterated.
        """
        query = self.prepare(sql) if isinstance(sql, str) else sql
        rows = RowReader(self.schema).read_lines(lines)
        return QueryExecutor(self.evaluator).execute(query, rows, self.columns)

    def execute_path(self, sql: str | Query, path: str | Path) -> QueryResult:
        """
        Run a query over a log file or a directory of log files.

        Raises:
            FileNotFoundError: if `path` does not exist.
        """
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"No such file or directory: {p}")
        query = self.prepare(sql) if isinstance(sql, str) else sql
        rows = RowReader(self.schema).read_path(p)
        return QueryExecutor(self.evaluator).execute(query, rows, self.columns)
