"""
logquery: query free-form log files with a small SQL dialect.

    >>> from logquery import Row, parse_query, execute
    >>> q = parse_query("SELECT msg WHERE level = 'ERROR'")
    >>> rows = [Row.from_values({"level": "ERROR", "msg": "boom"})]
    >>> [r.as_dict() for r in execute(q, rows, ["level", "msg"])]
    [{'msg': 'boom'}]
"""

from .ast import Query
from .engine import Engine
from .errors import EvalError, LexError, LogQueryError, ParseError, Position, SchemaError, TypeMismatch
from .evaluator import Evaluator
from .executor import QueryExecutor, execute
from .ingest import RowReader
from .lexer import Token, TokenKind, TokenType, tokenize
from .parser import parse, parse_query
from .results import OutputRow, QueryResult
from .row import Row
from .schema import Column, Schema
from .values import MISSING, MissingValue, NumberValue, StringValue, Value

__all__ = [
    "Column",
    "Engine",
    "EvalError",
    "Evaluator",
    "LexError",
    "LogQueryError",
    "MISSING",
    "MissingValue",
    "NumberValue",
    "OutputRow",
    "ParseError",
    "Position",
    "Query",
    "QueryExecutor",
    "QueryResult",
    "Row",
    "RowReader",
    "Schema",
    "SchemaError",
    "StringValue",
    "Token",
    "TokenKind",
    "TokenType",
    "TypeMismatch",
    "Value",
    "execute",
    "parse",
    "parse_query",
    "tokenize",
]
