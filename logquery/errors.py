"""
logquery/errors.py

Centralized exception types for the logquery engine.

This module defines:
- A common base exception for every error the engine raises
- A lightweight Position structure for reporting query errors with line/column context
- Specialized error types used by the lexer, parser, evaluator and schema layers
"""

from __future__ import annotations

from dataclasses import dataclass


class LogQueryError(Exception):
    """
    Base class for all logquery errors.

    Catching this exception allows callers (CLI/REPL) to handle all query errors
    without accidentally swallowing unrelated system exceptions.
    """


@dataclass(frozen=True)
class Position:
    """
    Represents a location in a query string.

    Attributes:
        line: 1-based line number
        col:  1-based column number
        offset: 0-based character offset from the start of the query
    """
    line: int
    col: int
    offset: int = 0


class _PositionedError(LogQueryError):
    """Shared formatting for errors that point into the query text."""

    label = "Error"

    def __init__(self, message: str, position: Position | None = None):
        self.message = message
        self.position = position
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.position is None:
            return f"{self.label}: {self.message}"
        return f"{self.label} at line {self.position.line}, col {self.position.col}: {self.message}"


class LexError(_PositionedError):
    """
    Raised when the query text cannot be tokenized.

    Examples:
      - Illegal character
      - Unterminated string literal
    """

    label = "LexError"


class ParseError(_PositionedError):
    """
    Raised when the token stream does not form a valid query.

    Args:
        message: Human readable explanation.
        position: Position of the offending token.
        expected: What the parser was looking for, if known.
        found: Lexeme of the token actually found.
    """

    label = "ParseError"

    def __init__(
        self,
        message: str,
        position: Position | None = None,
        expected: str | None = None,
        found: str | None = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(message, position)


class EvalError(_PositionedError):
    """
    Raised when a well-formed AST cannot be evaluated.

    The parser rejects these shapes already; this guards hand-built queries.
    """

    label = "EvalError"


class SchemaError(LogQueryError):
    """
    Raised when a log schema definition is invalid.

    Examples:
      - Regex does not compile
      - Column without a matching named capture group
      - More than one multiline column
    """


class TypeMismatch(SchemaError):
    """
    Raised when captured text does not fit the declared type of its column.

    Attributes:
        column: Column name.
        type: Declared column type.
        text: The offending text.
    """

    def __init__(self, column: str, type: str, text: str):
        self.column = column
        self.type = type
        self.text = text
        super().__init__(f"Value {text!r} of column '{column}' is not a valid {type}")
