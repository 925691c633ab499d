"""
logquery/parser.py

Recursive-descent parser for the logquery language.

Responsibilities:
- Convert token streams into a Query AST (see logquery/ast.py)
- Provide clear parse errors with line/column positions and expected/found tokens
- Grammar:
    Query      := SELECT SelectList [FROM ident] [WHERE OrExpr]
                  [ORDER BY OrderList] [LIMIT n] [OFFSET n] [;]
    SelectList := '*' | SelectItem (',' SelectItem)*
    SelectItem := Operand [AS ident]
    OrExpr     := AndExpr (OR AndExpr)*
    AndExpr    := NotExpr (AND NotExpr)*
    NotExpr    := NOT NotExpr | Comparison
    Comparison := '(' OrExpr ')' | Operand CompareOp Operand
    Operand    := ident | string | number
    OrderItem  := Operand [ASC | DESC]

Notes:
- OR binds looser than AND; NOT binds tighter than both.
- FROM is optional and its table name is ignored: there is a single implicit source.
- LIMIT and OFFSET take non-negative integers only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .ast import (
    And,
    ColumnRef,
    CompareOp,
    Comparison,
    Direction,
    Expression,
    Literal,
    Not,
    Or,
    OrderItem,
    Predicate,
    Query,
    SelectItem,
    Wildcard,
)
from .errors import ParseError
from .lexer import Token, TokenType, tokenize

COMPARE_OPS: dict[TokenType, CompareOp] = {
    TokenType.EQ: CompareOp.EQ,
    TokenType.NE: CompareOp.NE,
    TokenType.LT: CompareOp.LT,
    TokenType.GT: CompareOp.GT,
    TokenType.LE: CompareOp.LE,
    TokenType.GE: CompareOp.GE,
}

OPERAND_TYPES = (TokenType.IDENT, TokenType.STRING, TokenType.NUMBER)


def _describe(t: Token) -> str:
    return "end of input" if t.typ == TokenType.EOF else repr(t.lexeme)


@dataclass
class Parser:
    """
    Stateful parser over a token list.

    Attributes:
        tokens: List of Token, terminated by EOF.
        i: Current token index.
    """
    tokens: list[Token]
    i: int = 0

    def peek(self, offset: int = 0) -> Token:
        """Return the token at current index + offset without consuming."""
        j = self.i + offset
        if j >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[j]

    def at(self, typ: TokenType) -> bool:
        """Check whether current token is of a specific type."""
        return self.peek().typ == typ

    def consume(self) -> Token:
        """Consume and return the current token."""
        t = self.peek()
        self.i += 1
        return t

    def error(self, msg: str, expected: str | None = None) -> ParseError:
        t = self.peek()
        return ParseError(msg, t.pos, expected=expected, found=_describe(t))

    def expect(self, typ: TokenType, msg: str, expected: str | None = None) -> Token:
        """Consume a token of the expected type, otherwise raise a parse error."""
        if not self.at(typ):
            raise self.error(msg, expected)
        return self.consume()

    def match(self, typ: TokenType) -> bool:
        """If current token matches typ, consume it and return True."""
        if self.at(typ):
            self.consume()
            return True
        return False

    # ---------------- entry point ----------------

    def parse_query(self) -> Query:
        """
        Parse one complete query.

        Raises:
            ParseError if the tokens do not form exactly one query.
        """
        self.expect(TokenType.SELECT, "Expected SELECT", expected="SELECT")
        select = self.parse_select_list()

        if self.match(TokenType.FROM):
            self.expect(TokenType.IDENT, "Expected source name after FROM", expected="identifier")

        where = None
        if self.match(TokenType.WHERE):
            where = self.parse_or()

        order_by: tuple[OrderItem, ...] = ()
        if self.match(TokenType.ORDER):
            self.expect(TokenType.BY, "Expected BY after ORDER", expected="BY")
            order_by = self.parse_order_list()

        limit = None
        if self.match(TokenType.LIMIT):
            limit = self.parse_count("LIMIT")

        offset = None
        if self.match(TokenType.OFFSET):
            offset = self.parse_count("OFFSET")

        self.match(TokenType.SEMI)
        self.expect(TokenType.EOF, "Unexpected token after end of query", expected="end of input")

        return Query(select=select, where=where, order_by=order_by, limit=limit, offset=offset)

    # ---------------- SELECT list ----------------

    def parse_select_list(self) -> tuple[SelectItem, ...]:
        """
        Parse:
          '*' OR item (',' item)*
        A wildcard cannot be mixed with explicit items.
        """
        if self.match(TokenType.STAR):
            if self.at(TokenType.COMMA):
                raise self.error("Wildcard '*' cannot be combined with other select items")
            if self.at(TokenType.AS):
                raise self.error("Wildcard '*' cannot be aliased")
            return (SelectItem(Wildcard()),)

        items = [self.parse_select_item()]
        while self.match(TokenType.COMMA):
            items.append(self.parse_select_item())
        return tuple(items)

    def parse_select_item(self) -> SelectItem:
        if self.at(TokenType.STAR):
            raise self.error("Wildcard '*' cannot be combined with other select items")
        expr = self.parse_operand("select item")
        alias = None
        if self.match(TokenType.AS):
            alias = str(self.expect(TokenType.IDENT, "Expected alias after AS", expected="identifier").value)
        return SelectItem(expression=expr, alias=alias)

    # ---------------- WHERE ----------------

    def parse_or(self) -> Predicate:
        """OrExpr := AndExpr (OR AndExpr)*, left associative."""
        left = self.parse_and()
        while self.match(TokenType.OR):
            left = Or(left, self.parse_and())
        return left

    def parse_and(self) -> Predicate:
        """AndExpr := NotExpr (AND NotExpr)*, left associative."""
        left = self.parse_not()
        while self.match(TokenType.AND):
            left = And(left, self.parse_not())
        return left

    def parse_not(self) -> Predicate:
        if self.match(TokenType.NOT):
            return Not(self.parse_not())
        return self.parse_comparison()

    def parse_comparison(self) -> Predicate:
        """
        Parse:
          '(' OrExpr ')' | operand op operand
        """
        if self.match(TokenType.LPAREN):
            inner = self.parse_or()
            self.expect(TokenType.RPAREN, "Expected ')' to close group", expected="')'")
            return inner

        left = self.parse_operand("comparison operand")
        t = self.peek()
        op = COMPARE_OPS.get(t.typ)
        if op is None:
            raise self.error("Expected comparison operator", expected="one of = != <> < > <= >=")
        self.consume()
        right = self.parse_operand("comparison operand")
        return Comparison(left=left, op=op, right=right)

    # ---------------- ORDER BY / LIMIT / OFFSET ----------------

    def parse_order_list(self) -> tuple[OrderItem, ...]:
        items = [self.parse_order_item()]
        while self.match(TokenType.COMMA):
            items.append(self.parse_order_item())
        return tuple(items)

    def parse_order_item(self) -> OrderItem:
        expr = self.parse_operand("ORDER BY key")
        direction = Direction.ASC
        if self.match(TokenType.DESC):
            direction = Direction.DESC
        else:
            self.match(TokenType.ASC)
        return OrderItem(expression=expr, direction=direction)

    def parse_count(self, clause: str) -> int:
        """Parse the non-negative integer argument of LIMIT / OFFSET."""
        t = self.peek()
        if t.typ != TokenType.NUMBER or not isinstance(t.value, int) or t.value < 0:
            raise self.error(f"{clause} must be a non-negative integer", expected="non-negative integer")
        self.consume()
        return int(t.value)

    # ---------------- atoms ----------------

    def parse_operand(self, ctx: str) -> Expression:
        """
        Parse:
          IDENT | STRING | NUMBER
        """
        t = self.peek()
        if t.typ == TokenType.STAR:
            raise self.error(f"Wildcard '*' is not allowed as {ctx}")
        if t.typ not in OPERAND_TYPES:
            raise self.error(f"Expected {ctx}", expected="column name or literal")
        self.consume()
        if t.typ == TokenType.IDENT:
            return ColumnRef(str(t.value))
        if t.typ == TokenType.STRING:
            return Literal.string(str(t.value))
        return Literal.number(t.value, t.lexeme)  # type: ignore[arg-type]


# ---------- public helpers ----------

def parse(tokens: Iterable[Token]) -> Query:
    """
    Parse a token stream into a Query.

    Raises:
        ParseError: on malformed input.
    """
    return Parser(list(tokens)).parse_query()


def parse_query(text: str) -> Query:
    """
    Tokenize and parse query text.

    Raises:
        LexError / ParseError.
    """
    return parse(tokenize(text))
