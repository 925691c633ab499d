"""
logquery/lexer.py

Tokenizer (lexer) for the logquery SQL-like language.

Responsibilities:
- Convert a query string into a lazy stream of tokens with line/column positions
- Recognize keywords, identifiers, literals, operators and punctuation
- Provide reliable error messages for unexpected characters and unterminated strings

Notes:
- String literals use single or double quotes: 'hello', "hello"
- A quote inside a string is escaped by doubling it ('it''s') or with a backslash ('it\\'s')
- Numbers are integers or decimals with an optional leading minus sign
- Keywords are case-insensitive; identifiers keep their case and may contain dots (req.id)
- `-- comment` runs to the end of the line and is skipped
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from .errors import LexError, Position


class TokenKind(Enum):
    """Coarse token categories."""
    IDENTIFIER = auto()
    STRING_LITERAL = auto()
    NUMBER_LITERAL = auto()
    OPERATOR = auto()
    KEYWORD = auto()
    PUNCTUATION = auto()
    EOF = auto()


class TokenType(Enum):
    """Token types recognized by the lexer."""
    EOF = auto()

    # Identifiers + literals
    IDENT = auto()
    NUMBER = auto()
    STRING = auto()

    # Punctuation
    LPAREN = auto()   # (
    RPAREN = auto()   # )
    COMMA = auto()    # ,
    STAR = auto()     # *
    SEMI = auto()     # ;

    # Operators
    EQ = auto()       # =
    NE = auto()       # != or <>
    LT = auto()       # <
    GT = auto()       # >
    LE = auto()       # <=
    GE = auto()       # >=

    # Keywords
    SELECT = auto()
    AS = auto()
    FROM = auto()
    WHERE = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    ORDER = auto()
    BY = auto()
    ASC = auto()
    DESC = auto()
    LIMIT = auto()
    OFFSET = auto()


KEYWORDS: dict[str, TokenType] = {
    "SELECT": TokenType.SELECT,
    "AS": TokenType.AS,
    "FROM": TokenType.FROM,
    "WHERE": TokenType.WHERE,
    "AND": TokenType.AND,
    "OR": TokenType.OR,
    "NOT": TokenType.NOT,
    "ORDER": TokenType.ORDER,
    "BY": TokenType.BY,
    "ASC": TokenType.ASC,
    "DESC": TokenType.DESC,
    "LIMIT": TokenType.LIMIT,
    "OFFSET": TokenType.OFFSET,
}

OPERATORS: dict[str, TokenType] = {
    "<=": TokenType.LE,
    ">=": TokenType.GE,
    "!=": TokenType.NE,
    "<>": TokenType.NE,
    "=": TokenType.EQ,
    "<": TokenType.LT,
    ">": TokenType.GT,
}

PUNCTUATION: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    "*": TokenType.STAR,
    ";": TokenType.SEMI,
}

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'", '"': '"'}


def _is_digit(ch: str) -> bool:
    """ASCII digits only; str.isdigit() also accepts characters like "²"."""
    return "0" <= ch <= "9"


@dataclass(frozen=True)
class Token:
    """
    A lexical token.

    Attributes:
        typ: TokenType
        lexeme: The original text fragment
        value: Parsed value for literals/idents:
               - IDENT -> str
               - NUMBER -> int | float
               - STRING -> str (unescaped, without quotes)
               - keywords -> uppercased keyword
        pos: Position in input
    """
    typ: TokenType
    lexeme: str
    value: object | None
    pos: Position

    @property
    def kind(self) -> TokenKind:
        if self.typ == TokenType.EOF:
            return TokenKind.EOF
        if self.typ == TokenType.IDENT:
            return TokenKind.IDENTIFIER
        if self.typ == TokenType.STRING:
            return TokenKind.STRING_LITERAL
        if self.typ == TokenType.NUMBER:
            return TokenKind.NUMBER_LITERAL
        if self.typ in OPERATORS.values():
            return TokenKind.OPERATOR
        if self.typ in KEYWORDS.values():
            return TokenKind.KEYWORD
        return TokenKind.PUNCTUATION


def tokenize(text: str) -> Iterator[Token]:
    """
    Tokenize a query string into a lazy stream of Token objects.

    Args:
        text: Raw query text.

    Yields:
        Token objects, always terminated with an EOF token.

    Raises:
        LexError: for unexpected characters or unterminated strings.
    """
    i = 0
    line = 1
    col = 1

    def cur_pos() -> Position:
        return Position(line=line, col=col, offset=i)

    def peek(offset: int = 0) -> str:
        j = i + offset
        if j >= len(text):
            return ""
        return text[j]

    def advance(n: int = 1) -> None:
        """Advance the cursor by n characters while tracking line/column."""
        nonlocal i, line, col
        for _ in range(n):
            if i >= len(text):
                return
            ch = text[i]
            i += 1
            if ch == "\n":
                line += 1
                col = 1
            else:
                col += 1

    def scan_number() -> Token:
        start = cur_pos()
        j = i
        if text[j] == "-":
            j += 1
        while j < len(text) and _is_digit(text[j]):
            j += 1
        is_decimal = False
        if j + 1 < len(text) and text[j] == "." and _is_digit(text[j + 1]):
            is_decimal = True
            j += 1
            while j < len(text) and _is_digit(text[j]):
                j += 1
        lex = text[i:j]
        advance(j - i)
        return Token(TokenType.NUMBER, lex, float(lex) if is_decimal else int(lex), start)

    def scan_string(quote: str) -> Token:
        start = cur_pos()
        begin = i
        advance(1)  # opening quote
        buf: list[str] = []
        while True:
            if i >= len(text):
                raise LexError("Unterminated string literal", start)
            c = peek(0)
            if c == quote:
                if peek(1) == quote:
                    buf.append(quote)
                    advance(2)
                    continue
                advance(1)  # closing quote
                break
            if c == "\\" and peek(1):
                nxt = peek(1)
                buf.append(ESCAPES.get(nxt, "\\" + nxt))
                advance(2)
                continue
            buf.append(c)
            advance(1)
        return Token(TokenType.STRING, text[begin:i], "".join(buf), start)

    while i < len(text):
        ch = peek(0)

        # Skip whitespace
        if ch.isspace():
            advance(1)
            continue

        # Line comment
        if ch == "-" and peek(1) == "-":
            while i < len(text) and peek(0) != "\n":
                advance(1)
            continue

        # Operators (two-character forms first)
        two = ch + peek(1)
        if two in OPERATORS:
            yield Token(OPERATORS[two], two, None, cur_pos())
            advance(2)
            continue
        if ch in OPERATORS:
            yield Token(OPERATORS[ch], ch, None, cur_pos())
            advance(1)
            continue

        if ch in PUNCTUATION:
            yield Token(PUNCTUATION[ch], ch, None, cur_pos())
            advance(1)
            continue

        if ch in ("'", '"'):
            yield scan_string(ch)
            continue

        if _is_digit(ch) or (ch == "-" and _is_digit(peek(1))):
            yield scan_number()
            continue

        # Back-quoted identifier: `order`
        if ch == "`":
            start = cur_pos()
            j = text.find("`", i + 1)
            if j < 0:
                raise LexError("Unterminated quoted identifier", start)
            name = text[i + 1:j]
            if not name:
                raise LexError("Empty quoted identifier", start)
            yield Token(TokenType.IDENT, text[i:j + 1], name, start)
            advance(j + 1 - i)
            continue

        # Identifier / keyword
        if ch.isalpha() or ch == "_":
            start = cur_pos()
            j = i
            while j < len(text) and (text[j].isalnum() or text[j] in "_."):
                j += 1

            lex = text[i:j]
            upper = lex.upper()
            if upper in KEYWORDS:
                yield Token(KEYWORDS[upper], lex, upper, start)
            else:
                yield Token(TokenType.IDENT, lex, lex, start)

            advance(j - i)
            continue

        # Unknown character
        raise LexError(f"Unexpected character: {ch!r}", cur_pos())

    yield Token(TokenType.EOF, "", None, cur_pos())
