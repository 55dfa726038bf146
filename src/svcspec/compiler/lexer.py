"""Tokenizer for the service-description language.

Converts raw source text into a flat list of :class:`Token` objects with
1-based line/column positions. The lexer is deliberately permissive:
any character it does not otherwise recognise becomes a single-character
``SYMBOL`` token, so that function bodies and other declarations the
converter ignores can still be skipped by the parser as balanced blocks.

Line (``//``) and block (``/* */``) comments are discarded.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from svcspec.exceptions import ParseError

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\", "/": "/"}


class TokenType(Enum):
    """Token categories produced by :class:`Lexer`."""

    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"
    SYMBOL = "SYMBOL"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int

    def __str__(self) -> str:
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type == TokenType.STRING:
            return f'"{self.value}"'
        return f"'{self.value}'"


class Lexer:
    """Single-pass scanner over a source string.

    Example::

        tokens = Lexer('import ballerina.net.http;').tokenize()
        [t.value for t in tokens]
        # ['import', 'ballerina', '.', 'net', '.', 'http', ';', '']
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> list[Token]:
        """Scan the whole source and return its tokens, terminated by ``EOF``.

        Raises:
            ParseError: On an unterminated string or block comment.
        """
        tokens: list[Token] = []
        while True:
            self._skip_trivia()
            if self._pos >= len(self._source):
                tokens.append(Token(TokenType.EOF, "", self._line, self._column))
                return tokens
            tokens.append(self._next_token())

    def _peek(self, offset: int = 0) -> str:
        index = self._pos + offset
        return self._source[index] if index < len(self._source) else ""

    def _advance(self) -> str:
        char = self._source[self._pos]
        self._pos += 1
        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return char

    def _skip_trivia(self) -> None:
        """Skip whitespace and comments."""
        while self._pos < len(self._source):
            char = self._peek()
            if char.isspace():
                self._advance()
            elif char == "/" and self._peek(1) == "/":
                while self._pos < len(self._source) and self._peek() != "\n":
                    self._advance()
            elif char == "/" and self._peek(1) == "*":
                line, column = self._line, self._column
                self._advance()
                self._advance()
                while not (self._peek() == "*" and self._peek(1) == "/"):
                    if self._pos >= len(self._source):
                        raise ParseError("Unterminated block comment", line, column)
                    self._advance()
                self._advance()
                self._advance()
            else:
                return

    def _next_token(self) -> Token:
        line, column = self._line, self._column
        char = self._peek()

        if char == '"':
            return Token(TokenType.STRING, self._read_string(), line, column)

        if char.isdigit():
            return Token(TokenType.NUMBER, self._read_number(), line, column)

        if char.isalpha() or char == "_":
            start = self._pos
            while self._peek().isalnum() or self._peek() == "_":
                self._advance()
            return Token(TokenType.IDENTIFIER, self._source[start:self._pos], line, column)

        return Token(TokenType.SYMBOL, self._advance(), line, column)

    def _read_string(self) -> str:
        line, column = self._line, self._column
        self._advance()  # opening quote
        chars: list[str] = []
        while True:
            if self._pos >= len(self._source) or self._peek() == "\n":
                raise ParseError("Unterminated string literal", line, column)
            char = self._advance()
            if char == '"':
                return "".join(chars)
            if char == "\\":
                if self._pos >= len(self._source):
                    raise ParseError("Unterminated string literal", line, column)
                escaped = self._advance()
                chars.append(_ESCAPES.get(escaped, escaped))
            else:
                chars.append(char)

    def _read_number(self) -> str:
        start = self._pos
        while self._peek().isdigit():
            self._advance()
        if self._peek() == "." and self._peek(1).isdigit():
            self._advance()
            while self._peek().isdigit():
                self._advance()
        return self._source[start:self._pos]
