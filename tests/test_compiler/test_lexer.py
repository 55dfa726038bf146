"""Tests for svcspec.compiler.lexer."""

from __future__ import annotations

import pytest

from svcspec.compiler.lexer import Lexer, Token, TokenType
from svcspec.exceptions import ParseError


def _values(source: str) -> list[str]:
    return [t.value for t in Lexer(source).tokenize()]


class TestTokenize:
    def test_import_statement(self) -> None:
        assert _values("import ballerina.net.http;") == [
            "import", "ballerina", ".", "net", ".", "http", ";", "",
        ]

    def test_ends_with_eof(self) -> None:
        tokens = Lexer("").tokenize()
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_token_types(self) -> None:
        tokens = Lexer('port: 9090, name: "x"').tokenize()
        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER,
            TokenType.SYMBOL,
            TokenType.NUMBER,
            TokenType.SYMBOL,
            TokenType.IDENTIFIER,
            TokenType.SYMBOL,
            TokenType.STRING,
            TokenType.EOF,
        ]

    def test_decimal_number(self) -> None:
        assert _values("1.25") == ["1.25", ""]

    def test_member_access_is_not_a_decimal(self) -> None:
        assert _values("1.x") == ["1", ".", "x", ""]

    def test_identifiers_with_underscores_and_digits(self) -> None:
        assert _values("_a1 b_2") == ["_a1", "b_2", ""]


class TestComments:
    def test_line_comment_skipped(self) -> None:
        assert _values("a // comment\nb") == ["a", "b", ""]

    def test_block_comment_skipped(self) -> None:
        assert _values("a /* x\ny */ b") == ["a", "b", ""]

    def test_unterminated_block_comment(self) -> None:
        with pytest.raises(ParseError, match="Unterminated block comment"):
            Lexer("a /* never closed").tokenize()


class TestStrings:
    def test_escapes(self) -> None:
        tokens = Lexer(r'"a\"b\n\\"').tokenize()
        assert tokens[0].value == 'a"b\n\\'

    def test_unterminated_string(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            Lexer('x = "open').tokenize()
        assert exc_info.value.line == 1
        assert exc_info.value.column == 5

    def test_string_cannot_span_lines(self) -> None:
        with pytest.raises(ParseError):
            Lexer('"a\nb"').tokenize()


class TestPositions:
    def test_line_and_column(self) -> None:
        tokens = Lexer("a\n  bc").tokenize()
        assert (tokens[0].line, tokens[0].column) == (1, 1)
        assert (tokens[1].line, tokens[1].column) == (2, 3)

    def test_str_rendering(self) -> None:
        assert str(Token(TokenType.EOF, "", 1, 1)) == "end of input"
        assert str(Token(TokenType.STRING, "hi", 1, 1)) == '"hi"'
        assert str(Token(TokenType.SYMBOL, "{", 1, 1)) == "'{'"
