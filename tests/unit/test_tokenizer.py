"""Tests for the HCL native-syntax tokenizer."""

from __future__ import annotations

import pytest

from hcljson.core.hclsyntax.tokenizer import TokenizeError, TokenKind, tokenize


def kinds(source: str) -> list[TokenKind]:
    return [t.kind for t in tokenize(source)]


class TestTokenizer:
    """Tokenizer produces correct token sequences."""

    def test_attribute(self) -> None:
        assert kinds("a = 1\n") == [
            TokenKind.IDENT,
            TokenKind.EQUAL,
            TokenKind.NUMBER,
            TokenKind.NEWLINE,
            TokenKind.EOF,
        ]

    def test_offsets(self) -> None:
        tokens = tokenize("ab = 12")
        assert (tokens[0].start, tokens[0].end) == (0, 2)
        assert (tokens[2].start, tokens[2].end) == (5, 7)

    def test_identifier_with_dash(self) -> None:
        tokens = tokenize("foo-bar")
        assert tokens[0].kind == TokenKind.IDENT
        assert tokens[0].value == "foo-bar"

    def test_number_with_exponent(self) -> None:
        tokens = tokenize("1.5e3")
        assert tokens[0].kind == TokenKind.NUMBER
        assert tokens[0].value == "1.5e3"

    def test_operators(self) -> None:
        assert kinds("a == b && !c || d != e") == [
            TokenKind.IDENT,
            TokenKind.EQ,
            TokenKind.IDENT,
            TokenKind.AND,
            TokenKind.BANG,
            TokenKind.IDENT,
            TokenKind.OR,
            TokenKind.IDENT,
            TokenKind.NE,
            TokenKind.IDENT,
            TokenKind.EOF,
        ]

    def test_punctuation(self) -> None:
        assert kinds("k => v...") == [
            TokenKind.IDENT,
            TokenKind.FAT_ARROW,
            TokenKind.IDENT,
            TokenKind.ELLIPSIS,
            TokenKind.EOF,
        ]

    def test_comments_are_skipped(self) -> None:
        assert kinds("# c\na = 1 // t\n/* b */\n") == [
            TokenKind.NEWLINE,
            TokenKind.IDENT,
            TokenKind.EQUAL,
            TokenKind.NUMBER,
            TokenKind.NEWLINE,
            TokenKind.NEWLINE,
            TokenKind.EOF,
        ]


class TestTemplateTokens:
    """Quoted strings and heredocs are split into literals and sequences."""

    def test_quoted_with_interpolation(self) -> None:
        tokens = tokenize('x = "a ${b} c"')
        assert [t.kind for t in tokens] == [
            TokenKind.IDENT,
            TokenKind.EQUAL,
            TokenKind.OQUOTE,
            TokenKind.QUOTED_LIT,
            TokenKind.TEMPLATE_INTERP,
            TokenKind.IDENT,
            TokenKind.TEMPLATE_SEQ_END,
            TokenKind.QUOTED_LIT,
            TokenKind.CQUOTE,
            TokenKind.EOF,
        ]
        assert tokens[3].value == "a "
        assert tokens[7].value == " c"

    def test_strip_markers(self) -> None:
        tokens = tokenize('"${~ b ~}"')
        assert tokens[1].kind == TokenKind.TEMPLATE_INTERP
        assert tokens[1].value == "${~"
        assert tokens[3].kind == TokenKind.TEMPLATE_SEQ_END
        assert tokens[3].value == "~}"

    def test_control_sequence(self) -> None:
        tokens = tokenize('"%{ if c }x%{ endif }"')
        assert tokens[1].kind == TokenKind.TEMPLATE_CONTROL
        assert tokens[2].value == "if"

    def test_escaped_sequence_stays_literal(self) -> None:
        tokens = tokenize('"$${x}"')
        assert [t.kind for t in tokens] == [
            TokenKind.OQUOTE,
            TokenKind.QUOTED_LIT,
            TokenKind.CQUOTE,
            TokenKind.EOF,
        ]
        assert tokens[1].value == "$${x}"

    def test_braces_inside_interpolation(self) -> None:
        assert kinds('"${ {a = 1} }"') == [
            TokenKind.OQUOTE,
            TokenKind.TEMPLATE_INTERP,
            TokenKind.LBRACE,
            TokenKind.IDENT,
            TokenKind.EQUAL,
            TokenKind.NUMBER,
            TokenKind.RBRACE,
            TokenKind.TEMPLATE_SEQ_END,
            TokenKind.CQUOTE,
            TokenKind.EOF,
        ]

    def test_heredoc(self) -> None:
        tokens = tokenize("x = <<EOT\nhi\nEOT\n")
        assert [t.kind for t in tokens] == [
            TokenKind.IDENT,
            TokenKind.EQUAL,
            TokenKind.OHEREDOC,
            TokenKind.STRING_LIT,
            TokenKind.CHEREDOC,
            TokenKind.NEWLINE,
            TokenKind.EOF,
        ]
        assert tokens[2].value == "<<EOT"
        assert tokens[3].value == "hi\n"

    def test_flush_heredoc_opener(self) -> None:
        tokens = tokenize("x = <<-EOT\n  hi\n  EOT\n")
        assert tokens[2].value == "<<-EOT"
        assert tokens[4].kind == TokenKind.CHEREDOC


class TestTokenizerErrors:
    """Malformed input raises TokenizeError with a position."""

    def test_unterminated_string(self) -> None:
        with pytest.raises(TokenizeError, match="Unterminated template string"):
            tokenize('x = "abc')

    def test_newline_in_string(self) -> None:
        with pytest.raises(TokenizeError, match="Unterminated template string"):
            tokenize('x = "abc\ny = 1\n')

    def test_unterminated_heredoc(self) -> None:
        with pytest.raises(TokenizeError, match="Unterminated heredoc"):
            tokenize("x = <<EOT\nhi\n")

    def test_unterminated_comment(self) -> None:
        with pytest.raises(TokenizeError, match="Unterminated comment"):
            tokenize("/* never closed")

    def test_unexpected_character(self) -> None:
        with pytest.raises(TokenizeError) as exc_info:
            tokenize("a = @")
        assert exc_info.value.pos == 4
