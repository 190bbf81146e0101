"""
Tests for the path lexical analyzer.

Tests cover names (including dotted release keys), separators,
whitespace handling, and error handling.
"""

import pytest

from errsim.parser.lexer import LexerError, PathLexer


@pytest.fixture
def lexer() -> PathLexer:
    """Return a fresh lexer instance."""
    return PathLexer()


def _tokens(lexer: PathLexer, text: str) -> list[tuple[str, str]]:
    """Helper: return list of (type, value) pairs from tokenizing text."""
    return [(tok.type, tok.value) for tok in lexer.tokenize(text)]


class TestNames:
    """Test key and mode name tokenization."""

    def test_simple_name(self, lexer: PathLexer) -> None:
        assert _tokens(lexer, "reader") == [("NAME", "reader")]

    def test_dotted_name(self, lexer: PathLexer) -> None:
        assert _tokens(lexer, "reader.close") == [("NAME", "reader.close")]

    def test_camel_case(self, lexer: PathLexer) -> None:
        assert _tokens(lexer, "pipeWriter") == [("NAME", "pipeWriter")]

    def test_hyphen_and_digits(self, lexer: PathLexer) -> None:
        assert _tokens(lexer, "step-2") == [("NAME", "step-2")]


class TestSteps:
    """Test full step sequences."""

    def test_single_step(self, lexer: PathLexer) -> None:
        assert _tokens(lexer, "reader=Fault") == [
            ("NAME", "reader"),
            ("EQUALS", "="),
            ("NAME", "Fault"),
        ]

    @pytest.mark.parametrize("sep", [",", ";", ">"])
    def test_separators(self, lexer: PathLexer, sep: str) -> None:
        types = [tok.type for tok in lexer.tokenize(f"a=Fault{sep}b=Abort")]
        assert types == ["NAME", "EQUALS", "NAME", "SEPARATOR", "NAME", "EQUALS", "NAME"]

    def test_whitespace_ignored(self, lexer: PathLexer) -> None:
        assert len(_tokens(lexer, "  a = Fault ,\tb=Abort ")) == 7


class TestErrors:
    """Test invalid input."""

    def test_invalid_character(self, lexer: PathLexer) -> None:
        with pytest.raises(LexerError, match="Invalid character '@'"):
            list(lexer.tokenize("a=@"))

    def test_newline_rejected(self, lexer: PathLexer) -> None:
        with pytest.raises(LexerError, match="at index 7"):
            list(lexer.tokenize("a=Fault\nb=Abort"))

    def test_leading_digit(self, lexer: PathLexer) -> None:
        with pytest.raises(LexerError):
            list(lexer.tokenize("1a=Fault"))
