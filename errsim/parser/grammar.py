"""
Parser for execution paths.

Turns a path string into the sequence of steps it names, validating
each mode name along the way.
"""

from __future__ import annotations

from typing import Tuple

import sly

from errsim.core.history import Step
from errsim.core.outcome import Mode
from errsim.parser.lexer import PathLexer


class ParseError(Exception):
    """Exception raised for parsing errors."""

    pass


class _SLYParser(sly.Parser):
    """
    SLY-based parser for execution paths.

    Grammar:
        path  : steps
        steps : step | steps SEPARATOR step
        step  : NAME EQUALS NAME
    """

    tokens = PathLexer.tokens

    @_("steps")
    def path(self, p):
        return tuple(p.steps)

    @_("step")
    def steps(self, p):
        return [p.step]

    @_("steps SEPARATOR step")
    def steps(self, p):
        return p.steps + [p.step]

    @_("NAME EQUALS NAME")
    def step(self, p):
        try:
            mode = Mode.parse(p.NAME1)
        except ValueError as exc:
            raise ParseError(f"{exc} for key '{p.NAME0}'") from None
        return Step(p.NAME0, mode)

    def error(self, token):
        if token:
            raise ParseError(
                f"Syntax error at '{token.value}' " f"(type: {token.type}, index: {token.index})"
            )
        raise ParseError("Syntax error: unexpected end of path")


class PathParser:
    """
    Parser for execution paths.

    Wraps the SLY-based parser with a clean public interface.
    """

    def __init__(self) -> None:
        self._lexer = PathLexer()
        self._parser = _SLYParser()

    def parse(self, text: str) -> Tuple[Step, ...]:
        """
        Parse a path string into steps.

        An empty (or blank) path names the all-success prefix and
        yields no steps.

        Args:
            text: The path string to parse.

        Returns:
            The steps in order.

        Raises:
            LexerError: If the path contains an invalid character.
            ParseError: If the path is syntactically invalid or names
                an unknown mode.
        """
        text = text.strip()
        if not text:
            return ()

        result = self._parser.parse(self._lexer.tokenize(text))
        if result is None:
            raise ParseError("Syntax error: could not parse path")
        return result
