"""
Lexical analyzer for execution paths.

Tokenizes path strings such as ``client=NoFault, reader=Fault`` into
names, assignment signs and step separators.
"""

from __future__ import annotations

import sly


class LexerError(Exception):
    """Exception raised for lexical analysis errors."""
    pass


class PathLexer(sly.Lexer):
    """
    Lexical analyzer for execution paths.

    Token Types:
        NAME       - Operation keys and mode names
        EQUALS     - Binds a mode to a key
        SEPARATOR  - Separates steps (``,``, ``;`` or ``>``)
    """

    tokens = {NAME, EQUALS, SEPARATOR}

    ignore = " \t"

    # Keys may be dotted (``reader.close``) or hyphenated.
    NAME = r"[a-zA-Z_][a-zA-Z0-9_.\-]*"
    EQUALS = r"="
    SEPARATOR = r"[,;>]"

    def error(self, t):
        """Handle invalid characters."""
        raise LexerError(
            f"Invalid character '{t.value[0]}' at index {self.index}"
        )
