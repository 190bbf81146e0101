"""
Path utilities.

Convenience functions for parsing execution paths, the notation used
to name a single leaf of the execution tree.
"""

from __future__ import annotations

from typing import Iterable, Tuple, Union

from errsim.core.history import Step
from errsim.parser.grammar import PathParser


_parser = PathParser()


def parse_path(text: str) -> Tuple[Step, ...]:
    """
    Parse a path string into steps.

    Args:
        text: A path such as ``client=NoFault, reader=Fault``.

    Returns:
        The steps in order.

    Raises:
        LexerError: If the path contains an invalid character.
        ParseError: If the path is syntactically invalid.
    """
    return _parser.parse(text)


def to_steps(path: Union[str, Iterable[Step]]) -> Tuple[Step, ...]:
    """Accept either a path string or already-parsed steps."""
    if isinstance(path, str):
        return parse_path(path)
    return tuple(path)
