"""
Backtracking history of operation frames.

The history is an arena of frames addressed by position. A watermark
tracks how many positions the current execution has reached; frames
past the watermark belong to the previous execution and are only kept
so the odometer can advance them. Advancing increments the mode of the
last frame and drops exhausted frames from the tail, which walks the
execution tree depth-first, success first, without recursion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from errsim.core.frame import Frame
from errsim.core.outcome import Mode


@dataclass(frozen=True)
class Step:
    """
    One position of an execution path.

    Attributes:
        key: Key of the operation at this position.
        mode: Mode selected for it.
    """

    key: str
    mode: Mode

    def __str__(self) -> str:
        return f"{self.key}={self.mode}"


Path = Tuple[Step, ...]


def format_path(steps: Iterable[Step]) -> str:
    """Render steps as ``key=Mode, key=Mode``."""
    return ", ".join(str(step) for step in steps)


class History:
    """
    Ordered frames reused and truncated across executions.

    Attributes:
        position: Number of frames reached by the current execution.
    """

    def __init__(self, frames: Optional[Iterable[Frame]] = None) -> None:
        self._frames: List[Frame] = list(frames or ())
        self._position: int = 0

    @classmethod
    def seeded(cls, steps: Iterable[Step]) -> History:
        """
        Build a history that forces the given path on the next execution.

        Each seeded frame allows only its step's mode and is pinned to it;
        the real options replace it when the scenario reaches that position.
        """
        return cls(Frame(step.key, (step.mode,), pinned=True) for step in steps)

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def position(self) -> int:
        return self._position

    def rewind(self) -> None:
        """Start a new execution at position zero."""
        self._position = 0

    def replaying(self) -> bool:
        """True if the current position was reached by an earlier execution."""
        return self._position < len(self._frames)

    def expected(self) -> Frame:
        """Frame recorded at the current position by an earlier execution."""
        return self._frames[self._position]

    def contains(self, key: str) -> bool:
        """True if a frame reached in this execution has *key*."""
        return any(f.key == key for f in self._frames[: self._position])

    def push(self, frame: Frame) -> Frame:
        """Store *frame* at the current position and move past it."""
        if self.replaying():
            self._frames[self._position] = frame
        else:
            self._frames.append(frame)
        self._position += 1
        return frame

    def reached(self) -> List[Frame]:
        """Frames reached by the current execution, oldest first."""
        return self._frames[: self._position]

    def unreleased(self) -> List[Frame]:
        """Reached frames still waiting for a release."""
        return [f for f in self.reached() if not f.released]

    def path(self) -> Path:
        """Steps taken by the current execution."""
        return tuple(Step(f.key, f.mode) for f in self.reached())

    def advance(self) -> bool:
        """
        Move to the next combination of modes.

        Returns:
            False when every combination has been visited.
        """
        while self._frames:
            if self._frames[-1].next_mode():
                return True
            self._frames.pop()
        return False
