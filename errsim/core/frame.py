"""
Operation frames and per-call options.

A frame records one acquire (or release) point of a scenario: its key,
the modes legal at that point, which mode is selected for the current
execution, and whether the resource has been released.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from errsim.core.outcome import Mode


@dataclass(frozen=True)
class Options:
    """
    Per-call options of an acquire or release.

    Attributes:
        fault: Whether FAULT is a legal outcome.
        abort: Whether ABORT is a legal outcome.
        release: Whether the acquired resource must later be released.
        ignore_fault: Whether a FAULT of this call is kept out of the
            outcome ledger (the caller may drop the error).
    """

    fault: bool = True
    abort: bool = True
    release: bool = True
    ignore_fault: bool = False

    def modes(self) -> Tuple[Mode, ...]:
        """Legal modes in enumeration order; NO_FAULT always comes first."""
        modes = [Mode.NO_FAULT]
        if self.fault:
            modes.append(Mode.FAULT)
        if self.abort:
            modes.append(Mode.ABORT)
        return tuple(modes)


@dataclass
class Frame:
    """
    Mutable record of one operation in the history.

    Attributes:
        key: Label chosen by the scenario call site.
        modes: Modes legal for this call, in enumeration order.
        mode_index: Index into ``modes`` of the mode in force.
        released: True once released, once the acquire itself failed,
            or from the start when no release is required.
        ignore_fault: True if a FAULT is not recorded in the ledger.
        pinned: True for a frame seeded from a replayed path; the next
            execution must select its mode rather than its index.
    """

    key: str
    modes: Tuple[Mode, ...]
    mode_index: int = 0
    released: bool = False
    ignore_fault: bool = False
    pinned: bool = False

    def __post_init__(self) -> None:
        """Validate the mode index against the legal modes."""
        if not self.modes:
            raise ValueError(f"Frame '{self.key}' has no legal modes")
        if not 0 <= self.mode_index < len(self.modes):
            raise ValueError(
                f"mode_index {self.mode_index} out of range for frame "
                f"'{self.key}' with {len(self.modes)} modes"
            )

    @classmethod
    def from_options(cls, key: str, options: Options, mode_index: int = 0) -> Frame:
        """
        Build a fresh frame for *key* with the mode at *mode_index* selected.

        Raises:
            ValueError: If *mode_index* is out of range under *options*.
        """
        return cls(
            key=key,
            modes=options.modes(),
            mode_index=mode_index,
            released=not options.release,
            ignore_fault=options.ignore_fault,
        )

    @property
    def mode(self) -> Mode:
        """The mode in force for the current execution."""
        return self.modes[self.mode_index]

    def next_mode(self) -> bool:
        """
        Select the next legal mode.

        Returns:
            False when the modes are exhausted; the index is then left
            one past the end and the frame must be discarded.
        """
        self.mode_index += 1
        return self.mode_index < len(self.modes)
