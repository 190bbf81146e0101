"""
Outcome taxonomy for simulated operations.

Every simulated operation either succeeds, returns a synthetic fault,
or raises a synthetic abort. Faults travel as ordinary return values;
aborts unwind the stack as ``SimulatedAbort`` exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Mode(Enum):
    """
    What a simulated operation does in one execution.

    NO_FAULT: The operation succeeds.
    FAULT:    The operation returns a synthetic error value.
    ABORT:    The operation raises a synthetic abort.
    """

    NO_FAULT = 0
    FAULT = 1
    ABORT = 2

    def __str__(self) -> str:
        return _MODE_NAMES[self]

    @classmethod
    def parse(cls, name: str) -> Mode:
        """
        Look up a mode by its display name or a historic alias.

        Args:
            name: Case-insensitive mode name (``NoFault``, ``Fault``,
                ``Abort``, or ``ok``/``noerror``, ``error``, ``panic``).

        Returns:
            The matching Mode.

        Raises:
            ValueError: If the name is unknown.
        """
        try:
            return _MODE_ALIASES[name.lower()]
        except KeyError:
            raise ValueError(f"Unknown mode '{name}'") from None


_MODE_NAMES = {
    Mode.NO_FAULT: "NoFault",
    Mode.FAULT: "Fault",
    Mode.ABORT: "Abort",
}

_MODE_ALIASES = {
    "nofault": Mode.NO_FAULT,
    "noerror": Mode.NO_FAULT,
    "ok": Mode.NO_FAULT,
    "fault": Mode.FAULT,
    "error": Mode.FAULT,
    "abort": Mode.ABORT,
    "panic": Mode.ABORT,
}


@dataclass(frozen=True)
class SimError:
    """
    Synthetic error tagged with the operation that produced it.

    Two errors are equal when both key and mode are equal, which is
    what the ledger and the release checks compare.

    Attributes:
        key: Key of the operation that failed.
        mode: FAULT or ABORT.
    """

    key: str
    mode: Mode

    def __str__(self) -> str:
        return f"{self.key}: {self.mode}"

    @property
    def is_abort(self) -> bool:
        """True if this error belongs to the abort channel."""
        return self.mode is Mode.ABORT


# Tag for foreign exceptions accepted under the relaxed policy.
USER_ABORT = SimError("user", Mode.ABORT)


def is_abort(error: object) -> bool:
    """True if *error* is an abort-class SimError."""
    return isinstance(error, SimError) and error.is_abort


class SimulatedAbort(Exception):
    """Synthetic abort raised by an operation whose mode is ABORT."""

    def __init__(self, error: SimError) -> None:
        super().__init__(str(error))
        self.error: SimError = error
