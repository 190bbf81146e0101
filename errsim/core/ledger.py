"""
Outcome ledger: the error a scenario must eventually report.

The ledger keeps the most severe outcome observed among the operations
of one execution. An abort overrides an earlier fault; a fault never
overrides anything; the first abort stands.
"""

from __future__ import annotations

from typing import Optional

from errsim.core.outcome import Mode, SimError, is_abort


class OutcomeLedger:
    """
    Running record of the error the current execution must return.

    Attributes:
        value: The recorded error, or None while every operation has
            succeeded (or had its fault ignored).
    """

    __slots__ = ("_value",)

    def __init__(self) -> None:
        self._value: Optional[SimError] = None

    @property
    def value(self) -> Optional[SimError]:
        return self._value

    @property
    def holds_abort(self) -> bool:
        """True if an abort has been recorded in this execution."""
        return is_abort(self._value)

    def reset(self) -> None:
        """Forget everything; called at the start of every execution."""
        self._value = None

    def record(self, key: str, mode: Mode) -> SimError:
        """
        Record an outcome of operation *key*.

        Args:
            key: The operation key.
            mode: FAULT or ABORT.

        Returns:
            The tagged error for this outcome, whether or not it
            replaced the recorded value.
        """
        error = SimError(key, mode)
        if self._value is None:
            self._value = error
        elif error.is_abort and not self._value.is_abort:
            self._value = error
        return error

    def accepts_release(self, error: Optional[SimError], ignore_abort_order: bool) -> bool:
        """
        Check the error a resource is released with.

        The error must equal the recorded value. Under the relaxed
        policy any abort is accepted while an abort is recorded; fault
        mismatches are never tolerated.
        """
        if error == self._value:
            return True
        return ignore_abort_order and is_abort(error) and self.holds_abort

    def accepts_return(self, error: Optional[SimError]) -> bool:
        """
        Check the value returned by the scenario.

        Once an abort is recorded it has already short-circuited the
        normal return path, so any returned value is accepted.
        """
        return error == self._value or self.holds_abort
