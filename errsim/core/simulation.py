"""
Acquire/release protocol checker.

A Simulation is handed to the scenario on every execution. Each acquire
and release the scenario performs is routed through it: the checker
aligns the call with the history, selects the simulated outcome,
updates the outcome ledger, and verifies that resources are released
last-acquired-first with the error the ledger expects.

Protocol violations are recorded and then unwind the rest of the
execution with ``ExecutionSkipped``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, NoReturn, Optional

from errsim.core.config import Config
from errsim.core.frame import Frame, Options
from errsim.core.history import History, format_path
from errsim.core.ledger import OutcomeLedger
from errsim.core.outcome import Mode, SimError, SimulatedAbort
from errsim.utils.logger import LogLevel, SimulationLogger

# Suffix of the synthetic operation performed by every release.
RELEASE_SUFFIX = ".close"


class ExecutionSkipped(BaseException):
    """
    Unwinds the current execution after a protocol violation.

    Derives from BaseException so that scenario code catching
    ``Exception`` does not swallow it; ``finally`` blocks still run.
    """


@dataclass(frozen=True)
class Violation:
    """
    A protocol violation detected during one execution.

    Attributes:
        execution: Zero-based index of the execution.
        message: Short diagnostic.
        key: Offending operation key, if any.
        path: Rendered path of the execution up to the violation.
    """

    execution: int
    message: str
    key: Optional[str] = None
    path: str = ""

    def __str__(self) -> str:
        return f"{self.execution}:{self.message}"


class Simulation:
    """
    Protocol checker shared by all executions of one run.

    The engine does no locking. A scenario that hands work to another
    thread must make sure only one thread touches the simulation at a
    time.

    Attributes:
        config: Strictness policy.
        history: Frames recorded so far.
        ledger: Error the current execution must return.
        execution: Index of the current execution.
        violations: Every violation recorded during the run.
    """

    def __init__(
        self,
        config: Config,
        logger: Optional[SimulationLogger] = None,
        history: Optional[History] = None,
    ) -> None:
        self.config: Config = config
        self.logger: SimulationLogger = logger or SimulationLogger(LogLevel.SILENT)
        self.history: History = history if history is not None else History()
        self.ledger: OutcomeLedger = OutcomeLedger()
        self.execution: int = 0
        self.violations: List[Violation] = []

    def begin(self, execution: int) -> None:
        """Prepare for execution number *execution*."""
        self.execution = execution
        self.history.rewind()
        self.ledger.reset()

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def acquire(
        self,
        key: str,
        *,
        fault: bool = True,
        abort: bool = True,
        release: bool = True,
        ignore_fault: bool = False,
    ) -> Optional[SimError]:
        """
        Simulate acquiring the resource *key*.

        Args:
            key: Label unique within one execution.
            fault: Whether the acquire may return a fault.
            abort: Whether the acquire may abort.
            release: Whether a later release is required.
            ignore_fault: Keep a fault of this call out of the ledger.

        Returns:
            None on success, or the tagged fault.

        Raises:
            SimulatedAbort: If the selected mode is ABORT.
        """
        options = Options(fault=fault, abort=abort, release=release, ignore_fault=ignore_fault)
        return self._open(key, options, "acquire")

    def release(
        self,
        key: str,
        *,
        fault: bool = True,
        abort: bool = True,
        ignore_fault: bool = False,
    ) -> Optional[SimError]:
        """Release *key* with the error currently held by the ledger."""
        return self.release_with_error(
            key, self.ledger.value, fault=fault, abort=abort, ignore_fault=ignore_fault
        )

    def release_with_error(
        self,
        key: str,
        error: Optional[SimError],
        *,
        fault: bool = True,
        abort: bool = True,
        ignore_fault: bool = False,
    ) -> Optional[SimError]:
        """
        Release *key*, reporting *error* as the reason.

        The most recently acquired unreleased resource must be *key*,
        and *error* must match the ledger. The release itself is then
        simulated as operation ``<key>.close``, which may fault or
        abort like any acquire.

        Returns:
            None on success, or the tagged fault of the release.

        Raises:
            SimulatedAbort: If the release itself aborts.
        """
        options = Options(fault=fault, abort=abort, release=False, ignore_fault=ignore_fault)
        for frame in reversed(self.history.reached()):
            if not frame.released:
                frame.released = True
                if frame.key != key:
                    self.fatal(f"'{key}' released out of order (expected '{frame.key}')", key)
                if not self.ledger.accepts_release(error, self.config.ignore_abort_order):
                    self.fatal(
                        f"release of '{key}' with wrong error: "
                        f"got {error}; want {self.ledger.value}",
                        key,
                    )
                return self._open(key + RELEASE_SUFFIX, options, "release")
            if frame.key == key:
                self.fatal(f"'{key}' was already released or should not be released", key)
        self.fatal(f"unmatched release '{key}'", key)

    def require(self, token: object, key: str) -> None:
        """Check that the scenario passed the token acquired as *key*."""
        actual = getattr(token, "key", None)
        if actual != key:
            self.fatal(f"expected token '{key}', got '{actual}'", key)

    # ------------------------------------------------------------------ #
    # Violations
    # ------------------------------------------------------------------ #

    def report(self, message: str, key: Optional[str] = None) -> Violation:
        """Record a violation without interrupting the caller."""
        violation = Violation(
            execution=self.execution,
            message=message,
            key=key,
            path=format_path(self.history.path()),
        )
        self.violations.append(violation)
        self.logger.violation(
            violation.execution,
            violation.message,
            fatal=not self.config.skip_errors,
            path=violation.path,
        )
        return violation

    def fatal(self, message: str, key: Optional[str] = None) -> NoReturn:
        """Record a violation and abandon the rest of the execution."""
        self.report(message, key)
        raise ExecutionSkipped(message)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _open(self, key: str, options: Options, kind: str) -> Optional[SimError]:
        """Align *key* with the history and apply the selected mode."""
        history = self.history
        modes = options.modes()
        index = 0
        if history.replaying():
            previous = history.expected()
            if previous.key != key:
                self.fatal(
                    f"non-deterministic simulation at '{key}' (expected '{previous.key}')",
                    key,
                )
            if previous.pinned:
                if previous.mode not in modes:
                    self.fatal(f"replayed mode {previous.mode} is not allowed at '{key}'", key)
                index = modes.index(previous.mode)
            else:
                # Options may change between executions; the index carries over.
                index = previous.mode_index
                if index >= len(modes):
                    self.fatal(
                        f"non-deterministic options at '{key}': "
                        f"mode {index} of {len(modes)} modes",
                        key,
                    )
        elif history.contains(key):
            self.fatal(f"statement '{key}' was already executed", key)

        frame = history.push(Frame.from_options(key, options, index))
        self.logger.operation(kind, key, frame.mode)

        if frame.mode is Mode.FAULT:
            frame.released = True
            if frame.ignore_fault:
                return SimError(key, Mode.FAULT)
            return self.ledger.record(key, Mode.FAULT)
        if frame.mode is Mode.ABORT:
            frame.released = True
            raise SimulatedAbort(self.ledger.record(key, Mode.ABORT))
        return None
