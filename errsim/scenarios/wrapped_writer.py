"""
Wrapped writer scenario.

Create a writer, wrap it, and write something through the wrapper. If
anything fails while wrapping or writing, the original writer must be
closed with ``close_with_error`` and that error. The wrapper's close
error must be observed, and the wrapper's close may itself abort.

A simple but incorrect solution::

    def solution(task):
        writer, err = task.new_writer()
        if err is not None:
            return err
        try:
            wrapper, err = task.new_wrapper(writer)
            if err is not None:
                return err
            try:
                err = task.write_something(wrapper)
                return err
            finally:
                wrapper.close()
        finally:
            writer.close_with_error(err)
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from errsim.core.config import Config
from errsim.core.enumerator import RunResult, Scenario, run
from errsim.core.outcome import SimError
from errsim.core.simulation import Simulation
from errsim.core.tokens import ErrorCloser, Keyed
from errsim.scenarios.common import call, open_token
from errsim.utils.logger import SimulationLogger


class WrappedWriter:
    """Operations available to a wrapped writer solution."""

    def __init__(self, sim: Simulation) -> None:
        self._sim = sim

    def new_writer(self) -> Tuple[ErrorCloser, Optional[SimError]]:
        """
        Return a writer. It must be closed with ``close_with_error`` and
        a non-None error if anything failed.
        """
        return open_token(self._sim, "writer")

    def new_wrapper(self, writer: Keyed) -> Tuple[ErrorCloser, Optional[SimError]]:
        """
        Wrap *writer*. The wrapper must be closed and the error of
        that close observed.
        """
        self._sim.require(writer, "writer")
        return open_token(self._sim, "wrapper")

    def write_something(self, wrapper: Keyed) -> Optional[SimError]:
        """Write through *wrapper*; may fail."""
        self._sim.require(wrapper, "wrapper")
        return call(self._sim, "writeSomething")


Solution = Callable[[WrappedWriter], Optional[SimError]]


def scenario(solution: Solution) -> Scenario:
    """Bind *solution* to a fresh task on every execution."""
    def execute(sim: Simulation) -> Optional[SimError]:
        return solution(WrappedWriter(sim))
    return execute


def run_wrapped_writer(
    config: Config,
    solution: Solution,
    logger: Optional[SimulationLogger] = None,
) -> RunResult:
    """Enumerate every execution of *solution*."""
    return run(config, scenario(solution), logger)
