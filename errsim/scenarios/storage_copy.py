"""
Storage copy scenario.

Open a client, a reader and a writer, and copy the contents of the
reader to the writer. Any error while copying must be passed to the
writer's ``close_with_error``; the reader's close error must be
reported when nothing else failed; the client's close error may be
dropped.

A simple but incorrect solution::

    def solution(task):
        client, err = task.new_client()
        if err is not None:
            return err
        try:
            reader, err = task.new_reader()
            if err is not None:
                return err
            try:
                writer = task.new_writer(client)
                try:
                    _, err = task.copy(writer, reader)
                    return err
                finally:
                    writer.close_with_error(err)
            finally:
                reader.close()
        finally:
            client.close()
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from errsim.core.config import Config
from errsim.core.enumerator import RunResult, Scenario, run
from errsim.core.outcome import SimError
from errsim.core.simulation import Simulation
from errsim.core.tokens import Closer, ErrorCloser, Keyed
from errsim.scenarios.common import call, open_token, open_value
from errsim.utils.logger import SimulationLogger


class StorageCopy:
    """Operations available to a storage copy solution."""

    def __init__(self, sim: Simulation) -> None:
        self._sim = sim

    def new_client(self) -> Tuple[Closer, Optional[SimError]]:
        """Return a client that must be closed; its close error may be ignored."""
        token, err = open_token(self._sim, "client")
        token.release_options["ignore_fault"] = True
        return token, err

    def new_reader(self) -> Tuple[Closer, Optional[SimError]]:
        """Return a reader. The caller must close it."""
        return open_token(self._sim, "reader")

    def new_writer(self, client: Keyed) -> ErrorCloser:
        """
        Return a writer on *client*. The caller must call
        ``close_with_error`` with a non-None error if anything failed.
        """
        self._sim.require(client, "client")
        token = open_value(self._sim, "writer")
        token.release_options["fault"] = False
        return token

    def copy(self, writer: Keyed, reader: Keyed) -> Tuple[int, Optional[SimError]]:
        """Copy *reader* to *writer* and report any error."""
        self._sim.require(reader, "reader")
        self._sim.require(writer, "writer")
        return 0, call(self._sim, "copy")


Solution = Callable[[StorageCopy], Optional[SimError]]


def scenario(solution: Solution) -> Scenario:
    """Bind *solution* to a fresh task on every execution."""
    def execute(sim: Simulation) -> Optional[SimError]:
        return solution(StorageCopy(sim))
    return execute


def run_storage_copy(
    config: Config,
    solution: Solution,
    logger: Optional[SimulationLogger] = None,
) -> RunResult:
    """Enumerate every execution of *solution*."""
    return run(config, scenario(solution), logger)
