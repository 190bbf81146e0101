"""
Pipe conversion scenario.

Given a reader, wrap it in a scanner in a producer thread and write the
result of every scan into a newly created pipe. The main thread passes
the pipe's reader to ``wait`` and returns what it reports. The pipe's
writer must be closed with ``close_with_error`` and a non-None error
whenever anything failed, including an abort inside the producer.

An almost correct solution::

    def solution(task, reader):
        pipe_reader, pipe_writer = task.pipe()

        def produce():
            err = None
            try:
                scanner = task.new_scanner(reader)
                while task.scan(scanner):
                    err = task.write_scanned(pipe_writer, scanner)
                    if err is not None:
                        return
                err = task.scan_err(scanner)
            finally:
                pipe_writer.close_with_error(err)

        task.go(produce)
        return task.wait(pipe_reader)
"""

from __future__ import annotations

import queue
import threading
from typing import Callable, Optional, Tuple

from errsim.core.config import Config
from errsim.core.enumerator import RunResult, Scenario, run
from errsim.core.outcome import SimError
from errsim.core.simulation import ExecutionSkipped, Simulation
from errsim.core.tokens import Closer, ErrorCloser, Keyed, Token
from errsim.scenarios.common import call, open_value, perform
from errsim.utils.logger import SimulationLogger

# Put by a producer thread that ends without closing the pipe.
_ABANDONED = object()


class _PipeWriter:
    """Writer end of the pipe; closing it hands the error to ``wait``."""

    key = "pipeWriter"

    def __init__(self, task: PipeConvert) -> None:
        self._task = task

    def close(self) -> Optional[SimError]:
        sim = self._task.simulation
        self._task.done.put(sim.release(self.key, fault=False, abort=False))
        return None

    def close_with_error(self, error: Optional[SimError]) -> Optional[SimError]:
        sim = self._task.simulation
        sim.release_with_error(self.key, error, fault=False, abort=False)
        self._task.done.put(error)
        return None


class PipeConvert:
    """
    Operations available to a pipe conversion solution.

    Attributes:
        simulation: The simulation of the current execution.
        done: Carries the producer's error to ``wait``.
        wait_timeout: Seconds ``wait`` blocks before closing the reader
            itself.
    """

    wait_timeout = 1.0

    def __init__(self, sim: Simulation) -> None:
        self.simulation = sim
        self.done: queue.Queue = queue.Queue()
        self._did_scan = False

    def pipe(self) -> Tuple[Closer, ErrorCloser]:
        """
        Return the two ends of a pipe. The writer must be closed when the
        producer finishes; the reader must be passed to ``wait``.
        """
        reader = open_value(self.simulation, "pipeReader")
        open_value(self.simulation, "pipeWriter")
        return reader, _PipeWriter(self)

    def go(self, target: Callable[[], None]) -> threading.Thread:
        """
        Run *target* in a producer thread.

        A protocol violation inside the producer has already been
        recorded; it only ends the thread. ``wait`` is woken either way.
        """
        def produce() -> None:
            try:
                target()
            except ExecutionSkipped:
                pass
            finally:
                self.done.put(_ABANDONED)

        thread = threading.Thread(target=produce, name="errsim-producer", daemon=True)
        thread.start()
        return thread

    def wait(self, reader: Closer) -> Optional[SimError]:
        """Wait for the producer to close the pipe and return its error."""
        self.simulation.require(reader, "pipeReader")
        try:
            result = self.done.get(timeout=self.wait_timeout)
        except queue.Empty:
            result = _ABANDONED
        if result is _ABANDONED:
            return reader.close()
        return result

    def new_scanner(self, reader: Keyed) -> Keyed:
        """Return a scanner reading from the reader passed to the solution."""
        self.simulation.require(reader, "reader")
        perform(self.simulation, "scanner")
        return Token(self.simulation, "scanner")

    def scan(self, scanner: Keyed) -> bool:
        """Advance the scanner; call until it returns False."""
        self.simulation.require(scanner, "scanner")
        if self._did_scan:
            return False
        perform(self.simulation, "scan")
        self._did_scan = True
        return True

    def write_scanned(self, writer: Keyed, scanner: Keyed) -> Optional[SimError]:
        """Write the current scan to *writer*; call after every successful scan."""
        self.simulation.require(writer, "pipeWriter")
        self.simulation.require(scanner, "scanner")
        return call(self.simulation, "writeScanned")

    def scan_err(self, scanner: Keyed) -> Optional[SimError]:
        """Report the scanner's error; call after the last scan."""
        self.simulation.require(scanner, "scanner")
        return call(self.simulation, "scanErr")


Solution = Callable[[PipeConvert, Keyed], Optional[SimError]]


def scenario(solution: Solution) -> Scenario:
    """Bind *solution* to a fresh task and input reader on every execution."""
    def execute(sim: Simulation) -> Optional[SimError]:
        task = PipeConvert(sim)
        reader = open_value(sim, "reader", release=False)
        return solution(task, reader)
    return execute


def run_pipe_convert(
    config: Config,
    solution: Solution,
    logger: Optional[SimulationLogger] = None,
) -> RunResult:
    """Enumerate every execution of *solution*."""
    return run(config, scenario(solution), logger)
