"""
Reference solutions for the example scenarios.

Every scenario comes with a naive solution (the obvious code, which
mishandles at least one error path) and a correct one. The naive
solutions are dares: they are expected to fail.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from errsim.core.enumerator import Scenario
from errsim.core.outcome import SimError, SimulatedAbort
from errsim.core.tokens import Keyed
from errsim.scenarios import pipe_convert, storage_copy, wrapped_writer
from errsim.scenarios.pipe_convert import PipeConvert
from errsim.scenarios.storage_copy import StorageCopy
from errsim.scenarios.wrapped_writer import WrappedWriter


# ---------------------------------------------------------------------- #
# Storage copy
# ---------------------------------------------------------------------- #


def storage_copy_naive(task: StorageCopy) -> Optional[SimError]:
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


def storage_copy_correct(task: StorageCopy) -> Optional[SimError]:
    client, err = task.new_client()
    if err is not None:
        return err
    try:
        reader, err = task.new_reader()
        if err is not None:
            return err
        try:
            err = _copy(task, client, reader)
        finally:
            close_err = reader.close()
        return err if err is not None else close_err
    finally:
        # The client's close error may be dropped.
        client.close()


def _copy(task: StorageCopy, client: Keyed, reader: Keyed) -> Optional[SimError]:
    writer = task.new_writer(client)
    try:
        _, err = task.copy(writer, reader)
    except SimulatedAbort as abort:
        writer.close_with_error(abort.error)
        raise
    writer.close_with_error(err)
    return err


# ---------------------------------------------------------------------- #
# Pipe conversion
# ---------------------------------------------------------------------- #


def pipe_convert_naive(task: PipeConvert, reader: Keyed) -> Optional[SimError]:
    pipe_reader, pipe_writer = task.pipe()

    def produce() -> None:
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


def pipe_convert_correct(task: PipeConvert, reader: Keyed) -> Optional[SimError]:
    pipe_reader, pipe_writer = task.pipe()

    def produce() -> None:
        err = None
        try:
            scanner = task.new_scanner(reader)
            while task.scan(scanner):
                err = task.write_scanned(pipe_writer, scanner)
                if err is not None:
                    break
            else:
                err = task.scan_err(scanner)
        except SimulatedAbort as abort:
            # Hand the abort to the waiting side instead of re-raising in
            # a thread nobody joins.
            err = abort.error
        pipe_writer.close_with_error(err)

    task.go(produce)
    return task.wait(pipe_reader)


# ---------------------------------------------------------------------- #
# Wrapped writer
# ---------------------------------------------------------------------- #


def wrapped_writer_naive(task: WrappedWriter) -> Optional[SimError]:
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


def wrapped_writer_correct(task: WrappedWriter) -> Optional[SimError]:
    """
    Requires the relaxed policy: when the wrapper's close aborts while
    an earlier abort is unwinding, the writer is closed with the newer
    abort.
    """
    writer, err = task.new_writer()
    if err is not None:
        return err
    try:
        err = _write_wrapped(task, writer)
    except SimulatedAbort as abort:
        writer.close_with_error(abort.error)
        raise
    close_err = writer.close_with_error(err)
    return err if err is not None else close_err


def _write_wrapped(task: WrappedWriter, writer: Keyed) -> Optional[SimError]:
    wrapper, err = task.new_wrapper(writer)
    if err is not None:
        return err
    try:
        err = task.write_something(wrapper)
    finally:
        close_err = wrapper.close()
    return err if err is not None else close_err


# ---------------------------------------------------------------------- #
# Catalog
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class Dare:
    """
    A scenario together with its reference solutions.

    Attributes:
        name: Command-line name.
        description: One-line summary.
        bind: Turns a solution into a runnable scenario.
        naive: Solution expected to fail.
        correct: Solution expected to pass.
    """

    name: str
    description: str
    bind: Callable[[Callable], Scenario]
    naive: Callable
    correct: Callable

    def solution(self, which: str) -> Scenario:
        """Return the ``naive`` or ``correct`` solution bound as a scenario."""
        if which not in ("naive", "correct"):
            raise ValueError(f"Unknown solution '{which}'")
        return self.bind(getattr(self, which))


CATALOG: Dict[str, Dare] = {
    dare.name: dare
    for dare in (
        Dare(
            "storage-copy",
            "copy a reader into a writer opened on a client",
            storage_copy.scenario,
            storage_copy_naive,
            storage_copy_correct,
        ),
        Dare(
            "pipe-convert",
            "scan a reader into a pipe from a producer thread",
            pipe_convert.scenario,
            pipe_convert_naive,
            pipe_convert_correct,
        ),
        Dare(
            "wrapped-writer",
            "write through a wrapper and close both writers",
            wrapped_writer.scenario,
            wrapped_writer_naive,
            wrapped_writer_correct,
        ),
    )
}


def get_dare(name: str) -> Dare:
    """
    Look up a scenario by command-line name.

    Raises:
        ValueError: If no scenario has that name.
    """
    try:
        return CATALOG[name]
    except KeyError:
        raise ValueError(
            f"Unknown scenario '{name}' (choose from {', '.join(sorted(CATALOG))})"
        ) from None
