"""
Acquired-resource tokens and their capability views.

A scenario receives one token type for every simulated resource. What a
caller may do with it is expressed by the protocol the producing call
site declares: a token may be merely keyed, closeable, closeable with
an error, or abortable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional, Protocol

from errsim.core.outcome import SimError

if TYPE_CHECKING:
    from errsim.core.simulation import Simulation


class Keyed(Protocol):
    """Anything identified by an operation key."""

    @property
    def key(self) -> str: ...


class Closer(Keyed, Protocol):
    """A resource released with the error currently expected."""

    def close(self) -> Optional[SimError]: ...


class ErrorCloser(Closer, Protocol):
    """A resource that may also be released with an explicit error."""

    def close_with_error(self, error: Optional[SimError]) -> Optional[SimError]: ...


class Aborter(Closer, Protocol):
    """A resource that can be abandoned with an error."""

    def abort(self, error: Optional[SimError]) -> None: ...


@dataclass
class Token:
    """
    Handle for a simulated resource.

    Attributes:
        simulation: The simulation the resource was acquired from.
        key: Operation key of the acquire.
        release_options: Keyword options passed to every release of
            this token (``fault``, ``abort``, ``ignore_fault``).
    """

    simulation: Simulation
    key: str
    release_options: Dict[str, bool] = field(default_factory=dict)

    def close(self) -> Optional[SimError]:
        return self.simulation.release(self.key, **self.release_options)

    def close_with_error(self, error: Optional[SimError]) -> Optional[SimError]:
        return self.simulation.release_with_error(self.key, error, **self.release_options)

    def abort(self, error: Optional[SimError]) -> None:
        # Abandoning releases like close; the error is not checked.
        self.simulation.release(self.key, **self.release_options)
