"""
Helpers shared by the example scenarios.

Each helper is one acquire shape: a releasable resource that may fail,
one that cannot fail, a fallible call with nothing to release, and an
infallible call with nothing to release. All of them may still abort.
"""

from __future__ import annotations

from typing import Optional, Tuple

from errsim.core.outcome import SimError
from errsim.core.simulation import Simulation
from errsim.core.tokens import Token


def open_token(sim: Simulation, key: str, **options: bool) -> Tuple[Token, Optional[SimError]]:
    """Acquire a resource that may fault and must be released."""
    err = sim.acquire(key, **options)
    return Token(sim, key), err


def open_value(sim: Simulation, key: str, **options: bool) -> Token:
    """Acquire a resource that cannot fault and must be released."""
    sim.acquire(key, **{**options, "fault": False})
    return Token(sim, key)


def call(sim: Simulation, key: str, **options: bool) -> Optional[SimError]:
    """Perform a fallible operation that leaves nothing to release."""
    return sim.acquire(key, **{**options, "release": False})


def perform(sim: Simulation, key: str, **options: bool) -> None:
    """Perform an infallible operation that leaves nothing to release."""
    sim.acquire(key, **{**options, "fault": False, "release": False})
