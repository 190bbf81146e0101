"""
Shared pytest fixtures for the errsim test suite.

Provides reusable fixtures for simulations and temporary output paths
used across unit and integration tests.
"""

from pathlib import Path

import pytest

from errsim.core.config import DEFAULT, SKIP_ERRORS
from errsim.core.simulation import Simulation


@pytest.fixture
def sim() -> Simulation:
    """A hard-failing simulation positioned at its first execution."""
    simulation = Simulation(DEFAULT)
    simulation.begin(0)
    return simulation


@pytest.fixture
def soft_sim() -> Simulation:
    """A soft-failing simulation positioned at its first execution."""
    simulation = Simulation(SKIP_ERRORS)
    simulation.begin(0)
    return simulation


@pytest.fixture
def tmp_dot_file(tmp_path: Path) -> Path:
    """Path for a temporary DOT output file."""
    return tmp_path / "tree.dot"
