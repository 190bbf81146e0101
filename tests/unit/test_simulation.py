"""
Tests for the acquire/release protocol checker.

Tests cover outcome selection, ledger updates, release ordering,
release error checks, token checks, and violation reporting within a
single execution.
"""

from io import StringIO

import pytest

from errsim.core.config import SKIP_ERRORS
from errsim.core.frame import Frame, Options
from errsim.core.outcome import Mode, SimError, SimulatedAbort
from errsim.core.simulation import ExecutionSkipped, Simulation, Violation
from errsim.core.tokens import Token
from errsim.utils.logger import LogLevel, SimulationLogger


def _force(sim: Simulation, key: str, mode: Mode, **options: bool) -> None:
    """Pre-record a frame so the next execution selects *mode* for *key*."""
    opts = Options(**options)
    sim.history.push(Frame.from_options(key, opts, opts.modes().index(mode)))


# ---------------------------------------------------------------------------
# Tests: Acquire
# ---------------------------------------------------------------------------


class TestAcquire:
    """Test acquire outcomes."""

    def test_first_execution_succeeds(self, sim: Simulation) -> None:
        assert sim.acquire("reader") is None
        assert sim.ledger.value is None
        assert [f.key for f in sim.history.unreleased()] == ["reader"]

    def test_no_release_frame_starts_released(self, sim: Simulation) -> None:
        sim.acquire("copy", release=False)
        assert sim.history.unreleased() == []

    def test_fault_recorded(self, sim: Simulation) -> None:
        _force(sim, "reader", Mode.FAULT)
        sim.begin(1)
        err = sim.acquire("reader")
        assert err == SimError("reader", Mode.FAULT)
        assert sim.ledger.value == err
        assert sim.history.unreleased() == []

    def test_ignored_fault_not_recorded(self, sim: Simulation) -> None:
        _force(sim, "reader", Mode.FAULT)
        sim.begin(1)
        err = sim.acquire("reader", ignore_fault=True)
        assert err == SimError("reader", Mode.FAULT)
        assert sim.ledger.value is None

    def test_abort_raises(self, sim: Simulation) -> None:
        _force(sim, "reader", Mode.ABORT)
        sim.begin(1)
        with pytest.raises(SimulatedAbort) as info:
            sim.acquire("reader")
        assert info.value.error == SimError("reader", Mode.ABORT)
        assert sim.ledger.holds_abort

    def test_duplicate_key(self, soft_sim: Simulation) -> None:
        soft_sim.acquire("reader", release=False)
        with pytest.raises(ExecutionSkipped):
            soft_sim.acquire("reader")
        assert soft_sim.violations[0].message == "statement 'reader' was already executed"

    def test_non_deterministic_key(self, soft_sim: Simulation) -> None:
        _force(soft_sim, "reader", Mode.FAULT)
        soft_sim.begin(1)
        with pytest.raises(ExecutionSkipped):
            soft_sim.acquire("writer")
        assert str(soft_sim.violations[0]) == (
            "1:non-deterministic simulation at 'writer' (expected 'reader')"
        )

    def test_changed_options_keep_index(self, sim: Simulation) -> None:
        """The mode index carries over; the new options decide its mode."""
        _force(sim, "reader", Mode.FAULT)
        sim.begin(1)
        with pytest.raises(SimulatedAbort) as info:
            sim.acquire("reader", fault=False)
        assert info.value.error == SimError("reader", Mode.ABORT)
        assert sim.violations == []
        assert sim.history.path()[0].mode is Mode.ABORT

    def test_changed_options_index_out_of_range(self, soft_sim: Simulation) -> None:
        _force(soft_sim, "reader", Mode.ABORT)
        soft_sim.begin(1)
        with pytest.raises(ExecutionSkipped):
            soft_sim.acquire("reader", fault=False, abort=False)
        assert soft_sim.violations[0].message == (
            "non-deterministic options at 'reader': mode 2 of 1 modes"
        )

    def test_pinned_mode_selected_by_mode(self, sim: Simulation) -> None:
        sim.history.push(Frame("reader", (Mode.ABORT,), pinned=True))
        sim.begin(1)
        with pytest.raises(SimulatedAbort):
            sim.acquire("reader", fault=False)
        assert sim.history.reached()[0].mode_index == 1
        assert not sim.history.reached()[0].pinned

    def test_pinned_mode_not_allowed(self, soft_sim: Simulation) -> None:
        soft_sim.history.push(Frame("reader", (Mode.FAULT,), pinned=True))
        soft_sim.begin(1)
        with pytest.raises(ExecutionSkipped):
            soft_sim.acquire("reader", fault=False)
        assert soft_sim.violations[0].message == (
            "replayed mode Fault is not allowed at 'reader'"
        )


# ---------------------------------------------------------------------------
# Tests: Release
# ---------------------------------------------------------------------------


class TestRelease:
    """Test release ordering and error checks."""

    def test_release_in_order(self, sim: Simulation) -> None:
        sim.acquire("a")
        sim.acquire("b")
        assert sim.release("b") is None
        assert sim.release("a") is None
        assert sim.history.unreleased() == []
        keys = [f.key for f in sim.history.reached()]
        assert keys == ["a", "b", "b.close", "a.close"]

    def test_release_out_of_order(self, soft_sim: Simulation) -> None:
        soft_sim.acquire("a")
        soft_sim.acquire("b")
        with pytest.raises(ExecutionSkipped):
            soft_sim.release("a")
        assert soft_sim.violations[0].message == "'a' released out of order (expected 'b')"

    def test_double_release(self, soft_sim: Simulation) -> None:
        soft_sim.acquire("a")
        soft_sim.release("a")
        with pytest.raises(ExecutionSkipped):
            soft_sim.release("a")
        assert soft_sim.violations[0].message == (
            "'a' was already released or should not be released"
        )

    def test_release_of_non_releasable(self, soft_sim: Simulation) -> None:
        soft_sim.acquire("copy", release=False)
        with pytest.raises(ExecutionSkipped):
            soft_sim.release("copy")
        assert "should not be released" in soft_sim.violations[0].message

    def test_unmatched_release(self, soft_sim: Simulation) -> None:
        with pytest.raises(ExecutionSkipped):
            soft_sim.release("ghost")
        assert soft_sim.violations[0].message == "unmatched release 'ghost'"

    def test_release_with_wrong_error(self, soft_sim: Simulation) -> None:
        soft_sim.acquire("a")
        with pytest.raises(ExecutionSkipped):
            soft_sim.release_with_error("a", SimError("b", Mode.FAULT))
        assert soft_sim.violations[0].message == (
            "release of 'a' with wrong error: got b: Fault; want None"
        )

    def test_release_fault_recorded(self, sim: Simulation) -> None:
        sim.acquire("a")
        _force(sim, "a.close", Mode.FAULT, release=False)
        sim.begin(1)
        sim.acquire("a")
        err = sim.release("a")
        assert err == SimError("a.close", Mode.FAULT)
        assert sim.ledger.value == err

    def test_release_options(self, sim: Simulation) -> None:
        sim.acquire("a")
        sim.release("a", fault=False, abort=False)
        assert sim.history.reached()[-1].modes == (Mode.NO_FAULT,)


# ---------------------------------------------------------------------------
# Tests: Tokens and reporting
# ---------------------------------------------------------------------------


class TestRequire:
    """Test token identity checks."""

    def test_matching_token(self, sim: Simulation) -> None:
        sim.require(Token(sim, "reader"), "reader")
        assert sim.violations == []

    def test_wrong_token(self, soft_sim: Simulation) -> None:
        with pytest.raises(ExecutionSkipped):
            soft_sim.require(Token(soft_sim, "writer"), "reader")
        assert soft_sim.violations[0].message == "expected token 'reader', got 'writer'"

    def test_not_a_token(self, soft_sim: Simulation) -> None:
        with pytest.raises(ExecutionSkipped):
            soft_sim.require(object(), "reader")
        assert soft_sim.violations[0].message == "expected token 'reader', got 'None'"


class TestReport:
    """Test violation records and logging."""

    def test_violation_str(self) -> None:
        assert str(Violation(3, "boom")) == "3:boom"

    def test_report_records_path(self, soft_sim: Simulation) -> None:
        soft_sim.acquire("a")
        violation = soft_sim.report("custom", "a")
        assert violation.path == "a=NoFault"
        assert soft_sim.violations == [violation]

    def test_report_logs(self) -> None:
        buf = StringIO()
        sim = Simulation(SKIP_ERRORS, SimulationLogger(LogLevel.NORMAL, buf))
        sim.begin(2)
        sim.report("custom")
        assert buf.getvalue() == "[SKIP] #2: custom\n"

    def test_execution_skipped_is_not_exception(self) -> None:
        assert not issubclass(ExecutionSkipped, Exception)

    def test_begin_resets_ledger(self, sim: Simulation) -> None:
        _force(sim, "a", Mode.FAULT)
        sim.begin(1)
        sim.acquire("a")
        sim.begin(2)
        assert sim.ledger.value is None
        assert sim.history.position == 0
