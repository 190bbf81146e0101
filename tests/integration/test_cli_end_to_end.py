"""
End-to-end tests for the errsim CLI.

Invokes ``python -m errsim`` as a subprocess and checks exit codes,
verdict output, replay, visualization and statistics flags.
"""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import errsim

ROOT = Path(__file__).parent.parent.parent


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _run_cli(*args: str, timeout: int = 60) -> subprocess.CompletedProcess[str]:
    """Invoke the errsim CLI via ``python -m errsim`` and return the result."""
    cmd = [sys.executable, "-m", "errsim", *args]
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        timeout=timeout,
        cwd=str(ROOT),
    )


# ---------------------------------------------------------------------------
# Tests: Exit Codes
# ---------------------------------------------------------------------------


class TestExitCodes:
    """Test exit codes for passing, failing and invalid runs."""

    def test_correct_solution_passes(self) -> None:
        result = _run_cli("storage-copy")
        assert result.returncode == 0
        assert result.stdout.startswith("PASSED:")

    def test_pipe_convert_passes(self) -> None:
        result = _run_cli("pipe-convert")
        assert result.returncode == 0
        assert "PASSED:" in result.stdout

    def test_naive_solution_fails_softly(self) -> None:
        result = _run_cli("storage-copy", "--solution", "naive")
        assert result.returncode == 0
        assert "[SKIP]" in result.stdout
        assert "FAILED:" in result.stdout

    def test_dare_fails_hard(self) -> None:
        result = _run_cli("wrapped-writer", "--solution", "naive", "--dare")
        assert result.returncode == 1
        assert "[FAIL]" in result.stdout
        assert "Protocol violation" in result.stderr

    def test_abort_order_breaks_wrapped_writer(self) -> None:
        result = _run_cli("wrapped-writer", "--abort-order")
        assert result.returncode == 1
        assert "wrong error" in result.stderr

    def test_unknown_scenario(self) -> None:
        result = _run_cli("no-such-scenario")
        assert result.returncode == 2

    def test_bad_replay_path(self) -> None:
        result = _run_cli("storage-copy", "--replay", "client=maybe")
        assert result.returncode == 2
        assert result.stderr.startswith("Error: Unknown mode 'maybe'")

    def test_version(self) -> None:
        result = _run_cli("--version")
        assert result.returncode == 0
        assert result.stdout.strip() == f"errsim {errsim.__version__}"


# ---------------------------------------------------------------------------
# Tests: Output
# ---------------------------------------------------------------------------


class TestOutput:
    """Test output levels, replay, statistics and visualization."""

    def test_silent(self) -> None:
        result = _run_cli("storage-copy", "-o", "silent")
        assert result.returncode == 0
        assert result.stdout == ""

    def test_replay_single_path(self) -> None:
        result = _run_cli("storage-copy", "--replay", "client=Fault")
        assert result.returncode == 0
        assert result.stdout.strip() == "PASSED: 1 executions, no violations"

    def test_verbose_lists_executions(self) -> None:
        result = _run_cli("wrapped-writer", "-o", "verbose")
        assert "[EXEC] #0: writer=NoFault" in result.stdout
        assert "=== Statistics ===" in result.stdout

    def test_debug_lists_operations(self) -> None:
        result = _run_cli("wrapped-writer", "-d", "3", "--replay", "writer=Fault")
        assert "[DEBUG] acquire writer -> Fault" in result.stdout

    def test_stats(self) -> None:
        result = _run_cli("storage-copy", "--stats")
        assert "=== Statistics ===" in result.stdout
        assert "  Executions:" in result.stdout
        assert "  Max Depth:" in result.stdout

    def test_visualize_ascii(self) -> None:
        result = _run_cli("wrapped-writer", "--visualize-ascii")
        assert "=== Execution Tree ===" in result.stdout

    def test_visualize_stdout(self) -> None:
        result = _run_cli("wrapped-writer", "--visualize")
        assert "digraph ExecutionTree {" in result.stdout

    def test_visualize_dot_file(self, tmp_path: Path) -> None:
        out = tmp_path / "tree.dot"
        result = _run_cli("storage-copy", "--visualize", str(out))
        assert result.returncode == 0
        assert out.read_text().startswith("digraph ExecutionTree {")

    def test_visualize_json_file(self, tmp_path: Path) -> None:
        out = tmp_path / "tree.json"
        _run_cli("storage-copy", "-s", "naive", "--visualize", str(out))
        data = json.loads(out.read_text())
        assert data["failed"]
