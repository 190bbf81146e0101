"""
Structured logging for simulation runs.

Provides configurable log levels (silent, normal, verbose, debug)
with consistent formatting for violations, per-execution paths,
verdicts and run statistics.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, Dict, Optional, TextIO


class LogLevel(Enum):
    """
    Logging levels for a simulation run.

    SILENT:  No output at all.
    NORMAL:  Violations and the final verdict.
    VERBOSE: Per-execution paths and statistics.
    DEBUG:   Every acquire and release.
    """

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class SimulationLogger:
    """
    Structured logger for the simulation engine.

    Output is filtered by the configured log level.

    Attributes:
        level: The minimum log level to display.
        stream: The output stream (defaults to stdout).
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        stream: TextIO = sys.stdout,
    ) -> None:
        """
        Initialize logger with level and output stream.

        Args:
            level: Minimum log level to display.
            stream: Output stream (default: sys.stdout).
        """
        self.level: LogLevel = level
        self.stream: TextIO = stream

    def debug(self, message: str, **kwargs: Any) -> None:
        """
        Log a debug message (only shown at DEBUG level).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.level.value >= LogLevel.DEBUG.value:
            self._write(f"[DEBUG] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log an info message (shown at VERBOSE and DEBUG levels).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.level.value >= LogLevel.VERBOSE.value:
            self._write(f"[INFO] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def operation(self, kind: str, key: str, mode: Any) -> None:
        """Log one acquire or release outcome at DEBUG level."""
        if self.level.value >= LogLevel.DEBUG.value:
            self._write(f"[DEBUG] {kind} {key} -> {mode}")

    def execution(self, index: int, path: str) -> None:
        """
        Log a finished execution and its path at VERBOSE level.

        Args:
            index: Zero-based execution index.
            path: Rendered path of the execution.
        """
        if self.level.value >= LogLevel.VERBOSE.value:
            self._write(f"[EXEC] #{index}: {path or '(empty)'}")

    def violation(self, execution: int, message: str, fatal: bool, path: Optional[str] = None) -> None:
        """
        Log a protocol violation (shown at NORMAL level and above).

        Args:
            execution: Execution the violation occurred in.
            message: Diagnostic text.
            fatal: True under the hard-fail policy, False when the
                execution is merely skipped.
            path: Rendered path up to the violation, if known.
        """
        if self.level.value >= LogLevel.NORMAL.value:
            tag = "[FAIL]" if fatal else "[SKIP]"
            self._write(f"{tag} #{execution}: {message}")
            if path and self.level.value >= LogLevel.VERBOSE.value:
                self._write(f"  path: {path}")

    def verdict_passed(self, executions: int) -> None:
        """Log a PASSED verdict (shown at NORMAL level and above)."""
        if self.level.value >= LogLevel.NORMAL.value:
            self._write(f"PASSED: {executions} executions, no violations")

    def verdict_failed(self, executions: int, violations: int) -> None:
        """Log a FAILED verdict (shown at NORMAL level and above)."""
        if self.level.value >= LogLevel.NORMAL.value:
            self._write(
                f"FAILED: {violations} violations in {executions} executions"
            )

    def statistics(self, stats: Dict[str, Any]) -> None:
        """
        Log run statistics (shown at VERBOSE level and above).

        Args:
            stats: Dictionary of statistic names to values.
        """
        if self.level.value >= LogLevel.VERBOSE.value:
            self._write("=== Statistics ===")
            for key, value in stats.items():
                label = key.replace("_", " ").title()
                self._write(f"  {label}: {value}")

    def _write(self, message: str) -> None:
        """Write a line to the output stream."""
        self.stream.write(message + "\n")
