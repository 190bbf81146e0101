"""
Enumerator and harness for simulation runs.

Calls the scenario once per leaf of its execution tree, starting with
the all-success path and advancing the history odometer after every
execution. Each execution is wrapped by a harness that captures aborts
and checks the scenario's return value against the outcome ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from errsim.core.config import Config
from errsim.core.history import History, Path, Step, format_path
from errsim.core.outcome import SimError, SimulatedAbort, USER_ABORT
from errsim.core.simulation import ExecutionSkipped, Simulation, Violation
from errsim.parser.path import to_steps
from errsim.utils.logger import LogLevel, SimulationLogger

Scenario = Callable[[Simulation], Optional[SimError]]


class ProtocolViolation(AssertionError):
    """
    Raised under the hard-fail policy when an execution breaks the
    acquire/release protocol.

    Attributes:
        violations: The violations of the offending execution.
    """

    def __init__(self, violations: List[Violation]) -> None:
        self.violations: List[Violation] = list(violations)
        lines = [str(v) for v in self.violations]
        if self.violations and self.violations[0].path:
            lines.append(f"path: {self.violations[0].path}")
        super().__init__("\n".join(lines))


@dataclass
class RunResult:
    """
    Result of enumerating a scenario.

    Attributes:
        executions: Number of times the scenario was called.
        violations: Violations recorded over all executions.
        paths: Path taken by each execution, in order.
        statistics: Dictionary of run statistics.
    """

    executions: int
    violations: List[Violation]
    paths: List[Path] = field(default_factory=list)
    statistics: Dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        """True if no execution broke the protocol."""
        return not self.violations

    def messages(self) -> List[str]:
        """Violations rendered as ``<execution>:<message>``."""
        return [str(v) for v in self.violations]


class Enumerator:
    """
    Drives a scenario through every reachable combination of outcomes.

    Attributes:
        config: Strictness policy for every execution.
        logger: Logger for progress and violations.
    """

    def __init__(
        self,
        config: Config,
        logger: Optional[SimulationLogger] = None,
    ) -> None:
        """
        Initialize the enumerator.

        Args:
            config: Strictness policy.
            logger: Optional logger (silent by default).
        """
        self.config: Config = config
        self.logger: SimulationLogger = logger or SimulationLogger(LogLevel.SILENT)

    def run(self, scenario: Scenario) -> RunResult:
        """
        Execute *scenario* once for every leaf of its execution tree.

        Returns:
            RunResult with every violation (soft-fail policy) or no
            violations at all.

        Raises:
            ProtocolViolation: Under the hard-fail policy, after the
                first execution that breaks the protocol.
        """
        sim = Simulation(self.config, self.logger)
        paths: List[Path] = []
        while True:
            self._execute(sim, scenario, len(paths))
            paths.append(sim.history.path())
            if not sim.history.advance():
                break
        return self._finish(sim, paths)

    def replay(self, scenario: Scenario, path: Union[str, Iterable[Step]]) -> RunResult:
        """
        Execute *scenario* once, forcing the modes named by *path*.

        Positions past the end of the path take the success mode.

        Args:
            scenario: The scenario to run.
            path: A path string or parsed steps.
        """
        steps = to_steps(path)
        sim = Simulation(self.config, self.logger, History.seeded(steps))
        self.logger.info(f"Replaying path: {format_path(steps) or '(empty)'}")
        self._execute(sim, scenario, 0)
        return self._finish(sim, [sim.history.path()])

    def _execute(self, sim: Simulation, scenario: Scenario, index: int) -> None:
        """Run one execution and check its outcome against the ledger."""
        sim.begin(index)
        before = len(sim.violations)
        error: Optional[SimError] = None
        aborted = False
        try:
            error = scenario(sim)
        except ExecutionSkipped:
            pass
        except SimulatedAbort:
            aborted = True
        except Exception as exc:
            if not self.config.ignore_abort_order:
                raise
            self.logger.debug(f"Foreign exception treated as {USER_ABORT}: {exc!r}")
            error = USER_ABORT
            aborted = True

        self._check_outcome(sim, error, aborted)
        self.logger.execution(index, format_path(sim.history.path()))

        if len(sim.violations) > before and not self.config.skip_errors:
            raise ProtocolViolation(sim.violations[before:])

    def _check_outcome(self, sim: Simulation, error: Optional[SimError], aborted: bool) -> None:
        """Compare how the execution ended with what the ledger requires."""
        ledger = sim.ledger
        if aborted:
            if not ledger.holds_abort:
                sim.report("simulation aborted unexpectedly")
                return
            if self.config.require_release_on_abort:
                for frame in sim.history.unreleased():
                    sim.report(f"'{frame.key}' was not released after abort", frame.key)
            return
        if not ledger.accepts_return(error):
            sim.report(
                "simulation did not return the correct error: "
                f"got {error}; want {ledger.value}"
            )

    def _finish(self, sim: Simulation, paths: List[Path]) -> RunResult:
        """Assemble the result and log the verdict."""
        stats = {
            "executions": len(paths),
            "violations": len(sim.violations),
            "max_depth": max((len(p) for p in paths), default=0),
            "distinct_keys": len({step.key for p in paths for step in p}),
        }
        result = RunResult(
            executions=len(paths),
            violations=list(sim.violations),
            paths=paths,
            statistics=stats,
        )
        if result.passed:
            self.logger.verdict_passed(result.executions)
        else:
            self.logger.verdict_failed(result.executions, len(result.violations))
        self.logger.statistics(stats)
        return result


def run(
    config: Config,
    scenario: Scenario,
    logger: Optional[SimulationLogger] = None,
) -> RunResult:
    """Enumerate every execution of *scenario* under *config*."""
    return Enumerator(config, logger).run(scenario)


def replay(
    config: Config,
    scenario: Scenario,
    path: Union[str, Iterable[Step]],
    logger: Optional[SimulationLogger] = None,
) -> RunResult:
    """Execute the single path *path* of *scenario* under *config*."""
    return Enumerator(config, logger).replay(scenario, path)
