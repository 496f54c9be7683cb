"""Helpers for running the optimization driver.

The driver runs a simple loop: the strategy engine samples a population,
infeasible candidates are redrawn until they fit the box, the objective is
evaluated on every candidate, and the fitnesses are fed back to the engine.
The loop ends when the engine reports termination; the engine's best-ever
point is the result.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import numpy as np

from cmaopt.core.errors import (
    InfeasibleStartError,
    InvalidDimensionError,
    InvalidInitialGuessError,
)
from cmaopt.core.results import OptimizationResults
from cmaopt.core.system import ObjectiveSystem
from cmaopt.engine.evaluation import EvaluationStage, ObjectiveEvaluator
from cmaopt.engine.executors.local import LocalExecutor
from cmaopt.engine.interfaces import Executor, SearchState, StrategyEngine
from cmaopt.engine.options import AdvancedOptions, OptionResolver
from cmaopt.engine.repair import FeasibilityRepairer
from cmaopt.engine.strategies.cmaes import CMAESEngine
from cmaopt.engine.types import GenerationStats, TerminationBudgets
from cmaopt.utils.logging import get_logger

_LOGGER = logging.getLogger(__name__)


class Diagnostics(Enum):
    """Where run diagnostics go.

    - ``QUIET``: nothing beyond debug logging
    - ``CONSOLE``: engine banner and termination reason at INFO level
    - ``FILE``: checkpoint and full history written to ``output_dir``
    - ``BOTH``: console and file
    """

    QUIET = "quiet"
    CONSOLE = "console"
    FILE = "file"
    BOTH = "both"

    @property
    def console(self) -> bool:
        return self in (Diagnostics.CONSOLE, Diagnostics.BOTH)

    @property
    def file(self) -> bool:
        return self in (Diagnostics.FILE, Diagnostics.BOTH)


@dataclass(frozen=True, slots=True)
class DriverConfig:
    """The driver's own settings.

    ``max_iterations``, ``convergence_tolerance``, ``max_evaluations`` and
    ``max_time_fraction`` are the default budgets handed to the strategy
    engine; advanced options override them per run.
    """

    max_iterations: int = 1000
    convergence_tolerance: float = 1e-11
    max_evaluations: int | None = None
    max_time_fraction: float | None = None
    diagnostics: Diagnostics = Diagnostics.QUIET
    output_dir: Path = field(default_factory=lambda: Path("."))
    checkpoint_name: str = "resumecmaes.pkl"
    history_name: str = "allcmaes.json"
    max_resample_attempts: int = 1000
    timeout_s: float | None = None

    def budgets(self) -> TerminationBudgets:
        return TerminationBudgets(
            max_iterations=self.max_iterations,
            max_evaluations=self.max_evaluations,
            function_tolerance=self.convergence_tolerance,
            max_time_fraction=self.max_time_fraction,
        )

    @property
    def checkpoint_path(self) -> Path:
        return Path(self.output_dir) / self.checkpoint_name

    @property
    def history_path(self) -> Path:
        return Path(self.output_dir) / self.history_name


@dataclass(frozen=True, slots=True)
class _Outcome:
    x: np.ndarray
    fitness: float
    termination: str
    resumed: bool
    options: AdvancedOptions
    engine_state: Mapping[str, object]


class OptimizationDriver:
    """Drives the optimization loop.

    Compose an objective system with a strategy engine and an executor. The
    driver repeats ``sample -> repair -> evaluate -> update`` until the
    engine terminates, then reports the engine's best-ever point.

    Parameters
    ----------
    system : ObjectiveSystem
        Function to minimize; must have at least two parameters.
    config : DriverConfig | None
        Driver settings; defaults to :class:`DriverConfig()`.
    engine : StrategyEngine | None
        Search algorithm; defaults to :class:`CMAESEngine`.
    executor : Executor | None
        Evaluation scheduler; defaults to a sequential
        :class:`LocalExecutor` around the system.
    """

    def __init__(
        self,
        system: ObjectiveSystem,
        *,
        config: DriverConfig | None = None,
        engine: StrategyEngine | None = None,
        executor: Executor | None = None,
    ) -> None:
        n = system.num_parameters
        if n < 2:
            raise InvalidDimensionError(f"optimization requires at least 2 parameters, got {n}")
        self._system = system
        self._config = config or DriverConfig()
        self._engine = engine or CMAESEngine()
        self._executor = executor or LocalExecutor(evaluator=ObjectiveEvaluator(system))
        self._resolver = OptionResolver(n, self._config.budgets())
        self._outcome: _Outcome | None = None

    @property
    def config(self) -> DriverConfig:
        return self._config

    def optimize(self, x: np.ndarray, options: Mapping[str, object] | None = None) -> float:
        """Minimize starting from ``x``; overwrite ``x`` with the best point.

        Returns the best fitness. ``x`` is left untouched if the run fails.
        Arrays must have a floating dtype so the best point fits without
        truncation.
        """
        if isinstance(x, np.ndarray) and not np.issubdtype(x.dtype, np.floating):
            raise InvalidInitialGuessError(
                f"initial guess must be a floating-point array, got dtype {x.dtype}"
            )
        results = self.run(x, options)
        x[:] = results.x
        return results.fitness

    def run(
        self, x0: np.ndarray | list[float], options: Mapping[str, object] | None = None
    ) -> OptimizationResults:
        """Execute one complete run and return results."""

        history: list[GenerationStats] = []
        try:
            for stats in self.stream(x0, options):
                history.append(stats)
        finally:
            self._executor.close()

        outcome = self._outcome
        if outcome is None:  # pragma: no cover - stream always records an outcome
            raise RuntimeError("run finished without an outcome")

        summary: dict[str, object] = {
            "termination": outcome.termination,
            "generations": len(history),
            "evaluations": sum(s.evals for s in history),
            "resamples": sum(s.resamples for s in history),
            "clamped": sum(s.clamped for s in history),
            "resumed": outcome.resumed,
            "options": outcome.options.as_dict(),
            "engine": dict(outcome.engine_state),
            "config": {
                "max_iterations": self._config.max_iterations,
                "convergence_tolerance": self._config.convergence_tolerance,
                "max_evaluations": self._config.max_evaluations,
                "max_time_fraction": self._config.max_time_fraction,
                "diagnostics": self._config.diagnostics.value,
                "max_resample_attempts": self._config.max_resample_attempts,
            },
        }
        results = OptimizationResults(
            x=outcome.x, fitness=outcome.fitness, history=history, summary=summary
        )

        if self._config.diagnostics.file:
            path = results.export_json(self._config.history_path)
            _LOGGER.info("Wrote run history to %s", path)
        return results

    def stream(
        self, x0: np.ndarray | list[float], options: Mapping[str, object] | None = None
    ) -> Iterator[GenerationStats]:
        """Yield generation statistics as they are computed.

        All validation happens before the engine allocates any search state.
        The state is disposed when the generator finishes, fails, or is
        closed early.
        """

        x_start = self._check_initial_guess(x0)
        advanced = AdvancedOptions.from_mapping(options)
        params = self._resolver.resolve(advanced, x_start)
        self._outcome = None

        repairer = self._build_repairer()
        stage = EvaluationStage(self._executor, timeout_s=self._config.timeout_s)
        console = get_logger("diagnostics") if self._config.diagnostics.console else None

        with self._engine.initialize(params) as state:
            resumed = False
            if advanced.resume:
                resumed = self._try_resume(state)

            if console is not None:
                console.info("Starting %s", state.banner())

            self._executor.prepare()

            iteration = 0
            reason = state.termination_reason()
            while reason is None:
                iter_start = time.perf_counter()

                population = state.sample_population()
                resamples = 0
                clamped = 0
                if repairer is not None:
                    report = repairer.repair(state, population)
                    population = report.population
                    resamples = report.resamples
                    clamped = report.clamped

                fitnesses = stage.evaluate(population)
                state.update_distribution(fitnesses)

                _, best_ever = state.best_ever()
                iter_time = time.perf_counter() - iter_start
                stats = GenerationStats(
                    iteration=iteration,
                    best=float(np.min(fitnesses)),
                    mean=float(np.mean(fitnesses)),
                    std=float(np.std(fitnesses)),
                    best_ever=best_ever,
                    evals=len(fitnesses),
                    resamples=resamples,
                    clamped=clamped,
                    sigma=float(state.state().get("sigma", math.nan)),  # type: ignore[arg-type]
                    throughput=len(fitnesses) / iter_time if iter_time > 0 else 0.0,
                )
                _LOGGER.debug(
                    "generation=%d best=%.6g best_ever=%.6g sigma=%.3g resamples=%d",
                    stats.iteration,
                    stats.best,
                    stats.best_ever,
                    stats.sigma,
                    stats.resamples,
                )
                yield stats

                iteration += 1
                reason = state.termination_reason()

            x_best, f_best = state.best_ever()
            if not math.isfinite(f_best) and iteration == 0:
                # Nothing was evaluated; report the starting point instead.
                x_best = x_start.copy()
                f_best = float(stage.evaluate([x_start])[0])

            if console is not None:
                console.info("Stop: %s (f=%.6g after %d generations)", reason, f_best, iteration)
            if self._config.diagnostics.file:
                self._write_checkpoint(state)

            self._outcome = _Outcome(
                x=np.array(x_best, dtype=np.float64),
                fitness=float(f_best),
                termination=reason,
                resumed=resumed,
                options=advanced,
                engine_state=dict(state.state()),
            )

    def _check_initial_guess(self, x0: np.ndarray | list[float]) -> np.ndarray:
        x = np.array(x0, dtype=np.float64).reshape(-1)
        n = self._system.num_parameters
        if x.shape != (n,):
            raise InvalidDimensionError(f"initial guess has length {x.size}, expected {n}")
        if self._system.has_limits():
            lower, upper = self._system.parameter_limits()
            for i in range(n):
                if not lower[i] <= x[i] <= upper[i]:
                    raise InfeasibleStartError(i, float(x[i]), float(lower[i]), float(upper[i]))
        return x

    def _build_repairer(self) -> FeasibilityRepairer | None:
        if not self._system.has_limits():
            return None
        lower, upper = self._system.parameter_limits()
        return FeasibilityRepairer(
            lower, upper, max_attempts=self._config.max_resample_attempts
        )

    def _try_resume(self, state: SearchState) -> bool:
        path = self._config.checkpoint_path
        if not path.exists():
            _LOGGER.warning("No checkpoint at %s; starting a fresh run", path)
            return False
        return bool(state.resume_from_checkpoint(path))

    def _write_checkpoint(self, state: SearchState) -> None:
        path = self._config.checkpoint_path
        state.write_checkpoint(path)
        _LOGGER.info("Wrote checkpoint to %s", path)


def optimize(
    system: ObjectiveSystem,
    x: np.ndarray,
    options: Mapping[str, object] | None = None,
    *,
    config: DriverConfig | None = None,
    engine: StrategyEngine | None = None,
    executor: Executor | None = None,
) -> float:
    """Minimize ``system`` from ``x`` in place and return the best fitness."""
    driver = OptimizationDriver(system, config=config, engine=engine, executor=executor)
    return driver.optimize(x, options)


__all__ = ["Diagnostics", "DriverConfig", "OptimizationDriver", "optimize"]
