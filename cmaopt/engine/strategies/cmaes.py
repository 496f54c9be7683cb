"""CMA-ES strategy engine.

Uses the PyCMA library (Covariance Matrix Adaptation Evolution Strategy) as
the search distribution. The driver only sees the ``SearchState`` surface;
everything PyCMA-specific stays in this module.
"""

from __future__ import annotations

import logging
import math
import pickle
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType

import cma
import numpy as np

from cmaopt.engine.types import EngineParams

_LOGGER = logging.getLogger(__name__)


@dataclass
class CMAESEngine:
    """Factory for PyCMA-backed search states.

    Parameters
    ----------
    cma_params : dict[str, object]
        Additional options for :class:`cma.CMAEvolutionStrategy`. They are
        applied last, so they win over the resolved driver options.
    """

    cma_params: dict[str, object] = field(default_factory=dict)

    def initialize(self, params: EngineParams) -> CMAESState:
        steps = np.asarray(params.step_sizes, dtype=np.float64)
        sigma0 = float(steps.max())
        opts: dict[str, object] = {
            "popsize": params.population_size,
            "verbose": -9,
            "verb_log": 0,
            "verb_disp": 0,
        }
        if not np.allclose(steps, sigma0):
            opts["CMA_stds"] = list(steps / sigma0)
        if params.seed is not None:
            opts["seed"] = params.seed
        budgets = params.budgets
        if budgets.max_iterations is not None:
            opts["maxiter"] = budgets.max_iterations
        if budgets.max_evaluations is not None:
            opts["maxfevals"] = budgets.max_evaluations
        if budgets.function_tolerance is not None:
            opts["tolfun"] = budgets.function_tolerance
        if budgets.max_time_fraction is not None:
            _LOGGER.debug(
                "maxTimeFractionForDecomposition=%s recorded; PyCMA schedules its "
                "eigendecomposition internally",
                budgets.max_time_fraction,
            )
        opts.update(self.cma_params)

        es = cma.CMAEvolutionStrategy(list(params.initial_mean), sigma0, opts)
        return CMAESState(
            es=es,
            dimension=params.dimension,
            initial_mean=np.array(params.initial_mean, dtype=np.float64),
            max_time_fraction=budgets.max_time_fraction,
        )


class CMAESState:
    """Search state wrapping one :class:`cma.CMAEvolutionStrategy`."""

    def __init__(
        self,
        *,
        es: cma.CMAEvolutionStrategy,
        dimension: int,
        initial_mean: np.ndarray,
        max_time_fraction: float | None = None,
    ) -> None:
        self._es: cma.CMAEvolutionStrategy | None = es
        self._dimension = dimension
        self._initial_mean = initial_mean
        self._max_time_fraction = max_time_fraction
        self._population: list[np.ndarray] | None = None

    def __enter__(self) -> CMAESState:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    @property
    def es(self) -> cma.CMAEvolutionStrategy:
        if self._es is None:
            raise RuntimeError("search state has been disposed")
        return self._es

    @property
    def disposed(self) -> bool:
        return self._es is None

    @property
    def iterations(self) -> int:
        return int(self.es.countiter)

    @property
    def evaluations(self) -> int:
        return int(self.es.countevals)

    @property
    def sigma(self) -> float:
        return float(self.es.sigma)

    def banner(self) -> str:
        es = self.es
        return (
            f"CMA-ES (PyCMA {cma.__version__}): dimension={self._dimension}, "
            f"lambda={es.popsize}, sigma0={es.sigma0:g}"
        )

    def sample_population(self) -> list[np.ndarray]:
        self._population = [np.array(x, dtype=np.float64) for x in self.es.ask()]
        return self._population

    def resample_single(self, index: int) -> list[np.ndarray]:
        if self._population is None:
            raise RuntimeError("resample_single called before sample_population")
        self._population[index] = np.array(self.es.ask(1)[0], dtype=np.float64)
        return self._population

    def update_distribution(self, fitnesses: Sequence[float]) -> None:
        if self._population is None:
            raise RuntimeError("update_distribution called before sample_population")
        if len(fitnesses) != len(self._population):
            raise ValueError(
                f"expected {len(self._population)} fitness values, got {len(fitnesses)}"
            )
        self.es.tell(self._population, [float(f) for f in fitnesses])
        self._population = None

    def termination_reason(self) -> str | None:
        conditions = self.es.stop()
        if not conditions:
            return None
        return ", ".join(f"{name}={value}" for name, value in conditions.items())

    def best_ever(self) -> tuple[np.ndarray, float]:
        best = self.es.best
        if best.x is None:
            return self._initial_mean.copy(), math.inf
        return np.array(best.x, dtype=np.float64), float(best.f)

    def dispose(self) -> None:
        self._es = None
        self._population = None

    def write_checkpoint(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(pickle.dumps(self.es))

    def resume_from_checkpoint(self, path: Path) -> bool:
        """Adopt the search distribution stored at ``path``.

        Only the distribution is restored: mean, step size, covariance,
        coordinate scaling and evolution paths. Counters, population size and
        stopping budgets stay those of the current run.
        """
        path = Path(path)
        try:
            loaded = pickle.loads(path.read_bytes())
        except (OSError, EOFError, pickle.UnpicklingError, AttributeError, ImportError) as exc:
            _LOGGER.warning("Could not resume from %s: %s", path, exc)
            return False
        if not isinstance(loaded, cma.CMAEvolutionStrategy) or loaded.N != self._dimension:
            _LOGGER.warning("Checkpoint %s does not match a %d-dimensional run", path, self._dimension)
            return False

        es = self.es
        # _set_C_from expects zero paths on the receiving side
        es._set_C_from(loaded)
        es.mean = np.array(loaded.mean, dtype=np.float64)
        es.sigma = float(loaded.sigma)
        es.pc = np.array(loaded.pc, dtype=np.float64)
        ps = getattr(loaded.adapt_sigma, "ps", None)
        if ps is not None and hasattr(es.adapt_sigma, "ps"):
            es.adapt_sigma.ps = np.array(ps, dtype=np.float64)
        self._initial_mean = np.array(es.mean, dtype=np.float64)
        self._population = None
        _LOGGER.info(
            "Resumed distribution from %s (saved at iteration %d, sigma=%.3g)",
            path,
            loaded.countiter,
            es.sigma,
        )
        return True

    def state(self) -> Mapping[str, object]:
        """Return serializable state diagnostics."""
        if self._es is None:
            return {}
        _, fbest = self.best_ever()
        return {
            "best_ever": fbest,
            "iterations": self.iterations,
            "evaluations": self.evaluations,
            "sigma": self.sigma,
            "population_size": int(self._es.popsize),
            "max_time_fraction": self._max_time_fraction,
        }
