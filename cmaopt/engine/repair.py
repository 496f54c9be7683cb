"""Feasibility repair for box-constrained populations.

Infeasible candidates are redrawn from the search distribution one slot at a
time. Each slot gets at most ``max_attempts`` redraws; a slot that is still
infeasible after that is clamped into the box and a
:class:`~cmaopt.core.errors.FeasibilityStallWarning` is issued.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from cmaopt.core.errors import FeasibilityStallWarning
from cmaopt.engine.interfaces import SearchState

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RepairReport:
    """Outcome of repairing one population."""

    population: list[np.ndarray]
    resamples: int
    clamped: int


class FeasibilityRepairer:
    """Make every candidate of a population satisfy ``lower <= x <= upper``.

    Parameters
    ----------
    lower, upper : Sequence[float]
        Per-dimension bounds.
    max_attempts : int
        Redraws allowed per slot before falling back to clamping.
    """

    def __init__(
        self, lower: Sequence[float], upper: Sequence[float], *, max_attempts: int = 1000
    ) -> None:
        if max_attempts < 0:
            raise ValueError("max_attempts must be non-negative")
        self.lower = np.asarray(lower, dtype=np.float64)
        self.upper = np.asarray(upper, dtype=np.float64)
        self.max_attempts = max_attempts

    def is_feasible(self, x: np.ndarray) -> bool:
        return bool(np.all(x >= self.lower) and np.all(x <= self.upper))

    def repair(self, state: SearchState, population: list[np.ndarray]) -> RepairReport:
        resamples = 0
        clamped = 0
        for i in range(len(population)):
            attempts = 0
            while not self.is_feasible(population[i]):
                if attempts >= self.max_attempts:
                    population[i] = np.clip(population[i], self.lower, self.upper)
                    clamped += 1
                    _LOGGER.warning(
                        "Candidate %d still infeasible after %d resamples; clamped to bounds",
                        i,
                        attempts,
                    )
                    warnings.warn(
                        f"candidate {i} clamped after {attempts} resamples",
                        FeasibilityStallWarning,
                        stacklevel=2,
                    )
                    break
                population = state.resample_single(i)
                attempts += 1
            resamples += attempts
        return RepairReport(population=population, resamples=resamples, clamped=clamped)


__all__ = ["FeasibilityRepairer", "RepairReport"]
