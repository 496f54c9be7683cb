"""Shared engine datatypes."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class TerminationBudgets:
    """Stopping budgets handed to the strategy engine.

    ``None`` leaves the corresponding criterion at the engine's own default.
    """

    max_iterations: int | None = None
    max_evaluations: int | None = None
    function_tolerance: float | None = None
    max_time_fraction: float | None = None


@dataclass(frozen=True, slots=True)
class EngineParams:
    """Everything a strategy engine needs to create a search state."""

    dimension: int
    initial_mean: np.ndarray
    step_sizes: np.ndarray
    population_size: int
    seed: int | None
    budgets: TerminationBudgets


@dataclass(frozen=True, slots=True)
class GenerationStats:
    """Numbers tracked for each generation.

    ``best`` and ``mean`` describe the generation's own fitness values;
    ``best_ever`` is the engine's best-so-far after the update.
    """

    iteration: int
    best: float
    mean: float
    std: float
    best_ever: float
    evals: int
    resamples: int
    clamped: int
    sigma: float
    throughput: float
