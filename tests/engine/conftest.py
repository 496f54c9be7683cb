"""Fake strategy engine for driver tests that must not depend on PyCMA."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

import numpy as np
import pytest

from cmaopt.engine.types import EngineParams

Sampler = Callable[[np.random.Generator, EngineParams], np.ndarray]


def _gaussian(rng: np.random.Generator, params: EngineParams) -> np.ndarray:
    return params.initial_mean + params.step_sizes * rng.standard_normal(params.dimension)


class FakeState:
    """Samples around a fixed mean and stops after ``generations`` updates."""

    def __init__(self, params: EngineParams, generations: int, sampler: Sampler) -> None:
        self.params = params
        self.generations = generations
        self.sampler = sampler
        self.rng = np.random.default_rng(params.seed or 0)
        self.population: list[np.ndarray] | None = None
        self.updates: list[np.ndarray] = []
        self.resample_calls = 0
        self.disposed = False
        self._best_x = np.array(params.initial_mean, dtype=np.float64)
        self._best_f = math.inf

    def __enter__(self) -> FakeState:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    def sample_population(self) -> list[np.ndarray]:
        self.population = [
            self.sampler(self.rng, self.params) for _ in range(self.params.population_size)
        ]
        return self.population

    def resample_single(self, index: int) -> list[np.ndarray]:
        assert self.population is not None
        self.resample_calls += 1
        self.population[index] = self.sampler(self.rng, self.params)
        return self.population

    def update_distribution(self, fitnesses: Sequence[float]) -> None:
        assert self.population is not None
        values = np.asarray(fitnesses, dtype=np.float64)
        self.updates.append(values)
        i = int(np.argmin(values))
        if values[i] < self._best_f:
            self._best_f = float(values[i])
            self._best_x = self.population[i].copy()
        self.population = None

    def termination_reason(self) -> str | None:
        return "maxiter" if len(self.updates) >= self.generations else None

    def best_ever(self) -> tuple[np.ndarray, float]:
        return self._best_x.copy(), self._best_f

    def dispose(self) -> None:
        self.disposed = True

    def banner(self) -> str:
        return f"FakeState(lambda={self.params.population_size})"

    def resume_from_checkpoint(self, path: Path) -> bool:
        self.resumed_from = path
        return path.read_bytes() == b"fake"

    def write_checkpoint(self, path: Path) -> None:
        path.write_bytes(b"fake")

    def state(self) -> Mapping[str, object]:
        return {"sigma": float(self.params.step_sizes.max()), "updates": len(self.updates)}


class FakeEngine:
    """Records every ``initialize`` call and hands out :class:`FakeState` objects."""

    def __init__(self, generations: int = 3, sampler: Sampler = _gaussian) -> None:
        self.generations = generations
        self.sampler = sampler
        self.initialized: list[EngineParams] = []
        self.states: list[FakeState] = []

    def initialize(self, params: EngineParams) -> FakeState:
        self.initialized.append(params)
        state = FakeState(params, self.generations, self.sampler)
        self.states.append(state)
        return state


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Fake engine that runs three generations."""
    return FakeEngine()


@pytest.fixture
def make_engine() -> type[FakeEngine]:
    """Factory for fake engines with custom generation counts or samplers."""
    return FakeEngine
