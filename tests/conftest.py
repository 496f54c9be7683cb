"""Shared test fixtures and configuration for cmaopt tests."""

from __future__ import annotations

import numpy as np
import pytest

from cmaopt.core.system import Evaluation, ObjectiveSystem
from cmaopt.systems import Rosenbrock, Sphere


class RecordingSystem(ObjectiveSystem):
    """Sum of squares that remembers every point it was asked to evaluate.

    ``fail_on_call`` makes the given (zero-based) call return ``fail_status``,
    or raise ``ValueError`` when ``fail_status`` is ``None``.
    """

    def __init__(
        self,
        num_parameters: int,
        *,
        bound: float | None = None,
        fail_on_call: int | None = None,
        fail_status: int | None = 1,
    ) -> None:
        super().__init__(num_parameters)
        if bound is not None:
            limits = np.full(num_parameters, bound)
            self.set_parameter_limits(-limits, limits)
        self.calls: list[np.ndarray] = []
        self.fail_on_call = fail_on_call
        self.fail_status = fail_status

    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        return float(np.dot(x, x))

    def evaluate(self, x: np.ndarray, new_parameters: bool = True) -> Evaluation:
        call = len(self.calls)
        self.calls.append(np.array(x, copy=True))
        if call == self.fail_on_call:
            if self.fail_status is None:
                raise ValueError("objective blew up")
            return Evaluation(fitness=float("nan"), status=self.fail_status)
        return super().evaluate(x, new_parameters)


@pytest.fixture
def sphere5() -> Sphere:
    """Five-dimensional sum of squares boxed to [-10, 10]."""
    return Sphere(5, bound=10.0)


@pytest.fixture
def rosenbrock3() -> Rosenbrock:
    """Unbounded three-dimensional Rosenbrock valley."""
    return Rosenbrock(3)


@pytest.fixture
def recording_system() -> RecordingSystem:
    """Recording sum of squares in 3D boxed to [-1, 1]."""
    return RecordingSystem(3, bound=1.0)


@pytest.fixture
def make_system() -> type[RecordingSystem]:
    """Factory for custom recording systems."""
    return RecordingSystem
