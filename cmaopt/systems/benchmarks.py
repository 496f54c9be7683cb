"""Closed-form benchmark systems with known optima.

Useful for validating the driver and for smoke-testing configurations.
See https://en.wikipedia.org/wiki/Test_functions_for_optimization and
http://www.sfu.ca/~ssurjano/optimization.html.
"""

from __future__ import annotations

import math
from typing import Final

import numpy as np

from cmaopt.core.system import ObjectiveSystem


class BenchmarkSystem(ObjectiveSystem):
    """An objective system that knows its own optimum."""

    def optimal_value(self) -> float:
        return 0.0

    def optimal_parameters(self) -> np.ndarray:
        return np.zeros(self.num_parameters)

    def _set_symmetric_limits(self, bound: float) -> None:
        limits = np.full(self.num_parameters, bound)
        self.set_parameter_limits(-limits, limits)


class Sphere(BenchmarkSystem):
    """Sum of squares, optionally boxed to ``[-bound, bound]``."""

    def __init__(self, num_parameters: int, bound: float | None = None) -> None:
        super().__init__(num_parameters)
        if bound is not None:
            self._set_symmetric_limits(bound)

    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        return float(np.dot(x, x))


class Cigtab(BenchmarkSystem):
    """Cigar/tablet shaped function from Hansen's reference CMA-ES code."""

    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        return float(1e4 * x[0] ** 2 + 1e-4 * x[1] ** 2 + np.dot(x, x))


class Ackley(BenchmarkSystem):
    """Many local minima around a global one at the origin."""

    a: Final = 20.0
    b: Final = 0.2
    c: Final = 2 * math.pi

    def __init__(self, num_parameters: int) -> None:
        super().__init__(num_parameters)
        self._set_symmetric_limits(32.768)

    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        n = self.num_parameters
        rms = math.sqrt(float(np.dot(x, x)) / n)
        sumcos = float(np.sum(np.cos(self.c * x)))
        return -self.a * math.exp(-self.b * rms) - math.exp(sumcos / n) + self.a + math.e


class DropWave(BenchmarkSystem):
    """Highly multimodal two-dimensional function."""

    def __init__(self) -> None:
        super().__init__(2)
        self._set_symmetric_limits(5.12)

    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        dotprod = float(x[0] ** 2 + x[1] ** 2)
        return -(1 + math.cos(12 * math.sqrt(dotprod))) / (0.5 * dotprod + 2)

    def optimal_value(self) -> float:
        return -1.0


class Rosenbrock(BenchmarkSystem):
    """Curved valley with its minimum at all ones."""

    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        head, tail = x[:-1], x[1:]
        return float(np.sum(100.0 * (tail - head**2) ** 2 + (head - 1.0) ** 2))

    def optimal_parameters(self) -> np.ndarray:
        return np.ones(self.num_parameters)


class Schwefel(BenchmarkSystem):
    """Deceptive function whose best point is far from the next-best ones.

    The documented optimum has not been reproduced reliably in practice
    (fitness around -1.99 has been observed), so treat it with care.
    """

    def __init__(self, num_parameters: int) -> None:
        super().__init__(num_parameters)
        self._set_symmetric_limits(500.0)

    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        return float(418.9829 * self.num_parameters - np.sum(x * np.sin(np.sqrt(np.abs(x)))))

    def optimal_parameters(self) -> np.ndarray:
        return np.full(self.num_parameters, 420.9687)


class Easom(BenchmarkSystem):
    """Flat everywhere except a narrow well at ``(pi, pi)``."""

    def __init__(self) -> None:
        super().__init__(2)
        self._set_symmetric_limits(100.0)

    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        return -math.cos(x[0]) * math.cos(x[1]) * math.exp(
            -((x[0] - math.pi) ** 2) - (x[1] - math.pi) ** 2
        )

    def optimal_value(self) -> float:
        return -1.0

    def optimal_parameters(self) -> np.ndarray:
        return np.full(2, math.pi)


_REGISTRY: Final[dict[str, type[BenchmarkSystem]]] = {
    "sphere": Sphere,
    "cigtab": Cigtab,
    "ackley": Ackley,
    "dropwave": DropWave,
    "rosenbrock": Rosenbrock,
    "schwefel": Schwefel,
    "easom": Easom,
}


def available_systems() -> list[str]:
    return sorted(_REGISTRY)


def system_from_name(name: str, **params: object) -> BenchmarkSystem:
    """Return a benchmark system instance from the registry.

    Raises KeyError for unknown names.

    Parameters
    ----------
    name : str
        One of :func:`available_systems`.
    **params : object
        Constructor parameters (e.g., ``num_parameters``, ``bound``).
    """
    key = name.lower()
    if key not in _REGISTRY:
        raise KeyError(f"Unknown system: {name}. Available: {available_systems()}")
    return _REGISTRY[key](**params)  # type: ignore[arg-type]


__all__ = [
    "BenchmarkSystem",
    "Sphere",
    "Cigtab",
    "Ackley",
    "DropWave",
    "Rosenbrock",
    "Schwefel",
    "Easom",
    "available_systems",
    "system_from_name",
]
