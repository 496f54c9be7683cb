"""Objective systems: the caller-supplied side of an optimization run."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np

from cmaopt.core.errors import InvalidDimensionError

ObjectiveFn = Callable[[np.ndarray], float]


@dataclass(frozen=True, slots=True)
class Evaluation:
    """Result of evaluating one candidate.

    ``status`` follows the convention of the objective: ``0`` means success,
    anything else is a failure.
    """

    fitness: float
    status: int = 0


class ObjectiveSystem(ABC):
    """A function to minimize plus optional box constraints.

    Subclasses implement :meth:`objective_func`. Systems that need to report
    failure without raising can override :meth:`evaluate` and return a
    non-zero status instead.

    Parameters
    ----------
    num_parameters : int
        Dimension ``n`` of the parameter vector.
    """

    def __init__(self, num_parameters: int) -> None:
        if num_parameters < 1:
            raise InvalidDimensionError(f"num_parameters must be positive, got {num_parameters}")
        self._num_parameters = int(num_parameters)
        self._lower: np.ndarray | None = None
        self._upper: np.ndarray | None = None

    @property
    def num_parameters(self) -> int:
        return self._num_parameters

    def has_limits(self) -> bool:
        return self._lower is not None

    def set_parameter_limits(self, lower: Sequence[float], upper: Sequence[float]) -> None:
        """Declare per-dimension lower/upper bounds."""
        lo = np.asarray(lower, dtype=np.float64).reshape(-1)
        hi = np.asarray(upper, dtype=np.float64).reshape(-1)
        if lo.shape != (self._num_parameters,) or hi.shape != (self._num_parameters,):
            msg = f"limits must both have length {self._num_parameters}"
            raise ValueError(msg)
        bad = np.flatnonzero(lo > hi)
        if bad.size:
            i = int(bad[0])
            msg = f"lower limit {lo[i]:g} exceeds upper limit {hi[i]:g} at index {i}"
            raise ValueError(msg)
        lo.setflags(write=False)
        hi.setflags(write=False)
        self._lower, self._upper = lo, hi

    def parameter_limits(self) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(lower, upper)``; only valid when :meth:`has_limits` is true."""
        if self._lower is None or self._upper is None:
            raise RuntimeError("system has no parameter limits")
        return self._lower, self._upper

    @abstractmethod
    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        """Return the objective value at ``x`` (lower is better)."""

    def evaluate(self, x: np.ndarray, new_parameters: bool = True) -> Evaluation:
        return Evaluation(fitness=float(self.objective_func(x, new_parameters)))


class CallableSystem(ObjectiveSystem):
    """Wrap a plain ``f(x) -> float`` as an :class:`ObjectiveSystem`.

    >>> system = CallableSystem(lambda x: float(x @ x), 3, lower=[-1] * 3, upper=[1] * 3)
    """

    def __init__(
        self,
        fn: ObjectiveFn,
        num_parameters: int,
        *,
        lower: Sequence[float] | None = None,
        upper: Sequence[float] | None = None,
    ) -> None:
        super().__init__(num_parameters)
        if (lower is None) != (upper is None):
            raise ValueError("lower and upper limits must be given together")
        if lower is not None and upper is not None:
            self.set_parameter_limits(lower, upper)
        self._fn = fn

    def objective_func(self, x: np.ndarray, new_parameters: bool) -> float:
        return float(self._fn(x))


__all__ = ["Evaluation", "ObjectiveSystem", "CallableSystem", "ObjectiveFn"]
