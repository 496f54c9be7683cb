"""Error taxonomy for optimization runs.

Validation errors are raised before any search state is allocated. Evaluation
errors abort a run after its search state has been released.
"""

from __future__ import annotations

from collections.abc import Sequence


class CmaoptError(Exception):
    """Base class for all errors raised by cmaopt."""


class InvalidDimensionError(CmaoptError, ValueError):
    """The problem has fewer than two parameters or a mis-sized vector."""


class InvalidInitialGuessError(CmaoptError, TypeError):
    """The initial guess cannot hold the best point written back in place."""


class InfeasibleStartError(CmaoptError, ValueError):
    """The initial guess violates the declared parameter limits."""

    def __init__(self, index: int, value: float, lower: float, upper: float) -> None:
        self.index = index
        self.value = value
        self.lower = lower
        self.upper = upper
        super().__init__(
            f"Initial guess x[{index}] = {value:g} is not within limits [{lower:g}, {upper:g}]"
        )


class InvalidOptionError(CmaoptError, ValueError):
    """An advanced option is outside its valid domain."""

    def __init__(self, name: str, value: object, reason: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid option {name}={value!r}: {reason}")


class ObjectiveEvaluationError(CmaoptError, RuntimeError):
    """The objective signalled failure for a candidate.

    ``status`` is the non-zero status code returned by the system, or ``None``
    when the objective raised an exception (available as ``__cause__``).
    """

    def __init__(self, index: int, x: Sequence[float], status: int | None) -> None:
        self.index = index
        self.x = [float(v) for v in x]
        self.status = status
        detail = f"status {status}" if status is not None else "an exception"
        super().__init__(f"Objective evaluation of candidate {index} failed with {detail}")


class FeasibilityStallWarning(UserWarning):
    """Resampling could not produce a feasible candidate; it was clamped instead."""


__all__ = [
    "CmaoptError",
    "InvalidDimensionError",
    "InvalidInitialGuessError",
    "InfeasibleStartError",
    "InvalidOptionError",
    "ObjectiveEvaluationError",
    "FeasibilityStallWarning",
]
