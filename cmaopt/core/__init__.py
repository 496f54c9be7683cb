"""Core data structures: objective systems, results and errors."""

from .errors import (
    CmaoptError,
    FeasibilityStallWarning,
    InfeasibleStartError,
    InvalidDimensionError,
    InvalidInitialGuessError,
    InvalidOptionError,
    ObjectiveEvaluationError,
)
from .results import OptimizationResults
from .system import CallableSystem, Evaluation, ObjectiveSystem

__all__ = [
    "CmaoptError",
    "FeasibilityStallWarning",
    "InfeasibleStartError",
    "InvalidDimensionError",
    "InvalidInitialGuessError",
    "InvalidOptionError",
    "ObjectiveEvaluationError",
    "OptimizationResults",
    "CallableSystem",
    "Evaluation",
    "ObjectiveSystem",
]
