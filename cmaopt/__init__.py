"""cmaopt public interface.

Box-constrained minimization driven by a population-based strategy engine
(CMA-ES by default). Use :func:`cmaopt.optimize` or
:class:`cmaopt.engine.OptimizationDriver`.
"""

from __future__ import annotations

from .core import (
    CallableSystem,
    FeasibilityStallWarning,
    InfeasibleStartError,
    InvalidDimensionError,
    InvalidInitialGuessError,
    InvalidOptionError,
    ObjectiveEvaluationError,
    ObjectiveSystem,
    OptimizationResults,
)
from .engine import Diagnostics, DriverConfig, OptimizationDriver, optimize

__all__ = [
    "CallableSystem",
    "ObjectiveSystem",
    "OptimizationResults",
    "OptimizationDriver",
    "DriverConfig",
    "Diagnostics",
    "optimize",
    "FeasibilityStallWarning",
    "InfeasibleStartError",
    "InvalidDimensionError",
    "InvalidInitialGuessError",
    "InvalidOptionError",
    "ObjectiveEvaluationError",
]

__version__ = "0.1.0"
