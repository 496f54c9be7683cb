"""Optimization driver and its collaborators."""

from .driver import Diagnostics, DriverConfig, OptimizationDriver, optimize
from .evaluation import EvaluationStage, ObjectiveEvaluator
from .executors.local import LocalExecutor
from .executors.pool import LocalPoolExecutor
from .interfaces import Evaluator, Executor, SearchState, StrategyEngine
from .options import AdvancedOptions, OptionResolver
from .repair import FeasibilityRepairer, RepairReport
from .strategies import CMAESEngine, engine_from_name
from .types import EngineParams, GenerationStats, TerminationBudgets

__all__ = [
    "StrategyEngine",
    "SearchState",
    "Evaluator",
    "Executor",
    "OptimizationDriver",
    "DriverConfig",
    "Diagnostics",
    "optimize",
    "AdvancedOptions",
    "OptionResolver",
    "FeasibilityRepairer",
    "RepairReport",
    "EvaluationStage",
    "ObjectiveEvaluator",
    "LocalExecutor",
    "LocalPoolExecutor",
    "CMAESEngine",
    "engine_from_name",
    "EngineParams",
    "GenerationStats",
    "TerminationBudgets",
]
