"""Objective evaluation for one generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from cmaopt.core.errors import ObjectiveEvaluationError
from cmaopt.core.system import Evaluation, ObjectiveSystem
from cmaopt.engine.interfaces import Executor

_LOGGER = logging.getLogger(__name__)


class CandidateFailed(Exception):
    """Raised inside workers when the objective raises for candidate ``x``.

    Carries the vector rather than a slot index so that batching executors
    do not need to translate positions. Picklable for process pools.
    """

    def __init__(self, x: np.ndarray) -> None:
        super().__init__(x)
        self.x = x


@dataclass
class ObjectiveEvaluator:
    """Evaluator that calls ``system.evaluate`` once per vector, in order."""

    system: ObjectiveSystem

    def evaluate_batch(self, xs: list[np.ndarray]) -> list[Evaluation]:
        results = []
        for x in xs:
            try:
                results.append(self.system.evaluate(x, True))
            except Exception as exc:
                raise CandidateFailed(x) from exc
        return results


class EvaluationStage:
    """Evaluate a feasible population into a fitness vector.

    The stage has no retry policy. The first candidate whose evaluation
    fails aborts the generation with :class:`ObjectiveEvaluationError`.
    """

    def __init__(self, executor: Executor, *, timeout_s: float | None = None) -> None:
        self._executor = executor
        self._timeout_s = timeout_s

    def evaluate(self, population: list[np.ndarray]) -> np.ndarray:
        try:
            evaluations = self._executor.run(population, timeout_s=self._timeout_s)
        except Exception as exc:
            failed = _find_failure(exc)
            if failed is None:
                raise
            index = _locate(population, failed.x)
            raise ObjectiveEvaluationError(index, failed.x, None) from (failed.__cause__ or failed)

        if len(evaluations) != len(population):
            raise RuntimeError(
                "Executor returned mismatched results: "
                f"expected {len(population)} got {len(evaluations)}"
            )

        fitnesses = np.empty(len(population), dtype=np.float64)
        for i, evaluation in enumerate(evaluations):
            if evaluation.status != 0:
                _LOGGER.error("Objective returned status %d for candidate %d", evaluation.status, i)
                raise ObjectiveEvaluationError(i, population[i], evaluation.status)
            fitnesses[i] = evaluation.fitness
        return fitnesses


def _find_failure(exc: BaseException) -> CandidateFailed | None:
    current: BaseException | None = exc
    while current is not None:
        if isinstance(current, CandidateFailed):
            return current
        current = current.__cause__
    return None


def _locate(population: list[np.ndarray], x: np.ndarray) -> int:
    for i, candidate in enumerate(population):
        if np.array_equal(candidate, x):
            return i
    return -1


__all__ = ["CandidateFailed", "ObjectiveEvaluator", "EvaluationStage"]
