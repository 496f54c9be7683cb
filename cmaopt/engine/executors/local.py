"""Local executor for in-process evaluation.

Evaluates candidates one after another in the calling thread, in index
order.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from cmaopt.core.system import Evaluation
from cmaopt.engine.interfaces import Evaluator


@dataclass
class LocalExecutor:
    """Sequential executor that wraps an Evaluator.

    Parameters
    ----------
    evaluator : Evaluator
        The pure evaluator to call.
    batch_size : int | None
        Mini-batch size per ``evaluate_batch`` call; ``None`` sends the
        whole population at once.
    """

    evaluator: Evaluator
    batch_size: int | None = None

    def prepare(self) -> None:
        """Optional heavy initialization (e.g., model warmup)."""

    def run(
        self,
        xs: list[np.ndarray],
        *,
        timeout_s: float | None = None,
        batch_size: int | None = None,
    ) -> list[Evaluation]:
        """Evaluate vectors and return evaluations in the same order.

        ``timeout_s`` is accepted for interface compatibility; sequential
        evaluation cannot be interrupted.
        """
        if not xs:
            return []

        size = batch_size or self.batch_size or len(xs)
        results: list[Evaluation] = []
        for start in range(0, len(xs), size):
            results.extend(self.evaluator.evaluate_batch(xs[start : start + size]))
        return results

    def close(self) -> None:
        """Optional cleanup hook."""
