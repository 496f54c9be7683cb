"""Engine protocol surfaces (no implementations).

These Protocols define the modular boundaries of the optimization driver.
They are intentionally small and easy to reason about.

Search State Lifecycle
======================

A ``StrategyEngine`` is a factory: ``initialize`` allocates a fresh
``SearchState`` for one run. The driver is the exclusive owner of that state
until it calls ``dispose`` (or leaves the state's ``with`` block), which it
does on every exit path. The driver never looks inside the state; it only
calls the operations below.

Evaluation
==========

An ``Evaluator`` turns parameter vectors into ``Evaluation`` records. An
``Executor`` wraps an evaluator and decides how the calls are scheduled
(sequentially, on a thread pool, on a process pool) while always returning
results in input order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from types import TracebackType
from typing import Protocol

import numpy as np

from cmaopt.core.system import Evaluation
from cmaopt.engine.types import EngineParams


class SearchState(Protocol):
    """Opaque distribution state owned by a single run."""

    def sample_population(self) -> list[np.ndarray]:
        """Draw a new population of ``population_size`` candidates."""

    def resample_single(self, index: int) -> list[np.ndarray]:
        """Redraw slot ``index`` of the current population and return the population."""

    def update_distribution(self, fitnesses: Sequence[float]) -> None:
        """Feed fitnesses, index-aligned with the current population."""

    def termination_reason(self) -> str | None:
        """Return ``None`` while the search should continue, else why it stopped."""

    def best_ever(self) -> tuple[np.ndarray, float]:
        """Return the best point seen so far and its fitness."""

    def dispose(self) -> None:
        """Release resources held by the state. Must be idempotent."""

    def banner(self) -> str:
        """One-line description logged when console diagnostics are on."""

    def resume_from_checkpoint(self, path: Path) -> bool:
        """Best-effort restore from ``path``; return whether it succeeded."""

    def write_checkpoint(self, path: Path) -> None:
        """Persist enough state to resume later."""

    def state(self) -> Mapping[str, object]:
        """Return a serializable snapshot of diagnostics (for result summaries)."""

    def __enter__(self) -> SearchState: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


class StrategyEngine(Protocol):
    """Population-based search algorithm treated as a black box."""

    def initialize(self, params: EngineParams) -> SearchState:
        """Create a new search state from resolved initialization parameters."""


class Evaluator(Protocol):
    """Pure evaluator that maps parameter vectors to evaluations.

    Evaluators should be side-effect free and thread/process safe when used
    with executors that parallelize calls to ``evaluate_batch``.
    """

    def evaluate_batch(self, xs: list[np.ndarray]) -> list[Evaluation]:
        """Return one evaluation per vector, in input order."""


class Executor(Protocol):
    """Scheduling wrapper around an Evaluator."""

    def prepare(self) -> None:  # pragma: no cover - surface only
        """Optional heavy initialization (e.g., worker warmup)."""

    def run(
        self, xs: list[np.ndarray], *, timeout_s: float | None = None, batch_size: int | None = None
    ) -> list[Evaluation]:
        """Evaluate ``xs`` and return evaluations in the same order."""

    def close(self) -> None:  # pragma: no cover - surface only
        """Optional cleanup hook for releasing resources."""
