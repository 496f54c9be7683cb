"""Worker-pool executor for parallel evaluation.

The pool is started by ``prepare`` and kept for every generation of a run;
``close`` shuts it down. Results always come back in population order.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import ClassVar, Literal

import numpy as np

from cmaopt.core.system import Evaluation
from cmaopt.engine.interfaces import Evaluator

_LOGGER = logging.getLogger(__name__)

_Pool = ThreadPoolExecutor | ProcessPoolExecutor


@dataclass(slots=True)
class LocalPoolExecutor:
    """Parallel executor backed by a long-lived thread or process pool.

    Each generation is split into mini-batches that are submitted together
    and collected in submission order, so ``run`` returns only once the whole
    population has been evaluated.

    Parameters
    ----------
    evaluator:
        Evaluator called inside the workers. Process mode needs it to be
        picklable.
    mode:
        "auto" (threads), "thread", or "process".
    num_workers:
        Pool size. ``0`` or "auto" picks a small default.
    batch_size:
        Vectors per ``evaluate_batch`` call.
    """

    evaluator: Evaluator
    mode: Literal["auto", "thread", "process"] = "auto"
    num_workers: int | Literal["auto"] = "auto"
    batch_size: int = 1
    _pool: _Pool | None = field(default=None, init=False, repr=False)

    _DEFAULT_WORKERS: ClassVar[int] = 4

    @property
    def started(self) -> bool:
        return self._pool is not None

    def prepare(self) -> None:
        """Start the worker pool if it is not running yet."""
        if self._pool is not None:
            return
        workers = self._worker_count()
        if self.mode == "process":
            self._pool = ProcessPoolExecutor(max_workers=workers)
        else:
            self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cmaopt")
        _LOGGER.debug("Started %s pool with %d workers", self.mode, workers)

    def run(
        self,
        xs: list[np.ndarray],
        *,
        timeout_s: float | None = None,
        batch_size: int | None = None,
    ) -> list[Evaluation]:
        """Evaluate ``xs`` on the pool and return evaluations in input order.

        Starts the pool on first use when ``prepare`` was not called. A
        timeout or a worker failure discards the pool; the next call starts
        a fresh one.
        """
        if not xs:
            return []
        self.prepare()
        pool = self._pool
        assert pool is not None

        size = batch_size or self.batch_size
        batches = [xs[start : start + size] for start in range(0, len(xs), size)]
        deadline = None if timeout_s is None else time.perf_counter() + timeout_s

        futures: list[Future[list[Evaluation]]] = []
        evaluations: list[Evaluation] = []
        try:
            for batch in batches:
                futures.append(pool.submit(self.evaluator.evaluate_batch, batch))
            for batch, future in zip(batches, futures):
                remaining = None if deadline is None else max(0.0, deadline - time.perf_counter())
                batch_results = future.result(timeout=remaining)
                if len(batch_results) != len(batch):
                    raise RuntimeError(
                        "Evaluator returned mismatched batch size: "
                        f"expected {len(batch)} got {len(batch_results)}"
                    )
                evaluations.extend(batch_results)
        except BaseException:
            for future in futures:
                future.cancel()
            self._discard()
            raise
        return evaluations

    def close(self) -> None:
        """Wait for running tasks and shut the pool down. Safe to call twice."""
        pool, self._pool = self._pool, None
        if pool is not None:
            pool.shutdown(wait=True, cancel_futures=True)

    def _discard(self) -> None:
        pool, self._pool = self._pool, None
        if pool is not None:
            pool.shutdown(wait=False, cancel_futures=True)

    def _worker_count(self) -> int:
        if self.num_workers == "auto" or self.num_workers == 0:
            return self._DEFAULT_WORKERS
        return max(1, int(self.num_workers))
