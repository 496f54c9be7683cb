"""Result containers."""

from __future__ import annotations

import csv
import json
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from cmaopt.engine.types import GenerationStats

_HISTORY_FIELDS = [
    "iteration",
    "best",
    "mean",
    "std",
    "best_ever",
    "evals",
    "resamples",
    "clamped",
    "sigma",
    "throughput",
]


@dataclass(slots=True)
class OptimizationResults:
    """Final results of one run.

    ``x`` and ``fitness`` are the best-ever point and its objective value.
    ``history`` holds one entry per completed generation.
    """

    x: np.ndarray
    fitness: float
    history: list[GenerationStats] = field(default_factory=list)
    summary: Mapping[str, object] = field(default_factory=dict)

    @property
    def best(self) -> tuple[np.ndarray, float]:
        return self.x, self.fitness

    def to_dict(self) -> dict[str, object]:
        return {
            "x": [float(v) for v in self.x],
            "fitness": self.fitness,
            "summary": dict(self.summary),
            "history": [asdict(stats) for stats in self.history],
        }

    def export_json(self, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(self.to_dict(), indent=2, default=_jsonable), encoding="utf-8")
        return target

    def export_csv(self, path: str | Path) -> Path:
        """Write the generation history as CSV."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(_HISTORY_FIELDS)
            for stats in self.history:
                writer.writerow([getattr(stats, name) for name in _HISTORY_FIELDS])
        return target


def _jsonable(value: object) -> object:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
