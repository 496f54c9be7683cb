"""MLflow integration for experiment tracking and reproducibility.

Provides utilities to track optimization runs with MLflow, enabling
reproducibility and comparison of runs across option settings.
"""

from __future__ import annotations

import json
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import mlflow

from cmaopt.core.results import OptimizationResults
from cmaopt.engine.driver import DriverConfig
from cmaopt.engine.types import GenerationStats


class MLflowTracker:
    """Track optimization runs with MLflow.

    Parameters
    ----------
    experiment_name : str
        Name of the MLflow experiment.
    tracking_uri : str | None
        MLflow tracking server URI (default: local filesystem).
    """

    def __init__(
        self,
        experiment_name: str = "cmaopt",
        tracking_uri: str | None = None,
    ) -> None:
        self.experiment_name = experiment_name
        self.tracking_uri = tracking_uri or "./mlruns"

        mlflow.set_tracking_uri(self.tracking_uri)

        try:
            self.experiment_id = mlflow.create_experiment(experiment_name)
        except mlflow.exceptions.MlflowException:
            # Experiment already exists
            experiment = mlflow.get_experiment_by_name(experiment_name)
            self.experiment_id = experiment.experiment_id

    def start_run(self, run_name: str | None = None) -> None:
        mlflow.set_experiment(self.experiment_name)
        mlflow.start_run(run_name=run_name)

    def end_run(self) -> None:
        mlflow.end_run()

    def log_config(self, config: DriverConfig, options: Mapping[str, object] | None = None) -> None:
        """Log driver settings and advanced options as parameters."""
        params: dict[str, Any] = {
            "max_iterations": config.max_iterations,
            "convergence_tolerance": config.convergence_tolerance,
            "max_evaluations": config.max_evaluations,
            "max_time_fraction": config.max_time_fraction,
            "max_resample_attempts": config.max_resample_attempts,
            "diagnostics": config.diagnostics.value,
        }
        mlflow.log_params(params)
        if options:
            mlflow.log_params({f"option_{k}": v for k, v in options.items()})

    def log_generation_stats(self, stats: GenerationStats) -> None:
        """Log per-generation statistics as metrics."""
        metrics = {
            "best": stats.best,
            "mean": stats.mean,
            "std": stats.std,
            "best_ever": stats.best_ever,
            "evals": stats.evals,
            "resamples": stats.resamples,
            "clamped": stats.clamped,
            "sigma": stats.sigma,
            "throughput": stats.throughput,
        }
        mlflow.log_metrics(metrics, step=stats.iteration)

    def log_results(self, results: OptimizationResults) -> None:
        """Log final optimization results."""
        mlflow.log_metric("final_best_fitness", results.fitness)
        mlflow.log_param("best_x", json.dumps([float(v) for v in results.x]))

        for key, value in (results.summary or {}).items():
            if isinstance(value, bool):
                mlflow.log_param(f"summary_{key}", str(value))
            elif isinstance(value, (int, float)):
                mlflow.log_metric(f"summary_{key}", value)
            else:
                mlflow.log_param(f"summary_{key}", str(value)[:500])

        self.log_artifact_json(results.to_dict(), filename="results.json")

    def log_artifact_json(self, data: dict[str, Any], filename: str = "results.json") -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / filename
            with open(path, "w") as f:
                json.dump(data, f, indent=2, default=str)
            mlflow.log_artifact(str(path))

    @staticmethod
    def get_best_run(experiment_name: str) -> dict[str, Any] | None:
        """Return the run with the lowest final fitness, or None if there are no runs."""
        experiment = mlflow.get_experiment_by_name(experiment_name)
        if experiment is None:
            return None

        runs = mlflow.search_runs(
            experiment_ids=[experiment.experiment_id],
            order_by=["metrics.final_best_fitness ASC"],
        )

        if runs.empty:
            return None

        return runs.iloc[0].to_dict()
