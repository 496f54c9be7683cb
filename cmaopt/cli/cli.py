"""cmaopt command-line interface."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from cmaopt.engine.driver import Diagnostics, DriverConfig, OptimizationDriver
from cmaopt.engine.evaluation import ObjectiveEvaluator
from cmaopt.engine.executors.factory import ExecutorFactory
from cmaopt.engine.strategies import engine_from_name
from cmaopt.systems import available_systems, system_from_name
from cmaopt.utils.logging import configure_logging

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="cmaopt CLI")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Console log level for the cmaopt loggers (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run an optimization from a config file")
    run_parser.add_argument("config", help="Path to YAML/JSON config file")
    run_parser.add_argument(
        "--diagnostics",
        choices=[d.value for d in Diagnostics],
        default=None,
        help="Override the driver diagnostics setting",
    )

    subparsers.add_parser("systems", help="List the available benchmark systems")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "run":
        return _run_from_config(Path(args.config), diagnostics=args.diagnostics)
    elif args.command == "systems":
        for name in available_systems():
            print(name)
        return 0

    parser.print_help()
    return 0


def _run_from_config(path: Path, *, diagnostics: str | None = None) -> int:
    data = _load_config(path)

    system_cfg = data.get("system", {})
    name = system_cfg.get("name")
    if not name:
        raise ValueError("system.name is required")
    system = system_from_name(name, **system_cfg.get("params", {}))

    x0 = _initial_guess(data.get("initial_guess"), system.num_parameters)
    driver_cfg = _build_driver_config(data.get("driver", {}), diagnostics)
    engine_cfg = data.get("engine", {})
    engine = engine_from_name(engine_cfg.get("name", "cmaes"), **engine_cfg.get("params", {}))
    executor = ExecutorFactory.build(data.get("executor", {}), ObjectiveEvaluator(system))
    options = data.get("options", {})

    driver = OptimizationDriver(system, config=driver_cfg, engine=engine, executor=executor)
    _LOGGER.info("Running %s with %d parameters", name, system.num_parameters)

    tracker = _build_tracker(data.get("mlflow"))
    if tracker is not None:
        tracker.start_run(data.get("run_name"))
        tracker.log_config(driver_cfg, options)
    try:
        results = driver.run(x0, options)
        if tracker is not None:
            for stats in results.history:
                tracker.log_generation_stats(stats)
            tracker.log_results(results)
    finally:
        if tracker is not None:
            tracker.end_run()

    print(f"Best fitness: {results.fitness:.10g}")
    print(f"Best point: {json.dumps([float(v) for v in results.x])}")
    print(json.dumps(results.summary, indent=2, default=str))
    return 0


def _load_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    if path.suffix.lower() in {".json"}:
        return json.loads(path.read_text())
    return yaml.safe_load(path.read_text()) or {}


def _initial_guess(value: list[float] | None, n: int) -> np.ndarray:
    if value is None:
        return np.zeros(n)
    return np.asarray(value, dtype=np.float64)


def _build_driver_config(cfg: dict[str, Any], diagnostics: str | None) -> DriverConfig:
    defaults = DriverConfig()
    return DriverConfig(
        max_iterations=cfg.get("max_iterations", defaults.max_iterations),
        convergence_tolerance=cfg.get("convergence_tolerance", defaults.convergence_tolerance),
        max_evaluations=cfg.get("max_evaluations"),
        max_time_fraction=cfg.get("max_time_fraction"),
        diagnostics=Diagnostics(diagnostics or cfg.get("diagnostics", "quiet")),
        output_dir=Path(cfg.get("output_dir", ".")),
        max_resample_attempts=cfg.get("max_resample_attempts", defaults.max_resample_attempts),
        timeout_s=cfg.get("timeout_s"),
    )


def _build_tracker(cfg: dict[str, Any] | None) -> Any:
    if not cfg:
        return None
    from cmaopt.logging import MLflowTracker

    return MLflowTracker(
        experiment_name=cfg.get("experiment_name", "cmaopt"),
        tracking_uri=cfg.get("tracking_uri"),
    )
