"""Example with a thread pool executor, streamed progress and MLflow tracking."""

from __future__ import annotations

import numpy as np

from cmaopt.engine import Diagnostics, DriverConfig, LocalPoolExecutor, OptimizationDriver
from cmaopt.engine.evaluation import ObjectiveEvaluator
from cmaopt.logging import MLflowTracker
from cmaopt.systems import Ackley


def main() -> None:
    """Run Ackley in 10 dimensions and record every generation in MLflow."""

    # 1. Set up MLflow tracking
    tracker = MLflowTracker(
        experiment_name="cmaopt-ackley-demo",
        tracking_uri="./mlruns",
    )

    # 2. Objective with built-in limits
    system = Ackley(10)

    # 3. Use parallel executor
    executor = LocalPoolExecutor(
        evaluator=ObjectiveEvaluator(system), mode="thread", num_workers=4, batch_size=4
    )

    # 4. Configure the driver
    config = DriverConfig(
        max_iterations=1500,
        diagnostics=Diagnostics.BOTH,
        output_dir="./ackley_run",
    )
    options = {"seed": 42, "sigma": 5.0, "lambda": 24}

    tracker.start_run("ackley_cmaes")
    tracker.log_config(config, options)

    try:
        driver = OptimizationDriver(system, config=config, executor=executor)
        x0 = np.full(system.num_parameters, 10.0)

        history = []
        for stats in driver.stream(x0, options):
            tracker.log_generation_stats(stats)
            history.append(stats)
            if stats.iteration % 100 == 0:
                print(f"Generation {stats.iteration}: best_ever={stats.best_ever:.6g}")

        print(f"Finished after {len(history)} generations")
    finally:
        tracker.end_run()
        executor.close()


if __name__ == "__main__":
    main()
