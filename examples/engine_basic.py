"""Minimal example showing how to run the optimization driver."""

from __future__ import annotations

import numpy as np

from cmaopt.engine import DriverConfig, OptimizationDriver
from cmaopt.systems import Rosenbrock


def main() -> None:
    system = Rosenbrock(4)
    system.set_parameter_limits(np.full(4, -2.0), np.full(4, 2.0))

    config = DriverConfig(max_iterations=2000)
    driver = OptimizationDriver(system, config=config)

    results = driver.run(np.zeros(4), {"seed": 1234, "sigma": 0.3})

    print("Termination:", results.summary["termination"])
    print("Generations:", results.summary["generations"])
    print("Total evaluations:", results.summary["evaluations"])
    print("Resamples:", results.summary["resamples"])
    x, fitness = results.best
    print("Best fitness:", fitness)
    print("Best point:", np.round(x, 6).tolist())

    for stats in results.history[::100]:
        print(
            f"Generation {stats.iteration}: best={stats.best:.4g} best_ever={stats.best_ever:.4g}"
            f" sigma={stats.sigma:.3g} throughput={stats.throughput:.2f}/s"
        )


if __name__ == "__main__":
    main()
