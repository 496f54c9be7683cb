"""End-to-end runs of the driver with the real CMA-ES engine."""

import numpy as np
import pytest

from cmaopt.core.system import CallableSystem
from cmaopt.engine import Diagnostics, DriverConfig, OptimizationDriver, optimize
from cmaopt.engine.evaluation import ObjectiveEvaluator
from cmaopt.engine.executors.pool import LocalPoolExecutor
from cmaopt.systems import Rosenbrock, Sphere


class TestConvergence:
    """Benchmarks reach their known optima."""

    def test_bounded_sphere(self):
        system = Sphere(5, bound=10.0)
        x = np.full(5, 5.0)

        f = optimize(system, x, {"seed": 42})

        assert f < 1e-6
        assert np.all(np.abs(x) <= 10.0)
        assert f == pytest.approx(system.objective_func(x, True))

    @pytest.mark.parametrize("n", [2, 3])
    def test_rosenbrock_from_origin(self, n):
        x = np.zeros(n)

        optimize(Rosenbrock(n), x, {"seed": 7})

        np.testing.assert_allclose(x, np.ones(n), atol=1e-3)

    def test_callable_objective_in_box(self):
        system = CallableSystem(
            lambda x: float((x[0] - 0.5) ** 2 + (x[1] + 0.25) ** 2), 2, lower=[0, -1], upper=[1, 0]
        )

        results = OptimizationDriver(system).run([0.9, -0.9], {"seed": 3})

        np.testing.assert_allclose(results.x, [0.5, -0.25], atol=1e-4)


class TestRunProperties:
    """Determinism, feasibility and monotonic progress."""

    def test_same_seed_is_bit_identical(self):
        config = DriverConfig(max_iterations=60)
        first = OptimizationDriver(Sphere(4), config=config).run(np.ones(4), {"seed": 1234})
        second = OptimizationDriver(Sphere(4), config=config).run(np.ones(4), {"seed": 1234})

        np.testing.assert_array_equal(first.x, second.x)
        assert first.fitness == second.fitness
        assert [s.best for s in first.history] == [s.best for s in second.history]

    def test_every_evaluation_is_inside_bounds(self, make_system):
        system = make_system(3, bound=1.0)
        config = DriverConfig(max_iterations=25)

        results = OptimizationDriver(system, config=config).run(
            np.full(3, 0.9), {"seed": 5, "sigma": 0.8}
        )

        lower, upper = system.parameter_limits()
        for x in system.calls:
            assert np.all(lower <= x) and np.all(x <= upper)
        assert results.summary["resamples"] > 0
        assert results.summary["clamped"] == 0

    def test_best_ever_never_increases(self):
        config = DriverConfig(max_iterations=80)
        results = OptimizationDriver(Rosenbrock(3), config=config).run(np.zeros(3), {"seed": 9})

        best = [s.best_ever for s in results.history]
        assert all(b2 <= b1 for b1, b2 in zip(best, best[1:]))
        assert results.fitness == best[-1]

    def test_evaluation_budget(self):
        results = OptimizationDriver(Sphere(3)).run(
            np.ones(3), {"seed": 2, "stopMaxFunEvals": 70, "popsize": 10}
        )

        assert "maxfevals" in results.summary["termination"]
        assert results.summary["evaluations"] <= 80

    def test_thread_pool_matches_sequential(self):
        system = Sphere(4, bound=3.0)
        config = DriverConfig(max_iterations=40)
        pool = LocalPoolExecutor(
            evaluator=ObjectiveEvaluator(system), mode="thread", num_workers=3, batch_size=2
        )

        sequential = OptimizationDriver(system, config=config).run(np.ones(4), {"seed": 77})
        pooled = OptimizationDriver(system, config=config, executor=pool).run(
            np.ones(4), {"seed": 77}
        )

        np.testing.assert_array_equal(sequential.x, pooled.x)
        assert sequential.fitness == pooled.fitness


class TestResume:
    """Resuming continues from the saved distribution under the new budgets."""

    def test_resumed_run_uses_new_budget(self, tmp_path):
        system = Sphere(4)
        first_config = DriverConfig(
            max_iterations=20, diagnostics=Diagnostics.FILE, output_dir=tmp_path
        )
        first = OptimizationDriver(system, config=first_config).run(np.ones(4), {"seed": 3})
        assert len(first.history) == 20

        second_config = DriverConfig(
            max_iterations=40, diagnostics=Diagnostics.FILE, output_dir=tmp_path
        )
        second = OptimizationDriver(system, config=second_config).run(
            np.ones(4), {"seed": 3, "resume": True}
        )

        assert second.summary["resumed"] is True
        assert len(second.history) == 40
        assert second.fitness < first.fitness

    def test_resumed_run_uses_new_evaluation_budget(self, tmp_path):
        config = DriverConfig(diagnostics=Diagnostics.FILE, output_dir=tmp_path)
        OptimizationDriver(Sphere(4), config=config).run(
            np.ones(4), {"seed": 5, "stopMaxFunEvals": 40}
        )

        resumed = OptimizationDriver(Sphere(4), config=config).run(
            np.ones(4), {"seed": 5, "stopMaxFunEvals": 400, "resume": True}
        )

        assert resumed.summary["resumed"] is True
        assert resumed.summary["generations"] > 0
        assert 400 <= resumed.summary["evaluations"] < 400 + 8
