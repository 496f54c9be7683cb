"""Tests for the benchmark systems."""

import math

import numpy as np
import pytest

from cmaopt.systems import (
    Ackley,
    Cigtab,
    DropWave,
    Easom,
    Rosenbrock,
    Schwefel,
    Sphere,
    available_systems,
    system_from_name,
)


class TestBenchmarkOptima:
    """Each system attains its documented optimum."""

    @pytest.mark.parametrize(
        "system",
        [Sphere(4), Cigtab(3), Ackley(5), DropWave(), Rosenbrock(6), Easom()],
        ids=lambda s: type(s).__name__,
    )
    def test_value_at_optimum(self, system):
        x = system.optimal_parameters()
        assert system.objective_func(x, True) == pytest.approx(system.optimal_value(), abs=1e-12)

    def test_schwefel_optimum_is_approximate(self):
        system = Schwefel(3)
        value = system.objective_func(system.optimal_parameters(), True)
        assert value == pytest.approx(0.0, abs=1e-3)

    def test_optimum_is_inside_limits(self):
        for name in available_systems():
            system = system_from_name(name) if name in ("dropwave", "easom") else system_from_name(
                name, num_parameters=3
            )
            if not system.has_limits():
                continue
            lower, upper = system.parameter_limits()
            x = system.optimal_parameters()
            assert np.all(lower <= x) and np.all(x <= upper), name

    def test_rosenbrock_off_optimum(self):
        assert Rosenbrock(2).objective_func(np.zeros(2), True) == 1.0

    def test_ackley_limits(self):
        lower, upper = Ackley(2).parameter_limits()
        np.testing.assert_array_equal(upper, [32.768, 32.768])
        np.testing.assert_array_equal(lower, -upper)

    def test_easom_is_flat_far_away(self):
        assert Easom().objective_func(np.array([-50.0, 50.0]), True) == pytest.approx(0.0)

    def test_dropwave_dimension_is_fixed(self):
        assert DropWave().num_parameters == 2
        assert math.isclose(DropWave().optimal_value(), -1.0)


class TestRegistry:
    """Lookup by name."""

    def test_available_systems(self):
        assert available_systems() == [
            "ackley",
            "cigtab",
            "dropwave",
            "easom",
            "rosenbrock",
            "schwefel",
            "sphere",
        ]

    def test_lookup_with_params(self):
        system = system_from_name("Sphere", num_parameters=4, bound=2.0)
        assert isinstance(system, Sphere)
        assert system.num_parameters == 4
        assert system.has_limits()

    def test_unknown_name(self):
        with pytest.raises(KeyError, match="Unknown system"):
            system_from_name("himmelblau")
