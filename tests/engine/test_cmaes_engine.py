"""Tests for the PyCMA-backed strategy engine."""

import math

import numpy as np
import pytest

from cmaopt.engine.strategies import engine_from_name
from cmaopt.engine.strategies.cmaes import CMAESEngine, CMAESState
from cmaopt.engine.types import EngineParams, TerminationBudgets


def _params(n=3, *, lam=6, seed=11, steps=None, budgets=None) -> EngineParams:
    return EngineParams(
        dimension=n,
        initial_mean=np.zeros(n),
        step_sizes=np.full(n, 0.3) if steps is None else np.asarray(steps, dtype=np.float64),
        population_size=lam,
        seed=seed,
        budgets=budgets or TerminationBudgets(max_iterations=50),
    )


def _one_generation(state: CMAESState) -> None:
    population = state.sample_population()
    state.update_distribution([float(x @ x) for x in population])


class TestCMAESEngine:
    """Lifecycle of a CMA-ES search state."""

    def test_registry_lookup(self):
        assert isinstance(engine_from_name("cmaes"), CMAESEngine)
        with pytest.raises(KeyError):
            engine_from_name("nelder-mead")

    def test_population_shape(self):
        with CMAESEngine().initialize(_params(4, lam=9)) as state:
            population = state.sample_population()

            assert len(population) == 9
            assert all(x.shape == (4,) for x in population)

    def test_resample_single_replaces_one_slot(self):
        with CMAESEngine().initialize(_params()) as state:
            population = [x.copy() for x in state.sample_population()]
            updated = state.resample_single(2)

            assert not np.array_equal(updated[2], population[2])
            for i in (0, 1, 3, 4, 5):
                np.testing.assert_array_equal(updated[i], population[i])

    def test_best_ever_before_and_after_update(self):
        with CMAESEngine().initialize(_params()) as state:
            x, f = state.best_ever()
            assert math.isinf(f)
            np.testing.assert_array_equal(x, np.zeros(3))

            _one_generation(state)

            x, f = state.best_ever()
            assert math.isfinite(f)
            assert f == pytest.approx(float(x @ x))

    def test_update_rejects_wrong_length(self):
        with CMAESEngine().initialize(_params()) as state:
            state.sample_population()
            with pytest.raises(ValueError, match="expected 6"):
                state.update_distribution([0.0, 1.0])

    def test_iteration_budget_terminates(self):
        budgets = TerminationBudgets(max_iterations=4)
        with CMAESEngine().initialize(_params(budgets=budgets)) as state:
            generations = 0
            while state.termination_reason() is None:
                _one_generation(state)
                generations += 1

            assert generations == 4
            assert "maxiter" in state.termination_reason()
            assert state.state()["iterations"] == 4

    def test_per_dimension_steps(self):
        with CMAESEngine().initialize(_params(steps=[1.0, 0.5, 0.25])) as state:
            assert state.es.sigma0 == pytest.approx(1.0)
            assert "CMA_stds" in state.es.opts and state.es.opts["CMA_stds"] is not None

    def test_dispose_is_idempotent(self):
        state = CMAESEngine().initialize(_params())
        state.dispose()
        state.dispose()

        assert state.disposed
        assert state.state() == {}
        with pytest.raises(RuntimeError, match="disposed"):
            state.sample_population()

    def test_context_manager_disposes_on_error(self):
        with pytest.raises(ZeroDivisionError):
            with CMAESEngine().initialize(_params()) as state:
                1 / 0
        assert state.disposed

    def test_banner_mentions_population(self):
        with CMAESEngine().initialize(_params(lam=10)) as state:
            assert "lambda=10" in state.banner()


class TestCMAESCheckpoints:
    """Pickled checkpoints."""

    def test_roundtrip_restores_distribution(self, tmp_path):
        path = tmp_path / "nested" / "resume.pkl"
        with CMAESEngine().initialize(_params()) as state:
            for _ in range(5):
                _one_generation(state)
            state.write_checkpoint(path)
            mean = state.es.mean.copy()
            sigma = state.sigma
            cov = state.es.sm.C.copy()

        budgets = TerminationBudgets(max_iterations=7)
        with CMAESEngine().initialize(_params(lam=10, seed=99, budgets=budgets)) as resumed:
            assert resumed.resume_from_checkpoint(path)

            np.testing.assert_allclose(resumed.es.mean, mean)
            assert resumed.sigma == pytest.approx(sigma)
            np.testing.assert_allclose(resumed.es.sm.C, cov)
            np.testing.assert_allclose(resumed.best_ever()[0], mean)

            assert resumed.iterations == 0
            assert resumed.termination_reason() is None
            assert len(resumed.sample_population()) == 10

    def test_resumed_state_runs_its_own_budget(self, tmp_path):
        path = tmp_path / "resume.pkl"
        with CMAESEngine().initialize(_params(budgets=TerminationBudgets(max_iterations=3))) as state:
            while state.termination_reason() is None:
                _one_generation(state)
            state.write_checkpoint(path)

        budgets = TerminationBudgets(max_iterations=4)
        with CMAESEngine().initialize(_params(budgets=budgets)) as resumed:
            assert resumed.resume_from_checkpoint(path)
            generations = 0
            while resumed.termination_reason() is None:
                _one_generation(resumed)
                generations += 1

        assert generations == 4

    def test_dimension_mismatch_is_rejected(self, tmp_path):
        path = tmp_path / "resume.pkl"
        with CMAESEngine().initialize(_params(3)) as state:
            _one_generation(state)
            state.write_checkpoint(path)

        with CMAESEngine().initialize(_params(4)) as other:
            assert other.resume_from_checkpoint(path) is False
            assert other.iterations == 0

    def test_garbage_file_is_rejected(self, tmp_path):
        path = tmp_path / "resume.pkl"
        path.write_bytes(b"\x00\x01 not a checkpoint")

        with CMAESEngine().initialize(_params()) as state:
            assert state.resume_from_checkpoint(path) is False

    def test_missing_file_is_rejected(self, tmp_path):
        with CMAESEngine().initialize(_params()) as state:
            assert state.resume_from_checkpoint(tmp_path / "absent.pkl") is False
