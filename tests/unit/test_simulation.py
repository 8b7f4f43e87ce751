"""Unit tests for the simulation driver and run configuration."""

import numpy as np
import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from state_estimation.config import SimulationConfig
from state_estimation.filters import KalmanBelief, UnscentedBelief
from state_estimation.simulation import (
    SimulationResult,
    belief_mean_cov,
    run_simulation,
    snapshot,
    step,
    summarize,
)
from state_estimation.ssm import RandomWalk, State, random_walk_2d
from state_estimation.utils import ExperimentLogger


class TestSimulationConfig:
    def test_defaults(self):
        config = SimulationConfig()

        assert config.seed == 228
        assert config.n_particles == 1000
        assert config.lam == 2.0
        assert config.as_dict()['n_steps'] == 30

    @pytest.mark.parametrize("kwargs", [{'n_steps': -1}, {'n_particles': 0}])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)


class TestSnapshots:
    def test_gaussian_snapshot_independent(self):
        belief = KalmanBelief(np.zeros(2), np.eye(2))
        copy = snapshot(belief)
        belief.mean[0] = 1.0

        assert copy.mean[0] == 0.0

    def test_particle_snapshot_independent(self):
        particles = np.zeros(5)
        copy = snapshot(particles)
        particles[0] = 1.0

        assert copy[0] == 0.0

    def test_mean_cov(self):
        mean, cov = belief_mean_cov(KalmanBelief(np.ones(2), 2 * np.eye(2)))

        np.testing.assert_allclose(mean, [1.0, 1.0])
        np.testing.assert_allclose(cov, 2 * np.eye(2))


class TestStep:
    """Tests for a single driver step."""

    def test_kalman_step_updates_in_place(self, rng):
        problem = random_walk_2d()
        belief = KalmanBelief(np.zeros(2), np.eye(2))

        out = step(belief, problem, 'kf', np.zeros(2), rng)

        assert out.belief is belief
        assert out.action.shape == (2,)
        assert out.observation.shape == (2,)

    def test_discrete_step_returns_new_belief(self, rng, crying_baby):
        b = np.array([0.5, 0.5])

        out = step(b, crying_baby, 'discrete', State.HUNGRY, rng)

        assert out.belief is not b
        np.testing.assert_allclose(out.belief.sum(), 1.0)
        assert out.state in crying_baby.states

    def test_stationary_holds_state(self, rng):
        problem = RandomWalk(n_dim=1)
        particles = problem.sample_prior(100, rng)

        out = step(particles, problem, 'particle', 3.0, rng, stationary=True, observation=3.0)

        assert out.state == 3.0
        assert out.observation == 3.0
        assert out.belief.shape == (100,)

    def test_stationary_needs_observation(self, rng):
        problem = RandomWalk(n_dim=1)
        with pytest.raises(ValueError, match="observation"):
            step(np.zeros(10), problem, 'particle', 0.0, rng, stationary=True)

    def test_unknown_filter(self, rng):
        with pytest.raises(ValueError, match="filter_type"):
            step(np.zeros(2), random_walk_2d(), 'enkf', np.zeros(2), rng)


class TestRunSimulation:
    """Tests for the multi-step driver."""

    def test_snapshots_per_step(self, rng):
        problem = random_walk_2d()
        belief = UnscentedBelief(np.zeros(2), np.eye(2))

        result = run_simulation(belief, problem, 'ukf', np.zeros(2), 6, rng)

        assert isinstance(result, SimulationResult)
        assert len(result.steps) == 6
        assert result.steps[0].belief is not result.steps[1].belief
        np.testing.assert_array_equal(result.belief.mean, belief.mean)

    def test_deterministic_given_seed(self):
        problem = RandomWalk(n_dim=2)
        runs = []
        for _ in range(2):
            rng = np.random.default_rng(228)
            particles = problem.sample_prior(200, rng)
            result = run_simulation(particles, problem, 'particle', np.zeros(2), 5, rng)
            runs.append(result.to_arrays())

        np.testing.assert_array_equal(runs[0]['means'], runs[1]['means'])
        np.testing.assert_array_equal(runs[0]['states'], runs[1]['states'])

    def test_discrete_arrays(self, rng, crying_baby):
        result = run_simulation(np.array([0.5, 0.5]), crying_baby, 'discrete', State.SATED, 4, rng)

        data = result.to_arrays()

        assert data['beliefs'].shape == (4, 2)
        assert set(data['states']) <= {'hungry', 'sated'}
        assert summarize(result) == {}

    def test_summary_keys(self, rng):
        problem = random_walk_2d()
        result = run_simulation(KalmanBelief(np.zeros(2), np.eye(2)), problem, 'kf',
                                np.zeros(2), 10, rng)

        metrics = summarize(result)

        assert set(metrics) == {'final_error', 'coverage'}
        assert 0.0 <= metrics['coverage'] <= 1.0

    def test_discrete_particles(self, tmp_path, rng, crying_baby):
        """Particle runs over POMDP states cache a state histogram."""
        exp_logger = ExperimentLogger(experiment_name='sim', results_root=str(tmp_path))
        particles = np.array([State.HUNGRY] * 30 + [State.SATED] * 30, dtype=object)

        result = run_simulation(particles, crying_baby, 'particle', State.HUNGRY, 3, rng,
                                exp_logger=exp_logger, config={'n_steps': 3})
        data = exp_logger.load_run('particle', n_steps=3)

        assert summarize(result) == {}
        assert set(data['particle_states']) <= {'hungry', 'sated'}
        assert data['particle_counts'].shape == (3, len(data['particle_states']))
        np.testing.assert_array_equal(data['particle_counts'].sum(axis=1), 60)
        assert 'means' not in data

    def test_discrete_particles_have_no_moments(self):
        with pytest.raises(ValueError, match="discrete states"):
            belief_mean_cov(np.array([State.HUNGRY, State.SATED], dtype=object))

    def test_logs_run(self, tmp_path, rng):
        exp_logger = ExperimentLogger(experiment_name='sim', results_root=str(tmp_path))
        config = SimulationConfig(n_steps=3).as_dict()

        run_simulation(KalmanBelief(np.zeros(2), np.eye(2)), random_walk_2d(), 'ekf',
                       np.zeros(2), 3, rng, exp_logger=exp_logger, config=config)

        assert exp_logger.run_exists('ekf', **config)
        assert exp_logger.load_run('ekf', **config)['means'].shape == (3, 2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
