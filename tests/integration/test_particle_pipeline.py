"""Integration tests: particle filter on the bounded random walks."""

import numpy as np
import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from state_estimation.config import SimulationConfig
from state_estimation.filters import particle_filter
from state_estimation.simulation import run_simulation, summarize
from state_estimation.ssm import RandomWalk, random_walk_2d


class TestStationaryWalk:
    """1D walk with a fixed true state and observation."""

    def test_belief_concentrates(self):
        config = SimulationConfig(problem='random_walk_1d', n_steps=30, stationary=True)
        rng = np.random.default_rng(config.seed)
        problem = RandomWalk(n_dim=1)
        particles = problem.sample_prior(config.n_particles, rng)

        result = run_simulation(particles, problem, 'particle', 4.0, config.n_steps, rng,
                                stationary=True, observation0=4.0)

        final = result.belief
        assert final.shape == (config.n_particles,)
        assert np.all(np.isfinite(final))
        assert abs(np.mean(final) - 4.0) < 1.5
        assert summarize(result)['coverage'] > 0.8


class TestMovingWalk:
    """2D walks tracked over many steps."""

    def test_random_walk_box(self):
        config = SimulationConfig(n_steps=30)
        rng = np.random.default_rng(config.seed)
        problem = RandomWalk(n_dim=2)
        particles = problem.sample_prior(config.n_particles, rng)
        s0 = problem.sample_state(rng)

        result = run_simulation(particles, problem, 'particle', s0, config.n_steps, rng)

        assert result.belief.shape == (2, config.n_particles)
        assert summarize(result)['coverage'] > 0.7

    @pytest.mark.parametrize("resampler", ['multinomial', 'systematic'])
    def test_linear_gaussian_tracking(self, resampler):
        """Particle means follow a linear Gaussian walk."""
        rng = np.random.default_rng(5)
        problem = random_walk_2d()
        actions = 0.5 * rng.standard_normal((25, 2))
        xs, ys = problem.simulate(np.zeros(2), actions, rng)
        particles = rng.standard_normal((2, 500))

        m_filt, P_filt, ess, _ = particle_filter(particles, problem, actions, ys, rng, resampler)

        rmse = np.sqrt(np.mean(np.sum((m_filt - xs) ** 2, axis=1)))
        assert rmse < 2.5
        assert ess.mean() > 10.0
        assert np.all(np.linalg.eigvalsh(P_filt) >= -1e-12)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
