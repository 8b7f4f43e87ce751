"""Particle filter on the 1D and 2D bounded random walks."""
import os
import sys

import matplotlib.pyplot as plt
import numpy as np

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from state_estimation.config import SimulationConfig
from state_estimation.simulation import run_simulation, summarize
from state_estimation.ssm import RandomWalk
from state_estimation.utils import ExperimentLogger, plot_belief_frame


def run_walk(config: SimulationConfig, n_dim, exp_logger=None):
    """
    Run one particle filter simulation.

    The prior is uniform over the box and the true state starts at a random
    observation, as in the course demo.
    """
    rng = np.random.default_rng(config.seed)
    problem = RandomWalk(n_dim=n_dim)

    particles = problem.sample_prior(config.n_particles, rng)
    o0 = problem.sample_state(rng)
    s0 = o0

    return run_simulation(
        particles, problem, 'particle', s0, config.n_steps, rng,
        stationary=config.stationary, observation0=o0,
        exp_logger=exp_logger, config=config.as_dict(),
    )


def run_experiment(n_steps=30, n_particles=1000, seed=228, save_figures=True):
    """1D stationary walk plus 2D moving walk; prints coverage and error."""
    exp_logger = ExperimentLogger(experiment_name='particle_random_walk')
    run_dir = exp_logger.create_timestamped_run_dir()
    figs_dir = exp_logger.get_figures_dir()

    configs = {
        1: SimulationConfig(problem='random_walk_1d', n_steps=n_steps,
                            n_particles=n_particles, seed=seed, stationary=True),
        2: SimulationConfig(problem='random_walk_2d', n_steps=n_steps,
                            n_particles=n_particles, seed=seed),
    }

    results = {}
    for n_dim, config in configs.items():
        result = run_walk(config, n_dim, exp_logger)
        metrics = summarize(result)
        results[config.problem] = result
        if metrics:
            print(f"{config.problem}: final error = {metrics['final_error']:.3f}, "
                  f"3-sigma coverage = {metrics['coverage']:.2f}, "
                  f"runtime = {result.runtime_sec:.2f}s")
        else:
            print(f"{config.problem}: no steps to score")

        if save_figures and result.steps:
            last = result.steps[-1]
            fig = plot_belief_frame(last.belief, last.state, config.n_steps, last.action)
            fig.savefig(os.path.join(figs_dir, f'{config.problem}.png'), dpi=150)
            plt.close(fig)

    print(f"Results written to {run_dir}")
    return results


if __name__ == '__main__':
    run_experiment()
