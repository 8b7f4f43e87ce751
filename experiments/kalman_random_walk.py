"""Kalman filter family on the 2D random walk and the range-bearing walk."""
import os
import sys

import matplotlib.pyplot as plt
import numpy as np

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from state_estimation.config import SimulationConfig
from state_estimation.filters import KalmanBelief, UnscentedBelief
from state_estimation.simulation import run_simulation, summarize
from state_estimation.ssm import RangeBearingWalk, random_walk_2d
from state_estimation.utils import ExperimentLogger, plot_belief_frame

BOUNDS = (-10.0, 10.0)


def make_belief(filter_name, mu0, lam):
    """Prior N(mu0, 0.1 I) of the right belief type."""
    cov0 = 0.1 * np.eye(2)
    if filter_name == 'ukf':
        return UnscentedBelief(mu0, cov0, lam)
    return KalmanBelief(mu0, cov0)


def run_filter(filter_name, problem, config: SimulationConfig, exp_logger=None):
    """Simulate `config.n_steps` steps with the given Gaussian filter."""
    rng = np.random.default_rng(config.seed)
    mu0 = rng.uniform(*BOUNDS, size=2)
    s0 = rng.multivariate_normal(np.zeros(2), np.eye(2))

    if exp_logger is not None and exp_logger.run_exists(filter_name, **config.as_dict()):
        cached = exp_logger.load_run(filter_name, **config.as_dict())
        print(f"{filter_name} on {config.problem}: loaded from cache")
        return cached

    belief = make_belief(filter_name, mu0, config.lam)
    result = run_simulation(belief, problem, filter_name, s0, config.n_steps, rng,
                            exp_logger=exp_logger, config=config.as_dict())
    metrics = summarize(result)
    if metrics:
        print(f"{filter_name} on {config.problem}: final error = {metrics['final_error']:.3f}, "
              f"3-sigma coverage = {metrics['coverage']:.2f}")
    else:
        print(f"{filter_name} on {config.problem}: no steps to score")
    return result


def run_experiment(n_steps=30, seed=228, lam=2.0, save_figures=True):
    """KF/EKF/UKF on the linear walk; EKF/UKF on the range-bearing walk."""
    exp_logger = ExperimentLogger(experiment_name='kalman_random_walk')
    exp_logger.create_timestamped_run_dir()
    figs_dir = exp_logger.get_figures_dir()

    runs = [
        ('kf', random_walk_2d(), 'random_walk_2d'),
        ('ekf', random_walk_2d(), 'random_walk_2d'),
        ('ukf', random_walk_2d(), 'random_walk_2d'),
        ('ekf', RangeBearingWalk(sensor_pos=np.array([-12.0, -12.0])), 'range_bearing'),
        ('ukf', RangeBearingWalk(sensor_pos=np.array([-12.0, -12.0])), 'range_bearing'),
    ]

    results = {}
    for filter_name, problem, problem_name in runs:
        config = SimulationConfig(problem=problem_name, n_steps=n_steps, seed=seed, lam=lam)
        result = run_filter(filter_name, problem, config, exp_logger)
        results[(filter_name, problem_name)] = result

        if save_figures and not isinstance(result, dict) and result.steps:
            last = result.steps[-1]
            fig = plot_belief_frame(last.belief, last.state, n_steps, last.action,
                                    bounds=BOUNDS, lam=lam)
            fig.savefig(os.path.join(figs_dir, f'{filter_name}_{problem_name}.png'), dpi=150)
            plt.close(fig)

    return results


if __name__ == '__main__':
    run_experiment()
