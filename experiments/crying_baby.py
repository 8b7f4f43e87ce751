"""Crying baby POMDP: discrete Bayes filter belief trace."""
import os
import sys

import matplotlib.pyplot as plt
import numpy as np

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from state_estimation.filters import discrete_filter
from state_estimation.ssm import Action, Observation, crying_baby_pomdp
from state_estimation.utils import ExperimentLogger, plot_discrete_belief

# (action, observation) sequence of the worked example
EPISODE = [
    (Action.IGNORE, Observation.CRYING),
    (Action.FEED, Observation.QUIET),
    (Action.IGNORE, Observation.QUIET),
    (Action.IGNORE, Observation.QUIET),
    (Action.IGNORE, Observation.CRYING),
]


def run_experiment(b0=(0.5, 0.5), episode=EPISODE, save_figures=True):
    """Filter the episode and print/plot each belief."""
    problem = crying_baby_pomdp()
    actions = [a for a, _ in episode]
    observations = [o for _, o in episode]

    beliefs = discrete_filter(np.array(b0), problem, actions, observations)

    labels = [s.value for s in problem.states]
    print(f"b0 = {np.round(beliefs[0], 3)}")
    for t, (a, o) in enumerate(episode):
        print(f"b{t + 1} = {np.round(beliefs[t + 1], 3)}  (a={a.value}, o={o.value})")

    if save_figures:
        exp_logger = ExperimentLogger(experiment_name='crying_baby')
        exp_logger.create_timestamped_run_dir()
        figs_dir = exp_logger.get_figures_dir()

        fig, axes = plt.subplots(1, len(beliefs), figsize=(2.5 * len(beliefs), 3), sharey=True)
        for t, ax in enumerate(axes):
            plot_discrete_belief(ax, beliefs[t], labels)
            ax.set_title(f"b{t}")
        fig.tight_layout()
        fig.savefig(os.path.join(figs_dir, 'belief_trace.png'), dpi=150)
        plt.close(fig)

    return beliefs


if __name__ == '__main__':
    run_experiment()
