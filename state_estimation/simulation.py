"""Simulation driver: advance the true state and feed the active filter.

The driver owns both the true state and the belief. Sampling the next true
state/observation and updating the belief are separate calls, so the filters
never see the true state.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np

from .filters import RETURNS_BELIEF, get_filter, particle_estimate
from .utils.metrics import belief_covers_state

logger = logging.getLogger(__name__)


@dataclass
class SimulationStep:
    """Belief after one update plus the step that produced it."""
    belief: Any
    state: Any
    action: Any
    observation: Any


@dataclass
class SimulationResult:
    """Trajectory of one simulation run."""
    filter_name: str
    initial_state: Any
    steps: List[SimulationStep] = field(default_factory=list)
    runtime_sec: float = 0.0

    @property
    def belief(self):
        """Final belief snapshot."""
        return self.steps[-1].belief if self.steps else None

    @property
    def states(self):
        return [s.state for s in self.steps]

    def to_arrays(self):
        """Numeric arrays for caching (means/covs only for continuous beliefs)."""
        data = {
            'states': np.array([_as_value(s.state) for s in self.steps]),
            'actions': np.array([_as_value(s.action) for s in self.steps]),
            'observations': np.array([_as_value(s.observation) for s in self.steps]),
        }
        if self.filter_name == 'discrete':
            data['beliefs'] = np.array([s.belief for s in self.steps])
        elif self.steps and not is_numeric_belief(self.steps[0].belief):
            data.update(_state_histogram([s.belief for s in self.steps]))
        else:
            stats = [belief_mean_cov(s.belief) for s in self.steps]
            data['means'] = np.array([m for m, _ in stats])
            data['covs'] = np.array([P for _, P in stats])
        return data


def _as_value(x):
    """Enum members are stored by value."""
    return getattr(x, 'value', x)


def _state_histogram(particle_sets):
    """
    Particle counts per distinct state at every step.

    Returns
    -------
    dict
        'particle_states' [K] (sorted state values) and 'particle_counts' [T, K]
    """
    values = [np.array([_as_value(p) for p in particles]) for particles in particle_sets]
    labels = np.unique(np.concatenate(values))
    counts = np.array([[np.count_nonzero(v == label) for label in labels] for v in values])
    return {'particle_states': labels, 'particle_counts': counts}


def is_numeric_belief(belief):
    """True for Gaussian beliefs and particle sets of numbers."""
    if hasattr(belief, 'mean') and hasattr(belief, 'cov'):
        return True
    return np.asarray(belief).dtype.kind in 'biuf'


def snapshot(belief):
    """Independent copy of a belief for read-only consumers."""
    if hasattr(belief, 'copy'):
        return belief.copy()
    return np.array(belief, copy=True)


def belief_mean_cov(belief):
    """Mean and covariance of a Gaussian belief or numeric particle set."""
    if hasattr(belief, 'mean') and hasattr(belief, 'cov'):
        return np.atleast_1d(belief.mean), np.atleast_2d(belief.cov)
    if not is_numeric_belief(belief):
        raise ValueError("Particles of discrete states have no mean or covariance")
    return particle_estimate(belief)


def step(belief, problem, filter_name, state, rng, stationary=False, observation=None,
         **filter_kwargs):
    """
    One simulation step.

    Samples an action, advances the true state, samples an observation and
    updates the belief. With `stationary=True` the true state and the given
    observation are held fixed and only the action is resampled.

    Parameters
    ----------
    belief
        Current belief; Gaussian beliefs are updated in place
    problem
        Problem model exposing sample_action, advance, sample_observation
    filter_name : str
        One of state_estimation.filters.FILTERS
    state
        Current true state
    rng : np.random.Generator
    stationary : bool
    observation : optional
        Observation to reuse when stationary
    **filter_kwargs
        Forwarded to the update function

    Returns
    -------
    SimulationStep
    """
    update_fn = get_filter(filter_name)
    action = problem.sample_action(rng)

    if stationary:
        if observation is None:
            raise ValueError("A stationary step needs the observation to hold fixed")
    else:
        state = problem.advance(state, action, rng)
        observation = problem.sample_observation(state, action, rng)

    if filter_name == 'particle':
        filter_kwargs.setdefault('rng', rng)

    result = update_fn(belief, problem, action, observation, **filter_kwargs)
    if filter_name in RETURNS_BELIEF:
        belief = result

    return SimulationStep(belief, state, action, observation)


def run_simulation(belief, problem, filter_name, state0, n_steps, rng, stationary=False,
                   observation0=None, exp_logger=None, config: Optional[dict] = None,
                   **filter_kwargs):
    """
    Run `n_steps` simulation steps from (belief, state0).

    Parameters
    ----------
    belief
        Prior belief (Gaussian beliefs are updated in place)
    problem
    filter_name : str
    state0
        Initial true state
    n_steps : int
    rng : np.random.Generator
    stationary : bool
    observation0 : optional
        Initial observation, required when stationary
    exp_logger : ExperimentLogger, optional
        Records the run (and caches its arrays) when given
    config : dict, optional
        Run configuration passed to the experiment logger
    **filter_kwargs
        Forwarded to the update function

    Returns
    -------
    SimulationResult
        One snapshot per step
    """
    result = SimulationResult(filter_name=filter_name, initial_state=state0)
    state, observation = state0, observation0

    start = time.perf_counter()
    for _ in range(n_steps):
        out = step(belief, problem, filter_name, state, rng, stationary, observation,
                   **filter_kwargs)
        belief, state, observation = out.belief, out.state, out.observation
        result.steps.append(SimulationStep(snapshot(belief), state, out.action, observation))
    result.runtime_sec = time.perf_counter() - start

    logger.debug("%s: %d steps in %.3fs", filter_name, n_steps, result.runtime_sec)
    if exp_logger is not None:
        exp_logger.save_run(filter_name, config or {}, result.to_arrays(),
                            metrics=summarize(result), runtime_sec=result.runtime_sec)
    return result


def summarize(result, n_sigma=3.0, atol=1.0):
    """
    Final estimation error and fraction of steps whose belief covers the truth.

    Returns an empty dict for discrete beliefs, including particle sets of
    discrete states.
    """
    if result.filter_name == 'discrete' or not result.steps:
        return {}
    if not is_numeric_belief(result.steps[-1].belief):
        return {}

    covered = []
    for s in result.steps:
        mean, cov = belief_mean_cov(s.belief)
        std = np.sqrt(np.maximum(np.diag(cov), 0.0))
        covered.append(belief_covers_state(mean, std, s.state, n_sigma, atol))

    mean, _ = belief_mean_cov(result.steps[-1].belief)
    final_error = float(np.linalg.norm(mean - np.atleast_1d(result.steps[-1].state)))
    return {'final_error': final_error, 'coverage': float(np.mean(covered))}
