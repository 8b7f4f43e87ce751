"""Discrete Bayes filter (HMM forward update)."""
import numpy as np

from .common import check_shape, normalize_weights


def discrete_update(belief, problem, action, observation):
    """
    Exact belief update over a finite state space.

    b2(s2) = O(a, s2, o) * sum_s T(s, a, s2) b(s), then L1-normalized. If the
    observation is impossible under every successor the belief is flattened
    to uniform instead.

    Parameters
    ----------
    belief : ndarray [|S|]
        Probability vector indexed like problem.states
    problem : DiscretePOMDP
    action, observation
        Elements of problem.actions and problem.observations

    Returns
    -------
    ndarray [|S|]
        Posterior belief (the input is not modified)
    """
    b = check_shape('belief', belief, (problem.n_states,))

    predicted = problem.transition_matrix(action).T @ b
    b2 = problem.observation_likelihood(action, observation) * predicted

    b2, _ = normalize_weights(b2)
    return b2


def discrete_filter(b0, problem, actions, observations):
    """
    Run the discrete Bayes filter over an action/observation sequence.

    Parameters
    ----------
    b0 : ndarray [|S|]
        Prior belief
    problem : DiscretePOMDP
    actions, observations : sequence of length T

    Returns
    -------
    beliefs : ndarray [T + 1, |S|]
        beliefs[0] = b0, beliefs[t + 1] is the belief after step t
    """
    if len(actions) != len(observations):
        raise ValueError(
            f"Got {len(actions)} actions but {len(observations)} observations")

    b = check_shape('b0', b0, (problem.n_states,))
    beliefs = np.zeros((len(actions) + 1, problem.n_states))
    beliefs[0] = b

    for t, (a, o) in enumerate(zip(actions, observations)):
        b = discrete_update(b, problem, a, o)
        beliefs[t + 1] = b

    return beliefs
