"""Finite POMDP problem model."""
from dataclasses import dataclass
from typing import Any, Callable, Tuple

import numpy as np


@dataclass(frozen=True)
class DiscretePOMDP:
    """Finite state/action/observation POMDP.

    Parameters
    ----------
    states, actions, observations : tuple
        Finite spaces. Beliefs are indexed in the order of `states`.
    T : callable
        Transition probability T(s, a, s2)
    O : callable
        Observation probability O(a, s2, o)
    R : callable
        Reward R(s, a). Not used by the filters.
    gamma : float
        Discount factor. Not used by the filters.
    """

    states: Tuple[Any, ...]
    actions: Tuple[Any, ...]
    observations: Tuple[Any, ...]
    T: Callable[[Any, Any, Any], float]
    O: Callable[[Any, Any, Any], float]
    R: Callable[[Any, Any], float]
    gamma: float = 0.9

    @property
    def n_states(self):
        return len(self.states)

    def state_index(self, s):
        """Position of s in the belief vector."""
        return self.states.index(s)

    def _require(self, value, space, name):
        """Raise ValueError when value is not in the finite space."""
        if value not in space:
            raise ValueError(f"{name} {value!r} is not one of {space}")

    def transition_prob(self, s, a, s2):
        return float(self.T(s, a, s2))

    def observation_prob(self, a, s2, o):
        self._require(a, self.actions, "action")
        self._require(o, self.observations, "observation")
        return float(self.O(a, s2, o))

    def reward(self, s, a):
        return self.R(s, a)

    def transition_matrix(self, a):
        """
        Transition table for action a.

        Returns
        -------
        ndarray [|S|, |S|]
            Entry [i, j] = T(states[i], a, states[j])
        """
        self._require(a, self.actions, "action")
        return np.array([[self.transition_prob(s, a, s2) for s2 in self.states]
                         for s in self.states])

    def observation_likelihood(self, a, o):
        """
        Likelihood of observation o after action a, per successor state.

        Returns
        -------
        ndarray [|S|]
            Entry [j] = O(a, states[j], o)
        """
        return np.array([self.observation_prob(a, s2, o) for s2 in self.states])

    def sample_action(self, rng):
        """Uniformly random action."""
        return self.actions[rng.integers(len(self.actions))]

    def sample_transition(self, s, a, rng):
        """Draw s2 ~ T(s, a, .)."""
        self._require(s, self.states, "state")
        self._require(a, self.actions, "action")
        p = np.array([self.transition_prob(s, a, s2) for s2 in self.states])
        return self.states[rng.choice(len(self.states), p=p)]

    def sample_observation(self, s2, a, rng):
        """Draw o ~ O(a, s2, .)."""
        p = np.array([self.observation_prob(a, s2, o) for o in self.observations])
        return self.observations[rng.choice(len(self.observations), p=p)]

    def advance(self, s, a, rng):
        """True-state step used by the simulation driver."""
        return self.sample_transition(s, a, rng)

    def uniform_belief(self):
        return np.full(self.n_states, 1.0 / self.n_states)
