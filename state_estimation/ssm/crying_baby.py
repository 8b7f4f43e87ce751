"""Crying baby POMDP.

We cannot observe whether the baby is hungry, only whether it is crying or
quiet, and use that noisy observation to update a belief over its state.
"""
from enum import Enum

from .discrete_pomdp import DiscretePOMDP


class State(Enum):
    HUNGRY = 'hungry'
    SATED = 'sated'


class Action(Enum):
    FEED = 'feed'
    SING = 'sing'
    IGNORE = 'ignore'


class Observation(Enum):
    CRYING = 'crying'
    QUIET = 'quiet'


def crying_baby_transition(s, a, s2):
    """T(s2 | s, a)."""
    if a == Action.FEED:
        return 0.0 if s2 == State.HUNGRY else 1.0
    if s == State.HUNGRY:
        # Singing or ignoring never sates a hungry baby
        return 1.0 if s2 == State.HUNGRY else 0.0
    return 0.1 if s2 == State.HUNGRY else 0.9


def crying_baby_observation(a, s2, o):
    """O(o | a, s2). Singing gives a perfect observation."""
    if a == Action.SING:
        if s2 == State.HUNGRY:
            return 1.0 if o == Observation.CRYING else 0.0
        return 0.0 if o == Observation.CRYING else 1.0
    if s2 == State.HUNGRY:
        return 0.8 if o == Observation.CRYING else 0.2
    return 0.1 if o == Observation.CRYING else 0.9


def crying_baby_reward(s, a):
    """R(s, a)."""
    return ((-10 if s == State.HUNGRY else 0)
            + (-5 if a == Action.FEED else 0)
            + (5 if a == Action.SING and s == State.SATED else 0)
            + (-2 if a == Action.SING and s == State.HUNGRY else 0))


def crying_baby_pomdp(gamma=0.9):
    """Build the crying baby problem with states ordered (hungry, sated)."""
    return DiscretePOMDP(
        states=tuple(State),
        actions=tuple(Action),
        observations=tuple(Observation),
        T=crying_baby_transition,
        O=crying_baby_observation,
        R=crying_baby_reward,
        gamma=gamma,
    )
