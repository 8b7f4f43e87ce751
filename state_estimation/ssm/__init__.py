"""Problem models: spaces plus transition and observation distributions."""
from .discrete_pomdp import DiscretePOMDP
from .crying_baby import (
    State,
    Action,
    Observation,
    crying_baby_pomdp,
    crying_baby_transition,
    crying_baby_observation,
    crying_baby_reward,
)
from .random_walk import RandomWalk
from .linear_gaussian import LinearGaussianPOMDP, random_walk_2d
from .nonlinear_gaussian import NonlinearGaussianPOMDP, RangeBearingWalk

__all__ = [
    'DiscretePOMDP',
    'State',
    'Action',
    'Observation',
    'crying_baby_pomdp',
    'crying_baby_transition',
    'crying_baby_observation',
    'crying_baby_reward',
    'RandomWalk',
    'LinearGaussianPOMDP',
    'random_walk_2d',
    'NonlinearGaussianPOMDP',
    'RangeBearingWalk',
]
