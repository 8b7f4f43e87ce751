"""Belief-update filter implementations.

Every filter exposes update(belief, problem, action, observation). Callers
pick the variant explicitly, by import or through `get_filter`.
"""
from .common import (
    DimensionMismatchError,
    normalize_weights,
    symmetrize,
    sqrtm_psd,
    numerical_jacobian,
    joseph_update,
    standard_update,
    wrap_angles,
)
from .discrete import discrete_update, discrete_filter
from .pf import (
    particle_update,
    particle_step,
    particle_filter,
    particle_estimate,
    multinomial_resample,
    systematic_resample,
    effective_sample_size,
)
from .kf import KalmanBelief, kf_predict, kf_correct, kf_update, kalman_filter
from .ekf import ekf_predict, ekf_correct, ekf_update, extended_kalman_filter
from .ukf import (
    UnscentedBelief,
    sigma_points,
    weights,
    unscented_transform,
    ukf_predict,
    ukf_correct,
    ukf_update,
    unscented_kalman_filter,
)

FILTERS = {
    'discrete': discrete_update,
    'particle': particle_update,
    'kf': kf_update,
    'ekf': ekf_update,
    'ukf': ukf_update,
}

# Filters that return a new belief instead of updating it in place
RETURNS_BELIEF = frozenset({'discrete', 'particle'})


def get_filter(name):
    """Return the update function registered under `name`."""
    if name not in FILTERS:
        raise ValueError(f"filter_type must be one of {sorted(FILTERS)}, got '{name}'")
    return FILTERS[name]


__all__ = [
    # Main updates
    'discrete_update',
    'particle_update',
    'kf_update',
    'ekf_update',
    'ukf_update',
    'FILTERS',
    'RETURNS_BELIEF',
    'get_filter',
    # Beliefs
    'KalmanBelief',
    'UnscentedBelief',
    # Sequence runners
    'discrete_filter',
    'particle_filter',
    'kalman_filter',
    'extended_kalman_filter',
    'unscented_kalman_filter',
    # KF/EKF/UKF components
    'kf_predict',
    'kf_correct',
    'ekf_predict',
    'ekf_correct',
    'ukf_predict',
    'ukf_correct',
    'sigma_points',
    'weights',
    'unscented_transform',
    # Particle components
    'particle_step',
    'particle_estimate',
    'multinomial_resample',
    'systematic_resample',
    'effective_sample_size',
    # Utilities
    'DimensionMismatchError',
    'normalize_weights',
    'symmetrize',
    'sqrtm_psd',
    'numerical_jacobian',
    'joseph_update',
    'standard_update',
    'wrap_angles',
]
