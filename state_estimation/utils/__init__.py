"""
Utility Functions.

This module contains utility functions for:
- Metrics computation
- Experiment logging
- Visualization of belief snapshots
"""
from .metrics import (
    compute_mse,
    compute_rmse,
    compute_nees,
    compute_symmetry_error,
    compute_min_eigenvalues,
    belief_covers_state,
)
from .experiment_logger import ExperimentLogger
from .visualization import (
    plot_covariance_ellipse,
    plot_sigma_points,
    plot_particle_cloud,
    plot_particle_histogram,
    plot_discrete_belief,
    plot_belief_frame,
)

__all__ = [
    # metrics
    'compute_mse',
    'compute_rmse',
    'compute_nees',
    'compute_symmetry_error',
    'compute_min_eigenvalues',
    'belief_covers_state',
    # experiment logger
    'ExperimentLogger',
    # visualization
    'plot_covariance_ellipse',
    'plot_sigma_points',
    'plot_particle_cloud',
    'plot_particle_histogram',
    'plot_discrete_belief',
    'plot_belief_frame',
]
