"""
Visualization helpers for belief snapshots.

Functions for plotting:
- Covariance ellipses and sigma points (Gaussian beliefs)
- Particle clouds and histograms (particle beliefs)
- Probability bars (discrete beliefs)
- Single simulation frames combining a belief with the true state
"""
from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Ellipse

from ..filters.common import symmetrize
from ..filters.ukf import sigma_points


def plot_covariance_ellipse(
    ax: plt.Axes,
    mean: np.ndarray,
    cov: np.ndarray,
    n_std: float = 2.0,
    **kwargs
) -> Ellipse:
    """
    Plot covariance ellipse on given axis.

    Parameters
    ----------
    ax : matplotlib.axes.Axes
    mean : ndarray [2]
        Center of ellipse (x, y)
    cov : ndarray [2, 2]
        2x2 covariance matrix, symmetrized before use
    n_std : float
        Number of standard deviations for ellipse size
    **kwargs
        Passed to matplotlib.patches.Ellipse

    Returns
    -------
    matplotlib.patches.Ellipse
    """
    eigenvalues, eigenvectors = np.linalg.eigh(symmetrize(cov))

    # Largest axis first
    order = eigenvalues.argsort()[::-1]
    eigenvalues = np.maximum(eigenvalues[order], 0.0)
    eigenvectors = eigenvectors[:, order]

    angle = np.degrees(np.arctan2(eigenvectors[1, 0], eigenvectors[0, 0]))
    width = 2 * n_std * np.sqrt(eigenvalues[0])
    height = 2 * n_std * np.sqrt(eigenvalues[1])

    ellipse = Ellipse(mean, width, height, angle=angle, **kwargs)
    ax.add_patch(ellipse)
    return ellipse


def plot_sigma_points(ax: plt.Axes, mean: np.ndarray, cov: np.ndarray, lam: float = 2.0,
                      color: str = 'c', **kwargs) -> np.ndarray:
    """Scatter the 2n + 1 sigma points of N(mean, cov); returns them."""
    points = sigma_points(mean, cov, lam)
    ax.scatter(points[:, 0], points[:, 1], c=color, marker='.', **kwargs)
    return points


def plot_particle_cloud(
    ax: plt.Axes,
    particles: np.ndarray,
    color: str = 'black',
    alpha: float = 0.25,
    size: float = 1,
    label: Optional[str] = None,
    **kwargs
) -> None:
    """
    Plot a cloud of 2D particles.

    Parameters
    ----------
    particles : ndarray [2, N]
        One particle per column
    """
    ax.scatter(particles[0], particles[1], c=color, s=size, alpha=alpha,
               marker='.', label=label, **kwargs)


def plot_particle_histogram(ax: plt.Axes, particles: np.ndarray, bins: int = 30,
                            bounds: Tuple[float, float] = (-10, 10)) -> None:
    """Histogram of scalar particles [N] over the state bounds."""
    ax.hist(particles, bins=bins, range=bounds, color='gray')
    ax.set_xlim(bounds)


def plot_discrete_belief(ax: plt.Axes, belief: np.ndarray,
                         labels: Optional[Sequence[str]] = None) -> None:
    """Bar chart of a probability vector."""
    if labels is None:
        labels = [str(i) for i in range(len(belief))]
    ax.bar(labels, belief, color='tab:blue')
    ax.set_ylim(0, 1)
    ax.set_ylabel('b(s)')


def plot_belief_frame(
    belief,
    true_state: np.ndarray,
    iteration: int,
    action: Optional[np.ndarray] = None,
    bounds: Tuple[float, float] = (-10, 10),
    lam: float = 2.0,
) -> plt.Figure:
    """
    One simulation frame: the belief, the true state and the last action.

    Parameters
    ----------
    belief : KalmanBelief, UnscentedBelief or ndarray
        Gaussian beliefs are drawn as 1/2/3-sigma ellipses plus sigma
        points, particle sets [2, N] as a cloud, scalar particles [N] as a
        histogram.
    true_state : ndarray [2] or float
    iteration : int
    action : ndarray, optional
    bounds : tuple of float
        Axis limits
    lam : float
        Spread parameter for sigma points of a plain KalmanBelief

    Returns
    -------
    matplotlib.figure.Figure
    """
    fig, ax = plt.subplots(figsize=(5, 5))

    if hasattr(belief, 'mean') and hasattr(belief, 'cov'):
        for level in (1, 2, 3):
            plot_covariance_ellipse(ax, belief.mean, belief.cov, n_std=level,
                                    fill=False, color='tab:blue', alpha=1.0 / level)
        plot_sigma_points(ax, belief.mean, belief.cov, getattr(belief, 'lam', lam))
    elif np.ndim(belief) == 2:
        plot_particle_cloud(ax, belief)
    else:
        plot_particle_histogram(ax, belief, bounds=bounds)
        true_state = np.array([true_state, 0.0])

    ax.plot(*np.atleast_1d(true_state), 'ro')
    ax.set_xlim(bounds)
    if np.ndim(belief) != 1:
        ax.set_ylim(bounds)

    if action is None:
        action_str = '-'
    else:
        action_str = np.array2string(np.round(np.atleast_1d(action), 4))
    ax.set_title(f"iteration={iteration}, action={action_str}")
    return fig
