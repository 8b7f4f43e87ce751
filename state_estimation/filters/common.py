"""Common utilities shared by the belief-update filters."""
import logging

import numpy as np

logger = logging.getLogger(__name__)


class DimensionMismatchError(ValueError):
    """Raised when belief, problem, action or observation shapes disagree."""


def check_shape(name, array, expected):
    """
    Fail fast if `array` does not have the `expected` shape.

    Parameters
    ----------
    name : str
        Name used in the error message
    array : array_like
    expected : tuple of int

    Returns
    -------
    ndarray
        `array` as a float ndarray
    """
    array = np.asarray(array, dtype=float)
    if array.shape != tuple(expected):
        raise DimensionMismatchError(
            f"{name} has shape {array.shape}, expected {tuple(expected)}")
    return array


def normalize_weights(w):
    """
    L1-normalize non-negative weights, falling back to uniform.

    When the weights sum to zero (every likelihood underflowed) or to a
    non-finite value, every entry is replaced by 1 / len(w).

    Parameters
    ----------
    w : ndarray [N]
        Unnormalized weights (likelihoods)

    Returns
    -------
    w_norm : ndarray [N]
        Weights summing to one
    degenerate : bool
        True if the uniform fallback was used
    """
    w = np.asarray(w, dtype=float)
    total = w.sum()
    if not np.isfinite(total) or total <= 0.0:
        logger.debug("Degenerate evidence over %d entries, resetting to uniform", w.size)
        return np.full(w.shape, 1.0 / w.size), True
    return w / total, False


def symmetrize(P):
    """Project P onto the symmetric matrices: (P + P') / 2."""
    P = np.asarray(P, dtype=float)
    return 0.5 * (P + P.T)


def sqrtm_psd(P):
    """
    Symmetric square root of a symmetric PSD matrix.

    P is symmetrized first; eigenvalues below zero (numerical drift) are
    clipped to zero, so sqrt_P @ sqrt_P reproduces the PSD part of P.

    Parameters
    ----------
    P : ndarray [n, n]

    Returns
    -------
    ndarray [n, n]
        Symmetric matrix S with S @ S = P
    """
    eigvals, eigvecs = np.linalg.eigh(symmetrize(P))
    return (eigvecs * np.sqrt(np.maximum(eigvals, 0.0))) @ eigvecs.T


def numerical_jacobian(fn, x, eps=1e-6):
    """
    Central-difference Jacobian of fn at x.

    Parameters
    ----------
    fn : callable
        fn(x) -> ndarray [m]
    x : ndarray [n]
    eps : float
        Step size

    Returns
    -------
    J : ndarray [m, n]
    """
    x = np.asarray(x, dtype=float)
    n = x.size
    columns = []
    for i in range(n):
        dx = np.zeros(n)
        dx[i] = eps
        columns.append((np.atleast_1d(fn(x + dx)) - np.atleast_1d(fn(x - dx))) / (2 * eps))
    return np.column_stack(columns)


def joseph_update(P_pred, K, H, R):
    """
    Compute Joseph-stabilized covariance update.

    Parameters
    ----------
    P_pred : ndarray [n_x, n_x]
        Predicted covariance
    K : ndarray [n_x, n_y]
        Kalman gain
    H : ndarray [n_y, n_x]
        Observation matrix/Jacobian
    R : ndarray [n_y, n_y]
        Observation noise covariance

    Returns
    -------
    ndarray [n_x, n_x]
        Updated covariance
    """
    IKH = np.eye(P_pred.shape[0]) - K @ H
    return IKH @ P_pred @ IKH.T + K @ R @ K.T


def standard_update(P_pred, K, H):
    """Covariance update P = (I - KH) P_pred."""
    return (np.eye(P_pred.shape[0]) - K @ H) @ P_pred


def wrap_angles(innovation, angle_indices):
    """
    Wrap specified indices of innovation to [-pi, pi].

    Parameters
    ----------
    innovation : ndarray [n_y]
        Innovation vector (o - predicted observation)
    angle_indices : sequence of int or None
        Indices to wrap. If empty or None, returns innovation unchanged.

    Returns
    -------
    ndarray [n_y]
    """
    if not angle_indices:
        return innovation

    result = np.array(innovation, dtype=float)
    for i in angle_indices:
        result[i] = np.arctan2(np.sin(result[i]), np.cos(result[i]))
    return result
