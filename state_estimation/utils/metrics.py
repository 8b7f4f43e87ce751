"""
Metrics for evaluating belief quality.
"""
import numpy as np


def compute_mse(estimated, true):
    """Mean squared error between estimates and true values."""
    return np.mean((np.asarray(estimated) - np.asarray(true))**2)


def compute_rmse(estimated, true):
    """Root mean squared error between estimates and true values."""
    return np.sqrt(compute_mse(estimated, true))


def compute_nees(m_filt, P_filt, xs, regularize=1e-8):
    """
    Normalized estimation error squared of a Gaussian belief history.

    e_t' P_t^{-1} e_t with e_t = x_t - m_t. A consistent filter averages
    n_x (chi-squared with n_x degrees of freedom).

    Parameters
    ----------
    m_filt : ndarray [T, n_x]
        Belief means
    P_filt : ndarray [T, n_x, n_x]
        Belief covariances
    xs : ndarray [T, n_x]
        True states
    regularize : float
        Jitter added to every diagonal before solving

    Returns
    -------
    ndarray [T]
    """
    m_filt = np.asarray(m_filt, dtype=float)
    errors = np.asarray(xs, dtype=float) - m_filt
    P_reg = np.asarray(P_filt, dtype=float) + regularize * np.eye(m_filt.shape[1])
    return np.einsum('ti,ti->t', errors, np.linalg.solve(P_reg, errors[..., None])[..., 0])


def compute_symmetry_error(P_filt):
    """
    Relative symmetry error ||P - P'||_F / ||P||_F at each time step.

    Parameters
    ----------
    P_filt : ndarray [T, n_x, n_x]

    Returns
    -------
    ndarray [T]
    """
    sym_err = np.zeros(len(P_filt))
    for t, P in enumerate(P_filt):
        norm_P = np.linalg.norm(P, 'fro')
        if norm_P > 0:
            sym_err[t] = np.linalg.norm(P - P.T, 'fro') / norm_P
    return sym_err


def compute_min_eigenvalues(P_filt):
    """
    Minimum eigenvalue of P at each time step.

    Negative values indicate loss of positive semi-definiteness.
    """
    return np.array([np.linalg.eigvalsh(P).min() for P in P_filt])


def belief_covers_state(mean, std, state, n_sigma=3.0, atol=1.0):
    """
    Check that the true state is plausible under the belief.

    True when every component of `state` lies within mean +/- n_sigma * std,
    or the absolute error is at most `atol` in every component.

    Parameters
    ----------
    mean, std : float or ndarray [n_x]
        Belief mean and per-component standard deviation
    state : float or ndarray [n_x]
        True state
    n_sigma : float
    atol : float

    Returns
    -------
    bool
    """
    mean, std, state = (np.atleast_1d(np.asarray(v, dtype=float)) for v in (mean, std, state))
    within = np.all((mean - n_sigma * std <= state) & (state <= mean + n_sigma * std))
    close = np.all(np.abs(mean - state) <= atol)
    return bool(within or close)
