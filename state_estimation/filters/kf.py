"""Kalman Filter (KF) implementation."""
from dataclasses import dataclass

import numpy as np
from scipy import linalg as sla

from .common import check_shape, joseph_update, standard_update, symmetrize


@dataclass
class KalmanBelief:
    """Gaussian belief N(mean, cov), updated in place by the Kalman filters."""
    mean: np.ndarray
    cov: np.ndarray

    def __post_init__(self):
        self.mean = np.array(self.mean, dtype=float)
        self.cov = np.array(self.cov, dtype=float)
        n_x = self.mean.shape[0]
        check_shape('cov', self.cov, (n_x, n_x))

    @property
    def n_x(self):
        return self.mean.shape[0]

    def copy(self):
        return KalmanBelief(self.mean.copy(), self.cov.copy())


def _solve_lu(S, B):
    """Solve S @ X = B using LU factorization (np.linalg.solve)."""
    return np.linalg.solve(S, B)


def _solve_cholesky(S, B):
    """Solve S @ X = B using Cholesky factorization (assumes S is SPD)."""
    L = sla.cholesky(S, lower=True)
    return sla.cho_solve((L, True), B)


def _solve_inv(S, B):
    """Solve S @ X = B using explicit matrix inversion (least stable)."""
    return np.linalg.inv(S) @ B


_SOLVERS = {
    'lu': _solve_lu,
    'cholesky': _solve_cholesky,
    'inv': _solve_inv,
}


def kalman_gain(P_pred, H, S, solver='lu'):
    """K = P_pred H' S^{-1}, computed by solving S' K' = H P_pred'."""
    if solver not in _SOLVERS:
        raise ValueError(f"solver must be one of {sorted(_SOLVERS)}, got '{solver}'")
    return _SOLVERS[solver](S.T, H @ P_pred.T).T


def kf_predict(belief, problem, action):
    """
    KF prediction step.

    mu_p = Ts mu_b + Ta a,  Sigma_p = Ts Sigma_b Ts' + Sigma_s

    Returns
    -------
    mu_p : ndarray [n_x]
    Sigma_p : ndarray [n_x, n_x]
    """
    Ts, Ta = problem.Ts, problem.Ta
    check_shape('belief.mean', belief.mean, (Ts.shape[1],))
    a = check_shape('action', action, (Ta.shape[1],))

    mu_p = Ts @ belief.mean + Ta @ a
    Sigma_p = Ts @ belief.cov @ Ts.T + problem.Sigma_s
    return mu_p, Sigma_p


def kf_correct(belief, problem, observation, mu_p, Sigma_p, joseph=False, solver='lu'):
    """
    KF update (correction) step; writes the posterior into `belief`.

    K = Sigma_p Os' (Os Sigma_p Os' + Sigma_o)^{-1}
    mu_b = mu_p + K (o - Os mu_p)
    Sigma_b = (I - K Os) Sigma_p
    """
    Os, Sigma_o = problem.Os, problem.Sigma_o
    o = check_shape('observation', observation, (Os.shape[0],))

    S = Os @ Sigma_p @ Os.T + Sigma_o
    K = kalman_gain(Sigma_p, Os, S, solver)

    belief.mean = mu_p + K @ (o - Os @ mu_p)
    P = joseph_update(Sigma_p, K, Os, Sigma_o) if joseph else standard_update(Sigma_p, K, Os)
    belief.cov = symmetrize(P)


def kf_update(belief, problem, action, observation, joseph=False, solver='lu'):
    """
    Kalman filter belief update for a LinearGaussianPOMDP (in place).

    Parameters
    ----------
    belief : KalmanBelief
    problem : LinearGaussianPOMDP
    action : ndarray [n_a]
    observation : ndarray [n_y]
    joseph : bool
        Use Joseph stabilized covariance update (default: False)
    solver : str
        Solver for Kalman gain: 'lu', 'cholesky', or 'inv' (default: 'lu')
    """
    mu_p, Sigma_p = kf_predict(belief, problem, action)
    kf_correct(belief, problem, observation, mu_p, Sigma_p, joseph, solver)


def kalman_filter(belief, problem, actions, observations, joseph=False, solver='lu'):
    """
    Kalman Filter over an action/observation sequence.

    Parameters
    ----------
    belief : KalmanBelief
        Prior belief; updated in place and left at the final posterior
    problem : LinearGaussianPOMDP
    actions : ndarray [T, n_a]
    observations : ndarray [T, n_y]
    joseph : bool
    solver : str

    Returns
    -------
    m_filt : ndarray [T, n_x]
        Filtered state means
    P_filt : ndarray [T, n_x, n_x]
        Filtered state covariances
    cond_nums : ndarray [T]
        Condition numbers of P
    """
    if len(actions) != len(observations):
        raise ValueError(
            f"Got {len(actions)} actions but {len(observations)} observations")

    T, n_x = len(actions), belief.n_x
    m_filt = np.zeros((T, n_x))
    P_filt = np.zeros((T, n_x, n_x))
    cond_nums = np.zeros(T)

    for t in range(T):
        kf_update(belief, problem, actions[t], observations[t], joseph, solver)
        m_filt[t], P_filt[t] = belief.mean, belief.cov
        cond_nums[t] = np.linalg.cond(belief.cov)

    return m_filt, P_filt, cond_nums
