"""Unscented Kalman Filter (UKF) implementation."""
from dataclasses import dataclass

import numpy as np

from .common import check_shape, sqrtm_psd, symmetrize
from .kf import KalmanBelief


@dataclass
class UnscentedBelief(KalmanBelief):
    """Gaussian belief plus the sigma point spread parameter lambda."""
    lam: float = 2.0

    def copy(self):
        return UnscentedBelief(self.mean.copy(), self.cov.copy(), self.lam)


def sigma_points(mu, Sigma, lam):
    """
    Generate the 2n + 1 sigma points of N(mu, Sigma).

    Points are ordered [mu, mu + d_1, mu - d_1, ..., mu + d_n, mu - d_n] where
    d_i is column i of the symmetric square root of (n + lam) Sigma.

    Parameters
    ----------
    mu : ndarray [n]
    Sigma : ndarray [n, n]
        Symmetrized before taking the square root
    lam : float
        Spread parameter; n + lam must be positive

    Returns
    -------
    ndarray [2n + 1, n]
    """
    mu = np.asarray(mu, dtype=float)
    n = mu.shape[0]
    Sigma = check_shape('Sigma', Sigma, (n, n))
    if n + lam <= 0:
        raise ValueError(f"n + lam must be positive, got n={n}, lam={lam}")

    delta = sqrtm_psd((n + lam) * symmetrize(Sigma))
    points = np.zeros((2 * n + 1, n))
    points[0] = mu
    for i in range(n):
        points[2 * i + 1] = mu + delta[:, i]
        points[2 * i + 2] = mu - delta[:, i]
    return points


def weights(n, lam):
    """
    Sigma point weights [lam / (n + lam), 1 / (2 (n + lam)), ...].

    They sum to one; the first is negative when lam < 0.
    """
    if n + lam <= 0:
        raise ValueError(f"n + lam must be positive, got n={n}, lam={lam}")
    ws = np.full(2 * n + 1, 1 / (2 * (n + lam)))
    ws[0] = lam / (n + lam)
    return ws


def unscented_transform(mu, Sigma, f, lam, ws=None):
    """
    Approximate the distribution of f(x), x ~ N(mu, Sigma).

    Parameters
    ----------
    mu : ndarray [n]
    Sigma : ndarray [n, n]
    f : callable
        f(x) -> ndarray [m]
    lam : float
    ws : ndarray [2n + 1], optional
        Precomputed weights(n, lam)

    Returns
    -------
    mu_f : ndarray [m]
        Weighted mean of the transformed points
    Sigma_f : ndarray [m, m]
        Weighted covariance of the transformed points
    S : ndarray [2n + 1, n]
        Sigma points
    S_f : ndarray [2n + 1, m]
        Transformed sigma points
    """
    S = sigma_points(mu, Sigma, lam)
    if ws is None:
        ws = weights(S.shape[1], lam)

    S_f = np.array([np.atleast_1d(f(s)) for s in S], dtype=float)
    mu_f = ws @ S_f
    D = S_f - mu_f
    Sigma_f = (ws[:, None] * D).T @ D
    return mu_f, Sigma_f, S, S_f


def _wrapped_statistics(S_f, ws, problem):
    """Observation mean/covariance with circular means on angle components."""
    mu_f = ws @ S_f
    for i in problem.angle_indices:
        mu_f[i] = np.arctan2(ws @ np.sin(S_f[:, i]), ws @ np.cos(S_f[:, i]))
    D = np.array([problem.innovation(s, mu_f) for s in S_f])
    return mu_f, (ws[:, None] * D).T @ D


def ukf_predict(belief, problem, action, ws=None):
    """UKF prediction step: unscented transform through f_T plus Sigma_s."""
    check_shape('belief.mean', belief.mean, (problem.n_x,))
    a = check_shape('action', action, (problem.n_a,))

    mu_p, Sigma_p, _, _ = unscented_transform(
        belief.mean, belief.cov, lambda s: problem.f_T(s, a), belief.lam, ws)
    Sigma_p = Sigma_p + problem.Sigma_s
    return mu_p, Sigma_p


def ukf_correct(belief, problem, observation, mu_p, Sigma_p, ws=None):
    """
    UKF update step; writes the posterior into `belief`.

    The cross covariance is taken between the predicted sigma points and
    their images under f_O.
    """
    o = check_shape('observation', observation, (problem.n_y,))
    if ws is None:
        ws = weights(mu_p.shape[0], belief.lam)

    mu_o, Sigma_o, S_o, S_o_f = unscented_transform(mu_p, Sigma_p, problem.f_O, belief.lam, ws)
    if problem.angle_indices:
        mu_o, Sigma_o = _wrapped_statistics(S_o_f, ws, problem)
    Sigma_o = Sigma_o + problem.Sigma_o

    dy = np.array([problem.innovation(s, mu_o) for s in S_o_f])
    Sigma_po = (ws[:, None] * (S_o - mu_p)).T @ dy

    # K = Sigma_po Sigma_o^{-1}
    K = np.linalg.solve(Sigma_o.T, Sigma_po.T).T
    belief.mean = mu_p + K @ problem.innovation(o, mu_o)
    belief.cov = symmetrize(Sigma_p - K @ Sigma_o @ K.T)


def ukf_update(belief, problem, action, observation):
    """
    Unscented Kalman filter belief update (in place).

    Parameters
    ----------
    belief : UnscentedBelief
    problem : NonlinearGaussianPOMDP or LinearGaussianPOMDP
    action : ndarray [n_a]
    observation : ndarray [n_y]
    """
    ws = weights(belief.n_x, belief.lam)
    mu_p, Sigma_p = ukf_predict(belief, problem, action, ws)
    ukf_correct(belief, problem, observation, mu_p, Sigma_p, ws)


def unscented_kalman_filter(belief, problem, actions, observations):
    """
    Unscented Kalman Filter over an action/observation sequence.

    Returns
    -------
    m_filt : ndarray [T, n_x]
    P_filt : ndarray [T, n_x, n_x]
    cond_nums : ndarray [T]
    """
    if len(actions) != len(observations):
        raise ValueError(
            f"Got {len(actions)} actions but {len(observations)} observations")

    T, n_x = len(actions), belief.n_x
    m_filt = np.zeros((T, n_x))
    P_filt = np.zeros((T, n_x, n_x))
    cond_nums = np.zeros(T)

    for t in range(T):
        ukf_update(belief, problem, actions[t], observations[t])
        m_filt[t], P_filt[t] = belief.mean, belief.cov
        cond_nums[t] = np.linalg.cond(belief.cov)

    return m_filt, P_filt, cond_nums
