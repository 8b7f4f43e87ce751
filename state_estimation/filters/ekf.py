"""Extended Kalman Filter (EKF) implementation."""
import numpy as np
from scipy.linalg import cho_factor as cholesky_factor, cho_solve as cholesky_solve

from .common import check_shape, joseph_update, standard_update, symmetrize


def ekf_predict(belief, problem, action):
    """EKF prediction step, linearizing f_T at (mu_b, a)."""
    check_shape('belief.mean', belief.mean, (problem.n_x,))
    a = check_shape('action', action, (problem.n_a,))

    F = problem.F_jac(belief.mean, a)
    mu_p = problem.f_T(belief.mean, a)
    Sigma_p = F @ belief.cov @ F.T + problem.Sigma_s

    return mu_p, Sigma_p


def ekf_correct(belief, problem, observation, mu_p, Sigma_p, joseph=False):
    """EKF update step, linearizing f_O at mu_p; writes into `belief`."""
    o = check_shape('observation', observation, (problem.n_y,))

    H = problem.H_jac(mu_p)
    S = H @ Sigma_p @ H.T + problem.Sigma_o
    L, lower = cholesky_factor(S)
    K = cholesky_solve((L, lower), H @ Sigma_p).T

    innov = problem.innovation(o, problem.f_O(mu_p))
    belief.mean = mu_p + K @ innov
    P = joseph_update(Sigma_p, K, H, problem.Sigma_o) if joseph else standard_update(Sigma_p, K, H)
    belief.cov = symmetrize(P)


def ekf_update(belief, problem, action, observation, joseph=False):
    """
    Extended Kalman filter belief update (in place).

    Parameters
    ----------
    belief : KalmanBelief
    problem : NonlinearGaussianPOMDP or LinearGaussianPOMDP
        Must provide f_T, f_O, F_jac, H_jac, innovation, Sigma_s, Sigma_o
    action : ndarray [n_a]
    observation : ndarray [n_y]
    joseph : bool
        Use Joseph stabilized update
    """
    mu_p, Sigma_p = ekf_predict(belief, problem, action)
    ekf_correct(belief, problem, observation, mu_p, Sigma_p, joseph)


def extended_kalman_filter(belief, problem, actions, observations, joseph=False):
    """
    Extended Kalman Filter over an action/observation sequence.

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
        ekf_update(belief, problem, actions[t], observations[t], joseph)
        m_filt[t], P_filt[t] = belief.mean, belief.cov
        cond_nums[t] = np.linalg.cond(belief.cov)

    return m_filt, P_filt, cond_nums
