"""Linear Gaussian POMDP."""
import numpy as np
from scipy import stats

from ..filters.common import DimensionMismatchError, symmetrize


def _frozen(matrix):
    matrix = np.array(matrix, dtype=float)
    matrix.setflags(write=False)
    return matrix


class LinearGaussianPOMDP:
    """Linear Gaussian transition and observation models.

    s2 = Ts @ s + Ta @ a + v,  v ~ N(0, Sigma_s)
    o  = Os @ s2 + w,          w ~ N(0, Sigma_o)

    Parameters
    ----------
    Ts : ndarray [n_x, n_x]
        State transition matrix
    Ta : ndarray [n_x, n_a]
        Action (control) matrix
    Os : ndarray [n_y, n_x]
        Observation matrix
    Sigma_s : ndarray [n_x, n_x]
        Process noise covariance
    Sigma_o : ndarray [n_y, n_y]
        Observation noise covariance
    action_cov : ndarray [n_a, n_a], optional
        Covariance of random actions drawn by `sample_action` (default: I)
    """

    def __init__(self, Ts, Ta, Os, Sigma_s, Sigma_o, action_cov=None):
        """Validate dimensions and store read-only copies."""
        self.Ts = _frozen(Ts)
        self.Ta = _frozen(Ta)
        self.Os = _frozen(Os)
        self.Sigma_s = _frozen(Sigma_s)
        self.Sigma_o = _frozen(Sigma_o)

        n_x, n_a, n_y = self.Ts.shape[0], self.Ta.shape[1], self.Os.shape[0]
        expected = {
            'Ts': (self.Ts, (n_x, n_x)),
            'Ta': (self.Ta, (n_x, n_a)),
            'Os': (self.Os, (n_y, n_x)),
            'Sigma_s': (self.Sigma_s, (n_x, n_x)),
            'Sigma_o': (self.Sigma_o, (n_y, n_y)),
        }
        for name, (matrix, shape) in expected.items():
            if matrix.shape != shape:
                raise DimensionMismatchError(
                    f"{name} has shape {matrix.shape}, expected {shape}")

        self.action_cov = _frozen(np.eye(n_a) if action_cov is None else action_cov)
        if self.action_cov.shape != (n_a, n_a):
            raise DimensionMismatchError(
                f"action_cov has shape {self.action_cov.shape}, expected {(n_a, n_a)}")

        self.n_x, self.n_a, self.n_y = n_x, n_a, n_y
        self.angle_indices = ()

    def f_T(self, s, a):
        """Deterministic transition Ts s + Ta a."""
        return self.Ts @ s + self.Ta @ a

    def f_O(self, s):
        """Deterministic observation Os s."""
        return self.Os @ s

    def F_jac(self, s, a):
        return self.Ts

    def H_jac(self, s):
        return self.Os

    def innovation(self, o, o_pred):
        return np.asarray(o, dtype=float) - o_pred

    def sample_action(self, rng):
        return rng.multivariate_normal(np.zeros(self.n_a), self.action_cov)

    def sample_transition(self, s, a, rng):
        return rng.multivariate_normal(self.f_T(s, a), self.Sigma_s)

    def transition_density(self, s, a, s2):
        return stats.multivariate_normal.pdf(s2, mean=self.f_T(s, a), cov=symmetrize(self.Sigma_s))

    def sample_observation(self, s2, a, rng):
        return rng.multivariate_normal(self.f_O(s2), self.Sigma_o)

    def observation_density(self, a, s2, o):
        return stats.multivariate_normal.pdf(o, mean=self.f_O(s2), cov=symmetrize(self.Sigma_o))

    def advance(self, s, a, rng):
        return self.sample_transition(s, a, rng)

    def simulate(self, s0, actions, rng):
        """
        Generate a state and observation trajectory.

        Parameters
        ----------
        s0 : ndarray [n_x]
            Initial state
        actions : ndarray [T, n_a]
        rng : numpy.random.Generator

        Returns
        -------
        xs : ndarray [T, n_x]
            Latent states after each action
        ys : ndarray [T, n_y]
            Observations
        """
        T = len(actions)
        xs = np.zeros((T, self.n_x))
        ys = np.zeros((T, self.n_y))
        s = np.asarray(s0, dtype=float)

        for t in range(T):
            s = self.sample_transition(s, actions[t], rng)
            xs[t], ys[t] = s, self.sample_observation(s, actions[t], rng)

        return xs, ys

    def as_nonlinear(self):
        """Equivalent NonlinearGaussianPOMDP with analytic Jacobians."""
        from .nonlinear_gaussian import NonlinearGaussianPOMDP
        return NonlinearGaussianPOMDP(
            f_T=self.f_T, f_O=self.f_O,
            Sigma_s=self.Sigma_s, Sigma_o=self.Sigma_o,
            n_x=self.n_x, n_a=self.n_a,
            F_jac=self.F_jac, H_jac=self.H_jac,
            action_cov=self.action_cov,
        )


def random_walk_2d(process_scale=0.5, obs_scale=(1.0, 2.0)):
    """
    2D random walk with identity dynamics, actions and observations.

    Parameters
    ----------
    process_scale : float
        Process noise Sigma_s = process_scale * I
    obs_scale : tuple of float
        Diagonal of the observation noise Sigma_o
    """
    I = np.eye(2)
    return LinearGaussianPOMDP(
        Ts=I, Ta=I, Os=I,
        Sigma_s=process_scale * I,
        Sigma_o=np.diag(obs_scale),
    )
