"""Nonlinear Gaussian POMDPs for the extended and unscented Kalman filters."""
import numpy as np
from scipy import stats

from ..filters.common import DimensionMismatchError, numerical_jacobian, symmetrize, wrap_angles


class NonlinearGaussianPOMDP:
    """Nonlinear transition/observation functions with additive Gaussian noise.

    s2 = f_T(s, a) + v,  v ~ N(0, Sigma_s)
    o  = f_O(s2) + w,    w ~ N(0, Sigma_o)

    Parameters
    ----------
    f_T : callable
        f_T(s, a) -> ndarray [n_x]
    f_O : callable
        f_O(s) -> ndarray [n_y]
    Sigma_s : ndarray [n_x, n_x]
    Sigma_o : ndarray [n_y, n_y]
    n_x, n_a : int
        State and action dimensions
    F_jac, H_jac : callable, optional
        Analytic Jacobians F_jac(s, a) -> [n_x, n_x], H_jac(s) -> [n_y, n_x].
        Central differences are used when omitted.
    angle_indices : sequence of int, optional
        Observation components that are angles; innovations on them are
        wrapped to [-pi, pi].
    action_cov : ndarray [n_a, n_a], optional
        Covariance of random actions (default: I)
    """

    def __init__(self, f_T, f_O, Sigma_s, Sigma_o, n_x, n_a,
                 F_jac=None, H_jac=None, angle_indices=None, action_cov=None):
        self._f_T = f_T
        self._f_O = f_O
        self._F_jac = F_jac
        self._H_jac = H_jac
        self.Sigma_s = np.array(Sigma_s, dtype=float)
        self.Sigma_o = np.array(Sigma_o, dtype=float)
        self.n_x, self.n_a = n_x, n_a
        self.n_y = self.Sigma_o.shape[0]
        self.angle_indices = tuple(angle_indices) if angle_indices else ()
        self.action_cov = np.eye(n_a) if action_cov is None else np.array(action_cov, dtype=float)

        if self.Sigma_s.shape != (n_x, n_x):
            raise DimensionMismatchError(
                f"Sigma_s has shape {self.Sigma_s.shape}, expected {(n_x, n_x)}")
        if self.Sigma_o.ndim != 2 or self.Sigma_o.shape[1] != self.n_y:
            raise DimensionMismatchError(f"Sigma_o must be square, got {self.Sigma_o.shape}")
        for matrix in (self.Sigma_s, self.Sigma_o, self.action_cov):
            matrix.setflags(write=False)

    def f_T(self, s, a):
        return np.asarray(self._f_T(s, a), dtype=float)

    def f_O(self, s):
        return np.asarray(self._f_O(s), dtype=float)

    def F_jac(self, s, a):
        """Jacobian of f_T with respect to s, evaluated at (s, a)."""
        if self._F_jac is not None:
            return np.asarray(self._F_jac(s, a), dtype=float)
        return numerical_jacobian(lambda x: self.f_T(x, a), s)

    def H_jac(self, s):
        """Jacobian of f_O evaluated at s."""
        if self._H_jac is not None:
            return np.asarray(self._H_jac(s), dtype=float)
        return numerical_jacobian(self.f_O, s)

    def innovation(self, o, o_pred):
        """o - o_pred with angular components wrapped."""
        return wrap_angles(np.asarray(o, dtype=float) - o_pred, self.angle_indices)

    def sample_action(self, rng):
        return rng.multivariate_normal(np.zeros(self.n_a), self.action_cov)

    def sample_transition(self, s, a, rng):
        return rng.multivariate_normal(self.f_T(s, a), self.Sigma_s)

    def transition_density(self, s, a, s2):
        return stats.multivariate_normal.pdf(s2, mean=self.f_T(s, a), cov=symmetrize(self.Sigma_s))

    def sample_observation(self, s2, a, rng):
        o = rng.multivariate_normal(self.f_O(s2), self.Sigma_o)
        return wrap_angles(o, self.angle_indices)

    def observation_density(self, a, s2, o):
        diff = self.innovation(o, self.f_O(s2))
        return stats.multivariate_normal.pdf(diff, mean=np.zeros(self.n_y), cov=symmetrize(self.Sigma_o))

    def advance(self, s, a, rng):
        return self.sample_transition(s, a, rng)


class RangeBearingWalk(NonlinearGaussianPOMDP):
    """2D position random walk observed through range and bearing.

    State: [x, y], action: displacement [dx, dy].
    Observation: [range, bearing] from a sensor at sensor_pos.

    Parameters
    ----------
    q : float
        Process noise std per axis
    r_range : float
        Range observation noise std
    r_bearing : float
        Bearing observation noise std (radians)
    sensor_pos : ndarray [2]
        Sensor position [x, y]
    """

    def __init__(self, q=0.3, r_range=0.1, r_bearing=0.05, sensor_pos=None):
        """Initialize model with given parameters."""
        self.sensor_pos = (np.array([0.0, 0.0]) if sensor_pos is None
                           else np.asarray(sensor_pos, dtype=float))
        super().__init__(
            f_T=self._move, f_O=self._range_bearing,
            Sigma_s=q**2 * np.eye(2),
            Sigma_o=np.diag([r_range**2, r_bearing**2]),
            n_x=2, n_a=2,
            F_jac=self._move_jac, H_jac=self._range_bearing_jac,
            angle_indices=[1],
        )

    def _move(self, s, a):
        return np.asarray(s, dtype=float) + np.asarray(a, dtype=float)

    def _move_jac(self, s, a):
        return np.eye(2)

    def _range_bearing(self, s):
        """Observation function: [range, bearing]."""
        px = s[0] - self.sensor_pos[0]
        py = s[1] - self.sensor_pos[1]
        return np.array([np.sqrt(px**2 + py**2), np.arctan2(py, px)])

    def _range_bearing_jac(self, s):
        """Observation Jacobian: d[r, theta]/d[x, y]."""
        px = s[0] - self.sensor_pos[0]
        py = s[1] - self.sensor_pos[1]
        r = max(np.sqrt(px**2 + py**2), 1e-6)

        return np.array([
            [px/r, py/r],
            [-py/r**2, px/r**2]
        ])
