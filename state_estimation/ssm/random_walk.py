"""Bounded random walk problem for particle filtering."""
import numpy as np
from scipy import stats


class RandomWalk:
    """Random walk in the box [lower, upper]^n driven by Gaussian actions.

    The agent takes an action a ~ N(0, I) and moves to clip(s + a). Both the
    transition and the observation are Gaussian around the moved / true state
    with per-axis standard deviation |a|, so large actions are noisy ones.

    Particle sets use a flat layout [N] when n_dim == 1 and a column layout
    [n_dim, N] otherwise.

    Parameters
    ----------
    n_dim : int
        State dimension
    lower, upper : float
        Box bounds shared by all axes
    min_std : float
        Floor on the noise standard deviation (|a| can be zero)
    """

    # sample_transition / observation_density accept whole particle sets
    batched = True

    def __init__(self, n_dim=1, lower=-10.0, upper=10.0, min_std=1e-6):
        """Initialize model with given parameters."""
        if n_dim < 1:
            raise ValueError(f"n_dim={n_dim} must be positive.")
        if lower >= upper:
            raise ValueError(f"lower={lower} must be below upper={upper}.")
        self.n_dim = n_dim
        self.lower = float(lower)
        self.upper = float(upper)
        self.min_std = min_std

    def _action_std(self, a):
        return np.maximum(np.abs(np.asarray(a, dtype=float)), self.min_std)

    def _as_columns(self, x):
        """View states/particles as [n_dim, N]."""
        x = np.asarray(x, dtype=float)
        if self.n_dim == 1:
            return x.reshape(1, -1)
        return x.reshape(self.n_dim, -1)

    def _restore(self, cols, like):
        return cols.reshape(np.shape(like))

    def move(self, s, a):
        """Deterministic part of the transition: clip(s + a, lower, upper)."""
        cols = self._as_columns(s) + self._as_columns(a)
        return self._restore(np.clip(cols, self.lower, self.upper), s)

    def sample_action(self, rng):
        """Draw a ~ N(0, I)."""
        a = rng.standard_normal(self.n_dim)
        return float(a[0]) if self.n_dim == 1 else a

    def sample_prior(self, n_particles, rng):
        """Uniform particles over the box, shaped [N] or [n_dim, N]."""
        particles = rng.uniform(self.lower, self.upper, size=(self.n_dim, n_particles))
        return particles[0] if self.n_dim == 1 else particles

    def sample_state(self, rng):
        """Single state drawn uniformly from the box."""
        s = rng.uniform(self.lower, self.upper, size=self.n_dim)
        return float(s[0]) if self.n_dim == 1 else s

    def sample_transition(self, s, a, rng):
        """
        Draw s2 ~ N(move(s, a), diag(|a|^2)) independently per particle.

        Parameters
        ----------
        s : float, ndarray [n_dim] or particles [N] / [n_dim, N]
        a : float or ndarray [n_dim]
        rng : numpy.random.Generator

        Returns
        -------
        Same shape as s
        """
        mean = self._as_columns(self.move(s, a))
        std = self._action_std(a).reshape(-1, 1)
        s2 = mean + std * rng.standard_normal(mean.shape)
        return self._restore(s2, s)

    def transition_density(self, s, a, s2):
        """Density of s2 under N(move(s, a), diag(|a|^2)), one value per column."""
        mean = self._as_columns(self.move(s, a))
        std = self._action_std(a).reshape(-1, 1)
        return np.prod(stats.norm.pdf(self._as_columns(s2), loc=mean, scale=std), axis=0)

    def sample_observation(self, s2, a, rng):
        """Draw o ~ N(s2, diag(|a|^2))."""
        cols = self._as_columns(s2)
        std = self._action_std(a).reshape(-1, 1)
        o = cols + std * rng.standard_normal(cols.shape)
        return self._restore(o, s2)

    def observation_density(self, a, s2, o):
        """
        Likelihood O(a, s2, o) = N(o; s2, diag(|a|^2)).

        Parameters
        ----------
        a : float or ndarray [n_dim]
        s2 : state or particles [N] / [n_dim, N]
        o : float or ndarray [n_dim]

        Returns
        -------
        ndarray [N]
            One likelihood per particle (N = 1 for a single state)
        """
        std = self._action_std(a).reshape(-1, 1)
        o = np.asarray(o, dtype=float).reshape(-1, 1)
        return np.prod(stats.norm.pdf(o, loc=self._as_columns(s2), scale=std), axis=0)

    def advance(self, s, a, rng):
        """True state moves deterministically."""
        return self.move(s, a)
