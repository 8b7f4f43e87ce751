"""Bootstrap Particle Filter implementation."""
import numpy as np

from .common import DimensionMismatchError, normalize_weights


def _vector_states(problem):
    """Problems with an `n_x` expect every state as an ndarray [n_x]."""
    return getattr(problem, 'n_x', None) is not None


def _propagate(particles, problem, action, rng):
    """Draw s2 ~ T(s, a) independently for every particle."""
    if getattr(problem, 'batched', False):
        return problem.sample_transition(particles, action, rng)
    if particles.ndim == 1 and _vector_states(problem):
        # [N] on a one-dimensional vector model, one value per column
        return _propagate(particles.reshape(1, -1), problem, action, rng).reshape(-1)
    if particles.ndim == 1:
        # float successors must not be truncated by an integer prior
        dtype = object if particles.dtype == object else np.result_type(particles.dtype, float)
        return np.array([problem.sample_transition(s, action, rng) for s in particles], dtype=dtype)
    return np.column_stack([problem.sample_transition(s, action, rng) for s in particles.T])


def _weigh(particles, problem, action, observation):
    """Importance weights w = O(a, s2, o) for every propagated particle."""
    if getattr(problem, 'batched', False):
        return np.asarray(problem.observation_density(action, particles, observation), dtype=float)
    density = getattr(problem, 'observation_density', None) or problem.observation_prob
    if particles.ndim == 1 and _vector_states(problem):
        particles = particles.reshape(1, -1)
    columns = particles if particles.ndim == 1 else particles.T
    return np.array([density(action, s2, observation) for s2 in columns], dtype=float)


def _check_particles(particles, problem):
    particles = np.asarray(particles)
    if particles.ndim not in (1, 2) or particles.shape[-1] == 0:
        raise DimensionMismatchError(
            f"particles must be [N] or [dim, N] with N > 0, got shape {particles.shape}")
    dim = getattr(problem, 'n_dim', None) or getattr(problem, 'n_x', None)
    if dim is not None:
        rows = 1 if particles.ndim == 1 else particles.shape[0]
        if rows != dim:
            raise DimensionMismatchError(
                f"particles have dimension {rows}, problem expects {dim}")
    return particles


def particle_step(particles, problem, action, observation, rng=None, resampler='multinomial'):
    """
    One sequential importance resampling step.

    Same as `particle_update` but also returns the normalized importance
    weights of the propagated particles (before resampling).

    Returns
    -------
    particles : same shape as the input
    w : ndarray [N]
    """
    if rng is None:
        rng = np.random.default_rng()
    if resampler == 'multinomial':
        resample_fn = multinomial_resample
    elif resampler == 'systematic':
        resample_fn = systematic_resample
    else:
        raise ValueError(f"resampler must be 'multinomial' or 'systematic', got '{resampler}'")

    particles = _check_particles(particles, problem)

    # Propagate and weight
    propagated = _propagate(particles, problem, action, rng)
    w, _ = normalize_weights(_weigh(propagated, problem, action, observation))

    # Resample at every step
    idx = resample_fn(w, rng)
    return propagated[..., idx], w


def particle_update(particles, problem, action, observation, rng=None, resampler='multinomial'):
    """
    Bootstrap particle filter belief update.

    Propagates every particle through the transition model, weights it by the
    observation likelihood, normalizes the weights (uniform if they are all
    zero) and resamples N particles with replacement.

    Parameters
    ----------
    particles : ndarray [N] or [dim, N]
        Flat collection of scalar/discrete states, or one particle per column
    problem
        Problem model exposing sample_transition and observation_density
        (or observation_prob)
    action, observation
    rng : np.random.Generator
    resampler : str
        'multinomial' (categorical draw) or 'systematic'

    Returns
    -------
    ndarray, same shape as particles
    """
    new_particles, _ = particle_step(particles, problem, action, observation, rng, resampler)
    return new_particles


def multinomial_resample(w, rng):
    """Draw len(w) indices from Categorical(w) with replacement."""
    N = len(w)
    return rng.choice(N, size=N, p=w)


def systematic_resample(w, rng):
    """Systematic resampling (low variance)."""
    N = len(w)
    cumsum = np.cumsum(w)
    u = rng.uniform(0, 1.0 / N) + np.arange(N) / N
    return np.clip(np.searchsorted(cumsum, u), 0, N - 1)


def effective_sample_size(w):
    """ESS = 1 / sum(w^2) for normalized weights."""
    return 1.0 / np.sum(np.asarray(w) ** 2)


def particle_estimate(particles):
    """
    Mean and covariance of an unweighted particle set.

    Parameters
    ----------
    particles : ndarray [N] or [dim, N]

    Returns
    -------
    mean : ndarray [dim]
    cov : ndarray [dim, dim]
    """
    cols = np.atleast_2d(np.asarray(particles, dtype=float))
    mean = cols.mean(axis=1)
    diff = cols - mean[:, None]
    return mean, diff @ diff.T / cols.shape[1]


def particle_filter(particles, problem, actions, observations, rng=None, resampler='multinomial'):
    """
    Bootstrap Particle Filter (BPF) over an action/observation sequence.

    Parameters
    ----------
    particles : ndarray [N] or [dim, N]
        Initial particle set (e.g. problem.sample_prior)
    problem
    actions, observations : sequence of length T
    rng : np.random.Generator
    resampler : str

    Returns
    -------
    m_filt : ndarray [T, dim]
    P_filt : ndarray [T, dim, dim]
    ess : ndarray [T]
        Effective sample size before each resampling
    particles : ndarray
        Final particle set
    """
    if rng is None:
        rng = np.random.default_rng()
    if len(actions) != len(observations):
        raise ValueError(
            f"Got {len(actions)} actions but {len(observations)} observations")

    T = len(actions)
    dim = 1 if np.ndim(particles) == 1 else np.shape(particles)[0]
    m_filt = np.zeros((T, dim))
    P_filt = np.zeros((T, dim, dim))
    ess = np.zeros(T)

    for t in range(T):
        particles, w = particle_step(particles, problem, actions[t], observations[t],
                                     rng, resampler)
        ess[t] = effective_sample_size(w)
        m_filt[t], P_filt[t] = particle_estimate(particles)

    return m_filt, P_filt, ess, particles
