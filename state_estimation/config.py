"""Simulation settings shared by the experiment scripts."""
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class SimulationConfig:
    """Settings for one simulation run.

    Defaults reproduce the course demos: seed 228, 1000 particles,
    lambda = 2 for the UKF and 30 iterations.
    """
    problem: str = 'random_walk_2d'
    n_steps: int = 30
    n_particles: int = 1000
    lam: float = 2.0
    seed: int = 228
    stationary: bool = False

    def __post_init__(self):
        if self.n_steps < 0:
            raise ValueError(f"n_steps={self.n_steps} must be non-negative.")
        if self.n_particles < 1:
            raise ValueError(f"n_particles={self.n_particles} must be positive.")

    def as_dict(self):
        return asdict(self)
