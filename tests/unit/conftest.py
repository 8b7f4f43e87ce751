"""Shared pytest fixtures for unit tests."""

import numpy as np
import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from state_estimation.ssm import LinearGaussianPOMDP, crying_baby_pomdp


@pytest.fixture
def rng():
    """Seeded random number generator."""
    return np.random.default_rng(42)


@pytest.fixture
def crying_baby():
    """Crying baby POMDP with states (hungry, sated)."""
    return crying_baby_pomdp()


@pytest.fixture
def kf_scenario():
    """2D linear system with a known one-step Kalman posterior."""
    I = np.eye(2)
    problem = LinearGaussianPOMDP(
        Ts=I, Ta=I, Os=I,
        Sigma_s=0.1 * np.array([[1.0, 0.5], [0.5, 1.0]]),
        Sigma_o=0.05 * np.array([[1.0, -0.5], [-0.5, 1.5]]),
    )
    s = np.array([-0.75, 1.0])
    s2 = np.array([-0.25, 0.5])
    return {
        'problem': problem,
        'mean': s.copy(),
        'cov': 0.1 * I,
        'action': s2 - s,
        'observation': np.array([-0.585, 0.731]),
        'expected_mean': np.array([-0.4889, 0.6223]),
        'expected_cov': np.array([[0.0367, -0.0115], [-0.0115, 0.0505]]),
    }


@pytest.fixture
def linear_model():
    """Simple 2D linear model for testing."""
    A = np.array([[0.9, 0.1], [0.0, 0.95]])
    return LinearGaussianPOMDP(
        Ts=A,
        Ta=np.eye(2),
        Os=np.eye(2),
        Sigma_s=0.1 * np.eye(2),
        Sigma_o=0.1 * np.eye(2),
    )


def check_psd(matrix, tol=1e-10):
    """Check if matrix is positive semi-definite."""
    return np.all(np.linalg.eigvalsh(matrix) >= -tol)


def check_symmetric(matrix, tol=1e-12):
    """Check if matrix is symmetric up to tol."""
    return np.allclose(matrix, matrix.T, atol=tol, rtol=0)
