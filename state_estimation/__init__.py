"""
Bayesian state estimation under partial observability.

This package contains implementations of:
- Problem models (discrete POMDPs, random walks, linear/nonlinear Gaussian)
- Belief-update filters (discrete Bayes, particle, Kalman, EKF, UKF)
- A simulation driver and utility functions
"""
