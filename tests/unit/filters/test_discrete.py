"""Unit tests for the discrete Bayes filter."""

import numpy as np
import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', '..'))

from state_estimation.filters.common import DimensionMismatchError
from state_estimation.filters.discrete import discrete_update, discrete_filter
from state_estimation.ssm import Action, Observation


class TestDiscreteUpdate:
    """Tests for a single discrete belief update."""

    def test_ignore_crying(self, crying_baby):
        """Crying after ignoring makes hunger much more likely."""
        b1 = discrete_update(np.array([0.5, 0.5]), crying_baby, Action.IGNORE, Observation.CRYING)

        # predicted [0.55, 0.45], weighted by [0.8, 0.1]
        expected = np.array([0.44, 0.045]) / 0.485
        np.testing.assert_allclose(b1, expected, atol=1e-12)

    def test_worked_example(self, crying_baby):
        """Five-step episode ends at p(hungry) = 0.538."""
        episode = [
            (Action.IGNORE, Observation.CRYING),
            (Action.FEED, Observation.QUIET),
            (Action.IGNORE, Observation.QUIET),
            (Action.IGNORE, Observation.QUIET),
            (Action.IGNORE, Observation.CRYING),
        ]
        b = np.array([0.5, 0.5])
        for a, o in episode:
            b = discrete_update(b, crying_baby, a, o)

        np.testing.assert_allclose(b, [0.538, 0.462], atol=1e-3)

    def test_feeding_sates(self, crying_baby):
        """Feeding always leads to the sated state."""
        b = discrete_update(np.array([0.9, 0.1]), crying_baby, Action.FEED, Observation.QUIET)

        np.testing.assert_allclose(b, [0.0, 1.0])

    @pytest.mark.parametrize("action", list(Action))
    @pytest.mark.parametrize("observation", list(Observation))
    def test_output_is_distribution(self, rng, crying_baby, action, observation):
        """Posterior is non-negative and sums to one for any prior."""
        for _ in range(20):
            b = rng.dirichlet(np.ones(2))

            b2 = discrete_update(b, crying_baby, action, observation)

            assert np.all(b2 >= 0)
            np.testing.assert_allclose(b2.sum(), 1.0, atol=1e-9)

    def test_degenerate_evidence_resets_to_uniform(self, crying_baby):
        """An impossible observation flattens the belief."""
        # Surely hungry, singing reveals the truth, but the baby is quiet
        b = discrete_update(np.array([1.0, 0.0]), crying_baby, Action.SING, Observation.QUIET)

        np.testing.assert_allclose(b, [0.5, 0.5])

    def test_input_not_mutated(self, crying_baby):
        """Update returns a new vector."""
        b = np.array([0.3, 0.7])

        discrete_update(b, crying_baby, Action.IGNORE, Observation.CRYING)

        np.testing.assert_array_equal(b, [0.3, 0.7])

    def test_deterministic(self, crying_baby):
        """Repeated calls are bit-for-bit identical."""
        b = np.array([0.25, 0.75])

        b_a = discrete_update(b, crying_baby, Action.SING, Observation.CRYING)
        b_b = discrete_update(b, crying_baby, Action.SING, Observation.CRYING)

        np.testing.assert_array_equal(b_a, b_b)

    def test_dimension_mismatch(self, crying_baby):
        """Belief length must match the state space."""
        with pytest.raises(DimensionMismatchError):
            discrete_update(np.array([0.2, 0.3, 0.5]), crying_baby, Action.FEED, Observation.QUIET)

    def test_action_outside_space(self, crying_baby):
        """A string action does not silently act like IGNORE."""
        with pytest.raises(ValueError, match="action"):
            discrete_update(np.array([0.5, 0.5]), crying_baby, 'feed', Observation.QUIET)


class TestDiscreteFilter:
    """Tests for the sequence runner."""

    def test_history_shape(self, crying_baby):
        """History includes the prior."""
        actions = [Action.IGNORE, Action.FEED, Action.SING]
        observations = [Observation.CRYING, Observation.QUIET, Observation.QUIET]

        beliefs = discrete_filter(np.array([0.5, 0.5]), crying_baby, actions, observations)

        assert beliefs.shape == (4, 2)
        np.testing.assert_allclose(beliefs[0], [0.5, 0.5])
        np.testing.assert_allclose(beliefs.sum(axis=1), 1.0)

    def test_matches_single_updates(self, crying_baby):
        """Runner is a fold of discrete_update."""
        actions = [Action.IGNORE, Action.IGNORE]
        observations = [Observation.CRYING, Observation.QUIET]

        beliefs = discrete_filter(np.array([0.5, 0.5]), crying_baby, actions, observations)

        b = np.array([0.5, 0.5])
        for a, o in zip(actions, observations):
            b = discrete_update(b, crying_baby, a, o)
        np.testing.assert_array_equal(beliefs[-1], b)

    def test_length_mismatch(self, crying_baby):
        """Actions and observations must pair up."""
        with pytest.raises(ValueError):
            discrete_filter(np.array([0.5, 0.5]), crying_baby, [Action.FEED], [])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
