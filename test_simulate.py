#!/usr/bin/env python
"""
Tests for the self-play harness.
"""
import random
import unittest

from code4life_ai.core.constants import ME, CLOUD, MAX_SAMPLES_CARRIED, MAX_TURNS
from code4life_ai.core.game import create_game_state
from code4life_ai.mcts.agent import MCTSAgent
from code4life_ai.mcts.config import MCTSConfig
from code4life_ai.simulate import random_diagnosed_samples, run_self_play


class TestSelfPlay(unittest.TestCase):
    """Test case for run_self_play."""

    def setUp(self):
        """Set up test fixtures."""
        self.rng = random.Random(1)
        self.agent = MCTSAgent(MCTSConfig(time_budget_ms=60000.0, max_iterations=30, seed=1))

    def test_random_samples(self):
        """The first samples are carried, the rest wait in the cloud."""
        samples = random_diagnosed_samples(self.rng, 5)
        owners = [sample.carried_by for sample in samples]
        self.assertEqual(owners, [ME] * MAX_SAMPLES_CARRIED + [CLOUD] * 2)
        self.assertTrue(all(sample.diagnosed for sample in samples))

    def test_tree_is_reused_every_turn_after_the_first(self):
        """Observations come from the model, so every later turn reuses the tree."""
        state = create_game_state(samples=random_diagnosed_samples(self.rng, 3))
        stats = run_self_play(self.agent, state, turns=10, show_progress=False)

        self.assertEqual(stats["turns"], 10)
        self.assertAlmostEqual(stats["reuse_rate"], 0.9)
        self.assertEqual(sum(stats["actions"].values()), 10)
        self.assertEqual(stats["mean_iterations"], 30.0)
        self.assertGreaterEqual(stats["max_decision_ms"], stats["mean_decision_ms"])

    def test_stops_at_terminal_state(self):
        """No turn is played once the game is over."""
        state = create_game_state(turn=MAX_TURNS - 2)
        stats = run_self_play(self.agent, state, turns=10, show_progress=False)
        self.assertEqual(stats["turns"], 2)


if __name__ == "__main__":
    unittest.main()
