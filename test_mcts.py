#!/usr/bin/env python
"""
Tests for the MCTS engine.

These tests use small synthetic positions so every statistic can be checked
exactly, plus a few end-to-end decisions on the Code4Life model.
"""
import gc
import math
import itertools
import random
import unittest
import weakref
from dataclasses import dataclass

from code4life_ai.core.game import create_game_state
from code4life_ai.core.samples import Sample
from code4life_ai.exceptions import NoLegalActions
from code4life_ai.mcts.agent import MCTSAgent, MCTSAgentFactory
from code4life_ai.mcts.config import MCTSConfig
from code4life_ai.mcts.interfaces import Position, SearchAction
from code4life_ai.mcts.node import MCTSNode
from code4life_ai.mcts.search import (
    run_iteration, select_node, expand_node, simulate_game, backpropagate,
    count_nodes, get_principal_variation
)


@dataclass(frozen=True)
class Add(SearchAction):
    """Add an amount to a counter."""
    amount: int

    @property
    def description(self) -> str:
        return f"ADD {self.amount}"


class CountdownPosition(Position):
    """A counter that can be raised by 1 or 2 until no moves remain."""

    def __init__(self, value: int = 0, remaining: int = 3):
        self.value = value
        self.remaining = remaining

    def legal_actions(self):
        if self.is_terminal():
            return []
        return [Add(1), Add(2)]

    def apply_action(self, action):
        return CountdownPosition(self.value + action.amount, self.remaining - 1)

    def is_terminal(self) -> bool:
        return self.remaining <= 0

    def evaluate(self, player_id: int) -> float:
        return float(self.value)

    def __eq__(self, other):
        if not isinstance(other, CountdownPosition):
            return NotImplemented
        return (self.value, self.remaining) == (other.value, other.remaining)

    def __hash__(self):
        return hash((self.value, self.remaining))


class EndlessPosition(Position):
    """A position that never ends; its score is the number of plies played."""

    def __init__(self, depth: int = 0):
        self.depth = depth

    def legal_actions(self):
        return [Add(1), Add(1)]

    def apply_action(self, action):
        return EndlessPosition(self.depth + 1)

    def is_terminal(self) -> bool:
        return False

    def evaluate(self, player_id: int) -> float:
        return float(self.depth)

    def __eq__(self, other):
        return isinstance(other, EndlessPosition) and self.depth == other.depth

    def __hash__(self):
        return hash(self.depth)


def make_child(parent: MCTSNode, state: Position, action: SearchAction,
               visits: int = 0, total_reward: float = 0.0) -> MCTSNode:
    """Attach a child with preset statistics."""
    child = MCTSNode(state, parent=parent, action=action)
    child.visits = visits
    child.total_reward = total_reward
    parent.children.append(child)
    node = parent
    while node is not None:
        node.subtree_size += 1
        node = node.parent
    return child


def iter_nodes(root: MCTSNode):
    """Yield every node of a tree."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(node.children)


class TestNode(unittest.TestCase):
    """Test case for MCTSNode."""

    def test_root_has_no_parent_or_action(self):
        """A fresh node is a root with zero statistics."""
        root = MCTSNode(CountdownPosition())
        self.assertIsNone(root.parent)
        self.assertIsNone(root.action)
        self.assertEqual(root.visits, 0)
        self.assertEqual(root.total_reward, 0.0)
        self.assertTrue(root.is_leaf())

    def test_expand_creates_one_child_per_action(self):
        """Expansion follows the legal action order."""
        root = MCTSNode(CountdownPosition(0, 3))
        children = expand_node(root)

        self.assertEqual([c.action for c in children], [Add(1), Add(2)])
        self.assertEqual(children[0].state, CountdownPosition(1, 2))
        self.assertEqual(children[1].state, CountdownPosition(2, 2))
        for child in children:
            self.assertIs(child.parent, root)
            self.assertIsNot(child.state, root.state)

    def test_expand_is_noop_when_expanded_or_terminal(self):
        """Expansion never duplicates children or expands terminal positions."""
        root = MCTSNode(CountdownPosition(0, 3))
        first = list(root.expand())
        self.assertEqual(root.expand(), first)
        self.assertEqual(len(root.children), 2)

        terminal = MCTSNode(CountdownPosition(5, 0))
        self.assertEqual(terminal.expand(), [])

    def test_unvisited_child_has_priority(self):
        """An unvisited child is selected over any visited sibling."""
        root = MCTSNode(CountdownPosition())
        root.visits = 10
        make_child(root, CountdownPosition(1, 2), Add(1), visits=5, total_reward=500.0)
        make_child(root, CountdownPosition(2, 2), Add(2), visits=5, total_reward=450.0)
        unvisited = make_child(root, CountdownPosition(3, 2), Add(3))

        self.assertIs(root.select_child(1.414), unvisited)
        self.assertIs(select_node(root, 1.414), unvisited)

    def test_ucb_ties_go_to_first_child(self):
        """Equal UCB scores keep the first child."""
        root = MCTSNode(CountdownPosition())
        root.visits = 4
        first = make_child(root, CountdownPosition(1, 2), Add(1), visits=2, total_reward=2.0)
        make_child(root, CountdownPosition(2, 2), Add(2), visits=2, total_reward=2.0)
        self.assertIs(root.select_child(1.414), first)

        fresh = MCTSNode(CountdownPosition())
        a = make_child(fresh, CountdownPosition(1, 2), Add(1))
        make_child(fresh, CountdownPosition(2, 2), Add(2))
        self.assertIs(fresh.select_child(1.414), a)

    def test_ucb_score_formula(self):
        """UCB1 combines the average reward and the exploration term."""
        root = MCTSNode(CountdownPosition())
        root.visits = 20
        child = make_child(root, CountdownPosition(1, 2), Add(1), visits=5, total_reward=10.0)

        expected = 2.0 + 1.5 * math.sqrt(math.log(20) / 5)
        self.assertAlmostEqual(root.ucb_score(child, 1.5), expected)

    def test_exploration_changes_selection(self):
        """A rarely visited child wins once exploration outweighs its lower average."""
        root = MCTSNode(CountdownPosition())
        root.visits = 101
        make_child(root, CountdownPosition(1, 2), Add(1), visits=100, total_reward=100.0)
        rare = make_child(root, CountdownPosition(2, 2), Add(2), visits=1, total_reward=0.5)

        self.assertIsNot(root.select_child(0.0), rare)
        self.assertIs(root.select_child(1.414), rare)

    def test_best_child_uses_average_reward(self):
        """The final decision picks the best average, not the highest total."""
        root = MCTSNode(CountdownPosition())
        root.visits = 62
        make_child(root, CountdownPosition(1, 2), Add(1), visits=10, total_reward=30.0)
        best = make_child(root, CountdownPosition(2, 2), Add(2), visits=2, total_reward=8.0)
        make_child(root, CountdownPosition(3, 2), Add(3), visits=50, total_reward=100.0)

        self.assertIs(root.best_child(), best)

    def test_best_child_ignores_unvisited(self):
        """Unvisited children rank below visited ones."""
        root = MCTSNode(CountdownPosition())
        root.visits = 1
        make_child(root, CountdownPosition(1, 2), Add(1))
        visited = make_child(root, CountdownPosition(2, 2), Add(2), visits=1, total_reward=-5.0)
        self.assertIs(root.best_child(), visited)

    def test_find_child_matching_uses_value_equality(self):
        """Matching compares positions by value, not identity."""
        root = MCTSNode(CountdownPosition(0, 3))
        root.expand()
        match = root.find_child_matching(CountdownPosition(2, 2))
        self.assertIs(match, root.children[1])
        self.assertIsNone(root.find_child_matching(CountdownPosition(9, 9)))


class TestSearchPhases(unittest.TestCase):
    """Test case for the search phase functions."""

    def test_backpropagation_along_chain(self):
        """One simulation updates every node on the path exactly once."""
        root = MCTSNode(CountdownPosition(0, 3))
        a = make_child(root, CountdownPosition(1, 2), Add(1))
        b = make_child(a, CountdownPosition(2, 1), Add(1))

        backpropagate(b, 7.5)

        for node in (root, a, b):
            self.assertEqual(node.visits, 1)
            self.assertEqual(node.total_reward, 7.5)

    def test_backpropagation_does_not_touch_siblings(self):
        """Only ancestors of the simulated node are updated."""
        root = MCTSNode(CountdownPosition(0, 3))
        a = make_child(root, CountdownPosition(1, 2), Add(1))
        sibling = make_child(root, CountdownPosition(2, 2), Add(2))

        backpropagate(a, 3.0)
        backpropagate(a, 4.0)

        self.assertEqual((root.visits, root.total_reward), (2, 7.0))
        self.assertEqual((a.visits, a.total_reward), (2, 7.0))
        self.assertEqual((sibling.visits, sibling.total_reward), (0, 0.0))

    def test_playout_depth_bound(self):
        """A never-ending position gets exactly max_depth plies."""
        config = MCTSConfig()
        node = MCTSNode(EndlessPosition(0))

        reward, steps = simulate_game(node, config, random.Random(0))

        self.assertEqual(steps, 20)
        self.assertEqual(reward, 20.0)
        # The node's own position is untouched
        self.assertEqual(node.state.depth, 0)

    def test_playout_custom_depth(self):
        """The ply cap follows the configuration."""
        config = MCTSConfig(max_depth=5)
        reward, steps = simulate_game(MCTSNode(EndlessPosition(3)), config, random.Random(0))
        self.assertEqual((reward, steps), (8.0, 5))

    def test_playout_stops_at_terminal(self):
        """A playout ends early at a terminal position."""
        config = MCTSConfig()
        _, steps = simulate_game(MCTSNode(CountdownPosition(0, 3)), config, random.Random(1))
        self.assertEqual(steps, 3)

        reward, steps = simulate_game(MCTSNode(CountdownPosition(4, 0)), config, random.Random(1))
        self.assertEqual((reward, steps), (4.0, 0))

    def test_visit_and_score_consistency(self):
        """Every node's statistics account for exactly the simulations through it."""
        # With max_depth=0 a simulation at node n always returns n's own score
        config = MCTSConfig(max_depth=0)
        rng = random.Random(3)
        root = MCTSNode(CountdownPosition(0, 4))

        rewards = [run_iteration(root, config, rng)[0] for _ in range(60)]

        self.assertEqual(root.visits, 60)
        self.assertAlmostEqual(root.total_reward, sum(rewards))

        for node in iter_nodes(root):
            child_visits = sum(c.visits for c in node.children)
            child_reward = sum(c.total_reward for c in node.children)
            own_visits = node.visits - child_visits
            self.assertGreaterEqual(own_visits, 0)
            self.assertAlmostEqual(
                node.total_reward,
                child_reward + own_visits * node.state.evaluate(0)
            )

    def test_every_sibling_visited_before_revisit(self):
        """After expansion, each root child is tried once before any repeat."""
        config = MCTSConfig(max_depth=0)
        rng = random.Random(0)
        root = MCTSNode(CountdownPosition(0, 5))

        # First iteration expands the root and simulates one child
        run_iteration(root, config, rng)
        run_iteration(root, config, rng)

        self.assertEqual([c.visits for c in root.children], [1, 1])

    def test_terminal_leaf_is_simulated_in_place(self):
        """A terminal leaf is not expanded; it is scored directly."""
        config = MCTSConfig()
        root = MCTSNode(CountdownPosition(6, 0))

        reward, steps = run_iteration(root, config, random.Random(0))

        self.assertEqual((reward, steps), (6.0, 0))
        self.assertEqual(root.children, [])
        self.assertEqual(root.visits, 1)

    def test_count_nodes_and_principal_variation(self):
        """Tree helpers walk the whole tree."""
        config = MCTSConfig(max_depth=0, exploration_weight=10.0)
        rng = random.Random(5)
        root = MCTSNode(CountdownPosition(0, 2))
        for _ in range(50):
            run_iteration(root, config, rng)

        # Root, 2 children and 4 grandchildren
        self.assertEqual(count_nodes(root), 7)
        variation = get_principal_variation(root)
        self.assertEqual(len(variation), 2)


class TestMCTSAgent(unittest.TestCase):
    """Test case for the search driver."""

    def setUp(self):
        """Set up test fixtures."""
        self.config = MCTSConfig(time_budget_ms=60000.0, max_iterations=200, seed=42)

    def test_budget_is_a_soft_deadline(self):
        """The loop runs while the elapsed time is below the budget."""
        ticks = itertools.count()
        agent = MCTSAgent(MCTSConfig(seed=0), clock=lambda: float(next(ticks)))

        # One second per clock call: checks at 1s..5s pass, 6s stops
        agent.run_simulations(CountdownPosition(0, 3), budget_ms=5500.0)

        self.assertEqual(agent.get_last_statistics()["iterations"], 5)
        self.assertEqual(agent.root.visits, 5)

    def test_elapsed_time_covers_bookkeeping(self):
        """After the last deadline check the clock is read once, for the elapsed time."""
        ticks = itertools.count()
        agent = MCTSAgent(MCTSConfig(seed=0), clock=lambda: float(next(ticks)))

        agent.run_simulations(CountdownPosition(0, 3), budget_ms=5500.0)

        # Start at 0s, deadline checks at 1s..6s, elapsed read at 7s
        self.assertEqual(agent.get_last_statistics()["time_elapsed"], 7.0)
        self.assertEqual(next(ticks), 8)

    def test_zero_budget_rebase_does_no_tree_work(self):
        """A rebase with no budget reports the kept tree size without walking it."""
        agent = MCTSAgent(self.config)
        agent.run_simulations(CountdownPosition(0, 5))
        child = agent.root.find_child_matching(CountdownPosition(2, 4))

        # Hide the subtree from any traversal; only the running size is available
        hidden = child.children
        child.children = []
        try:
            agent.run_simulations(CountdownPosition(2, 4), budget_ms=0)
        finally:
            child.children = hidden

        self.assertIs(agent.root, child)
        self.assertEqual(agent.get_last_statistics()["node_count"], count_nodes(child))
        self.assertGreater(agent.get_last_statistics()["node_count"], 1)

    def test_node_count_matches_tree(self):
        """The running subtree size equals a full count after searching and rebasing."""
        agent = MCTSAgent(self.config)
        agent.run_simulations(CountdownPosition(0, 5))
        self.assertEqual(agent.get_last_statistics()["node_count"], count_nodes(agent.root))

        agent.run_simulations(CountdownPosition(1, 4))
        self.assertTrue(agent.get_last_statistics()["reused_tree"])
        for node in iter_nodes(agent.root):
            self.assertEqual(node.subtree_size, count_nodes(node))

    def test_zero_budget_without_tree_raises(self):
        """With no iterations the fresh root has no children."""
        agent = MCTSAgent(self.config)
        agent.run_simulations(CountdownPosition(0, 3), budget_ms=0)

        self.assertEqual(agent.get_last_statistics()["iterations"], 0)
        with self.assertRaises(NoLegalActions):
            agent.best_action()

    def test_negative_budget_does_not_crash(self):
        """A negative budget behaves like zero."""
        agent = MCTSAgent(self.config)
        agent.run_simulations(CountdownPosition(0, 3), budget_ms=-10)
        self.assertEqual(agent.root.visits, 0)

    def test_best_action_before_search_raises(self):
        """Asking for an action before any search fails loudly."""
        with self.assertRaises(NoLegalActions):
            MCTSAgent(self.config).best_action()

    def test_terminal_position_raises(self):
        """A terminal root never gets children."""
        agent = MCTSAgent(MCTSConfig(max_iterations=5, time_budget_ms=60000.0))
        agent.run_simulations(CountdownPosition(3, 0))

        self.assertEqual(agent.root.visits, 5)
        with self.assertRaises(NoLegalActions):
            agent.best_action()

    def test_best_action_prefers_average_reward(self):
        """best_action returns the action of the best-average root child."""
        agent = MCTSAgent(self.config)
        agent.root = MCTSNode(CountdownPosition(0, 3))
        agent.root.visits = 62
        make_child(agent.root, CountdownPosition(1, 2), Add(1), visits=10, total_reward=30.0)
        make_child(agent.root, CountdownPosition(2, 2), Add(2), visits=2, total_reward=8.0)
        make_child(agent.root, CountdownPosition(3, 2), Add(3), visits=50, total_reward=100.0)

        self.assertEqual(agent.best_action(), Add(2))

    def test_search_finds_better_move(self):
        """On the countdown game, adding 2 is always better."""
        agent = MCTSAgent(self.config)
        self.assertEqual(agent.select_action(CountdownPosition(0, 3)), Add(2))
        self.assertEqual(len(agent.action_history), 1)

    def test_rebase_reuses_matching_child(self):
        """The child matching the observed state becomes the root with its statistics."""
        agent = MCTSAgent(self.config)
        root = MCTSNode(CountdownPosition(0, 3))
        root.visits = 8
        s1 = make_child(root, CountdownPosition(1, 2), Add(1), visits=3, total_reward=9.0)
        s2 = make_child(root, CountdownPosition(2, 2), Add(2), visits=5, total_reward=20.0)
        make_child(s1, CountdownPosition(2, 1), Add(1), visits=1, total_reward=2.0)
        agent.root = root

        s1_ref = weakref.ref(s1)
        agent.run_simulations(CountdownPosition(2, 2), budget_ms=0)

        self.assertIs(agent.root, s2)
        self.assertEqual((agent.root.visits, agent.root.total_reward), (5, 20.0))
        self.assertIsNone(agent.root.parent)
        self.assertIsNone(agent.root.action)
        self.assertTrue(agent.get_last_statistics()["reused_tree"])

        # The S1 branch is no longer reachable and is freed with the old root
        self.assertNotIn(s1, list(iter_nodes(agent.root)))
        del root, s1, s2
        gc.collect()
        self.assertIsNone(s1_ref())

    def test_rebase_miss_resets_tree(self):
        """An unmodeled observation starts a fresh tree."""
        agent = MCTSAgent(self.config)
        agent.run_simulations(CountdownPosition(0, 3))
        old_root = agent.root
        self.assertGreater(old_root.visits, 0)

        observed = CountdownPosition(7, 2)
        agent.run_simulations(observed, budget_ms=0)

        self.assertIsNot(agent.root, old_root)
        self.assertEqual(agent.root.state, observed)
        self.assertIsNot(agent.root.state, observed)
        self.assertEqual((agent.root.visits, agent.root.total_reward), (0, 0.0))
        self.assertEqual(agent.root.children, [])
        self.assertFalse(agent.get_last_statistics()["reused_tree"])

    def test_rebased_tree_usable_with_zero_budget(self):
        """After a rebase hit, best_action works without new iterations."""
        agent = MCTSAgent(self.config)
        agent.run_simulations(CountdownPosition(0, 4))
        agent.run_simulations(CountdownPosition(2, 3), budget_ms=0)

        self.assertTrue(agent.get_last_statistics()["reused_tree"])
        self.assertEqual(agent.best_action(), Add(2))

    def test_search_continues_on_reused_tree(self):
        """Statistics accumulate on top of the reused subtree."""
        agent = MCTSAgent(self.config)
        agent.run_simulations(CountdownPosition(0, 4))
        child_visits = agent.root.find_child_matching(CountdownPosition(2, 3)).visits

        agent.run_simulations(CountdownPosition(2, 3))

        self.assertEqual(agent.root.visits, child_visits + 200)

    def test_decision_determinism(self):
        """Same seed and same iteration count give the same decision."""
        samples = [
            Sample.from_judge(1, 0, 1, "A", 10, [1, 0, 1, 0, 0]),
            Sample.from_judge(2, 0, 2, "B", 20, [0, 2, 0, 1, 0]),
        ]
        state = create_game_state(samples=samples)

        actions = []
        visits = []
        for _ in range(3):
            agent = MCTSAgent(MCTSConfig(time_budget_ms=60000.0, max_iterations=300, seed=7))
            actions.append(agent.select_action(state))
            visits.append([c.visits for c in agent.root.children])

        self.assertEqual(actions[0], actions[1])
        self.assertEqual(actions[1], actions[2])
        self.assertEqual(visits[0], visits[1])

    def test_decision_determinism_with_time_budget(self):
        """Same seed and same time budget give the same decision under a fixed clock."""
        samples = [
            Sample.from_judge(1, 0, 1, "A", 10, [1, 0, 1, 0, 0]),
            Sample.from_judge(2, 0, 2, "B", 20, [0, 2, 0, 1, 0]),
        ]
        state = create_game_state(samples=samples)

        actions = []
        visits = []
        for _ in range(2):
            # One millisecond per clock read: 300 iterations fit in the budget
            ticks = itertools.count()
            agent = MCTSAgent(MCTSConfig(seed=7), clock=lambda: next(ticks) / 1000.0)
            actions.append(agent.select_action(state, budget_ms=300.5))
            visits.append([c.visits for c in agent.root.children])
            self.assertEqual(agent.get_last_statistics()["iterations"], 300)

        self.assertEqual(actions[0], actions[1])
        self.assertEqual(visits[0], visits[1])

    def test_action_history_is_bounded(self):
        """Only the most recent decisions are kept."""
        agent = MCTSAgent(self.config, history_size=2)
        for remaining in (5, 4, 3):
            agent.select_action(CountdownPosition(0, remaining))

        self.assertEqual(len(agent.action_history), 2)
        self.assertEqual(agent.action_history[-1][0], Add(2))

    def test_injected_rng_is_used(self):
        """An explicit random source overrides the config seed."""
        rng = random.Random(11)
        agent = MCTSAgent(MCTSConfig(seed=1), rng=rng)
        self.assertIs(agent.rng, rng)

    def test_reset(self):
        """reset drops the tree and statistics."""
        agent = MCTSAgent(self.config)
        agent.select_action(CountdownPosition(0, 3))
        agent.reset()
        self.assertIsNone(agent.root)
        self.assertEqual(agent.get_last_statistics(), {})
        self.assertEqual(agent.get_action_statistics(), {})
        self.assertEqual(agent.get_principal_variation(), [])

    def test_action_statistics(self):
        """Per-action statistics are keyed by description."""
        agent = MCTSAgent(self.config)
        agent.run_simulations(CountdownPosition(0, 3))
        stats = agent.get_action_statistics()

        self.assertEqual(set(stats), {"ADD 1", "ADD 2"})
        self.assertEqual(
            sum(entry["visits"] for entry in stats.values()),
            agent.root.visits
        )

    def test_factory(self):
        """Factory presets build working agents."""
        self.assertEqual(MCTSAgentFactory.create_fast().config.time_budget_ms, 15.0)
        self.assertEqual(MCTSAgentFactory.create_standard(seed=3).config.seed, 3)
        strong = MCTSAgentFactory.create_strong()
        self.assertEqual(strong.config.max_depth, 40)
        custom = MCTSAgentFactory.create_custom(time_budget_ms=5.0, name="Tiny")
        self.assertEqual(str(custom), "Tiny (MCTS, 5 ms per move)")
        self.assertEqual(MCTSAgentFactory.create_custom().config, MCTSConfig())


class TestMCTSConfig(unittest.TestCase):
    """Test case for MCTSConfig."""

    def test_defaults(self):
        """Defaults match the reference engine."""
        config = MCTSConfig()
        self.assertEqual(config.time_budget_ms, 30.0)
        self.assertAlmostEqual(config.exploration_weight, 1.414, places=3)
        self.assertEqual(config.max_depth, 20)
        self.assertIsNone(config.max_iterations)
        self.assertEqual(config.player_id, 0)

    def test_validation(self):
        """Invalid parameters are rejected."""
        with self.assertRaises(ValueError):
            MCTSConfig(exploration_weight=-1.0)
        with self.assertRaises(ValueError):
            MCTSConfig(max_depth=-1)
        with self.assertRaises(ValueError):
            MCTSConfig(max_iterations=-5)

    def test_dict_round_trip_ignores_unknown_keys(self):
        """from_dict keeps only known fields."""
        config = MCTSConfig.from_dict({"max_depth": 7, "seed": 3, "bogus": True})
        self.assertEqual(config.max_depth, 7)
        self.assertEqual(config.seed, 3)
        self.assertEqual(MCTSConfig.from_dict(config.to_dict()), config)
        self.assertIn("max_depth=7", str(config))


if __name__ == "__main__":
    unittest.main()
