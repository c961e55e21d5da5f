"""
Monte Carlo Tree Search (MCTS) algorithm.

This module implements the four standard phases of one search iteration:
1. Selection: Descend the tree with UCB1 to a leaf
2. Expansion: Create one child per legal action of the leaf
3. Simulation: Run a bounded random playout to estimate a node's value
4. Backpropagation: Update statistics up the tree

The functions only rely on the Position/SearchAction contract, so they work
for any rule set.
"""
from __future__ import annotations
from typing import Dict, List, Tuple
import random

from code4life_ai.mcts.interfaces import SearchAction
from code4life_ai.mcts.node import MCTSNode
from code4life_ai.mcts.config import MCTSConfig


def run_iteration(root: MCTSNode, config: MCTSConfig, rng: random.Random) -> Tuple[float, int]:
    """
    Run one select-expand-simulate-backpropagate cycle.

    Args:
        root: Root node of the MCTS tree
        config: MCTS configuration parameters
        rng: Random source for the child pick and the playout

    Returns:
        Tuple of (simulation reward, number of playout steps)
    """
    # 1. Selection
    leaf = select_node(root, config.exploration_weight)

    # 2. Expansion
    if not leaf.is_terminal() and leaf.is_leaf():
        expand_node(leaf)

    # 3. Simulation from a random child, or from the leaf itself
    node_to_simulate = leaf.random_child(rng) if leaf.children else leaf
    reward, steps = simulate_game(node_to_simulate, config, rng)

    # 4. Backpropagation
    backpropagate(node_to_simulate, reward)

    return reward, steps


def select_node(root: MCTSNode, exploration_weight: float) -> MCTSNode:
    """
    Descend from a node to a leaf, following the highest UCB1 child.

    Args:
        root: Node to start from
        exploration_weight: UCB1 exploration constant

    Returns:
        The leaf reached
    """
    current = root
    while current.children:
        current = current.select_child(exploration_weight)
    return current


def expand_node(node: MCTSNode) -> List[MCTSNode]:
    """
    Expand a node with one child per legal action.

    This is a wrapper around the node's expand method.

    Args:
        node: Node to expand

    Returns:
        The node's children (unchanged if it was terminal or already expanded)
    """
    return node.expand()


def simulate_game(
    node: MCTSNode,
    config: MCTSConfig,
    rng: random.Random
) -> Tuple[float, int]:
    """
    Run a random playout from a node to estimate its value.

    The playout stops at a terminal position, after config.max_depth plies,
    or when no legal action is left. The reward is the final position's
    score for config.player_id only.

    Args:
        node: Node to simulate from
        config: MCTS configuration parameters
        rng: Random source for the playout policy

    Returns:
        Tuple of (simulation reward, number of steps)
    """
    # apply_action never mutates, so walking from the node's state is a private copy
    state = node.state

    steps = 0
    while not state.is_terminal() and steps < config.max_depth:
        valid_actions = state.legal_actions()
        if not valid_actions:
            break

        action = valid_actions[rng.randrange(len(valid_actions))]
        state = state.apply_action(action)
        steps += 1

    return state.evaluate(config.player_id), steps


def backpropagate(node: MCTSNode, reward: float) -> None:
    """
    Update statistics up the tree.

    Every node from the simulated one up to and including the root gets one
    more visit and the full reward, with no discounting.

    Args:
        node: Node to start backpropagation from
        reward: Simulation reward
    """
    current = node
    while current is not None:
        current.update(reward)
        current = current.parent


def count_nodes(node: MCTSNode) -> int:
    """
    Count the total number of nodes in the tree.

    Args:
        node: Root node of the tree

    Returns:
        Total number of nodes
    """
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        count += 1
        stack.extend(current.children)
    return count


def get_principal_variation(root: MCTSNode, max_depth: int = 10) -> List[Tuple[SearchAction, float]]:
    """
    Get the principal variation (most visited path) from the root.

    This is useful for analysis and debugging.

    Args:
        root: Root node of the MCTS tree
        max_depth: Maximum depth to explore

    Returns:
        List of (action, value) pairs representing the principal variation
    """
    result = []
    current = root

    while current.children and len(result) < max_depth:
        best_child = max(current.children, key=lambda c: c.visits)
        if best_child.visits == 0:
            break
        result.append((best_child.action, best_child.value))
        current = best_child

    return result


def get_action_statistics(root: MCTSNode, exploration_weight: float) -> Dict[str, Dict[str, float]]:
    """
    Get statistics for all actions from the root.

    This is useful for analysis and debugging.

    Args:
        root: Root node of the MCTS tree
        exploration_weight: UCB1 exploration constant used for the "ucb" entry

    Returns:
        Dictionary mapping action descriptions to statistics
    """
    result = {}

    for child in root.children:
        result[str(child.action)] = {
            "visits": child.visits,
            "reward": child.total_reward,
            "value": child.value,
            "ucb": root.ucb_score(child, exploration_weight),
        }

    return result
