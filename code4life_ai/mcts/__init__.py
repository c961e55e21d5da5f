"""
Monte Carlo Tree Search (MCTS) engine.

This package provides a time-bounded MCTS agent that works with any game
implementing the Position/SearchAction contract. Each iteration runs:

1. Selection: Starting from the root node, select child nodes using UCB1 until
   reaching a leaf node.
2. Expansion: Create one child per legal action of the leaf.
3. Simulation: From a random child (or the leaf itself), perform a random
   playout of bounded depth and score the final position.
4. Backpropagation: Update the statistics of all nodes in the path with the result.

Between turns, the agent keeps the subtree whose position matches the newly
observed one, so earlier simulations keep paying off.
"""

from code4life_ai.mcts.interfaces import Position, SearchAction
from code4life_ai.mcts.node import MCTSNode
from code4life_ai.mcts.agent import MCTSAgent, MCTSAgentFactory
from code4life_ai.mcts.search import (
    run_iteration,
    select_node,
    expand_node,
    simulate_game,
    backpropagate
)
from code4life_ai.mcts.config import MCTSConfig

__all__ = [
    'Position',
    'SearchAction',
    'MCTSAgent',
    'MCTSAgentFactory',
    'MCTSNode',
    'MCTSConfig',
    'run_iteration',
    'select_node',
    'expand_node',
    'simulate_game',
    'backpropagate'
]
