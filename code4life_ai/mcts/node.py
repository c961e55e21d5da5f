"""
Monte Carlo Tree Search Node.

This module defines the MCTSNode class which represents a node in the MCTS tree.
Each node owns a position snapshot, statistics (visits, total reward), and its
child nodes. The parent link is a weak reference: children are the only strong
edges, so discarding a root frees every subtree that is not kept.
"""
from __future__ import annotations
from typing import List, Optional
import math
import random
import weakref

from code4life_ai.mcts.interfaces import Position, SearchAction


class MCTSNode:
    """
    A node in the Monte Carlo Tree Search.

    Each node represents a game position and tracks statistics about
    simulations that pass through it, including visit count and rewards.
    """

    def __init__(
        self,
        state: Position,
        parent: Optional[MCTSNode] = None,
        action: Optional[SearchAction] = None,
    ):
        """
        Initialize an MCTS node.

        Args:
            state: The position this node represents (owned by the node)
            parent: The parent node (None for root)
            action: The action that led to this state (None for root)
        """
        self.state = state
        self.action = action
        self._parent = weakref.ref(parent) if parent is not None else None

        # Node statistics
        self.visits = 0
        self.total_reward = 0.0
        self.children: List[MCTSNode] = []

        # Nodes in the subtree rooted here, this node included
        self.subtree_size = 1

    @property
    def parent(self) -> Optional[MCTSNode]:
        """The parent node, or None at the root."""
        return self._parent() if self._parent is not None else None

    @property
    def value(self) -> float:
        """Average reward of the simulations through this node (0.0 if never visited)."""
        if self.visits == 0:
            return 0.0
        return self.total_reward / self.visits

    def is_leaf(self) -> bool:
        """Check if this node has no children."""
        return not self.children

    def is_terminal(self) -> bool:
        """Check if this node represents a terminal position."""
        return self.state.is_terminal()

    def ucb_score(self, child: MCTSNode, exploration_weight: float) -> float:
        """
        Calculate the UCB1 score for a child node.

        UCB1 = average_reward + exploration_weight * sqrt(ln(parent_visits) / child_visits)

        Args:
            child: Child node to calculate score for
            exploration_weight: Weight of the exploration term

        Returns:
            UCB1 score
        """
        # If the child has never been visited, treat it as having infinite value
        if child.visits == 0:
            return math.inf

        exploitation = child.total_reward / child.visits
        exploration = math.sqrt(math.log(self.visits) / child.visits)
        return exploitation + exploration_weight * exploration

    def select_child(self, exploration_weight: float) -> MCTSNode:
        """
        Select the child with the highest UCB1 score.

        max() keeps the first of equal scores, so ties (including several
        unvisited children) go to the earliest created child.

        Args:
            exploration_weight: Weight of the exploration term

        Returns:
            Selected child node
        """
        if not self.children:
            raise ValueError("Cannot select child from node with no children")

        return max(self.children, key=lambda child: self.ucb_score(child, exploration_weight))

    def best_child(self) -> Optional[MCTSNode]:
        """
        Select the child with the highest average reward (no exploration).

        Unvisited children rank below every visited child.

        Returns:
            Best child node, or None if there are no children
        """
        if not self.children:
            return None

        return max(
            self.children,
            key=lambda child: child.value if child.visits > 0 else -math.inf
        )

    def random_child(self, rng: random.Random) -> MCTSNode:
        """Pick a child uniformly at random."""
        return self.children[rng.randrange(len(self.children))]

    def expand(self) -> List[MCTSNode]:
        """
        Create one child per legal action of this node's position.

        Does nothing if the position is terminal or the node is already expanded.
        The subtree sizes of this node and its ancestors grow by the number of
        children created.

        Returns:
            The children of this node
        """
        if self.children or self.is_terminal():
            return self.children

        for action in self.state.legal_actions():
            child = MCTSNode(
                state=self.state.apply_action(action),
                parent=self,
                action=action
            )
            self.children.append(child)

        added = len(self.children)
        node = self
        while node is not None:
            node.subtree_size += added
            node = node.parent

        return self.children

    def update(self, reward: float) -> None:
        """
        Record one simulation result.

        Args:
            reward: The simulation reward
        """
        self.visits += 1
        self.total_reward += reward

    def find_child_matching(self, state: Position) -> Optional[MCTSNode]:
        """
        Find the child whose position equals the given one.

        Args:
            state: Position to look for (compared by value)

        Returns:
            The first matching child, or None
        """
        for child in self.children:
            if child.state == state:
                return child
        return None

    def detach(self) -> MCTSNode:
        """
        Make this node a root, dropping its parent link and producing action.

        Returns:
            This node
        """
        self._parent = None
        self.action = None
        return self

    def __str__(self) -> str:
        """
        Get a string representation of the node.

        Returns:
            String representation
        """
        return (f"MCTSNode(action={self.action}, "
                f"visits={self.visits}, "
                f"reward={self.total_reward:.2f}, "
                f"children={len(self.children)})")
