"""
Monte Carlo Tree Search Agent.

This module provides the MCTSAgent class, the search driver. It owns the
search tree across turns: each decision first tries to continue the previous
tree from the child matching the observed position, then runs MCTS
iterations until the time budget is spent, and finally reports the root
child with the best average reward.
"""
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple
import logging
import random
import time

from code4life_ai.exceptions import NoLegalActions
from code4life_ai.mcts.interfaces import Position, SearchAction
from code4life_ai.mcts.node import MCTSNode
from code4life_ai.mcts.config import MCTSConfig
from code4life_ai.mcts.search import (
    run_iteration, get_action_statistics, get_principal_variation
)

logger = logging.getLogger(__name__)


class MCTSAgent:
    """
    Monte Carlo Tree Search agent.

    Create one agent per game and keep it for the whole game: the tree built
    for one decision is reused for the next when the observed position is one
    of the modeled outcomes. The tree must not be shared between callers.
    """

    def __init__(
        self,
        config: Optional[MCTSConfig] = None,
        name: str = "MCTS Agent",
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.perf_counter,
        history_size: int = 256
    ):
        """
        Initialize an MCTS agent.

        Args:
            config: MCTS configuration parameters
            name: Name of the agent
            rng: Random source for simulations (defaults to one seeded with config.seed)
            clock: Monotonic clock returning seconds
            history_size: Number of recent decisions kept in action_history
        """
        self.config = config or MCTSConfig()
        self.name = name
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.clock = clock

        # Root of the search tree, kept across decisions
        self.root: Optional[MCTSNode] = None

        # Statistics from the most recent search
        self.last_stats: Dict[str, Any] = {}

        # Most recent actions and their statistics
        self.action_history: Deque[Tuple[SearchAction, Dict[str, Any]]] = deque(maxlen=history_size)

    def run_simulations(self, state: Position, budget_ms: Optional[float] = None) -> None:
        """
        Search from an observed position until the time budget is spent.

        The deadline is only checked between iterations, so the last
        iteration may run past it by up to one playout.

        Args:
            state: Position observed this turn
            budget_ms: Time budget in milliseconds (defaults to config.time_budget_ms)
        """
        if budget_ms is None:
            budget_ms = self.config.time_budget_ms

        start_time = self.clock()
        reused = self._rebase(state)

        iterations = 0
        total_steps = 0
        max_iterations = self.config.max_iterations
        while (self.clock() - start_time) * 1000.0 < budget_ms:
            if max_iterations is not None and iterations >= max_iterations:
                break
            _, steps = run_iteration(self.root, self.config, self.rng)
            iterations += 1
            total_steps += steps

        self.last_stats = {
            "iterations": iterations,
            "reused_tree": reused,
            "root_visits": self.root.visits,
            "node_count": self.root.subtree_size,
            "average_simulation_steps": total_steps / max(1, iterations),
        }
        elapsed = self.clock() - start_time
        self.last_stats["time_elapsed"] = elapsed
        self.last_stats["iterations_per_second"] = iterations / max(0.001, elapsed)

        self._log_search_info()

    def best_action(self) -> SearchAction:
        """
        Get the action of the root child with the highest average reward.

        Returns:
            Selected action

        Raises:
            NoLegalActions: If the root has no children
        """
        if self.root is None:
            raise NoLegalActions("No search has been run yet")

        best_child = self.root.best_child()
        if best_child is None:
            raise NoLegalActions(
                "Root has no children: the position is terminal or the budget "
                "was too small to expand it"
            )
        return best_child.action

    def select_action(self, state: Position, budget_ms: Optional[float] = None) -> SearchAction:
        """
        Search from a position and return the chosen action.

        Args:
            state: Position observed this turn
            budget_ms: Time budget in milliseconds (defaults to config.time_budget_ms)

        Returns:
            Selected action

        Raises:
            NoLegalActions: If no action could be chosen
        """
        self.run_simulations(state, budget_ms)
        action = self.best_action()
        self.action_history.append((action, self.last_stats))
        return action

    def _rebase(self, state: Position) -> bool:
        """
        Move the root to the child matching the observed position.

        On a miss (or on the first decision) the tree is replaced by a fresh
        root holding a private copy of the position.

        Args:
            state: Position observed this turn

        Returns:
            True if an existing subtree was reused
        """
        if self.root is not None:
            match = self.root.find_child_matching(state)
            if match is not None:
                # Siblings are dropped with the old root
                self.root = match.detach()
                logger.debug("Reusing subtree with %d visits", self.root.visits)
                return True
            logger.debug("No child matches the observed state, discarding tree")

        self.root = MCTSNode(state.clone())
        logger.debug("Creating new tree")
        return False

    def _log_search_info(self) -> None:
        """Log the search summary and per-action statistics."""
        stats = self.last_stats
        logger.info(
            "%s: %d iterations in %.1f ms (%.0f it/s), %d nodes, reused=%s",
            self.name,
            stats["iterations"],
            stats["time_elapsed"] * 1000.0,
            stats["iterations_per_second"],
            stats["node_count"],
            stats["reused_tree"],
        )

        if logger.isEnabledFor(logging.DEBUG):
            for child in self.root.children:
                logger.debug(
                    "child: %s, score %.1f, visits %d",
                    child.action, child.total_reward, child.visits
                )

    def get_last_statistics(self) -> Dict[str, Any]:
        """
        Get statistics from the most recent search.

        Returns:
            Dictionary of search statistics
        """
        return self.last_stats

    def get_principal_variation(self) -> List[Tuple[SearchAction, float]]:
        """
        Get the principal variation (most visited path) of the current tree.

        Returns:
            List of (action, value) pairs representing the principal variation
        """
        if self.root is None:
            return []

        return get_principal_variation(self.root)

    def get_action_statistics(self) -> Dict[str, Dict[str, float]]:
        """
        Get statistics for all actions at the current root.

        Returns:
            Dictionary mapping action descriptions to statistics
        """
        if self.root is None:
            return {}

        return get_action_statistics(self.root, self.config.exploration_weight)

    def reset(self) -> None:
        """Drop the search tree and all statistics."""
        self.root = None
        self.last_stats = {}
        self.action_history.clear()

    def __str__(self) -> str:
        """
        Get a string representation of the agent.

        Returns:
            String representation
        """
        return f"{self.name} (MCTS, {self.config.time_budget_ms:g} ms per move)"


class MCTSAgentFactory:
    """
    Factory for creating MCTS agents with different configurations.
    """

    @staticmethod
    def create_fast(seed: Optional[int] = None) -> MCTSAgent:
        """
        Create an agent for tight turn limits.

        Returns:
            MCTSAgent
        """
        config = MCTSConfig.fast()
        config.seed = seed
        return MCTSAgent(config=config, name="Fast MCTS")

    @staticmethod
    def create_standard(seed: Optional[int] = None) -> MCTSAgent:
        """
        Create an agent with the default parameters.

        Returns:
            MCTSAgent
        """
        config = MCTSConfig.default()
        config.seed = seed
        return MCTSAgent(config=config, name="Standard MCTS")

    @staticmethod
    def create_strong(seed: Optional[int] = None) -> MCTSAgent:
        """
        Create an agent with a larger budget and longer playouts.

        Returns:
            MCTSAgent
        """
        config = MCTSConfig.deep()
        config.seed = seed
        return MCTSAgent(config=config, name="Strong MCTS")

    @staticmethod
    def create_custom(
        time_budget_ms: float = MCTSConfig.time_budget_ms,
        exploration_weight: float = MCTSConfig.exploration_weight,
        max_depth: int = MCTSConfig.max_depth,
        seed: Optional[int] = None,
        name: str = "Custom MCTS"
    ) -> MCTSAgent:
        """
        Create a custom MCTS agent.

        Args:
            time_budget_ms: Time budget per move in milliseconds
            exploration_weight: UCB1 exploration parameter
            max_depth: Maximum playout depth
            seed: Random seed
            name: Name of the agent

        Returns:
            MCTSAgent
        """
        config = MCTSConfig(
            time_budget_ms=time_budget_ms,
            exploration_weight=exploration_weight,
            max_depth=max_depth,
            seed=seed
        )
        return MCTSAgent(config=config, name=name)
