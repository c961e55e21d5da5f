"""
Configuration for Monte Carlo Tree Search (MCTS).

This module defines the configuration parameters for the MCTS algorithm,
including the per-decision time budget, exploration constant and playout depth.
"""
from dataclasses import dataclass
from typing import Optional
import math


@dataclass
class MCTSConfig:
    """
    Configuration parameters for Monte Carlo Tree Search.

    This class defines all tunable parameters for the MCTS algorithm,
    with validation and sensible defaults.
    """
    # Search parameters
    time_budget_ms: float = 30.0
    """Wall-clock budget per decision in milliseconds (checked between iterations)"""

    exploration_weight: float = math.sqrt(2)
    """UCB1 exploration parameter (default is sqrt(2))"""

    max_depth: int = 20
    """Maximum number of plies played in a random playout"""

    max_iterations: Optional[int] = None
    """Optional cap on iterations per decision (None = time budget only)"""

    # Randomness
    seed: Optional[int] = None
    """Seed for the agent's random source (None = nondeterministic)"""

    # Scoring
    player_id: int = 0
    """ID of the player whose score the playouts maximize"""

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.exploration_weight < 0:
            raise ValueError("exploration_weight must be non-negative")

        if self.max_depth < 0:
            raise ValueError("max_depth must be non-negative")

        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError("max_iterations must be non-negative or None")

        if self.player_id < 0:
            raise ValueError("player_id must be non-negative")

    @classmethod
    def default(cls) -> 'MCTSConfig':
        """
        Get the default configuration.

        Returns:
            Default MCTSConfig object
        """
        return cls()

    @classmethod
    def fast(cls) -> 'MCTSConfig':
        """
        Get a configuration for tight turn limits.

        Returns:
            Fast MCTSConfig object
        """
        return cls(
            time_budget_ms=15.0,
            max_depth=10
        )

    @classmethod
    def deep(cls) -> 'MCTSConfig':
        """
        Get a configuration using most of a 50 ms turn with longer playouts.

        Returns:
            Deep MCTSConfig object
        """
        return cls(
            time_budget_ms=45.0,
            exploration_weight=1.2,  # Slightly less exploration
            max_depth=40
        )

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'MCTSConfig':
        """
        Create a configuration from a dictionary.

        Args:
            config_dict: Dictionary of configuration parameters

        Returns:
            MCTSConfig object
        """
        # Filter out any keys that aren't valid parameters
        valid_params = {k: v for k, v in config_dict.items()
                        if k in cls.__dataclass_fields__}
        return cls(**valid_params)

    def to_dict(self) -> dict:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary of configuration parameters
        """
        return {
            name: getattr(self, name)
            for name in self.__dataclass_fields__
        }

    def __str__(self) -> str:
        """
        Get a human-readable string representation.

        Returns:
            String representation
        """
        params = [f"{name}={value}" for name, value in self.to_dict().items()]
        return f"MCTSConfig({', '.join(params)})"
