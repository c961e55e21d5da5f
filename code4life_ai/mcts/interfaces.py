"""
Abstract position/action contract used by the search.

The MCTS code only talks to these two base classes, so a new rule set can be
searched by subclassing them without touching the algorithm.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List
import copy


class SearchAction(ABC):
    """
    An opaque move token.

    The search never interprets an action; it only hands it back to the
    position that produced it. The description is for the outer protocol.
    """

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of the action."""
        pass

    def __str__(self) -> str:
        return self.description


class Position(ABC):
    """
    A complete game position as seen by the searching player.

    Positions are treated as values: ``apply_action`` must return a new
    position and leave ``self`` untouched, and equality must compare the full
    position (it is used to find a matching subtree between turns).
    """

    @abstractmethod
    def legal_actions(self) -> List[SearchAction]:
        """
        Get the legal actions of the acting player, in a stable order.

        Returns:
            List of legal actions (empty if none)
        """
        pass

    @abstractmethod
    def apply_action(self, action: SearchAction) -> Position:
        """
        Get the position reached by applying an action.

        Args:
            action: A legal action of this position

        Returns:
            A new position; this position is not modified
        """
        pass

    @abstractmethod
    def is_terminal(self) -> bool:
        """Whether the game is over in this position."""
        pass

    @abstractmethod
    def evaluate(self, player_id: int) -> float:
        """
        Score this position for one player.

        The score is a progress measure, higher is better.

        Args:
            player_id: ID of the player to score

        Returns:
            Scalar reward
        """
        pass

    def clone(self) -> Position:
        """
        Create a deep copy of the position.

        Returns:
            Copy of the position
        """
        return copy.deepcopy(self)

    @abstractmethod
    def __eq__(self, other: object) -> bool:
        pass

    @abstractmethod
    def __hash__(self) -> int:
        pass
