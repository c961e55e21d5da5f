"""
Game state for Code4Life.

This module defines the position searched by the MCTS:
- GameState: Complete representation of a position (robots, samples,
  available molecules, turn)
- Helper functions for building states

Only the acting robot's moves are modeled; the opponent stays frozen.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from code4life_ai.core.constants import (
    Molecule, MOLECULES_ORDER, ME, OPPONENT, MAX_TURNS,
    DIAGNOSED_SAMPLE_WEIGHT, CARRIED_SAMPLE_WEIGHT,
    CARRIED_MOLECULE_WEIGHT, HEALTH_POINT_WEIGHT
)
from code4life_ai.core.robot import Robot
from code4life_ai.core.samples import Sample, filter_samples_by_owner
from code4life_ai.core.actions import Action, get_all_valid_actions
from code4life_ai.exceptions import ActionPreconditionViolation
from code4life_ai.mcts.interfaces import Position


@dataclass(eq=False)
class GameState(Position):
    """
    Complete representation of a Code4Life position.

    Two states are equal when every robot, every sample (in any order), the
    molecule pool and the turn are equal.
    """
    robots: List[Robot] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)
    available: Dict[Molecule, int] = field(default_factory=dict)
    turn: int = 0
    acting_player: int = ME

    def __post_init__(self):
        """Initialize an empty molecule pool."""
        for molecule in MOLECULES_ORDER:
            self.available.setdefault(molecule, 0)

    # Position contract

    def legal_actions(self) -> List[Action]:
        """Get the legal actions of the acting robot."""
        if self.is_terminal():
            return []
        return get_all_valid_actions(self, self.acting_player)

    def apply_action(self, action: Action) -> GameState:
        """
        Get the state reached by applying an action of the acting robot.

        The action is checked against this state and executed on a copy, so
        this state is never modified.

        Args:
            action: Action to apply

        Returns:
            New game state, one turn later

        Raises:
            ActionPreconditionViolation: If the action is not legal here
        """
        if not action.is_legal(self):
            raise ActionPreconditionViolation(action, f"turn {self.turn}")

        new_state = self.clone()
        action.execute(new_state)
        new_state.turn += 1
        return new_state

    def is_terminal(self) -> bool:
        """The game ends after MAX_TURNS turns."""
        return self.turn >= MAX_TURNS

    def evaluate(self, player_id: int) -> float:
        """
        Progress score of one robot.

        Scored health dominates, then diagnosed samples, then carried samples
        and molecules, so each step toward a medicine raises the score.

        Args:
            player_id: ID of the robot to score

        Returns:
            Weighted progress score
        """
        robot = self.robots[player_id]
        carried = self.carried_samples(player_id)
        diagnosed = sum(1 for sample in carried if sample.diagnosed)

        score = diagnosed * DIAGNOSED_SAMPLE_WEIGHT
        score += len(carried) * CARRIED_SAMPLE_WEIGHT
        score += robot.molecule_count() * CARRIED_MOLECULE_WEIGHT
        score += robot.score * HEALTH_POINT_WEIGHT
        return float(score)

    def clone(self) -> GameState:
        """
        Create a copy of the game state.

        Samples are immutable and shared; robots and the pool are copied.

        Returns:
            Copy of the game state
        """
        return GameState(
            robots=[
                Robot(
                    id=robot.id,
                    target=robot.target,
                    score=robot.score,
                    storage=dict(robot.storage),
                    expertise=dict(robot.expertise)
                )
                for robot in self.robots
            ],
            samples=list(self.samples),
            available=dict(self.available),
            turn=self.turn,
            acting_player=self.acting_player
        )

    def state_key(self) -> Tuple:
        """Hashable key covering the full position."""
        return (
            self.turn,
            self.acting_player,
            tuple(robot.state_key() for robot in self.robots),
            tuple(sorted(self.samples, key=lambda sample: sample.id)),
            tuple(self.available[molecule] for molecule in MOLECULES_ORDER),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameState):
            return NotImplemented
        return self.state_key() == other.state_key()

    def __hash__(self) -> int:
        return hash(self.state_key())

    # Sample helpers

    def carried_samples(self, player_id: int) -> List[Sample]:
        """Get the samples carried by a robot."""
        return filter_samples_by_owner(self.samples, player_id)

    def find_sample(self, sample_id: int) -> Optional[Sample]:
        """Get a sample by id, or None if it is not in play."""
        for sample in self.samples:
            if sample.id == sample_id:
                return sample
        return None

    def replace_sample(self, sample: Sample) -> None:
        """Replace the sample with the same id."""
        self.samples = [sample if s.id == sample.id else s for s in self.samples]

    def remove_sample(self, sample_id: int) -> None:
        """Remove a sample from play."""
        self.samples = [s for s in self.samples if s.id != sample_id]

    def __str__(self) -> str:
        """Get a multi-line description of the state."""
        lines = [f"Turn {self.turn}/{MAX_TURNS}"]
        for robot in self.robots:
            lines.append(f"  {robot}")
            for sample in self.carried_samples(robot.id):
                lines.append(f"    {sample}")
        pool = " ".join(f"{m.value}{self.available[m]}" for m in MOLECULES_ORDER)
        lines.append(f"  Available: {pool}")
        return "\n".join(lines)


def create_game_state(
    samples: Optional[Iterable[Sample]] = None,
    available: int = 5,
    turn: int = 0
) -> GameState:
    """
    Create a game state with both robots at their start position.

    Args:
        samples: Samples in play (carried or in the cloud)
        available: Count of each molecule in the pool
        turn: Turn number

    Returns:
        New game state
    """
    return GameState(
        robots=[Robot(id=ME), Robot(id=OPPONENT)],
        samples=list(samples or []),
        available={molecule: available for molecule in MOLECULES_ORDER},
        turn=turn
    )
