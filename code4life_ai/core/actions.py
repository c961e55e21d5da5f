"""
Actions for the Code4Life game.

This module defines the moves a robot can make:
- Moving to a module (GOTO)
- Collecting a sample of a given rank at SAMPLES
- Diagnosing a carried sample at DIAGNOSIS
- Collecting a molecule at MOLECULES
- Producing a medicine from a sample at LABORATORY

Each action includes its legality check, its effect on a game state and the
command the judge expects.
"""
from __future__ import annotations
from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, ClassVar, List

from code4life_ai.core.constants import (
    Molecule, MOLECULES_ORDER, MODULES, SAMPLES, DIAGNOSIS, MOLECULES, LABORATORY,
    SAMPLE_RANKS, MAX_SAMPLES_CARRIED
)
from code4life_ai.core.samples import Sample, next_placeholder_id
from code4life_ai.mcts.interfaces import SearchAction

if TYPE_CHECKING:
    from code4life_ai.core.game import GameState


class ActionType(Enum):
    """Enum representing the different types of actions in Code4Life."""
    GOTO = auto()
    COLLECT_SAMPLE = auto()
    DIAGNOSE_SAMPLE = auto()
    COLLECT_MOLECULE = auto()
    PRODUCE_MEDICINE = auto()
    WAIT = auto()


class Action(SearchAction):
    """
    Abstract base class for all Code4Life actions.

    All specific action types inherit from this class and implement
    the required abstract methods.
    """
    action_type: ClassVar[ActionType]
    player_id: int

    @abstractmethod
    def is_legal(self, game_state: GameState) -> bool:
        """
        Check if the action is legal in the given game state.

        Args:
            game_state: Current state of the game

        Returns:
            True if the action is legal, False otherwise
        """
        pass

    @abstractmethod
    def execute(self, game_state: GameState) -> None:
        """
        Execute the action, modifying the game state in place.

        Only ever called on a private copy (see GameState.apply_action).

        Args:
            game_state: State to modify
        """
        pass


@dataclass(frozen=True)
class Goto(Action):
    """Move the robot to another module."""
    action_type: ClassVar[ActionType] = ActionType.GOTO
    player_id: int
    target: str

    def is_legal(self, game_state: GameState) -> bool:
        return self.target in MODULES and game_state.robots[self.player_id].target != self.target

    def execute(self, game_state: GameState) -> None:
        game_state.robots[self.player_id].target = self.target

    @property
    def description(self) -> str:
        return f"GOTO {self.target}"


@dataclass(frozen=True)
class CollectSample(Action):
    """
    Request an undiagnosed sample of a given rank.

    The real sample is only revealed by the judge, so the model adds a
    placeholder with unknown cost and health.
    """
    action_type: ClassVar[ActionType] = ActionType.COLLECT_SAMPLE
    player_id: int
    rank: int

    def is_legal(self, game_state: GameState) -> bool:
        robot = game_state.robots[self.player_id]
        return (
            robot.target == SAMPLES
            and self.rank in SAMPLE_RANKS
            and len(game_state.carried_samples(self.player_id)) < MAX_SAMPLES_CARRIED
        )

    def execute(self, game_state: GameState) -> None:
        sample_id = next_placeholder_id(game_state.samples)
        game_state.samples.append(Sample.placeholder(sample_id, self.player_id, self.rank))

    @property
    def description(self) -> str:
        return f"CONNECT {self.rank}"


@dataclass(frozen=True)
class DiagnoseSample(Action):
    """Diagnose one of the samples the robot carries."""
    action_type: ClassVar[ActionType] = ActionType.DIAGNOSE_SAMPLE
    player_id: int
    sample_id: int

    def is_legal(self, game_state: GameState) -> bool:
        if game_state.robots[self.player_id].target != DIAGNOSIS:
            return False
        sample = game_state.find_sample(self.sample_id)
        return sample is not None and sample.carried_by == self.player_id and not sample.diagnosed

    def execute(self, game_state: GameState) -> None:
        game_state.replace_sample(game_state.find_sample(self.sample_id).as_diagnosed())

    @property
    def description(self) -> str:
        return f"CONNECT {self.sample_id}"


@dataclass(frozen=True)
class CollectMolecule(Action):
    """Take one molecule from the shared pool."""
    action_type: ClassVar[ActionType] = ActionType.COLLECT_MOLECULE
    player_id: int
    molecule: Molecule

    def is_legal(self, game_state: GameState) -> bool:
        robot = game_state.robots[self.player_id]
        return (
            robot.target == MOLECULES
            and robot.can_carry_molecule()
            and game_state.available[self.molecule] > 0
        )

    def execute(self, game_state: GameState) -> None:
        game_state.robots[self.player_id].storage[self.molecule] += 1
        game_state.available[self.molecule] -= 1

    @property
    def description(self) -> str:
        return f"CONNECT {self.molecule.value}"


@dataclass(frozen=True)
class ProduceMedicine(Action):
    """Turn a diagnosed sample into a medicine, scoring its health."""
    action_type: ClassVar[ActionType] = ActionType.PRODUCE_MEDICINE
    player_id: int
    sample_id: int

    def is_legal(self, game_state: GameState) -> bool:
        robot = game_state.robots[self.player_id]
        if robot.target != LABORATORY:
            return False
        sample = game_state.find_sample(self.sample_id)
        return sample is not None and sample.carried_by == self.player_id and robot.can_produce(sample)

    def execute(self, game_state: GameState) -> None:
        robot = game_state.robots[self.player_id]
        sample = game_state.find_sample(self.sample_id)

        # Spent molecules go back to the pool
        for molecule, needed in robot.effective_cost(sample).items():
            robot.storage[molecule] -= needed
            game_state.available[molecule] += needed

        robot.score += sample.health
        gained = sample.expertise_molecule
        if gained is not None:
            robot.expertise[gained] += 1

        game_state.remove_sample(self.sample_id)

    @property
    def description(self) -> str:
        return f"CONNECT {self.sample_id}"


@dataclass(frozen=True)
class Wait(Action):
    """Do nothing this turn. Never proposed by the search."""
    action_type: ClassVar[ActionType] = ActionType.WAIT
    player_id: int

    def is_legal(self, game_state: GameState) -> bool:
        return True

    def execute(self, game_state: GameState) -> None:
        pass

    @property
    def description(self) -> str:
        return "WAIT"


def get_all_valid_actions(game_state: GameState, player_id: int) -> List[Action]:
    """
    Get all legal actions for a robot.

    Actions are listed in a fixed order (moves, sample collections, diagnoses,
    molecule collections, productions) so the search is reproducible.

    Args:
        game_state: Current state of the game
        player_id: ID of the robot

    Returns:
        List of legal actions
    """
    candidates: List[Action] = []

    # 1. Moves to every other module
    candidates.extend(Goto(player_id, target) for target in MODULES)

    # 2. Sample collection by rank
    candidates.extend(CollectSample(player_id, rank) for rank in SAMPLE_RANKS)

    # 3. Diagnosis of carried samples
    carried = game_state.carried_samples(player_id)
    candidates.extend(DiagnoseSample(player_id, sample.id) for sample in carried)

    # 4. Molecule collection
    candidates.extend(CollectMolecule(player_id, molecule) for molecule in MOLECULES_ORDER)

    # 5. Medicine production
    candidates.extend(ProduceMedicine(player_id, sample.id) for sample in carried)

    return [action for action in candidates if action.is_legal(game_state)]
