"""
Code4Life AI Core Package

This package contains the Code4Life rules modeled for the search, including:
- Game state representation
- Robot and sample data
- Robot actions
- Constants and enums

All core components can be imported directly from this package.
"""

# Game state
from code4life_ai.core.game import GameState, create_game_state

# Robots and samples
from code4life_ai.core.robot import Robot
from code4life_ai.core.samples import Sample

# Actions
from code4life_ai.core.actions import (
    Action, ActionType,
    Goto, CollectSample, DiagnoseSample, CollectMolecule, ProduceMedicine, Wait,
    get_all_valid_actions
)

# Constants
from code4life_ai.core.constants import (
    Molecule, MOLECULES_ORDER, MODULES,
    SAMPLES, DIAGNOSIS, MOLECULES, LABORATORY, START_POS,
    ME, OPPONENT, MAX_TURNS
)

__all__ = [
    # Game
    'GameState', 'create_game_state',

    # Robots and samples
    'Robot', 'Sample',

    # Actions
    'Action', 'ActionType',
    'Goto', 'CollectSample', 'DiagnoseSample', 'CollectMolecule', 'ProduceMedicine', 'Wait',
    'get_all_valid_actions',

    # Constants
    'Molecule', 'MOLECULES_ORDER', 'MODULES',
    'SAMPLES', 'DIAGNOSIS', 'MOLECULES', 'LABORATORY', 'START_POS',
    'ME', 'OPPONENT', 'MAX_TURNS'
]
