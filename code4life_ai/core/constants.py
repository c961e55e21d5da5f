"""
Constants for the Code4Life game.

This module defines all the game constants used throughout the Code4Life implementation,
including molecule types, module names, carrying limits, and scoring weights.
"""
from enum import Enum
from typing import Dict, List, Final


class Molecule(Enum):
    """Enum representing the five molecule types."""
    A = 'A'
    B = 'B'
    C = 'C'
    D = 'D'
    E = 'E'


# Molecules in the order the judge lists them
MOLECULES_ORDER: Final[List[Molecule]] = [
    Molecule.A,
    Molecule.B,
    Molecule.C,
    Molecule.D,
    Molecule.E,
]

NUM_MOLECULE_TYPES: Final[int] = len(MOLECULES_ORDER)

# Index of each molecule in storage/expertise/cost tuples
MOLECULE_INDEX: Final[Dict[Molecule, int]] = {
    molecule: i for i, molecule in enumerate(MOLECULES_ORDER)
}


# Modules a robot can move to
START_POS: Final[str] = "START_POS"
SAMPLES: Final[str] = "SAMPLES"
DIAGNOSIS: Final[str] = "DIAGNOSIS"
MOLECULES: Final[str] = "MOLECULES"
LABORATORY: Final[str] = "LABORATORY"

MODULES: Final[List[str]] = [SAMPLES, DIAGNOSIS, MOLECULES, LABORATORY]


# Player ids as sent by the judge
ME: Final[int] = 0
OPPONENT: Final[int] = 1
NUM_ROBOTS: Final[int] = 2

# carried_by value for samples stored in the cloud
CLOUD: Final[int] = -1


# Carrying limits
MAX_SAMPLES_CARRIED: Final[int] = 3
MAX_MOLECULES_CARRIED: Final[int] = 10

# Sample ranks that can be requested at the SAMPLES module
SAMPLE_RANKS: Final[List[int]] = [1, 2, 3]

# Cost value the judge sends for an undiagnosed sample
UNKNOWN_COST: Final[int] = -1

# Game length
MAX_TURNS: Final[int] = 200


# Weights of the progress score used to evaluate playouts
DIAGNOSED_SAMPLE_WEIGHT: Final[int] = 100
CARRIED_SAMPLE_WEIGHT: Final[int] = 10
CARRIED_MOLECULE_WEIGHT: Final[int] = 10
HEALTH_POINT_WEIGHT: Final[int] = 1000


# AI and simulation settings
DEFAULT_TIME_BUDGET_MS: Final[float] = 30.0
DEFAULT_FIRST_TURN_BUDGET_MS: Final[float] = 900.0
