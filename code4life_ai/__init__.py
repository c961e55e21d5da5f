"""
Code4Life AI - A Monte Carlo Tree Search bot for the Code4Life game.

This package provides a generic, time-bounded MCTS engine that reuses its
search tree between turns, a model of the Code4Life rules for it to search,
and the judge protocol loop that plays a full game.
"""

__version__ = "0.1.0"
__author__ = "Code4Life AI Team"

# Make key components available at package level
from code4life_ai.core.game import GameState
from code4life_ai.core.actions import Action
from code4life_ai.mcts.agent import MCTSAgent
from code4life_ai.mcts.config import MCTSConfig
from code4life_ai.exceptions import (
    Code4LifeError, NoLegalActions, ActionPreconditionViolation, ProtocolError
)

# Version info as a tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split('.')))
