#!/usr/bin/env python
"""
Play Code4Life against the judge over stdin/stdout.

This script reads the judge's turn blocks, runs the MCTS agent for each turn
and prints the chosen command. Diagnostics are logged to stderr.

Example usage:
    # Play with the default 30 ms budget per turn
    code4life-play

    # Use a bigger first-turn budget and a fixed seed
    code4life-play --first-budget-ms 900 --seed 42 --log-level DEBUG
"""
import argparse
import logging
import sys
from typing import Optional, TextIO

from code4life_ai.core.actions import Wait
from code4life_ai.core.constants import (
    ME, DEFAULT_TIME_BUDGET_MS, DEFAULT_FIRST_TURN_BUDGET_MS
)
from code4life_ai.core.game import GameState
from code4life_ai.exceptions import NoLegalActions
from code4life_ai.mcts.agent import MCTSAgent
from code4life_ai.mcts.config import MCTSConfig
from code4life_ai.mcts.interfaces import SearchAction
from code4life_ai.protocol import TokenReader, read_projects, read_turn, format_action
from code4life_ai.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def choose_action(
    agent: MCTSAgent,
    state: GameState,
    budget_ms: float
) -> SearchAction:
    """
    Choose the action for one turn.

    Falls back to the first legal action (or WAIT) when the search could not
    expand the root.

    Args:
        agent: The agent kept across turns
        state: Observed game state
        budget_ms: Time budget in milliseconds

    Returns:
        Action to play
    """
    try:
        return agent.select_action(state, budget_ms)
    except NoLegalActions as e:
        logger.warning("Turn %d: %s", state.turn, e)
        legal = state.legal_actions()
        return legal[0] if legal else Wait(ME)


def run_game_loop(
    stream_in: TextIO,
    stream_out: TextIO,
    agent: MCTSAgent,
    budget_ms: float = DEFAULT_TIME_BUDGET_MS,
    first_budget_ms: Optional[float] = None
) -> int:
    """
    Play turns until the judge closes the input.

    Args:
        stream_in: Judge input
        stream_out: Stream receiving one command per turn
        agent: The agent, created once for the whole game
        budget_ms: Time budget per turn in milliseconds
        first_budget_ms: Budget for the first turn (defaults to budget_ms)

    Returns:
        Number of turns played
    """
    reader = TokenReader(stream_in)
    projects = read_projects(reader)
    logger.info("Read %d science projects", len(projects))

    turn = 0
    while not reader.at_eof():
        state = read_turn(reader, turn)

        turn_budget = budget_ms
        if turn == 0 and first_budget_ms is not None:
            turn_budget = first_budget_ms

        action = choose_action(agent, state, turn_budget)
        stream_out.write(format_action(action) + "\n")
        stream_out.flush()

        turn += 1

    logger.info("Input closed after %d turns", turn)
    return turn


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Play Code4Life with an MCTS agent")

    parser.add_argument("--budget-ms", type=float, default=DEFAULT_TIME_BUDGET_MS,
                        help="Search time per turn in milliseconds")
    parser.add_argument("--first-budget-ms", type=float, default=DEFAULT_FIRST_TURN_BUDGET_MS,
                        help="Search time for the first turn in milliseconds")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed")
    parser.add_argument("--exploration", type=float, default=MCTSConfig.exploration_weight,
                        help="UCB1 exploration constant")
    parser.add_argument("--max-depth", type=int, default=MCTSConfig.max_depth,
                        help="Maximum playout depth")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (logs go to stderr)")
    parser.add_argument("--log-file", type=str, default=None,
                        help="Optional log file")

    return parser.parse_args(argv)


def main(argv=None):
    """Run the bot with command-line arguments."""
    args = parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)

    config = MCTSConfig(
        time_budget_ms=args.budget_ms,
        exploration_weight=args.exploration,
        max_depth=args.max_depth,
        seed=args.seed,
        player_id=ME
    )
    agent = MCTSAgent(config=config, name="Code4Life MCTS")
    logger.info("Starting %s with %s", agent, config)

    run_game_loop(sys.stdin, sys.stdout, agent, args.budget_ms, args.first_budget_ms)


if __name__ == "__main__":
    main()
