#!/usr/bin/env python
"""
Local self-play harness for the Code4Life MCTS agent.

There is no judge here: the agent's chosen action is applied to the modeled
state and the result is fed back as the next observation. Every observed
state is then one of the root's children, so this exercises tree reuse on
every turn and measures decision times under a given budget.

Example usage:
    # Play 50 turns with 3 diagnosed samples in hand
    code4life-simulate --turns 50 --samples 3 --seed 7
"""
import argparse
import logging
import random
from collections import Counter
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm

from code4life_ai.core.constants import (
    ME, CLOUD, MOLECULES_ORDER, SAMPLE_RANKS, MAX_SAMPLES_CARRIED,
    NUM_MOLECULE_TYPES, DEFAULT_TIME_BUDGET_MS
)
from code4life_ai.core.game import GameState, create_game_state
from code4life_ai.core.samples import Sample
from code4life_ai.exceptions import NoLegalActions
from code4life_ai.mcts.agent import MCTSAgent
from code4life_ai.mcts.config import MCTSConfig
from code4life_ai.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def random_diagnosed_samples(rng: random.Random, count: int) -> List[Sample]:
    """
    Create diagnosed samples with random costs.

    The first MAX_SAMPLES_CARRIED samples are carried by our robot, the rest
    stay in the cloud.

    Args:
        rng: Random source
        count: Number of samples

    Returns:
        List of samples
    """
    samples = []
    for sample_id in range(count):
        rank = rng.choice(SAMPLE_RANKS)
        cost = [rng.randint(0, rank + 1) for _ in range(NUM_MOLECULE_TYPES)]
        samples.append(Sample.from_judge(
            sample_id=sample_id,
            carried_by=ME if sample_id < MAX_SAMPLES_CARRIED else CLOUD,
            rank=rank,
            expertise_gain=rng.choice(MOLECULES_ORDER).value,
            health=rank * 10,
            cost=cost
        ))
    return samples


def run_self_play(
    agent: MCTSAgent,
    initial_state: GameState,
    turns: int,
    budget_ms: Optional[float] = None,
    show_progress: bool = True
) -> Dict[str, Any]:
    """
    Play turns against the model and collect statistics.

    Args:
        agent: The agent, kept across turns
        initial_state: Starting position
        turns: Maximum number of turns to play
        budget_ms: Time budget per turn (defaults to the agent's config)
        show_progress: Whether to display a progress bar

    Returns:
        Dictionary of statistics
    """
    state = initial_state
    decision_times = []
    iterations = []
    reused = 0
    action_counts: Counter = Counter()

    pbar = tqdm(total=turns, desc="Self-play", disable=not show_progress)
    turns_played = 0
    for _ in range(turns):
        if state.is_terminal():
            break

        try:
            action = agent.select_action(state, budget_ms)
        except NoLegalActions as e:
            logger.warning("Stopping at turn %d: %s", state.turn, e)
            break

        stats = agent.get_last_statistics()
        decision_times.append(stats["time_elapsed"] * 1000.0)
        iterations.append(stats["iterations"])
        reused += int(stats["reused_tree"])
        action_counts[action.action_type.name] += 1

        state = state.apply_action(action)
        turns_played += 1
        pbar.update(1)
        pbar.set_postfix(score=state.robots[ME].score)

    pbar.close()

    times = np.array(decision_times) if decision_times else np.zeros(1)
    return {
        "turns": turns_played,
        "final_score": state.robots[ME].score,
        "final_evaluation": state.evaluate(ME),
        "reuse_rate": reused / max(1, turns_played),
        "mean_decision_ms": float(np.mean(times)),
        "p95_decision_ms": float(np.percentile(times, 95)),
        "max_decision_ms": float(np.max(times)),
        "mean_iterations": float(np.mean(iterations)) if iterations else 0.0,
        "actions": dict(action_counts),
    }


def main(argv=None):
    """Run self-play with command-line arguments."""
    parser = argparse.ArgumentParser(description="Run the Code4Life MCTS agent against its own model")
    parser.add_argument("--turns", type=int, default=100, help="Number of turns to play")
    parser.add_argument("--budget-ms", type=float, default=DEFAULT_TIME_BUDGET_MS,
                        help="Search time per turn in milliseconds")
    parser.add_argument("--samples", type=int, default=3,
                        help="Number of diagnosed samples to start with")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (logs go to stderr)")
    args = parser.parse_args(argv)

    setup_logging(getattr(logging, args.log_level))

    rng = random.Random(args.seed)
    state = create_game_state(samples=random_diagnosed_samples(rng, args.samples))
    agent = MCTSAgent(
        config=MCTSConfig(time_budget_ms=args.budget_ms, seed=args.seed),
        name="Self-play MCTS"
    )

    stats = run_self_play(agent, state, args.turns)

    print("\nSelf-play Summary:")
    print(f"  Turns: {stats['turns']}")
    print(f"  Final score: {stats['final_score']}")
    print(f"  Final evaluation: {stats['final_evaluation']:.0f}")
    print(f"  Tree reuse rate: {stats['reuse_rate']:.0%}")
    print(f"  Decision time: mean {stats['mean_decision_ms']:.1f} ms, "
          f"p95 {stats['p95_decision_ms']:.1f} ms, max {stats['max_decision_ms']:.1f} ms")
    print(f"  Iterations per decision: {stats['mean_iterations']:.0f}")

    print("\nAction Statistics:")
    for action_type, count in sorted(stats["actions"].items()):
        print(f"  {action_type}: {count}")


if __name__ == "__main__":
    main()
