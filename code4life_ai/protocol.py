"""
Judge protocol for Code4Life.

The judge writes whitespace-separated values on stdin: the science projects
once, then one block per turn describing both robots, the molecule pool and
every sample in play. The bot answers with one command line per turn.
"""
from collections import deque
from typing import Deque, List, TextIO, Tuple
import logging

from code4life_ai.core.constants import NUM_MOLECULE_TYPES, NUM_ROBOTS, MOLECULES_ORDER
from code4life_ai.core.game import GameState
from code4life_ai.core.robot import Robot
from code4life_ai.core.samples import Sample
from code4life_ai.exceptions import ProtocolError
from code4life_ai.mcts.interfaces import SearchAction

logger = logging.getLogger(__name__)


class TokenReader:
    """
    Reads whitespace-separated tokens from a text stream.

    Lines are only read when a token is needed, so the reader never blocks
    waiting for input the judge has not been asked for yet.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self._tokens: Deque[str] = deque()

    def _fill(self) -> bool:
        """Read lines until a token is buffered. Returns False at end of input."""
        while not self._tokens:
            line = self.stream.readline()
            if not line:
                return False
            self._tokens.extend(line.split())
        return True

    def at_eof(self) -> bool:
        """Whether the input is exhausted."""
        return not self._fill()

    def next_str(self) -> str:
        """
        Read the next token.

        Raises:
            ProtocolError: If the input ends
        """
        if not self._fill():
            raise ProtocolError("Unexpected end of input")
        return self._tokens.popleft()

    def next_int(self) -> int:
        """
        Read the next token as an integer.

        Raises:
            ProtocolError: If the input ends or the token is not an integer
        """
        token = self.next_str()
        try:
            return int(token)
        except ValueError as e:
            raise ProtocolError(f"Expected an integer, got {token!r}") from e

    def next_ints(self, count: int) -> List[int]:
        """Read several integers."""
        return [self.next_int() for _ in range(count)]


def read_projects(reader: TokenReader) -> List[Tuple[int, ...]]:
    """
    Read the science projects sent before the first turn.

    Args:
        reader: Token reader on the judge input

    Returns:
        List of per-molecule expertise requirements, one per project
    """
    project_count = reader.next_int()
    if project_count < 0:
        raise ProtocolError(f"Invalid project count: {project_count}")
    return [tuple(reader.next_ints(NUM_MOLECULE_TYPES)) for _ in range(project_count)]


def read_robot(reader: TokenReader, robot_id: int) -> Robot:
    """
    Read one robot line.

    Format: target eta score storageA..E expertiseA..E

    Args:
        reader: Token reader on the judge input
        robot_id: ID of the robot (0 = us)

    Returns:
        Robot object
    """
    target = reader.next_str()
    reader.next_int()  # eta, not modeled
    score = reader.next_int()
    storage = reader.next_ints(NUM_MOLECULE_TYPES)
    expertise = reader.next_ints(NUM_MOLECULE_TYPES)
    return Robot.from_counts(robot_id, target, score, storage, expertise)


def read_sample(reader: TokenReader) -> Sample:
    """
    Read one sample line.

    Format: sampleId carriedBy rank expertiseGain health costA..E

    Args:
        reader: Token reader on the judge input

    Returns:
        Sample object
    """
    sample_id = reader.next_int()
    carried_by = reader.next_int()
    rank = reader.next_int()
    expertise_gain = reader.next_str()
    health = reader.next_int()
    cost = reader.next_ints(NUM_MOLECULE_TYPES)
    try:
        return Sample.from_judge(sample_id, carried_by, rank, expertise_gain, health, cost)
    except ValueError as e:
        raise ProtocolError(f"Invalid sample {sample_id}: {e}") from e


def read_turn(reader: TokenReader, turn: int) -> GameState:
    """
    Read one turn block and build the observed game state.

    Args:
        reader: Token reader on the judge input
        turn: Number of the turn being read (0-based)

    Returns:
        The observed game state
    """
    robots = [read_robot(reader, robot_id) for robot_id in range(NUM_ROBOTS)]
    available = dict(zip(MOLECULES_ORDER, reader.next_ints(NUM_MOLECULE_TYPES)))

    sample_count = reader.next_int()
    if sample_count < 0:
        raise ProtocolError(f"Invalid sample count: {sample_count}")
    samples = [read_sample(reader) for _ in range(sample_count)]

    for sample in samples:
        logger.debug("%s", sample)

    return GameState(robots=robots, samples=samples, available=available, turn=turn)


def format_action(action: SearchAction) -> str:
    """Get the command line the judge expects for an action."""
    return action.description
