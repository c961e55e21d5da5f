"""
Robot representation for the Code4Life game.

This module defines the Robot class which tracks a robot's state including
its target module, score, stored molecules and expertise, and provides methods
for checking whether a sample can be turned into medicine.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, Tuple

from code4life_ai.core.constants import (
    Molecule, MOLECULES_ORDER, START_POS, MAX_MOLECULES_CARRIED
)
from code4life_ai.core.samples import Sample


@dataclass
class Robot:
    """
    Represents a robot in the Code4Life game.

    Samples are not stored on the robot: the game state owns every sample and
    records who carries it.
    """
    id: int  # Robot ID (0 = us, 1 = opponent)
    target: str = START_POS  # Module the robot is at or heading to
    score: int = 0  # Health points scored so far
    storage: Dict[Molecule, int] = field(default_factory=dict)  # Molecules carried
    expertise: Dict[Molecule, int] = field(default_factory=dict)  # Permanent cost reductions

    def __post_init__(self):
        """Initialize empty molecule counts."""
        for molecule in MOLECULES_ORDER:
            self.storage.setdefault(molecule, 0)
            self.expertise.setdefault(molecule, 0)

    @classmethod
    def from_counts(
        cls,
        robot_id: int,
        target: str,
        score: int,
        storage: Iterable[int],
        expertise: Iterable[int]
    ) -> 'Robot':
        """
        Create a robot from per-molecule counts listed in MOLECULES_ORDER.

        Args:
            robot_id: ID of the robot
            target: Module the robot is at
            score: Current score
            storage: Carried molecule counts
            expertise: Expertise counts

        Returns:
            Robot object
        """
        return cls(
            id=robot_id,
            target=target,
            score=score,
            storage=dict(zip(MOLECULES_ORDER, storage)),
            expertise=dict(zip(MOLECULES_ORDER, expertise))
        )

    def molecule_count(self) -> int:
        """Total number of molecules carried."""
        return sum(self.storage.values())

    def can_carry_molecule(self) -> bool:
        """Whether the robot has room for one more molecule."""
        return self.molecule_count() < MAX_MOLECULES_CARRIED

    def effective_cost(self, sample: Sample) -> Dict[Molecule, int]:
        """
        Calculate the molecules needed to produce a sample after expertise.

        Args:
            sample: A sample whose cost is known

        Returns:
            Dictionary mapping molecules to the number that must be paid
        """
        return {
            molecule: max(0, sample.cost_of(molecule) - self.expertise.get(molecule, 0))
            for molecule in MOLECULES_ORDER
        }

    def can_produce(self, sample: Sample) -> bool:
        """
        Check if the robot holds enough molecules to produce a sample.

        Args:
            sample: The sample to check

        Returns:
            True if the sample is diagnosed, its cost is known and the
            stored molecules cover the effective cost
        """
        if not sample.diagnosed or not sample.cost_known:
            return False

        return all(
            self.storage.get(molecule, 0) >= needed
            for molecule, needed in self.effective_cost(sample).items()
        )

    def state_key(self) -> Tuple:
        """Hashable key covering every field of the robot."""
        return (
            self.id,
            self.target,
            self.score,
            tuple(self.storage[molecule] for molecule in MOLECULES_ORDER),
            tuple(self.expertise[molecule] for molecule in MOLECULES_ORDER),
        )

    def __str__(self) -> str:
        """String representation of the robot."""
        storage_str = " ".join(f"{m.value}{self.storage[m]}" for m in MOLECULES_ORDER)
        expertise_str = " ".join(f"{m.value}{self.expertise[m]}" for m in MOLECULES_ORDER)
        return (f"Robot({self.id} at {self.target}, score={self.score}, "
                f"storage=[{storage_str}], expertise=[{expertise_str}])")
