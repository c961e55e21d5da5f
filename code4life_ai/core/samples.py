"""
Samples for the Code4Life game.

This module defines the Sample data structure, the unit of work a robot carries
from the SAMPLES module through diagnosis to the LABORATORY, along with utility
functions for sample operations.
"""
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

from code4life_ai.core.constants import (
    Molecule, MOLECULES_ORDER, MOLECULE_INDEX, NUM_MOLECULE_TYPES, SAMPLE_RANKS,
    UNKNOWN_COST, CLOUD
)


@dataclass(frozen=True)
class Sample:
    """
    Represents a sample in Code4Life.

    Each sample has a rank, a health value scored when the medicine is produced,
    a molecule cost (unknown until diagnosed) and an expertise gain.
    """
    id: int  # Unique identifier; negative ids are placeholders created by the model
    carried_by: int  # Robot id, or CLOUD
    rank: int  # Sample rank (1, 2, or 3)
    expertise_gain: str  # Molecule letter, or "0" while undiagnosed
    health: int  # Health points scored on production
    cost: Tuple[int, ...]  # Molecule cost in MOLECULES_ORDER, UNKNOWN_COST if unknown
    diagnosed: bool = False

    def __post_init__(self):
        """Validate the sample after initialization."""
        if len(self.cost) != NUM_MOLECULE_TYPES:
            raise ValueError(
                f"Sample cost must have {NUM_MOLECULE_TYPES} entries, got {len(self.cost)}"
            )
        if self.rank not in SAMPLE_RANKS:
            raise ValueError(f"Invalid sample rank: {self.rank}")

    @classmethod
    def from_judge(
        cls,
        sample_id: int,
        carried_by: int,
        rank: int,
        expertise_gain: str,
        health: int,
        cost: Iterable[int]
    ) -> 'Sample':
        """
        Create a sample from the values sent by the judge.

        A sample counts as diagnosed once its full cost is known.
        """
        cost = tuple(cost)
        return cls(
            id=sample_id,
            carried_by=carried_by,
            rank=rank,
            expertise_gain=expertise_gain,
            health=health,
            cost=cost,
            diagnosed=all(c >= 0 for c in cost)
        )

    @classmethod
    def placeholder(cls, sample_id: int, carried_by: int, rank: int) -> 'Sample':
        """
        Create the not-yet-known sample resulting from a modeled collection.

        Its cost and health only become known once the judge reports it.
        """
        return cls(
            id=sample_id,
            carried_by=carried_by,
            rank=rank,
            expertise_gain="0",
            health=0,
            cost=(UNKNOWN_COST,) * NUM_MOLECULE_TYPES,
        )

    @property
    def cost_known(self) -> bool:
        """Whether every molecule cost of this sample is known."""
        return all(c >= 0 for c in self.cost)

    @property
    def expertise_molecule(self) -> Optional[Molecule]:
        """The molecule whose expertise is gained on production, if any."""
        for molecule in MOLECULES_ORDER:
            if molecule.value == self.expertise_gain:
                return molecule
        return None

    def cost_of(self, molecule: Molecule) -> int:
        """Get the cost of a single molecule type."""
        return self.cost[MOLECULE_INDEX[molecule]]

    def as_diagnosed(self) -> 'Sample':
        """Return a copy of this sample marked as diagnosed."""
        return replace(self, diagnosed=True)

    def __str__(self) -> str:
        """String representation of the sample."""
        cost_str = ", ".join(
            f"{count} {molecule.value}"
            for molecule, count in zip(MOLECULES_ORDER, self.cost) if count > 0
        )
        owner = "cloud" if self.carried_by == CLOUD else f"robot {self.carried_by}"
        return (f"Sample({self.id}, Rank: {self.rank}, Health: {self.health}, "
                f"Gain: {self.expertise_gain}, Cost: {cost_str or '?'}, {owner})")


def next_placeholder_id(samples: Iterable[Sample]) -> int:
    """
    Get an id for a new placeholder sample.

    Placeholders use negative ids so they never collide with judge ids.
    """
    return min([0] + [sample.id for sample in samples]) - 1


def filter_samples_by_owner(samples: Iterable[Sample], owner: int) -> List[Sample]:
    """
    Filter samples to those carried by a given owner.

    Args:
        samples: Samples to filter
        owner: Robot id, or CLOUD

    Returns:
        List of samples carried by the owner, in their original order
    """
    return [sample for sample in samples if sample.carried_by == owner]

