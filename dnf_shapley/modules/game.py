# =============================================================================
# FILE: dnf_shapley/modules/game.py
"""
Game model - monotone simple games defined by a DNF winning rule
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Hashable, Iterable, Optional
import logging

from .dnf import Dnf

logger = logging.getLogger(__name__)

OwnerId = Hashable
ShapleyValues = Dict[OwnerId, float]


@dataclass(frozen=True)
class Game:
    """
    Monotone simple game: v(S) = 1 iff S contains an implicant of ``dnf``

    Attributes:
    -----------
    dnf : Dnf
        Winning rule
    owners : FrozenSet[OwnerId]
        Players; owners that appear in no implicant are dummies
    """
    dnf: Dnf
    owners: FrozenSet[OwnerId]

    def __post_init__(self):
        object.__setattr__(self, 'owners', frozenset(self.owners))

        if not isinstance(self.dnf, Dnf):
            raise ValueError(f"Game formula must be a Dnf, got {type(self.dnf).__name__}")

        if not self.dnf.all_variables():
            raise ValueError(
                f"Game formula must mention at least one owner, got {self.dnf!r}"
            )

        unknown = self.dnf.all_variables() - self.owners
        if unknown:
            raise ValueError(
                f"Malformed game: formula references owners {sorted(unknown)} "
                f"missing from the owner set"
            )

    @classmethod
    def from_implicants(
        cls,
        implicants: Iterable[Iterable[OwnerId]],
        owners: Optional[Iterable[OwnerId]] = None
    ) -> 'Game':
        """Build a game; owners default to the variables of the formula"""
        dnf = Dnf(implicants)
        return cls(dnf=dnf, owners=dnf.all_variables() if owners is None else owners)

    @property
    def n_owners(self) -> int:
        return len(self.owners)

    def payoff_function(self, coalition: Iterable[OwnerId]) -> float:
        """Coalition value v(S) ∈ {0, 1}"""
        return 1.0 if self.dnf.evaluate(coalition) else 0.0

    def get_grand_coalition_value(self) -> float:
        return self.payoff_function(self.owners)


def merge_disjoint(left: ShapleyValues, right: ShapleyValues) -> ShapleyValues:
    """
    Union of two share maps whose owner sets must not overlap

    Sibling blocks of a decomposition never share owners; an overlap means
    the decomposition was malformed and a share would be silently lost.
    """
    overlap = left.keys() & right.keys()
    if overlap:
        raise RuntimeError(
            f"Sibling blocks share owners {sorted(overlap)}; "
            f"decomposition is not disjoint"
        )
    merged = dict(left)
    merged.update(right)
    return merged
