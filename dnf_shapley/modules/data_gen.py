# =============================================================================
# FILE: dnf_shapley/modules/data_gen.py
"""
Synthetic Game Generator - random monotone simple games for benchmarks

Two families:
    - flat games: random implicants over a pool of owners
    - structured games: random blocks over disjoint owners combined by
      AND / OR / threshold expressions, so that every decomposition mode
      (vertical, horizontal, hybrid) shows up in the resulting formula

Priority: HIGH | Status: Production-Ready
Version: 1.0.0
"""
import numpy as np
from typing import List, Literal, Optional
import logging

from .decompose import And, Hybrid, Irreducible, Or
from .dnf import Dnf
from .game import Game

logger = logging.getLogger(__name__)

Combiner = Literal['and', 'or', 'threshold', 'random']


class DataGenerator:
    """Generates seeded random DNF games"""

    def __init__(self, seed: Optional[int] = None):
        self.rng = np.random.default_rng(seed)
        self.seed = seed

    def generate_game(
        self,
        n_owners: int,
        n_implicants: int,
        min_size: int = 1,
        max_size: Optional[int] = None,
        n_dummies: int = 0,
        first_owner: int = 0
    ) -> Game:
        """
        Random flat game

        Parameters:
        -----------
        n_owners : int
            Size of the owner pool implicants are drawn from
        n_implicants : int
            Number of implicants drawn (fewer survive absorption)
        min_size, max_size : int
            Implicant size bounds (max defaults to n_owners)
        n_dummies : int
            Extra owners that never appear in the formula
        first_owner : int
            Id of the first owner
        """
        if n_owners <= 0 or n_implicants <= 0:
            raise ValueError(
                f"n_owners and n_implicants must be positive, got {n_owners}, {n_implicants}"
            )
        max_size = n_owners if max_size is None else min(max_size, n_owners)
        if not 1 <= min_size <= max_size:
            raise ValueError(f"Invalid implicant size bounds: [{min_size}, {max_size}]")

        dnf = self._random_dnf(n_owners, n_implicants, min_size, max_size, first_owner)
        owners = list(range(first_owner, first_owner + n_owners + n_dummies))
        return Game(dnf=dnf, owners=owners)

    def generate_structured_game(
        self,
        n_blocks: int = 3,
        block_owners: int = 3,
        block_implicants: int = 2,
        combiner: Combiner = 'random',
        n_dummies: int = 0
    ) -> Game:
        """
        Random game composed of independent blocks

        Blocks are flat random formulas over disjoint owner ranges, combined
        by ``combiner``: 'and' (conjunction), 'or' (disjunction),
        'threshold' (any two blocks, a hybrid expression) or 'random'.
        """
        if n_blocks < 2:
            raise ValueError(f"n_blocks must be at least 2, got {n_blocks}")
        if combiner == 'random':
            combiner = str(self.rng.choice(['and', 'or', 'threshold']))

        blocks = []
        for b in range(n_blocks):
            block_dnf = self._random_dnf(
                block_owners, block_implicants, 1, block_owners, b * block_owners
            )
            blocks.append(Irreducible(block_dnf))

        if combiner == 'and':
            node = And(tuple(blocks))
        elif combiner == 'or':
            node = Or(tuple(blocks))
        elif combiner == 'threshold':
            pairs = [[i, j] for i in range(n_blocks) for j in range(i + 1, n_blocks)]
            node = Hybrid(Dnf(pairs), tuple(blocks))
        else:
            raise ValueError(
                f"Unknown combiner: '{combiner}'. Valid: and, or, threshold, random")

        dnf = node.expand()
        n_total = n_blocks * block_owners
        logger.debug(f"Structured game ({combiner}) with {len(dnf)} implicants")
        return Game(dnf=dnf, owners=list(range(n_total + n_dummies)))

    def _random_dnf(
        self,
        n_owners: int,
        n_implicants: int,
        min_size: int,
        max_size: int,
        first_owner: int
    ) -> Dnf:
        implicants: List[List[int]] = []
        for _ in range(n_implicants):
            size = int(self.rng.integers(min_size, max_size + 1))
            members = self.rng.choice(n_owners, size=size, replace=False) + first_owner
            implicants.append([int(m) for m in members])
        return Dnf(implicants)
