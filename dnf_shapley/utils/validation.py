"""
Validation utilities for DNF games and their Shapley values
"""
import numpy as np
from itertools import combinations
from typing import Dict, Any, Optional
from dataclasses import dataclass
import logging

from ..modules.game import Game, ShapleyValues

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check"""
    is_valid: bool
    error: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class GameValidator:
    """
    Validates that a game is a well-formed monotone simple game
    """

    def __init__(self, tolerance: float = 1e-9):
        self.tolerance = tolerance

    def validate_well_formed(self, game: Game) -> ValidationResult:
        """
        Every formula variable must be an owner and v(N) must be 1

        Args:
            game: Game to check

        Returns:
            ValidationResult with validation status
        """
        unknown = game.dnf.all_variables() - game.owners
        if unknown:
            return ValidationResult(
                is_valid=False,
                error=f"Formula references unknown owners {sorted(unknown)}"
            )

        if game.get_grand_coalition_value() != 1.0:
            return ValidationResult(
                is_valid=False,
                error="Grand coalition does not win"
            )

        return ValidationResult(is_valid=True)

    def validate_monotonicity(
        self,
        game: Game,
        n_samples: int = 1000,
        seed: Optional[int] = None
    ) -> ValidationResult:
        """
        Validate monotonicity: v(S) ≤ v(S ∪ {i})

        Exhaustive for up to 10 owners, sampled beyond that.

        Args:
            game: Game to check
            n_samples: Number of random coalitions for large games
            seed: Seed of the sampler

        Returns:
            ValidationResult with validation status
        """
        owners = sorted(game.owners)
        n = len(owners)

        if n <= 10:
            coalitions = (
                frozenset(c) for size in range(n + 1) for c in combinations(owners, size)
            )
        else:
            rng = np.random.default_rng(seed)
            coalitions = (
                frozenset(o for o, keep in zip(owners, rng.random(n) < 0.5) if keep)
                for _ in range(n_samples)
            )

        for S in coalitions:
            if not game.payoff_function(S):
                continue
            for owner in owners:
                if owner not in S and not game.payoff_function(S | {owner}):
                    return ValidationResult(
                        is_valid=False,
                        error=f"Monotonicity violation: v({set(S)})=1 > v({set(S | {owner})})=0"
                    )

        return ValidationResult(is_valid=True)


class ShapleyValidator:
    """
    Validates Shapley value properties of a share map
    """

    def __init__(self, tolerance: float = 1e-9):
        self.tolerance = tolerance

    def validate_efficiency(self, values: ShapleyValues, game: Game) -> ValidationResult:
        """
        Validate efficiency: shares sum to v(N) = 1

        Args:
            values: Share per owner
            game: Game the shares belong to

        Returns:
            ValidationResult with validation status
        """
        grand_coalition_value = game.get_grand_coalition_value()
        allocation_sum = float(np.sum(list(values.values())))

        if abs(allocation_sum - grand_coalition_value) > self.tolerance:
            return ValidationResult(
                is_valid=False,
                error=f"Efficiency violation: sum(φ)={allocation_sum:.9f} != v(N)={grand_coalition_value:.9f}",
                details={
                    'allocation_sum': allocation_sum,
                    'grand_coalition_value': grand_coalition_value,
                    'difference': allocation_sum - grand_coalition_value
                }
            )

        return ValidationResult(is_valid=True)

    def validate_symmetry(self, values: ShapleyValues, game: Game) -> ValidationResult:
        """
        Validate symmetry: owners whose swap leaves the formula unchanged
        receive identical shares

        Args:
            values: Share per owner
            game: Game the shares belong to

        Returns:
            ValidationResult with validation status
        """
        owners = sorted(game.dnf.all_variables())

        for i, a in enumerate(owners):
            for b in owners[i + 1:]:
                swap = {a: b, b: a}
                swapped = game.dnf.map_variables(lambda v: swap.get(v, v))
                if swapped != game.dnf:
                    continue
                if abs(values[a] - values[b]) > self.tolerance:
                    return ValidationResult(
                        is_valid=False,
                        error=f"Symmetry violation: owners {a} and {b} are interchangeable "
                              f"but receive {values[a]:.9f} vs {values[b]:.9f}"
                    )

        return ValidationResult(is_valid=True)

    def validate_null_player(self, values: ShapleyValues, game: Game) -> ValidationResult:
        """
        Validate dummy property: owners outside every implicant get 0

        Args:
            values: Share per owner
            game: Game the shares belong to

        Returns:
            ValidationResult with validation status
        """
        for owner in game.owners - game.dnf.all_variables():
            share = values.get(owner, 0.0)
            if abs(share) > self.tolerance:
                return ValidationResult(
                    is_valid=False,
                    error=f"Null player violation: owner {owner} is a dummy but gets {share:.9f}"
                )

        return ValidationResult(is_valid=True)

    def validate_agreement(self, values: ShapleyValues, reference: ShapleyValues) -> ValidationResult:
        """
        Two share maps agree on every owner

        Args:
            values: Shares to check
            reference: Reference shares

        Returns:
            ValidationResult with the largest deviation in details
        """
        if values.keys() != reference.keys():
            return ValidationResult(
                is_valid=False,
                error=f"Owner sets differ: {sorted(values.keys() ^ reference.keys())}"
            )

        deviations = {o: abs(values[o] - reference[o]) for o in reference}
        worst = max(deviations, key=deviations.get) if deviations else None
        max_deviation = deviations[worst] if worst is not None else 0.0
        details = {'max_deviation': max_deviation, 'worst_owner': worst}

        if max_deviation > self.tolerance:
            return ValidationResult(
                is_valid=False,
                error=f"Shares disagree on owner {worst} by {max_deviation:.3e}",
                details=details
            )

        return ValidationResult(is_valid=True, details=details)

    def validate_all(self, values: ShapleyValues, game: Game) -> Dict[str, ValidationResult]:
        """Run every axiom check"""
        results = {
            'efficiency': self.validate_efficiency(values, game),
            'symmetry': self.validate_symmetry(values, game),
            'null_player': self.validate_null_player(values, game),
        }
        for name, result in results.items():
            if not result.is_valid:
                logger.warning(f"{name}: {result.error}")
        return results
