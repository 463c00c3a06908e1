# =============================================================================
# FILE: dnf_shapley/modules/coeffs.py
"""
Interaction coefficients - the value algebra of the decomposition engine

An ``IECoeffs`` value is a sparse polynomial over interaction-group size:
``{size: weight}`` stands for Σ weight·x^size, where every term aggregates the
Harsanyi dividends of the coalitions of that size. For a monotone simple game
with implicants I₁..Iₘ the dividends follow from inclusion-exclusion:

    v(S) = Σ_{∅≠J⊆{1..m}} (-1)^{|J|+1} [∪_{j∈J} I_j ⊆ S]

so a sub-formula is summarised by Σ_J (-1)^{|J|+1} x^{|∪J|}.

Combining independent blocks (pairwise disjoint owner sets):
    - conjunction  f∧g:  P_f · P_g              (sizes add)
    - disjunction  f∨g:  P_f + P_g - P_f · P_g

Shapley share of an owner whose dividend polynomial is Σ wₖxᵏ (the owner
itself counted in k) is Σ wₖ / k, since each dividend is split equally among
the members of its coalition.

Weights are exact Python integers; the share is accumulated with
``fractions.Fraction`` and only converted to float at the end.
"""
from collections.abc import Mapping
from fractions import Fraction
from functools import lru_cache
from typing import Dict, FrozenSet, Iterable, Iterator, List, Tuple, Union

from .dnf import Dnf
from .union_combination import ExpUnion, exp_to_unions

Terms = Union[Mapping, Iterable[Tuple[int, int]]]


class IECoeffs:
    """Sparse integer polynomial keyed by interaction-group size"""

    __slots__ = ('_terms',)

    def __init__(self, terms: Terms = ()):
        items = terms.items() if isinstance(terms, Mapping) else terms
        acc: Dict[int, int] = {}
        for size, weight in items:
            if size < 0:
                raise ValueError(f"Group size must be non-negative, got {size}")
            acc[size] = acc.get(size, 0) + weight
        self._terms = {size: weight for size, weight in acc.items() if weight != 0}

    def items(self) -> Iterator[Tuple[int, int]]:
        return iter(sorted(self._terms.items()))

    def to_sv(self) -> float:
        """
        Evaluate to a scalar Shapley share: Σ weight / size

        Raises ZeroDivisionError when a size-0 term carries weight, which
        only happens if the polynomial was not multiplied by the owner's own
        unit term first.
        """
        total = Fraction(0)
        for size, weight in self._terms.items():
            total += Fraction(weight, size)
        return float(total)

    def __add__(self, other: 'IECoeffs') -> 'IECoeffs':
        merged = dict(self._terms)
        for size, weight in other._terms.items():
            merged[size] = merged.get(size, 0) + weight
        return IECoeffs(merged)

    def __radd__(self, other) -> 'IECoeffs':
        # lets the builtin sum() start from 0
        if other == 0:
            return self
        return NotImplemented

    def __neg__(self) -> 'IECoeffs':
        return IECoeffs({size: -weight for size, weight in self._terms.items()})

    def __sub__(self, other: 'IECoeffs') -> 'IECoeffs':
        return self + (-other)

    def __mul__(self, other: 'IECoeffs') -> 'IECoeffs':
        product: Dict[int, int] = {}
        for size_a, weight_a in self._terms.items():
            for size_b, weight_b in other._terms.items():
                size = size_a + size_b
                product[size] = product.get(size, 0) + weight_a * weight_b
        return IECoeffs(product)

    def __bool__(self) -> bool:
        return bool(self._terms)

    def __eq__(self, other) -> bool:
        if not isinstance(other, IECoeffs):
            return NotImplemented
        return self._terms == other._terms

    __hash__ = None

    def __getstate__(self):
        return self._terms

    def __setstate__(self, state):
        self._terms = state

    def __repr__(self) -> str:
        return f"IECoeffs({dict(self.items())})"


UNIT = IECoeffs({1: 1})
VERTICAL_IDENTITY = IECoeffs({0: 1})
HORIZONTAL_IDENTITY = IECoeffs()


def vertical_op(a: IECoeffs, b: IECoeffs) -> IECoeffs:
    """Conjunction of independent blocks"""
    return a * b


def horizontal_op(a: IECoeffs, b: IECoeffs) -> IECoeffs:
    """Disjunction of independent blocks"""
    return a + b - a * b


def union_sign(num_of_imp: int) -> int:
    """Inclusion-exclusion sign of a union formed from ``num_of_imp`` implicants"""
    return 1 if num_of_imp % 2 == 1 else -1


class HybridCoeffs:
    """
    Coefficient structure of a Hybrid node

    The node's formula is H(f₀, ..., fₙ₋₁) where H is a DNF over child indices
    and the children have pairwise disjoint owners. Any union U of
    H-implicants contributes the conjunction of the children in U, whose
    polynomial is Π_{k∈U} P_k; those products are memoised per index set.
    """

    def __init__(self, children_coeffs: Iterable[IECoeffs]):
        self.children_coeffs: List[IECoeffs] = list(children_coeffs)
        # per-instance cache: products depend on this node's children
        self._cached_product = lru_cache(maxsize=None)(self._product)

    def product(self, indices: Iterable[int]) -> IECoeffs:
        return self._cached_product(frozenset(indices))

    def _product(self, key: FrozenSet[int]) -> IECoeffs:
        if not key:
            return VERTICAL_IDENTITY
        largest = max(key)
        return self._cached_product(key - {largest}) * self.children_coeffs[largest]

    def exp_coeffs(self, hybrid_exp: Dnf) -> IECoeffs:
        """Polynomial of the whole hybrid expression"""
        return self.exp_unions_coeffs(exp_to_unions(hybrid_exp))

    def exp_unions_coeffs(self, exp_unions: Iterable[ExpUnion]) -> IECoeffs:
        total = IECoeffs()
        for union in exp_unions:
            term = self.product(union.input_set)
            total = total + term if union_sign(union.num_of_imp) > 0 else total - term
        return total

    def exp_unions_interaction(
        self,
        exp_unions1: Iterable[ExpUnion],
        exp_unions2: Iterable[ExpUnion]
    ) -> IECoeffs:
        """Polynomial of the conjunction of two index expressions"""
        inner = list(exp_unions2)
        total = IECoeffs()
        for u1 in exp_unions1:
            for u2 in inner:
                term = self.product(u1.input_set | u2.input_set)
                if (u1.num_of_imp + u2.num_of_imp) % 2 == 0:
                    total = total + term
                else:
                    total = total - term
        return total
