# =============================================================================
# FILE: dnf_shapley/modules/dnf.py
"""
Monotone DNF formulas over owners

A formula is a disjunction of implicants; each implicant is a conjunction of
variables (owners). A coalition wins iff it contains at least one implicant.

Implicants are stored absorption-minimal (no implicant is a superset of
another) and in a deterministic order: by size, then by sorted members.
The constant TRUE is the formula with a single empty implicant, FALSE is the
formula with no implicants.

Priority: CRITICAL | Status: Production-Ready
Version: 1.0.0
"""
from typing import Callable, FrozenSet, Hashable, Iterable, Iterator, Tuple
import logging

logger = logging.getLogger(__name__)

Variable = Hashable
Implicant = FrozenSet[Variable]


def _implicant_key(implicant: Implicant) -> Tuple[int, tuple]:
    return len(implicant), tuple(sorted(implicant))


def _absorb(implicants: Iterable[Implicant]) -> Tuple[Implicant, ...]:
    """Drop every implicant that contains another one"""
    kept = []
    for implicant in sorted(set(implicants), key=_implicant_key):
        if not any(other <= implicant for other in kept):
            kept.append(implicant)
    return tuple(kept)


class Dnf:
    """
    Immutable monotone DNF

    Parameters:
    -----------
    implicants : iterable of iterables
        Each inner iterable lists the variables of one implicant

    Examples:
    ---------
    >>> exp = Dnf([[1, 2, 4], [1, 2, 5], [4, 5]])
    >>> exp
    Dnf(4 5 + 1 2 4 + 1 2 5)
    >>> exp.partial_eval({4})
    Dnf(5 + 1 2)
    """

    __slots__ = ('_implicants', '_variables')

    def __init__(self, implicants: Iterable[Iterable[Variable]] = ()):
        self._implicants = _absorb(frozenset(imp) for imp in implicants)
        self._variables = frozenset().union(*self._implicants)

    @classmethod
    def true(cls) -> 'Dnf':
        return cls([()])

    @classmethod
    def false(cls) -> 'Dnf':
        return cls()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def implicants(self) -> Tuple[Implicant, ...]:
        """Ordered implicants (smallest first)"""
        return self._implicants

    def all_variables(self) -> FrozenSet[Variable]:
        return self._variables

    def is_true(self) -> bool:
        return len(self._implicants) == 1 and not self._implicants[0]

    def is_false(self) -> bool:
        return not self._implicants

    def evaluate(self, coalition: Iterable[Variable]) -> bool:
        """Whether the coalition contains at least one implicant"""
        coalition = frozenset(coalition)
        return any(implicant <= coalition for implicant in self._implicants)

    # ------------------------------------------------------------------
    # Set algebra
    # ------------------------------------------------------------------

    def partial_eval(self, variables: Iterable[Variable], value: bool = True) -> 'Dnf':
        """
        Fix ``variables`` to ``value`` and simplify

        Fixing to True removes the variables from every implicant; an
        implicant that becomes empty turns the formula into TRUE. Fixing to
        False drops every implicant mentioning one of the variables.
        """
        variables = frozenset(variables)
        if value:
            return Dnf(implicant - variables for implicant in self._implicants)
        return Dnf(
            implicant for implicant in self._implicants
            if implicant.isdisjoint(variables)
        )

    def partial_exp_complement(self, variables: Iterable[Variable]) -> 'Dnf':
        """Formula restricted to coalitions that do not contain ``variables``"""
        return self.partial_eval(variables, value=False)

    def map_variables(self, fn: Callable[[Variable], Variable]) -> 'Dnf':
        return Dnf((fn(v) for v in implicant) for implicant in self._implicants)

    # ------------------------------------------------------------------
    # Dunder protocol
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Implicant]:
        return iter(self._implicants)

    def __len__(self) -> int:
        return len(self._implicants)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Dnf):
            return NotImplemented
        return self._implicants == other._implicants

    def __hash__(self) -> int:
        return hash(self._implicants)

    def __getstate__(self):
        return self._implicants

    def __setstate__(self, state):
        self._implicants = state
        self._variables = frozenset().union(*state)

    def __repr__(self) -> str:
        if self.is_false():
            return "Dnf(FALSE)"
        if self.is_true():
            return "Dnf(TRUE)"
        body = " + ".join(
            " ".join(str(v) for v in sorted(implicant))
            for implicant in self._implicants
        )
        return f"Dnf({body})"
