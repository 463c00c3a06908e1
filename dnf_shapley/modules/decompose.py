# =============================================================================
# FILE: dnf_shapley/modules/decompose.py
"""
Structural decomposition of monotone DNF formulas

Splits a formula into independent blocks (pairwise disjoint owner sets):

    - Or      : implicants fall apart into groups sharing no variable
    - And     : the variables split into blocks whose projections multiply
                back to the formula (every implicant = one part per block)
    - Hybrid  : the formula is H(f₀, ..., fₙ₋₁) where every fₖ is a module
                (a sub-formula over its own owners) and H is a DNF over the
                module indices
    - Irreducible : none of the above applies

Modules are found by collapsing interchangeable variables until a fixpoint:
variables occurring in exactly the same implicants form an AND-module,
variables with exactly the same context (implicant minus the variable) form
an OR-module. Collapsed variables are treated as a single variable by the
next round.

Priority: HIGH | Status: Production-Ready
Version: 1.0.0
"""
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, Hashable, Iterable, List, Sequence, Tuple, Union
import logging

from .dnf import Dnf, Implicant

logger = logging.getLogger(__name__)


# =============================================================================
# DECOMPOSITION NODES
# =============================================================================

@dataclass(frozen=True)
class Var:
    owner: Hashable

    def expand(self) -> Dnf:
        return Dnf([[self.owner]])

    def variables(self) -> FrozenSet[Hashable]:
        return frozenset([self.owner])


@dataclass(frozen=True)
class And:
    children: Tuple['RecursiveDecompose', ...]

    def expand(self) -> Dnf:
        implicants = [frozenset()]
        for child in self.children:
            child_implicants = child.expand().implicants()
            implicants = [
                left | right
                for left in implicants
                for right in child_implicants
            ]
        return Dnf(implicants)

    def variables(self) -> FrozenSet[Hashable]:
        return frozenset().union(*(c.variables() for c in self.children))


@dataclass(frozen=True)
class Or:
    children: Tuple['RecursiveDecompose', ...]

    def expand(self) -> Dnf:
        return Dnf(
            implicant
            for child in self.children
            for implicant in child.expand().implicants()
        )

    def variables(self) -> FrozenSet[Hashable]:
        return frozenset().union(*(c.variables() for c in self.children))


@dataclass(frozen=True)
class Hybrid:
    """``hybrid_exp`` is a DNF over indices into ``sub_exps``"""
    hybrid_exp: Dnf
    sub_exps: Tuple['RecursiveDecompose', ...]

    def expand(self) -> Dnf:
        expanded = [sub.expand() for sub in self.sub_exps]
        implicants = []
        for index_set in self.hybrid_exp.implicants():
            combined = [frozenset()]
            for k in sorted(index_set):
                combined = [
                    left | right
                    for left in combined
                    for right in expanded[k].implicants()
                ]
            implicants.extend(combined)
        return Dnf(implicants)

    def variables(self) -> FrozenSet[Hashable]:
        return frozenset().union(*(s.variables() for s in self.sub_exps))


@dataclass(frozen=True)
class Irreducible:
    exp: Dnf

    def expand(self) -> Dnf:
        return self.exp

    def variables(self) -> FrozenSet[Hashable]:
        return self.exp.all_variables()


RecursiveDecompose = Union[Var, And, Or, Hybrid, Irreducible]


# =============================================================================
# DECOMPOSITION
# =============================================================================

def recursive_decompose(dnf: Dnf, owner_set: Iterable[Hashable]) -> RecursiveDecompose:
    """
    Decompose ``dnf`` recursively into independent blocks

    Parameters:
    -----------
    dnf : Dnf
        Formula to decompose
    owner_set : iterable
        Owners of the game; every variable of ``dnf`` must be one of them

    Returns:
    --------
    RecursiveDecompose : root of the decomposition

    Raises:
    -------
    ValueError : If the formula is constant or mentions unknown owners
    """
    unknown = dnf.all_variables() - frozenset(owner_set)
    if unknown:
        raise ValueError(f"Formula references owners {sorted(unknown)} missing from the owner set")
    if not dnf.all_variables():
        raise ValueError(f"Cannot decompose constant formula {dnf!r}")

    return _decompose(dnf)


def _decompose(dnf: Dnf) -> RecursiveDecompose:
    implicants = dnf.implicants()
    if len(implicants) == 1 and len(implicants[0]) == 1:
        return Var(next(iter(implicants[0])))

    components = _disjunctive_components(dnf)
    if len(components) > 1:
        return Or(tuple(_decompose(c) for c in components))

    factors = _conjunctive_factors(dnf)
    if len(factors) > 1:
        return And(tuple(_decompose(f) for f in factors))

    modules = _find_modules(dnf)
    if len(modules) > 1 and any(len(m) > 1 for m in modules):
        hybrid_exp = Dnf(
            [k for k, module in enumerate(modules) if not implicant.isdisjoint(module)]
            for implicant in implicants
        )
        sub_exps = tuple(_decompose(_project(implicants, m)) for m in modules)
        logger.debug(f"Hybrid split of {dnf!r} into {len(modules)} modules: {hybrid_exp!r}")
        return Hybrid(hybrid_exp, sub_exps)

    return Irreducible(dnf)


def _project(implicants: Iterable[Implicant], block: FrozenSet[Hashable]) -> Dnf:
    return Dnf(imp & block for imp in implicants if not imp.isdisjoint(block))


class _DisjointSets:
    """Union-find over hashable items, remembering first-seen order"""

    def __init__(self, items: Iterable[Hashable] = ()):
        self.parent: Dict[Hashable, Hashable] = {}
        for item in items:
            self.add(item)

    def add(self, item: Hashable) -> None:
        self.parent.setdefault(item, item)

    def find(self, item: Hashable) -> Hashable:
        root = item
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[item] != root:
            self.parent[item], item = root, self.parent[item]
        return root

    def union(self, a: Hashable, b: Hashable) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a != root_b:
            self.parent[root_b] = root_a

    def groups(self) -> List[List[Hashable]]:
        grouped: Dict[Hashable, List[Hashable]] = {}
        for item in self.parent:
            grouped.setdefault(self.find(item), []).append(item)
        return list(grouped.values())


def _disjunctive_components(dnf: Dnf) -> List[Dnf]:
    """Groups of implicants connected through shared variables"""
    sets = _DisjointSets()
    for implicant in dnf.implicants():
        members = sorted(implicant)
        for v in members:
            sets.add(v)
        for v in members[1:]:
            sets.union(members[0], v)

    grouped: Dict[Hashable, List[Implicant]] = {}
    for implicant in dnf.implicants():
        grouped.setdefault(sets.find(min(implicant)), []).append(implicant)
    return [Dnf(group) for group in grouped.values()]


def _splits(family: Sequence[Implicant], block: FrozenSet[Hashable]) -> bool:
    """Whether ``family`` is exactly {l ∪ r} over its projections on block / rest"""
    left = set()
    right = set()
    for implicant in family:
        inside = implicant & block
        outside = implicant - block
        if not inside or not outside:
            return False
        left.add(inside)
        right.add(outside)
    return len(left) * len(right) == len(family)


def _conjunctive_factors(dnf: Dnf) -> List[Dnf]:
    """
    Split the variables into independently conjoined blocks

    Variables from different factors always share some implicant, so
    variables that never meet must sit in the same factor. Those groups are
    peeled off one by one while they split the remaining formula; whatever
    cannot be peeled stays together as a single factor.
    """
    variables = sorted(dnf.all_variables())
    family = list(dnf.implicants())

    met: Dict[Hashable, set] = defaultdict(set)
    for implicant in family:
        for v in implicant:
            met[v].update(implicant)

    sets = _DisjointSets(variables)
    for i, v in enumerate(variables):
        for w in variables[i + 1:]:
            if w not in met[v]:
                sets.union(v, w)
    blocks = [frozenset(group) for group in sets.groups()]

    factors = []
    while len(blocks) > 1:
        for block in blocks:
            if _splits(family, block):
                factors.append(Dnf(imp & block for imp in family))
                family = list({imp - block for imp in family})
                blocks.remove(block)
                break
        else:
            break

    factors.append(Dnf(family))
    return factors


def _find_modules(dnf: Dnf) -> List[FrozenSet[Hashable]]:
    """Maximal groups of variables collapsible into a single variable"""
    members: Dict[int, FrozenSet[Hashable]] = {}
    label: Dict[Hashable, int] = {}
    for idx, v in enumerate(sorted(dnf.all_variables())):
        members[idx] = frozenset([v])
        label[v] = idx
    family = {frozenset(label[v] for v in imp) for imp in dnf.implicants()}
    next_id = len(members)

    changed = True
    while changed:
        changed = False
        for signature in (_occurrence_signature, _context_signature):
            groups: Dict[object, List[int]] = defaultdict(list)
            for var, sig in signature(family).items():
                groups[sig].append(var)

            twins = [sorted(group) for group in groups.values() if len(group) > 1]
            if not twins:
                continue

            rename: Dict[int, int] = {}
            for group in twins:
                members[next_id] = frozenset().union(*(members.pop(g) for g in group))
                for g in group:
                    rename[g] = next_id
                next_id += 1
            family = {frozenset(rename.get(v, v) for v in imp) for imp in family}
            changed = True
            break

    return sorted(members.values(), key=lambda m: min(m))


def _occurrence_signature(family: Iterable[FrozenSet[int]]) -> Dict[int, FrozenSet[FrozenSet[int]]]:
    occurrences: Dict[int, set] = defaultdict(set)
    for implicant in family:
        for v in implicant:
            occurrences[v].add(implicant)
    return {v: frozenset(imps) for v, imps in occurrences.items()}


def _context_signature(family: Iterable[FrozenSet[int]]) -> Dict[int, FrozenSet[FrozenSet[int]]]:
    contexts: Dict[int, set] = defaultdict(set)
    for implicant in family:
        for v in implicant:
            contexts[v].add(implicant - {v})
    return {v: frozenset(ctx) for v, ctx in contexts.items()}
