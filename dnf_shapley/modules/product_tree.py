# =============================================================================
# FILE: dnf_shapley/modules/product_tree.py
"""
Partial-product engine

Given values v₀..vₙ₋₁ and an associative, commutative operator, computes the
full combination and, for every index i, the combination of all values except
vᵢ. A balanced reduction tree is built bottom-up and the exclusive products
are pushed down top-down, so both passes use a linear number of operator
calls instead of the quadratic naive approach.
"""
from typing import Callable, Generic, List, Sequence, TypeVar

T = TypeVar('T')


class ProductTree(Generic[T]):
    """
    Balanced reduction tree over ``values``

    Examples:
    ---------
    >>> import operator
    >>> tree = ProductTree([2, 3, 5, 7], operator.mul, 1)
    >>> tree.root()
    210
    >>> tree.all_products()
    [105, 70, 42, 30]
    """

    def __init__(self, values: Sequence[T], op: Callable[[T, T], T], identity: T):
        self.op = op
        self.identity = identity
        self.levels: List[List[T]] = [list(values)]
        while len(self.levels[-1]) > 1:
            prev = self.levels[-1]
            self.levels.append([
                op(prev[i], prev[i + 1]) if i + 1 < len(prev) else prev[i]
                for i in range(0, len(prev), 2)
            ])

    def __len__(self) -> int:
        return len(self.levels[0])

    def root(self) -> T:
        """Combination of every value (identity for no values)"""
        top = self.levels[-1]
        return top[0] if top else self.identity

    def all_products(self) -> List[T]:
        """For every index, the combination of all other values"""
        if not self.levels[0]:
            return []
        exclusive = [self.identity]
        for level in reversed(self.levels[:-1]):
            below = []
            for idx in range(len(level)):
                parent = exclusive[idx // 2]
                sibling = idx ^ 1
                below.append(self.op(parent, level[sibling]) if sibling < len(level) else parent)
            exclusive = below
        return exclusive
