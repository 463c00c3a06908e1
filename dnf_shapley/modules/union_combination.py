# =============================================================================
# FILE: dnf_shapley/modules/union_combination.py
"""
Union-combination enumeration

Walks the subset tree of an ordered list: every node is extended only by
items with a larger index, so each non-empty subset is visited exactly once.
``extend`` may return None to prune a node together with its whole subtree.
"""
from dataclasses import dataclass
from typing import Callable, FrozenSet, Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar

from .dnf import Dnf

T = TypeVar('T')


class UnionCombination(Generic[T]):
    """
    Lazy, re-iterable enumeration of growing unions

    Parameters:
    -----------
    n : int
        Number of ordered items
    init : Callable[[int], T]
        Builds the node holding item i alone
    extend : Callable[[T, int], Optional[T]]
        Adds item i to a node; None prunes the resulting subtree
    """

    def __init__(
        self,
        n: int,
        init: Callable[[int], T],
        extend: Callable[[T, int], Optional[T]]
    ):
        self.n = n
        self._init = init
        self._extend = extend

    def __iter__(self) -> Iterator[T]:
        stack: List[Tuple[T, int]] = [(self._init(i), i) for i in reversed(range(self.n))]
        while stack:
            node, last = stack.pop()
            yield node
            for i in range(self.n - 1, last, -1):
                child = self._extend(node, i)
                if child is not None:
                    stack.append((child, i))


@dataclass(frozen=True)
class ExpUnion:
    """Union of ``num_of_imp`` implicants"""
    input_set: FrozenSet[Hashable]
    num_of_imp: int


def exp_to_unions(exp: Dnf) -> UnionCombination[ExpUnion]:
    """
    Enumerate the implicant unions of a formula

    Once a union covers every variable of the formula, adding any of the
    later implicants leaves it unchanged, so the node and its descendants
    carry alternating signs over the same set and cancel out. Such nodes are
    pruned unless no implicant follows them.
    """
    var_len = len(exp.all_variables())
    imp_list = exp.implicants()
    last = len(imp_list) - 1

    def init(i: int) -> ExpUnion:
        return ExpUnion(input_set=imp_list[i], num_of_imp=1)

    def extend(old: ExpUnion, i: int) -> Optional[ExpUnion]:
        new_set = old.input_set | imp_list[i]
        if len(new_set) == var_len and i != last:
            return None
        return ExpUnion(input_set=new_set, num_of_imp=old.num_of_imp + 1)

    return UnionCombination(len(imp_list), init, extend)
