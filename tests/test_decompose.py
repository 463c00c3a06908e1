# =============================================================================
# FILE: tests/test_decompose.py
"""
Unit Tests for the structural decomposition
"""
import pytest

from dnf_shapley.modules.decompose import (
    And,
    Hybrid,
    Irreducible,
    Or,
    Var,
    recursive_decompose,
)
from dnf_shapley.modules.dnf import Dnf


def decompose(implicants):
    dnf = Dnf(implicants)
    return dnf, recursive_decompose(dnf, dnf.all_variables())


class TestRecursiveDecompose:
    """Test suite for recursive_decompose"""

    def test_single_owner(self):
        _, root = decompose([[1]])
        assert root == Var(1)

    def test_single_implicant_is_conjunction(self):
        _, root = decompose([[1, 2, 3]])
        assert isinstance(root, And)
        assert set(root.children) == {Var(1), Var(2), Var(3)}

    def test_disjoint_or(self):
        _, root = decompose([[1], [2], [3]])
        assert isinstance(root, Or)
        assert set(root.children) == {Var(1), Var(2), Var(3)}

    def test_or_of_and(self):
        _, root = decompose([[1, 2], [3]])
        assert isinstance(root, Or)
        assert And((Var(1), Var(2))) in root.children
        assert Var(3) in root.children

    def test_conjunctive_factor_with_nested_or(self):
        _, root = decompose([[1, 3, 6, 8], [3, 5, 6, 8], [3, 4, 6, 8, 9]])
        assert isinstance(root, And)
        owners = {c.owner for c in root.children if isinstance(c, Var)}
        assert owners == {3, 6, 8}
        nested = [c for c in root.children if not isinstance(c, Var)]
        assert len(nested) == 1
        assert isinstance(nested[0], Or)
        assert nested[0].variables() == frozenset({1, 4, 5, 9})

    def test_product_of_disjunctions(self):
        _, root = decompose([[1, 2, 5], [1, 2, 6], [1, 3, 5], [1, 3, 6], [4, 5], [4, 6]])
        assert isinstance(root, And)
        assert {c.variables() for c in root.children} == {
            frozenset({1, 2, 3, 4}), frozenset({5, 6})
        }

    def test_majority_is_irreducible(self):
        dnf, root = decompose([[1, 2], [1, 3], [2, 3]])
        assert root == Irreducible(dnf)

    def test_hybrid_over_modules(self):
        _, root = decompose([[1, 2, 4], [1, 2, 5], [2, 3, 4], [2, 3, 5], [4, 5]])
        assert isinstance(root, Hybrid)
        assert root.hybrid_exp == Dnf([[0, 1], [0, 2], [1, 2]])
        assert [s.variables() for s in root.sub_exps] == [
            frozenset({1, 2, 3}), frozenset({4}), frozenset({5})
        ]
        assert root.sub_exps[1:] == (Var(4), Var(5))
        first = root.sub_exps[0]
        assert isinstance(first, And)
        assert Or((Var(1), Var(3))) in first.children
        assert Var(2) in first.children

    @pytest.mark.parametrize("implicants", [
        [[1]],
        [[1, 2, 3]],
        [[1], [2], [3]],
        [[1, 2], [1, 3], [4]],
        [[1, 2], [1, 3], [2, 3]],
        [[1, 2, 3], [1, 2, 4]],
        [[1, 4, 5], [2, 4, 5], [3, 4, 5]],
        [[1, 2, 4], [1, 2, 5], [2, 3, 4], [2, 3, 5], [4, 5]],
        [[1, 2, 5], [1, 2, 6], [1, 3, 5], [1, 3, 6], [4, 5], [4, 6]],
        [[1, 3, 6, 8], [3, 5, 6, 8], [3, 4, 6, 8, 9]],
        [[1, 2, 3, 4], [1, 2, 3, 5], [6]],
        [[1, 2], [2, 3], [3, 4], [1, 4]],
    ])
    def test_expansion_reproduces_formula(self, implicants):
        dnf, root = decompose(implicants)
        assert root.expand() == dnf
        assert root.variables() == dnf.all_variables()

    def test_unknown_owner_rejected(self):
        with pytest.raises(ValueError):
            recursive_decompose(Dnf([[1, 2]]), [1])

    def test_constant_formula_rejected(self):
        with pytest.raises(ValueError):
            recursive_decompose(Dnf.true(), [1])
        with pytest.raises(ValueError):
            recursive_decompose(Dnf.false(), [1])
