# =============================================================================
# FILE: tests/test_algebra.py
"""
Unit Tests for interaction coefficients, the product tree and union
enumeration
"""
import operator

import pytest

from dnf_shapley.modules.coeffs import (
    HORIZONTAL_IDENTITY,
    UNIT,
    VERTICAL_IDENTITY,
    HybridCoeffs,
    IECoeffs,
    horizontal_op,
    union_sign,
    vertical_op,
)
from dnf_shapley.modules.decompose_tree import leaf_exp_unions_coeffs
from dnf_shapley.modules.dnf import Dnf
from dnf_shapley.modules.product_tree import ProductTree
from dnf_shapley.modules.union_combination import UnionCombination, exp_to_unions


class TestIECoeffs:
    """Test suite for IECoeffs"""

    def test_zero_weights_dropped(self):
        assert IECoeffs({1: 0, 2: 3}) == IECoeffs({2: 3})
        assert not IECoeffs({1: 0})

    def test_pairs_accumulate(self):
        assert IECoeffs([(1, 2), (1, -1), (3, 1)]) == IECoeffs({1: 1, 3: 1})

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            IECoeffs({-1: 1})

    def test_arithmetic(self):
        a = IECoeffs({1: 1})
        b = IECoeffs({1: 2, 2: -1})
        assert a + b == IECoeffs({1: 3, 2: -1})
        assert b - a == IECoeffs({1: 1, 2: -1})
        assert -a == IECoeffs({1: -1})
        assert a * b == IECoeffs({2: 2, 3: -1})

    def test_sum_builtin(self):
        assert sum([UNIT, UNIT, UNIT]) == IECoeffs({1: 3})

    def test_identities(self):
        p = IECoeffs({1: 2, 2: -1})
        assert vertical_op(p, VERTICAL_IDENTITY) == p
        assert horizontal_op(p, HORIZONTAL_IDENTITY) == p

    def test_horizontal_op_of_two_owners(self):
        assert horizontal_op(UNIT, UNIT) == IECoeffs({1: 2, 2: -1})

    def test_to_sv(self):
        assert IECoeffs({1: 1, 2: 1}).to_sv() == pytest.approx(1.5)
        assert IECoeffs({3: 1}).to_sv() == pytest.approx(1 / 3)
        assert IECoeffs().to_sv() == 0.0

    def test_to_sv_is_exact(self):
        # 1/3 + 1/3 + 1/3 accumulated as fractions
        assert IECoeffs({3: 3}).to_sv() == 1.0

    def test_to_sv_size_zero_raises(self):
        with pytest.raises(ZeroDivisionError):
            VERTICAL_IDENTITY.to_sv()

    def test_union_sign(self):
        assert union_sign(1) == 1
        assert union_sign(2) == -1
        assert union_sign(5) == 1

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(UNIT)


class TestHybridCoeffs:
    """Test suite for HybridCoeffs"""

    def test_product_memoised(self):
        hybrid = HybridCoeffs([UNIT, IECoeffs({1: 2, 2: -1}), UNIT])
        assert hybrid.product([]) == VERTICAL_IDENTITY
        assert hybrid.product([0, 2]) == IECoeffs({2: 1})
        assert hybrid.product([0, 1]) is hybrid.product({1, 0})

    def test_products_share_cached_prefixes(self):
        hybrid = HybridCoeffs([UNIT, IECoeffs({1: 2, 2: -1}), UNIT])
        assert hybrid.product([0, 1, 2]) == IECoeffs({3: 2, 4: -1})
        # {0, 1, 2} is built from {0, 1}, {0} and the empty set
        assert hybrid._cached_product.cache_info().currsize == 4

        hits = hybrid._cached_product.cache_info().hits
        assert hybrid.product([1, 0]) == IECoeffs({2: 2, 3: -1})
        assert hybrid._cached_product.cache_info().hits == hits + 1

    def test_exp_coeffs_of_majority_over_owners(self):
        hybrid = HybridCoeffs([UNIT, UNIT, UNIT])
        majority = Dnf([[0, 1], [0, 2], [1, 2]])
        assert hybrid.exp_coeffs(majority) == IECoeffs({2: 3, 3: -2})

    def test_exp_coeffs_of_plain_disjunction(self):
        hybrid = HybridCoeffs([UNIT, UNIT])
        assert hybrid.exp_coeffs(Dnf([[0], [1]])) == horizontal_op(UNIT, UNIT)


class TestProductTree:
    """Test suite for ProductTree"""

    def test_root_and_exclusive_products(self):
        tree = ProductTree([2, 3, 5, 7], operator.mul, 1)
        assert tree.root() == 210
        assert tree.all_products() == [105, 70, 42, 30]

    def test_odd_length(self):
        tree = ProductTree([2, 3, 5], operator.mul, 1)
        assert tree.root() == 30
        assert tree.all_products() == [15, 10, 6]

    def test_single_value(self):
        tree = ProductTree([4], operator.mul, 1)
        assert tree.root() == 4
        assert tree.all_products() == [1]

    def test_empty(self):
        tree = ProductTree([], operator.mul, 1)
        assert len(tree) == 0
        assert tree.root() == 1
        assert tree.all_products() == []

    def test_matches_naive_exclusion(self):
        values = [IECoeffs({1: 1}), IECoeffs({2: 1, 3: -1}), IECoeffs({1: 2, 2: -1}),
                  IECoeffs({2: 1}), IECoeffs({1: 1})]
        tree = ProductTree(values, horizontal_op, HORIZONTAL_IDENTITY)
        for i, product in enumerate(tree.all_products()):
            expected = HORIZONTAL_IDENTITY
            for j, v in enumerate(values):
                if j != i:
                    expected = horizontal_op(expected, v)
            assert product == expected


class TestUnionCombination:
    """Test suite for union enumeration"""

    def test_visits_every_subset_once(self):
        combos = UnionCombination(4, lambda i: (i,), lambda node, i: node + (i,))
        visited = list(combos)
        assert len(visited) == 15
        assert len(set(visited)) == 15

    def test_reiterable(self):
        combos = UnionCombination(3, lambda i: (i,), lambda node, i: node + (i,))
        assert list(combos) == list(combos)

    def test_pruning(self):
        combos = UnionCombination(3, lambda i: (i,), lambda node, i: None)
        assert list(combos) == [(0,), (1,), (2,)]

    def test_majority_unions(self):
        unions = list(exp_to_unions(Dnf([[1, 2], [1, 3], [2, 3]])))
        assert len(unions) == 5
        assert leaf_exp_unions_coeffs(unions) == IECoeffs({2: 3, 3: -2})

    def test_disjunction_unions(self):
        unions = list(exp_to_unions(Dnf([[1], [2], [3]])))
        assert len(unions) == 7
        assert leaf_exp_unions_coeffs(unions) == IECoeffs({1: 3, 2: -3, 3: 1})

    def test_pruned_unions_keep_coefficients(self):
        exp = Dnf([[1, 2], [2, 3], [3, 4], [1, 4], [1, 3]])
        implicants = exp.implicants()
        full = UnionCombination(
            len(implicants),
            lambda i: (implicants[i], 1),
            lambda node, i: (node[0] | implicants[i], node[1] + 1)
        )
        terms = {}
        for input_set, n in full:
            terms[len(input_set)] = terms.get(len(input_set), 0) + union_sign(n)
        assert leaf_exp_unions_coeffs(exp_to_unions(exp)) == IECoeffs(terms)

    def test_empty_formula(self):
        assert list(exp_to_unions(Dnf.false())) == []
