"""Tests for the filtered simplex tree."""
import math
from itertools import combinations

import pytest

from simplicial_filtrations import SimplexTree, UNDEFINED
from simplicial_filtrations.errors import (
    InvalidArgumentError,
    PreconditionViolation,
    SimplexNotFoundError,
)


def _assert_closed(st):
    for sig in st:
        for k in range(1, len(sig)):
            for face in combinations(sig, k):
                assert face in st, f"{face} missing below {sig}"


def _triangle(value=1.0):
    st = SimplexTree()
    st.insert_with_subfaces([2, 0, 1], value)
    return st


class TestInsertion:
    def test_inserts_all_faces(self):
        st = _triangle()
        assert st.num_simplices() == 7
        assert st.num_vertices() == 3
        assert st.dimension() == 2
        _assert_closed(st)

    def test_faces_are_undefined(self):
        st = _triangle(2.5)
        assert st.filtration((0, 1, 2)) == 2.5
        assert math.isnan(st.filtration((0, 1)))
        assert math.isnan(st.filtration([1]))
        assert st.num_undefined() == 6

    def test_return_values(self):
        st = SimplexTree()
        sig, inserted = st.insert_with_subfaces([1, 0], 3.0)
        assert sig == (0, 1)
        assert inserted is True
        sig, inserted = st.insert_with_subfaces([0, 1], 1.0)
        assert inserted is False
        assert st.filtration(sig) == 3.0

    def test_undefined_face_receives_value(self):
        st = _triangle()
        sig, inserted = st.insert_with_subfaces([0, 2], 0.5)
        assert inserted is False
        assert st.filtration(sig) == 0.5

    def test_empty_rejected(self):
        with pytest.raises(InvalidArgumentError):
            SimplexTree().insert_with_subfaces([], 0.0)

    def test_default_is_undefined(self):
        st = SimplexTree()
        st.insert_with_subfaces([4])
        assert math.isnan(st.filtration([4]))
        assert math.isnan(UNDEFINED)


class TestLookup:
    def test_not_found(self):
        st = _triangle()
        with pytest.raises(SimplexNotFoundError):
            st.filtration((0, 3))
        with pytest.raises(KeyError):
            st.assign_filtration((5,), 1.0)
        with pytest.raises(SimplexNotFoundError):
            st.faces((0, 1, 2, 3))

    def test_find(self):
        st = _triangle()
        assert st.find([1, 0]) == (0, 1)
        assert st.find([0, 3]) is None
        assert st.find([]) is None
        assert (2, 1) in st
        assert (7,) not in st

    def test_iteration_order(self):
        st = _triangle()
        assert list(st) == [(0,), (1,), (2,), (0, 1), (0, 2), (1, 2), (0, 1, 2)]
        assert len(st) == 7

    def test_empty_complex(self):
        st = SimplexTree()
        assert st.dimension() == -1
        assert st.num_vertices() == 0
        assert st.upper_bound_filtration() == -math.inf


class TestTraversal:
    def test_faces_and_cofaces(self):
        st = _triangle()
        assert sorted(st.faces((0, 1, 2))) == [(0, 1), (0, 2), (1, 2)]
        assert st.boundary((0, 1)) == st.faces((0, 1))
        assert st.faces((0,)) == []
        assert st.cofaces((0,)) == [(0, 1), (0, 2)]
        assert st.cofaces((0,), codimension=2) == [(0, 1, 2)]
        assert st.cofaces((0,), codimension=0) == [(0, 1), (0, 2), (0, 1, 2)]

    def test_star(self):
        st = _triangle()
        st.insert_with_subfaces([2, 3], 1.0)
        assert st.star((2,)) == [(2,), (0, 2), (1, 2), (2, 3), (0, 1, 2)]

    def test_skeleton(self):
        st = _triangle()
        assert st.skeleton(0) == [(0,), (1,), (2,)]
        assert st.skeleton(1) == [(0, 1), (0, 2), (1, 2)]
        assert st.skeleton(3) == []
        assert st.edges() == st.skeleton(1)


class TestMonotonicity:
    def _filled(self):
        st = _triangle(1.0)
        for v in range(3):
            st.assign_filtration([v], 0.0)
        for e in [(0, 1), (0, 2), (1, 2)]:
            st.assign_filtration(e, 2.0)
        return st

    def test_lowers_faces(self):
        st = self._filled()
        assert not st.is_monotone()
        assert st.enforce_monotonicity() is True
        assert st.is_monotone()
        for e in st.edges():
            assert st.filtration(e) == 1.0
        assert st.enforce_monotonicity() is False

    def test_reaches_fixed_point_in_one_call(self):
        st = SimplexTree()
        st.insert_with_subfaces([0, 1, 2, 3], 1.0)
        for sig in st:
            if len(sig) < 4:
                st.assign_filtration(sig, 5.0)
        st.enforce_monotonicity()
        assert st.is_monotone()
        assert all(st.filtration(s) == 1.0 for s in st)

    def test_undefined_values_left_alone(self):
        st = _triangle(1.0)
        st.assign_filtration((0,), 3.0)
        assert st.enforce_monotonicity() is False
        assert math.isnan(st.filtration((0, 1)))


class TestOrdering:
    def test_refuses_undefined(self):
        with pytest.raises(PreconditionViolation):
            _triangle().finalize_order()

    def test_faces_precede_cofaces(self):
        st = SimplexTree()
        st.insert_with_subfaces([0, 1, 2], 1.0)
        st.insert_with_subfaces([2, 3], 0.5)
        st.reset_filtration(0.0)
        st.assign_filtration((0, 1, 2), 1.0)
        st.assign_filtration((2, 3), 0.5)
        order = st.finalize_order()
        pos = {s: i for i, s in enumerate(order)}
        for sig in st:
            for face in st.faces(sig):
                assert pos[face] < pos[sig]
        assert st.order_index((0, 1, 2)) == len(order) - 1
        values = [v for _, v in st.get_filtration()]
        assert values == sorted(values)

    def test_reset_filtration_min_dim(self):
        st = _triangle(1.0)
        st.reset_filtration(0.25, min_dim=1)
        assert st.filtration((0, 1, 2)) == 0.25
        assert math.isnan(st.filtration((0,)))


class TestPrune:
    def _weighted(self):
        st = SimplexTree.from_edges([(0, 1), (1, 2), (0, 2), (2, 3)], weights=[1.0, 2.0, 3.0, 4.0])
        st.expansion(2)
        return st

    def test_removes_cofaces(self):
        st = self._weighted()
        assert st.prune_above(2.5) is True
        assert (0, 2) not in st
        assert (0, 1, 2) not in st
        assert (2, 3) not in st
        assert st.num_vertices() == 4
        _assert_closed(st)

    def test_idempotent(self):
        st = self._weighted()
        st.prune_above(2.5)
        before = st.get_filtration()
        assert st.prune_above(2.5) is False
        assert st.get_filtration() == before

    def test_infinite_threshold_is_noop(self):
        st = self._weighted()
        assert st.prune_above(math.inf) is False
        assert st.num_simplices() == 9


class TestStructure:
    def test_from_edges_duplicates(self):
        st = SimplexTree.from_edges([(0, 1), (1, 0), (2, 2)], weights=[3.0, 1.0, 9.0])
        assert st.filtration((0, 1)) == 1.0
        assert st.vertices() == [0, 1, 2]
        assert st.num_simplices() == 4

    def test_from_edges_weight_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            SimplexTree.from_edges([(0, 1)], weights=[1.0, 2.0])

    def test_expansion(self):
        st = SimplexTree.from_edges([(0, 1), (1, 2), (0, 2), (2, 3)], weights=[1.0, 2.0, 3.0, 0.5])
        assert st.expansion(3) == 1
        assert st.filtration((0, 1, 2)) == 3.0
        assert st.dimension() == 2

    def test_remove_maximal(self):
        st = _triangle()
        with pytest.raises(PreconditionViolation):
            st.remove_maximal_simplex((0, 1))
        st.remove_maximal_simplex((0, 1, 2))
        assert st.dimension() == 1
        st.remove_maximal_simplex((0, 1))
        assert (0, 1) not in st
        _assert_closed(st)

    def test_edge_list(self):
        st = SimplexTree.from_edges([(2, 3), (0, 1)], weights=[0.5, 2.0])
        assert st.to_edge_list() == [(0.5, 2, 3), (2.0, 0, 1)]

    def test_copy_is_independent(self):
        st = _triangle(1.0)
        cp = st.copy()
        cp.remove_maximal_simplex((0, 1, 2))
        assert (0, 1, 2) in st
        assert cp.num_simplices() == 6
