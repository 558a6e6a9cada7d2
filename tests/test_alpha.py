"""Tests for the Alpha filtration builder."""
import math
from itertools import combinations

import numpy as np
import pytest

from simplicial_filtrations import AlphaComplex, AlphaConfig, SimplexTree, Triangulation
from simplicial_filtrations.errors import (
    InvalidArgumentError,
    PreconditionViolation,
    VertexNotFoundError,
)

SQUARE = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
OBTUSE = np.array([[0.0, 0.0], [2.0, 0.0], [1.0, 0.2]])


class TestSquare:
    def test_counts(self):
        st = AlphaComplex(SQUARE).create_simplex_tree()
        assert st.num_vertices() == 4
        assert len(st.skeleton(1)) == 5
        assert len(st.skeleton(2)) == 2

    def test_values(self):
        st = AlphaComplex(SQUARE).create_simplex_tree()
        for tri in st.skeleton(2):
            assert st.filtration(tri) == pytest.approx(0.5)
        diagonals = [e for e in st.skeleton(1) if set(e) in ({0, 2}, {1, 3})]
        assert len(diagonals) == 1
        assert st.filtration(diagonals[0]) == pytest.approx(0.5)
        for e in st.skeleton(1):
            if e not in diagonals:
                assert st.filtration(e) == pytest.approx(0.25)
            assert st.filtration(e) <= 0.5 + 1e-12
        for v in st.skeleton(0):
            assert st.filtration(v) == 0.0

    def test_monotone_and_closed(self):
        st = AlphaComplex(SQUARE).create_simplex_tree()
        assert st.is_monotone()
        assert st.num_undefined() == 0
        for sig in st:
            for face in st.faces(sig):
                assert face in st


class TestGabriel:
    def test_obtuse_long_edge_takes_triangle_value(self):
        st = AlphaComplex(OBTUSE).create_simplex_tree()
        tri_value = st.filtration((0, 1, 2))
        assert tri_value == pytest.approx(6.76)
        assert st.filtration((0, 1)) == pytest.approx(tri_value)
        assert st.filtration((0, 2)) == pytest.approx(0.26)
        assert st.filtration((1, 2)) == pytest.approx(0.26)

    def test_pruning(self):
        st = AlphaComplex(OBTUSE, config=AlphaConfig(max_alpha_square=0.3)).create_simplex_tree()
        assert st.dimension() == 1
        assert (0, 1) not in st
        assert st.edges() == [(0, 2), (1, 2)]

    def test_pruning_override(self):
        ac = AlphaComplex(OBTUSE)
        st = ac.create_simplex_tree(max_alpha_square=0.1)
        assert st.dimension() == 0
        assert st.num_vertices() == 3


class TestRandomClouds:
    def test_properties(self):
        rng = np.random.default_rng(0)
        P = rng.uniform(size=(40, 2))
        st = AlphaComplex(P).create_simplex_tree()
        assert st.num_undefined() == 0
        assert st.is_monotone()
        for sig in st:
            for k in range(1, len(sig)):
                for face in combinations(sig, k):
                    assert face in st
        order = [s for s, _ in st.get_filtration()]
        pos = {s: i for i, s in enumerate(order)}
        for sig in st:
            for face in st.faces(sig):
                assert pos[face] < pos[sig]

    def test_deterministic(self):
        rng = np.random.default_rng(1)
        P = rng.normal(size=(25, 3))
        a = AlphaComplex(P).create_simplex_tree().get_filtration()
        b = AlphaComplex(P).create_simplex_tree().get_filtration()
        assert a == b

    def test_values_bounded_by_cell_radius(self):
        rng = np.random.default_rng(2)
        P = rng.uniform(size=(30, 2))
        ac = AlphaComplex(P)
        st = ac.create_simplex_tree()
        for tri in st.skeleton(2):
            pts = np.stack([ac.get_point(v) for v in tri])
            assert st.filtration(tri) == pytest.approx(ac.kernel.squared_circumradius(pts))


class TestOneDimensional:
    def test_intervals(self):
        st = AlphaComplex(np.array([0.0, 1.0, 3.0])).create_simplex_tree()
        assert st.dimension() == 1
        assert st.filtration((0, 1)) == pytest.approx(0.25)
        assert st.filtration((1, 2)) == pytest.approx(1.0)
        assert all(st.filtration(v) == 0.0 for v in st.skeleton(0))


class TestPreconditions:
    def test_non_empty_target(self):
        st = SimplexTree()
        st.insert_with_subfaces([0], 0.0)
        with pytest.raises(PreconditionViolation):
            AlphaComplex(SQUARE).create_simplex_tree(st)
        assert st.num_simplices() == 1

    def test_built_twice_into_same_tree(self):
        ac = AlphaComplex(SQUARE)
        st = ac.create_simplex_tree()
        with pytest.raises(PreconditionViolation):
            ac.create_simplex_tree(st)

    def test_zero_dimensional(self):
        with pytest.raises(PreconditionViolation):
            AlphaComplex(np.array([[1.0, 1.0]])).create_simplex_tree()

    def test_no_vertices(self):
        tri = Triangulation(points=np.zeros((2, 2)), cells=np.zeros((0, 3), dtype=int))
        with pytest.raises(PreconditionViolation):
            AlphaComplex(triangulation=tri).create_simplex_tree()

    def test_arguments(self):
        with pytest.raises(InvalidArgumentError):
            AlphaComplex()
        with pytest.raises(InvalidArgumentError):
            AlphaComplex(SQUARE, triangulation=Triangulation(points=SQUARE, cells=np.array([[0, 1, 2]])))
        with pytest.raises(InvalidArgumentError):
            AlphaComplex(np.zeros((0, 2)))
        with pytest.raises(InvalidArgumentError):
            AlphaConfig(max_alpha_square=math.nan)


class TestTriangulationInput:
    def test_handles_follow_external_ids(self):
        P = np.array([[9.0, 9.0], [0.0, 0.0], [2.0, 0.0], [0.0, 2.0]])
        tri = Triangulation(points=P, cells=np.array([[3, 1, 2]]))
        ac = AlphaComplex(triangulation=tri)
        st = ac.create_simplex_tree()
        assert st.vertices() == [0, 1, 2]
        np.testing.assert_array_equal(ac.get_point(0), [0.0, 0.0])
        np.testing.assert_array_equal(ac.get_point(2), [0.0, 2.0])
        assert st.filtration((0, 1, 2)) == pytest.approx(2.0)
        with pytest.raises(VertexNotFoundError):
            ac.get_point(3)
