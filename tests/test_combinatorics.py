"""Tests for simplex combinatorics helpers."""
import pytest

from simplicial_filtrations.complex.combinatorics import (
    boundary_faces,
    canon_edge,
    canon_simplex,
    faces_of_dimension,
    is_face,
    iter_subfaces,
    opposite_vertex,
    simplex_dim,
)
from simplicial_filtrations.errors import InvalidArgumentError


class TestCanon:
    def test_sorted_unique(self):
        assert canon_simplex([3, 1, 3, 2]) == (1, 2, 3)

    def test_edge(self):
        assert canon_edge(5, 2) == (2, 5)
        assert canon_edge(2, 5) == (2, 5)

    def test_empty_rejected(self):
        with pytest.raises(InvalidArgumentError):
            canon_simplex([])

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            canon_simplex([-1, 2])

    def test_dim(self):
        assert simplex_dim((4,)) == 0
        assert simplex_dim((0, 1, 2)) == 2


class TestFaces:
    def test_boundary(self):
        assert boundary_faces((0, 1, 2)) == [(1, 2), (0, 2), (0, 1)]
        assert boundary_faces((7,)) == []

    def test_opposite_vertex(self):
        assert opposite_vertex((0, 3, 5), (0, 5)) == 3
        with pytest.raises(InvalidArgumentError):
            opposite_vertex((0, 3, 5), (0,))

    def test_is_face(self):
        assert is_face((1, 3), (0, 1, 2, 3))
        assert is_face((0, 1, 2, 3), (0, 1, 2, 3))
        assert not is_face((1, 4), (0, 1, 2, 3))
        assert not is_face((0, 1, 2, 3, 4), (0, 1, 2, 3))


class TestSubfaces:
    def test_all_subsets(self):
        sig = (0, 2, 5, 9)
        subs = list(iter_subfaces(sig))
        assert len(subs) == 2 ** 4 - 1
        assert len(set(subs)) == len(subs)
        assert sig in subs
        assert all(s == tuple(sorted(s)) for s in subs)

    def test_restartable(self):
        sig = (1, 2, 3)
        assert list(iter_subfaces(sig)) == list(iter_subfaces(sig))

    def test_min_size(self):
        subs = list(iter_subfaces((0, 1, 2, 3), min_size=3))
        assert sorted(subs) == [(0, 1, 2), (0, 1, 2, 3), (0, 1, 3), (0, 2, 3), (1, 2, 3)]

    def test_faces_of_dimension(self):
        assert sorted(faces_of_dimension((0, 1, 2, 3), 1)) == [
            (0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3)
        ]
        assert faces_of_dimension((0, 1), 0) in ([(0,), (1,)], [(1,), (0,)])
