"""Tests for landmark selection and nearest-landmark tables."""
import numpy as np
import pytest

from simplicial_filtrations import (
    choose_n_farthest_points,
    nearest_landmark_table,
    pick_n_random_points,
)
from simplicial_filtrations.errors import InvalidArgumentError


class TestNearestLandmarkTable:
    def test_sorted_squared_distances(self):
        L = np.array([[0.0, 0.0], [3.0, 0.0], [0.0, 1.0]])
        W = np.array([[0.0, 0.0], [2.0, 0.0]])
        table = nearest_landmark_table(L, W)
        assert [l for l, _ in table[0]] == [0, 2, 1]
        assert [d for _, d in table[0]] == pytest.approx([0.0, 1.0, 9.0])
        assert [l for l, _ in table[1]] == [1, 0, 2]
        assert [d for _, d in table[1]] == pytest.approx([1.0, 4.0, 5.0])

    def test_k(self):
        L = np.arange(10, dtype=float).reshape(-1, 1)
        table = nearest_landmark_table(L, np.array([[4.2]]), k=1)
        assert table == [[(4, pytest.approx(0.04))]]
        table = nearest_landmark_table(L, np.array([[4.2]]), k=50)
        assert len(table[0]) == 10

    def test_ties_by_id(self):
        L = np.array([[1.0, 0.0], [-1.0, 0.0], [0.0, 1.0]])
        table = nearest_landmark_table(L, np.zeros((1, 2)))
        assert [l for l, _ in table[0]] == [0, 1, 2]

    def test_errors(self):
        with pytest.raises(InvalidArgumentError):
            nearest_landmark_table(np.zeros((0, 2)), np.zeros((1, 2)))
        with pytest.raises(InvalidArgumentError):
            nearest_landmark_table(np.zeros((2, 2)), np.zeros((1, 3)))
        with pytest.raises(InvalidArgumentError):
            nearest_landmark_table(np.zeros((2, 2)), np.zeros((1, 2)), k=0)


class TestFarthestPoints:
    def test_greedy(self):
        P = np.array([0.0, 1.0, 2.0, 10.0])
        np.testing.assert_array_equal(choose_n_farthest_points(P, 3), [0, 3, 2])

    def test_start(self):
        P = np.array([0.0, 1.0, 2.0, 10.0])
        np.testing.assert_array_equal(choose_n_farthest_points(P, 2, start=3), [3, 0])

    def test_duplicates_stop_early(self):
        P = np.zeros((3, 2))
        np.testing.assert_array_equal(choose_n_farthest_points(P, 3), [0])

    def test_errors(self):
        with pytest.raises(InvalidArgumentError):
            choose_n_farthest_points(np.zeros((3, 2)), -1)
        with pytest.raises(InvalidArgumentError):
            choose_n_farthest_points(np.zeros((3, 2)), 2, start=3)


class TestRandomPoints:
    def test_sample(self):
        idx = pick_n_random_points(np.zeros((5, 2)), 3, rng=np.random.default_rng(0))
        assert len(idx) == 3
        assert len(set(idx.tolist())) == 3
        assert list(idx) == sorted(idx)
        assert idx.min() >= 0 and idx.max() < 5

    def test_clipped(self):
        idx = pick_n_random_points(np.zeros((4, 1)), 10, rng=np.random.default_rng(0))
        np.testing.assert_array_equal(idx, [0, 1, 2, 3])
