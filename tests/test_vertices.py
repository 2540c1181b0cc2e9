"""Tests for the vertex pool."""

import numpy as np

from cornerpoint.grids.vertices import VertexPool, vertex_key


class TestVertexKey:
    def test_rounds_to_decimals(self):
        assert vertex_key((1.0000001, 2.0, 3.0)) == (1.0, 2.0, 3.0)

    def test_negative_zero_folds_into_zero(self):
        assert vertex_key((-0.0, -1e-9, 0.0)) == vertex_key((0.0, 0.0, 0.0))

    def test_custom_decimals(self):
        assert vertex_key((1.26, 0, 0), decimals=1) == (1.3, 0.0, 0.0)


class TestVertexPool:
    def test_indices_follow_registration_order(self):
        pool = VertexPool()
        assert pool.add((0, 0, 0)) == 0
        assert pool.add((1, 0, 0)) == 1
        assert pool.add((0, 0, 0)) == 0
        assert len(pool) == 2

    def test_points_equal_within_tolerance_share_index(self):
        pool = VertexPool()
        first = pool.add((1.0, 2.0, 3.0))
        assert pool.add((1.0000004, 2.0, 3.0)) == first
        assert pool.add((1.00001, 2.0, 3.0)) != first

    def test_first_registered_point_is_stored(self):
        pool = VertexPool()
        pool.add((1.0000004, 2.0, 3.0))
        pool.add((1.0, 2.0, 3.0))
        np.testing.assert_array_equal(pool.to_array(), [[1.0000004, 2.0, 3.0]])

    def test_add_many(self):
        pool = VertexPool()
        points = np.array([[0, 0, 0], [1, 0, 0], [0, 0, 0], [1, 1, 0]], dtype=float)
        np.testing.assert_array_equal(pool.add_many(points), [0, 1, 0, 2])
        assert pool.to_array().shape == (3, 3)

    def test_contains_and_index_of(self):
        pool = VertexPool()
        pool.add((5, 5, 5))
        assert (5, 5, 5) in pool
        assert (5, 5, 6) not in pool
        assert pool.index_of((5.0, 5.0, 5.0)) == 0
        assert pool.index_of((0, 0, 0)) is None

    def test_empty_pool_array(self):
        assert VertexPool().to_array().shape == (0, 3)
