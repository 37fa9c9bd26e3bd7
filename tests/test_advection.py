"""
Tests for semi-Lagrangian transport of velocity and dye.
"""

import numpy as np
import pytest

from snapflow.advection import Advector
from snapflow.grid import Grid


@pytest.fixture
def grid():
    return Grid(1000.0, 16, 8, 0.1)


class TestVelocity:

    def test_uniform_flow_is_preserved(self, grid):
        grid.u[:] = 1.5
        grid.v[:] = -0.5
        Advector(grid).advect_velocity(grid, 0.05)

        np.testing.assert_allclose(grid.u[1:, 1:-1], 1.5, atol=1e-12)
        np.testing.assert_allclose(grid.v[1:-1, 1:], -0.5, atol=1e-12)

    def test_faces_next_to_solid_cells_keep_value(self, grid):
        grid.u[:] = 1.0
        grid.s[6, 4] = 0.0
        grid.u[6, 4] = 0.0
        grid.u[7, 4] = 0.0
        Advector(grid).advect_velocity(grid, 0.05)

        assert grid.u[6, 4] == 0.0
        assert grid.u[7, 4] == 0.0


class TestScalar:

    def test_dye_shifts_one_cell_per_cell_crossing(self, grid):
        """ With u * dt == h every cell takes the value of its upstream neighbour. """
        grid.u[:] = 1.0
        grid.m[:4, :] = 1.0
        before = grid.m.copy()

        Advector(grid).advect_scalar(grid, grid.h / 1.0)

        np.testing.assert_allclose(grid.m[2:-1, 1:-1], before[1:-2, 1:-1], atol=1e-12)

    def test_solid_cells_not_advected(self, grid):
        grid.u[:] = 1.0
        grid.m[:] = 1.0
        grid.s[5, 3] = 0.0
        grid.m[5, 3] = 0.0
        Advector(grid).advect_scalar(grid, 0.1)
        assert grid.m[5, 3] == 0.0

    def test_ghost_ring_not_written(self, grid):
        grid.u[:] = 1.0
        grid.m[:] = np.arange(grid.num_x)[:, None] * np.ones(grid.num_y)
        before = grid.m.copy()
        Advector(grid).advect_scalar(grid, 0.05)
        np.testing.assert_array_equal(grid.m[0, :], before[0, :])
        np.testing.assert_array_equal(grid.m[-1, :], before[-1, :])


class TestBuffers:

    def test_buffers_match_grid(self, grid):
        adv = Advector(grid)
        assert adv.new_u.shape == grid.shape
        assert adv.new_m.shape == grid.shape

    def test_mismatched_grid_rejected(self, grid):
        adv = Advector(grid)
        other = Grid(1000.0, 5, 5, 0.1)
        with pytest.raises(ValueError):
            adv.advect_velocity(other, 0.1)
        with pytest.raises(ValueError):
            adv.advect_scalar(other, 0.1)
