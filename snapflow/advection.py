"""
snapflow/advection.py
---------------------
Semi-Lagrangian transport of velocity and dye.
Results are written to scratch buffers and committed only after the
whole sweep, so the read pass always sees the pre-advection field.
"""
import numpy as np

from .numerics import advect_velocity_kernel, advect_scalar_kernel


class Advector:
    def __init__(self, grid):
        # Pre-allocate scratch buffers to avoid garbage collection every step
        self.new_u = np.zeros(grid.shape)
        self.new_v = np.zeros(grid.shape)
        self.new_m = np.zeros(grid.shape)

    def _check(self, grid):
        if self.new_u.shape != grid.shape:
            raise ValueError(f"Advector buffers {self.new_u.shape} do not match grid {grid.shape}.")

    def advect_velocity(self, grid, dt):
        """ Advects u and v through the current velocity field. """
        self._check(grid)
        self.new_u[:] = grid.u
        self.new_v[:] = grid.v

        advect_velocity_kernel(grid.u, grid.v, grid.s, self.new_u, self.new_v, float(dt), grid.h)

        grid.u[:] = self.new_u
        grid.v[:] = self.new_v

    def advect_scalar(self, grid, dt):
        """ Advects the dye field m. Call after advect_velocity. """
        self._check(grid)
        self.new_m[:] = grid.m

        advect_scalar_kernel(grid.u, grid.v, grid.s, grid.m, self.new_m, float(dt), grid.h)

        grid.m[:] = self.new_m
