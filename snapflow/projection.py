"""
snapflow/projection.py
----------------------
Pressure projection by Gauss-Seidel iteration with over-relaxation (SOR).

The sweep is inherently sequential: each cell reads the faces already
corrected by the cells before it. Non-convergence is not an error; the
iteration cap bounds the work and the residual is reported back.
"""
import logging
from collections import namedtuple

from .config import PROJECTION_TOLERANCE, PROJECTION_MIN_ITERATIONS
from .numerics import pressure_projection_kernel

logger = logging.getLogger(__name__)


ProjectionResult = namedtuple(
    "ProjectionResult", ["iterations", "max_pressure_change", "converged"]
)


class PressureProjectionSolver:
    def __init__(self, over_relaxation=1.9, tolerance=PROJECTION_TOLERANCE,
                 min_iterations=PROJECTION_MIN_ITERATIONS):
        """
        Args:
            over_relaxation (float): SOR factor omega (1.0 = plain Gauss-Seidel)
            tolerance (float): Stop once the largest |pressure change| of a
                               sweep falls below this (after min_iterations)
            min_iterations (int): Sweeps that always run before early exit
        """
        if not 0.0 < over_relaxation < 2.0:
            raise ValueError("over_relaxation must lie in (0, 2).")
        self.over_relaxation = float(over_relaxation)
        self.tolerance = float(tolerance)
        self.min_iterations = int(min_iterations)

    def solve(self, grid, dt, num_iters, over_relaxation=None):
        """
        Runs the projection on grid.u, grid.v and accumulates grid.p.
        Cells with s == 0 or a zero neighbour-openness sum are left untouched.

        Returns:
            ProjectionResult
        """
        omega = self.over_relaxation if over_relaxation is None else float(over_relaxation)

        iterations, max_change = pressure_projection_kernel(
            grid.u, grid.v, grid.p, grid.s,
            int(num_iters), float(dt), omega,
            grid.density, grid.h,
            self.tolerance, self.min_iterations
        )

        converged = max_change < self.tolerance
        if not converged and iterations >= num_iters:
            logger.debug("Projection hit cap of %d sweeps (max dp=%.3e)", num_iters, max_change)

        return ProjectionResult(int(iterations), float(max_change), bool(converged))
