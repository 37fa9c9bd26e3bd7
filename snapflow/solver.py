"""
snapflow/solver.py
------------------
The per-step driver of the wind tunnel.

One call to step() runs the fixed sequence:
    integrate (gravity) -> porous resistance -> clear pressure
    -> projection -> extrapolate -> advect velocity -> advect dye
    -> enforce boundaries -> re-impose obstacle no-slip

The stepper owns the step counter; nothing is kept at module level.
Stopping between two step() calls always leaves a consistent state.
"""
import logging
from collections import namedtuple

import numpy as np

from .advection import Advector
from .boundary import BoundaryEnforcer
from .config import AIR_KINEMATIC_VISCOSITY
from .grid import Grid
from .obstacles import ObstacleManager
from .projection import PressureProjectionSolver

logger = logging.getLogger(__name__)


PhysicsCheck = namedtuple(
    "PhysicsCheck", ["max_u", "max_v", "max_p", "max_divergence", "reynolds"]
)


class SimulationStepper:
    def __init__(self, grid, over_relaxation=1.9):
        """
        Args:
            grid (Grid): Field storage, already initialised by the scene
            over_relaxation (float): Default SOR factor for step()
        """
        self.grid = grid
        self.projection = PressureProjectionSolver(over_relaxation=over_relaxation)
        self.advector = Advector(grid)
        self.boundaries = BoundaryEnforcer()
        self.obstacles = ObstacleManager(grid)

        self.step_count = 0
        self.last_projection = None

    @classmethod
    def create(cls, density, num_x, num_y, h, over_relaxation=1.9):
        """ Builds the Grid and the stepper in one go. """
        return cls(Grid(density, num_x, num_y, h), over_relaxation=over_relaxation)

    # --- Obstacles ---
    def apply_obstacle(self, obstacle):
        self.obstacles.add(obstacle)

    def clear_obstacles(self):
        self.obstacles.clear()

    # --- Sampling ---
    def sample(self, kind, x, y):
        return self.grid.sample(kind, x, y)

    # --- Time Stepping ---
    def integrate(self, dt, gravity):
        """ Adds gravity to every v face between two open cells. """
        if gravity == 0.0:
            return
        s = self.grid.s
        open_faces = (s[1:, 1:-1] != 0.0) & (s[1:, :-2] != 0.0)
        v = self.grid.v[1:, 1:-1]
        v[open_faces] += gravity * dt

    def step(self, dt, gravity=0.0, iterations=40, over_relaxation=None, inflow_velocity=0.0):
        """
        Advances the flow by one time step.

        Returns:
            ProjectionResult of this step's pressure solve
        """
        g = self.grid

        self.integrate(dt, gravity)
        self.obstacles.apply_porous_resistance()

        g.reset_pressure()
        result = self.projection.solve(g, dt, iterations, over_relaxation)

        self.boundaries.extrapolate(g)

        self.advector.advect_velocity(g, dt)
        self.advector.advect_scalar(g, dt)

        self.boundaries.enforce(g, inflow_velocity)
        self.obstacles.enforce_no_slip()

        self.step_count += 1
        self.last_projection = result

        logger.debug("Step %d: %d sweeps, max dp=%.3e",
                     self.step_count, result.iterations, result.max_pressure_change)
        return result

    def apply_boundary_layer_heuristic(self, inflow_velocity):
        self.boundaries.apply_boundary_layer_heuristic(self.grid, inflow_velocity)

    # --- Diagnostics ---
    def physics_check(self, inflow_velocity):
        """ Field maxima, mass conservation residual and a Reynolds estimate. """
        g = self.grid
        length = g.num_y * g.h
        return PhysicsCheck(
            max_u=float(np.max(np.abs(g.u))),
            max_v=float(np.max(np.abs(g.v))),
            max_p=float(np.max(np.abs(g.p))),
            max_divergence=g.max_divergence(),
            reynolds=abs(inflow_velocity) * length / AIR_KINEMATIC_VISCOSITY,
        )
