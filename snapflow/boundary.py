"""
snapflow/boundary.py
--------------------
Wind tunnel boundary conditions on the ghost layer.

    Bottom / Top : walls (no penetration, then no-slip after advection)
    Left         : inflow (Dirichlet u)
    Right        : outflow (zero gradient)

extrapolate() runs after the projection, enforce() after advection.
"""

# Near-wall heuristic tuning. These are empirical stabilisation values,
# not the output of any boundary-layer model.
WALL_BAND = 3
WALL_RELAX = 0.2
WALL_PROFILE_DEFICIT = 0.1
WALL_SUCTION = 0.05
CORE_RELAX = 0.05
CORE_DEVELOPMENT_CELLS = 10


class BoundaryEnforcer:

    def extrapolate(self, grid):
        """
        Post-projection pass. Walls get zero normal velocity and copy the
        tangential velocity from one row in. The inlet keeps any non-zero u,
        the outlet copies from one column in.
        """
        u, v = grid.u, grid.v

        # --- Bottom / Top ---
        u[:, 0] = u[:, 1]
        v[:, 0] = 0.0
        u[:, -1] = u[:, -2]
        v[:, -1] = 0.0

        # --- Left (inflow preserved where set) ---
        unset = u[0, :] == 0.0
        u[0, unset] = u[1, unset]
        v[0, :] = v[1, :]

        # --- Right (outflow) ---
        u[-1, :] = u[-2, :]
        v[-1, :] = v[-2, :]

    def enforce(self, grid, inflow_velocity):
        """
        Post-advection pass. Advection may overwrite ghost faces, so the
        inflow, the no-slip walls and the outflow copy are imposed again,
        and any face bordering a solid cell is zeroed.
        """
        u, v = grid.u, grid.v

        # --- Inflow on the first two columns ---
        u[0, 1:-1] = inflow_velocity
        u[1, 1:-1] = inflow_velocity

        # --- No-slip walls ---
        u[:, 0] = 0.0
        v[:, 0] = 0.0
        u[:, -1] = 0.0
        v[:, -1] = 0.0

        # --- Outflow (zero gradient) ---
        u[-1, :] = u[-2, :]
        v[-1, :] = v[-2, :]

        self.zero_solid_faces(grid)

    def zero_solid_faces(self, grid):
        """ Every u/v face shared with an s == 0 cell carries no flow. """
        solid = grid.s == 0.0
        grid.u[1:, :][solid[:-1, :] | solid[1:, :]] = 0.0
        grid.v[:, 1:][solid[:, :-1] | solid[:, 1:]] = 0.0

    def apply_boundary_layer_heuristic(self, grid, inflow_velocity):
        """
        Empirical near-wall correction for wind tunnel scenes.

        Relaxes the three rows next to each wall toward a slightly reduced
        inflow profile, injects a small constant suction velocity toward the
        walls, and nudges the core region back toward uniform inflow.
        This is tuning, not a physical boundary-layer model.
        """
        u, v = grid.u, grid.v
        num_x, num_y = grid.num_x, grid.num_y

        if num_y > 4:
            cols = slice(2, num_x - 2)

            # Top wall
            for offset in range(1, WALL_BAND + 1):
                j = num_y - 1 - offset
                blend = 1.0 - offset / WALL_BAND
                target = inflow_velocity * (1.0 - WALL_PROFILE_DEFICIT * blend)
                u[cols, j] = u[cols, j] * (1.0 - WALL_RELAX) + target * WALL_RELAX
                v[cols, j] = -WALL_SUCTION * blend

            # Bottom wall
            for offset in range(1, WALL_BAND + 1):
                j = offset
                blend = 1.0 - offset / WALL_BAND
                target = inflow_velocity * (1.0 - WALL_PROFILE_DEFICIT * blend)
                u[cols, j] = u[cols, j] * (1.0 - WALL_RELAX) + target * WALL_RELAX
                v[cols, j] = WALL_SUCTION * blend

        # Core flow, leaving a development length before the outlet
        core_rows = slice(num_y // 4, 3 * num_y // 4)
        core_cols = slice(2, max(2, num_x - CORE_DEVELOPMENT_CELLS))
        u[core_cols, core_rows] = u[core_cols, core_rows] * (1.0 - CORE_RELAX) + inflow_velocity * CORE_RELAX

        # Wall faces stay no-slip; suction only lands on fluid-fluid faces
        self.zero_solid_faces(grid)
