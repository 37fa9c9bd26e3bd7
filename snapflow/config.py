"""
snapflow/config.py
------------------
Physical constants and run settings for the wind tunnel solver.
"""

# --- Fluid Properties ---
AIR_VISCOSITY = 1.8e-5          # Dynamic viscosity of air [Pa s]
AIR_KINEMATIC_VISCOSITY = 1.5e-5  # [m^2/s], Reynolds number estimate only

# --- Porous Media (Darcy-Forchheimer / Ergun) ---
ERGUN_COEFFICIENT = 1.75
MIN_PERMEABILITY = 1e-10
MIN_RESISTANCE_VELOCITY = 1e-6

# --- Pressure Projection ---
PROJECTION_TOLERANCE = 1e-6
PROJECTION_MIN_ITERATIONS = 3


class SceneConfig:
    def __init__(self, dt=1.0 / 60.0, gravity=0.0, num_iters=40,
                 over_relaxation=1.9, inflow_velocity=5.0,
                 boundary_layer_interval=5, density=1000.0):
        """
        Settings shared by the scene builders and the step runner.

        Args:
            dt (float): Time step [s]
            gravity (float): Vertical body acceleration [m/s^2]
            num_iters (int): Iteration cap of the pressure solver
            over_relaxation (float): SOR factor, must lie in (0, 2)
            inflow_velocity (float): Left boundary velocity [m/s]
            boundary_layer_interval (int): Apply the near-wall heuristic every N steps
            density (float): Fluid density [kg/m^3]
        """
        if dt <= 0:
            raise ValueError("SceneConfig dt must be positive.")
        if num_iters < 1:
            raise ValueError("SceneConfig num_iters must be at least 1.")
        if not 0.0 < over_relaxation < 2.0:
            raise ValueError("SceneConfig over_relaxation must lie in (0, 2).")
        if boundary_layer_interval < 1:
            raise ValueError("SceneConfig boundary_layer_interval must be at least 1.")
        if density <= 0:
            raise ValueError("SceneConfig density must be positive.")

        self.dt = float(dt)
        self.gravity = float(gravity)
        self.num_iters = int(num_iters)
        self.over_relaxation = float(over_relaxation)
        self.inflow_velocity = float(inflow_velocity)
        self.boundary_layer_interval = int(boundary_layer_interval)
        self.density = float(density)

    def __repr__(self):
        return (f"SceneConfig(dt={self.dt:.5f}, gravity={self.gravity}, "
                f"num_iters={self.num_iters}, over_relaxation={self.over_relaxation}, "
                f"inflow_velocity={self.inflow_velocity}, "
                f"boundary_layer_interval={self.boundary_layer_interval}, "
                f"density={self.density})")
