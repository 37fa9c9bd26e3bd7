"""
snapflow/scene.py
-----------------
Ready-made tunnel setups and the frame runner.

A scene couples a SimulationStepper with a SceneConfig and decides
which extras run around each step (the near-wall heuristic only runs
in wind tunnel scenes, every `boundary_layer_interval` steps).
"""
import logging
from enum import Enum

from .config import SceneConfig
from .grid import Grid
from .obstacles import Obstacle, Radiator
from .solver import SimulationStepper

logger = logging.getLogger(__name__)


class SceneType(Enum):
    TANK = 0
    WIND_TUNNEL = 1
    RADIATOR_TUNNEL = 4


def grid_for_domain(domain_width, domain_height, resolution, density):
    """ Grid with `resolution` interior cells across the domain height. """
    h = domain_height / resolution
    num_x = int(domain_width / h)
    num_y = int(domain_height / h)
    return Grid(density, num_x, num_y, h)


# =============================================================================
# Initial Conditions
# =============================================================================

def _solid_walls(grid):
    """ Top and bottom ghost rows become solid, no-slip walls. """
    for j in (0, grid.num_y - 1):
        grid.u[:, j] = 0.0
        grid.v[:, j] = 0.0
        grid.s[:, j] = 0.0


def setup_tank(grid):
    """ Fluid at rest with a dye column over the first quarter. """
    grid.m[1:grid.num_x // 4, 1:-1] = 1.0
    logger.info("Setting up tank scenario")


def setup_wind_tunnel(grid, inflow_velocity, obstacle_radius=0.15):
    """
    Inflow on the left, solid walls seeded with a small suction velocity,
    dye at the inlet. Returns the cylinder to place at 40% of the length.
    """
    logger.info("Setting up wind tunnel with boundary layer control")

    grid.u[0, 1:-1] = inflow_velocity
    grid.u[1, 1:-1] = inflow_velocity
    grid.m[0, 1:-1] = 1.0
    grid.m[1, 1:-1] = 1.0

    _solid_walls(grid)

    # Suction seed next to the walls
    if grid.num_y > 3:
        grid.v[:, -2] = -0.1
        grid.v[:, -3] = -0.05
        grid.v[:, 1] = 0.1
        grid.v[:, 2] = 0.05

    return Obstacle.cylinder(grid.width * 0.4, grid.height * 0.5, obstacle_radius)


def setup_clean_wind_tunnel(grid, inflow_velocity):
    """ Uniform flow everywhere including the inlet columns, dye at the inlet, no obstacle. """
    logger.info("Setting up clean wind tunnel with boundary layer control")

    grid.u[:, 1:-1] = inflow_velocity
    grid.v[:, 1:-1] = 0.0
    grid.s[:, 1:-1] = 1.0

    grid.m[0, 1:-1] = 1.0
    grid.m[1, 1:-1] = 1.0
    grid.m[2, 1:-1] = 0.8

    _solid_walls(grid)


# =============================================================================
# Runner
# =============================================================================

class Scene:
    def __init__(self, stepper, scene_type, config):
        self.stepper = stepper
        self.scene_type = scene_type
        self.config = config
        self.paused = False

    @property
    def grid(self):
        return self.stepper.grid

    @classmethod
    def create(cls, scene_type, grid, config=None, obstacle_radius=0.15):
        """
        Initialises `grid` for the given scene type and wraps it in a Scene.
        """
        config = config or SceneConfig()
        stepper = SimulationStepper(grid, over_relaxation=config.over_relaxation)

        if scene_type is SceneType.TANK:
            setup_tank(grid)
        elif scene_type is SceneType.WIND_TUNNEL:
            cylinder = setup_wind_tunnel(grid, config.inflow_velocity, obstacle_radius)
            stepper.apply_obstacle(cylinder)
        elif scene_type is SceneType.RADIATOR_TUNNEL:
            setup_clean_wind_tunnel(grid, config.inflow_velocity)
        else:
            raise ValueError(f"Unknown scene type: {scene_type!r}")

        return cls(stepper, scene_type, config)

    @property
    def uses_boundary_layer_control(self):
        return self.scene_type in (SceneType.WIND_TUNNEL, SceneType.RADIATOR_TUNNEL)

    def simulate(self):
        """ Runs one frame. Returns the ProjectionResult, or None while paused. """
        if self.paused:
            return None

        c = self.config
        result = self.stepper.step(c.dt, c.gravity, c.num_iters,
                                   c.over_relaxation, c.inflow_velocity)

        if self.uses_boundary_layer_control and \
                self.stepper.step_count % c.boundary_layer_interval == 0:
            self.stepper.apply_boundary_layer_heuristic(c.inflow_velocity)

        return result

    def run(self, num_steps, callback=None):
        """
        Runs num_steps frames. callback(step_index, result) is called after each.
        """
        result = None
        for k in range(num_steps):
            result = self.simulate()
            if callback is not None:
                callback(k, result)
        return result


def build_radiator_scene(config=None, radiator=None, domain=(4.0, 2.0), resolution=250):
    """
    Clean tunnel with a radiator at the centre.
    Defaults: 10 m/s inflow, a 0.05 x 0.3 core at 15 deg, porosity 0.9, resistance 1000.
    """
    if config is None:
        config = SceneConfig(inflow_velocity=10.0)

    grid = grid_for_domain(domain[0], domain[1], resolution, config.density)
    scene = Scene.create(SceneType.RADIATOR_TUNNEL, grid, config)

    if radiator is None:
        radiator = Radiator.from_degrees(grid.width * 0.5, grid.height * 0.5,
                                         width=0.05, height=0.3, angle_degrees=15.0,
                                         porosity=0.9, resistance=1000.0)
    scene.stepper.apply_obstacle(radiator)
    return scene, radiator
