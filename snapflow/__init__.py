"""
snapflow: Staggered-grid incompressible flow for virtual wind tunnels.
"""
from .grid import Grid, GridError, FieldKind
from .obstacles import (Obstacle, ObstacleError, Radiator, ObstacleManager,
                        Circle, Cylinder, Rectangle, Airfoil)
from .projection import PressureProjectionSolver, ProjectionResult
from .advection import Advector
from .boundary import BoundaryEnforcer
from .analysis import PerformanceAnalyzer, PerformanceMetrics
from .solver import SimulationStepper
from .config import SceneConfig
from .scene import Scene, SceneType, build_radiator_scene

__version__ = "0.1.0"
