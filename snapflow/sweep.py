"""
snapflow/sweep.py
-----------------
Radiator angle sweep: one fresh tunnel per angle, run to a (quasi)
steady state, then analysed. The best angle trades cooling against fan
power with score = efficiency / (1 + fan_power / 1000).
"""
import logging
import time

from .analysis import PerformanceAnalyzer
from .config import SceneConfig
from .obstacles import Radiator
from .scene import Scene, SceneType, grid_for_domain

logger = logging.getLogger(__name__)

DEFAULT_ANGLES = (0.0, 15.0, 30.0, 45.0, 60.0, 75.0, 90.0)


def radiator_score(metrics):
    return metrics.cooling_efficiency / (1.0 + metrics.fan_power_required / 1000.0)


def best_angle(metrics_list):
    """
    Returns (angle_degrees, score) of the best record.
    Ties keep the first angle. Raises ValueError on an empty list.
    """
    if not metrics_list:
        raise ValueError("best_angle needs at least one metrics record.")

    best = None
    best_score = None
    for m in metrics_list:
        score = radiator_score(m)
        if best_score is None or score > best_score:
            best, best_score = m, score
    return best.angle_degrees, best_score


def radiator_angle_sweep(angles=DEFAULT_ANGLES, steps_per_angle=1000, config=None,
                         domain=(2.0, 1.0), resolution=100, width=0.15, height=0.3,
                         porosity=0.8, resistance=100.0, position=0.4,
                         analyzer=None, log_every=200):
    """
    Runs the sweep and returns the analyzer holding one record per angle.

    Args:
        angles (sequence of float): Radiator angles [deg]
        steps_per_angle (int): Frames simulated before analysis
        config (SceneConfig): Run settings (defaults to 5 m/s inflow)
        domain (tuple): (width, height) of the tunnel [m]
        resolution (int): Cells across the tunnel height
        width, height (float): Radiator core size [m]
        porosity, resistance (float): Radiator media
        position (float): Radiator centre as a fraction of the tunnel length
        analyzer (PerformanceAnalyzer, optional): Collects the results
        log_every (int): Progress log cadence in steps
    """
    config = config or SceneConfig(inflow_velocity=5.0)
    analyzer = analyzer or PerformanceAnalyzer()

    for angle in angles:
        logger.info("Analyzing angle: %.1f deg", angle)

        grid = grid_for_domain(domain[0], domain[1], resolution, config.density)
        scene = Scene.create(SceneType.RADIATOR_TUNNEL, grid, config)

        radiator = Radiator.from_degrees(grid.width * position, grid.height * 0.5,
                                         width, height, angle, porosity, resistance)
        scene.stepper.apply_obstacle(radiator)
        analyzer.add_radiator(radiator)

        start = time.time()
        for step in range(steps_per_angle):
            scene.simulate()
            if log_every and step % log_every == 0:
                logger.info("  Step %d/%d (%.1fs)", step, steps_per_angle, time.time() - start)

        metrics = analyzer.analyze(grid, radiator)
        logger.info("  Mass flow: %.4f kg/s | Pressure drop: %.2f Pa | Fan power: %.2f W",
                    metrics.mass_flow_rate, metrics.pressure_drop, metrics.fan_power_required)

    return analyzer
