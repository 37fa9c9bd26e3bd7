"""
ex03_radiator_sweep.py
----------------------
Radiator Angle Optimization.
Runs a fresh tunnel for every angle from 0 to 90 deg, then picks the
angle with the best trade-off between cooling and fan power.
"""
import os

import matplotlib.pyplot as plt

from snapcore import SimulationDisplay, setup_logging
from snapflow.config import SceneConfig
from snapflow.io import save_metrics
from snapflow.sweep import DEFAULT_ANGLES, best_angle, radiator_angle_sweep, radiator_score


def plot_sweep(metrics):
    angles = [m.angle_degrees for m in metrics]

    fig, axes = plt.subplots(2, 2, figsize=(11, 8))
    panels = [
        ("mass_flow_rate", "Mass Flow [kg/s]"),
        ("pressure_drop", "Pressure Drop [Pa]"),
        ("drag_force", "Drag [N]"),
        ("fan_power_required", "Fan Power [W]"),
    ]
    for ax, (field, label) in zip(axes.flat, panels):
        ax.plot(angles, [getattr(m, field) for m in metrics], 'o-')
        ax.set_xlabel("Radiator Angle [deg]")
        ax.set_ylabel(label)
        ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.show()


def run():
    setup_logging()

    config = SceneConfig(inflow_velocity=5.0)
    steps = 1000

    disp = SimulationDisplay("Radiator Sweep",
                             f"{len(DEFAULT_ANGLES)} angles | {steps} steps each | U={config.inflow_velocity}")
    disp.header()

    # 1. Sweep
    disp.section("Sweep")
    analyzer = radiator_angle_sweep(DEFAULT_ANGLES, steps_per_angle=steps, config=config)
    metrics = analyzer.metrics_history

    # 2. Table
    disp.section("Results")
    disp.setup_stats_columns(["Angle", "MassFlow", "dP", "FanPower", "Score"])
    for m in metrics:
        disp.log_stats(m.angle_degrees, m.mass_flow_rate, m.pressure_drop,
                       m.fan_power_required, radiator_score(m))

    angle, score = best_angle(metrics)
    print(f"\n   Optimal angle: {angle:.1f} deg (score {score:.4f})")

    out_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "output")
    save_metrics(os.path.join(out_dir, "radiator_sweep.json"), metrics)
    disp.success()

    plot_sweep(metrics)


if __name__ == "__main__":
    run()
