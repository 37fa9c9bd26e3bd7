"""
ex02_radiator_analysis.py
-------------------------
Single radiator in a clean wind tunnel.
The core is a porous rectangle (Darcy-Forchheimer resistance) tilted
at 15 deg. After the flow settles, the analyzer reports mass flow,
pressure drop, drag/lift and the fan power needed.
Results are written to output/radiator_15deg.json.
"""
import os

import numpy as np
import matplotlib.pyplot as plt

from snapcore import SimulationDisplay, setup_logging
from snapflow.analysis import PerformanceAnalyzer
from snapflow.config import SceneConfig
from snapflow.io import save_metrics
from snapflow.scene import build_radiator_scene


def plot_radiator(grid, radiator):
    X, Y = grid.cell_centers()
    speed = np.hypot(0.5 * (grid.u[:-1, :] + grid.u[1:, :])[:, :-1],
                     0.5 * (grid.v[:, :-1] + grid.v[:, 1:])[:-1, :])

    # Outline of the core
    w, h = radiator.width, radiator.height
    corners = [(-w/2, -h/2), (w/2, -h/2), (w/2, h/2), (-w/2, h/2), (-w/2, -h/2)]
    outline = np.array([radiator.to_global(lx, ly) for lx, ly in corners])

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))

    img1 = ax1.pcolormesh(X[:-1, :-1], Y[:-1, :-1], speed, cmap='turbo', shading='auto')
    ax1.plot(outline[:, 0], outline[:, 1], 'w-', lw=1.5)
    ax1.set_title("Velocity Magnitude [m/s]")
    ax1.set_aspect('equal')
    plt.colorbar(img1, ax=ax1)

    img2 = ax2.pcolormesh(X, Y, grid.p, cmap='RdBu_r', shading='auto')
    ax2.plot(outline[:, 0], outline[:, 1], 'k-', lw=1.5)
    ax2.set_title("Pressure [Pa]")
    ax2.set_aspect('equal')
    plt.colorbar(img2, ax=ax2)

    plt.tight_layout()
    plt.show()


def run():
    setup_logging()

    # 1. Setup
    config = SceneConfig(inflow_velocity=10.0)
    scene, radiator = build_radiator_scene(config, domain=(4.0, 2.0), resolution=100)
    grid = scene.grid

    disp = SimulationDisplay("Radiator Analysis",
                             f"Grid {grid.num_x}x{grid.num_y} | {radiator!r}")
    disp.header()

    # 2. Run to a quasi-steady state
    steps = 1000
    disp.section("Solver")
    disp.setup_stats_columns(["Step", "Sweeps", "MaxDiv", "Max|p|"])

    def report(k, result):
        if k % 200 == 0:
            check = scene.stepper.physics_check(config.inflow_velocity)
            disp.log_stats(k, result.iterations, check.max_divergence, check.max_p)

    scene.run(steps, callback=report)

    # 3. Analysis
    disp.section("Performance")
    analyzer = PerformanceAnalyzer()
    analyzer.add_radiator(radiator)
    metrics = analyzer.analyze(grid, radiator)
    print(analyzer.summary())

    out_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "output")
    save_metrics(os.path.join(out_dir, "radiator_15deg.json"), metrics)
    disp.success()

    plot_radiator(grid, radiator)


if __name__ == "__main__":
    run()
