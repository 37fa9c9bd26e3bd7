"""
ex01_wind_tunnel.py
-------------------
Virtual Wind Tunnel: flow past a solid cylinder.
Features:
  1. Staggered MAC grid with inflow / outflow / no-slip walls.
  2. Gauss-Seidel SOR pressure projection (Numba).
  3. Dye (smoke) transport and pressure field plots.
"""
import numpy as np
import matplotlib.pyplot as plt

from snapcore import SimulationDisplay, setup_logging
from snapflow.config import SceneConfig
from snapflow.scene import Scene, SceneType, grid_for_domain


def plot_fields(grid):
    print("\n--- Plotting ---")
    X, Y = grid.cell_centers()
    smoke = np.where(grid.s == 0.0, np.nan, grid.m)
    pressure = np.where(grid.s == 0.0, np.nan, grid.p)

    # Cell-centred velocity for the streamlines
    uc = 0.5 * (grid.u[:-1, :] + grid.u[1:, :])
    vc = 0.5 * (grid.v[:, :-1] + grid.v[:, 1:])

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 8))

    img1 = ax1.pcolormesh(X, Y, smoke, cmap='gray', shading='auto')
    ax1.set_title("Dye Concentration")
    ax1.set_aspect('equal')
    plt.colorbar(img1, ax=ax1)

    img2 = ax2.pcolormesh(X, Y, pressure, cmap='RdBu_r', shading='auto')
    ax2.streamplot(X[:-1, 1:-1].T, Y[:-1, 1:-1].T, uc[:, 1:-1].T, vc[:-1, 1:].T,
                   color='k', density=1.2, linewidth=0.5)
    ax2.set_title("Pressure [Pa] + Streamlines")
    ax2.set_aspect('equal')
    plt.colorbar(img2, ax=ax2)

    plt.tight_layout()
    plt.show()


def run():
    setup_logging()

    # 1. Setup
    config = SceneConfig(inflow_velocity=2.0)
    grid = grid_for_domain(2.0, 1.0, 80, config.density)
    scene = Scene.create(SceneType.WIND_TUNNEL, grid, config, obstacle_radius=0.15)

    disp = SimulationDisplay("Wind Tunnel (Cylinder)",
                             f"Grid {grid.num_x}x{grid.num_y} | dt={config.dt:.4f} | U={config.inflow_velocity}")
    disp.header()

    # 2. Run
    steps = 600
    disp.section("Solver")
    disp.setup_stats_columns(["Step", "Sweeps", "MaxDiv", "Max|u|"])

    for n in range(steps + 1):
        result = scene.simulate()
        if n % 100 == 0:
            check = scene.stepper.physics_check(config.inflow_velocity)
            disp.log_stats(n, result.iterations, check.max_divergence, check.max_u)

    check = scene.stepper.physics_check(config.inflow_velocity)
    print(f"\n   Reynolds (estimate): {check.reynolds:.0f}")
    disp.success()

    # 3. Visualization
    plot_fields(grid)


if __name__ == "__main__":
    run()
