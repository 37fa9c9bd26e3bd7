"""
snapflow/numerics.py
--------------------
High-Performance Kernels using Numba JIT compilation.
All loops over the staggered grid live here; the Python classes only
hold state and call into these functions with raw NumPy arrays.

Array convention: every field is indexed [i, j] with i along x and j along y.
"""
import math
import numpy as np
from numba import njit

# Grid coordinates closer than this to an integer are treated as exact nodes
_NODE_SNAP = 1e-9


@njit(cache=True)
def _snap_to_node(g):
    r = float(math.floor(g + 0.5))
    if abs(g - r) < _NODE_SNAP:
        return r
    return g


@njit(cache=True)
def bilinear_sample(f, x, y, dx, dy, h):
    """
    Bilinear interpolation of a staggered field at physical (x, y).

    (dx, dy) is the sub-grid offset of the field: (0, h/2) for u,
    (h/2, 0) for v and (h/2, h/2) for cell-centred scalars.
    Coordinates are clamped into [h, (N-1)*h] so no read leaves the array.
    """
    num_x = f.shape[0]
    num_y = f.shape[1]
    h1 = 1.0 / h

    x = min(max(x, h), (num_x - 1) * h)
    y = min(max(y, h), (num_y - 1) * h)

    gx = _snap_to_node((x - dx) * h1)
    gy = _snap_to_node((y - dy) * h1)

    x0 = min(int(math.floor(gx)), num_x - 1)
    tx = gx - x0
    x1 = min(x0 + 1, num_x - 1)

    y0 = min(int(math.floor(gy)), num_y - 1)
    ty = gy - y0
    y1 = min(y0 + 1, num_y - 1)

    sx = 1.0 - tx
    sy = 1.0 - ty

    return (sx * sy * f[x0, y0] +
            tx * sy * f[x1, y0] +
            tx * ty * f[x1, y1] +
            sx * ty * f[x0, y1])


@njit(fastmath=True, cache=True)
def pressure_projection_kernel(u, v, p, s, num_iters, dt, over_relaxation,
                               density, h, tolerance, min_iters):
    """
    Gauss-Seidel / SOR sweep enforcing zero divergence.
    Updates u, v, p in place. Later cells read values already updated
    by earlier cells of the same sweep.

    Returns:
        (iterations_run, max_pressure_change_of_last_sweep)
    """
    num_x = s.shape[0]
    num_y = s.shape[1]
    cp = density * h / dt

    max_change = 0.0
    iterations = 0

    for it in range(num_iters):
        max_change = 0.0

        for i in range(1, num_x - 1):
            for j in range(1, num_y - 1):
                if s[i, j] == 0.0:
                    continue

                sx0 = s[i - 1, j]
                sx1 = s[i + 1, j]
                sy0 = s[i, j - 1]
                sy1 = s[i, j + 1]
                s_sum = sx0 + sx1 + sy0 + sy1

                if s_sum == 0.0:
                    continue

                div = u[i + 1, j] - u[i, j] + v[i, j + 1] - v[i, j]

                corr = -div / s_sum
                corr *= over_relaxation

                change = cp * corr
                p[i, j] += change
                if abs(change) > max_change:
                    max_change = abs(change)

                u[i, j] -= sx0 * corr
                u[i + 1, j] += sx1 * corr
                v[i, j] -= sy0 * corr
                v[i, j + 1] += sy1 * corr

        iterations = it + 1

        # Early exit only after the first few sweeps
        if it > min_iters and max_change < tolerance:
            break

    return iterations, max_change


@njit(fastmath=True, cache=True)
def advect_velocity_kernel(u, v, s, new_u, new_v, dt, h):
    """
    Semi-Lagrangian transport of both velocity components.
    Reads only u, v (pre-advection); writes only new_u, new_v.
    Faces that are not advected keep whatever new_u/new_v already hold.
    """
    num_x = s.shape[0]
    num_y = s.shape[1]
    h2 = 0.5 * h

    for i in range(1, num_x):
        for j in range(1, num_y):
            # --- u component (vertical face between cells i-1 and i) ---
            if s[i, j] != 0.0 and s[i - 1, j] != 0.0 and j < num_y - 1:
                x = i * h
                y = j * h + h2
                uu = u[i, j]
                vv = (v[i - 1, j] + v[i, j] + v[i - 1, j + 1] + v[i, j + 1]) * 0.25
                new_u[i, j] = bilinear_sample(u, x - dt * uu, y - dt * vv, 0.0, h2, h)

            # --- v component (horizontal face between cells j-1 and j) ---
            if s[i, j] != 0.0 and s[i, j - 1] != 0.0 and i < num_x - 1:
                x = i * h + h2
                y = j * h
                uu = (u[i, j - 1] + u[i, j] + u[i + 1, j - 1] + u[i + 1, j]) * 0.25
                vv = v[i, j]
                new_v[i, j] = bilinear_sample(v, x - dt * uu, y - dt * vv, h2, 0.0, h)


@njit(fastmath=True, cache=True)
def advect_scalar_kernel(u, v, s, m, new_m, dt, h):
    """
    Semi-Lagrangian transport of a cell-centred scalar (dye).
    The backtrace uses the average of the four faces around the cell.
    """
    num_x = s.shape[0]
    num_y = s.shape[1]
    h2 = 0.5 * h

    for i in range(1, num_x - 1):
        for j in range(1, num_y - 1):
            if s[i, j] != 0.0:
                x = i * h + h2
                y = j * h + h2
                uu = (u[i, j] + u[i + 1, j]) * 0.5
                vv = (v[i, j] + v[i, j + 1]) * 0.5
                new_m[i, j] = bilinear_sample(m, x - dt * uu, y - dt * vv, h2, h2, h)


def divergence(u, v):
    """
    Cell divergence u[i+1,j] - u[i,j] + v[i,j+1] - v[i,j] for every cell.
    Ghost cells (outer ring) are returned as 0.
    """
    div = np.zeros_like(u)
    div[1:-1, 1:-1] = (u[2:, 1:-1] - u[1:-1, 1:-1] +
                       v[1:-1, 2:] - v[1:-1, 1:-1])
    return div
