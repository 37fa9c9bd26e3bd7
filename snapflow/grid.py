"""
snapflow/grid.py
----------------
Staggered (MAC) grid holding the wind tunnel fields.

Layout (one ghost layer on every side, arrays indexed [i, j]):
    u[i, j] : vertical face between cells (i-1, j) and (i, j)
    v[i, j] : horizontal face between cells (i, j-1) and (i, j)
    p, s, m : cell centres
"""
from enum import Enum

import numpy as np

from .numerics import bilinear_sample, divergence


class GridError(ValueError):
    pass


class FieldKind(Enum):
    U = 1
    V = 2
    SMOKE = 3
    PRESSURE = 4


# Sub-grid placement of each field: (x offset, y offset) in cells, backing array
SAMPLE_OFFSETS = {
    FieldKind.U:        (0.0, 0.5, "u"),
    FieldKind.V:        (0.5, 0.0, "v"),
    FieldKind.SMOKE:    (0.5, 0.5, "m"),
    FieldKind.PRESSURE: (0.5, 0.5, "p"),
}


class Grid:
    def __init__(self, density, num_x, num_y, h):
        """
        Creates the field storage for an (num_x x num_y) interior.
        Two ghost cells are added per axis, so self.num_x == num_x + 2.

        Args:
            density (float): Fluid density [kg/m^3]
            num_x (int): Interior cells along x
            num_y (int): Interior cells along y
            h (float): Cell size [m]
        """
        if int(num_x) != num_x or int(num_y) != num_y:
            raise GridError(f"Grid dimensions must be integers, got {num_x} x {num_y}.")
        if num_x < 1 or num_y < 1:
            raise GridError(f"Grid needs at least one interior cell per axis, got {num_x} x {num_y}.")
        if not h > 0:
            raise GridError(f"Grid spacing must be positive, got {h}.")
        if not density > 0:
            raise GridError(f"Fluid density must be positive, got {density}.")

        self._density = float(density)
        self._num_x = int(num_x) + 2
        self._num_y = int(num_y) + 2
        self._h = float(h)

        shape = (self._num_x, self._num_y)

        # --- Velocity (staggered) ---
        self.u = np.zeros(shape)
        self.v = np.zeros(shape)

        # --- Cell-centred ---
        self.p = np.zeros(shape)
        self.s = np.ones(shape)   # 1 = open, 0 = solid, between = porous
        self.m = np.zeros(shape)

    # --- Immutable metadata ---
    @property
    def density(self):
        return self._density

    @property
    def num_x(self):
        return self._num_x

    @property
    def num_y(self):
        return self._num_y

    @property
    def h(self):
        return self._h

    @property
    def shape(self):
        return (self._num_x, self._num_y)

    @property
    def width(self):
        """ Physical extent along x, ghost cells included. """
        return self._num_x * self._h

    @property
    def height(self):
        """ Physical extent along y, ghost cells included. """
        return self._num_y * self._h

    # --- Field Access ---
    def field(self, kind):
        """ Returns the backing array of a FieldKind. """
        try:
            return getattr(self, SAMPLE_OFFSETS[kind][2])
        except KeyError:
            raise ValueError(f"Unknown field kind: {kind!r}") from None

    def node_position(self, kind, i, j):
        """ Physical (x, y) of the storage location [i, j] of a field. """
        ox, oy, _ = SAMPLE_OFFSETS[kind]
        return (i + ox) * self._h, (j + oy) * self._h

    def cell_centers(self):
        """ Meshgrid (X, Y) of all cell centres, shape == self.shape. """
        xs = (np.arange(self._num_x) + 0.5) * self._h
        ys = (np.arange(self._num_y) + 0.5) * self._h
        return np.meshgrid(xs, ys, indexing="ij")

    def u_face_positions(self):
        xs = np.arange(self._num_x) * self._h
        ys = (np.arange(self._num_y) + 0.5) * self._h
        return np.meshgrid(xs, ys, indexing="ij")

    def v_face_positions(self):
        xs = (np.arange(self._num_x) + 0.5) * self._h
        ys = np.arange(self._num_y) * self._h
        return np.meshgrid(xs, ys, indexing="ij")

    def in_domain(self, x, y):
        return 0.0 <= x < self.width and 0.0 <= y < self.height

    def sample(self, kind, x, y):
        """
        Bilinear sample of a field at an arbitrary point.
        Read-only. Out-of-domain points return the boundary-clamped value.
        """
        if kind not in SAMPLE_OFFSETS:
            raise ValueError(f"Unknown field kind: {kind!r}")
        ox, oy, name = SAMPLE_OFFSETS[kind]
        f = getattr(self, name)
        return float(bilinear_sample(f, float(x), float(y), ox * self._h, oy * self._h, self._h))

    # --- Diagnostics ---
    def divergence(self):
        """ Per-cell divergence (ghost ring reported as 0). """
        return divergence(self.u, self.v)

    def max_divergence(self):
        """ Largest |divergence| over interior cells that are not solid. """
        div = self.divergence()[1:-1, 1:-1]
        open_cells = self.s[1:-1, 1:-1] != 0.0
        if not np.any(open_cells):
            return 0.0
        return float(np.max(np.abs(div[open_cells])))

    def reset_pressure(self):
        self.p.fill(0.0)

    def copy_fields(self):
        """ Independent copies of all mutable fields (for readers of a finished step). """
        return {
            "u": self.u.copy(),
            "v": self.v.copy(),
            "p": self.p.copy(),
            "s": self.s.copy(),
            "m": self.m.copy(),
        }

    def __repr__(self):
        return (f"Grid(num_x={self._num_x}, num_y={self._num_y}, "
                f"h={self._h}, density={self._density})")
