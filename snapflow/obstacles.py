"""
snapflow/obstacles.py
---------------------
Obstacles placed in the tunnel: shapes, porous media and the radiator.

Shapes are a closed set of small value classes (Circle, Cylinder,
Rectangle, Airfoil). Geometry queries dispatch on the shape type through
fixed tables, so adding a shape means adding one entry per table.

One pipeline serves every obstacle. A porosity of 0 (or an infinite
resistance) is the solid case; a porosity of 1 (or zero resistance) is
fully transparent; everything in between is porous. A Radiator is a
porous rectangle whose resistance follows the Darcy-Forchheimer law and
is re-applied every step.
"""
import logging
import math

import numpy as np

from .config import (AIR_VISCOSITY, ERGUN_COEFFICIENT, MIN_PERMEABILITY,
                     MIN_RESISTANCE_VELOCITY)

logger = logging.getLogger(__name__)


class ObstacleError(ValueError):
    pass


# =============================================================================
# Shapes
# =============================================================================

class Circle:
    __slots__ = ("radius",)

    def __init__(self, radius):
        if not radius > 0:
            raise ObstacleError(f"Circle radius must be positive, got {radius}.")
        self.radius = float(radius)

    def __repr__(self):
        return f"Circle(radius={self.radius})"


class Cylinder:
    """ A cylinder seen end-on. Same footprint as a Circle. """
    __slots__ = ("radius",)

    def __init__(self, radius):
        if not radius > 0:
            raise ObstacleError(f"Cylinder radius must be positive, got {radius}.")
        self.radius = float(radius)

    def __repr__(self):
        return f"Cylinder(radius={self.radius})"


class Rectangle:
    __slots__ = ("width", "height")

    def __init__(self, width, height):
        if not (width > 0 and height > 0):
            raise ObstacleError(f"Rectangle needs positive width and height, got {width} x {height}.")
        self.width = float(width)
        self.height = float(height)

    def __repr__(self):
        return f"Rectangle(width={self.width}, height={self.height})"


class Airfoil:
    """
    Symmetric four-digit style section. The leading edge sits at the
    obstacle origin and the chord runs along local +x.
    thickness is the maximum thickness as a fraction of chord (0.12 = 12%).
    """
    __slots__ = ("chord", "thickness")

    def __init__(self, chord, thickness):
        if not (chord > 0 and thickness > 0):
            raise ObstacleError(f"Airfoil needs positive chord and thickness, got {chord}, {thickness}.")
        self.chord = float(chord)
        self.thickness = float(thickness)

    def half_thickness(self, local_x):
        """ Half-thickness of the profile at chordwise position local_x (clipped to the chord). """
        xn = np.clip(np.asarray(local_x, dtype=np.float64) / self.chord, 0.0, 1.0)
        return 5.0 * self.thickness * self.chord * (
            0.2969 * np.sqrt(xn)
            - 0.1260 * xn
            - 0.3516 * xn**2
            + 0.2843 * xn**3
            - 0.1015 * xn**4
        )

    def __repr__(self):
        return f"Airfoil(chord={self.chord}, thickness={self.thickness})"


# --- Dispatch tables (local frame, NumPy-vectorised) ---

def _round_contains(shape, lx, ly):
    return lx * lx + ly * ly <= shape.radius * shape.radius

def _rectangle_contains(shape, lx, ly):
    return (np.abs(lx) <= shape.width * 0.5) & (np.abs(ly) <= shape.height * 0.5)

def _airfoil_contains(shape, lx, ly):
    on_chord = (lx >= 0.0) & (lx <= shape.chord)
    return on_chord & (np.abs(ly) <= shape.half_thickness(lx))


def _round_distance(shape, lx, ly):
    return np.abs(np.sqrt(lx * lx + ly * ly) - shape.radius)

def _rectangle_distance(shape, lx, ly):
    dx = np.maximum(np.abs(lx) - shape.width * 0.5, 0.0)
    dy = np.maximum(np.abs(ly) - shape.height * 0.5, 0.0)
    return np.sqrt(dx * dx + dy * dy)

def _airfoil_distance(shape, lx, ly):
    on_chord = (lx >= 0.0) & (lx <= shape.chord)
    dist = np.abs(np.abs(ly) - shape.half_thickness(lx))
    return np.where(on_chord, dist, np.inf)


def _round_extents(shape):
    return 2.0 * shape.radius, 2.0 * shape.radius

def _rectangle_extents(shape):
    return shape.width, shape.height

def _airfoil_extents(shape):
    return shape.chord, shape.thickness * shape.chord


_CONTAINS = {
    Circle: _round_contains,
    Cylinder: _round_contains,
    Rectangle: _rectangle_contains,
    Airfoil: _airfoil_contains,
}

_DISTANCE = {
    Circle: _round_distance,
    Cylinder: _round_distance,
    Rectangle: _rectangle_distance,
    Airfoil: _airfoil_distance,
}

_EXTENTS = {
    Circle: _round_extents,
    Cylinder: _round_extents,
    Rectangle: _rectangle_extents,
    Airfoil: _airfoil_extents,
}


def _unwrap(result):
    """ Returns plain Python scalars for scalar queries. """
    if np.ndim(result) == 0:
        return result.item() if hasattr(result, "item") else result
    return result


# =============================================================================
# Obstacles
# =============================================================================

class Obstacle:
    def __init__(self, x, y, shape, angle=0.0, is_porous=False, porosity=0.0, resistance=0.0):
        """
        Args:
            x, y (float): Centre (origin of the local frame) [m]
            shape: Circle, Cylinder, Rectangle or Airfoil
            angle (float): Rotation [rad], counter-clockwise
            is_porous (bool): Porous media instead of a solid body
            porosity (float): Open fraction in [0, 1]
            resistance (float): Flow resistance coefficient >= 0 (inf allowed)
        """
        if type(shape) not in _CONTAINS:
            raise ObstacleError(f"Unsupported obstacle shape: {shape!r}")
        if not 0.0 <= porosity <= 1.0:
            raise ObstacleError(f"Porosity must lie in [0, 1], got {porosity}.")
        if not resistance >= 0.0:
            raise ObstacleError(f"Resistance must be non-negative, got {resistance}.")

        self.x = float(x)
        self.y = float(y)
        self.angle = float(angle)
        self.shape = shape
        self.is_porous = bool(is_porous)
        self.porosity = float(porosity)
        self.resistance = float(resistance)

    # --- Constructors ---
    @classmethod
    def circle(cls, x, y, radius):
        return cls(x, y, Circle(radius))

    @classmethod
    def cylinder(cls, x, y, radius):
        return cls(x, y, Cylinder(radius))

    @classmethod
    def rectangle(cls, x, y, width, height, angle=0.0):
        return cls(x, y, Rectangle(width, height), angle=angle)

    @classmethod
    def airfoil(cls, x, y, chord, thickness, angle=0.0):
        return cls(x, y, Airfoil(chord, thickness), angle=angle)

    @classmethod
    def porous_rectangle(cls, x, y, width, height, angle, porosity, resistance):
        return cls(x, y, Rectangle(width, height), angle=angle,
                   is_porous=True, porosity=porosity, resistance=resistance)

    # --- Classification ---
    @property
    def is_solid(self):
        """ Blocks flow completely: non-porous, porosity 0 or infinite resistance. """
        return (not self.is_porous) or self.porosity == 0.0 or math.isinf(self.resistance)

    @property
    def is_transparent(self):
        """ Porous with nothing to resist: porosity 1 or zero resistance. """
        return (not self.is_solid) and (self.porosity >= 1.0 or self.resistance == 0.0)

    @property
    def uses_darcy_forchheimer(self):
        return False

    # --- Geometry ---
    def to_local(self, px, py):
        """ Global -> obstacle frame. Accepts scalars or arrays. """
        c = math.cos(self.angle)
        s = math.sin(self.angle)
        dx = np.asarray(px, dtype=np.float64) - self.x
        dy = np.asarray(py, dtype=np.float64) - self.y
        return dx * c + dy * s, -dx * s + dy * c

    def to_global(self, lx, ly):
        """ Obstacle frame -> global. """
        c = math.cos(self.angle)
        s = math.sin(self.angle)
        return self.x + lx * c - ly * s, self.y + lx * s + ly * c

    def contains_point(self, px, py):
        lx, ly = self.to_local(px, py)
        return _unwrap(_CONTAINS[type(self.shape)](self.shape, lx, ly))

    def distance_to_surface(self, px, py):
        lx, ly = self.to_local(px, py)
        return _unwrap(_DISTANCE[type(self.shape)](self.shape, lx, ly))

    def extents(self):
        """ (width, height) of the local bounding box. """
        return _EXTENTS[type(self.shape)](self.shape)

    def __repr__(self):
        kind = "porous" if self.is_porous else "solid"
        return (f"Obstacle({self.shape!r}, at=({self.x:.3f}, {self.y:.3f}), "
                f"angle={math.degrees(self.angle):.1f}deg, {kind}, "
                f"porosity={self.porosity}, resistance={self.resistance})")


class Radiator(Obstacle):
    def __init__(self, x, y, width, height, angle=0.0, porosity=0.9, resistance=1000.0):
        """
        Porous rectangular heat exchanger.
        angle = 0 means the core stands upright with its face normal along +x.
        Keeps its own list of analysed PerformanceMetrics.
        """
        super().__init__(x, y, Rectangle(width, height), angle=angle,
                         is_porous=True, porosity=porosity, resistance=resistance)
        self.metrics_history = []

    @classmethod
    def from_degrees(cls, x, y, width, height, angle_degrees, porosity=0.9, resistance=1000.0):
        return cls(x, y, width, height, math.radians(angle_degrees), porosity, resistance)

    @property
    def width(self):
        return self.shape.width

    @property
    def height(self):
        return self.shape.height

    @property
    def uses_darcy_forchheimer(self):
        return True

    @property
    def normal(self):
        """ Unit face normal (flow-through direction). """
        return math.cos(self.angle), math.sin(self.angle)

    def copy(self):
        """ Same geometry and media, fresh metrics history. """
        return Radiator(self.x, self.y, self.width, self.height,
                        self.angle, self.porosity, self.resistance)

    def __repr__(self):
        return (f"Radiator(at=({self.x:.3f}, {self.y:.3f}), {self.width} x {self.height}, "
                f"angle={math.degrees(self.angle):.1f}deg, porosity={self.porosity}, "
                f"resistance={self.resistance})")


# =============================================================================
# Porous Resistance
# =============================================================================

def darcy_forchheimer_damping(speed, porosity, resistance, density, h, viscosity=AIR_VISCOSITY):
    """
    Velocity damping factor 1 / (1 + R*h) of the Darcy-Forchheimer law.

        permeability = porosity / resistance   (floored at MIN_PERMEABILITY)
        alpha = 1 / permeability               (viscous, Darcy)
        beta  = 1.75 (1 - porosity) / porosity^3   (inertial, Ergun)
        R     = alpha * mu + beta * rho * |v|

    Speeds below MIN_RESISTANCE_VELOCITY are left undamped (factor 1).
    Zero resistance or porosity 1 gives no damping at all.
    """
    speed = np.asarray(speed, dtype=np.float64)
    if resistance == 0.0 or porosity >= 1.0:
        return np.ones_like(speed)
    if porosity <= 0.0:
        raise ObstacleError("Darcy-Forchheimer damping needs porosity > 0; porosity 0 is a solid.")

    permeability = max(porosity / resistance, MIN_PERMEABILITY)
    alpha = 1.0 / permeability
    beta = ERGUN_COEFFICIENT * (1.0 - porosity) / porosity**3

    total = alpha * viscosity + beta * density * speed
    damping = 1.0 / (1.0 + total * h)
    return np.where(speed < MIN_RESISTANCE_VELOCITY, 1.0, damping)


# =============================================================================
# Manager
# =============================================================================

class ObstacleManager:
    """
    Applies obstacles to a Grid and keeps what the stepper needs per step:
    the solid face masks (no-slip) and the radiator cell footprints.
    """
    def __init__(self, grid):
        self.grid = grid
        self.obstacles = []
        self._base_s = None
        self._solid_cells = np.zeros(grid.shape, dtype=bool)
        self._noslip_u = np.zeros(grid.shape, dtype=bool)
        self._noslip_v = np.zeros(grid.shape, dtype=bool)
        self._resistive = []   # (obstacle, cell mask)

    def _footprint(self, obstacle):
        """ Interior cells whose centre lies inside the obstacle. """
        X, Y = self.grid.cell_centers()
        inside = np.asarray(obstacle.contains_point(X, Y), dtype=bool)
        inside[0, :] = False
        inside[-1, :] = False
        inside[:, 0] = False
        inside[:, -1] = False
        return inside

    def add(self, obstacle):
        """
        Applies one obstacle to the grid fields (s, u, v, m) and registers it.
        Runs to completion before returning.
        """
        g = self.grid
        if self._base_s is None:
            self._base_s = g.s.copy()

        inside = self._footprint(obstacle)
        self.obstacles.append(obstacle)

        if obstacle.is_transparent:
            logger.info("Obstacle %r is fully open; fields unchanged.", obstacle)
            return

        # --- 1. Mark cells ---
        if obstacle.is_solid:
            g.s[inside] = 0.0
            g.m[inside] = 0.0
            self._solid_cells |= inside
        elif obstacle.uses_darcy_forchheimer:
            g.s[inside] = obstacle.porosity
            self._damp(obstacle, inside)
            self._resistive.append((obstacle, inside))
        else:
            # Each inside cell scales its four faces once; shared faces twice
            g.s[inside] = obstacle.porosity
            n_u = inside.astype(np.int64)
            n_u[1:, :] += inside[:-1, :]
            n_v = inside.astype(np.int64)
            n_v[:, 1:] += inside[:, :-1]
            g.u *= obstacle.porosity ** n_u
            g.v *= obstacle.porosity ** n_v

        # --- 2. No-slip correction ---
        solid = g.s == 0.0
        zero_u = np.zeros(g.shape, dtype=bool)
        zero_v = np.zeros(g.shape, dtype=bool)
        zero_u[1:-1, 1:-1] = solid[:-2, 1:-1] | solid[1:-1, 1:-1]
        zero_v[1:-1, 1:-1] = solid[1:-1, :-2] | solid[1:-1, 1:-1]

        # Faces kept zero every step: those touching obstacle-solid cells
        keep_u = np.zeros(g.shape, dtype=bool)
        keep_v = np.zeros(g.shape, dtype=bool)
        sc = self._solid_cells
        keep_u[1:-1, 1:-1] = sc[:-2, 1:-1] | sc[1:-1, 1:-1]
        keep_v[1:-1, 1:-1] = sc[1:-1, :-2] | sc[1:-1, 1:-1]

        if obstacle.is_solid:
            UX, UY = g.u_face_positions()
            VX, VY = g.v_face_positions()
            in_u = np.asarray(obstacle.contains_point(UX, UY), dtype=bool)
            in_v = np.asarray(obstacle.contains_point(VX, VY), dtype=bool)
            keep_u[1:-1, 1:-1] |= in_u[1:-1, 1:-1]
            keep_v[1:-1, 1:-1] |= in_v[1:-1, 1:-1]

        self._noslip_u |= keep_u
        self._noslip_v |= keep_v

        g.u[zero_u | self._noslip_u] = 0.0
        g.v[zero_v | self._noslip_v] = 0.0

        logger.info("Applied %r to %d cells.", obstacle, int(np.count_nonzero(inside)))

    def _damp(self, obstacle, inside):
        g = self.grid
        u = g.u[inside]
        v = g.v[inside]
        speed = np.sqrt(u * u + v * v)
        damping = darcy_forchheimer_damping(speed, obstacle.porosity, obstacle.resistance,
                                            g.density, g.h)
        g.u[inside] = u * damping
        g.v[inside] = v * damping

    def apply_porous_resistance(self):
        """ Per-step Darcy-Forchheimer damping inside every radiator. """
        for obstacle, inside in self._resistive:
            self._damp(obstacle, inside)
            self.grid.s[inside] = obstacle.porosity

    def enforce_no_slip(self):
        """ Zeroes every face bordering an obstacle-solid cell or inside a solid obstacle. """
        self.grid.u[self._noslip_u] = 0.0
        self.grid.v[self._noslip_v] = 0.0

    def clear(self):
        """ Removes all obstacles and restores the openness seen before the first one. """
        if self._base_s is not None:
            self.grid.s[:] = self._base_s
        self.obstacles = []
        self._base_s = None
        self._solid_cells[:] = False
        self._noslip_u[:] = False
        self._noslip_v[:] = False
        self._resistive = []

    def contains_point(self, x, y):
        return any(bool(obs.contains_point(x, y)) for obs in self.obstacles)

    @property
    def radiators(self):
        return [obs for obs in self.obstacles if isinstance(obs, Radiator)]

    def __len__(self):
        return len(self.obstacles)
