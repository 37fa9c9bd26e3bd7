"""
snapflow/analysis.py
--------------------
Radiator performance from a finished flow field.

Every routine here only reads the Grid. Results are packed into an
immutable PerformanceMetrics record and appended to the history lists;
the fields are never modified.
"""
import math
from collections import namedtuple

from .grid import FieldKind

# Field order is the export schema
METRIC_FIELDS = (
    "angle_degrees",
    "mass_flow_rate",       # kg/s
    "pressure_drop",        # Pa
    "inlet_velocity",       # m/s
    "outlet_velocity",      # m/s
    "drag_force",           # N
    "lift_force",           # N
    "cooling_efficiency",   # -
    "fan_power_required",   # W
)


class PerformanceMetrics(namedtuple("PerformanceMetrics", METRIC_FIELDS)):
    __slots__ = ()

    def as_dict(self):
        return dict(self._asdict())

    @classmethod
    def from_dict(cls, data):
        missing = [k for k in METRIC_FIELDS if k not in data]
        if missing:
            raise ValueError(f"Metrics record is missing fields: {missing}")
        return cls(**{k: float(data[k]) for k in METRIC_FIELDS})


def cooling_efficiency(mass_flow):
    """ Saturating proxy in [0, 1): m / (m + 0.1). Not a thermal model. """
    return min(mass_flow / (mass_flow + 0.1), 1.0)


def fan_power(pressure_drop, mass_flow, density):
    """ Power to push the volumetric flow through the pressure drop [W]. """
    return pressure_drop * (mass_flow / density)


class PerformanceAnalyzer:
    def __init__(self, face_samples=20, probe_samples=10, contour_samples=100,
                 velocity_probe_distance=0.05):
        """
        Args:
            face_samples (int): Points along the radiator face for the mass flow
            probe_samples (int): Points on each pressure probe line
            contour_samples (int): Points on the closed contour for forces
            velocity_probe_distance (float): Offset of the inlet/outlet velocity probes [m]
        """
        self.face_samples = int(face_samples)
        self.probe_samples = int(probe_samples)
        self.contour_samples = int(contour_samples)
        self.velocity_probe_distance = float(velocity_probe_distance)

        self.radiators = []
        self.metrics_history = []

    def add_radiator(self, radiator):
        self.radiators.append(radiator)

    # --- Mass Flow ---
    def mass_flow(self, grid, obstacle):
        """
        Flow through the obstacle face: velocity sampled along its local
        height, projected on the face normal, times (height/N * h * rho).
        Points outside the physical domain are skipped.
        """
        _, height = obstacle.extents()
        c = math.cos(obstacle.angle)
        s = math.sin(obstacle.angle)
        n = self.face_samples
        area = height / n

        total = 0.0
        for k in range(n):
            t = (k + 0.5) / n - 0.5
            local_y = t * height
            x = obstacle.x - local_y * s
            y = obstacle.y + local_y * c

            if not grid.in_domain(x, y):
                continue

            u = grid.sample(FieldKind.U, x, y)
            v = grid.sample(FieldKind.V, x, y)
            normal_velocity = u * c + v * s
            total += normal_velocity * area * grid.h * grid.density

        return abs(total)

    # --- Pressure ---
    def _line_average_pressure(self, grid, x, y, length, angle):
        """ Mean pressure on a line of the given length across the flow. """
        c = math.cos(angle)
        s = math.sin(angle)
        n = self.probe_samples
        lo_x, hi_x = grid.h, (grid.num_x - 1) * grid.h
        lo_y, hi_y = grid.h, (grid.num_y - 1) * grid.h

        total = 0.0
        count = 0
        for k in range(n):
            t = (k + 0.5) / n - 0.5
            px = x - t * length * s
            py = y + t * length * c
            if lo_x <= px < hi_x and lo_y <= py < hi_y:
                total += grid.sample(FieldKind.PRESSURE, px, py)
                count += 1

        return total / count if count > 0 else 0.0

    def pressure_drop(self, grid, obstacle):
        """
        Upstream minus downstream line-averaged pressure, probes placed
        half a width plus two cells from the centre along the face normal.
        Positive when the obstacle retards the flow.
        """
        width, height = obstacle.extents()
        c = math.cos(obstacle.angle)
        s = math.sin(obstacle.angle)
        d = width * 0.5 + 2.0 * grid.h

        p_up = self._line_average_pressure(grid, obstacle.x - d * c, obstacle.y - d * s,
                                           height, obstacle.angle)
        p_down = self._line_average_pressure(grid, obstacle.x + d * c, obstacle.y + d * s,
                                             height, obstacle.angle)
        return p_up - p_down

    # --- Forces ---
    def forces(self, grid, obstacle):
        """
        Closed contour integral of pressure over the bounding ellipse of the
        obstacle: sum(p * n * ds), n outward. Higher pressure upstream
        gives a negative drag.

        Returns:
            (drag, lift): global x and y components [N per unit depth]
        """
        width, height = obstacle.extents()
        a = width * 0.5
        b = height * 0.5
        c = math.cos(obstacle.angle)
        s = math.sin(obstacle.angle)
        n = self.contour_samples
        dtheta = 2.0 * math.pi / n

        fx = 0.0
        fy = 0.0
        for k in range(n):
            t = k * dtheta
            lx = a * math.cos(t)
            ly = b * math.sin(t)
            x, y = obstacle.to_global(lx, ly)

            pressure = grid.sample(FieldKind.PRESSURE, x, y)

            # Outward normal of the ellipse at parameter t
            nlx = b * math.cos(t)
            nly = a * math.sin(t)
            norm = math.hypot(nlx, nly)
            nlx /= norm
            nly /= norm
            nx = nlx * c - nly * s
            ny = nlx * s + nly * c

            ds = math.hypot(a * math.sin(t), b * math.cos(t)) * dtheta

            fx += pressure * nx * ds
            fy += pressure * ny * ds

        return fx, fy

    # --- Velocity Probes ---
    def _speed_at(self, grid, x, y):
        u = grid.sample(FieldKind.U, x, y)
        v = grid.sample(FieldKind.V, x, y)
        return math.hypot(u, v)

    def inlet_velocity(self, grid, obstacle):
        d = self.velocity_probe_distance
        return self._speed_at(grid, obstacle.x - d * math.cos(obstacle.angle),
                              obstacle.y - d * math.sin(obstacle.angle))

    def outlet_velocity(self, grid, obstacle):
        d = self.velocity_probe_distance
        return self._speed_at(grid, obstacle.x + d * math.cos(obstacle.angle),
                              obstacle.y + d * math.sin(obstacle.angle))

    # --- Full Analysis ---
    def analyze(self, grid, radiator):
        """
        Computes all metrics for one radiator against the current fields.
        The record is appended to this analyzer's history and, when the
        obstacle keeps one, to the radiator's own history.
        """
        m_dot = self.mass_flow(grid, radiator)
        dp = self.pressure_drop(grid, radiator)
        drag, lift = self.forces(grid, radiator)

        metrics = PerformanceMetrics(
            angle_degrees=math.degrees(radiator.angle),
            mass_flow_rate=m_dot,
            pressure_drop=dp,
            inlet_velocity=self.inlet_velocity(grid, radiator),
            outlet_velocity=self.outlet_velocity(grid, radiator),
            drag_force=drag,
            lift_force=lift,
            cooling_efficiency=cooling_efficiency(m_dot),
            fan_power_required=fan_power(dp, m_dot, grid.density),
        )

        self.metrics_history.append(metrics)
        history = getattr(radiator, "metrics_history", None)
        if history is not None:
            history.append(metrics)
        return metrics

    def summary(self):
        """ Printable block of every analysed configuration. """
        lines = ["Radiator Performance Summary", "=" * 32]
        for m in self.metrics_history:
            lines.append(f"Angle: {m.angle_degrees:.1f} deg")
            lines.append(f"  Mass flow rate:     {m.mass_flow_rate:.4f} kg/s")
            lines.append(f"  Pressure drop:      {m.pressure_drop:.2f} Pa")
            lines.append(f"  Drag force:         {m.drag_force:.3f} N")
            lines.append(f"  Lift force:         {m.lift_force:.3f} N")
            lines.append(f"  Cooling efficiency: {m.cooling_efficiency:.3f}")
            lines.append(f"  Fan power required: {m.fan_power_required:.2f} W")
            lines.append("")
        return "\n".join(lines)
