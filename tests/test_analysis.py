"""
Tests for radiator performance metrics, the angle sweep helpers and
metrics persistence.
"""

import json
import math

import numpy as np
import pytest

from snapflow.analysis import (METRIC_FIELDS, PerformanceAnalyzer, PerformanceMetrics,
                               cooling_efficiency, fan_power)
from snapflow.grid import FieldKind, Grid
from snapflow.io import load_metrics, save_metrics
from snapflow.obstacles import Radiator
from snapflow.sweep import best_angle, radiator_angle_sweep, radiator_score


@pytest.fixture
def grid():
    return Grid(1000.0, 40, 40, 0.05)


def make_metrics(angle, mass_flow=1.0, pressure_drop=10.0, fan=5.0):
    return PerformanceMetrics(
        angle_degrees=angle,
        mass_flow_rate=mass_flow,
        pressure_drop=pressure_drop,
        inlet_velocity=3.0,
        outlet_velocity=2.5,
        drag_force=0.4,
        lift_force=-0.1,
        cooling_efficiency=cooling_efficiency(mass_flow),
        fan_power_required=fan,
    )


# --- Derived scalars ---

class TestDerivedScalars:

    def test_cooling_efficiency(self):
        assert cooling_efficiency(0.0) == 0.0
        assert cooling_efficiency(0.1) == pytest.approx(0.5)
        assert 0.99 < cooling_efficiency(100.0) <= 1.0

    def test_fan_power(self):
        assert fan_power(100.0, 2.0, 1000.0) == pytest.approx(0.2)


# --- Analyzer ---

class TestMassFlow:

    def test_uniform_flow_through_upright_face(self, grid):
        grid.u[:] = 2.0
        rad = Radiator(1.0, 1.0, 0.1, 0.3)
        expected = 2.0 * 0.3 * grid.h * grid.density
        assert PerformanceAnalyzer().mass_flow(grid, rad) == pytest.approx(expected)

    def test_projection_on_face_normal(self, grid):
        grid.u[:] = 2.0
        rad = Radiator.from_degrees(1.0, 1.0, 0.1, 0.3, 60.0)
        expected = 2.0 * math.cos(math.radians(60.0)) * 0.3 * grid.h * grid.density
        assert PerformanceAnalyzer().mass_flow(grid, rad) == pytest.approx(expected)

    def test_reported_as_magnitude(self, grid):
        grid.u[:] = -2.0
        rad = Radiator(1.0, 1.0, 0.1, 0.3)
        assert PerformanceAnalyzer().mass_flow(grid, rad) > 0.0

    def test_points_outside_domain_skipped(self, grid):
        grid.u[:] = 2.0
        rad = Radiator(1.0, 0.0, 0.1, 0.3)
        expected = 2.0 * 0.15 * grid.h * grid.density
        assert PerformanceAnalyzer().mass_flow(grid, rad) == pytest.approx(expected)


class TestPressureAndForces:

    @pytest.fixture
    def gradient(self, grid):
        """ p = G * x with G < 0: high pressure upstream. """
        X, _ = grid.cell_centers()
        grid.p[:] = -10.0 * X
        return grid

    def test_pressure_drop_of_linear_field(self, gradient):
        rad = Radiator(1.0, 1.0, 0.1, 0.3)
        d = 0.05 + 2.0 * gradient.h
        assert PerformanceAnalyzer().pressure_drop(gradient, rad) == pytest.approx(20.0 * d)

    def test_uniform_pressure_gives_no_force(self, grid):
        grid.p[:] = 123.0
        drag, lift = PerformanceAnalyzer().forces(grid, Radiator(1.0, 1.0, 0.2, 0.4))
        assert drag == pytest.approx(0.0, abs=1e-9)
        assert lift == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("angle", [0.0, 30.0, 90.0])
    def test_gradient_force_equals_area_times_gradient(self, gradient, angle):
        rad = Radiator.from_degrees(1.0, 1.0, 0.2, 0.4, angle)
        drag, lift = PerformanceAnalyzer().forces(gradient, rad)

        # sum(p n ds) over a closed contour equals grad(p) times the enclosed area
        area = math.pi * 0.1 * 0.2
        assert drag == pytest.approx(-10.0 * area, rel=1e-6)
        assert lift == pytest.approx(0.0, abs=1e-9)

    def test_vertical_gradient_gives_lift_along_gradient(self, grid):
        _, Y = grid.cell_centers()
        grid.p[:] = 5.0 * Y
        drag, lift = PerformanceAnalyzer().forces(grid, Radiator(1.0, 1.0, 0.2, 0.4))

        area = math.pi * 0.1 * 0.2
        assert lift == pytest.approx(5.0 * area, rel=1e-6)
        assert drag == pytest.approx(0.0, abs=1e-9)

    def test_matches_direct_contour_sum(self, gradient):
        rad = Radiator(1.0, 1.0, 0.2, 0.4)
        analyzer = PerformanceAnalyzer()
        drag, _ = analyzer.forces(gradient, rad)

        n = analyzer.contour_samples
        a, b = 0.1, 0.2
        total = 0.0
        for k in range(n):
            t = 2.0 * math.pi * k / n
            p = gradient.sample(FieldKind.PRESSURE, 1.0 + a * math.cos(t), 1.0 + b * math.sin(t))
            nx = b * math.cos(t) / math.hypot(b * math.cos(t), a * math.sin(t))
            ds = math.hypot(a * math.sin(t), b * math.cos(t)) * 2.0 * math.pi / n
            total += p * nx * ds
        assert drag == pytest.approx(total, rel=1e-9)


class TestVelocityProbes:

    def test_speed_magnitude(self, grid):
        grid.u[:] = 3.0
        grid.v[:] = 4.0
        analyzer = PerformanceAnalyzer()
        rad = Radiator(1.0, 1.0, 0.1, 0.3)
        assert analyzer.inlet_velocity(grid, rad) == pytest.approx(5.0)
        assert analyzer.outlet_velocity(grid, rad) == pytest.approx(5.0)


class TestAnalyze:

    def test_record_and_histories(self, grid):
        grid.u[:] = 2.0
        X, _ = grid.cell_centers()
        grid.p[:] = -10.0 * X

        analyzer = PerformanceAnalyzer()
        rad = Radiator.from_degrees(1.0, 1.0, 0.1, 0.3, 15.0)
        analyzer.add_radiator(rad)
        before = grid.copy_fields()

        m = analyzer.analyze(grid, rad)

        assert m.angle_degrees == pytest.approx(15.0)
        assert m.mass_flow_rate > 0.0
        assert m.pressure_drop > 0.0
        assert m.cooling_efficiency == pytest.approx(cooling_efficiency(m.mass_flow_rate))
        assert m.fan_power_required == pytest.approx(
            m.pressure_drop * m.mass_flow_rate / grid.density)
        assert analyzer.metrics_history == [m]
        assert rad.metrics_history == [m]
        assert analyzer.radiators == [rad]

        for name, arr in before.items():
            np.testing.assert_array_equal(getattr(grid, name), arr)

    def test_metrics_are_immutable(self):
        m = make_metrics(0.0)
        with pytest.raises(AttributeError):
            m.mass_flow_rate = 2.0

    def test_summary(self):
        analyzer = PerformanceAnalyzer()
        analyzer.metrics_history.append(make_metrics(15.0))
        text = analyzer.summary()
        assert "Angle: 15.0 deg" in text
        assert "Fan power required" in text


# --- Sweep helpers ---

class TestSweep:

    def test_score(self):
        m = make_metrics(0.0, mass_flow=0.1, fan=1000.0)
        assert radiator_score(m) == pytest.approx(0.25)

    def test_best_angle(self):
        records = [
            make_metrics(0.0, mass_flow=0.5, fan=200.0),
            make_metrics(30.0, mass_flow=0.6, fan=20.0),
            make_metrics(60.0, mass_flow=0.9, fan=900.0),
        ]
        angle, score = best_angle(records)
        assert angle == 30.0
        assert score == pytest.approx(radiator_score(records[1]))

    def test_best_angle_needs_records(self):
        with pytest.raises(ValueError):
            best_angle([])

    def test_small_sweep(self):
        analyzer = radiator_angle_sweep(angles=(0.0, 45.0), steps_per_angle=5,
                                        domain=(1.0, 0.5), resolution=20, log_every=0)

        angles = [m.angle_degrees for m in analyzer.metrics_history]
        assert angles == pytest.approx([0.0, 45.0])
        assert len(analyzer.radiators) == 2
        for m in analyzer.metrics_history:
            assert all(np.isfinite(v) for v in m)


# --- Persistence ---

class TestPersistence:

    def test_schema(self):
        assert make_metrics(0.0).as_dict().keys() == set(METRIC_FIELDS)
        assert list(make_metrics(0.0).as_dict()) == list(METRIC_FIELDS)

    def test_single_record(self, tmp_path):
        path = tmp_path / "out" / "radiator.json"
        record = make_metrics(15.0)
        save_metrics(str(path), record)

        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        assert isinstance(raw, dict)
        assert list(raw) == list(METRIC_FIELDS)
        assert load_metrics(str(path)) == record

    def test_sweep_list(self, tmp_path):
        path = tmp_path / "sweep.json"
        records = [make_metrics(a) for a in (0.0, 15.0, 30.0)]
        save_metrics(str(path), records)
        assert load_metrics(str(path)) == records

    def test_missing_field_rejected(self, tmp_path):
        path = tmp_path / "bad.json"
        data = make_metrics(0.0).as_dict()
        del data["lift_force"]
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(ValueError):
            load_metrics(str(path))
