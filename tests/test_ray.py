"""Unit tests for rays, vector helpers and secondary ray construction.

Tests cover:
- make_ray normalization and ray_at evaluation
- Vector utility functions
- Mirror reflection
- Snell's-law transmission entering, leaving, and total internal reflection
"""

import math

import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray construction and evaluation."""

    def test_make_ray_normalizes_direction(self):
        from src.whitted.core.ray import make_ray, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 3.0, -4.0))
            result[None] = ray.direction

        test_kernel()
        d = result[None]
        assert abs(d[0]) < 1e-12
        assert abs(d[1] - 0.6) < 1e-12
        assert abs(d[2] + 0.8) < 1e-12

    def test_ray_at(self):
        from src.whitted.core.ray import make_ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 1.0) < 1e-12
        assert abs(p[1]) < 1e-12
        assert abs(p[2] + 5.0) < 1e-12


class TestVectorUtilities:
    """Tests for kernel-side vector helpers."""

    def test_scalar_helpers(self):
        from src.whitted.core.ray import (
            distance,
            distance_squared,
            dot,
            length,
            length_squared,
            vec3,
        )

        results = ti.field(dtype=ti.f64, shape=5)

        @ti.kernel
        def test_kernel():
            a = vec3(1.0, 2.0, 2.0)
            b = vec3(4.0, 6.0, 2.0)
            results[0] = dot(a, b)
            results[1] = length_squared(a)
            results[2] = length(a)
            results[3] = distance_squared(a, b)
            results[4] = distance(a, b)

        test_kernel()
        assert results[0] == pytest.approx(20.0)
        assert results[1] == pytest.approx(9.0)
        assert results[2] == pytest.approx(3.0)
        assert results[3] == pytest.approx(25.0)
        assert results[4] == pytest.approx(5.0)

    def test_cross_and_normalize(self):
        from src.whitted.core.ray import cross, normalize, vec3

        c = ti.Vector.field(3, dtype=ti.f64, shape=())
        n = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            c[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
            n[None] = normalize(vec3(2.0, 0.0, 0.0))

        test_kernel()
        assert tuple(c[None]) == pytest.approx((0.0, 0.0, 1.0))
        assert tuple(n[None]) == pytest.approx((1.0, 0.0, 0.0))


class TestReflection:
    """Tests for mirror reflection rays."""

    def test_reflect_45_degrees(self):
        from src.whitted.core.ray import reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            incident = vec3(1.0, -1.0, 0.0).normalized()
            result[None] = reflect(incident, vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        s = 1.0 / math.sqrt(2.0)
        assert r[0] == pytest.approx(s)
        assert r[1] == pytest.approx(s)
        assert r[2] == pytest.approx(0.0)

    def test_create_reflection_offsets_origin(self):
        from src.whitted.core.ray import create_reflection, vec3

        origin = ti.Vector.field(3, dtype=ti.f64, shape=())
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = create_reflection(
                vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, -1.0), vec3(1.0, 2.0, 3.0), 0.01
            )
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        assert tuple(origin[None]) == pytest.approx((1.0, 2.0, 3.01))
        assert tuple(direction[None]) == pytest.approx((0.0, 0.0, 1.0))


class TestTransmission:
    """Tests for Snell's-law transmission rays."""

    def _transmit(self, normal, incident, index):
        from src.whitted.core.ray import create_transmission, vec3

        transmitted = ti.field(dtype=ti.i32, shape=())
        origin = ti.Vector.field(3, dtype=ti.f64, shape=())
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(
            nx: ti.f64, ny: ti.f64, nz: ti.f64, ix: ti.f64, iy: ti.f64, iz: ti.f64, eta: ti.f64
        ):
            ok, ray = create_transmission(
                vec3(nx, ny, nz), vec3(ix, iy, iz).normalized(), vec3(0.0, 0.0, 0.0), 0.001, eta
            )
            transmitted[None] = ok
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel(*normal, *incident, index)
        return transmitted[None], tuple(origin[None]), tuple(direction[None])

    def test_normal_incidence_passes_straight_through(self):
        ok, origin, direction = self._transmit((0.0, 0.0, 1.0), (0.0, 0.0, -1.0), 1.5)
        assert ok == 1
        assert direction == pytest.approx((0.0, 0.0, -1.0))
        # Origin is pushed to the far side of the surface
        assert origin == pytest.approx((0.0, 0.0, -0.001))

    def test_entering_bends_toward_normal(self):
        ok, _, direction = self._transmit((0.0, 1.0, 0.0), (1.0, -1.0, 0.0), 1.5)
        assert ok == 1
        # sin(theta_t) = sin(45 deg) / 1.5
        assert direction[0] == pytest.approx(math.sin(math.radians(45.0)) / 1.5)
        assert direction[1] < 0.0
        assert math.sqrt(sum(c * c for c in direction)) == pytest.approx(1.0)

    def test_index_one_does_not_bend(self):
        ok, _, direction = self._transmit((0.0, 1.0, 0.0), (1.0, -2.0, 0.5), 1.0)
        s = math.sqrt(1.0 + 4.0 + 0.25)
        assert ok == 1
        assert direction == pytest.approx((1.0 / s, -2.0 / s, 0.5 / s))

    def test_total_internal_reflection(self):
        # Leaving glass at a grazing angle: no transmitted ray
        ok, _, _ = self._transmit((0.0, 0.0, 1.0), (1.0, 0.0, 0.1), 1.5)
        assert ok == 0

    def test_leaving_medium_bends_away_from_normal(self):
        # Ray inside the medium travelling outward at a shallow angle
        ok, origin, direction = self._transmit((0.0, 0.0, 1.0), (0.2, 0.0, 1.0), 1.5)
        assert ok == 1
        incident_sin = 0.2 / math.sqrt(1.04)
        assert direction[0] == pytest.approx(incident_sin * 1.5)
        assert direction[2] > 0.0
        # Origin offset along the outward normal
        assert origin[2] == pytest.approx(0.001)
