"""Unit tests for sphere intersection, normals and texture coordinates.

Tests cover:
- Ray hitting sphere from outside
- Ray missing sphere
- Ray starting inside sphere
- Sphere entirely behind the ray origin
- Tangent rays
- Outward normals and spherical texture coordinates
"""

import math

import pytest
import taichi as ti


def _intersect(origin, direction, center, radius):
    from src.whitted.core.ray import make_ray, vec3
    from src.whitted.geometry.sphere import Sphere, intersect_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel():
        ray = make_ray(
            vec3(origin[0], origin[1], origin[2]), vec3(direction[0], direction[1], direction[2])
        )
        sphere = Sphere(center=vec3(center[0], center[1], center[2]), radius=radius)
        h, d = intersect_sphere(ray, sphere)
        hit[None] = h
        distance[None] = d

    test_kernel()
    return hit[None], distance[None]


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit(self):
        """Ray along -z hits the near side of a sphere centered on the axis."""
        hit, distance = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 1
        assert distance == pytest.approx(4.0)

    def test_miss(self):
        """Ray passing beside the sphere misses."""
        hit, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (3.0, 0.0, -5.0), 1.0)
        assert hit == 0

    def test_behind_origin(self):
        """Sphere entirely behind the ray is a miss."""
        hit, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 5.0), 1.0)
        assert hit == 0

    def test_origin_inside(self):
        """Ray starting at the center hits the far side."""
        hit, distance = _intersect((0.0, 0.0, -5.0), (0.0, 1.0, 0.0), (0.0, 0.0, -5.0), 2.0)
        assert hit == 1
        assert distance == pytest.approx(2.0)

    def test_tangent(self):
        """Ray grazing the sphere still hits."""
        hit, distance = _intersect((1.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 1
        assert distance == pytest.approx(5.0)

    def test_distance_is_non_negative(self):
        """Returned distance is never negative for any hit."""
        for z in (-2.0, -1.0, 0.0, 0.5):
            hit, distance = _intersect((0.0, 0.0, z), (0.0, 0.0, -1.0), (0.0, 0.0, -2.0), 1.0)
            assert hit == 1
            assert distance >= 0.0

        # Past the far side the sphere lies behind the ray
        hit, _ = _intersect((0.0, 0.0, -5.0), (0.0, 0.0, -1.0), (0.0, 0.0, -2.0), 1.0)
        assert hit == 0


class TestSphereSurface:
    """Tests for sphere normals and texture coordinates."""

    def test_normal_points_outward(self):
        from src.whitted.core.ray import vec3
        from src.whitted.geometry.sphere import Sphere, sphere_normal

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(1.0, 1.0, 1.0), radius=2.0)
            result[None] = sphere_normal(sphere, vec3(1.0, 3.0, 1.0))

        test_kernel()
        assert tuple(result[None]) == pytest.approx((0.0, 1.0, 0.0))

    def test_texture_coords(self):
        from src.whitted.core.ray import vec3
        from src.whitted.geometry.sphere import Sphere, sphere_texture_coords

        coords = ti.Vector.field(2, dtype=ti.f64, shape=3)

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=2.0)
            coords[0] = sphere_texture_coords(sphere, vec3(0.0, 2.0, 0.0))
            coords[1] = sphere_texture_coords(sphere, vec3(0.0, -2.0, 0.0))
            coords[2] = sphere_texture_coords(sphere, vec3(2.0, 0.0, 0.0))

        test_kernel()
        # Top pole: v = 0, bottom pole: v = 1
        assert coords[0][1] == pytest.approx(0.0)
        assert coords[1][1] == pytest.approx(1.0)
        # +x on the equator: u = 0.5, v = 0.5
        assert coords[2][0] == pytest.approx(0.5)
        assert coords[2][1] == pytest.approx(0.5)

    def test_texture_coords_in_unit_range(self):
        from src.whitted.core.ray import vec3
        from src.whitted.geometry.sphere import Sphere, sphere_texture_coords

        n = 16
        coords = ti.Vector.field(2, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(1.0, -1.0, 2.0), radius=1.5)
            for i in range(n):
                angle = 2.0 * math.pi * i / n
                offset = vec3(ti.cos(angle), ti.sin(angle) * 0.6, ti.sin(angle) * 0.8) * 1.5
                coords[i] = sphere_texture_coords(sphere, sphere.center + offset)

        test_kernel()
        for i in range(n):
            u, v = coords[i]
            assert 0.0 <= u <= 1.0
            assert 0.0 <= v <= 1.0
