"""Infinite plane primitive with ray-plane intersection.

A plane is defined by a point on the plane and a unit normal.

Sign convention: the stored normal points *away* from the visible side, in
the same sense as the rays that can hit it (a floor seen from above is
authored with normal (0, -1, 0)). Planes are one-sided: a ray intersects
only when dot(normal, direction) is above a small epsilon, so rays arriving
from behind pass through. plane_normal() returns the negated stored normal,
which faces the visible side and is what shading and reflection consume.

Texture coordinates project the hit point (taken as a vector from the world
origin) onto an orthonormal basis spanning the plane. The basis is built by
crossing the normal with the z axis, falling back to the y axis when the
normal is parallel to z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.geometry.plane import Plane, intersect_plane
    >>> floor = Plane(origin=vec3(0, -2, 0), normal=vec3(0, -1, 0))
    >>> # Use intersect_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import Ray, cross, length_squared, normalize, vec2, vec3

# Below this |dot(normal, direction)| a ray is treated as parallel
PARALLEL_EPSILON = 1e-6

# Below this squared length the first basis candidate is degenerate
BASIS_EPSILON = 1e-12


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        origin: Any point on the plane (vec3).
        normal: Unit normal pointing away from the visible side (vec3).
    """

    origin: vec3
    normal: vec3


@ti.func
def intersect_plane(ray: Ray, plane: Plane):
    """Test for ray-plane intersection.

    Solves dot(origin + t * direction - plane.origin, normal) = 0 for t.

    Args:
        ray: The ray to test (unit direction).
        plane: The plane to test against.

    Returns:
        A tuple (hit, distance). A (near-)parallel ray, a ray arriving from
        behind, or a negative solution is a miss.
    """
    denom = tm.dot(plane.normal, ray.direction)

    hit = 0
    distance = ti.cast(0.0, ti.f64)

    if denom > PARALLEL_EPSILON:
        t = tm.dot(plane.origin - ray.origin, plane.normal) / denom
        if t >= 0.0:
            hit = 1
            distance = t

    return hit, distance


@ti.func
def plane_normal(plane: Plane) -> vec3:
    """Unit normal facing the visible side (the negated stored normal)."""
    return -plane.normal


@ti.func
def plane_basis(plane: Plane):
    """Orthonormal (x_axis, y_axis) pair spanning the plane."""
    x_axis = cross(plane.normal, vec3(0.0, 0.0, 1.0))
    if length_squared(x_axis) < BASIS_EPSILON:
        x_axis = cross(plane.normal, vec3(0.0, 1.0, 0.0))
    x_axis = normalize(x_axis)
    y_axis = cross(plane.normal, x_axis)
    return x_axis, y_axis


@ti.func
def plane_texture_coords(plane: Plane, hit_point: vec3) -> vec2:
    """Planar texture coordinates of a hit point.

    Unbounded: callers sampling a texture wrap the result.
    """
    x_axis, y_axis = plane_basis(plane)
    return vec2(tm.dot(hit_point, x_axis), tm.dot(hit_point, y_axis))
