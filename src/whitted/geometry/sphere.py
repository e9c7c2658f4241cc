"""Sphere primitive with geometric ray-sphere intersection.

The intersection uses the geometric method rather than the algebraic
quadratic: project the center-to-origin vector onto the ray direction,
compare the squared perpendicular distance with the squared radius, then
step back along the ray by the half-chord length.

Texture coordinates use a longitude/latitude mapping:
    u = 0.5 + atan2(z, x) / (2 * pi)
    v = acos(y / radius) / pi
where (x, y, z) is the hit point relative to the center.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=vec3(0, 0, -5), radius=1.0)
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import Ray, normalize, vec2, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive, finite).
    """

    center: vec3
    radius: ti.f64


@ti.func
def intersect_sphere(ray: Ray, sphere: Sphere):
    """Test for ray-sphere intersection.

    Returns the nearer of the two roots that is non-negative. A sphere that
    lies entirely behind the ray origin, or that the ray passes beside, is a
    miss. A ray starting inside the sphere hits the far side.

    Args:
        ray: The ray to test (unit direction).
        sphere: The sphere to test against.

    Returns:
        A tuple (hit, distance). hit is 1 on intersection, 0 otherwise;
        distance is only meaningful when hit is 1.
    """
    # From ray origin to sphere center
    l = sphere.center - ray.origin
    adj = tm.dot(l, ray.direction)

    # Squared distance between the center and the ray's line
    d2 = tm.dot(l, l) - adj * adj
    r2 = sphere.radius * sphere.radius

    hit = 0
    distance = ti.cast(0.0, ti.f64)

    if d2 <= r2:
        thc = ti.sqrt(r2 - d2)
        t0 = adj - thc
        t1 = adj + thc
        if t0 >= 0.0:
            hit = 1
            distance = t0
        elif t1 >= 0.0:
            # Origin inside the sphere
            hit = 1
            distance = t1

    return hit, distance


@ti.func
def sphere_normal(sphere: Sphere, hit_point: vec3) -> vec3:
    """Outward unit normal at a point on the sphere."""
    return normalize(hit_point - sphere.center)


@ti.func
def sphere_texture_coords(sphere: Sphere, hit_point: vec3) -> vec2:
    """Spherical (longitude/latitude) texture coordinates of a hit point.

    Args:
        sphere: The sphere that was hit.
        hit_point: A point on the sphere surface.

    Returns:
        The (u, v) pair, both nominally in [0, 1].
    """
    hit_vec = hit_point - sphere.center
    # Rounding can push |y / r| marginally past 1
    cos_theta = tm.clamp(hit_vec.y / sphere.radius, -1.0, 1.0)
    u = 0.5 + ti.atan2(hit_vec.z, hit_vec.x) / (2.0 * tm.pi)
    v = ti.acos(cos_theta) / tm.pi
    return vec2(u, v)
