"""Ray data structure and vector utilities for Taichi kernels.

This module provides the Ray dataclass, the vector helpers every other
kernel-side module builds on, and the construction of secondary rays
(mirror reflection and Snell's-law transmission).

Positions and directions are double precision (``vec3``) so that long chains
of reflection and refraction do not accumulate visible error. Colors are
single precision (``color3``).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> # Inside a kernel:
    >>> # ray = make_ray(origin, direction)
    >>> # point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Double precision 3D vector for positions and directions
vec3 = ti.types.vector(3, ti.f64)

# Double precision 2D vector for texture coordinates
vec2 = ti.types.vector(2, ti.f64)

# Single precision RGB color
color3 = ti.types.vector(3, ti.f32)


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit-length direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Always unit length;
            build rays through make_ray() or the create_* helpers, which
            normalize explicitly.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from an origin and an arbitrary non-zero direction.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector. Normalized before it is stored.

    Returns:
        A new Ray instance with a unit-length direction.
    """
    return Ray(origin=origin, direction=tm.normalize(direction))


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at distance t.

    Args:
        ray: The ray to evaluate.
        t: The distance from the origin. Positive values are in front.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + ray.direction * t


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes, as it avoids the
    square root.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The input must have non-zero length; a zero vector yields NaN
    components, which propagate instead of being masked.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.
    """
    return v / ti.sqrt(tm.dot(v, v))


@ti.func
def distance_squared(a: vec3, b: vec3) -> ti.f64:
    """Squared Euclidean distance between two points."""
    return length_squared(a - b)


@ti.func
def distance(a: vec3, b: vec3) -> ti.f64:
    """Euclidean distance between two points."""
    return length(a - b)


# =============================================================================
# Secondary Rays
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident direction about a unit normal.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        incident - normal * 2 * dot(incident, normal).
    """
    return incident - normal * (2.0 * tm.dot(incident, normal))


@ti.func
def create_reflection(normal: vec3, incident: vec3, hit_point: vec3, bias: ti.f64) -> Ray:
    """Build the mirror-reflection ray leaving a surface.

    The origin is pushed along the normal by ``bias`` so the new ray does
    not immediately hit the surface it starts on.

    Args:
        normal: The unit surface normal at the hit point.
        incident: The direction of the ray that hit the surface.
        hit_point: The intersection point.
        bias: Offset applied along the normal to the new origin.

    Returns:
        The reflected ray.
    """
    return make_ray(hit_point + normal * bias, reflect(incident, normal))


@ti.func
def create_transmission(
    normal: vec3,
    incident: vec3,
    hit_point: vec3,
    bias: ti.f64,
    index: ti.f64,
):
    """Build the refracted ray through a surface using Snell's law.

    Whether the ray enters or leaves the medium follows from the sign of
    dot(incident, normal): negative means the ray arrives from the side the
    normal points to and is entering. When leaving, the normal is flipped
    and the indices of refraction are swapped.

    Args:
        normal: The unit outward surface normal at the hit point.
        incident: The unit direction of the ray that hit the surface.
        hit_point: The intersection point.
        bias: Offset applied to the new origin, on the far side of the surface.
        index: Index of refraction of the medium (>= 1).

    Returns:
        A tuple (transmitted, ray). transmitted is 0 under total internal
        reflection, in which case ray is meaningless.
    """
    ref_n = normal
    eta_i = ti.cast(1.0, ti.f64)
    eta_t = index
    i_dot_n = tm.dot(incident, normal)
    if i_dot_n < 0.0:
        # Outside the surface, entering the medium
        i_dot_n = -i_dot_n
    else:
        # Inside the surface, leaving the medium
        ref_n = -normal
        eta_i = index
        eta_t = ti.cast(1.0, ti.f64)

    eta = eta_i / eta_t
    k = 1.0 - (eta * eta) * (1.0 - i_dot_n * i_dot_n)

    transmitted = 0
    ray = Ray(origin=hit_point, direction=incident)
    if k >= 0.0:
        transmitted = 1
        direction = (incident + ref_n * i_dot_n) * eta - ref_n * ti.sqrt(k)
        ray = make_ray(hit_point - ref_n * bias, direction)

    return transmitted, ray
