"""Scene element arena and nearest-intersection queries.

Elements (spheres and planes) live in one structure-of-arrays arena indexed
by element id. Each slot carries a kind tag, the parameters of both variants
and a material id; the element_* functions dispatch on the tag so the rest
of the renderer never special-cases the primitive kind.

trace() tests every element (brute force, no acceleration structure) and
keeps the nearest hit with a strictly positive distance. An Intersection is
(hit flag, distance, element id), never a reference into the arena.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.intersection import add_sphere, clear_scene, trace_ray
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -5.0), 1.0, material_id=0)
    0
    >>> trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    (4.0, 0)
"""

from enum import IntEnum

import taichi as ti

from src.whitted.core.ray import Ray, make_ray, vec2, vec3
from src.whitted.core.vector import Point, Vector3
from src.whitted.geometry.plane import (
    Plane,
    intersect_plane,
    plane_normal,
    plane_texture_coords,
)
from src.whitted.geometry.sphere import (
    Sphere,
    intersect_sphere,
    sphere_normal,
    sphere_texture_coords,
)


class ElementKind(IntEnum):
    """Closed set of primitive variants stored in the element arena."""

    SPHERE = 0
    PLANE = 1


class IntersectionInvariantError(RuntimeError):
    """An intersection was built with a non-finite or non-positive distance."""


@ti.dataclass
class Intersection:
    """Result of a ray-scene query.

    Attributes:
        hit: 1 if the ray hit an element, 0 on a miss.
        distance: Distance along the ray to the hit. Finite and strictly
            positive when hit is 1.
        element: Id of the hit element in the arena, -1 on a miss.
    """

    hit: ti.i32
    distance: ti.f64
    element: ti.i32


# Maximum number of elements supported in the scene
MAX_ELEMENTS = 1024

# Element storage: Structure of Arrays layout
# element_origins holds the sphere center or the plane's point
element_kinds = ti.field(dtype=ti.i32, shape=MAX_ELEMENTS)
element_origins = ti.Vector.field(3, dtype=ti.f64, shape=MAX_ELEMENTS)
element_normals = ti.Vector.field(3, dtype=ti.f64, shape=MAX_ELEMENTS)
element_radii = ti.field(dtype=ti.f64, shape=MAX_ELEMENTS)
element_material_ids = ti.field(dtype=ti.i32, shape=MAX_ELEMENTS)
num_elements = ti.field(dtype=ti.i32, shape=())

# Count of intersections built in violation of the distance invariant
invariant_violations = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all elements from the scene and reset the violation counter."""
    num_elements[None] = 0
    invariant_violations[None] = 0


def _next_element_slot() -> int:
    idx = num_elements[None]
    if idx >= MAX_ELEMENTS:
        raise RuntimeError(f"Maximum number of elements ({MAX_ELEMENTS}) exceeded")
    return idx


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive and finite).
        material_id: The material ID to associate with this sphere.

    Returns:
        The element id of the added sphere.

    Raises:
        ValueError: If the radius is not positive and finite.
        RuntimeError: If the maximum number of elements is exceeded.
    """
    if not 0.0 < radius < float("inf"):
        raise ValueError(f"Sphere radius must be positive and finite, got {radius}")
    c = Point.of(center)
    idx = _next_element_slot()
    element_kinds[idx] = int(ElementKind.SPHERE)
    element_origins[idx] = [c.x, c.y, c.z]
    element_normals[idx] = [0.0, 0.0, 0.0]
    element_radii[idx] = radius
    element_material_ids[idx] = material_id
    num_elements[None] = idx + 1
    return idx


def add_plane(
    point: tuple[float, float, float],
    normal: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add an infinite plane to the scene.

    The normal points away from the visible side (see geometry.plane) and is
    normalized before it is stored.

    Args:
        point: Any point on the plane.
        normal: The plane normal (non-zero).
        material_id: The material ID to associate with this plane.

    Returns:
        The element id of the added plane.

    Raises:
        ValueError: If the normal has zero length.
        RuntimeError: If the maximum number of elements is exceeded.
    """
    p = Point.of(point)
    n = Vector3.of(normal).normalize()
    idx = _next_element_slot()
    element_kinds[idx] = int(ElementKind.PLANE)
    element_origins[idx] = [p.x, p.y, p.z]
    element_normals[idx] = [n.x, n.y, n.z]
    element_radii[idx] = 0.0
    element_material_ids[idx] = material_id
    num_elements[None] = idx + 1
    return idx


def get_element_count() -> int:
    """Get the number of elements in the scene."""
    return int(num_elements[None])


def get_invariant_violation_count() -> int:
    """Get the number of invalid intersections built since the last reset."""
    return int(invariant_violations[None])


def check_invariants() -> None:
    """Raise if any kernel built an invalid intersection.

    Kernels cannot raise, so they count violations instead; Python entry
    points call this after each launch.

    Raises:
        IntersectionInvariantError: If the violation counter is non-zero.
    """
    count = get_invariant_violation_count()
    if count > 0:
        invariant_violations[None] = 0
        raise IntersectionInvariantError(
            f"{count} intersection(s) had a non-finite or non-positive distance"
        )


# =============================================================================
# Element Dispatch (Taichi-compatible)
# =============================================================================


@ti.func
def _sphere_at(idx: ti.i32) -> Sphere:
    return Sphere(center=element_origins[idx], radius=element_radii[idx])


@ti.func
def _plane_at(idx: ti.i32) -> Plane:
    return Plane(origin=element_origins[idx], normal=element_normals[idx])


@ti.func
def element_intersect(idx: ti.i32, ray: Ray):
    """Intersect a ray with one element.

    Returns:
        A tuple (hit, distance) from the element's primitive.
    """
    hit = 0
    distance = ti.cast(0.0, ti.f64)
    if element_kinds[idx] == int(ElementKind.SPHERE):
        hit, distance = intersect_sphere(ray, _sphere_at(idx))
    else:
        hit, distance = intersect_plane(ray, _plane_at(idx))
    return hit, distance


@ti.func
def element_normal(idx: ti.i32, hit_point: vec3) -> vec3:
    """Unit shading normal of an element at a hit point."""
    normal = vec3(0.0, 0.0, 0.0)
    if element_kinds[idx] == int(ElementKind.SPHERE):
        normal = sphere_normal(_sphere_at(idx), hit_point)
    else:
        normal = plane_normal(_plane_at(idx))
    return normal


@ti.func
def element_texture_coords(idx: ti.i32, hit_point: vec3) -> vec2:
    """Texture coordinates of an element at a hit point."""
    coords = vec2(0.0, 0.0)
    if element_kinds[idx] == int(ElementKind.SPHERE):
        coords = sphere_texture_coords(_sphere_at(idx), hit_point)
    else:
        coords = plane_texture_coords(_plane_at(idx), hit_point)
    return coords


@ti.func
def _is_non_finite(value: ti.f64) -> ti.i32:
    # All exponent bits set means inf or NaN (isnan is folded away under fast math)
    exponent = (ti.bit_cast(value, ti.i64) >> 52) & 0x7FF
    return ti.cast(exponent == 0x7FF, ti.i32)


@ti.func
def make_intersection(distance: ti.f64, element: ti.i32) -> Intersection:
    """Build a hit Intersection, counting invariant violations.

    The distance must be finite and strictly positive. A violation is
    recorded in invariant_violations for the calling Python entry point to
    raise on; the returned record is still marked as a hit.
    """
    if _is_non_finite(distance) == 1 or distance <= 0.0:
        invariant_violations[None] += 1
    return Intersection(hit=1, distance=distance, element=element)


@ti.func
def _make_miss() -> Intersection:
    return Intersection(hit=0, distance=0.0, element=-1)


@ti.func
def trace(ray: Ray) -> Intersection:
    """Find the nearest element hit by a ray.

    Every element is tested. Hits at a distance of zero or less are
    discarded, so a ray starting exactly on a surface does not see it. Ties
    keep the element scanned first. A non-finite hit distance always becomes
    the result so that the invariant check reports it.

    Args:
        ray: The ray to trace (unit direction).

    Returns:
        The nearest Intersection, or a miss record when nothing is hit or
        the scene is empty.
    """
    result = _make_miss()
    for i in range(num_elements[None]):
        hit, distance = element_intersect(i, ray)
        if hit == 1:
            if _is_non_finite(distance) == 1:
                result = make_intersection(distance, i)
            elif distance > 0.0 and (result.hit == 0 or distance < result.distance):
                result = make_intersection(distance, i)
    return result


# =============================================================================
# Python-side Queries
# =============================================================================

_query_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f64, shape=())
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_distance = ti.field(dtype=ti.f64, shape=())
_query_element = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _trace_query():
    result = trace(make_ray(_query_origin[None], _query_direction[None]))
    _query_hit[None] = result.hit
    _query_distance[None] = result.distance
    _query_element[None] = result.element


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[float, int] | None:
    """Trace a single ray from Python.

    Useful for testing and picking. The direction is normalized first.

    Args:
        origin: Ray origin.
        direction: Ray direction (non-zero).

    Returns:
        (distance, element_id) of the nearest hit, or None on a miss.

    Raises:
        ValueError: If the direction has zero length.
        IntersectionInvariantError: If an invalid intersection was built.
    """
    o = Point.of(origin)
    d = Vector3.of(direction).normalize()
    _query_origin[None] = [o.x, o.y, o.z]
    _query_direction[None] = [d.x, d.y, d.z]
    _trace_query()
    check_invariants()

    if _query_hit[None] == 0:
        return None
    return float(_query_distance[None]), int(_query_element[None])
