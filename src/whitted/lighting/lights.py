"""Directional and spherical point lights.

A directional light shines uniformly along a fixed direction from infinitely
far away. A spherical light is a point that radiates equally in all
directions; its intensity falls off with the inverse square of distance.

Lights are stored in structure-of-arrays Taichi fields. light_vectors holds
the unit direction of travel for directional lights and the position for
spherical lights, selected by the light_kinds tag.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.lighting.lights import add_directional_light
    >>> add_directional_light(direction=(0.0, -1.0, -1.0), color=(1.0, 1.0, 1.0), intensity=20.0)
    0
"""

import logging
import math
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import Ray, color3, distance, make_ray, vec3
from src.whitted.core.vector import Point, Vector3
from src.whitted.scene.intersection import trace

logger = logging.getLogger(__name__)


class LightType(IntEnum):
    """Closed set of light variants."""

    DIRECTIONAL = 0
    SPHERICAL = 1


# =============================================================================
# Light Field Storage
# =============================================================================

MAX_LIGHTS = 256

light_kinds = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_vectors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights."""
    num_lights[None] = 0


def _store_light(
    kind: LightType,
    vector: tuple[float, float, float],
    color: tuple[float, float, float],
    intensity: float,
) -> int:
    if len(color) != 3:
        raise ValueError(f"Color must have 3 components, got {len(color)}")
    if any(c < 0.0 for c in color):
        raise ValueError(f"Light color components must be non-negative, got {color}")
    if not 0.0 <= intensity < math.inf:
        raise ValueError(f"Light intensity must be non-negative and finite, got {intensity}")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_kinds[idx] = int(kind)
    light_vectors[idx] = [vector[0], vector[1], vector[2]]
    light_colors[idx] = [color[0], color[1], color[2]]
    light_intensities[idx] = intensity
    num_lights[None] = idx + 1

    logger.debug("Added %s light %d (intensity %g)", kind.name.lower(), idx, intensity)
    return idx


def add_directional_light(
    direction: tuple[float, float, float],
    color: tuple[float, float, float],
    intensity: float,
) -> int:
    """Add a light at infinity shining along a direction.

    Args:
        direction: Direction the light travels (non-zero). Normalized
            before it is stored.
        color: RGB color, non-negative components.
        intensity: Non-negative intensity. Does not fall off with distance.

    Returns:
        The index of the added light.

    Raises:
        ValueError: If the direction is zero or color/intensity is invalid.
        RuntimeError: If the maximum number of lights is exceeded.
    """
    d = Vector3.of(direction).normalize()
    return _store_light(LightType.DIRECTIONAL, d.to_tuple(), color, intensity)


def add_spherical_light(
    position: tuple[float, float, float],
    color: tuple[float, float, float],
    intensity: float,
) -> int:
    """Add a point light that radiates in all directions.

    Args:
        position: World-space position of the light.
        color: RGB color, non-negative components.
        intensity: Non-negative radiant intensity, spread over a sphere.

    Returns:
        The index of the added light.

    Raises:
        ValueError: If color/intensity is invalid.
        RuntimeError: If the maximum number of lights is exceeded.
    """
    return _store_light(LightType.SPHERICAL, Point.of(position).to_tuple(), color, intensity)


def get_light_count() -> int:
    """Get the number of lights."""
    return int(num_lights[None])


# =============================================================================
# Light Queries (Taichi-compatible)
# =============================================================================


@ti.func
def direction_to_light(light_id: ti.i32, hit_point: vec3) -> vec3:
    """Unit direction from a surface point toward a light."""
    result = -light_vectors[light_id]
    if light_kinds[light_id] == int(LightType.SPHERICAL):
        result = (light_vectors[light_id] - hit_point).normalized()
    return result


@ti.func
def distance_to_light(light_id: ti.i32, hit_point: vec3) -> ti.f64:
    """Distance from a surface point to a light; infinite for directional lights."""
    result = ti.cast(tm.inf, ti.f64)
    if light_kinds[light_id] == int(LightType.SPHERICAL):
        result = distance(light_vectors[light_id], hit_point)
    return result


@ti.func
def intensity_at(light_id: ti.i32, hit_point: vec3) -> ti.f32:
    """Light intensity arriving at a surface point.

    Spherical lights spread their intensity over a sphere of radius equal
    to the distance to the point: I / (4 * pi * r^2).
    """
    result = light_intensities[light_id]
    if light_kinds[light_id] == int(LightType.SPHERICAL):
        r2 = (light_vectors[light_id] - hit_point).norm_sqr()
        result = ti.cast(light_intensities[light_id] / (4.0 * tm.pi * r2), ti.f32)
    return result


@ti.func
def light_color(light_id: ti.i32) -> color3:
    return light_colors[light_id]


@ti.func
def shadow_ray(light_id: ti.i32, hit_point: vec3, normal: vec3, bias: ti.f64) -> Ray:
    """Ray from just above a surface toward a light."""
    return make_ray(hit_point + normal * bias, direction_to_light(light_id, hit_point))


@ti.func
def light_visible(light_id: ti.i32, hit_point: vec3, normal: vec3, bias: ti.f64) -> ti.i32:
    """Whether a light reaches a surface point unobstructed.

    Any hit along the shadow ray blocks a directional light. A spherical
    light is only blocked by hits closer than the light itself.

    Returns:
        1 if the light is visible, 0 if it is in shadow.
    """
    occluder = trace(shadow_ray(light_id, hit_point, normal, bias))
    visible = 1
    if occluder.hit == 1:
        if occluder.distance < distance_to_light(light_id, hit_point):
            visible = 0
    return visible
