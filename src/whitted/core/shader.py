"""Whitted-style shading and the render kernel.

cast_ray() evaluates the classic recursive recurrence

    color(ray, depth) = black                                   if depth >= max depth or miss
                      = base                                    diffuse surface
                      = base * (1 - r) + color(reflected, depth + 1) * r     reflective
                      = base * (1 - t) + color(transmitted, depth + 1) * t   refractive

where base is the diffuse shading of the hit surface. Every material spawns
at most one secondary ray, so the recursion unrolls into a loop that carries
the weight of the remaining contribution: Taichi functions cannot recurse.
Under total internal reflection a refractive surface contributes its full
base color and the ray stops.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.core.shader import render
    >>> from src.whitted.scene.demo_scene import create_demo_scene
    >>> scene = create_demo_scene(320, 240)
    >>> image = render(scene)  # (240, 320, 3) float32, row 0 at the top
"""

import logging
import time
from collections.abc import Iterator
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.whitted.camera.pinhole import create_prime_ray
from src.whitted.core.ray import (
    Ray,
    color3,
    create_reflection,
    create_transmission,
    dot,
    make_ray,
    ray_at,
    vec3,
)
from src.whitted.core.vector import Point, Vector3
from src.whitted.lighting.lights import (
    direction_to_light,
    intensity_at,
    light_color,
    light_visible,
    num_lights,
)
from src.whitted.materials.coloration import clamp_color
from src.whitted.materials.material import (
    SurfaceType,
    material_albedos,
    material_color,
    material_indices,
    material_reflectivities,
    material_surface_types,
    material_transparencies,
)
from src.whitted.scene.intersection import (
    check_invariants,
    element_material_ids,
    element_normal,
    element_texture_coords,
    trace,
)

if TYPE_CHECKING:
    from src.whitted.scene.manager import RenderSettings, SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Render Configuration
# =============================================================================

_shadow_bias = ti.field(dtype=ti.f64, shape=())
_max_recursion_depth = ti.field(dtype=ti.i32, shape=())


def configure_render(settings: "RenderSettings") -> None:
    """Copy the shading parameters of a RenderSettings into kernel state."""
    _shadow_bias[None] = settings.shadow_bias
    _max_recursion_depth[None] = settings.max_recursion_depth


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Indexed [row, column] so the active region converts directly to (H, W, 3)
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))


# =============================================================================
# Shading (Taichi-compatible)
# =============================================================================


@ti.func
def shade_diffuse(element: ti.i32, hit_point: vec3, normal: vec3) -> color3:
    """Lambertian shading of a surface point from every visible light.

    Each light contributes
    light_color * max(0, n . l) * intensity * (albedo / pi) * surface_color,
    or nothing when its shadow ray is blocked. The sum is clamped to [0, 1].

    Args:
        element: Id of the hit element.
        hit_point: The intersection point.
        normal: Unit surface normal at the hit point.

    Returns:
        The clamped diffuse color.
    """
    material_id = element_material_ids[element]
    surface_color = material_color(material_id, element_texture_coords(element, hit_point))
    reflected = material_albedos[material_id] / ti.math.pi

    color = color3(0.0, 0.0, 0.0)
    for light in range(num_lights[None]):
        if light_visible(light, hit_point, normal, _shadow_bias[None]) == 1:
            to_light = direction_to_light(light, hit_point)
            cos_theta = ti.max(ti.cast(dot(normal, to_light), ti.f32), 0.0)
            power = cos_theta * intensity_at(light, hit_point)
            color += light_color(light) * surface_color * (power * reflected)

    return clamp_color(color)


@ti.func
def cast_ray(ray: Ray, depth: ti.i32) -> color3:
    """Compute the color seen along a ray.

    Args:
        ray: The ray to shade (unit direction).
        depth: Number of reflection/refraction bounces already taken.

    Returns:
        The accumulated color. Black on a miss or once depth reaches the
        configured maximum recursion depth.
    """
    color = color3(0.0, 0.0, 0.0)
    weight = ti.cast(1.0, ti.f32)
    bias = _shadow_bias[None]

    # Active flag for continuation (no break in Taichi loops)
    active = 1
    current = ray

    for _ in range(depth, _max_recursion_depth[None]):
        if active == 1:
            intersection = trace(current)
            if intersection.hit == 0:
                active = 0
            else:
                element = intersection.element
                material_id = element_material_ids[element]
                hit_point = ray_at(current, intersection.distance)
                normal = element_normal(element, hit_point)
                base = shade_diffuse(element, hit_point, normal)
                surface_type = material_surface_types[material_id]

                if surface_type == int(SurfaceType.REFLECTIVE):
                    reflectivity = material_reflectivities[material_id]
                    color += base * (weight * (1.0 - reflectivity))
                    weight *= reflectivity
                    current = create_reflection(normal, current.direction, hit_point, bias)

                elif surface_type == int(SurfaceType.REFRACTIVE):
                    transparency = material_transparencies[material_id]
                    index = ti.cast(material_indices[material_id], ti.f64)
                    transmitted, refracted = create_transmission(
                        normal, current.direction, hit_point, bias, index
                    )
                    if transmitted == 1:
                        color += base * (weight * (1.0 - transparency))
                        weight *= transparency
                        current = refracted
                    else:
                        # Total internal reflection: no transmitted ray
                        color += base * weight
                        active = 0

                else:
                    color += base * weight
                    active = 0

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(width: ti.i32, height: ti.i32, fov_adjustment: ti.f64):
    """Shade one primary ray through the center of every pixel."""
    for y, x in ti.ndrange(height, width):
        ray = create_prime_ray(x, y, width, height, fov_adjustment)
        _color_buffer[y, x] = cast_ray(ray, 0)


_single_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_single_direction = ti.Vector.field(3, dtype=ti.f64, shape=())
_single_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _cast_single_kernel(depth: ti.i32):
    ray = make_ray(_single_origin[None], _single_direction[None])
    _single_color[None] = cast_ray(ray, depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def render(scene: "SceneManager") -> npt.NDArray[np.float32]:
    """Render every pixel of a scene.

    Args:
        scene: The populated scene. Its settings provide the image size,
            field of view, shadow bias and maximum recursion depth.

    Returns:
        A float32 array of shape (height, width, 3). Row 0 is the top of
        the image. Colors are not clamped beyond the per-surface clamp.

    Raises:
        ValueError: If the image is larger than the preallocated buffer.
        IntersectionInvariantError: If an invalid intersection was built
            during the render. No image is returned in that case.
    """
    settings = scene.settings
    width, height = settings.width, settings.height
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    configure_render(settings)
    logger.info(
        "Rendering %dx%d: %d elements, %d lights, max depth %d",
        width,
        height,
        scene.get_element_count(),
        scene.get_light_count(),
        settings.max_recursion_depth,
    )

    start = time.perf_counter()
    _render_kernel(width, height, settings.camera().fov_adjustment)
    ti.sync()
    check_invariants()
    image = _color_buffer.to_numpy()[:height, :width]

    logger.info("Rendered %dx%d in %.3f s", width, height, time.perf_counter() - start)
    return image.astype(np.float32)


def iter_pixels(scene: "SceneManager") -> Iterator[tuple[int, int, tuple[float, float, float]]]:
    """Render a scene and yield its pixels one at a time.

    Pixels come out in row-major order starting at the top-left.

    Yields:
        (x, y, (red, green, blue)) for each pixel.
    """
    image = render(scene)
    height, width = image.shape[:2]
    for y in range(height):
        for x in range(width):
            r, g, b = image[y, x]
            yield x, y, (float(r), float(g), float(b))


def cast_ray_color(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    settings: "RenderSettings",
    depth: int = 0,
) -> tuple[float, float, float]:
    """Shade a single ray from Python.

    Useful for testing and debugging individual rays against the scene
    currently held in the arenas.

    Args:
        origin: Ray origin.
        direction: Ray direction (non-zero). Normalized first.
        settings: Provides the shadow bias and maximum recursion depth.
        depth: Bounces already taken.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        ValueError: If the direction has zero length or depth is negative.
        IntersectionInvariantError: If an invalid intersection was built.
    """
    if depth < 0:
        raise ValueError(f"Depth must be non-negative, got {depth}")
    o = Point.of(origin)
    d = Vector3.of(direction).normalize()

    configure_render(settings)
    _single_origin[None] = [o.x, o.y, o.z]
    _single_direction[None] = [d.x, d.y, d.z]
    _cast_single_kernel(depth)
    check_invariants()

    color = _single_color[None]
    return float(color[0]), float(color[1]), float(color[2])
