"""Pinhole camera: prime ray generation.

The camera sits at the origin looking down -z with +y up. The image plane
sits at z = -1 and spans [-aspect*fov_adj, aspect*fov_adj] horizontally and
[-fov_adj, fov_adj] vertically, where fov_adj = tan(fov / 2). Pixel (0, 0)
is the top-left of the image; rays pass through pixel centers.

Example:
    >>> camera = PinholeCamera(width=800, height=600, fov=90.0)
    >>> direction = get_prime_ray(400, 300, camera)  # Nearly (0, 0, -1)
"""

import math
from dataclasses import dataclass

import taichi as ti

from src.whitted.core.ray import Ray, make_ray, vec3


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the pinhole camera.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels. Must not exceed width.
        fov: Field of view in degrees, in (0, 180).
    """

    width: int
    height: int
    fov: float = 90.0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.width < self.height:
            raise ValueError(
                f"Image width ({self.width}) must be at least the height ({self.height})"
            )
        if not 0.0 < self.fov < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {self.fov}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def fov_adjustment(self) -> float:
        """tan(fov / 2): half-height of the image plane at unit distance."""
        return math.tan(math.radians(self.fov) / 2.0)


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def create_prime_ray(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    fov_adjustment: ti.f64,
) -> Ray:
    """Generate the ray through the center of pixel (x, y).

    Args:
        x: Column, 0 at the left edge.
        y: Row, 0 at the top edge.
        width: Image width in pixels.
        height: Image height in pixels.
        fov_adjustment: tan(fov / 2).

    Returns:
        A ray from the origin with a unit direction through the pixel.
    """
    aspect_ratio = ti.cast(width, ti.f64) / ti.cast(height, ti.f64)
    sensor_x = (((x + 0.5) / width) * 2.0 - 1.0) * aspect_ratio * fov_adjustment
    sensor_y = (1.0 - ((y + 0.5) / height) * 2.0) * fov_adjustment
    return make_ray(vec3(0.0, 0.0, 0.0), vec3(sensor_x, sensor_y, -1.0))


_prime_direction = ti.Vector.field(3, dtype=ti.f64, shape=())


@ti.kernel
def _prime_ray_kernel(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32, fov_adjustment: ti.f64):
    _prime_direction[None] = create_prime_ray(x, y, width, height, fov_adjustment).direction


def get_prime_ray(x: int, y: int, camera: PinholeCamera) -> tuple[float, float, float]:
    """Compute the prime ray direction for a pixel from Python.

    Args:
        x: Column in [0, width).
        y: Row in [0, height).
        camera: Camera configuration.

    Returns:
        The unit direction of the ray; its origin is always (0, 0, 0).

    Raises:
        ValueError: If the pixel lies outside the image.
    """
    if not (0 <= x < camera.width and 0 <= y < camera.height):
        raise ValueError(f"Pixel ({x}, {y}) is outside a {camera.width}x{camera.height} image")
    _prime_ray_kernel(x, y, camera.width, camera.height, camera.fov_adjustment)
    d = _prime_direction[None]
    return float(d[0]), float(d[1]), float(d[2])
