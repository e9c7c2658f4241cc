"""Core rendering module.

Components:
    vector: Python-side Vector3 and Point value types
    ray: Ray data structure, vector helpers and secondary ray construction
    shader: Diffuse shading, the cast_ray recurrence and the render entry points

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    color3,
    create_reflection,
    create_transmission,
    cross,
    distance,
    distance_squared,
    dot,
    length,
    length_squared,
    make_ray,
    normalize,
    ray_at,
    reflect,
    vec2,
    vec3,
)
from .vector import Point, Vector3

# Note: shader is NOT imported here to avoid circular imports.
# Import directly from src.whitted.core.shader when needed.

__all__ = [
    "Point",
    "Vector3",
    "Ray",
    "ray_at",
    "make_ray",
    "vec2",
    "vec3",
    "color3",
    "length",
    "length_squared",
    "normalize",
    "distance",
    "distance_squared",
    "dot",
    "cross",
    "reflect",
    "create_reflection",
    "create_transmission",
]
