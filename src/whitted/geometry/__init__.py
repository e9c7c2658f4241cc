"""Geometric primitives: spheres and infinite planes.

Each primitive provides ray intersection, a surface normal and texture
coordinates as Taichi functions.
"""

from .plane import Plane, intersect_plane, plane_normal, plane_texture_coords
from .sphere import Sphere, intersect_sphere, sphere_normal, sphere_texture_coords

__all__ = [
    "Plane",
    "intersect_plane",
    "plane_normal",
    "plane_texture_coords",
    "Sphere",
    "intersect_sphere",
    "sphere_normal",
    "sphere_texture_coords",
]
