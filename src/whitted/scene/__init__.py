"""Scene module for element storage and ray-scene queries.

Components:
    intersection: Element arena, Intersection records and nearest-hit tracing
    manager: SceneManager and RenderSettings for building scenes
    demo_scene: The three-spheres demo scene

Scene data lives in structure-of-arrays Taichi fields indexed by element id.
"""

from .intersection import (
    MAX_ELEMENTS,
    ElementKind,
    Intersection,
    IntersectionInvariantError,
    add_plane,
    add_sphere,
    check_invariants,
    clear_scene,
    get_element_count,
    trace,
    trace_ray,
)

# Note: manager and demo_scene are NOT imported here to avoid circular imports
# (lighting depends on intersection, and manager depends on lighting).
# Import directly from src.whitted.scene.manager or src.whitted.scene.demo_scene.

__all__ = [
    "MAX_ELEMENTS",
    "ElementKind",
    "Intersection",
    "IntersectionInvariantError",
    "add_plane",
    "add_sphere",
    "check_invariants",
    "clear_scene",
    "get_element_count",
    "trace",
    "trace_ray",
]
