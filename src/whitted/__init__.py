"""Whitted-style recursive ray tracer built on Taichi.

This package renders a 2D image from spheres, planes, lights and materials by
recursive ray casting:
- Pinhole camera primary rays
- Brute-force nearest-hit tracing over a closed set of primitives
- Diffuse shading with hard shadows from directional and spherical lights
- Depth-limited reflection and refraction
- Constant or texture-sampled surface colors

Subpackages:
    core: Vector math, rays and the recursive shader
    geometry: Sphere and plane primitives
    materials: Material registry and coloration (texture sampling)
    lighting: Directional and spherical lights
    camera: Pinhole camera model
    scene: Element arena, scene tracing and the scene manager
    preview: Image export utilities
"""

__version__ = "0.1.0"
