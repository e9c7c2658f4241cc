"""Demo scene: three reflective spheres above a reflective floor.

The scene consists of:
- Blue, red and green spheres, each slightly reflective
- A reflective floor plane at y = -2 (checkerboard texture or plain red)
- A diffuse sky-blue back plane at z = -20
- Two white directional lights and one pale green spherical light

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.demo_scene import create_demo_scene
    >>> scene = create_demo_scene(800, 600)
    >>> scene.get_element_count(), scene.get_light_count()
    (5, 3)
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from src.whitted.scene.manager import RenderSettings, SceneManager

# =============================================================================
# Demo Scene Parameters
# =============================================================================

DEMO_FOV = 90.0
DEMO_SHADOW_BIAS = 1e-6
DEMO_MAX_RECURSION_DEPTH = 10

CHECKER_LIGHT = (230, 230, 230)
CHECKER_DARK = (40, 40, 40)


def make_checkerboard(size: int = 256, squares: int = 8) -> npt.NDArray[np.uint8]:
    """Generate an RGB checkerboard image.

    Args:
        size: Width and height of the image in pixels.
        squares: Number of squares along each edge.

    Returns:
        A uint8 array of shape (size, size, 3).

    Raises:
        ValueError: If size or squares is not positive.
    """
    if size <= 0 or squares <= 0:
        raise ValueError(f"size and squares must be positive, got {size} and {squares}")

    cell = np.arange(size) * squares // size
    parity = (cell[:, None] + cell[None, :]) % 2
    image = np.empty((size, size, 3), dtype=np.uint8)
    image[parity == 0] = CHECKER_LIGHT
    image[parity == 1] = CHECKER_DARK
    return image


def create_demo_scene(
    width: int,
    height: int,
    textured: bool = True,
    floor_texture: npt.ArrayLike | None = None,
    max_recursion_depth: int = DEMO_MAX_RECURSION_DEPTH,
) -> SceneManager:
    """Create the demo scene.

    Args:
        width: Image width in pixels.
        height: Image height in pixels (at most width).
        textured: Whether the floor is textured. When False the floor is
            plain red.
        floor_texture: Decoded image for the floor. Defaults to a generated
            checkerboard. Ignored when textured is False.
        max_recursion_depth: Maximum reflection/refraction bounces.

    Returns:
        A populated SceneManager.
    """
    settings = RenderSettings(
        width=width,
        height=height,
        fov=DEMO_FOV,
        shadow_bias=DEMO_SHADOW_BIAS,
        max_recursion_depth=max_recursion_depth,
    )
    scene = SceneManager(settings)

    # Lights
    white = (1.0, 1.0, 1.0)
    scene.add_spherical_light(position=(2.0, 0.0, -3.0), color=(0.8, 1.0, 0.8), intensity=300.0)
    scene.add_directional_light(direction=(0.025, 1.0, -1.0), color=white, intensity=20.0)
    scene.add_directional_light(direction=(-0.25, -1.0, -1.0), color=white, intensity=20.0)

    # Spheres
    blue = scene.add_reflective_material(albedo=0.58, reflectivity=0.1, color=(0.2, 0.2, 1.0))
    red = scene.add_reflective_material(albedo=0.08, reflectivity=0.1, color=(1.0, 0.2, 0.2))
    green = scene.add_reflective_material(albedo=0.18, reflectivity=0.2, color=(0.2, 1.0, 0.2))
    scene.add_sphere(center=(-3.0, 1.0, -6.0), radius=2.0, material_id=blue)
    scene.add_sphere(center=(2.7, 1.5, -5.0), radius=2.0, material_id=red)
    scene.add_sphere(center=(0.0, 0.0, -4.0), radius=1.0, material_id=green)

    # Floor
    if textured:
        image = make_checkerboard() if floor_texture is None else floor_texture
        floor = scene.add_reflective_material(
            albedo=0.18, reflectivity=0.3, texture_id=scene.add_texture(image)
        )
    else:
        floor = scene.add_reflective_material(albedo=0.18, reflectivity=0.3, color=(1.0, 0.0, 0.0))
    scene.add_plane(point=(0.0, -2.0, 0.0), normal=(0.0, -1.0, 0.0), material_id=floor)

    # Back wall
    sky = scene.add_diffuse_material(albedo=0.18, color=(0.6, 0.8, 1.0))
    scene.add_plane(point=(0.0, 0.0, -20.0), normal=(0.0, 0.0, -1.0), material_id=sky)

    return scene
