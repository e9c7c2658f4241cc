"""Material registry: coloration, albedo and surface type.

A material combines:
- a coloration: a constant RGB color or a texture id
- an albedo in (0, 1]: fraction of incident light reflected diffusely
- a surface type, exactly one of
    DIFFUSE
    REFLECTIVE (reflectivity in [0, 1])
    REFRACTIVE (index of refraction >= 1, transparency in [0, 1])

Reflective and refractive behavior are mutually exclusive per material.

Material properties are stored in structure-of-arrays Taichi fields and
addressed by material id inside kernels.
"""

import logging
from enum import IntEnum

import taichi as ti

from src.whitted.core.ray import color3, vec2
from src.whitted.materials.coloration import num_textures, sample_texture

logger = logging.getLogger(__name__)


class SurfaceType(IntEnum):
    """How a surface combines its own color with secondary rays."""

    DIFFUSE = 0
    REFLECTIVE = 1
    REFRACTIVE = 2


class ColorationKind(IntEnum):
    """Where a material's color comes from."""

    COLOR = 0
    TEXTURE = 1


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_MATERIALS = 1024

material_coloration_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_texture_ids = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_surface_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_reflectivities = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_indices = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_transparencies = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def _check_unit_interval(name: str, value: float) -> None:
    if value < 0.0 or value > 1.0:
        raise ValueError(f"{name} = {value} is outside [0, 1].")


def add_material(
    albedo: float,
    color: tuple[float, float, float] | None = None,
    texture_id: int | None = None,
    surface_type: SurfaceType = SurfaceType.DIFFUSE,
    reflectivity: float = 0.0,
    index: float = 1.0,
    transparency: float = 0.0,
) -> int:
    """Add a material to the registry.

    Exactly one of color and texture_id must be given.

    Args:
        albedo: Diffuse reflectance in (0, 1].
        color: Constant (R, G, B) color; components must be non-negative.
        texture_id: Index of a texture from add_texture().
        surface_type: DIFFUSE, REFLECTIVE or REFRACTIVE.
        reflectivity: Mirror blend weight in [0, 1]. REFLECTIVE only.
        index: Index of refraction, >= 1. REFRACTIVE only.
        transparency: Transmission blend weight in [0, 1]. REFRACTIVE only.

    Returns:
        The index of the added material.

    Raises:
        ValueError: If a parameter is out of range or the coloration is
            ambiguous.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    if (color is None) == (texture_id is None):
        raise ValueError("Exactly one of color and texture_id must be given")
    if not 0.0 < albedo <= 1.0:
        raise ValueError(f"Albedo = {albedo} is outside (0, 1].")

    surface_type = SurfaceType(surface_type)
    if surface_type == SurfaceType.REFLECTIVE:
        _check_unit_interval("Reflectivity", reflectivity)
    elif surface_type == SurfaceType.REFRACTIVE:
        if index < 1.0:
            raise ValueError(
                f"Index of refraction = {index} is less than 1.0. "
                "IOR must be >= 1.0 for physically meaningful materials."
            )
        _check_unit_interval("Transparency", transparency)

    if color is not None:
        if len(color) != 3:
            raise ValueError(f"Color must have 3 components, got {len(color)}")
        for i, component in enumerate(color):
            if component < 0.0:
                raise ValueError(f"Color component {i} = {component} is negative.")
    elif texture_id < 0 or texture_id >= num_textures[None]:
        raise ValueError(f"Invalid texture_id: {texture_id}")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    if color is not None:
        material_coloration_kinds[idx] = int(ColorationKind.COLOR)
        material_colors[idx] = [color[0], color[1], color[2]]
        material_texture_ids[idx] = -1
    else:
        material_coloration_kinds[idx] = int(ColorationKind.TEXTURE)
        material_colors[idx] = [0.0, 0.0, 0.0]
        material_texture_ids[idx] = texture_id
    material_albedos[idx] = albedo
    material_surface_types[idx] = int(surface_type)
    material_reflectivities[idx] = reflectivity
    material_indices[idx] = index
    material_transparencies[idx] = transparency
    num_materials[None] = idx + 1

    logger.debug("Added %s material %d", surface_type.name.lower(), idx)
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def material_color(material_id: ti.i32, coords: vec2) -> color3:
    """Resolve a material's color at the given texture coordinates.

    Constant colorations ignore coords.
    """
    result = material_colors[material_id]
    if material_coloration_kinds[material_id] == int(ColorationKind.TEXTURE):
        result = sample_texture(material_texture_ids[material_id], coords)
    return result
