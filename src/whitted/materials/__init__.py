"""Materials module.

Components:
    coloration: Texture storage and wrapped texture sampling
    material: Material registry (albedo, coloration, surface type)
"""

from .coloration import (
    MAX_TEXTURES,
    add_texture,
    clear_textures,
    get_texture_count,
    get_texture_size,
)
from .material import (
    MAX_MATERIALS,
    ColorationKind,
    SurfaceType,
    add_material,
    clear_materials,
    get_material_count,
)

__all__ = [
    "MAX_TEXTURES",
    "add_texture",
    "clear_textures",
    "get_texture_count",
    "get_texture_size",
    "MAX_MATERIALS",
    "ColorationKind",
    "SurfaceType",
    "add_material",
    "clear_materials",
    "get_material_count",
]
