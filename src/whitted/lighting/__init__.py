"""Light sources: directional lights and spherical point lights."""

from src.whitted.lighting.lights import (
    LightType,
    add_directional_light,
    add_spherical_light,
    clear_lights,
    get_light_count,
)

__all__ = [
    "LightType",
    "add_directional_light",
    "add_spherical_light",
    "clear_lights",
    "get_light_count",
]
