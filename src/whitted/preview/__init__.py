"""Preview module: converting, saving and loading images.

Components:
    export: 8-bit conversion, PNG export and texture decoding with Pillow
"""

from .export import apply_gamma, image_to_uint8, load_texture, save_png

__all__ = [
    "apply_gamma",
    "image_to_uint8",
    "load_texture",
    "save_png",
]
