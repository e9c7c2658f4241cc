"""Surface coloration: constant colors and wrapped image textures.

Textures are decoded elsewhere (see ``preview.export.load_texture``) and
handed to add_texture() as an (H, W, 3|4) array. All textures share one
texel atlas field; each texture records its offset and dimensions.

Sampling maps (u, v) to integer pixel coordinates by scaling with the
texture width/height, flooring, and wrapping with a true modulo so that
negative coordinates land in [0, dimension). Out-of-range coordinates are
normal (planes are infinite) and are never an error.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.materials.coloration import add_texture
    >>> checker = np.zeros((8, 8, 3), dtype=np.uint8)
    >>> texture_id = add_texture(checker)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import color3, vec2

logger = logging.getLogger(__name__)

# =============================================================================
# Texture Storage
# =============================================================================

# Maximum number of textures in the scene
MAX_TEXTURES = 64

# Total texel capacity shared by all textures
MAX_TEXELS = 1 << 20

texture_texels = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TEXELS)
texture_offsets = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_widths = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_heights = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
num_textures = ti.field(dtype=ti.i32, shape=())
num_texels = ti.field(dtype=ti.i32, shape=())


def clear_textures() -> None:
    """Clear all textures.

    Resets the texture and texel counts to zero. Texel data is overwritten
    when new textures are added.
    """
    num_textures[None] = 0
    num_texels[None] = 0


def _as_rgb_float(image: npt.ArrayLike) -> npt.NDArray[np.float32]:
    """Convert a decoded image to a contiguous float32 (H, W, 3) array in [0, 1].

    Accepts grayscale (H, W), RGB (H, W, 3) or RGBA (H, W, 4) data. Integer
    data is treated as 8-bit; alpha is dropped.
    """
    pixels = np.asarray(image)
    if pixels.ndim == 2:
        pixels = np.stack([pixels, pixels, pixels], axis=-1)
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError(
            f"Texture must have shape (H, W), (H, W, 3) or (H, W, 4), got {pixels.shape}"
        )
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ValueError(f"Texture must not be empty, got {pixels.shape}")

    rgb = pixels[:, :, :3]
    if np.issubdtype(rgb.dtype, np.integer):
        rgb = rgb.astype(np.float32) / 255.0
    return np.ascontiguousarray(rgb, dtype=np.float32)


@ti.kernel
def _upload_texels(offset: ti.i32, pixels: ti.types.ndarray(dtype=ti.f32, ndim=3)):
    width = pixels.shape[1]
    for y, x in ti.ndrange(pixels.shape[0], width):
        texture_texels[offset + y * width + x] = color3(
            pixels[y, x, 0], pixels[y, x, 1], pixels[y, x, 2]
        )


def add_texture(image: npt.ArrayLike) -> int:
    """Add a decoded image to the texture registry.

    Row 0 of the image is v-pixel 0 and column 0 is u-pixel 0.

    Args:
        image: Pixel grid of shape (H, W), (H, W, 3) or (H, W, 4). uint8
            data is scaled to [0, 1]; float data is used as is.

    Returns:
        The index of the added texture.

    Raises:
        ValueError: If the image has an unsupported shape.
        RuntimeError: If the texture or texel capacity is exceeded.
    """
    pixels = _as_rgb_float(image)
    height, width = pixels.shape[0], pixels.shape[1]

    idx = num_textures[None]
    if idx >= MAX_TEXTURES:
        raise RuntimeError(f"Maximum number of textures ({MAX_TEXTURES}) exceeded")

    offset = num_texels[None]
    if offset + width * height > MAX_TEXELS:
        raise RuntimeError(
            f"Texture of {width}x{height} does not fit in the texel atlas "
            f"({MAX_TEXELS - offset} texels left)"
        )

    _upload_texels(offset, pixels)
    texture_offsets[idx] = offset
    texture_widths[idx] = width
    texture_heights[idx] = height
    num_textures[None] = idx + 1
    num_texels[None] = offset + width * height

    logger.debug("Added texture %d (%dx%d) at texel offset %d", idx, width, height, offset)
    return idx


def get_texture_count() -> int:
    """Get the number of textures in the registry."""
    return int(num_textures[None])


def get_texture_size(texture_id: int) -> tuple[int, int]:
    """Get the (width, height) of a texture.

    Raises:
        ValueError: If texture_id is invalid.
    """
    if texture_id < 0 or texture_id >= num_textures[None]:
        raise ValueError(f"Invalid texture_id: {texture_id}")
    return int(texture_widths[texture_id]), int(texture_heights[texture_id])


# =============================================================================
# Sampling (Taichi-compatible)
# =============================================================================


@ti.func
def wrap_coordinate(value: ti.f64, bound: ti.i32) -> ti.i32:
    """Map a texture coordinate to a pixel index in [0, bound).

    The coordinate is scaled by bound and floored, then reduced with a
    mathematical modulo: -1 wraps to bound - 1, and the result is periodic
    with period bound in the scaled coordinate.

    Args:
        value: Texture-space coordinate (any finite value).
        bound: Texture dimension in pixels (positive).

    Returns:
        The wrapped pixel index.
    """
    # Reduce in floating point; the scaled value can exceed the i32 range
    raw = ti.floor(value * bound)
    size = ti.cast(bound, ti.f64)
    reduced = raw - size * ti.floor(raw / size)
    wrapped = ti.cast(reduced, ti.i32)
    if wrapped < 0:
        wrapped += bound
    elif wrapped >= bound:
        wrapped -= bound
    return wrapped


@ti.func
def sample_texture(texture_id: ti.i32, coords: vec2) -> color3:
    """Look up the texel under wrapped (u, v) coordinates.

    Args:
        texture_id: Index of the texture in the registry.
        coords: Texture coordinates (u, v), unbounded.

    Returns:
        The texel color.
    """
    width = texture_widths[texture_id]
    height = texture_heights[texture_id]
    x = wrap_coordinate(coords.x, width)
    y = wrap_coordinate(coords.y, height)
    return texture_texels[texture_offsets[texture_id] + y * width + x]


@ti.func
def clamp_color(color: color3) -> color3:
    """Clamp each channel to [0, 1]."""
    return tm.clamp(color, 0.0, 1.0)
