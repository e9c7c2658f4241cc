"""Image export and texture decoding.

Rendered images are float32 arrays of shape (H, W, 3) with row 0 at the top.
Conversion to 8 bits clamps each channel to [0, 1], optionally applies gamma
encoding, multiplies by 255 and truncates.

Supported formats:
    - PNG (8-bit RGB via Pillow)
    - Any format Pillow can decode, for textures

Example:
    >>> from src.whitted.core.shader import render
    >>> from src.whitted.preview.export import save_png
    >>>
    >>> image = render(scene)
    >>> save_png(image, "output.png")
"""

from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding to an image.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value. 1.0 leaves the image unchanged.

    Returns:
        Gamma encoded image, clamped to [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)
    if gamma == 1.0:
        return image.astype(np.float32)

    # out = in^(1/gamma)
    result = np.power(image, 1.0 / gamma)

    return result.astype(np.float32)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a float image to 8 bits per channel.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma encoding applied after clamping (default 1.0, none).

    Returns:
        Array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the image is not (H, W, 3).
    """
    image = np.asarray(image, dtype=np.float32)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    processed = apply_gamma(image, gamma)

    # Truncate, no rounding
    return (processed * 255).astype(np.uint8)


def save_png(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a rendered image as an 8-bit RGB PNG.

    Args:
        image: Image array of shape (H, W, 3), row 0 at the top.
        filepath: Output file path (should end in .png).
        gamma: Gamma encoding (default 1.0, none).
    """
    image_uint8 = image_to_uint8(image, gamma=gamma)

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)
    logger.info("Saved %dx%d image to %s", image_uint8.shape[1], image_uint8.shape[0], filepath)


def load_texture(filepath: str) -> npt.NDArray[np.uint8]:
    """Decode an image file for use as a texture.

    Any alpha channel is dropped; palette and grayscale images are
    converted to RGB.

    Args:
        filepath: Path to an image file Pillow can read.

    Returns:
        A uint8 array of shape (H, W, 3).
    """
    with PILImage.open(filepath) as pil_image:
        rgb = pil_image.convert("RGB")
        pixels = np.asarray(rgb, dtype=np.uint8)
    logger.debug("Loaded %dx%d texture from %s", pixels.shape[1], pixels.shape[0], filepath)
    return pixels
