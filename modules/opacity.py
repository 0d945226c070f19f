"""
Opacity Compositor - Rescale the alpha channel of an image before blitting

Alpha is handled on the 7-bit transparency scale used by classic raster
libraries: 0 is fully opaque and 127 is fully transparent. Pillow's 8-bit
opacity is converted to that scale and back.
"""

from typing import Optional

import numpy as np
from PIL import Image
from loguru import logger


ALPHA_OPAQUE = 0
ALPHA_TRANSPARENT = 127


def to_transparency(alpha8: np.ndarray) -> np.ndarray:
    """8-bit opacity (255 = opaque) -> 7-bit transparency (127 = transparent)"""
    return ALPHA_TRANSPARENT - (alpha8.astype(np.int32) >> 1)


def to_opacity(alpha7: np.ndarray) -> np.ndarray:
    """7-bit transparency -> 8-bit opacity"""
    alpha7 = alpha7.astype(np.int32)
    return (255 - ((alpha7 << 1) + (alpha7 >> 6))).astype(np.uint8)


def apply_opacity(image: Image.Image, opacity: Optional[float]) -> bool:
    """
    Scale the transparency of every pixel towards the target opacity (in place)

    The most opaque pixel is located first and used to normalize the scale, so
    that an image which is already partly transparent ends up with its most
    opaque pixel at the requested opacity. If every pixel is fully transparent
    the value is shifted instead.

    Args:
        image: Source image, converted to RGBA in place if needed
        opacity: Target opacity in percent (None or >= 100 means untouched)

    Returns:
        True if the alpha channel was rewritten, False for a no-op
    """
    if opacity is None or opacity >= 100:
        return False

    factor = opacity / 100

    if image.mode != "RGBA":
        image.putalpha(255)

    alpha = to_transparency(np.asarray(image.getchannel("A")))
    min_alpha = int(alpha.min())

    if min_alpha != ALPHA_TRANSPARENT:
        scaled = ALPHA_TRANSPARENT + ALPHA_TRANSPARENT * factor * (alpha - ALPHA_TRANSPARENT) / (
            ALPHA_TRANSPARENT - min_alpha
        )
    else:
        scaled = alpha + ALPHA_TRANSPARENT * factor

    scaled = np.clip(np.trunc(scaled), ALPHA_OPAQUE, ALPHA_TRANSPARENT)
    image.putalpha(Image.fromarray(to_opacity(scaled)))

    logger.debug(f"Opacity {opacity}% applied (min transparency {min_alpha})")
    return True
