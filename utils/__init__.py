"""
Utility Functions
"""

from .image_utils import (
    image_format,
    load_image,
    save_image,
    resize_image,
    encode_image,
)

__all__ = [
    "image_format",
    "load_image",
    "save_image",
    "resize_image",
    "encode_image",
]
