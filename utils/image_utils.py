"""
Image utility functions for decoding, encoding and resampling
"""

import cv2
import numpy as np
from pathlib import Path
from typing import Optional, Tuple, Union
from PIL import Image

from utils.exceptions import (
    MissingFileError,
    UnsupportedImageFormatError,
    UnsupportedOutputFormatError,
)


JPEG_EXTENSIONS = ("jpg", "jpeg", "JPG", "JPEG")
PNG_EXTENSIONS = ("png", "PNG")


def image_format(image_path: Union[str, Path]) -> Optional[str]:
    """
    Map a filename to "jpeg", "png" or None by its extension

    Args:
        image_path: File name or path

    Returns:
        Format name, None if neither JPEG nor PNG
    """
    ext = Path(image_path).suffix.lstrip(".")
    if ext in JPEG_EXTENSIONS:
        return "jpeg"
    if ext in PNG_EXTENSIONS:
        return "png"
    return None


def load_image(image_path: Union[str, Path]) -> Image.Image:
    """
    Load a JPEG or PNG file

    Args:
        image_path: Path to image file

    Returns:
        Image in RGBA mode (alpha preserved for PNG)
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise MissingFileError(image_path)
    if image_format(image_path) is None:
        raise UnsupportedImageFormatError(image_path)

    # Load with OpenCV, keep alpha and bit depth
    img = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise UnsupportedImageFormatError(image_path)

    if img.dtype != np.uint8:
        img = (img / 257).astype(np.uint8)

    if img.ndim == 2:
        rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif img.shape[2] == 4:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    else:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)

    return Image.fromarray(rgba)


def read_dpi(image_path: Union[str, Path]) -> Optional[float]:
    """
    Read the horizontal resolution stored in an image file

    Returns:
        DPI or None if the file carries no resolution
    """
    with Image.open(image_path) as img:
        dpi = img.info.get("dpi")
    if not dpi or not dpi[0]:
        return None
    return float(dpi[0])


def resize_image(image: Image.Image, target_size: Tuple[int, int]) -> Image.Image:
    """
    Resample an image to an exact size

    Args:
        image: Input image (RGBA)
        target_size: (width, height), each at least 1

    Returns:
        Resized image
    """
    target_w, target_h = max(1, int(round(target_size[0]))), max(1, int(round(target_size[1])))
    if (target_w, target_h) == image.size:
        return image.copy()

    arr = np.array(image)
    # INTER_AREA for shrinking, LANCZOS4 for enlarging
    shrinking = target_w * target_h < image.width * image.height
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LANCZOS4
    resized = cv2.resize(arr, (target_w, target_h), interpolation=interpolation)
    return Image.fromarray(resized)


def _to_bgr(image: Image.Image) -> np.ndarray:
    return cv2.cvtColor(np.array(image.convert("RGB")), cv2.COLOR_RGB2BGR)


def encode_image(image: Image.Image, fmt: str = "jpeg", quality: int = 100) -> bytes:
    """
    Encode an image to JPEG or PNG bytes

    Args:
        image: Image to encode
        fmt: "jpeg" or "png"
        quality: JPEG quality (0-100), ignored for PNG

    Returns:
        Encoded bytes
    """
    if fmt == "jpeg":
        ok, buf = cv2.imencode(".jpg", _to_bgr(image), [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    elif fmt == "png":
        ok, buf = cv2.imencode(".png", _to_bgr(image))
    else:
        raise UnsupportedOutputFormatError(f"*.{fmt}")
    if not ok:
        raise ValueError(f"Failed to encode image as {fmt}")
    return buf.tobytes()


def save_image(image: Image.Image, output_path: Union[str, Path], quality: int = 100) -> Path:
    """
    Save image to file, format chosen by extension

    Args:
        image: Image to save
        output_path: Output file path (.jpg/.jpeg/.png)
        quality: JPEG quality (0-100)

    Returns:
        The path written
    """
    output_path = Path(output_path)
    fmt = image_format(output_path)
    if fmt is None:
        raise UnsupportedOutputFormatError(output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Encode in memory: the codec is picked by format, not by extension case
    output_path.write_bytes(encode_image(image, fmt, quality))

    return output_path
