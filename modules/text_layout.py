"""
Text Autofit Engine - Shrink-to-fit font sizing and anchor alignment
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from loguru import logger

from modules.placement import Alignment, TEXT_ALIGNMENTS, parse_alignment


MIN_FONT_SIZE = 8
SHRINK_RATIO = 1.1


class FontMetrics(Protocol):
    def text_width(self, text: str, size: float) -> float: ...

    def text_height(self, text: str, size: float) -> float: ...


@dataclass(frozen=True)
class TextPlacement:
    """Where and how large a line of text is drawn"""
    size: float
    x: float
    y: float  # baseline
    width: float
    height: float

    @property
    def origin(self) -> Tuple[float, float]:
        return (self.x, self.y)


def fit_font_size(
    text: str,
    font: FontMetrics,
    start_size: float,
    max_width: Optional[float] = None,
) -> Tuple[float, float]:
    """
    Shrink the font size by SHRINK_RATIO until the text fits max_width

    Shrinking stops at MIN_FONT_SIZE even when the text is still too wide.

    Returns:
        (size, width) actually used
    """
    size = start_size
    width = font.text_width(text, size)
    if max_width is None:
        return size, width

    while width > max_width and size > MIN_FONT_SIZE:
        size = max(MIN_FONT_SIZE, size / SHRINK_RATIO)
        width = font.text_width(text, size)

    if size != start_size:
        logger.debug(f"Autofit {text[:30]!r}: {start_size:.1f} -> {size:.1f} (width {width:.0f}/{max_width:.0f})")
    return size, width


def place_text(
    text: str,
    font: FontMetrics,
    start_size: float,
    anchor: Tuple[float, float],
    align: Alignment = Alignment.CENTER,
    max_width: Optional[float] = None,
) -> TextPlacement:
    """
    Compute the draw origin and final size for one line of text

    Args:
        text: Line to draw
        font: Font providing metrics
        start_size: Requested size
        anchor: (x, y) cursor; y is the baseline
        align: CENTER, LEFT or RIGHT relative to anchor x
        max_width: Width limit in pixels, None for unconstrained

    Returns:
        TextPlacement with the size actually used and its measured height
    """
    align = parse_alignment(align, TEXT_ALIGNMENTS)

    size, width = fit_font_size(text, font, start_size, max_width)
    anchor_x, anchor_y = anchor

    if align is Alignment.CENTER:
        x = anchor_x - width / 2
    elif align is Alignment.LEFT:
        x = anchor_x
    else:
        x = anchor_x - width

    return TextPlacement(
        size=size,
        x=x,
        y=anchor_y,
        width=width,
        height=font.text_height(text, size),
    )
