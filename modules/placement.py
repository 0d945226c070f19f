"""
Fit-and-Place Engine - Aspect preserving placement of an image inside a box
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from utils.exceptions import InvalidAlignmentError


class Alignment(str, Enum):
    """Alignment keywords shared by image fitting and text anchoring"""
    CENTER = "center"
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


IMAGE_ALIGNMENTS = tuple(Alignment)
TEXT_ALIGNMENTS = (Alignment.CENTER, Alignment.LEFT, Alignment.RIGHT)


def parse_alignment(value, allowed=IMAGE_ALIGNMENTS) -> Alignment:
    """
    Parse an alignment keyword (case-insensitive)

    Raises:
        InvalidAlignmentError: unknown keyword or not allowed in this context
    """
    if isinstance(value, Alignment):
        align = value
    else:
        try:
            align = Alignment(str(value).strip().lower())
        except ValueError:
            raise InvalidAlignmentError(value, [a.value for a in allowed]) from None
    if align not in allowed:
        raise InvalidAlignmentError(value, [a.value for a in allowed])
    return align


@dataclass
class BoundingBox:
    """Axis aligned pixel rectangle (x0, y0) - (x1, y1)"""
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def as_tuple(self) -> tuple:
        return (self.x0, self.y0, self.x1, self.y1)


@dataclass(frozen=True)
class Rect:
    """Placement rectangle in pixels (may extend beyond the box)"""
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h


def place(src_w: float, src_h: float, box: BoundingBox, align: Optional[Alignment] = None) -> Rect:
    """
    Fit a src_w x src_h image inside box, preserving its aspect ratio

    An image narrower than the box fills the box height and is centered
    horizontally (LEFT/RIGHT pin it to a side). Otherwise it fills the box width
    and is centered vertically (TOP/BOTTOM pin it). Alignments that do not apply
    to the chosen branch are ignored. The result is not clipped to the box.

    Args:
        src_w: Source width in pixels
        src_h: Source height in pixels
        box: Destination box
        align: Alignment, None behaves like CENTER

    Returns:
        Destination rectangle
    """
    if src_w <= 0 or src_h <= 0:
        raise ValueError(f"Invalid source size {src_w}x{src_h}")

    # src_w/src_h < box_w/box_h, without dividing by a zero box height
    if src_w * box.height < box.width * src_h:
        dst_h = box.height
        dst_w = src_w / src_h * dst_h
        dst_y = box.y0
        if align is Alignment.LEFT:
            dst_x = box.x0
        elif align is Alignment.RIGHT:
            dst_x = box.x1 - dst_w
        else:
            dst_x = box.x0 + (box.width - dst_w) / 2
    else:
        dst_w = box.width
        dst_h = src_h / src_w * dst_w
        dst_x = box.x0
        if align is Alignment.TOP:
            dst_y = box.y0
        elif align is Alignment.BOTTOM:
            dst_y = box.y1 - dst_h
        else:
            dst_y = box.y0 + (box.height - dst_h) / 2

    return Rect(dst_x, dst_y, dst_w, dst_h)
