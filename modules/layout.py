"""
Layout State - Bounding box, text cursor and per-command settings of a run
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from modules.colors import Color, resolve_color
from modules.document import Document
from modules.placement import Alignment, BoundingBox, Rect
from modules import units


@dataclass
class TextCursor:
    """Persistent text settings, kept until a command overrides them"""
    xp: float
    yp: float
    size: float
    color: Color
    font_name: str
    align: Alignment = Alignment.CENTER
    linespc: float = 1.45


@dataclass
class CommandSettings:
    """Transient settings, reset before every command"""
    image_align: Optional[Alignment] = None
    opacity: Optional[float] = None
    border: Optional[Color] = None
    max_width: Optional[float] = None


@dataclass
class LayoutDefaults:
    """Values a fresh layout starts from"""
    font_name: str = "GoNotoCurrent"
    fontsize: str = "2%"
    text_color: str = "black"
    linespc: float = 1.45

    @classmethod
    def from_settings(cls, settings) -> "LayoutDefaults":
        return cls(
            font_name=settings.DEFAULT_FONT,
            fontsize=settings.DEFAULT_FONTSIZE,
            text_color=settings.DEFAULT_TEXT_COLOR,
            linespc=settings.DEFAULT_LINESPC,
        )


class LayoutState:
    """
    Mutable layout context owned by one script run

    Holds the document being drawn on, the bounding box used by the next image,
    the text cursor and the transient per-command settings.
    """

    def __init__(self, document: Document, defaults: LayoutDefaults = None):
        self.defaults = defaults or LayoutDefaults()
        self.transient = CommandSettings()
        self.reset(document)

    def reset(self, document: Document) -> None:
        """
        Install a new document and return every setting to its default

        Args:
            document: Document that replaces the current one
        """
        self.document = document
        w, h = document.width, document.height
        self.bbox = BoundingBox(0, 0, w, h)
        self.cursor = TextCursor(
            xp=w / 2,
            yp=h / 2,
            size=self.vertical(self.defaults.fontsize),
            color=resolve_color(self.defaults.text_color),
            font_name=self.defaults.font_name,
            linespc=self.defaults.linespc,
        )
        self.reset_transient()
        logger.debug(f"Layout reset to {w}x{h}")

    def reset_transient(self) -> None:
        self.transient = CommandSettings()

    def horizontal(self, token) -> float:
        """Resolve a measurement against the document width"""
        return units.resolve(token, self.document.width, self.document.dpi)

    def vertical(self, token) -> float:
        """Resolve a measurement against the document height"""
        return units.resolve(token, self.document.height, self.document.dpi)

    def advance_after_image(self, rect: Rect) -> None:
        """
        Auto-flow: move the box right by the placed width, and wrap to the next
        row when its right edge passes the document width. The wrapped box is as
        wide as the placed image, not the previous box.
        """
        w, h = rect.w, rect.h
        box = self.bbox
        box.x0 += w
        box.x1 += w
        if box.x1 > self.document.width:
            box.x0 = 0
            box.x1 = w
            box.y0 += h
            box.y1 += h
        logger.debug(f"Next bbox {box.as_tuple()}")

    def advance_line(self, size: float) -> None:
        """Move the cursor down by line spacing x font size"""
        self.cursor.yp += self.cursor.linespc * size
