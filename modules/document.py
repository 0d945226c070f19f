"""
Document - The canvas a script draws on
"""

from pathlib import Path
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw
from loguru import logger

from modules.colors import Color
from modules.placement import BoundingBox, Rect
from modules.text_layout import TextPlacement
from utils.image_utils import encode_image, load_image, read_dpi, resize_image, save_image


class Document:
    """
    Owns the pixel buffer (Pillow RGB image) and its resolution
    """

    def __init__(self, canvas: Image.Image, dpi: float, source: Optional[Path] = None):
        self.canvas = canvas.convert("RGB") if canvas.mode != "RGB" else canvas
        self.dpi = dpi
        self.source = source

    def __repr__(self) -> str:
        return f"Document({self.width}x{self.height}, dpi={self.dpi:g})"

    @classmethod
    def blank(cls, width: int, height: int, background: Color, dpi: float) -> "Document":
        """
        Create a new document filled with a background color

        Args:
            width: Width in pixels (at least 1)
            height: Height in pixels (at least 1)
            background: Fill color
            dpi: Resolution for physical units
        """
        width, height = int(width), int(height)
        if width < 1 or height < 1:
            raise ValueError(f"Cannot create a {width}x{height} document")
        canvas = Image.new("RGB", (width, height), background.rgb)
        logger.debug(f"New document {width}x{height} @ {dpi:g} dpi")
        return cls(canvas, dpi)

    @classmethod
    def from_file(cls, path: Path, default_dpi: float) -> "Document":
        """Open a JPEG/PNG file as the document, keeping its stored dpi if any"""
        canvas = load_image(path)
        dpi = read_dpi(path) or default_dpi
        logger.debug(f"Template {path} {canvas.width}x{canvas.height} @ {dpi:g} dpi")
        return cls(canvas, dpi, source=Path(path))

    @property
    def width(self) -> int:
        return self.canvas.width

    @property
    def height(self) -> int:
        return self.canvas.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.canvas.size

    def _draw(self) -> ImageDraw.ImageDraw:
        return ImageDraw.Draw(self.canvas)

    def fill(self, color: Color) -> None:
        """Paint-bucket fill starting at the top-left pixel"""
        ImageDraw.floodfill(self.canvas, (0, 0), color.rgb)

    def blit(self, image: Image.Image, rect: Rect) -> None:
        """
        Resample image to rect and composite it with its alpha channel

        Parts outside the canvas are clipped.
        """
        resized = resize_image(image.convert("RGBA"), (rect.w, rect.h))
        self.canvas.paste(resized, (int(rect.x), int(rect.y)), resized)

    def rectangle(self, box: BoundingBox, color: Color) -> None:
        x0, x1 = sorted((box.x0, box.x1))
        y0, y1 = sorted((box.y0, box.y1))
        self._draw().rectangle([x0, y0, x1, y1], outline=color.rgb)

    def polygon(
        self,
        points: Sequence[Tuple[float, float]],
        fill: Optional[Color],
        border: Optional[Color],
        thickness: int = 1,
    ) -> None:
        """
        Filled polygon, then its outline, then a round cap on every vertex

        Args:
            points: Corner points in drawing order
            fill: Fill color, None for no fill
            border: Outline color, None for no outline
            thickness: Outline width in pixels
        """
        draw = self._draw()
        points = [(float(x), float(y)) for x, y in points]
        if fill is not None:
            draw.polygon(points, fill=fill.rgb)
        if border is not None:
            draw.polygon(points, outline=border.rgb, width=max(1, int(thickness)))
            radius = (thickness - 1) / 2
            if radius > 0:
                for x, y in points:
                    draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=border.rgb)

    def text(self, font, placement: TextPlacement, text: str, color: Color) -> None:
        """Render one line at the placement's baseline origin"""
        font.draw(self._draw(), placement.origin, text, placement.size, color.rgb)

    def encode(self, fmt: str = "jpeg", quality: int = 100) -> bytes:
        return encode_image(self.canvas, fmt, quality)

    def save(self, path: Path, quality: int = 100) -> Path:
        path = save_image(self.canvas, path, quality)
        logger.info(f"💾 Saved {self.width}x{self.height} document to {path}")
        return path
