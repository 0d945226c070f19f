"""
Font backend - TTF/OTF discovery, metrics and glyph rendering via Pillow
"""

from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from PIL import ImageDraw, ImageFont
from loguru import logger

from utils.exceptions import FontNotFoundError


FONT_SUFFIXES = (".ttf", ".otf")


def find_font(name: str, search_dirs: Iterable[Path]) -> Path:
    """
    Find a font file by name, looking recursively in every search directory

    Args:
        name: Font file name without extension (e.g. "GoNotoCurrent"),
            or a path to an existing TTF/OTF file
        search_dirs: Directories to scan, in order

    Returns:
        Path to the first matching font file

    Raises:
        FontNotFoundError: no matching file
    """
    direct = Path(name)
    if direct.suffix.lower() in FONT_SUFFIXES and direct.is_file():
        return direct

    for folder in search_dirs:
        folder = Path(folder)
        if not folder.is_dir():
            continue
        for candidate in sorted(folder.rglob("*")):
            if candidate.suffix.lower() in FONT_SUFFIXES and candidate.stem == name:
                return candidate

    raise FontNotFoundError(name)


class FontFace:
    """
    A TrueType/OpenType font at arbitrary (float) sizes

    Coordinates follow the baseline convention: y is the baseline of the text,
    x is the left edge of the first glyph's advance box.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.name = self.path.stem
        self._sizes: Dict[float, ImageFont.FreeTypeFont] = {}

    def __repr__(self) -> str:
        return f"FontFace({self.name!r})"

    def at(self, size: float) -> ImageFont.FreeTypeFont:
        if size not in self._sizes:
            self._sizes[size] = ImageFont.truetype(str(self.path), size)
        return self._sizes[size]

    def bbox(self, text: str, size: float) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) relative to the baseline origin"""
        return self.at(size).getbbox(text, anchor="ls")

    def text_width(self, text: str, size: float) -> float:
        left, _, right, _ = self.bbox(text, size)
        return right - left

    def text_height(self, text: str, size: float) -> float:
        _, top, _, bottom = self.bbox(text, size)
        return bottom - top

    def draw(self, draw: ImageDraw.ImageDraw, xy, text: str, size: float, fill) -> None:
        draw.text(xy, text, font=self.at(size), fill=fill, anchor="ls")


class FontLibrary:
    """Resolves font names to FontFace objects, caching each face"""

    def __init__(self, search_dirs: Iterable[Path]):
        self.search_dirs = [Path(d) for d in search_dirs]
        self._faces: Dict[str, FontFace] = {}

    def load(self, name: str) -> FontFace:
        face: Optional[FontFace] = self._faces.get(name)
        if face is None:
            path = find_font(name, self.search_dirs)
            face = FontFace(path)
            self._faces[name] = face
            logger.debug(f"Font {name!r} -> {path}")
        return face
