"""
Raster Script Composer Modules
"""

from .colors import Color, resolve_color
from .document import Document
from .fonts import FontFace, FontLibrary
from .interpreter import InterpreterState, RenderResult, ScriptInterpreter, render_script
from .layout import LayoutState
from .opacity import apply_opacity
from .placement import Alignment, BoundingBox, Rect, place
from .text_layout import place_text

__all__ = [
    "Color",
    "resolve_color",
    "Document",
    "FontFace",
    "FontLibrary",
    "InterpreterState",
    "RenderResult",
    "ScriptInterpreter",
    "render_script",
    "LayoutState",
    "apply_opacity",
    "Alignment",
    "BoundingBox",
    "Rect",
    "place",
    "place_text",
]
