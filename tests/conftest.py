"""
pytest configuration and shared fixtures

Usage:
    def test_something(make_interpreter, make_image):
        make_image("red.png", (100, 50), "red")
        result = make_interpreter().run('image="red.png"')
"""

from pathlib import Path
from typing import Dict, List, Tuple

import pytest
from PIL import Image

from config import Settings
from modules.interpreter import ScriptInterpreter
from utils.exceptions import FontNotFoundError


# ============================================================================
# Fonts
# ============================================================================

class FakeFont:
    """Monospace metrics: every glyph is 0.6 x size wide and size tall"""

    GLYPH_WIDTH = 0.6

    def __init__(self, name: str = "Fake"):
        self.name = name
        self.draws: List[Tuple[Tuple[float, float], str, float, tuple]] = []

    def text_width(self, text: str, size: float) -> float:
        return len(text) * size * self.GLYPH_WIDTH

    def text_height(self, text: str, size: float) -> float:
        return size

    def draw(self, draw, xy, text: str, size: float, fill) -> None:
        self.draws.append((tuple(xy), text, size, tuple(fill)))


class FakeFontLibrary:
    """Hands out FakeFonts; names listed in `missing` are not found"""

    def __init__(self, missing=("Missing",)):
        self.missing = set(missing)
        self.faces: Dict[str, FakeFont] = {}
        self.loaded: List[str] = []

    def load(self, name: str) -> FakeFont:
        self.loaded.append(name)
        if name in self.missing:
            raise FontNotFoundError(name)
        return self.faces.setdefault(name, FakeFont(name))

    @property
    def draws(self):
        """All draws across faces, in call order per face"""
        return [d for face in self.faces.values() for d in face.draws]


@pytest.fixture
def fake_font() -> FakeFont:
    return FakeFont()


@pytest.fixture
def fonts() -> FakeFontLibrary:
    return FakeFontLibrary()


# ============================================================================
# Settings / Interpreter
# ============================================================================

@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Small default document so pixel checks stay cheap"""
    return Settings(
        WORKSPACE_DIR=tmp_path,
        SCRIPTS_DIR=tmp_path / "scripts",
        OUT_DIR=tmp_path / "out",
        FONTS_DIR=tmp_path / "fonts",
        DEFAULT_WIDTH=200,
        DEFAULT_HEIGHT=100,
    )


@pytest.fixture
def make_interpreter(tmp_path: Path, fonts: FakeFontLibrary, test_settings: Settings):
    """Factory for interpreters rooted at tmp_path with fake fonts"""
    def _make(**kwargs) -> ScriptInterpreter:
        kwargs.setdefault("base_dir", tmp_path)
        kwargs.setdefault("fonts", fonts)
        kwargs.setdefault("settings", test_settings)
        return ScriptInterpreter(**kwargs)

    return _make


# ============================================================================
# Images
# ============================================================================

@pytest.fixture
def make_image(tmp_path: Path):
    """Write a solid-color image file under tmp_path and return its path"""
    def _make(name: str, size=(100, 50), color="red", mode="RGBA", **save_kwargs) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(path, **save_kwargs)
        return path

    return _make
