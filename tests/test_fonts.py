"""
Font discovery tests
"""

from pathlib import Path

import pytest
from PIL import ImageFont

from modules.fonts import FontFace, FontLibrary, find_font
from modules.interpreter import ScriptInterpreter
from modules.text_layout import MIN_FONT_SIZE, place_text
from utils.exceptions import FontNotFoundError, MissingFileError


SYSTEM_FONT_DIRS = (Path("/usr/share/fonts"), Path("/Library/Fonts"), Path("C:/Windows/Fonts"))


@pytest.fixture
def font_dirs(tmp_path):
    """Two search roots with (empty) font files; discovery never opens them"""
    first = tmp_path / "first"
    second = tmp_path / "second"
    (first / "nested" / "deeper").mkdir(parents=True)
    second.mkdir()
    (first / "nested" / "deeper" / "Caption.otf").touch()
    (first / "Readme.txt").touch()
    (second / "Caption.ttf").touch()
    (second / "Body.TTF").touch()
    return [first, second]


class TestFindFont:
    def test_recursive(self, font_dirs):
        assert find_font("Caption", font_dirs).name == "Caption.otf"

    def test_search_order(self, font_dirs):
        assert find_font("Caption", list(reversed(font_dirs))).name == "Caption.ttf"

    def test_suffix_case_insensitive(self, font_dirs):
        assert find_font("Body", font_dirs).name == "Body.TTF"

    def test_direct_path(self, font_dirs):
        path = font_dirs[1] / "Caption.ttf"
        assert find_font(str(path), []) == path

    def test_not_a_font(self, font_dirs):
        with pytest.raises(FontNotFoundError):
            find_font("Readme", font_dirs)

    def test_missing_dirs_are_skipped(self, tmp_path):
        with pytest.raises(FontNotFoundError) as excinfo:
            find_font("Caption", [tmp_path / "nowhere"])
        assert isinstance(excinfo.value, MissingFileError)


class TestFontLibrary:
    def test_caches_faces(self, font_dirs):
        library = FontLibrary(font_dirs)
        face = library.load("Body")
        assert library.load("Body") is face
        assert face.name == "Body"

    def test_unknown(self, font_dirs):
        with pytest.raises(FontNotFoundError):
            FontLibrary(font_dirs).load("Nope")


@pytest.fixture
def real_font(tmp_path) -> Path:
    """A real FreeType font as tmp_path/fonts/Sample.ttf"""
    target = tmp_path / "fonts" / "Sample.ttf"
    target.parent.mkdir(parents=True, exist_ok=True)

    bundled = ImageFont.load_default(size=20)
    font_bytes = getattr(bundled, "font_bytes", None)
    if isinstance(bundled, ImageFont.FreeTypeFont) and font_bytes:
        target.write_bytes(font_bytes)
        return target

    for folder in SYSTEM_FONT_DIRS:
        if folder.is_dir():
            for candidate in sorted(folder.rglob("*.ttf")):
                target.write_bytes(candidate.read_bytes())
                return target

    pytest.skip("no TrueType font available")


class TestFontFace:
    """Metrics and drawing through FreeType"""

    def test_width_grows_with_size(self, real_font):
        face = FontFace(real_font)
        small = face.text_width("Hello", 12)
        large = face.text_width("Hello", 48)
        assert 0 < small < large

    def test_height_is_positive(self, real_font):
        assert FontFace(real_font).text_height("Hg", 30) > 0

    def test_sizes_are_cached(self, real_font):
        face = FontFace(real_font)
        assert face.at(20) is face.at(20)
        assert face.at(20) is not face.at(21)

    def test_shrinks_to_max_width(self, real_font):
        face = FontFace(real_font)
        text = "A fairly long caption line"
        assert face.text_width(text, 60) > 200

        placement = place_text(text, face, 60, (0, 100), max_width=200)
        assert placement.size < 60
        assert placement.size >= MIN_FONT_SIZE
        assert placement.width <= 200

    def test_draws_glyphs(self, real_font, test_settings):
        test_settings.DEFAULT_FONT = "Sample"
        interpreter = ScriptInterpreter(
            base_dir=real_font.parent,
            fonts=FontLibrary([real_font.parent]),
            settings=test_settings,
        )
        result = interpreter.run(
            'template="200x100", bg=white\n'
            'text="Hello", x=10, y=70, align=left, fontsize=40, color=black'
        )
        darkest, _ = result.document.canvas.convert("L").getextrema()
        assert darkest < 128
