"""
Configuration settings for the Raster Script Composer
"""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Project paths
    PROJECT_ROOT: Path = Path(__file__).parent
    WORKSPACE_DIR: Path = PROJECT_ROOT / "workspace"
    SCRIPTS_DIR: Path = WORKSPACE_DIR / "scripts"
    OUT_DIR: Path = WORKSPACE_DIR / "out"
    ASSETS_DIR: Path = PROJECT_ROOT / "assets"
    FONTS_DIR: Path = ASSETS_DIR / "fonts"

    # Extra directories searched (recursively) for TTF/OTF files
    FONT_SEARCH_DIRS: list[Path] = []

    # Document created before the first command of every script
    DEFAULT_WIDTH: int = 1920
    DEFAULT_HEIGHT: int = 1200
    DEFAULT_BACKGROUND: str = "white"
    DPI: int = 300

    # Text cursor defaults (applied whenever a new document is installed)
    DEFAULT_FONT: str = "GoNotoCurrent"
    DEFAULT_FONTSIZE: str = "2%"  # of document height
    DEFAULT_TEXT_COLOR: str = "black"
    DEFAULT_LINESPC: float = 1.45

    # Polygon defaults
    DEFAULT_POLY_BORDER: str = "black"
    DEFAULT_POLY_THICKNESS: int = 1

    # Output settings
    JPEG_QUALITY: int = 100  # 0-100, PNG ignores it

    # FastAPI settings
    API_TITLE: str = "Raster Script Composer API"
    API_VERSION: str = "1.0.0"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def font_dirs(self) -> list[Path]:
        """Font directories in lookup order"""
        return [self.FONTS_DIR, *self.FONT_SEARCH_DIRS]

    @property
    def render_dirs(self) -> list[Path]:
        """Directories scripts run over HTTP may read from and write to"""
        return [self.SCRIPTS_DIR, self.OUT_DIR, self.ASSETS_DIR]


settings = Settings()

# Create directories if they don't exist
for directory in [
    settings.SCRIPTS_DIR,
    settings.OUT_DIR,
    settings.FONTS_DIR,
]:
    directory.mkdir(parents=True, exist_ok=True)
