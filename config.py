"""
Configuration settings for the textbox image compositor
"""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Project paths
    PROJECT_ROOT: Path = Path(__file__).parent
    ASSETS_DIR: Path = PROJECT_ROOT / "assets"
    CATALOG_DIR: Path = PROJECT_ROOT / "catalog"
    FONTS_DIR: Path = ASSETS_DIR / "fonts"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # Font
    FONT_FILE: str = "font3.ttf"  # Caption and watermark face

    # Caption text box (top-left / bottom-right, canvas coordinates)
    TEXT_BOX_POSITION: tuple[int, int] = (728, 355)
    TEXT_BOX_OVER: tuple[int, int] = (2339, 800)

    # Font size search
    MIN_FONT_SIZE: int = 1
    MAX_FONT_SIZE: int = 145
    LINE_SPACING: float = 1.15  # 15% leading
    FIT_SEARCH_EXHAUSTIVE: bool = False  # True = scan every size instead of stopping at first miss
    STRICT_TEXT_FIT: bool = False  # True = raise TextDoesNotFit instead of rendering overflow

    # Text colours and shadow
    CAPTION_COLOR: tuple[int, int, int] = (255, 255, 255)
    SHADOW_COLOR: tuple[int, int, int] = (0, 0, 0)
    SHADOW_OFFSET: int = 2

    # Layers
    SPRITE_OFFSET: tuple[int, int] = (0, 134)  # Fixed sprite overlay origin
    FALLBACK_WIDTH: int = 1600
    FALLBACK_HEIGHT: int = 900
    FALLBACK_COLOR: tuple[int, int, int] = (200, 200, 200)  # Neutral gray when background is missing

    # Catalog
    CHARACTERS_FILE: str = "characters.json"
    BACKGROUNDS_FILE: str = "backgrounds.json"
    DEFAULT_CHARACTER: str = "char2"

    # FastAPI settings
    API_TITLE: str = "Textbox Image Compositor API"
    API_VERSION: str = "1.0.0"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "app.log"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def font_path(self) -> Path:
        return self.FONTS_DIR / self.FONT_FILE


settings = Settings()
