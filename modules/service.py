"""
Image Service - Resolve a request against the catalog and compose the image
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from PIL import Image
from loguru import logger

from modules.catalog import Catalog, Selection, Selector
from modules.compositor import Compositor
from utils.image_utils import load_optional_image


@dataclass
class GenerationResult:
    """Composited image plus the selection it was built from"""
    image: Image.Image
    selection: Selection


class ImageService:
    """
    Glue between catalog, asset files and the compositor
    """

    def __init__(self, catalog: Catalog, compositor: Compositor, assets_dir: Path, selector: Selector = None):
        """
        Initialize ImageService

        Args:
            catalog: Character/background snapshot
            compositor: Layer compositor
            assets_dir: Root that catalog file names are relative to
            selector: Selection resolver (default: unseeded)
        """
        self.catalog = catalog
        self.compositor = compositor
        self.assets_dir = Path(assets_dir)
        self.selector = selector or Selector(catalog)

    def _asset_path(self, filename: Optional[str]) -> Optional[Path]:
        if not filename:
            return None
        return self.assets_dir / filename

    def generate(
        self,
        character_id: Optional[str],
        text: str,
        emotion_index: Optional[int] = None,
        background_index: Optional[int] = None
    ) -> GenerationResult:
        """
        Generate one image

        Args:
            character_id: Character id, "random", or empty for the default
            text: Caption text
            emotion_index: 1-based emotion index (random if missing or invalid)
            background_index: 1-based background index (random if missing or invalid)

        Returns:
            GenerationResult

        Raises:
            CharacterNotFound: If the character id is unknown
            FontUnavailable: If the caption font cannot be loaded
        """
        selection = self.selector.select(character_id, emotion_index, background_index)

        background = load_optional_image(
            self._asset_path(selection.background.filename if selection.background else None)
        )
        sprite = load_optional_image(
            self._asset_path(selection.emotion.filename if selection.emotion else None)
        )

        logger.info(
            f"Generating image for {selection.character.id} "
            f"(emotion {selection.emotion_index}, background {selection.background_index})"
        )

        image = self.compositor.compose(
            background,
            sprite,
            caption_text=text,
            watermarks=selection.character.display_name,
        )
        return GenerationResult(image=image, selection=selection)
