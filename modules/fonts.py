"""
Font faces - Measure and rasterise text with Pillow FreeType fonts
"""

import io
import threading
from pathlib import Path
from typing import Dict, Optional, Tuple, Union
from PIL import ImageDraw, ImageFont
from loguru import logger

from utils.exceptions import FontUnavailable, GlyphDrawFailure


class PillowFontFace:
    """
    Font face at a fixed point size

    Any object exposing ``size``, ``measure(text)`` and
    ``draw(draw, xy, text, fill)`` can stand in for this class.
    """

    def __init__(self, font: ImageFont.FreeTypeFont, identifier: str = "font"):
        self.font = font
        self.identifier = identifier
        self.size = font.size

    def measure(self, text: str) -> float:
        """
        Measure the advance width of text

        Args:
            text: Text to measure

        Returns:
            Width in pixels
        """
        if not text:
            return 0.0
        return self.font.getlength(text)

    def draw(
        self,
        draw: ImageDraw.ImageDraw,
        xy: Tuple[int, int],
        text: str,
        fill: Tuple[int, ...]
    ) -> None:
        """
        Draw text with its left baseline at xy

        Raises:
            GlyphDrawFailure: If Pillow fails to rasterise the text
        """
        try:
            draw.text(xy, text, font=self.font, fill=fill, anchor="ls")
        except (OSError, ValueError) as e:
            raise GlyphDrawFailure(text, f"Failed to draw {text!r} with {self.identifier}: {e}") from e


class FontProvider:
    """
    Loads one font file at any requested point size

    The file is read and parsed once; other sizes are derived with
    ``font_variant`` and cached, so the fit search does not hit the disk
    for every candidate size.
    """

    def __init__(self, font_path: Union[str, Path]):
        """
        Initialize FontProvider

        Args:
            font_path: Path to a TrueType/OpenType font file
        """
        self.font_path = Path(font_path)
        self._base: Optional[ImageFont.FreeTypeFont] = None
        self._faces: Dict[int, PillowFontFace] = {}
        self._lock = threading.Lock()
        logger.debug(f"FontProvider using {self.font_path}")

    def _base_font(self, size: int) -> ImageFont.FreeTypeFont:
        if self._base is None:
            try:
                data = self.font_path.read_bytes()
                self._base = ImageFont.truetype(io.BytesIO(data), size)
            except OSError as e:
                raise FontUnavailable(str(self.font_path), size) from e
            logger.info(f"Font loaded: {self.font_path.name}")
        return self._base

    def load_face(self, size: int) -> PillowFontFace:
        """
        Load the face at a point size

        Args:
            size: Point size (positive)

        Returns:
            Font face

        Raises:
            FontUnavailable: If the file is missing or cannot be parsed
        """
        if size <= 0:
            raise FontUnavailable(str(self.font_path), size, f"Invalid font size: {size}")

        with self._lock:
            face = self._faces.get(size)
            if face is None:
                base = self._base_font(size)
                try:
                    font = base if base.size == size else base.font_variant(size=size)
                except OSError as e:
                    raise FontUnavailable(str(self.font_path), size) from e
                face = PillowFontFace(font, identifier=self.font_path.name)
                self._faces[size] = face

        return face

    def __call__(self, size: int) -> PillowFontFace:
        return self.load_face(size)
