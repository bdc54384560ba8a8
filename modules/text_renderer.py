"""
Text Renderer - Draw captions and watermark fragments with a drop shadow
"""

from typing import List, Optional, Sequence, Tuple
from PIL import Image, ImageDraw
from loguru import logger

from modules.layout import WatermarkFragment, line_height
from utils.exceptions import GlyphDrawFailure


class TextRenderer:
    """
    Draws text twice: a solid shadow offset down-right, then the fill on top
    """

    def __init__(
        self,
        shadow_offset: int = 2,
        shadow_color: Tuple[int, int, int] = (0, 0, 0),
        line_spacing: float = 1.15
    ):
        """
        Initialize TextRenderer

        Args:
            shadow_offset: Shadow offset in pixels on both axes
            shadow_color: Shadow RGB colour
            line_spacing: Line height as a multiple of the font size
        """
        self.shadow_offset = shadow_offset
        self.shadow_color = shadow_color
        self.line_spacing = line_spacing

    def draw_lines(
        self,
        canvas: Image.Image,
        lines: Sequence[str],
        origin_x: int,
        origin_y: int,
        font_size: int,
        face,
        color: Tuple[int, int, int] = (255, 255, 255),
        line_height_px: Optional[int] = None
    ) -> int:
        """
        Draw lines left/top-aligned at the origin

        Each line's baseline sits font_size pixels below its top; successive
        lines advance by the line height.

        Args:
            canvas: Raster to draw on (modified in place)
            lines: Wrapped lines
            origin_x: Left edge
            origin_y: Top edge
            font_size: Font size the lines were wrapped at
            face: Font face at font_size
            color: Fill RGB colour
            line_height_px: Line advance (default: derived from font_size)

        Returns:
            Number of lines drawn
        """
        if line_height_px is None:
            line_height_px = line_height(font_size, self.line_spacing)

        drawn = 0

        for i, line in enumerate(lines):
            if not line:
                continue
            baseline_y = origin_y + i * line_height_px + font_size
            if self._draw_with_shadow(canvas, face, (origin_x, baseline_y), line, color):
                drawn += 1

        logger.debug(f"Drew {drawn}/{len(lines)} caption lines at size {font_size}")
        return drawn

    def draw_fragment(self, canvas: Image.Image, fragment: WatermarkFragment, face) -> bool:
        """
        Draw one watermark fragment at its configured position

        The baseline is the fragment's y position plus its own font size.
        Empty fragments are placeholders and leave the canvas untouched.

        Returns:
            True if the fragment was drawn
        """
        if not fragment.text:
            return False

        x, y = fragment.position
        return self._draw_with_shadow(canvas, face, (x, y + fragment.size), fragment.text, fragment.color)

    def _draw_with_shadow(
        self,
        canvas: Image.Image,
        face,
        xy: Tuple[int, int],
        text: str,
        color: Tuple[int, int, int]
    ) -> bool:
        """
        Draw shadow and fill on a scratch layer, then composite both at once

        A failure in either pass leaves the canvas untouched.
        """
        x, y = xy
        offset = self.shadow_offset
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        try:
            face.draw(draw, (x + offset, y + offset), text, tuple(self.shadow_color) + (255,))
            face.draw(draw, (x, y), text, tuple(color) + (255,))
        except GlyphDrawFailure as e:
            logger.warning(f"Skipping text draw: {e}")
            return False

        canvas.alpha_composite(layer)
        return True
