"""
Compositor Module - Stack background, sprite, caption and watermark layers
"""

from typing import Callable, Optional, Sequence, Tuple
from PIL import Image
from loguru import logger

from config import settings
from modules.layout import LayoutEngine, TextBox, WatermarkFragment
from modules.text_renderer import TextRenderer
from utils.exceptions import FontUnavailable, TextDoesNotFit
from utils.image_utils import new_raster


class Compositor:
    """
    Renders the final image: background -> sprite -> caption -> watermarks

    A composition only reads its input rasters and allocates a fresh output,
    so one instance can serve concurrent calls.
    """

    def __init__(
        self,
        face_provider: Callable[[int], object],
        text_box: TextBox = None,
        layout_engine: LayoutEngine = None,
        text_renderer: TextRenderer = None,
        sprite_offset: Tuple[int, int] = None,
        fallback_size: Tuple[int, int] = None,
        fallback_color: Tuple[int, int, int] = None,
        caption_color: Tuple[int, int, int] = None,
        strict: bool = None
    ):
        """
        Initialize Compositor

        Args:
            face_provider: Callable returning a font face for a point size
            text_box: Caption region (default: TEXT_BOX_POSITION / TEXT_BOX_OVER)
            layout_engine: Wrapping and fit search engine
            text_renderer: Shadowed text renderer
            sprite_offset: Fixed sprite overlay origin
            fallback_size: Background size used when the background is absent
            fallback_color: Background colour used when the background is absent
            caption_color: Caption fill colour
            strict: Raise TextDoesNotFit instead of rendering overflowing captions
        """
        self.face_provider = face_provider
        self.text_box = text_box or TextBox.from_corners(settings.TEXT_BOX_POSITION, settings.TEXT_BOX_OVER)
        self.layout_engine = layout_engine or LayoutEngine(
            line_spacing=settings.LINE_SPACING,
            min_font_size=settings.MIN_FONT_SIZE,
            max_font_size=settings.MAX_FONT_SIZE,
            exhaustive=settings.FIT_SEARCH_EXHAUSTIVE,
        )
        self.text_renderer = text_renderer or TextRenderer(
            shadow_offset=settings.SHADOW_OFFSET,
            shadow_color=settings.SHADOW_COLOR,
            line_spacing=self.layout_engine.line_spacing,
        )
        self.sprite_offset = tuple(sprite_offset or settings.SPRITE_OFFSET)
        self.fallback_size = tuple(fallback_size or (settings.FALLBACK_WIDTH, settings.FALLBACK_HEIGHT))
        self.fallback_color = tuple(fallback_color or settings.FALLBACK_COLOR)
        self.caption_color = tuple(caption_color or settings.CAPTION_COLOR)
        self.strict = settings.STRICT_TEXT_FIT if strict is None else strict

        if min(self.sprite_offset) < 0:
            raise ValueError(f"Sprite offset must be non-negative: {self.sprite_offset}")

        logger.info(
            f"Compositor initialized (text box {self.text_box.width}x{self.text_box.height} "
            f"at ({self.text_box.left}, {self.text_box.top}), sprite at {self.sprite_offset})"
        )

    def compose(
        self,
        background: Optional[Image.Image],
        sprite: Optional[Image.Image],
        caption_text: str = "",
        caption_box: Optional[TextBox] = None,
        watermarks: Sequence[WatermarkFragment] = (),
        face_provider: Optional[Callable[[int], object]] = None
    ) -> Image.Image:
        """
        Composite all layers into a new RGBA image

        Args:
            background: Background raster, or None when the asset is missing
            sprite: Character sprite raster, or None when the asset is missing
            caption_text: Caption to wrap and auto-size (empty = no caption)
            caption_box: Caption region (default: the compositor's text box)
            watermarks: Fragments drawn in order after the caption
            face_provider: Override the compositor's face provider

        Returns:
            Composited image with the background's bounds

        Raises:
            FontUnavailable: If the caption font cannot be loaded
            TextDoesNotFit: In strict mode, if the caption overflows the box
        """
        box = caption_box or self.text_box
        provider = face_provider or self.face_provider

        # 1. Background (opaque copy or flat fallback)
        canvas = self._prepare_background(background)

        # 2. Sprite (source-over at the fixed origin)
        if sprite is None:
            logger.warning("Sprite missing, using transparent layer")
            sprite = new_raster(canvas.size, (0, 0, 0, 0))
        self._overlay(canvas, sprite, self.sprite_offset)

        # 3. Caption
        if caption_text:
            self._draw_caption(canvas, caption_text, box, provider)

        # 4. Watermarks
        drawn = self._draw_watermarks(canvas, watermarks, provider)

        logger.info(
            f"Composition complete ({canvas.width}x{canvas.height}, "
            f"{drawn}/{len(watermarks)} watermark fragments)"
        )
        return canvas

    def _prepare_background(self, background: Optional[Image.Image]) -> Image.Image:
        if background is None:
            logger.warning(
                f"Background missing, using {self.fallback_size[0]}x{self.fallback_size[1]} "
                f"fallback {self.fallback_color}"
            )
            return new_raster(self.fallback_size, self.fallback_color)

        # convert() always returns a new image, the caller's raster stays untouched
        return background.convert("RGBA")

    def _overlay(self, canvas: Image.Image, layer: Image.Image, offset: Tuple[int, int]) -> None:
        """
        Alpha-composite layer onto canvas at offset, clipped to the canvas
        """
        x, y = offset
        visible_w = min(layer.width, canvas.width - x)
        visible_h = min(layer.height, canvas.height - y)
        if visible_w <= 0 or visible_h <= 0:
            logger.debug(f"Layer at {offset} lies outside the canvas, skipping")
            return

        if layer.mode != "RGBA":
            layer = layer.convert("RGBA")
        if (visible_w, visible_h) != layer.size:
            layer = layer.crop((0, 0, visible_w, visible_h))

        canvas.alpha_composite(layer, dest=(x, y))

    def _draw_caption(
        self,
        canvas: Image.Image,
        text: str,
        box: TextBox,
        provider: Callable[[int], object]
    ) -> None:
        fit = self.layout_engine.fit_text(text, box, provider)

        if not fit.fits and self.strict:
            raise TextDoesNotFit(text, box)

        logger.info(f"Caption: {len(fit.lines)} lines at font size {fit.font_size}")
        origin = box.origin
        self.text_renderer.draw_lines(
            canvas,
            fit.lines,
            origin.x,
            origin.y,
            fit.font_size,
            fit.face,
            color=self.caption_color,
            line_height_px=fit.line_height,
        )

    def _draw_watermarks(
        self,
        canvas: Image.Image,
        watermarks: Sequence[WatermarkFragment],
        provider: Callable[[int], object]
    ) -> int:
        drawn = 0
        for fragment in watermarks:
            if not fragment.text:
                continue

            try:
                face = provider(fragment.size)
            except FontUnavailable as e:
                logger.warning(f"Skipping watermark {fragment.text!r}: {e}")
                continue

            if self.text_renderer.draw_fragment(canvas, fragment, face):
                drawn += 1

        return drawn
