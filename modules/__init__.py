"""
Textbox Image Compositor Modules
"""

from .layout import LayoutEngine, TextBox, WatermarkFragment, FitResult
from .fonts import FontProvider, PillowFontFace
from .text_renderer import TextRenderer
from .compositor import Compositor
from .catalog import Catalog, Character, Selector, Selection
from .service import ImageService
from .exporter import Exporter

__all__ = [
    "LayoutEngine",
    "TextBox",
    "WatermarkFragment",
    "FitResult",
    "FontProvider",
    "PillowFontFace",
    "TextRenderer",
    "Compositor",
    "Catalog",
    "Character",
    "Selector",
    "Selection",
    "ImageService",
    "Exporter",
]
