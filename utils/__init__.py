"""
Utility Functions
"""

from .image_utils import (
    load_image,
    load_optional_image,
    new_raster,
    to_array,
    is_uniform,
)
from .exceptions import (
    CompositionError,
    FontUnavailable,
    TextDoesNotFit,
    AssetMissing,
    GlyphDrawFailure,
    CharacterNotFound,
)

__all__ = [
    "load_image",
    "load_optional_image",
    "new_raster",
    "to_array",
    "is_uniform",
    "CompositionError",
    "FontUnavailable",
    "TextDoesNotFit",
    "AssetMissing",
    "GlyphDrawFailure",
    "CharacterNotFound",
]
