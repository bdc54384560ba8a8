"""
Custom exceptions for the textbox image compositor
"""


class CompositionError(Exception):
    """Base class for every failure raised by the compositing engine."""


class FontUnavailable(CompositionError):
    """
    Raised when a font face cannot be loaded or parsed at any attempted size.

    This is fatal for the caption path: rendering without a face changes the
    visible output, so the caller must surface it.
    """

    def __init__(self, identifier: str, size: float = None, message: str = None):
        self.identifier = identifier
        self.size = size
        if message is None:
            if size is None:
                message = f"Font unavailable: {identifier}"
            else:
                message = f"Font unavailable: {identifier} at size {size}"
        self.message = message
        super().__init__(self.message)


class TextDoesNotFit(CompositionError):
    """Raised in strict mode when no candidate font size fits the text box."""

    def __init__(self, text: str, box, message: str = None):
        self.text = text
        self.box = box
        self.message = message or f"Text does not fit in box {box.width}x{box.height}"
        super().__init__(self.message)


class AssetMissing(CompositionError):
    """
    Raised by asset loaders when a background or sprite cannot be decoded.

    Never crosses the compositor boundary: callers pass ``None`` instead and the
    compositor synthesises a fallback layer.
    """

    def __init__(self, path, message: str = None):
        self.path = path
        self.message = message or f"Asset missing: {path}"
        super().__init__(self.message)


class GlyphDrawFailure(CompositionError):
    """Raised when a single line or fragment fails to rasterise."""

    def __init__(self, text: str, message: str = None):
        self.text = text
        self.message = message or f"Failed to draw text: {text!r}"
        super().__init__(self.message)


class CharacterNotFound(CompositionError):
    """Raised when a character id is not present in the catalog."""

    def __init__(self, character_id: str):
        self.character_id = character_id
        self.message = f"Character not found: {character_id}"
        super().__init__(self.message)
