"""
Image utility functions for loading assets and building rasters
"""

import numpy as np
from pathlib import Path
from typing import Optional, Tuple, Union
from loguru import logger
from PIL import Image, UnidentifiedImageError

from utils.exceptions import AssetMissing


def load_image(image_path: Union[str, Path]) -> Image.Image:
    """
    Load image from file path

    Args:
        image_path: Path to image file

    Returns:
        Decoded RGBA image

    Raises:
        AssetMissing: If the file does not exist or cannot be decoded
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise AssetMissing(image_path, f"Image not found: {image_path}")

    try:
        with Image.open(image_path) as img:
            return img.convert("RGBA")
    except (OSError, UnidentifiedImageError) as e:
        raise AssetMissing(image_path, f"Failed to load image: {image_path} ({e})") from e


def load_optional_image(image_path: Optional[Union[str, Path]]) -> Optional[Image.Image]:
    """
    Load image, returning None when it is absent

    Args:
        image_path: Path to image file (None means absent)

    Returns:
        Decoded RGBA image or None
    """
    if image_path is None:
        return None

    try:
        return load_image(image_path)
    except AssetMissing as e:
        logger.warning(f"{e.message} - layer will use fallback")
        return None


def new_raster(size: Tuple[int, int], color: Tuple[int, ...] = (0, 0, 0, 0)) -> Image.Image:
    """
    Create an RGBA raster filled with one colour

    Args:
        size: (width, height)
        color: RGB or RGBA fill (alpha defaults to opaque for RGB)

    Returns:
        New RGBA image
    """
    w, h = size
    if len(color) == 3:
        color = tuple(color) + (255,)

    pixels = np.empty((h, w, 4), dtype=np.uint8)
    pixels[:, :] = color
    return Image.fromarray(pixels)


def to_array(image: Image.Image) -> np.ndarray:
    """
    Convert image to an RGBA numpy array of shape (height, width, 4)
    """
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.array(image)


def is_uniform(image: Image.Image, color: Tuple[int, ...]) -> bool:
    """
    Check whether every pixel equals color

    Args:
        image: Input image
        color: RGB or RGBA colour (RGB implies opaque)
    """
    if len(color) == 3:
        color = tuple(color) + (255,)
    pixels = to_array(image)
    return bool(np.all(pixels == np.array(color, dtype=np.uint8)))

