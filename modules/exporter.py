"""
Exporter Module - Encode composited images as PNG bytes, data URLs or files
"""

import base64
import io
import re
from datetime import datetime
from pathlib import Path
from typing import Optional
from PIL import Image
from loguru import logger


class Exporter:
    """
    Encodes images for API responses and saves them with versioned names
    """

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Initialize Exporter

        Args:
            output_dir: Directory for saved images (only needed by save())
        """
        self.output_dir = Path(output_dir) if output_dir else None

    def encode_png(self, image: Image.Image) -> bytes:
        """
        Encode image as PNG

        Args:
            image: Image to encode

        Returns:
            PNG bytes
        """
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def to_data_url(self, image: Image.Image) -> str:
        """
        Encode image as a ``data:image/png;base64,...`` URL
        """
        encoded = base64.b64encode(self.encode_png(image)).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def generate_filename(self, name: str, version: Optional[int] = None) -> str:
        """
        Generate filename following pattern: NAME__YYYYMMDD_HHMMSS__vXXX.png

        Args:
            name: Base name (e.g. character id)
            version: Version number (auto-increment if None)

        Returns:
            Filename string
        """
        clean_name = self._clean_name(name)
        datetime_str = datetime.now().strftime("%Y%m%d_%H%M%S")

        if version is None:
            version = self._get_next_version(clean_name)

        return f"{clean_name}__{datetime_str}__v{version:03d}.png"

    def _clean_name(self, name: str) -> str:
        # Keep CJK, Latin letters, digits; collapse separators
        name = re.sub(r"[^一-鿿a-zA-Z0-9\s_-]", "", name.strip())
        name = re.sub(r"[\s_-]+", "_", name)
        return name[:50] or "image"

    def _get_next_version(self, clean_name: str) -> int:
        if self.output_dir is None or not self.output_dir.exists():
            return 1

        versions = []
        for file in self.output_dir.glob(f"{clean_name}__*__v*.png"):
            match = re.search(r"__v(\d+)$", file.stem)
            if match:
                versions.append(int(match.group(1)))

        return max(versions) + 1 if versions else 1

    def save(self, image: Image.Image, name: str, version: Optional[int] = None) -> Path:
        """
        Save image as PNG with proper naming

        Args:
            image: Image to save
            name: Base name
            version: Optional version number

        Returns:
            Path to saved file
        """
        if self.output_dir is None:
            raise ValueError("Exporter has no output directory")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / self.generate_filename(name, version)
        output_path.write_bytes(self.encode_png(image))

        logger.info(f"Saved image: {output_path}")
        return output_path
