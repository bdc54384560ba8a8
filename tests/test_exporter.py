import base64
import io
import re

import pytest
from PIL import Image

from modules.exporter import Exporter
from utils.image_utils import new_raster


def test_data_url_round_trips_png():
    image = new_raster((12, 8), (1, 2, 3))
    url = Exporter().to_data_url(image)

    assert url.startswith("data:image/png;base64,")
    decoded = Image.open(io.BytesIO(base64.b64decode(url.split(",", 1)[1])))
    assert decoded.format == "PNG"
    assert decoded.size == (12, 8)
    assert decoded.convert("RGBA").getpixel((0, 0)) == (1, 2, 3, 255)


def test_filename_pattern():
    name = Exporter().generate_filename("橘雪莉 / char2", version=7)
    assert re.fullmatch(r"橘雪莉_char2__\d{8}_\d{6}__v007\.png", name)


def test_save_increments_version(tmp_path):
    exporter = Exporter(tmp_path / "out")
    image = new_raster((4, 4), (0, 0, 0))

    first = exporter.save(image, "char2")
    second = exporter.save(image, "char2")

    assert first.name.endswith("__v001.png")
    assert second.name.endswith("__v002.png")
    assert first.exists() and second.exists()


def test_save_without_output_dir_fails():
    with pytest.raises(ValueError):
        Exporter().save(new_raster((4, 4)), "char2")
