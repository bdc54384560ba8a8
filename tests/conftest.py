import json
import random
import sys
from pathlib import Path

import pytest
from PIL import ImageDraw

# Make the flat project layout importable when running from a checkout
root_dir = Path(__file__).resolve().parents[1]
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from modules.catalog import Catalog, Selector  # noqa: E402
from modules.compositor import Compositor  # noqa: E402
from modules.layout import LayoutEngine, TextBox  # noqa: E402
from modules.text_renderer import TextRenderer  # noqa: E402
from utils.exceptions import FontUnavailable, GlyphDrawFailure  # noqa: E402


class BoxFace:
    """
    Deterministic face: every glyph is a filled box

    Latin glyphs advance size // 2 pixels, everything else (CJK) advances
    size pixels. A glyph box spans [x, x + advance - 1] horizontally and
    [baseline - size, baseline - 1] vertically.
    """

    def __init__(self, size, fail_on=None):
        self.size = size
        self.fail_on = fail_on or set()
        self.draw_calls = []

    def advance(self, char):
        return self.size // 2 if ord(char) < 0x2E80 else self.size

    def measure(self, text):
        return sum(self.advance(c) for c in text)

    def draw(self, draw: ImageDraw.ImageDraw, xy, text, fill):
        if text in self.fail_on:
            raise GlyphDrawFailure(text)
        self.draw_calls.append((xy, text, fill))
        x, baseline = xy
        for char in text:
            w = self.advance(char)
            if char != " " and w > 0:
                draw.rectangle((x, baseline - self.size, x + w - 1, baseline - 1), fill=fill)
            x += w


class BoxFaceProvider:
    """Face provider for BoxFace with optional unavailable sizes"""

    def __init__(self, unavailable=None, fail_on=None):
        self.unavailable = unavailable
        self.fail_on = fail_on
        self.requested = []

    def __call__(self, size):
        self.requested.append(size)
        if self.unavailable is not None and (self.unavailable == "all" or size in self.unavailable):
            raise FontUnavailable("box-face", size)
        return BoxFace(size, fail_on=self.fail_on)


@pytest.fixture
def face_provider():
    return BoxFaceProvider()


@pytest.fixture
def layout_engine():
    return LayoutEngine(line_spacing=1.15, min_font_size=1, max_font_size=145)


@pytest.fixture
def text_renderer():
    return TextRenderer(shadow_offset=2, shadow_color=(0, 0, 0), line_spacing=1.15)


@pytest.fixture
def small_box():
    return TextBox(left=10, top=10, right=110, bottom=60)


@pytest.fixture
def compositor(face_provider, layout_engine, text_renderer, small_box):
    return Compositor(
        face_provider=face_provider,
        text_box=small_box,
        layout_engine=layout_engine,
        text_renderer=text_renderer,
        sprite_offset=(0, 20),
        fallback_size=(160, 90),
        fallback_color=(200, 200, 200),
        caption_color=(255, 255, 255),
        strict=False,
    )


CHARACTERS = [
    {
        "id": "char2",
        "name": "橘雪莉",
        "displayName": [
            {"text": "橘", "position": [5, 5], "fontColor": [137, 177, 251], "fontSize": 20},
            {"text": "", "position": [0, 0], "fontColor": [255, 255, 255], "fontSize": 1},
        ],
        "emotions": [
            {"name": "普通", "filename": "characters/char2/1.png"},
            {"name": "开心", "filename": "characters/char2/2.png"},
        ],
    },
    {
        "id": "char0",
        "name": "樱羽艾玛",
        "displayName": [
            {"text": "樱", "position": [5, 5], "fontColor": [253, 145, 175], "fontSize": 20},
        ],
        "emotions": [
            {"name": "普通", "filename": "characters/char0/1.png"},
        ],
    },
]

BACKGROUNDS = [
    {"name": "审判庭", "filename": "backgrounds/bg1.png"},
    {"name": "走廊", "filename": "backgrounds/bg2.png"},
]


@pytest.fixture
def catalog():
    return Catalog.from_data(CHARACTERS, BACKGROUNDS, default_character_id="char2")


@pytest.fixture
def catalog_dir(tmp_path):
    (tmp_path / "characters.json").write_text(json.dumps(CHARACTERS, ensure_ascii=False), encoding="utf-8")
    (tmp_path / "backgrounds.json").write_text(json.dumps(BACKGROUNDS, ensure_ascii=False), encoding="utf-8")
    return tmp_path


@pytest.fixture
def selector(catalog):
    return Selector(catalog, rng=random.Random(1234))
