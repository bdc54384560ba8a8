import pytest

from modules.layout import LayoutEngine, TextBox, WatermarkFragment, line_height
from utils.exceptions import FontUnavailable
from conftest import BoxFace, BoxFaceProvider


# BoxFace(20): Latin glyphs are 10px wide, CJK glyphs 20px
FACE = BoxFace(20)


def test_word_mode_wraps_at_spaces(layout_engine):
    assert layout_engine.wrap_text("hello world", 60, FACE) == ["hello", "world"]


def test_character_mode_wraps_cjk(layout_engine):
    assert layout_engine.wrap_text("橘雪莉", 20, FACE) == ["橘", "雪", "莉"]


def test_character_mode_packs_greedily(layout_engine):
    assert layout_engine.wrap_text("橘雪莉", 45, FACE) == ["橘雪", "莉"]


def test_text_that_fits_stays_on_one_line(layout_engine):
    assert layout_engine.wrap_text("hello world", 1000, FACE) == ["hello world"]


def test_newlines_split_paragraphs_and_keep_blank_lines(layout_engine):
    assert layout_engine.wrap_text("ab\n\ncd", 100, FACE) == ["ab", "", "cd"]


def test_each_paragraph_picks_its_own_mode(layout_engine):
    # First paragraph has a space (word mode), second has none (character mode)
    lines = layout_engine.wrap_text("ab cd\n橘雪莉", 40, FACE)
    assert lines == ["ab", "cd", "橘雪", "莉"]


def test_long_word_is_split_and_remainder_dropped(layout_engine):
    lines = layout_engine.wrap_text("hi abcdefghij ok", 35, FACE)
    assert lines == ["hi", "abc", "ok"]


def test_oversized_glyph_kept_alone(layout_engine):
    lines = layout_engine.wrap_text("橘a", 15, FACE)
    assert lines == ["橘", "a"]


@pytest.mark.parametrize("text", [
    "hello world",
    "the quick brown fox jumps over the lazy dog",
    "橘雪莉 said hello",
    "魔法少女的魔女审判",
    "supercalifragilistic is long\nnext paragraph here",
    "a  b   c",
])
@pytest.mark.parametrize("width", [15, 30, 55, 100, 400])
def test_lines_fit_width_except_single_oversized_glyph(layout_engine, text, width):
    for line in layout_engine.wrap_text(text, width, FACE):
        assert FACE.measure(line) <= width or len(line) == 1


@pytest.mark.parametrize("text", [
    "the quick brown fox jumps over the lazy dog",
    "魔法少女的魔女审判",
    "first line\n\nthird line",
])
def test_rewrapping_a_line_is_identity(layout_engine, text):
    for line in layout_engine.wrap_text(text, 60, FACE):
        assert layout_engine.wrap_text(line, 60, FACE) == [line]


def test_wrap_is_deterministic(layout_engine):
    text = "mixed 橘雪莉 text with some longer words inside"
    first = layout_engine.wrap_text(text, 70, FACE)
    assert all(layout_engine.wrap_text(text, 70, FACE) == first for _ in range(5))


@pytest.mark.parametrize("size, expected", [(20, 23), (40, 46), (100, 115), (145, 167), (1, 2)])
def test_line_height_adds_fifteen_percent_leading(size, expected):
    assert line_height(size) == expected
    assert LayoutEngine().line_height(size) == expected


def test_fit_picks_largest_fitting_size(layout_engine, small_box, face_provider):
    # One line of "a": height ceil(1.15 * s) <= 50 holds up to s = 43
    result = layout_engine.fit_text("a", small_box, face_provider)
    assert result.font_size == 43
    assert result.lines == ["a"]
    assert result.line_height == 50
    assert result.fits


def test_fit_stops_at_first_size_that_does_not_fit(layout_engine, small_box, face_provider):
    layout_engine.fit_text("a", small_box, face_provider)
    assert face_provider.requested == list(range(1, 45))


def test_exhaustive_fit_scans_whole_range(small_box, face_provider):
    engine = LayoutEngine(exhaustive=True)
    result = engine.fit_text("a", small_box, face_provider)
    assert result.font_size == 43
    assert face_provider.requested == list(range(1, 51))


def test_fit_caps_max_size_at_145(layout_engine, face_provider):
    box = TextBox(left=0, top=0, right=1000, bottom=300)
    result = layout_engine.fit_text("a", box, face_provider)
    assert result.font_size == 145
    assert max(face_provider.requested) == 145


def test_fit_caps_max_size_at_box_height(layout_engine, face_provider):
    box = TextBox(left=0, top=0, right=1000, bottom=30)
    layout_engine.fit_text("a", box, face_provider, exhaustive=True)
    assert max(face_provider.requested) == 30


@pytest.mark.parametrize("text", ["a", "hello world", "橘雪莉" * 5, "x " * 40])
def test_fit_stays_within_bounds(layout_engine, small_box, face_provider, text):
    result = layout_engine.fit_text(text, small_box, face_provider, min_size=3, max_size=30)
    assert 3 <= result.font_size <= 30


def test_fit_returns_min_size_with_overflow_when_nothing_fits(layout_engine, face_provider):
    box = TextBox(left=0, top=0, right=5, bottom=2)
    result = layout_engine.fit_text("橘" * 12, box, face_provider)
    assert result.font_size == 1
    assert not result.fits
    assert len(result.lines) * result.line_height > box.height


def test_fit_skips_unavailable_sizes(layout_engine, small_box):
    provider = BoxFaceProvider(unavailable={1, 2})
    result = layout_engine.fit_text("a", small_box, provider)
    assert result.font_size == 43


def test_fit_raises_when_no_face_loads(layout_engine, small_box):
    with pytest.raises(FontUnavailable):
        layout_engine.fit_text("a", small_box, BoxFaceProvider(unavailable="all"))


def test_fit_rejects_inverted_range(layout_engine, small_box, face_provider):
    with pytest.raises(ValueError):
        layout_engine.fit_text("a", small_box, face_provider, min_size=10, max_size=5)


def test_text_box_dimensions():
    box = TextBox.from_corners((728, 355), (2339, 800))
    assert box.width == 1611
    assert box.height == 445
    assert (box.origin.x, box.origin.y) == (728, 355)


@pytest.mark.parametrize("corners", [((10, 10), (10, 20)), ((10, 10), (20, 10)), ((10, 10), (5, 5))])
def test_text_box_requires_positive_area(corners):
    with pytest.raises(ValueError):
        TextBox.from_corners(*corners)


def test_watermark_fragment_from_catalog_entry():
    fragment = WatermarkFragment.from_dict(
        {"text": "橘", "position": [759, 73], "fontColor": [137, 177, 251], "fontSize": 186}
    )
    assert fragment == WatermarkFragment(text="橘", position=(759, 73), color=(137, 177, 251), size=186)


def test_watermark_fragment_rejects_bad_size():
    with pytest.raises(ValueError):
        WatermarkFragment.from_dict({"text": "x", "position": [0, 0], "fontColor": [0, 0, 0], "fontSize": 0})


def test_space_only_paragraph_yields_no_line(layout_engine):
    assert layout_engine.wrap_text("a\n \nb", 100, FACE) == ["a", "b"]
    assert layout_engine.wrap_text("a\n\nb", 100, FACE) == ["a", "", "b"]


def test_box_shorter_than_min_size_reports_overflow(face_provider):
    engine = LayoutEngine(min_font_size=10)
    box = TextBox(left=0, top=0, right=100, bottom=5)

    result = engine.fit_text("hi", box, face_provider)

    assert result.font_size == 10
    assert not result.fits
    assert face_provider.requested == [10]
