"""
Layout Engine - Wrap captions into lines and search the largest fitting font size
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from loguru import logger

from utils.exceptions import FontUnavailable


@dataclass(frozen=True)
class Position:
    """Position with x, y coordinates"""
    x: int
    y: int


@dataclass(frozen=True)
class TextBox:
    """
    Axis-aligned caption region in canvas coordinates

    (left, top) is the top-left corner, (right, bottom) the bottom-right one.
    """
    left: int
    top: int
    right: int
    bottom: int

    def __post_init__(self):
        if self.right <= self.left or self.bottom <= self.top:
            raise ValueError(
                f"Invalid text box: ({self.left}, {self.top}) -> ({self.right}, {self.bottom})"
            )

    @classmethod
    def from_corners(cls, position: Tuple[int, int], over: Tuple[int, int]) -> "TextBox":
        return cls(left=position[0], top=position[1], right=over[0], bottom=over[1])

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def origin(self) -> Position:
        return Position(x=self.left, y=self.top)


@dataclass(frozen=True)
class WatermarkFragment:
    """Fixed-position text snippet, e.g. one glyph of a character's name"""
    text: str
    position: Tuple[int, int]
    color: Tuple[int, int, int]
    size: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WatermarkFragment":
        """
        Build a fragment from a catalog entry

        Accepts both ``fontColor``/``fontSize`` and ``font_color``/``font_size`` keys.
        """
        color = data.get("fontColor", data.get("font_color", (255, 255, 255)))
        size = data.get("fontSize", data.get("font_size", 1))
        position = data.get("position", (0, 0))
        if len(position) < 2:
            raise ValueError(f"Invalid fragment position: {position}")
        if len(color) < 3:
            raise ValueError(f"Invalid fragment color: {color}")
        if size <= 0:
            raise ValueError(f"Invalid fragment size: {size}")
        return cls(
            text=data.get("text", ""),
            position=(int(position[0]), int(position[1])),
            color=(int(color[0]), int(color[1]), int(color[2])),
            size=int(size),
        )


@dataclass
class FitResult:
    """Chosen rendering plan for a caption"""
    font_size: int
    lines: List[str]
    line_height: int
    fits: bool = True
    face: Any = field(default=None, repr=False, compare=False)


def line_height(font_size: float, line_spacing: float = 1.15) -> int:
    """Pixel height of one wrapped line"""
    # round() absorbs float noise such as 40 * 1.15 == 45.99999999999999
    return math.ceil(round(font_size * line_spacing, 6))


class LayoutEngine:
    """
    Wraps mixed CJK/Latin captions under a width constraint and searches
    the largest font size whose wrapped height fits a text box
    """

    def __init__(
        self,
        line_spacing: float = 1.15,
        min_font_size: int = 1,
        max_font_size: int = 145,
        exhaustive: bool = False
    ):
        """
        Initialize Layout Engine

        Args:
            line_spacing: Line height as a multiple of the font size
            min_font_size: Smallest candidate size
            max_font_size: Largest candidate size (also capped by box height)
            exhaustive: Scan every candidate instead of stopping at the first miss
        """
        self.line_spacing = line_spacing
        self.min_font_size = min_font_size
        self.max_font_size = max_font_size
        self.exhaustive = exhaustive

        logger.debug(
            f"LayoutEngine initialized (sizes {min_font_size}-{max_font_size}, "
            f"spacing={line_spacing}, exhaustive={exhaustive})"
        )

    def line_height(self, font_size: float) -> int:
        return line_height(font_size, self.line_spacing)

    def wrap_text(self, text: str, max_width: float, face) -> List[str]:
        """
        Wrap text into lines that each fit max_width

        Paragraphs are split on newlines and wrapped independently; an empty
        paragraph yields one empty line. A paragraph of only spaces yields no
        line at all, its empty words are absorbed by the separators. A
        paragraph containing a space is packed word by word, otherwise
        character by character.

        The only line that may exceed max_width is a single glyph that is
        wider than max_width on its own.

        Args:
            text: Caption text
            max_width: Maximum line width in pixels
            face: Font face used for measuring

        Returns:
            List of text lines
        """
        lines = []

        for paragraph in text.split("\n"):
            if not paragraph:
                lines.append("")
                continue

            word_mode = " " in paragraph
            tokens = paragraph.split(" ") if word_mode else list(paragraph)
            separator = " " if word_mode else ""

            current = ""
            for token in tokens:
                trial = current + separator + token if current else token
                if face.measure(trial) <= max_width:
                    current = trial
                    continue

                if current:
                    lines.append(current)

                if face.measure(token) <= max_width:
                    current = token
                else:
                    lines.append(self._split_long_token(token, max_width, face))
                    current = ""

            if current:
                lines.append(current)

        return lines

    def _split_long_token(self, token: str, max_width: float, face) -> str:
        """
        Take the longest prefix of token that fits max_width

        The remainder is dropped. At least one character is kept so an
        oversized glyph still appears on its own line.
        """
        fragment = ""
        for char in token:
            trial = fragment + char
            if face.measure(trial) > max_width:
                break
            fragment = trial

        if not fragment:
            fragment = token[0]
            logger.warning(f"Glyph {fragment!r} is wider than {max_width}px, keeping it on its own line")

        if len(fragment) < len(token):
            logger.debug(f"Long token split: kept {fragment!r}, dropped {token[len(fragment):]!r}")

        return fragment

    def fits(self, lines: List[str], font_size: int, max_height: float) -> bool:
        return len(lines) * self.line_height(font_size) <= max_height

    def fit_text(
        self,
        text: str,
        box: TextBox,
        face_provider: Callable[[int], Any],
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
        exhaustive: Optional[bool] = None
    ) -> FitResult:
        """
        Find the largest font size whose wrapped caption fits the box

        Candidates are tried in ascending order. By default the search stops
        at the first size that does not fit; with ``exhaustive`` every size in
        range is evaluated and the largest fitting one wins.

        If no candidate fits, the smallest evaluated size is returned with
        ``fits=False`` so the caller can decide whether overflow is acceptable.

        Args:
            text: Caption text
            box: Target text box
            face_provider: Callable returning a face for a point size
            min_size: Smallest candidate (default: engine minimum)
            max_size: Largest candidate (default: min(box height, engine maximum),
                never below min_size)
            exhaustive: Override the engine's search mode

        Returns:
            FitResult with the chosen size and its wrapped lines

        Raises:
            FontUnavailable: If no face could be loaded at any candidate size
        """
        min_size = self.min_font_size if min_size is None else min_size
        if max_size is None:
            # A box shorter than the minimum still evaluates the minimum and reports overflow
            max_size = max(min_size, min(box.height, self.max_font_size))
        if exhaustive is None:
            exhaustive = self.exhaustive
        if min_size <= 0 or max_size < min_size:
            raise ValueError(f"Invalid font size range: {min_size}-{max_size}")

        best = None
        fallback = None
        last_error = None

        for size in range(min_size, max_size + 1):
            try:
                face = face_provider(size)
            except FontUnavailable as e:
                logger.debug(f"Font size {size} unavailable: {e}")
                last_error = e
                continue

            lines = self.wrap_text(text, box.width, face)
            line_height = self.line_height(size)
            candidate = FitResult(font_size=size, lines=lines, line_height=line_height, face=face)

            if fallback is None:
                fallback = candidate

            if self.fits(lines, size, box.height):
                best = candidate
            elif not exhaustive:
                break

        if best is not None:
            logger.debug(f"Fit search chose size {best.font_size} ({len(best.lines)} lines)")
            return best

        if fallback is None:
            if last_error is not None:
                raise last_error
            raise FontUnavailable("caption font", message="No font face could be loaded")

        fallback.fits = False
        logger.warning(
            f"Caption does not fit {box.width}x{box.height} even at size {fallback.font_size} "
            f"({len(fallback.lines)} lines)"
        )
        return fallback
