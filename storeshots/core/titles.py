"""Title line splitting and title layer rendering."""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from . import TitleImage
from .geometry import LINE_HEIGHT_RATIO, max_chars_per_line, title_height, title_pad

logger = logging.getLogger(__name__)

# A real line break or the two-character escape sequence "\n" from translation files.
_MANUAL_BREAK = re.compile(r"\r?\n|\\n")

# Character budgets count markup entities, so "&" weighs as "&amp;".
_ENTITY_EXTRA = {"&": 4, "<": 3, ">": 3}

FONTS_DIR = Path(__file__).resolve().parents[2] / "fonts"
SYSTEM_FONTS = (
    "/usr/share/fonts/truetype/montserrat/Montserrat-SemiBold.ttf",
    "/Library/Fonts/Montserrat-SemiBold.ttf",
    "/System/Library/Fonts/HelveticaNeue.ttc",
    "/System/Library/Fonts/Helvetica.ttc",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "C:/Windows/Fonts/arialbd.ttf",
    "C:/Windows/Fonts/arial.ttf",
)


def _rendered_length(text: str) -> int:
    return len(text) + sum(_ENTITY_EXTRA.get(char, 0) for char in text)


def split_title_lines(text: str, font_size: int, width: int, max_lines: int = 2) -> tuple[str, str]:
    """Split a title into at most two lines.

    Explicit breaks win. Otherwise words are packed greedily onto the first
    line while it stays within the estimated character budget for ``width``
    and the rest goes on the second line. With ``max_lines == 1`` the second
    line is always dropped, even if the first overflows.
    """

    manual_parts = [part for part in _MANUAL_BREAK.split(text) if part]
    line1 = text
    line2 = ""

    if len(manual_parts) > 1:
        line1 = manual_parts[0].strip()
        line2 = " ".join(manual_parts[1:]).strip()
    else:
        limit = max_chars_per_line(width, font_size)
        if _rendered_length(text) > limit:
            words = text.split(" ")
            current = ""
            break_index = 0
            for index, word in enumerate(words):
                candidate = f"{current} {word}" if current else word
                if _rendered_length(candidate) > limit and current:
                    break_index = index
                    break
                current = candidate
                break_index = index + 1
            if 0 < break_index < len(words):
                line1 = " ".join(words[:break_index])
                line2 = " ".join(words[break_index:])

    if max_lines == 1:
        line2 = ""
    return line1, line2


def load_font(size: int, font_path: Optional[Path] = None) -> ImageFont.FreeTypeFont:
    """Load a TrueType font, preferring the configured path, then bundled and system fonts."""

    candidates: list[Path] = []
    if font_path:
        candidates.append(Path(font_path))
    if FONTS_DIR.exists():
        candidates.extend(sorted(FONTS_DIR.glob("*.ttf")))
        candidates.extend(sorted(FONTS_DIR.glob("*.otf")))
    candidates.extend(Path(path) for path in SYSTEM_FONTS)

    for candidate in candidates:
        if not candidate.exists():
            continue
        try:
            return ImageFont.truetype(str(candidate), size=size)
        except OSError as exc:
            logger.debug("Skipping unusable font %s: %s", candidate, exc)
    if font_path:
        logger.warning("Font %s could not be loaded; falling back", font_path)
    return ImageFont.load_default(size=size)


def generate_title_image(
    text: str,
    font_size: int,
    color: str,
    shadow_color: str,
    shadow_offset: int,
    width: int,
    max_lines: int = 2,
    font_path: Optional[Path] = None,
) -> TitleImage:
    """Render a title layer ``width`` pixels wide.

    Each line is drawn twice, first in the shadow color offset by
    ``shadow_offset`` on both axes, then in the main color, both centered on
    ``width / 2``. The layer height depends on how many lines were rendered.
    """

    line1, line2 = split_title_lines(text, font_size, width, max_lines)
    lines = (line1, line2) if line2 else (line1,)

    line_height = font_size * LINE_HEIGHT_RATIO
    pad = title_pad(font_size, shadow_offset)
    height = title_height(font_size, shadow_offset, len(lines))
    first_baseline = math.ceil(pad + line_height / 2)

    layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    font = load_font(font_size, font_path)
    center_x = width / 2

    for index, line in enumerate(lines):
        y = first_baseline + index * line_height
        draw.text((center_x + shadow_offset, y + shadow_offset), line, font=font, fill=shadow_color, anchor="mm")
    for index, line in enumerate(lines):
        y = first_baseline + index * line_height
        draw.text((center_x, y), line, font=font, fill=color, anchor="mm")

    return TitleImage(image=layer, height=height, lines=lines)
