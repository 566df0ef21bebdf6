"""Layout arithmetic for the combine and split stages.

Everything here is pure: sizes in, sizes and offsets out. Rounding is
half-up so that ``.5`` positions land consistently to the right/bottom.
"""

from __future__ import annotations

import math

from . import SLOT_COUNT, CanvasLayout

LINE_HEIGHT_RATIO = 1.2
TITLE_PAD_RATIO = 0.2
CHAR_WIDTH_RATIO = 0.6


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def title_pad(font_size: int, shadow_offset: int) -> int:
    """Vertical padding above and below title text, room for ascenders and the shadow."""

    return math.ceil(font_size * TITLE_PAD_RATIO) + abs(shadow_offset)


def title_height(font_size: int, shadow_offset: int, lines: int) -> int:
    """Height of a rendered title layer holding ``lines`` lines."""

    content = font_size * LINE_HEIGHT_RATIO * lines
    return math.ceil(content + 2 * title_pad(font_size, shadow_offset))


def title_band_height(font_size: int, shadow_offset: int, title_spacing: int, lines: int) -> int:
    return title_height(font_size, shadow_offset, lines) + title_spacing


def max_chars_per_line(width: int, font_size: int) -> int:
    return math.floor(width / (font_size * CHAR_WIDTH_RATIO))


def calculate_canvas_layout(
    image_size: tuple[int, int],
    background_size: tuple[int, int],
    spacing: int,
    font_size: int,
    title_spacing: int,
    shadow_offset: int,
    lines: int,
    slots: int = SLOT_COUNT,
) -> CanvasLayout:
    """Size the composite canvas around ``slots`` images of ``image_size``.

    The canvas never shrinks below the background in either dimension.
    """

    image_width, image_height = image_size
    background_width, background_height = background_size
    band = title_band_height(font_size, shadow_offset, title_spacing, lines)

    required_width = image_width * slots + spacing * (slots + 1)
    required_height = image_height + band + spacing * 2
    canvas_width = max(background_width, required_width)
    canvas_height = max(background_height, required_height)

    return CanvasLayout(
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        image_width=image_width,
        image_height=image_height,
        title_band_height=band,
        quarter_width=canvas_width / slots,
    )


def slot_left(
    index: int,
    layout: CanvasLayout,
    spacing: int,
    content_width: int,
    center_in_quarters: bool,
) -> int:
    """Left offset of a layer of ``content_width`` placed in slot ``index``.

    Centered in its quarter of the canvas, or else centered inside the
    fixed allocation of ``layout.image_width`` laid out left to right.
    """

    if center_in_quarters:
        quarter_center = index * layout.quarter_width + layout.quarter_width / 2
        return round_half_up(quarter_center - content_width / 2)
    allocation_start = index * (layout.image_width + spacing) + spacing
    return round_half_up(allocation_start + (layout.image_width - content_width) / 2)


def title_top(layout: CanvasLayout, spacing: int, rendered_height: int) -> int:
    """Top offset that vertically centers a title layer in the title band."""

    return spacing + max(0, round_half_up((layout.title_band_height - rendered_height) / 2))


def image_top(layout: CanvasLayout, spacing: int) -> int:
    return spacing + layout.title_band_height


def scaled_size(width: int, height: int, scale_factor: float) -> tuple[int, int]:
    if scale_factor == 1.0:
        return width, height
    return round_half_up(width * scale_factor), round_half_up(height * scale_factor)


def resized_dimensions(source_size: tuple[int, int], target_width: int, slots: int = SLOT_COUNT) -> tuple[int, int]:
    """Resize so the width is exactly ``slots`` target widths, keeping aspect ratio."""

    source_width, source_height = source_size
    resized_width = target_width * slots
    resized_height = round_half_up(resized_width * (source_height / source_width))
    return resized_width, resized_height


def split_boxes(slot_width: int, height: int, slots: int = SLOT_COUNT) -> list[tuple[int, int, int, int]]:
    """Equal-width, non-overlapping vertical strips from left to right."""

    return [(index * slot_width, 0, (index + 1) * slot_width, height) for index in range(slots)]
