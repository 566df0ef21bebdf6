from storeshots.core import CanvasLayout
from storeshots.core.geometry import (
    calculate_canvas_layout,
    image_top,
    resized_dimensions,
    round_half_up,
    scaled_size,
    slot_left,
    split_boxes,
    title_band_height,
    title_top,
)


def test_round_half_up_matches_browser_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-0.5) == 0
    assert round_half_up(1.49) == 1


def test_canvas_never_smaller_than_background():
    layout = calculate_canvas_layout(
        image_size=(100, 200),
        background_size=(800, 600),
        spacing=10,
        font_size=10,
        title_spacing=5,
        shadow_offset=1,
        lines=2,
    )
    assert (layout.canvas_width, layout.canvas_height) == (800, 600)
    assert layout.quarter_width == 200


def test_canvas_grows_to_fit_images_and_titles():
    layout = calculate_canvas_layout(
        image_size=(1000, 2000),
        background_size=(100, 100),
        spacing=50,
        font_size=130,
        title_spacing=100,
        shadow_offset=1,
        lines=2,
    )
    band = title_band_height(130, 1, 100, 2)
    assert layout.title_band_height == band
    assert layout.canvas_width == 4 * 1000 + 5 * 50
    assert layout.canvas_height == 2000 + band + 2 * 50


def test_quarter_width_is_not_truncated():
    layout = calculate_canvas_layout((10, 10), (1001, 1000), 0, 10, 0, 0, 1)
    assert layout.quarter_width == 250.25


def test_slots_center_in_quarters():
    layout = CanvasLayout(
        canvas_width=4000,
        canvas_height=3000,
        image_width=1000,
        image_height=2000,
        title_band_height=400,
        quarter_width=1000.0,
    )
    centers = [slot_left(index, layout, 50, 800, True) + 400 for index in range(4)]
    assert centers == [500, 1500, 2500, 3500]


def test_slots_without_quarters_use_fixed_allocations():
    layout = CanvasLayout(4000, 3000, 900, 2000, 400, 1000.0)
    lefts = [slot_left(index, layout, 50, 900, False) for index in range(4)]
    assert lefts == [50, 1000, 1950, 2900]


def test_title_and_image_offsets_share_the_band():
    layout = CanvasLayout(4000, 3000, 1000, 2000, 400, 1000.0)
    assert image_top(layout, 50) == 450
    assert title_top(layout, 50, 300) == 100


def test_scaled_size():
    assert scaled_size(1230, 2592, 1.0) == (1230, 2592)
    assert scaled_size(1230, 2592, 0.9) == (1107, 2333)


def test_resize_preserves_aspect_ratio():
    assert resized_dimensions((5000, 9000), 1242) == (4968, 8942)


def test_split_boxes_cover_width_without_overlap():
    boxes = split_boxes(1242, 2688)
    assert len(boxes) == 4
    assert sum(right - left for left, _, right, _ in boxes) == 4 * 1242
    for previous, current in zip(boxes, boxes[1:]):
        assert previous[2] == current[0]
