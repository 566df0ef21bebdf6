import asyncio

import pytest
from PIL import Image

from storeshots.core import CombineSettings
from storeshots.core.combiner import combine_locales, combine_screenshots, find_framed_screenshots
from storeshots.core.errors import MissingResourceError
from storeshots.core.imaging import ImageService


def small_settings(workspace, **overrides):
    values = dict(
        background_path=workspace.background_path,
        framed_screenshots_path=workspace.framed_dir,
        spacing=10,
        title_font_size=10,
        title_spacing=5,
        iphone_scale_factor=1.0,
        ipad_scale_factor=1.0,
    )
    values.update(overrides)
    return CombineSettings(**values)


def combine(workspace, settings, **kwargs):
    with ImageService(concurrency=2) as service:
        return asyncio.run(combine_screenshots(service, settings, workspace.combined_dir, **kwargs))


def test_framed_screenshots_ordered_by_slot_number(workspace, make_png):
    for slot in (10, 2, 1):
        make_png(workspace.framed_dir / "iphone" / "en" / f"slot_{slot}" / "framed.png", (5, 5))
    make_png(workspace.framed_dir / "iphone" / "en" / "misc" / "framed.png", (5, 5))

    paths = find_framed_screenshots(workspace.framed_dir, "iphone", "en")

    assert [path.parent.name for path in paths] == ["slot_1", "slot_2", "slot_10"]


def test_screenshots_centered_in_quarters(workspace, make_png, framed_slots):
    make_png(workspace.background_path, (800, 600), (30, 30, 30, 255))
    framed_slots()

    output = combine(workspace, small_settings(workspace))

    assert output == workspace.combined_dir / "iphone" / "en" / "combined.png"
    with Image.open(output) as combined:
        assert combined.size == (800, 600)
        # title band is 35px, so images start at y=45
        assert combined.getpixel((100, 100))[:3] == (255, 0, 0)
        assert combined.getpixel((300, 100))[:3] == (0, 255, 0)
        assert combined.getpixel((500, 100))[:3] == (0, 0, 255)
        assert combined.getpixel((700, 100))[:3] == (255, 255, 0)
        # gaps between quarters show the background
        assert combined.getpixel((200, 100))[:3] == (30, 30, 30)
        assert combined.getpixel((100, 44))[:3] != (255, 0, 0)
        assert combined.getpixel((100, 45))[:3] == (255, 0, 0)


def test_small_background_is_enlarged_to_fit(workspace, make_png, framed_slots):
    make_png(workspace.background_path, (100, 100))
    framed_slots()

    output = combine(workspace, small_settings(workspace))

    with Image.open(output) as combined:
        assert combined.size == (4 * 100 + 5 * 10, 200 + 35 + 2 * 10)


def test_scale_factor_shrinks_images(workspace, make_png, framed_slots):
    make_png(workspace.background_path, (800, 600), (30, 30, 30, 255))
    framed_slots(device_type="ipad")

    output = combine(workspace, small_settings(workspace, device_type="ipad", ipad_scale_factor=0.5))

    with Image.open(output) as combined:
        # 50px wide image centered on x=100
        assert combined.getpixel((100, 60))[:3] == (255, 0, 0)
        assert combined.getpixel((70, 60))[:3] == (30, 30, 30)


def test_missing_slots_raise(workspace, make_png, framed_slots):
    make_png(workspace.background_path, (800, 600))
    framed_slots(count=3)

    with pytest.raises(MissingResourceError, match="found 3"):
        combine(workspace, small_settings(workspace))
    assert not (workspace.combined_dir / "iphone" / "en" / "combined.png").exists()


def test_no_slots_raise(workspace, make_png):
    make_png(workspace.background_path, (800, 600))

    with pytest.raises(MissingResourceError, match="No framed screenshots"):
        combine(workspace, small_settings(workspace))


def test_extra_slots_use_first_four(workspace, make_png, framed_slots):
    make_png(workspace.background_path, (800, 600), (30, 30, 30, 255))
    framed_slots(count=5)

    output = combine(workspace, small_settings(workspace))

    with Image.open(output) as combined:
        assert combined.getpixel((700, 100))[:3] == (255, 255, 0)


def test_missing_background_raises(workspace, framed_slots):
    framed_slots()

    with pytest.raises(MissingResourceError, match="Background"):
        combine(workspace, small_settings(workspace))


def test_combine_locales_reports_each_locale(workspace, make_png, framed_slots):
    make_png(workspace.background_path, (800, 600))
    framed_slots(locale="en")
    framed_slots(locale="fr", count=2)

    with ImageService(concurrency=2) as service:
        summary = asyncio.run(
            combine_locales(service, ["en", "fr"], small_settings(workspace), workspace.combined_dir, workspace.translations_dir)
        )

    assert (summary.processed, summary.failed) == (1, 1)
    assert [result.item for result in summary.results] == ["locale en", "locale fr"]
    assert (workspace.combined_dir / "iphone" / "en" / "combined.png").is_file()
