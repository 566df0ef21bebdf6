import asyncio

import pytest
from PIL import Image

from storeshots.core import DeviceConfig
from storeshots.core.errors import MissingResourceError, PreconditionError
from storeshots.core.imaging import ImageService
from storeshots.core.splitter import DEFAULT_DEVICE_CONFIGS, configs_for_device, split_composite, split_locales, split_screenshots

TINY = DeviceConfig(name="tiny", device_type="iphone", width=300, height=500, output_label="tiny (300x500)")


def striped(size):
    """Four vertical color bands, one per quarter."""

    image = Image.new("RGBA", size, (0, 0, 0, 255))
    quarter = size[0] // 4
    for index, color in enumerate([(255, 0, 0, 255), (0, 255, 0, 255), (0, 0, 255, 255), (255, 255, 0, 255)]):
        image.paste(color, (index * quarter, 0, (index + 1) * quarter, size[1]))
    return image


def test_default_catalog_by_device():
    assert [config.output_label for config in configs_for_device("iphone")] == [
        "iphone 6.5 inch (1242x2688)",
        "iphone 6.9 inch (1320x2868)",
    ]
    assert [(config.width, config.height) for config in configs_for_device("ipad")] == [(2752, 2064)]
    assert len(DEFAULT_DEVICE_CONFIGS) == 3


def test_split_crops_bottom_and_cuts_equal_strips():
    pieces = split_composite(striped((1200, 2400)), TINY)

    assert [piece.size for piece in pieces] == [(300, 500)] * 4
    assert [piece.getpixel((150, 250))[:3] for piece in pieces] == [
        (255, 0, 0),
        (0, 255, 0),
        (0, 0, 255),
        (255, 255, 0),
    ]


def test_split_resizes_to_four_target_widths():
    pieces = split_composite(striped((2400, 4000)), TINY)
    assert [piece.size for piece in pieces] == [(300, 500)] * 4


def test_too_small_composite_rejected():
    with pytest.raises(PreconditionError, match="too small"):
        split_composite(striped((900, 2000)), TINY)


def test_short_composite_is_an_error():
    with pytest.raises(PreconditionError, match="shorter"):
        split_composite(striped((2000, 1000)), DeviceConfig("short", "iphone", 300, 700, "short"))


def test_split_screenshots_writes_slots(workspace):
    combined_path = workspace.combined_dir / "iphone" / "en" / "combined.png"
    combined_path.parent.mkdir(parents=True)
    striped((1200, 2000)).save(combined_path)

    with ImageService(concurrency=2) as service:
        written = asyncio.run(
            split_screenshots(service, workspace.combined_dir, workspace.output_dir, "en", "iphone", [TINY])
        )

    expected = [workspace.output_dir / "tiny (300x500)" / "en" / f"slot_{slot}.png" for slot in range(1, 5)]
    assert written == expected
    with Image.open(expected[2]) as slot:
        assert slot.size == (300, 500)
        assert slot.getpixel((10, 10))[:3] == (0, 0, 255)


def test_configs_for_other_device_are_skipped(workspace):
    combined_path = workspace.combined_dir / "ipad" / "en" / "combined.png"
    combined_path.parent.mkdir(parents=True)
    striped((1200, 2000)).save(combined_path)

    with ImageService(concurrency=1) as service:
        written = asyncio.run(
            split_screenshots(service, workspace.combined_dir, workspace.output_dir, "en", "ipad", [TINY])
        )

    assert written == []


def test_missing_combined_image(workspace):
    with ImageService(concurrency=1) as service:
        with pytest.raises(MissingResourceError):
            asyncio.run(split_screenshots(service, workspace.combined_dir, workspace.output_dir, "en", "iphone", [TINY]))


def test_split_locales_continues_after_failure(workspace):
    combined_path = workspace.combined_dir / "iphone" / "fr" / "combined.png"
    combined_path.parent.mkdir(parents=True)
    striped((1200, 2000)).save(combined_path)

    with ImageService(concurrency=2) as service:
        summary = asyncio.run(
            split_locales(service, ["en", "fr"], workspace.combined_dir, workspace.output_dir, "iphone", [TINY])
        )

    assert (summary.processed, summary.failed) == (1, 1)
    assert (workspace.output_dir / "tiny (300x500)" / "fr" / "slot_4.png").is_file()


def test_short_config_does_not_block_other_configs(workspace):
    combined_path = workspace.combined_dir / "iphone" / "en" / "combined.png"
    combined_path.parent.mkdir(parents=True)
    striped((2000, 1000)).save(combined_path)
    short = DeviceConfig("short", "iphone", 300, 700, "short (300x700)")

    with ImageService(concurrency=1) as service:
        with pytest.raises(PreconditionError, match="short"):
            asyncio.run(
                split_screenshots(service, workspace.combined_dir, workspace.output_dir, "en", "iphone", [short, TINY])
            )

    assert not (workspace.output_dir / "short (300x700)").exists()
    for slot in range(1, 5):
        with Image.open(workspace.output_dir / "tiny (300x500)" / "en" / f"slot_{slot}.png") as piece:
            assert piece.size == (300, 500)
