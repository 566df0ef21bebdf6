"""Split combined composites into store-sized slot screenshots."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from PIL import Image

from . import SLOT_COUNT, BatchSummary, DeviceConfig
from .batch import run_batches
from .errors import MissingResourceError, PreconditionError
from .geometry import resized_dimensions, split_boxes
from .imaging import ImageService
from ..utils import file_tools, validators

logger = logging.getLogger(__name__)

SPLITTER_BATCH_SIZE = 16
MIN_COMBINED_DIMENSION = 1000

DEFAULT_DEVICE_CONFIGS: tuple[DeviceConfig, ...] = (
    DeviceConfig(
        name="iphone 6.5 inch",
        device_type="iphone",
        width=1242,
        height=2688,
        output_label="iphone 6.5 inch (1242x2688)",
    ),
    DeviceConfig(
        name="iphone 6.9 inch",
        device_type="iphone",
        width=1320,
        height=2868,
        output_label="iphone 6.9 inch (1320x2868)",
    ),
    DeviceConfig(
        name="ipad 13 inch",
        device_type="ipad",
        width=2752,
        height=2064,
        output_label="ipad 13 inch (2752x2064)",
    ),
)


def configs_for_device(device_type: str, configs: Sequence[DeviceConfig] = DEFAULT_DEVICE_CONFIGS) -> list[DeviceConfig]:
    return [config for config in configs if config.device_type == device_type]


def validate_combined_size(width: int, height: int) -> None:
    """Reject composites that signal an upstream defect."""

    if not width or not height:
        raise PreconditionError("Invalid combined image: missing width or height")
    if width < MIN_COMBINED_DIMENSION or height < MIN_COMBINED_DIMENSION:
        raise PreconditionError(
            f"Combined image too small: {width}x{height}. "
            f"Expected at least {MIN_COMBINED_DIMENSION}x{MIN_COMBINED_DIMENSION}."
        )


def split_composite(image: Image.Image, config: DeviceConfig, slots: int = SLOT_COUNT) -> list[Image.Image]:
    """Resize to ``slots`` target widths, crop excess from the bottom, and cut equal strips.

    A resized height shorter than the target is an error; slots are never
    padded up to the target height.
    """

    validate_combined_size(image.width, image.height)
    resized_width, resized_height = resized_dimensions(image.size, config.width, slots)
    logger.info("  Target %sx%s, resize to %sx%s", config.width, config.height, resized_width, resized_height)

    if resized_height < config.height:
        raise PreconditionError(
            f"{config.name}: resized composite is {resized_height}px tall, "
            f"shorter than the required {config.height}px"
        )

    resized = image.resize((resized_width, resized_height), Image.Resampling.LANCZOS)
    final_height = resized_height
    if resized_height > config.height:
        logger.info("  Cropping height from %s to %s", resized_height, config.height)
        resized = resized.crop((0, 0, resized_width, config.height))
        final_height = config.height

    return [resized.crop(box) for box in split_boxes(config.width, final_height, slots)]


async def split_screenshots(
    service: ImageService,
    combined_root: Path,
    output_root: Path,
    locale: str,
    device_type: str = "iphone",
    configs: Optional[Sequence[DeviceConfig]] = None,
) -> list[Path]:
    """Write ``slot_1..slot_4`` for every device config matching device_type.

    A config whose target cannot be met is logged and skipped; the remaining
    configs still run and a single PreconditionError naming every skipped
    config is raised afterwards.
    """

    validators.validate_device_type(device_type)
    selected = configs_for_device(device_type, configs if configs is not None else DEFAULT_DEVICE_CONFIGS)
    combined_path = file_tools.combined_output_path(combined_root, device_type, locale)
    if not combined_path.is_file():
        raise MissingResourceError(f"Combined image not found: {combined_path}")

    combined = await service.load(combined_path)
    logger.info("Combined image %s: %sx%s", combined_path, combined.width, combined.height)
    validate_combined_size(combined.width, combined.height)

    written: list[Path] = []
    failures: list[str] = []
    for config in selected:
        logger.info("Processing %s for %s", config.name, locale)
        try:
            slices = await service.run(split_composite, combined, config)
        except PreconditionError as exc:
            logger.error("Skipping %s for %s: %s", config.name, locale, exc)
            failures.append(str(exc))
            continue
        for slot, piece in enumerate(slices, start=1):
            path = file_tools.slot_output_path(output_root, config.output_label, locale, slot)
            written.append(await service.save(piece, path))
            logger.info("    Saved %s", path)

    if failures:
        raise PreconditionError(f"Locale {locale}: {len(failures)} device config(s) failed: " + "; ".join(failures))
    return written


async def split_locales(
    service: ImageService,
    locales: Iterable[str],
    combined_root: Path,
    output_root: Path,
    device_type: str = "iphone",
    configs: Optional[Sequence[DeviceConfig]] = None,
    chunk_size: int = SPLITTER_BATCH_SIZE,
) -> BatchSummary:
    """Split every locale's composite in fixed-size concurrent chunks."""

    async def _split(locale: str) -> list[Path]:
        return await split_screenshots(service, combined_root, output_root, locale, device_type, configs)

    return await run_batches(
        list(locales),
        _split,
        chunk_size=chunk_size,
        describe=lambda locale: f"locale {locale}",
        label="locales",
    )
