"""Combine four framed screenshots with localized titles over a background."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from PIL import Image

from . import SLOT_COUNT, BatchSummary, CanvasLayout, CombineSettings, FramedImage
from .batch import run_batches
from .errors import MissingResourceError
from .geometry import calculate_canvas_layout, image_top, scaled_size, slot_left, title_top
from .imaging import ImageService, composite_at
from .titles import generate_title_image
from .translations import load_titles, resolve_titles
from ..utils import file_tools, validators

logger = logging.getLogger(__name__)

COMBINER_BATCH_SIZE = 12


def find_framed_screenshots(framed_root: Path, device_type: str, locale: str) -> list[Path]:
    """Return ``slot_<n>/framed.png`` files for a device and locale, ordered by slot number."""

    locale_dir = framed_root / device_type / locale
    try:
        entries = list(locale_dir.iterdir())
    except OSError as exc:
        logger.warning("Could not read directory %s: %s", locale_dir, exc)
        return []

    slots: list[tuple[int, Path]] = []
    for entry in entries:
        number = file_tools.slot_number(entry.name)
        if number is None or not entry.is_dir():
            continue
        framed = entry / "framed.png"
        if framed.is_file():
            slots.append((number, framed))
    return [path for _, path in sorted(slots)]


def select_slot_images(paths: Sequence[Path], search_path: Path) -> list[Path]:
    """Enforce exactly SLOT_COUNT participants."""

    if not paths:
        raise MissingResourceError(f"No framed screenshots found in: {search_path}")
    if len(paths) < SLOT_COUNT:
        raise MissingResourceError(
            f"Expected {SLOT_COUNT} framed screenshots in {search_path}, found {len(paths)}"
        )
    if len(paths) > SLOT_COUNT:
        logger.warning("Found %s framed screenshots in %s; using the first %s", len(paths), search_path, SLOT_COUNT)
    return list(paths[:SLOT_COUNT])


def scale_framed_image(image: Image.Image, scale_factor: float) -> FramedImage:
    """Resize a framed screenshot by scale_factor, keeping its original size for layout."""

    width, height = scaled_size(image.width, image.height, scale_factor)
    scaled = image if (width, height) == image.size else image.resize((width, height), Image.Resampling.LANCZOS)
    return FramedImage(image=scaled, original_width=image.width, original_height=image.height)


def layout_for(framed_images: Sequence[FramedImage], background_size: tuple[int, int], settings: CombineSettings) -> CanvasLayout:
    # All slots share the first image's unscaled size as their allocation unit.
    reference = framed_images[0]
    return calculate_canvas_layout(
        image_size=(reference.original_width, reference.original_height),
        background_size=background_size,
        spacing=settings.spacing,
        font_size=settings.title_font_size,
        title_spacing=settings.title_spacing,
        shadow_offset=settings.title_shadow_offset,
        lines=settings.title_lines,
        slots=len(framed_images),
    )


def compose_combined(
    background: Image.Image,
    framed_images: Sequence[FramedImage],
    titles: Sequence[str],
    settings: CombineSettings,
) -> Image.Image:
    """Lay out titles and framed screenshots over the background."""

    layout = layout_for(framed_images, background.size, settings)
    logger.debug(
        "Canvas %sx%s, slot %sx%s, title band %s",
        layout.canvas_width,
        layout.canvas_height,
        layout.image_width,
        layout.image_height,
        layout.title_band_height,
    )

    canvas = background.convert("RGBA")
    if layout.canvas_width > background.width or layout.canvas_height > background.height:
        logger.info("Resizing background to fit canvas %sx%s", layout.canvas_width, layout.canvas_height)
        canvas = canvas.resize((layout.canvas_width, layout.canvas_height), Image.Resampling.LANCZOS)
    else:
        canvas = canvas.copy()

    titles = resolve_titles(list(titles))
    spacing = settings.spacing
    for index in range(len(framed_images)):
        title = generate_title_image(
            titles[index],
            settings.title_font_size,
            settings.title_color,
            settings.title_shadow_color,
            settings.title_shadow_offset,
            layout.image_width,
            max_lines=settings.title_lines,
            font_path=settings.font_path,
        )
        left = slot_left(index, layout, spacing, layout.image_width, settings.center_in_quarters)
        composite_at(canvas, title.image, left, title_top(layout, spacing, title.height))

    for index, framed in enumerate(framed_images):
        left = slot_left(index, layout, spacing, framed.width, settings.center_in_quarters)
        composite_at(canvas, framed.image, left, image_top(layout, spacing))

    return canvas


async def combine_screenshots(
    service: ImageService,
    settings: CombineSettings,
    output_root: Path,
    titles: Optional[Sequence[str]] = None,
    translations_dir: Optional[Path] = None,
) -> Path:
    """Build the combined composite for one device type and locale."""

    validators.validate_device_type(settings.device_type)
    if titles is None:
        if translations_dir is not None:
            titles = await service.run(load_titles, translations_dir, settings.locale)
        else:
            titles = resolve_titles(None)
    output_path = file_tools.combined_output_path(output_root, settings.device_type, settings.locale)

    if not settings.background_path.exists():
        raise MissingResourceError(f"Background image not found: {settings.background_path}")
    background = await service.load(settings.background_path)
    logger.info("Background image: %sx%s", background.width, background.height)

    search_path = settings.framed_screenshots_path / settings.device_type / settings.locale
    paths = select_slot_images(
        find_framed_screenshots(settings.framed_screenshots_path, settings.device_type, settings.locale),
        search_path,
    )
    for index, path in enumerate(paths, start=1):
        logger.info("  %s. %s/%s", index, path.parent.name, path.name)

    framed_images = []
    for path in paths:
        image = await service.load(path)
        framed_images.append(await service.run(scale_framed_image, image, settings.scale_factor))

    logger.info(
        "Combining %s/%s (scale %s, titles: %s)",
        settings.device_type,
        settings.locale,
        settings.scale_factor,
        ", ".join(titles),
    )
    combined = await service.run(compose_combined, background, framed_images, titles, settings)
    await service.save(combined, output_path)
    logger.info("Combined screenshot saved to %s", output_path)
    return output_path


async def combine_locales(
    service: ImageService,
    locales: Iterable[str],
    base_settings: CombineSettings,
    output_root: Path,
    translations_dir: Optional[Path] = None,
    titles: Optional[Sequence[str]] = None,
    chunk_size: int = COMBINER_BATCH_SIZE,
) -> BatchSummary:
    """Combine every locale in fixed-size concurrent chunks."""

    async def _combine(locale: str) -> Path:
        settings = dataclasses.replace(base_settings, locale=locale)
        return await combine_screenshots(service, settings, output_root, titles, translations_dir)

    return await run_batches(
        list(locales),
        _combine,
        chunk_size=chunk_size,
        describe=lambda locale: f"locale {locale}",
        label="locales",
    )
