"""Device bezel framing for raw screenshots."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from PIL import Image, ImageChops, ImageFilter

from . import BatchSummary, FrameJob, FrameSettings, Workspace
from .batch import run_batches
from .imaging import (
    ImageService,
    apply_mask,
    rounded_mask,
    solid_layer,
    vertical_gradient,
    with_alpha,
)
from ..utils import file_tools, validators

logger = logging.getLogger(__name__)

FRAMER_BATCH_SIZE = 32

SCREEN_TOP = (0x00, 0x00, 0x00, 255)
SCREEN_BOTTOM = (0x0C, 0x0C, 0x0C, 255)
SCREEN_STROKE = (0, 0, 0, 64)
BODY_TOP = (0x1B, 0x1B, 0x1B, 255)
BODY_BOTTOM = (0x0B, 0x0B, 0x0B, 255)
RIM_TOP = (255, 255, 255, 89)
RIM_BOTTOM = (255, 255, 255, 13)
RIM_WIDTH = 2


def merge_frame_settings(overrides: Optional[dict[str, Any]] = None) -> FrameSettings:
    """Shallow-merge overrides onto the default frame settings."""

    return dataclasses.replace(FrameSettings(), **(overrides or {}))


def _screen_box(settings: FrameSettings, width: int, height: int) -> tuple[int, int, int, int]:
    left, top = settings.screen_origin
    return left, top, left + width, top + height


def create_device_background(width: int, height: int, settings: FrameSettings) -> Image.Image:
    """Dark screen bed under the screenshot so rounded corners never show the canvas."""

    size = settings.canvas_size(width, height)
    left, top, right, bottom = _screen_box(settings, width, height)
    radius = settings.image_border_radius

    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    bed = apply_mask(
        vertical_gradient((width, height), SCREEN_TOP, SCREEN_BOTTOM),
        rounded_mask((width, height), (0, 0, width, height), radius),
    )
    layer.alpha_composite(bed, dest=(left, top))

    stroke = rounded_mask(size, (left, top, right, bottom), max(0, radius - 0.5), outline_width=1)
    layer.alpha_composite(solid_layer(size, SCREEN_STROKE, stroke))
    return layer


def create_device_bezels(width: int, height: int, device_type: str, settings: FrameSettings) -> Image.Image:
    """Device body with drop shadow and rim, screen area cut out, plus the iPhone home indicator."""

    size = settings.canvas_size(width, height)
    frame_width, frame_height = size
    radius = settings.frame_border_radius
    shadow = settings.shadow

    body_mask = rounded_mask(size, (0, 0, frame_width, frame_height), radius)
    body = apply_mask(vertical_gradient(size, BODY_TOP, BODY_BOTTOM), body_mask)

    shifted = Image.new("L", size, 0)
    shifted.paste(body_mask, (shadow.dx, shadow.dy))
    if shadow.std_deviation > 0:
        shifted = shifted.filter(ImageFilter.GaussianBlur(shadow.std_deviation))
    layer = solid_layer(size, with_alpha("#000000", shadow.opacity), shifted)
    layer.alpha_composite(body)

    rim_mask = rounded_mask(size, (0, 0, frame_width, frame_height), radius, outline_width=RIM_WIDTH)
    layer.alpha_composite(apply_mask(vertical_gradient(size, RIM_TOP, RIM_BOTTOM), rim_mask))

    screen_mask = rounded_mask(size, _screen_box(settings, width, height), settings.image_border_radius)
    layer = apply_mask(layer, ImageChops.invert(screen_mask))

    if device_type == "iphone":
        indicator = settings.home_indicator
        pill_left = frame_width / 2 - indicator.width / 2
        pill_top = frame_height - indicator.height - indicator.bottom_offset
        pill_mask = rounded_mask(
            size,
            (pill_left, pill_top, pill_left + indicator.width, pill_top + indicator.height),
            indicator.border_radius,
        )
        layer.alpha_composite(solid_layer(size, with_alpha("#ffffff", indicator.opacity), pill_mask))
    return layer


def round_corners(screenshot: Image.Image, radius: int) -> Image.Image:
    """Clip the screenshot to a rounded rectangle; radius 0 passes it through."""

    if radius <= 0:
        return screenshot
    mask = rounded_mask(screenshot.size, (0, 0, screenshot.width, screenshot.height), radius)
    return apply_mask(screenshot, mask)


def compose_frame(screenshot: Image.Image, device_type: str = "iphone", settings: Optional[FrameSettings] = None) -> Image.Image:
    """Wrap a screenshot in a synthesized device frame.

    Layers bottom to top: screen bed, rounded screenshot, bezels.
    """

    settings = settings or FrameSettings()
    screenshot = screenshot.convert("RGBA")
    width, height = screenshot.size

    framed = create_device_background(width, height, settings)
    framed.alpha_composite(round_corners(screenshot, settings.image_border_radius), dest=settings.screen_origin)
    framed.alpha_composite(create_device_bezels(width, height, device_type, settings))
    return framed


async def frame_screenshot(
    service: ImageService,
    input_path: Path,
    output_path: Path,
    device_type: str = "iphone",
    settings: Optional[FrameSettings] = None,
) -> Path:
    """Frame one screenshot file and write the result."""

    validators.validate_device_type(device_type)
    screenshot = await service.load(input_path)
    logger.info("Processing screenshot %s (%sx%s, %s)", input_path, screenshot.width, screenshot.height, device_type)

    framed = await service.run(compose_frame, screenshot, device_type, settings)
    await service.save(framed, output_path)
    logger.info("Framed screenshot saved to %s", output_path)
    return output_path


def discover_frame_jobs(
    workspace: Workspace,
    locale: Optional[str] = None,
    device_type: Optional[str] = None,
) -> list[FrameJob]:
    """Find raw screenshots laid out as ``<device>/<locale>/<slot>/<file>.png``."""

    root = workspace.screenshots_dir
    jobs: list[FrameJob] = []
    for path in file_tools.find_png_files(root):
        parts = path.relative_to(root).parts
        file_device = "ipad" if parts[0] == "ipad" else "iphone"
        file_locale = parts[1] if len(parts) > 2 else None
        if locale and file_locale != locale:
            continue
        if device_type and file_device != device_type:
            continue
        jobs.append(
            FrameJob(
                input_path=path,
                output_path=file_tools.framed_output_path(path, root, workspace.framed_dir),
                device_type=file_device,
                locale=file_locale,
            )
        )
    return jobs


async def frame_batch(
    service: ImageService,
    jobs: Iterable[FrameJob],
    settings: Optional[FrameSettings] = None,
    chunk_size: int = FRAMER_BATCH_SIZE,
) -> BatchSummary:
    """Frame every job in fixed-size concurrent chunks."""

    async def _frame(job: FrameJob) -> Path:
        return await frame_screenshot(service, job.input_path, job.output_path, job.device_type, settings)

    return await run_batches(
        list(jobs),
        _frame,
        chunk_size=chunk_size,
        describe=lambda job: str(job.input_path),
        label="files",
    )
