"""Bitmap service and Pillow layer helpers shared by the pipeline stages."""

from __future__ import annotations

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, TypeVar

import numpy as np
from PIL import Image, ImageChops, ImageColor, ImageDraw, UnidentifiedImageError

from .errors import ConfigurationError, InvalidImageError
from ..utils import file_tools

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 2
SUPERSAMPLE = 2
RGBA = tuple[int, int, int, int]
T = TypeVar("T")


class ImageService:
    """Owns the worker threads used for decoding, encoding and pixel work.

    ``concurrency`` caps the number of threads regardless of how many
    coroutines are awaiting the service. With ``cache=False`` Pillow's
    memory block cache is disabled process-wide.
    """

    def __init__(self, concurrency: int = DEFAULT_CONCURRENCY, cache: bool = False) -> None:
        if concurrency < 1:
            raise ConfigurationError("Concurrency must be greater than zero")
        self.concurrency = concurrency
        self.cache = cache
        self._executor = ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="storeshots")
        # Composites routinely exceed the decompression-bomb threshold.
        Image.MAX_IMAGE_PIXELS = None
        if not cache:
            Image.core.set_blocks_max(0)
        logger.debug("Image service ready (concurrency=%s, cache=%s)", concurrency, cache)

    def __enter__(self) -> "ImageService":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    async def run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run blocking image work on the service threads."""

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args, **kwargs))

    async def load(self, path: Path) -> Image.Image:
        return await self.run(load_image, path)

    async def save(self, image: Image.Image, path: Path) -> Path:
        return await self.run(save_image, image, path)


def load_image(path: Path) -> Image.Image:
    """Decode an image fully and return it as RGBA."""

    if not path.exists():
        raise InvalidImageError(path, reason="File not found")
    try:
        with Image.open(path) as handle:
            handle.load()
            return handle.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise InvalidImageError(path, reason=str(exc)) from exc


def save_image(image: Image.Image, path: Path) -> Path:
    """Persist an image to disk as PNG, creating parent directories."""

    file_tools.ensure_directory(path.parent)
    image.save(path, format="PNG")
    return path


def with_alpha(color: str, opacity: float = 1.0) -> RGBA:
    """Resolve a color string to RGBA, scaling its alpha by opacity."""

    rgba = ImageColor.getcolor(color, "RGBA")
    return rgba[0], rgba[1], rgba[2], round(rgba[3] * max(0.0, min(opacity, 1.0)))


def _scaled_box(box: tuple[float, float, float, float], scale: int) -> tuple[float, float, float, float]:
    left, top, right, bottom = box
    # Pillow boxes are inclusive of the right/bottom pixel.
    return left * scale, top * scale, right * scale - 1, bottom * scale - 1


def rounded_mask(
    size: tuple[int, int],
    box: tuple[float, float, float, float],
    radius: float,
    outline_width: int = 0,
) -> Image.Image:
    """Draw an anti-aliased rounded rectangle into an ``L`` mask.

    ``box`` is (left, top, right, bottom) in exclusive pixel coordinates. With
    ``outline_width`` only the stroke is drawn.
    """

    width, height = size
    canvas = Image.new("L", (width * SUPERSAMPLE, height * SUPERSAMPLE), 0)
    draw = ImageDraw.Draw(canvas)
    scaled = _scaled_box(box, SUPERSAMPLE)
    if scaled[2] <= scaled[0] or scaled[3] <= scaled[1]:
        return Image.new("L", size, 0)
    radius = max(0.0, radius) * SUPERSAMPLE
    if outline_width:
        draw.rounded_rectangle(scaled, radius=radius, outline=255, width=outline_width * SUPERSAMPLE)
    else:
        draw.rounded_rectangle(scaled, radius=radius, fill=255)
    return canvas.resize(size, Image.Resampling.LANCZOS)


def vertical_gradient(size: tuple[int, int], top: RGBA, bottom: RGBA) -> Image.Image:
    """Build an RGBA image blending linearly from top to bottom."""

    width, height = size
    ramp = np.linspace(0.0, 1.0, num=height, dtype=np.float32)[:, None]
    start = np.asarray(top, dtype=np.float32)[None, :]
    end = np.asarray(bottom, dtype=np.float32)[None, :]
    rows = np.rint(start + (end - start) * ramp).astype(np.uint8)
    pixels = np.ascontiguousarray(np.broadcast_to(rows[:, None, :], (height, width, 4)))
    return Image.fromarray(pixels)


def apply_mask(layer: Image.Image, mask: Image.Image) -> Image.Image:
    """Keep layer pixels only where the mask is opaque (destination-in)."""

    result = layer.copy()
    result.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))
    return result


def solid_layer(size: tuple[int, int], color: RGBA, mask: Image.Image) -> Image.Image:
    """Fill color wherever the mask is opaque."""

    return apply_mask(Image.new("RGBA", size, color), mask)


def composite_at(base: Image.Image, layer: Image.Image, left: int, top: int) -> None:
    """Alpha-composite layer onto base in place, clipping at every edge."""

    source_left = max(0, -left)
    source_top = max(0, -top)
    if source_left >= layer.width or source_top >= layer.height:
        return
    if left >= base.width or top >= base.height:
        return
    base.alpha_composite(layer, dest=(max(0, left), max(0, top)), source=(source_left, source_top))
