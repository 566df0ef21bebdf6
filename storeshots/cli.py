"""Command-line entry point for the frame, combine and split stages."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import os
import sys
from collections import Counter
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .core import DEVICE_TYPES, BatchSummary, CombineSettings, FrameSettings, Workspace
from .core.combiner import combine_locales, combine_screenshots
from .core.errors import ConfigurationError
from .core.framer import discover_frame_jobs, frame_batch, frame_screenshot, merge_frame_settings
from .core.imaging import DEFAULT_CONCURRENCY, ImageService
from .core.splitter import split_locales
from .core.translations import available_locales
from .main import configure_logging
from .utils import file_tools, validators

logger = logging.getLogger(__name__)

ROOT_ENV = "STORESHOTS_ROOT"
CONCURRENCY_ENV = "STORESHOTS_CONCURRENCY"


class FrameRequest(BaseModel):
    """Frame geometry overrides taken from the command line."""

    edge_margin: Optional[int] = Field(None, ge=0)
    image_border_radius: Optional[int] = Field(None, ge=0)
    frame_border_radius: Optional[int] = Field(None, ge=0)


class CombineRequest(BaseModel):
    """Combine style overrides taken from the command line."""

    spacing: Optional[int] = Field(None, ge=0)
    title_font_size: Optional[int] = Field(None, gt=0)
    title_color: Optional[str] = None
    title_shadow_color: Optional[str] = None
    title_shadow_offset: Optional[int] = None
    title_spacing: Optional[int] = Field(None, ge=0)
    center_in_quarters: Optional[bool] = None
    iphone_scale_factor: Optional[float] = Field(None, gt=0)
    ipad_scale_factor: Optional[float] = Field(None, gt=0)
    font_path: Optional[Path] = None

    @field_validator("title_color", "title_shadow_color")
    @classmethod
    def _parse_color(cls, value):
        if value is None:
            return None
        return validators.parse_color(value)


def _common_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--root",
        type=Path,
        help=f"Pipeline root containing 00_input/ (default: ${ROOT_ENV} or the current directory)",
    )
    common.add_argument(
        "--concurrency",
        type=int,
        help=f"Worker threads used for image work (default: ${CONCURRENCY_ENV} or {DEFAULT_CONCURRENCY})",
    )
    common.add_argument("--locale", help="Process a single locale, e.g. en or fr")
    common.add_argument("--device", choices=DEVICE_TYPES, help="Device type to process")
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return common


def _add_combine_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--background", type=Path, help="Background image (default: 00_input/background/bg.png)")
    parser.add_argument("--spacing", type=int, help="Spacing between images in px (default: 50)")
    parser.add_argument("--titles", help="Comma-separated titles overriding the translations, e.g. 'Login,Home,Profile,Settings'")
    parser.add_argument("--title-font-size", type=int, help="Title font size in px (default: 130)")
    parser.add_argument("--title-color", help="Title color (default: #ffffff)")
    parser.add_argument("--title-shadow-color", help="Title shadow color (default: #000000)")
    parser.add_argument("--title-shadow-offset", type=int, help="Title shadow offset in px (default: 1)")
    parser.add_argument("--title-spacing", type=int, help="Spacing below the titles in px (default: 100)")
    parser.add_argument(
        "--center-in-quarters",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Center each screenshot within its quarter of the canvas (default: on)",
    )
    parser.add_argument("--iphone-scale-factor", type=float, help="Scale applied to iPhone framed screenshots (default: 0.9)")
    parser.add_argument("--ipad-scale-factor", type=float, help="Scale applied to iPad framed screenshots (default: 0.86)")
    parser.add_argument("--font", type=Path, help="TrueType font used for titles")


def build_parser() -> argparse.ArgumentParser:
    common = _common_parser()
    parser = argparse.ArgumentParser(
        prog="storeshots",
        description="Frame, combine and split App Store marketing screenshots.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    frame = commands.add_parser(
        "frame",
        parents=[common],
        help="Wrap raw screenshots in device frames",
        description="Frame every PNG under 00_input/screenshots/, or a single file.",
    )
    frame.add_argument("input", type=Path, nargs="?", help="Frame only this screenshot")
    frame.add_argument("output", type=Path, nargs="?", help="Output path for a single screenshot")
    frame.add_argument("--edge-margin", type=int, help="Gap between device edge and screen in px (default: 30)")
    frame.add_argument("--image-border-radius", type=int, help="Screenshot corner radius in px (default: 110)")
    frame.add_argument("--frame-border-radius", type=int, help="Device corner radius in px (default: 140)")

    combine = commands.add_parser(
        "combine",
        parents=[common],
        help="Combine framed screenshots with titles over a background",
        description="Combine 4 framed screenshots side by side over a background image.",
    )
    _add_combine_options(combine)

    commands.add_parser(
        "split",
        parents=[common],
        help="Split combined screenshots into store-sized slots",
        description="Split combined screenshots into individual device-sized images.",
    )

    run = commands.add_parser(
        "run",
        parents=[common],
        help="Run frame, combine and split in order",
        description="Run the full pipeline for one device type.",
    )
    _add_combine_options(run)
    return parser


def resolve_workspace(root: Optional[Path]) -> Workspace:
    if root is None:
        root = Path(os.environ.get(ROOT_ENV, "."))
    return Workspace(root=root.expanduser().resolve())


def resolve_concurrency(value: Optional[int]) -> int:
    if value is not None:
        if value <= 0:
            raise ConfigurationError("--concurrency must be greater than zero")
        return value
    return validators.parse_optional_int(os.environ.get(CONCURRENCY_ENV), CONCURRENCY_ENV) or DEFAULT_CONCURRENCY


def build_frame_settings(args: argparse.Namespace) -> FrameSettings:
    """Validate frame geometry overrides and merge them onto the defaults."""

    try:
        request = FrameRequest(
            edge_margin=getattr(args, "edge_margin", None),
            image_border_radius=getattr(args, "image_border_radius", None),
            frame_border_radius=getattr(args, "frame_border_radius", None),
        )
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
    return merge_frame_settings(request.model_dump(exclude_none=True))


def build_combine_settings(args: argparse.Namespace, workspace: Workspace) -> CombineSettings:
    """Validate style overrides and merge them onto the default combine settings."""

    try:
        request = CombineRequest(
            spacing=args.spacing,
            title_font_size=args.title_font_size,
            title_color=args.title_color,
            title_shadow_color=args.title_shadow_color,
            title_shadow_offset=args.title_shadow_offset,
            title_spacing=args.title_spacing,
            center_in_quarters=args.center_in_quarters,
            iphone_scale_factor=args.iphone_scale_factor,
            ipad_scale_factor=args.ipad_scale_factor,
            font_path=args.font,
        )
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc

    base = CombineSettings(
        background_path=args.background or workspace.background_path,
        framed_screenshots_path=workspace.framed_dir,
        device_type=args.device or "iphone",
        locale=args.locale or "en",
    )
    return dataclasses.replace(base, **request.model_dump(exclude_none=True))


def _report(summary: BatchSummary, label: str) -> int:
    logger.info("Successfully processed: %s %s", summary.processed, label)
    if summary.failed:
        logger.error("Failed to process: %s %s", summary.failed, label)
        return 1
    return 0


async def _frame(args: argparse.Namespace, workspace: Workspace, service: ImageService) -> int:
    settings = build_frame_settings(args)

    if getattr(args, "input", None):
        output = getattr(args, "output", None) or file_tools.framed_output_path(args.input, workspace.screenshots_dir, workspace.framed_dir)
        try:
            await frame_screenshot(service, args.input, output, args.device or "iphone", settings)
        except Exception as exc:
            logger.error("Failed to frame screenshot: %s", exc)
            return 1
        return 0

    jobs = discover_frame_jobs(workspace, args.locale, args.device)
    if not jobs:
        logger.info("No PNG files found in %s", workspace.screenshots_dir)
        return 0
    counts = Counter(job.locale or "unknown" for job in jobs)
    logger.info("Found %s PNG file(s) across %s locale(s)", len(jobs), len(counts))
    for locale, count in sorted(counts.items()):
        logger.info("  - %s: %s file(s)", locale, count)

    return _report(await frame_batch(service, jobs, settings), "file(s)")


async def _combine(args: argparse.Namespace, workspace: Workspace, service: ImageService) -> int:
    settings = build_combine_settings(args, workspace)
    titles = validators.parse_titles(args.titles) if args.titles else None
    locales = [args.locale] if args.locale else available_locales(workspace.translations_dir)
    logger.info("Combining %s for locale(s): %s", settings.device_type, ", ".join(locales))

    if args.locale:
        try:
            await combine_screenshots(service, settings, workspace.combined_dir, titles, workspace.translations_dir)
        except Exception as exc:
            logger.error("Failed to combine screenshots: %s", exc)
            return 1
        return 0

    summary = await combine_locales(
        service, locales, settings, workspace.combined_dir, workspace.translations_dir, titles
    )
    return _report(summary, "locale(s)")


async def _split(args: argparse.Namespace, workspace: Workspace, service: ImageService) -> int:
    all_locales = available_locales(workspace.translations_dir)
    if args.locale and args.locale not in all_locales:
        logger.error("Locale '%s' not found. Available locales: %s", args.locale, ", ".join(all_locales))
        return 1
    locales = [args.locale] if args.locale else all_locales
    device_type = args.device or "iphone"
    logger.info("Splitting %s for locale(s): %s", device_type, ", ".join(locales))

    summary = await split_locales(service, locales, workspace.combined_dir, workspace.output_dir, device_type)
    return _report(summary, "locale(s)")


async def _run(args: argparse.Namespace, workspace: Workspace, service: ImageService) -> int:
    args.device = args.device or "iphone"
    for stage in (_frame, _combine, _split):
        code = await stage(args, workspace, service)
        if code != 0:
            logger.error("Stopping pipeline after %s failed", stage.__name__.lstrip("_"))
            return code
    return 0


COMMANDS = {"frame": _frame, "combine": _combine, "split": _split, "run": _run}


async def _dispatch(args: argparse.Namespace, workspace: Workspace, concurrency: int) -> int:
    with ImageService(concurrency=concurrency) as service:
        return await COMMANDS[args.command](args, workspace, service)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    # Configuration errors surface before any work starts.
    try:
        workspace = resolve_workspace(args.root)
        concurrency = resolve_concurrency(args.concurrency)
        build_frame_settings(args)
        if args.command in ("combine", "run"):
            build_combine_settings(args, workspace)
            if args.titles:
                validators.parse_titles(args.titles)
    except ConfigurationError as exc:
        parser.error(str(exc))

    return asyncio.run(_dispatch(args, workspace, concurrency))


if __name__ == "__main__":
    sys.exit(main())
