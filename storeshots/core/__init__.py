"""Core data model for the screenshot pipeline."""

__all__ = [
    "DEVICE_TYPES",
    "SLOT_COUNT",
    "DeviceType",
    "HomeIndicator",
    "DropShadow",
    "ScreenshotOffset",
    "FrameSettings",
    "FrameJob",
    "CombineSettings",
    "DeviceConfig",
    "CanvasLayout",
    "FramedImage",
    "TitleImage",
    "ItemResult",
    "BatchSummary",
    "Workspace",
]

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

from PIL import Image

DeviceType = Literal["iphone", "ipad"]
DEVICE_TYPES: tuple[str, ...] = ("iphone", "ipad")
SLOT_COUNT = 4


@dataclass(frozen=True)
class HomeIndicator:
    """Pill drawn near the bottom edge of phone-class frames."""

    width: int = 200
    height: int = 6
    border_radius: int = 3
    opacity: float = 0.8
    bottom_offset: int = 34


@dataclass(frozen=True)
class DropShadow:
    dx: int = 0
    dy: int = 4
    std_deviation: float = 8
    opacity: float = 0.3


@dataclass(frozen=True)
class ScreenshotOffset:
    top: int = 40
    left: int = 40


@dataclass(frozen=True)
class FrameSettings:
    """Geometry for one framing operation.

    ``edge_margin`` is the uniform gap between the device edge and the screen
    cutout. When it is ``None`` the screenshot is placed at
    ``screenshot_offset`` and the canvas grows by twice the left offset.
    """

    image_border_radius: int = 110
    frame_border_radius: int = 140
    edge_margin: Optional[int] = 30
    screenshot_offset: ScreenshotOffset = field(default_factory=ScreenshotOffset)
    home_indicator: HomeIndicator = field(default_factory=HomeIndicator)
    shadow: DropShadow = field(default_factory=DropShadow)

    @property
    def margin(self) -> int:
        if self.edge_margin is not None:
            return self.edge_margin
        return self.screenshot_offset.left

    @property
    def screen_origin(self) -> tuple[int, int]:
        """Top-left corner of the screenshot inside the frame canvas as (left, top)."""

        if self.edge_margin is not None:
            return self.edge_margin, self.edge_margin
        return self.screenshot_offset.left, self.screenshot_offset.top

    def canvas_size(self, screenshot_width: int, screenshot_height: int) -> tuple[int, int]:
        return screenshot_width + 2 * self.margin, screenshot_height + 2 * self.margin


@dataclass(frozen=True)
class FrameJob:
    """One raw screenshot scheduled for framing."""

    input_path: Path
    output_path: Path
    device_type: DeviceType = "iphone"
    locale: Optional[str] = None


@dataclass(frozen=True)
class CombineSettings:
    """User-configurable settings used for one combined composite."""

    background_path: Path
    framed_screenshots_path: Path
    spacing: int = 50
    device_type: DeviceType = "iphone"
    locale: str = "en"
    title_font_size: int = 130
    title_color: str = "#ffffff"
    title_shadow_color: str = "#000000"
    title_shadow_offset: int = 1
    title_spacing: int = 100
    center_in_quarters: bool = True
    iphone_scale_factor: float = 0.9
    ipad_scale_factor: float = 0.86
    font_path: Optional[Path] = None

    @property
    def scale_factor(self) -> float:
        return self.ipad_scale_factor if self.device_type == "ipad" else self.iphone_scale_factor

    @property
    def title_lines(self) -> int:
        # iPad titles are constrained to a single line
        return 1 if self.device_type == "ipad" else 2


@dataclass(frozen=True)
class DeviceConfig:
    """Target resolution and output folder label for one store listing size."""

    name: str
    device_type: DeviceType
    width: int
    height: int
    output_label: str


@dataclass(frozen=True)
class CanvasLayout:
    """Derived geometry shared by every placement in one combine run."""

    canvas_width: int
    canvas_height: int
    image_width: int
    image_height: int
    title_band_height: int
    quarter_width: float


@dataclass
class FramedImage:
    """A framed screenshot after scaling, with its pre-scale dimensions."""

    image: Image.Image
    original_width: int
    original_height: int

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass
class TitleImage:
    """Rendered title layer and the height used to center it in the title band."""

    image: Image.Image
    height: int
    lines: tuple[str, ...]


@dataclass
class ItemResult:
    item: str
    success: bool
    error: Optional[BaseException] = None


@dataclass
class BatchSummary:
    """Aggregated per-item outcomes of a batch run."""

    results: list[ItemResult] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @property
    def ok(self) -> bool:
        return self.failed == 0


@dataclass(frozen=True)
class Workspace:
    """On-disk pipeline tree rooted at a single directory."""

    root: Path

    @property
    def screenshots_dir(self) -> Path:
        return self.root / "00_input" / "screenshots"

    @property
    def translations_dir(self) -> Path:
        return self.root / "00_input" / "translations"

    @property
    def background_path(self) -> Path:
        return self.root / "00_input" / "background" / "bg.png"

    @property
    def framed_dir(self) -> Path:
        return self.root / "01_input_framed" / "framed_screenshots"

    @property
    def combined_dir(self) -> Path:
        return self.root / "02_input_combined" / "combined_screenshots"

    @property
    def output_dir(self) -> Path:
        return self.root / "output"
