"""Filesystem helpers."""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

IMAGE_SUFFIX = ".png"
_SLOT_PATTERN = re.compile(r"^slot_(\d+)$")


def ensure_directory(path: Path) -> Path:
    """Create a directory if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)
    return path


def find_png_files(root: Path, skip_dirs: frozenset[str] = frozenset({"output"})) -> list[Path]:
    """Recursively collect PNG files below root, skipping directories by name."""

    found: list[Path] = []

    def _scan(directory: Path) -> None:
        try:
            entries = sorted(directory.iterdir())
        except OSError as exc:
            logger.warning("Could not read directory %s: %s", directory, exc)
            return
        for entry in entries:
            if entry.is_dir():
                if entry.name not in skip_dirs:
                    _scan(entry)
            elif entry.is_file() and entry.suffix.lower() == IMAGE_SUFFIX:
                found.append(entry)

    _scan(root)
    return found


def slot_number(name: str) -> int | None:
    """Return the number of a ``slot_<n>`` directory name, else None."""

    match = _SLOT_PATTERN.match(name)
    return int(match.group(1)) if match else None


def framed_output_path(input_path: Path, screenshots_root: Path, framed_root: Path) -> Path:
    """Mirror the input's device/locale/slot directory under the framed tree.

    The leaf file is always ``framed.png``. Inputs outside the screenshots
    root keep only their parent directory name.
    """

    try:
        relative_dir = input_path.parent.resolve().relative_to(screenshots_root.resolve())
    except ValueError:
        relative_dir = Path(input_path.parent.name)
    return framed_root / relative_dir / f"framed{IMAGE_SUFFIX}"


def combined_output_path(combined_root: Path, device_type: str, locale: str) -> Path:
    return combined_root / device_type / locale / f"combined{IMAGE_SUFFIX}"


def slot_output_path(output_root: Path, output_label: str, locale: str, slot: int) -> Path:
    return output_root / output_label / locale / f"slot_{slot}{IMAGE_SUFFIX}"
