"""Validation helpers for user inputs."""

from __future__ import annotations

from typing import Optional

from PIL import ImageColor

from ..core import DEVICE_TYPES, SLOT_COUNT
from ..core.errors import ConfigurationError


def validate_device_type(value: str) -> str:
    """Ensure the device type is one of the supported classes."""

    if value not in DEVICE_TYPES:
        raise ConfigurationError(
            f"Invalid device type: {value}. Must be one of: {', '.join(DEVICE_TYPES)}"
        )
    return value


def parse_optional_int(value: str | None, field: str) -> Optional[int]:
    """Parse a positive integer from a string value, if provided."""

    if value is None or value == "":
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{field} must be an integer") from exc
    if parsed <= 0:
        raise ConfigurationError(f"{field} must be greater than zero")
    return parsed


def parse_color(value: str) -> str:
    """Accept any color string Pillow understands ('#fff', '#ffffff', 'white', 'rgb(...)')."""

    text = value.strip()
    try:
        ImageColor.getrgb(text)
    except ValueError as exc:
        raise ConfigurationError(f"Unrecognized color: {value}") from exc
    return text


def parse_titles(value: str) -> list[str]:
    """Split a comma-separated title override into at most one entry per slot."""

    titles = [part.strip() for part in value.split(",")]
    if len(titles) > SLOT_COUNT:
        raise ConfigurationError(f"At most {SLOT_COUNT} titles can be given, got {len(titles)}")
    return titles
