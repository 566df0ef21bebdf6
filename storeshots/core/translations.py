"""Locale discovery and per-slot title loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from . import SLOT_COUNT

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"


class SlotTitles(BaseModel):
    """Schema of ``<locale>.json``: one optional title per slot, extra keys ignored."""

    model_config = ConfigDict(extra="ignore")

    slot_1: Optional[str] = None
    slot_2: Optional[str] = None
    slot_3: Optional[str] = None
    slot_4: Optional[str] = None

    @field_validator("slot_1", "slot_2", "slot_3", "slot_4", mode="before")
    @classmethod
    def _normalize_slot(cls, value):
        # A bad slot falls back on its own; numbers are kept as their text.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or value.strip() == "":
            return None
        return value

    def titles(self) -> list[str]:
        values = (self.slot_1, self.slot_2, self.slot_3, self.slot_4)
        return [value if value else placeholder_title(slot) for slot, value in enumerate(values, start=1)]


def placeholder_title(slot: int) -> str:
    return f"Screenshot {slot}"


def default_titles() -> list[str]:
    return [placeholder_title(slot) for slot in range(1, SLOT_COUNT + 1)]


def available_locales(translations_dir: Path) -> list[str]:
    """Return the sorted locale codes that have a translation file."""

    try:
        entries = list(translations_dir.iterdir())
    except OSError:
        logger.warning("Could not read translations directory %s", translations_dir)
        logger.warning("Falling back to default locale: %s", DEFAULT_LOCALE)
        return [DEFAULT_LOCALE]
    return sorted(entry.stem for entry in entries if entry.is_file() and entry.suffix == ".json")


def load_titles(translations_dir: Path, locale: str) -> list[str]:
    """Load the four slot titles for a locale, falling back to placeholders."""

    path = translations_dir / f"{locale}.json"
    try:
        payload = path.read_text(encoding="utf-8")
        return SlotTitles.model_validate_json(payload).titles()
    except (OSError, UnicodeDecodeError, ValidationError) as exc:
        logger.warning("Could not load translations from %s, using defaults: %s", path, exc)
        return default_titles()


def resolve_titles(titles: Optional[list[str]]) -> list[str]:
    """Pad or fill an explicit title list so every slot has text."""

    given = list(titles or [])
    return [
        given[index] if index < len(given) and given[index] else placeholder_title(index + 1)
        for index in range(SLOT_COUNT)
    ]
