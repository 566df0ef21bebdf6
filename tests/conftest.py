from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from storeshots.core import Workspace


def write_png(path: Path, size: tuple[int, int], color=(200, 40, 40, 255)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, color).save(path, format="PNG")
    return path


@pytest.fixture
def make_png() -> Callable[..., Path]:
    return write_png


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    ws = Workspace(root=tmp_path)
    ws.translations_dir.mkdir(parents=True)
    (ws.translations_dir / "en.json").write_text(
        json.dumps({"slot_1": "Login", "slot_2": "Home", "slot_3": "Profile", "slot_4": "Settings"}),
        encoding="utf-8",
    )
    return ws


@pytest.fixture
def framed_slots(workspace: Workspace) -> Callable[..., list[Path]]:
    """Write ``count`` solid framed screenshots for a device and locale."""

    def _make(device_type="iphone", locale="en", count=4, size=(100, 200)) -> list[Path]:
        colors = [(255, 0, 0, 255), (0, 255, 0, 255), (0, 0, 255, 255), (255, 255, 0, 255), (0, 255, 255, 255)]
        return [
            write_png(workspace.framed_dir / device_type / locale / f"slot_{slot}" / "framed.png", size, colors[slot - 1])
            for slot in range(1, count + 1)
        ]

    return _make
