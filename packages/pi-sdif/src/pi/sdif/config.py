"""Configuration for pi-sdif. Stored at ~/.pi/sdif.json."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from pi.sdif.types import MarkPosition

MARK_PRESETS: dict[str, tuple[MarkPosition, MarkPosition]] = {
    "left": ("left", "left"),
    "right": ("right", "right"),
    "center": ("right", "left"),
    "side": ("left", "right"),
    "none": ("none", "none"),
}

DEFAULT_WIDTH = 80


@dataclass
class Config:
    width: int | None = None
    number: bool = False
    digit: int = 4
    truncate: bool = False
    onword: bool = False
    mark: str = "center"
    color: bool = True
    color256: bool = True
    # Ordered (field glob, color spec) overrides; later entries win.
    colormap: list[tuple[str, str]] = field(default_factory=list)
    view: bool = False
    tabstop: int = 8
    hunks_only: bool = False
    diff: str = "diff"
    diff_options: list[str] = field(default_factory=list)
    old_mark: str = "-"
    new_mark: str = "+"
    same_mark: str = " "
    continue_mark: str = "."

    def mark_positions(self) -> tuple[MarkPosition, MarkPosition]:
        try:
            return MARK_PRESETS[self.mark]
        except KeyError:
            raise ValueError(
                f"unknown mark position {self.mark!r} "
                f"(expected one of {', '.join(MARK_PRESETS)})"
            ) from None

    def resolved_width(self) -> int:
        """Return the configured width, else the terminal width."""
        if self.width is not None:
            return self.width
        return terminal_width()


def terminal_width() -> int:
    try:
        return os.get_terminal_size(sys.stdout.fileno()).columns
    except (OSError, ValueError):
        pass
    try:
        return int(os.environ["COLUMNS"])
    except (KeyError, ValueError):
        return DEFAULT_WIDTH


def config_from_dict(data: dict) -> Config:
    """Deserialize a Config from a JSON-compatible dict."""
    colormap = data.get("colormap") or []
    if isinstance(colormap, dict):
        colormap = list(colormap.items())
    marks = data.get("marks", {})
    defaults = Config()
    return Config(
        width=data.get("width"),
        number=data.get("number", defaults.number),
        digit=data.get("digit", defaults.digit),
        truncate=data.get("truncate", defaults.truncate),
        onword=data.get("onword", defaults.onword),
        mark=data.get("mark", defaults.mark),
        color=data.get("color", defaults.color),
        color256=data.get("color256", defaults.color256),
        colormap=[(str(k), str(v)) for k, v in colormap],
        view=data.get("view", defaults.view),
        tabstop=data.get("tabstop", defaults.tabstop),
        hunks_only=data.get("hunksOnly", defaults.hunks_only),
        diff=data.get("diff", defaults.diff),
        diff_options=list(data.get("diffOptions", [])),
        old_mark=marks.get("old", defaults.old_mark),
        new_mark=marks.get("new", defaults.new_mark),
        same_mark=marks.get("same", defaults.same_mark),
        continue_mark=marks.get("continue", defaults.continue_mark),
    )


def _get_config_path() -> Path:
    config_dir = Path(os.environ.get("PI_CONFIG_DIR", Path.home() / ".pi"))
    return config_dir / "sdif.json"


def load_config(path: Path | None = None) -> Config:
    config_path = path or _get_config_path()
    if not config_path.exists():
        return Config()
    try:
        data = json.loads(config_path.read_text())
        return config_from_dict(data)
    except Exception as e:
        print(f"Error reading config {config_path}: {e}", file=sys.stderr)
        return Config()


def merge_overrides(config: Config, **overrides: Any) -> Config:
    """Return *config* with every non-``None`` override applied.

    ``colormap`` and ``diff_options`` overrides are appended rather than
    replacing the configured entries.
    """
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "colormap":
            changes[key] = [*config.colormap, *value]
        elif key == "diff_options":
            changes[key] = [*config.diff_options, *value]
        else:
            changes[key] = value
    return replace(config, **changes)
