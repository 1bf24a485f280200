"""Field colors and the SGR sequences that draw them.

A color spec is written ``FG/BG``.  Each half may hold one color and any
number of effect letters:

* ``KRGYBMCW``: the eight standard colors
* ``rgb``: three digits ``0``-``5``, an index into the 216-color cube
* ``#RRGGBB``: 24-bit color, quantized into the cube
* ``D`` bold, ``U`` underline, ``F`` blink, ``S`` reverse
* ``E`` expand: pad the cell so the background covers its full width

Examples: ``"K/454"`` (black on light green), ``"555/010E"``,
``"#ff8000"``, ``"RD"``.
"""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass
from typing import Union

from pi.sdif.errors import ColorSpecError
from pi.sdif.session import RenderSession
from pi.sdif.types import FIELD_NAMES, FieldName
from pi.sdif.width import RESET, is_reset, split_resets

# A standard color index 0-7, or an (r, g, b) cube coordinate with 0-5 per channel.
Color = Union[int, tuple[int, int, int]]

_STANDARD = "KRGYBMCW"
_EFFECTS = {"D": 1, "U": 4, "F": 5, "S": 7}

_TOKEN_RE = re.compile(r"#[0-9a-fA-F]{6}|[0-5]{3}|[KRGYBMCW]|[DUFSE]")

DEFAULT_COLORMAP: dict[FieldName, str | None] = {
    "OCOMMAND": "555/010E",
    "NCOMMAND": "555/010E",
    "OFILE": "551/010DE",
    "NFILE": "551/010DE",
    "OMARK": "010/444",
    "NMARK": "010/444",
    "UMARK": "",
    "OLINE": "220",
    "NLINE": "220",
    "ULINE": None,
    "OTEXT": "K/454",
    "NTEXT": "K/454",
    "UTEXT": "",
}

# Unchanged-line fields borrow the old side's color when left unset.
FALLBACK: dict[FieldName, FieldName] = {
    "UMARK": "OMARK",
    "ULINE": "OLINE",
    "UTEXT": "OTEXT",
}


@dataclass(frozen=True)
class ColorSpec:
    fg: Color | None = None
    bg: Color | None = None
    effects: tuple[int, ...] = ()
    expand: bool = False


def cube_index(r: int, g: int, b: int) -> int:
    """Return the 256-color palette index of a 216-cube coordinate."""
    for v in (r, g, b):
        if not 0 <= v <= 5:
            raise ColorSpecError(f"cube coordinate out of range: {(r, g, b)}")
    return 16 + 36 * r + 6 * g + b


def quantize(value: int) -> int:
    """Map a 0-255 channel value linearly onto the 0-5 cube range."""
    return round(value * 5 / 255)


def parse_hex(text: str) -> tuple[int, int, int]:
    text = text.lstrip("#")
    return (
        quantize(int(text[0:2], 16)),
        quantize(int(text[2:4], 16)),
        quantize(int(text[4:6], 16)),
    )


def _parse_half(text: str, spec: str) -> tuple[Color | None, list[int], bool]:
    color: Color | None = None
    effects: list[int] = []
    expand = False
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ColorSpecError(f"invalid color spec {spec!r} at {text[pos:]!r}")
        token = m.group(0)
        pos = m.end()
        if len(token) >= 6:
            color = parse_hex(token)
        elif len(token) == 3:
            color = (int(token[0]), int(token[1]), int(token[2]))
        elif token in _STANDARD:
            color = _STANDARD.index(token)
        elif token == "E":
            expand = True
        else:
            effects.append(_EFFECTS[token])
    return color, effects, expand


def parse_color_spec(spec: str) -> ColorSpec:
    """Parse a ``FG/BG`` color spec string."""
    if spec.count("/") > 1:
        raise ColorSpecError(f"invalid color spec {spec!r}: more than one '/'")
    fg_text, _, bg_text = spec.partition("/")
    fg, fg_effects, fg_expand = _parse_half(fg_text, spec)
    bg, bg_effects, bg_expand = _parse_half(bg_text, spec)
    effects = tuple(sorted(set(fg_effects + bg_effects)))
    return ColorSpec(fg=fg, bg=bg, effects=effects, expand=fg_expand or bg_expand)


def _downsample(rgb: tuple[int, int, int]) -> int:
    r, g, b = rgb
    return (r >= 3) + 2 * (g >= 3) + 4 * (b >= 3)


def _color_params(color: Color, base: int, color256: bool) -> str:
    if isinstance(color, int):
        return str(base + color)
    if color256:
        return f"{base + 8};5;{cube_index(*color)}"
    return str(base + _downsample(color))


def compile_spec(spec: ColorSpec, color256: bool = True) -> tuple[str, str]:
    """Compile *spec* into ``(start, end)`` SGR sequences; empty when it sets nothing."""
    params = [str(e) for e in spec.effects]
    if spec.fg is not None:
        params.append(_color_params(spec.fg, 30, color256))
    if spec.bg is not None:
        params.append(_color_params(spec.bg, 40, color256))
    if not params:
        return ("", "")
    return (f"\x1b[{';'.join(params)}m", RESET)


class Colorizer:
    """Compile and apply field colors for one run.

    *overrides* is an ordered list of ``(pattern, spec)`` pairs matched
    against field names with shell globs; a later match takes precedence
    over an earlier one and over *colormap*.
    """

    def __init__(
        self,
        session: RenderSession,
        colormap: dict[FieldName, str | None] | None = None,
        overrides: list[tuple[str, str]] | None = None,
        enabled: bool = True,
        color256: bool = True,
    ) -> None:
        self._session = session
        self._colormap = dict(DEFAULT_COLORMAP if colormap is None else colormap)
        self._overrides = list(overrides or [])
        self._enabled = enabled
        self._color256 = color256
        self._specs: dict[FieldName, ColorSpec | None] = {}

        for pattern, spec in self._overrides:
            if not any(fnmatch.fnmatchcase(name, pattern) for name in FIELD_NAMES):
                raise ColorSpecError(f"color pattern {pattern!r} matches no field")
            parse_color_spec(spec)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _raw(self, field: FieldName) -> str | None:
        for pattern, spec in reversed(self._overrides):
            if fnmatch.fnmatchcase(field, pattern):
                return spec
        return self._colormap.get(field)

    def spec(self, field: FieldName) -> ColorSpec | None:
        """Return the parsed spec of *field*, following unchanged-field fallbacks."""
        if field not in self._specs:
            raw = self._raw(field)
            if raw is None and field in FALLBACK:
                raw = self._raw(FALLBACK[field])
            self._specs[field] = parse_color_spec(raw) if raw else None
        return self._specs[field]

    def sequences(self, field: FieldName) -> tuple[str, str]:
        cache = self._session.colors
        if field not in cache:
            spec = self.spec(field) if self._enabled else None
            cache[field] = compile_spec(spec, self._color256) if spec else ("", "")
        return cache[field]

    def expand(self, field: FieldName) -> bool:
        if not self._enabled:
            return False
        spec = self.spec(field)
        return spec is not None and spec.expand

    def apply(self, field: FieldName, text: str) -> str:
        """Wrap every non-empty run of *text* between embedded resets in *field*'s color."""
        start, end = self.sequences(field)
        if not start or not text:
            return text
        out: list[str] = []
        for line in text.split("\n"):
            parts = []
            for part in split_resets(line):
                if part and not is_reset(part):
                    part = start + part + end
                parts.append(part)
            out.append("".join(parts))
        return "\n".join(out)
