"""Grapheme width model and escape sequence handling.

Terminal cells are measured per extended grapheme cluster: combining and
format characters take no column, East Asian Wide/Fullwidth characters
and emoji take two, everything else one.  Escape sequences embedded in
the text are recognized so they can be carried through without being
counted.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

RESET = "\x1b[m"

# SGR: ESC[ <params> m
_SGR_RE = re.compile(r"\x1b\[[0-9;:]*m")
# Any SGR that resets all attributes: ESC[m, ESC[0m, ESC[00m
_RESET_RE = re.compile(r"\x1b\[0*m")

_STRIP_RE = re.compile(
    r"\x1b\[[0-9;:?<=>]*[ -/]*[@-~]"          # CSI
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"     # OSC
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"      # APC
)


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def segment(text: str) -> list[str]:
    """Split *text* into extended grapheme clusters."""
    return list(grapheme.graphemes(text))


def grapheme_width(g: str) -> int:
    """Return the terminal display width (0, 1 or 2) of one grapheme cluster."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp == 0xFE0F:  # VS16 emoji presentation
            return 2
        if cp == 0x200D:  # ZWJ sequence
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # regional indicators
            return 2

    first = g[0]
    cat = unicodedata.category(first)
    if cat.startswith("M") or cat == "Cf":
        return 0
    if ord(first) >= 0x1F000:
        return 2
    return min(max(_wcwidth.wcwidth(first), 0), 2)


def visible_width(text: str) -> int:
    """Return the number of terminal columns *text* occupies, ignoring escapes."""
    if not text:
        return 0
    stripped = _STRIP_RE.sub("", text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)
    return sum(grapheme_width(g) for g in grapheme.graphemes(stripped))


def strip_escapes(text: str) -> str:
    return _STRIP_RE.sub("", text)


# ---------------------------------------------------------------------------
# Escape sequences
# ---------------------------------------------------------------------------


def extract_escape(text: str, pos: int) -> str | None:
    """Return the escape sequence starting at *pos* in *text*, or ``None``.

    Recognizes CSI (``ESC[`` params intermediates final), OSC and APC
    (terminated by BEL or ST).  An incomplete sequence is not an escape.
    """
    if pos + 1 >= len(text) or text[pos] != "\x1b":
        return None

    kind = text[pos + 1]

    if kind == "[":
        i = pos + 2
        while i < len(text) and "\x30" <= text[i] <= "\x3f":
            i += 1
        while i < len(text) and "\x20" <= text[i] <= "\x2f":
            i += 1
        if i < len(text) and "\x40" <= text[i] <= "\x7e":
            return text[pos : i + 1]
        return None

    if kind in "]_":
        i = pos + 2
        while i < len(text):
            ch = text[i]
            if ch == "\x07":
                return text[pos : i + 1]
            if ch == "\x1b":
                if i + 1 < len(text) and text[i + 1] == "\\":
                    return text[pos : i + 2]
                return None
            i += 1
        return None

    return None


def is_sgr(code: str) -> bool:
    """Return ``True`` if *code* selects graphic rendition (colors, effects)."""
    return _SGR_RE.fullmatch(code) is not None


def is_reset(code: str) -> bool:
    return _RESET_RE.fullmatch(code) is not None


def split_resets(text: str) -> list[str]:
    """Split *text* around reset sequences, keeping the resets as items."""
    parts: list[str] = []
    last = 0
    for m in _RESET_RE.finditer(text):
        parts.append(text[last : m.start()])
        parts.append(m.group(0))
        last = m.end()
    parts.append(text[last:])
    return parts


# ---------------------------------------------------------------------------
# Tab expansion
# ---------------------------------------------------------------------------


def expand_tabs(text: str, tabstop: int = 8) -> str:
    """Replace tabs with spaces up to the next multiple of *tabstop* columns.

    Columns are display columns, so wide characters advance by two and
    escape sequences do not advance at all.
    """
    if "\t" not in text or tabstop <= 0:
        return text

    out: list[str] = []
    col = 0
    i = 0
    while i < len(text):
        code = extract_escape(text, i)
        if code is not None:
            out.append(code)
            i += len(code)
            continue
        j = i
        while j < len(text) and text[j] not in "\t\x1b":
            j += 1
        if j > i:
            run = text[i:j]
            out.append(run)
            col += visible_width(run)
            i = j
            continue
        if text[i] == "\t":
            pad = tabstop - col % tabstop
            out.append(" " * pad)
            col += pad
        else:
            # Stray ESC that does not start a known sequence.
            out.append(text[i])
        i += 1
    return "".join(out)
