"""Fold one styled text line into a fixed-width terminal cell.

``fold`` returns the part that fits (``rendered``) and what is left
(``remainder``).  Calling it again on the remainder produces the
continuation rows.  Color state survives the cut: an open SGR run is
closed with a reset in ``rendered`` and re-opened at the start of
``remainder``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pi.sdif.types import RenderCell
from pi.sdif.width import RESET, extract_escape, grapheme_width, is_reset, is_sgr, segment


_Kind = Literal["control", "style", "char"]


@dataclass
class _Token:
    kind: _Kind
    text: str
    width: int = 0

    @property
    def is_word(self) -> bool:
        return self.kind == "char" and self.width == 1 and self.text[0].isalnum()


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    i = 0
    while i < len(text):
        code = extract_escape(text, i)
        if code is not None:
            kind = "style" if is_sgr(code) else "control"
            tokens.append(_Token(kind, code))
            i += len(code)
            continue

        j = text.find("\x1b", i + 1)
        if j == -1:
            j = len(text)
        for g in segment(text[i:j]):
            tokens.append(_Token("char", g, grapheme_width(g)))
        i = j
    return tokens


def _greedy_cut(tokens: list[_Token], width: int) -> int:
    room = width
    cut = 0
    for idx, tok in enumerate(tokens):
        if tok.kind == "char":
            if tok.width > room:
                break
            room -= tok.width
        cut = idx + 1

    # A wide cluster in a one-column cell: take it anyway so folding
    # always makes progress.
    if not any(t.kind == "char" for t in tokens[:cut]):
        forced = False
        while cut < len(tokens):
            if tokens[cut].kind == "char":
                if forced:
                    break
                forced = True
            cut += 1
    return cut


def _word_cut(tokens: list[_Token], cut: int, width: int) -> int:
    """Move *cut* back to the start of a word split by the greedy cut."""
    following = [t for t in tokens[cut:] if t.kind == "char"]
    if not following or not following[0].is_word:
        return cut

    start = None
    for idx in range(cut - 1, -1, -1):
        tok = tokens[idx]
        if tok.kind != "char":
            continue
        if not tok.is_word:
            break
        start = idx
    if start is None:
        return cut
    if not any(t.kind == "char" for t in tokens[:start]):
        return cut

    tail = sum(t.width for t in tokens[start:cut] if t.kind == "char")
    head = 0
    for tok in following:
        if not tok.is_word:
            break
        head += tok.width
    if tail + head > width:
        return cut
    return start


def fold(text: str, width: int, onword: bool = False, pad: bool = False) -> RenderCell:
    """Cut *text* so the first part occupies at most *width* columns.

    A grapheme cluster is never split.  With *onword*, a word broken by
    the cut moves to the remainder when it then fits the next cell.  With
    *pad*, the rendered part is filled with spaces to exactly *width*.
    """
    if width <= 0:
        raise ValueError(f"fold width must be positive, got {width}")

    tokens = _tokenize(text)
    cut = _greedy_cut(tokens, width)
    if onword and cut < len(tokens):
        cut = _word_cut(tokens, cut, width)

    stack: list[str] = []
    for tok in tokens[:cut]:
        if tok.kind == "style":
            if is_reset(tok.text):
                stack.clear()
            else:
                stack.append(tok.text)

    rendered = "".join(t.text for t in tokens[:cut])
    remainder = "".join(t.text for t in tokens[cut:])
    if stack:
        rendered += RESET
        if remainder:
            remainder = "".join(stack) + remainder

    visible = sum(t.width for t in tokens[:cut] if t.kind == "char")
    if pad and visible < width:
        rendered += " " * (width - visible)
        visible = width

    return RenderCell(rendered=rendered, remainder=remainder, width=visible)
