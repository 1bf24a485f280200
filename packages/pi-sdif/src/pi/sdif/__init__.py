"""pi-sdif: side-by-side, width-aware rendering of diff output."""

from pi.sdif.align import align
from pi.sdif.colors import ColorSpec, Colorizer, compile_spec, parse_color_spec
from pi.sdif.compose import ColumnComposer
from pi.sdif.config import Config, load_config
from pi.sdif.errors import AlignmentError, ColorSpecError, DiffSyncError, SdifError
from pi.sdif.fold import fold
from pi.sdif.parser import DiffParser, parse_context, parse_normal, parse_unified
from pi.sdif.render import SideBySide
from pi.sdif.rows import emit_rows
from pi.sdif.session import RenderSession
from pi.sdif.source import IterLineSource, LineReader, LineSource
from pi.sdif.types import Hunk, Range, RawLine, RenderCell, Row, Triple, Unparsed
from pi.sdif.width import expand_tabs, grapheme_width, visible_width

__all__ = [
    "AlignmentError",
    "ColorSpec",
    "ColorSpecError",
    "Colorizer",
    "ColumnComposer",
    "Config",
    "DiffParser",
    "DiffSyncError",
    "Hunk",
    "IterLineSource",
    "LineReader",
    "LineSource",
    "Range",
    "RawLine",
    "RenderCell",
    "RenderSession",
    "Row",
    "SdifError",
    "SideBySide",
    "Triple",
    "Unparsed",
    "align",
    "compile_spec",
    "emit_rows",
    "expand_tabs",
    "fold",
    "grapheme_width",
    "load_config",
    "parse_color_spec",
    "parse_context",
    "parse_normal",
    "parse_unified",
    "visible_width",
]
