"""Tests for pi.sdif.colors -- color specs and field colors."""

from __future__ import annotations

import pytest

from pi.sdif.colors import (
    DEFAULT_COLORMAP,
    ColorSpec,
    Colorizer,
    compile_spec,
    cube_index,
    parse_color_spec,
    parse_hex,
)
from pi.sdif.errors import ColorSpecError
from pi.sdif.session import RenderSession

RESET = "\x1b[m"


# ---------------------------------------------------------------------------
# Spec parsing
# ---------------------------------------------------------------------------


class TestCubeIndex:
    def test_corners(self) -> None:
        assert cube_index(0, 0, 0) == 16
        assert cube_index(5, 5, 5) == 231

    def test_middle(self) -> None:
        assert cube_index(4, 5, 4) == 194

    def test_out_of_range(self) -> None:
        with pytest.raises(ColorSpecError):
            cube_index(6, 0, 0)


class TestParseHex:
    """24-bit colors are quantized into the cube."""

    def test_black_and_white(self) -> None:
        assert parse_hex("000000") == (0, 0, 0)
        assert parse_hex("#ffffff") == (5, 5, 5)

    def test_rounding(self) -> None:
        assert parse_hex("#ff8000") == (5, 3, 0)

    def test_hex_maps_to_cube_corners(self) -> None:
        assert cube_index(*parse_hex("000000")) == 16
        assert cube_index(*parse_hex("ffffff")) == 231


class TestParseColorSpec:
    def test_foreground_only(self) -> None:
        assert parse_color_spec("R") == ColorSpec(fg=1)

    def test_foreground_and_background(self) -> None:
        assert parse_color_spec("K/454") == ColorSpec(fg=0, bg=(4, 5, 4))

    def test_background_only(self) -> None:
        assert parse_color_spec("/B") == ColorSpec(bg=4)

    def test_effects_and_expand(self) -> None:
        spec = parse_color_spec("551/010DE")
        assert spec.fg == (5, 5, 1)
        assert spec.bg == (0, 1, 0)
        assert spec.effects == (1,)
        assert spec.expand is True

    def test_empty_spec_sets_nothing(self) -> None:
        assert parse_color_spec("") == ColorSpec()

    def test_hex_with_hash(self) -> None:
        assert parse_color_spec("#ff8000").fg == (5, 3, 0)

    def test_cube_color_followed_by_effect_letters(self) -> None:
        spec = parse_color_spec("555DEF")
        assert spec.fg == (5, 5, 5)
        assert spec.effects == (1, 5)
        assert spec.expand is True

    def test_hex_needs_hash(self) -> None:
        assert parse_color_spec("#ff8000/#000000") == ColorSpec(fg=(5, 3, 0), bg=(0, 0, 0))
        with pytest.raises(ColorSpecError):
            parse_color_spec("ff8000")

    def test_invalid_letter(self) -> None:
        with pytest.raises(ColorSpecError):
            parse_color_spec("X")

    def test_cube_digit_out_of_range(self) -> None:
        with pytest.raises(ColorSpecError):
            parse_color_spec("600")

    def test_too_many_slashes(self) -> None:
        with pytest.raises(ColorSpecError):
            parse_color_spec("R/G/B")


class TestCompileSpec:
    """Specs compile to SGR start/end sequences."""

    def test_standard_and_cube(self) -> None:
        assert compile_spec(parse_color_spec("K/454")) == ("\x1b[30;48;5;194m", RESET)

    def test_effects_come_first(self) -> None:
        assert compile_spec(parse_color_spec("RDU")) == ("\x1b[1;4;31m", RESET)

    def test_cube_foreground(self) -> None:
        assert compile_spec(parse_color_spec("000"))[0] == "\x1b[38;5;16m"
        assert compile_spec(parse_color_spec("555"))[0] == "\x1b[38;5;231m"

    def test_empty_spec_compiles_to_nothing(self) -> None:
        assert compile_spec(ColorSpec()) == ("", "")

    def test_eight_color_downsampling(self) -> None:
        assert compile_spec(parse_color_spec("500"), color256=False)[0] == "\x1b[31m"
        assert compile_spec(parse_color_spec("/454"), color256=False)[0] == "\x1b[47m"

    def test_expand_alone_sets_nothing(self) -> None:
        assert compile_spec(parse_color_spec("E")) == ("", "")


# ---------------------------------------------------------------------------
# Colorizer
# ---------------------------------------------------------------------------


class TestColorizer:
    """Field resolution, caching and application."""

    def test_default_map_covers_every_field(self) -> None:
        assert len(DEFAULT_COLORMAP) == 13

    def test_sequences_are_cached_in_session(self) -> None:
        session = RenderSession()
        colors = Colorizer(session)
        first = colors.sequences("OTEXT")
        assert session.colors["OTEXT"] == first
        assert colors.sequences("OTEXT") == first
        assert first == ("\x1b[30;48;5;194m", RESET)

    def test_unset_unchanged_field_falls_back(self) -> None:
        colors = Colorizer(RenderSession())
        assert colors.sequences("ULINE") == colors.sequences("OLINE")
        assert colors.sequences("ULINE")[0] == "\x1b[38;5;100m"

    def test_empty_string_means_no_color(self) -> None:
        colors = Colorizer(RenderSession())
        assert colors.sequences("UTEXT") == ("", "")
        assert colors.apply("UTEXT", "plain") == "plain"

    def test_later_override_wins(self) -> None:
        colors = Colorizer(RenderSession(), overrides=[("*TEXT", "R"), ("NTEXT", "G")])
        assert colors.sequences("OTEXT")[0] == "\x1b[31m"
        assert colors.sequences("UTEXT")[0] == "\x1b[31m"
        assert colors.sequences("NTEXT")[0] == "\x1b[32m"

    def test_override_pattern_must_match_a_field(self) -> None:
        with pytest.raises(ColorSpecError):
            Colorizer(RenderSession(), overrides=[("NOPE", "R")])

    def test_override_spec_is_validated(self) -> None:
        with pytest.raises(ColorSpecError):
            Colorizer(RenderSession(), overrides=[("OTEXT", "Q")])

    def test_expand_flag(self) -> None:
        colors = Colorizer(RenderSession())
        assert colors.expand("OCOMMAND") is True
        assert colors.expand("OTEXT") is False

    def test_disabled_colors(self) -> None:
        colors = Colorizer(RenderSession(), enabled=False)
        assert colors.enabled is False
        assert colors.apply("OTEXT", "text") == "text"
        assert colors.expand("OCOMMAND") is False


class TestApply:
    def test_wraps_text(self) -> None:
        colors = Colorizer(RenderSession(), overrides=[("OTEXT", "R")])
        assert colors.apply("OTEXT", "foo") == "\x1b[31mfoo" + RESET

    def test_embedded_reset_is_not_wrapped(self) -> None:
        colors = Colorizer(RenderSession(), overrides=[("OTEXT", "R")])
        start = "\x1b[31m"
        assert colors.apply("OTEXT", "a\x1b[mb") == start + "a" + RESET + "\x1b[m" + start + "b" + RESET

    def test_each_line_is_wrapped(self) -> None:
        colors = Colorizer(RenderSession(), overrides=[("OTEXT", "R")])
        assert colors.apply("OTEXT", "a\nb") == f"\x1b[31ma{RESET}\n\x1b[31mb{RESET}"

    def test_empty_text(self) -> None:
        colors = Colorizer(RenderSession())
        assert colors.apply("OTEXT", "") == ""
