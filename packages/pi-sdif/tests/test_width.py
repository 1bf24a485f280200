"""Tests for pi.sdif.width -- display widths and escape handling."""

from __future__ import annotations

from pi.sdif.width import (
    expand_tabs,
    extract_escape,
    grapheme_width,
    is_reset,
    is_sgr,
    segment,
    split_resets,
    strip_escapes,
    visible_width,
)


class TestGraphemeWidth:
    """Display width of single grapheme clusters."""

    def test_ascii_is_one(self) -> None:
        assert grapheme_width("a") == 1

    def test_wide_cjk_is_two(self) -> None:
        assert grapheme_width("全") == 2

    def test_fullwidth_letter_is_two(self) -> None:
        assert grapheme_width("Ａ") == 2

    def test_combining_cluster_counts_base_only(self) -> None:
        assert grapheme_width("e\u0301") == 1

    def test_lone_combining_mark_is_zero(self) -> None:
        assert grapheme_width("\u0301") == 0

    def test_control_character_is_zero(self) -> None:
        assert grapheme_width("\x07") == 0

    def test_empty_is_zero(self) -> None:
        assert grapheme_width("") == 0


class TestSegment:
    def test_keeps_combining_sequence_together(self) -> None:
        assert segment("ae\u0301b") == ["a", "e\u0301", "b"]


class TestVisibleWidth:
    """Visible width ignores escape sequences."""

    def test_plain(self) -> None:
        assert visible_width("hello") == 5

    def test_mixed_wide(self) -> None:
        assert visible_width("A全B") == 4

    def test_sgr_does_not_count(self) -> None:
        assert visible_width("\x1b[31mA全B\x1b[m") == 4

    def test_erase_line_does_not_count(self) -> None:
        assert visible_width("ab\x1b[K") == 2

    def test_strip_escapes(self) -> None:
        assert strip_escapes("\x1b[1;31mred\x1b[0m") == "red"


class TestEscapes:
    """Escape sequence extraction and classification."""

    def test_extract_sgr(self) -> None:
        assert extract_escape("\x1b[31mx", 0) == "\x1b[31m"

    def test_extract_extended_color(self) -> None:
        assert extract_escape("\x1b[38;5;194mx", 0) == "\x1b[38;5;194m"

    def test_extract_erase_line(self) -> None:
        assert extract_escape("a\x1b[Kb", 1) == "\x1b[K"

    def test_extract_osc_with_bel(self) -> None:
        text = "\x1b]8;;https://example.com\x07link"
        assert extract_escape(text, 0) == "\x1b]8;;https://example.com\x07"

    def test_not_at_escape(self) -> None:
        assert extract_escape("abc", 0) is None

    def test_incomplete_sequence(self) -> None:
        assert extract_escape("\x1b[31", 0) is None

    def test_sgr_classification(self) -> None:
        assert is_sgr("\x1b[1;31m") is True
        assert is_sgr("\x1b[K") is False

    def test_reset_classification(self) -> None:
        assert is_reset("\x1b[m") is True
        assert is_reset("\x1b[0m") is True
        assert is_reset("\x1b[31m") is False

    def test_split_resets_keeps_resets(self) -> None:
        assert split_resets("a\x1b[mb") == ["a", "\x1b[m", "b"]

    def test_split_resets_without_reset(self) -> None:
        assert split_resets("abc") == ["abc"]


class TestExpandTabs:
    """Tabs expand to display-column tab stops."""

    def test_ascii(self) -> None:
        assert expand_tabs("a\tb", 4) == "a   b"

    def test_tab_at_stop(self) -> None:
        assert expand_tabs("abcd\te", 4) == "abcd    e"

    def test_wide_character_counts_two(self) -> None:
        assert expand_tabs("全\tb", 4) == "全  b"

    def test_escapes_take_no_column(self) -> None:
        assert expand_tabs("\x1b[31ma\tb", 4) == "\x1b[31ma   b"

    def test_no_tabs_unchanged(self) -> None:
        assert expand_tabs("plain", 8) == "plain"
