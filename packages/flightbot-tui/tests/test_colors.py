"""Tests for flightbot.tui.colors -- styles, palettes and SGR attributes."""

from __future__ import annotations

from flightbot.tui.colors import (
    DEFAULT_ATTR,
    RESET,
    Attr,
    Style,
    attr_sequence,
    build_attr,
    create_segment,
    ensure_attr,
    hex_to_rgb,
    normalize_style,
    resolve_color,
)


# ---------------------------------------------------------------------------
# resolve_color
# ---------------------------------------------------------------------------


class TestResolveColor:
    def test_palette_name(self) -> None:
        assert resolve_color("aqua") == "#55FFFF"
        assert resolve_color("red") == "#FF5555"

    def test_name_is_case_and_space_insensitive(self) -> None:
        assert resolve_color("  Gold ") == "#FFAA00"

    def test_fg_suffix_is_dropped(self) -> None:
        assert resolve_color("white-fg") == "#FFFFFF"

    def test_short_hex_is_expanded(self) -> None:
        assert resolve_color("#abc") == "#AABBCC"
        assert resolve_color("#F00") == "#FF0000"

    def test_unrecognized_text_is_returned(self) -> None:
        assert resolve_color("not-a-color") == "not-a-color"

    def test_long_hex_is_uppercased(self) -> None:
        assert resolve_color("#12ab9f") == "#12AB9F"

    def test_unknown_name_passes_through(self) -> None:
        assert resolve_color("light_red") == "light_red"
        assert resolve_color("bogus") == "bogus"

    def test_empty_and_non_string(self) -> None:
        assert resolve_color("") is None
        assert resolve_color("   ") is None
        assert resolve_color(None) is None
        assert resolve_color(42) is None


class TestHexToRgb:
    def test_valid(self) -> None:
        assert hex_to_rgb("#FF5555") == (255, 85, 85)

    def test_invalid(self) -> None:
        assert hex_to_rgb("#FFF") is None
        assert hex_to_rgb("#GGGGGG") is None
        assert hex_to_rgb(None) is None


# ---------------------------------------------------------------------------
# Style normalization
# ---------------------------------------------------------------------------


class TestNormalizeStyle:
    def test_none_is_default(self) -> None:
        assert normalize_style(None) == Style()

    def test_style_passes_through(self) -> None:
        style = Style(bold=True)
        assert normalize_style(style) is style

    def test_mapping_aliases(self) -> None:
        style = normalize_style({"color": "red", "bgColor": "#000", "underline": True})
        assert style == Style(color="red", bg_color="#000", underlined=True)

    def test_empty_color_becomes_none(self) -> None:
        assert normalize_style({"color": ""}).color is None

    def test_create_segment_overrides(self) -> None:
        seg = create_segment("hi", {"color": "red"}, bold=True)
        assert seg.text == "hi"
        assert seg.style == Style(color="red", bold=True)


# ---------------------------------------------------------------------------
# build_attr
# ---------------------------------------------------------------------------


class TestBuildAttr:
    def test_default_style_is_default_attr(self) -> None:
        assert build_attr() is DEFAULT_ATTR
        assert build_attr(Style()) is DEFAULT_ATTR
        assert build_attr({}) is DEFAULT_ATTR

    def test_unrenderable_color_collapses_to_default(self) -> None:
        assert build_attr(Style(color="bogus")) is DEFAULT_ATTR

    def test_hex_foreground_is_truecolor(self) -> None:
        attr = build_attr(Style(color="red"))
        assert attr.sequence == "\x1b[38;2;255;85;85m"

    def test_basic_ansi_name(self) -> None:
        attr = build_attr(Style(color="light_red"))
        assert attr.sequence == "\x1b[91m"

    def test_basic_ansi_background(self) -> None:
        attr = build_attr(Style(bg_color="light_blue"))
        assert attr.sequence == "\x1b[104m"

    def test_flags_come_before_colors(self) -> None:
        attr = build_attr(Style(bold=True, underlined=True, color="#000000", bg_color="#FFFFFF"))
        assert attr.sequence == "\x1b[1;4;38;2;0;0;0;48;2;255;255;255m"

    def test_equivalent_styles_share_key(self) -> None:
        a = build_attr({"color": "aqua"})
        b = build_attr(Style(color="#55ffff"))
        assert a.key == b.key
        assert a == b

    def test_obfuscated_does_not_affect_key(self) -> None:
        assert build_attr(Style(bold=True, obfuscated=True)).key == build_attr(Style(bold=True)).key

    def test_explicit_overrides_win(self) -> None:
        attr = build_attr(Style(color="red"), color="white", background="black")
        assert attr == build_attr(Style(color="white", bg_color="black"))

    def test_attr_sequence_helper(self) -> None:
        assert attr_sequence(None) == RESET
        assert attr_sequence(Style(italic=True)) == "\x1b[3m"


class TestEnsureAttr:
    def test_none(self) -> None:
        assert ensure_attr(None) is DEFAULT_ATTR

    def test_attr_passes_through(self) -> None:
        attr = Attr(key="k", sequence="s")
        assert ensure_attr(attr) is attr

    def test_style_is_built(self) -> None:
        assert ensure_attr(Style(bold=True)) == build_attr(Style(bold=True))
