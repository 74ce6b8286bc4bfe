"""Tests for flightbot.tui.screen_buffer -- cell grid and differential output."""

from __future__ import annotations

import pytest

from flightbot.tui.colors import DEFAULT_ATTR, RESET, Style, build_attr
from flightbot.tui.screen_buffer import CLEAR_SCREEN, Cell, ScreenBuffer, clamp, cursor_to


class TestHelpers:
    def test_cursor_to_is_row_then_column(self) -> None:
        assert cursor_to(3, 7) == "\x1b[7;3H"

    def test_clamp(self) -> None:
        assert clamp(-1, 0, 5) == 0
        assert clamp(9, 0, 5) == 5
        assert clamp(3, 0, 5) == 3


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class TestGeometry:
    def test_minimum_size_is_one_cell(self) -> None:
        buf = ScreenBuffer(0, -3)
        assert (buf.width, buf.height) == (1, 1)

    def test_new_buffer_is_blank(self) -> None:
        buf = ScreenBuffer(4, 2)
        assert buf.row_text(1) == "    "
        assert buf.cell_at(4, 2).attr is DEFAULT_ATTR

    def test_cell_at_out_of_range(self) -> None:
        buf = ScreenBuffer(4, 2)
        with pytest.raises(IndexError):
            buf.cell_at(5, 1)
        with pytest.raises(IndexError):
            buf.cell_at(1, 0)

    def test_resize_clears_content(self) -> None:
        buf = ScreenBuffer(4, 2)
        buf.put(1, 1, "abcd")
        buf.resize(6, 3)
        assert (buf.width, buf.height) == (6, 3)
        assert buf.row_text(1) == "      "


# ---------------------------------------------------------------------------
# put / fill
# ---------------------------------------------------------------------------


class TestPut:
    def test_returns_next_column(self) -> None:
        buf = ScreenBuffer(10, 1)
        assert buf.put(2, 1, "abc") == 5
        assert buf.row_text(1) == " abc      "

    def test_stops_at_right_edge(self) -> None:
        buf = ScreenBuffer(4, 1)
        buf.put(3, 1, "xyz")
        assert buf.row_text(1) == "  xy"

    def test_row_outside_grid_is_ignored(self) -> None:
        buf = ScreenBuffer(4, 1)
        assert buf.put(1, 2, "ab") == 1
        assert buf.row_text(1) == "    "

    def test_wide_glyph_takes_two_cells(self) -> None:
        buf = ScreenBuffer(5, 1)
        assert buf.put(1, 1, "\u4e2d") == 3
        assert buf.cell_at(1, 1).char == "\u4e2d"
        assert buf.cell_at(2, 1).continuation
        assert buf.row_text(1) == "\u4e2d   "

    def test_wide_glyph_dropped_at_last_column(self) -> None:
        buf = ScreenBuffer(5, 1)
        assert buf.put(5, 1, "\u4e2d") == 5
        assert buf.cell_at(5, 1) == Cell()

    def test_overwriting_right_half_blanks_wide_glyph(self) -> None:
        buf = ScreenBuffer(6, 1)
        buf.put(1, 1, "\u4e2d")
        buf.put(2, 1, "a")
        assert buf.row_text(1) == " a    "
        assert not buf.cell_at(2, 1).continuation
        assert buf.draw() == cursor_to(1, 1) + " a    " + RESET

    def test_overwriting_left_half_blanks_continuation(self) -> None:
        buf = ScreenBuffer(6, 1)
        buf.put(1, 1, "\u4e2d")
        buf.put(1, 1, "a")
        assert buf.cell_at(2, 1) == Cell()
        assert buf.row_text(1) == "a     "

    def test_wide_over_shifted_wide(self) -> None:
        buf = ScreenBuffer(6, 1)
        buf.put(1, 1, "\u4e2d\u6587")
        buf.put(2, 1, "\u4e2d")
        assert buf.row_text(1) == " \u4e2d   "
        assert [buf.cell_at(x, 1).continuation for x in range(1, 7)] == [False, False, True, False, False, False]

    def test_fill_edge_splits_wide_glyph(self) -> None:
        buf = ScreenBuffer(6, 1)
        buf.put(1, 1, "\u4e2d")
        buf.fill(2, 1, 2, 1, "-")
        assert buf.row_text(1) == " --   "

    def test_zero_width_clusters_skipped(self) -> None:
        buf = ScreenBuffer(5, 1)
        buf.put(1, 1, "a\x00b")
        assert buf.row_text(1) == "ab   "

    def test_style_descriptor_is_resolved(self) -> None:
        buf = ScreenBuffer(3, 1)
        buf.put(1, 1, "a", Style(bold=True))
        assert buf.cell_at(1, 1).attr == build_attr(Style(bold=True))


class TestFill:
    def test_fill_is_clamped_to_grid(self) -> None:
        buf = ScreenBuffer(3, 2)
        buf.fill(0, 0, 10, 10, "#")
        assert buf.row_text(1) == "###"
        assert buf.row_text(2) == "###"

    def test_fill_rectangle(self) -> None:
        buf = ScreenBuffer(4, 3)
        buf.fill(2, 2, 2, 1, "x")
        assert buf.row_text(1) == "    "
        assert buf.row_text(2) == " xx "
        assert buf.row_text(3) == "    "

    def test_empty_rectangle_is_noop(self) -> None:
        buf = ScreenBuffer(3, 1)
        buf.fill(1, 1, 0, 1, "x")
        assert buf.row_text(1) == "   "

    def test_clear(self) -> None:
        buf = ScreenBuffer(3, 1)
        buf.put(1, 1, "abc")
        buf.clear()
        assert buf.row_text(1) == "   "


# ---------------------------------------------------------------------------
# draw
# ---------------------------------------------------------------------------


class TestDraw:
    def test_fresh_buffer_has_nothing_to_draw(self) -> None:
        assert ScreenBuffer(4, 2).draw() == ""

    def test_only_changed_rows_are_emitted(self) -> None:
        buf = ScreenBuffer(5, 2)
        buf.put(1, 2, "ab")
        assert buf.draw() == cursor_to(1, 2) + "ab   " + RESET

    def test_second_draw_without_changes_is_empty(self) -> None:
        buf = ScreenBuffer(5, 2)
        buf.put(1, 1, "ab")
        assert buf.draw() != ""
        assert buf.draw() == ""

    def test_rewriting_same_content_is_not_a_change(self) -> None:
        buf = ScreenBuffer(5, 1)
        buf.put(1, 1, "ab")
        buf.draw()
        buf.clear()
        buf.put(1, 1, "ab")
        assert buf.draw() == ""

    def test_styled_run_is_reset(self) -> None:
        buf = ScreenBuffer(3, 1)
        buf.put(1, 1, "a", Style(color="red"))
        expected = cursor_to(1, 1) + "\x1b[38;2;255;85;85ma" + RESET + "  " + RESET
        assert buf.draw() == expected

    def test_non_delta_draw_repaints_all_rows(self) -> None:
        buf = ScreenBuffer(2, 3)
        out = buf.draw(delta=False)
        for row in (1, 2, 3):
            assert cursor_to(1, row) in out

    def test_draw_after_resize_clears_screen(self) -> None:
        buf = ScreenBuffer(2, 2)
        buf.resize(3, 2)
        out = buf.draw()
        assert out.startswith(CLEAR_SCREEN)
        assert cursor_to(1, 1) in out
        assert cursor_to(1, 2) in out
        assert buf.draw() == ""

    def test_wide_glyph_written_once(self) -> None:
        buf = ScreenBuffer(3, 1)
        buf.put(1, 1, "\u4e2d")
        assert buf.draw() == cursor_to(1, 1) + "\u4e2d " + RESET
