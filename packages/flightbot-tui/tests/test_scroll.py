"""Tests for flightbot.tui.scroll -- scroll state and viewport slicing."""

from __future__ import annotations

from flightbot.tui.scroll import (
    ScrollState,
    prepare_panel_lines,
    slice_top_visible_lines,
    slice_visible_lines,
)


class TestScrollState:
    def test_bounds_clamp_offset(self) -> None:
        state = ScrollState(offset=50)
        state.update_bounds(total=20, viewport=5)
        assert state.max_offset == 15
        assert state.offset == 15

    def test_content_shorter_than_viewport(self) -> None:
        state = ScrollState()
        state.update_bounds(total=3, viewport=10)
        assert state.max_offset == 0
        assert not state.adjust(1)

    def test_adjust_reports_movement(self) -> None:
        state = ScrollState(align_bottom=True)
        state.update_bounds(total=10, viewport=4)
        assert state.adjust(2)
        assert state.offset == 2
        assert state.adjust(100)
        assert state.offset == 6
        assert not state.adjust(1)

    def test_top_anchored_direction_is_inverted(self) -> None:
        state = ScrollState(align_bottom=False)
        state.update_bounds(total=10, viewport=4)
        assert state.adjust(-3)
        assert state.offset == 3
        assert state.adjust(1)
        assert state.offset == 2

    def test_zero_delta_or_viewport(self) -> None:
        state = ScrollState()
        state.update_bounds(total=10, viewport=0)
        assert not state.adjust(1)
        state.update_bounds(total=10, viewport=4)
        assert not state.adjust(0)

    def test_reset_and_at_edge(self) -> None:
        state = ScrollState(align_bottom=True)
        state.update_bounds(total=10, viewport=4)
        state.adjust(3)
        assert not state.at_edge
        state.reset()
        assert state.at_edge


class TestSlicing:
    def test_tail_window(self) -> None:
        assert slice_visible_lines([1, 2, 3, 4, 5], 2, 0) == [4, 5]
        assert slice_visible_lines([1, 2, 3, 4, 5], 2, 1) == [3, 4]

    def test_tail_window_pads_at_top(self) -> None:
        assert slice_visible_lines([1, 2], 4, 0) == [None, None, 1, 2]

    def test_top_window_pads_at_bottom(self) -> None:
        assert slice_top_visible_lines([1, 2], 4, 0) == [1, 2, None, None]

    def test_top_window_offset(self) -> None:
        assert slice_top_visible_lines([1, 2, 3, 4, 5], 2, 2) == [3, 4]

    def test_empty_and_zero_count(self) -> None:
        assert slice_visible_lines([], 3, 0) == [None, None, None]
        assert slice_visible_lines([1], 0, 0) == []
        assert slice_top_visible_lines([1], 0, 0) == []


class TestPreparePanelLines:
    def test_always_returns_viewport_rows(self) -> None:
        state = ScrollState()
        for total in (0, 3, 10, 50):
            rows = prepare_panel_lines(state, list(range(total)), 7, align_bottom=True)
            assert len(rows) == 7

    def test_newest_line_is_last_row_when_tail_anchored(self) -> None:
        state = ScrollState()
        lines = [f"line {i}" for i in range(20)]
        assert prepare_panel_lines(state, lines, 5, align_bottom=True)[-1] == "line 19"
        lines.append("line 20")
        assert prepare_panel_lines(state, lines, 5, align_bottom=True)[-1] == "line 20"

    def test_scrolled_back_view(self) -> None:
        state = ScrollState()
        lines = list(range(20))
        prepare_panel_lines(state, lines, 5, align_bottom=True)
        state.adjust(3)
        assert prepare_panel_lines(state, lines, 5, align_bottom=True) == [12, 13, 14, 15, 16]

    def test_sets_alignment_on_state(self) -> None:
        state = ScrollState(align_bottom=True)
        prepare_panel_lines(state, [1, 2, 3], 2, align_bottom=False)
        assert state.align_bottom is False
        assert state.viewport == 2

    def test_without_state(self) -> None:
        assert prepare_panel_lines(None, [1, 2, 3], 2, align_bottom=True) == [2, 3]
        assert prepare_panel_lines(None, [1, 2, 3], 2) == [1, 2]
        assert prepare_panel_lines(None, None, 2) == [None, None]

    def test_zero_viewport(self) -> None:
        assert prepare_panel_lines(ScrollState(), [1, 2, 3], 0) == []
