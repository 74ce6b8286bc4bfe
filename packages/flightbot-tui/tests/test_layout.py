"""Tests for flightbot.tui.layout -- panel region math."""

from __future__ import annotations

import pytest

from flightbot.tui.layout import (
    INPUT_BOX_HEIGHT,
    Layout,
    Region,
    compute_layout,
    point_in_region,
)


class TestRegion:
    def test_inner_size_excludes_border(self) -> None:
        region = Region(x=1, y=1, w=40, h=20)
        assert region.inner_width == 38
        assert region.inner_height == 18

    def test_inner_size_never_negative(self) -> None:
        region = Region(x=1, y=1, w=1, h=1)
        assert region.inner_width == 0
        assert region.inner_height == 0

    def test_edges_and_contains(self) -> None:
        region = Region(x=5, y=3, w=4, h=2)
        assert region.right == 8
        assert region.bottom == 4
        assert region.contains(5, 3)
        assert region.contains(8, 4)
        assert not region.contains(9, 4)
        assert not region.contains(5, 5)

    def test_point_in_region_none(self) -> None:
        assert not point_in_region(1, 1, None)


class TestComputeLayout:
    def test_standard_terminal(self) -> None:
        layout = compute_layout(100, 30)
        assert layout.chat == Region(x=1, y=1, w=64, h=27)
        assert layout.status == Region(x=66, y=1, w=35, h=14)
        assert layout.server == Region(x=66, y=16, w=35, h=12)
        assert layout.input == Region(x=1, y=28, w=100, h=INPUT_BOX_HEIGHT)

    def test_chat_takes_about_two_thirds(self) -> None:
        layout = compute_layout(100, 30)
        usable = 100 - 1
        assert abs(layout.chat.w - usable * 0.65) < 1

    def test_is_pure(self) -> None:
        assert compute_layout(120, 40) == compute_layout(120, 40)

    def test_overall_size(self) -> None:
        layout = compute_layout(100, 30)
        assert isinstance(layout, Layout)
        assert layout.width == 100
        assert layout.height == 30

    def test_get_by_name(self) -> None:
        layout = compute_layout(100, 30)
        assert layout.get("chat") is layout.chat
        assert layout.get("input") is layout.input
        assert layout.get("bogus") is None

    @pytest.mark.parametrize("size", [(100, 30), (80, 24), (61, 15), (40, 12), (30, 10), (20, 8)])
    def test_regions_never_overlap(self, size: tuple[int, int]) -> None:
        layout = compute_layout(*size)
        regions = [layout.chat, layout.status, layout.server, layout.input]
        for i, a in enumerate(regions):
            assert a.w >= 1 and a.h >= 1
            for b in regions[i + 1 :]:
                assert not a.overlaps(b), (size, a, b)

    @pytest.mark.parametrize("width", [2, 7, 20, 61, 80, 129])
    def test_no_overlap_at_any_height(self, width: int) -> None:
        for height in range(2, 60):
            layout = compute_layout(width, height)
            regions = [r for r in (layout.chat, layout.status, layout.server, layout.input) if r.w > 0 and r.h > 0]
            for i, a in enumerate(regions):
                assert a.bottom <= height
                for b in regions[i + 1 :]:
                    assert not a.overlaps(b), (width, height, a, b)

    @pytest.mark.parametrize("height", [0, 1, 2])
    def test_two_row_terminal_has_empty_server(self, height: int) -> None:
        layout = compute_layout(80, height)
        assert layout.status.h == 1
        assert layout.server.h == 0
        assert layout.input == Region(x=1, y=2, w=80, h=1)
        assert not layout.server.contains(layout.server.x, 2)

    @pytest.mark.parametrize("size", [(100, 30), (80, 24), (40, 12)])
    def test_status_column_fills_remainder(self, size: tuple[int, int]) -> None:
        width, _ = size
        layout = compute_layout(*size)
        assert layout.status.right == width
        assert layout.server.right == width
        assert layout.server.bottom == layout.chat.bottom

    def test_gap_only_on_wide_terminals(self) -> None:
        wide = compute_layout(100, 30)
        narrow = compute_layout(50, 30)
        assert wide.status.x == wide.chat.right + 2
        assert narrow.status.x == narrow.chat.right + 1

    def test_degenerate_size_is_clamped(self) -> None:
        layout = compute_layout(0, 0)
        assert layout.input.w == 2
