"""Screen layout: chat, status, server and input regions.

:func:`compute_layout` is a pure function of the terminal size; calling it
twice with the same size yields equal regions.
"""

from __future__ import annotations

from dataclasses import dataclass

from flightbot.tui.screen_buffer import clamp

CHAT_SCROLL_JUMP = 8
INPUT_BOX_HEIGHT = 3
MIN_CHAT_HEIGHT = 10
MIN_PANEL_WIDTH = 30

CHAT_WIDTH_RATIO = 0.65
STATUS_HEIGHT_RATIO = 0.55
MIN_STATUS_HEIGHT = 6
MIN_SERVER_HEIGHT = 3


@dataclass(frozen=True)
class Region:
    """A 1-based rectangle plus the content area inside a 1-cell border."""

    x: int
    y: int
    w: int
    h: int

    @property
    def inner_width(self) -> int:
        return max(0, self.w - 2)

    @property
    def inner_height(self) -> int:
        return max(0, self.h - 2)

    @property
    def right(self) -> int:
        return self.x + self.w - 1

    @property
    def bottom(self) -> int:
        return self.y + self.h - 1

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def overlaps(self, other: Region) -> bool:
        return not (
            self.right < other.x
            or other.right < self.x
            or self.bottom < other.y
            or other.bottom < self.y
        )


@dataclass(frozen=True)
class Layout:
    chat: Region
    status: Region
    server: Region
    input: Region

    @property
    def width(self) -> int:
        return self.input.w

    @property
    def height(self) -> int:
        return self.input.bottom

    def get(self, panel: str) -> Region | None:
        return getattr(self, panel, None) if panel in _PANEL_NAMES else None


_PANEL_NAMES = ("chat", "status", "server", "input")


def _split_width(usable_width: int) -> tuple[int, int]:
    """Split *usable_width* into (chat, status) widths, both >= 1."""
    chat_width = int(usable_width * CHAT_WIDTH_RATIO)
    chat_width = clamp(chat_width, 1, usable_width - 1)
    status_width = usable_width - chat_width

    min_panel = min(MIN_PANEL_WIDTH, max(3, usable_width // 3))
    if usable_width >= min_panel * 2:
        if chat_width < min_panel:
            chat_width = min_panel
            status_width = usable_width - chat_width
        if status_width < min_panel:
            status_width = min_panel
            chat_width = usable_width - status_width
    else:
        chat_width = max(chat_width, 2)
        status_width = max(status_width, 2)
        overflow = chat_width + status_width - usable_width
        if overflow > 0:
            reduce_chat = min(overflow, max(0, chat_width - 1))
            chat_width -= reduce_chat
            overflow -= reduce_chat
            reduce_status = min(overflow, max(0, status_width - 1))
            status_width -= reduce_status

    chat_width = clamp(chat_width, 1, usable_width - 1)
    status_width = usable_width - chat_width
    if status_width < 1:
        status_width = 1
        chat_width = max(1, usable_width - status_width)
    return chat_width, status_width


def _split_height(body_height: int) -> tuple[int, int, int]:
    """Split the status/server column into (status, gap, server) rows."""
    if body_height < 2:
        # One row only fits status; the server region is empty.
        return max(1, body_height), 0, 0
    vertical_gap = 1 if body_height >= 12 else 0
    status_height = max(MIN_STATUS_HEIGHT, int(body_height * STATUS_HEIGHT_RATIO))
    server_height = max(5, body_height - status_height - vertical_gap)
    if status_height + server_height + vertical_gap < body_height:
        status_height += body_height - (status_height + server_height + vertical_gap)
    if status_height + server_height + vertical_gap > body_height:
        server_height = max(MIN_SERVER_HEIGHT, body_height - status_height - vertical_gap)
    # Very short bodies: give up the status minimum before overlapping the input row.
    overflow = status_height + server_height + vertical_gap - body_height
    if overflow > 0:
        status_height = max(1, status_height - overflow)
        server_height = max(1, body_height - status_height - vertical_gap)
    return status_height, vertical_gap, max(1, server_height)


def compute_layout(width: int, height: int) -> Layout:
    """Map a terminal size to the four panel regions."""
    total_width = max(2, int(width or 0))
    total_height = max(2, int(height or 0))

    body_height = max(MIN_CHAT_HEIGHT, total_height - INPUT_BOX_HEIGHT)
    if body_height > total_height - 1:
        body_height = max(1, total_height - 1)
    input_height = max(1, total_height - body_height)

    gap = 1 if total_width >= MIN_PANEL_WIDTH * 2 + 1 else 0
    usable_width = max(2, total_width - gap)
    chat_width, status_width = _split_width(usable_width)

    status_x = 1 + chat_width + gap
    status_height, vertical_gap, server_height = _split_height(body_height)

    return Layout(
        chat=Region(x=1, y=1, w=chat_width, h=body_height),
        status=Region(x=status_x, y=1, w=status_width, h=status_height),
        server=Region(
            x=status_x,
            y=1 + status_height + vertical_gap,
            w=status_width,
            h=server_height,
        ),
        input=Region(x=1, y=body_height + 1, w=total_width, h=input_height),
    )


def point_in_region(x: int, y: int, region: Region | None) -> bool:
    if region is None:
        return False
    return region.contains(x, y)
