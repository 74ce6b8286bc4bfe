"""Per-panel scroll state and viewport slicing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, TypeVar

from flightbot.tui.screen_buffer import clamp

T = TypeVar("T")


@dataclass
class ScrollState:
    """Viewport over a list of lines.

    For tail-anchored panels (``align_bottom``) offset 0 shows the newest
    lines and larger offsets move back in history.  For top-anchored panels
    offset 0 shows the first lines.
    """

    align_bottom: bool = False
    offset: int = 0
    max_offset: int = 0
    viewport: int = 0
    total: int = field(default=0, repr=False)

    def update_bounds(self, total: int, viewport: int) -> None:
        self.total = max(0, total)
        self.viewport = max(0, viewport)
        self.max_offset = max(0, self.total - self.viewport)
        self.offset = clamp(self.offset, 0, self.max_offset)

    def adjust(self, delta: int) -> bool:
        """Scroll by *delta* lines; positive always reveals older content.

        Returns ``True`` only if the offset actually moved.
        """
        if not delta or self.viewport <= 0:
            return False
        direction = 1 if self.align_bottom else -1
        next_offset = clamp(self.offset + delta * direction, 0, self.max_offset)
        if next_offset == self.offset:
            return False
        self.offset = next_offset
        return True

    def reset(self) -> None:
        self.offset = 0

    @property
    def at_edge(self) -> bool:
        """Whether the panel shows its anchor end (newest or first lines)."""
        return self.offset == 0


def slice_visible_lines(lines: Sequence[T], visible_count: int, offset: int) -> list[T | None]:
    """Tail-anchored window: the last *visible_count* lines before *offset*."""
    if visible_count <= 0:
        return []
    if not lines:
        return [None] * visible_count
    end = max(0, len(lines) - offset)
    start = max(0, end - visible_count)
    window: list[T | None] = list(lines[start:end])
    padding = visible_count - len(window)
    if padding > 0:
        return [None] * padding + window
    return window


def slice_top_visible_lines(lines: Sequence[T], visible_count: int, offset: int) -> list[T | None]:
    """Top-anchored window starting at *offset*."""
    if visible_count <= 0:
        return []
    if not lines:
        return [None] * visible_count
    start = clamp(offset, 0, max(0, len(lines) - visible_count))
    window: list[T | None] = list(lines[start : start + visible_count])
    padding = visible_count - len(window)
    if padding > 0:
        window.extend([None] * padding)
    return window


def prepare_panel_lines(
    state: ScrollState | None,
    lines: Sequence[T] | None,
    viewport: int,
    align_bottom: bool = False,
) -> list[T | None]:
    """Recompute *state*'s bounds and return exactly *viewport* rows.

    Rows beyond the available content are ``None`` placeholders.
    """
    items: Sequence[T] = list(lines) if lines else []
    if state is None:
        if align_bottom:
            return slice_visible_lines(items, viewport, 0)
        return slice_top_visible_lines(items, viewport, 0)

    state.align_bottom = bool(align_bottom)
    state.update_bounds(len(items), viewport)
    if state.viewport <= 0:
        return []
    if state.align_bottom:
        return slice_visible_lines(items, state.viewport, state.offset)
    return slice_top_visible_lines(items, state.viewport, state.offset)
