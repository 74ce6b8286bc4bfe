"""Server info panel."""

from __future__ import annotations

from typing import Sequence

from flightbot.tui.layout import Region
from flightbot.tui.panels.common import (
    PanelLine,
    RenderContext,
    clear_line,
    draw_box,
    draw_plain_line,
    draw_segment_line,
    get_theme_body_attr,
)
from flightbot.tui.panels.themes import PanelTheme
from flightbot.tui.screen_buffer import ScreenBuffer


def render_server_panel(
    buffer: ScreenBuffer,
    region: Region,
    visible_lines: Sequence[PanelLine | None],
    is_focused: bool,
    context: RenderContext | None,
    theme: PanelTheme,
) -> None:
    box = draw_box(buffer, region, title=theme.title, theme=theme, is_focused=is_focused, context=context)
    if box.height <= 0 or box.width <= 0:
        return
    for i in range(box.height):
        entry = visible_lines[i] if i < len(visible_lines) else None
        y = box.y + i
        if entry is None:
            clear_line(buffer, box.x, y, box.width, get_theme_body_attr(theme))
        elif entry.segments is not None:
            draw_segment_line(buffer, box.x, y, box.width, entry.segments, theme)
        else:
            # Server rows always use the theme text color.
            draw_plain_line(buffer, box.x, y, box.width, entry.text, None, theme)
