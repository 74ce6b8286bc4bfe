"""Chat log panel."""

from __future__ import annotations

from typing import Sequence

from flightbot.tui.layout import Region
from flightbot.tui.panels.common import PanelLine, RenderContext, draw_box, draw_log_line
from flightbot.tui.panels.themes import PanelTheme
from flightbot.tui.screen_buffer import ScreenBuffer


def render_chat_panel(
    buffer: ScreenBuffer,
    region: Region,
    visible_lines: Sequence[PanelLine | None],
    is_focused: bool,
    context: RenderContext | None,
    theme: PanelTheme,
) -> None:
    box = draw_box(
        buffer,
        region,
        title=theme.title,
        title_segments=theme.title_segments,
        subtitle=theme.subtitle,
        theme=theme,
        is_focused=is_focused,
        context=context,
    )
    if box.height <= 0 or box.width <= 0:
        return
    for i in range(box.height):
        line = visible_lines[i] if i < len(visible_lines) else None
        draw_log_line(buffer, box.x, box.y + i, box.width, line, theme)
