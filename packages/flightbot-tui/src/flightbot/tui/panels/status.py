"""Status panel: plain wrapped lines, top anchored."""

from __future__ import annotations

from typing import Sequence

from flightbot.tui.layout import Region
from flightbot.tui.panels.common import RenderContext, draw_box, draw_plain_line
from flightbot.tui.panels.themes import PanelTheme
from flightbot.tui.screen_buffer import ScreenBuffer


def render_status_panel(
    buffer: ScreenBuffer,
    region: Region,
    visible_lines: Sequence[str | None],
    is_focused: bool,
    context: RenderContext | None,
    theme: PanelTheme,
) -> None:
    box = draw_box(buffer, region, title=theme.title, theme=theme, is_focused=is_focused, context=context)
    if box.height <= 0 or box.width <= 0:
        return
    for i in range(box.height):
        text = visible_lines[i] if i < len(visible_lines) else None
        draw_plain_line(buffer, box.x, box.y + i, box.width, text or "", None, theme)
