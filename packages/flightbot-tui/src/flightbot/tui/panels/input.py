"""Single-line input box with prompt, block cursor and key hint."""

from __future__ import annotations

from flightbot.tui.layout import Region
from flightbot.tui.panels.common import RenderContext, draw_box, draw_plain_line
from flightbot.tui.panels.themes import PanelTheme
from flightbot.tui.screen_buffer import ScreenBuffer
from flightbot.tui.utils import take_by_width, visible_width, wrap_text

PROMPT = "> "
CURSOR_CHAR = "█"
INPUT_HINT = "Enter: send  •  Ctrl+C: exit"


def build_input_display(text: str, width: int, show_cursor: bool = True) -> str:
    """The visible tail of the prompt line, with the cursor appended."""
    if width <= 0:
        return ""
    lines = wrap_text(PROMPT + text, width)
    display = lines[-1] if lines else ""
    if show_cursor:
        if visible_width(display) >= width:
            display, _ = take_by_width(display, width - 1)
        display += CURSOR_CHAR
    return display


def render_input_panel(
    buffer: ScreenBuffer,
    region: Region,
    text: str,
    context: RenderContext | None,
    theme: PanelTheme,
    show_cursor: bool = True,
) -> None:
    box = draw_box(buffer, region, title=theme.title, theme=theme, context=context)
    if box.height <= 0 or box.width <= 0:
        return
    display = build_input_display(text, box.width, show_cursor)
    draw_plain_line(buffer, box.x, box.y, box.width, display, None, theme)
    if box.height > 1:
        draw_plain_line(buffer, box.x, box.y + 1, box.width, INPUT_HINT, None, theme)
