"""Panel compositors and the instance manager modal."""

from flightbot.tui.panels.chat import render_chat_panel
from flightbot.tui.panels.common import (
    BoxInner,
    PanelLine,
    RenderContext,
    build_title_segments,
    clear_line,
    draw_box,
    draw_log_line,
    draw_panel_divider,
    draw_plain_line,
    draw_segment_line,
    fill_region,
    get_theme_body_attr,
    write_text,
)
from flightbot.tui.panels.input import render_input_panel
from flightbot.tui.panels.instance_modal import InstanceModal, ModalMode
from flightbot.tui.panels.server import render_server_panel
from flightbot.tui.panels.status import render_status_panel
from flightbot.tui.panels.themes import (
    DEFAULT_BORDER,
    PanelTheme,
    build_panel_themes,
    merge_panel_theme,
)

__all__ = [
    "BoxInner",
    "DEFAULT_BORDER",
    "InstanceModal",
    "ModalMode",
    "PanelLine",
    "PanelTheme",
    "RenderContext",
    "build_panel_themes",
    "build_title_segments",
    "clear_line",
    "draw_box",
    "draw_log_line",
    "draw_panel_divider",
    "draw_plain_line",
    "draw_segment_line",
    "fill_region",
    "get_theme_body_attr",
    "merge_panel_theme",
    "render_chat_panel",
    "render_input_panel",
    "render_server_panel",
    "render_status_panel",
    "write_text",
]
