"""flightbot-tui: four-panel terminal UI with differential rendering."""

# Controller
from flightbot.tui.app import ChatEntry, ServerInfo, TerminalUI, UiState, format_duration

# Colors and attributes
from flightbot.tui.colors import (
    DEFAULT_ATTR,
    Attr,
    Segment,
    Style,
    attr_sequence,
    build_attr,
    create_segment,
    ensure_attr,
    resolve_color,
)

# Configuration
from flightbot.tui.config import Config

# Input
from flightbot.tui.input import InputEngine
from flightbot.tui.interfaces import InputSink, InstanceInfo, ModalHost, RenderTarget, UiCallbacks
from flightbot.tui.keys import Key, KeyEvent, KeyId, decode_key, parse_key
from flightbot.tui.mouse import MouseEvent, MouseSplitter, parse_mouse_sequence

# Layout and scrolling
from flightbot.tui.layout import Layout, Region, compute_layout, point_in_region
from flightbot.tui.scroll import ScrollState, prepare_panel_lines

# Rendering
from flightbot.tui.scheduler import RenderScheduler
from flightbot.tui.screen_buffer import Cell, ScreenBuffer, cursor_to
from flightbot.tui.stdin_buffer import StdinBuffer

# Terminal interface and implementations
from flightbot.tui.terminal import ProcessTerminal, Terminal, is_interactive

# Text measurement
from flightbot.tui.utils import (
    char_width,
    grapheme_width,
    take_by_width,
    visible_width,
    wrap_segments,
    wrap_text,
)

__all__ = [
    # Controller
    "ChatEntry",
    "ServerInfo",
    "TerminalUI",
    "UiState",
    "format_duration",
    # Colors
    "DEFAULT_ATTR",
    "Attr",
    "Segment",
    "Style",
    "attr_sequence",
    "build_attr",
    "create_segment",
    "ensure_attr",
    "resolve_color",
    # Config
    "Config",
    # Input
    "InputEngine",
    "InputSink",
    "InstanceInfo",
    "ModalHost",
    "RenderTarget",
    "UiCallbacks",
    "Key",
    "KeyEvent",
    "KeyId",
    "decode_key",
    "parse_key",
    "MouseEvent",
    "MouseSplitter",
    "parse_mouse_sequence",
    # Layout
    "Layout",
    "Region",
    "compute_layout",
    "point_in_region",
    "ScrollState",
    "prepare_panel_lines",
    # Rendering
    "RenderScheduler",
    "Cell",
    "ScreenBuffer",
    "cursor_to",
    "StdinBuffer",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    "is_interactive",
    # Text
    "char_width",
    "grapheme_width",
    "take_by_width",
    "visible_width",
    "wrap_segments",
    "wrap_text",
]
