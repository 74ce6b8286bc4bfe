"""The terminal UI controller.

:class:`TerminalUI` owns all UI state, turns key and mouse events into
state changes, and renders the four panels (plus the instance modal) into a
:class:`~flightbot.tui.screen_buffer.ScreenBuffer` whose diff is written to
the terminal.  Everything runs on one asyncio loop; renders only happen from
the :class:`~flightbot.tui.scheduler.RenderScheduler` callback.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Sequence

from flightbot.tui.animation import GradientClock
from flightbot.tui.colors import Segment, Style, create_segment
from flightbot.tui.config import Config
from flightbot.tui.input import InputEngine
from flightbot.tui.interfaces import InputSink, ModalHost
from flightbot.tui.keys import KeyEvent
from flightbot.tui.layout import Layout, compute_layout, point_in_region
from flightbot.tui.mouse import MouseEvent
from flightbot.tui.panels import (
    InstanceModal,
    PanelLine,
    PanelTheme,
    RenderContext,
    build_panel_themes,
    draw_panel_divider,
    render_chat_panel,
    render_input_panel,
    render_server_panel,
    render_status_panel,
)
from flightbot.tui.scheduler import RenderScheduler
from flightbot.tui.screen_buffer import ScreenBuffer
from flightbot.tui.scroll import ScrollState, prepare_panel_lines
from flightbot.tui.terminal import ProcessTerminal, Terminal, is_interactive
from flightbot.tui.utils import copy_segments_within_width, iter_graphemes, wrap_segments, wrap_text

logger = logging.getLogger(__name__)

FOCUSABLE_PANELS = ("chat", "status", "server")
MODAL_TOGGLE_KEYS = ("f2",)

SYSTEM_PREFIX = "[SYS] "
DEFAULT_SYSTEM_COLOR = "cyan"
PLAYER_BULLET = "• "
PLAYER_BULLET_COLOR = "#888888"
MIN_PLAYER_COLUMN_WIDTH = 14


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass
class ChatEntry:
    """One chat log entry: a system notice or a run of styled segments."""

    kind: str
    text: str = ""
    color: str | None = None
    segments: list[Segment] = field(default_factory=list)
    id: int = 0


@dataclass
class ServerInfo:
    host: str = "N/A"
    online_time_ms: float = 0
    players: list[str] = field(default_factory=list)
    bot_username: str = ""


def _scroll_states() -> dict[str, ScrollState]:
    return {
        "chat": ScrollState(align_bottom=True),
        "status": ScrollState(align_bottom=False),
        "server": ScrollState(align_bottom=False),
    }


@dataclass
class UiState:
    """Everything the render pass reads."""

    entries: deque = field(default_factory=deque)
    pending_entries: list[ChatEntry] = field(default_factory=list)
    status_lines: list[str] = field(default_factory=lambda: ["Waiting for bot..."])
    input_buffer: str = ""
    focused_panel: str = "chat"
    scroll: dict[str, ScrollState] = field(default_factory=_scroll_states)
    server: ServerInfo = field(default_factory=ServerInfo)
    themes: dict[str, PanelTheme] = field(default_factory=build_panel_themes)
    layout: Layout | None = None
    ready: bool = False
    entry_counter: int = 0


def format_duration(ms: float) -> str:
    """``"1h 2m"``, ``"3m 4s"`` or ``"5s"``."""
    if not isinstance(ms, (int, float)) or not math.isfinite(ms) or ms <= 0:
        return "0s"
    total_seconds = int(ms // 1000)
    if total_seconds >= 3600:
        return f"{total_seconds // 3600}h {(total_seconds % 3600) // 60}m"
    if total_seconds >= 60:
        return f"{total_seconds // 60}m {total_seconds % 60}s"
    return f"{total_seconds}s"


def _to_segment(item: object) -> Segment | None:
    if isinstance(item, Segment):
        return item
    if isinstance(item, str):
        return create_segment(item)
    if isinstance(item, Mapping):
        text = item.get("text")
        if not isinstance(text, str):
            return None
        return create_segment(text, item.get("style") or item.get("state"))
    return None


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class TerminalUI:
    """Main controller: state, input dispatch and rendering.

    * *sink* receives submitted lines and the ctrl+c interrupt.
    * *modal_host* enables the instance manager (toggled with F2).
    * *terminal* defaults to a :class:`ProcessTerminal` when both standard
      streams are TTYs; otherwise the UI runs headless and only logs.
    """

    def __init__(
        self,
        sink: InputSink | None = None,
        modal_host: ModalHost | None = None,
        terminal: Terminal | None = None,
        config: Config | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config or Config()
        self.sink = sink
        self.terminal: Terminal | None = terminal
        self.state = UiState(entries=deque(maxlen=max(1, self.config.log_limit)))
        self.gradient = GradientClock(clock)
        self.modal: InstanceModal | None = None
        if modal_host is not None:
            self.modal = InstanceModal(modal_host, on_notice=self.forward_system_log)

        self._buffer: ScreenBuffer | None = None
        self._started = False
        self._stopped = False
        self._headless = False
        self._input = InputEngine(
            self.handle_key,
            self.handle_mouse,
            escape_timeout=self.config.escape_timeout,
        )
        self._scheduler = RenderScheduler(self.render, self._can_render)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._started and not self._stopped

    @property
    def headless(self) -> bool:
        return self._headless

    @property
    def buffer(self) -> ScreenBuffer | None:
        return self._buffer

    def start(self) -> None:
        """Take over the terminal (if there is one) and flush queued entries."""
        if self._started:
            return
        self._started = True

        if self.terminal is None:
            if is_interactive():
                self.terminal = ProcessTerminal(self.config.write_log_path or None)
            else:
                self._headless = True
                logger.info("Terminal UI requires an interactive terminal; running headless")

        if self.terminal is not None:
            try:
                self.terminal.start(self.feed_input, self.request_render)
                self.terminal.hide_cursor()
                self.terminal.clear_screen()
                if self.config.mouse_tracking:
                    self.terminal.enable_mouse()
            except OSError:
                logger.exception("Could not initialize the terminal; running headless")
                self.terminal = None
                self._headless = True

        self.state.ready = True
        if self.state.pending_entries:
            queued = self.state.pending_entries
            self.state.pending_entries = []
            for entry in queued:
                self._append_entry(entry)
        if self.modal is not None:
            self.forward_system_log("Instance modal initialized. Press F2 to open.", DEFAULT_SYSTEM_COLOR)

        if not self._headless:
            self._scheduler.start_animation(self.config.animation_tick_ms / 1000.0)
        self.request_render()

    def stop(self) -> None:
        """Restore the terminal.  Safe to call any number of times."""
        if self._stopped:
            return
        self._stopped = True
        self._scheduler.stop()
        self._input.reset()
        terminal = self.terminal
        if terminal is None:
            return
        try:
            terminal.disable_mouse()
            terminal.show_cursor()
            terminal.stop()
        except OSError:
            logger.exception("Failed to restore the terminal")

    def request_render(self) -> None:
        self._scheduler.request()

    def _can_render(self) -> bool:
        return self.started and self.terminal is not None and not self._headless

    # ------------------------------------------------------------------
    # Inbound data
    # ------------------------------------------------------------------

    def append_chat_entry(self, kind: str, payload: Any, color: str | None = None) -> None:
        if kind == "system":
            self.forward_system_log(payload, color or DEFAULT_SYSTEM_COLOR)
        elif kind == "segments":
            self.log_chat_message(payload, color)
        else:
            logger.warning("Ignoring chat entry of unknown kind %r", kind)

    def log_chat_message(self, payload: Any, color: str | None = None) -> None:
        """Queue a chat line given as text or as a sequence of segments."""
        if not payload:
            return
        if isinstance(payload, str):
            segments = [create_segment(payload, color=color)]
        elif isinstance(payload, (list, tuple)):
            segments = [seg for seg in (_to_segment(item) for item in payload) if seg is not None]
        else:
            return
        if segments:
            self._queue_entry(ChatEntry(kind="segments", segments=segments))

    def forward_system_log(self, message: Any, color: str = DEFAULT_SYSTEM_COLOR) -> None:
        text = "" if message is None else str(message)
        self._queue_entry(ChatEntry(kind="system", text=text, color=color or DEFAULT_SYSTEM_COLOR))

    def replace_chat_log(self, entries: Iterable[ChatEntry]) -> None:
        """Swap in another chat history (e.g. after switching instances)."""
        self.state.entries.clear()
        for entry in entries:
            if isinstance(entry, ChatEntry):
                self.state.entry_counter += 1
                entry.id = self.state.entry_counter
                self.state.entries.append(entry)
        self.state.scroll["chat"].reset()
        self.request_render()

    def set_status_lines(self, lines: Sequence[str] | None) -> None:
        if isinstance(lines, (list, tuple)):
            self.state.status_lines = ["" if line is None else str(line) for line in lines]
        else:
            self.state.status_lines = []
        self.request_render()

    def set_server_info(
        self,
        host: Any = None,
        online_time_ms: Any = None,
        players: Any = None,
        bot_username: Any = None,
    ) -> None:
        """Partially update the server snapshot; invalid values are ignored."""
        server = self.state.server
        if isinstance(host, str):
            server.host = host
        if (
            isinstance(online_time_ms, (int, float))
            and not isinstance(online_time_ms, bool)
            and math.isfinite(online_time_ms)
            and online_time_ms >= 0
        ):
            server.online_time_ms = online_time_ms
        if isinstance(players, (list, tuple)):
            server.players = [str(p) for p in players[: self.config.max_players]]
        if isinstance(bot_username, str):
            server.bot_username = bot_username
        self.request_render()

    def apply_theme(self, panel_config: Mapping[str, Any] | None) -> None:
        self.state.themes = build_panel_themes(panel_config)
        self.request_render()

    def _queue_entry(self, entry: ChatEntry) -> None:
        self.state.entry_counter += 1
        entry.id = self.state.entry_counter
        if not self.state.ready:
            self.state.pending_entries.append(entry)
            if entry.kind == "system":
                logger.info("%s%s", SYSTEM_PREFIX, entry.text)
            return
        if self._headless and entry.kind == "system":
            logger.info("%s%s", SYSTEM_PREFIX, entry.text)
        self._append_entry(entry)
        self.request_render()

    def _append_entry(self, entry: ChatEntry) -> None:
        # deque(maxlen) drops the oldest entry past the limit
        self.state.entries.append(entry)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def feed_input(self, data: str) -> None:
        """Raw terminal text in; key and mouse events come out."""
        if self._stopped:
            return
        self._input.feed(data)

    def handle_key(self, event: KeyEvent) -> None:
        """Dispatch one key: interrupt, modal toggle, modal, navigation, editing."""
        if self._stopped:
            return
        state = self.state

        if event.matches("ctrl+c"):
            self.stop()
            if self.sink is not None:
                self._safe_invoke(self.sink.on_interrupt)
            return

        if event.key_id in MODAL_TOGGLE_KEYS and self.modal is not None:
            self.modal.toggle()
            self.request_render()
            return

        if self.modal is not None and self.modal.visible:
            if self.modal.handle_key(event):
                self.request_render()
                return

        key_id = event.key_id
        if key_id == "up":
            self.scroll_panel(state.focused_panel, 1)
        elif key_id == "down":
            self.scroll_panel(state.focused_panel, -1)
        elif key_id == "pageUp":
            self.scroll_panel(state.focused_panel, self.config.chat_scroll_jump)
        elif key_id == "pageDown":
            self.scroll_panel(state.focused_panel, -self.config.chat_scroll_jump)
        elif key_id == "tab":
            self.cycle_focus()
        elif key_id == "shift+tab":
            self.cycle_focus(reverse=True)
        elif key_id == "enter":
            self.submit_input()
        elif key_id in ("backspace", "delete"):
            if state.input_buffer:
                clusters = list(iter_graphemes(state.input_buffer))
                state.input_buffer = "".join(clusters[:-1])
                self.request_render()
        elif event.text and not event.ctrl and not event.meta:
            state.input_buffer += event.text.replace("\r", "").replace("\n", " ")
            self.request_render()

    def handle_mouse(self, event: MouseEvent) -> None:
        if self._stopped:
            return
        if event.is_wheel:
            if event.release:
                return
            panel = self.panel_at(event.x, event.y)
            delta = event.wheel_delta * self.config.mouse_scroll_step
            if panel is not None and delta:
                self.scroll_panel(panel, delta)
            return
        if event.release or event.is_drag:
            return
        if event.button in (0, 1, 2):
            panel = self.panel_at(event.x, event.y)
            if panel is not None:
                self.focus_panel(panel)

    def panel_at(self, x: int, y: int) -> str | None:
        layout = self.state.layout
        if layout is None:
            return None
        for name in FOCUSABLE_PANELS:
            if point_in_region(x, y, layout.get(name)):
                return name
        return None

    def focus_panel(self, panel: str) -> None:
        if panel not in self.state.scroll or panel == self.state.focused_panel:
            return
        self.state.focused_panel = panel
        self.request_render()

    def cycle_focus(self, reverse: bool = False) -> None:
        order = FOCUSABLE_PANELS
        current = order.index(self.state.focused_panel) if self.state.focused_panel in order else 0
        step = -1 if reverse else 1
        self.focus_panel(order[(current + step) % len(order)])

    def scroll_panel(self, panel: str, delta: int) -> None:
        state = self.state.scroll.get(panel)
        if state is not None and state.adjust(delta):
            self.request_render()

    def submit_input(self) -> None:
        raw = self.state.input_buffer
        self.state.input_buffer = ""
        self.request_render()
        line = raw.strip()
        if not line or self.sink is None:
            return
        self._safe_invoke(self.sink.on_submit, line)

    def _safe_invoke(self, fn: Callable[..., Any], *args: Any) -> None:
        try:
            result = fn(*args)
        except Exception:
            logger.exception("UI callback failed")
            return
        if inspect.isawaitable(result):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.warning("No running event loop; dropping awaitable from UI callback")
                if inspect.iscoroutine(result):
                    result.close()
                return
            task = asyncio.ensure_future(result, loop=loop)
            task.add_done_callback(_log_task_error)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> None:
        """One full render pass; writes only the changed rows."""
        terminal = self.terminal
        if terminal is None:
            return
        state = self.state
        width = max(2, terminal.columns or 80)
        height = max(2, terminal.rows or 24)
        layout = compute_layout(width, height)
        state.layout = layout
        themes = state.themes

        log_lines = self.build_chat_lines(layout.chat.inner_width)
        visible_chat = prepare_panel_lines(
            state.scroll["chat"], log_lines, max(1, layout.chat.inner_height), align_bottom=True
        )
        status_lines = self.build_status_lines(layout.status.inner_width)
        visible_status = prepare_panel_lines(state.scroll["status"], status_lines, layout.status.inner_height)
        server_lines = self.build_server_lines(layout.server.inner_width, themes["server"])
        visible_server = prepare_panel_lines(state.scroll["server"], server_lines, layout.server.inner_height)

        if self._buffer is None:
            self._buffer = ScreenBuffer(width, height)
        elif self._buffer.width != width or self._buffer.height != height:
            self._buffer.resize(width, height)
        buffer = self._buffer
        buffer.clear()

        gradient = self.gradient
        context = RenderContext(
            border_attr=lambda x, y, focused: gradient.border_attr(x, y, width, height, bold=focused),
            title_attr=lambda x, y, style: gradient.title_attr(x, y, width, height, style),
        )
        focused = state.focused_panel
        render_chat_panel(buffer, layout.chat, visible_chat, focused == "chat", context, themes["chat"])
        render_status_panel(buffer, layout.status, visible_status, focused == "status", context, themes["status"])
        draw_panel_divider(buffer, layout.status, layout.server, context)
        render_server_panel(buffer, layout.server, visible_server, focused == "server", context, themes["server"])
        render_input_panel(buffer, layout.input, state.input_buffer, context, themes["input"])

        if self.modal is not None and self.modal.visible:
            self.modal.render(buffer, layout)

        output = buffer.draw()
        if output:
            terminal.write(output)

    def build_chat_lines(self, width: int) -> list[PanelLine | None]:
        if width <= 0:
            return []
        lines: list[PanelLine | None] = []
        for entry in self.state.entries:
            if entry.kind == "segments":
                for wrapped in wrap_segments(entry.segments, width):
                    lines.append(PanelLine(segments=tuple(wrapped)))
                continue
            if entry.kind == "system":
                color = entry.color or DEFAULT_SYSTEM_COLOR
                text = SYSTEM_PREFIX + entry.text
            else:
                color, text = None, entry.text
            for chunk in wrap_text(text, width):
                lines.append(PanelLine(text=chunk, color=color))
        return lines or [None]

    def build_status_lines(self, width: int) -> list[str]:
        if width <= 0:
            return []
        lines: list[str] = []
        for line in self.state.status_lines:
            lines.extend(wrap_text(line or "", width))
        return lines or [""]

    def build_server_lines(self, width: int, theme: PanelTheme) -> list[PanelLine]:
        server = self.state.server
        uptime = format_duration(server.online_time_ms) if server.online_time_ms > 0 else "N/A"
        players = [p for p in server.players if p]
        lines = [
            PanelLine(text=f"IP: {server.host or 'N/A'}"),
            PanelLine(text=f"Online: {uptime}"),
            PanelLine(text=f"Players: {len(players)}"),
        ]
        if not players:
            lines.append(PanelLine(text="No players online."))
        else:
            lines.append(PanelLine(text="Players online:"))
            lines.extend(self.build_player_rows(players, width, theme))
        return lines

    def build_player_rows(self, players: Sequence[str], width: int, theme: PanelTheme) -> list[PanelLine]:
        """Player names in one column, or two when the panel is wide enough."""
        if width <= 0:
            return []
        gap = 2 if width >= 30 else 1
        if width < MIN_PLAYER_COLUMN_WIDTH * 2 + gap:
            return [
                PanelLine(segments=tuple(self._player_cell(name, idx, theme)))
                for idx, name in enumerate(players)
            ]
        column_width = max(MIN_PLAYER_COLUMN_WIDTH, (width - gap) // 2)
        rows: list[PanelLine] = []
        for i in range(0, len(players), 2):
            row: list[Segment] = []
            _append_column(row, self._player_cell(players[i], i, theme), column_width)
            if i + 1 < len(players):
                row.append(create_segment(" " * gap))
                _append_column(row, self._player_cell(players[i + 1], i + 1, theme), column_width)
            rows.append(PanelLine(segments=tuple(row)))
        return rows

    def _player_cell(self, name: str, idx: int, theme: PanelTheme) -> list[Segment]:
        display = name or "Unknown"
        cell = [create_segment(PLAYER_BULLET, color=PLAYER_BULLET_COLOR)]
        bot = self.state.server.bot_username
        if bot and display.lower() == bot.lower():
            cell.extend(self.gradient.rainbowify(display, idx))
        else:
            cell.append(create_segment(display, Style(color=theme.text_color or "#ffffff")))
        return cell


def _append_column(target: list[Segment], cell: list[Segment], width: int) -> None:
    copied, used = copy_segments_within_width(cell, width)
    target.extend(copied)
    if width - used > 0:
        target.append(create_segment(" " * (width - used)))


def _log_task_error(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("UI callback task failed", exc_info=exc)
