"""Instance manager modal.

A small state machine drawn over the whole screen while visible::

    hidden -> list <-> {add_instance, confirm_delete, confirm_stop} -> list -> hidden

While visible it consumes every keystroke.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from flightbot.tui.colors import Attr, Style, build_attr, create_segment
from flightbot.tui.interfaces import InstanceInfo, ModalHost
from flightbot.tui.keys import KeyEvent
from flightbot.tui.layout import Layout, Region
from flightbot.tui.panels.common import RenderContext, draw_box, fill_region, write_text
from flightbot.tui.panels.themes import ROUNDED_BORDER, PanelTheme
from flightbot.tui.screen_buffer import ScreenBuffer, clamp
from flightbot.tui.utils import grapheme_width, iter_graphemes, take_by_width, visible_width

logger = logging.getLogger(__name__)

MODAL_MIN_WIDTH = 45
MODAL_MAX_WIDTH = 65
MODAL_PADDING = 2
MODAL_TITLE = " Instance Manager "
BACKDROP_CHAR = "░"
ADD_NEW_LABEL = "+ Add New Instance"

DEFAULT_HOST = "0b0t.org"
DEFAULT_USERNAME = "FlightBot"

ADD_FIELDS = ("name", "host", "username")
FIELD_LABELS = {"name": "Name:", "host": "Host:", "username": "Username:"}
FIELD_PLACEHOLDERS = {"name": "Instance name", "host": DEFAULT_HOST, "username": "BotUsername"}

LIST_HELP = "↑↓:Nav Enter/S:Start/Stop A:Active Del:Remove"
ADD_HELP = "Tab: Next  Enter: Confirm  Esc: Cancel"
CONFIRM_HELP = "Y: Yes  N: No  Esc: Cancel"

# Palette
MODAL_BG = "#1a1b26"
ACCENT = "#7aa2f7"
TITLE_COLOR = "#bb9af7"
MUTED = "#565f89"
TEXT = "#a9b1d6"
TEXT_BRIGHT = "#c0caf5"
GOOD = "#9ece6a"
ACTION = "#73daca"
DANGER = "#f7768e"
FIELD_BG = "#24283b"
FIELD_BG_ACTIVE = "#3d59a1"


class ModalMode(Enum):
    HIDDEN = "hidden"
    LIST = "list"
    ADD_INSTANCE = "add_instance"
    CONFIRM_DELETE = "confirm_delete"
    CONFIRM_STOP = "confirm_stop"


@dataclass(frozen=True)
class MenuItem:
    index: int
    instance: InstanceInfo | None = None
    running: bool = False
    active: bool = False

    @property
    def is_add_action(self) -> bool:
        return self.instance is None


def _attr(color: str, bold: bool = False, background: str = MODAL_BG) -> Attr:
    return build_attr(Style(color=color, bg_color=background, bold=bold))


def tail_by_width(text: str, max_width: int) -> str:
    """The longest suffix of *text* that fits in *max_width* columns."""
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text
    kept: list[str] = []
    used = 0
    for g in reversed(list(iter_graphemes(text))):
        w = grapheme_width(g)
        if used + w > max_width:
            break
        kept.append(g)
        used += w
    return "".join(reversed(kept))


class InstanceModal:
    """Keyboard-driven instance list with add and confirm sub-screens.

    *on_notice* receives ``(message, color)`` for lines worth showing in
    the chat log (instance created, active instance changed).
    """

    def __init__(
        self,
        host: ModalHost,
        on_notice: Callable[[str, str], None] | None = None,
    ) -> None:
        self.host = host
        self._on_notice = on_notice
        self.mode = ModalMode.HIDDEN
        self.selected_index = 0
        self.add_field = "name"
        self.field_buffer = ""
        self.new_instance: dict[str, str] = {}
        self.action_target_id: str | None = None
        self._reset()

    # -- visibility --------------------------------------------------------

    @property
    def visible(self) -> bool:
        return self.mode is not ModalMode.HIDDEN

    def show(self) -> None:
        self._reset()
        self.mode = ModalMode.LIST

    def hide(self) -> None:
        self._reset()
        self.mode = ModalMode.HIDDEN

    def toggle(self) -> None:
        if self.visible:
            self.hide()
        else:
            self.show()

    def _reset(self) -> None:
        self.selected_index = 0
        self.add_field = "name"
        self.field_buffer = ""
        self.new_instance = {key: "" for key in ADD_FIELDS}
        self.action_target_id = None

    # -- menu --------------------------------------------------------------

    def menu_items(self) -> list[MenuItem]:
        instances = list(self._host_call(self.host.list_instances, default=[]) or [])
        active_id = self._host_call(self.host.active_instance_id)
        items = [
            MenuItem(
                index=idx,
                instance=inst,
                running=bool(self._host_call(self.host.is_running, inst.id, default=False)),
                active=inst.id == active_id,
            )
            for idx, inst in enumerate(instances)
        ]
        items.append(MenuItem(index=len(items)))
        return items

    def _selected_item(self) -> MenuItem | None:
        items = self.menu_items()
        if 0 <= self.selected_index < len(items):
            return items[self.selected_index]
        return None

    # -- key handling ------------------------------------------------------

    def handle_key(self, event: KeyEvent) -> bool:
        """Process one key.  Returns ``True`` whenever the modal is visible."""
        if not self.visible:
            return False
        if self.mode is ModalMode.ADD_INSTANCE:
            self._handle_add_key(event)
        elif self.mode in (ModalMode.CONFIRM_DELETE, ModalMode.CONFIRM_STOP):
            self._handle_confirm_key(event)
        else:
            self._handle_list_key(event)
        return True

    def _handle_list_key(self, event: KeyEvent) -> None:
        name = event.name
        if name == "escape":
            self.hide()
        elif name == "up":
            self.selected_index = max(0, self.selected_index - 1)
        elif name == "down":
            self.selected_index = min(len(self.menu_items()) - 1, self.selected_index + 1)
        elif name == "enter":
            self._activate_selected()
        elif name == "delete":
            self._initiate_delete()
        elif event.ctrl or event.meta:
            return
        elif event.text in ("s", "S"):
            self._toggle_running()
        elif event.text in ("a", "A"):
            self._set_active()
        elif len(event.text) == 1 and event.text in "123456789":
            idx = int(event.text) - 1
            if idx < len(self.menu_items()):
                self.selected_index = idx

    def _handle_add_key(self, event: KeyEvent) -> None:
        name = event.name
        if name == "escape":
            self.mode = ModalMode.LIST
            self.field_buffer = ""
        elif name == "enter":
            self._advance_field()
        elif name in ("backspace", "delete"):
            clusters = list(iter_graphemes(self.field_buffer))
            self.field_buffer = "".join(clusters[:-1])
        elif name == "tab":
            self._cycle_field(reverse=event.shift)
        elif event.text and not event.ctrl and not event.meta:
            self.field_buffer += event.text.replace("\n", "")

    def _handle_confirm_key(self, event: KeyEvent) -> None:
        if event.name == "escape" or event.text in ("n", "N"):
            self.mode = ModalMode.LIST
            self.action_target_id = None
        elif event.name == "enter" or event.text in ("y", "Y"):
            if self.mode is ModalMode.CONFIRM_DELETE:
                self._confirm_delete()
            else:
                self._confirm_stop()

    # -- list actions ------------------------------------------------------

    def _activate_selected(self) -> None:
        item = self._selected_item()
        if item is None:
            return
        if item.is_add_action:
            self._start_add_mode()
        else:
            self._toggle_running()

    def _toggle_running(self) -> None:
        item = self._selected_item()
        if item is None or item.instance is None:
            return
        if item.running:
            self.action_target_id = item.instance.id
            self.mode = ModalMode.CONFIRM_STOP
        else:
            self._host_call(self.host.start_instance, item.instance.id)

    def _set_active(self) -> None:
        item = self._selected_item()
        if item is None or item.instance is None or not item.running:
            return
        self._host_call(self.host.set_active_instance, item.instance.id)
        self._notice(f"Set active instance: {item.instance.id}", "cyan")

    def _initiate_delete(self) -> None:
        item = self._selected_item()
        if item is None or item.instance is None or item.running:
            return
        if len(self.menu_items()) - 1 <= 1:
            return
        self.action_target_id = item.instance.id
        self.mode = ModalMode.CONFIRM_DELETE

    def _confirm_stop(self) -> None:
        if self.action_target_id is not None:
            self._host_call(self.host.stop_instance, self.action_target_id)
        self.action_target_id = None
        self.mode = ModalMode.LIST

    def _confirm_delete(self) -> None:
        if self.action_target_id is not None:
            self._host_call(self.host.remove_instance, self.action_target_id)
        self.action_target_id = None
        self.mode = ModalMode.LIST
        self.selected_index = clamp(self.selected_index, 0, len(self.menu_items()) - 1)

    # -- add flow ----------------------------------------------------------

    def _start_add_mode(self) -> None:
        self.mode = ModalMode.ADD_INSTANCE
        self.add_field = "name"
        self.field_buffer = ""
        self.new_instance = {key: "" for key in ADD_FIELDS}

    def _advance_field(self) -> None:
        self.new_instance[self.add_field] = self.field_buffer
        idx = ADD_FIELDS.index(self.add_field)
        if idx == len(ADD_FIELDS) - 1:
            self._create_instance()
            return
        self.add_field = ADD_FIELDS[idx + 1]
        self.field_buffer = self.new_instance[self.add_field]

    def _cycle_field(self, reverse: bool = False) -> None:
        self.new_instance[self.add_field] = self.field_buffer
        idx = ADD_FIELDS.index(self.add_field)
        step = -1 if reverse else 1
        self.add_field = ADD_FIELDS[(idx + step) % len(ADD_FIELDS)]
        self.field_buffer = self.new_instance[self.add_field]

    def _create_instance(self) -> None:
        count = len(self.menu_items()) - 1
        name = self.new_instance["name"].strip() or f"Instance {count + 1}"
        host = self.new_instance["host"].strip() or DEFAULT_HOST
        username = self.new_instance["username"].strip() or DEFAULT_USERNAME
        created = self._host_call(self.host.create_instance, name, host, username)
        self.mode = ModalMode.LIST
        self.add_field = "name"
        self.field_buffer = ""
        self.selected_index = max(0, len(self.menu_items()) - 2)
        if created is not None:
            self._notice(f"Created new instance: {created.name}", "green")

    # -- host plumbing -----------------------------------------------------

    def _host_call(self, fn: Callable[..., object], *args: object, default: object = None) -> object:
        try:
            return fn(*args)
        except Exception:
            logger.exception("Instance host call %s failed", getattr(fn, "__name__", fn))
            return default

    def _notice(self, message: str, color: str) -> None:
        if self._on_notice is not None:
            self._on_notice(message, color)

    # -- rendering ---------------------------------------------------------

    def modal_region(self, layout: Layout) -> Region:
        term_width = layout.width
        term_height = layout.height
        if self.mode is ModalMode.ADD_INSTANCE:
            content_height = 10
        elif self.mode in (ModalMode.CONFIRM_DELETE, ModalMode.CONFIRM_STOP):
            content_height = 6
        else:
            content_height = len(self.menu_items()) + 6
        width = max(1, clamp(MODAL_MAX_WIDTH, MODAL_MIN_WIDTH, term_width - 4))
        width = min(width, term_width)
        height = max(1, min(clamp(content_height, 6, term_height - 4), term_height))
        x = (term_width - width) // 2 + 1
        y = (term_height - height) // 2 + 1
        return Region(x=x, y=y, w=width, h=height)

    def render(self, buffer: ScreenBuffer, layout: Layout) -> None:
        if not self.visible:
            return
        fill_region(
            buffer, 1, 1, layout.width, layout.height, BACKDROP_CHAR, build_attr(Style(color=MODAL_BG))
        )
        region = self.modal_region(layout)
        border_attr = _attr(ACCENT, bold=True)
        title_attr = _attr(TITLE_COLOR, bold=True)
        box = draw_box(
            buffer,
            region,
            title_segments=[create_segment(MODAL_TITLE)],
            theme=PanelTheme(body_bg=MODAL_BG),
            border=ROUNDED_BORDER,
            context=RenderContext(
                border_attr=lambda x, y, focused: border_attr,
                title_attr=lambda x, y, style: title_attr,
            ),
        )
        if box.width <= 0 or box.height <= 0:
            return
        if self.mode is ModalMode.ADD_INSTANCE:
            self._draw_add_mode(buffer, region)
        elif self.mode is ModalMode.CONFIRM_DELETE:
            self._draw_confirm(buffer, region, "Delete", TEXT_BRIGHT)
        elif self.mode is ModalMode.CONFIRM_STOP:
            self._draw_confirm(buffer, region, "Stop", DANGER)
        else:
            self._draw_list(buffer, region)

    def _draw_list(self, buffer: ScreenBuffer, region: Region) -> None:
        content_x = region.x + MODAL_PADDING
        content_width = region.w - MODAL_PADDING * 2
        row = region.y + 1
        items = self.menu_items()

        running_count = sum(1 for item in items if item.running)
        plural = "" if running_count == 1 else "s"
        count_color = GOOD if running_count > 0 else MUTED
        write_text(buffer, content_x, row, content_width, f"Running: {running_count} instance{plural}", _attr(count_color))
        row += 1
        write_text(buffer, content_x, row, content_width, LIST_HELP, _attr(MUTED))
        row += 2

        max_visible = max(0, region.h - 6)
        start = max(0, self.selected_index - max_visible // 2)
        end = min(len(items), start + max_visible)
        for i in range(start, end):
            item = items[i]
            selected = i == self.selected_index
            if item.instance is None:
                self._draw_action_item(buffer, content_x, row, content_width, selected)
            else:
                self._draw_instance_item(buffer, content_x, row, content_width, item, selected)
            row += 1

    def _draw_instance_item(
        self, buffer: ScreenBuffer, x: int, y: int, width: int, item: MenuItem, selected: bool
    ) -> None:
        assert item.instance is not None
        prefix = "→ " if selected else "  "
        number = f"{item.index + 1}. "
        if item.running:
            icon, icon_color = "●", (GOOD if item.active else ACCENT)
        else:
            icon, icon_color = "○", MUTED
        active_marker = " [ACTIVE]" if item.active else ""
        host_part = f" ({item.instance.host})"

        label_max = width - len(prefix) - len(number) - 2 - visible_width(host_part) - len(active_marker)
        label = item.instance.name
        if visible_width(label) > label_max:
            label = take_by_width(label, max(0, label_max - 1))[0] + "…"

        col = x
        end = x + width
        parts = [
            (prefix, _attr(ACCENT if selected else MUTED, bold=selected)),
            (icon + " ", _attr(icon_color, bold=item.running)),
            (number, _attr(MUTED)),
            (label, _attr(TEXT_BRIGHT if selected else TEXT, bold=selected)),
            (host_part, _attr(MUTED)),
        ]
        if item.active:
            parts.append((active_marker, _attr(GOOD, bold=True)))
        for text, attr in parts:
            if col >= end:
                break
            col += write_text(buffer, col, y, end - col, text, attr)

    def _draw_action_item(self, buffer: ScreenBuffer, x: int, y: int, width: int, selected: bool) -> None:
        prefix = "▶ " if selected else "  "
        write_text(buffer, x, y, width, prefix, _attr(ACCENT if selected else MUTED, bold=selected))
        offset = len(prefix) + 2
        write_text(
            buffer, x + offset, y, width - offset, ADD_NEW_LABEL, _attr(GOOD if selected else ACTION, bold=selected)
        )

    def _draw_add_mode(self, buffer: ScreenBuffer, region: Region) -> None:
        content_x = region.x + MODAL_PADDING
        content_width = region.w - MODAL_PADDING * 2
        row = region.y + 1
        write_text(buffer, content_x, row, content_width, "Create New Instance", _attr(TITLE_COLOR, bold=True))
        row += 2

        input_x = content_x + 12
        input_width = content_width - 14
        for key in ADD_FIELDS:
            active = key == self.add_field
            value = self.field_buffer if active else self.new_instance.get(key, "")
            write_text(buffer, content_x, row, 12, FIELD_LABELS[key], _attr(ACCENT if active else TEXT, bold=active))
            if input_width > 0:
                field_bg = FIELD_BG_ACTIVE if active else FIELD_BG
                fill_region(buffer, input_x, row, input_width, 1, " ", build_attr(Style(bg_color=field_bg)))
                shown = value or ("" if active else FIELD_PLACEHOLDERS[key])
                # Keep the tail visible while typing past the box width.
                shown = tail_by_width(shown, input_width - 1)
                value_color = TEXT_BRIGHT if active else MUTED
                used = write_text(buffer, input_x, row, input_width - 1, shown, _attr(value_color, background=field_bg))
                if active:
                    cursor_x = input_x + min(used, input_width - 1)
                    buffer.put(cursor_x, row, "█", _attr(ACCENT, bold=True, background=field_bg))
            row += 1

        row += 1
        write_text(buffer, content_x, row, content_width, ADD_HELP, _attr(MUTED))

    def _draw_confirm(self, buffer: ScreenBuffer, region: Region, verb: str, color: str) -> None:
        content_x = region.x + MODAL_PADDING
        content_width = region.w - MODAL_PADDING * 2
        name = "this instance"
        for inst in self._host_call(self.host.list_instances, default=[]) or []:
            if inst.id == self.action_target_id:
                name = inst.name
                break
        write_text(buffer, content_x, region.y + 2, content_width, f'{verb} "{name}"?', _attr(color))
        write_text(buffer, content_x, region.y + 4, content_width, CONFIRM_HELP, _attr(MUTED))
