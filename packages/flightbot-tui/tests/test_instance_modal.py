"""Tests for flightbot.tui.panels.instance_modal."""

from __future__ import annotations

import pytest

from flightbot.tui.interfaces import InstanceInfo, ModalHost
from flightbot.tui.keys import decode_key
from flightbot.tui.layout import compute_layout
from flightbot.tui.panels.instance_modal import (
    ADD_NEW_LABEL,
    DEFAULT_HOST,
    DEFAULT_USERNAME,
    InstanceModal,
    ModalMode,
    tail_by_width,
)
from flightbot.tui.screen_buffer import ScreenBuffer
from flightbot.tui.utils import visible_width


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeHost:
    """Records every call the modal makes."""

    def __init__(self, *names: str) -> None:
        self.instances = [InstanceInfo(id=f"i{n}", name=name) for n, name in enumerate(names, 1)]
        self.running: set[str] = set()
        self.active: str | None = None
        self.calls: list[tuple] = []

    def list_instances(self) -> list[InstanceInfo]:
        return list(self.instances)

    def is_running(self, instance_id: str) -> bool:
        return instance_id in self.running

    def active_instance_id(self) -> str | None:
        return self.active

    def start_instance(self, instance_id: str) -> None:
        self.calls.append(("start", instance_id))
        self.running.add(instance_id)

    def stop_instance(self, instance_id: str) -> None:
        self.calls.append(("stop", instance_id))
        self.running.discard(instance_id)

    def set_active_instance(self, instance_id: str) -> None:
        self.calls.append(("active", instance_id))
        self.active = instance_id

    def create_instance(self, name: str, host: str, username: str) -> InstanceInfo:
        self.calls.append(("create", name, host, username))
        info = InstanceInfo(id=f"i{len(self.instances) + 1}", name=name, host=host, username=username)
        self.instances.append(info)
        return info

    def remove_instance(self, instance_id: str) -> None:
        self.calls.append(("remove", instance_id))
        self.instances = [i for i in self.instances if i.id != instance_id]


def press(modal: InstanceModal, *sequences: str) -> None:
    for sequence in sequences:
        assert modal.handle_key(decode_key(sequence))


def type_text(modal: InstanceModal, text: str) -> None:
    press(modal, *text)


ENTER = "\r"
TAB = "\t"
SHIFT_TAB = "\x1b[Z"
ESCAPE = "\x1b"
UP = "\x1b[A"
DOWN = "\x1b[B"
DELETE = "\x1b[3~"
BACKSPACE = "\x7f"


# ---------------------------------------------------------------------------
# Visibility and navigation
# ---------------------------------------------------------------------------


class TestVisibility:
    def test_fake_host_satisfies_protocol(self) -> None:
        assert isinstance(FakeHost(), ModalHost)

    def test_hidden_modal_ignores_keys(self) -> None:
        modal = InstanceModal(FakeHost("A"))
        assert not modal.visible
        assert modal.handle_key(decode_key("x")) is False

    def test_toggle(self) -> None:
        modal = InstanceModal(FakeHost("A"))
        modal.toggle()
        assert modal.mode is ModalMode.LIST
        modal.toggle()
        assert modal.mode is ModalMode.HIDDEN

    def test_escape_hides(self) -> None:
        modal = InstanceModal(FakeHost("A"))
        modal.show()
        press(modal, ESCAPE)
        assert not modal.visible

    def test_menu_has_trailing_add_action(self) -> None:
        modal = InstanceModal(FakeHost("A", "B"))
        items = modal.menu_items()
        assert [i.instance.name for i in items if i.instance] == ["A", "B"]
        assert items[-1].is_add_action
        assert items[-1].index == 2


class TestNavigation:
    def test_up_down_clamped(self) -> None:
        modal = InstanceModal(FakeHost("A", "B"))
        modal.show()
        press(modal, UP)
        assert modal.selected_index == 0
        press(modal, DOWN, DOWN, DOWN, DOWN)
        assert modal.selected_index == 2

    def test_number_jump(self) -> None:
        modal = InstanceModal(FakeHost("A", "B"))
        modal.show()
        press(modal, "3")
        assert modal.selected_index == 2
        press(modal, "9")
        assert modal.selected_index == 2
        press(modal, "1")
        assert modal.selected_index == 0


# ---------------------------------------------------------------------------
# Add flow
# ---------------------------------------------------------------------------


class TestAddInstance:
    def test_full_flow_creates_one_instance(self) -> None:
        host = FakeHost("A")
        notices: list[tuple[str, str]] = []
        modal = InstanceModal(host, on_notice=lambda msg, color: notices.append((msg, color)))
        modal.show()
        press(modal, DOWN, ENTER)
        assert modal.mode is ModalMode.ADD_INSTANCE

        type_text(modal, "Foo")
        press(modal, TAB)
        type_text(modal, "x.org")
        press(modal, TAB)
        type_text(modal, "Bot")
        press(modal, ENTER)

        assert host.calls == [("create", "Foo", "x.org", "Bot")]
        assert modal.mode is ModalMode.LIST
        assert notices == [("Created new instance: Foo", "green")]
        assert modal.selected_index == 1

    def test_enter_advances_fields(self) -> None:
        host = FakeHost("A")
        modal = InstanceModal(host)
        modal.show()
        press(modal, "2", ENTER)
        type_text(modal, "Foo")
        press(modal, ENTER)
        assert modal.add_field == "host"
        press(modal, ENTER)
        assert modal.add_field == "username"
        press(modal, ENTER)
        assert host.calls == [("create", "Foo", DEFAULT_HOST, DEFAULT_USERNAME)]

    def test_blank_name_gets_numbered_default(self) -> None:
        host = FakeHost("A")
        modal = InstanceModal(host)
        modal.show()
        press(modal, "2", ENTER, ENTER, ENTER, ENTER)
        assert host.calls == [("create", "Instance 2", DEFAULT_HOST, DEFAULT_USERNAME)]

    def test_shift_tab_cycles_backwards_and_keeps_values(self) -> None:
        modal = InstanceModal(FakeHost())
        modal.show()
        press(modal, ENTER)
        type_text(modal, "Foo")
        press(modal, SHIFT_TAB)
        assert modal.add_field == "username"
        press(modal, TAB)
        assert modal.add_field == "name"
        assert modal.field_buffer == "Foo"

    def test_backspace_removes_whole_cluster(self) -> None:
        modal = InstanceModal(FakeHost("A"))
        modal.show()
        press(modal, "2", ENTER)
        modal.field_buffer = "Cafe\u0301"
        press(modal, BACKSPACE)
        assert modal.field_buffer == "Caf"

    @pytest.mark.parametrize(
        ("text", "width", "expected"),
        [
            ("abc", 5, "abc"),
            ("abcdef", 3, "def"),
            ("\u4e2d\u4e2d\u4e2dab", 5, "\u4e2dab"),
            ("\u4e2d\u4e2dab", 3, "ab"),
            ("abc", 0, ""),
        ],
    )
    def test_tail_by_width(self, text: str, width: int, expected: str) -> None:
        assert tail_by_width(text, width) == expected

    def test_backspace_and_escape(self) -> None:
        host = FakeHost("A")
        modal = InstanceModal(host)
        modal.show()
        press(modal, "2", ENTER)
        type_text(modal, "Fooo")
        press(modal, BACKSPACE)
        assert modal.field_buffer == "Foo"
        press(modal, ESCAPE)
        assert modal.mode is ModalMode.LIST
        assert host.calls == []


# ---------------------------------------------------------------------------
# Start / stop / delete / active
# ---------------------------------------------------------------------------


class TestListActions:
    def test_enter_starts_stopped_instance(self) -> None:
        host = FakeHost("A")
        modal = InstanceModal(host)
        modal.show()
        press(modal, ENTER)
        assert host.calls == [("start", "i1")]

    def test_stopping_requires_confirmation(self) -> None:
        host = FakeHost("A")
        host.running.add("i1")
        modal = InstanceModal(host)
        modal.show()
        press(modal, "s")
        assert modal.mode is ModalMode.CONFIRM_STOP
        press(modal, "n")
        assert modal.mode is ModalMode.LIST
        assert host.calls == []
        press(modal, "s", "y")
        assert host.calls == [("stop", "i1")]
        assert modal.mode is ModalMode.LIST

    def test_set_active_only_when_running(self) -> None:
        host = FakeHost("A")
        notices: list[tuple[str, str]] = []
        modal = InstanceModal(host, on_notice=lambda msg, color: notices.append((msg, color)))
        modal.show()
        press(modal, "a")
        assert host.calls == []
        host.running.add("i1")
        press(modal, "A")
        assert host.calls == [("active", "i1")]
        assert notices == [("Set active instance: i1", "cyan")]

    def test_delete_with_confirmation(self) -> None:
        host = FakeHost("A", "B")
        modal = InstanceModal(host)
        modal.show()
        press(modal, DOWN, DELETE)
        assert modal.mode is ModalMode.CONFIRM_DELETE
        press(modal, ENTER)
        assert host.calls == [("remove", "i2")]
        assert modal.mode is ModalMode.LIST
        assert modal.selected_index == 1

    def test_delete_last_instance_refused(self) -> None:
        host = FakeHost("A")
        modal = InstanceModal(host)
        modal.show()
        press(modal, DELETE)
        assert modal.mode is ModalMode.LIST

    def test_delete_running_instance_refused(self) -> None:
        host = FakeHost("A", "B")
        host.running.add("i1")
        modal = InstanceModal(host)
        modal.show()
        press(modal, DELETE)
        assert modal.mode is ModalMode.LIST

    def test_escape_cancels_confirm(self) -> None:
        host = FakeHost("A", "B")
        modal = InstanceModal(host)
        modal.show()
        press(modal, DELETE, ESCAPE)
        assert modal.mode is ModalMode.LIST
        assert modal.action_target_id is None
        assert host.calls == []

    def test_failing_host_is_logged_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        host = FakeHost("A")

        def broken(instance_id: str) -> None:
            raise RuntimeError("boom")

        host.start_instance = broken  # type: ignore[method-assign]
        modal = InstanceModal(host)
        modal.show()
        press(modal, ENTER)
        assert "Instance host call" in caplog.text


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestModalRender:
    def _render(self, modal: InstanceModal) -> ScreenBuffer:
        layout = compute_layout(80, 24)
        buf = ScreenBuffer(80, 24)
        modal.render(buf, layout)
        return buf

    def _screen(self, buf: ScreenBuffer) -> str:
        return "\n".join(buf.row_text(y) for y in range(1, buf.height + 1))

    def test_hidden_draws_nothing(self) -> None:
        buf = self._render(InstanceModal(FakeHost("A")))
        assert self._screen(buf).strip() == ""

    def test_list_screen(self) -> None:
        modal = InstanceModal(FakeHost("Alpha"))
        modal.show()
        buf = self._render(modal)
        screen = self._screen(buf)
        assert "Instance Manager" in screen
        assert "Alpha" in screen
        assert ADD_NEW_LABEL in screen
        assert "Running: 0 instances" in screen
        assert buf.row_text(1).startswith("░")

    def test_region_is_centered(self) -> None:
        modal = InstanceModal(FakeHost("Alpha"))
        modal.show()
        region = modal.modal_region(compute_layout(80, 24))
        assert region.w == 65
        assert region.x == 8

    def test_add_screen(self) -> None:
        modal = InstanceModal(FakeHost("Alpha"))
        modal.show()
        press(modal, "2", ENTER)
        type_text(modal, "Foo")
        screen = self._screen(self._render(modal))
        assert "Create New Instance" in screen
        assert "Foo█" in screen
        assert DEFAULT_HOST in screen

    def test_long_wide_value_keeps_tail_within_field(self) -> None:
        modal = InstanceModal(FakeHost("Alpha"))
        modal.show()
        press(modal, "2", ENTER)
        modal.field_buffer = "\u4e2d" * 40 + "end"
        buf = self._render(modal)
        region = modal.modal_region(compute_layout(80, 24))
        row = next(y for y in range(1, 25) if "end█" in buf.row_text(y))
        assert visible_width(buf.row_text(row)) == 80
        assert buf.cell_at(region.right, row).char != "█"

    def test_confirm_screen_names_target(self) -> None:
        host = FakeHost("Alpha", "Beta")
        modal = InstanceModal(host)
        modal.show()
        press(modal, DELETE)
        assert 'Delete "Alpha"?' in self._screen(self._render(modal))
