"""SGR mouse report extraction.

Terminal input interleaves keystrokes with SGR mouse reports of the form
``ESC [ < code ; x ; y (M|m)``.  :class:`MouseSplitter` separates the two
with a small state machine.  A report cut in half by a read boundary is held
back until the next chunk arrives, so splitting a report at any position
yields the same single event as delivering it whole.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

ESC = "\x1b"
MOUSE_SEQUENCE_PREFIX = "\x1b[<"

ENABLE_MOUSE_TRACKING = "\x1b[?1000h\x1b[?1002h\x1b[?1006h"
DISABLE_MOUSE_TRACKING = "\x1b[?1000l\x1b[?1002l\x1b[?1006l"

MAX_PARAM_DIGITS = 5
# ESC [ < ddddd ; ddddd ; ddddd -- the longest undecided prefix.
MAX_PENDING_LENGTH = len(MOUSE_SEQUENCE_PREFIX) + 3 * MAX_PARAM_DIGITS + 2

WHEEL_UP = 64
WHEEL_DOWN = 65


@dataclass(frozen=True)
class MouseEvent:
    """A decoded SGR mouse report."""

    code: int
    x: int
    y: int
    release: bool = False

    @property
    def is_wheel(self) -> bool:
        return self.code >= 64

    @property
    def is_drag(self) -> bool:
        return (self.code & 32) == 32

    @property
    def button(self) -> int:
        return self.code & 3

    @property
    def wheel_delta(self) -> int:
        """+1 for wheel up, -1 for wheel down, 0 otherwise."""
        if self.code == WHEEL_UP:
            return 1
        if self.code == WHEEL_DOWN:
            return -1
        return 0


class _State(Enum):
    IDLE = "idle"
    ESC = "esc"
    CSI = "csi"
    PARAMS = "params"


def parse_mouse_sequence(sequence: str) -> MouseEvent | None:
    """Decode a complete SGR mouse report, or return ``None``."""
    if not sequence.startswith(MOUSE_SEQUENCE_PREFIX) or len(sequence) < 9:
        return None
    final = sequence[-1]
    if final not in ("M", "m"):
        return None
    parts = sequence[len(MOUSE_SEQUENCE_PREFIX) : -1].split(";")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    code, x, y = (int(p) for p in parts)
    return MouseEvent(code=code, x=x, y=y, release=final == "m")


class MouseSplitter:
    """Separates SGR mouse reports from keystroke text across reads.

    ``on_text`` receives keystroke text in arrival order; ``on_mouse``
    receives each decoded :class:`MouseEvent`.  Only an undecided mouse
    prefix is ever held between calls to :meth:`feed`, and it never exceeds
    :data:`MAX_PENDING_LENGTH` characters.
    """

    def __init__(
        self,
        on_text: Callable[[str], None] | None = None,
        on_mouse: Callable[[MouseEvent], None] | None = None,
    ) -> None:
        self._on_text = on_text
        self._on_mouse = on_mouse
        self._pending: str = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: str) -> None:
        """Consume *chunk*, emitting text and mouse events."""
        if not chunk:
            return
        data = self._pending + chunk
        self._pending = ""

        text: list[str] = []
        candidate_start = -1
        state = _State.IDLE
        fields = 0
        digits = 0
        i = 0
        n = len(data)

        while i < n:
            ch = data[i]
            if state is _State.IDLE:
                if ch == ESC:
                    candidate_start = i
                    state = _State.ESC
                else:
                    text.append(ch)
                i += 1
                continue

            if state is _State.ESC:
                accepted = ch == "["
                next_state = _State.CSI
            elif state is _State.CSI:
                accepted = ch == "<"
                next_state = _State.PARAMS
                fields, digits = 0, 0
            else:
                accepted = True
                next_state = _State.PARAMS
                if ch.isdigit() and ch.isascii():
                    digits += 1
                    accepted = digits <= MAX_PARAM_DIGITS
                elif ch == ";" and digits > 0 and fields < 2:
                    fields += 1
                    digits = 0
                elif ch in ("M", "m") and digits > 0 and fields == 2:
                    self._emit_text(text)
                    event = parse_mouse_sequence(data[candidate_start : i + 1])
                    if event is not None and self._on_mouse is not None:
                        self._on_mouse(event)
                    state = _State.IDLE
                    candidate_start = -1
                    i += 1
                    continue
                else:
                    accepted = False

            if accepted:
                state = next_state
                i += 1
                continue

            # Not a mouse report: everything since the ESC is keystroke text.
            # A rejected ESC restarts the scan instead of being swallowed.
            if ch == ESC:
                text.append(data[candidate_start:i])
                candidate_start = i
                state = _State.ESC
            else:
                text.append(data[candidate_start : i + 1])
                candidate_start = -1
                state = _State.IDLE
            i += 1

        if state is not _State.IDLE:
            held = data[candidate_start:]
            if len(held) > MAX_PENDING_LENGTH:
                text.append(held[: len(held) - MAX_PENDING_LENGTH])
                held = held[-MAX_PENDING_LENGTH:]
            self._pending = held
        self._emit_text(text)

    def flush(self) -> str:
        """Drop and return any held partial sequence."""
        held = self._pending
        self._pending = ""
        return held

    def clear(self) -> None:
        self._pending = ""

    def _emit_text(self, parts: list[str]) -> None:
        if not parts:
            return
        joined = "".join(parts)
        parts.clear()
        if joined and self._on_text is not None:
            self._on_text(joined)
