"""Terminal input pipeline.

Raw text read from the terminal flows through three stages::

    MouseSplitter  ->  StdinBuffer  ->  decode_key
      (mouse)          (sequences)      (KeyEvent)

:class:`InputEngine` wires them together and reports decoded keys and
mouse events through two callbacks.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from flightbot.tui.keys import KeyEvent, decode_key
from flightbot.tui.mouse import MouseEvent, MouseSplitter
from flightbot.tui.stdin_buffer import StdinBuffer


class InputEngine:
    """Turns raw terminal text into :class:`KeyEvent` and :class:`MouseEvent`."""

    def __init__(
        self,
        on_key: Callable[[KeyEvent], None],
        on_mouse: Callable[[MouseEvent], None] | None = None,
        *,
        escape_timeout: float = 0.01,
    ) -> None:
        self._on_key = on_key
        self._on_mouse = on_mouse
        self._escape_timeout = escape_timeout
        self._pending_handle: asyncio.TimerHandle | None = None

        self._stdin_buffer = StdinBuffer(timeout=escape_timeout)
        self._stdin_buffer.on_data(self._emit_key)
        self._stdin_buffer.on_paste(self._emit_paste)
        self._splitter = MouseSplitter(
            on_text=self._stdin_buffer.process,
            on_mouse=self._emit_mouse,
        )

    def feed(self, chunk: str) -> None:
        """Consume one chunk of terminal input."""
        self._cancel_pending_flush()
        self._splitter.feed(chunk)
        if self._splitter.pending:
            self._schedule_pending_flush()

    def flush(self) -> None:
        """Release any held partial input as keystroke text."""
        self._cancel_pending_flush()
        held = self._splitter.flush()
        if held:
            self._stdin_buffer.process(held)
        for sequence in self._stdin_buffer.flush():
            self._emit_key(sequence)

    def reset(self) -> None:
        self._cancel_pending_flush()
        self._splitter.clear()
        self._stdin_buffer.clear()

    # -- internals ---------------------------------------------------------

    def _schedule_pending_flush(self) -> None:
        # A held ESC that is never followed by "[<" is the escape key.
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._pending_handle = loop.call_later(self._escape_timeout, self._flush_pending)

    def _cancel_pending_flush(self) -> None:
        if self._pending_handle is not None:
            self._pending_handle.cancel()
            self._pending_handle = None

    def _flush_pending(self) -> None:
        self._pending_handle = None
        self.flush()

    def _emit_key(self, sequence: str) -> None:
        self._on_key(decode_key(sequence))

    def _emit_paste(self, text: str) -> None:
        cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
        if cleaned:
            self._on_key(KeyEvent(name="", sequence=cleaned, text=cleaned))

    def _emit_mouse(self, event: MouseEvent) -> None:
        if self._on_mouse is not None:
            self._on_mouse(event)
