"""Keystroke sequence buffering.

Terminal input arrives in arbitrary chunks, so an arrow key may show up as
``ESC`` in one read and ``[A`` in the next.  :class:`StdinBuffer` hands out
one string per complete key and keeps an unfinished escape sequence until
the rest arrives or ``timeout`` seconds pass, at which point whatever is
held is emitted as-is (a lone ``ESC`` is the escape key).  Bracketed paste
bodies bypass key splitting and go to ``on_paste`` whole.
"""

from __future__ import annotations

import asyncio
from typing import Callable

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"


def sequence_length(text: str, start: int = 0) -> int | None:
    """Length of the key sequence at ``text[start]``, or None if it is cut off."""
    if text[start] != ESC:
        return 1
    rest = len(text) - start
    if rest < 2:
        return None
    kind = text[start + 1]

    if kind == "[":
        if rest < 3:
            return None
        if text[start + 2] == "M":
            # X10 mouse report carries three raw bytes after "M"
            return 6 if rest >= 6 else None
        for i in range(start + 2, len(text)):
            if "\x40" <= text[i] <= "\x7e":
                return i - start + 1
        return None

    if kind == "O":
        if rest < 3:
            return None
        if not text[start + 2].isdigit():
            return 3
        return 4 if rest >= 4 else None

    if kind in "]P_":
        bel_ok = kind == "]"
        for i in range(start + 2, len(text)):
            if bel_ok and text[i] == "\x07":
                return i - start + 1
            if text[i] == "\\" and text[i - 1] == ESC:
                return i - start + 1
        return None

    # alt+<char>
    return 2


def split_sequences(text: str) -> tuple[list[str], str]:
    """Split *text* into complete key sequences and an unfinished remainder."""
    keys: list[str] = []
    pos = 0
    while pos < len(text):
        length = sequence_length(text, pos)
        if length is None:
            return keys, text[pos:]
        keys.append(text[pos : pos + length])
        pos += length
    return keys, ""


class StdinBuffer:
    def __init__(self, *, timeout: float = 0.01) -> None:
        self.timeout = timeout
        self._pending = ""
        self._paste: str | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._on_data: Callable[[str], None] = lambda key: None
        self._on_paste: Callable[[str], None] = lambda text: None

    def on_data(self, callback: Callable[[str], None]) -> None:
        self._on_data = callback

    def on_paste(self, callback: Callable[[str], None]) -> None:
        self._on_paste = callback

    @property
    def pending(self) -> str:
        """Unfinished escape sequence waiting for more input."""
        return self._pending

    @property
    def in_paste(self) -> bool:
        return self._paste is not None

    def process(self, data: str) -> None:
        self._stop_timer()
        while data:
            if self._paste is not None:
                data = self._continue_paste(data)
                continue
            text = self._pending + data
            self._pending = ""
            marker = text.find(BRACKETED_PASTE_START)
            if marker == -1:
                self._emit_keys(text)
                break
            self._emit_keys(text[:marker])
            # anything unfinished before the marker is dropped with it
            self._pending = ""
            self._paste = ""
            data = text[marker + len(BRACKETED_PASTE_START) :]

        if self._pending:
            self._arm_timer()

    def _continue_paste(self, data: str) -> str:
        assert self._paste is not None
        body = self._paste + data
        end = body.find(BRACKETED_PASTE_END)
        if end == -1:
            self._paste = body
            return ""
        self._paste = None
        self._on_paste(body[:end])
        return body[end + len(BRACKETED_PASTE_END) :]

    def _emit_keys(self, text: str) -> None:
        keys, self._pending = split_sequences(text)
        for key in keys:
            self._on_data(key)

    def _arm_timer(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # nothing could ever finish the sequence; give it up now
            for key in self.flush():
                self._on_data(key)
            return
        self._timer = loop.call_later(self.timeout, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        for key in self.flush():
            self._on_data(key)

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def flush(self) -> list[str]:
        """Take whatever escape sequence is held, complete or not."""
        self._stop_timer()
        held, self._pending = self._pending, ""
        return [held] if held else []

    def clear(self) -> None:
        """Drop held input and any paste in progress."""
        self._stop_timer()
        self._pending = ""
        self._paste = None

    destroy = clear
