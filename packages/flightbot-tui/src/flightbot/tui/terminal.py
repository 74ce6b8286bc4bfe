"""Process terminal: raw mode, screen modes and stdin/resize plumbing.

:class:`Terminal` is what the UI controller talks to; :class:`ProcessTerminal`
implements it on top of the real ``stdin``/``stdout`` of the process.  Tests
use an in-memory implementation instead.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
import sys
import termios
import tty
from typing import IO, Callable, Protocol, runtime_checkable

from flightbot.tui.mouse import DISABLE_MOUSE_TRACKING, ENABLE_MOUSE_TRACKING

logger = logging.getLogger(__name__)

WRITE_LOG_ENV = "FLIGHTBOT_TUI_WRITE_LOG"
READ_CHUNK_SIZE = 4096
DEFAULT_COLUMNS = 80
DEFAULT_ROWS = 24

# Entered on start, undone in reverse on stop.
ENTER_SESSION = "\x1b[?1049h\x1b[?2004h"
LEAVE_SESSION = "\x1b[0m\x1b[?25h\x1b[?2004l\x1b[?1049l"

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_AND_HOME = "\x1b[2J\x1b[H"


def is_interactive(stdin: object | None = None, stdout: object | None = None) -> bool:
    """True when both streams are attached to a TTY."""
    for stream in (sys.stdin if stdin is None else stdin, sys.stdout if stdout is None else stdout):
        isatty = getattr(stream, "isatty", None)
        if not callable(isatty):
            return False
        try:
            if not isatty():
                return False
        except (OSError, ValueError):
            return False
    return True


@runtime_checkable
class Terminal(Protocol):
    """Output sink and input source the UI renders through."""

    def start(self, on_input: Callable[[str], None], on_resize: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_screen(self) -> None: ...

    def enable_mouse(self) -> None: ...

    def disable_mouse(self) -> None: ...


class ProcessTerminal:
    """The controlling terminal of this process.

    ``start`` switches stdin to raw mode, enters the alternate screen with
    bracketed paste, and starts delivering decoded stdin text to
    ``on_input`` from the running event loop.  ``on_resize`` fires on
    SIGWINCH.  ``stop`` undoes all of it and may be called repeatedly.

    When *write_log_path* (or ``$FLIGHTBOT_TUI_WRITE_LOG``) is set, every
    frame written is appended to that file as well.
    """

    def __init__(self, write_log_path: str | None = None) -> None:
        if write_log_path is None:
            write_log_path = os.environ.get(WRITE_LOG_ENV, "")
        self.write_log_path = write_log_path
        self._on_input: Callable[[str], None] | None = None
        self._on_resize: Callable[[], None] | None = None
        self._saved_mode: list | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._reading = False
        self._resize_via_loop = False
        self._prev_winch: object = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._write_log: IO[str] | None = None
        self._mouse_enabled = False
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def columns(self) -> int:
        return self._size()[0]

    @property
    def rows(self) -> int:
        return self._size()[1]

    def _size(self) -> tuple[int, int]:
        try:
            size = os.get_terminal_size(sys.stdout.fileno())
        except (ValueError, OSError):
            return DEFAULT_COLUMNS, DEFAULT_ROWS
        return size.columns or DEFAULT_COLUMNS, size.lines or DEFAULT_ROWS

    # -- session -----------------------------------------------------------

    def start(self, on_input: Callable[[str], None], on_resize: Callable[[], None]) -> None:
        if self._started:
            return
        self._on_input = on_input
        self._on_resize = on_resize
        self._enter_raw_mode()
        self._open_write_log()
        self._emit(ENTER_SESSION)
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
            logger.debug("No running event loop; stdin and resize are not watched")
        self._watch_resize()
        self._watch_stdin()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        self.disable_mouse()
        self._emit(LEAVE_SESSION)
        self._unwatch_stdin()
        self._unwatch_resize()
        self._restore_mode()
        self._close_write_log()
        self._decoder.reset()
        self._loop = None
        self._on_input = None
        self._on_resize = None

    def _enter_raw_mode(self) -> None:
        try:
            fd = sys.stdin.fileno()
            self._saved_mode = termios.tcgetattr(fd)
            tty.setraw(fd)
        except (termios.error, OSError, ValueError):
            logger.warning("stdin does not support raw mode")
            self._saved_mode = None

    def _restore_mode(self) -> None:
        if self._saved_mode is None:
            return
        try:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._saved_mode)
        except termios.error:
            logger.warning("Could not restore terminal mode")
        self._saved_mode = None

    # -- output ------------------------------------------------------------

    def write(self, data: str) -> None:
        self._emit(data)
        if self._write_log is not None:
            try:
                self._write_log.write(data)
                self._write_log.flush()
            except OSError:
                logger.warning("Write log %s failed; disabling it", self.write_log_path)
                self._close_write_log()

    def hide_cursor(self) -> None:
        self._emit(HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._emit(SHOW_CURSOR)

    def clear_screen(self) -> None:
        self._emit(CLEAR_AND_HOME)

    def enable_mouse(self) -> None:
        if not self._mouse_enabled:
            self._mouse_enabled = True
            self._emit(ENABLE_MOUSE_TRACKING)

    def disable_mouse(self) -> None:
        if self._mouse_enabled:
            self._mouse_enabled = False
            self._emit(DISABLE_MOUSE_TRACKING)

    def _emit(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            logger.debug("stdout write failed", exc_info=True)

    def _open_write_log(self) -> None:
        if not self.write_log_path:
            return
        try:
            self._write_log = open(self.write_log_path, "a", encoding="utf-8")
        except OSError:
            logger.warning("Cannot open write log %s", self.write_log_path)
            self._write_log = None

    def _close_write_log(self) -> None:
        if self._write_log is not None:
            try:
                self._write_log.close()
            except OSError:
                pass
            self._write_log = None

    # -- input -------------------------------------------------------------

    def _watch_stdin(self) -> None:
        if self._loop is None or self._reading:
            return
        self._loop.add_reader(sys.stdin.fileno(), self._read_stdin)
        self._reading = True

    def _unwatch_stdin(self) -> None:
        if not self._reading or self._loop is None:
            return
        try:
            self._loop.remove_reader(sys.stdin.fileno())
        except (RuntimeError, ValueError):
            logger.debug("stdin reader already gone")
        self._reading = False

    def _read_stdin(self) -> None:
        try:
            raw = os.read(sys.stdin.fileno(), READ_CHUNK_SIZE)
        except OSError:
            return
        # A multi-byte character split across reads stays in the decoder.
        text = self._decoder.decode(raw)
        if text and self._on_input is not None:
            self._on_input(text)

    # -- resize ------------------------------------------------------------

    def _watch_resize(self) -> None:
        if self._loop is not None:
            try:
                self._loop.add_signal_handler(signal.SIGWINCH, self._resized)
                self._resize_via_loop = True
                return
            except (NotImplementedError, RuntimeError, ValueError):
                self._resize_via_loop = False
        self._prev_winch = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, lambda signum, frame: self._resized())

    def _unwatch_resize(self) -> None:
        if self._resize_via_loop and self._loop is not None:
            self._loop.remove_signal_handler(signal.SIGWINCH)
        elif self._prev_winch is not None:
            signal.signal(signal.SIGWINCH, self._prev_winch)
        self._resize_via_loop = False
        self._prev_winch = None

    def _resized(self) -> None:
        if self._on_resize is not None:
            self._on_resize()
