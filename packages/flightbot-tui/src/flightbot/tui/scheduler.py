"""Render coalescing and the animation tick."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class RenderScheduler:
    """Coalesces render requests into one pass per event-loop tick.

    ``render`` performs a full render pass; ``can_render`` is consulted
    right before each pass and may veto it (for example while the UI is
    stopped or has no terminal).
    """

    def __init__(
        self,
        render: Callable[[], None],
        can_render: Callable[[], bool] | None = None,
    ) -> None:
        self._render = render
        self._can_render = can_render or (lambda: True)
        self._render_requested: bool = False
        self._render_handle: asyncio.Handle | None = None
        self._animation_handle: asyncio.TimerHandle | None = None
        self._animation_interval: float = 0.0
        self._stopped: bool = False

    @property
    def pending(self) -> bool:
        return self._render_requested

    @property
    def animating(self) -> bool:
        return self._animation_handle is not None

    def request(self) -> None:
        """Schedule a render on the next event-loop tick.

        Multiple calls before the render runs coalesce into one pass.
        Without a running loop the render happens synchronously.
        """
        if self._stopped or self._render_requested:
            return
        self._render_requested = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._do_render_tick()
            return
        self._render_handle = loop.call_soon(self._do_render_tick)

    def _do_render_tick(self) -> None:
        self._render_requested = False
        self._render_handle = None
        if self._stopped or not self._can_render():
            return
        try:
            self._render()
        except Exception:
            logger.exception("Render pass failed")

    # -- animation ---------------------------------------------------------

    def start_animation(self, interval: float) -> bool:
        """Request a render every *interval* seconds until :meth:`stop`.

        Returns ``False`` when no event loop is running.
        """
        if self._stopped or interval <= 0:
            return False
        self._cancel_animation()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; animation disabled")
            return False
        self._animation_interval = interval
        self._animation_handle = loop.call_later(interval, self._on_animation_tick)
        return True

    def _on_animation_tick(self) -> None:
        self._animation_handle = None
        if self._stopped:
            return
        self.request()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._animation_handle = loop.call_later(self._animation_interval, self._on_animation_tick)

    def _cancel_animation(self) -> None:
        if self._animation_handle is not None:
            self._animation_handle.cancel()
            self._animation_handle = None

    def stop(self) -> None:
        """Cancel the queued render and the animation timer.  Idempotent."""
        if self._stopped:
            return
        self._stopped = True
        self._cancel_animation()
        if self._render_handle is not None:
            self._render_handle.cancel()
            self._render_handle = None
        self._render_requested = False
