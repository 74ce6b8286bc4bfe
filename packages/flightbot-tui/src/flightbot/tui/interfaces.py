"""Capability interfaces between the UI and the rest of the application."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, Sequence, Union, runtime_checkable


@dataclass(frozen=True)
class InstanceInfo:
    """One bot instance as listed in the instance manager."""

    id: str
    name: str
    host: str = "N/A"
    username: str = ""


@runtime_checkable
class InputSink(Protocol):
    """Receives what the user typed."""

    def on_submit(self, line: str) -> Union[None, Awaitable[Any]]: ...

    def on_interrupt(self) -> None: ...


@runtime_checkable
class RenderTarget(Protocol):
    """Anything that can be asked to repaint."""

    def request_render(self) -> None: ...


@runtime_checkable
class ModalHost(Protocol):
    """Instance bookkeeping the instance-manager modal reads and drives."""

    def list_instances(self) -> Sequence[InstanceInfo]: ...

    def is_running(self, instance_id: str) -> bool: ...

    def active_instance_id(self) -> str | None: ...

    def start_instance(self, instance_id: str) -> None: ...

    def stop_instance(self, instance_id: str) -> None: ...

    def set_active_instance(self, instance_id: str) -> None: ...

    def create_instance(self, name: str, host: str, username: str) -> InstanceInfo | None: ...

    def remove_instance(self, instance_id: str) -> None: ...


@dataclass
class UiCallbacks:
    """Plain-callable :class:`InputSink`; either callback may be omitted."""

    submit: Callable[[str], Union[None, Awaitable[Any]]] | None = None
    interrupt: Callable[[], None] | None = None

    def on_submit(self, line: str) -> Union[None, Awaitable[Any]]:
        if self.submit is None:
            return None
        return self.submit(line)

    def on_interrupt(self) -> None:
        if self.interrupt is not None:
            self.interrupt()
