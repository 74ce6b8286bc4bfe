"""Entry point for the flightbot-tui demo CLI."""

from __future__ import annotations

import argparse
import asyncio
import itertools
import logging
import time

from flightbot.tui.interfaces import InstanceInfo, RenderTarget

logger = logging.getLogger(__name__)

DEMO_PLAYERS = ["Steve", "Alex", "FlightBot", "Notch", "jeb_", "Dinnerbone"]


class DemoInstanceHost:
    """In-memory instance list for the demo; satisfies ``ModalHost``."""

    def __init__(self, target: RenderTarget | None = None) -> None:
        self.target = target
        self._ids = itertools.count(1)
        self._instances: list[InstanceInfo] = []
        self._running: set[str] = set()
        self._active: str | None = None
        self.create_instance("Instance 1", "0b0t.org", "FlightBot")

    def list_instances(self) -> list[InstanceInfo]:
        return list(self._instances)

    def is_running(self, instance_id: str) -> bool:
        return instance_id in self._running

    def active_instance_id(self) -> str | None:
        return self._active

    def start_instance(self, instance_id: str) -> None:
        self._running.add(instance_id)
        if self._active is None:
            self._active = instance_id
        self._changed()

    def stop_instance(self, instance_id: str) -> None:
        self._running.discard(instance_id)
        if self._active == instance_id:
            self._active = next(iter(self._running), None)
        self._changed()

    def set_active_instance(self, instance_id: str) -> None:
        self._active = instance_id
        self._changed()

    def create_instance(self, name: str, host: str, username: str) -> InstanceInfo:
        info = InstanceInfo(id=f"instance-{next(self._ids)}", name=name, host=host, username=username)
        self._instances.append(info)
        self._changed()
        return info

    def remove_instance(self, instance_id: str) -> None:
        self._instances = [inst for inst in self._instances if inst.id != instance_id]
        self._running.discard(instance_id)
        self._changed()

    def _changed(self) -> None:
        if self.target is not None:
            self.target.request_render()


async def run_demo(args: argparse.Namespace) -> None:
    from flightbot.tui.app import TerminalUI
    from flightbot.tui.config import Config
    from flightbot.tui.interfaces import UiCallbacks

    config = Config.from_env()
    if args.no_mouse:
        config.mouse_tracking = False

    done = asyncio.Event()
    host = DemoInstanceHost()
    callbacks = UiCallbacks()
    ui = TerminalUI(sink=callbacks, modal_host=host, config=config)
    host.target = ui

    def on_submit(line: str) -> None:
        if line in ("/quit", "/exit"):
            done.set()
            return
        ui.log_chat_message([{"text": "<you> ", "style": {"color": "gray"}}, {"text": line}])

    callbacks.submit = on_submit
    callbacks.interrupt = done.set

    ui.forward_system_log("flightbot-tui demo. Type /quit or press Ctrl+C to exit.")
    ui.start()
    if ui.headless:
        logger.warning("stdin/stdout is not a terminal; nothing to show")
        ui.stop()
        return

    started = time.monotonic()
    ui.set_server_info(host=args.server, players=DEMO_PLAYERS, bot_username="FlightBot")
    try:
        while not done.is_set():
            uptime_ms = (time.monotonic() - started) * 1000
            ui.set_server_info(online_time_ms=uptime_ms)
            ui.set_status_lines(
                [
                    f"Server: {args.server}",
                    f"Uptime: {int(uptime_ms // 1000)}s",
                    f"Chat lines: {len(ui.state.entries)}",
                    "F2: instances  Tab: focus  PgUp/PgDn: scroll",
                ]
            )
            try:
                await asyncio.wait_for(done.wait(), timeout=1.0)
            except asyncio.TimeoutError:
                pass
    finally:
        ui.stop()


def main() -> None:
    parser = argparse.ArgumentParser(description="flightbot-tui: terminal UI demo")
    parser.add_argument("--server", default="0b0t.org", help="Server host shown in the demo (default: 0b0t.org)")
    parser.add_argument("--no-mouse", action="store_true", help="Do not enable mouse tracking")
    parser.add_argument("--log-file", default="flightbot-tui.log", help="Log file (default: flightbot-tui.log)")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    args = parser.parse_args()

    # Log to a file: anything written to stderr would corrupt the screen.
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=args.log_file,
    )

    asyncio.run(run_demo(args))


if __name__ == "__main__":
    main()
