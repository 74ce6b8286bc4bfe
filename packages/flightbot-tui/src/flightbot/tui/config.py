"""Configuration for the terminal UI."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping

ENV_PREFIX = "FLIGHTBOT_TUI_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Config:
    """UI tuning knobs."""

    animation_tick_ms: int = 300
    log_limit: int = 400
    chat_scroll_jump: int = 8
    mouse_scroll_step: int = 3
    max_players: int = 200
    escape_timeout: float = 0.01
    mouse_tracking: bool = True
    write_log_path: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        """Build a config from ``FLIGHTBOT_TUI_*`` variables.

        Unparsable or non-positive numeric values keep the default.
        """
        env = os.environ if environ is None else environ
        config = cls()
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            value = _parse(raw.strip(), getattr(config, f.name))
            if value is not None:
                setattr(config, f.name, value)
        return config


def _parse(raw: str, default: object) -> object | None:
    if isinstance(default, bool):
        lowered = raw.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        return None
    if isinstance(default, int):
        try:
            value = int(raw)
        except ValueError:
            return None
        return value if value > 0 else None
    if isinstance(default, float):
        try:
            number = float(raw)
        except ValueError:
            return None
        return number if number > 0 else None
    return raw
