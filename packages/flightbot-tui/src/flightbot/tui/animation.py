"""Time-based pastel colors for borders, titles and highlighted names."""

from __future__ import annotations

import math
import time
from dataclasses import replace
from typing import Callable

from flightbot.tui.colors import Attr, Segment, Style, build_attr, create_segment

GRADIENT_PERIOD_MS = 8000
MAX_RAINBOW_PHASE = 6000
PASTEL_SATURATION = 0.45
PASTEL_LIGHTNESS = 0.78

Clock = Callable[[], float]


def _now_ms() -> float:
    return time.monotonic() * 1000.0


def mod1(value: float) -> float:
    """Fractional part of *value*, always in ``[0, 1)``."""
    return value - math.floor(value)


def hsl_to_hex(h: float, s: float, l: float) -> str:
    """Convert HSL (hue in degrees) to ``#RRGGBB``."""
    sat = min(1.0, max(0.0, s))
    light = min(1.0, max(0.0, l))
    c = (1 - abs(2 * light - 1)) * sat
    hp = (h % 360) / 60
    x = c * (1 - abs(hp % 2 - 1))
    if hp < 1:
        r1, g1, b1 = c, x, 0.0
    elif hp < 2:
        r1, g1, b1 = x, c, 0.0
    elif hp < 3:
        r1, g1, b1 = 0.0, c, x
    elif hp < 4:
        r1, g1, b1 = 0.0, x, c
    elif hp < 5:
        r1, g1, b1 = x, 0.0, c
    else:
        r1, g1, b1 = c, 0.0, x
    m = light - c / 2
    channels = (round((v + m) * 255) for v in (r1, g1, b1))
    return "#" + "".join(f"{min(255, max(0, v)):02X}" for v in channels)


def pastel_hue(value: float) -> str:
    """Pastel color at position *value* around the hue wheel (wraps at 1)."""
    return hsl_to_hex(mod1(value) * 360, PASTEL_SATURATION, PASTEL_LIGHTNESS)


class GradientClock:
    """Drives the diagonal border gradient and the rainbow name effect.

    *clock* returns milliseconds; tests pass a fixed clock to make colors
    deterministic.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or _now_ms
        self._start = self._clock()

    def elapsed_ms(self) -> float:
        return self._clock() - self._start

    def color_for(self, x: int, y: int, width: int, height: int) -> str:
        diag = max(1, width + height)
        phase = (self.elapsed_ms() % GRADIENT_PERIOD_MS) / GRADIENT_PERIOD_MS
        return pastel_hue((x + y) / diag + phase)

    def border_attr(self, x: int, y: int, width: int, height: int, bold: bool = False) -> Attr:
        return build_attr(Style(bold=bold), self.color_for(x, y, width, height))

    def title_attr(
        self, x: int, y: int, width: int, height: int, style: Style | None = None
    ) -> Attr:
        base = style or Style()
        return build_attr(replace(base, color=self.color_for(x, y, width, height), bold=True))

    def rainbow_color(self, offset_ms: float = 0) -> str:
        phase = ((self._clock() + offset_ms) % MAX_RAINBOW_PHASE) / MAX_RAINBOW_PHASE
        return pastel_hue(phase)

    def rainbowify(self, text: str, index_offset: int = 0) -> list[Segment]:
        """One bold segment per character, each shifted along the rainbow."""
        return [
            create_segment(ch, color=self.rainbow_color(index_offset * 50 + idx * 35), bold=True)
            for idx, ch in enumerate(text)
        ]


def rainbow_color(offset_ms: float = 0, clock: Clock | None = None) -> str:
    now = (clock or _now_ms)()
    return pastel_hue(((now + offset_ms) % MAX_RAINBOW_PHASE) / MAX_RAINBOW_PHASE)


def rainbowify(text: str, index_offset: int = 0, clock: Clock | None = None) -> list[Segment]:
    return GradientClock(clock).rainbowify(text, index_offset)
