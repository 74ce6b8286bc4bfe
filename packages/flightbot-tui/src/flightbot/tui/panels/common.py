"""Drawing helpers shared by the panels.

All helpers draw into a :class:`~flightbot.tui.screen_buffer.ScreenBuffer`
and clip to the rectangle they are given; none of them raise on odd input.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Iterable, Sequence, Union

from flightbot.tui.colors import DEFAULT_ATTR, Attr, Segment, Style, build_attr, create_segment, ensure_attr
from flightbot.tui.layout import Region
from flightbot.tui.panels.themes import DEFAULT_BORDER, TITLE_PADDING, BorderChars, PanelTheme
from flightbot.tui.screen_buffer import ScreenBuffer, clamp
from flightbot.tui.utils import (
    grapheme_width,
    iter_graphemes,
    measure_segments_width,
    slice_segments_to_width,
    take_by_width,
)

SUBTITLE_COLOR = "#bbbbbb"

BorderAttrFn = Callable[[int, int, bool], Attr]
TitleAttrFn = Callable[[int, int, Style], Attr]
AttrSource = Union[Attr, Callable[[int, int, str], Attr]]


@dataclass
class RenderContext:
    """Per-pass color callbacks (the animated gradient, when available)."""

    border_attr: BorderAttrFn | None = None
    title_attr: TitleAttrFn | None = None


@dataclass(frozen=True)
class BoxInner:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class PanelLine:
    """One prepared row: plain text with an optional color, or segments."""

    text: str = ""
    color: str | None = None
    segments: tuple[Segment, ...] | None = None

    @property
    def is_segments(self) -> bool:
        return self.segments is not None


def get_theme_body_attr(theme: PanelTheme | None) -> Attr:
    if theme is None or not theme.body_bg:
        return DEFAULT_ATTR
    return build_attr(Style(bg_color=theme.body_bg))


def fill_region(
    buffer: ScreenBuffer,
    x: int,
    y: int,
    w: int,
    h: int,
    char: str = " ",
    attr: Attr = DEFAULT_ATTR,
) -> None:
    if w <= 0 or h <= 0:
        return
    buffer.fill(x=x, y=y, width=w, height=h, char=char, attr=ensure_attr(attr))


def clear_line(buffer: ScreenBuffer, x: int, y: int, width: int, attr: Attr = DEFAULT_ATTR) -> None:
    fill_region(buffer, x, y, width, 1, " ", attr)


def write_text(buffer: ScreenBuffer, x: int, y: int, width: int, text: str, attr: AttrSource) -> int:
    """Write *text* clipped to *width* columns; returns the width written.

    *attr* is either an :class:`Attr` or a callable ``(x, y, glyph)``
    producing one per glyph.
    """
    if width <= 0 or not text or y < 1 or y > buffer.height:
        return 0
    start_x = clamp(x, 1, buffer.width)
    available = min(width, buffer.width - start_x + 1)
    if available <= 0:
        return 0
    sliced, _ = take_by_width(str(text), available)
    cursor = start_x
    for g in iter_graphemes(sliced):
        w = grapheme_width(g)
        if w == 0:
            continue
        if cursor + w - start_x > available:
            break
        resolved = attr(cursor, y, g) if callable(attr) else attr
        buffer.put(cursor, y, g, ensure_attr(resolved))
        cursor += w
    return cursor - start_x


def build_title_segments(
    custom_segments: Sequence[Segment] | None,
    fallback_title: str | None,
    subtitle: str | None,
) -> list[Segment]:
    segments: list[Segment] = []
    if custom_segments:
        segments.extend(create_segment(seg.text, seg.style) for seg in custom_segments if seg.text)
    elif fallback_title:
        segments.append(create_segment(f" {fallback_title} ", bold=True))
    if subtitle:
        segments.append(create_segment(f" {subtitle}", color=SUBTITLE_COLOR))
    return segments


def _render_title(
    buffer: ScreenBuffer,
    start_x: int,
    y: int,
    max_width: int,
    segments: list[Segment],
    context: RenderContext,
) -> None:
    usable = max(0, max_width - TITLE_PADDING)
    truncated = slice_segments_to_width(segments, usable)
    offset = max(0, (usable - measure_segments_width(truncated)) // 2)
    cursor = start_x + offset
    for seg in truncated:
        for g in iter_graphemes(seg.text):
            w = grapheme_width(g)
            if w == 0:
                continue
            if context.title_attr is not None:
                attr = context.title_attr(cursor, y, seg.style)
            else:
                attr = build_attr(seg.style)
            buffer.put(cursor, y, g, attr)
            cursor += w


def draw_box(
    buffer: ScreenBuffer,
    region: Region,
    *,
    title: str | None = None,
    title_segments: Sequence[Segment] | None = None,
    subtitle: str | None = None,
    theme: PanelTheme | None = None,
    is_focused: bool = False,
    border: BorderChars = DEFAULT_BORDER,
    context: RenderContext | None = None,
) -> BoxInner:
    """Draw a bordered box with a centered title; return its content area.

    Regions narrower or shorter than two cells get no border and are
    filled with the theme background instead.
    """
    context = context or RenderContext()
    x, y, w, h = region.x, region.y, region.w, region.h
    if w <= 0 or h <= 0:
        return BoxInner(x, y, 0, 0)
    body_attr = get_theme_body_attr(theme)
    if w < 2 or h < 2:
        fill_region(buffer, x, y, w, h, " ", body_attr)
        return BoxInner(x, y, w, h)

    def border_char(col: int, row: int, char: str) -> None:
        if context.border_attr is not None:
            attr = context.border_attr(col, row, is_focused)
        else:
            attr = build_attr(Style(bold=is_focused))
        buffer.put(col, row, char, attr)

    right = x + w - 1
    bottom = y + h - 1
    border_char(x, y, border.tl)
    border_char(right, y, border.tr)
    border_char(x, bottom, border.bl)
    border_char(right, bottom, border.br)
    for col in range(x + 1, right):
        border_char(col, y, border.h)
        border_char(col, bottom, border.h)
    for row in range(y + 1, bottom):
        border_char(x, row, border.v)
        border_char(right, row, border.v)

    inner_width = w - 2
    inner_height = h - 2
    fill_region(buffer, x + 1, y + 1, inner_width, inner_height, " ", body_attr)

    segments = build_title_segments(title_segments, title, subtitle)
    if segments and inner_width > 0:
        _render_title(buffer, x + 1, y, inner_width, segments, context)

    return BoxInner(x + 1, y + 1, inner_width, inner_height)


def draw_plain_line(
    buffer: ScreenBuffer,
    x: int,
    y: int,
    width: int,
    text: str,
    color: str | None,
    theme: PanelTheme | None,
) -> None:
    clear_line(buffer, x, y, width, get_theme_body_attr(theme))
    if not text:
        return
    text_color = color or (theme.text_color if theme else None)
    body_bg = theme.body_bg if theme else None
    write_text(buffer, x, y, width, text, build_attr(Style(bg_color=body_bg), text_color))


def draw_segment_line(
    buffer: ScreenBuffer,
    x: int,
    y: int,
    width: int,
    segments: Iterable[Segment],
    theme: PanelTheme | None,
) -> None:
    clear_line(buffer, x, y, width, get_theme_body_attr(theme))
    body_bg = theme.body_bg if theme else None
    fallback_color = theme.text_color if theme else None
    col = 0
    remaining = width
    for seg in segments:
        if remaining <= 0:
            break
        if not seg.text:
            continue
        chunk, chunk_width = take_by_width(seg.text, remaining)
        if not chunk or chunk_width <= 0:
            continue
        style = replace(seg.style, bg_color=body_bg)
        attr = build_attr(style, seg.style.color or fallback_color)
        write_text(buffer, x + col, y, remaining, chunk, attr)
        col += chunk_width
        remaining -= chunk_width


def draw_log_line(
    buffer: ScreenBuffer,
    x: int,
    y: int,
    width: int,
    line: PanelLine | None,
    theme: PanelTheme | None,
) -> None:
    if line is None:
        clear_line(buffer, x, y, width, get_theme_body_attr(theme))
    elif line.segments is not None:
        draw_segment_line(buffer, x, y, width, line.segments, theme)
    else:
        draw_plain_line(buffer, x, y, width, line.text, line.color, theme)


def draw_panel_divider(
    buffer: ScreenBuffer,
    status_region: Region,
    server_region: Region,
    context: RenderContext | None = None,
    char: str = "─",
) -> None:
    """Draw the horizontal rule in the gap between the status and server boxes."""
    divider_y = server_region.y - 1
    if divider_y <= 0 or divider_y <= status_region.bottom:
        return
    width = min(status_region.w, server_region.w)
    context = context or RenderContext()
    for col in range(server_region.x, server_region.x + width):
        if context.border_attr is not None:
            attr = context.border_attr(col, divider_y, True)
        else:
            attr = build_attr(Style(bold=True))
        buffer.put(col, divider_y, char, attr)
