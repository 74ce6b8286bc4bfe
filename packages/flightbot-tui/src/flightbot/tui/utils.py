"""Terminal text utilities: display width measurement and wrapping.

Provides the per-codepoint width oracle used by the cell grid, grapheme
cluster iteration, and the plain / styled-segment wrappers used to lay out
panel content.
"""

from __future__ import annotations

import unicodedata
from typing import Iterable, Iterator

import grapheme
import wcwidth as _wcwidth

from flightbot.tui.colors import Segment, Style, normalize_style, same_style

# ---------------------------------------------------------------------------
# Width tables
# ---------------------------------------------------------------------------

COMBINING_RANGES: tuple[tuple[int, int], ...] = (
    (0x0300, 0x036F),
    (0x1AB0, 0x1AFF),
    (0x1DC0, 0x1DFF),
    (0x20D0, 0x20FF),
    (0xFE20, 0xFE2F),
)

# Pictographic blocks some wcwidth releases report as narrow.
EMOJI_WIDE_RANGES: tuple[tuple[int, int], ...] = (
    (0x1F300, 0x1F64F),
    (0x1F900, 0x1F9FF),
)

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


def _in_ranges(cp: int, ranges: tuple[tuple[int, int], ...]) -> bool:
    for start, end in ranges:
        if start <= cp <= end:
            return True
    return False


# ---------------------------------------------------------------------------
# Width oracle
# ---------------------------------------------------------------------------


def char_width(ch: str) -> int:
    """Return the display width (0, 1 or 2) of the first codepoint of *ch*.

    Rules:
    1. NUL, C0 and C1 control codes, and combining marks -> 0
    2. East-Asian wide / fullwidth and emoji codepoints -> 2
    3. Everything else -> 1
    """
    if not ch:
        return 0
    cp = ord(ch[0])
    if cp < 0x20 or 0x7F <= cp <= 0x9F:
        return 0
    if cp < 0x7F:
        return 1
    if _in_ranges(cp, COMBINING_RANGES) or unicodedata.combining(ch[0]):
        return 0
    if _in_ranges(cp, EMOJI_WIDE_RANGES):
        return 2
    w = _wcwidth.wcwidth(ch[0])
    if w == 2:
        return 2
    if w == 0:
        return 0
    return 1


def grapheme_width(g: str) -> int:
    """Return the display width of a single grapheme cluster.

    Multi-codepoint clusters that carry emoji presentation (VS16, ZWJ
    joins, skin-tone modifiers, regional-indicator pairs) are two columns
    wide; otherwise the cluster takes the width of its base codepoint.
    """
    if not g:
        return 0
    if len(g) == 1:
        return char_width(g)

    for ch in g:
        cp = ord(ch)
        if cp == 0xFE0F:  # VS16
            return 2
        if cp == 0x200D:  # ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # regional indicators
            return 2

    return char_width(g[0])


def iter_graphemes(text: str) -> Iterator[str]:
    """Yield the grapheme clusters of *text*."""
    if not text:
        return iter(())
    if text.isascii():
        return iter(text)
    return grapheme.graphemes(text)


def visible_width(text: str) -> int:
    """Total display width of *text*; tabs and controls count as zero."""
    if not text:
        return 0
    if text.isascii() and text.isprintable():
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    total = 0
    for g in iter_graphemes(text):
        total += grapheme_width(g)
    return _cache_width(text, total)


def take_by_width(text: str, max_width: int) -> tuple[str, int]:
    """Take the longest prefix of *text* that fits in *max_width* columns.

    Clusters wider than *max_width* on their own are skipped.  Returns the
    prefix and its width.
    """
    if max_width <= 0 or not text:
        return "", 0
    used = 0
    out: list[str] = []
    for g in iter_graphemes(str(text)):
        w = grapheme_width(g)
        if w > max_width:
            continue
        if w > 0 and used + w > max_width:
            break
        out.append(g)
        if w > 0:
            used += w
            if used >= max_width:
                break
    return "".join(out), used


# ---------------------------------------------------------------------------
# Plain text wrapping
# ---------------------------------------------------------------------------


def wrap_text(text: str | None, width: int) -> list[str]:
    """Hard-wrap *text* to *width* columns.

    Explicit newlines always break; within a physical line clusters are
    packed greedily.  Never returns an empty list.
    """
    if width <= 0:
        return [""]
    lines: list[str] = []
    source = ("" if text is None else str(text)).replace("\r", "")
    for chunk in source.split("\n"):
        if not chunk:
            lines.append("")
            continue
        current: list[str] = []
        current_width = 0
        for g in iter_graphemes(chunk):
            w = grapheme_width(g)
            if w > width:
                continue
            if w > 0 and current_width + w > width:
                lines.append("".join(current))
                current = [g]
                current_width = w
            else:
                current.append(g)
                current_width += w
        lines.append("".join(current))
    return lines or [""]


# ---------------------------------------------------------------------------
# Styled segment wrapping
# ---------------------------------------------------------------------------


def _empty_line() -> list[Segment]:
    return [Segment(text="", style=Style())]


def wrap_segments(segments: Iterable[Segment] | None, width: int) -> list[list[Segment]]:
    """Wrap styled *segments* to *width* columns.

    Each output line is a list of segments in which neighbouring segments
    never share the same normalized style.  A segment split across lines
    keeps its style on both sides.
    """
    if segments is None or width <= 0:
        return [_empty_line()]

    lines: list[list[Segment]] = []
    current: list[Segment] = []
    current_width = 0

    def push_line() -> None:
        nonlocal current, current_width
        lines.append(current if current else _empty_line())
        current = []
        current_width = 0

    def append_cluster(g: str, style: Style) -> None:
        nonlocal current_width
        w = grapheme_width(g)
        if w > width:
            return
        if w > 0 and current_width + w > width:
            push_line()
        if current and same_style(current[-1].style, style):
            current[-1].text += g
        else:
            current.append(Segment(text=g, style=style))
        current_width += w

    for seg in segments:
        if seg is None or not isinstance(seg.text, str):
            continue
        style = normalize_style(seg.style)
        pieces = seg.text.replace("\r", "").split("\n")
        for idx, piece in enumerate(pieces):
            for g in iter_graphemes(piece):
                append_cluster(g, style)
            if idx < len(pieces) - 1:
                push_line()

    if current or not lines:
        push_line()
    return lines


def measure_segments_width(segments: Iterable[Segment]) -> int:
    return sum(visible_width(seg.text) for seg in segments if seg and seg.text)


def slice_segments_to_width(segments: Iterable[Segment], max_width: int) -> list[Segment]:
    """Truncate *segments* so their combined width is at most *max_width*."""
    return copy_segments_within_width(segments, max_width)[0]


def copy_segments_within_width(
    segments: Iterable[Segment], width_limit: int
) -> tuple[list[Segment], int]:
    """Copy *segments* up to *width_limit* columns.

    Zero-width clusters are dropped.  Returns the copied segments and the
    width they occupy.
    """
    result: list[Segment] = []
    if width_limit <= 0:
        return result, 0
    used = 0
    for seg in segments:
        if seg is None or not seg.text:
            continue
        chunk: list[str] = []
        full = False
        for g in iter_graphemes(seg.text):
            w = grapheme_width(g)
            if w == 0:
                continue
            if used + w > width_limit:
                full = True
                break
            chunk.append(g)
            used += w
        if chunk:
            result.append(Segment(text="".join(chunk), style=seg.style))
        if full or used >= width_limit:
            break
    return result, min(used, width_limit)
