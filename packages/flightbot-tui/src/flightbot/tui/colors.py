"""Color and attribute model: style descriptors, palettes, SGR sequences.

A :class:`Style` is a normalized styling descriptor.  :func:`build_attr`
turns a descriptor into an :class:`Attr`, whose ``key`` is canonical (two
styles that render the same share a key) and whose ``sequence`` is the SGR
escape that activates it.  Bad color data never raises -- it simply resolves
to "no color".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

RESET = "\x1b[0m"

BASIC_ANSI_COLORS: dict[str, int] = {
    "black": 30,
    "red": 31,
    "green": 32,
    "yellow": 33,
    "blue": 34,
    "magenta": 35,
    "cyan": 36,
    "white": 37,
    "gray": 90,
    "grey": 90,
    "light_red": 91,
    "light_green": 92,
    "light_yellow": 93,
    "light_blue": 94,
    "light_magenta": 95,
    "light_cyan": 96,
    "light_white": 97,
}

# Minecraft chat palette; takes precedence over the basic ANSI names.
MC_COLORS: dict[str, str] = {
    "black": "#000000",
    "dark_blue": "#0000AA",
    "dark_green": "#00AA00",
    "dark_aqua": "#00AAAA",
    "dark_red": "#AA0000",
    "dark_purple": "#AA00AA",
    "gold": "#FFAA00",
    "gray": "#AAAAAA",
    "dark_gray": "#555555",
    "blue": "#5555FF",
    "green": "#55FF55",
    "aqua": "#55FFFF",
    "red": "#FF5555",
    "light_purple": "#FF55FF",
    "yellow": "#FFFF55",
    "white": "#FFFFFF",
}

_HEX3_RE = re.compile(r"^#[0-9a-f]{3}$", re.IGNORECASE)
_HEX6_RE = re.compile(r"^#[0-9a-f]{6}$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Style / Attr / Segment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Style:
    """Normalized styling descriptor.

    ``obfuscated`` is carried so that chat segments round-trip, but it has
    no terminal rendering and does not participate in attribute keys.
    """

    color: str | None = None
    bg_color: str | None = None
    bold: bool = False
    italic: bool = False
    underlined: bool = False
    strikethrough: bool = False
    obfuscated: bool = False


DEFAULT_STYLE = Style()

StyleLike = Union[Style, Mapping[str, Any], None]


@dataclass(frozen=True)
class Attr:
    """A resolved attribute: canonical comparison key plus SGR sequence."""

    key: str
    sequence: str


DEFAULT_ATTR = Attr(key="default:default:0:0:0:0", sequence=RESET)


@dataclass
class Segment:
    """A run of equally styled text."""

    text: str
    style: Style = field(default_factory=Style)


def create_segment(text: str, style: StyleLike = None, **overrides: Any) -> Segment:
    """Build a :class:`Segment` from a style descriptor and keyword overrides."""
    base = normalize_style(style)
    if overrides:
        base = normalize_style({**_style_dict(base), **overrides})
    return Segment(text=text, style=base)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def _style_dict(style: Style) -> dict[str, Any]:
    return {
        "color": style.color,
        "bg_color": style.bg_color,
        "bold": style.bold,
        "italic": style.italic,
        "underlined": style.underlined,
        "strikethrough": style.strikethrough,
        "obfuscated": style.obfuscated,
    }


def normalize_style(style: StyleLike = None) -> Style:
    """Coerce a :class:`Style`, mapping or ``None`` into a :class:`Style`.

    Mappings may use either ``bg_color`` or ``bgColor``, and ``underline``
    as an alias of ``underlined``.  Missing flags default to ``False`` and
    empty colors to ``None``.
    """
    if isinstance(style, Style):
        return style
    if not style:
        return DEFAULT_STYLE
    get = style.get
    color = get("color")
    bg = get("bg_color", get("bgColor"))
    return Style(
        color=color if isinstance(color, str) and color else None,
        bg_color=bg if isinstance(bg, str) and bg else None,
        bold=bool(get("bold")),
        italic=bool(get("italic")),
        underlined=bool(get("underlined", get("underline"))),
        strikethrough=bool(get("strikethrough")),
        obfuscated=bool(get("obfuscated")),
    )


def same_style(a: Style | None, b: Style | None) -> bool:
    if a is None or b is None:
        return False
    return a == b


def normalize_color_name(color: object) -> str | None:
    """Lower-case and trim *color*, dropping a trailing ``-fg`` suffix."""
    if not isinstance(color, str):
        return None
    trimmed = color.strip().lower()
    if not trimmed:
        return None
    return trimmed[:-3] if trimmed.endswith("-fg") else trimmed


def resolve_color(color: object) -> str | None:
    """Resolve a color name or hex string.

    Palette names become ``#RRGGBB``, ``#rgb`` is expanded, and anything
    unrecognized is returned as its normalized text.
    """
    normalized = normalize_color_name(color)
    if normalized is None:
        return None
    if normalized in MC_COLORS:
        return MC_COLORS[normalized]
    if _HEX3_RE.match(normalized):
        return "#" + "".join(ch * 2 for ch in normalized[1:]).upper()
    if _HEX6_RE.match(normalized):
        return normalized.upper()
    return normalized


def hex_to_rgb(value: str | None) -> tuple[int, int, int] | None:
    normalized = (value or "").replace("#", "")
    if len(normalized) != 6:
        return None
    try:
        number = int(normalized, 16)
    except ValueError:
        return None
    return (number >> 16) & 0xFF, (number >> 8) & 0xFF, number & 0xFF


def ansi_color_code(name: str | None) -> int | None:
    if not name:
        return None
    if name in BASIC_ANSI_COLORS:
        return BASIC_ANSI_COLORS[name]
    return BASIC_ANSI_COLORS.get(name.replace("-", "_"))


def _canonical_color(color: str | None) -> str | None:
    """Resolve *color* to a value the terminal can render, else ``None``."""
    resolved = resolve_color(color)
    if resolved is None:
        return None
    if resolved.startswith("#"):
        return resolved if hex_to_rgb(resolved) is not None else None
    return resolved if ansi_color_code(resolved) is not None else None


# ---------------------------------------------------------------------------
# Attribute construction
# ---------------------------------------------------------------------------


def _attr_key(style: Style, fg: str | None, bg: str | None) -> str:
    return ":".join(
        [
            fg or "default",
            bg or "default",
            "1" if style.bold else "0",
            "1" if style.italic else "0",
            "1" if style.underlined else "0",
            "1" if style.strikethrough else "0",
        ]
    )


def _attr_sequence(style: Style, fg: str | None, bg: str | None) -> str:
    params: list[str] = []
    if style.bold:
        params.append("1")
    if style.italic:
        params.append("3")
    if style.underlined:
        params.append("4")
    if style.strikethrough:
        params.append("9")
    if fg:
        rgb = hex_to_rgb(fg) if fg.startswith("#") else None
        if rgb is not None:
            params.append(f"38;2;{rgb[0]};{rgb[1]};{rgb[2]}")
        else:
            code = ansi_color_code(fg)
            if code is not None:
                params.append(str(code))
    if bg:
        rgb = hex_to_rgb(bg) if bg.startswith("#") else None
        if rgb is not None:
            params.append(f"48;2;{rgb[0]};{rgb[1]};{rgb[2]}")
        else:
            code = ansi_color_code(bg)
            if code is not None:
                params.append(str(code + 10))
    if not params:
        return RESET
    return f"\x1b[{';'.join(params)}m"


def build_attr(
    style: StyleLike = None,
    color: str | None = None,
    background: str | None = None,
) -> Attr:
    """Build the canonical :class:`Attr` for *style*.

    *color* and *background* override the descriptor's own colors when not
    ``None``.  The fully default descriptor returns :data:`DEFAULT_ATTR`
    itself so that default cells compare by identity.
    """
    normalized = normalize_style(style)
    fg = _canonical_color(color if color is not None else normalized.color)
    bg = _canonical_color(background if background is not None else normalized.bg_color)
    key = _attr_key(normalized, fg, bg)
    if key == DEFAULT_ATTR.key:
        return DEFAULT_ATTR
    return Attr(key=key, sequence=_attr_sequence(normalized, fg, bg))


def attr_sequence(style: StyleLike = None) -> str:
    """Return the SGR sequence that activates *style*."""
    return build_attr(style).sequence


def ensure_attr(attr: Attr | StyleLike) -> Attr:
    """Accept either a ready :class:`Attr` or a style descriptor."""
    if attr is None:
        return DEFAULT_ATTR
    if isinstance(attr, Attr):
        return attr
    return build_attr(attr)
