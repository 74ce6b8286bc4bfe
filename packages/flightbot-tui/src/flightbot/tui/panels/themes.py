"""Per-panel title and body colors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from flightbot.tui.colors import Segment, create_segment

TITLE_PADDING = 2

PANEL_KEYS = ("chat", "status", "server", "input")


@dataclass(frozen=True)
class BorderChars:
    tl: str
    tr: str
    bl: str
    br: str
    h: str
    v: str


DEFAULT_BORDER = BorderChars(tl="┌", tr="┐", bl="└", br="┘", h="─", v="│")
ROUNDED_BORDER = BorderChars(tl="╭", tr="╮", bl="╰", br="╯", h="─", v="│")

DEFAULT_THEME_CONFIG: dict[str, Any] = {
    "activeTheme": "default",
    "themes": {
        "default": {
            "panels": {
                "chat": {
                    "title": "Chat",
                    "titleSegments": [
                        {"text": " Flight", "color": "aqua", "bold": True},
                        {"text": "Bot ", "color": "white", "bold": True},
                    ],
                    "subtitle": "",
                    "bodyBg": "#000000",
                    "textColor": "#FFFFFF",
                },
                "status": {"title": "Status", "bodyBg": "#000000", "textColor": "#FFFFFF"},
                "server": {"title": "Server", "bodyBg": "#000000", "textColor": "#FFFFFF"},
                "input": {"title": "Input", "bodyBg": "#000000", "textColor": "#FFFFFF"},
            }
        }
    },
}


@dataclass(frozen=True)
class PanelTheme:
    title: str = ""
    subtitle: str | None = None
    default_color: str = "#ffffff"
    body_bg: str = "#000000"
    text_color: str = "#ffffff"
    title_segments: tuple[Segment, ...] = field(default_factory=tuple)


def _default_panels() -> Mapping[str, Any]:
    active = DEFAULT_THEME_CONFIG["activeTheme"]
    return DEFAULT_THEME_CONFIG["themes"].get(active, {}).get("panels", {})


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


def build_title_definitions(definitions: object, fallback_title: str = "") -> tuple[Segment, ...]:
    """Turn ``[{"text": ..., **style}]`` definitions into title segments."""
    if isinstance(definitions, (list, tuple)) and definitions:
        segments: list[Segment] = []
        for definition in definitions:
            if not isinstance(definition, Mapping):
                continue
            text = definition.get("text")
            if not isinstance(text, str) or not text:
                continue
            style = {k: v for k, v in definition.items() if k != "text"}
            segments.append(create_segment(text, style))
        return tuple(segments)
    if fallback_title:
        return (create_segment(f" {fallback_title} ", bold=True),)
    return ()


def merge_panel_theme(
    base: Mapping[str, Any] | None = None,
    override: Mapping[str, Any] | None = None,
) -> PanelTheme:
    """Overlay *override* on *base*; blank override values keep the base."""
    base = base if isinstance(base, Mapping) else {}
    override = override if isinstance(override, Mapping) else {}

    title = _text(override.get("title")) or _text(base.get("title"))
    subtitle = override["subtitle"] if "subtitle" in override else base.get("subtitle")
    segment_source = override.get("titleSegments")
    if not (isinstance(segment_source, (list, tuple)) and segment_source):
        segment_source = base.get("titleSegments") or []

    return PanelTheme(
        title=title,
        subtitle=subtitle if isinstance(subtitle, str) else None,
        default_color=_text(override.get("defaultColor")) or _text(base.get("defaultColor")) or "#ffffff",
        body_bg=_text(override.get("bodyBg")) or _text(base.get("bodyBg")) or "#000000",
        text_color=_text(override.get("textColor")) or _text(base.get("textColor")) or "#ffffff",
        title_segments=build_title_definitions(segment_source, title),
    )


def build_panel_themes(raw_panels: Mapping[str, Any] | None = None) -> dict[str, PanelTheme]:
    """Return one :class:`PanelTheme` per panel, defaults filled in."""
    base_panels = _default_panels()
    raw_panels = raw_panels if isinstance(raw_panels, Mapping) else {}
    return {key: merge_panel_theme(base_panels.get(key), raw_panels.get(key)) for key in PANEL_KEYS}
