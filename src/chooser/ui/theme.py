"""Theme, color definitions, QSS stylesheet and row text helpers."""

from __future__ import annotations

import html
import re

# ── Color palette: light theme, orange accents ──

COLORS = {
    "primary": "#E67E22",
    "primary_light": "#FFF3E0",
    "bg": "#FFFFFF",
    "panel_bg": "#FAFAFA",
    "border": "#E0E0E0",
    "text": "#1A1A1A",
    "text_muted": "#999999",
    "disabled": "#C8C8C8",
    "group": "#555555",
    "error": "#E74C3C",
}

FONT_FAMILY = "-apple-system, 'SF Pro Text', 'Helvetica Neue', 'Segoe UI', Roboto, sans-serif"

_TAG = re.compile(r"<[^>]+>")


def build_stylesheet() -> str:
    """Build the QSS stylesheet for chooser widgets."""
    c = COLORS
    return f"""
/* ── Global ── */
QWidget {{
    font-family: {FONT_FAMILY};
    font-size: 13px;
    color: {c["text"]};
    background-color: {c["bg"]};
}}

/* ── Single selection label ── */
QPushButton#chooserSingle {{
    text-align: left;
    border: 1px solid {c["border"]};
    border-radius: 6px;
    padding: 6px 10px;
}}
QPushButton#chooserSingle[placeholder="true"] {{
    color: {c["text_muted"]};
}}

/* ── Search input ── */
QLineEdit#chooserSearch {{
    border-radius: 6px;
    padding: 6px 10px;
    border: 1px solid {c["border"]};
    background-color: {c["bg"]};
}}
QLineEdit#chooserSearch[placeholder="true"] {{
    color: {c["text_muted"]};
}}

/* ── Results list ── */
QListView#chooserResults {{
    background-color: {c["panel_bg"]};
    border: 1px solid {c["border"]};
    outline: none;
}}
QListView#chooserResults::item:selected {{
    background-color: {c["primary"]};
    color: white;
}}
"""


def chip_style(color: str, *, active: bool) -> str:
    """QSS for a rounded chip button."""
    if active:
        return (
            "QPushButton { "
            f"background-color: {color}; color: white; "
            "border: none; border-radius: 12px; padding: 4px 12px; "
            "font-size: 11px; font-weight: 600; }"
            "QPushButton:hover { opacity: 0.92; }"
        )
    return (
        "QPushButton { "
        f"background-color: transparent; color: {COLORS['text_muted']}; "
        f"border: 1px solid {COLORS['border']}; border-radius: 12px; "
        "padding: 4px 12px; font-size: 11px; font-weight: 500; }"
        "QPushButton:hover { "
        f"border-color: {color}; color: {color}; }}"
    )


def strip_markup(markup: str) -> str:
    """Turn row markup (highlight tags, entities) into plain display text."""
    return html.unescape(_TAG.sub("", markup))


def rich_row_text(markup: str) -> str:
    """Row markup with the search highlight rendered bold for Qt rich text."""
    return markup.replace("<em>", "<b>").replace("</em>", "</b>")
