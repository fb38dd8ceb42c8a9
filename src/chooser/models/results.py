"""Rendered rows, choices and transient search state of a controller."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import Literal

from pydantic import BaseModel


class ControllerState(StrEnum):
    CLOSED = "closed"
    OPEN_NO_MATCH = "open_no_match"
    OPEN_WITH_RESULTS = "open_with_results"


class SelectMode(StrEnum):
    SINGLE = "single"
    MULTIPLE = "multiple"


class Key(Enum):
    """Abstract keys understood by the keyboard state machine."""

    BACKSPACE = "backspace"
    TAB = "tab"
    ENTER = "enter"
    ESCAPE = "escape"
    SPACE = "space"
    ARROW_UP = "arrow_up"
    ARROW_DOWN = "arrow_down"
    SHIFT = "shift"
    CTRL = "ctrl"
    ALT = "alt"
    META = "meta"
    CHARACTER = "character"


class ResultRow(BaseModel):
    """One rendered entry of the results pane."""

    kind: Literal["option", "group", "no_results"] = "option"
    array_index: int = -1
    html: str = ""
    title: str = ""
    classes: str = ""
    active: bool = False
    disabled: bool = False
    selected: bool = False
    group_option: bool = False

    def css_classes(self) -> list[str]:
        """Class list a DOM-like renderer would put on the row."""
        if self.kind == "group":
            names = ["group-result"]
        elif self.kind == "no_results":
            names = ["no-results"]
        else:
            names = []
            if self.active:
                names.append("active-result")
            if self.disabled:
                names.append("disabled-result")
            if self.selected:
                names.append("result-selected")
            if self.group_option:
                names.append("group-option")
        if self.classes:
            names.append(self.classes)
        return names


class Choice(BaseModel):
    """Visible, removable representation of one selected option (multi mode)."""

    array_index: int
    label: str
    disabled: bool = False
    focused: bool = False


@dataclass
class SearchState:
    query: str = ""
    match_pattern: re.Pattern[str] | None = None
    highlight_pattern: re.Pattern[str] | None = None
    highlighted: int | None = None
    pegged: dict[str, bool] = field(default_factory=dict)


@dataclass
class ResultsViewport:
    """Scrollable window over the rendered rows."""

    max_height: int = 240
    row_height: int = 24
    scroll_top: int = 0

    def scroll_into_view(self, position: int) -> int:
        """Scroll the minimum amount so the row at ``position`` is fully visible."""
        top = position * self.row_height
        bottom = top + self.row_height
        visible_bottom = self.scroll_top + self.max_height
        if bottom >= visible_bottom:
            self.scroll_top = max(bottom - self.max_height, 0)
        elif self.scroll_top > top:
            self.scroll_top = top
        return self.scroll_top
