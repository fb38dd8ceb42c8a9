"""Configuration for chooser widgets and the page coordinator."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SINGLE_TEXT = "Select an Option"
DEFAULT_MULTIPLE_TEXT = "Select Some Options"
DEFAULT_NO_RESULTS_TEXT = "No results match"


@dataclass(frozen=True)
class ChooserConfig:
    """Per-widget behavior options. Invalid values are clamped, never rejected."""

    allow_single_deselect: bool = False
    disable_search_threshold: int = 0
    disable_search: bool = False
    enable_split_word_search: bool = True
    group_search: bool = True
    search_contains: bool = False
    single_backstroke_delete: bool = True
    max_selected_options: float = math.inf
    display_selected_options: bool = True
    display_disabled_options: bool = True
    include_group_label_in_selected: bool = False
    max_shown_results: float = math.inf
    case_sensitive_search: bool = False
    hide_results_on_select: bool = True
    placeholder_text: str = ""
    placeholder_text_single: str = ""
    placeholder_text_multiple: str = ""
    no_results_text: str = ""

    def __post_init__(self) -> None:
        # A zero or negative limit means "no limit".
        for name in ("max_selected_options", "max_shown_results"):
            value = getattr(self, name)
            if value is None or value <= 0:
                object.__setattr__(self, name, math.inf)
        if self.disable_search_threshold is None or self.disable_search_threshold < 0:
            object.__setattr__(self, "disable_search_threshold", 0)

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> ChooserConfig:
        """Build a config from a host-supplied mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in (options or {}).items():
            if key not in known:
                logger.debug("Ignoring unknown chooser option %r", key)
                continue
            kwargs[key] = value
        return cls(**kwargs)

    def with_options(self, **overrides: Any) -> ChooserConfig:
        return replace(self, **overrides)


@dataclass(frozen=True)
class PageSettings:
    """Rules the page coordinator uses to decide which hosts get a widget."""

    ignore_classes: frozenset[str] = frozenset({"chosen-disable", "chosen-processed"})
    opt_in_class: str = "chosen-enable"
    minimum_single: int = 0
    minimum_multiple: int = 0
    options: Mapping[str, Any] = field(default_factory=dict)

    def minimum_for(self, multiple: bool) -> int:
        return self.minimum_multiple if multiple else self.minimum_single
