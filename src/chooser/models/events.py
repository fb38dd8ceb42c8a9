"""Notification names and payloads emitted by a selection controller."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class ChooserEvent(StrEnum):
    READY = "chosen:ready"
    SHOWING_DROPDOWN = "chosen:showing_dropdown"
    HIDING_DROPDOWN = "chosen:hiding_dropdown"
    MAX_SELECTED = "chosen:maxselected"
    NO_RESULTS = "chosen:no_results"
    CHANGE = "change"


class ValueChange(BaseModel):
    """Payload of a ``change`` notification.

    Both fields are empty when a single-select widget was reset to its
    placeholder option.
    """

    selected: str | None = None
    deselected: str | None = None
