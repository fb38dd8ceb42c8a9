"""Pydantic models for chooser."""

from chooser.models.events import ChooserEvent, ValueChange
from chooser.models.options import (
    FlatEntry,
    GroupRecord,
    HostGroup,
    HostNode,
    HostOption,
    OptionRecord,
)
from chooser.models.results import (
    Choice,
    ControllerState,
    Key,
    ResultRow,
    ResultsViewport,
    SearchState,
    SelectMode,
)

__all__ = [
    "ChooserEvent",
    "Choice",
    "ControllerState",
    "FlatEntry",
    "GroupRecord",
    "HostGroup",
    "HostNode",
    "HostOption",
    "Key",
    "OptionRecord",
    "ResultRow",
    "ResultsViewport",
    "SearchState",
    "SelectMode",
    "ValueChange",
]
