"""Host option input and the flattened option records built from it."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class HostOption(BaseModel):
    """One native option as the host reports it."""

    text: str
    value: str = ""
    title: str = ""
    disabled: bool = False
    selected: bool = False
    group_label: str | None = None
    classes: str = ""
    raw_markup: str | None = None  # pre-escaped markup, rendered as-is

    @model_validator(mode="before")
    @classmethod
    def _default_value_to_text(cls, data: Any) -> Any:
        # Native options without a value attribute submit their text.
        if isinstance(data, dict) and data.get("value") is None and "text" in data:
            return {**data, "value": data["text"]}
        return data


class HostGroup(BaseModel):
    """A labeled cluster of native options."""

    label: str
    title: str = ""
    disabled: bool = False
    classes: str = ""
    options: list[HostOption] = Field(default_factory=list)


HostNode = HostOption | HostGroup


class OptionRecord(BaseModel):
    """A selectable entry of the flattened model."""

    array_index: int
    options_index: int
    group: bool = False
    value: str = ""
    text: str = ""
    html: str = ""
    title: str = ""
    selected: bool = False
    disabled: bool = False
    group_array_index: int | None = None
    group_label: str | None = None
    classes: str = ""
    empty: bool = False
    search_match: bool = False
    search_text: str = ""

    @property
    def host_index(self) -> int:
        return self.options_index


class GroupRecord(BaseModel):
    """A group header of the flattened model. Never selectable."""

    array_index: int
    group: bool = True
    label: str
    title: str = ""
    disabled: bool = False
    children: int = 0
    classes: str = ""
    active_options: int = 0
    group_match: bool = False
    search_match: bool = False
    search_text: str = ""


FlatEntry = OptionRecord | GroupRecord
