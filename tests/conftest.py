"""Shared fixtures for chooser tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from chooser.data.host import ListSelectHost
from chooser.models.events import ChooserEvent
from chooser.models.options import HostGroup, HostNode, HostOption
from chooser.services.controller import SelectionController


def _color_nodes() -> list[HostNode]:
    return [
        HostOption(text="Red", value="r"),
        HostOption(text="Green", value="g"),
        HostOption(text="Blue", value="b"),
    ]


def _grouped_nodes() -> list[HostNode]:
    return [
        HostGroup(
            label="Fruits",
            options=[HostOption(text="Apple"), HostOption(text="Banana")],
        ),
        HostGroup(
            label="Vegetables",
            options=[HostOption(text="Carrot"), HostOption(text="Leek")],
        ),
    ]


class EventRecorder:
    """Collects every notification a controller emits, in order."""

    def __init__(self) -> None:
        self.events: list[tuple[ChooserEvent, Any]] = []

    def __call__(self, event: ChooserEvent, payload: Any) -> None:
        self.events.append((event, payload))

    def attach(self, controller: SelectionController) -> EventRecorder:
        for event in ChooserEvent:
            controller.on(event, self)
        return self

    def names(self) -> list[ChooserEvent]:
        return [event for event, _ in self.events]

    def of(self, event: ChooserEvent) -> list[Any]:
        return [payload for name, payload in self.events if name is event]


@pytest.fixture
def color_host() -> ListSelectHost:
    """Single select with Red, Green, Blue (Red implicitly selected)."""
    return ListSelectHost(_color_nodes())


@pytest.fixture
def multi_color_host() -> ListSelectHost:
    return ListSelectHost(_color_nodes(), multiple=True)


@pytest.fixture
def grouped_host() -> ListSelectHost:
    return ListSelectHost(_grouped_nodes(), multiple=True)


@pytest.fixture
def grouped_options() -> list[HostNode]:
    """Fruits (Apple, Banana) and Vegetables (Carrot, Leek)."""
    return _grouped_nodes()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def options_file(tmp_path: Path) -> Path:
    """JSON option document with a group and a placeholder option."""
    document = {
        "multiple": False,
        "placeholder": "Pick a color",
        "classes": "chosen-enable wide",
        "options": [
            {"text": ""},
            {"text": "Red", "value": "r"},
            {
                "label": "Blues",
                "options": [{"text": "Navy"}, {"text": "Sky Blue", "disabled": True}],
            },
        ],
    }
    path = tmp_path / "options.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path
