"""Protocol definitions for the native control a widget augments."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from chooser.models.options import HostNode


class SelectHost(Protocol):
    """Interface of the underlying single/multiple choice control."""

    multiple: bool
    disabled: bool
    placeholder: str
    no_results_text: str
    classes: set[str]
    cardinality: int | None

    def read_options(self) -> list[HostNode]: ...

    @property
    def option_count(self) -> int: ...

    @property
    def selected_index(self) -> int: ...

    def is_selected(self, host_index: int) -> bool: ...

    def set_selected(self, host_index: int, selected: bool) -> None: ...

    def option_value(self, host_index: int) -> str: ...

    def option_disabled(self, host_index: int) -> bool: ...

    def option_text(self, host_index: int) -> str: ...

    def on_options_changed(self, callback: Callable[[], None]) -> Callable[[], None]: ...
