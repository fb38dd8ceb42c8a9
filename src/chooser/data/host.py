"""In-memory select control that behaves like a native ``<select>``."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from chooser.models.options import HostGroup, HostNode, HostOption

logger = logging.getLogger(__name__)


class ListSelectHost:
    """Holds an option tree and its selection state.

    In single mode exactly one option is selected while the control has any
    enabled option: with no explicit selection the first enabled option counts
    as selected, matching native behavior.
    """

    def __init__(
        self,
        nodes: Iterable[HostNode] = (),
        *,
        multiple: bool = False,
        disabled: bool = False,
        placeholder: str = "",
        no_results_text: str = "",
        classes: Iterable[str] = (),
        cardinality: int | None = None,
        name: str = "",
    ) -> None:
        self.multiple = multiple
        self.disabled = disabled
        self.placeholder = placeholder
        self.no_results_text = no_results_text
        self.classes: set[str] = set(classes)
        self.cardinality = cardinality
        self.name = name
        self._listeners: list[Callable[[], None]] = []
        self._nodes: list[HostNode] = []
        self._flat: list[HostOption] = []
        self._load(nodes)

    # ── Reading ──

    def read_options(self) -> list[HostNode]:
        """Return a snapshot of the option tree with current selection flags."""
        snapshot: list[HostNode] = []
        position = 0
        for node in self._nodes:
            if isinstance(node, HostGroup):
                children = []
                for _ in node.options:
                    children.append(self._snapshot_option(position))
                    position += 1
                snapshot.append(node.model_copy(update={"options": children}))
            else:
                snapshot.append(self._snapshot_option(position))
                position += 1
        return snapshot

    @property
    def option_count(self) -> int:
        return len(self._flat)

    @property
    def selected_index(self) -> int:
        for index in range(len(self._flat)):
            if self.is_selected(index):
                return index
        return -1

    @property
    def selected_values(self) -> list[str]:
        return [
            option.value for index, option in enumerate(self._flat) if self.is_selected(index)
        ]

    def is_selected(self, host_index: int) -> bool:
        if not 0 <= host_index < len(self._flat):
            return False
        if self._flat[host_index].selected:
            return True
        if self.multiple or any(option.selected for option in self._flat):
            return False
        return host_index == self._first_enabled_index()

    def option_value(self, host_index: int) -> str:
        return self._flat[host_index].value

    def option_text(self, host_index: int) -> str:
        return self._flat[host_index].text

    def option_disabled(self, host_index: int) -> bool:
        return self._flat[host_index].disabled

    # ── Writing ──

    def set_selected(self, host_index: int, selected: bool) -> None:
        if not 0 <= host_index < len(self._flat):
            logger.debug("Ignoring selection write to missing option %d", host_index)
            return
        if selected and not self.multiple:
            for option in self._flat:
                option.selected = False
        self._flat[host_index].selected = selected

    def replace_options(self, nodes: Iterable[HostNode]) -> None:
        """Swap the option tree and notify subscribers."""
        self._load(nodes)
        self._notify()

    def set_disabled(self, disabled: bool) -> None:
        self.disabled = disabled
        self._notify()

    def on_options_changed(self, callback: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # ── Internals ──

    def _load(self, nodes: Iterable[HostNode]) -> None:
        self._nodes = [node.model_copy(deep=True) for node in nodes]
        self._flat = []
        for node in self._nodes:
            if isinstance(node, HostGroup):
                for option in node.options:
                    if node.disabled:
                        option.disabled = True
                    self._flat.append(option)
            else:
                self._flat.append(node)
        if not self.multiple:
            # The last explicitly selected option wins in single mode.
            chosen = [i for i, option in enumerate(self._flat) if option.selected]
            for index in chosen[:-1]:
                self._flat[index].selected = False

    def _snapshot_option(self, position: int) -> HostOption:
        return self._flat[position].model_copy(
            update={"selected": self.is_selected(position)}
        )

    def _first_enabled_index(self) -> int:
        for index, option in enumerate(self._flat):
            if not option.disabled:
                return index
        return -1

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()
