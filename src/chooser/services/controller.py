"""Selection controller: filtering, highlighting, keyboard state and selection bookkeeping."""

from __future__ import annotations

import html
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from chooser.config import (
    DEFAULT_MULTIPLE_TEXT,
    DEFAULT_NO_RESULTS_TEXT,
    DEFAULT_SINGLE_TEXT,
    ChooserConfig,
)
from chooser.data.parser import select_to_array
from chooser.models.events import ChooserEvent, ValueChange
from chooser.models.options import FlatEntry, GroupRecord, OptionRecord
from chooser.models.results import (
    Choice,
    ControllerState,
    Key,
    ResultRow,
    ResultsViewport,
    SearchState,
    SelectMode,
)
from chooser.services.events import EventBus, Listener
from chooser.services.search import (
    build_highlight_pattern,
    build_search_pattern,
    highlight,
    normalize_query,
    search_string_match,
)

if TYPE_CHECKING:
    from chooser.data.protocols import SelectHost

logger = logging.getLogger(__name__)

_PASSIVE_KEYUPS = frozenset(
    {Key.TAB, Key.SHIFT, Key.CTRL, Key.ALT, Key.ARROW_UP, Key.ARROW_DOWN, Key.META}
)


class SelectionController:
    """Interactive state of one searchable select widget.

    The controller is the only writer of the host's selection. Every
    operation runs to completion and emits its notifications in order.
    """

    def __init__(
        self,
        host: SelectHost,
        config: ChooserConfig | None = None,
        *,
        viewport: ResultsViewport | None = None,
        listeners: Mapping[ChooserEvent, Listener] | None = None,
    ) -> None:
        self.host = host
        self.config = config or ChooserConfig()
        self.mode = SelectMode.MULTIPLE if host.multiple else SelectMode.SINGLE
        self.events = EventBus()
        for event, listener in (listeners or {}).items():
            self.events.subscribe(event, listener)
        self.viewport = viewport or ResultsViewport()

        self.search_state = SearchState()
        self.results_data: list[FlatEntry] = []
        self.rows: list[ResultRow] = []
        self.choices: list[Choice] = []
        self.default_text = ""
        self.results_none_found = ""
        self.selected_text = ""
        self.selected_is_default = True
        self.deselect_control_visible = False
        self.search_field_value = ""
        self.search_field_default = False
        self.search_readonly = False
        self.is_disabled = False
        self.active_field = False
        self.results_showing = False
        self.pending_backstroke: int | None = None
        self.backstroke_length = 0
        self.current_selected_index = host.selected_index
        self._selected_option_count: int | None = None
        self.allow_single_deselect = (
            self.config.allow_single_deselect
            and host.option_count > 0
            and host.option_text(0) == ""
        )

        self._set_default_text()
        self.results_build()
        self._unsubscribe_host = host.on_options_changed(self.results_update_field)
        self.events.emit(ChooserEvent.READY, self)

    # ── Derived state ──

    @property
    def is_multiple(self) -> bool:
        return self.mode is SelectMode.MULTIPLE

    @property
    def state(self) -> ControllerState:
        if not self.results_showing:
            return ControllerState.CLOSED
        if any(row.kind == "no_results" for row in self.rows):
            return ControllerState.OPEN_NO_MATCH
        return ControllerState.OPEN_WITH_RESULTS

    @property
    def highlighted(self) -> OptionRecord | None:
        if self.search_state.highlighted is None:
            return None
        return self._option_at(self.search_state.highlighted)

    @property
    def selected_options(self) -> list[OptionRecord]:
        return [
            entry
            for entry in self.results_data
            if isinstance(entry, OptionRecord) and entry.selected and not entry.empty
        ]

    @property
    def search_field_text(self) -> str:
        """Text the search input displays, placeholder included."""
        return self.default_text if self.search_field_default else self.search_field_value

    def choices_count(self) -> int:
        if self._selected_option_count is None:
            self._selected_option_count = sum(
                1 for index in range(self.host.option_count) if self.host.is_selected(index)
            )
        return self._selected_option_count

    def on(self, event: ChooserEvent, listener: Listener) -> Callable[[], None]:
        return self.events.subscribe(event, listener)

    def destroy(self) -> None:
        self._unsubscribe_host()

    # ── Public state machine ──

    def open(self) -> bool:
        return self.results_show()

    def close(self) -> None:
        self.results_hide()

    def toggle_open(self) -> None:
        if self.results_showing:
            self.results_hide()
        else:
            self.results_show()

    def search(self, text: str) -> None:
        """Store the query; re-filter only while the results are showing."""
        self.search_field_value = text
        self.search_field_default = False
        if self.results_showing:
            self.winnow_results()

    def input_text(self, text: str) -> None:
        """Replace the search input as typed by the user and react like a keystroke."""
        self.search_field_value = text
        self.search_field_default = False
        self.key_up(Key.CHARACTER)

    def select_highlighted(
        self, *, ctrl: bool = False, meta: bool = False
    ) -> Result[OptionRecord, str]:
        return self.result_select(ctrl=ctrl, meta=meta)

    def select(
        self, array_index: int, *, ctrl: bool = False, meta: bool = False
    ) -> Result[OptionRecord, str]:
        """Select a specific option, whether or not it is currently rendered."""
        option = self._option_at(array_index)
        if option is None or option.empty:
            return Err(f"No selectable option at index {array_index}")
        if option.disabled:
            return Err(f"Option {option.value!r} is disabled")
        if self.is_multiple and option.selected:
            return Err(f"Option {option.value!r} is already selected")
        if not self.result_do_highlight(array_index):
            self.search_state.highlighted = array_index
        return self.result_select(ctrl=ctrl, meta=meta)

    def deselect(self, array_index: int) -> Result[OptionRecord, str]:
        if self.is_multiple:
            return self.choice_destroy(array_index)
        result = self.result_deselect(array_index)
        if isinstance(result, Ok):
            self._sync_single_selection()
        return result

    # ── Build / rebuild ──

    def _set_default_text(self) -> None:
        if self.host.placeholder:
            text = self.host.placeholder
        elif self.is_multiple:
            text = (
                self.config.placeholder_text_multiple
                or self.config.placeholder_text
                or DEFAULT_MULTIPLE_TEXT
            )
        else:
            text = (
                self.config.placeholder_text_single
                or self.config.placeholder_text
                or DEFAULT_SINGLE_TEXT
            )
        self.default_text = html.escape(text, quote=False)
        self.results_none_found = (
            self.host.no_results_text or self.config.no_results_text or DEFAULT_NO_RESULTS_TEXT
        )

    def choice_label(self, option: OptionRecord) -> str:
        if self.config.include_group_label_in_selected and option.group_label is not None:
            return f"<b class='group-name'>{option.group_label}</b>{option.html}"
        return option.html

    def results_build(self) -> None:
        self._selected_option_count = None
        self.results_data = select_to_array(self.host.read_options())
        self.clear_backstroke()
        if self.is_multiple:
            self.choices = []
        else:
            self.single_set_selected_text()
            self.search_readonly = (
                self.config.disable_search
                or self.host.option_count <= self.config.disable_search_threshold
            )
        for entry in self.results_data:
            if not isinstance(entry, OptionRecord) or entry.empty or not entry.selected:
                continue
            if self.is_multiple:
                self.choice_build(entry)
            else:
                self.single_set_selected_text(self.choice_label(entry))
        self.rows = self.results_option_build()
        self._search_field_disabled()
        self.show_search_field_default()
        logger.debug(
            "Built %d entries (%d choices) for %s select",
            len(self.results_data),
            self.choices_count(),
            self.mode,
        )

    def results_update_field(self) -> None:
        """React to the host's option set changing."""
        self._set_default_text()
        if not self.is_multiple:
            self.results_reset_cleanup()
        self.result_clear_highlight()
        query = self.search_field_value
        self.results_build()
        if self.results_showing:
            # Typed text survives the rebuild and filters the new options.
            self.search_field_value = query
            self.search_field_default = False
            self.winnow_results()

    def _search_field_disabled(self) -> None:
        self.is_disabled = self.host.disabled
        if self.is_disabled:
            self.close_field()

    def results_option_build(self) -> list[ResultRow]:
        rows: list[ResultRow] = []
        for entry in self.results_data:
            if isinstance(entry, GroupRecord):
                row = self._result_add_group(entry)
            else:
                row = self._result_add_option(entry)
            if row is not None:
                rows.append(row)
            if len(rows) >= self.config.max_shown_results:
                break
        return rows

    def _result_add_option(self, option: OptionRecord) -> ResultRow | None:
        if not option.search_match or not self.include_option_in_results(option):
            return None
        selected_in_multi = option.selected and self.is_multiple
        return ResultRow(
            kind="option",
            array_index=option.array_index,
            html=option.search_text,
            title=option.title,
            classes=option.classes,
            active=not option.disabled and not selected_in_multi,
            disabled=option.disabled and not selected_in_multi,
            selected=option.selected,
            group_option=option.group_array_index is not None,
        )

    def _result_add_group(self, group: GroupRecord) -> ResultRow | None:
        if not (group.search_match or group.group_match) or group.active_options <= 0:
            return None
        return ResultRow(
            kind="group",
            array_index=group.array_index,
            html=group.search_text,
            title=group.title,
            classes=group.classes,
        )

    def include_option_in_results(self, entry: FlatEntry) -> bool:
        if isinstance(entry, OptionRecord):
            if self.is_multiple and not self.config.display_selected_options and entry.selected:
                return False
            if entry.empty:
                return False
        if not self.config.display_disabled_options and entry.disabled:
            return False
        return True

    # ── Winnow ──

    def winnow_results(self) -> None:
        self._no_results_clear()
        results = 0
        query = normalize_query(self.search_field_value)
        state = self.search_state
        state.query = query
        state.match_pattern = build_search_pattern(
            query,
            contains=self.config.search_contains,
            case_sensitive=self.config.case_sensitive_search,
        )
        state.highlight_pattern = build_highlight_pattern(
            query,
            contains=self.config.search_contains,
            case_sensitive=self.config.case_sensitive_search,
        )

        for entry in self.results_data:
            entry.search_match = False
            group: GroupRecord | None = None
            if not self.include_option_in_results(entry):
                continue

            if isinstance(entry, GroupRecord):
                entry.group_match = False
                entry.active_options = 0
                entry.search_text = entry.label
            else:
                group = self._group_of(entry)
                if group is not None:
                    if group.active_options == 0 and group.search_match:
                        results += 1
                    group.active_options += 1
                entry.search_text = entry.html

            if isinstance(entry, GroupRecord) and not self.config.group_search:
                continue

            entry.search_match = search_string_match(
                entry.search_text,
                state.match_pattern,
                split_words=self.config.enable_split_word_search,
            )
            if entry.search_match:
                if isinstance(entry, OptionRecord):
                    results += 1
                if query:
                    entry.search_text = highlight(entry.search_text, state.highlight_pattern)
                if group is not None:
                    group.group_match = True
            elif group is not None and group.search_match:
                # Children of a group whose label matched stay visible.
                entry.search_match = True

        self.result_clear_highlight()
        if results < 1 and query:
            self.rows = []
            self.no_results(query)
        else:
            self.rows = self.results_option_build()
            self.winnow_results_set_highlight()

    def _group_of(self, option: OptionRecord) -> GroupRecord | None:
        index = option.group_array_index
        if index is None or not 0 <= index < len(self.results_data):
            return None
        group = self.results_data[index]
        return group if isinstance(group, GroupRecord) else None

    def no_results(self, query: str) -> None:
        self.rows.append(
            ResultRow(kind="no_results", html=f"{self.results_none_found} <span>{query}</span>")
        )
        self.events.emit(ChooserEvent.NO_RESULTS, query)

    def _no_results_clear(self) -> None:
        self.rows = [row for row in self.rows if row.kind != "no_results"]

    def winnow_results_set_highlight(self) -> None:
        target: ResultRow | None = None
        if not self.is_multiple:
            target = next((r for r in self.rows if r.selected and r.active), None)
        if target is None:
            target = next((r for r in self.rows if r.active), None)
        if target is not None:
            self.result_do_highlight(target.array_index)

    # ── Highlight ──

    def result_do_highlight(self, array_index: int) -> bool:
        position = self._row_position(array_index)
        if position is None:
            return False
        self.result_clear_highlight()
        self.search_state.highlighted = array_index
        self.viewport.scroll_into_view(position)
        return True

    def result_clear_highlight(self) -> None:
        self.search_state.highlighted = None

    def _row_position(self, array_index: int) -> int | None:
        for position, row in enumerate(self.rows):
            if row.kind == "option" and row.array_index == array_index:
                return position
        return None

    def _active_row_positions(self) -> list[int]:
        return [position for position, row in enumerate(self.rows) if row.active]

    # ── Show / hide ──

    def results_show(self) -> bool:
        if self.is_disabled:
            return False
        if self.is_multiple and self.config.max_selected_options <= self.choices_count():
            logger.debug("Refusing to open: %d choices reached the limit", self.choices_count())
            self.events.emit(ChooserEvent.MAX_SELECTED, self)
            return False
        self.results_showing = True
        self.winnow_results()
        self.events.emit(ChooserEvent.SHOWING_DROPDOWN, self)
        return True

    def results_hide(self) -> None:
        if self.results_showing:
            self.result_clear_highlight()
            self.events.emit(ChooserEvent.HIDING_DROPDOWN, self)
        self.results_showing = False
        self.search_state = SearchState()

    def results_search(self) -> None:
        if self.results_showing:
            self.winnow_results()
        else:
            self.results_show()

    # ── Focus and pointer ──

    def activate_field(self) -> None:
        if self.is_disabled:
            return
        self.active_field = True

    def close_field(self) -> None:
        self.active_field = False
        self.results_hide()
        self.clear_backstroke()
        self.show_search_field_default()

    def container_mousedown(self) -> None:
        """Pointer press on the widget body."""
        if self.is_disabled:
            return
        if not self.active_field:
            if self.is_multiple:
                self.search_field_value = ""
                self.search_field_default = False
            self.results_show()
        elif not self.is_multiple:
            self.toggle_open()
        self.activate_field()

    def hover(self, array_index: int) -> None:
        if self._is_active_row(array_index):
            self.result_do_highlight(array_index)

    def mouse_out(self, array_index: int) -> None:
        if self._is_active_row(array_index):
            self.result_clear_highlight()

    def click_result(
        self, array_index: int, *, ctrl: bool = False, meta: bool = False
    ) -> Result[OptionRecord, str]:
        if not self._is_active_row(array_index):
            return Err(f"Result {array_index} is not selectable")
        self.search_state.highlighted = array_index
        return self.result_select(ctrl=ctrl, meta=meta)

    def _is_active_row(self, array_index: int) -> bool:
        position = self._row_position(array_index)
        return position is not None and self.rows[position].active

    # ── Keyboard ──

    def press(self, key: Key, *, ctrl: bool = False, meta: bool = False) -> bool:
        """Run a full key down/up cycle; True when a default action was suppressed."""
        prevented = self.key_down(key, ctrl=ctrl, meta=meta)
        return self.key_up(key, ctrl=ctrl, meta=meta) or prevented

    def key_down(self, key: Key, *, ctrl: bool = False, meta: bool = False) -> bool:
        if key is not Key.BACKSPACE and self.pending_backstroke is not None:
            self.clear_backstroke()
        match key:
            case Key.BACKSPACE:
                self.backstroke_length = len(self.search_field_value)
            case Key.TAB:
                if self.results_showing and not self.is_multiple:
                    self.result_select(ctrl=ctrl, meta=meta)
            case Key.ENTER | Key.ESCAPE:
                return self.results_showing
            case Key.SPACE:
                return self.config.disable_search
            case Key.ARROW_UP:
                self.keyup_arrow()
                return True
            case Key.ARROW_DOWN:
                self.keydown_arrow()
                return True
        return False

    def key_up(self, key: Key, *, ctrl: bool = False, meta: bool = False) -> bool:
        match key:
            case Key.BACKSPACE:
                if self.is_multiple and self.backstroke_length < 1 and self.choices_count() > 0:
                    self.keydown_backstroke()
                elif self.pending_backstroke is None:
                    self.result_clear_highlight()
                    self.results_search()
            case Key.ENTER:
                if self.results_showing:
                    self.result_select(ctrl=ctrl, meta=meta)
                return True
            case Key.ESCAPE:
                if self.results_showing:
                    self.results_hide()
            case _ if key in _PASSIVE_KEYUPS:
                pass
            case _:
                self.results_search()
        return False

    def keydown_arrow(self) -> None:
        current = self.search_state.highlighted
        if self.results_showing and current is not None:
            position = self._row_position(current)
            following = [
                p for p in self._active_row_positions() if position is None or p > position
            ]
            if following:
                self.result_do_highlight(self.rows[following[0]].array_index)
        else:
            self.results_show()

    def keyup_arrow(self) -> None:
        if not self.results_showing and not self.is_multiple:
            self.results_show()
            return
        current = self.search_state.highlighted
        if current is None:
            return
        position = self._row_position(current)
        preceding = [
            p for p in self._active_row_positions() if position is not None and p < position
        ]
        if preceding:
            self.result_do_highlight(self.rows[preceding[-1]].array_index)
            return
        if self.choices_count() > 0:
            self.results_hide()
        self.result_clear_highlight()

    def keydown_backstroke(self) -> None:
        """Remove the last choice, staging it first unless single-press delete is on."""
        if self.pending_backstroke is not None:
            self.choice_destroy(self.pending_backstroke)
            self.clear_backstroke()
            return
        if not self.choices or self.choices[-1].disabled:
            return
        last = self.choices[-1]
        self.pending_backstroke = last.array_index
        if self.config.single_backstroke_delete:
            self.keydown_backstroke()
        else:
            last.focused = True

    def clear_backstroke(self) -> None:
        if self.pending_backstroke is not None:
            for choice in self.choices:
                if choice.array_index == self.pending_backstroke:
                    choice.focused = False
        self.pending_backstroke = None

    # ── Selection ──

    def result_select(self, *, ctrl: bool = False, meta: bool = False) -> Result[OptionRecord, str]:
        if self.search_state.highlighted is None:
            return Err("No highlighted result")
        option = self._option_at(self.search_state.highlighted)
        self.result_clear_highlight()
        if option is None:
            return Err("Highlighted result no longer exists")

        if self.is_multiple and self.config.max_selected_options <= self.choices_count():
            logger.debug("Rejecting %r: selection limit reached", option.value)
            self.events.emit(ChooserEvent.MAX_SELECTED, self)
            return Err("Maximum number of selected options reached")

        if not self.is_multiple:
            self.reset_single_select_options()
        option.selected = True
        self.host.set_selected(option.options_index, True)
        self._selected_option_count = None
        if self.is_multiple:
            self.choice_build(option)
        else:
            self.single_set_selected_text(self.choice_label(option))
        self._refresh_row(option)

        suppressed = ctrl or meta
        if not self.is_multiple or (self.config.hide_results_on_select and not suppressed):
            self.results_hide()
            self.show_search_field_default()
        elif self.results_showing:
            self.search_state.pegged["results"] = True

        if self.is_multiple or self.host.selected_index != self.current_selected_index:
            self.events.emit(
                ChooserEvent.CHANGE,
                ValueChange(selected=self.host.option_value(option.options_index)),
            )
        self.current_selected_index = self.host.selected_index
        return Ok(option)

    def result_deselect(self, array_index: int) -> Result[OptionRecord, str]:
        option = self._option_at(array_index)
        if option is None or not 0 <= option.options_index < self.host.option_count:
            # Stale index after a rebuild: the entry is gone.
            return Err(f"No option at index {array_index}")
        if self.host.option_disabled(option.options_index):
            return Err(f"Option {option.value!r} is disabled")

        option.selected = False
        self.host.set_selected(option.options_index, False)
        self._selected_option_count = None
        self.result_clear_highlight()
        if self.results_showing:
            self.winnow_results()
        self.events.emit(
            ChooserEvent.CHANGE,
            ValueChange(deselected=self.host.option_value(option.options_index)),
        )
        return Ok(option)

    def choice_build(self, option: OptionRecord) -> None:
        self.choices.append(
            Choice(
                array_index=option.array_index,
                label=self.choice_label(option),
                disabled=option.disabled,
            )
        )

    def choice_destroy(self, array_index: int) -> Result[OptionRecord, str]:
        result = self.result_deselect(array_index)
        if isinstance(result, Err):
            return result
        self.choices = [choice for choice in self.choices if choice.array_index != array_index]
        if not self.active_field:
            self.show_search_field_default()
        if self.is_multiple and self.choices_count() > 0 and not self.search_field_value:
            self.results_hide()
        return result

    def reset_single_select_options(self) -> None:
        for entry in self.results_data:
            if isinstance(entry, OptionRecord) and entry.selected:
                entry.selected = False
                self._refresh_row(entry)

    def results_reset(self) -> None:
        """Clear a single selection back to the leading empty option."""
        if not self.allow_single_deselect or self.is_disabled:
            return
        self.reset_single_select_options()
        self.host.set_selected(0, True)
        self._selected_option_count = None
        self.single_set_selected_text()
        self.show_search_field_default()
        self.results_reset_cleanup()
        self.events.emit(ChooserEvent.CHANGE, ValueChange())
        if self.active_field:
            self.results_hide()

    def results_reset_cleanup(self) -> None:
        self.current_selected_index = self.host.selected_index
        self.deselect_control_visible = False

    def single_set_selected_text(self, text: str | None = None) -> None:
        if text is None:
            text = self.default_text
        self.selected_is_default = text == self.default_text
        if not self.selected_is_default and self.allow_single_deselect:
            self.deselect_control_visible = True
        self.selected_text = text

    def show_search_field_default(self) -> None:
        self.search_field_value = ""
        self.search_field_default = (
            self.is_multiple and self.choices_count() < 1 and not self.active_field
        )

    def _sync_single_selection(self) -> None:
        label: str | None = None
        for entry in self.results_data:
            if not isinstance(entry, OptionRecord):
                continue
            entry.selected = self.host.is_selected(entry.options_index)
            if entry.selected and not entry.empty:
                label = self.choice_label(entry)
        self.single_set_selected_text(label)
        self.current_selected_index = self.host.selected_index

    def _refresh_row(self, option: OptionRecord) -> None:
        position = self._row_position(option.array_index)
        if position is None:
            return
        selected_in_multi = option.selected and self.is_multiple
        self.rows[position] = self.rows[position].model_copy(
            update={
                "active": not option.disabled and not selected_in_multi,
                "disabled": option.disabled and not selected_in_multi,
                "selected": option.selected,
            }
        )

    def _option_at(self, array_index: int) -> OptionRecord | None:
        if not 0 <= array_index < len(self.results_data):
            return None
        entry = self.results_data[array_index]
        return entry if isinstance(entry, OptionRecord) else None
