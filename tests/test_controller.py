"""Tests for the selection controller state machine."""

from __future__ import annotations

import pytest
from result import Err, Ok

from chooser.config import ChooserConfig
from chooser.data.host import ListSelectHost
from chooser.models.events import ChooserEvent, ValueChange
from chooser.models.options import HostGroup, HostOption
from chooser.models.results import ControllerState, Key, ResultsViewport, SearchState
from chooser.services.controller import SelectionController


def _texts(controller: SelectionController) -> list[str]:
    return [row.html for row in controller.rows]


class TestSingleSelect:
    def test_ready_is_emitted_on_construction(self, color_host: ListSelectHost, recorder) -> None:
        controller = SelectionController(color_host, listeners={ChooserEvent.READY: recorder})
        assert recorder.of(ChooserEvent.READY) == [controller]

    def test_type_and_enter_selects_match(self, color_host: ListSelectHost, recorder) -> None:
        controller = SelectionController(color_host)
        recorder.attach(controller)
        assert controller.selected_text == "Red"

        assert controller.open()
        assert controller.highlighted is not None
        assert controller.highlighted.text == "Red"

        controller.search("gr")
        assert _texts(controller) == ["<em>Gr</em>een"]
        assert controller.highlighted is not None
        assert controller.highlighted.value == "g"

        assert controller.press(Key.ENTER) is True
        assert controller.selected_text == "Green"
        assert color_host.selected_values == ["g"]
        assert controller.state is ControllerState.CLOSED
        assert recorder.of(ChooserEvent.CHANGE) == [ValueChange(selected="g")]
        assert recorder.names() == [
            ChooserEvent.SHOWING_DROPDOWN,
            ChooserEvent.HIDING_DROPDOWN,
            ChooserEvent.CHANGE,
        ]

    def test_reselecting_current_option_emits_no_change(
        self, color_host: ListSelectHost, recorder
    ) -> None:
        controller = SelectionController(color_host)
        recorder.attach(controller)

        assert isinstance(controller.select(0), Ok)
        assert recorder.of(ChooserEvent.CHANGE) == []

    def test_open_highlights_current_selection(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)
        controller.select(2)

        controller.open()

        assert controller.search_state.highlighted == 2

    def test_search_while_closed_only_stores_text(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)
        controller.search("bl")

        assert controller.state is ControllerState.CLOSED
        assert controller.search_field_value == "bl"

        controller.open()
        assert _texts(controller) == ["<em>Bl</em>ue"]

    def test_typing_opens_and_filters(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)
        controller.input_text("bl")

        assert controller.state is ControllerState.OPEN_WITH_RESULTS
        assert _texts(controller) == ["<em>Bl</em>ue"]

    def test_tab_selects_highlighted(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)
        controller.press(Key.ARROW_DOWN)
        controller.press(Key.ARROW_DOWN)

        controller.press(Key.TAB)

        assert color_host.selected_values == ["g"]
        assert controller.state is ControllerState.CLOSED

    def test_arrow_navigation_and_close_at_top(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)

        assert controller.press(Key.ARROW_DOWN) is True
        assert controller.search_state.highlighted == 0
        controller.press(Key.ARROW_DOWN)
        controller.press(Key.ARROW_DOWN)
        assert controller.search_state.highlighted == 2
        controller.press(Key.ARROW_DOWN)
        assert controller.search_state.highlighted == 2

        controller.press(Key.ARROW_UP)
        controller.press(Key.ARROW_UP)
        assert controller.search_state.highlighted == 0
        controller.press(Key.ARROW_UP)
        assert controller.state is ControllerState.CLOSED
        assert controller.search_state.highlighted is None

    def test_arrow_up_opens_closed_single_select(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)
        controller.press(Key.ARROW_UP)
        assert controller.state is ControllerState.OPEN_WITH_RESULTS

    def test_escape_closes(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)
        controller.open()

        assert controller.key_down(Key.ESCAPE) is True
        controller.key_up(Key.ESCAPE)

        assert controller.state is ControllerState.CLOSED
        assert controller.key_down(Key.ESCAPE) is False

    def test_placeholder_option_scenario(self, recorder) -> None:
        host = ListSelectHost(
            [
                HostOption(text=""),
                HostOption(text="Red"),
                HostOption(text="Green"),
                HostOption(text="Blue"),
            ]
        )
        controller = SelectionController(host)
        recorder.attach(controller)

        controller.open()
        assert controller.state is ControllerState.OPEN_WITH_RESULTS
        assert _texts(controller) == ["Red", "Green", "Blue"]
        assert all(row.array_index != 0 for row in controller.rows)

        controller.search("gr")
        assert _texts(controller) == ["<em>Gr</em>een"]
        assert controller.search_state.highlighted == 2

        assert isinstance(controller.select_highlighted(), Ok)
        assert host.selected_values == ["Green"]
        assert controller.state is ControllerState.CLOSED
        assert recorder.of(ChooserEvent.CHANGE) == [ValueChange(selected="Green")]

    def test_close_clears_search_state_but_keeps_text(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)
        controller.open()
        controller.search("gr")

        controller.close()

        assert controller.search_state == SearchState()
        assert controller.search_field_value == "gr"
        controller.open()
        assert _texts(controller) == ["<em>Gr</em>een"]

    def test_results_reset_returns_to_placeholder(self, recorder) -> None:
        host = ListSelectHost(
            [HostOption(text=""), HostOption(text="Red", value="r"), HostOption(text="Green")]
        )
        controller = SelectionController(host, ChooserConfig(allow_single_deselect=True))
        recorder.attach(controller)
        assert controller.allow_single_deselect
        assert controller.selected_is_default
        assert controller.selected_text == "Select an Option"
        assert not controller.deselect_control_visible

        controller.select(1)
        assert controller.selected_text == "Red"
        assert controller.deselect_control_visible

        controller.results_reset()

        assert host.selected_index == 0
        assert controller.selected_is_default
        assert not controller.deselect_control_visible
        assert recorder.of(ChooserEvent.CHANGE) == [ValueChange(selected="r"), ValueChange()]

    def test_results_reset_requires_leading_empty_option(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host, ChooserConfig(allow_single_deselect=True))
        assert not controller.allow_single_deselect

        controller.results_reset()

        assert color_host.selected_values == ["r"]

    def test_deselect_in_single_mode_falls_back_to_host_selection(
        self, color_host: ListSelectHost
    ) -> None:
        controller = SelectionController(color_host)
        controller.select(1)

        assert isinstance(controller.deselect(1), Ok)

        # Native single selects fall back to their first enabled option.
        assert color_host.selected_values == ["r"]
        assert controller.selected_text == "Red"

    def test_search_disabled_below_threshold(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host, ChooserConfig(disable_search_threshold=5))
        assert controller.search_readonly

        searchable = SelectionController(color_host, ChooserConfig(disable_search_threshold=2))
        assert not searchable.search_readonly

    def test_space_is_suppressed_only_without_search(self, color_host: ListSelectHost) -> None:
        assert SelectionController(color_host).key_down(Key.SPACE) is False
        readonly = SelectionController(color_host, ChooserConfig(disable_search=True))
        assert readonly.key_down(Key.SPACE) is True


class TestMultiSelect:
    def test_placeholder_shows_in_search_field(self, multi_color_host: ListSelectHost) -> None:
        controller = SelectionController(multi_color_host)
        assert controller.search_field_default
        assert controller.search_field_text == "Select Some Options"

    def test_capacity_limit(self, multi_color_host: ListSelectHost, recorder) -> None:
        controller = SelectionController(
            multi_color_host, ChooserConfig(max_selected_options=2)
        )
        recorder.attach(controller)

        controller.open()
        assert isinstance(controller.select_highlighted(), Ok)
        controller.open()
        assert controller.search_state.highlighted == 1
        assert isinstance(controller.select_highlighted(), Ok)
        assert multi_color_host.selected_values == ["r", "g"]

        assert controller.open() is False
        assert controller.state is ControllerState.CLOSED

        result = controller.select(2)
        assert isinstance(result, Err)
        assert multi_color_host.selected_values == ["r", "g"]
        assert len(recorder.of(ChooserEvent.MAX_SELECTED)) == 2
        assert recorder.of(ChooserEvent.CHANGE) == [
            ValueChange(selected="r"),
            ValueChange(selected="g"),
        ]

    def test_select_then_deselect_restores_placeholder(
        self, multi_color_host: ListSelectHost, recorder
    ) -> None:
        controller = SelectionController(multi_color_host)
        recorder.attach(controller)

        controller.select(0)
        assert [choice.label for choice in controller.choices] == ["Red"]
        assert not controller.search_field_default

        assert isinstance(controller.deselect(0), Ok)
        assert controller.choices == []
        assert controller.search_field_text == "Select Some Options"
        assert multi_color_host.selected_values == []
        assert recorder.of(ChooserEvent.CHANGE) == [
            ValueChange(selected="r"),
            ValueChange(deselected="r"),
        ]

    def test_selected_rows_are_inactive(self, multi_color_host: ListSelectHost) -> None:
        controller = SelectionController(multi_color_host)
        controller.select(0)
        controller.open()

        red = controller.rows[0]
        assert red.selected and not red.active
        assert red.css_classes() == ["result-selected"]
        assert controller.search_state.highlighted == 1

    def test_selected_options_can_be_hidden(self, multi_color_host: ListSelectHost) -> None:
        controller = SelectionController(
            multi_color_host, ChooserConfig(display_selected_options=False)
        )
        controller.select(0)
        controller.open()
        assert _texts(controller) == ["Green", "Blue"]

    def test_ctrl_select_keeps_results_open(self, multi_color_host: ListSelectHost) -> None:
        controller = SelectionController(multi_color_host)
        controller.open()

        controller.select_highlighted(ctrl=True)

        assert controller.state is ControllerState.OPEN_WITH_RESULTS
        assert controller.search_state.pegged["results"] is True
        assert multi_color_host.selected_values == ["r"]

    def test_hide_on_select_disabled_keeps_results_open(
        self, multi_color_host: ListSelectHost
    ) -> None:
        controller = SelectionController(
            multi_color_host, ChooserConfig(hide_results_on_select=False)
        )
        controller.open()
        controller.select_highlighted()
        assert controller.results_showing

    def test_max_shown_results_caps_rows_not_choices(self) -> None:
        host = ListSelectHost(
            [HostOption(text=name, selected=True) for name in ("A", "B", "C", "D")],
            multiple=True,
        )
        controller = SelectionController(host, ChooserConfig(max_shown_results=2))
        assert len(controller.choices) == 4

        controller.open()
        assert len(controller.rows) == 2

    def test_disabled_choice_cannot_be_removed(self) -> None:
        host = ListSelectHost(
            [HostOption(text="Red", selected=True, disabled=True), HostOption(text="Green")],
            multiple=True,
        )
        controller = SelectionController(host)

        assert isinstance(controller.deselect(0), Err)
        assert [choice.array_index for choice in controller.choices] == [0]
        assert host.selected_values == ["Red"]

    def test_stale_index_is_rejected(self, multi_color_host: ListSelectHost) -> None:
        controller = SelectionController(multi_color_host)
        assert isinstance(controller.deselect(99), Err)
        assert isinstance(controller.select(99), Err)

    def test_pointer_hover_and_click(self, multi_color_host: ListSelectHost) -> None:
        controller = SelectionController(multi_color_host)
        controller.open()

        controller.hover(1)
        assert controller.search_state.highlighted == 1
        controller.mouse_out(1)
        assert controller.search_state.highlighted is None

        assert isinstance(controller.click_result(2), Ok)
        assert multi_color_host.selected_values == ["b"]
        controller.open()
        assert isinstance(controller.click_result(2), Err)

    def test_group_label_included_in_choice(self, grouped_host: ListSelectHost) -> None:
        controller = SelectionController(
            grouped_host, ChooserConfig(include_group_label_in_selected=True)
        )
        controller.select(1)
        assert controller.choices[0].label == "<b class='group-name'>Fruits</b>Apple"


class TestBackstroke:
    @pytest.fixture
    def two_selected(self) -> ListSelectHost:
        return ListSelectHost(
            [
                HostOption(text="Red", value="r", selected=True),
                HostOption(text="Green", value="g", selected=True),
                HostOption(text="Blue", value="b"),
            ],
            multiple=True,
        )

    def test_single_press_removes_last_choice(self, two_selected: ListSelectHost) -> None:
        controller = SelectionController(two_selected)

        controller.press(Key.BACKSPACE)

        assert two_selected.selected_values == ["r"]
        assert [choice.label for choice in controller.choices] == ["Red"]
        assert controller.pending_backstroke is None

    def test_staged_removal_needs_second_press(self, two_selected: ListSelectHost) -> None:
        controller = SelectionController(
            two_selected, ChooserConfig(single_backstroke_delete=False)
        )

        controller.press(Key.BACKSPACE)
        assert two_selected.selected_values == ["r", "g"]
        assert controller.pending_backstroke == 1
        assert controller.choices[-1].focused

        controller.press(Key.BACKSPACE)
        assert two_selected.selected_values == ["r"]

    def test_other_key_cancels_staged_removal(self, two_selected: ListSelectHost) -> None:
        controller = SelectionController(
            two_selected, ChooserConfig(single_backstroke_delete=False)
        )
        controller.press(Key.BACKSPACE)

        controller.key_down(Key.SHIFT)

        assert controller.pending_backstroke is None
        assert not controller.choices[-1].focused

    def test_backspace_with_text_only_searches(self, two_selected: ListSelectHost) -> None:
        controller = SelectionController(two_selected)
        controller.search_field_value = "bl"

        controller.press(Key.BACKSPACE)

        assert two_selected.selected_values == ["r", "g"]
        assert controller.state is ControllerState.OPEN_WITH_RESULTS


class TestWinnow:
    def test_empty_query_shows_everything(self, grouped_host: ListSelectHost) -> None:
        controller = SelectionController(grouped_host)
        controller.open()

        assert _texts(controller) == [
            "Fruits",
            "Apple",
            "Banana",
            "Vegetables",
            "Carrot",
            "Leek",
        ]
        assert [row.kind for row in controller.rows][:2] == ["group", "option"]
        assert controller.rows[1].group_option
        assert controller.search_state.highlighted == 1

    def test_group_label_match_keeps_children(self, grouped_host: ListSelectHost) -> None:
        controller = SelectionController(grouped_host)
        controller.open()

        controller.search("veg")

        assert _texts(controller) == ["<em>Veg</em>etables", "Carrot", "Leek"]
        assert controller.search_state.highlighted == 4

    def test_child_match_shows_its_group(self, grouped_host: ListSelectHost) -> None:
        controller = SelectionController(grouped_host)
        controller.open()

        controller.search("car")

        assert _texts(controller) == ["Vegetables", "<em>Car</em>rot"]

    def test_group_search_can_be_disabled(self, grouped_host: ListSelectHost) -> None:
        controller = SelectionController(grouped_host, ChooserConfig(group_search=False))
        controller.open()

        controller.search("veg")

        assert controller.state is ControllerState.OPEN_NO_MATCH

    def test_no_results_row_and_notification(
        self, color_host: ListSelectHost, recorder
    ) -> None:
        controller = SelectionController(color_host)
        recorder.attach(controller)
        controller.open()

        controller.search("xyz")

        assert controller.state is ControllerState.OPEN_NO_MATCH
        assert _texts(controller) == ["No results match <span>xyz</span>"]
        assert controller.rows[0].css_classes() == ["no-results"]
        assert controller.search_state.highlighted is None
        assert recorder.of(ChooserEvent.NO_RESULTS) == ["xyz"]

    def test_quoted_text_is_escaped_and_still_matches(self) -> None:
        host = ListSelectHost([HostOption(text="Tom's"), HostOption(text="Tim")])
        controller = SelectionController(host)
        controller.open()

        controller.search("tom's")

        assert _texts(controller) == ["<em>Tom&#x27;s</em>"]

    def test_winnow_is_idempotent(self, grouped_host: ListSelectHost) -> None:
        controller = SelectionController(grouped_host)
        controller.open()
        controller.search("a")
        first = list(controller.rows)

        controller.winnow_results()

        assert controller.rows == first

    def test_disabled_options_can_be_hidden(self) -> None:
        host = ListSelectHost([HostOption(text="Red"), HostOption(text="Rust", disabled=True)])
        shown = SelectionController(host)
        shown.open()
        assert [row.disabled for row in shown.rows] == [False, True]

        hidden = SelectionController(host, ChooserConfig(display_disabled_options=False))
        hidden.open()
        assert _texts(hidden) == ["Red"]

    def test_disabled_group_is_not_selectable(self) -> None:
        host = ListSelectHost(
            [HostGroup(label="Old", disabled=True, options=[HostOption(text="Legacy")])],
            multiple=True,
        )
        controller = SelectionController(host)
        assert isinstance(controller.select(1), Err)


class TestHostChanges:
    def test_rebuild_while_open(self, multi_color_host: ListSelectHost) -> None:
        controller = SelectionController(multi_color_host)
        controller.open()

        multi_color_host.replace_options([HostOption(text="Cyan"), HostOption(text="Magenta")])

        assert _texts(controller) == ["Cyan", "Magenta"]
        assert controller.state is ControllerState.OPEN_WITH_RESULTS

    def test_rebuild_while_open_keeps_typed_search(
        self, multi_color_host: ListSelectHost
    ) -> None:
        controller = SelectionController(multi_color_host)
        controller.open()
        controller.search("gr")

        multi_color_host.replace_options(
            [
                HostOption(text="Red", value="r"),
                HostOption(text="Green", value="g"),
                HostOption(text="Blue", value="b"),
            ]
        )

        assert controller.search_field_value == "gr"
        assert _texts(controller) == ["<em>Gr</em>een"]
        assert controller.search_state.highlighted == 1
        assert controller.state is ControllerState.OPEN_WITH_RESULTS

    def test_disabling_host_closes_widget(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)
        controller.open()

        color_host.set_disabled(True)

        assert controller.is_disabled
        assert controller.state is ControllerState.CLOSED
        assert controller.open() is False
        controller.container_mousedown()
        assert not controller.active_field

    def test_destroy_stops_listening(self, color_host: ListSelectHost) -> None:
        controller = SelectionController(color_host)
        controller.destroy()

        color_host.replace_options([HostOption(text="Cyan")])

        assert len(controller.results_data) == 3

    def test_placeholder_precedence(self, color_host: ListSelectHost) -> None:
        config = ChooserConfig(placeholder_text="Generic", placeholder_text_single="Single")
        assert SelectionController(color_host, config).default_text == "Single"
        generic = SelectionController(color_host, ChooserConfig(placeholder_text="Generic"))
        assert generic.default_text == "Generic"

        color_host.placeholder = "From host"
        assert SelectionController(color_host, config).default_text == "From host"


def test_viewport_follows_keyboard_highlight() -> None:
    host = ListSelectHost([HostOption(text=name) for name in "ABCDE"], multiple=True)
    viewport = ResultsViewport(max_height=48, row_height=24)
    controller = SelectionController(host, viewport=viewport)

    controller.open()
    assert viewport.scroll_top == 0
    controller.press(Key.ARROW_DOWN)
    controller.press(Key.ARROW_DOWN)
    assert viewport.scroll_top == 24
    controller.press(Key.ARROW_DOWN)
    assert viewport.scroll_top == 48

    controller.press(Key.ARROW_UP)
    assert viewport.scroll_top == 48
    controller.press(Key.ARROW_UP)
    assert viewport.scroll_top == 24


def test_viewport_scroll_into_view() -> None:
    viewport = ResultsViewport(max_height=100, row_height=20, scroll_top=0)
    assert viewport.scroll_into_view(2) == 0
    assert viewport.scroll_into_view(6) == 40
    assert viewport.scroll_into_view(1) == 20
