"""Tests for the in-memory host and the JSON option loader."""

from __future__ import annotations

import json
from pathlib import Path

from result import Err, Ok

from chooser.data.host import ListSelectHost
from chooser.data.loader import load_host, parse_host_nodes
from chooser.models.options import HostGroup, HostOption


class TestListSelectHost:
    def test_single_select_defaults_to_first_enabled(self) -> None:
        host = ListSelectHost([HostOption(text="Off", disabled=True), HostOption(text="On")])
        assert host.selected_index == 1
        assert host.selected_values == ["On"]

    def test_last_explicit_selection_wins_in_single_mode(self) -> None:
        host = ListSelectHost(
            [HostOption(text="A", selected=True), HostOption(text="B", selected=True)]
        )
        assert host.selected_values == ["B"]

    def test_multi_select_has_no_implicit_selection(
        self, multi_color_host: ListSelectHost
    ) -> None:
        assert multi_color_host.selected_index == -1
        multi_color_host.set_selected(0, True)
        multi_color_host.set_selected(2, True)
        assert multi_color_host.selected_values == ["r", "b"]

    def test_single_set_selected_clears_others(self, color_host: ListSelectHost) -> None:
        color_host.set_selected(2, True)
        color_host.set_selected(1, True)
        assert color_host.selected_values == ["g"]

    def test_out_of_range_writes_are_ignored(self, color_host: ListSelectHost) -> None:
        color_host.set_selected(10, True)
        assert not color_host.is_selected(10)
        assert color_host.selected_values == ["r"]

    def test_group_disabled_propagates(self) -> None:
        host = ListSelectHost([HostGroup(label="G", disabled=True, options=[HostOption(text="x")])])
        assert host.option_disabled(0)

    def test_read_options_returns_snapshots(self, grouped_host: ListSelectHost) -> None:
        grouped_host.set_selected(3, True)
        snapshot = grouped_host.read_options()

        group = snapshot[1]
        assert isinstance(group, HostGroup)
        assert [option.selected for option in group.options] == [False, True]

        group.options[0].text = "changed"
        assert grouped_host.option_text(2) == "Carrot"

    def test_listeners_and_unsubscribe(self, color_host: ListSelectHost) -> None:
        calls: list[str] = []
        unsubscribe = color_host.on_options_changed(lambda: calls.append("changed"))

        color_host.replace_options([HostOption(text="Only")])
        unsubscribe()
        color_host.set_disabled(True)

        assert calls == ["changed"]
        assert color_host.option_count == 1
        assert color_host.disabled


def test_parse_host_nodes_skips_invalid_rows() -> None:
    nodes = parse_host_nodes(
        [{"text": "A"}, {"nope": 1}, {"label": "G", "options": [{"text": "B"}]}]
    )
    assert [type(node) for node in nodes] == [HostOption, HostGroup]


def test_parse_host_nodes_regroups_flat_rows() -> None:
    nodes = parse_host_nodes(
        [
            {"text": "Apple", "group_label": "Fruits"},
            {"text": "Pear", "group_label": "Fruits"},
            {"text": "Loose"},
        ]
    )
    assert [type(node) for node in nodes] == [HostGroup, HostOption]


def test_load_host_from_document(options_file: Path) -> None:
    result = load_host(options_file)

    assert isinstance(result, Ok)
    host = result.ok_value
    assert not host.multiple
    assert host.placeholder == "Pick a color"
    assert host.classes == {"chosen-enable", "wide"}
    assert host.option_count == 4
    assert host.option_disabled(3)
    assert host.name == "options"


def test_load_host_mode_override(options_file: Path) -> None:
    result = load_host(options_file, multiple=True)
    assert isinstance(result, Ok)
    assert result.ok_value.multiple


def test_load_host_accepts_plain_list(tmp_path: Path) -> None:
    path = tmp_path / "plain.json"
    path.write_text(json.dumps([{"text": "A"}, {"text": "B", "value": "b"}]), encoding="utf-8")

    result = load_host(path)

    assert isinstance(result, Ok)
    assert result.ok_value.option_value(1) == "b"


def test_load_host_errors(tmp_path: Path) -> None:
    missing = load_host(tmp_path / "missing.json")
    assert isinstance(missing, Err)
    assert "Cannot read" in missing.err_value

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    invalid = load_host(broken)
    assert isinstance(invalid, Err)
    assert "Invalid JSON" in invalid.err_value

    scalar = tmp_path / "scalar.json"
    scalar.write_text("42", encoding="utf-8")
    assert isinstance(load_host(scalar), Err)
