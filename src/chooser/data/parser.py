"""Flatten a host option tree into the indexed list used for search and rendering."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from chooser.models.options import (
    FlatEntry,
    GroupRecord,
    HostGroup,
    HostNode,
    HostOption,
    OptionRecord,
)

_NEEDS_ESCAPE = re.compile(r"[&<>\"'`]")
_ESCAPE_TARGETS = re.compile(r"&(?!\w+;)|[<>\"'`]")
_ENTITIES = {
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "`": "&#x60;",
}


def escape_expression(text: str | None) -> str:
    """Escape text for literal rendering, leaving existing entities intact."""
    if not text:
        return ""
    if not _NEEDS_ESCAPE.search(text):
        return text
    return _ESCAPE_TARGETS.sub(lambda m: _ENTITIES.get(m.group(0), "&amp;"), text)


class SelectParser:
    """Accumulates flat records while walking host nodes in source order."""

    def __init__(self) -> None:
        self.options_index = 0
        self.parsed: list[FlatEntry] = []

    def add_node(self, node: HostNode) -> None:
        if isinstance(node, HostGroup):
            self.add_group(node)
        else:
            self.add_option(node)

    def add_group(self, group: HostGroup) -> None:
        group_index = len(self.parsed)
        self.parsed.append(
            GroupRecord(
                array_index=group_index,
                label=escape_expression(group.label),
                title=group.title,
                disabled=group.disabled,
                classes=group.classes,
            )
        )
        for option in group.options:
            self.add_option(option, group_index, group.disabled)

    def add_option(
        self,
        option: HostOption,
        group_index: int | None = None,
        group_disabled: bool = False,
    ) -> None:
        if option.text != "":
            group_label = None
            if group_index is not None:
                group = self.parsed[group_index]
                assert isinstance(group, GroupRecord)
                group.children += 1
                group_label = group.label
            self.parsed.append(
                OptionRecord(
                    array_index=len(self.parsed),
                    options_index=self.options_index,
                    value=option.value,
                    text=option.text,
                    html=_option_html(option),
                    title=option.title,
                    selected=option.selected,
                    disabled=True if group_disabled else option.disabled,
                    group_array_index=group_index,
                    group_label=group_label,
                    classes=option.classes,
                )
            )
        else:
            self.parsed.append(
                OptionRecord(
                    array_index=len(self.parsed),
                    options_index=self.options_index,
                    empty=True,
                )
            )
        self.options_index += 1


def _option_html(option: HostOption) -> str:
    if option.raw_markup is not None:
        return option.raw_markup
    return escape_expression(option.text)


def select_to_array(nodes: Iterable[HostNode]) -> list[FlatEntry]:
    """Parse host nodes into flat records; groups precede their children."""
    parser = SelectParser()
    for node in nodes:
        parser.add_node(node)
    return parser.parsed


def host_tree_from_rows(rows: Sequence[HostOption]) -> list[HostNode]:
    """Group flat host rows by consecutive ``group_label`` runs."""
    tree: list[HostNode] = []
    current: HostGroup | None = None
    for row in rows:
        if row.group_label is None:
            current = None
            tree.append(row)
            continue
        if current is None or current.label != row.group_label:
            current = HostGroup(label=row.group_label)
            tree.append(current)
        current.options.append(row)
    return tree
