"""Rounded chip showing one selected choice of a multi-select widget."""

from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QPushButton, QWidget

from chooser.models.results import Choice
from chooser.ui.theme import COLORS, chip_style, strip_markup


class ChoiceChip(QPushButton):
    """A chip that asks to be removed when clicked, unless its option is disabled."""

    remove_requested = Signal(int)  # array_index

    def __init__(self, choice: Choice, *, parent: QWidget | None = None) -> None:
        label = strip_markup(choice.label)
        super().__init__(label if choice.disabled else f"{label}  ×", parent)
        self.array_index = choice.array_index
        self._removable = not choice.disabled
        self.setEnabled(self._removable)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.clicked.connect(self._on_clicked)
        self.set_focused(choice.focused)

    def set_focused(self, focused: bool) -> None:
        """Staged-for-removal chips render in the inactive style."""
        color = COLORS["primary"] if self._removable else COLORS["disabled"]
        self.setStyleSheet(chip_style(color, active=not focused))

    def _on_clicked(self) -> None:
        if self._removable:
            self.remove_requested.emit(self.array_index)
