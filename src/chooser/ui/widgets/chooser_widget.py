"""Qt front-end that renders a SelectionController and feeds it user input."""

from __future__ import annotations

import logging
from typing import Any, cast

from PySide6.QtCore import QEvent, QModelIndex, QObject, Qt, Signal
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QLineEdit,
    QListView,
    QPushButton,
    QVBoxLayout,
    QWidget,
)
from result import Err

from chooser.models.events import ChooserEvent
from chooser.models.results import Key
from chooser.services.controller import SelectionController
from chooser.ui.theme import strip_markup
from chooser.ui.widgets.choice_chip import ChoiceChip
from chooser.ui.widgets.results_model import ResultListModel, ResultRowRoles

logger = logging.getLogger(__name__)

_KEY_MAP: dict[int, Key] = {
    Qt.Key.Key_Backspace: Key.BACKSPACE,
    Qt.Key.Key_Tab: Key.TAB,
    Qt.Key.Key_Return: Key.ENTER,
    Qt.Key.Key_Enter: Key.ENTER,
    Qt.Key.Key_Escape: Key.ESCAPE,
    Qt.Key.Key_Space: Key.SPACE,
    Qt.Key.Key_Up: Key.ARROW_UP,
    Qt.Key.Key_Down: Key.ARROW_DOWN,
    Qt.Key.Key_Shift: Key.SHIFT,
    Qt.Key.Key_Control: Key.CTRL,
    Qt.Key.Key_Alt: Key.ALT,
    Qt.Key.Key_Meta: Key.META,
}


def map_qt_key(qt_key: int) -> Key:
    """Translate a Qt key code into the controller's abstract key."""
    return _KEY_MAP.get(qt_key, Key.CHARACTER)


class ChooserWidget(QWidget):
    """Searchable dropdown: selection label or chips, search input and results list."""

    value_changed = Signal(object)  # ValueChange
    notified = Signal(str, object)  # event name, payload

    def __init__(self, controller: SelectionController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._key_held = False
        self._chips: list[ChoiceChip] = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        # ── Current selection ──
        self._single = QPushButton()
        self._single.setObjectName("chooserSingle")
        self._single.clicked.connect(self._on_single_clicked)
        self._deselect = QPushButton("×")
        self._deselect.setFixedWidth(28)
        self._deselect.clicked.connect(self._on_deselect_clicked)
        single_row = QHBoxLayout()
        single_row.setContentsMargins(0, 0, 0, 0)
        single_row.addWidget(self._single, stretch=1)
        single_row.addWidget(self._deselect)
        self._single_container = QWidget()
        self._single_container.setLayout(single_row)
        layout.addWidget(self._single_container)

        self._chip_row = QHBoxLayout()
        self._chip_row.setContentsMargins(0, 0, 0, 0)
        self._chip_row.setSpacing(6)
        self._chip_row.addStretch()
        self._chip_container = QWidget()
        self._chip_container.setLayout(self._chip_row)
        layout.addWidget(self._chip_container)

        # ── Search input ──
        self._search = QLineEdit()
        self._search.setObjectName("chooserSearch")
        self._search.textEdited.connect(self._on_text_edited)
        self._search.installEventFilter(self)
        layout.addWidget(self._search)

        # ── Results ──
        self._model = ResultListModel(self)
        self._results = QListView()
        self._results.setObjectName("chooserResults")
        self._results.setModel(self._model)
        self._results.setMouseTracking(True)
        self._results.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self._results.setVerticalScrollMode(QAbstractItemView.ScrollMode.ScrollPerPixel)
        self._results.setMaximumHeight(controller.viewport.max_height)
        self._results.entered.connect(self._on_result_entered)
        self._results.clicked.connect(self._on_result_clicked)
        layout.addWidget(self._results)

        self._single_container.setVisible(not controller.is_multiple)
        self._chip_container.setVisible(controller.is_multiple)

        for event in ChooserEvent:
            controller.on(event, self._forward_event)
        self._unsubscribe_host = controller.host.on_options_changed(self.refresh)
        self.refresh()

    @property
    def controller(self) -> SelectionController:
        return self._controller

    # ── Rendering ──

    def refresh(self) -> None:
        """Re-render every part of the widget from controller state."""
        c = self._controller
        if c.is_multiple:
            self._rebuild_chips()
        else:
            self._single.setText(strip_markup(c.selected_text))
            self._single.setProperty("placeholder", c.selected_is_default)
            self._single.setEnabled(not c.is_disabled)
            self._deselect.setVisible(c.deselect_control_visible)

        if self._search.text() != c.search_field_text:
            self._search.setText(c.search_field_text)
        self._search.setProperty("placeholder", c.search_field_default)
        self._search.setReadOnly(c.search_readonly)
        self._search.setEnabled(not c.is_disabled)

        self._model.set_rows(c.rows)
        self._results.setVisible(c.results_showing)
        self._sync_viewport()

    def _rebuild_chips(self) -> None:
        for chip in self._chips:
            self._chip_row.removeWidget(chip)
            chip.deleteLater()
        self._chips = []
        for position, choice in enumerate(self._controller.choices):
            chip = ChoiceChip(choice, parent=self._chip_container)
            chip.remove_requested.connect(self._on_chip_remove)
            self._chip_row.insertWidget(position, chip)
            self._chips.append(chip)

    def _sync_viewport(self) -> None:
        viewport = self._controller.viewport
        row_height = self._results.sizeHintForRow(0)
        if row_height > 0:
            viewport.row_height = row_height
        highlighted = self._controller.search_state.highlighted
        position = -1 if highlighted is None else self._model.position_of(highlighted)
        if position < 0:
            self._results.clearSelection()
            return
        self._results.setCurrentIndex(self._model.index(position))
        self._results.verticalScrollBar().setValue(viewport.scroll_top)

    # ── Input ──

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if watched is not self._search:
            return super().eventFilter(watched, event)
        c = self._controller
        match event.type():
            case QEvent.Type.KeyPress:
                key_event = cast(QKeyEvent, event)
                self._key_held = True
                key = map_qt_key(key_event.key())
                prevented = c.key_down(key, **self._modifiers(key_event))
                self.refresh()
                return prevented
            case QEvent.Type.KeyRelease:
                key_event = cast(QKeyEvent, event)
                self._key_held = False
                key = map_qt_key(key_event.key())
                if not c.search_field_default:
                    c.search_field_value = self._search.text()
                prevented = c.key_up(key, **self._modifiers(key_event))
                self.refresh()
                return prevented
            case QEvent.Type.FocusIn:
                if c.is_multiple and not c.active_field:
                    c.container_mousedown()
                else:
                    c.activate_field()
                self.refresh()
            case QEvent.Type.FocusOut:
                c.close_field()
                self.refresh()
        return super().eventFilter(watched, event)

    @staticmethod
    def _modifiers(event: QKeyEvent) -> dict[str, Any]:
        mods = event.modifiers()
        return {
            "ctrl": bool(mods & Qt.KeyboardModifier.ControlModifier),
            "meta": bool(mods & Qt.KeyboardModifier.MetaModifier),
        }

    def _on_text_edited(self, text: str) -> None:
        self._controller.search_field_value = text
        self._controller.search_field_default = False
        if not self._key_held:
            # Paste or cut from the context menu.
            self._controller.results_search()
            self.refresh()

    def _on_single_clicked(self) -> None:
        self._controller.container_mousedown()
        self._search.setFocus()
        self.refresh()

    def _on_deselect_clicked(self) -> None:
        self._controller.results_reset()
        self.refresh()

    def _on_result_entered(self, index: QModelIndex) -> None:
        self._controller.hover(index.data(ResultRowRoles.ARRAY_INDEX))
        self._sync_viewport()

    def _on_result_clicked(self, index: QModelIndex) -> None:
        self._controller.click_result(index.data(ResultRowRoles.ARRAY_INDEX))
        self.refresh()

    def _on_chip_remove(self, array_index: int) -> None:
        result = self._controller.deselect(array_index)
        if isinstance(result, Err):
            logger.debug("Choice %d not removed: %s", array_index, result.err_value)
        self.refresh()

    def _forward_event(self, event: ChooserEvent, payload: object) -> None:
        if event is ChooserEvent.CHANGE:
            self.value_changed.emit(payload)
        self.notified.emit(str(event), payload)

    def closeEvent(self, event: Any) -> None:
        self._unsubscribe_host()
        super().closeEvent(event)
