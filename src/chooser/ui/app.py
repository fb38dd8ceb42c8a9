"""PySide6 demo bootstrap: main window hosting one chooser widget, run_app()."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from chooser.models.events import ChooserEvent, ValueChange
from chooser.services.controller import SelectionController
from chooser.ui.theme import build_stylesheet
from chooser.ui.widgets.chooser_widget import ChooserWidget

if TYPE_CHECKING:
    from chooser.config import ChooserConfig
    from chooser.data.protocols import SelectHost

logger = logging.getLogger(__name__)


def describe_change(change: ValueChange) -> str:
    """Status-bar text for a change notification."""
    if change.selected is not None:
        return f"Selected {change.selected!r}"
    if change.deselected is not None:
        return f"Deselected {change.deselected!r}"
    return "Selection cleared"


class ChooserMainWindow(QMainWindow):
    """Single-panel window showing a chooser and the notifications it emits."""

    def __init__(self, host: SelectHost, config: ChooserConfig, title: str = "") -> None:
        super().__init__()
        self.setWindowTitle(title or "Chooser")
        self.setMinimumSize(420, 360)

        # ── Central widget ──
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(8)

        self._controller = SelectionController(host, config)
        self._chooser = ChooserWidget(self._controller)
        layout.addWidget(self._chooser)
        layout.addStretch()

        # ── Status bar ──
        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)
        self._status_label = QLabel(self._selection_summary())
        self._status_bar.addWidget(self._status_label)

        # ── Wire signals ──
        self._chooser.value_changed.connect(self._on_value_changed)
        self._chooser.notified.connect(self._on_notified)

    @property
    def controller(self) -> SelectionController:
        return self._controller

    def _selection_summary(self) -> str:
        values = [option.value for option in self._controller.selected_options]
        return f"Value: {', '.join(values) if values else '(none)'}"

    def _on_value_changed(self, change: ValueChange) -> None:
        self._status_label.setText(self._selection_summary())
        self._status_bar.showMessage(describe_change(change), 2500)

    def _on_notified(self, name: str, payload: object) -> None:
        logger.debug("Widget notification %s", name)
        if name == ChooserEvent.MAX_SELECTED:
            self._status_bar.showMessage("Maximum number of selections reached", 2500)
        elif name == ChooserEvent.NO_RESULTS:
            self._status_bar.showMessage(f"No results for {payload!r}", 1500)


def run_app(host: SelectHost, config: ChooserConfig, *, title: str = "") -> int:
    """Entry point: create QApplication, the main window, and run the event loop."""
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Chooser")
    app.setStyleSheet(build_stylesheet())  # type: ignore[union-attr]

    window = ChooserMainWindow(host, config, title)
    window.show()
    logger.info("Showing %s chooser with %d options", window.controller.mode, host.option_count)
    return app.exec()  # type: ignore[union-attr]
