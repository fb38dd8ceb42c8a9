"""List model exposing a controller's rendered rows to a QListView."""

from __future__ import annotations

from PySide6.QtCore import QAbstractListModel, QModelIndex, QPersistentModelIndex, Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QWidget

from chooser.models.results import ResultRow
from chooser.ui.theme import COLORS, strip_markup


class ResultRowRoles:
    """Named Qt UserRole offsets for ResultRow data."""

    ARRAY_INDEX = Qt.ItemDataRole.UserRole
    KIND = Qt.ItemDataRole.UserRole + 1
    ACTIVE = Qt.ItemDataRole.UserRole + 2
    MARKUP = Qt.ItemDataRole.UserRole + 3


class ResultListModel(QAbstractListModel):
    """Model backing the results QListView."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._rows: list[ResultRow] = []

    def set_rows(self, rows: list[ResultRow]) -> None:
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()

    def row_at(self, index: int) -> ResultRow | None:
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def position_of(self, array_index: int) -> int:
        for position, row in enumerate(self._rows):
            if row.kind == "option" and row.array_index == array_index:
                return position
        return -1

    def rowCount(self, parent: QModelIndex | QPersistentModelIndex = QModelIndex()) -> int:
        return len(self._rows)

    def flags(self, index: QModelIndex | QPersistentModelIndex) -> Qt.ItemFlag:
        row = self.row_at(index.row()) if index.isValid() else None
        if row is None or not row.active:
            return Qt.ItemFlag.NoItemFlags
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable

    def data(
        self, index: QModelIndex | QPersistentModelIndex, role: int = Qt.ItemDataRole.DisplayRole
    ) -> object:
        if not index.isValid() or index.row() >= len(self._rows):
            return None
        row = self._rows[index.row()]
        if role == Qt.ItemDataRole.DisplayRole:
            text = strip_markup(row.html)
            return f"    {text}" if row.group_option else text
        if role == Qt.ItemDataRole.ToolTipRole:
            return row.title or None
        if role == Qt.ItemDataRole.ForegroundRole:
            if row.kind == "group":
                return QColor(COLORS["group"])
            if row.kind == "no_results" or not row.active:
                return QColor(COLORS["text_muted"])
            return None
        if role == ResultRowRoles.ARRAY_INDEX:
            return row.array_index
        if role == ResultRowRoles.KIND:
            return row.kind
        if role == ResultRowRoles.ACTIVE:
            return row.active
        if role == ResultRowRoles.MARKUP:
            return row.html
        return None
