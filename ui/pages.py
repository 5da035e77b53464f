from __future__ import annotations
from typing import Callable

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton, QTableView,
    QAbstractItemView, QStackedWidget, QFrame, QGridLayout, QMessageBox, QDialog
)

from screens import RecordScreen, ERROR
from stats import fetch_dashboard_stats
from ui.table_model import RecordTableModel


# ---------- dashboard ----------
class StatCard(QFrame):
    def __init__(self, title: str):
        super().__init__()
        self.setFrameShape(QFrame.StyledPanel)
        self.setObjectName("card")
        l = QVBoxLayout(self)
        l.setContentsMargins(12, 10, 12, 10)
        self.title = QLabel(title)
        self.title.setStyleSheet("color:#555; font-size:12px;")
        self.value = QLabel("0")
        self.value.setStyleSheet("font-size:24px; font-weight:600;")
        l.addWidget(self.title); l.addWidget(self.value)

    def set_value(self, text: str): self.value.setText(text)


class DashboardPage(QWidget):
    def __init__(self, session_factory, ctx, notify: Callable[[str, str], None]):
        super().__init__()
        self.session_factory, self.ctx, self.notify = session_factory, ctx, notify

        root = QVBoxLayout(self); root.setContentsMargins(12, 12, 12, 12); root.setSpacing(10)
        head = QHBoxLayout()
        title = QLabel("Dashboard"); title.setObjectName("pageTitle")
        btn_refresh = QPushButton("Refresh"); btn_refresh.clicked.connect(self.refresh)
        head.addWidget(title); head.addStretch(1); head.addWidget(btn_refresh)
        root.addLayout(head)
        sub = QLabel("Overview of your healthcare management system"); sub.setObjectName("muted")
        root.addWidget(sub)

        grid = QGridLayout(); grid.setHorizontalSpacing(12)
        self.cards = {
            "patients": StatCard("Total Patients"),
            "doctors": StatCard("Total Doctors"),
            "appointments": StatCard("Total Appointments"),
            "today_appointments": StatCard("Today's Appointments"),
        }
        for col, card in enumerate(self.cards.values()):
            grid.addWidget(card, 0, col)
        root.addLayout(grid)
        root.addStretch(1)

    def refresh(self):
        if self.ctx is None: return
        res = fetch_dashboard_stats(self.session_factory, self.ctx)
        if not res.ok:
            # all four cards keep their previous values
            self.notify(ERROR, "Failed to fetch statistics")
            return
        for name, card in self.cards.items():
            card.set_value(str(getattr(res.value, name)))


# ---------- record screens ----------
class RecordPage(QWidget):
    """
    Search box + table (or the empty-state placeholder) + Add/Edit/Delete,
    all driven by a RecordScreen.
    """

    def __init__(self, screen: RecordScreen, columns, *, title: str, subtitle: str,
                 search_hint: str, add_text: str, open_dialog: Callable[[object | None], QDialog]):
        super().__init__()
        self.screen = screen
        self.open_dialog = open_dialog

        root = QVBoxLayout(self); root.setContentsMargins(12, 12, 12, 12); root.setSpacing(10)

        head = QHBoxLayout()
        lbl = QLabel(title); lbl.setObjectName("pageTitle")
        self.btn_add = QPushButton(f"+  {add_text}"); self.btn_add.setObjectName("btnBlue")
        head.addWidget(lbl); head.addStretch(1); head.addWidget(self.btn_add)
        root.addLayout(head)
        sub = QLabel(subtitle); sub.setObjectName("muted"); root.addWidget(sub)

        top = QHBoxLayout()
        self.search = QLineEdit(); self.search.setPlaceholderText(search_hint)
        self.search.setClearButtonEnabled(True)
        top.addWidget(QLabel("Search:")); top.addWidget(self.search, 1)
        root.addLayout(top)

        self.model = RecordTableModel(columns)
        self.table = QTableView(); self.table.setModel(self.model)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.setAlternatingRowColors(True)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setStretchLastSection(True)

        self.placeholder = QLabel(screen.placeholder)
        self.placeholder.setAlignment(Qt.AlignCenter); self.placeholder.setObjectName("muted")

        self.stack = QStackedWidget()
        self.stack.addWidget(self.table); self.stack.addWidget(self.placeholder)
        root.addWidget(self.stack, 1)

        actions = QHBoxLayout(); actions.addStretch(1)
        self.btn_edit = QPushButton("Edit"); self.btn_del = QPushButton("Delete")
        self.btn_del.setObjectName("btnRed")
        actions.addWidget(self.btn_edit); actions.addWidget(self.btn_del)
        root.addLayout(actions)

        # signals
        self.btn_add.clicked.connect(self._add)
        self.btn_edit.clicked.connect(self._edit)
        self.btn_del.clicked.connect(self._delete)
        self.table.doubleClicked.connect(lambda *_: self._edit())
        self.table.selectionModel().selectionChanged.connect(lambda *_: self._update_actions())
        self.search.textChanged.connect(self._on_search_changed)
        self._update_actions()

    # ----- helpers -----
    def _debounced(self, fn, ms=150):
        if not hasattr(self, "_debounce"):
            self._debounce = QTimer(self); self._debounce.setSingleShot(True)
            self._debounce.timeout.connect(lambda: self._debounced_fn())
        self._debounced_fn = fn
        self._debounce.start(ms)

    def _on_search_changed(self, text: str):
        self._debounced(lambda: (self.screen.set_query(text), self.render()))

    def _selected(self):
        idxs = self.table.selectionModel().selectedRows()
        return self.model.at(idxs[0].row()) if idxs else None

    def _update_actions(self):
        has_row = self._selected() is not None
        self.btn_edit.setEnabled(has_row); self.btn_del.setEnabled(has_row)

    # ----- data flow -----
    def reload(self):
        self.screen.refresh()
        self.render()

    def render(self):
        self.model.set_rows(self.screen.visible)
        self.stack.setCurrentWidget(self.placeholder if self.screen.is_empty else self.table)
        self._update_actions()

    def _add(self):
        dlg = self.open_dialog(None)
        if dlg is not None and dlg.exec() == QDialog.Accepted:
            self.render()

    def _edit(self):
        row = self._selected()
        if row is None: return
        dlg = self.open_dialog(row)
        if dlg is not None and dlg.exec() == QDialog.Accepted:
            self.render()

    def _delete(self):
        row = self._selected()
        if row is None: return
        if self.screen.delete(row.id, self._confirm):
            self.render()

    def _confirm(self, text: str) -> bool:
        return QMessageBox.question(self, "Confirm deletion", text,
                                    QMessageBox.Yes | QMessageBox.No) == QMessageBox.Yes
