# ui/table_model.py
from __future__ import annotations
from typing import Callable, List, Sequence, Tuple
from PySide6.QtCore import Qt, QAbstractTableModel, QModelIndex
from bmi import bmi_category, format_bmi
from domain import PatientDTO, AppointmentDTO

Column = Tuple[str, Callable[[object], object]]


def _bmi_cell(p: PatientDTO) -> str:
    return f"{format_bmi(p.bmi)}  ({bmi_category(p.bmi)})"


def _when(a: AppointmentDTO) -> str:
    d = a.appointment_date.strftime("%b %d, %Y") if a.appointment_date else ""
    return f"{d} {a.appointment_time}".strip()


PATIENT_COLUMNS: List[Column] = [
    ("Name",    lambda p: p.full_name),
    ("Age",     lambda p: p.age),
    ("Gender",  lambda p: p.gender),
    ("Phone",   lambda p: p.phone),
    ("Email",   lambda p: p.email),
    ("City",    lambda p: p.city),
    ("BMI",     _bmi_cell),
]

DOCTOR_COLUMNS: List[Column] = [
    ("Name",           lambda d: d.full_name),
    ("Specialization", lambda d: d.specialization),
    ("Qualification",  lambda d: d.qualification or "N/A"),
    ("Phone",          lambda d: d.phone),
    ("Email",          lambda d: d.email),
    ("City",           lambda d: d.city),
]

APPOINTMENT_COLUMNS: List[Column] = [
    ("Patient",        lambda a: a.patient_name),
    ("Doctor",         lambda a: a.doctor_name),
    ("Specialization", lambda a: a.doctor_specialization),
    ("Date & Time",    _when),
    ("Status",         lambda a: a.status),
    ("Reason",         lambda a: a.reason or "N/A"),
]


class RecordTableModel(QAbstractTableModel):
    """
    Read-only model over a list of DTOs; the column list decides what is shown.
    Edits happen in the dialogs, never in the grid.
    """

    def __init__(self, columns: Sequence[Column], rows: List | None = None, parent=None):
        super().__init__(parent)
        self.columns = list(columns)
        self.rows: List = rows or []

    # external helpers
    def set_rows(self, rows: List | None):
        self.beginResetModel()
        self.rows = list(rows or [])
        self.endResetModel()

    def at(self, row: int):
        return self.rows[row]

    # Qt model API
    def rowCount(self, parent=QModelIndex()) -> int:
        return 0 if parent.isValid() else len(self.rows)

    def columnCount(self, parent=QModelIndex()) -> int:
        return 0 if parent.isValid() else len(self.columns)

    def data(self, idx: QModelIndex, role=Qt.DisplayRole):
        if not idx.isValid() or idx.row() < 0 or idx.row() >= len(self.rows):
            return None
        if role in (Qt.DisplayRole, Qt.EditRole):
            value = self.columns[idx.column()][1](self.rows[idx.row()])
            return "" if value is None else str(value)
        return None

    def headerData(self, section: int, orientation, role=Qt.DisplayRole):
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal:
            return self.columns[section][0]
        return section + 1  # row header: 1-based

    def flags(self, idx: QModelIndex):
        if not idx.isValid():
            return Qt.ItemIsEnabled
        return Qt.ItemIsEnabled | Qt.ItemIsSelectable
