from datetime import date

import pytest

pytest.importorskip("PySide6")

from PySide6.QtCore import Qt  # noqa: E402
from ui.table_model import (  # noqa: E402
    RecordTableModel, PATIENT_COLUMNS, APPOINTMENT_COLUMNS, DOCTOR_COLUMNS,
)
from conftest import make_patient, make_doctor, make_appointment  # noqa: E402


def _cell(model, row, col):
    return model.data(model.index(row, col), Qt.DisplayRole)


def test_patient_row_shows_bmi_and_band():
    m = RecordTableModel(PATIENT_COLUMNS, [make_patient(id=1), make_patient(id=2, height_cm=None)])
    bmi_col = [h for h, _ in PATIENT_COLUMNS].index("BMI")
    assert m.rowCount() == 2
    assert _cell(m, 0, bmi_col) == "23.5  (Normal)"
    assert _cell(m, 1, bmi_col) == "N/A  (N/A)"


def test_appointment_when_and_optional_reason():
    a = make_appointment(1, 2, id=9, appointment_date=date(2026, 3, 4), appointment_time="14:05", reason=None)
    m = RecordTableModel(APPOINTMENT_COLUMNS, [a])
    assert _cell(m, 0, 3) == "Mar 04, 2026 14:05"
    assert _cell(m, 0, 5) == "N/A"


def test_headers_and_reset():
    m = RecordTableModel(DOCTOR_COLUMNS)
    assert m.rowCount() == 0
    assert m.headerData(1, Qt.Horizontal) == "Specialization"
    m.set_rows([make_doctor(id=1)])
    assert m.at(0).full_name == "Dr. Jane Roe"
