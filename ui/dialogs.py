from __future__ import annotations
from datetime import date

from PySide6.QtCore import QDate, QTime
from PySide6.QtWidgets import (
    QDialog, QDialogButtonBox, QFormLayout, QVBoxLayout, QLineEdit, QPlainTextEdit,
    QComboBox, QSpinBox, QDoubleSpinBox, QDateEdit, QTimeEdit, QPushButton
)

from domain import (
    PatientDTO, DoctorDTO, AppointmentDTO, GENDERS, BLOOD_GROUPS, APPOINTMENT_STATUSES
)
from screens import RecordScreen


# ---------- widgets ----------
class DateField(QDateEdit):
    def __init__(self, default_today=False):
        super().__init__(calendarPopup=True)
        self.setDisplayFormat("yyyy-MM-dd")
        self.setDateRange(QDate(1900, 1, 1), QDate(2999, 12, 31))
        # a required field always holds a real date; only optional ones read the minimum as blank
        self._required = default_today
        if default_today:
            self.setDate(QDate.currentDate())
        else:
            self.setDate(self.minimumDate())

    def set_date(self, d: date | None):
        if d:
            self.setDate(QDate(d.year, d.month, d.day))
        else:
            self.setDate(QDate.currentDate() if self._required else self.minimumDate())

    def get_date(self) -> date | None:
        d = self.date()
        if not self._required and d == self.minimumDate(): return None
        return date(d.year(), d.month(), d.day())


class OptionalNumber(QDoubleSpinBox):
    """Blank at zero; reads back as None so 'not measured' survives the round trip."""
    def __init__(self, maximum: float, suffix: str):
        super().__init__()
        self.setRange(0, maximum); self.setDecimals(2); self.setSuffix(suffix)
        self.setSpecialValueText(" ")

    def set_number(self, v: float | None): self.setValue(v or 0)

    def get_number(self) -> float | None:
        return None if self.value() == self.minimum() else float(self.value())


def _text(w: QLineEdit) -> str:
    return w.text().strip()


# ---------- base ----------
class RecordDialog(QDialog):
    """
    Form bound to a RecordScreen. OK submits through the screen; the dialog
    only closes when the save succeeded, otherwise it stays open and populated.
    """
    noun = "record"
    action = "Add"

    def __init__(self, screen: RecordScreen, initial=None, parent=None, **form_args):
        super().__init__(parent)
        self.screen = screen
        self._existing_id: int | None = initial.id if initial else None
        self.setWindowTitle(f"Edit {self.noun.capitalize()}" if initial else f"{self.action} New {self.noun.capitalize()}")
        self.setMinimumWidth(520)

        self.form = QFormLayout()
        self._build_form(**form_args)

        self.btns = QDialogButtonBox(QDialogButtonBox.Cancel)
        self.btn_submit: QPushButton = self.btns.addButton(self._submit_text(), QDialogButtonBox.AcceptRole)
        self.btns.accepted.connect(self._submit); self.btns.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addLayout(self.form); root.addWidget(self.btns)
        if initial:
            self._load(initial)

    def _submit_text(self) -> str:
        verb = "Update" if self._existing_id is not None else self.action
        return f"{verb} {self.noun.capitalize()}"

    # subclass hooks
    def _build_form(self, **form_args): raise NotImplementedError
    def _load(self, dto): raise NotImplementedError
    def collect(self): raise NotImplementedError

    def _submit(self):
        dto = self.collect()
        # no resubmission while the call is in flight
        self.btn_submit.setEnabled(False); self.btn_submit.setText("Saving...")
        try:
            ok = self.screen.save(dto)
        finally:
            self.btn_submit.setEnabled(True); self.btn_submit.setText(self._submit_text())
        if ok:
            self.accept()


# ---------- patients ----------
class PatientDialog(RecordDialog):
    noun = "patient"

    def _build_form(self):
        self.e_name = QLineEdit()
        self.e_age = QSpinBox(); self.e_age.setRange(0, 150); self.e_age.setSpecialValueText(" ")
        self.e_gender = QComboBox(); self.e_gender.addItems(GENDERS)
        self.e_blood = QComboBox(); self.e_blood.addItem("Select blood group", None)
        for g in BLOOD_GROUPS: self.e_blood.addItem(g, g)
        self.e_phone = QLineEdit(); self.e_email = QLineEdit(); self.e_city = QLineEdit()
        self.e_height = OptionalNumber(300, " cm")
        self.e_weight = OptionalNumber(500, " kg")
        self.e_address = QLineEdit()
        self.e_history = QPlainTextEdit(); self.e_history.setFixedHeight(80)

        f = self.form
        f.addRow("Full Name *", self.e_name)
        f.addRow("Age *", self.e_age)
        f.addRow("Gender *", self.e_gender)
        f.addRow("Blood Group", self.e_blood)
        f.addRow("Phone *", self.e_phone)
        f.addRow("Email *", self.e_email)
        f.addRow("City *", self.e_city)
        f.addRow("Height (cm)", self.e_height)
        f.addRow("Weight (kg)", self.e_weight)
        f.addRow("Address", self.e_address)
        f.addRow("Medical History", self.e_history)

    def _load(self, p: PatientDTO):
        self.e_name.setText(p.full_name)
        self.e_age.setValue(p.age or 0)
        self.e_gender.setCurrentText(p.gender)
        i = self.e_blood.findData(p.blood_group)
        self.e_blood.setCurrentIndex(i if i >= 0 else 0)
        self.e_phone.setText(p.phone); self.e_email.setText(p.email); self.e_city.setText(p.city)
        self.e_height.set_number(p.height_cm); self.e_weight.set_number(p.weight_kg)
        self.e_address.setText(p.address or "")
        self.e_history.setPlainText(p.medical_history or "")

    def collect(self) -> PatientDTO:
        return PatientDTO(
            id=self._existing_id, full_name=_text(self.e_name), age=self.e_age.value(),
            gender=self.e_gender.currentText(), phone=_text(self.e_phone),
            email=_text(self.e_email), city=_text(self.e_city),
            address=_text(self.e_address) or None,
            height_cm=self.e_height.get_number(), weight_kg=self.e_weight.get_number(),
            blood_group=self.e_blood.currentData(),
            medical_history=self.e_history.toPlainText().strip() or None
        )


# ---------- doctors ----------
class DoctorDialog(RecordDialog):
    noun = "doctor"

    def _build_form(self):
        self.e_name = QLineEdit()
        self.e_spec = QLineEdit(); self.e_spec.setPlaceholderText("e.g., Cardiology, Pediatrics")
        self.e_qual = QLineEdit(); self.e_qual.setPlaceholderText("e.g., MBBS, MD")
        self.e_city = QLineEdit(); self.e_phone = QLineEdit(); self.e_email = QLineEdit()
        f = self.form
        f.addRow("Full Name *", self.e_name)
        f.addRow("Specialization *", self.e_spec)
        f.addRow("Qualification", self.e_qual)
        f.addRow("City *", self.e_city)
        f.addRow("Phone *", self.e_phone)
        f.addRow("Email *", self.e_email)

    def _load(self, d: DoctorDTO):
        self.e_name.setText(d.full_name); self.e_spec.setText(d.specialization)
        self.e_qual.setText(d.qualification or "")
        self.e_city.setText(d.city); self.e_phone.setText(d.phone); self.e_email.setText(d.email)

    def collect(self) -> DoctorDTO:
        return DoctorDTO(
            id=self._existing_id, full_name=_text(self.e_name), specialization=_text(self.e_spec),
            qualification=_text(self.e_qual) or None, city=_text(self.e_city),
            phone=_text(self.e_phone), email=_text(self.e_email)
        )


# ---------- appointments ----------
STATUS_LABELS = {"scheduled": "Scheduled", "completed": "Completed",
                 "cancelled": "Cancelled", "no-show": "No Show"}


class AppointmentDialog(RecordDialog):
    noun = "appointment"
    action = "Schedule"

    def __init__(self, screen: RecordScreen, patients: list[tuple[int, str]],
                 doctors: list[tuple[int, str]], initial: AppointmentDTO | None = None, parent=None):
        super().__init__(screen, initial, parent, patients=patients, doctors=doctors)

    def _build_form(self, patients=(), doctors=()):
        self.e_patient = QComboBox(); self.e_patient.addItem("Select patient", None)
        for pid, label in patients: self.e_patient.addItem(label, pid)
        self.e_doctor = QComboBox(); self.e_doctor.addItem("Select doctor", None)
        for did, label in doctors: self.e_doctor.addItem(label, did)
        self.e_date = DateField(default_today=True)
        self.e_time = QTimeEdit(); self.e_time.setDisplayFormat("HH:mm"); self.e_time.setTime(QTime(9, 0))
        self.e_status = QComboBox()
        for s in APPOINTMENT_STATUSES: self.e_status.addItem(STATUS_LABELS[s], s)
        self.e_reason = QLineEdit(); self.e_reason.setPlaceholderText("Checkup, consultation, etc.")
        self.e_notes = QPlainTextEdit(); self.e_notes.setPlaceholderText("Additional information...")
        self.e_notes.setFixedHeight(80)
        f = self.form
        f.addRow("Patient *", self.e_patient)
        f.addRow("Doctor *", self.e_doctor)
        f.addRow("Date *", self.e_date)
        f.addRow("Time *", self.e_time)
        f.addRow("Status *", self.e_status)
        f.addRow("Reason", self.e_reason)
        f.addRow("Notes", self.e_notes)

    def _load(self, a: AppointmentDTO):
        for combo, value in ((self.e_patient, a.patient_id), (self.e_doctor, a.doctor_id),
                             (self.e_status, a.status)):
            i = combo.findData(value)
            combo.setCurrentIndex(i if i >= 0 else 0)
        self.e_date.set_date(a.appointment_date)
        self.e_time.setTime(QTime.fromString(a.appointment_time, "HH:mm"))
        self.e_reason.setText(a.reason or ""); self.e_notes.setPlainText(a.notes or "")

    def collect(self) -> AppointmentDTO:
        t = self.e_time.time()
        return AppointmentDTO(
            id=self._existing_id, patient_id=self.e_patient.currentData(),
            doctor_id=self.e_doctor.currentData(), appointment_date=self.e_date.get_date(),
            appointment_time=f"{t.hour():02d}:{t.minute():02d}",
            status=self.e_status.currentData(), reason=_text(self.e_reason) or None,
            notes=self.e_notes.toPlainText().strip() or None
        )
