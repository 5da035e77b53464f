from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime

from bmi import compute_bmi

GENDERS = ("Male", "Female", "Other")
BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")
APPOINTMENT_STATUSES = ("scheduled", "completed", "cancelled", "no-show")
TIME_FORMAT = "%H:%M"


@dataclass(frozen=True)
class UserContext:
    """The signed-in user; passed explicitly into every store call."""
    user_id: int
    email: str
    display_name: str = ""


@dataclass
class PatientDTO:
    id: int | None
    full_name: str
    age: int
    gender: str
    phone: str
    email: str
    city: str
    address: str | None = None
    height_cm: float | None = None
    weight_kg: float | None = None
    blood_group: str | None = None
    medical_history: str | None = None

    @property
    def bmi(self) -> float | None:
        # derived at read time from the vitals, never trusted from storage
        return compute_bmi(self.height_cm, self.weight_kg)


@dataclass
class DoctorDTO:
    id: int | None
    full_name: str
    specialization: str
    city: str
    phone: str
    email: str
    qualification: str | None = None


@dataclass
class AppointmentDTO:
    id: int | None
    patient_id: int | None
    doctor_id: int | None
    appointment_date: date | None
    appointment_time: str
    status: str = "scheduled"
    reason: str | None = None
    notes: str | None = None
    # embedded from the referenced rows on read; ignored on write
    patient_name: str = ""
    doctor_name: str = ""
    doctor_specialization: str = ""


@dataclass
class DashboardStatsDTO:
    patients: int = 0
    doctors: int = 0
    appointments: int = 0
    today_appointments: int = 0


# ---------- validation ----------

def _blank(v) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def _required(errors: list[str], dto, labels: dict[str, str]):
    for attr, label in labels.items():
        if _blank(getattr(dto, attr)):
            errors.append(f"{label} is required.")


def validate_patient(p: PatientDTO) -> list[str]:
    errors: list[str] = []
    _required(errors, p, {"full_name": "Full name", "gender": "Gender", "phone": "Phone",
                          "email": "Email", "city": "City"})
    if p.age is None or p.age < 1:
        errors.append("Age must be at least 1.")
    if p.gender and p.gender not in GENDERS:
        errors.append(f"Gender must be one of: {', '.join(GENDERS)}.")
    if p.blood_group and p.blood_group not in BLOOD_GROUPS:
        errors.append(f"Blood group must be one of: {', '.join(BLOOD_GROUPS)}.")
    if p.height_cm is not None and p.height_cm < 0:
        errors.append("Height cannot be negative.")
    if p.weight_kg is not None and p.weight_kg < 0:
        errors.append("Weight cannot be negative.")
    return errors


def validate_doctor(d: DoctorDTO) -> list[str]:
    errors: list[str] = []
    _required(errors, d, {"full_name": "Full name", "specialization": "Specialization",
                          "city": "City", "phone": "Phone", "email": "Email"})
    return errors


def parse_time(s: str) -> str:
    """Normalise 'H:MM' / 'HH:MM[:SS]' to 'HH:MM'; ValueError otherwise."""
    s = (s or "").strip()
    for fmt in (TIME_FORMAT, "%H:%M:%S"):
        try:
            return datetime.strptime(s, fmt).strftime(TIME_FORMAT)
        except ValueError:
            pass
    raise ValueError("Invalid time. Use HH:MM.")


def validate_appointment(a: AppointmentDTO) -> list[str]:
    errors: list[str] = []
    if a.patient_id is None: errors.append("Patient is required.")
    if a.doctor_id is None: errors.append("Doctor is required.")
    if a.appointment_date is None: errors.append("Date is required.")
    if _blank(a.appointment_time):
        errors.append("Time is required.")
    else:
        try:
            parse_time(a.appointment_time)
        except ValueError as e:
            errors.append(str(e))
    # never coerce an unknown status into a known one
    if a.status not in APPOINTMENT_STATUSES:
        errors.append(f"Status must be one of: {', '.join(APPOINTMENT_STATUSES)}.")
    return errors
