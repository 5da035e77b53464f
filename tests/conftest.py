from datetime import date

import pytest

from database import make_engine, make_session_factory, init_db
from models import Base
from domain import PatientDTO, DoctorDTO, AppointmentDTO
from repo import UserRepo


@pytest.fixture(name="session_factory")
def session_factory_fixture(tmp_path):
    """
    File-backed SQLite per test, so worker threads get real separate connections.
    """
    engine = make_engine(tmp_path / "test_caredesk.db")
    init_db(engine, Base)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def ctx(session):
    return UserRepo(session).sign_in("alice@clinic.test", "Alice")


@pytest.fixture
def other_ctx(session):
    return UserRepo(session).sign_in("bob@clinic.test", "Bob")


def make_patient(**kw) -> PatientDTO:
    fields = dict(
        id=None, full_name="John Doe", age=34, gender="Male", phone="+1 555 0100",
        email="john@doe.test", city="Springfield", height_cm=170, weight_kg=68,
    )
    fields.update(kw)
    return PatientDTO(**fields)


def make_doctor(**kw) -> DoctorDTO:
    fields = dict(
        id=None, full_name="Dr. Jane Roe", specialization="Cardiology", city="Shelbyville",
        phone="+1 555 0200", email="jane@roe.test", qualification="MD",
    )
    fields.update(kw)
    return DoctorDTO(**fields)


def make_appointment(patient_id, doctor_id, **kw) -> AppointmentDTO:
    fields = dict(
        id=None, patient_id=patient_id, doctor_id=doctor_id,
        appointment_date=date(2026, 10, 19), appointment_time="09:30", status="scheduled",
        reason="Checkup",
    )
    fields.update(kw)
    return AppointmentDTO(**fields)
