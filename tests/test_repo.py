from datetime import date

import pytest
from sqlalchemy import select

from models import Patient as PatientORM
from repo import PatientRepo, DoctorRepo, AppointmentRepo, UserRepo
from results import ErrorKind
from conftest import make_patient, make_doctor, make_appointment


def test_sign_in_is_get_or_create(session):
    a = UserRepo(session).sign_in("Alice@Clinic.test ", "Alice")
    b = UserRepo(session).sign_in("alice@clinic.test")
    assert a.user_id == b.user_id
    assert a.email == "alice@clinic.test"


def test_sign_in_requires_email(session):
    with pytest.raises(ValueError):
        UserRepo(session).sign_in("  ")


# ---------- patients ----------

def test_create_assigns_new_id_and_owner(session, ctx):
    repo = PatientRepo(session)
    first = repo.create(ctx, make_patient()).value
    res = repo.create(ctx, make_patient(full_name="Mary Major"))
    assert res.ok
    assert res.value not in (None, first)

    rows = repo.list(ctx).value
    assert {r.id for r in rows} == {first, res.value}
    orm = session.get(PatientORM, res.value)
    assert orm.user_id == ctx.user_id


def test_create_rejects_dto_with_id(session, ctx):
    with pytest.raises(ValueError):
        PatientRepo(session).create(ctx, make_patient(id=7))


def test_list_newest_first(session, ctx):
    repo = PatientRepo(session)
    ids = [repo.create(ctx, make_patient(full_name=n)).value for n in ("A", "B", "C")]
    assert [r.id for r in repo.list(ctx).value] == list(reversed(ids))


def test_bmi_stored_and_derived(session, ctx):
    repo = PatientRepo(session)
    pid = repo.create(ctx, make_patient(height_cm=170, weight_kg=68)).value
    assert session.get(PatientORM, pid).bmi == 23.53
    dto = repo.get(ctx, pid).value
    assert round(dto.bmi, 2) == 23.53

    dto.height_cm = None
    assert repo.update(ctx, pid, dto).ok
    assert session.get(PatientORM, pid).bmi is None
    assert repo.get(ctx, pid).value.bmi is None


def test_rows_are_scoped_to_owner(session, ctx, other_ctx):
    repo = PatientRepo(session)
    mine = repo.create(ctx, make_patient()).value
    repo.create(other_ctx, make_patient(full_name="Someone Else"))

    assert [r.id for r in repo.list(ctx).value] == [mine]
    assert repo.count(other_ctx).value == 1

    # another user can neither see, change nor remove it
    assert repo.get(other_ctx, mine).error.kind == ErrorKind.NOT_FOUND
    assert repo.update(other_ctx, mine, make_patient(id=mine)).error.kind == ErrorKind.NOT_FOUND
    assert repo.delete(other_ctx, mine).error.kind == ErrorKind.NOT_FOUND
    assert repo.count(ctx).value == 1


def test_no_session_is_authorization_failure(session):
    repo = PatientRepo(session)
    for res in (repo.list(None), repo.create(None, make_patient()), repo.update(None, 1, make_patient(id=1)),
                repo.delete(None, 1), repo.count(None)):
        assert not res.ok
        assert res.error.kind == ErrorKind.AUTHORIZATION
    assert session.scalar(select(PatientORM)) is None


def test_update_by_id(session, ctx):
    repo = PatientRepo(session)
    pid = repo.create(ctx, make_patient()).value
    dto = repo.get(ctx, pid).value
    dto.city = "Capital City"
    assert repo.update(ctx, pid, dto).ok
    assert repo.get(ctx, pid).value.city == "Capital City"


def test_update_missing_is_not_found(session, ctx):
    res = PatientRepo(session).update(ctx, 999, make_patient(id=999))
    assert res.error.kind == ErrorKind.NOT_FOUND
    assert "999" in res.error.message


def test_invalid_patient_is_validation_failure(session, ctx):
    repo = PatientRepo(session)
    res = repo.create(ctx, make_patient(full_name=" ", age=0, blood_group="C+"))
    assert res.error.kind == ErrorKind.VALIDATION
    assert "Full name is required." in res.error.message
    assert repo.count(ctx).value == 0


def test_delete_removes_row(session, ctx):
    repo = PatientRepo(session)
    keep = repo.create(ctx, make_patient()).value
    gone = repo.create(ctx, make_patient(full_name="To Delete")).value
    assert repo.delete(ctx, gone).ok
    assert [r.id for r in repo.list(ctx).value] == [keep]
    assert repo.delete(ctx, gone).error.kind == ErrorKind.NOT_FOUND


def test_unknown_filter_column_is_a_programming_error(session, ctx):
    with pytest.raises(ValueError):
        PatientRepo(session).list(ctx, nope=1)


# ---------- doctors ----------

def test_doctor_options_sorted_by_name(session, ctx):
    repo = DoctorRepo(session)
    repo.create(ctx, make_doctor(full_name="Zed", specialization="ENT"))
    repo.create(ctx, make_doctor(full_name="Amy", specialization="Pediatrics"))
    labels = [label for _, label in repo.options(ctx).value]
    assert labels == ["Amy (Pediatrics)", "Zed (ENT)"]


def test_doctor_qualification_optional(session, ctx):
    repo = DoctorRepo(session)
    did = repo.create(ctx, make_doctor(qualification="  ")).value
    assert repo.get(ctx, did).value.qualification is None


# ---------- appointments ----------

@pytest.fixture
def people(session, ctx):
    pid = PatientRepo(session).create(ctx, make_patient(full_name="Pat Smith")).value
    did = DoctorRepo(session).create(ctx, make_doctor(full_name="Dr. Who", specialization="Time")).value
    return pid, did


def test_appointment_embeds_names(session, ctx, people):
    pid, did = people
    repo = AppointmentRepo(session)
    aid = repo.create(ctx, make_appointment(pid, did)).value
    a = repo.get(ctx, aid).value
    assert (a.patient_name, a.doctor_name, a.doctor_specialization) == ("Pat Smith", "Dr. Who", "Time")


def test_appointments_ordered_by_date_then_time_desc(session, ctx, people):
    pid, did = people
    repo = AppointmentRepo(session)
    early = repo.create(ctx, make_appointment(pid, did, appointment_date=date(2026, 1, 1), appointment_time="8:05")).value
    late_am = repo.create(ctx, make_appointment(pid, did, appointment_date=date(2026, 2, 1), appointment_time="09:00")).value
    late_pm = repo.create(ctx, make_appointment(pid, did, appointment_date=date(2026, 2, 1), appointment_time="14:30")).value
    rows = repo.list(ctx).value
    assert [r.id for r in rows] == [late_pm, late_am, early]
    assert rows[-1].appointment_time == "08:05"


def test_double_booking_is_allowed(session, ctx, people):
    pid, did = people
    repo = AppointmentRepo(session)
    assert repo.create(ctx, make_appointment(pid, did)).ok
    assert repo.create(ctx, make_appointment(pid, did)).ok
    assert repo.count(ctx).value == 2


def test_unknown_status_rejected_not_coerced(session, ctx, people):
    pid, did = people
    repo = AppointmentRepo(session)
    res = repo.create(ctx, make_appointment(pid, did, status="pending"))
    assert res.error.kind == ErrorKind.VALIDATION
    assert "Status must be one of" in res.error.message
    assert repo.count(ctx).value == 0


@pytest.mark.parametrize("status", ["scheduled", "completed", "cancelled", "no-show"])
def test_every_status_accepted(session, ctx, people, status):
    pid, did = people
    assert AppointmentRepo(session).create(ctx, make_appointment(pid, did, status=status)).ok


def test_appointment_refs_must_belong_to_owner(session, ctx, other_ctx, people):
    pid, did = people
    res = AppointmentRepo(session).create(other_ctx, make_appointment(pid, did))
    assert res.error.kind == ErrorKind.VALIDATION
    assert "patient" in res.error.message


def test_updating_patient_refreshes_embedded_name(session, ctx, people):
    pid, did = people
    repo = AppointmentRepo(session)
    aid = repo.create(ctx, make_appointment(pid, did)).value
    assert repo.list(ctx).value[0].patient_name == "Pat Smith"

    other = PatientRepo(session).create(ctx, make_patient(full_name="Kim Lee")).value
    dto = repo.get(ctx, aid).value
    dto.patient_id = other
    assert repo.update(ctx, aid, dto).ok
    assert repo.list(ctx).value[0].patient_name == "Kim Lee"


def test_deleting_patient_cascades_to_appointments(session, ctx, people):
    pid, did = people
    repo = AppointmentRepo(session)
    repo.create(ctx, make_appointment(pid, did))
    assert PatientRepo(session).delete(ctx, pid).ok
    assert repo.count(ctx).value == 0


def test_count_with_equality_filter(session, ctx, people):
    pid, did = people
    repo = AppointmentRepo(session)
    repo.create(ctx, make_appointment(pid, did, appointment_date=date(2026, 10, 19)))
    repo.create(ctx, make_appointment(pid, did, appointment_date=date(2026, 10, 20)))
    assert repo.count(ctx, appointment_date=date(2026, 10, 19)).value == 1
    assert repo.count(ctx).value == 2
