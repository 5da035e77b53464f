import logging
from datetime import date

from repo import PatientRepo, DoctorRepo, AppointmentRepo
from results import Result, ErrorKind
from stats import fetch_dashboard_stats
from conftest import make_patient, make_doctor, make_appointment

TODAY = date(2026, 10, 19)


def _seed(session, ctx):
    pids = [PatientRepo(session).create(ctx, make_patient(full_name=n)).value for n in ("A", "B", "C")]
    did = DoctorRepo(session).create(ctx, make_doctor()).value
    appts = AppointmentRepo(session)
    appts.create(ctx, make_appointment(pids[0], did, appointment_date=TODAY))
    appts.create(ctx, make_appointment(pids[1], did, appointment_date=TODAY, appointment_time="10:00"))
    appts.create(ctx, make_appointment(pids[2], did, appointment_date=date(2026, 10, 18)))


def test_dashboard_counts(session_factory, session, ctx, other_ctx):
    _seed(session, ctx)
    PatientRepo(session).create(other_ctx, make_patient(full_name="Not mine"))

    res = fetch_dashboard_stats(session_factory, ctx, today=TODAY)
    assert res.ok
    s = res.value
    assert (s.patients, s.doctors, s.appointments, s.today_appointments) == (3, 1, 3, 2)


def test_dashboard_empty_store(session_factory, ctx):
    s = fetch_dashboard_stats(session_factory, ctx, today=TODAY).value
    assert (s.patients, s.doctors, s.appointments, s.today_appointments) == (0, 0, 0, 0)


def test_dashboard_requires_session(session_factory):
    res = fetch_dashboard_stats(session_factory, None)
    assert res.error.kind == ErrorKind.AUTHORIZATION


def test_one_failed_count_fails_the_aggregate(session_factory, session, ctx, monkeypatch):
    _seed(session, ctx)
    real_count = AppointmentRepo.count

    def flaky_count(self, c, **eq):
        if "appointment_date" in eq:
            return Result.failure(ErrorKind.TRANSPORT, "connection reset")
        return real_count(self, c, **eq)

    monkeypatch.setattr(AppointmentRepo, "count", flaky_count)
    res = fetch_dashboard_stats(session_factory, ctx, today=TODAY)
    assert not res.ok
    assert res.value is None
    assert res.error.message == "connection reset"


def test_worker_exception_fails_the_aggregate(session_factory, ctx, monkeypatch):
    def boom(self, c, **eq):
        raise RuntimeError("driver crashed")

    monkeypatch.setattr(DoctorRepo, "count", boom)
    res = fetch_dashboard_stats(session_factory, ctx, today=TODAY)
    assert res.error.kind == ErrorKind.TRANSPORT
    assert "driver crashed" in res.error.message


def test_every_failed_count_is_logged(session_factory, ctx, monkeypatch, caplog):
    def boom(self, c, **eq):
        raise RuntimeError("driver crashed")

    def unreachable(self, c, **eq):
        return Result.failure(ErrorKind.TRANSPORT, "connection reset")

    monkeypatch.setattr(PatientRepo, "count", boom)
    monkeypatch.setattr(AppointmentRepo, "count", unreachable)
    with caplog.at_level(logging.WARNING, logger="stats"):
        res = fetch_dashboard_stats(session_factory, ctx, today=TODAY)

    # patients is read first, so its crash is the reported failure
    assert res.error.kind == ErrorKind.TRANSPORT
    assert "driver crashed" in res.error.message
    failed = [r.getMessage() for r in caplog.records if "failed" in r.getMessage()]
    assert failed == [
        "dashboard count patients failed: driver crashed",
        "dashboard count appointments failed: connection reset",
        "dashboard count today_appointments failed: connection reset",
    ]
    assert any("patients crashed" in r.getMessage() for r in caplog.records)
