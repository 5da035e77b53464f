from __future__ import annotations
import logging
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from models import User, Patient as PatientORM, Doctor as DoctorORM, Appointment as AppointmentORM
from domain import (
    UserContext, PatientDTO, DoctorDTO, AppointmentDTO,
    validate_patient, validate_doctor, validate_appointment, parse_time,
)
from results import Result, ErrorKind
from bmi import compute_bmi

logger = logging.getLogger("repo")

def _clean(v: str | None) -> str | None:
    return (v or "").strip() or None

def _db_message(e: SQLAlchemyError) -> str:
    # the driver's own message, not SQLAlchemy's wrapper with the SQL text
    orig = getattr(e, "orig", None)
    return str(orig) if orig is not None else str(e)

def _no_session() -> Result:
    return Result.failure(ErrorKind.AUTHORIZATION, "You must be signed in.")


# ---------- patients ----------

def _patient_to_dto(p: PatientORM) -> PatientDTO:
    return PatientDTO(
        id=p.id, full_name=p.full_name, age=p.age, gender=p.gender, phone=p.phone,
        email=p.email, city=p.city, address=p.address, height_cm=p.height_cm,
        weight_kg=p.weight_kg, blood_group=p.blood_group, medical_history=p.medical_history
    )

def _patient_apply(dto: PatientDTO, orm: PatientORM | None = None) -> PatientORM:
    t = orm or PatientORM()
    t.full_name, t.age, t.gender = dto.full_name.strip(), dto.age, dto.gender
    t.phone, t.email, t.city = dto.phone.strip(), dto.email.strip(), dto.city.strip()
    t.address = _clean(dto.address)
    t.height_cm, t.weight_kg = dto.height_cm, dto.weight_kg
    b = compute_bmi(dto.height_cm, dto.weight_kg)
    t.bmi = round(b, 2) if b is not None else None
    t.blood_group = _clean(dto.blood_group)
    t.medical_history = _clean(dto.medical_history)
    return t


# ---------- doctors ----------

def _doctor_to_dto(d: DoctorORM) -> DoctorDTO:
    return DoctorDTO(
        id=d.id, full_name=d.full_name, specialization=d.specialization, city=d.city,
        phone=d.phone, email=d.email, qualification=d.qualification
    )

def _doctor_apply(dto: DoctorDTO, orm: DoctorORM | None = None) -> DoctorORM:
    t = orm or DoctorORM()
    t.full_name, t.specialization = dto.full_name.strip(), dto.specialization.strip()
    t.qualification = _clean(dto.qualification)
    t.city, t.phone, t.email = dto.city.strip(), dto.phone.strip(), dto.email.strip()
    return t


# ---------- appointments ----------

def _appointment_to_dto(a: AppointmentORM) -> AppointmentDTO:
    return AppointmentDTO(
        id=a.id, patient_id=a.patient_id, doctor_id=a.doctor_id,
        appointment_date=a.appointment_date, appointment_time=a.appointment_time,
        status=a.status, reason=a.reason, notes=a.notes,
        patient_name=a.patient.full_name if a.patient else "",
        doctor_name=a.doctor.full_name if a.doctor else "",
        doctor_specialization=a.doctor.specialization if a.doctor else "",
    )

def _appointment_apply(dto: AppointmentDTO, orm: AppointmentORM | None = None) -> AppointmentORM:
    t = orm or AppointmentORM()
    t.patient_id, t.doctor_id = dto.patient_id, dto.doctor_id
    t.appointment_date = dto.appointment_date
    t.appointment_time = parse_time(dto.appointment_time)
    t.status = dto.status
    t.reason, t.notes = _clean(dto.reason), _clean(dto.notes)
    return t


class OwnedRepo:
    """
    Table-scoped CRUD where every statement carries ``user_id == ctx.user_id``.
    Expected failures come back as Result values; nothing here raises for them.
    """
    orm = None
    label = "Record"

    def __init__(self, s: Session):
        self.s = s

    # subclass hooks
    def _to_dto(self, orm): raise NotImplementedError
    def _apply(self, dto, orm=None): raise NotImplementedError
    def _validate(self, dto) -> list[str]: return []
    def _check_refs(self, ctx: UserContext, dto) -> Result | None: return None

    def _default_order(self):
        return (self.orm.created_at.desc(), self.orm.id.desc())

    def _scoped(self, ctx: UserContext, stmt=None, **eq):
        stmt = select(self.orm) if stmt is None else stmt
        stmt = stmt.where(self.orm.user_id == ctx.user_id)
        for col, val in eq.items():
            if not hasattr(self.orm, col):
                raise ValueError(f"{self.orm.__tablename__} has no column '{col}'")
            stmt = stmt.where(getattr(self.orm, col) == val)
        return stmt

    def _owned(self, ctx: UserContext, rid: int):
        return self.s.scalar(self._scoped(ctx, id=rid).execution_options(populate_existing=True))

    def _not_found(self, rid) -> Result:
        return Result.failure(ErrorKind.NOT_FOUND, f"{self.label} #{rid} not found.")

    def _commit(self, action: str) -> Result:
        try:
            self.s.commit()
        except IntegrityError as e:
            self.s.rollback()
            logger.warning("%s %s rejected: %s", action, self.label.lower(), _db_message(e))
            return Result.failure(ErrorKind.VALIDATION, _db_message(e))
        except SQLAlchemyError as e:
            self.s.rollback()
            logger.exception("%s %s failed", action, self.label.lower())
            return Result.failure(ErrorKind.TRANSPORT, _db_message(e))
        return Result.success()

    # ----- read -----
    def list(self, ctx: UserContext | None, order=None, **eq) -> Result:
        if ctx is None: return _no_session()
        stmt = self._scoped(ctx, **eq).order_by(*(order or self._default_order()))
        # rows already in the session must pick up changes made since they were loaded
        stmt = stmt.execution_options(populate_existing=True)
        try:
            rows = self.s.scalars(stmt).all()
        except SQLAlchemyError as e:
            logger.exception("list %s failed", self.orm.__tablename__)
            return Result.failure(ErrorKind.TRANSPORT, _db_message(e))
        return Result.success([self._to_dto(r) for r in rows])

    def get(self, ctx: UserContext | None, rid: int) -> Result:
        if ctx is None: return _no_session()
        try:
            orm = self._owned(ctx, rid)
        except SQLAlchemyError as e:
            logger.exception("get %s #%s failed", self.label.lower(), rid)
            return Result.failure(ErrorKind.TRANSPORT, _db_message(e))
        return Result.success(self._to_dto(orm)) if orm else self._not_found(rid)

    def count(self, ctx: UserContext | None, **eq) -> Result:
        """Count-only query (no row contents), equality filters on top of ownership."""
        if ctx is None: return _no_session()
        stmt = self._scoped(ctx, select(func.count(self.orm.id)), **eq)
        try:
            n = self.s.scalar(stmt)
        except SQLAlchemyError as e:
            logger.exception("count %s failed", self.orm.__tablename__)
            return Result.failure(ErrorKind.TRANSPORT, _db_message(e))
        return Result.success(n or 0)

    # ----- write -----
    def create(self, ctx: UserContext | None, dto) -> Result:
        if dto.id is not None:
            raise ValueError("create() got a record that already has an id; use update()")
        if ctx is None: return _no_session()
        errors = self._validate(dto)
        if errors:
            return Result.failure(ErrorKind.VALIDATION, " ".join(errors))
        try:
            bad_ref = self._check_refs(ctx, dto)
            if bad_ref is not None: return bad_ref
            orm = self._apply(dto)
            orm.user_id = ctx.user_id
            self.s.add(orm)
        except SQLAlchemyError as e:
            self.s.rollback()
            logger.exception("create %s failed", self.label.lower())
            return Result.failure(ErrorKind.TRANSPORT, _db_message(e))
        res = self._commit("create")
        if not res.ok: return res
        logger.info("%s #%s created by user %s", self.label, orm.id, ctx.user_id)
        return Result.success(orm.id)

    def update(self, ctx: UserContext | None, rid: int, dto) -> Result:
        if ctx is None: return _no_session()
        errors = self._validate(dto)
        if errors:
            return Result.failure(ErrorKind.VALIDATION, " ".join(errors))
        try:
            orm = self._owned(ctx, rid)
            if not orm: return self._not_found(rid)
            bad_ref = self._check_refs(ctx, dto)
            if bad_ref is not None: return bad_ref
            self._apply(dto, orm)
        except SQLAlchemyError as e:
            self.s.rollback()
            logger.exception("update %s #%s failed", self.label.lower(), rid)
            return Result.failure(ErrorKind.TRANSPORT, _db_message(e))
        res = self._commit("update")
        if res.ok: logger.info("%s #%s updated by user %s", self.label, rid, ctx.user_id)
        return res

    def delete(self, ctx: UserContext | None, rid: int) -> Result:
        if ctx is None: return _no_session()
        try:
            orm = self._owned(ctx, rid)
            if not orm: return self._not_found(rid)
            self.s.delete(orm)
        except SQLAlchemyError as e:
            self.s.rollback()
            logger.exception("delete %s #%s failed", self.label.lower(), rid)
            return Result.failure(ErrorKind.TRANSPORT, _db_message(e))
        res = self._commit("delete")
        if res.ok: logger.info("%s #%s deleted by user %s", self.label, rid, ctx.user_id)
        return res


class NamedRepo(OwnedRepo):
    """Owned rows with a full_name that can be offered in a picker."""

    def options(self, ctx: UserContext | None) -> Result:
        """(id, label) pairs ordered by name."""
        res = self.list(ctx, order=(self.orm.full_name.asc(), self.orm.id.asc()))
        if not res.ok: return res
        return Result.success([(r.id, self._option_label(r)) for r in res.value])

    def _option_label(self, dto) -> str:
        return dto.full_name


class PatientRepo(NamedRepo):
    orm = PatientORM
    label = "Patient"

    def _to_dto(self, orm): return _patient_to_dto(orm)
    def _apply(self, dto, orm=None): return _patient_apply(dto, orm)
    def _validate(self, dto): return validate_patient(dto)


class DoctorRepo(NamedRepo):
    orm = DoctorORM
    label = "Doctor"

    def _to_dto(self, orm): return _doctor_to_dto(orm)
    def _apply(self, dto, orm=None): return _doctor_apply(dto, orm)
    def _validate(self, dto): return validate_doctor(dto)
    def _option_label(self, dto): return f"{dto.full_name} ({dto.specialization})"


class AppointmentRepo(OwnedRepo):
    orm = AppointmentORM
    label = "Appointment"

    def _to_dto(self, orm): return _appointment_to_dto(orm)
    def _apply(self, dto, orm=None): return _appointment_apply(dto, orm)
    def _validate(self, dto): return validate_appointment(dto)

    def _default_order(self):
        return (AppointmentORM.appointment_date.desc(), AppointmentORM.appointment_time.desc(),
                AppointmentORM.id.desc())

    def _check_refs(self, ctx, dto):
        # both ends must belong to the same owner as the appointment
        patient = self.s.scalar(select(PatientORM).where(
            PatientORM.id == dto.patient_id, PatientORM.user_id == ctx.user_id))
        if not patient:
            return Result.failure(ErrorKind.VALIDATION, "Selected patient does not exist.")
        doctor = self.s.scalar(select(DoctorORM).where(
            DoctorORM.id == dto.doctor_id, DoctorORM.user_id == ctx.user_id))
        if not doctor:
            return Result.failure(ErrorKind.VALIDATION, "Selected doctor does not exist.")
        return None


class UserRepo:
    def __init__(self, s: Session):
        self.s = s

    def sign_in(self, email: str, display_name: str = "") -> UserContext:
        """Get-or-create the local user and hand back the context for store calls."""
        email = (email or "").strip().lower()
        if not email:
            raise ValueError("An email is required to sign in.")
        u = self.s.scalar(select(User).where(User.email == email))
        if not u:
            u = User(email=email, display_name=display_name.strip())
            self.s.add(u)
            try:
                self.s.commit()
            except IntegrityError:
                # created concurrently by another window
                self.s.rollback()
                u = self.s.scalar(select(User).where(User.email == email))
            logger.info("user %s registered", email)
        return UserContext(user_id=u.id, email=u.email, display_name=u.display_name)
