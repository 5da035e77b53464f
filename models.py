from __future__ import annotations
from datetime import date
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, Date, Text, Integer, Float, ForeignKey, CheckConstraint, func

from domain import APPOINTMENT_STATUSES

class Base(DeclarativeBase):
    pass

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(160), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(120), default="")
    created_at: Mapped[str] = mapped_column(server_default=func.datetime("now"))

class Patient(Base):
    __tablename__ = "patients"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Row-level ownership: every query is scoped by this column
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    full_name:   Mapped[str] = mapped_column(String(160))
    age:         Mapped[int] = mapped_column(Integer)
    gender:      Mapped[str] = mapped_column(String(16))
    phone:       Mapped[str] = mapped_column(String(60))
    email:       Mapped[str] = mapped_column(String(160))
    address:     Mapped[str | None] = mapped_column(String(255), nullable=True)
    city:        Mapped[str] = mapped_column(String(120))
    height_cm:   Mapped[float | None] = mapped_column(Float, nullable=True)
    weight_kg:   Mapped[float | None] = mapped_column(Float, nullable=True)
    # written by the repo on every save; None unless both vitals are present
    bmi:         Mapped[float | None] = mapped_column(Float, nullable=True)
    blood_group: Mapped[str | None] = mapped_column(String(4), nullable=True)
    medical_history: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(server_default=func.datetime("now"))
    updated_at: Mapped[str] = mapped_column(server_default=func.datetime("now"), onupdate=func.datetime("now"))

class Doctor(Base):
    __tablename__ = "doctors"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    full_name:      Mapped[str] = mapped_column(String(160))
    specialization: Mapped[str] = mapped_column(String(120))
    qualification:  Mapped[str | None] = mapped_column(String(120), nullable=True)
    city:           Mapped[str] = mapped_column(String(120))
    phone:          Mapped[str] = mapped_column(String(60))
    email:          Mapped[str] = mapped_column(String(160))
    created_at: Mapped[str] = mapped_column(server_default=func.datetime("now"))
    updated_at: Mapped[str] = mapped_column(server_default=func.datetime("now"), onupdate=func.datetime("now"))

_status_list = ", ".join(f"'{s}'" for s in APPOINTMENT_STATUSES)

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint(f"status IN ({_status_list})", name="ck_appointments_status"),
    )
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id", ondelete="CASCADE"), index=True)
    doctor_id:  Mapped[int] = mapped_column(ForeignKey("doctors.id", ondelete="CASCADE"), index=True)
    # Date and time are separate scalars, not one timestamp
    appointment_date: Mapped[date] = mapped_column(Date, index=True)
    appointment_time: Mapped[str] = mapped_column(String(5))
    status: Mapped[str] = mapped_column(String(16), default="scheduled")
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes:  Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(server_default=func.datetime("now"))
    updated_at: Mapped[str] = mapped_column(server_default=func.datetime("now"), onupdate=func.datetime("now"))

    patient: Mapped[Patient] = relationship(lazy="joined")
    doctor:  Mapped[Doctor] = relationship(lazy="joined")
