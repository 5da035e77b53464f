from __future__ import annotations
import sys
import logging

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QFrame, QStackedWidget, QStatusBar
)
from sqlalchemy.orm import Session

from config import get_config
from logging_setup import setup_logger
from database import make_engine, make_session_factory, init_db
from models import Base
from domain import UserContext, validate_patient, validate_doctor, validate_appointment
from repo import PatientRepo, DoctorRepo, AppointmentRepo, UserRepo
from screens import RecordScreen, SUCCESS, ERROR
from search import PATIENT_FIELDS, DOCTOR_FIELDS, APPOINTMENT_FIELDS
from ui.dialogs import PatientDialog, DoctorDialog, AppointmentDialog
from ui.pages import DashboardPage, RecordPage
from ui.table_model import PATIENT_COLUMNS, DOCTOR_COLUMNS, APPOINTMENT_COLUMNS

logger = logging.getLogger("ui")

PALETTE = {
    "blue": "#2563EB",
    "red": "#DC2626",
    "green": "#16A34A",
}


class MainWindow(QMainWindow):
    def __init__(self, session: Session, session_factory, ctx: UserContext | None):
        super().__init__()
        self.setWindowTitle("CareDesk (PySide6 + SQLAlchemy)")
        self.setMinimumSize(1100, 680)
        self.s = session
        self.ctx = ctx
        self.setStatusBar(QStatusBar(self))

        self.patients = PatientRepo(self.s)
        self.doctors = DoctorRepo(self.s)
        self.appointments = AppointmentRepo(self.s)

        self.patient_screen = RecordScreen(self.patients, ctx, noun="patient", fields=PATIENT_FIELDS,
                                           validate=validate_patient, notify=self.notify)
        self.doctor_screen = RecordScreen(self.doctors, ctx, noun="doctor", fields=DOCTOR_FIELDS,
                                          validate=validate_doctor, notify=self.notify)
        self.appointment_screen = RecordScreen(
            self.appointments, ctx, noun="appointment", fields=APPOINTMENT_FIELDS,
            validate=validate_appointment, notify=self.notify,
            created_msg="Appointment scheduled successfully")

        self._build_ui(session_factory)
        self._install_styles()
        self._go(0)

    # ----- UI -----
    def _build_ui(self, session_factory):
        host = QWidget(); self.setCentralWidget(host)
        root = QHBoxLayout(host); root.setContentsMargins(0, 0, 0, 0); root.setSpacing(0)

        self.dashboard = DashboardPage(session_factory, self.ctx, self.notify)
        self.pages = [
            ("Dashboard", self.dashboard),
            ("Patients", RecordPage(
                self.patient_screen, PATIENT_COLUMNS, title="Patients",
                subtitle="Manage patient records and health information",
                search_hint="Search by name, email, or city...", add_text="Add Patient",
                open_dialog=lambda row: PatientDialog(self.patient_screen, row, self))),
            ("Doctors", RecordPage(
                self.doctor_screen, DOCTOR_COLUMNS, title="Doctors",
                subtitle="Manage doctor profiles and specializations",
                search_hint="Search by name, specialization, or city...", add_text="Add Doctor",
                open_dialog=lambda row: DoctorDialog(self.doctor_screen, row, self))),
            ("Appointments", RecordPage(
                self.appointment_screen, APPOINTMENT_COLUMNS, title="Appointments",
                subtitle="Schedule and manage patient appointments",
                search_hint="Search by patient, doctor, or status...", add_text="Schedule Appointment",
                open_dialog=self._appointment_dialog)),
        ]

        # Sidebar (navigation)
        side = QFrame(); side.setObjectName("sidebar")
        sv = QVBoxLayout(side); sv.setContentsMargins(16, 16, 16, 16); sv.setSpacing(10)
        brand = QLabel("CareDesk"); brand.setObjectName("section")
        sv.addWidget(brand)
        self.nav_buttons: list[QPushButton] = []
        for i, (name, _) in enumerate(self.pages):
            b = QPushButton(name); b.setObjectName("nav")
            b.clicked.connect(lambda _=False, i=i: self._go(i))
            sv.addWidget(b); self.nav_buttons.append(b)
        sv.addStretch(1)
        who = QLabel(self.ctx.display_name or self.ctx.email if self.ctx else "Not signed in")
        who.setObjectName("sideMuted"); who.setWordWrap(True)
        sv.addWidget(who)
        root.addWidget(side)

        self.stack = QStackedWidget()
        for _, page in self.pages:
            self.stack.addWidget(page)
        root.addWidget(self.stack, 1)

    def _install_styles(self):
        self.setStyleSheet(f"""
        QFrame#sidebar {{ background:{PALETTE['blue']}; color:white; min-width:180px; }}
        QLabel#section {{ color:white; font-weight:700; font-size:16px; margin-bottom:8px; }}
        QLabel#sideMuted {{ color:rgba(255,255,255,0.75); }}
        QLabel#pageTitle {{ font-size:22px; font-weight:700; }}
        QLabel#muted {{ color:#666; }}
        QPushButton#nav {{
            background:{PALETTE['blue']}; color:rgba(255,255,255,0.8); border:0; text-align:left;
            padding:12px 14px; border-radius:10px;
        }}
        QPushButton#nav[active="true"] {{ color:white; font-weight:700; background:rgba(255,255,255,0.15); }}
        QPushButton#btnBlue {{ background:{PALETTE['blue']}; color:white; padding:6px 12px; border-radius:6px; }}
        QPushButton#btnRed {{ color:{PALETTE['red']}; }}
        QFrame#card {{ border:1px solid #e5e5e5; border-radius:10px; background:#fafafa; }}
        """)

    # ----- navigation -----
    def _go(self, i: int):
        self.stack.setCurrentIndex(i)
        for j, b in enumerate(self.nav_buttons):
            b.setProperty("active", "true" if j == i else "false")
            b.style().unpolish(b); b.style().polish(b)
        page = self.pages[i][1]
        # every visit re-reads from the store
        if page is self.dashboard:
            self.dashboard.refresh()
        else:
            page.reload()

    def _appointment_dialog(self, row):
        patients = self.patients.options(self.ctx)
        doctors = self.doctors.options(self.ctx)
        if not patients.ok:
            self.notify(ERROR, "Failed to fetch patients")
        if not doctors.ok:
            self.notify(ERROR, "Failed to fetch doctors")
        return AppointmentDialog(self.appointment_screen, patients.value or [], doctors.value or [],
                                 row, self)

    # ----- notifications -----
    def notify(self, level: str, message: str):
        color = {SUCCESS: PALETTE["green"], ERROR: PALETTE["red"]}.get(level, "#333")
        self.statusBar().setStyleSheet(f"color:{color};")
        self.statusBar().showMessage(message, 4000 if level == ERROR else 2500)
        (logger.warning if level == ERROR else logger.info)("notify[%s] %s", level, message)


# ---- entrypoint (main.py calls run()) ----
def run():
    cfg = get_config()
    setup_logger(cfg)
    engine = make_engine(cfg.DB_PATH, echo=cfg.SQL_ECHO)
    init_db(engine, Base)
    SessionFactory = make_session_factory(engine)
    with SessionFactory() as s:
        ctx = UserRepo(s).sign_in(cfg.USER_EMAIL, cfg.USER_NAME)
        logger.info("signed in as %s (user %s)", ctx.email, ctx.user_id)
        app = QApplication(sys.argv)
        w = MainWindow(s, SessionFactory, ctx)
        w.show()
        sys.exit(app.exec())


if __name__ == "__main__":
    run()
