from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from domain import UserContext, DashboardStatsDTO
from repo import PatientRepo, DoctorRepo, AppointmentRepo
from results import Result, ErrorKind

logger = logging.getLogger("stats")


def _count(session_factory, repo_cls, ctx: UserContext, **eq) -> Result:
    # one session per worker; sessions are not shared across threads
    with session_factory() as s:
        return repo_cls(s).count(ctx, **eq)


def fetch_dashboard_stats(session_factory, ctx: UserContext | None,
                          today: date | None = None) -> Result:
    """
    Four count-only queries issued concurrently and joined before returning.
    All-or-nothing: if any one fails the whole aggregate fails.
    """
    if ctx is None:
        return Result.failure(ErrorKind.AUTHORIZATION, "You must be signed in.")
    today = today or date.today()
    jobs = {
        "patients": (PatientRepo, {}),
        "doctors": (DoctorRepo, {}),
        "appointments": (AppointmentRepo, {}),
        "today_appointments": (AppointmentRepo, {"appointment_date": today}),
    }
    with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="stats") as pool:
        futures = {
            name: pool.submit(_count, session_factory, repo_cls, ctx, **eq)
            for name, (repo_cls, eq) in jobs.items()
        }
        counts, failed = {}, None
        # every future is read so each failure gets logged; the first one is reported
        for name, fut in futures.items():
            try:
                res = fut.result()
            except Exception as e:  # anything the worker raised counts as a failed query
                logger.exception("dashboard count %s crashed", name)
                res = Result.failure(ErrorKind.TRANSPORT, str(e))
            if not res.ok:
                logger.warning("dashboard count %s failed: %s", name, res.error.message)
                failed = failed or res
                continue
            counts[name] = res.value
    if failed is not None:
        return failed
    return Result.success(DashboardStatsDTO(**counts))
