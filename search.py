from __future__ import annotations
from typing import Callable, Iterable, Sequence, TypeVar

T = TypeVar("T")

# Fields the search box looks at, per screen
PATIENT_FIELDS = ("full_name", "email", "city")
DOCTOR_FIELDS = ("full_name", "specialization", "city")
APPOINTMENT_FIELDS = ("patient_name", "doctor_name", "status")


def _getter(field: str | Callable[[T], object]) -> Callable[[T], object]:
    return field if callable(field) else (lambda row: getattr(row, field, None))


def filter_rows(rows: Sequence[T], query: str | None, fields: Iterable) -> list[T]:
    """
    Keep rows where the query is a case-insensitive substring of any field.
    Blank query -> every row. Input order is preserved, so filtering is idempotent.
    """
    q = (query or "").strip().lower()
    if not q:
        return list(rows)
    getters = [_getter(f) for f in fields]
    out = []
    for row in rows:
        for get in getters:
            v = get(row)
            if v is not None and q in str(v).lower():
                out.append(row)
                break
    return out
