from __future__ import annotations

# (upper bound, label); bands are half-open, lower bound closed
BMI_BANDS = (
    (18.5, "Underweight"),
    (25.0, "Normal"),
    (30.0, "Overweight"),
)
OBESE = "Obese"
NOT_AVAILABLE = "N/A"


def compute_bmi(height_cm: float | None, weight_kg: float | None) -> float | None:
    """weight / (height in metres)^2, or None when either input is missing or height <= 0."""
    if height_cm is None or weight_kg is None or height_cm <= 0:
        return None
    m = height_cm / 100
    return weight_kg / (m * m)


def bmi_category(bmi: float | None) -> str:
    if bmi is None:
        return NOT_AVAILABLE
    for upper, label in BMI_BANDS:
        if bmi < upper:
            return label
    return OBESE


def format_bmi(bmi: float | None) -> str:
    return NOT_AVAILABLE if bmi is None else f"{bmi:.1f}"
