"""Biorhythm validators."""

from datetime import date, datetime
from typing import Any, Dict


def validate_birth_date(value: Any, ctx: Dict[str, Any]) -> date:
    """Validate and normalize a birth date.

    Accepts date and datetime objects, and ISO strings (YYYY-MM-DD).
    Future dates are accepted; scoring treats them as zero days old.

    Args:
        value: Birth date to validate
        ctx: Collected answers (unused)

    Returns:
        The birth date as a datetime.date

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        raise ValueError(f"Birth date must be a date, got {type(value).__name__}")

    value = value.strip()
    if not value:
        raise ValueError("Birth date cannot be empty")

    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid birth date '{value}': expected YYYY-MM-DD") from None
