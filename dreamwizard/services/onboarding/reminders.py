"""Daily dream-journal reminder content and time handling."""

from datetime import date, time
from typing import Optional, Union

REMINDER_TITLE = "Dream Journal Reminder"

REMINDER_TEXTS = (
    "Good morning! Remember any dreams last night? Take a moment to record them while they're still fresh.",
    "Rise and shine! Did you have any interesting dreams? Open Lunara to log them before they fade away.",
    "Morning! Your dream journal is waiting for today's entry. What adventures did your mind take you on?",
    "Hey dreamer! Time to capture those nighttime thoughts before they disappear. Open Lunara now.",
)

DEFAULT_REMINDER_TIME = time(8, 0)


def day_of_year_seed(today: Optional[date] = None) -> int:
    """Default seed for reminder text selection: the day of the year."""
    today = today or date.today()
    return today.timetuple().tm_yday


def pick_reminder_text(seed: int) -> str:
    """Pick a reminder body deterministically from a seed."""
    return REMINDER_TEXTS[seed % len(REMINDER_TEXTS)]


def parse_reminder_time(value: Union[str, time]) -> time:
    """Read a reminder time from a time object or an 'HH:MM' string.

    Raises:
        ValueError: If the value is not a valid 24-hour time
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    if not isinstance(value, str):
        raise ValueError(f"Reminder time must be HH:MM, got {type(value).__name__}")

    parts = value.strip().split(':')
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid reminder time '{value}': expected HH:MM")

    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid reminder time '{value}': expected HH:MM")

    return time(hour, minute)


def format_reminder_time(value: time) -> str:
    """Format a reminder time as 'HH:MM' for storage."""
    return value.strftime('%H:%M')
