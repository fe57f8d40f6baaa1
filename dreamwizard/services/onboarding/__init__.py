"""Onboarding service."""

from .validators import normalize_name
from .reminders import (
    DEFAULT_REMINDER_TIME,
    REMINDER_TEXTS,
    REMINDER_TITLE,
    format_reminder_time,
    parse_reminder_time,
    pick_reminder_text,
)
from .flow import OnboardingFlow, OnboardingOutcome, needs_onboarding

__all__ = [
    'normalize_name',
    'DEFAULT_REMINDER_TIME',
    'REMINDER_TEXTS',
    'REMINDER_TITLE',
    'format_reminder_time',
    'parse_reminder_time',
    'pick_reminder_text',
    'OnboardingFlow',
    'OnboardingOutcome',
    'needs_onboarding',
]
