"""Onboarding flow - quiz pages, reminder opt-in, then the subscription offer."""

import logging
from datetime import datetime, time
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict

from dreamwizard.engine.controller import FlowController, Phase
from dreamwizard.engine.errors import InvalidStateError
from dreamwizard.engine.gateways import NotificationGateway, PersistenceGateway
from dreamwizard.engine.loader import SpecLoader
from dreamwizard.engine.scheduler import Scheduler
from dreamwizard.engine.schema import FlowSpec
from dreamwizard.engine.sequence import is_empty_answer

from .reminders import (
    DEFAULT_REMINDER_TIME,
    REMINDER_TITLE,
    day_of_year_seed,
    format_reminder_time,
    parse_reminder_time,
    pick_reminder_text,
)
from .validators import normalize_name

logger = logging.getLogger(__name__)

FLOW_NAME = 'onboarding'
NAME_STEP = 'user_name'
DEFAULT_USER_NAME = 'Dreamer'
DEFAULT_COMPLETION_KEY = 'hasCompletedOnboarding'

NOTIFICATIONS_ENABLED_KEY = 'notificationsEnabled'
REMINDER_ENABLED_KEY = 'isReminderEnabled'
REMINDER_TIME_KEY = 'reminderTime'


class OnboardingOutcome(BaseModel):
    """Result of a finished onboarding; tells the presentation layer to open the paywall."""

    model_config = ConfigDict(frozen=True)

    user_name: str
    dream_frequency: Optional[str] = None
    dream_type: Optional[str] = None
    dream_recall: Optional[str] = None
    notifications_enabled: bool = False
    open_paywall: bool = True


def needs_onboarding(persistence: PersistenceGateway, spec: Optional[FlowSpec] = None) -> bool:
    """Whether onboarding still has to run (its completion flag is not set)."""
    key = (spec.completion_key if spec else None) or DEFAULT_COMPLETION_KEY
    return not persistence.get(key, False)


class OnboardingFlow(FlowController):
    """
    Paginated onboarding with a notification opt-in interjection.

    On the step flagged request_permission, the first advance() asks for
    notification permission instead of moving on. On a step flagged
    offer_reminder, once permission was asked, the next advance() opens
    the reminder time picker; the one after confirms it and moves on.
    Finishing the last page completes at once (no loading phase) with an
    OnboardingOutcome.
    """

    def __init__(self, persistence: PersistenceGateway,
                 notifications: NotificationGateway,
                 scheduler: Optional[Scheduler] = None,
                 spec: Optional[FlowSpec] = None,
                 default_user_name: str = DEFAULT_USER_NAME,
                 reminder_seed: Optional[Callable[[], int]] = None,
                 validators: Optional[Dict[str, Callable]] = None):
        """
        Initialize the onboarding flow.

        Args:
            persistence: PersistenceGateway for answers and flags
            notifications: NotificationGateway for permission and reminders
            scheduler: Scheduler (unused unless the flow has a loading step)
            spec: Flow spec (default: packaged flows/onboarding.yaml)
            default_user_name: Name stored when the name step is left empty
            reminder_seed: Returns the seed for reminder text (default: day of year)
            validators: Extra validator functions by name
        """
        registered = {'onboarding.normalize_name': normalize_name}
        registered.update(validators or {})

        self.notifications = notifications
        self.default_user_name = default_user_name
        self.reminder_seed = reminder_seed or day_of_year_seed

        self.permission_requested = False
        self.notifications_granted: Optional[bool] = None
        self.reminder_offered = False
        self.awaiting_reminder_time = False

        super().__init__(
            spec or SpecLoader().load_flow(FLOW_NAME),
            persistence,
            scheduler=scheduler,
            validators=registered,
        )

        self.reminder_time = self._saved_reminder_time()

    def _saved_reminder_time(self) -> time:
        saved = self.persistence.get(REMINDER_TIME_KEY)
        if saved is None:
            return DEFAULT_REMINDER_TIME
        try:
            return parse_reminder_time(saved)
        except ValueError as e:
            logger.warning("Ignoring saved reminder time: %s", e)
            return DEFAULT_REMINDER_TIME

    def advance(self) -> bool:
        """
        Move forward, running the permission/reminder interjections first.

        Returns:
            True if the step index moved or the flow completed, False if the
            intent was ignored or consumed by an interjection
        """
        self._ensure_accepts_intents('advance')

        if self.phase == Phase.IN_PROGRESS:
            if self.awaiting_reminder_time:
                return self.confirm_reminder()

            step = self.current_step
            if step.request_permission and not self.permission_requested:
                self._request_permission()
                return False

            if step.offer_reminder and self.permission_requested and not self.reminder_offered:
                self.reminder_offered = True
                self.awaiting_reminder_time = True
                return False

        return super().advance()

    def retreat(self) -> bool:
        """Go back one page. An open reminder picker is dismissed instead."""
        self._ensure_accepts_intents('go back')
        if self.awaiting_reminder_time:
            self.awaiting_reminder_time = False
            self.reminder_offered = False
            return False
        return super().retreat()

    def _request_permission(self) -> bool:
        self.permission_requested = True
        granted = bool(self.notifications.request_permission())
        self.notifications_granted = granted

        self.persistence.set(NOTIFICATIONS_ENABLED_KEY, granted)
        if granted:
            self.persistence.set(REMINDER_ENABLED_KEY, True)

        logger.info("Notification permission %s", 'granted' if granted else 'denied')
        return granted

    def set_reminder_time(self, value: Union[str, time]) -> time:
        """
        Choose the daily reminder time.

        Raises:
            InvalidStateError: If the flow no longer accepts intents
            ValueError: If the value is not a valid HH:MM time
        """
        self._ensure_accepts_intents('set the reminder time')
        self.reminder_time = parse_reminder_time(value)
        return self.reminder_time

    def confirm_reminder(self, value: Optional[Union[str, time]] = None) -> bool:
        """
        Save the reminder time, schedule the reminder if allowed, and move on.

        Args:
            value: Reminder time to use instead of the current one

        Returns:
            True if the flow moved forward

        Raises:
            InvalidStateError: If the reminder picker is not open
        """
        self._ensure_accepts_intents('confirm the reminder')
        if not self.awaiting_reminder_time:
            raise InvalidStateError("No reminder time is being chosen")

        if value is not None:
            self.set_reminder_time(value)

        self.persistence.set(REMINDER_TIME_KEY, format_reminder_time(self.reminder_time))
        if self.notifications_granted:
            self.notifications.schedule_daily_reminder(
                self.reminder_time.hour,
                self.reminder_time.minute,
                REMINDER_TITLE,
                pick_reminder_text(self.reminder_seed()),
            )

        self.awaiting_reminder_time = False
        return super().advance()

    def compute_outcome(self, answers: Dict[str, Any], now: datetime) -> OnboardingOutcome:
        name = answers.get(NAME_STEP)
        if is_empty_answer(name):
            name = self.default_user_name

        return OnboardingOutcome(
            user_name=name,
            dream_frequency=answers.get('dream_frequency'),
            dream_type=answers.get('dream_type'),
            dream_recall=answers.get('dream_recall'),
            notifications_enabled=bool(self.notifications_granted),
        )

    def persisted_values(self, outcome: OnboardingOutcome) -> Dict[str, Any]:
        values = super().persisted_values(outcome)

        name_key = self.sequence.step_by_id(NAME_STEP).persist_key
        if name_key:
            values[name_key] = outcome.user_name

        # Completion flag goes last
        completion_key = self.spec.completion_key
        if completion_key in values:
            values[completion_key] = values.pop(completion_key)

        return values
