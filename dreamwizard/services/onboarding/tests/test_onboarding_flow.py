"""Tests for OnboardingFlow - quiz pages, permission and reminder interjections."""

from datetime import time

import pytest

from dreamwizard.engine.controller import Phase
from dreamwizard.engine.errors import InvalidStateError
from dreamwizard.engine.gateways import MockNotificationGateway, MockPersistenceGateway
from dreamwizard.services.onboarding import (
    REMINDER_TEXTS,
    REMINDER_TITLE,
    OnboardingFlow,
    OnboardingOutcome,
    needs_onboarding,
)


@pytest.fixture
def persistence():
    return MockPersistenceGateway()


@pytest.fixture
def notifications():
    return MockNotificationGateway(granted=True)


@pytest.fixture
def flow(persistence, notifications):
    return OnboardingFlow(persistence, notifications, reminder_seed=lambda: 2)


def _walk_to_logging(flow):
    flow.advance()
    flow.set_answer('dream_frequency', 'often')
    flow.advance()
    flow.advance()
    flow.set_answer('dream_type', 'flying')
    flow.advance()
    flow.advance()
    flow.set_answer('dream_recall', 'vivid')
    flow.advance()
    assert flow.current_step.id == 'daily_logging'


def _finish(flow, name=None):
    assert flow.current_step.id == 'user_name'
    if name is not None:
        flow.set_answer('user_name', name)
    flow.advance()
    flow.advance()


def test_needs_onboarding():
    assert needs_onboarding(MockPersistenceGateway()) is True
    assert needs_onboarding(MockPersistenceGateway({'hasCompletedOnboarding': False})) is True
    assert needs_onboarding(MockPersistenceGateway({'hasCompletedOnboarding': True})) is False


def test_quiz_steps_required(flow):
    flow.advance()

    assert flow.current_step.id == 'dream_frequency'
    assert flow.advance() is False


def test_quiz_answers_prefilled(notifications):
    persistence = MockPersistenceGateway({'dreamFrequency': 'rarely', 'userName': 'Luna'})
    flow = OnboardingFlow(persistence, notifications)

    assert flow.answers == {'dream_frequency': 'rarely', 'user_name': 'Luna'}


def test_permission_requested_before_leaving_logging_page(flow, persistence, notifications):
    _walk_to_logging(flow)

    assert flow.advance() is False
    assert notifications.calls == [('request_permission',)]
    assert flow.notifications_granted is True
    assert ('set', 'notificationsEnabled', True) in persistence.writes()
    assert ('set', 'isReminderEnabled', True) in persistence.writes()
    assert flow.current_step.id == 'daily_logging'


def test_reminder_picker_then_confirm(flow, persistence, notifications):
    _walk_to_logging(flow)
    flow.advance()

    assert flow.advance() is False
    assert flow.awaiting_reminder_time is True
    assert flow.reminder_time == time(8, 0)

    flow.set_reminder_time('21:30')
    assert flow.advance() is True

    assert flow.current_step.id == 'user_name'
    assert flow.awaiting_reminder_time is False
    assert ('set', 'reminderTime', '21:30') in persistence.writes()
    assert notifications.calls[-1] == ('schedule_daily_reminder', 21, 30, REMINDER_TITLE, REMINDER_TEXTS[2])


def test_confirm_reminder_with_value(flow, notifications):
    _walk_to_logging(flow)
    flow.advance()
    flow.advance()

    assert flow.confirm_reminder('06:45') is True
    assert notifications.calls[-1][1:3] == (6, 45)


def test_confirm_reminder_needs_open_picker(flow):
    with pytest.raises(InvalidStateError, match='No reminder time'):
        flow.confirm_reminder()


def test_invalid_reminder_time_keeps_picker_open(flow):
    _walk_to_logging(flow)
    flow.advance()
    flow.advance()

    with pytest.raises(ValueError):
        flow.confirm_reminder('25:00')

    assert flow.awaiting_reminder_time is True
    assert flow.current_step.id == 'daily_logging'


def test_denied_permission_skips_scheduling(persistence):
    notifications = MockNotificationGateway(granted=False)
    flow = OnboardingFlow(persistence, notifications)
    _walk_to_logging(flow)

    flow.advance()
    flow.advance()
    flow.advance()

    assert flow.current_step.id == 'user_name'
    assert notifications.calls == [('request_permission',)]
    assert ('set', 'notificationsEnabled', False) in persistence.writes()
    assert ('set', 'isReminderEnabled', True) not in persistence.writes()
    assert ('set', 'reminderTime', '08:00') in persistence.writes()


def test_retreat_dismisses_picker(flow):
    _walk_to_logging(flow)
    flow.advance()
    flow.advance()

    assert flow.retreat() is False
    assert flow.awaiting_reminder_time is False
    assert flow.current_step.id == 'daily_logging'

    # Offered again, permission is not asked twice
    assert flow.advance() is False
    assert flow.awaiting_reminder_time is True


def test_permission_asked_once(flow, notifications):
    _walk_to_logging(flow)
    flow.advance()
    flow.advance()
    flow.advance()
    flow.retreat()
    flow.advance()

    assert notifications.calls.count(('request_permission',)) == 1


def test_saved_reminder_time_prefilled(notifications):
    persistence = MockPersistenceGateway({'reminderTime': '06:15'})

    assert OnboardingFlow(persistence, notifications).reminder_time == time(6, 15)


def test_completes_without_loading(flow, persistence):
    seen = []
    flow.add_listener(seen.append)
    _walk_to_logging(flow)
    flow.advance()
    flow.advance()
    flow.advance()

    _finish(flow, name='  Luna  ')

    assert flow.phase == Phase.COMPLETED
    assert seen == [flow.result]
    assert flow.result == OnboardingOutcome(
        user_name='Luna',
        dream_frequency='often',
        dream_type='flying',
        dream_recall='vivid',
        notifications_enabled=True,
    )
    assert flow.result.open_paywall is True


def test_completion_batch(flow, persistence):
    _walk_to_logging(flow)
    flow.advance()
    flow.advance()
    flow.advance()
    before = len(persistence.writes())

    _finish(flow, name='Luna')

    assert persistence.writes()[before:] == [
        ('set', 'dreamFrequency', 'often'),
        ('set', 'dreamType', 'flying'),
        ('set', 'dreamRecall', 'vivid'),
        ('set', 'userName', 'Luna'),
        ('set', 'hasCompletedOnboarding', True),
    ]
    assert needs_onboarding(persistence) is False


def test_empty_name_uses_default(persistence, notifications):
    flow = OnboardingFlow(persistence, notifications, default_user_name='Stargazer')
    _walk_to_logging(flow)
    flow.advance()
    flow.advance()
    flow.advance()

    _finish(flow, name='   ')

    assert flow.result.user_name == 'Stargazer'
    assert persistence.data['userName'] == 'Stargazer'


def test_completed_onboarding_rejects_intents(flow):
    _walk_to_logging(flow)
    flow.advance()
    flow.advance()
    flow.advance()
    _finish(flow)

    with pytest.raises(InvalidStateError):
        flow.advance()
    with pytest.raises(InvalidStateError):
        flow.set_reminder_time('09:00')
