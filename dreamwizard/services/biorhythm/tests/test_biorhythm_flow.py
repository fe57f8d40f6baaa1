"""Tests for BiorhythmFlow - the full wizard with mock gateways."""

from datetime import date, datetime, timedelta

import pytest

from dreamwizard.engine.controller import Phase
from dreamwizard.engine.errors import InvalidStateError
from dreamwizard.engine.gateways import MockPersistenceGateway
from dreamwizard.engine.scheduler import ManualScheduler
from dreamwizard.services.biorhythm import BiorhythmFlow, ScoreResult

NOW = datetime(2024, 6, 1, 12, 0)


@pytest.fixture
def persistence():
    return MockPersistenceGateway()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def flow(persistence, scheduler):
    return BiorhythmFlow(persistence, scheduler=scheduler, clock=lambda: NOW)


def _answer_quiz(flow, birth_date, dream='each_night', nightmare='none', sleep='over_9_hours'):
    assert flow.current_step.id == 'intro'
    flow.advance()
    flow.set_answer('birth_date', birth_date)
    flow.advance()
    flow.set_answer('dream_frequency', dream)
    flow.advance()
    flow.set_answer('nightmare_frequency', nightmare)
    flow.advance()
    flow.set_answer('sleep_duration', sleep)


def test_flow_shape(flow):
    """Five content steps, then calculating and results."""
    assert flow.total_steps == 5
    assert flow.submission_delay == 2
    assert flow.spec.loading.id == 'calculating'
    assert flow.spec.results.id == 'results'


def test_full_run(flow, scheduler):
    seen = []
    flow.add_listener(seen.append)
    _answer_quiz(flow, (NOW - timedelta(days=9000)).date())

    assert flow.advance() is True
    assert flow.phase == Phase.SUBMITTING
    assert flow.current_step.id == 'calculating'

    scheduler.advance(2)

    assert flow.phase == Phase.COMPLETED
    assert flow.current_step.id == 'results'
    assert isinstance(flow.result, ScoreResult)
    assert flow.result.score == 5
    assert seen == [flow.result]


def test_birth_date_required(flow):
    flow.advance()

    assert flow.current_step.id == 'birth_date'
    assert flow.advance() is False


def test_quiz_questions_required(flow):
    flow.advance()
    flow.set_answer('birth_date', '1990-05-01')
    flow.advance()

    assert flow.advance() is False


def test_birth_date_persisted_immediately(flow, persistence):
    flow.set_answer('birth_date', '1990-05-01')

    assert persistence.writes() == [('set', 'userBirthDate', date(1990, 5, 1))]


def test_quiz_answers_not_persisted(flow, persistence, scheduler):
    _answer_quiz(flow, '1990-05-01')
    flow.advance()
    scheduler.run_all()

    assert persistence.writes() == [('set', 'userBirthDate', date(1990, 5, 1))]


def test_saved_birth_date_prefilled(scheduler):
    persistence = MockPersistenceGateway({'userBirthDate': date(1985, 2, 3)})
    flow = BiorhythmFlow(persistence, scheduler=scheduler)

    assert flow.answers['birth_date'] == date(1985, 2, 3)
    flow.advance()
    assert flow.can_advance is True


def test_invalid_birth_date_rejected(flow):
    with pytest.raises(ValueError, match='Invalid birth date'):
        flow.set_answer('birth_date', 'last tuesday')


def test_double_tap_schedules_once(flow, scheduler):
    seen = []
    flow.add_listener(seen.append)
    _answer_quiz(flow, '1990-05-01')

    flow.advance()
    flow.advance()
    scheduler.run_all()

    assert scheduler.calls == [('schedule', 2.0)]
    assert len(seen) == 1


def test_dispose_while_calculating(flow, scheduler):
    seen = []
    flow.add_listener(seen.append)
    _answer_quiz(flow, '1990-05-01')
    flow.advance()

    flow.dispose()
    scheduler.run_all()

    assert seen == []
    assert flow.result is None
    with pytest.raises(InvalidStateError):
        flow.advance()


def test_custom_delay(persistence, scheduler):
    flow = BiorhythmFlow(persistence, scheduler=scheduler, submission_delay=0.5)
    _answer_quiz(flow, '1990-05-01')
    flow.advance()

    assert scheduler.calls == [('schedule', 0.5)]
