"""Tests for flow schema models."""

import pytest
from pydantic import ValidationError

from dreamwizard.engine.schema import FlowSpec, Step, StepKind, StepOption


def _choice_step(step_id='q1', values=('a', 'b')):
    return Step(
        id=step_id,
        kind=StepKind.SINGLE_CHOICE,
        title='Pick one',
        options=[StepOption(label=v.upper(), value=v) for v in values],
    )


def test_step_parses_kind_from_string():
    """Step accepts the kind as its YAML string."""
    step = Step(id='intro', kind='info', title='Hello')

    assert step.kind == StepKind.INFO
    assert step.is_question is False
    assert step.required is False


def test_question_kinds_are_questions():
    """Choice, date and text steps take answers."""
    assert _choice_step().is_question
    assert Step(id='d', kind='date_input', title='When?').is_question
    assert Step(id='t', kind='text_input', title='Name?').is_question


def test_single_choice_requires_options():
    """single_choice steps without options are rejected."""
    with pytest.raises(ValidationError, match="needs options"):
        Step(id='q', kind='single_choice', title='Pick')


def test_single_choice_rejects_duplicate_values():
    """Option values must be unique within a step."""
    with pytest.raises(ValidationError, match="Duplicate option value"):
        _choice_step(values=('a', 'a'))


def test_options_only_on_single_choice():
    """Non-choice steps cannot carry options."""
    with pytest.raises(ValidationError, match="Only single_choice"):
        Step(id='t', kind='text_input', title='Name', options=[{'label': 'A', 'value': 'a'}])


def test_step_option_helpers():
    """option_values() keeps display order, label_for() maps values to labels."""
    step = _choice_step(values=('x', 'y', 'z'))

    assert step.option_values() == ['x', 'y', 'z']
    assert step.label_for('y') == 'Y'
    assert step.label_for('missing') is None


def test_step_is_frozen():
    """Steps cannot be mutated after loading."""
    step = Step(id='intro', kind='info', title='Hello')

    with pytest.raises(ValidationError):
        step.title = 'Changed'


def test_flow_spec_minimal():
    """FlowSpec validates with a single content step."""
    spec = FlowSpec(
        name='test',
        version='1.0',
        description='Test flow',
        steps=[{'id': 'intro', 'kind': 'info', 'title': 'Hello'}],
    )

    assert spec.name == 'test'
    assert len(spec.steps) == 1
    assert spec.loading is None
    assert spec.results is None
    assert spec.submission_delay is None


def test_flow_spec_requires_steps():
    """A flow needs at least one content step."""
    with pytest.raises(ValidationError):
        FlowSpec(name='empty', version='1.0', description='No steps', steps=[])


def test_flow_spec_rejects_duplicate_step_ids():
    """Step ids must be unique."""
    with pytest.raises(ValidationError, match="Duplicate Step ID"):
        FlowSpec(
            name='dup',
            version='1.0',
            description='Duplicate ids',
            steps=[
                {'id': 'same', 'kind': 'info', 'title': 'One'},
                {'id': 'same', 'kind': 'info', 'title': 'Two'},
            ],
        )


def test_flow_spec_rejects_pseudo_steps_in_sequence():
    """loading/results steps cannot be content steps."""
    with pytest.raises(ValidationError, match="cannot be a content step"):
        FlowSpec(
            name='bad',
            version='1.0',
            description='Pseudo in sequence',
            steps=[{'id': 'wait', 'kind': 'loading', 'title': 'Wait'}],
        )


def test_flow_spec_checks_pseudo_step_kinds():
    """The loading slot only takes a loading step."""
    with pytest.raises(ValidationError, match="loading step must have kind 'loading'"):
        FlowSpec(
            name='bad',
            version='1.0',
            description='Wrong loading kind',
            steps=[{'id': 'intro', 'kind': 'info', 'title': 'Hello'}],
            loading={'id': 'wait', 'kind': 'info', 'title': 'Wait'},
        )


def test_flow_spec_rejects_negative_delay():
    """submission_delay must not be negative."""
    with pytest.raises(ValidationError):
        FlowSpec(
            name='bad',
            version='1.0',
            description='Negative delay',
            steps=[{'id': 'intro', 'kind': 'info', 'title': 'Hello'}],
            submission_delay=-1,
        )
