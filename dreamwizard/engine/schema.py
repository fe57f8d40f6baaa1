"""Pydantic models for flow schema validation."""

from enum import Enum
from typing import List, Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class StepKind(str, Enum):
    """Kinds of pages a flow can show."""

    INFO = 'info'
    SINGLE_CHOICE = 'single_choice'
    DATE_INPUT = 'date_input'
    TEXT_INPUT = 'text_input'
    LOADING = 'loading'
    RESULTS = 'results'


QUESTION_KINDS = (StepKind.SINGLE_CHOICE, StepKind.DATE_INPUT, StepKind.TEXT_INPUT)
PSEUDO_KINDS = (StepKind.LOADING, StepKind.RESULTS)


class StepOption(BaseModel):
    """One selectable answer of a single-choice step."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Text shown to the user")
    value: str = Field(..., description="Value stored as the answer")


class Step(BaseModel):
    """
    Represents a single step in a flow.

    A step can be:
    - An informational page
    - A question (single choice, date, free text)
    - One of the terminal pseudo-steps (loading, results)

    Steps are built once when the flow is loaded and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique step identifier, also the answer key")
    kind: StepKind = Field(..., description="Step kind")
    title: str = Field(..., description="Page title")
    body: str = Field('', description="Explanatory text under the title")
    options: Optional[List[StepOption]] = Field(None, description="Options for single_choice steps")
    required: bool = Field(False, description="Answer must be present before advancing")
    persist_key: Optional[str] = Field(None, description="Persistence key for the answer")
    persist_immediately: bool = Field(False, description="Persist on set_answer instead of at completion")
    prefill: bool = Field(False, description="Load the persisted answer when the flow starts")
    validator: Optional[str] = Field(None, description="Validator function name (e.g., 'biorhythm.validate_birth_date')")
    default_value: Optional[Any] = Field(None, description="Answer used when nothing was entered or persisted")
    request_permission: bool = Field(False, description="Ask for notification permission before leaving this step")
    offer_reminder: bool = Field(False, description="Offer a reminder time picker before leaving this step")
    button_label: Optional[str] = Field(None, description="Label of the forward button")

    @model_validator(mode='after')
    def _check_options(self) -> 'Step':
        if self.kind == StepKind.SINGLE_CHOICE:
            if not self.options:
                raise ValueError(f"single_choice step '{self.id}' needs options")
            values = [option.value for option in self.options]
            if len(values) != len(set(values)):
                raise ValueError(f"Duplicate option value in step '{self.id}'")
        elif self.options:
            raise ValueError(f"Only single_choice steps take options (step '{self.id}')")
        return self

    @property
    def is_question(self) -> bool:
        return self.kind in QUESTION_KINDS

    def option_values(self) -> List[str]:
        """Return the option values in display order."""
        return [option.value for option in self.options or []]

    def label_for(self, value: Any) -> Optional[str]:
        """Return the label of the option with the given value, if any."""
        for option in self.options or []:
            if option.value == value:
                return option.label
        return None


class FlowSpec(BaseModel):
    """
    Specification for a single guided flow.

    Content steps are shown in order. The optional loading and results
    pseudo-steps sit after the last content step and are never part of
    the step sequence itself.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Flow identifier (e.g., 'biorhythm')")
    version: Union[str, float] = Field(..., description="Flow spec version")
    description: str = Field(..., description="Human-readable description")
    steps: List[Step] = Field(..., min_length=1, description="Ordered content steps")
    loading: Optional[Step] = Field(None, description="Pseudo-step shown while submitting")
    results: Optional[Step] = Field(None, description="Pseudo-step shown once completed")
    completion_key: Optional[str] = Field(None, description="Persistence key set to True on completion")
    submission_delay: Optional[float] = Field(None, ge=0, description="Simulated processing delay in seconds")

    @field_validator('steps')
    @classmethod
    def _check_content_steps(cls, steps: List[Step]) -> List[Step]:
        ids = set()
        for step in steps:
            if step.kind in PSEUDO_KINDS:
                raise ValueError(f"Step '{step.id}' of kind '{step.kind.value}' cannot be a content step")
            if step.id in ids:
                raise ValueError(f"Duplicate Step ID found: {step.id}")
            ids.add(step.id)
        return steps

    @model_validator(mode='after')
    def _check_pseudo_steps(self) -> 'FlowSpec':
        if self.loading is not None and self.loading.kind != StepKind.LOADING:
            raise ValueError("loading step must have kind 'loading'")
        if self.results is not None and self.results.kind != StepKind.RESULTS:
            raise ValueError("results step must have kind 'results'")
        return self
