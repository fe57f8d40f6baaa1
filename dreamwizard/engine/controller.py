"""FlowController - guided flow state machine with injected gateways."""

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .errors import InvalidStateError
from .gateways import PersistenceGateway
from .scheduler import Scheduler, ScheduledTask, ThreadingScheduler
from .schema import FlowSpec, Step, StepKind
from .sequence import StepSequence, is_empty_answer

logger = logging.getLogger(__name__)

DEFAULT_SUBMISSION_DELAY = 2.0


class Phase(str, Enum):
    """Coarse lifecycle of a flow. Only ever moves forward."""

    IN_PROGRESS = 'in_progress'
    SUBMITTING = 'submitting'
    COMPLETED = 'completed'


class FlowController:
    """
    Drives one guided flow instance.

    Key responsibilities:
    - Track the current step and the collected answers
    - Gate forward movement on required answers
    - Run the simulated submission and compute the outcome once
    - Persist answers through the injected gateway

    Subclasses implement compute_outcome(). Intents are expected serially
    from a single presentation layer. The only lock guards the handoff
    between dispose() and a submission completing on the timer thread.
    """

    def __init__(self, spec: FlowSpec, persistence: PersistenceGateway,
                 scheduler: Optional[Scheduler] = None,
                 validators: Optional[Dict[str, Callable]] = None,
                 submission_delay: Optional[float] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the controller.

        Args:
            spec: Flow specification to run
            persistence: PersistenceGateway for answers and completion flags
            scheduler: Scheduler for the submission delay (default: ThreadingScheduler)
            validators: Validator functions by name, called as fn(value, answers)
            submission_delay: Seconds spent in the loading phase (default: spec value or 2)
            clock: Returns "now" for the outcome computation (default: datetime.now)
        """
        if submission_delay is None:
            submission_delay = spec.submission_delay
        if submission_delay is None:
            submission_delay = DEFAULT_SUBMISSION_DELAY
        if submission_delay < 0:
            raise ValueError("submission_delay cannot be negative")

        self.spec = spec
        self.sequence = StepSequence(spec.steps)
        self.persistence = persistence
        self.scheduler = scheduler or ThreadingScheduler()
        self.validators: Dict[str, Callable] = dict(validators or {})
        self.submission_delay = submission_delay
        self.clock = clock or datetime.now

        self.step_index = 0
        self.answers: Dict[str, Any] = {}
        self.phase = Phase.IN_PROGRESS
        self.outcome: Any = None

        self._listeners: List[Callable[[Any], None]] = []
        self._pending: Optional[ScheduledTask] = None
        self._disposed = False
        self._lock = threading.Lock()

        self._prefill_answers()

    def _prefill_answers(self) -> None:
        """Load persisted answers and defaults for steps that ask for them."""
        for step in self.sequence:
            value = None
            if step.prefill and step.persist_key:
                value = self.persistence.get(step.persist_key)
            if is_empty_answer(value) and step.default_value is not None:
                value = step.default_value
            if is_empty_answer(value):
                continue
            try:
                self.answers[step.id] = self._check_value(step, value)
            except ValueError as e:
                logger.warning("Ignoring saved answer for step '%s': %s", step.id, e)

    # -- read-only view for the presentation layer --------------------------

    @property
    def loading_index(self) -> int:
        """Sentinel index of the loading pseudo-step."""
        return self.sequence.step_count()

    @property
    def results_index(self) -> int:
        """Sentinel index of the results pseudo-step."""
        return self.sequence.step_count() + 1

    @property
    def current_step(self) -> Optional[Step]:
        """Step to render. Loading/results pseudo-steps may be None if the flow has none."""
        if self.step_index < self.sequence.step_count():
            return self.sequence.step_at(self.step_index)
        if self.step_index == self.loading_index:
            return self.spec.loading
        return self.spec.results

    @property
    def is_last_step(self) -> bool:
        return self.step_index == self.sequence.step_count() - 1

    @property
    def can_advance(self) -> bool:
        """Whether the forward action is enabled."""
        if self._disposed or self.phase != Phase.IN_PROGRESS:
            return False
        return self.sequence.is_satisfied(self.step_index, self.answers)

    @property
    def can_retreat(self) -> bool:
        return not self._disposed and self.phase == Phase.IN_PROGRESS and self.step_index > 0

    @property
    def step_number(self) -> int:
        """1-based position for "Step n of m" indicators."""
        return min(self.step_index, self.sequence.step_count() - 1) + 1

    @property
    def total_steps(self) -> int:
        return self.sequence.step_count()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def result(self) -> Any:
        """Outcome of the flow once completed, else None."""
        return self.outcome

    # -- intents -------------------------------------------------------------

    def add_listener(self, callback: Callable[[Any], None]) -> None:
        """Register a callback run once with the outcome when the flow completes."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[Any], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _ensure_accepts_intents(self, intent: str) -> None:
        if self._disposed:
            raise InvalidStateError(f"Cannot {intent}: flow '{self.spec.name}' was disposed")
        if self.phase == Phase.COMPLETED:
            raise InvalidStateError(f"Cannot {intent}: flow '{self.spec.name}' is completed")

    def _check_value(self, step: Step, value: Any) -> Any:
        """Validate an answer for a step.

        Returns:
            Validated (possibly normalized) value

        Raises:
            ValueError: If the value is not acceptable for the step
        """
        if step.kind == StepKind.SINGLE_CHOICE and value is not None:
            if value not in step.option_values():
                raise ValueError(
                    f"Invalid option '{value}' for step '{step.id}'. "
                    f"Expected one of: {', '.join(step.option_values())}"
                )

        if step.validator and not is_empty_answer(value):
            validator_fn = self.validators.get(step.validator)
            if validator_fn is None:
                # No validator function registered, use value as-is
                logger.warning("Validator '%s' is not registered", step.validator)
            else:
                value = validator_fn(value, self.answers)

        return value

    def set_answer(self, step_id: str, value: Any) -> Any:
        """
        Record the answer for a question step. Never moves to another step.

        Args:
            step_id: Id of the question step
            value: Option value, date or text; None clears the answer

        Returns:
            The stored (validated) value

        Raises:
            InvalidStateError: If the flow is submitting, completed or disposed
            KeyError: If the step id is unknown
            ValueError: If the value is rejected by the step's checks
        """
        self._ensure_accepts_intents('set an answer')
        if self.phase != Phase.IN_PROGRESS:
            raise InvalidStateError(f"Cannot set an answer: flow '{self.spec.name}' is submitting")

        step = self.sequence.step_by_id(step_id)
        if not step.is_question:
            raise ValueError(f"Step '{step_id}' does not take an answer")

        value = self._check_value(step, value)
        self.answers[step.id] = value

        if step.persist_immediately and step.persist_key and not is_empty_answer(value):
            self.persistence.set(step.persist_key, value)

        return value

    def advance(self) -> bool:
        """
        Move forward one step, or start the submission from the last step.

        Returns:
            True if the flow moved, False if the intent was ignored (the
            current step is unsatisfied or a submission is running)

        Raises:
            InvalidStateError: If the flow is completed or disposed
        """
        self._ensure_accepts_intents('advance')

        if self.phase == Phase.SUBMITTING:
            logger.debug("Ignoring advance on flow '%s': submission in progress", self.spec.name)
            return False

        if not self.sequence.is_satisfied(self.step_index, self.answers):
            logger.debug("Step '%s' needs an answer before advancing", self.current_step.id)
            return False

        if self.is_last_step:
            self._submit()
            return True

        self.step_index += 1
        return True

    def retreat(self) -> bool:
        """
        Move back one step. Never validates.

        Returns:
            True if the flow moved back

        Raises:
            InvalidStateError: If the flow is completed or disposed
        """
        self._ensure_accepts_intents('go back')

        if self.phase != Phase.IN_PROGRESS:
            logger.debug("Ignoring retreat on flow '%s': submission in progress", self.spec.name)
            return False
        if self.step_index == 0:
            return False

        self.step_index -= 1
        return True

    def dispose(self) -> None:
        """
        Discard the flow. A pending submission is cancelled and never reported.

        If the submission is already completing on the timer thread, this
        waits for it, so the flow is either completed or disposed, never a mix.
        """
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
                logger.info("Flow '%s' disposed during submission", self.spec.name)
            self._disposed = True
            self._listeners.clear()

    # -- submission ----------------------------------------------------------

    def _submit(self) -> None:
        if self.phase != Phase.IN_PROGRESS:
            return

        self.phase = Phase.SUBMITTING
        self.step_index = self.loading_index
        logger.info("Flow '%s' submitting", self.spec.name)

        if self.spec.loading is None or self.submission_delay == 0:
            self._complete_submission()
            return

        self._pending = self.scheduler.schedule(self.submission_delay, self._complete_submission)

    def _complete_submission(self) -> None:
        with self._lock:
            if self._disposed or self.phase != Phase.SUBMITTING:
                return
            self._pending = None

            try:
                outcome = self.compute_outcome(dict(self.answers), self.clock())
            except Exception:
                logger.exception("Flow '%s' failed to compute its outcome", self.spec.name)
                raise

            for key, value in self.persisted_values(outcome).items():
                self.persistence.set(key, value)

            self.outcome = outcome
            self.phase = Phase.COMPLETED
            self.step_index = self.results_index
            listeners = list(self._listeners)
        logger.info("Flow '%s' completed", self.spec.name)

        # Outside the lock so a listener may dispose the flow
        for listener in listeners:
            listener(outcome)

    def persisted_values(self, outcome: Any) -> Dict[str, Any]:
        """
        Values written in one batch when the flow completes.

        Answers already persisted by set_answer() are not written again.
        """
        values: Dict[str, Any] = {}
        for step in self.sequence:
            if not step.persist_key or step.persist_immediately:
                continue
            value = self.answers.get(step.id)
            if is_empty_answer(value):
                continue
            values[step.persist_key] = value

        if self.spec.completion_key:
            values[self.spec.completion_key] = True

        return values

    def compute_outcome(self, answers: Dict[str, Any], now: datetime) -> Any:
        """Compute the flow's result from the final answers."""
        raise NotImplementedError
