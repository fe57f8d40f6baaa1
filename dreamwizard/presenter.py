"""Console presenter - renders a flow in the terminal and feeds it intents."""

import threading
from typing import Any, Dict, Optional

import typer

from dreamwizard.engine.controller import FlowController, Phase
from dreamwizard.engine.schema import Step, StepKind
from dreamwizard.engine.sequence import is_empty_answer

REMINDER_TIME_INPUT = 'reminder_time'
COMPLETION_TIMEOUT_MARGIN = 30.0


class ConsolePresenter:
    """
    Drives a FlowController from the terminal.

    Interactive mode prompts for every answer and re-prompts on invalid
    input. Headless mode takes answers from a {step_id: value} dict and
    fails fast on missing or invalid ones.
    """

    def __init__(self, headless_inputs: Optional[Dict[str, Any]] = None):
        """
        Initialize the presenter.

        Args:
            headless_inputs: Pre-provided answers by step id; None means interactive.
                             The 'reminder_time' key answers the reminder picker.
        """
        self.headless_mode = headless_inputs is not None
        self.headless_inputs = headless_inputs or {}

    def run(self, flow: FlowController) -> Any:
        """
        Walk the flow until it completes.

        Returns:
            The flow outcome

        Raises:
            ValueError: In headless mode, if an answer is missing or invalid
            RuntimeError: If the submission never completes
        """
        done = threading.Event()
        flow.add_listener(lambda outcome: done.set())

        shown_index = None
        while flow.phase == Phase.IN_PROGRESS:
            step = flow.current_step
            if flow.step_index != shown_index:
                self._show_step(flow, step)
                shown_index = flow.step_index
                if step.is_question:
                    self._collect_answer(flow, step)
                if step.button_label:
                    typer.echo(f"[{step.button_label}]")

            if not flow.advance() and not flow.can_advance:
                # Still unanswered; ask again
                shown_index = None
                continue

            if getattr(flow, 'awaiting_reminder_time', False):
                self._collect_reminder_time(flow)

        if flow.phase == Phase.SUBMITTING:
            if flow.spec.loading is not None:
                typer.echo(f"\n{flow.spec.loading.title}")
            if not done.wait(flow.submission_delay + COMPLETION_TIMEOUT_MARGIN):
                raise RuntimeError(f"Flow '{flow.spec.name}' did not complete")

        return flow.result

    def _show_step(self, flow: FlowController, step: Step) -> None:
        typer.echo("")
        typer.echo(f"[{flow.step_number}/{flow.total_steps}] {step.title}")
        if step.body:
            typer.echo(step.body)

    def _collect_answer(self, flow: FlowController, step: Step) -> None:
        if self.headless_mode:
            self._headless_answer(flow, step)
            return

        while True:
            current = flow.answers.get(step.id)
            if step.kind == StepKind.SINGLE_CHOICE:
                raw = self._prompt_choice(step, current)
            elif step.kind == StepKind.DATE_INPUT:
                raw = typer.prompt("Date (YYYY-MM-DD)",
                                   default=str(current) if current is not None else None)
            else:
                raw = typer.prompt("Answer", default=current or '', show_default=bool(current))

            if is_empty_answer(raw) and not step.required:
                return

            try:
                flow.set_answer(step.id, raw)
                return
            except ValueError as e:
                # Show error and re-prompt
                typer.echo(f"Error: {e}")

    def _prompt_choice(self, step: Step, current: Optional[str]) -> str:
        typer.echo("")
        for i, option in enumerate(step.options, 1):
            typer.echo(f"  {i}. {option.label}")
        typer.echo("")

        values = step.option_values()
        default = str(values.index(current) + 1) if current in values else None
        raw = str(typer.prompt("Choose", default=default)).strip()

        # Accept the option number or the value itself
        if raw.isdigit() and 1 <= int(raw) <= len(values):
            return values[int(raw) - 1]
        return raw

    def _headless_answer(self, flow: FlowController, step: Step) -> None:
        value = self.headless_inputs.get(step.id)
        if is_empty_answer(value):
            if step.required and is_empty_answer(flow.answers.get(step.id)):
                raise ValueError(f"No answer provided for required step '{step.id}'")
            return

        typer.echo(f"> {step.label_for(value) or value}")
        flow.set_answer(step.id, value)

    def _collect_reminder_time(self, flow: Any) -> None:
        if self.headless_mode:
            value = self.headless_inputs.get(REMINDER_TIME_INPUT)
            if isinstance(value, int) and not isinstance(value, bool):
                # YAML 1.1 reads an unquoted 20:30 as base-60 minutes (1230)
                value = f"{value // 60:02d}:{value % 60:02d}"
            flow.confirm_reminder(str(value) if value is not None else None)
            return

        while True:
            raw = typer.prompt("Daily reminder time (HH:MM)",
                               default=flow.reminder_time.strftime('%H:%M'))
            try:
                flow.confirm_reminder(raw)
                return
            except ValueError as e:
                typer.echo(f"Error: {e}")
