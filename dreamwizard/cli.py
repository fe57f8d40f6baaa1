"""dreamwizard command line - runs the guided flows in a terminal."""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml

from dreamwizard.config import Settings, load_settings
from dreamwizard.engine.errors import DreamWizardError
from dreamwizard.engine.gateways import ConsoleNotificationGateway, YamlPersistenceGateway
from dreamwizard.engine.loader import SpecLoader
from dreamwizard.presenter import ConsolePresenter
from dreamwizard.services.biorhythm import BiorhythmFlow, ScoreResult, score, validate_birth_date
from dreamwizard.services.biorhythm.flow import FLOW_NAME as BIORHYTHM_FLOW
from dreamwizard.services.biorhythm.scoring import format_hour
from dreamwizard.services.onboarding import OnboardingFlow, OnboardingOutcome, needs_onboarding

app = typer.Typer(help="Guided dream flows: biorhythm analysis and onboarding.")

NOTIFICATIONS_INPUT = 'allow_notifications'


def _settings() -> Settings:
    try:
        settings = load_settings()
    except ValueError as e:
        _fail(e)
    logging.basicConfig(
        level=settings.log_level_number,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    return settings


def _fail(error: Exception) -> None:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1)


def _load_answers(path: Optional[Path]) -> Optional[Dict[str, Any]]:
    """Read headless answers from a YAML mapping of step id to answer."""
    if path is None:
        return None
    if not path.exists():
        raise ValueError(f"Answers file not found: {path}")
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Answers file {path} must contain a mapping of step id to answer")
    return data


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid date '{value}': expected YYYY-MM-DD") from None


def _print_score(result: ScoreResult) -> None:
    dashboard = result.dashboard
    typer.echo("")
    typer.echo(f"Your biorhythm number: {result.score} ({dashboard.archetype})")
    typer.echo(f"  Sleep efficiency: {dashboard.sleep_efficiency}")
    typer.echo(f"  Dream recall:     {dashboard.dream_recall}")
    typer.echo(f"  Optimal sleep:    {dashboard.optimal_sleep}")
    typer.echo(f"  Peak hours:       {dashboard.peak_hours}")
    peaks = ', '.join(format_hour(h) for h in dashboard.peak_hour_marks)
    if peaks:
        typer.echo(f"  Energy peaks at:  {peaks}")

    for heading, text in (
        ("Narrative meaning", result.narrative_meaning),
        ("Daily impact", result.daily_impact),
        ("Dream insights", result.dream_insights),
        ("Sleep cycle", result.sleep_cycle_analysis),
        ("Monthly patterns", result.monthly_patterns),
        ("Energy peaks", result.energy_peaks),
        ("Rest needs", result.rest_needs),
        ("Recommendations", result.recommendations),
    ):
        if text:
            typer.echo(f"\n{heading}\n{text}")


@app.command()
def biorhythm(
    answers: Optional[Path] = typer.Option(None, help="YAML file of step id -> answer (headless mode)"),
    store: Optional[Path] = typer.Option(None, help="YAML store file (default: DREAMWIZARD_STORE)"),
    delay: Optional[float] = typer.Option(None, min=0, help="Seconds spent calculating"),
):
    """Run the biorhythm analysis wizard."""
    settings = _settings()
    try:
        inputs = _load_answers(answers)
        flow = BiorhythmFlow(
            YamlPersistenceGateway(store or settings.store_path),
            submission_delay=settings.submission_delay if delay is None else delay,
        )
        result = ConsolePresenter(inputs).run(flow)
    except (ValueError, DreamWizardError) as e:
        _fail(e)

    _print_score(result)


@app.command()
def onboarding(
    answers: Optional[Path] = typer.Option(None, help="YAML file of step id -> answer (headless mode)"),
    store: Optional[Path] = typer.Option(None, help="YAML store file (default: DREAMWIZARD_STORE)"),
    force: bool = typer.Option(False, "--force", help="Run even if onboarding was completed"),
):
    """Run first-time onboarding."""
    settings = _settings()
    try:
        inputs = _load_answers(answers)
        persistence = YamlPersistenceGateway(store or settings.store_path)
        if not force and not needs_onboarding(persistence):
            typer.echo("Onboarding already completed (use --force to run it again).")
            return

        notifications = ConsoleNotificationGateway(
            answer=bool(inputs.get(NOTIFICATIONS_INPUT, False)) if inputs is not None else None
        )
        flow = OnboardingFlow(
            persistence,
            notifications,
            default_user_name=settings.default_user_name,
        )
        outcome: OnboardingOutcome = ConsolePresenter(inputs).run(flow)
    except (ValueError, DreamWizardError) as e:
        _fail(e)

    typer.echo(f"\nWelcome, {outcome.user_name}!")
    if outcome.open_paywall:
        typer.echo("Next: choose a subscription to unlock all features.")


@app.command(name='score')
def score_command(
    birth_date: str = typer.Option(..., help="Birth date (YYYY-MM-DD)"),
    today: Optional[str] = typer.Option(None, help="Reference date (default: today)"),
    dream_frequency: Optional[str] = typer.Option(None),
    nightmare_frequency: Optional[str] = typer.Option(None),
    sleep_duration: Optional[str] = typer.Option(None),
):
    """Print the biorhythm score for given answers without running the wizard."""
    _settings()
    try:
        born = validate_birth_date(birth_date, {})
        now = _parse_date(today) if today else date.today()

        spec = SpecLoader().load_flow(BIORHYTHM_FLOW)
        answers = {}
        for step_id, value in (
            ('dream_frequency', dream_frequency),
            ('nightmare_frequency', nightmare_frequency),
            ('sleep_duration', sleep_duration),
        ):
            if value is None:
                continue
            options = next(s for s in spec.steps if s.id == step_id).option_values()
            if value not in options:
                raise ValueError(
                    f"Invalid {step_id.replace('_', '-')} '{value}'. "
                    f"Expected one of: {', '.join(options)}"
                )
            answers[step_id] = value

        result = score(born, now, answers)
    except (ValueError, DreamWizardError) as e:
        _fail(e)

    _print_score(result)


if __name__ == "__main__":
    app()
