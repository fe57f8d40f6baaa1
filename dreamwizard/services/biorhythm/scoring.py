"""Biorhythm scoring - birth date and sleep answers to a narrative bundle.

The score is fully deterministic: the same birth date, reference date and
answers always give the same number and text.
"""

import logging
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from dreamwizard.engine.errors import InternalInvariantError

logger = logging.getLogger(__name__)

NARRATIVES_PATH = Path(__file__).resolve().parent / "narratives.yaml"

DateLike = Union[date, datetime]


class Narrative(BaseModel):
    """Text bundle shown for one biorhythm number."""

    model_config = ConfigDict(frozen=True)

    narrative_meaning: str
    daily_impact: str
    recommendations: str
    dream_insights: str = ''
    sleep_cycle_analysis: str = ''
    monthly_patterns: str = ''
    energy_peaks: str = ''
    rest_needs: str = ''


class Dashboard(BaseModel):
    """Headline metrics and the hourly energy curve for one biorhythm number."""

    model_config = ConfigDict(frozen=True)

    archetype: str
    sleep_efficiency: str
    dream_recall: str
    optimal_sleep: str
    peak_hours: str
    peak_hour_marks: List[int] = Field(default_factory=list)
    energy_curve: List[int] = Field(..., min_length=24, max_length=24)


class NarrativeTable(BaseModel):
    """Lookup table from biorhythm number to narrative and dashboard."""

    model_config = ConfigDict(frozen=True)

    version: Union[str, float] = "1.0"
    min_score: int = 1
    max_score: int = 9
    narratives: Dict[int, Narrative]
    dashboards: Dict[int, Dashboard]

    @model_validator(mode='after')
    def _check_coverage(self) -> 'NarrativeTable':
        if self.min_score > self.max_score:
            raise ValueError("min_score must not exceed max_score")
        expected = set(range(self.min_score, self.max_score + 1))
        for name, entries in (('narratives', self.narratives), ('dashboards', self.dashboards)):
            missing = expected - set(entries)
            if missing:
                raise ValueError(f"{name} missing entries for: {sorted(missing)}")
        return self

    def lookup(self, score: int) -> Tuple[Narrative, Dashboard]:
        """Return the narrative and dashboard for a score.

        Raises:
            InternalInvariantError: If the score has no table entry
        """
        if score not in self.narratives or score not in self.dashboards:
            raise InternalInvariantError(
                f"No narrative for biorhythm number {score} "
                f"(table covers {self.min_score}..{self.max_score})"
            )
        return self.narratives[score], self.dashboards[score]


class ScoreResult(BaseModel):
    """Deterministic output of a biorhythm analysis."""

    model_config = ConfigDict(frozen=True)

    score: int
    narrative_meaning: str
    daily_impact: str
    recommendations: str
    dream_insights: str = ''
    sleep_cycle_analysis: str = ''
    monthly_patterns: str = ''
    energy_peaks: str = ''
    rest_needs: str = ''
    dashboard: Dashboard

    def energy_at(self, hour: int) -> int:
        """Relative energy level (0-100) for an hour of the day."""
        if not 0 <= hour <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {hour}")
        return self.dashboard.energy_curve[hour]

    def is_peak_hour(self, hour: int) -> bool:
        return hour in self.dashboard.peak_hour_marks


class Adjustment(NamedTuple):
    """Score delta applied when an answer has one of the listed values."""

    answer_key: str
    deltas: Mapping[str, int]


# Applied in this order; each step clamps, so the order changes edge results.
ADJUSTMENTS: Tuple[Adjustment, ...] = (
    Adjustment('dream_frequency', {'never': -2, 'each_night': 2}),
    Adjustment('nightmare_frequency', {'each_one': -1, 'none': 1}),
    Adjustment('sleep_duration', {'under_5_hours': -1, 'over_9_hours': 1}),
)


def load_narrative_table(path: Optional[Path] = None) -> NarrativeTable:
    """
    Load a narrative table from YAML.

    Args:
        path: YAML file (default: narratives.yaml next to this module)

    Returns:
        Validated NarrativeTable

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If YAML doesn't match schema
    """
    path = Path(path) if path is not None else NARRATIVES_PATH
    if not path.exists():
        raise FileNotFoundError(f"Narrative table not found: {path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    return NarrativeTable.model_validate(data)


@lru_cache(maxsize=1)
def default_table() -> NarrativeTable:
    """The packaged narrative table, loaded once."""
    return load_narrative_table()


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_since(birth_date: DateLike, now: DateLike) -> int:
    """
    Whole days elapsed from birth_date to now. Future birth dates count as 0.

    Two datetimes are compared exactly, so 23:59 to 00:01 is 0 days. When
    either side is a plain date both are compared as calendar dates.
    """
    if isinstance(birth_date, datetime) and isinstance(now, datetime):
        return max(0, (now - birth_date).days)
    return max(0, (_as_date(now) - _as_date(birth_date)).days)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def base_number(days: int, min_score: int = 1, max_score: int = 9) -> int:
    """Cycle position of a day count: (days mod span) + min_score."""
    span = max_score - min_score + 1
    return (days % span) + min_score


def apply_adjustments(base: int, answers: Mapping[str, Any],
                      min_score: int = 1, max_score: int = 9,
                      adjustments: Sequence[Adjustment] = ADJUSTMENTS) -> int:
    """Apply answer-driven deltas in order, clamping after each one."""
    value = base
    for adjustment in adjustments:
        delta = adjustment.deltas.get(answers.get(adjustment.answer_key), 0)
        if delta:
            value = clamp(value + delta, min_score, max_score)
            logger.debug("%s adjusted biorhythm number by %+d to %d",
                         adjustment.answer_key, delta, value)
    return value


def score(birth_date: DateLike, now: DateLike, answers: Mapping[str, Any],
          table: Optional[NarrativeTable] = None,
          adjustments: Sequence[Adjustment] = ADJUSTMENTS) -> ScoreResult:
    """
    Compute the biorhythm number and its narrative bundle.

    Args:
        birth_date: User's birth date
        now: Reference date for the day count
        answers: Quiz answers keyed by step id (dream_frequency,
                 nightmare_frequency, sleep_duration)
        table: Narrative table (default: the packaged table)
        adjustments: Ordered answer adjustments

    Returns:
        ScoreResult with score in [table.min_score, table.max_score]

    Raises:
        InternalInvariantError: If the final number has no table entry
    """
    table = table or default_table()

    days = days_since(birth_date, now)
    number = base_number(days, table.min_score, table.max_score)
    number = apply_adjustments(number, answers, table.min_score, table.max_score, adjustments)

    try:
        narrative, dashboard = table.lookup(number)
    except InternalInvariantError:
        logger.error("Biorhythm number %d escaped the narrative table", number)
        raise

    return ScoreResult(score=number, dashboard=dashboard, **narrative.model_dump())


def format_hour(hour: int) -> str:
    """Compact 12-hour label for chart axes (e.g. 0 -> '12a', 13 -> '1p')."""
    h = 12 if hour % 12 == 0 else hour % 12
    return f"{h}{'a' if hour < 12 else 'p'}"
