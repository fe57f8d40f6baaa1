"""Biorhythm analysis service."""

from .validators import validate_birth_date
from .scoring import (
    ADJUSTMENTS,
    Adjustment,
    Dashboard,
    Narrative,
    NarrativeTable,
    ScoreResult,
    default_table,
    load_narrative_table,
    score,
)
from .flow import BiorhythmFlow

__all__ = [
    'validate_birth_date',
    'ADJUSTMENTS',
    'Adjustment',
    'Dashboard',
    'Narrative',
    'NarrativeTable',
    'ScoreResult',
    'default_table',
    'load_narrative_table',
    'score',
    'BiorhythmFlow',
]
