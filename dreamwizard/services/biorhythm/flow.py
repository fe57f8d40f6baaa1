"""Biorhythm analysis flow."""

from datetime import datetime
from typing import Any, Callable, Dict, Optional

from dreamwizard.engine.controller import FlowController
from dreamwizard.engine.gateways import PersistenceGateway
from dreamwizard.engine.loader import SpecLoader
from dreamwizard.engine.scheduler import Scheduler
from dreamwizard.engine.schema import FlowSpec

from .scoring import NarrativeTable, ScoreResult, score
from .validators import validate_birth_date

FLOW_NAME = 'biorhythm'
BIRTH_DATE_STEP = 'birth_date'


class BiorhythmFlow(FlowController):
    """
    Birth date and sleep quiz, a loading pause, then a ScoreResult.

    The birth date is written to persistence as soon as it is entered;
    the quiz answers are not persisted.
    """

    def __init__(self, persistence: PersistenceGateway,
                 scheduler: Optional[Scheduler] = None,
                 spec: Optional[FlowSpec] = None,
                 table: Optional[NarrativeTable] = None,
                 submission_delay: Optional[float] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 validators: Optional[Dict[str, Callable]] = None):
        registered = {'biorhythm.validate_birth_date': validate_birth_date}
        registered.update(validators or {})
        self.table = table
        super().__init__(
            spec or SpecLoader().load_flow(FLOW_NAME),
            persistence,
            scheduler=scheduler,
            validators=registered,
            submission_delay=submission_delay,
            clock=clock,
        )

    def compute_outcome(self, answers: Dict[str, Any], now: datetime) -> ScoreResult:
        return score(answers[BIRTH_DATE_STEP], now, answers, table=self.table)
