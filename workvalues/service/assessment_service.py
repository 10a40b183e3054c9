"""
Assessment service.

Entry point for collaborators. It owns the assessment state machine:

    in_progress --(last configured round submitted)--> completed

The transition fires exactly once and triggers the derived score
computation, which runs synchronously by default or as a fire-and-forget
task on a supplied executor. Completed is terminal: further submissions are
rejected with AssessmentClosedError.
"""

import logging
import uuid
from concurrent.futures import Executor, Future
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..exceptions import AssessmentClosedError, IncompleteAssessmentError, ValidationError
from ..matching import MatchResult, OccupationMatcher, MatchingConfig, filter_job_zone
from ..reference import Instrument, OccupationCatalog
from ..scoring import NeedScore, ValueScore, validate_ranking
from .derived import compute_derived_scores
from .schema import Assessment, RoundResponse, DerivedScores
from .store import AssessmentStore

logger = logging.getLogger(__name__)


class AssessmentService:
    """
    Runs assessments on one instrument version against an occupation catalog.

    Attributes:
        instrument: Instrument all assessments are taken on
        catalog: Current occupation catalog (may be None)
        matcher: OccupationMatcher used for the matching step
        store: AssessmentStore holding assessments, responses and derived rows
    """

    def __init__(
        self,
        instrument: Instrument,
        catalog: Optional[OccupationCatalog] = None,
        matching_config: Optional[MatchingConfig] = None,
        store: Optional[AssessmentStore] = None,
        executor: Optional[Executor] = None
    ):
        """
        Initialize the service.

        Args:
            instrument: Loaded Instrument
            catalog: Loaded OccupationCatalog; matching yields no results without one
            matching_config: Thresholds and parallelism for matching
            store: Storage backend (a fresh in-memory store if omitted)
            executor: If given, the completion pipeline is submitted here
                instead of running in the submitting call
        """
        self.instrument = instrument
        self.catalog = catalog
        self.matcher = OccupationMatcher(matching_config)
        self.store = store or AssessmentStore()
        self._executor = executor
        logger.info(f"Initialized AssessmentService on instrument {instrument.version}, "
                    f"catalog {catalog.version if catalog is not None else 'unavailable'}")

    def set_catalog(self, catalog: Optional[OccupationCatalog]) -> None:
        """Swap in a refreshed catalog; existing results change only on recompute()."""
        self.catalog = catalog
        logger.info(f"Catalog set to {catalog.version if catalog is not None else 'unavailable'}")

    def start_assessment(self, subject_id: Optional[str] = None) -> Assessment:
        assessment = Assessment(
            id=uuid.uuid4().hex,
            instrument_version=self.instrument.version,
            started_at=datetime.now(timezone.utc),
            subject_id=subject_id
        )
        self.store.create_assessment(assessment)
        logger.info(f"Started assessment {assessment.id} (subject={subject_id})")
        return assessment

    def get_assessment(self, assessment_id: str) -> Assessment:
        return self.store.get_assessment(assessment_id)

    def submit_round(self, assessment_id: str, round_index: int, ranking: Sequence[str]) -> Assessment:
        """
        Record one round's ranking.

        Submitting the last unanswered round completes the assessment and
        computes its derived scores.

        Args:
            assessment_id: Assessment being answered
            round_index: Index of the round
            ranking: Need codes from most to least important

        Returns:
            The assessment after the submission

        Raises:
            AssessmentNotFoundError: Unknown assessment
            AssessmentClosedError: Assessment already completed
            ValidationError: Unknown round, malformed ranking or resubmission
        """
        assessment = self.store.get_assessment(assessment_id)
        if assessment.is_completed:
            raise AssessmentClosedError(f"Assessment {assessment_id} is already completed")
        if assessment.instrument_version != self.instrument.version:
            raise ValidationError(
                f"Assessment {assessment_id} uses instrument {assessment.instrument_version}, "
                f"service runs {self.instrument.version}"
            )

        rnd = self.instrument.get_round(round_index)
        validate_ranking(rnd, ranking)

        self.store.add_response(RoundResponse(
            assessment_id=assessment_id,
            round_index=round_index,
            ranking=tuple(ranking),
            submitted_at=datetime.now(timezone.utc)
        ))
        logger.debug(f"Assessment {assessment_id}: round {round_index} recorded")

        answered = self.store.get_responses(assessment_id)
        if len(answered) < len(self.instrument.rounds):
            return self.store.get_assessment(assessment_id)

        completed = self.store.complete(assessment_id, datetime.now(timezone.utc))
        if completed is None:
            return self.store.get_assessment(assessment_id)

        if self._executor is not None:
            future = self._executor.submit(self.recompute, assessment_id)
            future.add_done_callback(self._log_failure(assessment_id))
        else:
            self.recompute(assessment_id)
        return completed

    def recompute(self, assessment_id: str) -> DerivedScores:
        """
        Force a full re-run of the derived score pipeline.

        The previous derived output is replaced in one step.

        Raises:
            IncompleteAssessmentError: If the assessment is not completed
        """
        assessment = self.store.get_assessment(assessment_id)
        if not assessment.is_completed:
            raise IncompleteAssessmentError(f"Assessment {assessment_id} is not completed")

        derived = compute_derived_scores(
            assessment_id,
            self.instrument,
            self.store.get_responses(assessment_id),
            self.catalog,
            self.matcher
        )
        self.store.replace_derived(derived)
        logger.info(f"Derived scores committed for assessment {assessment_id}")
        return derived

    def get_need_scores(self, assessment_id: str) -> List[NeedScore]:
        return list(self._derived(assessment_id).need_scores)

    def get_value_scores(self, assessment_id: str) -> List[ValueScore]:
        return list(self._derived(assessment_id).value_scores)

    def get_matches(self, assessment_id: str, job_zone: Optional[int] = None) -> List[MatchResult]:
        """
        Ranked matches sorted by (job_zone, rank_within_job_zone).

        Args:
            assessment_id: Completed assessment
            job_zone: Restrict to one job zone if given
        """
        return filter_job_zone(self._derived(assessment_id).matches, job_zone)

    def _derived(self, assessment_id: str) -> DerivedScores:
        """
        Derived output of a completed assessment.

        Computed on demand if the completion task has not committed yet.
        """
        assessment = self.store.get_assessment(assessment_id)
        if not assessment.is_completed:
            answered = len(self.store.get_responses(assessment_id))
            raise IncompleteAssessmentError(
                f"Assessment {assessment_id} has {answered} of "
                f"{len(self.instrument.rounds)} rounds answered"
            )

        derived = self.store.get_derived(assessment_id)
        if derived is None:
            derived = self.recompute(assessment_id)
        return derived

    @staticmethod
    def _log_failure(assessment_id: str):
        def callback(future: Future) -> None:
            error = future.exception()
            if error is not None:
                logger.error(f"Derived score computation failed for assessment {assessment_id}: {error}")
        return callback
