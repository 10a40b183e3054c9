"""
In-process assessment store.

Models the persistence contracts the pipeline relies on:
- Round responses are append-only with a uniqueness constraint on
  (assessment, round); duplicates are rejected, never overwritten
- completed_at is set exactly once
- Derived output is replaced as a whole, so readers see either the previous
  or the new complete set

Writes are serialized with a lock; reads return immutable snapshots.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from ..exceptions import AssessmentClosedError, AssessmentNotFoundError, ValidationError
from .schema import Assessment, RoundResponse, DerivedScores

logger = logging.getLogger(__name__)


class AssessmentStore:
    """Thread-safe in-memory storage for assessments and their rows."""

    def __init__(self):
        self._lock = threading.Lock()
        self._assessments: Dict[str, Assessment] = {}
        self._responses: Dict[str, Dict[int, RoundResponse]] = {}
        self._derived: Dict[str, DerivedScores] = {}

    def create_assessment(self, assessment: Assessment) -> Assessment:
        with self._lock:
            if assessment.id in self._assessments:
                raise ValidationError(f"Assessment {assessment.id} already exists")
            self._assessments[assessment.id] = assessment
            self._responses[assessment.id] = {}
        return assessment

    def get_assessment(self, assessment_id: str) -> Assessment:
        try:
            return self._assessments[assessment_id]
        except KeyError:
            raise AssessmentNotFoundError(f"Unknown assessment: {assessment_id}") from None

    def list_assessments(self) -> List[Assessment]:
        with self._lock:
            return list(self._assessments.values())

    def add_response(self, response: RoundResponse) -> None:
        """
        Append a round response.

        Raises:
            AssessmentNotFoundError: If the assessment doesn't exist
            AssessmentClosedError: If the assessment is already completed
            ValidationError: If the round was already answered
        """
        with self._lock:
            assessment = self.get_assessment(response.assessment_id)
            if assessment.is_completed:
                raise AssessmentClosedError(f"Assessment {assessment.id} is already completed")

            answered = self._responses[response.assessment_id]
            if response.round_index in answered:
                raise ValidationError(
                    f"Round {response.round_index} of assessment {response.assessment_id} "
                    f"was already submitted"
                )
            answered[response.round_index] = response

    def get_responses(self, assessment_id: str) -> Dict[int, RoundResponse]:
        """Snapshot of submitted responses keyed by round index."""
        with self._lock:
            self.get_assessment(assessment_id)
            return dict(self._responses[assessment_id])

    def complete(self, assessment_id: str, completed_at: datetime) -> Optional[Assessment]:
        """
        Mark an assessment completed.

        Returns:
            The completed Assessment for the caller that performed the
            transition, None if it had already been completed
        """
        with self._lock:
            assessment = self.get_assessment(assessment_id)
            if assessment.is_completed:
                return None
            completed = replace(assessment, completed_at=completed_at)
            self._assessments[assessment_id] = completed
        logger.info(f"Assessment {assessment_id} completed at {completed_at.isoformat()}")
        return completed

    def replace_derived(self, derived: DerivedScores) -> None:
        """Replace all derived rows of an assessment in one step."""
        with self._lock:
            self.get_assessment(derived.assessment_id)
            self._derived[derived.assessment_id] = derived

    def get_derived(self, assessment_id: str) -> Optional[DerivedScores]:
        with self._lock:
            self.get_assessment(assessment_id)
            return self._derived.get(assessment_id)
