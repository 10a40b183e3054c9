"""
Assessment service module.

This module provides the state machine and the operations exposed to
collaborators: submitting rounds and reading need scores, value scores and
occupation matches.
"""

from .schema import Assessment, AssessmentStatus, RoundResponse, DerivedScores
from .store import AssessmentStore
from .derived import compute_derived_scores
from .assessment_service import AssessmentService

__all__ = [
    "Assessment",
    "AssessmentStatus",
    "RoundResponse",
    "DerivedScores",
    "AssessmentStore",
    "compute_derived_scores",
    "AssessmentService",
]
