"""
Records for assessments, submitted rounds and derived output.

Assessments and round responses are immutable records; a state change
(completion) produces a new Assessment that replaces the stored one.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, Tuple

from ..scoring import NeedScore, ValueScore
from ..matching import MatchResult


class AssessmentStatus(Enum):
    """Assessment lifecycle states."""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Assessment:
    """
    One taking of the instrument.

    Attributes:
        id: Assessment identifier
        instrument_version: Version of the instrument being answered
        started_at: Creation time
        subject_id: Optional reference to the subject
        completed_at: Set once, on the final round submission
    """
    id: str
    instrument_version: str
    started_at: datetime
    subject_id: Optional[str] = None
    completed_at: Optional[datetime] = None

    @property
    def status(self) -> AssessmentStatus:
        if self.completed_at is None:
            return AssessmentStatus.IN_PROGRESS
        return AssessmentStatus.COMPLETED

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with ISO timestamps."""
        return {
            "id": self.id,
            "subject_id": self.subject_id,
            "instrument_version": self.instrument_version,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None
        }


@dataclass(frozen=True)
class RoundResponse:
    """
    One submitted ranking.

    Attributes:
        assessment_id: Assessment the response belongs to
        round_index: Index of the answered round
        ranking: Need codes from most to least important
        submitted_at: Submission time
    """
    assessment_id: str
    round_index: int
    ranking: Tuple[str, ...]
    submitted_at: datetime


@dataclass(frozen=True)
class DerivedScores:
    """
    Complete derived output of one pipeline run for one assessment.

    Committed and replaced as a unit.
    """
    assessment_id: str
    need_scores: Tuple[NeedScore, ...]
    value_scores: Tuple[ValueScore, ...]
    matches: Tuple[MatchResult, ...]
    instrument_version: str
    catalog_version: Optional[str]
    computed_at: datetime
    catalog_available: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "assessment_id": self.assessment_id,
            "instrument_version": self.instrument_version,
            "catalog_version": self.catalog_version,
            "catalog_available": self.catalog_available,
            "computed_at": self.computed_at.isoformat(),
            "need_scores": [s.to_dict() for s in self.need_scores],
            "value_scores": [s.to_dict() for s in self.value_scores],
            "matches": [m.to_dict() for m in self.matches]
        }
