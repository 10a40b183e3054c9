"""
Need score aggregation.

Accumulates per-round points for every need across all rounds of one
assessment and maps the raw total onto a 0-100 scale.

Formula:
    raw_score   = sum of the need's points over the rounds containing it
    min, max    = -4 * appearances, +4 * appearances
    std_0_100   = clip(100 * (raw_score - min) / (max - min), 0, 100)

The bounds need the complete round set, so aggregation is a batch
operation: it refuses to run while any configured round is unanswered.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Mapping

import numpy as np

from ..exceptions import IncompleteAssessmentError
from ..reference import Instrument

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50.0


@dataclass(frozen=True)
class NeedScore:
    """Derived score for one need of one assessment."""
    assessment_id: str
    need_code: str
    raw_score: int
    appearances: int
    min_possible: int
    max_possible: int
    std_score_0_100: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def scale_to_0_100(raw: float, min_possible: float, max_possible: float) -> float:
    """
    Map a raw score onto [0, 100] given its bounds.

    Returns the neutral midpoint (50) when the bounds coincide, and clamps
    anything outside the bounds.
    """
    span = max_possible - min_possible
    if span == 0:
        return NEUTRAL_SCORE
    return float(np.clip(100.0 * (raw - min_possible) / span, 0.0, 100.0))


def aggregate_needs(
    assessment_id: str,
    instrument: Instrument,
    round_points: Mapping[int, Mapping[str, int]]
) -> List[NeedScore]:
    """
    Aggregate per-round points into need scores.

    Args:
        assessment_id: Assessment the scores belong to
        instrument: Instrument version the assessment was taken on
        round_points: Round index -> (need code -> points) for every round

    Returns:
        List of NeedScore in instrument need order

    Raises:
        IncompleteAssessmentError: If any configured round has no points
    """
    missing = [index for index in instrument.round_indices if index not in round_points]
    if missing:
        raise IncompleteAssessmentError(
            f"Assessment {assessment_id} has no response for rounds {missing}"
        )

    raw_totals = {code: 0 for code in instrument.need_codes}
    for index in instrument.round_indices:
        for code, points in round_points[index].items():
            raw_totals[code] += points

    scores = []
    for code in instrument.need_codes:
        min_possible, max_possible = instrument.need_bounds(code)
        raw = raw_totals[code]
        scores.append(NeedScore(
            assessment_id=assessment_id,
            need_code=code,
            raw_score=raw,
            appearances=instrument.appearances(code),
            min_possible=min_possible,
            max_possible=max_possible,
            std_score_0_100=scale_to_0_100(raw, min_possible, max_possible)
        ))

    logger.info(f"Aggregated {len(scores)} need scores for assessment {assessment_id}")
    return scores
