"""
Value score aggregation.

Rolls need scores up into their parent values. The 0-100 scale of a value
uses the sum of its member needs' own bounds rather than a single global
bound, since appearance counts may differ between needs.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Sequence

from ..exceptions import IncompleteAssessmentError
from ..reference import Instrument
from .need_aggregator import NeedScore, scale_to_0_100

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValueScore:
    """Derived score for one value of one assessment."""
    assessment_id: str
    value_code: str
    raw_sum: int
    raw_mean: float
    std_score_0_100: float
    need_count: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def aggregate_values(
    assessment_id: str,
    instrument: Instrument,
    need_scores: Sequence[NeedScore]
) -> List[ValueScore]:
    """
    Aggregate need scores into value scores.

    Args:
        assessment_id: Assessment the scores belong to
        instrument: Instrument providing the need -> value mapping and bounds
        need_scores: Output of aggregate_needs()

    Returns:
        List of ValueScore ordered by value display order

    Raises:
        IncompleteAssessmentError: If a member need has no score
    """
    by_code = {score.need_code: score for score in need_scores}

    results = []
    for value in instrument.values:
        members = instrument.value_members(value.code)
        missing = [code for code in members if code not in by_code]
        if missing:
            raise IncompleteAssessmentError(
                f"Value {value.code} is missing need scores for {missing}"
            )

        raw_sum = sum(by_code[code].raw_score for code in members)
        min_possible, max_possible = instrument.value_bounds(value.code)
        results.append(ValueScore(
            assessment_id=assessment_id,
            value_code=value.code,
            raw_sum=raw_sum,
            raw_mean=raw_sum / len(members),
            std_score_0_100=scale_to_0_100(raw_sum, min_possible, max_possible),
            need_count=len(members)
        ))

    return results
