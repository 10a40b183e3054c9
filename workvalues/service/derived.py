"""
Derived score computation.

Runs Need Aggregator -> Value Aggregator -> Occupation Matcher -> Job-Zone
Ranker for one assessment. The computation is a pure function of the
submitted responses, the instrument and the catalog, so it can be re-run any
number of times and always produces the same DerivedScores.

A missing or empty catalog fails only the matching step: need and value
scores are still produced, with an empty match list.
"""

import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

from ..exceptions import CatalogUnavailableError
from ..matching import OccupationMatcher, rank_within_job_zones
from ..reference import Instrument, OccupationCatalog
from ..scoring import normalize_ranking, aggregate_needs, aggregate_values
from .schema import RoundResponse, DerivedScores

logger = logging.getLogger(__name__)


def compute_derived_scores(
    assessment_id: str,
    instrument: Instrument,
    responses: Mapping[int, RoundResponse],
    catalog: Optional[OccupationCatalog],
    matcher: OccupationMatcher
) -> DerivedScores:
    """
    Compute need scores, value scores and ranked matches.

    Args:
        assessment_id: Assessment to score
        instrument: Instrument the assessment was taken on
        responses: Round index -> RoundResponse, one per configured round
        catalog: Occupation catalog (None if unavailable)
        matcher: Configured OccupationMatcher

    Returns:
        DerivedScores for the assessment

    Raises:
        IncompleteAssessmentError: If any configured round is unanswered
    """
    round_points = {
        index: normalize_ranking(instrument.get_round(index), response.ranking)
        for index, response in responses.items()
    }

    need_scores = aggregate_needs(assessment_id, instrument, round_points)
    value_scores = aggregate_values(assessment_id, instrument, need_scores)

    catalog_available = True
    try:
        matches = rank_within_job_zones(matcher.match(assessment_id, need_scores, catalog))
    except CatalogUnavailableError as e:
        logger.warning(f"Assessment {assessment_id}: matching skipped ({e})")
        matches = []
        catalog_available = False

    return DerivedScores(
        assessment_id=assessment_id,
        need_scores=tuple(need_scores),
        value_scores=tuple(value_scores),
        matches=tuple(matches),
        instrument_version=instrument.version,
        catalog_version=catalog.version if catalog is not None else None,
        computed_at=datetime.now(timezone.utc),
        catalog_available=catalog_available
    )
