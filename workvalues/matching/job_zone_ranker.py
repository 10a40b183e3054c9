"""
Ranking of match results within job zones.

Matches are partitioned by job zone. Within a zone they are ordered by
correlation (descending) and then occupation code (ascending), and only the
entries that reach the minimum-match threshold receive a dense rank 1..N.
Correlations are never recomputed here.
"""

import logging
from dataclasses import replace
from itertools import groupby
from typing import List, Optional, Sequence

from .occupation_matcher import MatchResult

logger = logging.getLogger(__name__)


def _zone_order(match: MatchResult):
    return (-match.correlation, match.occupation_code)


def sort_key(match: MatchResult):
    """(job_zone, rank with unranked last, -correlation, occupation_code)."""
    rank = match.rank_within_job_zone
    return (
        match.job_zone,
        rank is None,
        rank if rank is not None else 0,
        -match.correlation,
        match.occupation_code
    )


def rank_within_job_zones(matches: Sequence[MatchResult]) -> List[MatchResult]:
    """
    Assign rank_within_job_zone to every match result.

    Args:
        matches: Unranked output of OccupationMatcher.match()

    Returns:
        New MatchResult list sorted by (job_zone, rank_within_job_zone);
        non-matches have rank None and follow the ranked entries of their zone
    """
    ranked = []
    by_zone = sorted(matches, key=lambda m: m.job_zone)
    for zone, zone_matches in groupby(by_zone, key=lambda m: m.job_zone):
        rank = 0
        for match in sorted(zone_matches, key=_zone_order):
            if match.is_minimum_match:
                rank += 1
                ranked.append(replace(match, rank_within_job_zone=rank))
            else:
                ranked.append(replace(match, rank_within_job_zone=None))
        logger.debug(f"Job zone {zone}: {rank} ranked matches")

    return sorted(ranked, key=sort_key)


def filter_job_zone(matches: Sequence[MatchResult], job_zone: Optional[int] = None) -> List[MatchResult]:
    """Restrict ranked matches to one job zone (all zones if None)."""
    if job_zone is None:
        return list(matches)
    return [m for m in matches if m.job_zone == job_zone]
