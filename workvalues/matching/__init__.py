"""Matching module: occupation correlation and job-zone ranking."""

from .occupation_matcher import MatchResult, MatchingConfig, OccupationMatcher, batch_pearson
from .job_zone_ranker import rank_within_job_zones, filter_job_zone

__all__ = [
    "MatchResult",
    "MatchingConfig",
    "OccupationMatcher",
    "batch_pearson",
    "rank_within_job_zones",
    "filter_job_zone"
]
