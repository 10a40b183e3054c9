"""Scoring module: rank normalization and need/value aggregation."""

from .rank_normalizer import normalize_ranking, validate_ranking
from .need_aggregator import NeedScore, aggregate_needs, scale_to_0_100
from .value_aggregator import ValueScore, aggregate_values

__all__ = [
    "normalize_ranking",
    "validate_ranking",
    "NeedScore",
    "aggregate_needs",
    "scale_to_0_100",
    "ValueScore",
    "aggregate_values"
]
