"""
Rank normalization.

Converts one submitted ranking into per-need points. Rank position 1 is the
most important need in the round.

Points Table:
    rank 1 -> +4, rank 2 -> +2, rank 3 -> 0, rank 4 -> -2, rank 5 -> -4

Every round therefore awards each of {4, 2, 0, -2, -4} exactly once and its
points sum to zero.
"""

import logging
from collections import Counter
from typing import Dict, Sequence

from ..exceptions import ValidationError
from ..reference import Round, RANK_POINTS

logger = logging.getLogger(__name__)


def validate_ranking(rnd: Round, ranking: Sequence[str]) -> None:
    """
    Check that a ranking is a permutation of the round's needs.

    Args:
        rnd: The round being answered
        ranking: Need codes ordered from most to least important

    Raises:
        ValidationError: On length mismatch, duplicates or unknown codes
    """
    if len(ranking) != len(rnd.need_codes):
        raise ValidationError(
            f"Round {rnd.index} expects {len(rnd.need_codes)} ranked needs, got {len(ranking)}"
        )

    duplicates = sorted(code for code, count in Counter(ranking).items() if count > 1)
    if duplicates:
        raise ValidationError(f"Round {rnd.index} ranking contains duplicates: {duplicates}")

    unknown = [code for code in ranking if code not in rnd.need_codes]
    if unknown:
        raise ValidationError(f"Round {rnd.index} ranking contains unknown needs: {unknown}")


def normalize_ranking(rnd: Round, ranking: Sequence[str]) -> Dict[str, int]:
    """
    Convert a ranking into need -> points for that round.

    Args:
        rnd: The round being answered
        ranking: Need codes ordered from most to least important

    Returns:
        Dictionary mapping each need code in the round to its points

    Raises:
        ValidationError: If the ranking is not a permutation of the round
    """
    validate_ranking(rnd, ranking)
    points = {code: RANK_POINTS[position] for position, code in enumerate(ranking, start=1)}
    logger.debug(f"Round {rnd.index} points: {points}")
    return points
