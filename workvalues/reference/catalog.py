"""
Occupation reference catalog.

The catalog is read-only, versioned reference data keyed by occupation code.
Reference scores are stored as a dense (occupations x needs) matrix so that
the matcher can correlate a subject against every occupation at once.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

JOB_ZONES = (1, 2, 3, 4, 5)


@dataclass(frozen=True)
class OccupationProfile:
    """
    Reference profile for a single occupation.

    Attributes:
        code: Occupation code (e.g. O*NET-SOC code)
        title: Occupation title
        job_zone: Preparation tier, 1-5
        need_scores: Reference std scores (0-100) per need code
    """
    code: str
    title: str
    job_zone: int
    need_scores: Dict[str, float] = field(hash=False)

    def __post_init__(self):
        if self.job_zone not in JOB_ZONES:
            raise ValidationError(
                f"Occupation {self.code} has invalid job zone {self.job_zone}"
            )

    def vector(self, need_codes: Sequence[str]) -> np.ndarray:
        """Reference scores in the given need order."""
        return np.array([self.need_scores[c] for c in need_codes], dtype=float)


class OccupationCatalog:
    """
    Immutable, versioned collection of occupation profiles.

    Attributes:
        version: Catalog version string
        need_codes: Need order of the reference matrix columns
        profiles: Profiles ordered by occupation code
    """

    def __init__(
        self,
        version: str,
        need_codes: Sequence[str],
        profiles: Sequence[OccupationProfile]
    ):
        self.version = version
        self.need_codes: Tuple[str, ...] = tuple(need_codes)
        self.profiles: Tuple[OccupationProfile, ...] = tuple(
            sorted(profiles, key=lambda p: p.code)
        )
        self._by_code = {p.code: p for p in self.profiles}

        if len(self._by_code) != len(self.profiles):
            raise ValidationError(f"Catalog {version} contains duplicate occupation codes")

        for profile in self.profiles:
            missing = set(self.need_codes) - set(profile.need_scores)
            if missing:
                raise ValidationError(
                    f"Occupation {profile.code} is missing reference scores for {sorted(missing)}"
                )

        matrix = np.array(
            [profile.vector(self.need_codes) for profile in self.profiles],
            dtype=float
        ).reshape(len(self.profiles), len(self.need_codes))
        matrix.setflags(write=False)
        self._matrix = matrix

        logger.info(f"Built occupation catalog {version}: "
                    f"{len(self.profiles)} occupations x {len(self.need_codes)} needs")

    def __len__(self) -> int:
        return len(self.profiles)

    def __iter__(self) -> Iterator[OccupationProfile]:
        return iter(self.profiles)

    def __contains__(self, code: str) -> bool:
        return code in self._by_code

    def get(self, code: str) -> Optional[OccupationProfile]:
        return self._by_code.get(code)

    @property
    def is_empty(self) -> bool:
        return len(self.profiles) == 0

    @property
    def matrix(self) -> np.ndarray:
        """Read-only reference matrix, rows aligned with ``profiles``."""
        return self._matrix

    def job_zone_counts(self) -> Dict[int, int]:
        counts = {zone: 0 for zone in JOB_ZONES}
        for profile in self.profiles:
            counts[profile.job_zone] += 1
        return counts

    def codes(self) -> List[str]:
        return [p.code for p in self.profiles]
