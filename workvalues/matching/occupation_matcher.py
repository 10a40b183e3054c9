"""
Occupation matching by profile correlation.

The subject's need scores (0-100) are correlated with each occupation's
reference need scores using the Pearson product-moment correlation. The
correlation is classified against two one-tailed significance cutoffs for
the reference population:

    is_minimum_match = r >= 0.291   (p < .10)
    is_strong_match  = r >= 0.368   (p < .05)

Key Design Decisions:
- All occupations are correlated at once with vectorized numpy operations
- A vector with zero variance has no defined correlation; it yields r = 0
  and no match instead of an error, so one flat profile never aborts a run
- Each occupation is independent, so the reference matrix can be split into
  row chunks and processed in parallel with joblib
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed
from scipy import stats

from ..exceptions import CatalogUnavailableError, ValidationError
from ..reference import OccupationCatalog
from ..scoring import NeedScore

logger = logging.getLogger(__name__)

# Sum of squared deviations at or below this is treated as zero variance
VARIANCE_EPS = 1e-12


@dataclass(frozen=True)
class MatchResult:
    """
    Correlation of one assessment against one occupation.

    Attributes:
        assessment_id: Assessment the result belongs to
        occupation_code: Occupation code
        title: Occupation title
        job_zone: Preparation tier of the occupation (1-5)
        correlation: Pearson r in [-1, 1]; 0 when undefined
        p_value: One-tailed p-value of r; 1.0 when undefined
        is_minimum_match: r >= minimum threshold
        is_strong_match: r >= strong threshold
        rank_within_job_zone: Dense rank among matches in the zone, else None
    """
    assessment_id: str
    occupation_code: str
    title: str
    job_zone: int
    correlation: float
    p_value: float
    is_minimum_match: bool
    is_strong_match: bool
    rank_within_job_zone: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class MatchingConfig:
    """
    Configuration for occupation matching.

    Attributes:
        minimum_threshold: Correlation cutoff for a minimum match
        strong_threshold: Correlation cutoff for a strong match
        n_jobs: Number of joblib workers for the correlation step
        chunk_size: Occupations per work unit
        backend: joblib backend ("threading", "loky", ...)
    """
    minimum_threshold: float = 0.291
    strong_threshold: float = 0.368
    n_jobs: int = 1
    chunk_size: int = 500
    backend: str = "threading"

    def validate(self) -> None:
        """Validate configuration values."""
        for name in ["minimum_threshold", "strong_threshold"]:
            value = getattr(self, name)
            if not -1 <= value <= 1:
                raise ValidationError(f"{name} must be in [-1, 1], got {value}")
        if self.strong_threshold < self.minimum_threshold:
            raise ValidationError(
                f"strong_threshold ({self.strong_threshold}) must not be below "
                f"minimum_threshold ({self.minimum_threshold})"
            )
        if self.chunk_size <= 0:
            raise ValidationError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.n_jobs == 0:
            raise ValidationError("n_jobs must not be 0")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MatchingConfig":
        """Create from main config dictionary."""
        matching_config = config.get("matching", {}) or {}

        return cls(
            minimum_threshold=matching_config.get("minimum_threshold", 0.291),
            strong_threshold=matching_config.get("strong_threshold", 0.368),
            n_jobs=matching_config.get("n_jobs", 1),
            chunk_size=matching_config.get("chunk_size", 500),
            backend=matching_config.get("backend", "threading")
        )


def batch_pearson(subject: np.ndarray, reference: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pearson correlation of one vector against every row of a matrix.

    Args:
        subject: Subject vector (n_needs,)
        reference: Reference matrix (n_occupations x n_needs)

    Returns:
        Tuple of (correlations, degenerate_mask). Rows where either side has
        zero variance get correlation 0 and are flagged in the mask.
    """
    subject_dev = subject - subject.mean()
    reference_dev = reference - reference.mean(axis=1, keepdims=True)

    subject_ss = float(np.dot(subject_dev, subject_dev))
    reference_ss = np.einsum("ij,ij->i", reference_dev, reference_dev)

    degenerate = (reference_ss <= VARIANCE_EPS) | (subject_ss <= VARIANCE_EPS)

    numerator = reference_dev @ subject_dev
    denominator = np.sqrt(reference_ss * subject_ss)

    with np.errstate(divide="ignore", invalid="ignore"):
        correlations = np.where(degenerate, 0.0, numerator / denominator)

    return np.clip(correlations, -1.0, 1.0), degenerate


def one_tailed_p_values(correlations: np.ndarray, n: int, degenerate: np.ndarray) -> np.ndarray:
    """
    One-tailed p-values for H1: r > 0, from the t distribution with n - 2 df.

    Undefined cases (degenerate vectors, fewer than 3 needs) get p = 1.
    """
    if n < 3:
        return np.ones_like(correlations)

    df = n - 2
    with np.errstate(divide="ignore", invalid="ignore"):
        t_stat = correlations * np.sqrt(df / (1.0 - correlations ** 2))
    t_stat = np.where(correlations >= 1.0, np.inf, t_stat)
    t_stat = np.where(correlations <= -1.0, -np.inf, t_stat)

    p_values = stats.t.sf(t_stat, df)
    return np.where(degenerate, 1.0, p_values)


class OccupationMatcher:
    """
    Correlates an assessment's need profile with every catalog occupation.

    Attributes:
        config: MatchingConfig with thresholds and parallelism settings
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        """
        Initialize the matcher.

        Args:
            config: MatchingConfig instance (defaults if omitted)
        """
        self.config = config or MatchingConfig()
        self.config.validate()
        logger.info(f"Initialized OccupationMatcher with minimum={self.config.minimum_threshold}, "
                    f"strong={self.config.strong_threshold}, n_jobs={self.config.n_jobs}")

    def subject_vector(self, need_scores: Sequence[NeedScore], need_codes: Sequence[str]) -> np.ndarray:
        """
        Arrange need std scores in the catalog's need order.

        Raises:
            ValidationError: If a catalog need has no score
        """
        by_code = {score.need_code: score.std_score_0_100 for score in need_scores}
        missing = [code for code in need_codes if code not in by_code]
        if missing:
            raise ValidationError(f"Need scores missing for catalog needs: {missing}")
        return np.array([by_code[code] for code in need_codes], dtype=float)

    def correlate(self, subject: np.ndarray, reference: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Correlate the subject with every reference row, chunk by chunk.

        Chunks are dispatched to joblib workers when n_jobs != 1. The chunk
        boundaries do not depend on n_jobs, so serial and parallel runs give
        identical results.

        Args:
            subject: Subject vector (n_needs,)
            reference: Reference matrix (n_occupations x n_needs)

        Returns:
            Tuple of (correlations, degenerate_mask)
        """
        chunk_size = self.config.chunk_size
        chunks = [reference[start:start + chunk_size] for start in range(0, len(reference), chunk_size)]

        if self.config.n_jobs != 1 and len(chunks) > 1:
            logger.debug(f"Correlating {len(chunks)} chunks with n_jobs={self.config.n_jobs}")
            results = Parallel(n_jobs=self.config.n_jobs, backend=self.config.backend)(
                delayed(batch_pearson)(subject, chunk) for chunk in chunks
            )
        else:
            results = [batch_pearson(subject, chunk) for chunk in chunks]

        correlations = np.concatenate([r[0] for r in results])
        degenerate = np.concatenate([r[1] for r in results])
        return correlations, degenerate

    def match(
        self,
        assessment_id: str,
        need_scores: Sequence[NeedScore],
        catalog: Optional[OccupationCatalog]
    ) -> List[MatchResult]:
        """
        Compute match results for every occupation in the catalog.

        Args:
            assessment_id: Assessment the need scores belong to
            need_scores: Output of aggregate_needs()
            catalog: Occupation reference catalog

        Returns:
            Unranked MatchResult list in catalog order

        Raises:
            CatalogUnavailableError: If the catalog is missing, empty or built
                on needs the assessment was not scored on
        """
        if catalog is None or catalog.is_empty:
            raise CatalogUnavailableError("Occupation catalog is missing or empty")

        scored = {score.need_code for score in need_scores}
        unscored = [code for code in catalog.need_codes if code not in scored]
        if unscored:
            raise CatalogUnavailableError(
                f"Catalog {catalog.version} profiles needs the assessment was not scored on: {unscored}"
            )

        subject = self.subject_vector(need_scores, catalog.need_codes)
        correlations, degenerate = self.correlate(subject, catalog.matrix)
        p_values = one_tailed_p_values(correlations, len(catalog.need_codes), degenerate)

        if degenerate.all():
            logger.warning(f"Assessment {assessment_id}: no defined correlations "
                           f"(flat profile), all {len(degenerate)} occupations scored r=0")
        elif degenerate.any():
            logger.warning(f"Assessment {assessment_id}: {int(degenerate.sum())} occupations "
                           f"with flat reference profiles scored r=0")

        cfg = self.config
        results = []
        for profile, r, p in zip(catalog.profiles, correlations, p_values):
            r = float(r)
            results.append(MatchResult(
                assessment_id=assessment_id,
                occupation_code=profile.code,
                title=profile.title,
                job_zone=profile.job_zone,
                correlation=r,
                p_value=float(p),
                is_minimum_match=r >= cfg.minimum_threshold,
                is_strong_match=r >= cfg.strong_threshold
            ))

        n_min = sum(m.is_minimum_match for m in results)
        n_strong = sum(m.is_strong_match for m in results)
        logger.info(f"Assessment {assessment_id}: {n_min} minimum / {n_strong} strong matches "
                    f"out of {len(results)} occupations (catalog {catalog.version})")
        return results
