"""
Smoke test for reference data loading and end-to-end scoring.

This script validates that:
1. The configuration, instrument and occupation catalog load correctly
2. Catalog columns cover every instrument need
3. A simulated subject can complete every round
4. No runtime errors in the scoring and matching pipeline

Usage:
    python scripts/smoke_test.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import logging
import numpy as np

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def run_smoke_test(seed: int = 42) -> bool:
    """Run smoke tests on reference data and the assessment pipeline."""

    logger.info("=" * 60)
    logger.info("SMOKE TEST: Reference Data and Scoring")
    logger.info("=" * 60)

    from workvalues.configs import load_config, validate_config, resolve_path
    from workvalues.data_loading import load_instrument, load_occupation_catalog
    from workvalues.matching import MatchingConfig
    from workvalues.service import AssessmentService

    config_path = project_root / "configs" / "config.yaml"
    logger.info(f"Loading config from {config_path}")
    config = load_config(str(config_path))
    for issue in validate_config(config):
        logger.warning(f"  Config issue: {issue}")

    # =========================================================================
    # TEST 1: Reference data
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("TEST 1: Instrument and Catalog")
    logger.info("=" * 60)

    try:
        instrument = load_instrument(str(resolve_path(str(config_path), config["instrument"]["path"])))
        appearances = {code: instrument.appearances(code) for code in instrument.need_codes}
        logger.info(f"  Needs: {len(instrument.needs)}, values: {len(instrument.values)}, "
                    f"rounds: {len(instrument.rounds)}")
        logger.info(f"  Appearances per need: {sorted(set(appearances.values()))}")

        catalog = load_occupation_catalog(
            str(resolve_path(str(config_path), config["catalog"]["path"])),
            instrument.need_codes,
            version=config["catalog"].get("version")
        )
        logger.info(f"  Occupations: {len(catalog)}")
        logger.info(f"  Job zones: {catalog.job_zone_counts()}")
    except Exception as e:
        logger.error(f"  REFERENCE DATA TEST FAILED: {e}")
        import traceback
        traceback.print_exc()
        return False

    # =========================================================================
    # TEST 2: Simulated assessment
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("TEST 2: Simulated Assessment")
    logger.info("=" * 60)

    try:
        rng = np.random.RandomState(seed)
        service = AssessmentService(instrument, catalog, MatchingConfig.from_config(config))
        assessment = service.start_assessment(subject_id="smoke-test")

        for rnd in instrument.rounds:
            ranking = [rnd.need_codes[i] for i in rng.permutation(len(rnd.need_codes))]
            assessment = service.submit_round(assessment.id, rnd.index, ranking)

        logger.info(f"  Status: {assessment.status.value}")

        need_scores = service.get_need_scores(assessment.id)
        std = np.array([s.std_score_0_100 for s in need_scores])
        logger.info(f"  Need std scores: min={std.min():.1f}, mean={std.mean():.1f}, max={std.max():.1f}")

        for score in service.get_value_scores(assessment.id):
            logger.info(f"  {score.value_code:<20} {score.std_score_0_100:6.1f}")

        matches = service.get_matches(assessment.id)
        n_min = sum(m.is_minimum_match for m in matches)
        n_strong = sum(m.is_strong_match for m in matches)
        logger.info(f"  Matches: {n_min} minimum, {n_strong} strong of {len(matches)}")
    except Exception as e:
        logger.error(f"  ASSESSMENT TEST FAILED: {e}")
        import traceback
        traceback.print_exc()
        return False

    logger.info("\n" + "=" * 60)
    logger.info("SMOKE TEST PASSED")
    logger.info("=" * 60)
    return True


if __name__ == "__main__":
    sys.exit(0 if run_smoke_test() else 1)
