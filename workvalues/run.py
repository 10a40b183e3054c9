"""
Batch runner for the work values pipeline.

Scores one file of round responses end to end.

Usage:
    python -m workvalues.run --config configs/config.yaml --responses responses.yaml

The responses file is YAML:

    subject_id: subject-001
    rounds:
      1: [achievement, variety, ability_utilization, moral_values, supervision_human_relations]
      2: [...]

The runner performs the following steps:
1. Load and validate configuration
2. Load the instrument and the occupation catalog
3. Start an assessment and submit every round
4. Write need scores, value scores, matches and metadata as JSON
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def load_responses(filepath: str) -> Dict[str, Any]:
    """
    Load a responses file.

    Returns:
        Dictionary with "subject_id" (may be None) and "rounds" mapping
        round index -> ranked need codes
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Responses file not found: {filepath}")

    with open(filepath, "r") as f:
        data = yaml.safe_load(f) or {}

    if "rounds" not in data or not isinstance(data["rounds"], dict):
        raise ValueError(f"Responses file must contain a 'rounds' mapping: {filepath}")

    return {
        "subject_id": data.get("subject_id"),
        "rounds": {int(index): list(ranking) for index, ranking in data["rounds"].items()}
    }


def _write_json(path: Path, payload: Any) -> None:
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)
    logger.info(f"Wrote {path}")


def run_pipeline(
    config_path: str,
    responses_path: str,
    output_dir: Optional[str] = None,
    job_zone: Optional[int] = None
) -> Dict[str, Any]:
    """
    Score one set of responses.

    Args:
        config_path: Path to the configuration YAML file
        responses_path: Path to the responses YAML file
        output_dir: If provided, write results here instead of the config default
        job_zone: If provided, only write matches from this job zone

    Returns:
        Dictionary with run results and paths to outputs
    """
    # Import modules here to avoid circular imports
    from .configs import load_config, validate_config, get_config_value, resolve_path
    from .data_loading import load_instrument, load_occupation_catalog
    from .exceptions import CatalogUnavailableError
    from .matching import MatchingConfig
    from .service import AssessmentService

    # =========================================================================
    # 1. Load and validate configuration
    # =========================================================================
    logger.info("=" * 60)
    logger.info("WORK VALUES PIPELINE")
    logger.info("=" * 60)

    config = load_config(config_path)
    issues = validate_config(config)
    if issues:
        for issue in issues:
            logger.warning(f"Config issue: {issue}")

    setup_logging(get_config_value(config, "global.log_level", "INFO"))

    # =========================================================================
    # 2. Load reference data
    # =========================================================================
    instrument = load_instrument(str(resolve_path(config_path, config["instrument"]["path"])))

    catalog = None
    try:
        catalog = load_occupation_catalog(
            str(resolve_path(config_path, config["catalog"]["path"])),
            instrument.need_codes,
            version=get_config_value(config, "catalog.version"),
            delimiter=get_config_value(config, "catalog.delimiter", ",")
        )
    except CatalogUnavailableError as e:
        logger.error(f"Occupation catalog unavailable: {e}")
        logger.info("Continuing without occupation matching")

    # =========================================================================
    # 3. Score the responses
    # =========================================================================
    responses = load_responses(responses_path)
    service = AssessmentService(instrument, catalog, MatchingConfig.from_config(config))

    assessment = service.start_assessment(subject_id=responses["subject_id"])
    for index in sorted(responses["rounds"]):
        assessment = service.submit_round(assessment.id, index, responses["rounds"][index])

    need_scores = service.get_need_scores(assessment.id)
    value_scores = service.get_value_scores(assessment.id)
    matches = service.get_matches(assessment.id, job_zone=job_zone)

    logger.info("\nValue scores:")
    for score in value_scores:
        logger.info(f"  {score.value_code:<20} {score.std_score_0_100:6.1f}")

    top = [m for m in matches if m.rank_within_job_zone == 1]
    if top:
        logger.info("\nTop match per job zone:")
        for match in top:
            logger.info(f"  Zone {match.job_zone}: {match.title} (r={match.correlation:.3f})")

    # =========================================================================
    # 4. Save outputs
    # =========================================================================
    effective_output_dir = Path(output_dir or get_config_value(config, "global.output_dir", "artifacts"))
    run_dir = effective_output_dir / assessment.id
    run_dir.mkdir(parents=True, exist_ok=True)

    _write_json(run_dir / "need_scores.json", [s.to_dict() for s in need_scores])
    _write_json(run_dir / "value_scores.json", [s.to_dict() for s in value_scores])
    _write_json(run_dir / "matches.json", [m.to_dict() for m in matches])

    metadata = {
        "pipeline_version": _package_version(),
        "run_timestamp": datetime.now().isoformat(),
        "config_path": config_path,
        "responses_path": responses_path,
        "assessment": assessment.to_dict(),
        "instrument_version": instrument.version,
        "catalog_version": catalog.version if catalog is not None else None,
        "matching": service.matcher.config.to_dict(),
        "job_zone_filter": job_zone,
        "n_matches": sum(m.is_minimum_match for m in matches),
        "n_strong_matches": sum(m.is_strong_match for m in matches)
    }
    _write_json(run_dir / "metadata.json", metadata)

    logger.info("\n" + "=" * 60)
    logger.info("PIPELINE COMPLETE")
    logger.info("=" * 60)

    return {
        "success": True,
        "output_dir": str(run_dir),
        "assessment_id": assessment.id,
        "metadata": metadata
    }


def _package_version() -> str:
    from . import __version__
    return __version__


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the pipeline."""
    parser = argparse.ArgumentParser(
        description="Score work value rankings and match them to occupations"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--responses",
        type=str,
        required=True,
        help="Path to the responses YAML file"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory for results (overrides config)"
    )
    parser.add_argument(
        "--job-zone",
        type=int,
        default=None,
        choices=[1, 2, 3, 4, 5],
        help="Only report matches from this job zone"
    )

    args = parser.parse_args(argv)

    try:
        result = run_pipeline(
            args.config,
            args.responses,
            output_dir=args.output_dir,
            job_zone=args.job_zone
        )
        if result["success"]:
            logger.info("\nPipeline completed successfully!")
            return 0
        else:
            logger.error("\nPipeline failed!")
            return 1
    except Exception as e:
        logger.exception(f"Pipeline failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
