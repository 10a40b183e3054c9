"""
Data loading functions for the work values pipeline.

This module handles loading the instrument definition from YAML and the
occupation reference catalog from CSV. No scoring is done here - that's
handled by the scoring and matching modules.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Sequence

import pandas as pd
import yaml

from ..exceptions import CatalogUnavailableError, ValidationError
from ..reference import Instrument, Need, Value, Round, OccupationProfile, OccupationCatalog

logger = logging.getLogger(__name__)

CATALOG_ID_COLUMNS = ["occupation_code", "title", "job_zone"]


def load_instrument(filepath: str) -> Instrument:
    """
    Load an instrument definition from YAML.

    The instrument file specifies:
    - The instrument version
    - Values (code, label, order)
    - Needs (code, parent value, label)
    - Rounds (index, list of need codes)

    Args:
        filepath: Path to the instrument YAML file

    Returns:
        Immutable Instrument

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the definition is invalid or incomplete
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Instrument file not found: {filepath}")

    logger.info(f"Loading instrument from {filepath}")
    with open(filepath, "r") as f:
        mapping = yaml.safe_load(f)

    instrument = instrument_from_dict(mapping)
    logger.info(f"Loaded instrument {instrument.version}: {len(instrument.needs)} needs, "
                f"{len(instrument.values)} values, {len(instrument.rounds)} rounds")
    return instrument


def instrument_from_dict(mapping: Dict[str, Any]) -> Instrument:
    """
    Build an Instrument from its dictionary form.

    Args:
        mapping: Dictionary with "version", "values", "needs" and "rounds"

    Returns:
        Immutable Instrument

    Raises:
        ValidationError: If required keys are missing or invariants fail
    """
    _validate_instrument_mapping(mapping)

    version = str(mapping["version"])
    values = sorted(
        (Value(code=v["code"], label=v.get("label", v["code"]), order=int(v.get("order", i)))
         for i, v in enumerate(mapping["values"], start=1)),
        key=lambda v: v.order
    )
    needs = [
        Need(code=n["code"], value_code=n["value"], label=n.get("label", ""))
        for n in mapping["needs"]
    ]
    rounds = sorted(
        (Round(index=int(r["index"]), need_codes=tuple(r["needs"]), version=version)
         for r in mapping["rounds"]),
        key=lambda r: r.index
    )

    return Instrument(
        version=version,
        values=tuple(values),
        needs=tuple(needs),
        rounds=tuple(rounds)
    )


def _validate_instrument_mapping(mapping: Any) -> None:
    """
    Validate the raw instrument mapping before building objects.

    Checks:
    - Required keys are present
    - Each need names a parent value
    - Each round has an index and a list of needs

    Args:
        mapping: The loaded mapping dictionary

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(mapping, dict):
        raise ValidationError("Instrument definition must be a mapping")

    for key in ["version", "values", "needs", "rounds"]:
        if key not in mapping:
            raise ValidationError(f"Instrument definition missing '{key}'")
        if key != "version" and not isinstance(mapping[key], list):
            raise ValidationError(f"Instrument '{key}' must be a list")

    for need in mapping["needs"]:
        if "code" not in need or "value" not in need:
            raise ValidationError(f"Need entry must have 'code' and 'value': {need}")

    for rnd in mapping["rounds"]:
        if "index" not in rnd or "needs" not in rnd:
            raise ValidationError(f"Round entry must have 'index' and 'needs': {rnd}")
        if not isinstance(rnd["needs"], list):
            raise ValidationError(f"Round {rnd['index']} needs must be a list")


def load_occupation_catalog(
    filepath: str,
    need_codes: Sequence[str],
    version: Optional[str] = None,
    delimiter: str = ","
) -> OccupationCatalog:
    """
    Load the occupation reference catalog from CSV.

    The catalog file should contain:
    - occupation_code, title, job_zone columns
    - One column per need code holding the reference std score (0-100)
    - Each row represents one occupation

    Args:
        filepath: Path to the catalog CSV file
        need_codes: Need order for the reference matrix (from the instrument)
        version: Catalog version label (defaults to the file stem)
        delimiter: Field delimiter (default: comma)

    Returns:
        OccupationCatalog

    Raises:
        CatalogUnavailableError: If the file doesn't exist or has no rows
        ValidationError: If required columns are missing or values are invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise CatalogUnavailableError(f"Occupation catalog not found: {filepath}")

    logger.info(f"Loading occupation catalog from {filepath} (delimiter: {repr(delimiter)})")
    try:
        df = pd.read_csv(filepath, sep=delimiter, dtype={"occupation_code": str})
    except pd.errors.EmptyDataError:
        raise CatalogUnavailableError(f"Occupation catalog is empty: {filepath}") from None

    if df.empty:
        raise CatalogUnavailableError(f"Occupation catalog is empty: {filepath}")

    return catalog_from_frame(df, need_codes, version or path.stem)


def catalog_from_frame(
    df: pd.DataFrame,
    need_codes: Sequence[str],
    version: str
) -> OccupationCatalog:
    """
    Build an OccupationCatalog from a wide DataFrame.

    Args:
        df: One row per occupation, columns as in load_occupation_catalog()
        need_codes: Need order for the reference matrix
        version: Catalog version label

    Returns:
        OccupationCatalog
    """
    missing = validate_catalog_columns(df, need_codes)
    if missing:
        raise ValidationError(f"Occupation catalog missing columns: {missing}")

    scores = df[list(need_codes)].apply(pd.to_numeric, errors="coerce")
    if scores.isna().any().any():
        bad_rows = df.loc[scores.isna().any(axis=1), "occupation_code"].tolist()
        raise ValidationError(f"Non-numeric or missing reference scores for occupations: {bad_rows}")

    out_of_range = (scores < 0) | (scores > 100)
    if out_of_range.any().any():
        bad_rows = df.loc[out_of_range.any(axis=1), "occupation_code"].tolist()
        raise ValidationError(f"Reference scores outside [0, 100] for occupations: {bad_rows}")

    profiles = []
    for row, row_scores in zip(df.itertuples(index=False), scores.itertuples(index=False)):
        profiles.append(OccupationProfile(
            code=str(row.occupation_code).strip(),
            title=str(row.title).strip(),
            job_zone=int(row.job_zone),
            need_scores=dict(zip(need_codes, (float(s) for s in row_scores)))
        ))

    return OccupationCatalog(version=version, need_codes=need_codes, profiles=profiles)


def validate_catalog_columns(df: pd.DataFrame, need_codes: Sequence[str]) -> List[str]:
    """
    Validate that the identifier and need columns exist in the DataFrame.

    Args:
        df: Catalog DataFrame
        need_codes: Need codes expected as columns

    Returns:
        List of missing column names (empty if all present)
    """
    required_columns = CATALOG_ID_COLUMNS + list(need_codes)
    return [c for c in required_columns if c not in df.columns]
