"""Shared fixtures: a small six-need instrument, a matching catalog and the bundled instrument."""

from pathlib import Path

import pytest

from workvalues.data_loading import instrument_from_dict, load_instrument, load_occupation_catalog
from workvalues.reference import OccupationCatalog, OccupationProfile

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_PATH = PROJECT_ROOT / "configs" / "config.yaml"
INSTRUMENT_PATH = PROJECT_ROOT / "configs" / "instrument_v1.yaml"
CATALOG_PATH = PROJECT_ROOT / "data" / "occupations_sample.csv"
RESPONSES_PATH = PROJECT_ROOT / "data" / "sample_responses.yaml"

SMALL_NEEDS = ["n1", "n2", "n3", "n4", "n5", "n6"]

# n3 is ranked 1st, 3rd and 5th across its three rounds
SCENARIO_RANKINGS = {
    1: ["n3", "n1", "n2", "n4", "n5"],
    2: ["n2", "n4", "n3", "n5", "n6"],
    3: ["n1", "n4", "n5", "n6", "n3"],
}

# Expected std scores for SCENARIO_RANKINGS
SCENARIO_STD = {
    "n1": 87.5,
    "n2": 75.0,
    "n3": 50.0,
    "n4": 100.0 * 14 / 24,
    "n5": 25.0,
    "n6": 12.5,
}


def small_instrument_mapping():
    return {
        "version": "test-1",
        "values": [
            {"code": "v1", "label": "Value One", "order": 1},
            {"code": "v2", "label": "Value Two", "order": 2},
        ],
        "needs": [
            {"code": "n1", "value": "v1"},
            {"code": "n2", "value": "v1"},
            {"code": "n3", "value": "v1"},
            {"code": "n4", "value": "v2"},
            {"code": "n5", "value": "v2"},
            {"code": "n6", "value": "v2"},
        ],
        # Appearances: n1=2, n2=2, n3=3, n4=3, n5=3, n6=2
        "rounds": [
            {"index": 1, "needs": ["n1", "n2", "n3", "n4", "n5"]},
            {"index": 2, "needs": ["n2", "n3", "n4", "n5", "n6"]},
            {"index": 3, "needs": ["n1", "n3", "n4", "n5", "n6"]},
        ],
    }


def make_profile(code, job_zone, scores, title=None):
    return OccupationProfile(
        code=code,
        title=title or f"Occupation {code}",
        job_zone=job_zone,
        need_scores=dict(zip(SMALL_NEEDS, scores)),
    )


@pytest.fixture
def small_instrument():
    return instrument_from_dict(small_instrument_mapping())


@pytest.fixture
def small_catalog():
    profiles = [
        make_profile("A-100", 2, [90, 80, 50, 60, 20, 10]),
        make_profile("B-200", 2, [10, 20, 50, 40, 80, 90]),
        make_profile("C-300", 3, [50, 50, 50, 50, 50, 50]),
        make_profile("D-400", 3, [80, 70, 60, 50, 40, 30]),
    ]
    return OccupationCatalog(version="test-catalog", need_codes=SMALL_NEEDS, profiles=profiles)


@pytest.fixture(scope="session")
def bundled_instrument():
    return load_instrument(str(INSTRUMENT_PATH))


@pytest.fixture(scope="session")
def bundled_catalog(bundled_instrument):
    return load_occupation_catalog(str(CATALOG_PATH), bundled_instrument.need_codes, version="sample")
