"""Tests for converting round rankings into points."""

import numpy as np
import pytest

from workvalues.exceptions import ValidationError
from workvalues.reference import Round
from workvalues.scoring import normalize_ranking


@pytest.fixture
def rnd():
    return Round(index=1, need_codes=("a", "b", "c", "d", "e"), version="test-1")


def test_points_follow_rank_table(rnd):
    points = normalize_ranking(rnd, ["c", "a", "e", "b", "d"])
    assert points == {"c": 4, "a": 2, "e": 0, "b": -2, "d": -4}


def test_every_round_awards_each_point_once(bundled_instrument):
    rng = np.random.RandomState(7)
    for rnd in bundled_instrument.rounds:
        ranking = [rnd.need_codes[i] for i in rng.permutation(len(rnd.need_codes))]
        points = normalize_ranking(rnd, ranking)
        assert sorted(points.values()) == [-4, -2, 0, 2, 4]
        assert sum(points.values()) == 0
        assert set(points) == set(rnd.need_codes)


def test_normalization_is_idempotent(rnd):
    ranking = ["e", "d", "c", "b", "a"]
    assert normalize_ranking(rnd, ranking) == normalize_ranking(rnd, ranking)


@pytest.mark.parametrize("ranking", [
    ["a", "b", "c", "d"],
    ["a", "b", "c", "d", "e", "e"],
])
def test_rejects_wrong_length(rnd, ranking):
    with pytest.raises(ValidationError, match="expects 5"):
        normalize_ranking(rnd, ranking)


def test_rejects_duplicates(rnd):
    with pytest.raises(ValidationError, match="duplicates"):
        normalize_ranking(rnd, ["a", "a", "c", "d", "e"])


def test_duplicates_reported_once_each_in_order(rnd):
    with pytest.raises(ValidationError, match=r"duplicates: \['a', 'd'\]"):
        normalize_ranking(rnd, ("d", "a", "d", "a", "a"))


def test_rejects_unknown_codes(rnd):
    with pytest.raises(ValidationError, match="unknown"):
        normalize_ranking(rnd, ["a", "b", "c", "d", "zz"])


def test_validation_error_is_a_value_error(rnd):
    with pytest.raises(ValueError):
        normalize_ranking(rnd, [])


def test_round_rejects_bad_configuration():
    with pytest.raises(ValidationError):
        Round(index=9, need_codes=("a", "b", "c", "d"), version="v")
    with pytest.raises(ValidationError):
        Round(index=9, need_codes=("a", "a", "c", "d", "e"), version="v")
