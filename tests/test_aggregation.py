"""Tests for need and value aggregation."""

import pytest

from conftest import SCENARIO_RANKINGS, SCENARIO_STD, small_instrument_mapping
from workvalues.data_loading import instrument_from_dict
from workvalues.exceptions import IncompleteAssessmentError
from workvalues.scoring import aggregate_needs, aggregate_values, normalize_ranking, scale_to_0_100


def _points(instrument, rankings):
    return {
        index: normalize_ranking(instrument.get_round(index), ranking)
        for index, ranking in rankings.items()
    }


def test_need_ranked_first_third_fifth_scores_fifty(small_instrument):
    scores = aggregate_needs("a1", small_instrument, _points(small_instrument, SCENARIO_RANKINGS))
    n3 = next(s for s in scores if s.need_code == "n3")

    assert n3.appearances == 3
    assert n3.raw_score == 0
    assert n3.min_possible == -12
    assert n3.max_possible == 12
    assert n3.std_score_0_100 == 50.0


def test_need_scores_match_expected(small_instrument):
    scores = aggregate_needs("a1", small_instrument, _points(small_instrument, SCENARIO_RANKINGS))

    assert [s.need_code for s in scores] == small_instrument.need_codes
    for score in scores:
        assert score.assessment_id == "a1"
        assert score.std_score_0_100 == pytest.approx(SCENARIO_STD[score.need_code])
        assert score.min_possible == -4 * score.appearances
        assert score.max_possible == 4 * score.appearances
    assert sum(s.raw_score for s in scores) == 0


def test_missing_round_raises(small_instrument):
    points = _points(small_instrument, SCENARIO_RANKINGS)
    del points[2]
    with pytest.raises(IncompleteAssessmentError, match=r"\[2\]"):
        aggregate_needs("a1", small_instrument, points)


def test_aggregation_is_idempotent(small_instrument):
    points = _points(small_instrument, SCENARIO_RANKINGS)
    assert aggregate_needs("a1", small_instrument, points) == aggregate_needs("a1", small_instrument, points)


@pytest.mark.parametrize("appearances", [1, 3, 5])
def test_std_score_bounded_and_monotonic(appearances):
    low, high = -4 * appearances, 4 * appearances
    previous = -1.0
    for raw in range(low, high + 1, 2):
        score = scale_to_0_100(raw, low, high)
        assert 0.0 <= score <= 100.0
        assert score >= previous
        previous = score
    assert scale_to_0_100(low, low, high) == 0.0
    assert scale_to_0_100(high, low, high) == 100.0


def test_std_score_clamps_and_handles_zero_span():
    assert scale_to_0_100(20, -8, 8) == 100.0
    assert scale_to_0_100(-20, -8, 8) == 0.0
    assert scale_to_0_100(0, 0, 0) == 50.0


def test_value_scores_use_member_bounds(small_instrument):
    need_scores = aggregate_needs("a1", small_instrument, _points(small_instrument, SCENARIO_RANKINGS))
    values = aggregate_values("a1", small_instrument, need_scores)

    assert [v.value_code for v in values] == ["v1", "v2"]
    v1, v2 = values

    # v1 = n1 (2 rounds) + n2 (2 rounds) + n3 (3 rounds): bounds +/-28
    assert small_instrument.value_bounds("v1") == (-28, 28)
    assert v1.need_count == 3
    assert v1.raw_sum == 10
    assert v1.raw_mean == pytest.approx(10 / 3)
    assert v1.std_score_0_100 == pytest.approx(100 * 38 / 56)

    # v2 = n4 (3 rounds) + n5 (3 rounds) + n6 (2 rounds): bounds +/-32
    assert small_instrument.value_bounds("v2") == (-32, 32)
    assert v2.raw_sum == -10
    assert v2.std_score_0_100 == pytest.approx(100 * 22 / 64)


def test_value_aggregation_requires_every_member(small_instrument):
    need_scores = aggregate_needs("a1", small_instrument, _points(small_instrument, SCENARIO_RANKINGS))
    with pytest.raises(IncompleteAssessmentError):
        aggregate_values("a1", small_instrument, [s for s in need_scores if s.need_code != "n5"])


def test_unpresented_need_scores_fifty():
    mapping = small_instrument_mapping()
    mapping["needs"].append({"code": "n7", "value": "v2"})
    instrument = instrument_from_dict(mapping)

    scores = {s.need_code: s for s in aggregate_needs("a1", instrument, _points(instrument, SCENARIO_RANKINGS))}
    n7 = scores["n7"]
    assert n7.appearances == 0
    assert n7.raw_score == 0
    assert (n7.min_possible, n7.max_possible) == (0, 0)
    assert n7.std_score_0_100 == 50.0

    # n7 adds nothing to v2's bounds, only to its member count
    v2 = aggregate_values("a1", instrument, list(scores.values()))[1]
    assert v2.need_count == 4
    assert v2.std_score_0_100 == pytest.approx(100 * 22 / 64)
