"""Tests for the batch runner."""

import json

import pytest
import yaml

from conftest import CONFIG_PATH, RESPONSES_PATH
from workvalues.run import load_responses, main, run_pipeline


def test_run_pipeline_writes_outputs(tmp_path):
    result = run_pipeline(str(CONFIG_PATH), str(RESPONSES_PATH), output_dir=str(tmp_path))

    assert result["success"]
    run_dir = tmp_path / result["assessment_id"]
    for name in ["need_scores.json", "value_scores.json", "matches.json", "metadata.json"]:
        assert (run_dir / name).exists()

    need_scores = json.loads((run_dir / "need_scores.json").read_text())
    assert len(need_scores) == 21
    assert all(0 <= s["std_score_0_100"] <= 100 for s in need_scores)

    matches = json.loads((run_dir / "matches.json").read_text())
    assert len(matches) == 16

    metadata = json.loads((run_dir / "metadata.json").read_text())
    assert metadata["instrument_version"] == "wip-1.0"
    assert metadata["catalog_version"] == "sample-2024.1"
    assert metadata["assessment"]["status"] == "completed"
    assert metadata["assessment"]["subject_id"] == "sample-subject"


def test_run_pipeline_job_zone_filter(tmp_path):
    result = run_pipeline(str(CONFIG_PATH), str(RESPONSES_PATH), output_dir=str(tmp_path), job_zone=4)
    matches = json.loads((tmp_path / result["assessment_id"] / "matches.json").read_text())
    assert matches
    assert {m["job_zone"] for m in matches} == {4}


def test_main_fails_on_incomplete_responses(tmp_path):
    responses = yaml.safe_load(RESPONSES_PATH.read_text())
    del responses["rounds"][21]
    path = tmp_path / "partial.yaml"
    path.write_text(yaml.safe_dump(responses))

    code = main(["--config", str(CONFIG_PATH), "--responses", str(path), "--output-dir", str(tmp_path)])
    assert code == 1


def test_load_responses_requires_rounds(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("subject_id: x\n")
    with pytest.raises(ValueError, match="rounds"):
        load_responses(str(path))
