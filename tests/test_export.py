# tests/test_export.py

import csv
import json

import pytest

from eq_blindtest.abtest.export import (
    CSV_HEADER,
    export_results_csv,
    export_results_json,
    results_to_dict,
    save_results,
)
from eq_blindtest.abtest.models import Answer, SessionResults, Statistics
from eq_blindtest.abtest.models import TestMode as Mode


@pytest.fixture
def abx_results():
    answers = (
        Answer(trial_index=1, hidden_mapping=True, user_choice="A", response_time_ms=1500,
               trim_db_at_answer_time=0.0),
        Answer(trial_index=2, hidden_mapping=False, user_choice="B", response_time_ms=920,
               trim_db_at_answer_time=-1.5, x_is_a=True, correct=False),
    )
    statistics = Statistics(
        preference_count_a=0, preference_count_b=0, correct_count=1, incorrect_count=1,
        p_value=1.0, verdict="Not significant (p >= 0.05)",
        test_name="exact binomial (two-sided)", proportion=0.5,
        confidence_interval=(0.09, 0.91),
    )
    return SessionResults(
        mode=Mode.ABX, preset_a="Flat, reference", preset_b="Harman",
        trim_db=-1.5, auto_trim_db=-1.2, total_trials=2,
        answers=answers, statistics=statistics, seed=12345,
    )


class TestCsv:
    def test_header_and_rows(self, abx_results):
        lines = export_results_csv(abx_results).splitlines()
        assert lines[0] == ",".join(CSV_HEADER)
        assert lines[1] == "1,true,,A,,1500,0"
        assert lines[2] == "2,false,true,B,false,920,-1.5"
        assert len(lines) == 3

    def test_fields_with_commas_are_quoted(self, abx_results):
        answer = Answer(0, True, "A, B", 10, 0.0)
        results = SessionResults(
            abx_results.mode, "a", "b", 0.0, 0.0, 1, (answer,), abx_results.statistics)
        text = export_results_csv(results)
        assert '"A, B"' in text
        rows = list(csv.reader(text.splitlines()))
        assert rows[1][3] == "A, B"


class TestJson:
    def test_contains_mode_and_answers(self, abx_results):
        text = export_results_json(abx_results)
        assert '"mode": "abx"' in text
        data = json.loads(text)
        assert data["preset_a"] == "Flat, reference"
        assert data["seed"] == "12345"
        assert len(data["answers"]) == 2
        assert data["answers"][1]["correct"] is False
        assert data["statistics"]["confidence_interval"] == [0.09, 0.91]

    def test_dict_without_seed(self, abx_results):
        results = SessionResults(
            abx_results.mode, "a", "b", 0.0, 0.0, 2, abx_results.answers,
            abx_results.statistics)
        assert results_to_dict(results)["seed"] is None


def test_save_results_writes_both_files(abx_results, tmp_path):
    json_path, csv_path = save_results(abx_results, tmp_path / "out", stem="run1")
    assert json_path.name == "run1.json"
    assert csv_path.name == "run1.csv"
    assert json.loads(json_path.read_text(encoding="utf-8"))["mode"] == "abx"
    assert csv_path.read_text(encoding="utf-8") == export_results_csv(abx_results)


def test_save_results_default_stem(abx_results, tmp_path):
    json_path, csv_path = save_results(abx_results, tmp_path)
    assert json_path.name.startswith("ab_test_")
    assert json_path.stem == csv_path.stem
