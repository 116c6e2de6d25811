"""Tests for data models."""

import csv
import io
import json
from datetime import datetime

import pytest
from pydantic import ValidationError

from evallab.models import (
    ComparisonReport,
    ComparisonResult,
    Evaluation,
    EvaluationFilter,
    JudgeScore,
    Model,
    Status,
)


def make_evaluation(**overrides):
    data = {
        "id": "eval-x",
        "project_id": "proj-1",
        "name": "Example",
        "model": "gpt-4",
        "created_at": "2024-02-10T10:00:00Z",
    }
    data.update(overrides)
    return Evaluation.model_validate(data)


class TestEvaluation:
    """Tests for the evaluation record."""

    def test_defaults_before_first_run(self):
        evaluation = make_evaluation()

        assert evaluation.status == Status.PENDING
        assert evaluation.output is None
        assert evaluation.duration_ms is None

    def test_passed_tests_cannot_exceed_total(self):
        with pytest.raises(ValidationError):
            make_evaluation(total_tests=3, passed_tests=4)

    def test_passed_tests_equal_to_total_is_valid(self):
        evaluation = make_evaluation(total_tests=3, passed_tests=3)
        assert evaluation.passed_tests == 3

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            make_evaluation(duration_ms=-1)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            make_evaluation(status="queued")

    def test_iso_timestamp_parsed(self):
        evaluation = make_evaluation()
        assert isinstance(evaluation.created_at, datetime)
        assert evaluation.created_at.year == 2024


class TestEvaluationFilter:
    """Tests for evaluation filters."""

    def test_empty_filter_matches_everything(self):
        assert EvaluationFilter().matches(make_evaluation())
        assert EvaluationFilter(project_id="", status="", model="").matches(make_evaluation())

    def test_all_fields_must_match(self):
        evaluation = make_evaluation(status="passed")

        assert EvaluationFilter(project_id="proj-1", status="passed", model="gpt-4").matches(evaluation)
        assert not EvaluationFilter(project_id="proj-1", status="failed").matches(evaluation)
        assert not EvaluationFilter(model="claude-3").matches(evaluation)

    def test_query_params_skip_empty_fields(self):
        filters = EvaluationFilter(project_id="proj-1", status="", model=None)
        assert filters.to_query_params() == {"project_id": "proj-1"}


class TestJudgeScore:
    """Tests for judge score parsing."""

    def test_flat_form_folds_metrics(self):
        score = JudgeScore.model_validate(
            {"overall": 8.5, "accuracy": 9.0, "helpfulness": 8.0, "feedback": "Nice."}
        )

        assert score.overall == 8.5
        assert score.metrics == {"accuracy": 9.0, "helpfulness": 8.0}
        assert score.feedback == "Nice."

    def test_feedback_is_optional(self):
        score = JudgeScore.model_validate({"overall": 3.2, "accuracy": 4.0})
        assert score.feedback is None

    def test_to_flat_round_trips_wire_form(self):
        flat = {"overall": 7.0, "tone": 6.5, "feedback": "ok"}
        assert JudgeScore.model_validate(flat).to_flat() == flat

    def test_out_of_range_metric_rejected(self):
        with pytest.raises(ValidationError):
            JudgeScore.model_validate({"overall": 8.0, "accuracy": 11.0})

    def test_overall_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            JudgeScore(overall=10.5)


class TestModel:
    """Tests for model pricing helpers."""

    def test_estimate_cost(self):
        model = Model(id="gpt-4", name="GPT-4", provider="OpenAI", cost_per_1k_tokens=0.03)

        # 100 evaluations x 500 tokens = 50k tokens
        assert model.estimate_cost(100, 500) == pytest.approx(1.5)

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError):
            Model(id="m", name="M", provider="P", cost_per_1k_tokens=-0.1)


class TestComparisonReport:
    """Tests for comparison export."""

    @pytest.fixture
    def report(self):
        results = [
            ComparisonResult(
                model_id=model_id, model_name=name, output=f"{name} output",
                overall_score=score, accuracy=8.0, helpfulness=8.5,
                latency_ms=1200, cost=0.02, pass_rate=90,
            )
            for model_id, name, score in [("a", "Model A", 7.5), ("b", "Model B", 9.2)]
        ]
        return ComparisonReport(
            prompt="p", user_input="u", results=results, winner=results[1]
        )

    def test_csv_export_marks_winner(self, report):
        rows = list(csv.DictReader(io.StringIO(report.to_csv())))

        assert [r["model_id"] for r in rows] == ["a", "b"]
        assert rows[0]["winner"] == "False"
        assert rows[1]["winner"] == "True"
        assert "output" not in rows[0]

    def test_json_export_includes_outputs(self, report):
        payload = json.loads(report.to_json())

        assert payload["winner_id"] == "b"
        assert payload["results"][0]["output"] == "Model A output"

    def test_pass_rate_bounds(self):
        with pytest.raises(ValidationError):
            ComparisonResult(
                model_id="a", model_name="A", output="", overall_score=5,
                accuracy=5, helpfulness=5, latency_ms=0, cost=0, pass_rate=101,
            )
