"""Evaluation records, artifacts and view-models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Status(str, Enum):
    """Evaluation lifecycle status."""

    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


class TestStatus(str, Enum):
    """Outcome of a single test case."""

    __test__ = False  # not a pytest test class

    PASSED = "passed"
    FAILED = "failed"


class EvaluationMetadata(BaseModel):
    """Generation settings recorded with an evaluation."""

    temperature: float | None = None
    max_tokens: int | None = None
    dataset: str | None = None


class Evaluation(BaseModel):
    """One scored run of a prompt/input pair against a specific model."""

    id: str
    project_id: str
    name: str
    model: str
    status: Status = Status.PENDING
    prompt: str = ""
    user_input: str = ""

    # Set once a run completes
    output: str | None = None
    duration_ms: int | None = Field(default=None, ge=0)

    created_at: datetime
    total_tests: int | None = Field(default=None, ge=0)
    passed_tests: int | None = Field(default=None, ge=0)
    metadata: EvaluationMetadata | None = None

    @model_validator(mode="after")
    def _check_test_counts(self) -> "Evaluation":
        if (
            self.total_tests is not None
            and self.passed_tests is not None
            and self.passed_tests > self.total_tests
        ):
            raise ValueError("passed_tests cannot exceed total_tests")
        return self


class TestResult(BaseModel):
    """Result of one test case attached to an evaluation."""

    __test__ = False  # not a pytest test class

    test_name: str
    status: TestStatus
    message: str = ""
    execution_time_ms: int = Field(default=0, ge=0)


class JudgeScore(BaseModel):
    """LLM-assigned quality ratings (0-10) for an evaluation's output.

    The wire format is flat, e.g. ``{"overall": 8.5, "accuracy": 9.0,
    "feedback": "..."}``. Every numeric key other than ``overall`` is folded
    into ``metrics``.
    """

    overall: float = Field(ge=0.0, le=10.0)
    metrics: dict[str, float] = Field(default_factory=dict)
    feedback: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _fold_flat_metrics(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "metrics" in data:
            return data
        folded: dict[str, Any] = {
            "overall": data.get("overall"),
            "feedback": data.get("feedback"),
            "metrics": {},
        }
        for key, value in data.items():
            if key in ("overall", "feedback"):
                continue
            folded["metrics"][key] = value
        return folded

    @model_validator(mode="after")
    def _check_metric_range(self) -> "JudgeScore":
        for name, value in self.metrics.items():
            if not 0.0 <= value <= 10.0:
                raise ValueError(f"Judge metric {name} out of range: {value}")
        return self

    def to_flat(self) -> dict[str, Any]:
        """Serialize back into the flat wire format."""
        flat: dict[str, Any] = {"overall": self.overall, **self.metrics}
        if self.feedback is not None:
            flat["feedback"] = self.feedback
        return flat


class RunResult(BaseModel):
    """What the backend returns after executing an evaluation."""

    output: str
    status: Status
    duration_ms: int = Field(ge=0)


class EvaluationFilter(BaseModel):
    """Transient query parameters. Empty string or None means no constraint."""

    project_id: str | None = None
    status: str | None = None
    model: str | None = None

    def matches(self, evaluation: Evaluation) -> bool:
        """Check whether every non-empty field equals the evaluation's field."""
        if self.project_id and evaluation.project_id != self.project_id:
            return False
        if self.status and evaluation.status.value != self.status:
            return False
        if self.model and evaluation.model != self.model:
            return False
        return True

    def to_query_params(self) -> dict[str, str]:
        """Non-empty fields as HTTP query parameters."""
        return {
            key: value
            for key, value in self.model_dump().items()
            if value
        }


class EvaluationView(BaseModel):
    """Composed view-model for the selected evaluation."""

    model_config = ConfigDict(frozen=True)

    evaluation: Evaluation
    test_results: list[TestResult] = Field(default_factory=list)
    logs: str = ""
    judge_score: JudgeScore | None = None
    project_name: str = "Unknown Project"

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.test_results if r.status == TestStatus.PASSED)
