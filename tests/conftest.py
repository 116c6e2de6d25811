"""Pytest configuration and fixtures."""

import asyncio
import json
import random

import pytest

from evallab.adapters.base import BaseDataSource
from evallab.adapters.fixture_adapter import FixtureDataSource
from evallab.errors import SourceUnavailable
from evallab.models.catalog import Catalog, Model
from evallab.models.comparison import ModelRunResult
from evallab.models.evaluation import (
    Evaluation,
    EvaluationFilter,
    JudgeScore,
    RunResult,
    Status,
    TestResult,
)
from evallab.workbench import Workbench
from evallab.workbench.catalog import CatalogStore
from evallab.workbench.repository import EvaluationRepository


@pytest.fixture
def sample_data():
    """Fixture payload in the mock-data.json layout."""
    return {
        "projects": [
            {"id": "proj-1", "name": "Support Bot", "model": "gpt-4", "created_at": "2024-01-10T09:00:00Z"},
            {"id": "proj-2", "name": "Code Review", "description": "PR reviews", "model": "claude-3", "created_at": "2024-01-18T14:30:00Z"},
        ],
        "models": [
            {"id": "gpt-4", "name": "GPT-4", "provider": "OpenAI", "context_window": 8192, "cost_per_1k_tokens": 0.03},
            {"id": "gpt-3.5", "name": "GPT-3.5", "provider": "OpenAI", "context_window": 16385, "cost_per_1k_tokens": 0.002},
            {"id": "claude-3", "name": "Claude 3", "provider": "Anthropic", "context_window": 200000, "cost_per_1k_tokens": 0.015},
            {"id": "gemini", "name": "Gemini Pro", "provider": "Google", "context_window": 32768, "cost_per_1k_tokens": 0.0005},
            {"id": "llama", "name": "Llama 2", "provider": "Meta", "context_window": 4096, "cost_per_1k_tokens": 0.0007},
            {"id": "mistral", "name": "Mistral", "provider": "Mistral", "context_window": 32000, "cost_per_1k_tokens": 0.0002},
        ],
        "evaluations": [
            {
                "id": "eval-1", "project_id": "proj-1", "name": "Refunds", "model": "gpt-4",
                "status": "passed", "prompt": "Be helpful.", "user_input": "Refund?",
                "output": "Yes, within 30 days.", "duration_ms": 1500,
                "created_at": "2024-02-10T10:00:00Z", "total_tests": 3, "passed_tests": 2,
                "metadata": {"temperature": 0.7, "max_tokens": 500, "dataset": "Support v1"},
            },
            {
                "id": "eval-2", "project_id": "proj-1", "name": "Shipping", "model": "gpt-3.5",
                "status": "failed", "prompt": "Be helpful.", "user_input": "Late order?",
                "created_at": "2024-02-11T08:20:00Z",
            },
            {
                "id": "eval-3", "project_id": "proj-2", "name": "Style", "model": "claude-3",
                "status": "pending", "prompt": "Review code.", "user_input": "def f(): pass",
                "created_at": "2024-02-12T16:45:00Z",
            },
            {
                "id": "eval-4", "project_id": "proj-2", "name": "Security", "model": "gpt-4",
                "status": "pending", "prompt": "Review code.", "user_input": "eval(input())",
                "created_at": "2024-02-13T09:05:00Z",
            },
        ],
        "test_results": {
            "eval-1": [
                {"test_name": "mentions_window", "status": "passed", "message": "ok", "execution_time_ms": 12},
                {"test_name": "polite", "status": "failed", "message": "too curt", "execution_time_ms": 30},
            ],
        },
        "llm_judge_scores": {
            "eval-1": {"overall": 8.5, "accuracy": 9.0, "helpfulness": 8.0, "feedback": "Good answer."},
        },
        "logs": {
            "eval-1": "[10:00:00] Starting evaluation\n[10:00:01] Done",
        },
        "datasets": [
            {"id": "ds-1", "name": "Support v1", "row_count": 500, "created_at": "2024-01-15T10:30:00Z"},
        ],
    }


@pytest.fixture
def fixture_file(tmp_path, sample_data):
    """Write the sample payload to a JSON file."""
    file_path = tmp_path / "mock-data.json"
    with open(file_path, "w") as f:
        json.dump(sample_data, f)
    return file_path


@pytest.fixture
def fixture_source(fixture_file):
    """Fixture data source with no artificial delays."""
    return FixtureDataSource(
        file_path=fixture_file,
        run_delay_seconds=0,
        comparison_delay_seconds=0,
        rng=random.Random(7),
    )


class FakeDataSource(BaseDataSource):
    """
    Deterministic in-memory data source.
    
    Tests can hold individual calls open with ``asyncio.Event`` gates and
    inject failures per evaluation or per model.
    """

    def __init__(self, data: dict):
        self.data = data
        self.artifact_gates: dict[str, asyncio.Event] = {}
        self.run_gate: asyncio.Event | None = None
        self.model_gates: dict[str, asyncio.Event] = {}
        self.failing_artifacts: set[str] = set()
        self.failing_models: set[str] = set()
        self.fail_catalogs = False
        self.fail_runs = False
        self.model_scores: dict[str, float] = {}
        self.run_calls: list[str] = []
        self.model_calls: list[str] = []
        self.cancelled_models: list[str] = []
        self.hanging_logs: set[str] = set()
        self.cancelled_fetches: list[str] = []
        self.run_started = asyncio.Event()
        self.closed = False

    @property
    def source_name(self) -> str:
        return "fake"

    async def fetch_catalogs(self) -> Catalog:
        if self.fail_catalogs:
            raise SourceUnavailable(self.source_name, "offline")
        return Catalog(projects=self.data["projects"], models=self.data["models"])

    async def fetch_evaluations(self, filters: EvaluationFilter) -> list[Evaluation]:
        evaluations = [Evaluation.model_validate(e) for e in self.data["evaluations"]]
        return [e for e in evaluations if filters.matches(e)]

    async def _artifact(self, eval_id: str):
        gate = self.artifact_gates.get(eval_id)
        if gate is not None:
            await gate.wait()
        if eval_id in self.failing_artifacts:
            raise ConnectionError(f"connection reset while fetching {eval_id}")

    async def fetch_test_results(self, eval_id: str) -> list[TestResult]:
        await self._artifact(eval_id)
        return [TestResult.model_validate(r) for r in self.data["test_results"].get(eval_id, [])]

    async def fetch_logs(self, eval_id: str) -> str:
        if eval_id in self.hanging_logs:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled_fetches.append(f"logs:{eval_id}")
                raise
        await self._artifact(eval_id)
        return self.data["logs"].get(eval_id, "")

    async def fetch_judge_score(self, eval_id: str) -> JudgeScore | None:
        await self._artifact(eval_id)
        record = self.data["llm_judge_scores"].get(eval_id)
        return JudgeScore.model_validate(record) if record else None

    async def submit_run(self, eval_id: str, prompt: str, user_input: str) -> RunResult:
        self.run_calls.append(eval_id)
        self.run_started.set()
        if self.run_gate is not None:
            await self.run_gate.wait()
        if self.fail_runs:
            raise ConnectionError("backend unreachable")
        return RunResult(output=f"out:{prompt}:{user_input}", status=Status.PASSED, duration_ms=1200)

    async def submit_model_run(self, model: Model, prompt: str, user_input: str) -> ModelRunResult:
        self.model_calls.append(model.id)
        try:
            gate = self.model_gates.get(model.id)
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(0)
        except asyncio.CancelledError:
            self.cancelled_models.append(model.id)
            raise
        if model.id in self.failing_models:
            raise ConnectionError(f"{model.id} timed out upstream")
        return ModelRunResult(
            output=f"{model.name} says hi",
            overall_score=self.model_scores.get(model.id, 8.0),
            accuracy=8.0,
            helpfulness=9.0,
            latency_ms=1500,
            pass_rate=90,
            total_tokens=2000,
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_source(sample_data):
    return FakeDataSource(sample_data)


@pytest.fixture
def repository(fake_source):
    """Repository over the fake source; tests await ``load()``."""
    return EvaluationRepository(fake_source)


@pytest.fixture
def catalog(fake_source):
    """Catalog store over the fake source; tests await ``load()``."""
    return CatalogStore(fake_source)


@pytest.fixture
def workbench(fake_source):
    """Workbench over the fake source; tests await ``start()``."""
    return Workbench(fake_source)
