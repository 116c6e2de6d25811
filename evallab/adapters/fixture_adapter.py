"""Local JSON fixture data source with mock run behaviour."""

import asyncio
import json
import random
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from evallab.adapters.base import BaseDataSource
from evallab.config import get_settings
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

logger = structlog.get_logger()

# Rough estimate: 4 chars per token
CHARS_PER_TOKEN = 4


class FixtureDataSource(BaseDataSource):
    """
    Data source backed by a static ``mock-data.json`` file.
    
    Expected layout:
    - ``projects``, ``models``, ``evaluations``: arrays of records
    - ``test_results``, ``llm_judge_scores``, ``logs``: objects keyed by evaluation id
    - ``datasets``: optional array used by the dataset client fallback
    
    Runs are simulated with fixed delays; comparison scores are random.
    """

    def __init__(
        self,
        file_path: str | Path | None = None,
        run_delay_seconds: float | None = None,
        comparison_delay_seconds: float | None = None,
        rng: random.Random | None = None,
    ):
        settings = get_settings()
        self.file_path = Path(file_path or settings.fixture_path)
        self.run_delay_seconds = (
            settings.mock_run_delay_seconds
            if run_delay_seconds is None
            else run_delay_seconds
        )
        self.comparison_delay_seconds = (
            settings.mock_comparison_delay_seconds
            if comparison_delay_seconds is None
            else comparison_delay_seconds
        )
        self.rng = rng or random.Random(settings.mock_seed)
        self._cached_data: dict[str, Any] | None = None

    @property
    def source_name(self) -> str:
        return f"file:{self.file_path.name}"

    async def fetch_catalogs(self) -> Catalog:
        """Load projects and models from the fixture."""
        data = self._load_data()
        try:
            catalog = Catalog(
                projects=data.get("projects", []),
                models=data.get("models", []),
            )
        except ValidationError as e:
            raise SourceUnavailable(self.source_name, f"malformed catalog: {e}") from e

        logger.debug(
            "Loaded catalogs from file",
            path=str(self.file_path),
            projects=len(catalog.projects),
            models=len(catalog.models),
        )
        return catalog

    async def fetch_evaluations(self, filters: EvaluationFilter) -> list[Evaluation]:
        """Load evaluations and apply client-side filtering."""
        data = self._load_data()
        try:
            evaluations = [Evaluation.model_validate(e) for e in data.get("evaluations", [])]
        except ValidationError as e:
            raise SourceUnavailable(self.source_name, f"malformed evaluations: {e}") from e

        return [e for e in evaluations if filters.matches(e)]

    async def fetch_test_results(self, eval_id: str) -> list[TestResult]:
        data = self._load_data()
        records = data.get("test_results", {}).get(eval_id, [])
        return [TestResult.model_validate(r) for r in records]

    async def fetch_logs(self, eval_id: str) -> str:
        data = self._load_data()
        return data.get("logs", {}).get(eval_id, "")

    async def fetch_judge_score(self, eval_id: str) -> JudgeScore | None:
        data = self._load_data()
        record = data.get("llm_judge_scores", {}).get(eval_id)
        if record is None:
            return None
        return JudgeScore.model_validate(record)

    async def submit_run(self, eval_id: str, prompt: str, user_input: str) -> RunResult:
        """Simulate an evaluation run with a fixed delay."""
        await asyncio.sleep(self.run_delay_seconds)
        output = (
            f"Mock output for evaluation {eval_id}\n\n"
            f"Prompt: {prompt}\n"
            f"Input: {user_input}\n\n"
            "This is a simulated response. In production, this would contain "
            "the actual LLM output."
        )
        return RunResult(
            output=output,
            status=Status.PASSED,
            duration_ms=int(self.run_delay_seconds * 1000),
        )

    async def submit_model_run(
        self,
        model: Model,
        prompt: str,
        user_input: str,
    ) -> ModelRunResult:
        """Simulate a comparison run with random mock scores."""
        await asyncio.sleep(self.comparison_delay_seconds)
        output = (
            f"Sample output from {model.name}:\n\n{prompt}\n\n"
            f"User: {user_input}\n\n"
            "Assistant: This is a mock response for comparison purposes."
        )
        total_chars = len(prompt) + len(user_input) + len(output)
        return ModelRunResult(
            output=output,
            overall_score=self.rng.uniform(8.0, 10.0),
            accuracy=self.rng.uniform(8.0, 10.0),
            helpfulness=self.rng.uniform(8.0, 10.0),
            latency_ms=self.rng.uniform(1000.0, 4000.0),
            pass_rate=self.rng.randint(80, 99),
            total_tokens=total_chars // CHARS_PER_TOKEN,
        )

    def load_datasets(self) -> list[dict[str, Any]]:
        """Raw dataset records from the fixture, for the dataset client."""
        data = self._load_data()
        if "datasets" not in data:
            raise SourceUnavailable(self.source_name, "no datasets property in fixture")
        return list(data["datasets"])

    def _load_data(self) -> dict[str, Any]:
        """Load and cache the fixture file."""
        if self._cached_data is not None:
            return self._cached_data

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SourceUnavailable(self.source_name, str(e)) from e

        if not isinstance(data, dict):
            raise SourceUnavailable(self.source_name, "fixture root must be an object")

        self._cached_data = data
        logger.info("Loaded fixture", path=str(self.file_path))
        return self._cached_data
