"""REST backend data source."""

import asyncio
from typing import Any

import httpx
import structlog
from aiolimiter import AsyncLimiter
from pydantic import ValidationError

from evallab.adapters.base import BaseDataSource
from evallab.config import get_settings
from evallab.errors import SourceUnavailable
from evallab.models.catalog import Catalog, Model, Project
from evallab.models.comparison import ModelRunResult
from evallab.models.evaluation import (
    Evaluation,
    EvaluationFilter,
    JudgeScore,
    RunResult,
    TestResult,
)

logger = structlog.get_logger()


class HttpDataSource(BaseDataSource):
    """
    Data source for the evaluation REST API.
    
    Endpoints:
    - GET  /projects, /models
    - GET  /evaluations?project_id=&status=&model=
    - GET  /evaluations/{id}/results | /logs | /judge
    - POST /evaluations/{id}/run
    - POST /models/{id}/run
    
    A 404 on an artifact endpoint means "no data", not a failure.
    Transport errors propagate as httpx exceptions; the repository decides
    how to surface them.
    """

    def __init__(
        self,
        base_url: str | None = None,
        requests_per_minute: int | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.api_base_url
        self.client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
        )
        self.rate_limiter = AsyncLimiter(
            requests_per_minute or settings.requests_per_minute, 60
        )

    @property
    def source_name(self) -> str:
        return f"http:{self.base_url}"

    async def fetch_catalogs(self) -> Catalog:
        """Fetch projects and models concurrently."""
        try:
            projects_data, models_data = await asyncio.gather(
                self._get_json("/projects"),
                self._get_json("/models"),
            )
            return Catalog(
                projects=[Project.model_validate(p) for p in projects_data],
                models=[Model.model_validate(m) for m in _unwrap(models_data, "models")],
            )
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            raise SourceUnavailable(self.source_name, str(e)) from e

    async def fetch_evaluations(self, filters: EvaluationFilter) -> list[Evaluation]:
        try:
            data = await self._get_json("/evaluations", params=filters.to_query_params())
            return [Evaluation.model_validate(e) for e in data]
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            raise SourceUnavailable(self.source_name, str(e)) from e

    async def fetch_test_results(self, eval_id: str) -> list[TestResult]:
        response = await self._request("GET", f"/evaluations/{eval_id}/results")
        if response.status_code == 404:
            return []
        response.raise_for_status()
        return [TestResult.model_validate(r) for r in response.json()]

    async def fetch_logs(self, eval_id: str) -> str:
        response = await self._request("GET", f"/evaluations/{eval_id}/logs")
        if response.status_code == 404:
            return ""
        response.raise_for_status()
        return response.text

    async def fetch_judge_score(self, eval_id: str) -> JudgeScore | None:
        response = await self._request("GET", f"/evaluations/{eval_id}/judge")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        data = response.json()
        if data is None:
            return None
        return JudgeScore.model_validate(data)

    async def submit_run(self, eval_id: str, prompt: str, user_input: str) -> RunResult:
        response = await self._request(
            "POST",
            f"/evaluations/{eval_id}/run",
            json={"prompt": prompt, "user_input": user_input},
        )
        response.raise_for_status()
        return RunResult.model_validate(response.json())

    async def submit_model_run(
        self,
        model: Model,
        prompt: str,
        user_input: str,
    ) -> ModelRunResult:
        response = await self._request(
            "POST",
            f"/models/{model.id}/run",
            json={"prompt": prompt, "user_input": user_input},
        )
        response.raise_for_status()
        return ModelRunResult.model_validate(response.json())

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        response = await self._request("GET", path, params=params)
        response.raise_for_status()
        return response.json()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        await self.rate_limiter.acquire()
        logger.debug("API request", method=method, path=path)
        return await self.client.request(method, path, **kwargs)


def _unwrap(data: Any, key: str) -> list[Any]:
    """Accept both a bare list and a ``{key: [...]}`` envelope."""
    if isinstance(data, dict):
        return data.get(key, [])
    return data
