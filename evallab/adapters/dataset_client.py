"""Dataset API client with fixture and demo fallbacks."""

from pathlib import Path
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from evallab.adapters.fixture_adapter import FixtureDataSource
from evallab.config import get_settings
from evallab.errors import DatasetImportFailed, InvalidInput, SourceUnavailable
from evallab.models.dataset import (
    Dataset,
    DatasetListing,
    DatasetSource,
    GithubImportRequest,
    UrlImportRequest,
)

logger = structlog.get_logger()

DEMO_DATASETS = [
    {
        "id": "ds-001",
        "name": "Customer Support Q&A v1",
        "description": "Collection of 500 customer support conversations",
        "row_count": 500,
        "created_at": "2024-01-15T10:30:00Z",
    },
    {
        "id": "ds-002",
        "name": "Code Generation Test Cases",
        "description": "Programming problems and expected solutions",
        "row_count": 250,
        "created_at": "2024-01-20T14:22:00Z",
    },
    {
        "id": "ds-003",
        "name": "Medical FAQs",
        "description": "Common medical questions and answers",
        "row_count": 1200,
        "created_at": "2024-02-01T09:15:00Z",
    },
    {
        "id": "ds-004",
        "name": "Sentiment Analysis Training Set",
        "description": "Product reviews with sentiment labels",
        "row_count": 5000,
        "created_at": "2024-02-10T13:00:00Z",
    },
    {
        "id": "ds-005",
        "name": "Legal Document Summaries",
        "description": "Legal contracts and their summaries",
        "row_count": 150,
        "created_at": "2024-02-12T10:30:00Z",
    },
]


class DatasetClient:
    """
    Client for the dataset import API.
    
    The import backend itself lives outside this package; this client only
    speaks its request/response contract.
    """

    def __init__(
        self,
        base_url: str | None = None,
        fixture: FixtureDataSource | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.dataset_api_base_url
        self.fixture = fixture
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def list_datasets(self) -> DatasetListing:
        """
        List datasets from the API.
        
        Falls back to the fixture's datasets, then to built-in demo datasets,
        recording each failure in ``errors``.
        """
        errors: list[str] = []

        try:
            response = await self.client.get("/datasets")
            response.raise_for_status()
            datasets = [Dataset.model_validate(d) for d in response.json()]
            logger.info("Loaded datasets from API", count=len(datasets))
            return DatasetListing(datasets=datasets, source=DatasetSource.API)
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            logger.warning("Dataset API not available, trying fixture", error=str(e))
            errors.append(f"API error: {e}")

        if self.fixture is not None:
            try:
                datasets = [Dataset.model_validate(d) for d in self.fixture.load_datasets()]
                return DatasetListing(
                    datasets=datasets,
                    source=DatasetSource.FIXTURE,
                    errors=errors,
                )
            except (SourceUnavailable, ValidationError) as e:
                logger.warning("Fixture datasets not available", error=str(e))
                errors.append(f"Mock data error: {e}")

        return DatasetListing(
            datasets=[Dataset.model_validate(d) for d in DEMO_DATASETS],
            source=DatasetSource.DEMO,
            errors=errors,
        )

    async def import_from_file(
        self,
        file_path: str | Path,
        name: str,
        description: str = "",
    ) -> None:
        """Upload a local dataset file."""
        path = Path(file_path)
        if not path.is_file():
            raise InvalidInput("file", f"Please select a file (not found: {path})")

        with open(path, "rb") as f:
            content = f.read()
        await self._send(
            "POST",
            "/datasets/upload",
            "upload",
            files={"file": (path.name, content)},
            data={"name": name, "description": description},
        )
        logger.info("Dataset uploaded", name=name, file=path.name)

    async def import_from_github(self, request: GithubImportRequest) -> None:
        """Import a dataset from a GitHub repository path."""
        if not request.url.strip():
            raise InvalidInput("url")
        await self._send("POST", "/datasets/github", "GitHub import", json=request.model_dump())
        logger.info("Dataset imported from GitHub", url=request.url, branch=request.branch)

    async def import_from_url(self, request: UrlImportRequest) -> None:
        """Import a dataset from a URL."""
        if not request.url.strip():
            raise InvalidInput("url")
        await self._send("POST", "/datasets/url", "URL import", json=request.model_dump())
        logger.info("Dataset imported from URL", url=request.url)

    async def delete_dataset(self, dataset_id: str) -> None:
        await self._send("DELETE", f"/datasets/{dataset_id}", "delete")
        logger.info("Dataset deleted", dataset_id=dataset_id)

    async def close(self) -> None:
        await self.client.aclose()

    async def _send(self, method: str, path: str, operation: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise DatasetImportFailed(operation, reason=str(e)) from e
        if response.is_success:
            return response
        raise DatasetImportFailed(operation, response.status_code, response.text[:200])
