"""Dataset listing and import schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Dataset(BaseModel):
    """A dataset known to the dataset API."""

    id: str
    name: str
    description: str | None = None
    row_count: int = Field(default=0, ge=0)
    created_at: datetime | None = None


class DatasetSource(str, Enum):
    """Where a dataset listing came from."""

    API = "api"
    FIXTURE = "fixture"
    DEMO = "demo"


class DatasetListing(BaseModel):
    """Datasets plus the fallback path taken to obtain them."""

    datasets: list[Dataset] = Field(default_factory=list)
    source: DatasetSource
    errors: list[str] = Field(default_factory=list)


class GithubImportRequest(BaseModel):
    """Import a dataset file from a GitHub repository."""

    url: str
    branch: str = "main"
    path: str = ""
    token: str | None = None


class UrlImportRequest(BaseModel):
    """Import a dataset from an arbitrary URL."""

    url: str
    auth: str | None = None
