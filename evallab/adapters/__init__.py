"""Data source adapters package."""

from evallab.adapters.base import BaseDataSource
from evallab.adapters.dataset_client import DatasetClient
from evallab.adapters.fixture_adapter import FixtureDataSource
from evallab.adapters.http_adapter import HttpDataSource

__all__ = [
    "BaseDataSource",
    "DatasetClient",
    "FixtureDataSource",
    "HttpDataSource",
]
