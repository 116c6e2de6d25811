"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EVALLAB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Data source
    data_source: Literal["fixture", "http"] = "fixture"
    fixture_path: str = "./data/mock-data.json"
    api_base_url: str = "http://localhost:8080/api"
    dataset_api_base_url: str = "http://localhost:8080/api"

    # Fetch behaviour (None means no timeout)
    fetch_timeout_seconds: float | None = None
    requests_per_minute: int = 600

    # Mock backend
    mock_run_delay_seconds: float = 2.0
    mock_comparison_delay_seconds: float = 3.0
    mock_seed: int | None = None

    # Comparison settings
    min_compare_models: int = 2
    max_compare_models: int = 5
    max_concurrent_runs: int = 5

    # Application
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
