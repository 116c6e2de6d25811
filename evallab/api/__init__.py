"""API layer for the evaluation workbench."""

from evallab.api.routes import router
from evallab.api.schemas import (
    ComparisonRequest,
    CostEstimateResponse,
    HealthResponse,
    RunRequest,
)

__all__ = [
    "router",
    "ComparisonRequest",
    "CostEstimateResponse",
    "HealthResponse",
    "RunRequest",
]
