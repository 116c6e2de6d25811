"""API request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ============================================
# Request Schemas
# ============================================

class RunRequest(BaseModel):
    """Request to run an evaluation or a single model."""

    prompt: str = Field(description="System prompt")
    user_input: str = Field(description="User input")


class ComparisonRequest(BaseModel):
    """Request to compare several models on one prompt/input pair."""

    models: list[str] = Field(description="Model IDs to compare (2-5)")
    prompt: str = Field(description="System prompt")
    user_input: str = Field(description="User input")


# ============================================
# Response Schemas
# ============================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    source: str
    projects: int
    evaluations: int


class CostEstimateResponse(BaseModel):
    """Estimated spend for a batch of evaluations."""

    model_id: str
    evaluations: int
    tokens_per_evaluation: int
    total_tokens: int
    estimated_cost_usd: float


class ErrorResponse(BaseModel):
    """Error body returned for workbench errors."""

    error: str
    detail: str


ExportFormat = Literal["csv", "json"]
