"""Catalog reference data: projects and models."""

from datetime import datetime

from pydantic import BaseModel, Field


class Project(BaseModel):
    """An evaluation project. Immutable during a session."""

    id: str
    name: str
    description: str | None = None
    model: str | None = None  # Default model id for the project
    created_at: datetime


class Model(BaseModel):
    """An LLM available for evaluation runs."""

    id: str
    name: str
    provider: str
    context_window: int = Field(default=0, ge=0)
    cost_per_1k_tokens: float = Field(default=0.002, ge=0.0)

    def estimate_cost(self, evaluations: int, tokens_per_evaluation: int) -> float:
        """Estimate spend in USD for a number of evaluations."""
        total_tokens = evaluations * tokens_per_evaluation
        return (total_tokens / 1000) * self.cost_per_1k_tokens

    def cost_for_tokens(self, total_tokens: int) -> float:
        """Cost in USD for a single run of ``total_tokens`` tokens."""
        return (total_tokens / 1000) * self.cost_per_1k_tokens


class Catalog(BaseModel):
    """Projects and models as fetched from the data source."""

    projects: list[Project] = Field(default_factory=list)
    models: list[Model] = Field(default_factory=list)
