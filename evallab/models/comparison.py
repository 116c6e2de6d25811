"""Comparison run schemas."""

import csv
import io
import json
from datetime import datetime

from pydantic import BaseModel, Field


class ModelRunResult(BaseModel):
    """Result of running one prompt/input pair through a single model."""

    output: str
    overall_score: float = Field(ge=0.0, le=10.0)
    accuracy: float = Field(ge=0.0, le=10.0)
    helpfulness: float = Field(ge=0.0, le=10.0)
    latency_ms: float = Field(ge=0.0)
    pass_rate: float = Field(ge=0.0, le=100.0)
    total_tokens: int = Field(default=0, ge=0)


class ComparisonResult(BaseModel):
    """One model's row in a comparison. Never persisted."""

    model_id: str
    model_name: str
    output: str
    overall_score: float = Field(ge=0.0, le=10.0)
    accuracy: float = Field(ge=0.0, le=10.0)
    helpfulness: float = Field(ge=0.0, le=10.0)
    latency_ms: float = Field(ge=0.0)
    cost: float = Field(ge=0.0)
    pass_rate: float = Field(ge=0.0, le=100.0)


EXPORT_COLUMNS = [
    "model_id",
    "model_name",
    "overall_score",
    "accuracy",
    "helpfulness",
    "latency_ms",
    "cost",
    "pass_rate",
    "winner",
]


class ComparisonReport(BaseModel):
    """Ordered comparison results plus the winning model."""

    prompt: str
    user_input: str
    results: list[ComparisonResult]
    winner: ComparisonResult | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def winner_id(self) -> str | None:
        return self.winner.model_id if self.winner else None

    def to_csv(self) -> str:
        """Export the summary table as CSV (outputs omitted)."""
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        for result in self.results:
            row = result.model_dump(include=set(EXPORT_COLUMNS))
            row["winner"] = result.model_id == self.winner_id
            writer.writerow(row)
        return buffer.getvalue()

    def to_json(self) -> str:
        """Export the full report, outputs included, as JSON."""
        payload = self.model_dump(mode="json")
        payload["winner_id"] = self.winner_id
        return json.dumps(payload, indent=2)
