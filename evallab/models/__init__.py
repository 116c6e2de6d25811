"""Data models package."""

from evallab.models.catalog import Catalog, Model, Project
from evallab.models.comparison import (
    ComparisonReport,
    ComparisonResult,
    ModelRunResult,
)
from evallab.models.dataset import (
    Dataset,
    DatasetListing,
    DatasetSource,
    GithubImportRequest,
    UrlImportRequest,
)
from evallab.models.evaluation import (
    Evaluation,
    EvaluationFilter,
    EvaluationMetadata,
    EvaluationView,
    JudgeScore,
    RunResult,
    Status,
    TestResult,
    TestStatus,
)

__all__ = [
    "Catalog",
    "Model",
    "Project",
    "ComparisonReport",
    "ComparisonResult",
    "ModelRunResult",
    "Dataset",
    "DatasetListing",
    "DatasetSource",
    "GithubImportRequest",
    "UrlImportRequest",
    "Evaluation",
    "EvaluationFilter",
    "EvaluationMetadata",
    "EvaluationView",
    "JudgeScore",
    "RunResult",
    "Status",
    "TestResult",
    "TestStatus",
]
