"""Base data source interface for the workbench."""

from abc import ABC, abstractmethod

from evallab.models.catalog import Catalog, Model
from evallab.models.comparison import ModelRunResult
from evallab.models.evaluation import (
    Evaluation,
    EvaluationFilter,
    JudgeScore,
    RunResult,
    TestResult,
)


class BaseDataSource(ABC):
    """
    Abstract base class for data-access collaborators.
    
    The contract (inputs, return shape, nullability) is the same whether the
    data comes from a local fixture or a network backend.
    """

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return the name of this data source."""
        ...

    @abstractmethod
    async def fetch_catalogs(self) -> Catalog:
        """
        Fetch projects and models.
        
        Raises:
            SourceUnavailable: If the source cannot be read
        """
        ...

    @abstractmethod
    async def fetch_evaluations(self, filters: EvaluationFilter) -> list[Evaluation]:
        """
        Fetch evaluations matching the filter, in storage order.
        
        Raises:
            SourceUnavailable: If the source cannot be read
        """
        ...

    @abstractmethod
    async def fetch_test_results(self, eval_id: str) -> list[TestResult]:
        """Fetch test results; an empty list when there are none."""
        ...

    @abstractmethod
    async def fetch_logs(self, eval_id: str) -> str:
        """Fetch execution logs; an empty string when there are none."""
        ...

    @abstractmethod
    async def fetch_judge_score(self, eval_id: str) -> JudgeScore | None:
        """Fetch judge scores; None when the evaluation was not judged."""
        ...

    @abstractmethod
    async def submit_run(self, eval_id: str, prompt: str, user_input: str) -> RunResult:
        """Execute an evaluation and return its output, status and duration."""
        ...

    @abstractmethod
    async def submit_model_run(
        self,
        model: Model,
        prompt: str,
        user_input: str,
    ) -> ModelRunResult:
        """Run a prompt/input pair through one model for a comparison."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        return None
