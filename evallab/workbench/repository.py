"""In-memory evaluation repository over a data source."""

import asyncio
from typing import Awaitable, TypeVar

import structlog

from evallab.adapters.base import BaseDataSource
from evallab.errors import ArtifactUnavailable, NotFound, SourceUnavailable
from evallab.models.evaluation import (
    Evaluation,
    EvaluationFilter,
    JudgeScore,
    Status,
    TestResult,
)

logger = structlog.get_logger()

T = TypeVar("T")


class EvaluationRepository:
    """
    Owns evaluation records and fetches their derived artifacts.
    
    This is the only writer of evaluation state. Reads hand out copies so
    callers cannot mutate stored records behind the repository's back.
    """

    def __init__(self, source: BaseDataSource, timeout: float | None = None):
        self.source = source
        self.timeout = timeout
        self._evaluations: dict[str, Evaluation] = {}

    async def load(self) -> int:
        """
        Populate the repository from the data source.
        
        Returns:
            Number of evaluations loaded
        """
        try:
            evaluations = await asyncio.wait_for(
                self.source.fetch_evaluations(EvaluationFilter()),
                self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise SourceUnavailable(self.source.source_name, "evaluation fetch timed out") from e

        # dict preserves insertion order, which list_evaluations() relies on
        self._evaluations = {e.id: e for e in evaluations}
        logger.info("Evaluations loaded", count=len(self._evaluations))
        return len(self._evaluations)

    def list_evaluations(self, filters: EvaluationFilter | None = None) -> list[Evaluation]:
        """Evaluations matching every non-empty filter field, in storage order."""
        filters = filters or EvaluationFilter()
        return [
            e.model_copy(deep=True)
            for e in self._evaluations.values()
            if filters.matches(e)
        ]

    def find(self, eval_id: str) -> Evaluation | None:
        evaluation = self._evaluations.get(eval_id)
        return evaluation.model_copy(deep=True) if evaluation else None

    def get(self, eval_id: str) -> Evaluation:
        """
        Get an evaluation by id.
        
        Raises:
            NotFound: If the id is unknown (a stale id is a caller bug)
        """
        return self._stored(eval_id).model_copy(deep=True)

    def __contains__(self, eval_id: str) -> bool:
        return eval_id in self._evaluations

    def __len__(self) -> int:
        return len(self._evaluations)

    async def test_results(self, eval_id: str) -> list[TestResult]:
        return await self._fetch(
            eval_id, "test results", self.source.fetch_test_results(eval_id)
        )

    async def logs(self, eval_id: str) -> str:
        return await self._fetch(eval_id, "logs", self.source.fetch_logs(eval_id))

    async def judge_score(self, eval_id: str) -> JudgeScore | None:
        return await self._fetch(
            eval_id, "judge score", self.source.fetch_judge_score(eval_id)
        )

    def apply_run_result(
        self,
        eval_id: str,
        output: str,
        status: Status | str,
        duration_ms: int,
    ) -> Evaluation:
        """
        Record a completed run on the stored evaluation.

        Raises:
            NotFound: If the id is unknown
            ValidationError: If the result breaks a field constraint; the
                stored evaluation is left unchanged
        """
        stored = self._stored(eval_id)
        evaluation = Evaluation.model_validate({
            **stored.model_dump(),
            "output": output,
            "status": status,
            "duration_ms": duration_ms,
        })
        self._evaluations[eval_id] = evaluation
        logger.debug("Run result applied", eval_id=eval_id, status=evaluation.status.value)
        return evaluation.model_copy(deep=True)

    def mark_running(self, eval_id: str) -> Status:
        """
        Set the status to running.
        
        Returns:
            The status before the run started
        """
        evaluation = self._stored(eval_id)
        previous = evaluation.status
        evaluation.status = Status.RUNNING
        return previous

    def restore_status(self, eval_id: str, status: Status) -> None:
        self._stored(eval_id).status = status

    def _stored(self, eval_id: str) -> Evaluation:
        evaluation = self._evaluations.get(eval_id)
        if evaluation is None:
            raise NotFound("Evaluation", eval_id)
        return evaluation

    async def _fetch(self, eval_id: str, operation: str, call: Awaitable[T]) -> T:
        """Await an artifact fetch, mapping transport failures."""
        try:
            return await asyncio.wait_for(call, self.timeout)
        except asyncio.TimeoutError as e:
            raise ArtifactUnavailable(eval_id, operation, "timed out") from e
        except Exception as e:
            raise ArtifactUnavailable(eval_id, operation, str(e)) from e
