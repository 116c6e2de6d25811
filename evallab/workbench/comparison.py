"""Multi-model comparison executor."""

import asyncio
from typing import Iterable, Sequence

import structlog

from evallab.adapters.base import BaseDataSource
from evallab.config import get_settings
from evallab.errors import InvalidSelection, RunFailed
from evallab.models.catalog import Model
from evallab.models.comparison import ComparisonReport, ComparisonResult, ModelRunResult
from evallab.workbench.catalog import CatalogStore
from evallab.workbench.runner import require_text

logger = structlog.get_logger()


def pick_winner(results: Sequence[ComparisonResult]) -> ComparisonResult | None:
    """Highest overall score; ties go to the earliest result."""
    winner = None
    for result in results:
        if winner is None or result.overall_score > winner.overall_score:
            winner = result
    return winner


class ComparisonExecutor:
    """
    Runs one prompt/input pair across 2-5 models concurrently.
    
    Results keep the order the models were given in. If any model fails the
    whole comparison fails with RunFailed naming that model, and the other
    per-model runs are cancelled.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        source: BaseDataSource,
        timeout: float | None = None,
        min_models: int | None = None,
        max_models: int | None = None,
        max_concurrent: int | None = None,
    ):
        settings = get_settings()
        self.catalog = catalog
        self.source = source
        self.timeout = timeout
        self.min_models = min_models or settings.min_compare_models
        self.max_models = max_models or settings.max_compare_models
        self._semaphore = asyncio.Semaphore(max_concurrent or settings.max_concurrent_runs)

    async def compare(
        self,
        model_ids: Iterable[str],
        prompt: str,
        user_input: str,
    ) -> ComparisonReport:
        """
        Compare models on the same prompt and input.
        
        Raises:
            InvalidSelection: Fewer than 2 or more than 5 distinct models
            InvalidInput: Blank prompt or input
            NotFound: A model id is not in the catalog
            RunFailed: A model's run failed
        """
        # Set semantics, but keep first-occurrence order
        ordered_ids = list(dict.fromkeys(model_ids))
        if not self.min_models <= len(ordered_ids) <= self.max_models:
            raise InvalidSelection(len(ordered_ids), self.min_models, self.max_models)
        require_text(prompt, user_input)
        models = [self.catalog.require_model(m) for m in ordered_ids]

        logger.info("Starting comparison", models=ordered_ids)

        tasks = [
            asyncio.create_task(self._run_model(model, prompt, user_input))
            for model in models
        ]
        try:
            await self._join(tasks, models)
        finally:
            unfinished = [task for task in tasks if not task.done()]
            for task in unfinished:
                task.cancel()
            if unfinished:
                await asyncio.gather(*unfinished, return_exceptions=True)

        results = [task.result() for task in tasks]
        winner = pick_winner(results)
        logger.info(
            "Comparison complete",
            models=ordered_ids,
            winner=winner.model_id if winner else None,
        )
        return ComparisonReport(
            prompt=prompt,
            user_input=user_input,
            results=results,
            winner=winner,
        )

    async def run_model(self, model_id: str, prompt: str, user_input: str) -> ComparisonResult:
        """
        Run the prompt/input pair through one model.
        
        Raises:
            InvalidInput: Blank prompt or input
            NotFound: Unknown model id
            RunFailed: The model run failed or timed out
        """
        require_text(prompt, user_input)
        model = self.catalog.require_model(model_id)
        try:
            return await self._run_model(model, prompt, user_input)
        except Exception as e:
            raise _run_failed(model, e) from e

    async def _join(self, tasks: list[asyncio.Task], models: list[Model]) -> None:
        """Wait for every task; stop at the first failure."""
        pending = set(tasks)
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
            failed = [i for i, task in enumerate(tasks) if task in done and task.exception()]
            if failed:
                index = failed[0]
                error = tasks[index].exception()
                raise _run_failed(models[index], error) from error

    async def _run_model(self, model: Model, prompt: str, user_input: str) -> ComparisonResult:
        async with self._semaphore:
            run: ModelRunResult = await asyncio.wait_for(
                self.source.submit_model_run(model, prompt, user_input),
                self.timeout,
            )
        return ComparisonResult(
            model_id=model.id,
            model_name=model.name,
            output=run.output,
            overall_score=run.overall_score,
            accuracy=run.accuracy,
            helpfulness=run.helpfulness,
            latency_ms=run.latency_ms,
            cost=model.cost_for_tokens(run.total_tokens),
            pass_rate=run.pass_rate,
        )


def _run_failed(model: Model, error: BaseException) -> RunFailed:
    if isinstance(error, asyncio.TimeoutError):
        return RunFailed("timed out", model_id=model.id)
    return RunFailed(str(error), model_id=model.id)
