"""Single evaluation run executor."""

import asyncio
import time
from contextlib import contextmanager
from typing import Iterator

import structlog

from evallab.adapters.base import BaseDataSource
from evallab.errors import AlreadyRunning, InvalidInput, RunFailed
from evallab.models.evaluation import Evaluation
from evallab.workbench.repository import EvaluationRepository

logger = structlog.get_logger()


def require_text(prompt: str, user_input: str) -> None:
    """Reject blank prompt or user input before any side effect."""
    if not prompt or not prompt.strip():
        raise InvalidInput("prompt", "Please enter both system prompt and user input")
    if not user_input or not user_input.strip():
        raise InvalidInput("user_input", "Please enter both system prompt and user input")


class RunExecutor:
    """
    Runs one evaluation at a time per evaluation id.
    
    While a run is in flight the stored status is ``running``. If the run
    fails or is cancelled, the status goes back to what it was before.
    """

    def __init__(
        self,
        repository: EvaluationRepository,
        source: BaseDataSource,
        timeout: float | None = None,
    ):
        self.repository = repository
        self.source = source
        self.timeout = timeout
        self._pending: set[str] = set()

    def is_running(self, eval_id: str) -> bool:
        return eval_id in self._pending

    async def run(self, eval_id: str, prompt: str, user_input: str) -> Evaluation:
        """
        Execute an evaluation and record its result.
        
        Args:
            eval_id: Evaluation to run
            prompt: System prompt
            user_input: User input
            
        Returns:
            The updated evaluation
            
        Raises:
            InvalidInput: Blank prompt or input
            AlreadyRunning: A run for this id is in flight
            NotFound: Unknown evaluation id
            RunFailed: The backend call failed or timed out
        """
        require_text(prompt, user_input)

        with self._claim(eval_id):
            previous = self.repository.mark_running(eval_id)
            logger.info("Run started", eval_id=eval_id)
            start_time = time.perf_counter()

            try:
                result = await asyncio.wait_for(
                    self.source.submit_run(eval_id, prompt, user_input),
                    self.timeout,
                )
            except asyncio.CancelledError:
                self.repository.restore_status(eval_id, previous)
                raise
            except asyncio.TimeoutError as e:
                self.repository.restore_status(eval_id, previous)
                raise RunFailed("timed out", eval_id=eval_id) from e
            except Exception as e:
                self.repository.restore_status(eval_id, previous)
                raise RunFailed(str(e), eval_id=eval_id) from e

            evaluation = self.repository.apply_run_result(
                eval_id,
                output=result.output,
                status=result.status,
                duration_ms=result.duration_ms,
            )
            logger.info(
                "Run complete",
                eval_id=eval_id,
                status=evaluation.status.value,
                elapsed_ms=round((time.perf_counter() - start_time) * 1000),
            )
            return evaluation

    @contextmanager
    def _claim(self, eval_id: str) -> Iterator[None]:
        """Hold the pending marker for ``eval_id`` for the duration of the block."""
        if eval_id in self._pending:
            raise AlreadyRunning(eval_id)
        self._pending.add(eval_id)
        try:
            yield
        finally:
            self._pending.discard(eval_id)
