"""Selection controller for the current evaluation."""

import asyncio
from dataclasses import dataclass
from enum import Enum

import structlog

from evallab.errors import NotFound
from evallab.models.evaluation import Evaluation, EvaluationFilter, EvaluationView
from evallab.workbench.catalog import UNKNOWN_PROJECT, CatalogStore
from evallab.workbench.repository import EvaluationRepository

logger = structlog.get_logger()


class SelectionPhase(str, Enum):
    """Where the controller is in the selection lifecycle."""

    NO_SELECTION = "no_selection"
    SELECTING = "selecting"
    SELECTED = "selected"


@dataclass(frozen=True)
class SelectionState:
    phase: SelectionPhase
    eval_id: str | None = None


NO_SELECTION = SelectionState(SelectionPhase.NO_SELECTION)


class SelectionController:
    """
    Tracks the current evaluation and composes its view-model.
    
    Last selection wins: each ``select`` call takes a new request token and
    only the response carrying the latest token is applied. A stale response
    (or a stale failure) never overwrites visible state.
    """

    def __init__(
        self,
        repository: EvaluationRepository,
        catalog: CatalogStore | None = None,
    ):
        self.repository = repository
        self.catalog = catalog
        self._token = 0
        self._state = NO_SELECTION
        self._current: EvaluationView | None = None
        self._filters = EvaluationFilter()

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def filters(self) -> EvaluationFilter:
        return self._filters

    def current(self) -> EvaluationView | None:
        return self._current

    async def select(self, eval_id: str) -> EvaluationView | None:
        """
        Select an evaluation and fetch its results, logs and judge score.
        
        Returns:
            The composed view, or None if a newer selection superseded this one
            
        Raises:
            NotFound: If the evaluation id is unknown
            ArtifactUnavailable: If an artifact fetch fails for the latest selection
        """
        if eval_id not in self.repository:
            raise NotFound("Evaluation", eval_id)

        self._token += 1
        token = self._token
        self._state = SelectionState(SelectionPhase.SELECTING, eval_id)

        try:
            view = await self.compose(eval_id)
        except Exception:
            if token != self._token:
                logger.debug("Discarding stale selection failure", eval_id=eval_id)
                return None
            self._state = NO_SELECTION
            self._current = None
            raise

        if token != self._token:
            logger.debug("Discarding stale selection", eval_id=eval_id, token=token)
            return None

        # Re-read so a run that finished during the fetch is reflected
        view = view.model_copy(update={"evaluation": self.repository.get(eval_id)})
        self._current = view
        self._state = SelectionState(SelectionPhase.SELECTED, eval_id)
        return view

    async def compose(self, eval_id: str) -> EvaluationView:
        """
        Build the view for one evaluation without touching the selection.
        
        Safe for concurrent callers. If one artifact fetch fails the others
        are cancelled before the error propagates.
        
        Raises:
            NotFound: If the evaluation id is unknown
            ArtifactUnavailable: If any artifact fetch fails
        """
        evaluation = self.repository.get(eval_id)
        tasks = [
            asyncio.create_task(self.repository.test_results(eval_id)),
            asyncio.create_task(self.repository.logs(eval_id)),
            asyncio.create_task(self.repository.judge_score(eval_id)),
        ]
        try:
            test_results, logs, judge_score = await asyncio.gather(*tasks)
        finally:
            unfinished = [task for task in tasks if not task.done()]
            for task in unfinished:
                task.cancel()
            if unfinished:
                await asyncio.gather(*unfinished, return_exceptions=True)

        return self._compose(evaluation, test_results, logs, judge_score)

    def refresh(self) -> EvaluationView | None:
        """Re-read the selected evaluation after the repository changed it."""
        if self._current is None:
            return None
        evaluation = self.repository.get(self._current.evaluation.id)
        self._current = self._current.model_copy(update={"evaluation": evaluation})
        return self._current

    def clear(self) -> None:
        """Drop the selection; any in-flight select becomes stale."""
        self._token += 1
        self._state = NO_SELECTION
        self._current = None

    def apply_filters(self, filters: EvaluationFilter) -> list[Evaluation]:
        self._filters = filters
        return self.repository.list_evaluations(filters)

    def clear_filters(self) -> list[Evaluation]:
        return self.apply_filters(EvaluationFilter())

    def _compose(self, evaluation, test_results, logs, judge_score) -> EvaluationView:
        project_name = (
            self.catalog.project_name(evaluation.project_id)
            if self.catalog is not None
            else UNKNOWN_PROJECT
        )
        return EvaluationView(
            evaluation=evaluation,
            test_results=test_results,
            logs=logs,
            judge_score=judge_score,
            project_name=project_name,
        )
