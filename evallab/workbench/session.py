"""Workbench session: composes the catalog, repository and executors."""

import structlog

from evallab.adapters.base import BaseDataSource
from evallab.adapters.fixture_adapter import FixtureDataSource
from evallab.adapters.http_adapter import HttpDataSource
from evallab.config import Settings, get_settings
from evallab.errors import InvalidInput, SourceUnavailable
from evallab.models.comparison import ComparisonReport
from evallab.models.evaluation import Evaluation, EvaluationView
from evallab.workbench.catalog import CatalogStore
from evallab.workbench.comparison import ComparisonExecutor
from evallab.workbench.repository import EvaluationRepository
from evallab.workbench.runner import RunExecutor
from evallab.workbench.selection import SelectionController

logger = structlog.get_logger()


class Workbench:
    """
    One evaluation session.
    
    Owns a data source and the components built on it. Nothing here is
    global: whoever composes the workbench owns its lifetime.
    """

    def __init__(self, source: BaseDataSource, timeout: float | None = None):
        self.source = source
        self.catalog = CatalogStore(source, timeout=timeout)
        self.repository = EvaluationRepository(source, timeout=timeout)
        self.selection = SelectionController(self.repository, self.catalog)
        self.runner = RunExecutor(self.repository, source, timeout=timeout)
        self.comparisons = ComparisonExecutor(self.catalog, source, timeout=timeout)

    async def start(self) -> None:
        """
        Load catalogs and evaluations.
        
        An unreadable source leaves the workbench empty instead of failing.
        """
        try:
            await self.catalog.load()
        except SourceUnavailable as e:
            logger.warning("Catalog unavailable, continuing with empty catalog", error=str(e))

        try:
            await self.repository.load()
        except SourceUnavailable as e:
            logger.warning("Evaluations unavailable, continuing with none", error=str(e))

    async def run_selected(self, prompt: str, user_input: str) -> Evaluation:
        """Run the currently selected evaluation and refresh the selection view."""
        view = self.selection.current()
        if view is None:
            raise InvalidInput("evaluation", "No evaluation selected")
        evaluation = await self.runner.run(view.evaluation.id, prompt, user_input)
        self.selection.refresh()
        return evaluation

    async def select(self, eval_id: str) -> EvaluationView | None:
        return await self.selection.select(eval_id)

    async def compare(
        self,
        model_ids: list[str],
        prompt: str,
        user_input: str,
    ) -> ComparisonReport:
        return await self.comparisons.compare(model_ids, prompt, user_input)

    async def close(self) -> None:
        await self.source.close()


def create_data_source(settings: Settings | None = None) -> BaseDataSource:
    """Build the data source named in settings."""
    settings = settings or get_settings()
    if settings.data_source == "http":
        return HttpDataSource(
            base_url=settings.api_base_url,
            requests_per_minute=settings.requests_per_minute,
        )
    return FixtureDataSource(file_path=settings.fixture_path)


def create_workbench(settings: Settings | None = None) -> Workbench:
    settings = settings or get_settings()
    return Workbench(
        create_data_source(settings),
        timeout=settings.fetch_timeout_seconds,
    )
