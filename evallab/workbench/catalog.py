"""Catalog store for projects and models."""

import asyncio

import structlog

from evallab.adapters.base import BaseDataSource
from evallab.errors import NotFound, SourceUnavailable
from evallab.models.catalog import Catalog, Model, Project

logger = structlog.get_logger()

UNKNOWN_PROJECT = "Unknown Project"


class CatalogStore:
    """
    Read-only reference data, fetched once per session.
    
    If loading fails the store stays empty; callers treat the catalogs as
    empty rather than crashing.
    """

    def __init__(self, source: BaseDataSource, timeout: float | None = None):
        self.source = source
        self.timeout = timeout
        self._catalog: Catalog | None = None
        self._projects: dict[str, Project] = {}
        self._models: dict[str, Model] = {}

    @property
    def loaded(self) -> bool:
        return self._catalog is not None

    async def load(self) -> Catalog:
        """
        Fetch projects and models, once.
        
        Raises:
            SourceUnavailable: If the backing source cannot be read
        """
        if self._catalog is not None:
            return self._catalog

        try:
            catalog = await asyncio.wait_for(self.source.fetch_catalogs(), self.timeout)
        except asyncio.TimeoutError as e:
            raise SourceUnavailable(self.source.source_name, "catalog fetch timed out") from e

        self._catalog = catalog
        self._projects = {p.id: p for p in catalog.projects}
        self._models = {m.id: m for m in catalog.models}
        logger.info(
            "Catalog loaded",
            source=self.source.source_name,
            projects=len(self._projects),
            models=len(self._models),
        )
        return catalog

    @property
    def projects(self) -> list[Project]:
        return list(self._projects.values())

    @property
    def models(self) -> list[Model]:
        return list(self._models.values())

    def get_project(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    def project_name(self, project_id: str) -> str:
        """Project display name, or "Unknown Project" if not found."""
        project = self._projects.get(project_id)
        return project.name if project else UNKNOWN_PROJECT

    def get_model(self, model_id: str) -> Model | None:
        return self._models.get(model_id)

    def require_model(self, model_id: str) -> Model:
        model = self._models.get(model_id)
        if model is None:
            raise NotFound("Model", model_id)
        return model

    def estimate_cost(
        self,
        model_id: str,
        evaluations: int = 100,
        tokens_per_evaluation: int = 500,
    ) -> float:
        """Estimate spend for running evaluations against a model."""
        return self.require_model(model_id).estimate_cost(evaluations, tokens_per_evaluation)
