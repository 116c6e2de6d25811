"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from evallab.api.routes import router
from evallab.api.schemas import ErrorResponse
from evallab.config import get_settings
from evallab.errors import (
    AlreadyRunning,
    ArtifactUnavailable,
    DatasetImportFailed,
    InvalidInput,
    InvalidSelection,
    NotFound,
    RunFailed,
    SourceUnavailable,
    WorkbenchError,
)
from evallab.logging_setup import configure_logging
from evallab.workbench import Workbench, create_workbench

ERROR_STATUS = {
    NotFound: 404,
    InvalidInput: 422,
    InvalidSelection: 422,
    AlreadyRunning: 409,
    SourceUnavailable: 502,
    ArtifactUnavailable: 502,
    RunFailed: 502,
    DatasetImportFailed: 502,
}


def status_for(error: WorkbenchError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status_code
    return 500


async def workbench_error_handler(request: Request, exc: WorkbenchError) -> JSONResponse:
    """Turn workbench errors into JSON bodies with a matching status code."""
    status_code = status_for(exc)
    if status_code >= 500:
        structlog.get_logger().warning(
            "Request failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
    )


def create_app(workbench: Workbench | None = None) -> FastAPI:
    """Build the API application around a workbench session."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        configure_logging()
        logger = structlog.get_logger()
        session = workbench or create_workbench()
        await session.start()
        app.state.workbench = session
        logger.info("Starting EvalLab API", source=session.source.source_name)
        yield
        logger.info("Shutting down EvalLab API")
        await session.close()

    app = FastAPI(
        title="EvalLab Workbench",
        description="""
    Manage LLM evaluation projects: browse evaluation runs, inspect test
    results, logs and judge scores, run evaluations and compare models.

    ## Workflow

    1. GET `/api/evaluations` to list evaluations (filter by project, status, model)
    2. GET `/api/evaluations/{id}/view` for results, logs and judge scores
    3. POST `/api/evaluations/{id}/run` to run an evaluation
    4. POST `/api/comparisons` to compare 2-5 models
    """,
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(WorkbenchError, workbench_error_handler)
    app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "EvalLab Workbench",
            "version": "0.1.0",
            "docs": "/docs",
            "health": "/api/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host="0.0.0.0", port=8080, log_level=settings.log_level.lower())
