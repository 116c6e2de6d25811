"""FastAPI routes for the evaluation workbench."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, Response
import structlog

from evallab.api.schemas import (
    ComparisonRequest,
    CostEstimateResponse,
    ExportFormat,
    HealthResponse,
    RunRequest,
)
from evallab.errors import NotFound
from evallab.models import (
    ComparisonReport,
    ComparisonResult,
    Evaluation,
    EvaluationFilter,
    EvaluationView,
    Model,
    Project,
    TestResult,
)
from evallab.workbench import Workbench

logger = structlog.get_logger()
router = APIRouter()


def get_workbench(request: Request) -> Workbench:
    """The session created by the application lifespan."""
    return request.app.state.workbench


def _require_evaluation(workbench: Workbench, eval_id: str) -> None:
    if eval_id not in workbench.repository:
        raise NotFound("Evaluation", eval_id)


@router.get("/health", response_model=HealthResponse)
async def health_check(workbench: Workbench = Depends(get_workbench)):
    """Health check endpoint."""
    return HealthResponse(
        source=workbench.source.source_name,
        projects=len(workbench.catalog.projects),
        evaluations=len(workbench.repository),
    )


# ============================================
# Catalog
# ============================================

@router.get("/projects", response_model=list[Project])
async def list_projects(workbench: Workbench = Depends(get_workbench)):
    return workbench.catalog.projects


@router.get("/projects/{project_id}", response_model=Project)
async def get_project(project_id: str, workbench: Workbench = Depends(get_workbench)):
    project = workbench.catalog.get_project(project_id)
    if project is None:
        raise NotFound("Project", project_id)
    return project


@router.get("/models", response_model=list[Model])
async def list_models(workbench: Workbench = Depends(get_workbench)):
    """List available models with pricing."""
    return workbench.catalog.models


@router.get("/models/{model_id}/cost-estimate", response_model=CostEstimateResponse)
async def estimate_cost(
    model_id: str,
    evaluations: int = Query(default=100, ge=1),
    tokens: int = Query(default=500, ge=1),
    workbench: Workbench = Depends(get_workbench),
):
    """Estimate spend for a batch of evaluations on one model."""
    cost = workbench.catalog.estimate_cost(model_id, evaluations, tokens)
    return CostEstimateResponse(
        model_id=model_id,
        evaluations=evaluations,
        tokens_per_evaluation=tokens,
        total_tokens=evaluations * tokens,
        estimated_cost_usd=cost,
    )


@router.post("/models/{model_id}/run", response_model=ComparisonResult)
async def run_model(
    model_id: str,
    body: RunRequest,
    workbench: Workbench = Depends(get_workbench),
):
    """Run one prompt/input pair through a single model."""
    return await workbench.comparisons.run_model(model_id, body.prompt, body.user_input)


# ============================================
# Evaluations
# ============================================

@router.get("/evaluations", response_model=list[Evaluation])
async def list_evaluations(
    project_id: str | None = None,
    status: str | None = None,
    model: str | None = None,
    workbench: Workbench = Depends(get_workbench),
):
    """List evaluations, filtered by project, status and model."""
    filters = EvaluationFilter(project_id=project_id, status=status, model=model)
    return workbench.repository.list_evaluations(filters)


@router.get("/evaluations/{eval_id}", response_model=Evaluation)
async def get_evaluation(eval_id: str, workbench: Workbench = Depends(get_workbench)):
    return workbench.repository.get(eval_id)


@router.get("/evaluations/{eval_id}/results", response_model=list[TestResult])
async def get_test_results(eval_id: str, workbench: Workbench = Depends(get_workbench)):
    _require_evaluation(workbench, eval_id)
    return await workbench.repository.test_results(eval_id)


@router.get("/evaluations/{eval_id}/logs", response_class=PlainTextResponse)
async def get_logs(eval_id: str, workbench: Workbench = Depends(get_workbench)):
    _require_evaluation(workbench, eval_id)
    return PlainTextResponse(await workbench.repository.logs(eval_id))


@router.get("/evaluations/{eval_id}/judge")
async def get_judge_score(eval_id: str, workbench: Workbench = Depends(get_workbench)):
    """Judge scores in flat form, or null if the evaluation was not judged."""
    _require_evaluation(workbench, eval_id)
    score = await workbench.repository.judge_score(eval_id)
    return score.to_flat() if score else None


@router.get("/evaluations/{eval_id}/view", response_model=EvaluationView)
async def get_evaluation_view(eval_id: str, workbench: Workbench = Depends(get_workbench)):
    """Evaluation with its results, logs and judge score; leaves the selection alone."""
    return await workbench.selection.compose(eval_id)


@router.post("/evaluations/{eval_id}/run", response_model=Evaluation)
async def run_evaluation(
    eval_id: str,
    body: RunRequest,
    workbench: Workbench = Depends(get_workbench),
):
    """Run an evaluation and return it with its new output and status."""
    return await workbench.runner.run(eval_id, body.prompt, body.user_input)


# ============================================
# Comparisons
# ============================================

@router.post("/comparisons", response_model=ComparisonReport)
async def run_comparison(
    body: ComparisonRequest,
    workbench: Workbench = Depends(get_workbench),
):
    """Compare 2-5 models on one prompt/input pair."""
    return await workbench.compare(body.models, body.prompt, body.user_input)


@router.post("/comparisons/export")
async def export_comparison(
    body: ComparisonRequest,
    export_format: ExportFormat = Query(default="csv", alias="format"),
    workbench: Workbench = Depends(get_workbench),
):
    """Run a comparison and download the results as CSV or JSON."""
    report = await workbench.compare(body.models, body.prompt, body.user_input)
    if export_format == "json":
        return Response(
            content=report.to_json(),
            media_type="application/json",
            headers={"Content-Disposition": 'attachment; filename="comparison.json"'},
        )
    return Response(
        content=report.to_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="comparison.csv"'},
    )
