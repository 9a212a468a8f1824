"""Admin REST API: global config, emergency pause and on-demand monitor runs.

Every endpoint except GET /config requires the admin identity.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.container import Container, get_container
from src.pm_admin.application.schemas import (
    ConfigUpdateRequest,
    JobReportResponse,
    PauseResponse,
)
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_actor
from src.pm_monitor.jobs import JobReport

router = APIRouter(prefix="/admin", tags=["admin"])


def _report(job: str, report: JobReport) -> dict:
    return JobReportResponse(
        job=job,
        processed=report.processed,
        succeeded=report.succeeded,
        skipped=report.skipped,
        errors=report.errors,
        duration_ms=report.duration_ms,
    ).model_dump()


@router.get("/config")
async def get_global_config(
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    return success_response(container.admin.get_global_config().to_dict(), request)


@router.put("/config")
async def update_global_config(
    body: ConfigUpdateRequest,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    updated = container.admin.update_global_config(actor, body.changes())
    return success_response(updated.to_dict(), request)


@router.post("/pause")
async def emergency_pause(
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    is_paused = container.admin.emergency_pause(actor)
    return success_response(PauseResponse(is_paused=is_paused).model_dump(), request)


@router.post("/monitor/finalize")
async def run_finalizer(
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    container.config.require_admin(actor)
    report = container.finalizer.run(container.clock())
    return success_response(_report(container.finalizer.name, report), request)


@router.post("/monitor/aggregate-votes")
async def run_vote_aggregator(
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    container.config.require_admin(actor)
    report = container.vote_aggregator.run(container.clock())
    return success_response(_report(container.vote_aggregator.name, report), request)
