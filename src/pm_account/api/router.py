"""pm_account REST API: 3 endpoints, all require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.container import Container, get_container
from src.pm_account.application.schemas import DepositRequest
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_actor

router = APIRouter(prefix="/account", tags=["account"])


@router.get("/balance")
async def get_balance(
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    data = container.accounts.get_balance(actor)
    return success_response(data.model_dump(), request)


@router.post("/deposit")
async def deposit(
    body: DepositRequest,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    data = container.accounts.deposit(actor, body.amount)
    return success_response(data.model_dump(), request)


@router.get("/ledger")
async def list_ledger(
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = container.accounts.list_ledger(actor, limit)
    return success_response(data.model_dump(), request)
