"""Auth API router: identity introspection for the bearer token.

Tokens are minted by the external identity provider; this service only
verifies them and reports the privileged roles the subject holds.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.container import Container, get_container
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_actor

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=ApiResponse, summary="Current actor and roles")
async def me(
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    cfg = container.config.current
    roles = []
    if actor == cfg.admin:
        roles.append("admin")
    if actor == cfg.aggregator:
        roles.append("aggregator")
    return success_response({"actor": actor, "roles": roles}, request)
