"""pm_market REST API: market lifecycle endpoints.

Reads are public; every transition requires a JWT-identified caller.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from src.container import Container, get_container
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_actor
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    FinalizeRequest,
    MarketDetail,
    PricesResponse,
    ResolveRequest,
    WithdrawResponse,
)

router = APIRouter(prefix="/markets", tags=["markets"])

Actor = Annotated[str, Depends(get_current_actor)]
Core = Annotated[Container, Depends(get_container)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_market(
    body: CreateMarketRequest, actor: Actor, container: Core, request: Request
) -> ApiResponse:
    market = container.lifecycle.create_market(
        actor, body.market_id, body.b_parameter, body.initial_liquidity, body.evidence_ref
    )
    return success_response(MarketDetail.from_domain(market).model_dump(), request)


@router.get("/{market_id}")
async def get_market(market_id: str, container: Core, request: Request) -> ApiResponse:
    market = container.lifecycle.get_market(market_id)
    return success_response(MarketDetail.from_domain(market).model_dump(), request)


@router.get("/{market_id}/prices")
async def get_prices(market_id: str, container: Core, request: Request) -> ApiResponse:
    prices = container.lifecycle.get_prices(market_id)
    return success_response(PricesResponse.from_prices(market_id, prices).model_dump(), request)


@router.post("/{market_id}/approve")
async def approve_proposal(
    market_id: str, actor: Actor, container: Core, request: Request
) -> ApiResponse:
    market = container.lifecycle.approve_proposal(actor, market_id)
    return success_response(MarketDetail.from_domain(market).model_dump(), request)


@router.post("/{market_id}/activate")
async def activate_market(
    market_id: str, actor: Actor, container: Core, request: Request
) -> ApiResponse:
    market = container.lifecycle.activate_market(actor, market_id)
    return success_response(MarketDetail.from_domain(market).model_dump(), request)


@router.post("/{market_id}/resolve")
async def resolve_market(
    market_id: str, body: ResolveRequest, actor: Actor, container: Core, request: Request
) -> ApiResponse:
    market = container.lifecycle.resolve_market(
        actor, market_id, body.outcome, body.evidence_ref, body.resolver_reputation
    )
    return success_response(MarketDetail.from_domain(market).model_dump(), request)


@router.post("/{market_id}/dispute")
async def initiate_dispute(
    market_id: str, actor: Actor, container: Core, request: Request
) -> ApiResponse:
    market = container.lifecycle.initiate_dispute(actor, market_id)
    return success_response(MarketDetail.from_domain(market).model_dump(), request)


@router.post("/{market_id}/finalize")
async def finalize_market(
    market_id: str,
    actor: Actor,
    container: Core,
    request: Request,
    body: FinalizeRequest | None = None,
) -> ApiResponse:
    body = body or FinalizeRequest()
    market = container.lifecycle.finalize_market(
        actor, market_id, body.dispute_agree, body.dispute_disagree
    )
    return success_response(MarketDetail.from_domain(market).model_dump(), request)


@router.post("/{market_id}/cancel")
async def cancel_market(
    market_id: str, actor: Actor, container: Core, request: Request
) -> ApiResponse:
    market = container.lifecycle.cancel_market(actor, market_id)
    return success_response(MarketDetail.from_domain(market).model_dump(), request)


@router.post("/{market_id}/withdraw")
async def withdraw_liquidity(
    market_id: str, actor: Actor, container: Core, request: Request
) -> ApiResponse:
    amount = container.lifecycle.withdraw_liquidity(actor, market_id)
    return success_response(WithdrawResponse(market_id=market_id, amount=amount).model_dump(), request)
