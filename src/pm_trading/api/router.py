"""pm_trading REST API: buy, sell, claim and position lookup. JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.container import Container, get_container
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_actor
from src.pm_trading.application.schemas import (
    BuyRequest,
    ClaimResponse,
    PositionResponse,
    SellRequest,
    TradeResponse,
)

router = APIRouter(prefix="/markets/{market_id}", tags=["trading"])


@router.post("/buy")
async def buy_shares(
    market_id: str,
    body: BuyRequest,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    result = container.trading.buy_shares(
        actor, market_id, body.side, body.target_cost, body.max_total_cost
    )
    return success_response(TradeResponse.from_result(result).model_dump(), request)


@router.post("/sell")
async def sell_shares(
    market_id: str,
    body: SellRequest,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    result = container.trading.sell_shares(
        actor, market_id, body.side, body.shares, body.min_proceeds
    )
    return success_response(TradeResponse.from_result(result).model_dump(), request)


@router.post("/claim")
async def claim_winnings(
    market_id: str,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    result = container.trading.claim_winnings(actor, market_id)
    return success_response(ClaimResponse.from_result(result).model_dump(), request)


@router.get("/position")
async def get_position(
    market_id: str,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    position = container.trading.get_position(market_id, actor)
    return success_response(PositionResponse.from_domain(position).model_dump(), request)
