"""pm_voting REST API: individual votes, tallies and aggregator submissions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from src.container import Container, get_container
from src.pm_common.enums import VoteKind
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_actor
from src.pm_voting.application.schemas import (
    AggregateRequest,
    AggregationResponse,
    TallyResponse,
    VoteRequest,
    VoteResponse,
)

router = APIRouter(prefix="/markets/{market_id}/votes", tags=["votes"])


@router.post("/proposal", status_code=status.HTTP_201_CREATED)
async def submit_proposal_vote(
    market_id: str,
    body: VoteRequest,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    record = container.voting.submit_proposal_vote(market_id, actor, body.vote)
    return success_response(VoteResponse.from_domain(record).model_dump(), request)


@router.post("/dispute", status_code=status.HTTP_201_CREATED)
async def submit_dispute_vote(
    market_id: str,
    body: VoteRequest,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    record = container.voting.submit_dispute_vote(market_id, actor, body.vote)
    return success_response(VoteResponse.from_domain(record).model_dump(), request)


@router.get("/{kind}")
async def get_tally(
    market_id: str,
    kind: VoteKind,
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    tally = container.voting.tally(market_id, kind)
    return success_response(TallyResponse.from_domain(market_id, kind.value, tally).model_dump(), request)


@router.post("/proposal/aggregate")
async def aggregate_proposal_votes(
    market_id: str,
    body: AggregateRequest,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    result = container.voting.aggregate_proposal_votes(
        actor, market_id, body.votes_for, body.votes_against
    )
    return success_response(AggregationResponse.from_domain(result).model_dump(), request)


@router.post("/dispute/aggregate")
async def aggregate_dispute_votes(
    market_id: str,
    body: AggregateRequest,
    actor: Annotated[str, Depends(get_current_actor)],
    container: Annotated[Container, Depends(get_container)],
    request: Request,
) -> ApiResponse:
    result = container.voting.aggregate_dispute_votes(
        actor, market_id, body.votes_for, body.votes_against
    )
    return success_response(AggregationResponse.from_domain(result).model_dump(), request)
