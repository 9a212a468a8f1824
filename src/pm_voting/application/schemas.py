"""Pydantic schemas for pm_voting API."""

from dataclasses import asdict

from pydantic import BaseModel, Field

from src.pm_market.domain.models import VoteRecord, VoteTally
from src.pm_voting.domain.aggregator import AggregationResult


class VoteRequest(BaseModel):
    vote: bool = Field(..., description="Proposal: like/dislike. Dispute: agree/disagree")


class AggregateRequest(BaseModel):
    votes_for: int = Field(..., ge=0)
    votes_against: int = Field(..., ge=0)


class VoteResponse(BaseModel):
    market_id: str
    voter: str
    kind: str
    vote: bool
    voted_at: int

    @classmethod
    def from_domain(cls, record: VoteRecord) -> "VoteResponse":
        return cls(
            market_id=record.market_id,
            voter=record.voter,
            kind=record.kind.value,
            vote=record.vote,
            voted_at=record.voted_at,
        )


class TallyResponse(BaseModel):
    market_id: str
    kind: str
    votes_for: int
    votes_against: int
    total: int

    @classmethod
    def from_domain(cls, market_id: str, kind: str, tally: VoteTally) -> "TallyResponse":
        return cls(
            market_id=market_id,
            kind=kind,
            votes_for=tally.votes_for,
            votes_against=tally.votes_against,
            total=tally.total,
        )


class AggregationResponse(BaseModel):
    market_id: str
    votes_for: int
    votes_against: int
    total_votes: int
    rate_bps: int
    threshold_bps: int
    passed: bool
    state: str
    final_outcome: str | None

    @classmethod
    def from_domain(cls, result: AggregationResult) -> "AggregationResponse":
        return cls(**asdict(result))
