"""VotingService: the vote ledger and the aggregator entry points.

Individual votes are create-once records; their existence is the duplicate
guard. Aggregated tallies are only accepted from the configured aggregator
identity and may drive the proposal or dispute transition.
"""

import logging

from src.pm_admin.domain.global_config import ConfigStore
from src.pm_common.enums import EventType, MarketState, VoteKind
from src.pm_common.errors import (
    DuplicateVoteError,
    InvalidAmountError,
    InvalidStateForVotingError,
    UnauthorizedError,
)
from src.pm_market.application.service import apply_approval, apply_finalization
from src.pm_market.application.unit_of_work import MarketGuard
from src.pm_market.domain.models import VoteRecord, VoteTally
from src.pm_market.domain.repository import VoteRepositoryProtocol
from src.pm_voting.domain.aggregator import (
    AggregationResult,
    meets_threshold,
    rate_bps,
    resolve_dispute,
)

logger = logging.getLogger(__name__)

_OPEN_STATE = {
    VoteKind.PROPOSAL: MarketState.PROPOSED,
    VoteKind.DISPUTE: MarketState.DISPUTED,
}


class VotingService:
    def __init__(
        self,
        guard: MarketGuard,
        votes: VoteRepositoryProtocol,
        config: ConfigStore,
        max_lifetime: int,
    ) -> None:
        self._guard = guard
        self._votes = votes
        self._config = config
        self._max_lifetime = max_lifetime

    # ------------------------------------------------------------------
    # Vote ledger
    # ------------------------------------------------------------------

    def submit_proposal_vote(self, market_id: str, voter: str, vote: bool) -> VoteRecord:
        """Record a like (True) or dislike (False) on a PROPOSED market."""
        return self._submit(market_id, voter, VoteKind.PROPOSAL, vote)

    def submit_dispute_vote(self, market_id: str, voter: str, vote: bool) -> VoteRecord:
        """Record agreement (True) or disagreement (False) with an open dispute."""
        return self._submit(market_id, voter, VoteKind.DISPUTE, vote)

    def _submit(self, market_id: str, voter: str, kind: VoteKind, vote: bool) -> VoteRecord:
        with self._guard.operation(market_id) as uow:
            market = uow.market
            if market.state != _OPEN_STATE[kind]:
                raise InvalidStateForVotingError(market_id, market.state.value)
            if self._votes.exists(market_id, voter, kind):
                raise DuplicateVoteError(market_id, voter, kind.value)
            record = VoteRecord(
                market_id=market_id, voter=voter, kind=kind, vote=vote, voted_at=uow.now
            )
            self._votes.add(record)
            uow.emit(EventType.VOTE_SUBMITTED, voter=voter, kind=kind.value, vote=vote)
        logger.debug("Vote: market=%s voter=%s kind=%s vote=%s", market_id, voter, kind.value, vote)
        return record

    def tally(self, market_id: str, kind: VoteKind) -> VoteTally:
        tally = VoteTally()
        for record in self._votes.list_for_market(market_id, kind):
            if record.vote:
                tally.votes_for += 1
            else:
                tally.votes_against += 1
            tally.voters.append(record.voter)
        return tally

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def _require_aggregator(self, caller: str, *counts: int) -> None:
        if caller != self._config.current.aggregator:
            raise UnauthorizedError(f"{caller} is not the vote aggregator")
        for count in counts:
            if count < 0:
                raise InvalidAmountError(count)

    def aggregate_proposal_votes(
        self, caller: str, market_id: str, likes: int, dislikes: int
    ) -> AggregationResult:
        """Record proposal tallies; approve the market once the threshold is met."""
        self._require_aggregator(caller, likes, dislikes)
        threshold = self._config.current.proposal_approval_threshold
        with self._guard.operation(market_id) as uow:
            market = uow.market
            if market.state != MarketState.PROPOSED:
                raise InvalidStateForVotingError(market_id, market.state.value)
            market.proposal_likes = likes
            market.proposal_dislikes = dislikes
            market.proposal_total_votes = likes + dislikes
            rate = rate_bps(likes, market.proposal_total_votes)
            passed = meets_threshold(likes, market.proposal_total_votes, threshold)
            if passed:
                apply_approval(uow, self._max_lifetime)
            uow.emit(
                EventType.VOTES_AGGREGATED,
                kind=VoteKind.PROPOSAL.value,
                votes_for=likes,
                votes_against=dislikes,
                rate_bps=rate,
                passed=passed,
            )
        logger.info(
            "Proposal votes aggregated: market=%s %d/%d = %d bps (threshold %d) passed=%s",
            market_id, likes, likes + dislikes, rate, threshold, passed,
        )
        return AggregationResult(
            market_id=market_id,
            votes_for=likes,
            votes_against=dislikes,
            total_votes=likes + dislikes,
            rate_bps=rate,
            threshold_bps=threshold,
            passed=passed,
            state=market.state.value,
        )

    def aggregate_dispute_votes(
        self, caller: str, market_id: str, agree: int, disagree: int
    ) -> AggregationResult:
        """Record dispute tallies; a successful dispute finalizes with the flipped outcome.

        Below threshold the market stays DISPUTED and may be re-aggregated or
        finalized with the proposed outcome standing.
        """
        self._require_aggregator(caller, agree, disagree)
        threshold = self._config.current.dispute_success_threshold
        with self._guard.operation(market_id) as uow:
            market = uow.market
            if market.state != MarketState.DISPUTED:
                raise InvalidStateForVotingError(market_id, market.state.value)
            market.dispute_agree = agree
            market.dispute_disagree = disagree
            market.dispute_total_votes = agree + disagree
            rate = rate_bps(agree, market.dispute_total_votes)
            passed = meets_threshold(agree, market.dispute_total_votes, threshold)
            final_outcome = None
            if passed:
                outcome = resolve_dispute(
                    market.proposed_outcome, agree, market.dispute_total_votes, threshold
                )
                apply_finalization(uow, outcome, self._max_lifetime)
                final_outcome = outcome.value
            uow.emit(
                EventType.VOTES_AGGREGATED,
                kind=VoteKind.DISPUTE.value,
                votes_for=agree,
                votes_against=disagree,
                rate_bps=rate,
                passed=passed,
            )
        logger.info(
            "Dispute votes aggregated: market=%s %d/%d = %d bps (threshold %d) passed=%s",
            market_id, agree, agree + disagree, rate, threshold, passed,
        )
        return AggregationResult(
            market_id=market_id,
            votes_for=agree,
            votes_against=disagree,
            total_votes=agree + disagree,
            rate_bps=rate,
            threshold_bps=threshold,
            passed=passed,
            state=market.state.value,
            final_outcome=final_outcome,
        )
