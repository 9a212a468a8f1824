"""Vote threshold arithmetic shared by proposal approval and dispute resolution."""

from dataclasses import dataclass

from src.pm_common.enums import Outcome

BPS_SCALE = 10_000


def rate_bps(votes_for: int, total_votes: int) -> int:
    """votes_for / total in basis points, floored; 0 when nobody voted."""
    if total_votes == 0:
        return 0
    return votes_for * BPS_SCALE // total_votes


def meets_threshold(votes_for: int, total_votes: int, threshold_bps: int) -> bool:
    """Inclusive comparison; zero votes never pass."""
    return total_votes > 0 and rate_bps(votes_for, total_votes) >= threshold_bps


def resolve_dispute(
    proposed: Outcome, agree: int, total_votes: int, threshold_bps: int
) -> Outcome:
    """A successful dispute flips YES<->NO (INVALID stays INVALID); otherwise the proposal stands."""
    if meets_threshold(agree, total_votes, threshold_bps):
        return proposed.flipped()
    return proposed


@dataclass(frozen=True)
class AggregationResult:
    market_id: str
    votes_for: int
    votes_against: int
    total_votes: int
    rate_bps: int
    threshold_bps: int
    passed: bool
    state: str
    final_outcome: str | None = None
