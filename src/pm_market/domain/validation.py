"""Input validation for market identifiers, evidence references and timestamps."""

import re

from src.pm_common.errors import (
    InvalidEvidenceError,
    InvalidMarketIdError,
    InvalidTimestampError,
)

_MARKET_ID_RE = re.compile(r"^[0-9a-f]{64}$")

MAX_EVIDENCE_LENGTH = 46  # IPFS CIDv0


def validate_market_id(market_id: str) -> None:
    if not _MARKET_ID_RE.match(market_id):
        raise InvalidMarketIdError(market_id)


def validate_evidence(evidence_ref: str) -> None:
    if not 1 <= len(evidence_ref) <= MAX_EVIDENCE_LENGTH:
        raise InvalidEvidenceError()


def validate_milestone(previous: int, now: int, created_at: int, max_lifetime: int) -> None:
    """A lifecycle timestamp may not precede the previous milestone and must fall
    within [created_at, created_at + max_lifetime].

    Equal timestamps are accepted: two milestones can land in the same second.
    """
    if now < previous:
        raise InvalidTimestampError(f"{now} precedes previous milestone {previous}")
    if now < created_at or now > created_at + max_lifetime:
        raise InvalidTimestampError(
            f"{now} outside market window [{created_at}, {created_at + max_lifetime}]"
        )
