"""Pydantic schemas for pm_admin API."""

from pydantic import BaseModel, Field


class ConfigUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their current value."""

    protocol_fee_wallet: str | None = None
    aggregator: str | None = None
    protocol_fee_bps: int | None = Field(None, ge=0)
    resolver_fee_bps: int | None = Field(None, ge=0)
    lp_fee_bps: int | None = Field(None, ge=0)
    proposal_approval_threshold: int | None = Field(None, ge=0)
    dispute_success_threshold: int | None = Field(None, ge=0)
    min_resolution_delay: int | None = None
    dispute_period: int | None = None
    min_resolver_reputation: int | None = Field(None, ge=0)

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class PauseResponse(BaseModel):
    is_paused: bool


class JobReportResponse(BaseModel):
    job: str
    processed: int
    succeeded: list[str]
    skipped: int
    errors: dict[str, int]
    duration_ms: float
