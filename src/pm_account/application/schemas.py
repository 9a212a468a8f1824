"""Pydantic schemas for pm_account API."""

from pydantic import BaseModel, Field

from src.pm_clearing.infrastructure.ledger import LedgerEntry
from src.pm_math.fixed_point import to_display

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DepositRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount to deposit in value units")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    account: str
    balance: int
    balance_display: str

    @classmethod
    def from_balance(cls, account: str, balance: int) -> "BalanceResponse":
        return cls(account=account, balance=balance, balance_display=to_display(balance))


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    balance_after: int
    market_id: str | None

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=entry.id,
            entry_type=entry.entry_type.value,
            amount=entry.amount,
            balance_after=entry.balance_after,
            market_id=entry.market_id,
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
