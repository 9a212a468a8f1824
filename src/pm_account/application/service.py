"""AccountService: balances and deposits on the value ledger."""

from src.pm_account.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
)
from src.pm_clearing.infrastructure.ledger import ValueLedger


class AccountService:
    def __init__(self, ledger: ValueLedger) -> None:
        self._ledger = ledger

    def get_balance(self, account: str) -> BalanceResponse:
        return BalanceResponse.from_balance(account, self._ledger.balance_of(account))

    def deposit(self, account: str, amount: int) -> BalanceResponse:
        balance = self._ledger.deposit(account, amount)
        return BalanceResponse.from_balance(account, balance)

    def list_ledger(self, account: str, limit: int) -> LedgerResponse:
        entries = self._ledger.entries_for(account)[-limit:]
        return LedgerResponse(items=[LedgerEntryItem.from_domain(e) for e in reversed(entries)])
