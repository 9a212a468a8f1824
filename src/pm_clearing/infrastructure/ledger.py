"""In-memory value ledger: account balances plus an append-only entry log.

Market escrows are ordinary accounts named by escrow_account(). Every
transfer writes one entry per side. atomic() makes a group of transfers
all-or-nothing.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from src.pm_common.enums import LedgerEntryType
from src.pm_common.errors import InsufficientFundsError, InvalidAmountError

logger = logging.getLogger(__name__)

# Called after each transfer with (from_account, to_account, amount).
TransferHook = Callable[[str, str, int], None]


def escrow_account(market_id: str) -> str:
    return f"market:{market_id}"


@dataclass(frozen=True)
class LedgerEntry:
    id: int
    account: str
    entry_type: LedgerEntryType
    amount: int  # positive=income negative=expense
    balance_after: int
    market_id: str | None


class ValueLedger:
    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._entries: list[LedgerEntry] = []
        self._lock = threading.RLock()
        self._hooks: list[TransferHook] = []

    def add_transfer_hook(self, hook: TransferHook) -> None:
        self._hooks.append(hook)

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    def entries_for(self, account: str) -> list[LedgerEntry]:
        with self._lock:
            return [e for e in self._entries if e.account == account]

    def deposit(self, account: str, amount: int) -> int:
        if amount <= 0:
            raise InvalidAmountError(amount)
        with self._lock:
            balance = self._balances.get(account, 0) + amount
            self._balances[account] = balance
            self._write(account, LedgerEntryType.DEPOSIT, amount, None)
        logger.info("Deposit: account=%s amount=%d balance=%d", account, amount, balance)
        return balance

    def transfer(
        self,
        from_account: str,
        to_account: str,
        amount: int,
        entry_type: LedgerEntryType,
        market_id: str | None = None,
    ) -> None:
        """Move amount between accounts; zero is a no-op, negative is rejected."""
        if amount < 0:
            raise InvalidAmountError(amount)
        if amount == 0:
            return
        with self._lock:
            available = self._balances.get(from_account, 0)
            if available < amount:
                raise InsufficientFundsError(from_account, amount, available)
            self._balances[from_account] = available - amount
            self._balances[to_account] = self._balances.get(to_account, 0) + amount
            self._write(from_account, entry_type, -amount, market_id)
            self._write(to_account, entry_type, amount, market_id)
        logger.debug("Transfer %s: %s -> %s amount=%d", entry_type.value, from_account, to_account, amount)
        for hook in self._hooks:
            hook(from_account, to_account, amount)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Restore balances and drop entries written in the block if it raises."""
        with self._lock:
            balances = dict(self._balances)
            entry_count = len(self._entries)
            try:
                yield
            except BaseException:
                self._balances = balances
                del self._entries[entry_count:]
                logger.debug("Ledger rolled back to %d entries", entry_count)
                raise

    def _write(
        self, account: str, entry_type: LedgerEntryType, amount: int, market_id: str | None
    ) -> None:
        self._entries.append(
            LedgerEntry(
                id=len(self._entries) + 1,
                account=account,
                entry_type=entry_type,
                amount=amount,
                balance_after=self._balances[account],
                market_id=market_id,
            )
        )
