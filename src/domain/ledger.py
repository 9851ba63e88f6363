from __future__ import annotations

from typing import Iterator

from .account import Account, AccountSnapshot
from .amount import Amount, AmountOverflowError
from .disputes import DisputeTracker
from .outcome import Outcome
from .transactions import ClientId


class AccountLedger:
    """Per-run owner of every client account and of the dispute tracker."""

    def __init__(self, *, disputes: DisputeTracker | None = None) -> None:
        self._accounts: dict[ClientId, Account] = {}
        self.disputes = disputes if disputes is not None else DisputeTracker()

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._accounts

    def account(self, client_id: ClientId) -> Account:
        """Return the client's account, opening an empty one on first reference."""
        account = self._accounts.get(client_id)
        if account is None:
            account = Account(client_id=client_id)
            self._accounts[client_id] = account
        return account

    def deposit(self, account: Account, amount: Amount) -> Outcome:
        if not amount.is_positive():
            return Outcome.fatal(f"deposit amount must be positive, got {amount}")
        if account.locked:
            return Outcome.ignored("the account is locked")
        try:
            available = account.available + amount
            # total must stay representable as well
            available + account.held
        except AmountOverflowError as err:
            return Outcome.fatal(str(err))
        account.available = available
        return Outcome.applied()

    def withdraw(self, account: Account, amount: Amount) -> Outcome:
        if not amount.is_positive():
            return Outcome.fatal(f"withdrawal amount must be positive, got {amount}")
        if account.locked:
            return Outcome.ignored("the account is locked")
        if account.available < amount:
            return Outcome.ignored(f"insufficient funds: available {account.available}, requested {amount}")
        account.available = account.available - amount
        return Outcome.applied()

    def accounts(self) -> Iterator[Account]:
        for client_id in sorted(self._accounts):
            yield self._accounts[client_id]

    def snapshots(self) -> Iterator[AccountSnapshot]:
        """Yield rounded snapshots in ascending client id order."""
        for account in self.accounts():
            yield account.snapshot()
