from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .account import Account
from .amount import Amount
from .outcome import Outcome
from .transactions import ClientId, TransactionId, TransactionType


class DisputeState(StrEnum):
    NORMAL = "NORMAL"
    DISPUTED = "DISPUTED"
    CHARGED_BACK = "CHARGED_BACK"


@dataclass
class TrackedTransaction:
    client_id: ClientId
    kind: TransactionType
    amount: Amount
    state: DisputeState = DisputeState.NORMAL


class DisputeTracker:
    """Remembers deposits and withdrawals so later disputes can be matched.

    Lifecycle per deposit: NORMAL -> DISPUTED -> NORMAL (resolve) or
    CHARGED_BACK (chargeback, terminal). Withdrawals are kept only to detect
    reused ids and to reject disputes against them.
    """

    TRACKED_KINDS = frozenset({TransactionType.DEPOSIT, TransactionType.WITHDRAWAL})

    def __init__(self) -> None:
        self._transactions: dict[TransactionId, TrackedTransaction] = {}

    def __len__(self) -> int:
        return len(self._transactions)

    def is_tracked(self, transaction_id: TransactionId) -> bool:
        return transaction_id in self._transactions

    def state_of(self, transaction_id: TransactionId) -> DisputeState | None:
        tracked = self._transactions.get(transaction_id)
        return tracked.state if tracked is not None else None

    def open_disputes(self) -> int:
        return sum(1 for tracked in self._transactions.values() if tracked.state == DisputeState.DISPUTED)

    def register(
        self,
        *,
        client_id: ClientId,
        transaction_id: TransactionId,
        kind: TransactionType,
        amount: Amount,
    ) -> None:
        if kind not in self.TRACKED_KINDS:
            raise ValueError(f"Only deposits and withdrawals can be tracked, got {kind}")
        if transaction_id in self._transactions:
            raise ValueError(f"Transaction id {transaction_id} is already tracked")
        self._transactions[transaction_id] = TrackedTransaction(client_id=client_id, kind=kind, amount=amount)

    def dispute(self, account: Account, *, client_id: ClientId, transaction_id: TransactionId) -> Outcome:
        if account.locked:
            return Outcome.ignored("the account is locked")
        tracked = self._lookup(client_id, transaction_id)
        if isinstance(tracked, Outcome):
            return tracked
        # Withdrawals are never disputable.
        if tracked.kind != TransactionType.DEPOSIT:
            return Outcome.ignored(f"only deposits can be disputed, tx {transaction_id} is a {tracked.kind}")
        if tracked.state == DisputeState.DISPUTED:
            return Outcome.ignored(f"tx {transaction_id} is already under dispute")
        if tracked.state == DisputeState.CHARGED_BACK:
            return Outcome.ignored(f"tx {transaction_id} was already charged back")
        if account.available < tracked.amount:
            return Outcome.ignored(
                f"available funds {account.available} do not cover the disputed amount {tracked.amount}"
            )

        account.available = account.available - tracked.amount
        account.held = account.held + tracked.amount
        tracked.state = DisputeState.DISPUTED
        return Outcome.applied()

    def resolve(self, account: Account, *, client_id: ClientId, transaction_id: TransactionId) -> Outcome:
        if account.locked:
            return Outcome.ignored("the account is locked")
        tracked = self._lookup(client_id, transaction_id)
        if isinstance(tracked, Outcome):
            return tracked
        if tracked.state != DisputeState.DISPUTED:
            return Outcome.ignored(f"tx {transaction_id} is not under dispute")

        account.held = account.held - tracked.amount
        account.available = account.available + tracked.amount
        tracked.state = DisputeState.NORMAL
        return Outcome.applied()

    def chargeback(self, account: Account, *, client_id: ClientId, transaction_id: TransactionId) -> Outcome:
        if account.locked:
            return Outcome.ignored("the account is locked")
        tracked = self._lookup(client_id, transaction_id)
        if isinstance(tracked, Outcome):
            return tracked
        if tracked.state != DisputeState.DISPUTED:
            return Outcome.ignored(f"tx {transaction_id} is not under dispute")

        account.held = account.held - tracked.amount
        account.locked = True
        tracked.state = DisputeState.CHARGED_BACK
        return Outcome.applied()

    def _lookup(
        self,
        client_id: ClientId,
        transaction_id: TransactionId,
    ) -> TrackedTransaction | Outcome:
        tracked = self._transactions.get(transaction_id)
        if tracked is None:
            return Outcome.ignored(f"tx {transaction_id} does not match a known deposit or withdrawal")
        if tracked.client_id != client_id:
            return Outcome.ignored(f"tx {transaction_id} belongs to another client")
        return tracked
