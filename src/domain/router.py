from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .ledger import AccountLedger
from .outcome import Outcome, OutcomeKind
from .transactions import (
    Chargeback,
    Deposit,
    Dispute,
    Resolve,
    Transaction,
    TransactionType,
    Withdrawal,
    describe,
)

logger = logging.getLogger(__name__)


@dataclass
class ProcessingReport:
    applied: int = 0
    ignored: int = 0
    ignored_by_type: dict[TransactionType, int] = field(default_factory=dict)

    @property
    def processed(self) -> int:
        return self.applied + self.ignored

    def record(self, transaction: Transaction, outcome: Outcome) -> None:
        if outcome.kind == OutcomeKind.APPLIED:
            self.applied += 1
        elif outcome.kind == OutcomeKind.IGNORED:
            self.ignored += 1
            self.ignored_by_type[transaction.type] = self.ignored_by_type.get(transaction.type, 0) + 1


class FatalTransactionError(Exception):
    def __init__(
        self,
        outcome: Outcome,
        *,
        transaction: Transaction,
        report: ProcessingReport,
    ) -> None:
        super().__init__(f"Fatal {describe(transaction)}: {outcome.reason}")
        self.outcome = outcome
        self.transaction = transaction
        self.report = report


class TransactionRouter:
    """Apply transaction records to a ledger strictly in arrival order."""

    def __init__(self, ledger: AccountLedger) -> None:
        self._ledger = ledger

    def process(self, transactions: Iterable[Transaction]) -> ProcessingReport:
        """Consume ``transactions`` once, front to back.

        Raises FatalTransactionError on the first fatal record; everything
        applied before it stays in the ledger.
        """
        report = ProcessingReport()
        for transaction in transactions:
            outcome = self.apply(transaction)
            if outcome.is_fatal:
                logger.error("Aborting on %s: %s", describe(transaction), outcome.reason)
                raise FatalTransactionError(outcome, transaction=transaction, report=report)
            if outcome.is_ignored:
                logger.warning("Ignored %s: %s", describe(transaction), outcome.reason)
            report.record(transaction, outcome)

        logger.info(
            "Processed %d transactions (%d applied, %d ignored) for %d clients",
            report.processed,
            report.applied,
            report.ignored,
            len(self._ledger),
        )
        return report

    def apply(self, transaction: Transaction) -> Outcome:
        match transaction:
            case Deposit():
                return self._apply_deposit(transaction)
            case Withdrawal():
                return self._apply_withdrawal(transaction)
            case Dispute():
                account = self._ledger.account(transaction.client_id)
                return self._ledger.disputes.dispute(
                    account,
                    client_id=transaction.client_id,
                    transaction_id=transaction.transaction_id,
                )
            case Resolve():
                account = self._ledger.account(transaction.client_id)
                return self._ledger.disputes.resolve(
                    account,
                    client_id=transaction.client_id,
                    transaction_id=transaction.transaction_id,
                )
            case Chargeback():
                account = self._ledger.account(transaction.client_id)
                return self._ledger.disputes.chargeback(
                    account,
                    client_id=transaction.client_id,
                    transaction_id=transaction.transaction_id,
                )
        raise TypeError(f"Unsupported transaction record {type(transaction).__name__}")

    def _apply_deposit(self, deposit: Deposit) -> Outcome:
        if self._ledger.disputes.is_tracked(deposit.transaction_id):
            return self._reused_id(deposit)
        account = self._ledger.account(deposit.client_id)
        outcome = self._ledger.deposit(account, deposit.amount)
        if outcome.is_applied:
            self._track(deposit)
        return outcome

    def _apply_withdrawal(self, withdrawal: Withdrawal) -> Outcome:
        if self._ledger.disputes.is_tracked(withdrawal.transaction_id):
            return self._reused_id(withdrawal)
        account = self._ledger.account(withdrawal.client_id)
        outcome = self._ledger.withdraw(account, withdrawal.amount)
        if outcome.is_applied:
            self._track(withdrawal)
        return outcome

    def _track(self, transaction: Deposit | Withdrawal) -> None:
        self._ledger.disputes.register(
            client_id=transaction.client_id,
            transaction_id=transaction.transaction_id,
            kind=transaction.type,
            amount=transaction.amount,
        )

    @staticmethod
    def _reused_id(transaction: Deposit | Withdrawal) -> Outcome:
        return Outcome.fatal(f"transaction id {transaction.transaction_id} was already used by an earlier deposit or withdrawal")
