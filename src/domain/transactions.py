from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal, NewType, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .amount import Amount

ClientId = NewType("ClientId", int)
TransactionId = NewType("TransactionId", int)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class TransactionType(StrEnum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class _TransactionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: ClientId = Field(ge=0, le=MAX_CLIENT_ID)
    transaction_id: TransactionId = Field(ge=0, le=MAX_TRANSACTION_ID)


class Deposit(_TransactionRecord):
    type: Literal[TransactionType.DEPOSIT] = TransactionType.DEPOSIT
    amount: Amount


class Withdrawal(_TransactionRecord):
    type: Literal[TransactionType.WITHDRAWAL] = TransactionType.WITHDRAWAL
    amount: Amount


class Dispute(_TransactionRecord):
    """Claim against a prior deposit. Any amount on the source row is dropped."""

    type: Literal[TransactionType.DISPUTE] = TransactionType.DISPUTE


class Resolve(_TransactionRecord):
    type: Literal[TransactionType.RESOLVE] = TransactionType.RESOLVE


class Chargeback(_TransactionRecord):
    type: Literal[TransactionType.CHARGEBACK] = TransactionType.CHARGEBACK


Transaction = Annotated[
    Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback],
    Field(discriminator="type"),
]

TRANSACTION_ADAPTER: TypeAdapter[Transaction] = TypeAdapter(Transaction)


def describe(transaction: Transaction) -> str:
    amount = getattr(transaction, "amount", None)
    amount_text = f" amount={amount}" if amount is not None else ""
    return f"{transaction.type} client={transaction.client_id} tx={transaction.transaction_id}{amount_text}"
