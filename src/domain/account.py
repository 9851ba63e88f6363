from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from pydantic import BaseModel

from .amount import Amount
from .transactions import ClientId


@dataclass
class Account:
    client_id: ClientId
    available: Amount = field(default_factory=Amount.zero)
    held: Amount = field(default_factory=Amount.zero)
    locked: bool = False

    @property
    def total(self) -> Amount:
        return self.available + self.held

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available.round_to_output_precision(),
            held=self.held.round_to_output_precision(),
            total=self.total.round_to_output_precision(),
            locked=self.locked,
        )


class AccountSnapshot(BaseModel):
    """Final per-client balances, already rounded for output."""

    client_id: ClientId
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool
