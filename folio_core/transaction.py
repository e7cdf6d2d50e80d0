"""
Transaction: one BUY or SELL of a holding's shares.

Immutable. Edits replace the record; the ledger never mutates it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class TransactionKind(Enum):
    BUY = "BUY"
    SELL = "SELL"


def new_id() -> str:
    """Fresh record identity."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Transaction:
    """A single trade. Shares > 0, price >= 0, fees >= 0."""

    kind: TransactionKind
    shares: float
    price: float
    date: date
    fees: float = 0.0
    id: str = field(default_factory=new_id)

    @property
    def is_sell(self) -> bool:
        return self.kind is TransactionKind.SELL

    @property
    def signed_shares(self) -> float:
        """Position delta (positive = buy)."""
        return -self.shares if self.is_sell else self.shares
