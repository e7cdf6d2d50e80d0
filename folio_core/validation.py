"""
Entry validation: approve or reject a holding's candidate transaction history
before it is committed.

The ledger is a calculator and never refuses input; integrity checks such as
"no SELL may exceed the shares held at that date" live here and run at the
point of entry (add, edit, delete).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from folio_core.holding import Holding
from folio_core.ledger import sort_transactions
from folio_core.transaction import Transaction

_SHARE_EPSILON = 1e-9


class EntryValidator(ABC):
    """
    Base class for entry validators. Given the holding as it would look after
    the change, return a rejection message, or None to allow it.
    """

    @abstractmethod
    def check(self, candidate: Holding) -> str | None:
        ...


def find_oversell(transactions: Iterable[Transaction]) -> tuple[Transaction, float] | None:
    """
    First SELL (chronologically) whose shares exceed the running position,
    with the shares held just before it; None if the history is consistent.
    """
    held = 0.0
    for t in sort_transactions(transactions):
        if t.is_sell and t.shares > held + _SHARE_EPSILON:
            return t, held
        held += t.signed_shares
    return None


class OversellValidator(EntryValidator):
    """Rejects histories in which the position would go negative."""

    def check(self, candidate: Holding) -> str | None:
        hit = find_oversell(candidate.transactions)
        if hit is None:
            return None
        t, held = hit
        return (
            f"{candidate.symbol}: cannot sell {t.shares:g} shares on {t.date.isoformat()}; "
            f"only {held:g} held"
        )


class TransactionFieldValidator(EntryValidator):
    """Rejects transactions with non-positive shares or negative price/fees."""

    def check(self, candidate: Holding) -> str | None:
        for t in candidate.transactions:
            if not t.shares > 0:
                return f"{candidate.symbol}: shares must be positive (got {t.shares})"
            if not t.price >= 0:
                return f"{candidate.symbol}: price must be non-negative (got {t.price})"
            if not t.fees >= 0:
                return f"{candidate.symbol}: fees must be non-negative (got {t.fees})"
        return None


def default_validators() -> list[EntryValidator]:
    return [TransactionFieldValidator(), OversellValidator()]
