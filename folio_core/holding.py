"""
Holding: a symbol, its transactions and the latest known market price.

Immutable value. The helpers below return new holdings so callers can build a
candidate state, validate it and only then commit it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from folio_core.transaction import Transaction


@dataclass(frozen=True)
class Holding:
    """
    A stock held (or once held) by the investor. Transactions are kept in
    insertion order; the ledger orders them by date.
    """

    symbol: str
    name: str = ""
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)
    market_price: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.transactions, tuple):
            object.__setattr__(self, "transactions", tuple(self.transactions))
        if not self.name:
            object.__setattr__(self, "name", self.symbol)

    def transaction(self, transaction_id: str) -> Transaction | None:
        """Transaction with the given id, or None."""
        for t in self.transactions:
            if t.id == transaction_id:
                return t
        return None

    def with_transaction(self, transaction: Transaction) -> Holding:
        return replace(self, transactions=self.transactions + (transaction,))

    def replace_transaction(self, transaction_id: str, transaction: Transaction) -> Holding:
        """Swap the record with transaction_id for transaction (keeping its slot)."""
        return replace(
            self,
            transactions=tuple(transaction if t.id == transaction_id else t for t in self.transactions),
        )

    def without_transaction(self, transaction_id: str) -> Holding:
        return replace(self, transactions=tuple(t for t in self.transactions if t.id != transaction_id))

    def with_market_price(self, price: float) -> Holding:
        return replace(self, market_price=price)
