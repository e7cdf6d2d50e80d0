"""
Bulk import types: one explicit record type per import kind, plus the
per-line error and the success/errors result pair.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Generic, TypeVar

import pandas as pd

from folio_core.records import Dividend, Donation
from folio_core.transaction import Transaction, TransactionKind


class ImportKind(Enum):
    TRANSACTIONS = "transactions"
    DIVIDENDS = "dividends"
    DONATIONS = "donations"
    PRICES = "prices"


@dataclass(frozen=True)
class TransactionRecord:
    symbol: str
    kind: TransactionKind
    shares: float
    price: float
    date: date
    fees: float

    def to_transaction(self) -> Transaction:
        return Transaction(kind=self.kind, shares=self.shares, price=self.price, date=self.date, fees=self.fees)


@dataclass(frozen=True)
class DividendRecord:
    symbol: str
    amount: int
    date: date
    shares_held: float
    dividend_per_share: float

    def to_dividend(self) -> Dividend:
        return Dividend(
            symbol=self.symbol,
            amount=self.amount,
            date=self.date,
            shares_held=self.shares_held,
            dividend_per_share=self.dividend_per_share,
        )


@dataclass(frozen=True)
class DonationRecord:
    amount: float
    date: date
    description: str

    def to_donation(self) -> Donation:
        return Donation(amount=self.amount, date=self.date, description=self.description)


@dataclass(frozen=True)
class PriceRecord:
    """One month's closing price; year_month is 'YYYY-MM'."""

    symbol: str
    year_month: str
    price: float


ImportRecord = TransactionRecord | DividendRecord | DonationRecord | PriceRecord

R = TypeVar("R", TransactionRecord, DividendRecord, DonationRecord, PriceRecord)


@dataclass(frozen=True)
class ParseError:
    """A rejected input line. line is 1-based."""

    line: int
    error: str


@dataclass
class ParseResult(Generic[R]):
    """Records parsed from a text block, and one error per rejected line."""

    success: list[R] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_frame(self) -> pd.DataFrame:
        """Success records as a DataFrame (one column per field) for preview."""
        rows = []
        for record in self.success:
            row = asdict(record)
            rows.append({k: v.value if isinstance(v, Enum) else v for k, v in row.items()})
        return pd.DataFrame(rows)

    def errors_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(e) for e in self.errors], columns=["line", "error"])
