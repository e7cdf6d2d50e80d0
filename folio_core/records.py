"""
Income and reference records: dividends, donations, historical prices.

Dividends and donations are immutable like transactions. Historical prices are
held in an explicit keyed structure: symbol -> ordered year-month -> price.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date

from folio_core.transaction import new_id

# Fixed postal/handling fee deducted from every cash dividend.
DIVIDEND_HANDLING_FEE = 10


def net_dividend_amount(
    shares_held: float,
    dividend_per_share: float,
    handling_fee: float = DIVIDEND_HANDLING_FEE,
) -> int:
    """Net cash received: floor(shares * rate - fee), never below zero."""
    return max(0, math.floor(shares_held * dividend_per_share - handling_fee))


def year_month_key(d: date) -> str:
    """'YYYY-MM' key for the month containing d."""
    return f"{d.year:04d}-{d.month:02d}"


@dataclass(frozen=True)
class Dividend:
    """Cash dividend received for a holding. Amount is a non-negative integer."""

    symbol: str
    amount: int
    date: date
    shares_held: float | None = None
    dividend_per_share: float | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        try:
            amount = float(self.amount)
        except (TypeError, ValueError):
            raise ValueError(f"dividend amount must be a number, got {self.amount!r}") from None
        if not math.isfinite(amount) or amount < 0 or not amount.is_integer():
            raise ValueError(f"dividend amount must be a non-negative whole number, got {self.amount!r}")
        object.__setattr__(self, "amount", int(amount))

    @classmethod
    def from_rate(
        cls,
        symbol: str,
        shares_held: float,
        dividend_per_share: float,
        date: date,
    ) -> Dividend:
        """Build a dividend whose amount is derived from shares and per-share rate."""
        return cls(
            symbol=symbol,
            amount=net_dividend_amount(shares_held, dividend_per_share),
            date=date,
            shares_held=shares_held,
            dividend_per_share=dividend_per_share,
        )


@dataclass(frozen=True)
class Donation:
    """Money given from the donation fund."""

    amount: float
    date: date
    description: str
    id: str = field(default_factory=new_id)


@dataclass
class HistoricalPrice:
    """Monthly closing prices for one symbol, kept sorted by year-month."""

    symbol: str
    prices: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.prices = dict(sorted(self.prices.items()))

    def set_price(self, year_month: str, price: float) -> None:
        self.prices[year_month] = price
        self.prices = dict(sorted(self.prices.items()))


class PriceHistory:
    """
    Historical closing prices for all symbols.

    Lookups are explicit: price_for and latest_price return None when nothing
    is recorded; price_as_of takes the fallback as a required argument.
    """

    def __init__(self, histories: list[HistoricalPrice] | None = None) -> None:
        self._histories: dict[str, HistoricalPrice] = {}
        for h in histories or []:
            for ym, price in h.prices.items():
                self.set_price(h.symbol, ym, price)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._histories

    def symbols(self) -> list[str]:
        return list(self._histories)

    def history(self, symbol: str) -> HistoricalPrice | None:
        return self._histories.get(symbol)

    def histories(self) -> list[HistoricalPrice]:
        return list(self._histories.values())

    def set_price(self, symbol: str, year_month: str, price: float) -> None:
        """Record (or overwrite) the closing price of symbol for year_month."""
        h = self._histories.get(symbol)
        if h is None:
            h = self._histories[symbol] = HistoricalPrice(symbol=symbol)
        h.set_price(year_month, price)

    def price_for(self, symbol: str, year_month: str) -> float | None:
        """Recorded price for exactly that month, or None."""
        h = self._histories.get(symbol)
        if h is None:
            return None
        return h.prices.get(year_month)

    def latest_price(self, symbol: str) -> float | None:
        """Price of the most recent recorded month, or None."""
        h = self._histories.get(symbol)
        if h is None or not h.prices:
            return None
        return h.prices[max(h.prices)]

    def price_as_of(self, symbol: str, year_month: str, default: float) -> float:
        """Recorded price for year_month; default when that month has none."""
        price = self.price_for(symbol, year_month)
        return default if price is None else price
