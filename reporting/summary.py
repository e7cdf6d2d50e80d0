"""
Portfolio-level figures built from per-holding ledger snapshots.

Two views: all-time (holdings priced at their latest recorded historical
price) and a calendar year (holdings replayed as of year end, realized P&L and
dividends restricted to that year).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

import pandas as pd

from folio_core.holding import Holding
from folio_core.ledger import compute_financials, latest_priced, replay_as_of
from folio_core.records import Dividend, PriceHistory


@dataclass(frozen=True)
class PortfolioSummary:
    """Headline figures for the dashboard."""

    total_market_value: float
    total_cost: float
    unrealized_pnl: float
    realized_pnl: float
    total_dividends: float
    active_symbols: tuple[str, ...] = ()

    @property
    def total_return(self) -> float:
        return self.unrealized_pnl + self.realized_pnl + self.total_dividends

    @property
    def total_return_rate(self) -> float:
        return self.total_return / self.total_cost * 100.0 if self.total_cost > 0 else 0.0

    @property
    def dividend_yield(self) -> float:
        return self.total_dividends / self.total_cost * 100.0 if self.total_cost > 0 else 0.0


def _year_cutoff(year: int, today: date) -> date:
    end = date(year, 12, 31)
    return min(end, today) if today.year == year else end


def compute_summary(
    holdings: Sequence[Holding],
    dividends: Iterable[Dividend],
    *,
    year: int | None = None,
    price_history: PriceHistory | None = None,
    symbols: Iterable[str] | None = None,
    today: date | None = None,
) -> PortfolioSummary:
    """
    Aggregate holdings (optionally filtered to symbols) into a PortfolioSummary.

    With year=None every holding is priced at its latest historical price
    (falling back to its market price). With a year, positions are replayed as
    of Dec 31 of that year (or today, within the current year), realized P&L
    counts only sells dated in that year, and only that year's dividends are
    included.
    """
    wanted = None if symbols is None else set(symbols)
    selected = [h for h in holdings if wanted is None or h.symbol in wanted]
    divs = [d for d in dividends if wanted is None or d.symbol in wanted]

    market_value = 0.0
    cost = 0.0
    realized = 0.0
    active: list[str] = []

    if year is None:
        for h in selected:
            snap = compute_financials(latest_priced(h, price_history))
            if snap.current_shares > 0:
                market_value += snap.market_value
                cost += snap.total_cost
                active.append(h.symbol)
            realized += snap.realized_pnl
    else:
        cutoff = _year_cutoff(year, today or date.today())
        for h in selected:
            snap = replay_as_of(h, cutoff, price_history)
            if snap.current_shares > 0:
                market_value += snap.market_value
                cost += snap.total_cost
                active.append(h.symbol)
            full = compute_financials(h)
            realized += sum(d.realized_pnl for d in full.sell_details if d.transaction.date.year == year)
        divs = [d for d in divs if d.date.year == year]

    return PortfolioSummary(
        total_market_value=market_value,
        total_cost=cost,
        unrealized_pnl=market_value - cost,
        realized_pnl=realized,
        total_dividends=float(sum(d.amount for d in divs)),
        active_symbols=tuple(active),
    )


TOTAL_RETURN_COLUMNS = [
    "symbol",
    "name",
    "current_shares",
    "avg_cost",
    "total_cost",
    "market_value",
    "unrealized_pnl",
    "realized_pnl",
    "dividend_income",
    "total_pnl",
    "return_rate",
]


def total_return_frame(holdings: Iterable[Holding], dividends: Iterable[Dividend]) -> pd.DataFrame:
    """
    One row per holding: ledger figures plus dividend income.

    total_pnl is unrealized P&L plus all dividends received for the symbol;
    return_rate is total_pnl as a percentage of the remaining cost basis.
    """
    income: dict[str, float] = {}
    for d in dividends:
        income[d.symbol] = income.get(d.symbol, 0.0) + d.amount

    rows = []
    for h in holdings:
        snap = compute_financials(h)
        dividend_income = income.get(h.symbol, 0.0)
        total_pnl = snap.unrealized_pnl + dividend_income
        rows.append(
            {
                "symbol": h.symbol,
                "name": h.name,
                "current_shares": snap.current_shares,
                "avg_cost": snap.avg_cost,
                "total_cost": snap.total_cost,
                "market_value": snap.market_value,
                "unrealized_pnl": snap.unrealized_pnl,
                "realized_pnl": snap.realized_pnl,
                "dividend_income": dividend_income,
                "total_pnl": total_pnl,
                "return_rate": total_pnl / snap.total_cost * 100.0 if snap.total_cost > 0 else 0.0,
            }
        )
    return pd.DataFrame(rows, columns=TOTAL_RETURN_COLUMNS)
