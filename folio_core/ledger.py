"""
Ledger engine: position, weighted-average cost and P&L for one holding.

Every sell is costed at the single blended cost-per-share of all shares held
at that moment (weighted-average method, no lot selection). Results are
derived fresh on every call; nothing is cached or mutated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from folio_core.holding import Holding
from folio_core.records import PriceHistory, year_month_key
from folio_core.transaction import Transaction, TransactionKind

logger = logging.getLogger(__name__)

# Positions smaller than this are treated as fully closed (float residue).
_SHARE_EPSILON = 1e-9


@dataclass(frozen=True)
class SellDetail:
    """Realized result of one SELL, in the order sells were processed."""

    transaction: Transaction
    realized_pnl: float
    cost_of_shares: float

    @property
    def return_rate(self) -> float:
        """Realized P&L as a percentage of the cost of the shares sold."""
        return self.realized_pnl / self.cost_of_shares * 100.0 if self.cost_of_shares > 0 else 0.0


@dataclass(frozen=True)
class Snapshot:
    """Financial state of a holding after replaying its transactions."""

    current_shares: float
    avg_cost: float
    total_cost: float
    market_price: float
    unrealized_pnl: float
    sell_details: tuple[SellDetail, ...] = field(default_factory=tuple)

    @property
    def market_value(self) -> float:
        return self.current_shares * self.market_price

    @property
    def unrealized_pnl_percent(self) -> float:
        return self.unrealized_pnl / self.total_cost * 100.0 if self.total_cost > 0 else 0.0

    @property
    def realized_pnl(self) -> float:
        return sum(d.realized_pnl for d in self.sell_details)

    @property
    def has_sell(self) -> bool:
        return bool(self.sell_details)

    @property
    def total_shares_sold(self) -> float:
        return sum(d.transaction.shares for d in self.sell_details)

    @property
    def total_cost_of_sold_shares(self) -> float:
        return sum(d.cost_of_shares for d in self.sell_details)

    @property
    def avg_sell_cost(self) -> float:
        sold = self.total_shares_sold
        return self.total_cost_of_sold_shares / sold if sold > 0 else 0.0

    @property
    def realized_return_rate(self) -> float:
        cost = self.total_cost_of_sold_shares
        return self.realized_pnl / cost * 100.0 if cost > 0 else 0.0


def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Chronological order; same-date entries keep their original order."""
    return sorted(transactions, key=lambda t: t.date)


def compute_financials(holding: Holding, market_price: float | None = None) -> Snapshot:
    """
    Replay holding's transactions with the weighted-average cost method.

    Parameters
    ----------
    holding : Holding
        Symbol, transactions (any order) and market price.
    market_price : float, optional
        Price used for unrealized P&L. Defaults to holding.market_price.

    Returns
    -------
    Snapshot
        Current shares, average cost, remaining cost basis, unrealized P&L and
        one SellDetail per SELL in chronological order.

    A SELL larger than the position (which entry validation should already
    have rejected) is still computed; the position is then clamped to empty.
    """
    price = holding.market_price if market_price is None else market_price
    total_shares = 0.0
    total_cost = 0.0
    sells: list[SellDetail] = []

    for t in sort_transactions(holding.transactions):
        if t.kind is TransactionKind.BUY:
            total_cost += t.shares * t.price + t.fees
            total_shares += t.shares
            continue

        cost_per_share = total_cost / total_shares if total_shares > 0 else 0.0
        cost_of_shares = cost_per_share * t.shares
        realized = (t.price - cost_per_share) * t.shares - t.fees
        total_cost -= cost_of_shares
        total_shares -= t.shares
        if total_shares < -_SHARE_EPSILON:
            logger.warning(
                "%s: SELL of %s on %s exceeds held shares; clamping position to zero",
                holding.symbol,
                t.shares,
                t.date.isoformat(),
            )
        if total_shares <= _SHARE_EPSILON:
            total_shares = 0.0
            total_cost = 0.0
        sells.append(SellDetail(transaction=t, realized_pnl=realized, cost_of_shares=cost_of_shares))

    if total_shares > 0:
        avg_cost = total_cost / total_shares
        unrealized = (price - avg_cost) * total_shares
    else:
        avg_cost = 0.0
        unrealized = 0.0

    return Snapshot(
        current_shares=total_shares,
        avg_cost=avg_cost,
        total_cost=total_cost,
        market_price=price,
        unrealized_pnl=unrealized,
        sell_details=tuple(sells),
    )


def replay_as_of(
    holding: Holding,
    cutoff: date,
    price_history: PriceHistory | None = None,
) -> Snapshot:
    """
    Snapshot of holding as it stood on cutoff.

    Only transactions dated on or before cutoff are replayed. The position is
    priced at the recorded closing price for cutoff's month; when none is
    recorded (or no price history is given) the holding's market price is used.
    """
    price = holding.market_price
    if price_history is not None:
        price = price_history.price_as_of(holding.symbol, year_month_key(cutoff), default=holding.market_price)
    prefix = Holding(
        symbol=holding.symbol,
        name=holding.name,
        transactions=tuple(t for t in holding.transactions if t.date <= cutoff),
        market_price=price,
    )
    return compute_financials(prefix)


def latest_priced(holding: Holding, price_history: PriceHistory | None) -> Holding:
    """holding re-priced at its latest recorded historical price, if any."""
    if price_history is None:
        return holding
    latest = price_history.latest_price(holding.symbol)
    return holding if latest is None else holding.with_market_price(latest)
