"""
Monthly dividend aggregation for the calendar-year chart.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from folio_core.records import Dividend


@dataclass(frozen=True)
class MonthlyDividend:
    """Dividends received in month (1-12) and the running total through it."""

    month: int
    monthly: float
    cumulative: float


def monthly_dividends(dividends: Iterable[Dividend], year: int | None = None) -> list[MonthlyDividend]:
    """
    Sum dividend amounts per calendar month, with a cumulative running total.

    Parameters
    ----------
    dividends : iterable of Dividend
        Records to aggregate.
    year : int, optional
        Only count dividends paid in this year. If None, all records are
        bucketed by month regardless of year.

    Returns
    -------
    list of MonthlyDividend
        Always 12 entries, January first; all zeros for empty input.
    """
    totals = np.zeros(12, dtype=float)
    for d in dividends:
        if year is not None and d.date.year != year:
            continue
        totals[d.date.month - 1] += d.amount
    running = np.cumsum(totals)
    return [
        MonthlyDividend(month=i + 1, monthly=float(totals[i]), cumulative=float(running[i]))
        for i in range(12)
    ]
