"""
Donation fund: a fixed share of investment income set aside for giving.

The fund is credited with DONATION_RATE of all dividends plus all realized
P&L and debited with every recorded donation.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from folio_core.holding import Holding
from folio_core.ledger import compute_financials
from folio_core.records import Dividend, Donation

DONATION_RATE = 0.1


@dataclass(frozen=True)
class DonationFund:
    """Amount allotted to the fund, amount already given, and what remains."""

    allotment: float
    total_donated: float

    @property
    def balance(self) -> float:
        return self.allotment - self.total_donated


def donation_fund(
    holdings: Iterable[Holding],
    dividends: Iterable[Dividend],
    donations: Iterable[Donation],
    *,
    rate: float = DONATION_RATE,
) -> DonationFund:
    """
    Parameters
    ----------
    holdings : Iterable[Holding]
        Realized P&L is summed over the full history of each holding.
    dividends : Iterable[Dividend]
    donations : Iterable[Donation]
    rate : float
        Share of income allotted to the fund.

    Returns
    -------
    DonationFund
        The balance goes negative when more was given than allotted.
    """
    if rate < 0:
        raise ValueError("rate must be non-negative")
    realized = sum(compute_financials(h).realized_pnl for h in holdings)
    income = sum(d.amount for d in dividends) + realized
    return DonationFund(
        allotment=float(income * rate),
        total_donated=float(sum(d.amount for d in donations)),
    )
