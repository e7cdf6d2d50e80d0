"""
Portfolio report: print a performance summary for a PortfolioSummary.
"""

from __future__ import annotations

from reporting.summary import PortfolioSummary


def print_report(summary: PortfolioSummary, *, title: str = "Portfolio Summary") -> PortfolioSummary:
    """
    Print the summary's headline figures.

    Returns
    -------
    PortfolioSummary
        The same summary (e.g. for programmatic use).
    """
    print(f"--- {title} ---")
    print(f"Market value:    {summary.total_market_value:,.2f}")
    print(f"Cost basis:      {summary.total_cost:,.2f}")
    print(f"Unrealized PnL:  {summary.unrealized_pnl:,.2f}")
    print(f"Realized PnL:    {summary.realized_pnl:,.2f}")
    print(f"Dividends:       {summary.total_dividends:,.2f}")
    print(f"Total return:    {summary.total_return:,.2f} ({summary.total_return_rate:.2f}%)")
    print(f"Dividend yield:  {summary.dividend_yield:.2f}%")
    print(f"Holdings:        {len(summary.active_symbols)}")
    print("-" * (len(title) + 8))
    return summary
