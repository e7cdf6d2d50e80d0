"""
Reporting on top of folio-core: monthly dividends, portfolio summary,
per-holding total return, donation fund and a printed report.
"""

from reporting.dividends import MonthlyDividend, monthly_dividends
from reporting.summary import PortfolioSummary, compute_summary, total_return_frame
from reporting.donations import DonationFund, donation_fund
from reporting.portfolio_report import print_report

__all__ = [
    "MonthlyDividend",
    "monthly_dividends",
    "PortfolioSummary",
    "compute_summary",
    "total_return_frame",
    "DonationFund",
    "donation_fund",
    "print_report",
]
