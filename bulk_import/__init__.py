"""
Bulk import of pasted text: transactions, dividends, donations and monthly
historical prices, with per-line error reporting.
"""

from bulk_import.types import (
    DividendRecord,
    DonationRecord,
    ImportKind,
    ParseError,
    ParseResult,
    PriceRecord,
    TransactionRecord,
)
from bulk_import.parser import (
    expand_month_range,
    parse,
    parse_dividends,
    parse_donations,
    parse_historical_prices,
    parse_transactions,
)
from bulk_import.commit import commit_import

__all__ = [
    "DividendRecord",
    "DonationRecord",
    "ImportKind",
    "ParseError",
    "ParseResult",
    "PriceRecord",
    "TransactionRecord",
    "expand_month_range",
    "parse",
    "parse_dividends",
    "parse_donations",
    "parse_historical_prices",
    "parse_transactions",
    "commit_import",
]
