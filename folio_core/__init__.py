"""
folio-core: cost-basis ledger and record store for a personal equity portfolio.

Weighted-average costing, no market-data integration, no I/O.
"""

__version__ = "0.1.0"

from folio_core.transaction import Transaction, TransactionKind
from folio_core.holding import Holding
from folio_core.records import Dividend, Donation, HistoricalPrice, PriceHistory, net_dividend_amount, year_month_key
from folio_core.settings import Settings, estimate_fees
from folio_core.ledger import SellDetail, Snapshot, compute_financials, replay_as_of
from folio_core.validation import EntryValidator, OversellValidator
from folio_core.store import BackupFormatError, EntryStatus, EntryStatusKind, PortfolioStore

__all__ = [
    "Transaction",
    "TransactionKind",
    "Holding",
    "Dividend",
    "Donation",
    "HistoricalPrice",
    "PriceHistory",
    "net_dividend_amount",
    "year_month_key",
    "Settings",
    "estimate_fees",
    "SellDetail",
    "Snapshot",
    "compute_financials",
    "replay_as_of",
    "EntryValidator",
    "OversellValidator",
    "BackupFormatError",
    "EntryStatus",
    "EntryStatusKind",
    "PortfolioStore",
]
