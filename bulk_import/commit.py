"""
Commit confirmed import records into a PortfolioStore.

Transactions go through the store's entry validation one by one, so an
oversell inside an imported block is refused while the rest is kept.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from folio_core.store import EntryStatus, PortfolioStore

from bulk_import.types import DividendRecord, DonationRecord, ImportKind, ImportRecord, PriceRecord, TransactionRecord

logger = logging.getLogger(__name__)


def commit_import(
    store: PortfolioStore,
    kind: ImportKind | str,
    records: Sequence[ImportRecord],
) -> list[EntryStatus]:
    """
    Save records of the given kind into store.

    Returns one EntryStatus per transaction record (empty for other kinds,
    which cannot be rejected once parsed).
    """
    kind = ImportKind(kind)
    statuses: list[EntryStatus] = []
    for record in records:
        if kind is ImportKind.TRANSACTIONS and isinstance(record, TransactionRecord):
            statuses.append(store.save_transaction(record.symbol, record.to_transaction()))
        elif kind is ImportKind.DIVIDENDS and isinstance(record, DividendRecord):
            store.save_dividend(record.to_dividend())
        elif kind is ImportKind.DONATIONS and isinstance(record, DonationRecord):
            store.save_donation(record.to_donation())
        elif kind is ImportKind.PRICES and isinstance(record, PriceRecord):
            store.price_history.set_price(record.symbol, record.year_month, record.price)
        else:
            raise TypeError(f"{type(record).__name__} cannot be imported as {kind.value}")
    rejected = sum(1 for s in statuses if not s.accepted)
    logger.info("Imported %d %s record(s), %d rejected", len(records) - rejected, kind.value, rejected)
    return statuses
