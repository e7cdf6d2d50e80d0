"""
In-memory record store: holdings, dividends, donations, historical prices and
settings.

Every change to a holding's transactions is validated against the holding as
it would look afterwards; rejected changes leave the store untouched and are
kept in a rejected-entry log. Backups are plain JSON-compatible dicts.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any

from folio_core.holding import Holding
from folio_core.ledger import compute_financials
from folio_core.records import Dividend, Donation, HistoricalPrice, PriceHistory, year_month_key
from folio_core.settings import Settings
from folio_core.transaction import Transaction, TransactionKind
from folio_core.validation import EntryValidator, default_validators

logger = logging.getLogger(__name__)


class BackupFormatError(ValueError):
    """A backup dict does not have the expected structure; nothing was restored."""


class EntryStatusKind(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class EntryStatus:
    """Result of a store change. Immutable."""

    status: EntryStatusKind
    symbol: str
    transaction: Transaction | None = None
    message: str | None = None

    @property
    def accepted(self) -> bool:
        return self.status is EntryStatusKind.ACCEPTED


@dataclass
class RejectedEntryLog:
    """One rejected change, for display and debugging."""

    reason: str
    timestamp: datetime
    symbol: str
    transaction: Transaction | None = None


class PortfolioStore:
    """
    Owns the investor's records. Holdings are keyed by upper-cased symbol.
    Validators run in order on every transaction add/edit/delete.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        validators: Sequence[EntryValidator] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.validators: list[EntryValidator] = list(default_validators() if validators is None else validators)
        self.price_history = PriceHistory()
        self._holdings: dict[str, Holding] = {}
        self._dividends: dict[str, Dividend] = {}
        self._donations: dict[str, Donation] = {}
        self._rejected_log: list[RejectedEntryLog] = []

    # --- Holdings & transactions ---

    def holdings(self) -> list[Holding]:
        return list(self._holdings.values())

    def holding(self, symbol: str) -> Holding | None:
        return self._holdings.get(symbol.upper())

    def active_holdings(self) -> list[Holding]:
        """Holdings with a non-zero current position."""
        return [h for h in self._holdings.values() if compute_financials(h).current_shares > 0]

    def get_rejected_log(self) -> list[RejectedEntryLog]:
        return list(self._rejected_log)

    def _reject(self, symbol: str, reason: str, transaction: Transaction | None) -> EntryStatus:
        self._rejected_log.append(
            RejectedEntryLog(reason=reason, timestamp=datetime.now(), symbol=symbol, transaction=transaction)
        )
        logger.info("Entry rejected: %s", reason)
        return EntryStatus(status=EntryStatusKind.REJECTED, symbol=symbol, transaction=transaction, message=reason)

    def _commit(self, candidate: Holding, transaction: Transaction | None) -> EntryStatus:
        for validator in self.validators:
            reason = validator.check(candidate)
            if reason is not None:
                return self._reject(candidate.symbol, reason, transaction)
        self._holdings[candidate.symbol] = candidate
        return EntryStatus(status=EntryStatusKind.ACCEPTED, symbol=candidate.symbol, transaction=transaction)

    def save_transaction(
        self,
        symbol: str,
        transaction: Transaction,
        *,
        name: str | None = None,
        market_price: float | None = None,
        replace_id: str | None = None,
    ) -> EntryStatus:
        """
        Add transaction to symbol's holding, or with replace_id swap it in for
        an existing record (the edited record keeps replace_id as its id).
        A new holding is created on first BUY, priced at market_price or the
        trade price.
        """
        symbol = symbol.strip().upper()
        holding = self._holdings.get(symbol)

        if replace_id is not None:
            if holding is None or holding.transaction(replace_id) is None:
                return self._reject(symbol, f"{symbol}: no transaction {replace_id} to edit", transaction)
            transaction = replace(transaction, id=replace_id)
            candidate = holding.replace_transaction(replace_id, transaction)
        elif holding is None:
            candidate = Holding(
                symbol=symbol,
                name=name or symbol,
                transactions=(transaction,),
                market_price=transaction.price if market_price is None else market_price,
            )
        else:
            candidate = holding.with_transaction(transaction)

        if market_price is not None:
            candidate = candidate.with_market_price(market_price)
        if name and holding is not None:
            candidate = replace(candidate, name=name)
        return self._commit(candidate, transaction)

    def delete_transaction(self, symbol: str, transaction_id: str) -> EntryStatus:
        """Remove one transaction; refused if a later SELL would then oversell."""
        symbol = symbol.upper()
        holding = self._holdings.get(symbol)
        if holding is None or holding.transaction(transaction_id) is None:
            return self._reject(symbol, f"{symbol}: no transaction {transaction_id} to delete", None)
        removed = holding.transaction(transaction_id)
        return self._commit(holding.without_transaction(transaction_id), removed)

    def delete_holding(self, symbol: str) -> bool:
        return self._holdings.pop(symbol.upper(), None) is not None

    def update_prices(self, prices: Mapping[str, float], as_of: date | None = None) -> None:
        """
        Set market prices and record them as the closing price for as_of's
        month (default: today). Zero/missing prices leave the holding as is.
        """
        ym = year_month_key(as_of or date.today())
        for symbol, price in prices.items():
            symbol = symbol.upper()
            holding = self._holdings.get(symbol)
            if holding is not None and price:
                self._holdings[symbol] = holding.with_market_price(price)
            self.price_history.set_price(symbol, ym, price)

    # --- Dividends & donations ---

    def dividends(self) -> list[Dividend]:
        return list(self._dividends.values())

    def save_dividend(self, dividend: Dividend, replace_id: str | None = None) -> Dividend:
        if dividend.amount < 0:
            raise ValueError(f"dividend amount must be non-negative (got {dividend.amount})")
        if replace_id is not None:
            dividend = replace(dividend, id=replace_id)
        self._dividends[dividend.id] = dividend
        return dividend

    def delete_dividend(self, dividend_id: str) -> bool:
        return self._dividends.pop(dividend_id, None) is not None

    def donations(self) -> list[Donation]:
        return list(self._donations.values())

    def save_donation(self, donation: Donation, replace_id: str | None = None) -> Donation:
        if donation.amount <= 0:
            raise ValueError(f"donation amount must be positive (got {donation.amount})")
        if replace_id is not None:
            donation = replace(donation, id=replace_id)
        self._donations[donation.id] = donation
        return donation

    def delete_donation(self, donation_id: str) -> bool:
        return self._donations.pop(donation_id, None) is not None

    # --- Backup ---

    def to_backup(self, exported_at: datetime | None = None) -> dict[str, Any]:
        """All records as a JSON-compatible dict."""
        return {
            "stocks": [
                {
                    "symbol": h.symbol,
                    "name": h.name,
                    "currentPrice": h.market_price,
                    "transactions": [_transaction_to_dict(t) for t in h.transactions],
                }
                for h in self._holdings.values()
            ],
            "dividends": [
                {
                    "id": d.id,
                    "stockSymbol": d.symbol,
                    "amount": d.amount,
                    "date": d.date.isoformat(),
                    "sharesHeld": d.shares_held,
                    "dividendPerShare": d.dividend_per_share,
                }
                for d in self._dividends.values()
            ],
            "donations": [
                {"id": d.id, "amount": d.amount, "date": d.date.isoformat(), "description": d.description}
                for d in self._donations.values()
            ],
            "historicalPrices": [
                {"stockSymbol": h.symbol, "prices": dict(h.prices)} for h in self.price_history.histories()
            ],
            "settings": self.settings.to_dict(),
            "exportDate": (exported_at or datetime.now()).isoformat(),
        }

    @classmethod
    def from_backup(
        cls,
        data: Mapping[str, Any],
        *,
        validators: Sequence[EntryValidator] | None = None,
    ) -> PortfolioStore:
        """
        Rebuild a store from to_backup() output. Sections that are absent are
        left empty. Raises BackupFormatError on any malformed section or on a
        holding whose history fails validation.
        """
        if not isinstance(data, Mapping):
            raise BackupFormatError("backup must be a JSON object")
        try:
            settings = Settings.from_dict(data["settings"]) if data.get("settings") else Settings()
            holdings = [_holding_from_dict(s) for s in _section(data, "stocks")]
            dividends = [_dividend_from_dict(d) for d in _section(data, "dividends")]
            donations = [_donation_from_dict(d) for d in _section(data, "donations")]
            histories = [
                HistoricalPrice(
                    symbol=str(h["stockSymbol"]).upper(),
                    prices={str(k): float(v) for k, v in h["prices"].items()},
                )
                for h in _section(data, "historicalPrices")
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise BackupFormatError(f"malformed backup: {exc}") from exc

        store = cls(settings, validators=validators)
        for holding in holdings:
            for validator in store.validators:
                reason = validator.check(holding)
                if reason is not None:
                    raise BackupFormatError(f"invalid holding in backup: {reason}")
            store._holdings[holding.symbol] = holding
        for d in dividends:
            store._dividends[d.id] = d
        for d in donations:
            store._donations[d.id] = d
        store.price_history = PriceHistory(histories)
        logger.info(
            "Restored backup: %d holdings, %d dividends, %d donations",
            len(holdings),
            len(dividends),
            len(donations),
        )
        return store


def _section(data: Mapping[str, Any], key: str) -> Iterable[Mapping[str, Any]]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise TypeError(f"'{key}' must be a list")
    return value


def _parse_date(value: Any) -> date:
    return date.fromisoformat(str(value)[:10])


def _transaction_to_dict(t: Transaction) -> dict[str, Any]:
    return {
        "id": t.id,
        "type": t.kind.value,
        "shares": t.shares,
        "price": t.price,
        "date": t.date.isoformat(),
        "fees": t.fees,
    }


def _holding_from_dict(s: Mapping[str, Any]) -> Holding:
    return Holding(
        symbol=str(s["symbol"]).upper(),
        name=str(s.get("name") or s["symbol"]),
        market_price=float(s.get("currentPrice") or 0.0),
        transactions=tuple(
            Transaction(
                id=str(t["id"]),
                kind=TransactionKind(str(t["type"]).upper()),
                shares=float(t["shares"]),
                price=float(t["price"]),
                date=_parse_date(t["date"]),
                fees=float(t.get("fees") or 0.0),
            )
            for t in s.get("transactions") or []
        ),
    )


def _dividend_from_dict(d: Mapping[str, Any]) -> Dividend:
    shares_held = d.get("sharesHeld")
    per_share = d.get("dividendPerShare")
    return Dividend(
        id=str(d["id"]),
        symbol=str(d["stockSymbol"]).upper(),
        amount=float(d["amount"]),
        date=_parse_date(d["date"]),
        shares_held=None if shares_held is None else float(shares_held),
        dividend_per_share=None if per_share is None else float(per_share),
    )


def _donation_from_dict(d: Mapping[str, Any]) -> Donation:
    return Donation(
        id=str(d["id"]),
        amount=float(d["amount"]),
        date=_parse_date(d["date"]),
        description=str(d.get("description", "")),
    )
