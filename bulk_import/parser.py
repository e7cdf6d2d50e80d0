"""
Parse user-pasted, comma-separated text into import records.

One record per non-blank line (historical prices: one per month). Fields are
trimmed; a line failing any check yields exactly one ParseError and processing
continues with the next line. Messages are in the user's locale (zh-TW).

Formats
-------
transactions : symbol,BUY|SELL,shares,price,YYYY-MM-DD,fees
dividends    : symbol,sharesHeld,dividendPerShare,YYYY-MM-DD
donations    : amount,YYYY-MM-DD,description
prices       : symbol,YYYY/MM-YYYY/MM,price1,price2,...
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterator
from datetime import date

import pandas as pd

from folio_core.records import net_dividend_amount
from folio_core.transaction import TransactionKind

from bulk_import.types import (
    DividendRecord,
    DonationRecord,
    ImportKind,
    ParseError,
    ParseResult,
    PriceRecord,
    R,
    TransactionRecord,
)

DATE_FORMAT = "%Y-%m-%d"
_MONTH_RE = re.compile(r"^(\d{4})/(\d{2})$")


class LineError(ValueError):
    """Raised by a line parser; becomes that line's ParseError."""


# --- Field helpers ---


def parse_number(value: str) -> float | None:
    """Finite float, or None if value is not a number."""
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_date(value: str) -> date | None:
    """Calendar date in YYYY-MM-DD form, or None."""
    try:
        ts = pd.to_datetime(value, format=DATE_FORMAT)
    except (ValueError, TypeError):
        return None
    return None if pd.isna(ts) else ts.date()


def expand_month_range(range_str: str) -> list[str]:
    """
    'YYYY/MM-YYYY/MM' -> inclusive list of 'YYYY-MM' keys.
    Raises LineError for a malformed or reversed range.
    """
    bounds = range_str.split("-")
    if len(bounds) != 2:
        raise LineError(f'無效的區間格式: "{range_str}"，應為 YYYY/MM-YYYY/MM')
    start_match = _MONTH_RE.match(bounds[0])
    end_match = _MONTH_RE.match(bounds[1])
    if not start_match or not end_match:
        raise LineError(f'無效的日期格式: "{range_str}"，應為 YYYY/MM')
    start = (int(start_match[1]), int(start_match[2]))
    end = (int(end_match[1]), int(end_match[2]))
    if start[0] < 1 or not (1 <= start[1] <= 12 and 1 <= end[1] <= 12) or start > end:
        raise LineError(f'無效的日期區間: "{range_str}"')
    try:
        periods = pd.period_range(start=f"{start[0]:04d}-{start[1]:02d}", end=f"{end[0]:04d}-{end[1]:02d}", freq="M")
    except ValueError as exc:
        raise LineError(f'無效的日期區間: "{range_str}"') from exc
    return [p.strftime("%Y-%m") for p in periods]


def _require_symbol(value: str) -> str:
    if not value:
        raise LineError("代號不可為空")
    return value.upper()


def _require_date(value: str) -> date:
    d = parse_date(value)
    if d is None:
        raise LineError(f'無效的日期格式: "{value}"')
    return d


def _require_number(value: str, label: str, *, positive: bool) -> float:
    number = parse_number(value)
    if number is None or number < 0 or (positive and number == 0):
        raise LineError(f'無效的{label}: "{value}"')
    return number


# --- Line parsers ---


def _transaction_line(parts: list[str]) -> Iterator[TransactionRecord]:
    if len(parts) != 6:
        raise LineError("格式錯誤，應有 6 個欄位")
    symbol_str, kind_str, shares_str, price_str, date_str, fees_str = parts
    symbol = _require_symbol(symbol_str)
    try:
        kind = TransactionKind(kind_str.upper())
    except ValueError:
        raise LineError(f'無效的交易類型: "{kind_str}"') from None
    shares = _require_number(shares_str, "股數", positive=True)
    price = _require_number(price_str, "價格", positive=False)
    d = _require_date(date_str)
    fees = _require_number(fees_str, "手續費", positive=False)
    yield TransactionRecord(symbol=symbol, kind=kind, shares=shares, price=price, date=d, fees=fees)


def _dividend_line(parts: list[str]) -> Iterator[DividendRecord]:
    if len(parts) != 4:
        raise LineError("格式錯誤，應有 4 個欄位 (代號,股數,每股股利,日期)")
    symbol_str, shares_str, rate_str, date_str = parts
    symbol = _require_symbol(symbol_str)
    shares_held = _require_number(shares_str, "股數", positive=True)
    per_share = _require_number(rate_str, "每股股利", positive=False)
    d = _require_date(date_str)
    yield DividendRecord(
        symbol=symbol,
        amount=net_dividend_amount(shares_held, per_share),
        date=d,
        shares_held=shares_held,
        dividend_per_share=per_share,
    )


def _donation_line(parts: list[str]) -> Iterator[DonationRecord]:
    if len(parts) != 3:
        raise LineError("格式錯誤，應有 3 個欄位")
    amount_str, date_str, description = parts
    amount = _require_number(amount_str, "金額", positive=True)
    d = _require_date(date_str)
    if not description:
        raise LineError("說明不可為空")
    yield DonationRecord(amount=amount, date=d, description=description)


def _price_line(parts: list[str]) -> Iterator[PriceRecord]:
    # Yields month by month; a bad price stops the line after earlier months were emitted.
    if len(parts) < 3:
        raise LineError("格式錯誤，至少應有 3 個欄位 (代號, 區間, 價格)")
    symbol_str, range_str, *price_strs = parts
    symbol = _require_symbol(symbol_str)
    months = expand_month_range(range_str)
    if len(months) != len(price_strs):
        raise LineError(f"價格數量 ({len(price_strs)}) 與月份數量 ({len(months)}) 不符")
    for i, (ym, price_str) in enumerate(zip(months, price_strs), start=1):
        price = parse_number(price_str)
        if price is None or price < 0:
            raise LineError(f'第 {i} 個價格無效: "{price_str}"')
        yield PriceRecord(symbol=symbol, year_month=ym, price=price)


def _parse_lines(
    text: str,
    parse_line: Callable[[list[str]], Iterator[R]],
    *,
    atomic: bool = True,
) -> ParseResult[R]:
    result: ParseResult = ParseResult()
    for number, raw in enumerate(text.split("\n"), start=1):
        line = raw.strip()
        if not line:
            continue
        parts = [p.strip() for p in line.split(",")]
        emitted = []
        try:
            for record in parse_line(parts):
                emitted.append(record)
        except LineError as exc:
            result.errors.append(ParseError(line=number, error=str(exc)))
            if atomic:
                continue
        result.success.extend(emitted)
    return result


# --- Public API ---


def parse_transactions(text: str) -> ParseResult[TransactionRecord]:
    return _parse_lines(text, _transaction_line)


def parse_dividends(text: str) -> ParseResult[DividendRecord]:
    """Amount is derived as max(0, floor(sharesHeld * dividendPerShare - 10))."""
    return _parse_lines(text, _dividend_line)


def parse_donations(text: str) -> ParseResult[DonationRecord]:
    return _parse_lines(text, _donation_line)


def parse_historical_prices(text: str, *, atomic: bool = False) -> ParseResult[PriceRecord]:
    """
    One PriceRecord per month of each line's range.

    By default a line whose Nth price is invalid keeps the records for months
    before N (and reports one error). With atomic=True such a line contributes
    no records at all.
    """
    return _parse_lines(text, _price_line, atomic=atomic)


_PARSERS: dict[ImportKind, Callable[[str], ParseResult]] = {
    ImportKind.TRANSACTIONS: parse_transactions,
    ImportKind.DIVIDENDS: parse_dividends,
    ImportKind.DONATIONS: parse_donations,
    ImportKind.PRICES: parse_historical_prices,
}


def parse(kind: ImportKind | str, text: str) -> ParseResult:
    """Dispatch to the parser for kind ('transactions', 'dividends', 'donations', 'prices')."""
    return _PARSERS[ImportKind(kind)](text)
