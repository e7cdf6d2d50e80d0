"""
Tests for bulk_import: the four line parsers, dispatch, DataFrame preview and commit.
"""

import random
from datetime import date

import pytest

from bulk_import import (
    ImportKind,
    ParseError,
    commit_import,
    expand_month_range,
    parse,
    parse_dividends,
    parse_donations,
    parse_historical_prices,
    parse_transactions,
)
from bulk_import.parser import LineError, parse_date, parse_number
from bulk_import.types import DividendRecord, PriceRecord
from folio_core import PortfolioStore, TransactionKind, compute_financials, net_dividend_amount


# --- Field helpers ---


def test_parse_number():
    assert parse_number("12.5") == 12.5
    assert parse_number("-3") == -3.0
    assert parse_number("abc") is None
    assert parse_number("") is None
    assert parse_number("nan") is None
    assert parse_number("inf") is None


def test_parse_date():
    assert parse_date("2024-01-10") == date(2024, 1, 10)
    assert parse_date("2024-02-30") is None
    assert parse_date("2024/01/10") is None
    assert parse_date("") is None
    assert parse_date("yesterday") is None


def test_expand_month_range():
    assert expand_month_range("2024/01-2024/03") == ["2024-01", "2024-02", "2024-03"]
    assert expand_month_range("2023/11-2024/02") == ["2023-11", "2023-12", "2024-01", "2024-02"]
    assert expand_month_range("2024/05-2024/05") == ["2024-05"]


@pytest.mark.parametrize(
    "bad",
    [
        "2024/03-2024/01",
        "2024/13-2025/01",
        "2024/1-2024/3",
        "2024/01",
        "a-b-c",
        "0000/01-0000/02",
        "0000/12-2024/01",
    ],
)
def test_expand_month_range_rejects(bad):
    with pytest.raises(LineError):
        expand_month_range(bad)


# --- Transactions ---


def test_transactions_scenario():
    result = parse_transactions("2330,BUY,1000,500,2024-01-10,150\n2330,SELL,400,600,2024-06-10,90")
    assert result.errors == []
    assert result.ok
    assert len(result.success) == 2
    buy, sell = result.success
    assert buy.symbol == "2330"
    assert buy.kind is TransactionKind.BUY
    assert buy.shares == 1000
    assert buy.price == 500
    assert buy.date == date(2024, 1, 10)
    assert buy.fees == 150
    assert sell.kind is TransactionKind.SELL


def test_transactions_trim_and_normalize_case():
    result = parse_transactions("  aapl , sell , 1.5 , 0 , 2024-03-01 , 0  ")
    assert result.errors == []
    rec = result.success[0]
    assert rec.symbol == "AAPL"
    assert rec.kind is TransactionKind.SELL
    assert rec.shares == 1.5
    assert rec.price == 0.0


def test_transactions_wrong_field_count():
    result = parse_transactions("2330,BUY,1000,500,2024-01-10")
    assert result.success == []
    assert result.errors == [ParseError(line=1, error="格式錯誤，應有 6 個欄位")]


def test_blank_lines_skipped_but_counted():
    text = "\n   \n2330,BUY,1000,500,2024-01-10,150\n\n2330,BUY,x,500,2024-01-10,150\n"
    result = parse_transactions(text)
    assert len(result.success) == 1
    assert [e.line for e in result.errors] == [5]


def test_windows_line_endings():
    result = parse_transactions("2330,BUY,1,1,2024-01-10,0\r\n2330,BUY,2,1,2024-01-11,0\r\n")
    assert result.errors == []
    assert [r.shares for r in result.success] == [1, 2]


@pytest.mark.parametrize(
    "line, fragment",
    [
        (",BUY,10,500,2024-01-10,1", "代號"),
        ("2330,HOLD,10,500,2024-01-10,1", "交易類型"),
        ("2330,BUY,0,500,2024-01-10,1", "股數"),
        ("2330,BUY,-5,500,2024-01-10,1", "股數"),
        ("2330,BUY,ten,500,2024-01-10,1", "股數"),
        ("2330,BUY,inf,500,2024-01-10,1", "股數"),
        ("2330,BUY,10,-1,2024-01-10,1", "價格"),
        ("2330,BUY,10,nan,2024-01-10,1", "價格"),
        ("2330,BUY,10,500,2024-13-10,1", "日期"),
        ("2330,BUY,10,500,10/01/2024,1", "日期"),
        ("2330,BUY,10,500,2024-01-10,-1", "手續費"),
        ("2330,BUY,10,500,2024-01-10,", "手續費"),
    ],
)
def test_transactions_corrupted_field(line, fragment):
    text = "2330,BUY,1,1,2024-01-01,0\n" + line + "\n2330,SELL,1,1,2024-01-02,0"
    result = parse_transactions(text)
    assert len(result.success) == 2
    assert len(result.errors) == 1
    assert result.errors[0].line == 2
    assert fragment in result.errors[0].error


def test_generated_transaction_lines_all_parse():
    rng = random.Random(7)
    lines = [
        f"{rng.choice(['2330', '0050', 'aapl'])},{rng.choice(['BUY', 'sell', 'Buy'])},"
        f"{rng.randint(1, 5000)},{rng.uniform(0, 900):.2f},"
        f"{2020 + rng.randint(0, 5)}-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d},{rng.randint(0, 300)}"
        for _ in range(50)
    ]
    result = parse_transactions("\n".join(lines))
    assert result.errors == []
    assert len(result.success) == 50


# --- Dividends ---


def test_dividend_scenario():
    result = parse_dividends("00878,15000,0.51,2024-05-17")
    assert result.errors == []
    assert result.success == [
        DividendRecord(symbol="00878", amount=7640, date=date(2024, 5, 17), shares_held=15000, dividend_per_share=0.51)
    ]


def test_dividend_amount_floored_at_zero():
    result = parse_dividends("00878,10,0.5,2024-05-17")
    assert result.success[0].amount == 0


def test_dividend_errors():
    text = "\n".join(
        [
            "00878,15000,0.51",
            "00878,0,0.51,2024-05-17",
            "00878,15000,-0.1,2024-05-17",
            "00878,15000,0.51,2024-05-32",
            "00878,15000,0,2024-05-17",
        ]
    )
    result = parse_dividends(text)
    assert [e.line for e in result.errors] == [1, 2, 3, 4]
    assert result.errors[0].error == "格式錯誤，應有 4 個欄位 (代號,股數,每股股利,日期)"
    assert len(result.success) == 1
    assert result.success[0].amount == 0


def test_generated_dividend_lines_all_parse():
    rng = random.Random(11)
    rows = [
        (
            rng.choice(["00878", "2330", "vti"]),
            rng.randint(1, 100000),
            f"{rng.uniform(0, 5):.3f}",
            date(2018 + rng.randint(0, 7), rng.randint(1, 12), rng.randint(1, 28)),
        )
        for _ in range(50)
    ]
    text = "\n".join(f"{s},{n},{rate},{d.isoformat()}" for s, n, rate, d in rows)
    result = parse_dividends(text)
    assert result.errors == []
    assert len(result.success) == 50
    for rec, (symbol, shares, rate, d) in zip(result.success, rows):
        assert rec.symbol == symbol.upper()
        assert rec.date == d
        assert rec.amount == net_dividend_amount(shares, float(rate))
        assert rec.amount >= 0


# --- Donations ---


def test_donations():
    text = "500,2024-01-01,church\n0,2024-01-01,zero\n300,2024-02-01,\n100,2024-03-01,a,b"
    result = parse_donations(text)
    assert len(result.success) == 1
    assert result.success[0].amount == 500
    assert result.success[0].description == "church"
    assert [(e.line, e.error) for e in result.errors] == [
        (2, '無效的金額: "0"'),
        (3, "說明不可為空"),
        (4, "格式錯誤，應有 3 個欄位"),
    ]


def test_generated_donation_lines_all_parse():
    rng = random.Random(13)
    rows = [
        (
            f"{rng.uniform(1, 5000):.2f}",
            f"2024-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d}",
            rng.choice(["church", "school", "紅十字會"]),
        )
        for _ in range(50)
    ]
    result = parse_donations("\n".join(",".join(row) for row in rows))
    assert result.errors == []
    assert [r.amount for r in result.success] == [float(a) for a, _, _ in rows]
    assert [r.description for r in result.success] == [desc for _, _, desc in rows]


# --- Historical prices ---


def test_historical_prices_scenario():
    result = parse_historical_prices("5483,2024/01-2024/03,155,158,160.5")
    assert result.errors == []
    assert result.success == [
        PriceRecord(symbol="5483", year_month="2024-01", price=155.0),
        PriceRecord(symbol="5483", year_month="2024-02", price=158.0),
        PriceRecord(symbol="5483", year_month="2024-03", price=160.5),
    ]


def test_historical_prices_count_mismatch():
    result = parse_historical_prices("5483,2024/01-2024/03,155,158")
    assert result.success == []
    assert result.errors == [ParseError(line=1, error="價格數量 (2) 與月份數量 (3) 不符")]


def test_historical_prices_too_few_fields():
    result = parse_historical_prices("5483,2024/01-2024/03")
    assert len(result.errors) == 1
    assert result.success == []


def test_historical_prices_bad_range():
    result = parse_historical_prices("5483,2024/03-2024/01,1,2,3\n5483,2024-01,1")
    assert result.success == []
    assert [e.line for e in result.errors] == [1, 2]


def test_generated_price_range_lines_all_parse():
    rng = random.Random(17)
    lines = []
    expected = []
    for _ in range(30):
        symbol = rng.choice(["5483", "2330", "qqq"])
        start = rng.randint(2000 * 12, 2030 * 12)
        span = rng.randint(0, 30)
        months = [f"{m // 12:04d}-{m % 12 + 1:02d}" for m in range(start, start + span + 1)]
        prices = [f"{rng.uniform(1, 1000):.2f}" for _ in months]
        first, last = months[0].replace("-", "/"), months[-1].replace("-", "/")
        lines.append(f"{symbol},{first}-{last}," + ",".join(prices))
        expected.extend(
            PriceRecord(symbol=symbol.upper(), year_month=ym, price=float(p)) for ym, p in zip(months, prices)
        )
    result = parse_historical_prices("\n".join(lines))
    assert result.errors == []
    assert result.success == expected


@pytest.mark.parametrize("bad", ["abc", "-1", "nan", ""])
def test_historical_prices_corrupted_price_only_fails_its_line(bad):
    text = "\n".join(
        [
            "2330,2024/01-2024/02,800,810",
            f"5483,2024/01-2024/03,155,{bad},160",
            "0050,2023/12-2024/01,130,132",
        ]
    )
    result = parse_historical_prices(text, atomic=True)
    assert result.errors == [ParseError(line=2, error=f'第 2 個價格無效: "{bad}"')]
    assert [(r.symbol, r.year_month) for r in result.success] == [
        ("2330", "2024-01"),
        ("2330", "2024-02"),
        ("0050", "2023-12"),
        ("0050", "2024-01"),
    ]


def test_historical_prices_year_zero_does_not_abort_later_lines():
    result = parse_historical_prices("X,0000/01-0000/02,1,2\n5483,2024/01-2024/01,155")
    assert result.success == [PriceRecord(symbol="5483", year_month="2024-01", price=155.0)]
    assert result.errors == [ParseError(line=1, error='無效的日期區間: "0000/01-0000/02"')]


def test_historical_prices_partial_line_kept_by_default():
    result = parse_historical_prices("2330,2024/01-2024/04,800,abc,-1,820")
    assert result.success == [PriceRecord(symbol="2330", year_month="2024-01", price=800.0)]
    assert result.errors == [ParseError(line=1, error='第 2 個價格無效: "abc"')]


def test_historical_prices_atomic_drops_whole_line():
    text = "2330,2024/01-2024/02,800,abc\n5483,2024/01-2024/01,155"
    result = parse_historical_prices(text, atomic=True)
    assert result.success == [PriceRecord(symbol="5483", year_month="2024-01", price=155.0)]
    assert len(result.errors) == 1
    assert result.errors[0].line == 1


# --- Dispatch & preview ---


def test_parse_dispatch():
    assert len(parse("dividends", "00878,15000,0.51,2024-05-17").success) == 1
    assert len(parse(ImportKind.DONATIONS, "500,2024-01-01,x").success) == 1
    assert len(parse(ImportKind.PRICES, "5483,2024/01-2024/02,1,2").success) == 2
    with pytest.raises(ValueError):
        parse("stocks", "")


def test_to_frame():
    result = parse_transactions("2330,BUY,1000,500,2024-01-10,150\nbad")
    df = result.to_frame()
    assert list(df.columns) == ["symbol", "kind", "shares", "price", "date", "fees"]
    assert df.iloc[0]["kind"] == "BUY"
    assert len(df) == 1
    errors = result.errors_frame()
    assert list(errors.columns) == ["line", "error"]
    assert errors.iloc[0]["line"] == 2


def test_empty_text():
    result = parse_transactions("")
    assert result.success == []
    assert result.errors == []
    assert result.to_frame().empty


# --- Commit ---


def test_commit_transactions_rejects_oversell():
    text = "2330,BUY,1000,500,2024-01-10,150\n2330,SELL,400,600,2024-06-10,90\n2330,SELL,700,610,2024-07-01,0"
    store = PortfolioStore()
    statuses = commit_import(store, ImportKind.TRANSACTIONS, parse_transactions(text).success)
    assert [s.accepted for s in statuses] == [True, True, False]
    snap = compute_financials(store.holding("2330"))
    assert snap.current_shares == 600
    assert snap.sell_details[0].realized_pnl == pytest.approx(39850.0)


def test_commit_other_kinds():
    store = PortfolioStore()
    assert commit_import(store, "dividends", parse_dividends("00878,15000,0.51,2024-05-17").success) == []
    commit_import(store, ImportKind.DONATIONS, parse_donations("500,2024-01-01,church").success)
    commit_import(store, ImportKind.PRICES, parse_historical_prices("5483,2024/01-2024/02,155,158").success)
    assert [d.amount for d in store.dividends()] == [7640]
    assert [d.description for d in store.donations()] == ["church"]
    assert store.price_history.latest_price("5483") == 158.0


def test_commit_kind_mismatch_raises():
    records = parse_dividends("00878,15000,0.51,2024-05-17").success
    with pytest.raises(TypeError):
        commit_import(PortfolioStore(), ImportKind.DONATIONS, records)
