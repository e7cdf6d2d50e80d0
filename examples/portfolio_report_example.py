"""
Portfolio report demo: record trades and dividends, then print the all-time
and yearly summaries, the per-holding total-return table and the donation fund.
"""

from datetime import date

from folio_core import Dividend, Donation, PortfolioStore, Transaction, TransactionKind, compute_financials
from reporting import compute_summary, donation_fund, monthly_dividends, print_report, total_return_frame


def main() -> None:
    store = PortfolioStore()
    store.save_transaction(
        "2330",
        Transaction(kind=TransactionKind.BUY, shares=1000, price=500, date=date(2024, 1, 10), fees=150),
        name="台積電",
        market_price=620,
    )
    store.save_transaction(
        "2330",
        Transaction(kind=TransactionKind.SELL, shares=400, price=600, date=date(2024, 6, 10), fees=90),
    )
    store.save_dividend(Dividend.from_rate("2330", 600, 3.5, date(2024, 7, 11)))
    store.save_donation(Donation(amount=1500, date=date(2024, 8, 1), description="food bank"))
    store.update_prices({"2330": 610}, as_of=date(2024, 12, 31))

    for holding in store.holdings():
        snap = compute_financials(holding)
        print(f"{holding.symbol}: {snap.current_shares:g} sh @ {snap.avg_cost:.2f}, realized {snap.realized_pnl:,.0f}")

    print_report(compute_summary(store.holdings(), store.dividends(), price_history=store.price_history))
    print_report(
        compute_summary(store.holdings(), store.dividends(), year=2024, price_history=store.price_history),
        title="2024",
    )
    print(total_return_frame(store.holdings(), store.dividends()))
    for m in monthly_dividends(store.dividends(), year=2024):
        print(f"{m.month:>2}: {m.monthly:>8,.0f} {m.cumulative:>10,.0f}")

    fund = donation_fund(store.holdings(), store.dividends(), store.donations())
    print(f"Donation fund: allotted {fund.allotment:,.0f}, donated {fund.total_donated:,.0f}, balance {fund.balance:,.0f}")


if __name__ == "__main__":
    main()
