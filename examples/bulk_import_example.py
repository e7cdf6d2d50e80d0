"""
Bulk import demo: paste text → parse → review errors → commit to the store.

Demonstrates per-line error reporting and oversell rejection on commit.
"""

from bulk_import import ImportKind, commit_import, parse
from folio_core import PortfolioStore

TRANSACTIONS = """
2330,BUY,1000,500,2024-01-10,150
2330,SELL,400,600,2024-06-10,90
2330,SELL,900,610,2024-07-01,120
0050,BUY,200,150
"""

PRICES = """
5483,2024/01-2024/03,155,158,160.5
2330,2024/05-2024/06,800,abc
"""


def main() -> None:
    store = PortfolioStore()

    result = parse(ImportKind.TRANSACTIONS, TRANSACTIONS)
    print(result.to_frame())
    for err in result.errors:
        print(f"line {err.line}: {err.error}")

    # The 900-share sell exceeds the 600 shares left and is refused here
    for status in commit_import(store, ImportKind.TRANSACTIONS, result.success):
        if not status.accepted:
            print(f"rejected: {status.message}")

    prices = parse(ImportKind.PRICES, PRICES)
    print(prices.to_frame())
    print(prices.errors_frame())
    commit_import(store, ImportKind.PRICES, prices.success)


if __name__ == "__main__":
    main()
