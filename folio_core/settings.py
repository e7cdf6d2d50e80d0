"""
User settings: currency, fee and tax rates, display mode, API key.

The core does not read these itself; callers pass them to fee estimation.
Environment overrides use the FOLIO_* variables below.
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from folio_core.transaction import TransactionKind

CURRENCY_ENV = "FOLIO_CURRENCY"
FEE_RATE_ENV = "FOLIO_FEE_RATE"
TAX_RATE_ENV = "FOLIO_TAX_RATE"
DISPLAY_MODE_ENV = "FOLIO_DISPLAY_MODE"
API_KEY_ENV = "FOLIO_API_KEY"


class Currency(Enum):
    TWD = "TWD"
    USD = "USD"


class DisplayMode(Enum):
    PERCENTAGE = "PERCENTAGE"
    AMOUNT = "AMOUNT"


@dataclass(frozen=True)
class Settings:
    currency: Currency = Currency.TWD
    transaction_fee_rate: float = 0.001425
    tax_rate: float = 0.001
    display_mode: DisplayMode = DisplayMode.PERCENTAGE
    api_key: str | None = None

    def __post_init__(self) -> None:
        if self.transaction_fee_rate < 0 or self.tax_rate < 0:
            raise ValueError("fee and tax rates must be non-negative")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from environment variables, falling back to defaults.
        Raises ValueError for unknown currencies/display modes or bad rates.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            currency=Currency(env[CURRENCY_ENV].upper()) if env.get(CURRENCY_ENV) else defaults.currency,
            transaction_fee_rate=float(env[FEE_RATE_ENV]) if env.get(FEE_RATE_ENV) else defaults.transaction_fee_rate,
            tax_rate=float(env[TAX_RATE_ENV]) if env.get(TAX_RATE_ENV) else defaults.tax_rate,
            display_mode=(
                DisplayMode(env[DISPLAY_MODE_ENV].upper()) if env.get(DISPLAY_MODE_ENV) else defaults.display_mode
            ),
            api_key=env.get(API_KEY_ENV) or None,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "currency": self.currency.value,
            "transactionFeeRate": self.transaction_fee_rate,
            "taxRate": self.tax_rate,
            "displayMode": self.display_mode.value,
            "apiKey": self.api_key,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Settings:
        defaults = cls()
        return cls(
            currency=Currency(data.get("currency", defaults.currency.value)),
            transaction_fee_rate=float(data.get("transactionFeeRate", defaults.transaction_fee_rate)),
            tax_rate=float(data.get("taxRate", defaults.tax_rate)),
            display_mode=DisplayMode(data.get("displayMode", defaults.display_mode.value)),
            api_key=data.get("apiKey") or None,
        )


def estimate_fees(
    shares: float,
    price: float,
    kind: TransactionKind,
    settings: Settings,
) -> int:
    """
    Brokerage fee for a trade, plus transaction tax on sells, floored to a
    whole currency unit. Zero when shares or price are not positive.
    """
    if shares <= 0 or price <= 0:
        return 0
    gross = shares * price
    fee = gross * settings.transaction_fee_rate
    if kind is TransactionKind.SELL:
        fee += gross * settings.tax_rate
    return math.floor(fee)
