"""Shared quote type and provider protocols."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol, Sequence

MARKET_SUFFIXES = (".KS", ".KQ")
DOMESTIC_CODE_PATTERN = re.compile(r"\d{6}")


def strip_market_suffix(symbol: str) -> str:
    for suffix in MARKET_SUFFIXES:
        if symbol.endswith(suffix):
            return symbol[: -len(suffix)]
    return symbol


def is_domestic_code(symbol: str) -> bool:
    """True when ``symbol`` is a bare six digit domestic code."""

    return DOMESTIC_CODE_PATTERN.fullmatch(symbol) is not None


def to_price(value: Any) -> Decimal | None:
    """Coerce a provider value into a positive Decimal, or ``None``."""

    if value is None or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price


@dataclass(frozen=True)
class PriceQuote:
    symbol: str
    price: Decimal

    @classmethod
    def from_raw(cls, symbol: Any, value: Any) -> PriceQuote | None:
        """Validate one provider entry; malformed entries yield ``None``."""

        if not isinstance(symbol, str) or not symbol.strip():
            return None
        price = to_price(value)
        if price is None:
            return None
        return cls(symbol=symbol.strip(), price=price)


class QuoteSource(Protocol):
    """Primary provider: bulk and single symbol quotes."""

    async def quote(self, symbols: Sequence[str]) -> list[PriceQuote]:
        ...

    async def quote_one(self, symbol: str) -> PriceQuote | None:
        ...


class DomesticPriceSource(Protocol):
    """Secondary provider for six digit domestic codes."""

    async def fetch_price(self, symbol: str) -> Decimal | None:
        ...


__all__ = [
    "MARKET_SUFFIXES",
    "PriceQuote",
    "QuoteSource",
    "DomesticPriceSource",
    "is_domestic_code",
    "strip_market_suffix",
    "to_price",
]
