"""Current price resolution across the primary and domestic providers.

A resolution pass submits every symbol to the primary quote provider in one
bulk call, then falls back symbol by symbol: domestic codes go to the
scraping provider, everything else is retried individually against the
primary provider. Failures are logged and leave the symbol out of the
result; the resolver itself never raises for unresolved symbols.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Iterable

from opentelemetry import trace

from portfolio_tracker.providers import (
    DomesticPriceSource,
    NaverFinanceError,
    QuoteSource,
    YahooFinanceError,
)
from portfolio_tracker.providers.base import MARKET_SUFFIXES, is_domestic_code, strip_market_suffix

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

_PROVIDER_ERRORS = (YahooFinanceError, NaverFinanceError)


def is_domestic_candidate(symbol: str) -> bool:
    """Whether ``symbol`` should use the domestic provider as its fallback."""

    return (
        is_domestic_code(symbol)
        or symbol.endswith(MARKET_SUFFIXES)
        or is_domestic_code(strip_market_suffix(symbol))
    )


def normalize_symbols(symbols: Iterable[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for raw in symbols:
        if not raw:
            continue
        symbol = raw.strip()
        if symbol:
            seen.setdefault(symbol, None)
    return list(seen)


class PriceResolver:
    """Resolve a batch of symbols to current prices."""

    def __init__(
        self,
        primary: QuoteSource,
        domestic: DomesticPriceSource,
        *,
        max_concurrency: int = 4,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._primary = primary
        self._domestic = domestic
        self._max_concurrency = max_concurrency

    async def resolve(self, symbols: Iterable[str | None]) -> dict[str, Decimal]:
        requested = normalize_symbols(symbols)
        if not requested:
            return {}

        with tracer.start_as_current_span("prices.resolve") as span:
            span.set_attribute("prices.requested", len(requested))
            prices = await self._bulk_primary(requested)

            missing = [symbol for symbol in requested if symbol not in prices]
            if missing:
                semaphore = asyncio.Semaphore(self._max_concurrency)

                async def _bounded(symbol: str) -> tuple[str, Decimal | None]:
                    async with semaphore:
                        return symbol, await self._fallback(symbol)

                for symbol, price in await asyncio.gather(*(_bounded(s) for s in missing)):
                    if price is not None:
                        prices[symbol] = price

            span.set_attribute("prices.resolved", len(prices))
            unresolved = [symbol for symbol in requested if symbol not in prices]
            if unresolved:
                logger.info("No current price for %s", ", ".join(unresolved))
            return prices

    async def _bulk_primary(self, requested: list[str]) -> dict[str, Decimal]:
        # Providers report canonical upper-case tickers.
        wanted = {symbol.upper(): symbol for symbol in requested}
        prices: dict[str, Decimal] = {}
        try:
            quotes = await self._primary.quote(requested)
        except _PROVIDER_ERRORS as exc:
            logger.warning("Bulk quote request failed for %d symbols: %s", len(requested), exc)
            return prices
        for item in quotes:
            symbol = wanted.get(item.symbol.upper())
            if symbol is not None and item.price > 0:
                prices[symbol] = item.price
        return prices

    async def _fallback(self, symbol: str) -> Decimal | None:
        if is_domestic_candidate(symbol):
            try:
                price = await self._domestic.fetch_price(symbol)
            except _PROVIDER_ERRORS as exc:
                logger.warning("Domestic price lookup failed for %s: %s", symbol, exc)
                return None
        else:
            try:
                item = await self._primary.quote_one(symbol)
            except _PROVIDER_ERRORS as exc:
                logger.warning("Single quote retry failed for %s: %s", symbol, exc)
                return None
            price = item.price if item is not None else None
        if price is None or price <= 0:
            return None
        return price


__all__ = ["PriceResolver", "is_domestic_candidate", "normalize_symbols"]
