"""Yahoo Finance quotes through yfinance, used as the primary price provider."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, Sequence

import yfinance as yf

from portfolio_tracker.config import get_settings
from portfolio_tracker.providers.base import PriceQuote

logger = logging.getLogger(__name__)

PriceLoader = Callable[[Sequence[str]], Mapping[str, Any]]


class YahooFinanceError(RuntimeError):
    """Raised when a Yahoo Finance lookup fails as a whole."""


def load_last_prices(symbols: Sequence[str]) -> dict[str, Any]:
    """Blocking lookup of the last traded price for each symbol.

    yfinance upper-cases tickers, so keys come back in canonical form.
    Tickers without a usable price are skipped.
    """

    tickers = yf.Tickers(" ".join(symbols))
    prices: dict[str, Any] = {}
    for symbol, ticker in tickers.tickers.items():
        try:
            prices[symbol] = ticker.fast_info.last_price
        except Exception as exc:  # yfinance raises assorted errors for delisted or unknown tickers
            logger.debug("No last price from yfinance for %s: %s", symbol, exc)
    return prices


class YahooFinanceClient:
    """Bulk and single-symbol quotes; blocking yfinance calls run in a worker thread."""

    def __init__(
        self,
        loader: PriceLoader | None = None,
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        self._loader = loader or load_last_prices
        self._timeout = timeout_seconds or get_settings().price_request_timeout_seconds

    async def _fetch(self, symbols: Sequence[str]) -> Mapping[str, Any]:
        try:
            raw = await asyncio.wait_for(asyncio.to_thread(self._loader, list(symbols)), self._timeout)
        except asyncio.TimeoutError as exc:
            raise YahooFinanceError(f"Yahoo Finance timed out after {self._timeout}s") from exc
        except Exception as exc:
            raise YahooFinanceError(f"Yahoo Finance lookup failed: {exc}") from exc
        if not isinstance(raw, Mapping):
            raise YahooFinanceError("Yahoo Finance returned an unexpected payload")
        return raw

    async def quote(self, symbols: Sequence[str]) -> list[PriceQuote]:
        """Return validated quotes for ``symbols``; unknown symbols are simply absent."""

        if not symbols:
            return []
        quotes: list[PriceQuote] = []
        for symbol, value in (await self._fetch(symbols)).items():
            parsed = PriceQuote.from_raw(symbol, value)
            if parsed is None:
                logger.debug("Discarding malformed Yahoo Finance quote for %r: %r", symbol, value)
                continue
            quotes.append(parsed)
        return quotes

    async def quote_one(self, symbol: str) -> PriceQuote | None:
        wanted = symbol.strip().upper()
        for item in await self.quote([symbol]):
            if item.symbol.upper() == wanted:
                return item
        return None


__all__ = ["YahooFinanceClient", "YahooFinanceError", "load_last_prices"]
