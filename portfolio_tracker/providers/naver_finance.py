"""Naver Finance scraper used as the domestic fallback price provider."""

from __future__ import annotations

import logging
import re
import time
from decimal import Decimal
from typing import Callable

import httpx
from bs4 import BeautifulSoup

from portfolio_tracker.config import get_settings
from portfolio_tracker.providers.base import is_domestic_code, strip_market_suffix

logger = logging.getLogger(__name__)

_PRICE_TOKEN = re.compile(r"[\d,]+")


class NaverFinanceError(RuntimeError):
    """Raised when an item page cannot be fetched or holds no current price."""


def parse_current_price(html: str) -> Decimal:
    """Extract the current price from a Naver Finance item page.

    The price is the first ``span.blind`` inside ``p.no_today`` holding a
    comma grouped integer, e.g. ``<span class="blind">72,500</span>``.
    """

    soup = BeautifulSoup(html, "html.parser")
    block = soup.select_one("p.no_today")
    if block is None:
        raise NaverFinanceError("Current price block not found")
    for span in block.select("span.blind"):
        text = span.get_text(strip=True)
        if _PRICE_TOKEN.fullmatch(text) and any(ch.isdigit() for ch in text):
            return Decimal(int(text.replace(",", "")))
    raise NaverFinanceError("Current price token not found")


class NaverFinanceClient:
    """Scrapes current prices for six digit codes, caching hits for a short TTL."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout_seconds: float | None = None,
        cache_ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        settings = get_settings()
        self._base_url = base_url or settings.naver_item_url
        self._headers = {"User-Agent": user_agent or settings.user_agent}
        self._timeout = timeout_seconds or settings.price_request_timeout_seconds
        self._ttl = settings.naver_cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds
        self._clock = clock
        self._cache: dict[str, tuple[float, Decimal]] = {}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _cached(self, code: str) -> Decimal | None:
        entry = self._cache.get(code)
        if entry is None:
            return None
        expires_at, price = entry
        if self._clock() >= expires_at:
            del self._cache[code]
            return None
        return price

    async def _fetch_page(self, code: str) -> str:
        try:
            response = await self._client.get(
                self._base_url, params={"code": code}, headers=self._headers, timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            raise NaverFinanceError(f"Failed to reach Naver Finance: {exc}") from exc
        if response.status_code >= 400:
            raise NaverFinanceError(f"Naver Finance error {response.status_code}")
        return response.text

    async def fetch_price(self, symbol: str) -> Decimal | None:
        """Return the current price for ``symbol`` or ``None`` when unresolved."""

        code = strip_market_suffix(symbol.strip())
        if not is_domestic_code(code):
            return None

        cached = self._cached(code)
        if cached is not None:
            return cached

        try:
            price = parse_current_price(await self._fetch_page(code))
        except NaverFinanceError as exc:
            logger.warning("Naver Finance fetch failed for %s: %s", symbol, exc)
            return None
        if price <= 0:
            return None

        if self._ttl > 0:
            self._cache[code] = (self._clock() + self._ttl, price)
        return price


__all__ = ["NaverFinanceClient", "NaverFinanceError", "parse_current_price"]
