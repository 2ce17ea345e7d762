"""Naver Finance scraper tests."""

from __future__ import annotations

from decimal import Decimal

import httpx
import pytest

from portfolio_tracker.providers.naver_finance import NaverFinanceClient, NaverFinanceError, parse_current_price

ITEM_PAGE = """
<html><body>
<div class="rate_info">
  <div class="today">
    <p class="no_today">
      <em class="no_up">
        <span class="blind">72,500</span>
        <span class="no7">7</span><span class="shim">,</span><span class="no2">2</span>
      </em>
    </p>
    <p class="no_exday">
      <em><span class="blind">1,200</span></em>
    </p>
  </div>
</div>
</body></html>
"""


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _client(handler, **kwargs) -> tuple[NaverFinanceClient, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NaverFinanceClient(http, base_url="https://finance.test/item/main.nhn", **kwargs), http


def test_parse_current_price_reads_first_blind_span():
    assert parse_current_price(ITEM_PAGE) == Decimal("72500")


def test_parse_current_price_rejects_pages_without_marker():
    with pytest.raises(NaverFinanceError):
        parse_current_price("<html><p class='no_exday'><span class='blind'>1,200</span></p></html>")
    with pytest.raises(NaverFinanceError):
        parse_current_price("<p class='no_today'><span class='blind'>N/A</span></p>")


@pytest.mark.asyncio
async def test_fetch_price_strips_suffix_and_sends_browser_agent():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=ITEM_PAGE)

    client, http = _client(handler, user_agent="Mozilla/5.0 test")
    async with http:
        assert await client.fetch_price("005930.KS") == Decimal("72500")

    assert seen[0].url.params["code"] == "005930"
    assert seen[0].headers["User-Agent"] == "Mozilla/5.0 test"


@pytest.mark.asyncio
async def test_invalid_code_is_unresolved_without_request():
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("no request expected")

    client, http = _client(handler)
    async with http:
        assert await client.fetch_price("AAPL") is None
        assert await client.fetch_price("12345.KQ") is None


@pytest.mark.asyncio
async def test_http_and_parse_failures_are_unresolved():
    responses = iter([httpx.Response(500, text="oops"), httpx.Response(200, text="<html></html>")])

    client, http = _client(lambda request: next(responses))
    async with http:
        assert await client.fetch_price("005930") is None
        assert await client.fetch_price("005930") is None


@pytest.mark.asyncio
async def test_network_error_is_unresolved():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    client, http = _client(handler)
    async with http:
        assert await client.fetch_price("005930") is None


@pytest.mark.asyncio
async def test_prices_are_cached_until_ttl_expires():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, text=ITEM_PAGE)

    clock = Clock()
    client, http = _client(handler, cache_ttl_seconds=60, clock=clock)
    async with http:
        await client.fetch_price("005930.KS")
        clock.now = 59
        await client.fetch_price("005930")
        assert calls == 1
        clock.now = 61
        await client.fetch_price("005930.KS")
        assert calls == 2
