"""Portfolio API tests against an in-memory database."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from fakes import FakeDomesticSource, FakeQuoteSource
from portfolio_tracker.services.pricing import PriceResolver


def _resolver() -> PriceResolver:
    return PriceResolver(
        FakeQuoteSource(bulk={"AAPL": "160"}),
        FakeDomesticSource({"005930.KS": "72000"}),
    )


async def _seed(client) -> dict[str, int]:
    portfolio = (await client.get("/portfolio")).json()
    pid = portfolio["id"]
    tech = (await client.post(f"/portfolio/{pid}/groups", json={"name": "Tech"})).json()
    apple = (
        await client.post(f"/portfolio/{pid}/stocks", json={"name": "Apple", "symbol": "aapl", "group_id": tech["id"]})
    ).json()
    samsung = (await client.post(f"/portfolio/{pid}/stocks", json={"name": "Samsung", "symbol": "005930.ks"})).json()
    for payload in (
        {"type": "buy", "quantity": 10, "price": 100, "transaction_date": "2024-01-02"},
        {"type": "buy", "quantity": 10, "price": 200, "transaction_date": "2024-01-03"},
        {"type": "sell", "quantity": 5, "price": 180, "transaction_date": "2024-02-01"},
    ):
        response = await client.post(f"/stocks/{apple['id']}/transactions", json=payload)
        assert response.status_code == 201
    await client.post(
        f"/stocks/{samsung['id']}/transactions",
        json={"type": "buy", "quantity": 2, "price": 70000, "transaction_date": "2024-01-05"},
    )
    return {"portfolio": pid, "tech": tech["id"], "apple": apple["id"], "samsung": samsung["id"]}


@pytest.mark.asyncio
async def test_default_portfolio_is_created_once(api_client):
    async with api_client(_resolver()) as client:
        first = await client.get("/portfolio")
        second = await client.get("/portfolio")
    assert first.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert first.json()["name"] == "My Portfolio"


@pytest.mark.asyncio
async def test_dashboard_computes_metrics_and_summary(api_client):
    async with api_client(_resolver()) as client:
        ids = await _seed(client)
        response = await client.get(f"/portfolio/{ids['portfolio']}/dashboard")

    assert response.status_code == 200
    payload = response.json()
    stocks = {item["name"]: item for item in payload["stocks"]}

    apple = stocks["Apple"]
    assert apple["symbol"] == "AAPL"
    assert apple["avg_buy_price"] == 150
    assert apple["remaining_quantity"] == 15
    assert apple["realized_profit"] == 150
    assert apple["current_price"] == 160
    assert apple["current_value"] == 2400
    assert apple["unrealized_profit"] == 150
    assert [tx["transaction_date"] for tx in apple["transactions"]] == ["2024-01-02", "2024-01-03", "2024-02-01"]

    samsung = stocks["Samsung"]
    assert samsung["symbol"] == "005930.KS"
    assert samsung["current_value"] == 144000
    assert samsung["unrealized_profit"] == 4000

    summary = payload["summary"]
    assert summary["total_buy_amount"] == 143000
    assert summary["total_realized_profit"] == 150
    assert summary["total_unrealized_profit"] == 4150
    assert summary["total_profit"] == 4300

    grouped = {bucket["name"]: [s["name"] for s in bucket["stocks"]] for bucket in payload["grouped_stocks"]}
    assert grouped == {"Tech": ["Apple"], "Other": ["Samsung"]}


@pytest.mark.asyncio
async def test_manual_price_overrides_fetched_quote(api_client):
    async with api_client(_resolver()) as client:
        ids = await _seed(client)
        response = await client.put(
            f"/stocks/{ids['apple']}",
            json={"name": "Apple", "symbol": "AAPL", "group_id": ids["tech"], "manual_price": 170},
        )
        assert response.status_code == 200
        dashboard = (await client.get(f"/portfolio/{ids['portfolio']}/dashboard")).json()

    apple = next(item for item in dashboard["stocks"] if item["name"] == "Apple")
    assert apple["current_price"] == 170
    assert apple["unrealized_profit"] == 300


@pytest.mark.asyncio
async def test_search_narrows_listing_but_not_summary(api_client):
    async with api_client(_resolver()) as client:
        ids = await _seed(client)
        full = (await client.get(f"/portfolio/{ids['portfolio']}/dashboard")).json()
        filtered = (await client.get(f"/portfolio/{ids['portfolio']}/dashboard", params={"search": "0059"})).json()

    assert [item["name"] for item in filtered["stocks"]] == ["Samsung"]
    assert filtered["summary"] == full["summary"]


@pytest.mark.asyncio
async def test_deleting_group_moves_stocks_to_fallback(api_client):
    async with api_client(_resolver()) as client:
        ids = await _seed(client)
        response = await client.delete(f"/groups/{ids['tech']}")
        assert response.status_code == 204
        dashboard = (await client.get(f"/portfolio/{ids['portfolio']}/dashboard")).json()

    assert [bucket["name"] for bucket in dashboard["grouped_stocks"]] == ["Other"]
    assert len(dashboard["grouped_stocks"][0]["stocks"]) == 2


@pytest.mark.asyncio
async def test_transaction_edit_and_delete(api_client):
    async with api_client(_resolver()) as client:
        ids = await _seed(client)
        transactions = (await client.get(f"/stocks/{ids['apple']}/transactions")).json()
        sell = transactions[-1]

        edited = await client.put(
            f"/transactions/{sell['id']}",
            json={"type": "sell", "quantity": 20, "price": 180, "transaction_date": "2024-02-01"},
        )
        assert edited.status_code == 200
        dashboard = (await client.get(f"/portfolio/{ids['portfolio']}/dashboard")).json()
        apple = next(item for item in dashboard["stocks"] if item["name"] == "Apple")
        assert apple["remaining_quantity"] == 0
        assert apple["current_value"] == 0

        assert (await client.delete(f"/transactions/{sell['id']}")).status_code == 204
        remaining = (await client.get(f"/stocks/{ids['apple']}/transactions")).json()
        assert len(remaining) == 2


@pytest.mark.asyncio
async def test_deleting_stock_removes_transactions(api_client):
    async with api_client(_resolver()) as client:
        ids = await _seed(client)
        assert (await client.delete(f"/stocks/{ids['apple']}")).status_code == 204
        missing = await client.get(f"/stocks/{ids['apple']}/transactions")
        dashboard = (await client.get(f"/portfolio/{ids['portfolio']}/dashboard")).json()

    assert missing.status_code == 404
    assert [item["name"] for item in dashboard["stocks"]] == ["Samsung"]


@pytest.mark.asyncio
async def test_invalid_input_is_rejected(api_client):
    async with api_client(_resolver()) as client:
        ids = await _seed(client)
        bad_quantity = await client.post(
            f"/stocks/{ids['apple']}/transactions",
            json={"type": "buy", "quantity": 0, "price": 10},
        )
        bad_type = await client.post(
            f"/stocks/{ids['apple']}/transactions",
            json={"type": "short", "quantity": 1, "price": 10},
        )
        blank_group = await client.post(f"/portfolio/{ids['portfolio']}/groups", json={"name": "   "})
        foreign_group = await client.post(
            f"/portfolio/{ids['portfolio']}/stocks", json={"name": "X", "group_id": 999}
        )
        unknown = await client.get("/portfolio/999/dashboard")

    assert bad_quantity.status_code == 422
    assert bad_type.status_code == 422
    assert blank_group.status_code == 400
    assert foreign_group.status_code == 400
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_prices_endpoint_returns_resolved_mapping(api_client):
    async with api_client(_resolver()) as client:
        response = await client.post("/prices", json={"symbols": ["AAPL", "005930.KS", "UNKNOWN"]})

    assert response.status_code == 200
    assert response.json() == {"prices": {"AAPL": 160.0, "005930.KS": 72000.0}}


@pytest.mark.asyncio
async def test_prices_endpoint_upper_cases_symbols(api_client):
    async with api_client(_resolver()) as client:
        response = await client.post("/prices", json={"symbols": [" aapl ", "005930.ks"]})

    assert response.json() == {"prices": {"AAPL": 160.0, "005930.KS": 72000.0}}


class BrokenSession:
    async def get(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))


@pytest.mark.asyncio
async def test_dashboard_reports_database_failure(api_client):
    primary = FakeQuoteSource(bulk={"AAPL": "160"})
    domestic = FakeDomesticSource()

    async def _broken_session():
        yield BrokenSession()

    async with api_client(PriceResolver(primary, domestic), session_dependency=_broken_session) as client:
        response = await client.get("/portfolio/1/dashboard")

    assert response.status_code == 503
    assert response.json() == {"detail": "Database connection error"}
    assert primary.bulk_calls == []
    assert domestic.calls == []
