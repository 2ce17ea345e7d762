"""Datastore operations and the dashboard read path."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_tracker.config import get_settings
from portfolio_tracker.models import Group, Portfolio, Stock, Transaction
from portfolio_tracker.schemas import (
    StockCreateRequest,
    StockUpdateRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)
from portfolio_tracker.services.positions import (
    PortfolioSummary,
    StockGroup,
    StockMetrics,
    calculate_stock_metrics,
    group_stocks,
    select_current_price,
    summarize_portfolio,
)
from portfolio_tracker.services.pricing import PriceResolver

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Raised when a requested row does not exist."""


class InvalidInputError(ValueError):
    """Raised when a write would break a datastore rule, e.g. a blank name."""


@dataclass
class Dashboard:
    portfolio: Portfolio
    groups: list[Group]
    stocks: list[StockMetrics]
    grouped_stocks: list[StockGroup]
    summary: PortfolioSummary
    prices: dict[str, Decimal] = field(default_factory=dict)


def _normalize_symbol(symbol: str | None) -> str | None:
    if symbol is None:
        return None
    normalized = symbol.strip().upper()
    return normalized or None


async def _get(session: AsyncSession, model: type, row_id: int, label: str):
    record = await session.get(model, row_id)
    if record is None:
        raise NotFoundError(f"{label} {row_id} not found")
    return record


# ---------------------------------------------------------------- portfolios


async def ensure_portfolio(session: AsyncSession) -> Portfolio:
    result = await session.execute(select(Portfolio).order_by(Portfolio.id).limit(1))
    portfolio = result.scalars().first()
    if portfolio is not None:
        return portfolio
    settings = get_settings()
    portfolio = Portfolio(
        name=settings.default_portfolio_name,
        description=settings.default_portfolio_description,
    )
    session.add(portfolio)
    await session.commit()
    await session.refresh(portfolio)
    logger.info("Created default portfolio %s", portfolio.id)
    return portfolio


async def get_portfolio(session: AsyncSession, portfolio_id: int) -> Portfolio:
    return await _get(session, Portfolio, portfolio_id, "Portfolio")


# -------------------------------------------------------------------- groups


async def list_groups(session: AsyncSession, portfolio_id: int) -> list[Group]:
    result = await session.execute(
        select(Group).where(Group.portfolio_id == portfolio_id).order_by(Group.created_at, Group.id)
    )
    return list(result.scalars().all())


async def create_group(session: AsyncSession, portfolio_id: int, name: str) -> Group:
    await get_portfolio(session, portfolio_id)
    normalized = name.strip()
    if not normalized:
        raise InvalidInputError("Group name must not be empty")
    group = Group(portfolio_id=portfolio_id, name=normalized)
    session.add(group)
    await session.commit()
    await session.refresh(group)
    return group


async def delete_group(session: AsyncSession, group_id: int) -> None:
    group = await _get(session, Group, group_id, "Group")
    # Member stocks fall back to the unassigned bucket.
    await session.execute(
        update(Stock).where(Stock.group_id == group_id).values(group_id=None, group_name=None)
    )
    await session.delete(group)
    await session.commit()


# -------------------------------------------------------------------- stocks


async def _resolve_group(session: AsyncSession, portfolio_id: int, group_id: int | None) -> tuple[int | None, str]:
    if group_id is None:
        return None, get_settings().unassigned_group_label
    group = await session.get(Group, group_id)
    if group is None or group.portfolio_id != portfolio_id:
        raise InvalidInputError("Invalid group selected for stock")
    return group.id, group.name


async def list_stocks(session: AsyncSession, portfolio_id: int) -> list[Stock]:
    result = await session.execute(
        select(Stock).where(Stock.portfolio_id == portfolio_id).order_by(Stock.created_at, Stock.id)
    )
    return list(result.scalars().all())


async def get_stock(session: AsyncSession, stock_id: int) -> Stock:
    return await _get(session, Stock, stock_id, "Stock")


async def create_stock(session: AsyncSession, portfolio_id: int, payload: StockCreateRequest) -> Stock:
    await get_portfolio(session, portfolio_id)
    name = payload.name.strip()
    if not name:
        raise InvalidInputError("Stock name must not be empty")
    group_id, group_name = await _resolve_group(session, portfolio_id, payload.group_id)
    stock = Stock(
        portfolio_id=portfolio_id,
        name=name,
        symbol=_normalize_symbol(payload.symbol),
        group_id=group_id,
        group_name=group_name,
    )
    session.add(stock)
    await session.commit()
    await session.refresh(stock)
    return stock


async def update_stock(session: AsyncSession, stock_id: int, payload: StockUpdateRequest) -> Stock:
    stock = await get_stock(session, stock_id)
    name = payload.name.strip()
    if not name:
        raise InvalidInputError("Stock name must not be empty")
    if payload.manual_price is not None and payload.manual_price <= 0:
        raise InvalidInputError("Manual price must be positive")
    group_id, group_name = await _resolve_group(session, stock.portfolio_id, payload.group_id)
    stock.name = name
    stock.symbol = _normalize_symbol(payload.symbol)
    stock.manual_price = payload.manual_price
    stock.group_id = group_id
    stock.group_name = group_name
    await session.commit()
    await session.refresh(stock)
    return stock


async def delete_stock(session: AsyncSession, stock_id: int) -> None:
    stock = await get_stock(session, stock_id)
    await session.execute(delete(Transaction).where(Transaction.stock_id == stock_id))
    await session.delete(stock)
    await session.commit()


# -------------------------------------------------------------- transactions


def _validate_transaction(payload: TransactionCreateRequest) -> None:
    if payload.type not in ("buy", "sell"):
        raise InvalidInputError(f"Unsupported transaction type {payload.type!r}")
    if payload.quantity <= 0:
        raise InvalidInputError("Quantity must be a positive integer")
    if payload.price <= 0:
        raise InvalidInputError("Price must be positive")


async def list_transactions(session: AsyncSession, stock_id: int) -> list[Transaction]:
    await get_stock(session, stock_id)
    result = await session.execute(
        select(Transaction)
        .where(Transaction.stock_id == stock_id)
        .order_by(Transaction.transaction_date, Transaction.id)
    )
    return list(result.scalars().all())


async def create_transaction(
    session: AsyncSession, stock_id: int, payload: TransactionCreateRequest
) -> Transaction:
    await get_stock(session, stock_id)
    _validate_transaction(payload)
    record = Transaction(
        stock_id=stock_id,
        type=payload.type,
        quantity=payload.quantity,
        price=payload.price,
        transaction_date=payload.transaction_date,
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


async def update_transaction(
    session: AsyncSession, transaction_id: int, payload: TransactionUpdateRequest
) -> Transaction:
    record = await _get(session, Transaction, transaction_id, "Transaction")
    _validate_transaction(payload)
    record.type = payload.type
    record.quantity = payload.quantity
    record.price = payload.price
    record.transaction_date = payload.transaction_date
    await session.commit()
    await session.refresh(record)
    return record


async def delete_transaction(session: AsyncSession, transaction_id: int) -> None:
    record = await _get(session, Transaction, transaction_id, "Transaction")
    await session.delete(record)
    await session.commit()


# ----------------------------------------------------------------- dashboard


def _matches(stock: Stock, query: str) -> bool:
    needle = query.lower()
    return needle in stock.name.lower() or (stock.symbol is not None and needle in stock.symbol.lower())


async def load_dashboard(
    session: AsyncSession,
    portfolio_id: int,
    resolver: PriceResolver,
    *,
    search: str | None = None,
) -> Dashboard:
    """Read every row for the portfolio and recompute all derived metrics.

    The summary always covers the whole portfolio; ``search`` only narrows
    the listed and grouped stocks.
    """

    portfolio = await get_portfolio(session, portfolio_id)
    groups = await list_groups(session, portfolio_id)
    stocks = await list_stocks(session, portfolio_id)

    prices = await resolver.resolve(stock.symbol for stock in stocks)

    transactions_by_stock: dict[int, list[Transaction]] = {stock.id: [] for stock in stocks}
    if stocks:
        result = await session.execute(
            select(Transaction)
            .where(Transaction.stock_id.in_(list(transactions_by_stock)))
            .order_by(Transaction.transaction_date, Transaction.id)
        )
        for tx in result.scalars().all():
            transactions_by_stock[tx.stock_id].append(tx)

    metrics = [
        calculate_stock_metrics(stock, transactions_by_stock[stock.id], select_current_price(stock, prices))
        for stock in stocks
    ]
    summary = summarize_portfolio(metrics)

    query = search.strip() if search else ""
    visible = [item for item in metrics if _matches(item.stock, query)] if query else metrics

    return Dashboard(
        portfolio=portfolio,
        groups=groups,
        stocks=visible,
        grouped_stocks=group_stocks(visible, groups, get_settings().unassigned_group_label),
        summary=summary,
        prices=prices,
    )


__all__ = [
    "Dashboard",
    "InvalidInputError",
    "NotFoundError",
    "create_group",
    "create_stock",
    "create_transaction",
    "delete_group",
    "delete_stock",
    "delete_transaction",
    "ensure_portfolio",
    "get_portfolio",
    "get_stock",
    "list_groups",
    "list_stocks",
    "list_transactions",
    "load_dashboard",
    "update_stock",
    "update_transaction",
]
