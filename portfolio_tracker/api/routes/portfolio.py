"""Portfolio endpoints: default portfolio, dashboard, and per-portfolio collections."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_tracker.schemas import (
    DashboardSchema,
    GroupCreateRequest,
    GroupSchema,
    PortfolioSchema,
    PortfolioSummarySchema,
    StockCreateRequest,
    StockGroupSchema,
    StockMetricsSchema,
    StockSchema,
)
from portfolio_tracker.services import portfolio as portfolio_service
from portfolio_tracker.services.pricing import PriceResolver

from ..dependencies import get_db_session, get_price_resolver

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=PortfolioSchema)
async def get_default_portfolio(session: AsyncSession = Depends(get_db_session)) -> PortfolioSchema:
    portfolio = await portfolio_service.ensure_portfolio(session)
    return PortfolioSchema.model_validate(portfolio)


@router.get("/{portfolio_id}/dashboard", response_model=DashboardSchema)
async def get_dashboard(
    portfolio_id: int,
    search: str | None = Query(default=None, description="Filter listed stocks by name or symbol"),
    session: AsyncSession = Depends(get_db_session),
    resolver: PriceResolver = Depends(get_price_resolver),
) -> DashboardSchema:
    try:
        dashboard = await portfolio_service.load_dashboard(session, portfolio_id, resolver, search=search)
    except SQLAlchemyError as exc:
        logger.exception("Dashboard read failed for portfolio %s", portfolio_id)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection error",
        ) from exc
    return DashboardSchema(
        portfolio=PortfolioSchema.model_validate(dashboard.portfolio),
        groups=[GroupSchema.model_validate(group) for group in dashboard.groups],
        stocks=[StockMetricsSchema.from_metrics(item) for item in dashboard.stocks],
        grouped_stocks=[StockGroupSchema.from_group(group) for group in dashboard.grouped_stocks],
        summary=PortfolioSummarySchema.from_summary(dashboard.summary),
    )


@router.get("/{portfolio_id}/groups", response_model=list[GroupSchema])
async def get_groups(portfolio_id: int, session: AsyncSession = Depends(get_db_session)) -> list[GroupSchema]:
    await portfolio_service.get_portfolio(session, portfolio_id)
    groups = await portfolio_service.list_groups(session, portfolio_id)
    return [GroupSchema.model_validate(group) for group in groups]


@router.post("/{portfolio_id}/groups", response_model=GroupSchema, status_code=status.HTTP_201_CREATED)
async def post_group(
    portfolio_id: int,
    payload: GroupCreateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> GroupSchema:
    group = await portfolio_service.create_group(session, portfolio_id, payload.name)
    return GroupSchema.model_validate(group)


@router.get("/{portfolio_id}/stocks", response_model=list[StockSchema])
async def get_stocks(portfolio_id: int, session: AsyncSession = Depends(get_db_session)) -> list[StockSchema]:
    await portfolio_service.get_portfolio(session, portfolio_id)
    stocks = await portfolio_service.list_stocks(session, portfolio_id)
    return [StockSchema.model_validate(stock) for stock in stocks]


@router.post("/{portfolio_id}/stocks", response_model=StockSchema, status_code=status.HTTP_201_CREATED)
async def post_stock(
    portfolio_id: int,
    payload: StockCreateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> StockSchema:
    stock = await portfolio_service.create_stock(session, portfolio_id, payload)
    return StockSchema.model_validate(stock)


__all__ = ["router"]
