"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_tracker.db.session import get_session
from portfolio_tracker.services.pricing import PriceResolver


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async for session in get_session():  # pragma: no cover - FastAPI dependency wrapper
        yield session


def get_price_resolver(request: Request) -> PriceResolver:
    resolver = getattr(request.app.state, "price_resolver", None)
    if resolver is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Price resolver not ready")
    return resolver


__all__ = ["get_db_session", "get_price_resolver"]
