"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .groups import router as groups_router
from .portfolio import router as portfolio_router
from .prices import router as prices_router
from .stocks import router as stocks_router
from .transactions import router as transactions_router

api_router = APIRouter()
api_router.include_router(portfolio_router, prefix="/portfolio", tags=["portfolio"])
api_router.include_router(groups_router, prefix="/groups", tags=["groups"])
api_router.include_router(stocks_router, prefix="/stocks", tags=["stocks"])
api_router.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
api_router.include_router(prices_router, prefix="/prices", tags=["prices"])

__all__ = ["api_router"]
