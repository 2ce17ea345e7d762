"""Pydantic schema exports."""

from .portfolio import (
    DashboardSchema,
    GroupCreateRequest,
    GroupSchema,
    PortfolioSchema,
    PortfolioSummarySchema,
    PriceRequest,
    PriceResponse,
    StockCreateRequest,
    StockGroupSchema,
    StockMetricsSchema,
    StockSchema,
    StockUpdateRequest,
    TransactionCreateRequest,
    TransactionSchema,
    TransactionUpdateRequest,
)

__all__ = [
    "DashboardSchema",
    "GroupCreateRequest",
    "GroupSchema",
    "PortfolioSchema",
    "PortfolioSummarySchema",
    "PriceRequest",
    "PriceResponse",
    "StockCreateRequest",
    "StockGroupSchema",
    "StockMetricsSchema",
    "StockSchema",
    "StockUpdateRequest",
    "TransactionCreateRequest",
    "TransactionSchema",
    "TransactionUpdateRequest",
]
