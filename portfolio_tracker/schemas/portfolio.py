"""Pydantic schemas for portfolios, groups, stocks, transactions, and the dashboard."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portfolio_tracker.models.portfolio import TRANSACTION_TYPES
from portfolio_tracker.services.positions import PortfolioSummary, StockGroup, StockMetrics


class PortfolioSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    created_at: datetime


class GroupCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=64, examples=["Tech"])


class GroupSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    portfolio_id: int
    name: str
    created_at: datetime


class StockCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128, examples=["Samsung Electronics"])
    symbol: str | None = Field(default=None, max_length=20, examples=["005930.KS"])
    group_id: int | None = None


class StockUpdateRequest(StockCreateRequest):
    manual_price: Decimal | None = Field(
        default=None,
        gt=0,
        description="Price override that takes precedence over any fetched quote",
    )


class StockSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    portfolio_id: int
    name: str
    symbol: str | None = None
    manual_price: float | None = None
    group_id: int | None = None
    group_name: str | None = None
    created_at: datetime


class TransactionCreateRequest(BaseModel):
    type: str = Field(..., pattern="^(" + "|".join(TRANSACTION_TYPES) + ")$")
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)
    transaction_date: date = Field(default_factory=date.today)


class TransactionUpdateRequest(TransactionCreateRequest):
    pass


class TransactionSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "stock_id": 3,
                "type": "buy",
                "quantity": 10,
                "price": 71200.0,
                "transaction_date": "2024-03-04",
                "created_at": "2024-03-04T09:12:00+00:00",
            }
        },
    )

    id: int
    stock_id: int
    type: str
    quantity: int
    price: float
    transaction_date: date
    created_at: datetime


class StockMetricsSchema(StockSchema):
    transactions: list[TransactionSchema]
    total_buy_quantity: int
    total_buy_amount: float
    total_sell_quantity: int
    total_sell_amount: float
    remaining_quantity: int
    avg_buy_price: float
    realized_profit: float
    profit_percentage: float
    current_price: float | None = None
    current_value: float
    unrealized_profit: float
    unrealized_profit_percentage: float
    total_profit: float
    total_profit_percentage: float

    @classmethod
    def from_metrics(cls, metrics: StockMetrics) -> StockMetricsSchema:
        stock = StockSchema.model_validate(metrics.stock)
        return cls(
            **stock.model_dump(),
            transactions=[TransactionSchema.model_validate(tx) for tx in metrics.transactions],
            total_buy_quantity=metrics.total_buy_quantity,
            total_buy_amount=float(metrics.total_buy_amount),
            total_sell_quantity=metrics.total_sell_quantity,
            total_sell_amount=float(metrics.total_sell_amount),
            remaining_quantity=metrics.remaining_quantity,
            avg_buy_price=float(metrics.avg_buy_price),
            realized_profit=float(metrics.realized_profit),
            profit_percentage=float(metrics.profit_percentage),
            current_price=float(metrics.current_price) if metrics.current_price is not None else None,
            current_value=float(metrics.current_value),
            unrealized_profit=float(metrics.unrealized_profit),
            unrealized_profit_percentage=float(metrics.unrealized_profit_percentage),
            total_profit=float(metrics.total_profit),
            total_profit_percentage=float(metrics.total_profit_percentage),
        )


class PortfolioSummarySchema(BaseModel):
    total_buy_amount: float
    total_sell_amount: float
    total_realized_profit: float
    total_unrealized_profit: float
    total_profit: float
    profit_percentage: float

    @classmethod
    def from_summary(cls, summary: PortfolioSummary) -> PortfolioSummarySchema:
        return cls(
            total_buy_amount=float(summary.total_buy_amount),
            total_sell_amount=float(summary.total_sell_amount),
            total_realized_profit=float(summary.total_realized_profit),
            total_unrealized_profit=float(summary.total_unrealized_profit),
            total_profit=float(summary.total_profit),
            profit_percentage=float(summary.profit_percentage),
        )


class StockGroupSchema(BaseModel):
    name: str
    group_id: int | None = None
    stocks: list[StockMetricsSchema]

    @classmethod
    def from_group(cls, group: StockGroup) -> StockGroupSchema:
        return cls(
            name=group.name,
            group_id=group.group_id,
            stocks=[StockMetricsSchema.from_metrics(item) for item in group.stocks],
        )


class DashboardSchema(BaseModel):
    portfolio: PortfolioSchema
    groups: list[GroupSchema]
    stocks: list[StockMetricsSchema]
    grouped_stocks: list[StockGroupSchema]
    summary: PortfolioSummarySchema


class PriceRequest(BaseModel):
    symbols: list[str] = Field(default_factory=list, examples=[["AAPL", "005930.KS"]])

    @field_validator("symbols")
    @classmethod
    def _upper_case(cls, value: list[str]) -> list[str]:
        return [symbol.strip().upper() for symbol in value]


class PriceResponse(BaseModel):
    prices: dict[str, float]


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
