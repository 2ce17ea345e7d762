"""Weighted-average position metrics and portfolio aggregation.

Everything here is a pure function of its inputs. Average buy price is the
total buy amount over total buy quantity and applies uniformly to every
sell; there is no lot matching. Sells beyond recorded buys leave a negative
remaining quantity, which is reported as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Sequence

from portfolio_tracker.models import Group, Stock, Transaction

ZERO = Decimal("0")
HUNDRED = Decimal("100")
_WHOLE_UNIT = Decimal("1")


def round_currency(value: Decimal) -> Decimal:
    return value.quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)


def _as_decimal(value: Decimal | float | int) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _percentage(profit: Decimal, cost: Decimal) -> Decimal:
    return profit / cost * HUNDRED if cost > 0 else ZERO


@dataclass
class StockMetrics:
    stock: Stock
    transactions: list[Transaction]
    total_buy_quantity: int
    total_buy_amount: Decimal
    total_sell_quantity: int
    total_sell_amount: Decimal
    remaining_quantity: int
    avg_buy_price: Decimal
    realized_profit: Decimal
    profit_percentage: Decimal
    current_price: Decimal | None = None
    current_value: Decimal = ZERO
    unrealized_profit: Decimal = ZERO
    unrealized_profit_percentage: Decimal = ZERO
    total_profit: Decimal = ZERO
    total_profit_percentage: Decimal = ZERO

    @property
    def cost_of_sold(self) -> Decimal:
        return self.total_sell_quantity * self.avg_buy_price

    @property
    def cost_of_remaining(self) -> Decimal:
        return self.remaining_quantity * self.avg_buy_price


@dataclass
class PortfolioSummary:
    total_buy_amount: Decimal = ZERO
    total_sell_amount: Decimal = ZERO
    total_realized_profit: Decimal = ZERO
    total_unrealized_profit: Decimal = ZERO
    total_profit: Decimal = ZERO
    total_invested: Decimal = ZERO
    profit_percentage: Decimal = ZERO


@dataclass
class StockGroup:
    name: str
    group_id: int | None = None
    stocks: list[StockMetrics] = field(default_factory=list)


def select_current_price(stock: Stock, prices: Mapping[str, Decimal]) -> Decimal | None:
    """Manual override first, then the resolved price for the stock's symbol."""

    if stock.manual_price is not None and stock.manual_price > 0:
        return _as_decimal(stock.manual_price)
    if stock.symbol:
        resolved = prices.get(stock.symbol)
        if resolved is not None and resolved > 0:
            return resolved
    return None


def calculate_stock_metrics(
    stock: Stock,
    transactions: Sequence[Transaction],
    current_price: Decimal | None = None,
) -> StockMetrics:
    buy_quantity = 0
    buy_amount = ZERO
    sell_quantity = 0
    sell_amount = ZERO

    for tx in transactions:
        amount = tx.quantity * _as_decimal(tx.price)
        if tx.type == "buy":
            buy_quantity += tx.quantity
            buy_amount += amount
        else:
            sell_quantity += tx.quantity
            sell_amount += amount

    remaining = buy_quantity - sell_quantity
    avg_buy_price = buy_amount / buy_quantity if buy_quantity > 0 else ZERO
    cost_of_sold = sell_quantity * avg_buy_price
    realized = sell_amount - cost_of_sold

    current_value = ZERO
    unrealized = ZERO
    unrealized_pct = ZERO
    if current_price is not None and current_price > 0 and remaining > 0:
        current_value = remaining * current_price
        cost_of_remaining = remaining * avg_buy_price
        unrealized = current_value - cost_of_remaining
        unrealized_pct = _percentage(unrealized, cost_of_remaining)

    total_profit = realized + unrealized
    total_cost = cost_of_sold + remaining * avg_buy_price

    return StockMetrics(
        stock=stock,
        transactions=list(transactions),
        total_buy_quantity=buy_quantity,
        total_buy_amount=round_currency(buy_amount),
        total_sell_quantity=sell_quantity,
        total_sell_amount=round_currency(sell_amount),
        remaining_quantity=remaining,
        avg_buy_price=avg_buy_price,
        realized_profit=round_currency(realized),
        profit_percentage=_percentage(realized, cost_of_sold),
        current_price=current_price,
        current_value=round_currency(current_value),
        unrealized_profit=round_currency(unrealized),
        unrealized_profit_percentage=unrealized_pct,
        total_profit=round_currency(total_profit),
        total_profit_percentage=_percentage(total_profit, total_cost),
    )


def summarize_portfolio(metrics: Iterable[StockMetrics]) -> PortfolioSummary:
    summary = PortfolioSummary()
    for item in metrics:
        summary.total_buy_amount += item.total_buy_amount
        summary.total_sell_amount += item.total_sell_amount
        summary.total_realized_profit += item.realized_profit
        summary.total_unrealized_profit += item.unrealized_profit
        summary.total_profit += item.total_profit
        summary.total_invested += item.cost_of_sold + item.cost_of_remaining
    summary.profit_percentage = _percentage(summary.total_profit, summary.total_invested)
    return summary


def group_stocks(
    metrics: Iterable[StockMetrics],
    groups: Sequence[Group],
    fallback_label: str,
) -> list[StockGroup]:
    """Bucket stocks by group, keeping every group and dropping an empty fallback."""

    buckets: dict[str, StockGroup] = {}
    for group in groups:
        buckets.setdefault(group.name, StockGroup(name=group.name, group_id=group.id))
    by_id = {group.id: group for group in groups}
    by_name = {group.name: group for group in groups}

    for item in metrics:
        stock = item.stock
        matched: Group | None = None
        if stock.group_id is not None:
            matched = by_id.get(stock.group_id)
        elif stock.group_name:
            matched = by_name.get(stock.group_name)
        label = matched.name if matched is not None else fallback_label
        bucket = buckets.setdefault(label, StockGroup(name=label))
        bucket.stocks.append(item)

    # The fallback bucket only exists once a stock lands in it.
    return list(buckets.values())


__all__ = [
    "PortfolioSummary",
    "StockGroup",
    "StockMetrics",
    "calculate_stock_metrics",
    "group_stocks",
    "round_currency",
    "select_current_price",
    "summarize_portfolio",
]
