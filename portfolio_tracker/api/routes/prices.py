"""Ad-hoc current price lookups."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from portfolio_tracker.schemas import PriceRequest, PriceResponse
from portfolio_tracker.services.pricing import PriceResolver

from ..dependencies import get_price_resolver

router = APIRouter()


@router.post("", response_model=PriceResponse)
async def resolve_prices(
    payload: PriceRequest,
    resolver: PriceResolver = Depends(get_price_resolver),
) -> PriceResponse:
    prices = await resolver.resolve(payload.symbols)
    return PriceResponse(prices={symbol: float(price) for symbol, price in prices.items()})


__all__ = ["router"]
