"""Stock endpoints and the per-stock transaction collection."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_tracker.schemas import (
    StockSchema,
    StockUpdateRequest,
    TransactionCreateRequest,
    TransactionSchema,
)
from portfolio_tracker.services import portfolio as portfolio_service

from ..dependencies import get_db_session

router = APIRouter()


@router.put("/{stock_id}", response_model=StockSchema)
async def put_stock(
    stock_id: int,
    payload: StockUpdateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> StockSchema:
    stock = await portfolio_service.update_stock(session, stock_id, payload)
    return StockSchema.model_validate(stock)


@router.delete("/{stock_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stock(stock_id: int, session: AsyncSession = Depends(get_db_session)) -> Response:
    await portfolio_service.delete_stock(session, stock_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{stock_id}/transactions", response_model=list[TransactionSchema])
async def get_transactions(
    stock_id: int, session: AsyncSession = Depends(get_db_session)
) -> list[TransactionSchema]:
    transactions = await portfolio_service.list_transactions(session, stock_id)
    return [TransactionSchema.model_validate(tx) for tx in transactions]


@router.post("/{stock_id}/transactions", response_model=TransactionSchema, status_code=201)
async def post_transaction(
    stock_id: int,
    payload: TransactionCreateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> TransactionSchema:
    record = await portfolio_service.create_transaction(session, stock_id, payload)
    return TransactionSchema.model_validate(record)


__all__ = ["router"]
