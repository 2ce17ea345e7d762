"""Transaction edit and delete endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_tracker.schemas import TransactionSchema, TransactionUpdateRequest
from portfolio_tracker.services import portfolio as portfolio_service

from ..dependencies import get_db_session

router = APIRouter()


@router.put("/{transaction_id}", response_model=TransactionSchema)
async def put_transaction(
    transaction_id: int,
    payload: TransactionUpdateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> TransactionSchema:
    record = await portfolio_service.update_transaction(session, transaction_id, payload)
    return TransactionSchema.model_validate(record)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(transaction_id: int, session: AsyncSession = Depends(get_db_session)) -> Response:
    await portfolio_service.delete_transaction(session, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
