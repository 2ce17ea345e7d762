"""Group endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_tracker.services import portfolio as portfolio_service

from ..dependencies import get_db_session

router = APIRouter()


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(group_id: int, session: AsyncSession = Depends(get_db_session)) -> Response:
    await portfolio_service.delete_group(session, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
