"""Liveness probe."""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge import __version__
from moneybridge.interfaces.http.deps import get_db_session
from moneybridge.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="Service and database health")
async def health(db: AsyncSession = Depends(get_db_session)) -> HealthResponse:
    await db.execute(text("SELECT 1"))
    return HealthResponse(version=__version__)
