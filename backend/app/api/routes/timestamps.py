"""Timestamp Routes — cache invalidation polling."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.database import get_db
from app.services.timestamps import last_updated

router = APIRouter(prefix="/api/v1/timestamps", tags=["timestamps"])


@router.get("/{type_name}")
async def get_timestamp(type_name: str, db: AsyncSession = Depends(get_db)):
    """Epoch-ms last update for a resource type (now if never updated)."""
    key = type_name.strip().lower()
    return {"type": key, "last_updated": await last_updated(db, key)}
