"""Row lookups shared by routes and services."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError


async def get_or_404(db: AsyncSession, model, row_id: UUID, label: str | None = None):
    """Load a row by primary key or raise ResourceNotFoundError."""
    row = await db.get(model, row_id)
    if row is None:
        raise ResourceNotFoundError(label or model.__name__, str(row_id))
    return row
