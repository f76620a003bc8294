"""User Administration Routes (Admin) — list, edit and delete role=User accounts."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.core.domain_types import TimestampType, UserRole
from app.core.errors import ConflictError
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.common import dump
from app.schemas.user import AdminUserUpdate, UserOut
from app.services.accounts import delete_user
from app.services.lookups import get_or_404
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


async def _list_users(db: AsyncSession, exclude: UUID) -> list[dict]:
    result = await db.execute(
        select(User)
        .where(User.role == UserRole.USER.value)
        .where(User.id != exclude)
        .order_by(User.created_at.desc())
    )
    return dump(UserOut, list(result.scalars()))


@router.get("")
async def list_users(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    return {"message": "Users fetched", "users": await _list_users(db, admin.id)}


@router.put("/{user_id}")
async def edit_user(
    user_id: UUID,
    body: AdminUserUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await get_or_404(db, User, user_id, "User")
    clash_filters = [User.email == body.email]
    if body.number:
        clash_filters.append(User.number == body.number)
    result = await db.execute(
        select(User).where(User.id != user_id).where(or_(*clash_filters))
    )
    clash = result.scalars().first()
    if clash is not None:
        field = "Email" if clash.email == body.email else "Phone number"
        raise ConflictError(f"{field} is already in use by another account.")

    for key, value in body.model_dump(mode="json").items():
        setattr(user, key, value)
    await touch(db, TimestampType.USER)
    await db.commit()
    logger.info("User edited by admin", extra={"user_id": str(user_id)})
    return {"message": "User updated successfully", "users": await _list_users(db, admin.id)}


@router.delete("/{user_id}")
async def remove_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await get_or_404(db, User, user_id, "User")
    await delete_user(db, user)
    return {"message": "User deleted successfully", "users": await _list_users(db, admin.id)}
