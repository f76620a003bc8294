"""Transaction Routes — payment records for users and admins."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_admin
from app.core.domain_types import TimestampType
from app.infrastructure.database import get_db
from app.models.transaction import Transaction
from app.models.user import User
from app.schemas.common import dump, dump_with
from app.schemas.payment import TransactionOut
from app.schemas.user import UserSummary
from app.services.lookups import get_or_404
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


async def _all_with_users(db: AsyncSession) -> list[dict]:
    result = await db.execute(
        select(Transaction, User)
        .outerjoin(User, Transaction.user_id == User.id)
        .order_by(Transaction.created_at.desc())
    )
    return dump_with(TransactionOut, result.all(), "user", UserSummary)


@router.get("/mine")
async def my_transactions(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user.id)
        .order_by(Transaction.created_at.desc())
    )
    return {"message": "Transactions fetched", "transactions": dump(TransactionOut, list(result.scalars()))}


@router.get("")
async def list_transactions(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    return {"message": "Transactions fetched", "transactions": await _all_with_users(db)}


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    txn = await get_or_404(db, Transaction, transaction_id, "Transaction")
    await db.delete(txn)
    await touch(db, TimestampType.TRANSACTION)
    await db.commit()
    logger.info("Transaction deleted", extra={"resource": str(transaction_id)})
    return {"message": "Transaction deleted", "transactions": await _all_with_users(db)}
