"""FAQ Routes — published FAQs for visitors, full CRUD for admins.

Every mutation bumps the faq timestamp and returns the refreshed admin list.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.core.domain_types import PublicationStatus, TimestampType
from app.infrastructure.database import get_db
from app.models.faq import Faq
from app.models.user import User
from app.schemas.common import dump
from app.schemas.content import FaqCreate, FaqOut, PublicationUpdate
from app.services.lookups import get_or_404
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/faqs", tags=["faqs"])


async def _all_faqs(db: AsyncSession) -> list[dict]:
    result = await db.execute(select(Faq).order_by(Faq.created_at.desc()))
    return dump(FaqOut, list(result.scalars()))


async def _commit_and_list(db: AsyncSession, message: str) -> dict:
    await touch(db, TimestampType.FAQ)
    await db.commit()
    return {"message": message, "faqs": await _all_faqs(db)}


@router.get("")
async def published_faqs(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Faq)
        .where(Faq.status == PublicationStatus.PUBLISHED.value)
        .order_by(Faq.created_at.desc())
    )
    return {"message": "FAQs fetched", "faqs": dump(FaqOut, list(result.scalars()))}


@router.get("/admin")
async def all_faqs(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    return {"message": "FAQs fetched", "faqs": await _all_faqs(db)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_faq(
    body: FaqCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    db.add(Faq(question=body.question, answer=body.answer))
    return await _commit_and_list(db, "FAQ created")


@router.put("/{faq_id}")
async def edit_faq(
    faq_id: UUID,
    body: FaqCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    faq = await get_or_404(db, Faq, faq_id, "FAQ")
    faq.question = body.question
    faq.answer = body.answer
    return await _commit_and_list(db, "FAQ updated")


@router.put("/{faq_id}/status")
async def set_faq_status(
    faq_id: UUID,
    body: PublicationUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    faq = await get_or_404(db, Faq, faq_id, "FAQ")
    faq.status = body.status.value
    return await _commit_and_list(db, "FAQ status updated")


@router.delete("/{faq_id}")
async def delete_faq(
    faq_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    faq = await get_or_404(db, Faq, faq_id, "FAQ")
    await db.delete(faq)
    logger.info("FAQ deleted", extra={"resource": str(faq_id)})
    return await _commit_and_list(db, "FAQ deleted")
