"""Report Routes — visitor complaints about listings and their admin queue.

Invariants:
    - Captcha checked before any lookup or write (401)
    - One report per listing per email or phone number (409)
    - The reported listing's creator is recorded as agent_id
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.api.deps import client_ip, require_admin
from app.core.domain_types import ReportStatus, TimestampType
from app.core.errors import CaptchaVerificationError, ConflictError
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.listing import Listing
from app.models.report import Report
from app.models.user import User
from app.schemas.common import dump
from app.schemas.report import ReportCreate, ReportOut, ReportStatusUpdate
from app.schemas.user import UserSummary
from app.services.lookups import get_or_404
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/reports", tags=["reports"])

_Agent = aliased(User)


async def _queue(db: AsyncSession) -> list[dict]:
    result = await db.execute(
        select(Report, Listing, _Agent)
        .outerjoin(Listing, Report.listing_id == Listing.id)
        .outerjoin(_Agent, Report.agent_id == _Agent.id)
        .order_by(Report.created_at.desc())
    )
    return [
        {
            **dump(ReportOut, report),
            "listing": {"id": str(listing.id), "title": listing.title} if listing else None,
            "agent": dump(UserSummary, agent) if agent else None,
        }
        for report, listing, agent in result.all()
    ]


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_report(
    body: ReportCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    ip = client_ip(request)
    if not await clients.captcha.verify(body.captcha_token, ip):
        raise CaptchaVerificationError()

    listing = await get_or_404(db, Listing, body.listing_id, "Listing")
    email = body.email.lower()
    existing = await db.execute(
        select(Report.id)
        .where(Report.listing_id == listing.id)
        .where(or_(Report.email == email, Report.number == body.number))
        .limit(1)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("You have already reported this listing.")

    report = Report(
        fullname=body.fullname,
        email=email,
        number=body.number,
        category=body.category,
        message=body.message,
        listing_id=listing.id,
        agent_id=listing.created_by,
        country=await clients.geo.country_for(ip),
        status=ReportStatus.PENDING.value,
    )
    db.add(report)
    await touch(db, TimestampType.REPORT)
    await db.commit()
    await db.refresh(report)
    logger.info("Report submitted", extra={"resource": str(listing.id)})
    return {"message": "Report submitted successfully", "report": dump(ReportOut, report)}


@router.get("")
async def list_reports(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    return {"message": "Reports fetched", "reports": await _queue(db)}


@router.put("/{report_id}/status")
async def update_report_status(
    report_id: UUID,
    body: ReportStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    report = await get_or_404(db, Report, report_id, "Report")
    report.status = body.status.value
    await touch(db, TimestampType.REPORT)
    await db.commit()
    await db.refresh(report)
    return {"message": "Report status updated", "report": dump(ReportOut, report)}


@router.delete("/{report_id}")
async def delete_report(
    report_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    report = await get_or_404(db, Report, report_id, "Report")
    await db.delete(report)
    await touch(db, TimestampType.REPORT)
    await db.commit()
    logger.info("Report deleted", extra={"resource": str(report_id)})
    return {"message": "Report deleted", "reports": await _queue(db)}
