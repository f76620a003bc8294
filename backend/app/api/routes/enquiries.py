"""Enquiry Routes — visitor messages to listing agents and the agent inbox.

Invariants:
    - Submission needs an existing listing with an existing creator (404 otherwise)
    - Agent name and photo are copied onto the enquiry at submission time
    - Admins see every enquiry; Agents see and manage only their own (403 otherwise)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import client_ip, require_staff
from app.core.domain_types import TimestampType, UserRole
from app.core.errors import PermissionDeniedError, ResourceNotFoundError
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.enquiry import Enquiry
from app.models.listing import Listing
from app.models.user import User
from app.schemas.common import dump
from app.schemas.enquiry import EnquiryCreate, EnquiryOut
from app.services.lookups import get_or_404
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/enquiries", tags=["enquiries"])


def _check_inbox_owner(enquiry: Enquiry, user: User) -> None:
    if user.role != UserRole.ADMIN.value and enquiry.agent_id != user.id:
        raise PermissionDeniedError("You can only manage your own enquiries.")


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_enquiry(
    body: EnquiryCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    listing = await get_or_404(db, Listing, body.listing_id, "Listing")
    agent = await db.get(User, listing.created_by) if listing.created_by else None
    if agent is None:
        raise ResourceNotFoundError("Agent", str(listing.created_by))

    enquiry = Enquiry(
        name=body.name,
        email=body.email.lower(),
        number=body.number,
        message=body.message,
        listing_id=listing.id,
        agent_id=agent.id,
        agent_name=" ".join(filter(None, [agent.firstname, agent.lastname])),
        agent_image=(agent.profile_photo or {}).get("url") or "",
        country=await clients.geo.country_for(client_ip(request)),
    )
    db.add(enquiry)
    await touch(db, TimestampType.ENQUIRY)
    await db.commit()
    await db.refresh(enquiry)
    logger.info("Enquiry submitted", extra={"resource": str(listing.id)})
    return {"message": "Enquiry sent successfully", "enquiry": dump(EnquiryOut, enquiry)}


async def _inbox(db: AsyncSession, user: User) -> list[dict]:
    query = select(Enquiry).order_by(Enquiry.created_at.desc())
    if user.role != UserRole.ADMIN.value:
        query = query.where(Enquiry.agent_id == user.id)
    result = await db.execute(query)
    return dump(EnquiryOut, list(result.scalars()))


@router.get("")
async def list_enquiries(
    user: User = Depends(require_staff), db: AsyncSession = Depends(get_db),
):
    return {"message": "Enquiries fetched", "enquiries": await _inbox(db, user)}


@router.post("/{enquiry_id}/read")
async def mark_read(
    enquiry_id: UUID,
    user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    enquiry = await get_or_404(db, Enquiry, enquiry_id, "Enquiry")
    _check_inbox_owner(enquiry, user)
    enquiry.is_read = True
    await touch(db, TimestampType.ENQUIRY)
    await db.commit()
    await db.refresh(enquiry)
    return {"message": "Enquiry marked as read", "enquiry": dump(EnquiryOut, enquiry)}


@router.delete("/{enquiry_id}")
async def delete_enquiry(
    enquiry_id: UUID,
    user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    enquiry = await get_or_404(db, Enquiry, enquiry_id, "Enquiry")
    _check_inbox_owner(enquiry, user)
    await db.delete(enquiry)
    await touch(db, TimestampType.ENQUIRY)
    await db.commit()
    logger.info("Enquiry deleted", extra={"resource": str(enquiry_id)})
    return {"message": "Enquiry deleted", "enquiries": await _inbox(db, user)}
