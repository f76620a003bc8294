"""Contact Routes — the public contact form and its admin inbox."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import client_ip, require_admin
from app.core.domain_types import TimestampType
from app.core.errors import CaptchaVerificationError
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.contact import Contact
from app.models.user import User
from app.schemas.common import dump
from app.schemas.content import ContactCreate, ContactOut
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/contacts", tags=["contacts"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_contact(
    body: ContactCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    ip = client_ip(request)
    if not await clients.captcha.verify(body.captcha_token, ip):
        raise CaptchaVerificationError()
    contact = Contact(
        firstname=body.firstname,
        lastname=body.lastname,
        email=body.email.lower(),
        number=body.number,
        message=body.message,
        country=await clients.geo.country_for(ip),
    )
    db.add(contact)
    await touch(db, TimestampType.CONTACT)
    await db.commit()
    await db.refresh(contact)
    logger.info("Contact message received")
    return {"message": "Message sent successfully", "contact": dump(ContactOut, contact)}


@router.get("")
async def list_contacts(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Contact).order_by(Contact.created_at.desc()))
    return {"message": "Contacts fetched", "contacts": dump(ContactOut, list(result.scalars()))}
