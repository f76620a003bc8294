"""Agent Routes — agent directory, ranking and KYC review."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_admin
from app.core.domain_types import KycStatus, TimestampType, UserRole
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.common import dump
from app.schemas.user import KycUpdate, UserOut
from app.services.lookups import get_or_404
from app.services.notifications import notify
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/agents", tags=["agents"])


def _agents_query(exclude: UUID):
    return (
        select(User)
        .where(User.role == UserRole.AGENT.value)
        .where(User.id != exclude)
    )


@router.get("")
async def list_agents(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(_agents_query(user.id).order_by(User.created_at.desc()))
    return {"message": "Agents fetched", "agents": dump(UserOut, list(result.scalars()))}


@router.get("/ranked")
async def ranked_agents(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        _agents_query(user.id).order_by(
            User.total_listings.desc(), User.created_at.desc(),
        )
    )
    return {"message": "Agents fetched", "agents": dump(UserOut, list(result.scalars()))}


@router.put("/{agent_id}/kyc")
async def update_kyc(
    agent_id: UUID,
    body: KycUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    agent = await get_or_404(db, User, agent_id, "Agent")
    agent.kyc_status = body.kyc_status.value
    await touch(db, TimestampType.USER)
    await db.commit()
    logger.info(
        f"KYC set to {body.kyc_status.value}", extra={"user_id": str(agent_id)},
    )
    if body.kyc_status is KycStatus.VERIFIED:
        await notify(
            clients.mail, to=agent.email, subject="Your verification is approved",
            template="kyc_approved.html", firstname=agent.firstname,
        )
    return {"message": "KYC status updated", "agent": dump(UserOut, agent)}
