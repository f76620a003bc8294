"""Admin Operations — run the expiry sweeps on demand."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.config import get_settings
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.user import User
from app.services.monitors import sweep_advertisements, sweep_subscriptions

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.post("/monitors/run")
async def run_monitors(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    logger.info("Expiry sweeps triggered manually", extra={"user_id": str(admin.id)})
    subscriptions = await sweep_subscriptions(db, clients.mail, get_settings())
    advertisements = await sweep_advertisements(db)
    return {
        "message": "Monitors completed",
        "subscriptions": subscriptions,
        "advertisements": advertisements,
    }
