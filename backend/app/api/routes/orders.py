"""Order Routes — checkout, order lookups and status changes."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_optional_user, require_admin
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.order import Order
from app.models.user import User
from app.schemas.common import dump
from app.schemas.storefront import OrderCreate, OrderOut, OrderStatusUpdate
from app.services import orders as order_service
from app.services.lookups import get_or_404

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def place_order(
    body: OrderCreate,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    order = await order_service.place_order(db, clients.paystack, user, body)
    return {"message": "Order placed successfully", "order": dump(OrderOut, order)}


@router.get("/mine")
async def my_orders(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Order).where(Order.user_id == user.id).order_by(Order.created_at.desc())
    )
    return {"message": "Orders fetched", "orders": dump(OrderOut, list(result.scalars()))}


@router.get("")
async def all_orders(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Order).order_by(Order.created_at.desc()))
    return {"message": "Orders fetched", "orders": dump(OrderOut, list(result.scalars()))}


@router.get("/{order_id}")
async def get_order(order_id: UUID, db: AsyncSession = Depends(get_db)):
    order = await get_or_404(db, Order, order_id, "Order")
    return {"message": "Order fetched", "order": dump(OrderOut, order)}


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: UUID,
    body: OrderStatusUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await order_service.update_order_status(db, user, order_id, body.status)
    return {"message": "Order status updated", "order": dump(OrderOut, order)}
